from __future__ import annotations

import argparse

from pygments.styles import get_all_styles

from .config import DeckOptions, load_config
from .errors import ConversionError
from .pipeline import convert
from .validator import validate_apkg


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="md2apkg")
    sub = p.add_subparsers(dest="command", required=True)

    conv = sub.add_parser("convert", help="Convert a markdown file into an Anki deck")
    conv.add_argument("input", help="Markdown file")
    conv.add_argument("-o", "--out", default=None, help="Output .apkg path (default: <input>.apkg)")
    conv.add_argument("--config", default=None, help="JSON config path")
    conv.add_argument("--deck-name", default=None, help="Deck title (default: first heading)")
    conv.add_argument(
        "--include-empty",
        action="store_true",
        default=None,
        help="Keep cards without a back side",
    )
    conv.add_argument(
        "--ignore-levels",
        type=int,
        nargs="+",
        default=None,
        metavar="LEVEL",
        help="Heading levels to skip (e.g. 1 4)",
    )
    conv.add_argument(
        "--code-style",
        default=None,
        choices=sorted(get_all_styles()),
        help="Pygments style for code blocks",
    )

    validate = sub.add_parser("validate", help="Check an .apkg for broken media references")
    validate.add_argument("--apkg", required=True, help="Path to the .apkg file")

    return p


def cmd_convert(args: argparse.Namespace) -> int:
    try:
        base = load_config(args.config) if args.config else DeckOptions()
        options = base.merged(
            include_empty=args.include_empty,
            ignore_levels=args.ignore_levels,
            deck_name=args.deck_name,
            code_style=args.code_style,
        )
        stats = convert(args.input, args.out, options)
    except (ConversionError, OSError, ValueError) as e:
        print(f"convert_failed: {e}")
        return 1

    print(
        f"cards={stats.cards_exported} images={stats.images} images_skipped={stats.images_skipped} "
        f"tags={stats.tags} deck={stats.deck_name}"
    )
    for w in stats.warnings:
        print(f"warning: {w}")
    print(stats.out_path)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    ok, report = validate_apkg(args.apkg)
    print(f"notes={report['notes']}")
    for w in report["warnings"]:
        print(f"warning: {w}")
    for m in report["errors"]:
        print(m)
    if not ok:
        return 1
    print("OK")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "convert":
        return cmd_convert(args)

    if args.command == "validate":
        return cmd_validate(args)

    raise SystemExit(2)


if __name__ == "__main__":
    raise SystemExit(main())
