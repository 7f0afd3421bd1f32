"""Entry point for running md2apkg as a module.

Usage:
    python -m md2apkg <command> [options]
"""
from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
