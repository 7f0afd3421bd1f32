"""Test local image extraction and src rewriting."""
from __future__ import annotations

import pytest

from md2apkg.images import extract_images, is_remote_source, iter_image_tokens, resolve_image_path
from md2apkg.markup import tokens_from_markdown
from md2apkg.types import Image, filtered_media_name
from token_factory import image, inline


class TestResolvePath:

    def test_joins_with_document_dir(self):
        assert resolve_image_path("img/a.png", "notes") == "notes/img/a.png"

    def test_normalizes_dot_segments(self):
        assert resolve_image_path("./img/../img/a.png", "notes") == "notes/img/a.png"

    def test_percent_encoding_is_decoded(self):
        assert resolve_image_path("my%20pic.png", "docs") == "docs/my pic.png"

    @pytest.mark.parametrize(
        "src,remote",
        [
            ("https://example.com/a.png", True),
            ("ftp://host/a.png", True),
            ("data:image/png;base64,AAAA", True),
            ("img/a.png", False),
            ("/abs/a.png", False),
        ],
    )
    def test_remote_detection(self, src, remote):
        assert is_remote_source(src) is remote


class TestFilteredName:

    def test_is_flat_and_ascii(self):
        name = filtered_media_name("notes/My Images/Größe 1.PNG")
        assert "/" not in name
        assert name.isascii()
        assert name.endswith(".png")

    def test_same_basename_different_folders(self):
        assert filtered_media_name("a/x.png") != filtered_media_name("b/x.png")

    def test_deterministic(self):
        assert Image("a/x.png").filtered_path == Image("a/x.png").filtered_path

    def test_equality_by_file_path(self):
        assert Image("a/x.png") == Image("a/x.png")
        assert len({Image("a/x.png"), Image("a/x.png"), Image("a/y.png")}) == 2

    def test_stem_is_slugged(self):
        name = filtered_media_name("a/My Pic.png")
        assert name.startswith("my_pic_")
        assert name.endswith(".png")


class TestExtractImages:

    def test_rewrites_local_sources(self):
        tok = image("img/a.png")
        images = extract_images([inline("", children=[tok])], "notes")

        assert [i.file_path for i in images] == ["notes/img/a.png"]
        assert tok.attrGet("src") == images[0].filtered_path

    def test_remote_untouched(self):
        tok = image("https://example.com/a.png")
        images = extract_images([inline("", children=[tok])], "notes")

        assert images == []
        assert tok.attrGet("src") == "https://example.com/a.png"

    def test_duplicates_collapse(self):
        t1, t2, t3 = image("img/a.png"), image("./img/a.png"), image("img/sub/../a.png")
        tokens = [inline("", children=[t1]), inline("", children=[t2, t3])]
        images = extract_images(tokens, "notes")

        assert len(images) == 1
        assert t1.attrGet("src") == t2.attrGet("src") == t3.attrGet("src") == images[0].filtered_path

    def test_first_seen_order(self):
        tokens = [inline("", children=[image("b.png"), image("a.png"), image("b.png")])]
        images = extract_images(tokens, "")
        assert [i.file_path for i in images] == ["b.png", "a.png"]

    def test_top_level_image_tokens(self):
        images = extract_images([image("a.png")], "d")
        assert [i.file_path for i in images] == ["d/a.png"]

    def test_missing_src_is_skipped(self):
        bad, good = image(None), image("ok.png")
        issues: list[str] = []
        images = extract_images([inline("", children=[bad, good])], "d", issues=issues)

        assert [i.file_path for i in images] == ["d/ok.png"]
        assert len(issues) == 1
        assert "src" in issues[0]
        assert bad.attrGet("src") is None

    def test_from_markdown(self):
        md = "# Q\n\n![local](pics/one.png) and ![web](http://x.org/two.png)\n\n![again](pics/one.png)\n"
        tokens = tokens_from_markdown(md)
        images = extract_images(tokens, "notes")

        assert [i.file_path for i in images] == ["notes/pics/one.png"]
        srcs = [t.attrGet("src") for t in iter_image_tokens(tokens)]
        assert srcs == [images[0].filtered_path, "http://x.org/two.png", images[0].filtered_path]
