import pytest

from deckdown.splitter import (
    extract_slide_frontmatter,
    looks_like_inline_frontmatter,
    normalize_newlines,
    split_global_frontmatter,
    split_into_slides,
)


def test_simple_separator():
    assert split_into_slides("# A\n---\n# B") == ["# A", "# B"]


def test_separator_inside_code_fence_is_ignored():
    md = "# A\n```\n---\n```\n# still A"
    assert split_into_slides(md) == [md]


def test_blank_chunks_are_dropped():
    assert split_into_slides("# A\n---\n\n") == ["# A"]


def test_empty_fenced_frontmatter_stays_with_slide():
    assert split_into_slides("# A\n\n---\n\n---\n\n# B") == ["# A", "---\n\n---\n\n# B"]


def test_fenced_slide_frontmatter_stays_with_slide():
    md = "# A\n\n---\n---\nbackground: red\n---\n# B"
    assert split_into_slides(md) == ["# A", "---\nbackground: red\n---\n# B"]


def test_implicit_slide_frontmatter_stays_with_slide():
    md = "# A\n---\nbackground: red\nalign: center\n---\n# B"
    assert split_into_slides(md) == ["# A", "background: red\nalign: center\n---\n# B"]


def test_crlf_input():
    assert split_into_slides("# A\r\n---\r\n# B") == ["# A", "# B"]
    assert normalize_newlines("a\r\nb\rc") == "a\nb\nc"


@pytest.mark.parametrize(
    "lines, expected",
    [
        (["title: x"], True),
        (["background:", "  color: red"], True),
        (["title: x", "", "align: left"], True),
        (["Hello world"], False),
        (["# Heading", "title: x"], False),
        (["", ""], False),
    ],
)
def test_looks_like_inline_frontmatter(lines, expected):
    assert looks_like_inline_frontmatter(lines) is expected


class TestGlobalFrontmatter:
    def test_split(self):
        yaml_text, rest = split_global_frontmatter("---\ncolor: '#fff'\n---\n# A")
        assert yaml_text == "color: '#fff'"
        assert rest == "# A"

    def test_absent(self):
        assert split_global_frontmatter("# A\n---\n# B") == (None, "# A\n---\n# B")


class TestSlideFrontmatter:
    def test_fenced(self):
        body, mapping = extract_slide_frontmatter("---\nbackground: red\n---\n# B")
        assert body == "# B"
        assert mapping == {"background": "red"}

    def test_implicit(self):
        body, mapping = extract_slide_frontmatter("background: red\n---\n# B")
        assert body == "# B"
        assert mapping == {"background": "red"}

    def test_invalid_yaml_in_fence_is_still_removed(self):
        body, mapping = extract_slide_frontmatter("---\nfoo: [unclosed\n---\n# B")
        assert body == "# B"
        assert mapping is None

    def test_invalid_implicit_block_is_content(self):
        chunk = "key: [unclosed\n---\n# B"
        body, mapping = extract_slide_frontmatter(chunk)
        assert mapping is None
        assert body == chunk

    def test_no_frontmatter(self):
        assert extract_slide_frontmatter("# Plain slide") == ("# Plain slide", None)
