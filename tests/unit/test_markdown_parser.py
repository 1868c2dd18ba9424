"""End-to-end tests for MarkdownParser / parse_markdown."""
import json
import tempfile
from pathlib import Path

import pytest
from PIL import Image

from deckdown import MarkdownParser, TextSpan, parse_markdown, slides_to_json
from deckdown.local_image import clear_image_cache
from deckdown.models import (
    BlockquoteBlock,
    BulletsBlock,
    CalloutBlock,
    CodeBlock,
    ColumnsBlock,
    FigmaBlock,
    FootnoteItem,
    HeadingBlock,
    ImageBlock,
    ParagraphBlock,
    TableBlock,
)

OUTER_FIGMA = "https://www.figma.com/file/OUTER/Deck?node-id=1-1"
INNER_FIGMA = "https://www.figma.com/file/INNER/Deck?node-id=2-2"


@pytest.fixture
def temp_base_dir():
    """Create a temporary directory holding a small PNG."""
    clear_image_cache()
    with tempfile.TemporaryDirectory() as temp_dir:
        Image.new("RGB", (8, 8), "blue").save(Path(temp_dir) / "pic.png")
        yield temp_dir
    clear_image_cache()


class TestBasicBlocks:
    def test_heading_and_paragraph(self):
        slides = parse_markdown("## Test\n\nThis is **bold** text.")
        assert len(slides) == 1
        heading, paragraph = slides[0].blocks
        assert heading == HeadingBlock(level=2, text="Test", spans=[TextSpan(text="Test")])
        assert paragraph.spans == [
            TextSpan(text="This is "),
            TextSpan(text="bold", bold=True),
            TextSpan(text=" text."),
        ]
        assert paragraph.text == "This is bold text."

    def test_block_types_in_order(self):
        md = "# H\n\npara\n\n- a\n- b\n\n> q\n\n```\nx\n```"
        kinds = [type(block) for block in parse_markdown(md)[0].blocks]
        assert kinds == [HeadingBlock, ParagraphBlock, BulletsBlock, BlockquoteBlock, CodeBlock]

    def test_deep_headings_are_clamped(self):
        block = parse_markdown("##### Small")[0].blocks[0]
        assert block.level == 4

    def test_fenced_code(self):
        block = parse_markdown("```python\nprint(1)\n```")[0].blocks[0]
        assert block == CodeBlock(code="print(1)", language="python")

    def test_ordered_list_start(self):
        block = parse_markdown("3. a\n4. b")[0].blocks[0]
        assert block.ordered is True
        assert block.start == 3
        assert [item.text for item in block.items] == ["a", "b"]

    def test_table_alignment(self):
        block = parse_markdown("| A | B |\n|:--|--:|\n| 1 | 2 |")[0].blocks[0]
        assert isinstance(block, TableBlock)
        assert block.headers == [[TextSpan(text="A")], [TextSpan(text="B")]]
        assert block.rows == [[[TextSpan(text="1")], [TextSpan(text="2")]]]
        assert block.align == ["left", "right"]

    def test_table_without_alignment_keeps_nulls(self):
        block = parse_markdown("| A | B |\n|---|---|")[0].blocks[0]
        assert block.align == [None, None]
        assert block.rows == []
        assert block.to_dict()["align"] == [None, None]

    def test_code_fence_protects_directives_and_separators(self):
        slides = parse_markdown("```\n:::columns\n---\n```")
        assert len(slides) == 1
        assert slides[0].blocks == [CodeBlock(code=":::columns\n---")]


class TestImages:
    def test_remote_image_with_annotations(self):
        block = parse_markdown("![Logo w:400](https://example.com/logo.png)")[0].blocks[0]
        assert isinstance(block, ImageBlock)
        assert block.alt == "Logo"
        assert block.size.width == 400
        assert block.source == "remote"
        assert block.data_base64 is None

    def test_local_image_is_embedded(self, temp_base_dir):
        block = parse_markdown("![Pic](pic.png)", base_path=temp_base_dir)[0].blocks[0]
        assert block.source == "local"
        assert block.mime_type == "image/png"
        assert block.data_base64

    def test_missing_local_image_keeps_reference(self, temp_base_dir):
        block = parse_markdown("![Gone](gone.png)", base_path=temp_base_dir)[0].blocks[0]
        assert block.source == "local"
        assert block.url == "gone.png"
        assert block.data_base64 is None

    def test_local_image_without_base_dir(self):
        block = MarkdownParser().parse("![Pic](pic.png)")[0].blocks[0]
        assert block.source == "local"
        assert block.data_base64 is None


class TestDirectives:
    def test_columns(self):
        md = "# Slide\n\n:::columns\n:::column\nA\n:::column\nB\n:::"
        blocks = parse_markdown(md)[0].blocks
        assert isinstance(blocks[1], ColumnsBlock)
        assert blocks[1].columns == [
            [ParagraphBlock(text="A", spans=[TextSpan(text="A")])],
            [ParagraphBlock(text="B", spans=[TextSpan(text="B")])],
        ]

    def test_figma_without_link_is_dropped(self):
        slides = parse_markdown("# Title\n\n:::figma\nx=10\n:::\n\nAfter")
        assert [type(b) for b in slides[0].blocks] == [HeadingBlock, ParagraphBlock]
        assert "PLACEHOLDER" not in slides_to_json(slides)

    def test_placeholders_stay_unique_inside_columns(self):
        md = (
            "# Slide\n\n"
            f":::figma\n{OUTER_FIGMA}\n:::\n\n"
            ":::note\nTop\n:::\n\n"
            ":::columns\n"
            ":::column\n"
            f":::figma\nlink={INNER_FIGMA}\n:::\n"
            ":::column\n"
            ":::tip\nInner\n:::\n"
            ":::"
        )
        blocks = parse_markdown(md)[0].blocks
        assert [type(b) for b in blocks] == [HeadingBlock, FigmaBlock, CalloutBlock, ColumnsBlock]
        assert blocks[1].link.node_id == "1:1"
        assert blocks[2].type == "note"

        left, right = blocks[3].columns
        assert left[0].link.node_id == "2:2"
        assert right[0].type == "tip"
        assert right[0].text == "Inner"
        assert "PLACEHOLDER" not in slides_to_json(parse_markdown(md))

    def test_callout_block(self):
        block = parse_markdown(":::warning\nMind the **gap**\n:::")[0].blocks[0]
        assert block == CalloutBlock(
            type="warning",
            text="Mind the **gap**",
            spans=[TextSpan(text="Mind the "), TextSpan(text="gap", bold=True)],
        )


class TestFootnotes:
    def test_definitions_are_collected(self):
        md = "Text[^a] and more[^b]\n\n[^a]: First note\n\n[^b]: Second **note**"
        slide = parse_markdown(md)[0]
        assert slide.blocks[0].text == "Text[a] and more[b]"
        assert len(slide.blocks) == 1
        assert [f.id for f in slide.footnotes] == ["a", "b"]
        assert slide.footnotes[0] == FootnoteItem(
            id="a", content="First note", spans=[TextSpan(text="First note")]
        )
        assert slide.footnotes[1].content == "Second note"

    def test_redefinition_last_wins(self):
        slide = parse_markdown("X[^a]\n\n[^a]: One\n\n[^a]: Two")[0]
        assert [(f.id, f.content) for f in slide.footnotes] == [("a", "Two")]

    def test_no_footnotes(self):
        assert parse_markdown("Plain")[0].footnotes is None


class TestSlidesAndConfig:
    def test_global_and_slide_frontmatter(self):
        md = (
            "---\n"
            'color: "#fff"\n'
            "slideNumber: true\n"
            "---\n"
            "# One\n"
            "---\n"
            "headings:\n"
            "  h1:\n"
            "    size: 64\n"
            '    color: "#ff0000"\n'
            "---\n"
            "# Two"
        )
        one, two = parse_markdown(md)
        assert one.styles.headings.h1.color == "#ffffff"
        assert two.styles.headings.h1.color == "#ff0000"
        assert two.styles.headings.h1.size == 64
        assert one.slide_number.show is True
        assert two.slide_number.show is True
        assert one.cover is True
        assert two.cover is None

    def test_cover_can_be_disabled(self):
        slides = parse_markdown("---\ncover: false\n---\n# A")
        assert slides[0].cover is None

    def test_frontmatter_only_slide_is_skipped(self):
        slides = parse_markdown("# A\n---\n---\nbackground: red\n---\n")
        assert len(slides) == 1

    def test_invalid_global_yaml_is_ignored(self):
        slides = parse_markdown("---\nfoo: [\n---\n# A")
        assert len(slides) == 1
        assert slides[0].blocks[0].text == "A"

    def test_impossible_date_in_frontmatter_is_ignored(self):
        slides = parse_markdown("---\ndate: 2024-13-45\n---\n# Hello\n---\n---\ndate: 2024-02-30\n---\n# World")
        assert [slide.blocks[0].text for slide in slides] == ["Hello", "World"]

    def test_non_finite_slide_numbers_are_ignored(self):
        slides = parse_markdown(
            "---\nslideNumber:\n  startFrom: .inf\n---\n# A\n---\n---\nslideNumber:\n  offset: .nan\n---\n# B"
        )
        assert len(slides) == 2
        assert slides[0].slide_number is None
        assert slides[1].slide_number is None

    def test_slide_background(self):
        slides = parse_markdown("# A\n---\n---\nbackground: '#000:0%,#fff:100%@45'\n---\n# B")
        assert slides[0].background is None
        assert slides[1].background.gradient.angle == 45

    def test_empty_document(self):
        assert parse_markdown("") == []
        assert parse_markdown("\n\n   \n") == []

    def test_non_string_input(self):
        with pytest.raises(TypeError):
            parse_markdown(b"# bytes")


class TestSerialization:
    def test_slide_to_dict(self):
        slide = parse_markdown("## Test\n\nThis is **bold** text.")[0]
        assert slide.to_dict() == {
            "blocks": [
                {"kind": "heading", "level": 2, "text": "Test", "spans": [{"text": "Test"}]},
                {
                    "kind": "paragraph",
                    "text": "This is bold text.",
                    "spans": [
                        {"text": "This is "},
                        {"text": "bold", "bold": True},
                        {"text": " text."},
                    ],
                },
            ],
            "styles": {},
            "cover": True,
        }

    def test_callout_carries_kind_and_type(self):
        block = parse_markdown("# S\n\n:::note\nhi\n:::\n")[0].to_dict()["blocks"][1]
        assert block == {
            "kind": "callout",
            "type": "note",
            "text": "hi",
            "spans": [{"text": "hi"}],
        }

    def test_disabled_title_prefix_serializes_as_null(self):
        slide = parse_markdown("---\ntitlePrefix: false\n---\n# A")[0]
        data = slide.to_dict()
        assert "titlePrefix" in data
        assert data["titlePrefix"] is None

    def test_json_uses_camel_case(self, temp_base_dir):
        md = "---\nslideNumber:\n  startFrom: 2\n---\n![Pic](pic.png)"
        data = json.loads(slides_to_json(parse_markdown(md, base_path=temp_base_dir)))
        assert data[0]["slideNumber"] == {"startFrom": 2}
        image = data[0]["blocks"][0]
        assert image["kind"] == "image"
        assert image["mimeType"] == "image/png"
        assert "dataBase64" in image
