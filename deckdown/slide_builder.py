"""
AST-to-block lowering.

Walks the top-level markdown-it nodes of one slide body and turns each into a
typed block.  Directive placeholders left behind by the extractors are
resolved back to their payloads here, and ``columns`` cells are lowered
recursively with the same builder.
"""
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from markdown_it.tree import SyntaxTreeNode

from .directives import (
    CALLOUT,
    COLUMNS,
    FIGMA,
    DirectiveTables,
    extract_callout_blocks,
    extract_figma_blocks,
    match_placeholder,
)
from .engine import parse_tree
from .image_alt import parse_image_alt
from .local_image import DEFAULT_MAX_IMAGE_SIZE, read_local_image
from .models import (
    BlockItem,
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
    SlideBlock,
    TableBlock,
    TextSpan,
)
from .paths import is_explicit_local_path, is_remote_url
from .spans import (
    block_spans,
    extract_blockquote_content,
    extract_list_items,
    extract_table_row,
    inline_children,
    spans_to_text,
)

logger = logging.getLogger(__name__)

MAX_HEADING_LEVEL = 4

_ALIGN_PREFIX = "text-align:"


class SlideBuilder:
    """
    Lowers slide markdown into blocks.

    One builder is shared by all slides of a document so that column cells can
    register their nested figma/callout payloads in the document's tables.
    """

    def __init__(
        self,
        tables: DirectiveTables,
        base_dir: Optional[Union[str, Path]] = None,
        max_image_size: int = DEFAULT_MAX_IMAGE_SIZE,
    ):
        """
        Initialize the builder.

        Args:
            tables: Directive payloads extracted from the whole document
            base_dir: Directory for resolving relative local images (optional)
            max_image_size: Size ceiling in bytes for embedded local images
        """
        self.tables = tables
        self.base_dir = base_dir
        self.max_image_size = max_image_size

    def build(self, body: str) -> Tuple[List[SlideBlock], List[FootnoteItem]]:
        """Lower *body* into ``(blocks, footnotes)``."""
        footnotes: Dict[str, FootnoteItem] = {}
        blocks = self._lower(body, footnotes, allow_columns=True)
        return blocks, list(footnotes.values())

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _lower(
        self, body: str, footnotes: Dict[str, FootnoteItem], allow_columns: bool
    ) -> List[SlideBlock]:
        blocks: List[SlideBlock] = []
        for node in parse_tree(body).children:
            kind = node.type
            if kind == "heading":
                blocks.append(self._heading(node))
            elif kind == "paragraph":
                block = self._paragraph(node, footnotes, allow_columns)
                if block is not None:
                    blocks.append(block)
            elif kind in ("bullet_list", "ordered_list"):
                blocks.append(self._list(node))
            elif kind in ("fence", "code_block"):
                blocks.append(self._code(node))
            elif kind == "blockquote":
                text, spans = extract_blockquote_content(node)
                blocks.append(BlockquoteBlock(text=text, spans=spans))
            elif kind == "table":
                blocks.append(self._table(node))
            elif kind == "footnote_reference":
                self._footnote(node, footnotes)
            else:
                # hr, front_matter and raw html carry no slide content
                logger.debug(f"Skipping {kind} node")
        return blocks

    # ------------------------------------------------------------------
    # Node handlers
    # ------------------------------------------------------------------

    def _heading(self, node: SyntaxTreeNode) -> HeadingBlock:
        level = min(int(node.tag[1:]), MAX_HEADING_LEVEL)
        spans = block_spans(node)
        return HeadingBlock(level=level, text=spans_to_text(spans), spans=spans)

    def _paragraph(
        self, node: SyntaxTreeNode, footnotes: Dict[str, FootnoteItem], allow_columns: bool
    ) -> Optional[SlideBlock]:
        children = inline_children(node)
        if len(children) == 1 and children[0].type == "image":
            return self._image(children[0])

        spans = block_spans(node)
        text = spans_to_text(spans).strip()

        index = match_placeholder(FIGMA, text)
        if index is not None:
            link = self.tables.figma.get(index)
            return FigmaBlock(link=link) if link is not None else None

        index = match_placeholder(COLUMNS, text)
        if index is not None:
            payload = self.tables.columns.get(index)
            if not allow_columns:
                logger.warning("Nested :::columns blocks are not supported, skipping")
                return None
            return self._columns(payload, footnotes) if payload is not None else None

        index = match_placeholder(CALLOUT, text)
        if index is not None:
            payload = self.tables.callouts.get(index)
            if payload is None:
                return None
            return CalloutBlock(type=payload.type, text=payload.content, spans=payload.spans)

        return ParagraphBlock(text=spans_to_text(spans), spans=spans)

    def _image(self, node: SyntaxTreeNode) -> ImageBlock:
        url = node.attrs.get("src", "")
        annotated = parse_image_alt(node.content)
        block = ImageBlock(
            url=url,
            alt=annotated.alt,
            size=annotated.size,
            position=annotated.position,
        )

        if is_remote_url(url):
            block.source = "remote"
            return block

        block.source = "local"
        if self.base_dir is None and not is_explicit_local_path(url):
            logger.debug(f"No base directory, not embedding local image {url}")
            return block

        result = read_local_image(url, self.base_dir, self.max_image_size)
        if result is not None:
            block.data_base64 = result.data_base64
            block.mime_type = result.mime_type
        return block

    def _list(self, node: SyntaxTreeNode) -> BulletsBlock:
        ordered = node.type == "ordered_list"
        start = 1
        if ordered:
            try:
                start = int(node.attrs.get("start", 1))
            except (TypeError, ValueError):
                start = 1
        return BulletsBlock(items=extract_list_items(node), ordered=ordered, start=start)

    def _code(self, node: SyntaxTreeNode) -> CodeBlock:
        code = node.content
        if code.endswith("\n"):
            code = code[:-1]
        language = None
        if node.type == "fence" and node.info.strip():
            language = node.info.strip().split()[0]
        return CodeBlock(code=code, language=language)

    def _table(self, node: SyntaxTreeNode) -> TableBlock:
        headers: List[List[TextSpan]] = []
        rows: List[List[List[TextSpan]]] = []
        align: List[Optional[str]] = []
        for section in node.children:
            for row in section.children:
                if section.type == "thead":
                    headers = extract_table_row(row)
                    align = [_cell_align(cell) for cell in row.children]
                else:
                    rows.append(extract_table_row(row))
        return TableBlock(headers=headers, rows=rows, align=align)

    def _footnote(self, node: SyntaxTreeNode, footnotes: Dict[str, FootnoteItem]) -> None:
        label = str((node.meta or {}).get("label", ""))
        parts: List[List[TextSpan]] = [
            block_spans(child) for child in node.children if child.type == "paragraph"
        ]
        spans: List[TextSpan] = []
        for i, part in enumerate(parts):
            if i > 0:
                spans.append(TextSpan(text="\n"))
            spans.extend(part)
        # Redefinitions replace the earlier entry (last write wins)
        footnotes[label] = FootnoteItem(
            id=label, content=spans_to_text(spans), spans=spans or None
        )

    def _columns(self, payload, footnotes: Dict[str, FootnoteItem]) -> ColumnsBlock:
        columns: List[List[BlockItem]] = []
        for content in payload.contents:
            figma = extract_figma_blocks(content, self.tables.next_figma)
            self.tables.figma.update(figma.blocks)
            self.tables.next_figma = figma.next_index

            callouts = extract_callout_blocks(figma.text, self.tables.next_callout)
            self.tables.callouts.update(callouts.blocks)
            self.tables.next_callout = callouts.next_index

            cell = self._lower(callouts.text, footnotes, allow_columns=False)
            columns.append([block for block in cell if not isinstance(block, ColumnsBlock)])
        return ColumnsBlock(columns=columns, gap=payload.gap, widths=payload.widths)


def _cell_align(cell: SyntaxTreeNode) -> Optional[str]:
    style = cell.attrs.get("style") or ""
    if style.startswith(_ALIGN_PREFIX):
        return style[len(_ALIGN_PREFIX):].strip()
    return None
