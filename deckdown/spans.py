"""
Inline rich-text extraction.

Walks markdown-it syntax tree nodes and flattens nested inline formatting into
an ordered run of :class:`~deckdown.models.TextSpan`.  Marks accumulate while
descending (``***x***`` is both bold and italic), so the run never nests.
"""
from typing import Dict, List, Optional, Sequence, Tuple

from markdown_it.tree import SyntaxTreeNode

from .models import BulletItem, TextSpan

# Inline container node -> mark it adds
_CONTAINER_MARKS = {
    "strong": ("bold", True),
    "em": ("italic", True),
    "s": ("strike", True),
}

_LIST_TYPES = ("bullet_list", "ordered_list")


def _make_span(text: str, marks: Dict) -> TextSpan:
    return TextSpan(text=text, **marks)


def _same_marks(a: TextSpan, b: TextSpan) -> bool:
    return (
        a.bold == b.bold
        and a.italic == b.italic
        and a.strike == b.strike
        and a.code == b.code
        and a.href == b.href
        and a.superscript == b.superscript
    )


def _merge_adjacent(spans: List[TextSpan]) -> List[TextSpan]:
    # markdown-it may split one run of text into several tokens around
    # punctuation it tried to parse; fold those back together.
    merged: List[TextSpan] = []
    for span in spans:
        if not span.text:
            continue
        if (
            merged
            and _same_marks(merged[-1], span)
            and not span.code
            and not span.superscript
        ):
            merged[-1] = TextSpan(
                text=merged[-1].text + span.text,
                bold=span.bold,
                italic=span.italic,
                strike=span.strike,
                code=span.code,
                href=span.href,
                superscript=span.superscript,
            )
        else:
            merged.append(span)
    return merged


def _footnote_label(node: SyntaxTreeNode) -> str:
    meta = node.meta or {}
    label = meta.get("label")
    if label:
        return str(label)
    return str(meta.get("id", 0) + 1)


def _collect(nodes: Sequence[SyntaxTreeNode], marks: Dict, out: List[TextSpan]) -> None:
    for node in nodes:
        kind = node.type

        if kind in _CONTAINER_MARKS:
            name, value = _CONTAINER_MARKS[kind]
            _collect(node.children, {**marks, name: value}, out)
        elif kind == "link":
            _collect(node.children, {**marks, "href": node.attrs.get("href")}, out)
        elif kind == "text":
            out.append(_make_span(node.content, marks))
        elif kind == "code_inline":
            out.append(_make_span(node.content, {**marks, "code": True}))
        elif kind in ("softbreak", "hardbreak"):
            out.append(_make_span("\n", marks))
        elif kind == "footnote_ref":
            out.append(
                _make_span(f"[{_footnote_label(node)}]", {**marks, "superscript": True})
            )
        elif kind == "image":
            alt = extract_text(node.children) if node.children else node.content
            if alt:
                out.append(_make_span(alt, marks))
        elif node.children:
            _collect(node.children, marks, out)
        elif node.content:
            out.append(_make_span(node.content, marks))


def extract_spans(
    nodes: Sequence[SyntaxTreeNode], marks: Optional[Dict] = None
) -> List[TextSpan]:
    """Flatten inline *nodes* into spans, starting from the *marks* already in effect."""
    out: List[TextSpan] = []
    _collect(nodes, dict(marks or {}), out)
    return _merge_adjacent(out)


def spans_to_text(spans: Sequence[TextSpan]) -> str:
    return "".join(span.text for span in spans)


def extract_text(nodes: Sequence[SyntaxTreeNode]) -> str:
    return spans_to_text(extract_spans(nodes))


def inline_children(node: SyntaxTreeNode) -> List[SyntaxTreeNode]:
    """Inline nodes of a paragraph/heading/table cell (empty when there are none)."""
    for child in node.children:
        if child.type == "inline":
            return list(child.children)
    return []


def block_spans(node: SyntaxTreeNode) -> List[TextSpan]:
    return extract_spans(inline_children(node))


def force_bold(spans: Sequence[TextSpan]) -> List[TextSpan]:
    """Copy of *spans* with ``bold`` set on every span (used for heading text)."""
    return [
        TextSpan(
            text=s.text,
            bold=True,
            italic=s.italic,
            strike=s.strike,
            code=s.code,
            href=s.href,
            superscript=s.superscript,
        )
        for s in spans
    ]


def _join_with_newlines(parts: List[List[TextSpan]]) -> List[TextSpan]:
    joined: List[TextSpan] = []
    for i, part in enumerate(parts):
        if i > 0:
            joined.append(TextSpan(text="\n"))
        joined.extend(part)
    return joined


def _list_start(node: SyntaxTreeNode) -> int:
    try:
        return int(node.attrs.get("start", 1))
    except (TypeError, ValueError):
        return 1


def _block_child_spans(child: SyntaxTreeNode) -> Optional[List[TextSpan]]:
    if child.type in ("paragraph", "heading"):
        return block_spans(child)
    if child.type in ("fence", "code_block"):
        return [TextSpan(text=child.content.rstrip("\n"), code=True)]
    if child.type == "blockquote":
        _, spans = extract_blockquote_content(child)
        return spans
    return None


def extract_list_items(list_node: SyntaxTreeNode) -> List[BulletItem]:
    """
    Convert a bullet_list/ordered_list node into BulletItem trees.

    Args:
        list_node: markdown-it list node

    Returns:
        One BulletItem per list item; nested lists become ``children`` and
        multi-paragraph items are joined with a newline span.
    """
    items: List[BulletItem] = []
    for item_node in list_node.children:
        if item_node.type != "list_item":
            continue

        parts: List[List[TextSpan]] = []
        item = BulletItem(text="")
        for child in item_node.children:
            if child.type in _LIST_TYPES:
                nested = extract_list_items(child)
                item.children = (item.children or []) + nested
                item.children_ordered = child.type == "ordered_list"
                if item.children_ordered:
                    item.children_start = _list_start(child)
                continue
            spans = _block_child_spans(child)
            if spans:
                parts.append(spans)

        item.spans = _join_with_newlines(parts)
        item.text = spans_to_text(item.spans)
        items.append(item)
    return items


def extract_table_row(row_node: SyntaxTreeNode) -> List[List[TextSpan]]:
    return [block_spans(cell) for cell in row_node.children]


def extract_blockquote_content(node: SyntaxTreeNode) -> Tuple[str, List[TextSpan]]:
    """Text and spans of a blockquote; its paragraphs are joined by newline spans."""
    parts: List[List[TextSpan]] = []
    for child in node.children:
        if child.type in _LIST_TYPES:
            lines = [
                TextSpan(text=f"- {item.text}") for item in extract_list_items(child)
            ]
            parts.extend([line] for line in lines)
            continue
        spans = _block_child_spans(child)
        if spans:
            parts.append(spans)
    spans = _join_with_newlines(parts)
    return spans_to_text(spans), spans
