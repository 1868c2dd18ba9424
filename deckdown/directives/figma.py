"""
``:::figma`` extraction.

Block format::

    :::figma
    link=https://www.figma.com/file/xxx?node-id=1234-5678
    x=160
    y=300
    hideLink=true
    text.title=Cart Feature
    text.body=
      - Variation A
      - Variation B
    :::

A bare URL line may stand in for ``link=``.  Links must point at figma.com
(or a subdomain); anything else drops the whole block.
"""
import logging
import re
import textwrap
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

from markdown_it.tree import SyntaxTreeNode

from ..colors import parse_leading_float
from ..engine import parse_tree
from ..figma_url import is_figma_url, parse_figma_url
from ..models import FigmaSelectionLink, TextOverride, TextSpan
from ..spans import block_spans, extract_blockquote_content, force_bold
from ..fences import CodeFenceTracker
from .placeholders import (
    DIRECTIVE_CLOSE,
    FIGMA,
    ExtractionResult,
    ScanState,
    placeholder_lines,
)

logger = logging.getLogger(__name__)

_OPEN_RE = re.compile(r"^:::figma\s*$", re.IGNORECASE)

BULLET_MARKERS = ("•", "◦", "▪", "–")


# ---------------------------------------------------------------------------
# Text override rendering
# ---------------------------------------------------------------------------

def _list_lines(node: SyntaxTreeNode, depth: int) -> List[List[TextSpan]]:
    lines = []
    ordered = node.type == "ordered_list"
    number = int(node.attrs.get("start", 1)) if ordered else 0
    for item in node.children:
        marker = f"{number}." if ordered else BULLET_MARKERS[depth % len(BULLET_MARKERS)]
        number += 1
        first = True
        for child in item.children:
            if child.type in ("bullet_list", "ordered_list"):
                lines.extend(_list_lines(child, depth + 1))
                continue
            spans = block_spans(child) if child.type in ("paragraph", "heading") else []
            if not spans:
                continue
            prefix = f"{marker} " if first else "  "
            lines.append([TextSpan(text=prefix)] + spans)
            first = False
    return lines


def render_text_override(markdown: str) -> TextOverride:
    """Flatten override markdown into a single text run with spans.

    Paragraphs become lines, list items get bullet markers by depth, block
    quotes are wrapped in quotes and headings are made bold.
    """
    lines: List[List[TextSpan]] = []
    for node in parse_tree(markdown).children:
        if node.type == "paragraph":
            lines.append(block_spans(node))
        elif node.type == "heading":
            lines.append(force_bold(block_spans(node)))
        elif node.type in ("bullet_list", "ordered_list"):
            lines.extend(_list_lines(node, 0))
        elif node.type == "blockquote":
            _, spans = extract_blockquote_content(node)
            lines.append([TextSpan(text='"')] + spans + [TextSpan(text='"')])
        elif node.type in ("fence", "code_block"):
            lines.append([TextSpan(text=node.content.rstrip("\n"), code=True)])

    spans: List[TextSpan] = []
    for i, line in enumerate(lines):
        if i > 0:
            spans.append(TextSpan(text="\n"))
        spans.extend(line)

    text = "".join(span.text for span in spans)
    return TextOverride(text=text, spans=spans or None)


# ---------------------------------------------------------------------------
# Block body parsing
# ---------------------------------------------------------------------------

def _is_continuation(line: str) -> bool:
    return not line.strip() or line[:1] in (" ", "\t")


def parse_figma_properties(lines: List[str]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Split a block body into plain properties and ``text.*`` overrides."""
    props: Dict[str, str] = {}
    texts: Dict[str, str] = {}
    i = 0
    while i < len(lines):
        stripped = lines[i].strip()
        i += 1
        if not stripped:
            continue

        if stripped.startswith(("http://", "https://")):
            props["link"] = stripped
            continue

        eq = stripped.find("=")
        if eq <= 0:
            logger.debug(f"Ignoring figma block line '{stripped}'")
            continue
        key = stripped[:eq].strip()
        value = stripped[eq + 1:].strip()

        if key.startswith("text."):
            name = key[len("text."):]
            if not name:
                continue
            if not value:
                block = []
                while i < len(lines) and _is_continuation(lines[i]):
                    block.append(lines[i])
                    i += 1
                value = textwrap.dedent("\n".join(block)).strip("\n")
            texts[name] = value
        else:
            props[key] = value
    return props, texts


def _validate_link(link: str) -> bool:
    if is_figma_url(link):
        return True
    try:
        hostname = urlparse(link).hostname
    except ValueError:
        hostname = None
    if hostname:
        logger.warning(f"Rejected non-Figma URL (host '{hostname}'): {link}")
    else:
        logger.warning(f"Invalid URL format: {link}")
    return False


def build_figma_link(lines: List[str]) -> Optional[FigmaSelectionLink]:
    """Parse a block body, or return None when the block must be dropped."""
    props, texts = parse_figma_properties(lines)

    link = props.get("link")
    if not link:
        logger.warning(":::figma block missing 'link' property, skipping")
        return None
    if not _validate_link(link):
        return None

    info = parse_figma_url(link)
    if not info.file_key:
        logger.warning(f"Invalid Figma URL (missing fileKey): {link}")

    result = FigmaSelectionLink(url=link, node_id=info.node_id, file_key=info.file_key)
    if props.get("x"):
        result.x = parse_leading_float(props["x"])
    if props.get("y"):
        result.y = parse_leading_float(props["y"])
    if props.get("hideLink", "").lower() == "true":
        result.hide_link = True
    if texts:
        result.text_overrides = {
            name: render_text_override(value) for name, value in texts.items()
        }
    return result


class FigmaScanner:
    """Line scanner that replaces ``:::figma`` blocks with placeholders."""

    def __init__(self, start_index: int = 0):
        self.index = start_index
        self.state = ScanState.TEXT
        self.output: List[str] = []
        self.blocks: Dict[int, FigmaSelectionLink] = {}
        self._fence = CodeFenceTracker()
        self._opener = ""
        self._body: List[str] = []

    def scan(self, text: str) -> ExtractionResult:
        for line in text.split("\n"):
            if self.state is ScanState.TEXT:
                if not self._fence.feed(line) and _OPEN_RE.match(line):
                    self.state = ScanState.IN_BLOCK
                    self._opener = line
                    self._body = []
                else:
                    self.output.append(line)
            elif line.strip() == DIRECTIVE_CLOSE:
                self._finish()
            else:
                self._body.append(line)

        if self.state is ScanState.IN_BLOCK:
            logger.warning("Unclosed :::figma block left as text")
            self.output.append(self._opener)
            self.output.extend(self._body)

        return ExtractionResult(
            text="\n".join(self.output), blocks=self.blocks, next_index=self.index
        )

    def _finish(self) -> None:
        self.state = ScanState.TEXT
        link = build_figma_link(self._body)
        if link is None:
            self.output.append("")
            return
        self.blocks[self.index] = link
        self.output.extend(placeholder_lines(FIGMA, self.index))
        self.index += 1


def extract_figma_blocks(text: str, start_index: int = 0) -> ExtractionResult:
    """Replace every valid ``:::figma`` block in *text* with a placeholder."""
    return FigmaScanner(start_index).scan(text)
