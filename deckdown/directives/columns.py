"""
``:::columns`` extraction and column width arithmetic.

Block format::

    :::columns gap=48 width=1fr/2fr
    :::column
    Left column content
    :::column
    Right column content
    :::

Cells may contain their own ``:::figma`` / ``:::note`` ... blocks; their
closing ``:::`` lines are matched against a nesting depth so they are not
mistaken for the end of the columns block.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import (
    COLUMN_GAP,
    COLUMN_MIN_WIDTH,
    CONTENT_WIDTH,
    MAX_COLUMN_GAP,
    MAX_COLUMNS,
    MIN_COLUMNS,
)
from ..fences import CodeFenceTracker
from .placeholders import (
    COLUMNS,
    DIRECTIVE_CLOSE,
    ExtractionResult,
    ScanState,
    placeholder_lines,
)

logger = logging.getLogger(__name__)

_OPEN_RE = re.compile(r"^:::columns(?:\s+(.*))?$")
_CELL_RE = re.compile(r"^:::column\s*$")
_NESTED_OPEN_RE = re.compile(r"^:::(figma|note|tip|warning|caution)\s*$", re.IGNORECASE)
_ATTR_RE = re.compile(r"(\w+)=(\S+)")
_LEADING_INT_RE = re.compile(r"^\s*([-+]?\d+)")

_FR_RE = re.compile(r"^(\d+(?:\.\d+)?)fr$")
_PERCENT_RE = re.compile(r"^(\d+(?:\.\d+)?)%$")
_PX_RE = re.compile(r"^(\d+)(?:px)?$")


@dataclass
class ColumnsPayload:
    """A parsed columns block, cell contents still raw markdown."""
    contents: List[str] = field(default_factory=list)
    gap: Optional[int] = None
    widths: Optional[List[int]] = None


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def _width_value(part: str, total_fr: float, available: int) -> Optional[int]:
    match = _FR_RE.match(part)
    if match:
        fr = float(match.group(1))
        if fr > 0 and total_fr > 0:
            return _round_half_up(fr / total_fr * available)
        return None

    match = _PERCENT_RE.match(part)
    if match:
        percent = float(match.group(1))
        if 0 < percent <= 100:
            return _round_half_up(percent / 100 * available)
        return None

    match = _PX_RE.match(part)
    if match:
        px = int(match.group(1))
        return px if px > 0 else None

    return None


def resolve_column_widths(spec: str, count: int, gap: int = COLUMN_GAP) -> Optional[List[int]]:
    """
    Resolve a ``width=`` attribute into pixel widths.

    Args:
        spec: ``/``-separated entries, each ``<n>fr``, ``<n>%`` or ``<n>[px]``
        count: Number of columns in the block
        gap: Gap between columns in px

    Returns:
        One width per column, or None (even split) if the entry count does not
        match, any entry is invalid, or any width falls below the minimum.
    """
    if not spec:
        return None

    parts = [p.strip() for p in spec.split("/")]
    if len(parts) != count:
        logger.warning(
            f"Width count ({len(parts)}) doesn't match column count ({count}), using even split"
        )
        return None

    available = CONTENT_WIDTH - gap * (count - 1)
    total_fr = sum(float(m.group(1)) for m in map(_FR_RE.match, parts) if m)

    widths = []
    for part in parts:
        width = _width_value(part, total_fr, available)
        if width is None:
            logger.warning(f"Invalid column width '{part}', using even split")
            return None
        widths.append(width)

    for width in widths:
        if width < COLUMN_MIN_WIDTH:
            logger.warning(
                f"Column width {width}px is below minimum ({COLUMN_MIN_WIDTH}px), using even split"
            )
            return None

    return widths


def parse_columns_attributes(attrs: str, count: int):
    """Return ``(gap, widths)`` from the text after ``:::columns``."""
    gap = None
    width_spec = None
    for key, value in _ATTR_RE.findall(attrs or ""):
        if key == "gap":
            match = _LEADING_INT_RE.match(value)
            if match and int(match.group(1)) >= 0:
                gap = min(int(match.group(1)), MAX_COLUMN_GAP)
            else:
                logger.warning(f"Ignoring invalid column gap '{value}'")
        elif key == "width":
            width_spec = value
        else:
            logger.debug(f"Ignoring unknown columns attribute '{key}'")

    widths = None
    if width_spec is not None:
        widths = resolve_column_widths(
            width_spec, count, gap if gap is not None else COLUMN_GAP
        )
    return gap, widths


class ColumnsScanner:
    """Line scanner that pulls ``:::columns`` blocks out of a document."""

    def __init__(self, start_index: int = 0):
        self.index = start_index
        self.state = ScanState.TEXT
        self.output: List[str] = []
        self.blocks = {}
        self._fence = CodeFenceTracker()
        self._reset_block()

    def _reset_block(self, attrs: str = ""):
        self._attrs = attrs
        self._raw: List[str] = []
        self._cells: List[List[str]] = []
        self._depth = 0
        self._block_fence = CodeFenceTracker()

    def scan(self, text: str) -> ExtractionResult:
        for line in text.split("\n"):
            if self.state is ScanState.TEXT:
                self._scan_text(line)
            else:
                self._scan_block(line)

        if self.state is ScanState.IN_BLOCK:
            logger.warning("Unclosed :::columns block, treating the rest of the slide deck as its content")
            self._finish_block()

        return ExtractionResult(
            text="\n".join(self.output), blocks=self.blocks, next_index=self.index
        )

    def _scan_text(self, line: str) -> None:
        if self._fence.feed(line):
            self.output.append(line)
            return
        match = _OPEN_RE.match(line)
        if match:
            self._reset_block(match.group(1) or "")
            self.state = ScanState.IN_BLOCK
            return
        self.output.append(line)

    def _scan_block(self, line: str) -> None:
        stripped = line.strip()
        in_fence = self._block_fence.feed(line)

        if not in_fence and self._depth == 0 and _CELL_RE.match(stripped):
            self._raw.append(line)
            self._cells.append([])
            return

        if not in_fence and _NESTED_OPEN_RE.match(stripped):
            self._depth += 1
        elif not in_fence and stripped == DIRECTIVE_CLOSE:
            if self._depth == 0:
                self._finish_block()
                return
            self._depth -= 1

        self._raw.append(line)
        if self._cells:
            self._cells[-1].append(line)

    def _finish_block(self) -> None:
        self.state = ScanState.TEXT
        contents = ["\n".join(cell).strip() for cell in self._cells]

        if not MIN_COLUMNS <= len(contents) <= MAX_COLUMNS:
            logger.warning(
                f":::columns block has {len(contents)} columns, expected "
                f"{MIN_COLUMNS}-{MAX_COLUMNS}. Rendering as linear content."
            )
            self.output.extend(self._raw)
            return

        gap, widths = parse_columns_attributes(self._attrs.strip(), len(contents))
        self.blocks[self.index] = ColumnsPayload(contents=contents, gap=gap, widths=widths)
        self.output.extend(placeholder_lines(COLUMNS, self.index))
        self.index += 1


def extract_columns_blocks(text: str, start_index: int = 0) -> ExtractionResult:
    """Replace every ``:::columns`` block in *text* with a placeholder."""
    return ColumnsScanner(start_index).scan(text)
