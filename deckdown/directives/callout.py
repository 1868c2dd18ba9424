"""
``:::note`` / ``:::tip`` / ``:::warning`` / ``:::caution`` extraction.

    :::warning
    Be careful with **this** feature.
    :::
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List

from ..engine import parse_tree
from ..models import CALLOUT_TYPES, TextSpan
from ..spans import block_spans
from ..fences import CodeFenceTracker
from .placeholders import (
    CALLOUT,
    DIRECTIVE_CLOSE,
    ExtractionResult,
    ScanState,
    placeholder_lines,
)

logger = logging.getLogger(__name__)

_OPEN_RE = re.compile(rf"^:::({'|'.join(CALLOUT_TYPES)})\s*$", re.IGNORECASE)


@dataclass
class CalloutPayload:
    type: str
    content: str
    spans: List[TextSpan] = field(default_factory=list)


def callout_spans(content: str) -> List[TextSpan]:
    """Inline spans of every paragraph in *content*, separated by a space."""
    if not content.strip():
        return []
    spans: List[TextSpan] = []
    for node in parse_tree(content).children:
        if node.type != "paragraph":
            continue
        paragraph = block_spans(node)
        if spans and paragraph:
            spans.append(TextSpan(text=" "))
        spans.extend(paragraph)
    return spans


class CalloutScanner:
    def __init__(self, start_index: int = 0):
        self.index = start_index
        self.state = ScanState.TEXT
        self.output: List[str] = []
        self.blocks: Dict[int, CalloutPayload] = {}
        self._fence = CodeFenceTracker()
        self._body_fence = CodeFenceTracker()
        self._type = ""
        self._opener = ""
        self._body: List[str] = []

    def scan(self, text: str) -> ExtractionResult:
        for line in text.split("\n"):
            if self.state is ScanState.TEXT:
                self._scan_text(line)
            elif not self._body_fence.feed(line) and line.strip() == DIRECTIVE_CLOSE:
                self._finish()
            else:
                self._body.append(line)

        if self.state is ScanState.IN_BLOCK:
            logger.warning(f"Unclosed :::{self._type} block left as text")
            self.output.append(self._opener)
            self.output.extend(self._body)

        return ExtractionResult(
            text="\n".join(self.output), blocks=self.blocks, next_index=self.index
        )

    def _scan_text(self, line: str) -> None:
        if self._fence.feed(line):
            self.output.append(line)
            return
        match = _OPEN_RE.match(line)
        if not match:
            self.output.append(line)
            return
        self.state = ScanState.IN_BLOCK
        self._type = match.group(1).lower()
        self._opener = line
        self._body = []
        self._body_fence = CodeFenceTracker()

    def _finish(self) -> None:
        self.state = ScanState.TEXT
        content = "\n".join(self._body).strip()
        self.blocks[self.index] = CalloutPayload(
            type=self._type, content=content, spans=callout_spans(content)
        )
        self.output.extend(placeholder_lines(CALLOUT, self.index))
        self.index += 1


def extract_callout_blocks(text: str, start_index: int = 0) -> ExtractionResult:
    """Replace every callout block in *text* with a placeholder."""
    return CalloutScanner(start_index).scan(text)
