"""Fenced code block tracking for line-oriented scanners."""
import re
from typing import Optional

_FENCE_RE = re.compile(r"^(`{3,}|~{3,})")


class CodeFenceTracker:
    """Tracks whether a line scanner is inside a fenced code block.

    ``feed()`` returns True when the line belongs to a fence (opening line,
    body or closing line), i.e. when markup on it must stay literal.
    """

    def __init__(self):
        self.fence: Optional[str] = None

    def feed(self, line: str) -> bool:
        stripped = line.strip()
        match = _FENCE_RE.match(stripped)
        if self.fence is None:
            if match:
                self.fence = match.group(1)
                return True
            return False
        if match and self._closes(stripped, match.group(1)):
            self.fence = None
        return True

    def _closes(self, stripped: str, marker: str) -> bool:
        return (
            marker[0] == self.fence[0]
            and len(marker) >= len(self.fence)
            and stripped[len(marker):].strip() == ""
        )
