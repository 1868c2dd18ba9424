"""
Placeholder tokens and shared scanning state for directive extraction.

Each extractor swaps a ``:::kind ... :::`` block for a standalone paragraph
such as ``DECKDOWN_FIGMA_BLOCK_3_PLACEHOLDER`` and records the parsed payload
under index 3.  Indices are threaded explicitly through ``start_index`` so
extraction of column cells can continue numbering where the outer document
left off.
"""
import enum
import re
from dataclasses import dataclass, field
from typing import Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

PLACEHOLDER_PREFIX = "DECKDOWN"

COLUMNS = "COLUMNS"
FIGMA = "FIGMA"
CALLOUT = "CALLOUT"

_PLACEHOLDER_RE = re.compile(
    rf"^{PLACEHOLDER_PREFIX}_(COLUMNS|FIGMA|CALLOUT)_BLOCK_(\d+)_PLACEHOLDER$"
)

DIRECTIVE_CLOSE = ":::"


class ScanState(enum.Enum):
    TEXT = "text"
    IN_BLOCK = "in_block"


def make_placeholder(kind: str, index: int) -> str:
    return f"{PLACEHOLDER_PREFIX}_{kind}_BLOCK_{index}_PLACEHOLDER"


def placeholder_lines(kind: str, index: int) -> List[str]:
    """Lines that replace an extracted block; blank padding keeps it a lone paragraph."""
    return ["", make_placeholder(kind, index), ""]


def match_placeholder(kind: str, text: str) -> Optional[int]:
    """Return the index encoded in *text* if it is a *kind* placeholder."""
    match = _PLACEHOLDER_RE.match(text.strip())
    if match and match.group(1) == kind:
        return int(match.group(2))
    return None


@dataclass
class ExtractionResult(Generic[T]):
    """Output of one extraction pass."""
    text: str
    blocks: Dict[int, T] = field(default_factory=dict)
    next_index: int = 0


@dataclass
class DirectiveTables:
    """Payload side tables for one document, keyed by placeholder index."""
    columns: Dict = field(default_factory=dict)
    figma: Dict = field(default_factory=dict)
    callouts: Dict = field(default_factory=dict)
    next_figma: int = 0
    next_callout: int = 0
