"""
Slide segmentation and front-matter extraction.

``---`` plays two roles in a deck: it separates slides and it fences YAML
front-matter.  :func:`split_into_slides` decides which role each bare ``---``
line plays:

1. it closes a front-matter block that is currently open;
2. it opens per-slide front-matter when the slide has no content yet;
3. it closes *implicit* front-matter (``key: value`` lines with no opening
   fence) when everything collected so far looks like YAML;
4. otherwise it separates two slides.

``---`` inside fenced code is never special.
"""
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from .config import load_yaml_mapping
from .fences import CodeFenceTracker

logger = logging.getLogger(__name__)

SEPARATOR = "---"

_GLOBAL_FRONTMATTER_RE = re.compile(r"\A---\n(.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)
_KEY_LINE_RE = re.compile(r"^[a-zA-Z][\w-]*:(?:\s.*)?$")
_YAML_START_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*:\s*")
_CLOSING_FENCE_RE = re.compile(r"\n---[ \t]*(?:\n|\Z)")


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_global_frontmatter(text: str) -> Tuple[Optional[str], str]:
    """Return ``(yaml_text, rest)`` for a deck that starts with a ``---`` fence."""
    match = _GLOBAL_FRONTMATTER_RE.match(text)
    if not match:
        return None, text
    return match.group(1), text[match.end():]


def _has_meaningful_content(lines: List[str]) -> bool:
    return any(line.strip() for line in lines)


def looks_like_inline_frontmatter(lines: List[str]) -> bool:
    """True when the non-blank lines are ``key: value`` pairs (plus indented continuations)."""
    saw_key = False
    for line in lines:
        if not line.strip():
            continue
        if _KEY_LINE_RE.match(line):
            saw_key = True
            continue
        if saw_key and line[:1] in (" ", "\t"):
            continue
        return False
    return saw_key


def split_into_slides(text: str) -> List[str]:
    """Split a deck body into slide chunks (each may begin with front-matter)."""
    slides: List[str] = []
    current: List[str] = []
    in_frontmatter = False
    fence = CodeFenceTracker()

    def flush():
        chunk = "\n".join(current).strip()
        if chunk:
            slides.append(chunk)
        current.clear()

    for line in normalize_newlines(text).split("\n"):
        if fence.feed(line):
            current.append(line)
            continue

        if line.strip() != SEPARATOR:
            current.append(line)
            continue

        if in_frontmatter:
            current.append(line)
            in_frontmatter = False
        elif not _has_meaningful_content(current):
            current.append(line)
            in_frontmatter = True
        elif looks_like_inline_frontmatter(current):
            current.append(line)
        else:
            flush()

    flush()
    logger.debug(f"Split deck into {len(slides)} slide chunk(s)")
    return slides


def extract_slide_frontmatter(chunk: str) -> Tuple[str, Optional[Dict[str, Any]]]:
    """
    Separate per-slide front-matter from the slide body.

    Args:
        chunk: One slide as returned by :func:`split_into_slides`

    Returns:
        (body, mapping).  ``mapping`` is None when the slide has no usable
        front-matter.  A fenced block with invalid YAML is still removed from
        the body; its settings are simply ignored.
    """
    text = chunk.lstrip()

    if text.startswith(SEPARATOR + "\n"):
        match = _CLOSING_FENCE_RE.search(text, len(SEPARATOR))
        if match:
            yaml_text = text[len(SEPARATOR) + 1:match.start()]
            return text[match.end():], load_yaml_mapping(yaml_text)

    match = _CLOSING_FENCE_RE.search(text)
    if match and _YAML_START_RE.match(text):
        mapping = load_yaml_mapping(text[:match.start()])
        if mapping is not None:
            return text[match.end():].lstrip(), mapping

    return chunk, None
