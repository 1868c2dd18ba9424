"""
Shared markdown-it configuration.

All markdown handled by deckdown (slide bodies, column cells, callout bodies
and figma text overrides) goes through the same parser setup so inline
formatting behaves identically everywhere.
"""
from functools import lru_cache

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.front_matter import front_matter_plugin


@lru_cache(maxsize=None)
def get_markdown() -> MarkdownIt:
    """Return the process-wide markdown-it instance (CommonMark + GFM bits)."""
    md = MarkdownIt("commonmark", {"html": False})
    # Tables and ~~strike~~ are part of the GFM flavour authors expect
    md.enable(["table", "strikethrough"])
    md.use(front_matter_plugin)
    # Keep footnote definitions where they are written so each slide owns its own
    md.use(footnote_plugin, move_to_end=False)
    return md


def parse_tree(text: str) -> SyntaxTreeNode:
    """Parse *text* and return the root of its syntax tree."""
    md = get_markdown()
    return SyntaxTreeNode(md.parse(text, {}))
