"""
deckdown: compile extended Markdown into a typed slide deck representation.
"""
from .markdown_parser import MarkdownParser, parse_markdown
from .models import SlideContent, TextSpan, slides_to_json

__version__ = "0.1.0"

__all__ = [
    "MarkdownParser",
    "SlideContent",
    "TextSpan",
    "parse_markdown",
    "slides_to_json",
]
