"""Custom ``:::kind`` block directives layered on top of markdown."""
from .callout import CalloutPayload, extract_callout_blocks
from .columns import ColumnsPayload, extract_columns_blocks, resolve_column_widths
from .figma import extract_figma_blocks, render_text_override
from .placeholders import (
    CALLOUT,
    COLUMNS,
    FIGMA,
    DirectiveTables,
    ExtractionResult,
    match_placeholder,
)

__all__ = [
    "CALLOUT",
    "COLUMNS",
    "FIGMA",
    "CalloutPayload",
    "ColumnsPayload",
    "DirectiveTables",
    "ExtractionResult",
    "extract_callout_blocks",
    "extract_columns_blocks",
    "extract_figma_blocks",
    "match_placeholder",
    "render_text_override",
    "resolve_column_widths",
]
