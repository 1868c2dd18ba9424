"""
Markdown deck compiler.

Pipeline::

    raw text
      -> :::columns extraction -> :::figma extraction -> callout extraction
      -> global front-matter split -> slide split
      -> per slide: front-matter, markdown-it parse, lowering, cascade
      -> List[SlideContent]
"""
import logging
from pathlib import Path
from typing import List, Optional, Union

from .cascade import merge_config
from .config import ParsedConfig, load_yaml_mapping, parse_slide_config
from .directives import (
    DirectiveTables,
    extract_callout_blocks,
    extract_columns_blocks,
    extract_figma_blocks,
)
from .local_image import DEFAULT_MAX_IMAGE_SIZE
from .models import SlideContent
from .slide_builder import SlideBuilder
from .splitter import (
    extract_slide_frontmatter,
    normalize_newlines,
    split_global_frontmatter,
    split_into_slides,
)

logger = logging.getLogger(__name__)


class MarkdownParser:
    """
    Compiles extended markdown into slide deck IR.
    """

    def __init__(
        self,
        base_dir: Optional[Union[str, Path]] = None,
        max_image_size: int = DEFAULT_MAX_IMAGE_SIZE,
    ):
        """
        Initialize the markdown parser.

        Args:
            base_dir: Base directory for resolving relative image paths. Without
                it, relative local images are emitted without embedded data.
            max_image_size: Largest local image (bytes) that will be embedded
        """
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.max_image_size = max_image_size

    def extract_directives(self, text: str):
        """
        Run the three directive passes over *text*.

        Returns:
            (processed_text, DirectiveTables)
        """
        columns = extract_columns_blocks(text, 0)
        figma = extract_figma_blocks(columns.text, 0)
        callouts = extract_callout_blocks(figma.text, 0)
        tables = DirectiveTables(
            columns=columns.blocks,
            figma=figma.blocks,
            callouts=callouts.blocks,
            next_figma=figma.next_index,
            next_callout=callouts.next_index,
        )
        logger.debug(
            f"Extracted {len(columns.blocks)} columns, {len(figma.blocks)} figma "
            f"and {len(callouts.blocks)} callout block(s)"
        )
        return callouts.text, tables

    def _config(self, mapping) -> Optional[ParsedConfig]:
        if mapping is None:
            return None
        try:
            return parse_slide_config(mapping, self.base_dir, self.max_image_size)
        except Exception as e:
            logger.warning(f"⚠️ Ignoring front-matter that could not be applied: {e}")
            return None

    def parse(self, markdown_text: str) -> List[SlideContent]:
        """
        Parse a markdown deck into slides.

        Args:
            markdown_text: The whole deck as a string

        Returns:
            One SlideContent per non-empty slide, in document order
        """
        if not isinstance(markdown_text, str):
            raise TypeError(f"markdown_text must be str, not {type(markdown_text).__name__}")

        text = normalize_newlines(markdown_text)
        text, tables = self.extract_directives(text)

        yaml_text, body = split_global_frontmatter(text)
        defaults = self._config(load_yaml_mapping(yaml_text)) or ParsedConfig()

        builder = SlideBuilder(tables, self.base_dir, self.max_image_size)
        slides: List[SlideContent] = []

        for number, chunk in enumerate(split_into_slides(body), start=1):
            slide_body, mapping = extract_slide_frontmatter(chunk)
            try:
                blocks, footnotes = builder.build(slide_body)
            except Exception as e:
                logger.warning(f"⚠️ Skipping slide {number}: {e}")
                continue

            if not blocks:
                logger.debug(f"Slide chunk {number} has no content, skipping")
                continue

            resolved = merge_config(defaults, self._config(mapping))
            slides.append(
                SlideContent(
                    blocks=blocks,
                    background=resolved.background,
                    styles=resolved.styles,
                    slide_number=resolved.slide_number,
                    title_prefix=resolved.title_prefix,
                    align=resolved.align,
                    valign=resolved.valign,
                    transition=resolved.transition,
                    footnotes=footnotes or None,
                )
            )

        if slides and defaults.cover is not False:
            slides[0].cover = True

        logger.info(f"Parsed {len(slides)} slide(s)")
        return slides


def parse_markdown(
    markdown_text: str,
    base_path: Optional[Union[str, Path]] = None,
    max_image_size: int = DEFAULT_MAX_IMAGE_SIZE,
) -> List[SlideContent]:
    """Convenience wrapper around :class:`MarkdownParser`."""
    return MarkdownParser(base_dir=base_path, max_image_size=max_image_size).parse(markdown_text)
