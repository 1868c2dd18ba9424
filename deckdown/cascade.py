"""
Document-to-slide settings cascade.

Every merge is per leaf field: the slide value wins when it is set, otherwise
the document default applies.  Merges always build new objects; neither input
is modified.
"""
from dataclasses import fields
from typing import Optional, TypeVar, Union

from .config import ParsedConfig
from .models import (
    FontConfig,
    FontVariant,
    HeadingStyles,
    SlideBackground,
    SlideNumberConfig,
    SlideStyles,
    SlideTransitionConfig,
    TextStyle,
    TitlePrefixSetting,
    TransitionTiming,
)

T = TypeVar("T")


def _merge_leaves(default: Optional[T], slide: Optional[T]) -> Optional[T]:
    if default is None:
        return slide
    if slide is None:
        return default
    values = {}
    for f in fields(slide):
        value = getattr(slide, f.name)
        values[f.name] = value if value is not None else getattr(default, f.name)
    return type(slide)(**values)


def merge_text_style(default: Optional[TextStyle], slide: Optional[TextStyle]) -> Optional[TextStyle]:
    return _merge_leaves(default, slide)


def merge_font_variant(default: Optional[FontVariant], slide: Optional[FontVariant]) -> Optional[FontVariant]:
    return _merge_leaves(default, slide)


def merge_slide_number(
    default: Optional[SlideNumberConfig], slide: Optional[SlideNumberConfig]
) -> Optional[SlideNumberConfig]:
    return _merge_leaves(default, slide)


def merge_fonts(default: Optional[FontConfig], slide: Optional[FontConfig]) -> Optional[FontConfig]:
    if default is None or slide is None:
        return slide if default is None else default
    return FontConfig(
        **{
            f.name: merge_font_variant(getattr(default, f.name), getattr(slide, f.name))
            for f in fields(FontConfig)
        }
    )


def _merge_headings(
    default: Optional[HeadingStyles], slide: Optional[HeadingStyles]
) -> Optional[HeadingStyles]:
    if default is None or slide is None:
        return slide if default is None else default
    return HeadingStyles(
        **{
            f.name: merge_text_style(getattr(default, f.name), getattr(slide, f.name))
            for f in fields(HeadingStyles)
        }
    )


def merge_styles(default: Optional[SlideStyles], slide: Optional[SlideStyles]) -> SlideStyles:
    default = default or SlideStyles()
    slide = slide or SlideStyles()
    return SlideStyles(
        headings=_merge_headings(default.headings, slide.headings),
        paragraphs=merge_text_style(default.paragraphs, slide.paragraphs),
        bullets=merge_text_style(default.bullets, slide.bullets),
        code=merge_text_style(default.code, slide.code),
        fonts=merge_fonts(default.fonts, slide.fonts),
    )


def _as_timing(timing: Union[TransitionTiming, str, None]) -> Optional[TransitionTiming]:
    if isinstance(timing, str):
        return TransitionTiming(type=timing)
    return timing


def merge_transition(
    default: Optional[SlideTransitionConfig], slide: Optional[SlideTransitionConfig]
) -> Optional[SlideTransitionConfig]:
    if default is None or slide is None:
        return slide if default is None else default

    result = SlideTransitionConfig(
        style=slide.style if slide.style is not None else default.style,
        duration=slide.duration if slide.duration is not None else default.duration,
        curve=slide.curve if slide.curve is not None else default.curve,
    )
    default_timing = _as_timing(default.timing)
    slide_timing = _as_timing(slide.timing)
    if default_timing is not None or slide_timing is not None:
        result.timing = _merge_leaves(default_timing, slide_timing)
    return result


def resolve_title_prefix(default: TitlePrefixSetting, slide: TitlePrefixSetting) -> TitlePrefixSetting:
    """``False`` on the slide disables the prefix; ``None`` inherits the default."""
    if slide is False:
        return False
    if slide is not None:
        return slide
    return default


def resolve_background(
    default: Optional[SlideBackground], slide: Optional[SlideBackground]
) -> Optional[SlideBackground]:
    # A background is one visual choice, so it is replaced as a whole
    return slide if slide is not None else default


def _pick(default, slide):
    return slide if slide is not None else default


def merge_config(default: ParsedConfig, slide: Optional[ParsedConfig]) -> ParsedConfig:
    """Resolve the effective settings for one slide."""
    if slide is None:
        slide = ParsedConfig()
    return ParsedConfig(
        background=resolve_background(default.background, slide.background),
        styles=merge_styles(default.styles, slide.styles),
        slide_number=merge_slide_number(default.slide_number, slide.slide_number),
        title_prefix=resolve_title_prefix(default.title_prefix, slide.title_prefix),
        align=_pick(default.align, slide.align),
        valign=_pick(default.valign, slide.valign),
        transition=merge_transition(default.transition, slide.transition),
        cover=default.cover,
    )
