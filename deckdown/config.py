"""
Front-matter parsing.

Turns a YAML mapping (document-level or per-slide) into validated settings.
Validation is clamp-or-drop: an out-of-range number or unknown enum value
removes just that field and logs a warning, it never aborts the parse.
"""
import logging
import math
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .colors import normalize_color, parse_gradient
from .figma_url import parse_figma_url
from .local_image import (
    DEFAULT_MAX_IMAGE_SIZE,
    is_supported_image_format,
    read_local_image,
)
from .models import (
    BackgroundComponent,
    BackgroundImage,
    FontConfig,
    FontVariant,
    HeadingStyles,
    SlideBackground,
    SlideNumberConfig,
    SlideStyles,
    SlideTransitionConfig,
    TextStyle,
    TitlePrefixConfig,
    TitlePrefixSetting,
    TransitionTiming,
)
from .paths import is_explicit_local_path, is_remote_url
from .templates import get_template_defaults
from .transitions import (
    normalize_timing_type,
    normalize_transition_curve,
    normalize_transition_style,
)

logger = logging.getLogger(__name__)

SLIDE_NUMBER_POSITIONS = ("bottom-right", "bottom-left", "top-right", "top-left")
HORIZONTAL_ALIGNS = ("left", "center", "right")
VERTICAL_ALIGNS = ("top", "middle", "bottom")
COMPONENT_FITS = ("cover", "contain", "stretch")
COMPONENT_ALIGNS = ("center", "top-left", "top-right", "bottom-left", "bottom-right")

FONT_SIZE_RANGE = (1, 200)
DURATION_RANGE = (0.01, 10)
DELAY_RANGE = (0, 30)

FONT_KEYS = ("h1", "h2", "h3", "h4", "body", "bullets", "code")

_GRADIENT_RE = re.compile(r"^#?[0-9a-fA-F]{3,8}:\d+%")
_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{3,8}$")
_FUNC_COLOR_RE = re.compile(r"^(rgb|hsl)a?\s*\(")
_NAMED_COLOR_RE = re.compile(r"^[a-zA-Z]+$")
_FIGMA_COMPONENT_RE = re.compile(r"^https?://(?:www\.)?figma\.com/")
_NODE_ID_PARAM_RE = re.compile(r"[?&]node-id=")


@dataclass
class ParsedConfig:
    """Settings read from one front-matter block; every field is optional."""
    background: Optional[SlideBackground] = None
    styles: SlideStyles = field(default_factory=SlideStyles)
    slide_number: Optional[SlideNumberConfig] = None
    title_prefix: TitlePrefixSetting = None
    align: Optional[str] = None
    valign: Optional[str] = None
    transition: Optional[SlideTransitionConfig] = None
    cover: Optional[bool] = None


# ---------------------------------------------------------------------------
# YAML
# ---------------------------------------------------------------------------

def load_yaml_mapping(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse *text* as YAML, returning None unless it yields a mapping."""
    if text is None:
        return None
    try:
        data = yaml.safe_load(text)
    except (yaml.YAMLError, ValueError, TypeError) as e:
        # SafeLoader raises plain ValueError for impossible timestamps
        logger.warning(f"Ignoring invalid front-matter YAML: {e}")
        return None
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring front-matter that is not a mapping ({type(data).__name__})")
        return None
    return data


# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------

def _number(value: Any) -> Optional[Union[int, float]]:
    """Finite int/float from a YAML scalar; bools, inf and nan are rejected."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(parsed):
            return None
        return int(parsed) if parsed.is_integer() else parsed
    return None


def _in_range(value: Any, bounds: Tuple[float, float], name: str):
    number = _number(value)
    if number is None or not bounds[0] <= number <= bounds[1]:
        logger.warning(f"Ignoring {name} {value!r}: must be between {bounds[0]} and {bounds[1]}")
        return None
    return number


def _color(value: Any, name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        logger.warning(f"Ignoring {name} {value!r}: colors must be strings (quote '#hex' values)")
        return None
    return normalize_color(value)


def _enum(value: Any, allowed, name: str, normalize=None) -> Optional[str]:
    if value is None:
        return None
    candidate = str(value)
    if normalize is not None:
        candidate = normalize(candidate)
    if candidate in allowed:
        return candidate
    logger.warning(f"Ignoring unknown {name} {value!r}")
    return None


def _kebab(value: str) -> str:
    return value.lower().replace("_", "-")


def _all_unset(obj) -> bool:
    return all(getattr(obj, f.name) is None for f in fields(obj))


# ---------------------------------------------------------------------------
# Text styles and fonts
# ---------------------------------------------------------------------------

def parse_font_size(value: Any) -> Optional[Union[int, float]]:
    """Font sizes outside 1-200px are dropped."""
    if value is None:
        return None
    return _in_range(value, FONT_SIZE_RANGE, "font size")


def parse_text_style(style: Any) -> Optional[TextStyle]:
    if not isinstance(style, dict):
        return None
    result = TextStyle(
        size=parse_font_size(style.get("size")),
        color=_color(style.get("color"), "color"),
        x=_number(style.get("x")),
        y=_number(style.get("y")),
    )
    if style.get("spacing") is not None:
        spacing = _number(style["spacing"])
        if spacing is not None and spacing >= 0:
            result.spacing = spacing
        else:
            logger.warning(f"Ignoring spacing {style['spacing']!r}: must be >= 0")
    return None if result.is_empty() else result


def parse_font_variant(value: Any) -> Optional[FontVariant]:
    if not value:
        return None
    if isinstance(value, str):
        return FontVariant(family=value, style="Regular")
    if not isinstance(value, dict) or not value.get("family"):
        logger.warning(f"Ignoring font {value!r}: a family is required")
        return None
    return FontVariant(
        family=str(value["family"]),
        style=str(value.get("style") or "Regular"),
        bold=value.get("bold"),
        italic=value.get("italic"),
        bold_italic=value.get("boldItalic"),
    )


def parse_fonts_config(value: Any) -> Optional[FontConfig]:
    if not isinstance(value, dict):
        return None
    fonts = FontConfig(**{key: parse_font_variant(value.get(key)) for key in FONT_KEYS})
    return None if _all_unset(fonts) else fonts


def _apply_base_color(style: Optional[TextStyle], base_color: Optional[str]) -> Optional[TextStyle]:
    if base_color is None:
        return style
    if style is None:
        return TextStyle(color=base_color)
    if style.color:
        return style
    return TextStyle(
        size=style.size, color=base_color, x=style.x, y=style.y, spacing=style.spacing
    )


def parse_styles(config: Dict[str, Any]) -> SlideStyles:
    base_color = _color(config.get("color"), "color")
    headings_cfg = config.get("headings") if isinstance(config.get("headings"), dict) else {}

    headings = HeadingStyles(
        **{
            level: _apply_base_color(parse_text_style(headings_cfg.get(level)), base_color)
            for level in ("h1", "h2", "h3", "h4")
        }
    )
    has_headings = any(getattr(headings, level) for level in ("h1", "h2", "h3", "h4"))

    return SlideStyles(
        headings=headings if has_headings else None,
        paragraphs=_apply_base_color(parse_text_style(config.get("paragraphs")), base_color),
        bullets=_apply_base_color(parse_text_style(config.get("bullets")), base_color),
        code=_apply_base_color(parse_text_style(config.get("code")), base_color),
        fonts=parse_fonts_config(config.get("fonts")),
    )


# ---------------------------------------------------------------------------
# Slide number and title prefix
# ---------------------------------------------------------------------------

def _node_id_from(config: Dict[str, Any]) -> Optional[str]:
    node_id = config.get("nodeId")
    if node_id:
        return str(node_id)
    link = config.get("link")
    if link:
        return parse_figma_url(str(link)).node_id
    return None


def parse_slide_number_config(value: Any) -> Optional[SlideNumberConfig]:
    if value is None:
        return None
    if isinstance(value, bool):
        return SlideNumberConfig(show=value)
    if not isinstance(value, dict):
        logger.warning(f"Ignoring slideNumber {value!r}")
        return None

    result = SlideNumberConfig()
    if isinstance(value.get("show"), bool):
        result.show = value["show"]
    if value.get("size") is not None:
        result.size = _in_range(value["size"], FONT_SIZE_RANGE, "slideNumber size")
    result.color = _color(value.get("color"), "slideNumber color")
    result.position = _enum(value.get("position"), SLIDE_NUMBER_POSITIONS, "slideNumber position")
    result.padding_x = _number(value.get("paddingX"))
    result.padding_y = _number(value.get("paddingY"))
    if isinstance(value.get("format"), str) and value["format"]:
        result.format = value["format"]

    if value.get("link") or value.get("nodeId"):
        node_id = _node_id_from(value)
        if node_id:
            result.link = value.get("link")
            result.node_id = node_id
        else:
            logger.warning(f"slideNumber link has no node-id: {value.get('link')}")

    start_from = _number(value.get("startFrom"))
    if start_from is not None:
        if start_from >= 1:
            result.start_from = int(start_from)
        else:
            logger.warning(f"Ignoring slideNumber startFrom {value['startFrom']!r}: must be >= 1")
    offset = _number(value.get("offset"))
    if offset is not None:
        result.offset = int(offset)

    return None if _all_unset(result) else result


def parse_title_prefix(value: Any, template_name: Optional[str] = None) -> TitlePrefixSetting:
    """Return ``False`` (disabled), a config, or ``None`` (inherit)."""
    if value is False:
        return False
    if isinstance(value, dict) and (value.get("link") or value.get("nodeId")):
        node_id = _node_id_from(value)
        if node_id:
            spacing = _number(value.get("spacing"))
            return TitlePrefixConfig(node_id=node_id, link=value.get("link"), spacing=spacing)
        logger.warning(f"titlePrefix link has no node-id: {value.get('link')}")
        return None
    if value is not None:
        logger.warning(f"Ignoring titlePrefix {value!r}: expected false or a link/nodeId")
        return None
    if template_name:
        defaults = get_template_defaults(template_name)
        if defaults is not None and defaults.title_prefix is not None:
            return defaults.title_prefix
    return None


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------

def parse_transition_config(value: Any) -> Optional[SlideTransitionConfig]:
    """Parse ``"dissolve 0.5"`` shorthand or the full object form."""
    if not value:
        return None

    if isinstance(value, str):
        parts = value.split()
        if not parts:
            return None
        style = normalize_transition_style(parts[0])
        if style is None:
            logger.warning(f"Ignoring unknown transition style '{parts[0]}'")
            return None
        result = SlideTransitionConfig(style=style)
        if len(parts) > 1:
            result.duration = _in_range(parts[1], DURATION_RANGE, "transition duration")
        return result

    if not isinstance(value, dict):
        logger.warning(f"Ignoring transition {value!r}")
        return None

    result = SlideTransitionConfig()
    if value.get("style"):
        result.style = normalize_transition_style(str(value["style"]))
        if result.style is None:
            logger.warning(f"Ignoring unknown transition style {value['style']!r}")
    if value.get("duration") is not None:
        result.duration = _in_range(value["duration"], DURATION_RANGE, "transition duration")
    if value.get("curve"):
        result.curve = normalize_transition_curve(str(value["curve"]))
        if result.curve is None:
            logger.warning(f"Ignoring unknown transition curve {value['curve']!r}")

    timing = value.get("timing")
    if isinstance(timing, str):
        result.timing = normalize_timing_type(timing)
        if result.timing is None:
            logger.warning(f"Ignoring unknown transition timing {timing!r}")
    elif isinstance(timing, dict):
        parsed = TransitionTiming()
        if timing.get("type"):
            parsed.type = normalize_timing_type(str(timing["type"]))
            if parsed.type is None:
                logger.warning(f"Ignoring unknown transition timing type {timing['type']!r}")
        if timing.get("delay") is not None:
            parsed.delay = _in_range(timing["delay"], DELAY_RANGE, "transition delay")
        if parsed.type is not None or parsed.delay is not None:
            result.timing = parsed

    return None if _all_unset(result) else result


# ---------------------------------------------------------------------------
# Background
# ---------------------------------------------------------------------------

def _looks_like_gradient(value: str) -> bool:
    return bool(_GRADIENT_RE.match(value))


def _looks_like_color(value: str) -> bool:
    return bool(
        _HEX_COLOR_RE.match(value)
        or _FUNC_COLOR_RE.match(value)
        or _NAMED_COLOR_RE.match(value)
    )


def _is_figma_component_url(value: str) -> bool:
    return bool(_FIGMA_COMPONENT_RE.match(value) and _NODE_ID_PARAM_RE.search(value))


def parse_background_image(
    url: str,
    base_dir: Optional[Union[str, Path]] = None,
    max_image_size: int = DEFAULT_MAX_IMAGE_SIZE,
) -> Optional[BackgroundImage]:
    if not url:
        return None
    if is_remote_url(url):
        return BackgroundImage(url=url, source="remote")

    if base_dir is not None or is_explicit_local_path(url):
        if not is_supported_image_format(url):
            logger.warning(f"Unsupported background image format: {url}")
            return None
        result = read_local_image(url, base_dir, max_image_size)
        if result is not None:
            return BackgroundImage(
                url=url,
                source="local",
                data_base64=result.data_base64,
                mime_type=result.mime_type,
            )

    logger.warning(f"Could not load background image: {url}")
    return None


def parse_background_component(value: Any) -> Optional[BackgroundComponent]:
    """Accept a Figma URL, or ``{link, fit, align, opacity}``."""
    if not value:
        return None

    if isinstance(value, str):
        link, options = value, {}
    elif isinstance(value, dict) and value.get("link"):
        link, options = str(value["link"]), value
    else:
        logger.warning("Background component requires a link with node-id")
        return None

    info = parse_figma_url(link)
    if not info.node_id:
        logger.warning(f"Background component URL must include node-id: {link}")
        return None

    component = BackgroundComponent(node_id=info.node_id, link=link, file_key=info.file_key)
    if options.get("fit"):
        component.fit = _enum(options["fit"], COMPONENT_FITS, "background component fit", str.lower)
    if options.get("align"):
        component.align = _enum(options["align"], COMPONENT_ALIGNS, "background component align", _kebab)
    if options.get("opacity") is not None:
        component.opacity = _in_range(options["opacity"], (0, 1), "background component opacity")
    return component


def parse_background(
    value: Any,
    base_dir: Optional[Union[str, Path]] = None,
    max_image_size: int = DEFAULT_MAX_IMAGE_SIZE,
) -> Tuple[Optional[SlideBackground], Optional[str]]:
    """
    Resolve the unified ``background`` setting.

    Args:
        value: Shorthand string (auto-detected) or mapping
        base_dir: Directory for local background images
        max_image_size: Size ceiling for local background images

    Returns:
        (background, template name).  The template name is returned so the
        caller can look up template defaults.
    """
    if not value:
        return None, None

    if isinstance(value, str):
        value = value.strip()
        if _is_figma_component_url(value):
            component = parse_background_component(value)
            return (SlideBackground(component=component) if component else None), None
        if _looks_like_gradient(value):
            gradient = parse_gradient(value)
            if gradient is not None:
                return SlideBackground(gradient=gradient), None
        if _looks_like_color(value):
            return SlideBackground(solid=normalize_color(value)), None
        image = parse_background_image(value, base_dir, max_image_size)
        return (SlideBackground(image=image) if image else None), None

    if not isinstance(value, dict):
        logger.warning(f"Ignoring background {value!r}")
        return None, None

    background = None
    template_name = None
    # Layers are exclusive: template > gradient > color > image
    if value.get("template"):
        template_name = str(value["template"])
        background = SlideBackground(template_style=template_name)
    elif value.get("gradient"):
        gradient = parse_gradient(str(value["gradient"]))
        if gradient is not None:
            background = SlideBackground(gradient=gradient)
        else:
            logger.warning(f"Ignoring invalid gradient {value['gradient']!r}")
    elif value.get("color"):
        color = _color(value["color"], "background color")
        if color:
            background = SlideBackground(solid=color)
    elif value.get("image"):
        image = parse_background_image(str(value["image"]), base_dir, max_image_size)
        if image is not None:
            background = SlideBackground(image=image)

    if value.get("component"):
        component = parse_background_component(value["component"])
        if component is not None:
            if background is None:
                background = SlideBackground()
            background.component = component

    return background, template_name


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def parse_slide_config(
    config: Optional[Dict[str, Any]],
    base_dir: Optional[Union[str, Path]] = None,
    max_image_size: int = DEFAULT_MAX_IMAGE_SIZE,
) -> ParsedConfig:
    """
    Parse a front-matter mapping into :class:`ParsedConfig`.

    Args:
        config: Mapping loaded from YAML (None is treated as empty)
        base_dir: Directory used to resolve local background images
        max_image_size: Size ceiling for local background images

    Returns:
        ParsedConfig with every unrecognized or invalid field left unset.
    """
    if not config:
        return ParsedConfig()

    background, template_name = parse_background(
        config.get("background"), base_dir, max_image_size
    )

    cover = config.get("cover")
    if cover is not None and not isinstance(cover, bool):
        logger.warning(f"Ignoring cover {cover!r}: expected true or false")
        cover = None

    return ParsedConfig(
        background=background,
        styles=parse_styles(config),
        slide_number=parse_slide_number_config(config.get("slideNumber")),
        title_prefix=parse_title_prefix(config.get("titlePrefix"), template_name),
        align=_enum(config.get("align"), HORIZONTAL_ALIGNS, "align"),
        valign=_enum(config.get("valign"), VERTICAL_ALIGNS, "valign"),
        transition=parse_transition_config(config.get("transition")),
        cover=cover,
    )
