"""
Color and gradient normalization.

Colors arriving from front-matter are canonicalized so renderers only ever see
``#rrggbb``, compact ``rgba(r,g,b,a)``, or the author's original string when it
is not recognized (named colors, ``hsl()`` and so on).
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

from .models import Gradient, GradientStop

logger = logging.getLogger(__name__)

_HEX3_RE = re.compile(r"^#([0-9a-fA-F])([0-9a-fA-F])([0-9a-fA-F])$")
_HEX6_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
_RGB_RE = re.compile(
    r"^rgba?\s*\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+)\s*)?\)$",
    re.IGNORECASE,
)
_LEADING_NUMBER_RE = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)")
_STOP_RE = re.compile(r"^(.+):(\d+(?:\.\d+)?)%?$")


@dataclass
class RGBAColor:
    """Color components in the 0-1 range."""
    r: float
    g: float
    b: float
    a: Optional[float] = None


def _clamp(value, low, high):
    return min(high, max(low, value))


def parse_leading_float(value: str) -> Optional[float]:
    """Parse the numeric prefix of *value* (``"45deg"`` -> 45.0)."""
    match = _LEADING_NUMBER_RE.match(value)
    if not match:
        return None
    return float(match.group(0))


def format_number(value: float) -> str:
    """Render a number the way it reads in CSS (``1`` rather than ``1.0``)."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def normalize_color(color: str) -> str:
    """Return the canonical form of *color*.

    - ``#rgb`` -> ``#rrggbb`` (lowercase)
    - ``#rrggbb`` -> lowercase
    - ``rgb(r,g,b)`` -> ``#rrggbb`` with channels clamped to 0..255
    - ``rgba(r,g,b,a)`` -> ``rgba(r,g,b,a)`` with channels and alpha clamped

    Anything else is returned trimmed but otherwise untouched.
    """
    color = color.strip()

    match = _HEX3_RE.match(color)
    if match:
        r, g, b = match.groups()
        return f"#{r}{r}{g}{g}{b}{b}".lower()

    if _HEX6_RE.match(color):
        return color.lower()

    match = _RGB_RE.match(color)
    if match:
        r, g, b = (_clamp(int(match.group(i)), 0, 255) for i in (1, 2, 3))
        if match.group(4) is not None:
            alpha = parse_leading_float(match.group(4))
            if alpha is None:
                return color
            alpha = _clamp(alpha, 0.0, 1.0)
            return f"rgba({r},{g},{b},{format_number(alpha)})"
        return rgba_to_hex(parse_color_to_rgba(color))

    return color


def parse_color_to_rgba(color: str) -> Optional[RGBAColor]:
    """Parse ``#rgb``, ``#rrggbb``, ``rgb()`` or ``rgba()`` into 0-1 floats."""
    color = color.strip()

    if color.startswith("#"):
        hex_part = color[1:]
        if len(hex_part) == 3:
            hex_part = "".join(ch * 2 for ch in hex_part)
        if len(hex_part) == 6 and _HEX6_RE.match("#" + hex_part):
            return RGBAColor(
                r=int(hex_part[0:2], 16) / 255,
                g=int(hex_part[2:4], 16) / 255,
                b=int(hex_part[4:6], 16) / 255,
            )
        return None

    match = _RGB_RE.match(color)
    if not match:
        return None
    r, g, b = (_clamp(int(match.group(i)), 0, 255) / 255 for i in (1, 2, 3))
    alpha = None
    if match.group(4) is not None:
        parsed = parse_leading_float(match.group(4))
        if parsed is None:
            return None
        alpha = _clamp(parsed, 0.0, 1.0)
    return RGBAColor(r=r, g=g, b=b, a=alpha)


def rgba_to_hex(color: RGBAColor) -> str:
    """Convert an :class:`RGBAColor` to ``#rrggbb`` (alpha is dropped)."""
    channels = (int(_round_half_up(c * 255)) for c in (color.r, color.g, color.b))
    return "#" + "".join(f"{c:02x}" for c in channels)


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def parse_gradient(value: str) -> Optional[Gradient]:
    """Parse ``"#000:0%,#fff:100%@45"`` into a :class:`Gradient`.

    The ``@angle`` suffix is optional (defaults to 0) and so is the ``%`` on
    each stop.  Returns ``None`` when fewer than two stops are valid.
    """
    if not value:
        return None

    stops_part, _, angle_part = value.partition("@")
    angle = 0.0
    if angle_part:
        parsed_angle = parse_leading_float(angle_part)
        if parsed_angle is not None:
            angle = parsed_angle

    stops = []
    for raw in stops_part.split(","):
        match = _STOP_RE.match(raw.strip())
        if not match:
            continue
        stops.append(
            GradientStop(
                color=normalize_color(match.group(1).strip()),
                position=float(match.group(2)) / 100,
            )
        )

    if len(stops) < 2:
        logger.debug(f"Gradient '{value}' has fewer than two valid stops")
        return None

    return Gradient(stops=stops, angle=angle)
