"""
Image alt-text annotations.

Authors can size and place an image from its alt text, Marp style::

    ![Logo w:400 h:50% x:100 y:80](logo.png)

Recognized tokens are stripped from the alt text; whatever remains is the
descriptive alt.
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

from .models import SLIDE_HEIGHT, SLIDE_WIDTH, ImagePosition, ImageSize

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(
    r"^(w|width|h|height|x|y):(-?\d+(?:\.\d+)?)(px|%)?$", re.IGNORECASE
)

_AXIS = {
    "w": "width",
    "width": "width",
    "h": "height",
    "height": "height",
    "x": "x",
    "y": "y",
}


@dataclass
class ImageAltResult:
    alt: Optional[str] = None
    size: Optional[ImageSize] = None
    position: Optional[ImagePosition] = None


def _to_pixels(axis: str, number: float, unit: Optional[str]) -> Optional[float]:
    if axis in ("width", "height") and number <= 0:
        return None
    if axis in ("x", "y") and number < 0:
        return None
    if unit != "%":
        return number
    if axis == "width" and number > 100:
        return None
    reference = SLIDE_WIDTH if axis in ("width", "x") else SLIDE_HEIGHT
    return round(number / 100 * reference, 2)


def parse_image_alt(alt: Optional[str]) -> ImageAltResult:
    """Split *alt* into descriptive text plus size/position overrides."""
    result = ImageAltResult()
    if not alt:
        return result

    words = []
    size = ImageSize()
    position = ImagePosition()

    for token in alt.split():
        match = _TOKEN_RE.match(token)
        if not match:
            words.append(token)
            continue

        axis = _AXIS[match.group(1).lower()]
        unit = match.group(3).lower() if match.group(3) else None
        pixels = _to_pixels(axis, float(match.group(2)), unit)
        if pixels is None:
            logger.warning(f"Ignoring invalid image annotation '{token}'")
            continue
        if pixels.is_integer():
            pixels = int(pixels)

        if axis == "width":
            size.width = pixels
        elif axis == "height":
            size.height = pixels
        elif axis == "x":
            position.x = pixels
        else:
            position.y = pixels

    result.alt = " ".join(words) or None
    if size.width is not None or size.height is not None:
        result.size = size
    if position.x is not None or position.y is not None:
        result.position = position
    return result
