"""
Local image loading with a process-wide cache.

Local images referenced from markdown or front-matter are read once, checked
against the supported raster formats, and base64-encoded for transport.  The
result is cached per resolved path and reused until the file's mtime or size
changes, which keeps repeated parses in a watch loop cheap.
"""
import base64
import io
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from .paths import resolve_image_path

logger = logging.getLogger(__name__)

DEFAULT_MAX_IMAGE_SIZE = 5 * 1024 * 1024

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
}

# Pillow format name expected for each extension
_PIL_FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".gif": "GIF",
}


@dataclass
class LocalImageResult:
    data_base64: str
    mime_type: str


def is_supported_image_format(path: str) -> bool:
    return Path(path).suffix.lower() in MIME_TYPES


def get_mime_type(path: str) -> Optional[str]:
    return MIME_TYPES.get(Path(path).suffix.lower())


class ImageCache:
    """Thread-safe cache of encoded images keyed by absolute path."""

    def __init__(self):
        self._entries: Dict[str, Tuple[int, int, LocalImageResult]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, mtime_ns: int, size: int) -> Optional[LocalImageResult]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        cached_mtime, cached_size, result = entry
        if cached_mtime != mtime_ns or cached_size != size:
            return None
        return result

    def put(self, key: str, mtime_ns: int, size: int, result: LocalImageResult) -> None:
        with self._lock:
            self._entries[key] = (mtime_ns, size, result)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_cache = ImageCache()


def clear_image_cache() -> None:
    _cache.clear()


def get_image_cache_size() -> int:
    return len(_cache)


def _verify_format(data: bytes, suffix: str) -> bool:
    expected = _PIL_FORMATS[suffix]
    try:
        with Image.open(io.BytesIO(data)) as img:
            actual = img.format
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Pillow could not identify image bytes: {e}")
        return False
    return actual == expected


def read_local_image(
    src: str,
    base_dir: Optional[Union[str, Path]] = None,
    max_size: int = DEFAULT_MAX_IMAGE_SIZE,
) -> Optional[LocalImageResult]:
    """
    Read and encode a local PNG/JPEG/GIF image.

    Args:
        src: Image reference as written by the author (relative, absolute or file://)
        base_dir: Directory that relative references are resolved against
        max_size: Size ceiling in bytes; larger files are rejected

    Returns:
        LocalImageResult, or None when the image is missing, too large,
        unsupported or unreadable.  Failures are logged, never raised.
    """
    path = resolve_image_path(src, base_dir)
    suffix = path.suffix.lower()

    if suffix not in MIME_TYPES:
        logger.warning(f"Unsupported image format: {src}")
        return None

    try:
        stat = path.stat()
    except OSError:
        logger.warning(f"Image not found: {path}")
        return None

    if not path.is_file():
        logger.warning(f"Image path is not a file: {path}")
        return None

    if stat.st_size > max_size:
        logger.warning(
            f"Image too large ({stat.st_size} bytes, limit {max_size}): {path}"
        )
        return None

    key = str(path)
    cached = _cache.get(key, stat.st_mtime_ns, stat.st_size)
    if cached is not None:
        logger.debug(f"📦 Using cached image for {path}")
        return cached

    try:
        data = path.read_bytes()
    except OSError as e:
        logger.warning(f"Failed to read image {path}: {e}")
        return None

    if not _verify_format(data, suffix):
        logger.warning(f"Image content does not match its extension: {path}")
        return None

    result = LocalImageResult(
        data_base64=base64.b64encode(data).decode("ascii"),
        mime_type=MIME_TYPES[suffix],
    )
    _cache.put(key, stat.st_mtime_ns, stat.st_size, result)
    return result
