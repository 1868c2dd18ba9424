"""Helpers for classifying and resolving image references.

Rules
-----
1. ``http://`` and ``https://`` URLs are remote and never touched.
2. ``file://`` URLs are stripped to a filesystem path first.
3. ``~`` is expanded and relative paths are resolved against *base_dir*.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

__all__ = ["is_remote_url", "is_explicit_local_path", "resolve_image_path"]

_REMOTE_RE = re.compile(r"^https?://", re.IGNORECASE)


def is_remote_url(url: str) -> bool:
    return bool(_REMOTE_RE.match(url))


def _strip_file_scheme(src: str) -> str:
    if src.startswith("file://"):
        return src[len("file://"):]
    return src


def is_explicit_local_path(src: str) -> bool:
    """True for references that can be read without a base directory."""
    path = _strip_file_scheme(src)
    return src.startswith("file://") or path.startswith("~") or Path(path).is_absolute()


def resolve_image_path(src: str, base_dir: Optional[str | Path]) -> Path:
    """Return the absolute path *src* points at.

    Parameters
    ----------
    src
        Image reference exactly as written in markdown or front-matter.
    base_dir
        Directory of the source document.  Falls back to the current working
        directory when ``None``.
    """
    path = Path(_strip_file_scheme(src)).expanduser()
    if not path.is_absolute():
        root = Path(base_dir) if base_dir is not None else Path.cwd()
        path = root.expanduser() / path
    return path.resolve()
