"""Parsing and validation of Figma URLs."""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlparse
import re

_FILE_KEY_RE = re.compile(r"^/(?:file|design|slides)/([^/]+)")


@dataclass
class FigmaUrlInfo:
    file_key: Optional[str] = None
    node_id: Optional[str] = None


def is_valid_figma_hostname(hostname: Optional[str]) -> bool:
    """Only ``figma.com`` and its subdomains are accepted."""
    if not hostname:
        return False
    host = hostname.lower()
    return host == "figma.com" or host.endswith(".figma.com")


def is_figma_url(url: str) -> bool:
    """True for a well-formed http(s) URL on an allowed Figma host."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    if parsed.scheme.lower() not in ("http", "https"):
        return False
    return is_valid_figma_hostname(parsed.hostname)


def parse_figma_url(url: str) -> FigmaUrlInfo:
    """Extract the file key and node id from a Figma URL.

    ``node-id=1-23`` (the form Figma puts in share links) becomes ``1:23``.
    Malformed URLs and non-Figma hosts yield an empty :class:`FigmaUrlInfo`.
    """
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return FigmaUrlInfo()
    if not parsed.scheme or not is_valid_figma_hostname(parsed.hostname):
        return FigmaUrlInfo()

    info = FigmaUrlInfo()
    match = _FILE_KEY_RE.match(parsed.path)
    if match:
        info.file_key = match.group(1)

    node_ids = parse_qs(parsed.query).get("node-id")
    if node_ids and node_ids[0]:
        info.node_id = node_ids[0].replace("-", ":")
    return info
