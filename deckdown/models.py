"""
Data models for the slide deck intermediate representation.

Every type here is a plain dataclass.  ``to_dict()`` produces the JSON shape
consumed by renderers: snake_case field names become camelCase keys, unset
(``None``) fields are omitted, and block variants carry a ``kind`` tag.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, ClassVar, Dict, List, Optional, Union

# Slide geometry (px)
SLIDE_WIDTH = 1920
SLIDE_HEIGHT = 1080
CONTAINER_PADDING = 100
CONTENT_WIDTH = SLIDE_WIDTH - CONTAINER_PADDING * 2

# Column layout limits
COLUMN_GAP = 32
MAX_COLUMN_GAP = 200
COLUMN_MIN_WIDTH = 320
MIN_COLUMNS = 2
MAX_COLUMNS = 4

CALLOUT_TYPES = ("note", "tip", "warning", "caution")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_jsonable(value: Any) -> Any:
    """Convert IR objects (dataclasses, lists, dicts) into JSON-ready values."""
    if is_dataclass(value) and not isinstance(value, type):
        out: Dict[str, Any] = {}
        kind = getattr(type(value), "kind", None)
        if kind is not None:
            out["kind"] = kind
        for f in fields(value):
            v = getattr(value, f.name)
            if v is False and f.metadata.get("false_as_null"):
                out[_camel(f.name)] = None
                continue
            if v is None:
                continue
            out[_camel(f.name)] = to_jsonable(v)
        return out
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


class _Serializable:
    def to_dict(self) -> Dict[str, Any]:
        return to_jsonable(self)


# ---------------------------------------------------------------------------
# Inline text
# ---------------------------------------------------------------------------

@dataclass
class TextSpan(_Serializable):
    """A run of text carrying a fixed set of inline marks."""
    text: str
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    strike: Optional[bool] = None
    code: Optional[bool] = None
    href: Optional[str] = None
    superscript: Optional[bool] = None


@dataclass
class BulletItem(_Serializable):
    text: str
    spans: List[TextSpan] = field(default_factory=list)
    children: Optional[List["BulletItem"]] = None
    children_ordered: Optional[bool] = None
    children_start: Optional[int] = None


@dataclass
class FootnoteItem(_Serializable):
    id: str
    content: str
    spans: Optional[List[TextSpan]] = None


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

@dataclass
class ImageSize(_Serializable):
    width: Optional[float] = None
    height: Optional[float] = None


@dataclass
class ImagePosition(_Serializable):
    x: Optional[float] = None
    y: Optional[float] = None


# ---------------------------------------------------------------------------
# Figma links
# ---------------------------------------------------------------------------

@dataclass
class TextOverride(_Serializable):
    text: str
    spans: Optional[List[TextSpan]] = None


@dataclass
class FigmaSelectionLink(_Serializable):
    url: str
    node_id: Optional[str] = None
    file_key: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    text_overrides: Optional[Dict[str, TextOverride]] = None
    hide_link: Optional[bool] = None


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

@dataclass
class ParagraphBlock(_Serializable):
    kind: ClassVar[str] = "paragraph"
    text: str
    spans: List[TextSpan] = field(default_factory=list)


@dataclass
class HeadingBlock(_Serializable):
    kind: ClassVar[str] = "heading"
    level: int
    text: str
    spans: List[TextSpan] = field(default_factory=list)


@dataclass
class BulletsBlock(_Serializable):
    kind: ClassVar[str] = "bullets"
    items: List[BulletItem] = field(default_factory=list)
    ordered: bool = False
    start: int = 1


@dataclass
class CodeBlock(_Serializable):
    kind: ClassVar[str] = "code"
    code: str
    language: Optional[str] = None


@dataclass
class ImageBlock(_Serializable):
    kind: ClassVar[str] = "image"
    url: str
    alt: Optional[str] = None
    size: Optional[ImageSize] = None
    position: Optional[ImagePosition] = None
    source: str = "remote"  # "local" | "remote"
    data_base64: Optional[str] = None
    mime_type: Optional[str] = None


@dataclass
class BlockquoteBlock(_Serializable):
    kind: ClassVar[str] = "blockquote"
    text: str
    spans: List[TextSpan] = field(default_factory=list)


@dataclass
class TableBlock(_Serializable):
    kind: ClassVar[str] = "table"
    headers: List[List[TextSpan]] = field(default_factory=list)
    rows: List[List[List[TextSpan]]] = field(default_factory=list)
    align: List[Optional[str]] = field(default_factory=list)


@dataclass
class FigmaBlock(_Serializable):
    kind: ClassVar[str] = "figma"
    link: FigmaSelectionLink


@dataclass
class CalloutBlock(_Serializable):
    kind: ClassVar[str] = "callout"
    type: str  # one of CALLOUT_TYPES
    text: str
    spans: List[TextSpan] = field(default_factory=list)


@dataclass
class FootnotesBlock(_Serializable):
    kind: ClassVar[str] = "footnotes"
    items: List[FootnoteItem] = field(default_factory=list)


BlockItem = Union[
    ParagraphBlock,
    HeadingBlock,
    BulletsBlock,
    CodeBlock,
    ImageBlock,
    BlockquoteBlock,
    TableBlock,
    FigmaBlock,
    CalloutBlock,
    FootnotesBlock,
]


@dataclass
class ColumnsBlock(_Serializable):
    kind: ClassVar[str] = "columns"
    columns: List[List[BlockItem]] = field(default_factory=list)
    gap: Optional[int] = None
    widths: Optional[List[int]] = None


SlideBlock = Union[BlockItem, ColumnsBlock]


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------

@dataclass
class TextStyle(_Serializable):
    size: Optional[float] = None
    color: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    spacing: Optional[float] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass
class HeadingStyles(_Serializable):
    h1: Optional[TextStyle] = None
    h2: Optional[TextStyle] = None
    h3: Optional[TextStyle] = None
    h4: Optional[TextStyle] = None


@dataclass
class FontVariant(_Serializable):
    family: Optional[str] = None
    style: Optional[str] = None
    bold: Optional[str] = None
    italic: Optional[str] = None
    bold_italic: Optional[str] = None


@dataclass
class FontConfig(_Serializable):
    h1: Optional[FontVariant] = None
    h2: Optional[FontVariant] = None
    h3: Optional[FontVariant] = None
    h4: Optional[FontVariant] = None
    body: Optional[FontVariant] = None
    bullets: Optional[FontVariant] = None
    code: Optional[FontVariant] = None


@dataclass
class SlideStyles(_Serializable):
    headings: Optional[HeadingStyles] = None
    paragraphs: Optional[TextStyle] = None
    bullets: Optional[TextStyle] = None
    code: Optional[TextStyle] = None
    fonts: Optional[FontConfig] = None


# ---------------------------------------------------------------------------
# Background
# ---------------------------------------------------------------------------

@dataclass
class GradientStop(_Serializable):
    color: str
    position: float


@dataclass
class Gradient(_Serializable):
    stops: List[GradientStop]
    angle: float = 0


@dataclass
class BackgroundImage(_Serializable):
    url: str
    source: str = "remote"
    data_base64: Optional[str] = None
    mime_type: Optional[str] = None


@dataclass
class BackgroundComponent(_Serializable):
    node_id: str
    link: Optional[str] = None
    file_key: Optional[str] = None
    fit: Optional[str] = None  # cover | contain | stretch
    align: Optional[str] = None
    opacity: Optional[float] = None


@dataclass
class SlideBackground(_Serializable):
    solid: Optional[str] = None
    gradient: Optional[Gradient] = None
    template_style: Optional[str] = None
    image: Optional[BackgroundImage] = None
    component: Optional[BackgroundComponent] = None


# ---------------------------------------------------------------------------
# Slide-level settings
# ---------------------------------------------------------------------------

@dataclass
class SlideNumberConfig(_Serializable):
    show: Optional[bool] = None
    size: Optional[float] = None
    color: Optional[str] = None
    position: Optional[str] = None
    padding_x: Optional[float] = None
    padding_y: Optional[float] = None
    format: Optional[str] = None
    link: Optional[str] = None
    node_id: Optional[str] = None
    start_from: Optional[int] = None
    offset: Optional[int] = None


@dataclass
class TitlePrefixConfig(_Serializable):
    node_id: str
    link: Optional[str] = None
    spacing: Optional[float] = None


@dataclass
class TransitionTiming(_Serializable):
    type: Optional[str] = None  # on-click | after-delay
    delay: Optional[float] = None


@dataclass
class SlideTransitionConfig(_Serializable):
    style: Optional[str] = None
    duration: Optional[float] = None
    curve: Optional[str] = None
    timing: Optional[Union[TransitionTiming, str]] = None


# ``None`` means inherit, ``False`` means explicitly disabled.
TitlePrefixSetting = Union[TitlePrefixConfig, bool, None]


@dataclass
class SlideContent(_Serializable):
    """One slide of the compiled deck."""
    blocks: List[SlideBlock] = field(default_factory=list)
    background: Optional[SlideBackground] = None
    styles: Optional[SlideStyles] = None
    slide_number: Optional[SlideNumberConfig] = None
    title_prefix: TitlePrefixSetting = field(
        default=None, metadata={"false_as_null": True}
    )
    align: Optional[str] = None
    valign: Optional[str] = None
    transition: Optional[SlideTransitionConfig] = None
    footnotes: Optional[List[FootnoteItem]] = None
    cover: Optional[bool] = None


def slides_to_json(slides: List[SlideContent], indent: Optional[int] = None) -> str:
    """Serialize a parsed deck to its JSON transport form."""
    return json.dumps(
        [slide.to_dict() for slide in slides], indent=indent, ensure_ascii=False
    )
