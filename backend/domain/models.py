"""
Core domain models for the watermark compositing engine.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from PIL import Image


MAX_CAPTION_LENGTH = 50
DEFAULT_CAPTION = "Shot on film"


class WatermarkStyle(str, Enum):
    """
    Closed set of watermark layouts.

    Unknown identifiers never raise; they resolve to MINIMAL because the
    watermark is decorative and should not fail a request.
    """
    MINIMAL = "minimal"
    FILM_STRIP = "film-strip"
    POLAROID = "polaroid"

    @classmethod
    def resolve(cls, value: Optional[str]) -> "WatermarkStyle":
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.MINIMAL


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FontFamily(str, Enum):
    """Typeface families available to the text rasterizer."""
    SANS = "sans"
    HANDWRITTEN = "handwritten"
    MONO = "mono"


class BlendMode(str, Enum):
    NORMAL = "normal"
    MULTIPLY = "multiply"


@dataclass
class PhotoRecord:
    """
    A gallery photo as seen by the watermark engine.

    Owned by the data store; the engine only reads it.
    """
    id: str
    original_path: str  # http(s) URL or path relative to media root
    camera_name: Optional[str] = None
    film_name: Optional[str] = None
    owner_username: Optional[str] = None
    captured_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class RenderRequest:
    """Presentation options for one watermark render."""
    photo_id: str
    style: WatermarkStyle = WatermarkStyle.MINIMAL
    show_camera: bool = True
    show_film: bool = True
    show_username: bool = True
    show_date: bool = False
    show_qr: bool = False
    show_caption: bool = True
    caption: str = DEFAULT_CAPTION
    custom_date: Optional[str] = None
    preview: bool = False
    base_url: str = ""

    def __post_init__(self) -> None:
        self.style = WatermarkStyle.resolve(self.style)
        self.caption = (self.caption or "")[:MAX_CAPTION_LENGTH]


@dataclass
class WatermarkFields:
    """
    Display strings after toggles have been applied.

    An empty string means the field is omitted from the layout.
    """
    camera: str = ""
    film: str = ""
    username: str = ""
    caption: str = ""
    date: str = ""
    show_qr: bool = False
    photo_url: str = ""


@dataclass(frozen=True)
class RasterFragment:
    """An RGBA pixel buffer produced by a leaf generator."""
    image: Image.Image
    markup: Optional[str] = None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@dataclass
class Overlay:
    """
    One fragment positioned on the canvas.

    A fragment of None stands for the source photo, which the compositor
    supplies at draw time.
    """
    fragment: Optional[RasterFragment]
    x: int
    y: int
    width: int = 0
    height: int = 0
    tile: bool = False
    blend: BlendMode = BlendMode.NORMAL
    name: str = ""

    def __post_init__(self) -> None:
        if self.fragment is not None:
            self.width = self.fragment.width
            self.height = self.fragment.height

    @property
    def is_photo(self) -> bool:
        return self.fragment is None

    @property
    def box(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass
class LayoutPlan:
    """
    Canvas size plus overlays in draw order.

    List order is z-order: later overlays are drawn on top.
    """
    style: WatermarkStyle
    width: int
    height: int
    background: Tuple[int, int, int]
    overlays: List[Overlay] = field(default_factory=list)

    def add(self, overlay: Overlay) -> Overlay:
        self.overlays.append(overlay)
        return overlay

    def named(self, name: str) -> List[Overlay]:
        return [o for o in self.overlays if o.name == name]

    @property
    def photo_overlay(self) -> Optional[Overlay]:
        for overlay in self.overlays:
            if overlay.is_photo:
                return overlay
        return None

    def overflowing(self) -> List[Overlay]:
        """Overlays (other than tiled ones) that extend past the canvas."""
        out = []
        for overlay in self.overlays:
            if overlay.tile:
                continue
            left, top, right, bottom = overlay.box
            if left < 0 or top < 0 or right > self.width or bottom > self.height:
                out.append(overlay)
        return out


@dataclass
class EncodedImage:
    """A finished, compressed watermark ready for transport."""
    data: bytes
    content_type: str
    width: int
    height: int
    cache_control: str
    content_disposition: str
    filename: Optional[str] = None

    @property
    def headers(self) -> dict:
        return {
            "Content-Type": self.content_type,
            "Content-Disposition": self.content_disposition,
            "Cache-Control": self.cache_control,
        }
