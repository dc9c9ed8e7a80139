"""
Watermark layout calculators.

Each style is a pure function of the source photo's pixel size and the
resolved display fields, returning a LayoutPlan: canvas size, background
and overlays in draw order. Every measurement is a ratio of the source (or a
measurement derived from it); the pixel constants only act as floors.
Uses a registry pattern so the dispatcher is a plain lookup.
"""
import math
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFilter

from domain.models import (
    BlendMode,
    FontFamily,
    LayoutPlan,
    Overlay,
    RasterFragment,
    TextAlign,
    WatermarkFields,
    WatermarkStyle,
)
from services.brand_marks import render_square_mark, render_wordmark, wordmark_width
from services.paper_texture import generate_paper_texture
from services.scannable_code import render_scannable_code
from services.text_raster import WIDTH_FACTOR, render_text

SEPARATOR = "  •  "

# Minimal
MINIMAL_BAR_MIN = 90
MINIMAL_BAR_RATIO = 0.08
MINIMAL_BAR_COLOR = (10, 10, 10)
MINIMAL_TEXT_COLOR = "#CCCCCC"

# Film strip
FILM_BORDER_MIN = 60
FILM_BORDER_RATIO = 0.04
FILM_BAND_RATIO = 0.8
FILM_PITCH_RATIO = 0.8
FILM_HOLE_RATIO = 0.35
FILM_HOLE_ASPECT = 0.6
FILM_BASE_COLOR = (35, 32, 28)
FILM_HOLE_COLOR = (10, 10, 10)
FILM_TEXT_COLOR = "#F4E5C2"
FILM_TAGLINE = "AVOID X RAY"
FILM_SITE = "avoidxray.com"

# Polaroid
POLAROID_SIDE_MIN = 45
POLAROID_SIDE_RATIO = 0.035
POLAROID_BOTTOM_MIN = 160
POLAROID_BOTTOM_RATIO = 0.16
POLAROID_PAPER = (250, 248, 245)
POLAROID_SHADOW_SPREAD = 3
POLAROID_SHADOW_BLUR = 2
POLAROID_SHADOW_ALPHA = round(0.08 * 255)
POLAROID_LINE_SPACING = 1.35
POLAROID_META_ADVANCE = 1.3
POLAROID_CAPTION_COLOR = "#2a2a2a"
POLAROID_META_COLOR = "#5a5a5a"
POLAROID_USER_COLOR = "#8a8a8a"
# Share of the photo width the code/mark pair or the wordmark may take
POLAROID_MARK_SHARE = 0.5


LayoutFunction = Callable[[int, int, WatermarkFields, Optional[np.random.Generator]], LayoutPlan]

_layout_registry: Dict[WatermarkStyle, LayoutFunction] = {}


def register_layout(style: WatermarkStyle):
    """Decorator to register a layout function for a style."""
    def decorator(func: LayoutFunction) -> LayoutFunction:
        _layout_registry[style] = func
        return func
    return decorator


def layout_for(style) -> LayoutFunction:
    """Layout function for ``style``; unknown styles get the minimal layout."""
    return _layout_registry.get(WatermarkStyle.resolve(style), _layout_registry[WatermarkStyle.MINIMAL])


def compute_layout(
    style,
    source_width: int,
    source_height: int,
    fields: WatermarkFields,
    rng: Optional[np.random.Generator] = None,
) -> LayoutPlan:
    return layout_for(style)(source_width, source_height, fields, rng)


def join_present(*parts: str) -> str:
    """Join non-empty parts with the middle-dot separator."""
    return SEPARATOR.join(p for p in parts if p)


def _estimated_width(text: str, font_size: int) -> int:
    return math.ceil(len(text) * font_size * WIDTH_FACTOR)


def _fit_width(text: str, font_size: int, available: int) -> int:
    return max(1, min(_estimated_width(text, font_size), available))


def _solid(width: int, height: int, color: Tuple[int, int, int]) -> RasterFragment:
    return RasterFragment(image=Image.new("RGBA", (max(1, width), max(1, height)), color + (255,)))


def _photo(x: int, y: int, width: int, height: int) -> Overlay:
    return Overlay(None, x, y, width=width, height=height, name="photo")


# ============================================
# Minimal
# ============================================

@register_layout(WatermarkStyle.MINIMAL)
def layout_minimal(
    source_width: int,
    source_height: int,
    fields: WatermarkFields,
    rng: Optional[np.random.Generator] = None,
) -> LayoutPlan:
    """Dark bar under the photo: camera/film on the left, wordmark on the right."""
    w, h = source_width, source_height
    bar = max(MINIMAL_BAR_MIN, round(h * MINIMAL_BAR_RATIO))
    font_size = round(bar * 0.28)
    logo_h = round(bar * 0.5)
    padding = min(round(bar * 0.4), w // 8)

    plan = LayoutPlan(WatermarkStyle.MINIMAL, w, h + bar, MINIMAL_BAR_COLOR)
    plan.add(_photo(0, 0, w, h))

    available = max(1, w - 2 * padding)
    if wordmark_width(logo_h) > available:
        logo_h = max(1, int(available * 56 / 307))
    logo = render_wordmark(logo_h)
    logo_x = w - logo.width - padding

    info = join_present(fields.camera, fields.film)
    if info:
        text = render_text(
            info,
            font_size,
            MINIMAL_TEXT_COLOR,
            weight=500,
            letter_spacing=1,
            width=_fit_width(info, font_size, logo_x - 2 * padding),
        )
        plan.add(Overlay(text, padding, h + round((bar - text.height) / 2), name="info"))

    plan.add(Overlay(logo, logo_x, h + round((bar - logo.height) / 2), name="brand"))
    return plan


# ============================================
# Film strip
# ============================================

def sprocket_positions(total_height: int, pitch: int) -> List[int]:
    """Top edge of each sprocket hole; one per full pitch step."""
    count = total_height // pitch
    return [round(i * pitch + pitch / 2) for i in range(count)]


@register_layout(WatermarkStyle.FILM_STRIP)
def layout_film_strip(
    source_width: int,
    source_height: int,
    fields: WatermarkFields,
    rng: Optional[np.random.Generator] = None,
) -> LayoutPlan:
    """Photo framed as a film frame with sprocket holes and edge markings."""
    w, h = source_width, source_height
    border = max(FILM_BORDER_MIN, round(w * FILM_BORDER_RATIO))
    band = round(border * FILM_BAND_RATIO)
    total_w = w + border * 2
    total_h = h + band * 2

    plan = LayoutPlan(WatermarkStyle.FILM_STRIP, total_w, total_h, FILM_BASE_COLOR)

    pitch = round(border * FILM_PITCH_RATIO)
    hole_w = round(border * FILM_HOLE_RATIO)
    hole_h = round(hole_w * FILM_HOLE_ASPECT)
    hole = _solid(hole_w, hole_h, FILM_HOLE_COLOR)
    left_x = round((border - hole_w) / 2)
    right_x = total_w - round((border + hole_w) / 2)
    for y in sprocket_positions(total_h, pitch):
        plan.add(Overlay(hole, left_x, y, name="sprocket"))
        plan.add(Overlay(hole, right_x, y, name="sprocket"))

    plan.add(_photo(border, band, w, h))

    font_size = round(border * 0.26)
    text_pad = round(border * 0.3)
    column = max(1, w // 2 - text_pad)

    def edge_text(text: str, spacing: int, align: TextAlign) -> RasterFragment:
        return render_text(
            text,
            font_size,
            FILM_TEXT_COLOR,
            weight=700,
            letter_spacing=spacing,
            align=align,
            width=_fit_width(text, font_size, column),
            font_family=FontFamily.MONO,
        )

    def top_y(fragment: RasterFragment) -> int:
        return round((band - fragment.height) / 2)

    def bottom_y(fragment: RasterFragment) -> int:
        return band + h + round((band - fragment.height) / 2)

    left = border + text_pad
    right = total_w - border - text_pad

    film = (fields.film or "").upper()
    if film:
        frag = edge_text(film, 2, TextAlign.LEFT)
        plan.add(Overlay(frag, left, top_y(frag), name="film"))

    frag = edge_text(FILM_TAGLINE, 2, TextAlign.RIGHT)
    plan.add(Overlay(frag, right - frag.width, top_y(frag), name="tagline"))

    if fields.username:
        frag = edge_text(f"@{fields.username}", 1, TextAlign.LEFT)
        plan.add(Overlay(frag, left, bottom_y(frag), name="username"))

    frag = edge_text(FILM_SITE, 1, TextAlign.RIGHT)
    plan.add(Overlay(frag, right - frag.width, bottom_y(frag), name="site"))
    return plan


# ============================================
# Polaroid
# ============================================

def _drop_shadow(width: int, height: int) -> Tuple[RasterFragment, int]:
    """Blurred low-opacity rectangle; returns the fragment and its outset."""
    spread = POLAROID_SHADOW_SPREAD
    pad = POLAROID_SHADOW_BLUR * 2
    outset = spread + pad
    image = Image.new("RGBA", (width + outset * 2, height + outset * 2), (0, 0, 0, 0))
    ImageDraw.Draw(image).rectangle(
        (pad, pad, pad + width + spread * 2 - 1, pad + height + spread * 2 - 1),
        fill=(0, 0, 0, POLAROID_SHADOW_ALPHA),
    )
    return RasterFragment(image=image.filter(ImageFilter.GaussianBlur(POLAROID_SHADOW_BLUR))), outset


@register_layout(WatermarkStyle.POLAROID)
def layout_polaroid(
    source_width: int,
    source_height: int,
    fields: WatermarkFields,
    rng: Optional[np.random.Generator] = None,
) -> LayoutPlan:
    """
    Instant-print frame: paper grain, drop shadow, photo, then a caption block
    with either code + square mark or the wordmark in the bottom margin.
    """
    w, h = source_width, source_height
    side = max(POLAROID_SIDE_MIN, round(w * POLAROID_SIDE_RATIO))
    top = side
    bottom = max(POLAROID_BOTTOM_MIN, round(h * POLAROID_BOTTOM_RATIO))
    total_w = w + side * 2
    total_h = h + top + bottom

    plan = LayoutPlan(WatermarkStyle.POLAROID, total_w, total_h, POLAROID_PAPER)
    plan.add(Overlay(generate_paper_texture(rng=rng), 0, 0, tile=True, blend=BlendMode.MULTIPLY, name="texture"))
    shadow, outset = _drop_shadow(w, h)
    plan.add(Overlay(shadow, side - outset, top - outset, name="shadow"))
    plan.add(_photo(side, top, w, h))

    base_size = round(bottom * 0.18)
    meta_size = round(base_size * 0.85)
    user_size = round(base_size * 0.72)
    padding = round(bottom * 0.12)
    line_spacing = round(base_size * POLAROID_LINE_SPACING)
    mark_room = max(1, int(w * POLAROID_MARK_SHARE))
    gap = min(round(bottom * 0.08), mark_room // 4)
    aligned_top = h + top + padding

    # (name, text, size, colour, weight, advance)
    lines = []
    if fields.caption:
        lines.append(("caption", fields.caption, base_size, POLAROID_CAPTION_COLOR, 600, line_spacing))
    metadata = join_present(fields.camera, fields.film)
    if metadata:
        lines.append(("metadata", metadata, meta_size, POLAROID_META_COLOR, 400, round(meta_size * POLAROID_META_ADVANCE)))
    user_date = join_present(f"@{fields.username}" if fields.username else "", fields.date)
    if user_date:
        lines.append(("user_date", user_date, user_size, POLAROID_USER_COLOR, 400, 0))

    if fields.show_qr and fields.photo_url:
        stack_height = base_size + (len(lines) - 1) * line_spacing if lines else base_size
        # Narrow sources shrink the pair rather than push the mark off the paper
        code_size = max(1, min(round(stack_height), (mark_room - gap) // 2))
        code_x = side + w - code_size
        mark_x = code_x - gap - code_size
        plan.add(Overlay(render_square_mark(code_size), mark_x, aligned_top, name="brand"))
        plan.add(Overlay(render_scannable_code(fields.photo_url, code_size), code_x, aligned_top, name="code"))
        text_right = mark_x - gap
    else:
        logo_h = round(bottom * 0.24)
        if wordmark_width(logo_h) > mark_room:
            logo_h = max(1, int(mark_room * 56 / 307))
        logo = render_wordmark(logo_h, inverted=True)
        logo_x = side + w - logo.width
        plan.add(Overlay(logo, logo_x, total_h - padding - logo.height, name="brand"))
        text_right = logo_x - gap

    available = max(1, text_right - side)
    y = aligned_top
    for name, text, size, color, weight, advance in lines:
        fragment = render_text(text, size, color, weight=weight, width=_fit_width(text, size, available))
        plan.add(Overlay(fragment, side, y, name=name))
        y += advance
    return plan
