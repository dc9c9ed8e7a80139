"""
Brand marks drawn at the size a layout asks for.

The wordmark keeps the 307:56 two-panel proportion of the site logo: a red
"AVOID" panel and a "XRAY" panel (white on dark bars, dark on paper).
"""
from PIL import Image, ImageDraw, ImageFont

from domain.models import FontFamily, RasterFragment
from services.text_raster import load_font

WORDMARK_BASE_SIZE = (307, 56)
LEFT_PANEL = (0, 150)
RIGHT_PANEL = (157, 307)
BRAND_RED = (211, 47, 47, 255)
WHITE = (255, 255, 255, 255)
INK = (20, 20, 20, 255)


def wordmark_width(height: int) -> int:
    base_w, base_h = WORDMARK_BASE_SIZE
    return max(1, round(height * base_w / base_h))


def _draw_centered(draw: ImageDraw.ImageDraw, box, text: str, font, fill) -> None:
    cx = (box[0] + box[2]) / 2
    cy = (box[1] + box[3]) / 2
    if isinstance(font, ImageFont.FreeTypeFont):
        draw.text((cx, cy), text, font=font, fill=fill, anchor="mm")
    else:
        w = draw.textlength(text, font=font)
        draw.text((cx - w / 2, box[1]), text, font=font, fill=fill)


def render_wordmark(height: int, inverted: bool = False) -> RasterFragment:
    """
    Site logo scaled to ``height`` px.

    ``inverted`` is the colourway for light backgrounds (dark second panel).
    """
    height = max(1, int(height))
    scale = height / WORDMARK_BASE_SIZE[1]
    width = wordmark_width(height)
    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)

    left = (round(LEFT_PANEL[0] * scale), 0, round(LEFT_PANEL[1] * scale), height)
    right = (round(RIGHT_PANEL[0] * scale), 0, width, height)
    draw.rectangle((left[0], left[1], left[2] - 1, left[3] - 1), fill=BRAND_RED)
    right_fill, right_ink = (INK, WHITE) if inverted else (WHITE, INK)
    draw.rectangle((right[0], right[1], right[2] - 1, right[3] - 1), fill=right_fill)

    font = load_font(FontFamily.SANS, 700, max(1, round(height * 0.56)))
    _draw_centered(draw, left, "AVOID", font, WHITE)
    _draw_centered(draw, right, "XRAY", font, right_ink)
    return RasterFragment(image=image)


def render_square_mark(size: int) -> RasterFragment:
    """Square favicon mark, used beside the scannable code."""
    size = max(1, int(size))
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.rectangle((0, 0, size - 1, size - 1), fill=BRAND_RED)
    font = load_font(FontFamily.SANS, 700, max(1, round(size * 0.42)))
    _draw_centered(draw, (0, 0, size, size), "AX", font, WHITE)
    return RasterFragment(image=image)
