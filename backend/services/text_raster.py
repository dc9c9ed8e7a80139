"""
Text rasterizer.

Turns a string plus typographic parameters into a transparent RGBA fragment.
The fragment box is sized before drawing (caller width or a character-count
estimate), the tracked glyph run is measured, then positioned against the
left/center/right anchor on a common baseline.
"""
import math
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from domain.models import FontFamily, RasterFragment, TextAlign
from settings import settings

Color = Union[str, Tuple[int, int, int], Tuple[int, int, int, int]]

WIDTH_FACTOR = 0.7
HEIGHT_FACTOR = 1.4
BASELINE_FACTOR = 1.05
BOLD_WEIGHT = 600

# (family, bold) -> candidate font files, first loadable wins
FONT_CANDIDATES: Dict[Tuple[FontFamily, bool], Sequence[str]] = {
    (FontFamily.SANS, False): (
        "HelveticaNeue.ttf",
        "Arial.ttf",
        "DejaVuSans.ttf",
        "LiberationSans-Regular.ttf",
    ),
    (FontFamily.SANS, True): (
        "HelveticaNeue-Bold.ttf",
        "Arial Bold.ttf",
        "DejaVuSans-Bold.ttf",
        "LiberationSans-Bold.ttf",
    ),
    (FontFamily.HANDWRITTEN, False): (
        "Kalam-Regular.ttf",
        "Pacifico-Regular.ttf",
        "DejaVuSans-Oblique.ttf",
    ),
    (FontFamily.HANDWRITTEN, True): (
        "Kalam-Bold.ttf",
        "Pacifico-Regular.ttf",
        "DejaVuSans-BoldOblique.ttf",
    ),
    (FontFamily.MONO, False): (
        "Courier New.ttf",
        "cour.ttf",
        "DejaVuSansMono.ttf",
        "LiberationMono-Regular.ttf",
    ),
    (FontFamily.MONO, True): (
        "Courier New Bold.ttf",
        "courbd.ttf",
        "DejaVuSansMono-Bold.ttf",
        "LiberationMono-Bold.ttf",
    ),
}

# CSS font stacks used in the fragment markup
CSS_FAMILIES: Dict[FontFamily, str] = {
    FontFamily.SANS: "'Helvetica Neue', 'Arial', sans-serif",
    FontFamily.HANDWRITTEN: "'Kalam', cursive",
    FontFamily.MONO: "'Courier New', 'Courier', monospace",
}

_SVG_ANCHORS = {
    TextAlign.LEFT: "start",
    TextAlign.CENTER: "middle",
    TextAlign.RIGHT: "end",
}


def escape_markup(text: str) -> str:
    """Escape characters that would break an XML text node or attribute."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def printable(text: Optional[str]) -> str:
    """Drop control characters; they have no glyphs and some break font lookups."""
    return "".join(ch for ch in (text or "") if ch.isprintable())


def fragment_size(text: str, font_size: int, width: Optional[int] = None) -> Tuple[int, int]:
    """Box size for a text fragment: caller width or a char-count estimate."""
    if width is None:
        width = math.ceil(len(text) * font_size * WIDTH_FACTOR)
    height = math.ceil(font_size * HEIGHT_FACTOR)
    return max(1, int(width)), max(1, int(height))


def anchor_x(align: TextAlign, width: int) -> float:
    if align == TextAlign.CENTER:
        return width / 2
    if align == TextAlign.RIGHT:
        return float(width)
    return 0.0


def text_markup(
    text: str,
    font_size: int,
    color: Color,
    weight: int = 400,
    letter_spacing: float = 0,
    align: TextAlign = TextAlign.LEFT,
    width: Optional[int] = None,
    font_family: FontFamily = FontFamily.SANS,
) -> str:
    """SVG document describing the same text box the rasterizer draws."""
    align = TextAlign(align)
    font_family = FontFamily(font_family)
    box_w, box_h = fragment_size(text, font_size, width)
    fill = color if isinstance(color, str) else "rgb({},{},{})".format(*color[:3])
    return (
        f'<svg width="{box_w}" height="{box_h}" xmlns="http://www.w3.org/2000/svg">'
        f'<text x="{anchor_x(align, box_w):g}" y="{font_size * BASELINE_FACTOR:g}" '
        f'font-size="{font_size}" font-weight="{weight}" fill="{fill}" '
        f'text-anchor="{_SVG_ANCHORS[align]}" letter-spacing="{letter_spacing:g}" '
        f'font-family="{escape_markup(CSS_FAMILIES[font_family])}">{escape_markup(text)}</text>'
        f"</svg>"
    )


@lru_cache(maxsize=128)
def _load_font(family: FontFamily, bold: bool, size: int, fonts_dir: Optional[str]):
    for name in FONT_CANDIDATES[(family, bold)]:
        paths = [str(Path(fonts_dir) / name)] if fonts_dir else []
        paths.append(name)
        for path in paths:
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


def load_font(font_family: FontFamily, weight: int, size: int):
    """Pure lookup from family and weight to a loaded font of ``size`` px."""
    return _load_font(FontFamily(font_family), weight >= BOLD_WEIGHT, max(1, int(size)), settings.WATERMARK_FONTS_DIR)


def measure_run(text: str, font, letter_spacing: float = 0) -> float:
    """Width of ``text`` with tracking applied between glyphs."""
    if not text:
        return 0.0
    advances = sum(font.getlength(ch) for ch in text)
    return advances + letter_spacing * (len(text) - 1)


def render_text(
    text: str,
    font_size: int,
    color: Color,
    weight: int = 400,
    letter_spacing: float = 0,
    align: Union[TextAlign, str] = TextAlign.LEFT,
    width: Optional[int] = None,
    font_family: Union[FontFamily, str] = FontFamily.SANS,
) -> RasterFragment:
    """
    Rasterize ``text`` into a transparent fragment.

    Args:
        text: Text to draw. Anything is accepted; unsupported glyphs just
            render as the font's fallback shape.
        font_size: Font size in px.
        color: Fill colour (hex string or RGB/RGBA tuple).
        weight: CSS-style weight; >= 600 selects the bold face.
        letter_spacing: Extra px between glyphs.
        align: Anchor of the run inside the box.
        width: Box width; defaults to an estimate from the character count.
        font_family: One of the three supported families.

    Returns:
        RasterFragment of ``width`` x ``ceil(font_size * 1.4)``.
    """
    align = TextAlign(align)
    font_family = FontFamily(font_family)
    text = printable(text)
    box_w, box_h = fragment_size(text, font_size, width)
    image = Image.new("RGBA", (box_w, box_h), (0, 0, 0, 0))
    markup = text_markup(text, font_size, color, weight, letter_spacing, align, box_w, font_family)
    if not text:
        return RasterFragment(image=image, markup=markup)

    font = load_font(font_family, weight, font_size)
    run = measure_run(text, font, letter_spacing)
    x = anchor_x(align, box_w)
    if align == TextAlign.CENTER:
        x -= run / 2
    elif align == TextAlign.RIGHT:
        x -= run
    baseline = font_size * BASELINE_FACTOR

    draw = ImageDraw.Draw(image)
    scalable = isinstance(font, ImageFont.FreeTypeFont)
    for ch in text:
        if scalable:
            draw.text((x, baseline), ch, font=font, fill=color, anchor="ls")
        else:
            draw.text((x, baseline - font_size), ch, font=font, fill=color)
        x += font.getlength(ch) + letter_spacing
    return RasterFragment(image=image, markup=markup)
