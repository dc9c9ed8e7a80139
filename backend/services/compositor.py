"""
Compositor.

Draws a LayoutPlan onto one canvas. Overlays are drawn strictly in list
order, so list order is z-order; nothing is sorted or re-layered here.
"""
from typing import Optional, Tuple

from PIL import Image, ImageChops

from domain.models import BlendMode, LayoutPlan, Overlay


def tile_fragment(tile: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Repeat ``tile`` across ``size`` (no stretching)."""
    out = Image.new("RGBA", size, (0, 0, 0, 0))
    tw, th = tile.size
    for y in range(0, size[1], th):
        for x in range(0, size[0], tw):
            out.paste(tile, (x, y))
    return out


def _clip(image: Image.Image, x: int, y: int, size: Tuple[int, int]) -> Optional[Tuple[Image.Image, Tuple[int, int]]]:
    """Crop ``image`` placed at (x, y) to the canvas; None if fully outside."""
    left, top = max(0, x), max(0, y)
    right, bottom = min(size[0], x + image.width), min(size[1], y + image.height)
    if right <= left or bottom <= top:
        return None
    if (left, top, right, bottom) != (x, y, x + image.width, y + image.height):
        image = image.crop((left - x, top - y, right - x, bottom - y))
    return image, (left, top)


def _multiply(canvas: Image.Image, layer: Image.Image, dest: Tuple[int, int]) -> None:
    """Multiply ``layer`` into ``canvas``, weighted by the layer's alpha."""
    box = (dest[0], dest[1], dest[0] + layer.width, dest[1] + layer.height)
    region = canvas.crop(box).convert("RGB")
    multiplied = ImageChops.multiply(region, layer.convert("RGB"))
    mixed = Image.composite(multiplied, region, layer.getchannel("A"))
    canvas.paste(mixed, box)


def draw_overlay(canvas: Image.Image, overlay: Overlay, photo: Image.Image) -> None:
    if overlay.is_photo:
        if photo.size != (overlay.width, overlay.height):
            raise ValueError(
                f"Photo is {photo.size[0]}x{photo.size[1]}, layout expects {overlay.width}x{overlay.height}"
            )
        layer = photo.convert("RGBA")
        x, y = overlay.x, overlay.y
    elif overlay.tile:
        layer = tile_fragment(overlay.fragment.image, canvas.size)
        x, y = 0, 0
    else:
        layer = overlay.fragment.image
        x, y = overlay.x, overlay.y

    clipped = _clip(layer, x, y, canvas.size)
    if clipped is None:
        return
    layer, dest = clipped
    if overlay.blend == BlendMode.MULTIPLY:
        _multiply(canvas, layer, dest)
    else:
        canvas.alpha_composite(layer, dest=dest)


def composite(plan: LayoutPlan, photo: Image.Image) -> Image.Image:
    """
    Merge ``plan`` into a single RGB image.

    Args:
        plan: Canvas size, background and overlays (back to front).
        photo: Decoded source photo, sized as the plan's photo overlay.

    Returns:
        RGB image of the plan's canvas size.
    """
    canvas = Image.new("RGBA", (plan.width, plan.height), tuple(plan.background) + (255,))
    for overlay in plan.overlays:
        draw_overlay(canvas, overlay, photo)
    return canvas.convert("RGB")
