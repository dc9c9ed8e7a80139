"""
Procedural paper-grain tile.

Each pixel is the off-white paper base shifted by one shared offset for all
three channels, so the grain reads as warm grey variation rather than colour
speckle. The tile is meant to be repeated across a canvas, never stretched.
"""
from typing import Optional

import numpy as np
from PIL import Image

from domain.models import RasterFragment

TEXTURE_SIZE = 200
PAPER_BASE = (250, 248, 245)
NOISE_AMPLITUDE = 4
GRAIN_ALPHA = 6


def generate_paper_texture(
    size: int = TEXTURE_SIZE,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> RasterFragment:
    """Build a square RGBA noise tile; pass ``rng`` or ``seed`` for repeatable output."""
    if rng is None:
        rng = np.random.default_rng(seed)
    offsets = rng.integers(-NOISE_AMPLITUDE, NOISE_AMPLITUDE, size=(size, size), endpoint=True)

    pixels = np.empty((size, size, 4), dtype=np.int16)
    for channel, base in enumerate(PAPER_BASE):
        pixels[..., channel] = base + offsets
    pixels[..., 3] = GRAIN_ALPHA
    pixels = np.clip(pixels, 0, 255).astype(np.uint8)
    return RasterFragment(image=Image.fromarray(pixels))
