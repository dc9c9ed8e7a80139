"""
Scannable code generator.

Encodes a URL as a QR matrix and draws it at an exact pixel size so it can
be matched to the height of the surrounding text block.
"""
from typing import List, Tuple

import qrcode
from PIL import Image, ImageDraw

from domain.models import RasterFragment

CODE_DARK = (42, 42, 42)
CODE_LIGHT = (250, 248, 245)


def code_matrix(url: str) -> List[List[bool]]:
    """QR modules for ``url`` with no quiet zone."""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=1,
        border=0,
    )
    qr.add_data(url)
    qr.make(fit=True)
    return [[bool(v) for v in row] for row in qr.get_matrix()]


def render_scannable_code(
    url: str,
    size: int,
    dark: Tuple[int, int, int] = CODE_DARK,
    light: Tuple[int, int, int] = CODE_LIGHT,
) -> RasterFragment:
    """Draw the code for ``url`` as an opaque ``size`` x ``size`` fragment."""
    size = max(1, int(size))
    matrix = code_matrix(url)
    modules = len(matrix)

    grid = Image.new("RGBA", (modules, modules), light + (255,))
    draw = ImageDraw.Draw(grid)
    for r, row in enumerate(matrix):
        for c, dark_module in enumerate(row):
            if dark_module:
                draw.point((c, r), fill=dark + (255,))
    # Nearest keeps module edges hard at any target size
    return RasterFragment(image=grid.resize((size, size), Image.Resampling.NEAREST))
