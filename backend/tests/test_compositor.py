import pytest
from PIL import Image

from domain.models import BlendMode, LayoutPlan, Overlay, RasterFragment, WatermarkStyle
from services.compositor import composite, tile_fragment


def _solid(w, h, rgba):
    return RasterFragment(image=Image.new("RGBA", (w, h), rgba))


def _plan(overlays, size=(50, 50), background=(10, 20, 30)):
    return LayoutPlan(WatermarkStyle.MINIMAL, size[0], size[1], background, list(overlays))


def _photo(size=(20, 20), color=(0, 200, 0)):
    return Image.new("RGB", size, color)


def test_background_fills_canvas():
    out = composite(_plan([]), _photo())
    assert out.mode == "RGB"
    assert out.size == (50, 50)
    assert out.getpixel((49, 49)) == (10, 20, 30)


def test_later_overlays_draw_on_top():
    red = Overlay(_solid(10, 10, (255, 0, 0, 255)), 5, 5)
    blue = Overlay(_solid(10, 10, (0, 0, 255, 255)), 10, 10)
    out = composite(_plan([red, blue]), _photo())
    assert out.getpixel((12, 12)) == (0, 0, 255)
    assert out.getpixel((6, 6)) == (255, 0, 0)

    out = composite(_plan([blue, red]), _photo())
    assert out.getpixel((12, 12)) == (255, 0, 0)


def test_photo_placeholder_is_replaced_by_photo():
    photo_overlay = Overlay(None, 15, 15, width=20, height=20, name="photo")
    text = Overlay(_solid(5, 5, (255, 255, 255, 255)), 20, 20)
    out = composite(_plan([photo_overlay, text]), _photo())
    assert out.getpixel((16, 16)) == (0, 200, 0)
    assert out.getpixel((22, 22)) == (255, 255, 255)
    assert out.getpixel((5, 5)) == (10, 20, 30)


def test_shadow_under_photo_is_hidden_by_it():
    shadow = Overlay(_solid(30, 30, (0, 0, 0, 255)), 10, 10, name="shadow")
    photo_overlay = Overlay(None, 15, 15, width=20, height=20, name="photo")
    out = composite(_plan([shadow, photo_overlay]), _photo())
    assert out.getpixel((20, 20)) == (0, 200, 0)
    assert out.getpixel((12, 12)) == (0, 0, 0)


def test_photo_size_mismatch_raises():
    photo_overlay = Overlay(None, 0, 0, width=30, height=30, name="photo")
    with pytest.raises(ValueError):
        composite(_plan([photo_overlay]), _photo())


def test_tile_repeats_without_stretching():
    tile = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
    tile.putpixel((0, 0), (255, 0, 0, 255))
    tiled = tile_fragment(tile, (35, 25))
    assert tiled.size == (35, 25)
    for x, y in [(0, 0), (10, 0), (30, 20), (20, 10)]:
        assert tiled.getpixel((x, y)) == (255, 0, 0, 255)
    assert tiled.getpixel((5, 5))[3] == 0


def test_multiply_blend_darkens_by_alpha():
    plan = _plan(
        [Overlay(_solid(10, 10, (128, 128, 128, 255)), 0, 0, tile=True, blend=BlendMode.MULTIPLY)],
        background=(200, 200, 200),
    )
    out = composite(plan, _photo())
    r, g, b = out.getpixel((44, 44))
    assert r == pytest.approx(200 * 128 / 255, abs=1)

    faint = _plan(
        [Overlay(_solid(10, 10, (128, 128, 128, 0)), 0, 0, tile=True, blend=BlendMode.MULTIPLY)],
        background=(200, 200, 200),
    )
    assert composite(faint, _photo()).getpixel((44, 44)) == (200, 200, 200)


def test_partially_offscreen_overlay_is_clipped():
    out = composite(_plan([Overlay(_solid(10, 10, (255, 0, 0, 255)), -5, 45)]), _photo())
    assert out.getpixel((0, 49)) == (255, 0, 0)
    assert out.getpixel((6, 49)) == (10, 20, 30)
