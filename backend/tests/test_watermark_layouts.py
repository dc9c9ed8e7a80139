import numpy as np
import pytest

from domain.models import BlendMode, WatermarkFields, WatermarkStyle
from services import watermark_layouts as wl

FULL = WatermarkFields(
    camera="Leica M6",
    film="Portra 400",
    username="alice",
    caption="Shot on film",
    date="Mar 9, 2024",
    show_qr=True,
    photo_url="https://avoidxray.com/photos/photo-1",
)
EMPTY = WatermarkFields()

SIZES = [(200, 150), (400, 300), (800, 600), (1600, 1200), (3200, 2400)]


def _rng():
    return np.random.default_rng(0)


def _markup(plan, name):
    overlays = plan.named(name)
    assert len(overlays) == 1, f"expected one {name!r} overlay"
    return overlays[0].fragment.markup


# ============================================
# Dispatch
# ============================================

def test_every_style_is_registered():
    for style in WatermarkStyle:
        assert wl.layout_for(style) is wl._layout_registry[style]


@pytest.mark.parametrize("style", ["vintage", "", None, "POLAROIDX"])
def test_unknown_style_falls_back_to_minimal(style):
    assert wl.layout_for(style) is wl.layout_minimal
    plan = wl.compute_layout(style, 800, 600, FULL)
    assert plan.style == WatermarkStyle.MINIMAL


def test_join_present_drops_empty_parts():
    assert wl.join_present("Leica M6", "") == "Leica M6"
    assert wl.join_present("", "Portra 400") == "Portra 400"
    assert wl.join_present("", "") == ""
    assert wl.join_present("a", "b") == "a  •  b"


# ============================================
# Minimal
# ============================================

def test_minimal_bar_floor_and_ratio():
    small = wl.layout_minimal(1000, 800, FULL)
    assert (small.width, small.height) == (1000, 800 + 90)
    large = wl.layout_minimal(3000, 2000, FULL)
    assert large.height == 2000 + 160


def test_minimal_camera_without_film_has_no_separator():
    plan = wl.layout_minimal(1000, 800, WatermarkFields(camera="Leica M6"))
    markup = _markup(plan, "info")
    assert ">Leica M6<" in markup
    assert "•" not in markup
    assert len(plan.named("brand")) == 1


def test_minimal_joins_camera_and_film():
    plan = wl.layout_minimal(1000, 800, FULL)
    assert ">Leica M6  •  Portra 400<" in _markup(plan, "info")


def test_minimal_all_off_keeps_only_brand():
    plan = wl.layout_minimal(1000, 800, EMPTY)
    names = [o.name for o in plan.overlays]
    assert names == ["photo", "brand"]


def test_minimal_brand_is_right_aligned_in_bar():
    plan = wl.layout_minimal(1000, 800, EMPTY)
    brand = plan.named("brand")[0]
    padding = round(90 * 0.4)
    assert brand.x + brand.width == 1000 - padding
    assert 800 <= brand.y and brand.y + brand.height <= plan.height


# ============================================
# Film strip
# ============================================

def test_film_strip_borders_and_photo_position():
    plan = wl.layout_film_strip(1000, 800, FULL)
    border, band = 60, 48
    assert (plan.width, plan.height) == (1000 + 2 * border, 800 + 2 * band)
    photo = plan.photo_overlay
    assert (photo.x, photo.y) == (border, band)
    assert plan.background == wl.FILM_BASE_COLOR


def test_film_strip_sprocket_count_is_floor_of_height_over_pitch():
    for w, h in SIZES:
        plan = wl.layout_film_strip(w, h, FULL)
        border = max(wl.FILM_BORDER_MIN, round(w * wl.FILM_BORDER_RATIO))
        pitch = round(border * wl.FILM_PITCH_RATIO)
        holes = plan.named("sprocket")
        assert len(holes) == 2 * (plan.height // pitch)
        # No hole is cut off at the bottom edge
        assert max(o.y + o.height for o in holes) <= plan.height
        left = [o for o in holes if o.x < border]
        right = [o for o in holes if o.x >= plan.width - border]
        assert len(left) == len(right) == plan.height // pitch
        assert all(o.x + o.width <= border for o in left)


def test_film_strip_without_username_leaves_bottom_left_blank():
    fields = WatermarkFields(film="Portra 400")
    plan = wl.layout_film_strip(1000, 800, fields)
    assert plan.named("username") == []
    assert ">avoidxray.com<" in _markup(plan, "site")
    assert ">AVOID X RAY<" in _markup(plan, "tagline")


def test_film_strip_film_is_uppercased_mono():
    plan = wl.layout_film_strip(1000, 800, FULL)
    markup = _markup(plan, "film")
    assert ">PORTRA 400<" in markup
    assert "monospace" in markup
    assert ">@alice<" in _markup(plan, "username")


def test_film_strip_all_off_keeps_permanent_markings():
    plan = wl.layout_film_strip(1000, 800, EMPTY)
    texts = {o.name for o in plan.overlays if o.fragment is not None and o.fragment.markup}
    assert texts == {"tagline", "site"}


def test_film_strip_corner_text_stays_in_bands():
    plan = wl.layout_film_strip(1000, 800, FULL)
    band = 48
    for name in ("film", "tagline"):
        o = plan.named(name)[0]
        assert 0 <= o.y and o.y + o.height <= band
    for name in ("username", "site"):
        o = plan.named(name)[0]
        assert plan.height - band <= o.y and o.y + o.height <= plan.height
    right_edge = plan.width - 60 - round(60 * 0.3)
    assert plan.named("site")[0].x + plan.named("site")[0].width == right_edge


# ============================================
# Polaroid
# ============================================

def test_polaroid_margins():
    plan = wl.layout_polaroid(1000, 800, FULL, _rng())
    side, bottom = 45, 160
    assert (plan.width, plan.height) == (1000 + 2 * side, 800 + side + bottom)
    photo = plan.photo_overlay
    assert (photo.x, photo.y) == (side, side)


def test_polaroid_draw_order_texture_shadow_photo_then_marks():
    plan = wl.layout_polaroid(1000, 800, FULL, _rng())
    names = [o.name for o in plan.overlays]
    assert names[:3] == ["texture", "shadow", "photo"]
    texture = plan.overlays[0]
    assert texture.tile is True
    assert texture.blend == BlendMode.MULTIPLY
    shadow = plan.overlays[1]
    photo = plan.overlays[2]
    assert shadow.x < photo.x and shadow.y < photo.y
    assert shadow.x + shadow.width > photo.x + photo.width


def test_polaroid_code_matches_stacked_text_height():
    plan = wl.layout_polaroid(1000, 800, FULL, _rng())
    bottom = 160
    base = round(bottom * 0.18)
    line_spacing = round(base * 1.35)

    caption = plan.named("caption")[0]
    metadata = plan.named("metadata")[0]
    user_date = plan.named("user_date")[0]
    assert metadata.y - caption.y == line_spacing
    assert caption.y < metadata.y < user_date.y

    code = plan.named("code")[0]
    brand = plan.named("brand")[0]
    assert code.height == code.width == base + 2 * line_spacing
    assert brand.height == code.height
    assert code.x + code.width == 45 + 1000
    assert brand.x + brand.width < code.x
    assert code.y == brand.y == caption.y == 800 + 45 + round(bottom * 0.12)


def test_polaroid_code_height_tracks_line_count():
    fields = WatermarkFields(caption="Shot on film", show_qr=True, photo_url="https://x.test/photos/1")
    plan = wl.layout_polaroid(1000, 800, fields, _rng())
    assert plan.named("code")[0].height == round(160 * 0.18)
    assert plan.named("metadata") == []
    assert plan.named("user_date") == []


def test_polaroid_without_code_anchors_wordmark_bottom_right():
    fields = WatermarkFields(camera="Leica M6", username="alice")
    plan = wl.layout_polaroid(1000, 800, fields, _rng())
    assert plan.named("code") == []
    brand = plan.named("brand")[0]
    padding = round(160 * 0.12)
    assert brand.x + brand.width == 45 + 1000
    assert brand.y + brand.height == plan.height - padding
    assert brand.height == round(160 * 0.24)
    assert ">@alice<" in _markup(plan, "user_date")
    assert ">Leica M6<" in _markup(plan, "metadata")


def test_polaroid_lines_skip_missing_fields():
    fields = WatermarkFields(film="Portra 400", date="Mar 9, 2024")
    plan = wl.layout_polaroid(1000, 800, fields, _rng())
    assert plan.named("caption") == []
    assert ">Portra 400<" in _markup(plan, "metadata")
    assert ">Mar 9, 2024<" in _markup(plan, "user_date")
    # First present line takes the top slot
    assert plan.named("metadata")[0].y == 800 + 45 + round(160 * 0.12)


def test_polaroid_all_off_keeps_brand():
    plan = wl.layout_polaroid(1000, 800, EMPTY, _rng())
    names = [o.name for o in plan.overlays]
    assert names == ["texture", "shadow", "photo", "brand"]


def test_polaroid_line_tones_and_metadata_advance():
    plan = wl.layout_polaroid(1000, 800, FULL, _rng())
    meta_size = round(round(160 * 0.18) * 0.85)
    metadata = plan.named("metadata")[0]
    user_date = plan.named("user_date")[0]
    assert user_date.y - metadata.y == round(meta_size * wl.POLAROID_META_ADVANCE)
    assert f'fill="{wl.POLAROID_CAPTION_COLOR}"' in _markup(plan, "caption")
    assert f'fill="{wl.POLAROID_META_COLOR}"' in _markup(plan, "metadata")
    assert f'fill="{wl.POLAROID_USER_COLOR}"' in _markup(plan, "user_date")


@pytest.mark.parametrize("w, h", [(150, 800), (100, 100), (300, 2400), (120, 90)])
def test_polaroid_narrow_source_keeps_marks_inside_photo_edges(w, h):
    plan = wl.layout_polaroid(w, h, FULL, _rng())
    side = plan.photo_overlay.x
    brand = plan.named("brand")[0]
    code = plan.named("code")[0]
    assert brand.x >= side
    assert brand.x + brand.width < code.x
    assert code.x + code.width == side + w
    assert brand.height == code.height > 1
    for name in ("caption", "metadata", "user_date"):
        line = plan.named(name)[0]
        assert line.x == side
        assert line.width > 1
        assert line.x + line.width <= brand.x


def test_polaroid_narrow_source_without_code_shrinks_wordmark():
    fields = WatermarkFields(caption="Shot on film", camera="Leica M6")
    plan = wl.layout_polaroid(150, 800, fields, _rng())
    side = plan.photo_overlay.x
    brand = plan.named("brand")[0]
    assert brand.x >= side + 150 // 2
    assert brand.x + brand.width == side + 150
    assert plan.named("caption")[0].width > 1


# ============================================
# Shared properties
# ============================================

@pytest.mark.parametrize("style", list(WatermarkStyle))
@pytest.mark.parametrize("fields", [FULL, EMPTY])
def test_overlays_stay_on_canvas(style, fields):
    for w, h in [(800, 600), (1000, 800), (1600, 1200), (600, 900), (150, 800), (100, 100), (300, 2400), (120, 90)]:
        plan = wl.compute_layout(style, w, h, fields, _rng())
        assert plan.overflowing() == []


@pytest.mark.parametrize("style", list(WatermarkStyle))
def test_allowances_never_shrink_as_source_grows(style):
    previous = None
    for w, h in SIZES:
        plan = wl.compute_layout(style, w, h, FULL, _rng())
        extra = (plan.width - w, plan.height - h)
        assert plan.width >= w and plan.height >= h
        if previous is not None:
            assert extra[0] >= previous[0]
            assert extra[1] >= previous[1]
        previous = extra
