import pytest

from riseadmin.crop.geometry import ViewState
from riseadmin.crop.model import CropSelectorModel
from riseadmin.errors import InvalidCropRegionError


def _assert_inside(region, image_size):
    width, height = image_size
    assert region.offset_x >= -1e-6
    assert region.offset_y >= -1e-6
    assert region.offset_x + region.width <= width + 1e-6
    assert region.offset_y + region.height <= height + 1e-6


def test_initial_region_covers_whole_four_by_three_image():
    model = CropSelectorModel((1600, 1200))

    region = model.crop_region()

    assert region.offset_x == pytest.approx(0.0)
    assert region.offset_y == pytest.approx(0.0)
    assert region.width == pytest.approx(1600.0)
    assert region.height == pytest.approx(1200.0)


def test_wide_image_is_centred_at_four_by_three():
    model = CropSelectorModel((2000, 1000))

    region = model.crop_region()

    assert region.aspect_ratio == pytest.approx(4 / 3)
    assert region.height == pytest.approx(1000.0)
    assert region.offset_x == pytest.approx(1000.0 - region.width / 2)
    assert region.offset_y == pytest.approx(0.0)


def test_tall_image_in_small_viewport():
    model = CropSelectorModel((900, 1600), viewport_size=(800, 600))

    region = model.crop_region()

    assert model.base_scale() == pytest.approx(0.375)
    assert region.width == pytest.approx(900.0)
    assert region.height == pytest.approx(675.0)
    assert region.offset_y == pytest.approx(462.5)


def test_zoom_shrinks_region_about_centre():
    model = CropSelectorModel((1600, 1200))

    model.set_zoom(2.0)
    region = model.crop_region()

    assert region.width == pytest.approx(800.0)
    assert region.height == pytest.approx(600.0)
    assert region.offset_x == pytest.approx(400.0)
    assert region.offset_y == pytest.approx(300.0)


def test_zoom_is_clamped_to_supported_range():
    model = CropSelectorModel((1600, 1200))

    model.set_zoom(10.0)
    assert model.zoom == pytest.approx(3.0)
    model.set_zoom(0.1)
    assert model.zoom == pytest.approx(1.0)
    model.zoom_by(0.5)
    assert model.zoom == pytest.approx(1.5)


def test_zoom_keeps_anchor_point_fixed():
    model = CropSelectorModel((1600, 1200))

    # The view point 400px right of centre shows source x=1200 at zoom 1.
    model.set_zoom(2.0, anchor=(400.0, 0.0))

    region = model.crop_region()
    assert model.view_state.offset_x == pytest.approx(-400.0)
    assert region.offset_x == pytest.approx(600.0)
    left, _, shown_w, _ = model.image_rect()
    assert (1200.0 - left) / shown_w * 1600 == pytest.approx(1200.0)


def test_pan_moves_region_opposite_to_drag():
    model = CropSelectorModel((1600, 1200))
    model.set_zoom(2.0)

    model.pan(100.0, -60.0)

    region = model.crop_region()
    assert region.offset_x == pytest.approx(350.0)
    assert region.offset_y == pytest.approx(330.0)


def test_pan_is_clamped_to_image_edges():
    model = CropSelectorModel((1600, 1200))
    model.set_zoom(2.0)

    model.pan(10_000.0, 10_000.0)
    region = model.crop_region()
    assert region.offset_x == pytest.approx(0.0)
    assert region.offset_y == pytest.approx(0.0)

    model.pan(-50_000.0, -50_000.0)
    region = model.crop_region()
    assert region.offset_x + region.width == pytest.approx(1600.0)
    assert region.offset_y + region.height == pytest.approx(1200.0)


def test_pan_at_minimum_zoom_is_a_no_op_for_matching_aspect():
    seen = []
    model = CropSelectorModel((1600, 1200), on_region_changed=seen.append)

    model.pan(40.0, 40.0)

    assert seen == []
    assert model.view_state.offset_x == 0.0


@pytest.mark.parametrize(
    "image_size, viewport",
    [((1600, 1200), None), ((3000, 1000), (900, 500)), ((640, 1280), (720, 480)), ((333, 777), (501, 389))],
)
def test_aspect_and_bounds_hold_through_interaction(image_size, viewport):
    model = CropSelectorModel(image_size, viewport_size=viewport)

    steps = [
        lambda: model.set_zoom(1.7, anchor=(35.0, -20.0)),
        lambda: model.pan(-240.0, 130.0),
        lambda: model.zoom_by(1.0, anchor=(-300.0, 200.0)),
        lambda: model.pan(5000.0, -5000.0),
        lambda: model.set_viewport_size(1280.0, 720.0),
        lambda: model.set_zoom(1.0),
    ]
    for step in steps:
        step()
        region = model.crop_region()
        assert region.aspect_ratio == pytest.approx(4 / 3, rel=1e-6)
        _assert_inside(region, image_size)


def test_resize_keeps_selected_region():
    model = CropSelectorModel((1600, 1200))
    model.set_zoom(2.0)
    model.pan(120.0, 80.0)
    before = model.crop_region()

    model.set_viewport_size(800.0, 600.0)

    after = model.crop_region()
    assert after.offset_x == pytest.approx(before.offset_x)
    assert after.offset_y == pytest.approx(before.offset_y)
    assert after.width == pytest.approx(before.width)


def test_invalid_viewport_falls_back_to_image_size():
    model = CropSelectorModel((1600, 1200), viewport_size=(0, 0))

    assert model.viewport_size == (1600.0, 1200.0)


def test_region_changed_callback_and_snapshots():
    seen = []
    model = CropSelectorModel((1600, 1200), on_region_changed=seen.append)
    snapshot = model.snapshot()

    model.set_zoom(2.5)
    model.pan(30.0, 0.0)

    assert len(seen) == 2
    assert seen[-1] == model.crop_region()
    assert model.has_changed(snapshot)

    model.restore(snapshot)
    assert not model.has_changed(snapshot)
    assert model.crop_region().width == pytest.approx(1600.0)


def test_set_view_state_clamps_zoom():
    model = CropSelectorModel((1600, 1200))

    model.set_view_state(ViewState(offset_x=0.0, offset_y=0.0, zoom=5.0))

    assert model.zoom == pytest.approx(3.0)
    model.reset()
    assert model.zoom == pytest.approx(1.0)


def test_image_without_pixels_is_rejected():
    with pytest.raises(InvalidCropRegionError):
        CropSelectorModel((0, 600))
