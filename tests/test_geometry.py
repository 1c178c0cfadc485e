"""Tests for board layout and crop arithmetic."""

import pytest
from hypothesis import given, strategies as st, settings

from assetstudio.core.catalog import get_target_size
from assetstudio.services.geometry import (
    FRAME_TOP,
    aspect_fit,
    compute_board_layout,
    frame_ids,
    panel_bounds,
    screen_rect,
)


class TestComputeBoardLayout:
    def test_three_panels_for_iphone(self):
        size = get_target_size("iphone-6.7")
        layout = compute_board_layout(940, 3, size.aspect_ratio, 620)

        assert layout.panel_width == pytest.approx(940 * 1284 / 2778)
        assert layout.board_width == pytest.approx(layout.panel_width * 3)
        assert layout.device_width == round(620 * 1284 / 2778)
        assert [frame.id for frame in layout.frames] == ["frame-1", "frame-2", "frame-3"]

    def test_frames_are_centered_in_their_panels(self):
        layout = compute_board_layout(940, 3, 0.5, 620)
        for frame in layout.frames:
            panel = layout.panel_rect(frame.index)
            left_gap = frame.x - panel.x
            right_gap = panel.right - frame.right
            assert left_gap == pytest.approx(right_gap)
            assert frame.y == FRAME_TOP

    def test_divider_positions_sit_between_panels(self):
        layout = compute_board_layout(1000, 4, 0.5, 600)
        assert layout.divider_positions() == [500, 1000, 1500]

    def test_frame_lookup(self):
        layout = compute_board_layout(940, 3, 0.5, 620)
        assert layout.frame("frame-2").index == 1
        assert layout.frame("frame-9") is None

    @pytest.mark.parametrize("panel_count", [0, -1])
    def test_rejects_empty_board(self, panel_count):
        with pytest.raises(ValueError):
            compute_board_layout(940, panel_count, 0.5, 620)

    def test_screen_is_inset_inside_device(self):
        layout = compute_board_layout(940, 3, 0.5, 620)
        frame = layout.frames[0]
        screen = screen_rect(frame)
        assert screen.x == frame.x + 18
        assert screen.width == frame.width - 36


def test_frame_ids():
    assert frame_ids(2) == ["frame-1", "frame-2"]


class TestPanelBounds:
    def test_first_and_last_boundaries(self):
        assert panel_bounds(0, 3, 3852)[0] == 0
        assert panel_bounds(2, 3, 3852)[1] == 3852

    def test_adjacent_panels_share_a_boundary(self):
        for i in range(4):
            assert panel_bounds(i, 5, 1001)[1] == panel_bounds(i + 1, 5, 1001)[0]


@pytest.mark.property
class TestCropArithmetic:
    @given(
        panel_count=st.integers(min_value=1, max_value=12),
        raster_width=st.integers(min_value=1, max_value=20000),
    )
    @settings(max_examples=200, deadline=None)
    def test_crop_widths_sum_to_raster_width(self, panel_count, raster_width):
        widths = [end - start for start, end in (panel_bounds(i, panel_count, raster_width) for i in range(panel_count))]
        assert sum(widths) == raster_width
        assert all(width >= 0 for width in widths)

    @given(
        width=st.integers(min_value=10, max_value=4000),
        height=st.integers(min_value=10, max_value=4000),
        target_aspect=st.floats(min_value=0.2, max_value=3.0),
    )
    @settings(max_examples=100, deadline=None)
    def test_aspect_fit_stays_inside_the_slice(self, width, height, target_aspect):
        left, top, fit_w, fit_h = aspect_fit(100, width, height, target_aspect)
        assert 100 <= left
        assert left + fit_w <= 100 + width + 1
        assert 0 <= top
        assert top + fit_h <= height + 1


class TestAspectFit:
    def test_wide_slice_trims_width_symmetrically(self):
        assert aspect_fit(0, 200, 100, 1.0) == (50, 0, 100, 100)

    def test_tall_slice_trims_height_symmetrically(self):
        assert aspect_fit(10, 100, 300, 1.0) == (10, 100, 100, 100)

    def test_matching_slice_is_untouched(self):
        assert aspect_fit(30, 50, 100, 0.5) == (30, 0, 50, 100)
