"""Tests for the capture-then-crop export pipeline."""

import io
from dataclasses import replace

import pytest
from PIL import Image

from assetstudio.core.catalog import TargetSize
from assetstudio.services import storyboard
from assetstudio.services.compositor import BoardSurface
from assetstudio.services.export import (
    capture_and_crop_panels,
    capture_board,
    crop_panels,
    panel_filename,
)

SMALL_TARGET = TargetSize(id="small", name="Small", width=120, height=260)


@pytest.fixture()
def state():
    return replace(storyboard.initial_state(), size=SMALL_TARGET)


class TestPanelFilename:
    def test_single(self):
        assert panel_filename(0, "iphone-6.7") == "screenshot-1-iphone-6.7.png"

    def test_namespaced_by_language(self):
        assert panel_filename(2, "ipad-12.9", "fr") == "fr/screenshot-3-ipad-12.9.png"


class TestCaptureBoard:
    def test_no_surface(self):
        assert capture_board(None, SMALL_TARGET) is None

    @pytest.mark.parametrize("display_scale", [0.35, 1.0, 1.7])
    def test_raster_height_matches_target(self, state, display_scale):
        raster = capture_board(BoardSurface(state, display_scale=display_scale), SMALL_TARGET)
        assert raster.height == SMALL_TARGET.height
        assert abs(raster.width - SMALL_TARGET.width * state.panel_count) <= 1


class TestCropPanels:
    def test_odd_raster_width_still_yields_exact_sizes(self):
        raster = Image.new("RGBA", (361, 260), (10, 20, 30, 255))
        panels = crop_panels(raster, SMALL_TARGET, 3)
        assert [panel.size for panel in panels] == [(120, 260)] * 3

    def test_panels_take_their_own_slice(self):
        raster = Image.new("RGB", (300, 100))
        for index, color in enumerate([(255, 0, 0), (0, 255, 0), (0, 0, 255)]):
            raster.paste(color, (index * 100, 0, index * 100 + 100, 100))
        target = TargetSize(id="square", name="Square", width=100, height=100)
        panels = crop_panels(raster, target, 3)
        assert [panel.getpixel((50, 50)) for panel in panels] == [(255, 0, 0), (0, 255, 0), (0, 0, 255)]


class TestCaptureAndCropPanels:
    @pytest.mark.parametrize("display_scale", [0.5, 1.0, 1.25])
    def test_every_panel_has_exact_target_size(self, state, display_scale):
        surface = BoardSurface(state, display_scale=display_scale)
        panels = capture_and_crop_panels(surface, SMALL_TARGET, state.panel_count)

        assert len(panels) == 3
        for index, panel in enumerate(panels):
            decoded = Image.open(io.BytesIO(panel.data))
            assert decoded.format == "PNG"
            assert decoded.size == (SMALL_TARGET.width, SMALL_TARGET.height)
            assert (panel.width, panel.height) == decoded.size
            assert panel.name == f"screenshot-{index + 1}-small.png"

    def test_no_surface_exports_nothing(self):
        assert capture_and_crop_panels(None, SMALL_TARGET, 3) == []

    def test_language_namespacing(self, state):
        panels = capture_and_crop_panels(BoardSurface(state), SMALL_TARGET, 3, language="ja", mode="batch")
        assert [panel.name for panel in panels] == [
            "ja/screenshot-1-small.png",
            "ja/screenshot-2-small.png",
            "ja/screenshot-3-small.png",
        ]
        assert all(panel.language == "ja" for panel in panels)
