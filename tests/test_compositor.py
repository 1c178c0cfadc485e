"""Tests for scene composition and rasterization."""

from dataclasses import replace

import pytest
from PIL import Image, ImageChops

from assetstudio.core.catalog import TargetSize
from assetstudio.services import storyboard
from assetstudio.services.compositor import (
    BoardSurface,
    build_scene,
    hex_to_rgba,
    linear_gradient,
    resolve_layer_text,
)

GUIDE_KINDS = {"selection_ring", "divider", "text_outline", "resize_handle", "hint"}


@pytest.fixture()
def state():
    return storyboard.initial_state()


@pytest.fixture()
def tiny_state(state):
    return replace(state, size=TargetSize(id="tiny", name="Tiny", width=40, height=80))


class TestBuildScene:
    def test_guides_are_export_excluded(self, state):
        scene = build_scene(state)
        excluded = {node.kind for node in scene.nodes if node.export_excluded}
        assert excluded == GUIDE_KINDS
        assert not any(node.export_excluded for node in scene.visible_nodes(include_excluded=False))

    def test_one_device_per_frame(self, state):
        devices = [node for node in build_scene(state).nodes if node.kind == "device"]
        assert [node.props["frame_id"] for node in devices] == state.frame_ids

    def test_device_offset_moves_device(self, state):
        moved = storyboard.set_device_offset(state, "frame-1", 25, -10)
        before = next(node for node in build_scene(state).nodes if node.kind == "device")
        after = next(node for node in build_scene(moved).nodes if node.kind == "device")
        assert after.rect.x == before.rect.x + 25
        assert after.rect.y == before.rect.y - 10

    def test_two_dividers_for_three_panels(self, state):
        labels = [node.props["label"] for node in build_scene(state).nodes if node.kind == "divider"]
        assert labels == ["1 | 2", "2 | 3"]

    def test_panorama_replaces_gradient(self, state):
        state = storyboard.set_panorama(state, "asset-pano")
        state = storyboard.set_panorama_transform(state, scale=1.5, x=-40, y=12)
        kinds = [node.kind for node in build_scene(state).nodes]
        assert "gradient" not in kinds
        panorama = next(node for node in build_scene(state).nodes if node.kind == "panorama")
        assert panorama.rect.width == pytest.approx(state.layout.board_width * 1.5)
        assert panorama.rect.height == pytest.approx(state.layout.board_height * 1.5)
        assert (panorama.rect.x, panorama.rect.y) == (-40, 12)

    def test_nodes_sorted_by_depth(self, state):
        depths = [node.z for node in build_scene(state).visible_nodes(include_excluded=True)]
        assert depths == sorted(depths)


class TestResolveLayerText:
    def test_source_language_uses_source_text(self, state):
        layer = state.text_layers[0]
        assert resolve_layer_text(state, layer) == layer.text

    def test_overlay_text_when_translated(self, state):
        translated = storyboard.apply_translations(state, {"fr": ["Construire vite."]})
        assert resolve_layer_text(translated, translated.text_layers[0]) == "Construire vite."

    def test_falls_back_to_source_when_overlay_lacks_layer(self, state):
        translated = replace(state, overlays={"fr": {}}, active_language="fr")
        layer = translated.text_layers[0]
        assert resolve_layer_text(translated, layer) == layer.text


class TestRendering:
    def test_capture_omits_guides(self, tiny_state):
        surface = BoardSurface(tiny_state)
        capture = surface.rasterize(0.25)
        preview = surface.rasterize(0.25, include_excluded=True)
        assert capture.size == preview.size
        assert ImageChops.difference(capture, preview).getbbox() is not None

    def test_rendered_size_follows_display_scale(self, tiny_state):
        surface = BoardSurface(tiny_state, display_scale=0.5)
        assert surface.rendered_height == 470
        assert surface.rendered_width == pytest.approx(tiny_state.layout.board_width * 0.5)

    def test_screenshot_is_drawn_inside_device(self, tiny_state):
        assets = {"asset-red": Image.new("RGB", (30, 60), (255, 0, 0))}
        state = storyboard.set_screenshot(tiny_state, "frame-1", "asset-red")
        frame = state.layout.frames[0]
        image = BoardSurface(state, assets).rasterize(0.25)
        center = (round((frame.x + frame.width / 2) * 0.25), round((frame.y + frame.height / 2) * 0.25))
        r, g, b, _ = image.getpixel(center)
        assert r > 200 and g < 60 and b < 60

    def test_rejects_non_positive_display_scale(self, tiny_state):
        with pytest.raises(ValueError):
            BoardSurface(tiny_state, display_scale=0)


class TestDrawingHelpers:
    def test_hex_to_rgba(self):
        assert hex_to_rgba("#0ea5a8") == (14, 165, 168, 255)
        assert hex_to_rgba("#fff", 0.5) == (255, 255, 255, 127)

    def test_vertical_gradient_runs_top_to_bottom(self):
        image = linear_gradient((20, 100), "#000000", "#ffffff", 180)
        top = image.getpixel((10, 0))[0]
        bottom = image.getpixel((10, 99))[0]
        assert top < 30
        assert bottom > 225
