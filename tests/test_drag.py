import pytest

from assetstudio.core.exceptions import EditRejected
from assetstudio.services import drag, storyboard


@pytest.fixture()
def state():
    return storyboard.initial_state()


def test_small_move_is_a_click():
    session = drag.start_drag("text-1", (100, 100), (0, 0))
    session, value = drag.drag_to(session, (101, 102))
    assert drag.is_click(session)
    assert value == (1, 2)


def test_value_is_recomputed_from_origin():
    session = drag.start_drag("frame-1", (10, 10), (5, 5))
    session, _ = drag.drag_to(session, (50, 50))
    session, value = drag.drag_to(session, (20, 0))
    assert value == (15, -5)
    assert not drag.is_click(session)


def test_text_drag_moves_layer(state):
    layer = state.text_layers[0]
    state, session = drag.press_text(state, layer.id, (300, 100))
    state, session = drag.move_text(state, session, (340, 60))
    moved = state.text_layer(layer.id)
    assert (moved.x, moved.y) == (layer.x + 40, layer.y - 40)


def test_text_drag_rejected_on_translated_board(state):
    state = storyboard.apply_translations(state, {"es": ["Hola"]})
    layer = state.text_layers[0]
    state, session = drag.press_text(state, layer.id, (0, 0))
    with pytest.raises(EditRejected):
        drag.move_text(state, session, (20, 20))


def test_resize_has_minimum_width(state):
    layer = state.text_layers[0]
    session = drag.press_text_resize(state, layer.id, (1000, 100))
    state, _ = drag.move_text_resize(state, session, (0, 100))
    assert state.text_layer(layer.id).width == storyboard.MIN_TEXT_WIDTH


def test_screenshot_drag_needs_a_screenshot(state):
    _, session = drag.press_screenshot(state, "frame-1", (0, 0))
    assert session is None

    state = storyboard.set_screenshot(state, "frame-1", "asset-1")
    state, session = drag.press_screenshot(state, "frame-1", (0, 0))
    state, _ = drag.move_screenshot(state, session, (-30, 12))
    assert state.selected_frame_id == "frame-1"
    transform = state.screenshot_transform("frame-1")
    assert (transform.x, transform.y) == (-30, 12)


def test_device_drag_selects_and_moves(state):
    state, session = drag.press_device(state, "frame-3", (200, 200))
    state, _ = drag.move_device(state, session, (180, 260))
    assert state.selected_frame_id == "frame-3"
    offset = state.device_offset("frame-3")
    assert (offset.x, offset.y) == (-20, 60)


def test_press_dispatches_by_kind(state):
    layer = state.text_layers[0]
    state, session = drag.press(state, "text-resize", layer.id, (500, 0))
    state, session = drag.move(state, "text-resize", session, (540, 30))
    assert state.text_layer(layer.id).width == layer.width + 40
    assert state.text_layer(layer.id).x == layer.x

    state, session = drag.press(state, "device", "frame-3", (0, 0))
    state, _ = drag.move(state, "device", session, (8, -6))
    assert state.selected_frame_id == "frame-3"
    offset = state.device_offset("frame-3")
    assert (offset.x, offset.y) == (8, -6)


def test_press_rejects_unknown_kind(state):
    with pytest.raises(ValueError):
        drag.press(state, "rotate", "frame-1", (0, 0))
