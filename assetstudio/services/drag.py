"""Pointer-drag sessions.

A drag is a record created on press, fed pointer positions on move, and
discarded on release. The record only stores where the pointer and the
dragged value started; every move recomputes the value from those origins, so
dropped or coalesced move events never accumulate error.
"""
from __future__ import annotations

from dataclasses import dataclass, replace

from assetstudio.services import storyboard
from assetstudio.services.storyboard import MIN_TEXT_WIDTH, StoryboardState

CLICK_TOLERANCE = 2

Point = tuple[float, float]


@dataclass(frozen=True)
class DragSession:
    subject_id: str
    origin_pointer: Point
    origin_value: Point
    moved: bool = False

    def delta(self, pointer: Point) -> Point:
        return pointer[0] - self.origin_pointer[0], pointer[1] - self.origin_pointer[1]

    def value_at(self, pointer: Point) -> Point:
        dx, dy = self.delta(pointer)
        return self.origin_value[0] + dx, self.origin_value[1] + dy


def start_drag(subject_id: str, pointer: Point, origin_value: Point) -> DragSession:
    return DragSession(subject_id=subject_id, origin_pointer=pointer, origin_value=origin_value)


def drag_to(session: DragSession, pointer: Point) -> tuple[DragSession, Point]:
    """Advance a drag; returns the updated record and the new value."""
    dx, dy = session.delta(pointer)
    moved = session.moved or abs(dx) > CLICK_TOLERANCE or abs(dy) > CLICK_TOLERANCE
    if moved != session.moved:
        session = replace(session, moved=True)
    return session, session.value_at(pointer)


def is_click(session: DragSession) -> bool:
    """A release that never moved past the tolerance counts as a click."""
    return not session.moved


# --- storyboard bindings -----------------------------------------------------


def press_text(state: StoryboardState, layer_id: str, pointer: Point) -> tuple[StoryboardState, DragSession]:
    layer = state.text_layer(layer_id)
    state = storyboard.select_text_layer(state, layer_id)
    return state, start_drag(layer_id, pointer, (layer.x, layer.y))


def move_text(state: StoryboardState, session: DragSession, pointer: Point) -> tuple[StoryboardState, DragSession]:
    session, (x, y) = drag_to(session, pointer)
    return storyboard.update_text_layer(state, session.subject_id, x=x, y=y), session


def press_text_resize(state: StoryboardState, layer_id: str, pointer: Point) -> DragSession:
    layer = state.text_layer(layer_id)
    return start_drag(layer_id, pointer, (layer.width, 0.0))


def move_text_resize(
    state: StoryboardState, session: DragSession, pointer: Point
) -> tuple[StoryboardState, DragSession]:
    dx, _ = session.delta(pointer)
    width = max(MIN_TEXT_WIDTH, session.origin_value[0] + dx)
    session, _ = drag_to(session, pointer)
    return storyboard.update_text_layer(state, session.subject_id, width=width), session


def press_screenshot(
    state: StoryboardState, frame_id: str, pointer: Point
) -> tuple[StoryboardState, DragSession | None]:
    # Empty screens have nothing to pan.
    if not state.screenshots.get(frame_id):
        return state, None
    state = storyboard.select_frame(state, frame_id)
    transform = state.screenshot_transform(frame_id)
    return state, start_drag(frame_id, pointer, (transform.x, transform.y))


def move_screenshot(
    state: StoryboardState, session: DragSession, pointer: Point
) -> tuple[StoryboardState, DragSession]:
    session, (x, y) = drag_to(session, pointer)
    return storyboard.set_screenshot_transform(state, session.subject_id, x=x, y=y), session


def press_device(state: StoryboardState, frame_id: str, pointer: Point) -> tuple[StoryboardState, DragSession]:
    state = storyboard.select_frame(state, frame_id)
    offset = state.device_offset(frame_id)
    return state, start_drag(frame_id, pointer, (offset.x, offset.y))


def move_device(state: StoryboardState, session: DragSession, pointer: Point) -> tuple[StoryboardState, DragSession]:
    session, (x, y) = drag_to(session, pointer)
    return storyboard.set_device_offset(state, session.subject_id, x, y), session


# --- dispatch by drag kind ---------------------------------------------------

_MOVES = {
    "text": move_text,
    "text-resize": move_text_resize,
    "screenshot": move_screenshot,
    "device": move_device,
}


def press(
    state: StoryboardState, kind: str, subject_id: str, pointer: Point
) -> tuple[StoryboardState, DragSession | None]:
    """Start a drag of `kind` on `subject_id`; None when there is nothing to drag."""
    if kind == "text":
        return press_text(state, subject_id, pointer)
    if kind == "text-resize":
        return state, press_text_resize(state, subject_id, pointer)
    if kind == "screenshot":
        state = storyboard.select_frame(state, subject_id)
        return press_screenshot(state, subject_id, pointer)
    if kind == "device":
        return press_device(state, subject_id, pointer)
    raise ValueError(f"unknown drag kind: {kind}")


def move(
    state: StoryboardState, kind: str, session: DragSession, pointer: Point
) -> tuple[StoryboardState, DragSession]:
    return _MOVES[kind](state, session, pointer)
