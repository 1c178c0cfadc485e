"""Storyboard state and the transitions that change it.

`StoryboardState` is an immutable snapshot. Every user command is a plain
function taking a snapshot and returning a new one, so the session holder is
the only place that swaps state and nothing shares mutable dicts between
snapshots.
"""
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from assetstudio.core.catalog import (
    DEFAULT_TARGET_LANGUAGES,
    FONT_OPTIONS,
    SOURCE_LANGUAGE,
    TargetSize,
    get_target_size,
    is_known_language,
)
from assetstudio.core.exceptions import (
    EditRejected,
    EntityNotFoundError,
    InvalidLanguageSelection,
    NormalizationFailed,
)
from assetstudio.core.settings import settings
from assetstudio.services.geometry import BoardLayout, compute_board_layout, frame_ids

logger = logging.getLogger(__name__)

MIN_TEXT_WIDTH = 80
TEXT_ALIGNMENTS = ("left", "center", "right")
DEFAULT_SCREENSHOT_SCALE = 1.1

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_TEXT_FIELDS = {"text", "x", "y", "width", "font_family", "font_size", "font_weight", "color", "text_align"}


def _uid(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:7]}"


@dataclass(frozen=True)
class TextLayer:
    id: str
    text: str
    x: float
    y: float
    width: float
    font_family: str
    font_size: int
    font_weight: int
    color: str
    text_align: str = "left"


@dataclass(frozen=True)
class ScreenshotTransform:
    x: float = 0.0
    y: float = 0.0
    scale: float = DEFAULT_SCREENSHOT_SCALE


@dataclass(frozen=True)
class Offset:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Background:
    primary_color: str = "#0ea5a8"
    secondary_color: str = "#0f172a"
    panorama_asset_id: str | None = None
    panorama_scale: float = 1.0
    panorama_offset: Offset = Offset()


@dataclass(frozen=True)
class StoryboardState:
    size: TargetSize
    board_height: int
    panel_count: int
    device_height: int
    text_layers: tuple[TextLayer, ...] = ()
    screenshots: Mapping[str, str | None] = field(default_factory=dict)
    screenshot_transforms: Mapping[str, ScreenshotTransform] = field(default_factory=dict)
    device_offsets: Mapping[str, Offset] = field(default_factory=dict)
    device_rotations: Mapping[str, float] = field(default_factory=dict)
    background: Background = Background()
    selected_frame_id: str | None = None
    selected_text_id: str | None = None
    target_languages: tuple[str, ...] = DEFAULT_TARGET_LANGUAGES
    overlays: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    active_language: str = SOURCE_LANGUAGE
    translation_error: str | None = None

    @property
    def layout(self) -> BoardLayout:
        return compute_board_layout(
            board_height=self.board_height,
            panel_count=self.panel_count,
            aspect_ratio=self.size.aspect_ratio,
            device_height=self.device_height,
        )

    @property
    def frame_ids(self) -> list[str]:
        return frame_ids(self.panel_count)

    @property
    def can_edit_source_text(self) -> bool:
        return self.active_language == SOURCE_LANGUAGE

    def text_layer(self, layer_id: str) -> TextLayer:
        for layer in self.text_layers:
            if layer.id == layer_id:
                return layer
        raise EntityNotFoundError("TextLayer", layer_id)

    def screenshot_transform(self, frame_id: str) -> ScreenshotTransform:
        return self.screenshot_transforms.get(frame_id) or ScreenshotTransform()

    def device_offset(self, frame_id: str) -> Offset:
        return self.device_offsets.get(frame_id) or Offset()

    def device_rotation(self, frame_id: str) -> float:
        return self.device_rotations.get(frame_id, 0.0)


def initial_state(
    size_id: str | None = None,
    *,
    board_height: int | None = None,
    panel_count: int | None = None,
    device_height: int | None = None,
) -> StoryboardState:
    size = get_target_size(size_id or settings.default_size_id)
    count = panel_count or settings.panel_count
    ids = frame_ids(count)
    headline = TextLayer(
        id=_uid("text"),
        text="Build fast. Ship sharp.",
        x=230,
        y=88,
        width=900,
        font_family=FONT_OPTIONS[0].value,
        font_size=84,
        font_weight=700,
        color="#ffffff",
        text_align="left",
    )
    return StoryboardState(
        size=size,
        board_height=board_height or settings.board_height,
        panel_count=count,
        device_height=device_height or settings.device_height,
        text_layers=(headline,),
        screenshots={fid: None for fid in ids},
        screenshot_transforms={fid: ScreenshotTransform() for fid in ids},
        device_offsets={fid: Offset() for fid in ids},
        device_rotations={fid: 0.0 for fid in ids},
        selected_frame_id=ids[min(1, count - 1)],
        selected_text_id=headline.id,
    )


def _require_frame(state: StoryboardState, frame_id: str) -> None:
    if frame_id not in state.frame_ids:
        raise EntityNotFoundError("Frame", frame_id)


def _require_color(value: str) -> str:
    if not _HEX_COLOR.match(value or ""):
        raise ValueError(f"invalid color: {value!r}")
    return value


def _invalidate_translations(state: StoryboardState, **changes: Any) -> StoryboardState:
    if state.overlays:
        logger.info("translations_invalidated", extra={"languages": sorted(state.overlays)})
    return replace(state, overlays={}, active_language=SOURCE_LANGUAGE, translation_error=None, **changes)


def clear_translations(state: StoryboardState) -> StoryboardState:
    return _invalidate_translations(state)


# --- target size -------------------------------------------------------------


def select_target_size(state: StoryboardState, size_id: str) -> StoryboardState:
    return replace(state, size=get_target_size(size_id))


# --- text layers -------------------------------------------------------------


def add_text_layer(state: StoryboardState, **overrides: Any) -> StoryboardState:
    layer = TextLayer(
        id=_uid("text"),
        text="Click to edit",
        x=round(state.layout.board_width / 2 - 180),
        y=130,
        width=600,
        font_family=FONT_OPTIONS[1].value,
        font_size=64,
        font_weight=700,
        color="#f8fafc",
        text_align="left",
    )
    if overrides:
        layer = _patched_layer(layer, overrides)
    return _invalidate_translations(
        state,
        text_layers=state.text_layers + (layer,),
        selected_text_id=layer.id,
    )


def remove_text_layer(state: StoryboardState, layer_id: str | None = None) -> StoryboardState:
    target = layer_id or state.selected_text_id
    if target is None:
        return state
    state.text_layer(target)
    return _invalidate_translations(
        state,
        text_layers=tuple(layer for layer in state.text_layers if layer.id != target),
        selected_text_id=None,
    )


def _patched_layer(layer: TextLayer, patch: Mapping[str, Any]) -> TextLayer:
    unknown = set(patch) - _TEXT_FIELDS
    if unknown:
        raise ValueError(f"unknown text layer fields: {sorted(unknown)}")
    values = {key: value for key, value in patch.items() if value is not None}
    if "width" in values:
        values["width"] = max(MIN_TEXT_WIDTH, float(values["width"]))
    if "text_align" in values and values["text_align"] not in TEXT_ALIGNMENTS:
        raise ValueError(f"invalid text_align: {values['text_align']!r}")
    if "color" in values:
        _require_color(values["color"])
    if "font_size" in values and int(values["font_size"]) <= 0:
        raise ValueError("font_size must be positive")
    return replace(layer, **values)


def update_text_layer(state: StoryboardState, layer_id: str, **patch: Any) -> StoryboardState:
    """Apply a property patch to one text layer.

    Rejected while a translated overlay is active. A change to `text` clears
    every overlay; position and style edits keep them.
    """
    if not state.can_edit_source_text:
        raise EditRejected(
            f"cannot edit text layer while viewing {state.active_language}",
            detail="Switch back to the original language to edit text.",
        )
    current = state.text_layer(layer_id)
    updated = _patched_layer(current, patch)
    layers = tuple(updated if layer.id == layer_id else layer for layer in state.text_layers)
    if updated.text != current.text:
        return _invalidate_translations(state, text_layers=layers)
    return replace(state, text_layers=layers)


def select_text_layer(state: StoryboardState, layer_id: str | None) -> StoryboardState:
    if layer_id is not None:
        state.text_layer(layer_id)
    return replace(state, selected_text_id=layer_id)


# --- frames ------------------------------------------------------------------


def select_frame(state: StoryboardState, frame_id: str) -> StoryboardState:
    _require_frame(state, frame_id)
    return replace(state, selected_frame_id=frame_id)


def set_screenshot(state: StoryboardState, frame_id: str, asset_id: str | None) -> StoryboardState:
    _require_frame(state, frame_id)
    return replace(state, screenshots={**state.screenshots, frame_id: asset_id})


def set_screenshot_transform(
    state: StoryboardState,
    frame_id: str,
    *,
    x: float | None = None,
    y: float | None = None,
    scale: float | None = None,
) -> StoryboardState:
    _require_frame(state, frame_id)
    if scale is not None and scale <= 0:
        raise ValueError("scale must be positive")
    current = state.screenshot_transform(frame_id)
    updated = ScreenshotTransform(
        x=current.x if x is None else float(x),
        y=current.y if y is None else float(y),
        scale=current.scale if scale is None else float(scale),
    )
    return replace(state, screenshot_transforms={**state.screenshot_transforms, frame_id: updated})


def set_device_offset(state: StoryboardState, frame_id: str, x: float, y: float) -> StoryboardState:
    _require_frame(state, frame_id)
    return replace(state, device_offsets={**state.device_offsets, frame_id: Offset(float(x), float(y))})


def set_device_rotation(state: StoryboardState, frame_id: str, degrees: float) -> StoryboardState:
    _require_frame(state, frame_id)
    return replace(state, device_rotations={**state.device_rotations, frame_id: float(degrees)})


def copy_screenshot_to_all_frames(state: StoryboardState, frame_id: str | None = None) -> StoryboardState:
    """Copy one frame's screenshot and transform onto every frame, by value."""
    source_id = frame_id or state.selected_frame_id
    if source_id is None:
        return state
    _require_frame(state, source_id)
    transform = state.screenshot_transform(source_id)
    asset_id = state.screenshots.get(source_id)

    transforms = {fid: replace(transform) for fid in state.frame_ids}
    screenshots = dict(state.screenshots)
    if asset_id is not None:
        screenshots = {fid: asset_id for fid in state.frame_ids}
    return replace(state, screenshots=screenshots, screenshot_transforms=transforms)


# --- background --------------------------------------------------------------


def set_background_colors(
    state: StoryboardState,
    primary_color: str | None = None,
    secondary_color: str | None = None,
) -> StoryboardState:
    background = state.background
    if primary_color is not None:
        background = replace(background, primary_color=_require_color(primary_color))
    if secondary_color is not None:
        background = replace(background, secondary_color=_require_color(secondary_color))
    return replace(state, background=background)


def set_panorama(state: StoryboardState, asset_id: str | None) -> StoryboardState:
    return replace(state, background=replace(state.background, panorama_asset_id=asset_id))


def set_panorama_transform(
    state: StoryboardState,
    *,
    scale: float | None = None,
    x: float | None = None,
    y: float | None = None,
) -> StoryboardState:
    background = state.background
    if scale is not None:
        if scale <= 0:
            raise ValueError("scale must be positive")
        background = replace(background, panorama_scale=float(scale))
    offset = background.panorama_offset
    background = replace(
        background,
        panorama_offset=Offset(
            offset.x if x is None else float(x),
            offset.y if y is None else float(y),
        ),
    )
    return replace(state, background=background)


# --- languages ---------------------------------------------------------------


def available_languages(state: StoryboardState) -> list[str]:
    """Storyboard languages a user can switch to: source, then ready translations."""
    return [SOURCE_LANGUAGE] + [code for code in state.target_languages if code in state.overlays]


def set_active_language(state: StoryboardState, code: str) -> StoryboardState:
    if code != SOURCE_LANGUAGE and (code not in state.overlays or code not in state.target_languages):
        raise InvalidLanguageSelection(code)
    return replace(state, active_language=code)


def toggle_target_language(state: StoryboardState, code: str) -> StoryboardState:
    if not is_known_language(code):
        raise EntityNotFoundError("Language", code)
    if code in state.target_languages:
        selected = tuple(item for item in state.target_languages if item != code)
    else:
        selected = state.target_languages + (code,)
    active = state.active_language
    if active != SOURCE_LANGUAGE and active not in selected:
        active = SOURCE_LANGUAGE
    return replace(state, target_languages=selected, active_language=active)


def apply_translations(state: StoryboardState, translations: Mapping[str, list[str]]) -> StoryboardState:
    """Store normalized translations as overlays keyed by text layer id.

    Only lists whose length equals the current text layer count are kept;
    anything else is dropped rather than stored as a partial overlay.
    """
    layer_count = len(state.text_layers)
    overlays: dict[str, dict[str, str]] = {}
    for code, texts in translations.items():
        if layer_count == 0 or len(texts) != layer_count:
            logger.warning(
                "translation_dropped",
                extra={"language_code": code, "received": len(texts), "expected": layer_count},
            )
            continue
        overlays[code] = {layer.id: texts[index] for index, layer in enumerate(state.text_layers)}

    if not overlays:
        raise NormalizationFailed(
            "no translation matched the current text layers",
            detail="Translation failed: unexpected response shape.",
        )

    first_ready = next((code for code in state.target_languages if code in overlays), None)
    return replace(
        state,
        overlays=overlays,
        active_language=first_ready or SOURCE_LANGUAGE,
        translation_error=None,
    )


def with_translation_error(state: StoryboardState, message: str | None) -> StoryboardState:
    return replace(state, translation_error=message)
