"""In-memory studio sessions and the translate/export orchestration boundary.

Sessions live only as long as the process. Each holds the current storyboard
snapshot, the uploaded images it references, and the busy flags that keep a
second translate or export from starting while one is in flight.
"""
from __future__ import annotations

import io
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from PIL import Image, UnidentifiedImageError

from assetstudio.core.exceptions import (
    AppError,
    EmptyCaptureSurface,
    EntityNotFoundError,
    NormalizationFailed,
    SessionBusyError,
)
from assetstudio.core.request_context import log_context
from assetstudio.services import drag, storyboard
from assetstudio.services.batch_export import BatchExporter
from assetstudio.services.compositor import BoardSurface
from assetstudio.services.drag import DragSession
from assetstudio.services.export import ExportedPanel, capture_and_crop_panels
from assetstudio.services.storyboard import StoryboardState
from assetstudio.services.translation import TranslationClient

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StudioSession:
    session_id: uuid.UUID
    state: StoryboardState
    created_at: datetime
    updated_at: datetime
    assets: dict[str, Image.Image] = field(default_factory=dict)
    display_scale: float = 1.0
    mounted: bool = True
    is_translating: bool = False
    is_exporting_all: bool = False
    drag: DragSession | None = None
    drag_kind: str | None = None

    def apply(self, transition: Callable[..., StoryboardState], *args: Any, **kwargs: Any) -> StoryboardState:
        """Run one storyboard transition and keep its result."""
        self.state = transition(self.state, *args, **kwargs)
        self.updated_at = _utcnow()
        return self.state

    def press_drag(self, kind: str, subject_id: str, pointer: tuple[float, float]) -> DragSession | None:
        """Start a pointer drag, replacing any drag that was never released."""
        self.state, self.drag = drag.press(self.state, kind, subject_id, pointer)
        self.drag_kind = kind if self.drag else None
        self.updated_at = _utcnow()
        return self.drag

    def move_drag(self, pointer: tuple[float, float]) -> StoryboardState:
        if self.drag is None or self.drag_kind is None:
            raise EntityNotFoundError("Drag", "active")
        self.state, self.drag = drag.move(self.state, self.drag_kind, self.drag, pointer)
        self.updated_at = _utcnow()
        return self.state

    def release_drag(self) -> bool:
        """End the drag; True when it never moved past the click tolerance."""
        if self.drag is None:
            raise EntityNotFoundError("Drag", "active")
        was_click = drag.is_click(self.drag)
        self.drag = None
        self.drag_kind = None
        return was_click

    def add_asset(self, image_bytes: bytes) -> str:
        image = load_image(image_bytes)
        asset_id = f"asset-{uuid.uuid4().hex[:10]}"
        self.assets[asset_id] = image
        return asset_id

    def board_surface(self) -> BoardSurface | None:
        if not self.mounted:
            return None
        return BoardSurface(self.state, self.assets, display_scale=self.display_scale)

    def prune_assets(self) -> None:
        """Drop uploaded images no longer referenced by the storyboard."""
        referenced = {asset for asset in self.state.screenshots.values() if asset}
        if self.state.background.panorama_asset_id:
            referenced.add(self.state.background.panorama_asset_id)
        for asset_id in list(self.assets):
            if asset_id not in referenced:
                del self.assets[asset_id]


def load_image(image_bytes: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError("uploaded file is not a supported image") from exc
    return image


_sessions: dict[uuid.UUID, StudioSession] = {}
_sessions_lock = threading.Lock()


def create_session(size_id: str | None = None) -> StudioSession:
    now = _utcnow()
    session = StudioSession(
        session_id=uuid.uuid4(),
        state=storyboard.initial_state(size_id),
        created_at=now,
        updated_at=now,
    )
    with _sessions_lock:
        _sessions[session.session_id] = session
    logger.info("session_created", extra={"session": str(session.session_id)})
    return session


def get_session(session_id: uuid.UUID) -> StudioSession:
    with _sessions_lock:
        session = _sessions.get(session_id)
    if session is None:
        raise EntityNotFoundError("Session", session_id)
    return session


def delete_session(session_id: uuid.UUID) -> None:
    with _sessions_lock:
        removed = _sessions.pop(session_id, None)
    if removed is None:
        raise EntityNotFoundError("Session", session_id)


def clear_sessions() -> None:
    with _sessions_lock:
        _sessions.clear()


def _ensure_idle(session: StudioSession) -> None:
    if session.is_translating or session.is_exporting_all:
        raise SessionBusyError(
            "session has a translation or export in progress",
            detail="Wait for the current translation or export to finish.",
        )


def _record_failure(session: StudioSession, exc: Exception, fallback: str) -> None:
    message = exc.detail if isinstance(exc, AppError) else fallback
    session.state = storyboard.with_translation_error(session.state, message)
    logger.warning("studio_action_failed", extra={"error": str(exc), "error_type": type(exc).__name__})


async def handle_translate(session: StudioSession, client: TranslationClient | None = None) -> StoryboardState:
    """Translate every text layer into the selected languages and store overlays."""
    _ensure_idle(session)
    state = session.state
    if not state.text_layers or not state.target_languages:
        raise ValueError("Provide at least one target language and one text layer.")

    client = client or TranslationClient()
    layer_snapshot = tuple((layer.id, layer.text) for layer in state.text_layers)
    session.is_translating = True
    session.state = storyboard.with_translation_error(state, None)
    try:
        with log_context(session_id=session.session_id):
            translations = await client.translate(
                [text for _, text in layer_snapshot],
                state.target_languages,
            )
            current = tuple((layer.id, layer.text) for layer in session.state.text_layers)
            if current != layer_snapshot:
                raise NormalizationFailed(
                    "text layers changed while translating",
                    detail="Text changed during translation. Translate again.",
                )
            session.apply(storyboard.apply_translations, translations)
    except Exception as exc:
        _record_failure(session, exc, "Translation request failed.")
        raise
    finally:
        session.is_translating = False
    return session.state


async def _capture(session: StudioSession, mode: str, language: str | None = None) -> list[ExportedPanel]:
    return capture_and_crop_panels(
        session.board_surface(),
        session.state.size,
        session.state.panel_count,
        language=language,
        mode=mode,
    )


async def handle_export_current(session: StudioSession) -> list[ExportedPanel]:
    """Export the board as it is currently shown, one image per panel."""
    _ensure_idle(session)
    with log_context(session_id=session.session_id, language=session.state.active_language):
        panels = await _capture(session, "single")
    if not panels:
        raise EmptyCaptureSurface(
            "board has not been rendered",
            detail="Nothing to export yet.",
        )
    return panels


async def handle_export_all(session: StudioSession) -> dict[str, list[ExportedPanel]]:
    """Export every translated language, restoring the shown language afterwards."""
    _ensure_idle(session)
    session.is_exporting_all = True
    session.state = storyboard.with_translation_error(session.state, None)

    async def capture(state: StoryboardState, code: str) -> list[ExportedPanel]:
        return await _capture(session, "batch", language=code)

    try:
        with log_context(session_id=session.session_id):
            results = await BatchExporter(session, capture).export_all()
        if not any(results.values()):
            raise EmptyCaptureSurface(
                "board has not been rendered",
                detail="Nothing to export yet.",
            )
    except Exception as exc:
        _record_failure(session, exc, "Failed to export all languages.")
        raise
    finally:
        session.is_exporting_all = False
    return results
