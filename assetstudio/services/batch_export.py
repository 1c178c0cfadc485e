"""Sequential export of the storyboard across every translated language."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from assetstudio.core.catalog import SOURCE_LANGUAGE
from assetstudio.core.exceptions import InvalidLanguageSelection, NoTranslationsReady
from assetstudio.core.request_context import log_context
from assetstudio.services import storyboard
from assetstudio.services.export import ExportedPanel
from assetstudio.services.storyboard import StoryboardState

logger = logging.getLogger(__name__)

CaptureFn = Callable[[StoryboardState, str], Awaitable[list[ExportedPanel]]]
SettleFn = Callable[[], Awaitable[None]]


class StateHolder(Protocol):
    state: StoryboardState


@dataclass(frozen=True)
class ExportPhase:
    name: str
    language: str | None = None


IDLE = ExportPhase("idle")


def exporting(code: str) -> ExportPhase:
    return ExportPhase("exporting", code)


async def await_render_settled() -> None:
    """Yield twice so the language switch is visible before capturing.

    One yield is not enough: the restyle for a state change can land one
    cycle after the change itself.
    """
    for _ in range(2):
        await asyncio.sleep(0)


def ready_languages(state: StoryboardState) -> list[str]:
    return [code for code in state.target_languages if code in state.overlays]


def _restore_language(state: StoryboardState, code: str) -> StoryboardState:
    try:
        return storyboard.set_active_language(state, code)
    except InvalidLanguageSelection:
        logger.warning("restore_language_unavailable", extra={"language_code": code})
        return storyboard.set_active_language(state, SOURCE_LANGUAGE)


class BatchExporter:
    """Runs `Idle -> Exporting(code) -> Idle` over every ready language.

    Languages are exported one after another, never concurrently: each
    iteration switches the single shared board to its language before
    capturing it.
    """

    def __init__(self, holder: StateHolder, capture: CaptureFn, settle: SettleFn = await_render_settled):
        self.holder = holder
        self.capture = capture
        self.settle = settle
        self.phase = IDLE

    async def export_all(self) -> dict[str, list[ExportedPanel]]:
        languages = ready_languages(self.holder.state)
        if not languages:
            raise NoTranslationsReady(
                "no language has a complete translation",
                detail="Translate at least one selected language before exporting all.",
            )

        previous = self.holder.state.active_language
        results: dict[str, list[ExportedPanel]] = {}
        try:
            for code in languages:
                self.phase = exporting(code)
                with log_context(language=code):
                    self.holder.state = storyboard.set_active_language(self.holder.state, code)
                    await self.settle()
                    results[code] = await self.capture(self.holder.state, code)
                    logger.info("language_exported", extra={"panel_count": len(results[code])})
        finally:
            self.holder.state = _restore_language(self.holder.state, previous)
            self.phase = IDLE
        return results
