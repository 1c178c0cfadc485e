"""Tests for sequential multi-language export."""

import pytest

from assetstudio.core.catalog import SOURCE_LANGUAGE
from assetstudio.core.exceptions import NoTranslationsReady
from assetstudio.services import storyboard
from assetstudio.services.batch_export import IDLE, BatchExporter, ready_languages
from assetstudio.services.export import ExportedPanel


class Holder:
    def __init__(self, state):
        self.state = state


def _panel(code: str) -> ExportedPanel:
    return ExportedPanel(name=f"{code}/screenshot-1-x.png", index=0, width=1, height=1, data=b"", language=code)


@pytest.fixture()
def holder():
    state = storyboard.initial_state()
    state = storyboard.apply_translations(state, {"es": ["Hola"], "ja": ["こんにちは"]})
    state = storyboard.set_active_language(state, "ja")
    return Holder(state)


async def _no_settle():
    return None


def test_ready_languages_follow_selection_order(holder):
    assert ready_languages(holder.state) == ["es", "ja"]


@pytest.mark.anyio
async def test_exports_each_ready_language_in_order(holder):
    seen = []
    phases = []

    async def capture(state, code):
        seen.append((code, state.active_language))
        phases.append(exporter.phase)
        return [_panel(code)]

    exporter = BatchExporter(holder, capture)
    results = await exporter.export_all()

    assert list(results) == ["es", "ja"]
    assert seen == [("es", "es"), ("ja", "ja")]
    assert [phase.language for phase in phases] == ["es", "ja"]
    assert exporter.phase == IDLE
    assert holder.state.active_language == "ja"


@pytest.mark.anyio
async def test_restores_language_when_capture_fails(holder):
    async def capture(state, code):
        if code == "ja":
            raise RuntimeError("render crashed")
        return [_panel(code)]

    exporter = BatchExporter(holder, capture, settle=_no_settle)
    with pytest.raises(RuntimeError):
        await exporter.export_all()

    assert holder.state.active_language == "ja"
    assert exporter.phase == IDLE


@pytest.mark.anyio
async def test_no_ready_language_fails_before_any_capture():
    holder = Holder(storyboard.initial_state())
    calls = []

    async def capture(state, code):
        calls.append(code)
        return []

    with pytest.raises(NoTranslationsReady):
        await BatchExporter(holder, capture).export_all()
    assert calls == []
    assert holder.state.active_language == SOURCE_LANGUAGE


@pytest.mark.anyio
async def test_settles_before_each_capture(holder):
    events = []

    async def settle():
        events.append("settle")

    async def capture(state, code):
        events.append(code)
        return []

    await BatchExporter(holder, capture, settle=settle).export_all()
    assert events == ["settle", "es", "settle", "ja"]
