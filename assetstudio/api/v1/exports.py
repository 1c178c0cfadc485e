import logging

from fastapi import APIRouter

from assetstudio.api.deps import MediaStoreDep, StudioSessionDep
from assetstudio.api.v1.schemas import ExportAllRead, ExportFileRead, ExportRead
from assetstudio.services import sessions
from assetstudio.services.export import ExportedPanel
from assetstudio.services.storage import LocalMediaStore


router = APIRouter(tags=["exports"])
logger = logging.getLogger(__name__)


def _store_panels(store: LocalMediaStore, export_id: str, panels: list[ExportedPanel]) -> list[ExportFileRead]:
    files = []
    for panel in panels:
        _, url = store.save_export_file(export_id, panel.name, panel.data)
        files.append(
            ExportFileRead(
                name=panel.name,
                index=panel.index,
                width=panel.width,
                height=panel.height,
                language=panel.language,
                url=url,
            )
        )
    return files


@router.post("/sessions/{session_id}/exports", response_model=ExportRead)
async def export_current(session=StudioSessionDep, store=MediaStoreDep):
    panels = await sessions.handle_export_current(session)
    export_id = store.new_export_id()
    files = _store_panels(store, export_id, panels)
    logger.info("export_stored", extra={"export_id": export_id, "file_count": len(files)})
    return ExportRead(export_id=export_id, size_id=session.state.size.id, files=files)


@router.post("/sessions/{session_id}/exports/all", response_model=ExportAllRead)
async def export_all_languages(session=StudioSessionDep, store=MediaStoreDep):
    results = await sessions.handle_export_all(session)
    export_id = store.new_export_id()
    languages = {code: _store_panels(store, export_id, panels) for code, panels in results.items()}
    logger.info(
        "export_stored",
        extra={"export_id": export_id, "file_count": sum(len(files) for files in languages.values())},
    )
    return ExportAllRead(
        export_id=export_id,
        size_id=session.state.size.id,
        languages=languages,
        active_language=session.state.active_language,
    )
