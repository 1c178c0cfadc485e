import logging

from fastapi import APIRouter

from assetstudio.api.deps import StudioSessionDep
from assetstudio.api.v1.schemas import DragReleaseRead, DragStart, PointerPosition, SessionRead


router = APIRouter(tags=["drags"])
logger = logging.getLogger(__name__)


@router.post("/sessions/{session_id}/drag", response_model=SessionRead)
def press(payload: DragStart, session=StudioSessionDep):
    started = session.press_drag(payload.kind, payload.target_id, (payload.x, payload.y))
    if started is None:
        logger.debug("drag_ignored", extra={"kind": payload.kind, "target_id": payload.target_id})
    return SessionRead.from_session(session)


@router.put("/sessions/{session_id}/drag", response_model=SessionRead)
def move(payload: PointerPosition, session=StudioSessionDep):
    session.move_drag((payload.x, payload.y))
    return SessionRead.from_session(session)


@router.delete("/sessions/{session_id}/drag", response_model=DragReleaseRead)
def release(session=StudioSessionDep):
    click = session.release_drag()
    return DragReleaseRead(click=click, session=SessionRead.from_session(session))
