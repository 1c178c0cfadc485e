import logging
import uuid

from fastapi import APIRouter, Response

from assetstudio.api.deps import StudioSessionDep
from assetstudio.api.v1.schemas import SelectionUpdate, SessionCreate, SessionRead, SizeSelect
from assetstudio.services import sessions, storyboard


router = APIRouter(tags=["sessions"])
logger = logging.getLogger(__name__)


@router.post("/sessions", response_model=SessionRead, status_code=201)
def create_session(payload: SessionCreate | None = None):
    session = sessions.create_session(payload.size_id if payload else None)
    return SessionRead.from_session(session)


@router.get("/sessions/{session_id}", response_model=SessionRead)
def get_session(session=StudioSessionDep):
    return SessionRead.from_session(session)


@router.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: uuid.UUID):
    sessions.delete_session(session_id)
    return Response(status_code=204)


@router.put("/sessions/{session_id}/size", response_model=SessionRead)
def select_size(payload: SizeSelect, session=StudioSessionDep):
    session.apply(storyboard.select_target_size, payload.size_id)
    logger.info("target_size_selected", extra={"size_id": payload.size_id})
    return SessionRead.from_session(session)


@router.put("/sessions/{session_id}/selection", response_model=SessionRead)
def update_selection(payload: SelectionUpdate, session=StudioSessionDep):
    if "frame_id" in payload.model_fields_set and payload.frame_id is not None:
        session.apply(storyboard.select_frame, payload.frame_id)
    if "text_layer_id" in payload.model_fields_set:
        session.apply(storyboard.select_text_layer, payload.text_layer_id)
    return SessionRead.from_session(session)
