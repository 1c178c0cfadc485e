from fastapi import APIRouter

from assetstudio.api.deps import StudioSessionDep
from assetstudio.api.v1.schemas import SessionRead, TextLayerCreate, TextLayerUpdate
from assetstudio.services import storyboard


router = APIRouter(tags=["text-layers"])


@router.post("/sessions/{session_id}/text-layers", response_model=SessionRead, status_code=201)
def create_text_layer(payload: TextLayerCreate | None = None, session=StudioSessionDep):
    overrides = payload.model_dump(exclude_none=True) if payload else {}
    session.apply(storyboard.add_text_layer, **overrides)
    return SessionRead.from_session(session)


@router.patch("/sessions/{session_id}/text-layers/{layer_id}", response_model=SessionRead)
def update_text_layer(layer_id: str, payload: TextLayerUpdate, session=StudioSessionDep):
    session.apply(storyboard.update_text_layer, layer_id, **payload.model_dump(exclude_none=True))
    return SessionRead.from_session(session)


@router.delete("/sessions/{session_id}/text-layers/{layer_id}", response_model=SessionRead)
def delete_text_layer(layer_id: str, session=StudioSessionDep):
    session.apply(storyboard.remove_text_layer, layer_id)
    return SessionRead.from_session(session)
