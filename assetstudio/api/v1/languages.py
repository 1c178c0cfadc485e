from fastapi import APIRouter

from assetstudio.api.deps import StudioSessionDep, TranslationClientDep
from assetstudio.api.v1.schemas import ActiveLanguageUpdate, SessionRead
from assetstudio.services import sessions, storyboard


router = APIRouter(tags=["languages"])


@router.put("/sessions/{session_id}/target-languages/{code}", response_model=SessionRead)
def toggle_target_language(code: str, session=StudioSessionDep):
    session.apply(storyboard.toggle_target_language, code)
    return SessionRead.from_session(session)


@router.put("/sessions/{session_id}/active-language", response_model=SessionRead)
def set_active_language(payload: ActiveLanguageUpdate, session=StudioSessionDep):
    session.apply(storyboard.set_active_language, payload.code)
    return SessionRead.from_session(session)


@router.post("/sessions/{session_id}/translate", response_model=SessionRead)
async def translate_text_layers(session=StudioSessionDep, client=TranslationClientDep):
    await sessions.handle_translate(session, client)
    return SessionRead.from_session(session)
