import uuid

from fastapi import Depends

from assetstudio.core.settings import settings
from assetstudio.services import sessions
from assetstudio.services.sessions import StudioSession
from assetstudio.services.storage import LocalMediaStore
from assetstudio.services.translation import TranslationClient


def studio_session(session_id: uuid.UUID) -> StudioSession:
    return sessions.get_session(session_id)


StudioSessionDep = Depends(studio_session)


def translation_client() -> TranslationClient:
    return TranslationClient()


TranslationClientDep = Depends(translation_client)


def media_store() -> LocalMediaStore:
    return LocalMediaStore(settings.media_root, settings.media_url_prefix)


MediaStoreDep = Depends(media_store)
