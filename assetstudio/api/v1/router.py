from fastapi import APIRouter

from assetstudio.api.v1 import (
    background,
    catalog,
    drags,
    exports,
    frames,
    languages,
    preview,
    sessions,
    text_layers,
)


api_router = APIRouter(prefix="/v1")

api_router.include_router(catalog.router)
api_router.include_router(sessions.router)
api_router.include_router(text_layers.router)
api_router.include_router(frames.router)
api_router.include_router(drags.router)
api_router.include_router(background.router)
api_router.include_router(languages.router)
api_router.include_router(exports.router)
api_router.include_router(preview.router)
