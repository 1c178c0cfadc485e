from fastapi import APIRouter, File, UploadFile

from assetstudio.api.deps import StudioSessionDep
from assetstudio.api.v1.schemas import BackgroundUpdate, PanoramaTransformUpdate, SessionRead
from assetstudio.services import storyboard


router = APIRouter(tags=["background"])


@router.put("/sessions/{session_id}/background", response_model=SessionRead)
def update_background(payload: BackgroundUpdate, session=StudioSessionDep):
    session.apply(
        storyboard.set_background_colors,
        primary_color=payload.primary_color,
        secondary_color=payload.secondary_color,
    )
    return SessionRead.from_session(session)


@router.put("/sessions/{session_id}/background/panorama", response_model=SessionRead)
async def upload_panorama(file: UploadFile = File(...), session=StudioSessionDep):
    asset_id = session.add_asset(await file.read())
    session.apply(storyboard.set_panorama, asset_id)
    session.prune_assets()
    return SessionRead.from_session(session)


@router.delete("/sessions/{session_id}/background/panorama", response_model=SessionRead)
def clear_panorama(session=StudioSessionDep):
    session.apply(storyboard.set_panorama, None)
    session.prune_assets()
    return SessionRead.from_session(session)


@router.put("/sessions/{session_id}/background/panorama/transform", response_model=SessionRead)
def update_panorama_transform(payload: PanoramaTransformUpdate, session=StudioSessionDep):
    session.apply(storyboard.set_panorama_transform, scale=payload.scale, x=payload.x, y=payload.y)
    return SessionRead.from_session(session)
