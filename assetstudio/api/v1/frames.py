import logging

from fastapi import APIRouter, File, UploadFile

from assetstudio.api.deps import StudioSessionDep
from assetstudio.api.v1.schemas import (
    DeviceOffsetUpdate,
    DeviceRotationUpdate,
    ScreenshotTransformUpdate,
    SessionRead,
)
from assetstudio.core.exceptions import EntityNotFoundError
from assetstudio.services import storyboard


router = APIRouter(tags=["frames"])
logger = logging.getLogger(__name__)


def _require_frame(session, frame_id: str) -> None:
    if frame_id not in session.state.frame_ids:
        raise EntityNotFoundError("Frame", frame_id)


@router.put("/sessions/{session_id}/frames/{frame_id}/screenshot", response_model=SessionRead)
async def upload_screenshot(frame_id: str, file: UploadFile = File(...), session=StudioSessionDep):
    _require_frame(session, frame_id)
    data = await file.read()
    asset_id = session.add_asset(data)
    session.apply(storyboard.set_screenshot, frame_id, asset_id)
    session.apply(storyboard.select_frame, frame_id)
    session.prune_assets()
    logger.info(
        "screenshot_uploaded",
        extra={"frame_id": frame_id, "asset_id": asset_id, "bytes": len(data), "content_type": file.content_type},
    )
    return SessionRead.from_session(session)


@router.delete("/sessions/{session_id}/frames/{frame_id}/screenshot", response_model=SessionRead)
def clear_screenshot(frame_id: str, session=StudioSessionDep):
    session.apply(storyboard.set_screenshot, frame_id, None)
    session.prune_assets()
    return SessionRead.from_session(session)


@router.put("/sessions/{session_id}/frames/{frame_id}/screenshot-transform", response_model=SessionRead)
def update_screenshot_transform(frame_id: str, payload: ScreenshotTransformUpdate, session=StudioSessionDep):
    session.apply(storyboard.set_screenshot_transform, frame_id, x=payload.x, y=payload.y, scale=payload.scale)
    return SessionRead.from_session(session)


@router.put("/sessions/{session_id}/frames/{frame_id}/device-offset", response_model=SessionRead)
def update_device_offset(frame_id: str, payload: DeviceOffsetUpdate, session=StudioSessionDep):
    session.apply(storyboard.set_device_offset, frame_id, payload.x, payload.y)
    return SessionRead.from_session(session)


@router.put("/sessions/{session_id}/frames/{frame_id}/device-rotation", response_model=SessionRead)
def update_device_rotation(frame_id: str, payload: DeviceRotationUpdate, session=StudioSessionDep):
    session.apply(storyboard.set_device_rotation, frame_id, payload.degrees)
    return SessionRead.from_session(session)


@router.post("/sessions/{session_id}/frames/{frame_id}/copy-to-all", response_model=SessionRead)
def copy_to_all_frames(frame_id: str, session=StudioSessionDep):
    session.apply(storyboard.copy_screenshot_to_all_frames, frame_id)
    return SessionRead.from_session(session)
