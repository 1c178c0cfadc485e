from fastapi import APIRouter, Query, Response

from assetstudio.api.deps import StudioSessionDep
from assetstudio.core.exceptions import EmptyCaptureSurface
from assetstudio.services.export import encode_png


router = APIRouter(tags=["preview"])


@router.get("/sessions/{session_id}/preview.png")
def preview_board(scale: float = Query(default=1.0, gt=0, le=2.0), session=StudioSessionDep):
    """On-screen rendering of the board, guides and selection included."""
    session.display_scale = scale
    surface = session.board_surface()
    if surface is None:
        raise EmptyCaptureSurface("board is not mounted", detail="Nothing to preview yet.")
    return Response(content=encode_png(surface.preview()), media_type="image/png")
