import uuid
from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, StringConstraints

from assetstudio.core.catalog import language_label
from assetstudio.services import storyboard
from assetstudio.services.compositor import resolve_layer_text
from assetstudio.services.sessions import StudioSession


TextAlign = Literal["left", "center", "right"]
DragKind = Literal["text", "text-resize", "screenshot", "device"]
HexColor = Annotated[str, StringConstraints(pattern=r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")]


class TargetSizeRead(BaseModel):
    id: str
    name: str
    width: int
    height: int

    model_config = {"from_attributes": True}


class LanguageRead(BaseModel):
    code: str
    label: str

    model_config = {"from_attributes": True}


class FontRead(BaseModel):
    label: str
    value: str

    model_config = {"from_attributes": True}


class SessionCreate(BaseModel):
    size_id: str | None = Field(default=None, min_length=1, max_length=64)


class SizeSelect(BaseModel):
    size_id: str = Field(min_length=1, max_length=64)


class TextLayerRead(BaseModel):
    id: str
    text: str
    display_text: str
    x: float
    y: float
    width: float
    font_family: str
    font_size: int
    font_weight: int
    color: str
    text_align: TextAlign


class TextLayerCreate(BaseModel):
    text: str | None = None
    x: float | None = None
    y: float | None = None
    width: float | None = Field(default=None, gt=0)
    font_family: str | None = Field(default=None, min_length=1)
    font_size: int | None = Field(default=None, ge=28, le=170)
    font_weight: int | None = Field(default=None, ge=100, le=900)
    color: HexColor | None = None
    text_align: TextAlign | None = None


class TextLayerUpdate(TextLayerCreate):
    pass


class ScreenshotTransformRead(BaseModel):
    x: float
    y: float
    scale: float


class ScreenshotTransformUpdate(BaseModel):
    x: float | None = None
    y: float | None = None
    scale: float | None = Field(default=None, ge=0.8, le=2.0)


class DeviceOffsetUpdate(BaseModel):
    x: float
    y: float


class DeviceRotationUpdate(BaseModel):
    degrees: float = Field(ge=-45, le=45)


class OffsetRead(BaseModel):
    x: float
    y: float


class FrameRead(BaseModel):
    id: str
    index: int
    x: float
    y: float
    width: float
    height: float
    screenshot_asset_id: str | None
    screenshot_transform: ScreenshotTransformRead
    device_offset: OffsetRead
    device_rotation: float


class LayoutRead(BaseModel):
    board_width: float
    board_height: float
    panel_width: float
    device_width: float
    device_height: float
    divider_positions: list[float]


class BackgroundRead(BaseModel):
    primary_color: str
    secondary_color: str
    panorama_asset_id: str | None
    panorama_scale: float
    panorama_offset: OffsetRead


class BackgroundUpdate(BaseModel):
    primary_color: HexColor | None = None
    secondary_color: HexColor | None = None


class PanoramaTransformUpdate(BaseModel):
    scale: float | None = Field(default=None, ge=0.6, le=1.8)
    x: float | None = Field(default=None, ge=-500, le=500)
    y: float | None = Field(default=None, ge=-500, le=500)


class SelectionUpdate(BaseModel):
    """Fields left out of the body keep their current selection; null clears text selection."""

    frame_id: str | None = None
    text_layer_id: str | None = None


class PointerPosition(BaseModel):
    x: float
    y: float


class DragStart(PointerPosition):
    kind: DragKind
    target_id: str = Field(min_length=1, max_length=64)


class DragRead(BaseModel):
    kind: DragKind
    target_id: str
    moved: bool


class ActiveLanguageUpdate(BaseModel):
    code: str = Field(min_length=1, max_length=16)


class SessionRead(BaseModel):
    session_id: uuid.UUID
    size: TargetSizeRead
    layout: LayoutRead
    frames: list[FrameRead]
    text_layers: list[TextLayerRead]
    background: BackgroundRead
    selected_frame_id: str | None
    selected_text_id: str | None
    can_edit_source_text: bool
    target_languages: list[str]
    available_languages: list[LanguageRead]
    active_language: str
    translations: dict[str, dict[str, str]]
    translation_error: str | None = None
    is_translating: bool
    is_exporting_all: bool
    drag: DragRead | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_session(cls, session: StudioSession) -> "SessionRead":
        state = session.state
        layout = state.layout
        background = state.background
        frames = []
        for rect in layout.frames:
            transform = state.screenshot_transform(rect.id)
            offset = state.device_offset(rect.id)
            frames.append(
                FrameRead(
                    id=rect.id,
                    index=rect.index,
                    x=rect.x,
                    y=rect.y,
                    width=rect.width,
                    height=rect.height,
                    screenshot_asset_id=state.screenshots.get(rect.id),
                    screenshot_transform=ScreenshotTransformRead(x=transform.x, y=transform.y, scale=transform.scale),
                    device_offset=OffsetRead(x=offset.x, y=offset.y),
                    device_rotation=state.device_rotation(rect.id),
                )
            )
        return cls(
            session_id=session.session_id,
            size=TargetSizeRead.model_validate(state.size),
            layout=LayoutRead(
                board_width=layout.board_width,
                board_height=layout.board_height,
                panel_width=layout.panel_width,
                device_width=layout.device_width,
                device_height=layout.device_height,
                divider_positions=layout.divider_positions(),
            ),
            frames=frames,
            text_layers=[
                TextLayerRead(
                    id=layer.id,
                    text=layer.text,
                    display_text=resolve_layer_text(state, layer),
                    x=layer.x,
                    y=layer.y,
                    width=layer.width,
                    font_family=layer.font_family,
                    font_size=layer.font_size,
                    font_weight=layer.font_weight,
                    color=layer.color,
                    text_align=layer.text_align,
                )
                for layer in state.text_layers
            ],
            background=BackgroundRead(
                primary_color=background.primary_color,
                secondary_color=background.secondary_color,
                panorama_asset_id=background.panorama_asset_id,
                panorama_scale=background.panorama_scale,
                panorama_offset=OffsetRead(x=background.panorama_offset.x, y=background.panorama_offset.y),
            ),
            selected_frame_id=state.selected_frame_id,
            selected_text_id=state.selected_text_id,
            can_edit_source_text=state.can_edit_source_text,
            target_languages=list(state.target_languages),
            available_languages=[
                LanguageRead(code=code, label=language_label(code))
                for code in storyboard.available_languages(state)
            ],
            active_language=state.active_language,
            translations={code: dict(overlay) for code, overlay in state.overlays.items()},
            translation_error=state.translation_error,
            is_translating=session.is_translating,
            is_exporting_all=session.is_exporting_all,
            drag=(
                DragRead(kind=session.drag_kind, target_id=session.drag.subject_id, moved=session.drag.moved)
                if session.drag and session.drag_kind
                else None
            ),
            created_at=session.created_at,
            updated_at=session.updated_at,
        )


class ExportFileRead(BaseModel):
    name: str
    index: int
    width: int
    height: int
    language: str | None = None
    url: str


class ExportRead(BaseModel):
    export_id: str
    size_id: str
    files: list[ExportFileRead]


class ExportAllRead(BaseModel):
    export_id: str
    size_id: str
    languages: dict[str, list[ExportFileRead]]
    active_language: str


class DragReleaseRead(BaseModel):
    click: bool
    session: SessionRead
