"""Board and panel geometry.

Everything here is a pure function of the board height, the panel count and
the target aspect ratio. Nothing is cached: callers recompute the layout
whenever the target size changes, and per-frame transforms stay keyed by
frame id so they survive the change.
"""
from __future__ import annotations

from dataclasses import dataclass

FRAME_TOP = 190
SCREEN_INSET = 18
DEVICE_CORNER_RADIUS = 52
DEVICE_BORDER_WIDTH = 14


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def translated(self, dx: float, dy: float) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def scaled(self, factor: float) -> "Rect":
        return Rect(self.x * factor, self.y * factor, self.width * factor, self.height * factor)


@dataclass(frozen=True)
class FrameRect(Rect):
    id: str = ""
    index: int = 0


@dataclass(frozen=True)
class BoardLayout:
    board_width: float
    board_height: float
    panel_width: float
    panel_count: int
    device_width: int
    device_height: int
    frames: tuple[FrameRect, ...]

    def panel_rect(self, index: int) -> Rect:
        return Rect(index * self.panel_width, 0, self.panel_width, self.board_height)

    def frame(self, frame_id: str) -> FrameRect | None:
        for frame in self.frames:
            if frame.id == frame_id:
                return frame
        return None

    def divider_positions(self) -> list[float]:
        return [(i + 1) * self.panel_width for i in range(self.panel_count - 1)]


def frame_id(index: int) -> str:
    return f"frame-{index + 1}"


def frame_ids(panel_count: int) -> list[str]:
    return [frame_id(i) for i in range(panel_count)]


def compute_board_layout(
    board_height: float,
    panel_count: int,
    aspect_ratio: float,
    device_height: int,
    frame_top: float = FRAME_TOP,
) -> BoardLayout:
    """Derive panel slots and device frames for a target aspect ratio."""
    if panel_count < 1:
        raise ValueError("panel_count must be at least 1")
    if board_height <= 0 or aspect_ratio <= 0:
        raise ValueError("board_height and aspect_ratio must be positive")

    panel_width = board_height * aspect_ratio
    board_width = panel_width * panel_count
    device_width = round(device_height * aspect_ratio)

    frames = tuple(
        FrameRect(
            x=i * panel_width + (panel_width - device_width) / 2,
            y=frame_top,
            width=device_width,
            height=device_height,
            id=frame_id(i),
            index=i,
        )
        for i in range(panel_count)
    )
    return BoardLayout(
        board_width=board_width,
        board_height=board_height,
        panel_width=panel_width,
        panel_count=panel_count,
        device_width=device_width,
        device_height=device_height,
        frames=frames,
    )


def screen_rect(frame: Rect) -> Rect:
    """Area inside the device chrome where the screenshot is shown."""
    return Rect(
        frame.x + SCREEN_INSET,
        frame.y + SCREEN_INSET,
        max(1.0, frame.width - SCREEN_INSET * 2),
        max(1.0, frame.height - SCREEN_INSET * 2),
    )


def panel_bounds(index: int, panel_count: int, raster_width: int) -> tuple[int, int]:
    """Horizontal [start, end) pixel bounds of one panel in a captured raster.

    Boundaries are proportional so rounding never accumulates: panel i ends
    exactly where panel i + 1 starts and the last panel ends at raster_width.
    """
    start = round(index / panel_count * raster_width)
    end = round((index + 1) / panel_count * raster_width)
    return start, end


def aspect_fit(
    x: int,
    width: int,
    raster_height: int,
    target_aspect: float,
) -> tuple[int, int, int, int]:
    """Trim a full-height slice to the target aspect, centered.

    Returns (left, top, width, height) of the crop box.
    """
    final_x, final_y = x, 0
    final_w, final_h = width, raster_height
    source_aspect = width / raster_height if raster_height else target_aspect

    if source_aspect > target_aspect:
        final_w = round(raster_height * target_aspect)
        final_x += round((width - final_w) / 2)
    elif source_aspect < target_aspect:
        final_h = round(width / target_aspect)
        final_y = round((raster_height - final_h) / 2)

    return final_x, final_y, max(1, final_w), max(1, final_h)
