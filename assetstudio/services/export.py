"""Capture-then-crop export of storyboard panels.

The whole board is rasterized once at the pixel ratio that makes its height
equal the target height, then sliced into one image per panel. Every panel
therefore shares one background render, and output dimensions depend only on
the target size, never on how large the board was displayed.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from PIL import Image

from assetstudio.core.catalog import TargetSize
from assetstudio.core.metrics import record_exported_panels, track_export
from assetstudio.services.geometry import aspect_fit, panel_bounds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportedPanel:
    name: str
    index: int
    width: int
    height: int
    data: bytes
    language: str | None = None


def panel_filename(index: int, size_id: str, language: str | None = None) -> str:
    name = f"screenshot-{index + 1}-{size_id}.png"
    return f"{language}/{name}" if language else name


def capture_board(surface, target: TargetSize) -> Image.Image | None:
    """Rasterize the full board so its height equals `target.height`.

    `surface` exposes `rendered_width`, `rendered_height` and
    `rasterize(pixel_ratio)`; see `compositor.BoardSurface`. Returns None when
    there is no surface or it has not been laid out yet.
    """
    if surface is None:
        return None
    rendered_height = surface.rendered_height
    if not rendered_height or rendered_height <= 0:
        return None
    pixel_ratio = target.height / rendered_height
    raster = surface.rasterize(pixel_ratio)
    logger.debug(
        "board_captured",
        extra={"pixel_ratio": pixel_ratio, "raster_width": raster.width, "raster_height": raster.height},
    )
    return raster


def crop_panels(raster: Image.Image, target: TargetSize, panel_count: int) -> list[Image.Image]:
    """Slice a captured board into `panel_count` images of exactly the target size."""
    panels: list[Image.Image] = []
    for index in range(panel_count):
        start, end = panel_bounds(index, panel_count, raster.width)
        left, top, width, height = aspect_fit(start, end - start, raster.height, target.aspect_ratio)
        panel = raster.crop((left, top, left + width, top + height))
        if panel.size != (target.width, target.height):
            panel = panel.resize((target.width, target.height), Image.Resampling.LANCZOS)
        panels.append(panel)
    return panels


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, "PNG")
    return buffer.getvalue()


def capture_and_crop_panels(
    surface,
    target: TargetSize,
    panel_count: int,
    *,
    language: str | None = None,
    mode: str = "single",
) -> list[ExportedPanel]:
    """Export every panel of the board; an empty list means nothing to export."""
    with track_export(mode):
        raster = capture_board(surface, target)
        if raster is None:
            logger.info("export_skipped_no_surface")
            return []
        exported = [
            ExportedPanel(
                name=panel_filename(index, target.id, language),
                index=index,
                width=panel.width,
                height=panel.height,
                data=encode_png(panel),
                language=language,
            )
            for index, panel in enumerate(crop_panels(raster, target, panel_count))
        ]
    record_exported_panels(mode, len(exported))
    logger.info(
        "panels_exported",
        extra={"panel_count": len(exported), "size_id": target.id, "mode": mode},
    )
    return exported
