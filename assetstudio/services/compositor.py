"""Scene composition and rasterization for the storyboard board.

`build_scene` turns a storyboard snapshot into an ordered list of scene nodes
in board coordinates. `SceneRenderer` draws that list with Pillow at any
scale. Guide nodes (selection rings, divider guides, text outlines, resize
handles, the instructional hint) carry `export_excluded=True`: previews draw
them, captures skip them.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from PIL import Image, ImageDraw, ImageFilter, ImageFont, ImageOps

from assetstudio.core.catalog import SOURCE_LANGUAGE, find_font
from assetstudio.core.settings import settings
from assetstudio.services.geometry import (
    DEVICE_BORDER_WIDTH,
    DEVICE_CORNER_RADIUS,
    SCREEN_INSET,
    Rect,
)
from assetstudio.services.storyboard import StoryboardState, TextLayer

logger = logging.getLogger(__name__)

GRADIENT_ANGLE = 130
LINE_HEIGHT_RATIO = 0.94
SCREEN_CORNER_RADIUS = 38
SCREEN_FILL = "#121a2f"
DEVICE_FILL = "#e2e8f0"
SHADOW_OFFSET_Y = 20
SHADOW_BLUR = 20
SELECTION_RGBA = (103, 232, 249, 178)
OUTLINE_RGBA = (103, 232, 249, 153)
HINT_TEXT = "Drag devices to reposition. Drag screenshots inside frames. Click text to edit."
_FALLBACK_FONT_FILES = ("DejaVuSans-Bold.ttf", "DejaVuSans.ttf")

Z_BACKGROUND = 0
Z_GLOW = 1
Z_DEVICE = 10
Z_TEXT = 30
Z_DIVIDER = 40
Z_GUIDE = 50
Z_HINT = 60


@dataclass(frozen=True)
class SceneNode:
    kind: str
    rect: Rect
    z: int
    export_excluded: bool = False
    props: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Scene:
    width: float
    height: float
    nodes: tuple[SceneNode, ...]

    def visible_nodes(self, include_excluded: bool) -> list[SceneNode]:
        nodes = [node for node in self.nodes if include_excluded or not node.export_excluded]
        return sorted(nodes, key=lambda node: node.z)


# --- fonts and text ----------------------------------------------------------


def _font_candidates(family: str, weight: int) -> list[str]:
    option = find_font(family)
    files = list(option.files) if option else []
    if weight < 600:
        files.reverse()
    return files + list(_FALLBACK_FONT_FILES if weight >= 600 else reversed(_FALLBACK_FONT_FILES))


@lru_cache(maxsize=128)
def load_font(family: str, size: int, weight: int = 400) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    size = max(1, int(size))
    font_dir = Path(settings.font_dir) if settings.font_dir else None
    for filename in _font_candidates(family, weight):
        paths = [str(font_dir / filename)] if font_dir else []
        paths.append(filename)
        for path in paths:
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue
    logger.warning("font_fallback_default", extra={"font_family": family, "font_size": size})
    return ImageFont.load_default(size=size)


def wrap_text(text: str, font, max_width: float) -> list[str]:
    """Greedy word wrap that keeps explicit line breaks."""
    lines: list[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split(" ")
        current: list[str] = []
        for word in words:
            candidate = " ".join(current + [word])
            if not current or font.getlength(candidate) <= max_width:
                current.append(word)
            else:
                lines.append(" ".join(current))
                current = [word]
        lines.append(" ".join(current))
    return lines


def measure_text_height(text: str, layer: TextLayer) -> float:
    font = load_font(layer.font_family, layer.font_size, layer.font_weight)
    lines = wrap_text(text, font, layer.width)
    return max(1, len(lines)) * layer.font_size * LINE_HEIGHT_RATIO


def resolve_layer_text(state: StoryboardState, layer: TextLayer) -> str:
    """Text shown for a layer under the active storyboard language."""
    if state.active_language == SOURCE_LANGUAGE:
        return layer.text
    overlay = state.overlays.get(state.active_language) or {}
    return overlay.get(layer.id, layer.text)


# --- scene -------------------------------------------------------------------


def build_scene(state: StoryboardState) -> Scene:
    layout = state.layout
    width, height = layout.board_width, layout.board_height
    board = Rect(0, 0, width, height)
    background = state.background

    nodes: list[SceneNode] = []
    if background.panorama_asset_id:
        nodes.append(
            SceneNode(
                kind="panorama",
                rect=Rect(
                    background.panorama_offset.x,
                    background.panorama_offset.y,
                    width * background.panorama_scale,
                    height * background.panorama_scale,
                ),
                z=Z_BACKGROUND,
                props={"asset_id": background.panorama_asset_id},
            )
        )
    else:
        nodes.append(
            SceneNode(
                kind="gradient",
                rect=board,
                z=Z_BACKGROUND,
                props={
                    "start": background.primary_color,
                    "end": background.secondary_color,
                    "angle": GRADIENT_ANGLE,
                },
            )
        )
    nodes.append(SceneNode(kind="glow", rect=board, z=Z_GLOW))

    for frame in layout.frames:
        offset = state.device_offset(frame.id)
        rect = Rect(frame.x + offset.x, frame.y + offset.y, frame.width, frame.height)
        rotation = state.device_rotation(frame.id)
        nodes.append(
            SceneNode(
                kind="device",
                rect=rect,
                z=Z_DEVICE + frame.index,
                props={
                    "frame_id": frame.id,
                    "rotation": rotation,
                    "asset_id": state.screenshots.get(frame.id),
                    "transform": state.screenshot_transform(frame.id),
                },
            )
        )
        if frame.id == state.selected_frame_id:
            nodes.append(
                SceneNode(
                    kind="selection_ring",
                    rect=rect,
                    z=Z_DEVICE + frame.index,
                    export_excluded=True,
                    props={"rotation": rotation},
                )
            )

    for index, x in enumerate(layout.divider_positions()):
        nodes.append(
            SceneNode(
                kind="divider",
                rect=Rect(x, 0, 0, height),
                z=Z_DIVIDER,
                export_excluded=True,
                props={"label": f"{index + 1} | {index + 2}"},
            )
        )

    for layer in state.text_layers:
        text = resolve_layer_text(state, layer)
        rect = Rect(layer.x, layer.y, layer.width, measure_text_height(text, layer))
        nodes.append(
            SceneNode(
                kind="text",
                rect=rect,
                z=Z_TEXT,
                props={
                    "layer_id": layer.id,
                    "text": text,
                    "font_family": layer.font_family,
                    "font_size": layer.font_size,
                    "font_weight": layer.font_weight,
                    "color": layer.color,
                    "text_align": layer.text_align,
                },
            )
        )
        if layer.id == state.selected_text_id:
            nodes.append(
                SceneNode(
                    kind="text_outline",
                    rect=Rect(rect.x - 8, rect.y - 8, rect.width + 16, rect.height + 16),
                    z=Z_GUIDE,
                    export_excluded=True,
                )
            )
            nodes.append(
                SceneNode(
                    kind="resize_handle",
                    rect=Rect(rect.right + 4, rect.y, 16, rect.height),
                    z=Z_GUIDE,
                    export_excluded=True,
                )
            )

    nodes.append(SceneNode(kind="hint", rect=Rect(24, height - 56, 0, 36), z=Z_HINT, export_excluded=True))
    return Scene(width=width, height=height, nodes=tuple(nodes))


# --- drawing helpers ---------------------------------------------------------


def hex_to_rgba(hex_color: str, opacity: float = 1.0) -> tuple[int, int, int, int]:
    """Convert hex color to RGBA tuple with opacity."""
    hex_color = hex_color.lstrip("#")
    if len(hex_color) == 3:
        hex_color = "".join([c * 2 for c in hex_color])
    r, g, b = int(hex_color[0:2], 16), int(hex_color[2:4], 16), int(hex_color[4:6], 16)
    return (r, g, b, int(opacity * 255))


def linear_gradient(size: tuple[int, int], start: str, end: str, angle: float) -> Image.Image:
    """CSS-style linear gradient; `angle` follows CSS (180 = top to bottom)."""
    width, height = size
    radians = math.radians(angle)
    span = max(1, round(abs(width * math.sin(radians)) + abs(height * math.cos(radians))))
    side = math.ceil(math.hypot(width, height)) + 2

    ramp = Image.linear_gradient("L").resize((side, span))
    mask = Image.new("L", (side, side), 0)
    top = (side - span) // 2
    mask.paste(255, (0, top + span, side, side))
    mask.paste(ramp, (0, top))
    mask = mask.rotate(180 - angle, resample=Image.Resampling.BICUBIC)
    left = (side - width) // 2
    upper = (side - height) // 2
    mask = mask.crop((left, upper, left + width, upper + height))

    first = Image.new("RGBA", size, hex_to_rgba(start))
    second = Image.new("RGBA", size, hex_to_rgba(end))
    return Image.composite(second, first, mask)


def _radial_glow(size: tuple[int, int], center: tuple[float, float], peak_alpha: int) -> Image.Image:
    width, height = size
    cx, cy = center[0] * width, center[1] * height
    farthest = max(math.hypot(cx - x, cy - y) for x in (0, width) for y in (0, height))
    radius = max(1, round(farthest * 0.35))
    falloff = ImageOps.invert(Image.radial_gradient("L")).resize((radius * 2, radius * 2))
    falloff = falloff.point(lambda v: v * peak_alpha // 255)
    alpha = Image.new("L", size, 0)
    alpha.paste(falloff, (round(cx - radius), round(cy - radius)))
    layer = Image.new("RGBA", size, (255, 255, 255, 0))
    layer.putalpha(alpha)
    return layer


def _dashed_line(draw: ImageDraw.ImageDraw, start, end, fill, width: int, dash: int) -> None:
    (x0, y0), (x1, y1) = start, end
    length = math.hypot(x1 - x0, y1 - y0)
    if length == 0:
        return
    steps = int(length // (dash * 2)) + 1
    for i in range(steps):
        a = i * dash * 2 / length
        b = min(1.0, (i * dash * 2 + dash) / length)
        draw.line(
            [(x0 + (x1 - x0) * a, y0 + (y1 - y0) * a), (x0 + (x1 - x0) * b, y0 + (y1 - y0) * b)],
            fill=fill,
            width=width,
        )


def _paste_rotated(canvas: Image.Image, layer: Image.Image, center: tuple[float, float], rotation: float) -> None:
    if rotation:
        # CSS rotates clockwise for positive angles, Pillow counter-clockwise.
        layer = layer.rotate(-rotation, resample=Image.Resampling.BICUBIC, expand=True)
    _composite_clipped(
        canvas,
        layer,
        round(center[0] - layer.width / 2),
        round(center[1] - layer.height / 2),
    )


def _composite_clipped(canvas: Image.Image, layer: Image.Image, x: int, y: int) -> None:
    # alpha_composite rejects negative destinations, so crop the layer first.
    left, top = max(0, -x), max(0, -y)
    if left >= layer.width or top >= layer.height:
        return
    canvas.alpha_composite(layer.crop((left, top, layer.width, layer.height)), dest=(x + left, y + top))


# --- renderer ----------------------------------------------------------------


class SceneRenderer:
    """Draws a `Scene` with Pillow at an arbitrary scale."""

    def __init__(self, assets: Mapping[str, Image.Image] | None = None):
        self.assets = assets or {}

    def render(
        self,
        scene: Scene,
        scale: float,
        size: tuple[int, int] | None = None,
        include_excluded: bool = False,
    ) -> Image.Image:
        size = size or (max(1, round(scene.width * scale)), max(1, round(scene.height * scale)))
        canvas = Image.new("RGBA", size, (0, 0, 0, 0))
        for node in scene.visible_nodes(include_excluded):
            handler = getattr(self, f"_draw_{node.kind}", None)
            if handler is None:
                logger.debug("scene_node_skipped", extra={"kind": node.kind})
                continue
            handler(canvas, node, scale)
        return canvas

    def _draw_gradient(self, canvas: Image.Image, node: SceneNode, scale: float) -> None:
        props = node.props
        canvas.alpha_composite(linear_gradient(canvas.size, props["start"], props["end"], props["angle"]))

    def _draw_panorama(self, canvas: Image.Image, node: SceneNode, scale: float) -> None:
        image = self.assets.get(node.props["asset_id"])
        if image is None:
            logger.warning("panorama_asset_missing", extra={"asset_id": node.props["asset_id"]})
            return
        rect = node.rect.scaled(scale)
        resized = image.convert("RGBA").resize((max(1, round(rect.width)), max(1, round(rect.height))))
        _composite_clipped(canvas, resized, round(rect.x), round(rect.y))

    def _draw_glow(self, canvas: Image.Image, node: SceneNode, scale: float) -> None:
        # Two soft highlights at 15% opacity over the background.
        canvas.alpha_composite(_radial_glow(canvas.size, (0.25, 0.12), int(0.22 * 0.15 * 255)))
        canvas.alpha_composite(_radial_glow(canvas.size, (0.75, 0.65), int(0.16 * 0.15 * 255)))

    def _draw_device(self, canvas: Image.Image, node: SceneNode, scale: float) -> None:
        rect = node.rect.scaled(scale)
        width, height = max(1, round(rect.width)), max(1, round(rect.height))
        margin = round((SHADOW_BLUR * 2 + SHADOW_OFFSET_Y) * scale)
        layer = Image.new("RGBA", (width + margin * 2, height + margin * 2), (0, 0, 0, 0))
        radius = round(DEVICE_CORNER_RADIUS * scale)

        shadow = Image.new("RGBA", layer.size, (0, 0, 0, 0))
        ImageDraw.Draw(shadow).rounded_rectangle(
            [margin, margin + SHADOW_OFFSET_Y * scale, margin + width - 1, margin + height - 1 + SHADOW_OFFSET_Y * scale],
            radius=radius,
            fill=(0, 0, 0, 89),
        )
        layer.alpha_composite(shadow.filter(ImageFilter.GaussianBlur(SHADOW_BLUR * scale)))

        ImageDraw.Draw(layer).rounded_rectangle(
            [margin, margin, margin + width - 1, margin + height - 1],
            radius=radius,
            fill=DEVICE_FILL,
        )

        border = round(DEVICE_BORDER_WIDTH * scale)
        screen = self._screen_image(node, (max(1, width - border * 2), max(1, height - border * 2)), scale)
        mask = Image.new("L", screen.size, 0)
        ImageDraw.Draw(mask).rounded_rectangle(
            [0, 0, screen.width - 1, screen.height - 1],
            radius=round(SCREEN_CORNER_RADIUS * scale),
            fill=255,
        )
        layer.paste(screen, (margin + border, margin + border), mask)

        center = (rect.x + rect.width / 2, rect.y + rect.height / 2)
        _paste_rotated(canvas, layer, center, node.props.get("rotation", 0.0))

    def _screen_image(self, node: SceneNode, size: tuple[int, int], scale: float) -> Image.Image:
        screen = Image.new("RGBA", size, hex_to_rgba(SCREEN_FILL))
        asset_id = node.props.get("asset_id")
        image = self.assets.get(asset_id) if asset_id else None
        if image is None:
            return screen
        transform = node.props["transform"]
        box_w = max(1, round((node.rect.width - SCREEN_INSET * 2) * transform.scale * scale))
        box_h = max(1, round((node.rect.height - SCREEN_INSET * 2) * transform.scale * scale))
        # object-fit: cover, then scaled from the top-left corner.
        fitted = ImageOps.fit(image.convert("RGBA"), (box_w, box_h), method=Image.Resampling.LANCZOS)
        _composite_clipped(
            screen,
            fitted,
            round((SCREEN_INSET + transform.x) * scale),
            round((SCREEN_INSET + transform.y) * scale),
        )
        return screen

    def _draw_selection_ring(self, canvas: Image.Image, node: SceneNode, scale: float) -> None:
        rect = node.rect.scaled(scale)
        pad = round(4 * scale) + 2
        layer = Image.new("RGBA", (round(rect.width) + pad * 2, round(rect.height) + pad * 2), (0, 0, 0, 0))
        ImageDraw.Draw(layer).rounded_rectangle(
            [pad - 4 * scale, pad - 4 * scale, pad + rect.width + 4 * scale - 1, pad + rect.height + 4 * scale - 1],
            radius=round((DEVICE_CORNER_RADIUS + 4) * scale),
            outline=SELECTION_RGBA,
            width=max(1, round(4 * scale)),
        )
        center = (rect.x + rect.width / 2, rect.y + rect.height / 2)
        _paste_rotated(canvas, layer, center, node.props.get("rotation", 0.0))

    def _draw_divider(self, canvas: Image.Image, node: SceneNode, scale: float) -> None:
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        x = node.rect.x * scale
        _dashed_line(draw, (x, 0), (x, canvas.height), (255, 255, 255, 64), max(1, round(2 * scale)), max(2, round(6 * scale)))
        font = load_font("", round(10 * scale))
        label = node.props.get("label", "")
        label_w = font.getlength(label)
        box = [x - 12 * scale, 8 * scale, x - 12 * scale + label_w + 12 * scale, 8 * scale + 16 * scale]
        draw.rounded_rectangle(box, radius=max(1, round(4 * scale)), fill=(0, 0, 0, 128))
        draw.text((box[0] + 6 * scale, box[1] + 2 * scale), label, font=font, fill=(255, 255, 255, 128))
        canvas.alpha_composite(overlay)

    def _draw_text(self, canvas: Image.Image, node: SceneNode, scale: float) -> None:
        props = node.props
        font_size = max(1, round(props["font_size"] * scale))
        font = load_font(props["font_family"], font_size, props["font_weight"])
        max_width = node.rect.width * scale
        line_height = props["font_size"] * LINE_HEIGHT_RATIO * scale
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        fill = hex_to_rgba(props["color"])
        for index, line in enumerate(wrap_text(props["text"], font, max_width)):
            line_width = font.getlength(line)
            x = node.rect.x * scale
            if props["text_align"] == "center":
                x += (max_width - line_width) / 2
            elif props["text_align"] == "right":
                x += max_width - line_width
            draw.text((x, node.rect.y * scale + index * line_height), line, font=font, fill=fill)
        canvas.alpha_composite(overlay)

    def _draw_text_outline(self, canvas: Image.Image, node: SceneNode, scale: float) -> None:
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        r = node.rect.scaled(scale)
        width, dash = max(1, round(2 * scale)), max(2, round(6 * scale))
        corners = [(r.x, r.y), (r.right, r.y), (r.right, r.bottom), (r.x, r.bottom)]
        for start, end in zip(corners, corners[1:] + corners[:1]):
            _dashed_line(draw, start, end, OUTLINE_RGBA, width, dash)
        canvas.alpha_composite(overlay)

    def _draw_resize_handle(self, canvas: Image.Image, node: SceneNode, scale: float) -> None:
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        r = node.rect.scaled(scale)
        cx, cy = r.x + r.width / 2, r.y + r.height / 2
        ImageDraw.Draw(overlay).rounded_rectangle(
            [cx - 3 * scale, cy - 20 * scale, cx + 3 * scale, cy + 20 * scale],
            radius=max(1, round(3 * scale)),
            fill=(103, 232, 249, 204),
        )
        canvas.alpha_composite(overlay)

    def _draw_hint(self, canvas: Image.Image, node: SceneNode, scale: float) -> None:
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        font = load_font("", round(12 * scale))
        r = node.rect.scaled(scale)
        text_w = font.getlength(HINT_TEXT)
        draw.rounded_rectangle(
            [r.x, r.y, r.x + text_w + 32 * scale, r.y + r.height],
            radius=max(1, round(r.height / 2)),
            fill=(0, 0, 0, 102),
        )
        draw.text((r.x + 16 * scale, r.y + 10 * scale), HINT_TEXT, font=font, fill=hex_to_rgba("#e2e8f0"))
        canvas.alpha_composite(overlay)


class BoardSurface:
    """The rendered board a capture reads from.

    `display_scale` is the zoom the board is currently shown at; it changes the
    rendered element size but never the exported pixel dimensions.
    """

    def __init__(
        self,
        state: StoryboardState,
        assets: Mapping[str, Image.Image] | None = None,
        display_scale: float = 1.0,
    ):
        if display_scale <= 0:
            raise ValueError("display_scale must be positive")
        self.state = state
        self.display_scale = display_scale
        self.renderer = SceneRenderer(assets)

    @property
    def rendered_width(self) -> float:
        return self.state.layout.board_width * self.display_scale

    @property
    def rendered_height(self) -> float:
        return self.state.layout.board_height * self.display_scale

    def rasterize(self, pixel_ratio: float, include_excluded: bool = False) -> Image.Image:
        size = (
            max(1, round(self.rendered_width * pixel_ratio)),
            max(1, round(self.rendered_height * pixel_ratio)),
        )
        return self.renderer.render(
            build_scene(self.state),
            scale=self.display_scale * pixel_ratio,
            size=size,
            include_excluded=include_excluded,
        )

    def preview(self) -> Image.Image:
        return self.rasterize(1.0, include_excluded=True)
