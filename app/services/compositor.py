"""
Collage compositor.

Renders source photos into the frames of a Layout. Only the frame list and
canvas size are used; how the layout was produced does not matter here.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from PIL import Image, ImageChops, ImageDraw, ImageOps

from app.models.layout import Frame, Layout
from app.models.session import Adjustment
from app.services.layout import SLOT_ASPECT

NEUTRAL_FILL = (236, 236, 236, 255)
BORDER_COLOR = (29, 29, 31, 153)


@dataclass
class CollageStyle:
    corner_radius: float = 8
    border_width: float = 1
    background: Optional[Image.Image] = None
    mirror: bool = False
    crop_to_four_by_three: bool = True
    # Black overlay alpha drawn over a supplied background for contrast
    background_dim: float = 0.05
    fill_color: Tuple[int, int, int, int] = NEUTRAL_FILL
    border_color: Tuple[int, int, int, int] = BORDER_COLOR


def normalize_photos(photos: Sequence[Image.Image], count: int) -> List[Image.Image]:
    """Truncate to count, or pad by repeating the last photo."""
    if not photos:
        raise ValueError("No photos provided")
    normalized = list(photos[:count])
    normalized.extend([normalized[-1]] * (count - len(normalized)))
    return normalized


def crop_to_aspect(image: Image.Image, aspect: float) -> Image.Image:
    width, height = image.size
    if width / height > aspect:
        new_width = round(height * aspect)
        left = (width - new_width) // 2
        return image.crop((left, 0, left + new_width, height))

    new_height = round(width / aspect)
    top = (height - new_height) // 2
    return image.crop((0, top, width, top + new_height))


def aspect_fill_rect(
    image_size: Tuple[int, int],
    frame: Frame,
    adjustment: Optional[Adjustment] = None
) -> Tuple[float, float, float, float]:
    """(left, top, width, height) covering the frame, zoomed and panned."""
    if adjustment is None:
        adjustment = Adjustment()

    image_width, image_height = image_size
    scale = max(frame.width / image_width, frame.height / image_height) * adjustment.zoom
    width = image_width * scale
    height = image_height * scale

    center_x, center_y = frame.center
    center_x += adjustment.offset_x * frame.width
    center_y += adjustment.offset_y * frame.height
    return (center_x - width / 2.0, center_y - height / 2.0, width, height)


def rounded_mask(size: Tuple[int, int], radius: float) -> Image.Image:
    width, height = size
    radius = max(0, min(round(radius), min(width, height) // 2))
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, width - 1, height - 1), radius=radius, fill=255)
    return mask


def render_collage(
    photos: Sequence[Image.Image],
    layout: Layout,
    style: Optional[CollageStyle] = None,
    adjustments: Optional[Sequence[Adjustment]] = None,
) -> Image.Image:
    if style is None:
        style = CollageStyle()
    adjustments = list(adjustments or [])

    canvas = _paint_background(layout.canvas_size, style)
    sources = normalize_photos(photos, len(layout.frames))

    for index, frame in enumerate(layout.frames):
        adjustment = adjustments[index] if index < len(adjustments) else Adjustment()

        source = sources[index].convert("RGBA")
        if style.mirror:
            source = ImageOps.mirror(source)
        if style.crop_to_four_by_three:
            source = crop_to_aspect(source, SLOT_ASPECT)

        _draw_clipped(canvas, source, frame, adjustment, style.corner_radius)
        if style.border_width > 0:
            _stroke_border(canvas, frame, style)

    return canvas.convert("RGB")


def _paint_background(size: Tuple[int, int], style: CollageStyle) -> Image.Image:
    if style.background is None:
        return Image.new("RGBA", size, style.fill_color)

    canvas = style.background.convert("RGBA").resize(size, Image.Resampling.LANCZOS)
    if style.background_dim > 0:
        dim = Image.new("RGBA", size, (0, 0, 0, round(255 * style.background_dim)))
        canvas.alpha_composite(dim)
    return canvas


def _draw_clipped(canvas: Image.Image, source: Image.Image, frame: Frame, adjustment: Adjustment, radius: float):
    left, top, right, bottom = frame.pixel_box()
    tile_width, tile_height = right - left, bottom - top
    if tile_width <= 0 or tile_height <= 0:
        return

    placed_left, placed_top, placed_width, placed_height = aspect_fill_rect(source.size, frame, adjustment)
    placed = source.resize(
        (max(1, round(placed_width)), max(1, round(placed_height))),
        Image.Resampling.LANCZOS
    )

    tile = Image.new("RGBA", (tile_width, tile_height), (0, 0, 0, 0))
    tile.paste(placed, (round(placed_left) - left, round(placed_top) - top))

    mask = rounded_mask((tile_width, tile_height), radius)
    tile.putalpha(ImageChops.multiply(tile.getchannel("A"), mask))
    canvas.alpha_composite(tile, (left, top))


def _stroke_border(canvas: Image.Image, frame: Frame, style: CollageStyle):
    left, top, right, bottom = frame.pixel_box()
    if right - left <= 0 or bottom - top <= 0:
        return

    # Pillow strokes inside the box; grow it so the line straddles the clip edge
    width = max(1, round(style.border_width))
    outset = width // 2
    radius = max(0, min(round(style.corner_radius), min(right - left, bottom - top) // 2))
    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    ImageDraw.Draw(overlay).rounded_rectangle(
        (left - outset, top - outset, right - 1 + outset, bottom - 1 + outset),
        radius=radius + outset,
        outline=style.border_color,
        width=width,
    )
    canvas.alpha_composite(overlay)
