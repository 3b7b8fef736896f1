"""
Layout resolution for the collage.

Two strategies produce the same Layout shape: evenly spaced strip frames, or
frames taken from marker regions detected in a template background.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
from PIL import Image

from app.logging import get_logger
from app.models.layout import Frame, Layout, LayoutMode
from app.services.regions import RegionDetectionConfig, detect_regions

logger = get_logger(__name__)

SLOT_ASPECT = 4.0 / 3.0

# Normalized (x, y from top, w, h) frames of the built-in three-slot template
BUILTIN_TEMPLATE_FRAMES: Tuple[Tuple[float, float, float, float], ...] = (
    (0.153257, 0.047648, 0.691571, 0.199638),
    (0.153257, 0.257539, 0.691571, 0.199638),
    (0.153257, 0.467431, 0.691571, 0.199035),
)


class InsufficientRegionsError(Exception):
    """Template mode found fewer placement regions than photos."""

    def __init__(self, found: int, required: int):
        self.found = found
        self.required = required
        super().__init__(f"Template has {found} placement regions, {required} required")


@dataclass
class StripParams:
    spacing: float = 30
    inset_top: float = 150
    inset_bottom: float = 150
    aspect: float = SLOT_ASPECT


def resolve_strip(canvas_size: Tuple[int, int], photo_count: int, params: Optional[StripParams] = None) -> Layout:
    if params is None:
        params = StripParams()

    canvas_width, canvas_height = canvas_size
    gaps = max(photo_count - 1, 0)

    available_height = max(canvas_height - params.inset_top - params.inset_bottom - params.spacing * gaps, 0.0)
    available_width = max(canvas_width - 2 * params.inset_top, 0.0)

    frame_height = available_height / photo_count if photo_count > 0 else 0.0
    frame_width = min(frame_height * params.aspect, available_width)
    x = (canvas_width - frame_width) / 2.0

    frames = tuple(
        Frame(x=x, y=params.inset_top + i * (frame_height + params.spacing), width=frame_width, height=frame_height)
        for i in range(photo_count)
    )
    return Layout(frames=frames, canvas_size=canvas_size, mode=LayoutMode.strip)


def resolve_template(
    canvas_size: Tuple[int, int],
    photo_count: int,
    background: Optional[Image.Image] = None,
    config: Optional[RegionDetectionConfig] = None,
) -> Layout:
    """
    Frames from the marker regions of a template background.

    Regions are detected at the background's native resolution, ordered top of
    image first and rescaled to the canvas with independent X and Y factors.

    Raises:
        InsufficientRegionsError: fewer regions than photo_count
    """
    if background is None:
        return _builtin_template(canvas_size, photo_count)

    regions = detect_regions(background, config)
    logger.debug(f"Template background yielded {len(regions)} regions for {photo_count} photos")
    if len(regions) < photo_count:
        raise InsufficientRegionsError(found=len(regions), required=photo_count)

    scan_boxes = sorted((region.to_scan_box() for region in regions), key=lambda box: (box[1], box[0]))

    bg_width, bg_height = background.size
    scale_x = canvas_size[0] / bg_width
    scale_y = canvas_size[1] / bg_height

    frames = []
    for min_x, min_y, max_x, max_y in scan_boxes[:photo_count]:
        native = Frame(x=min_x, y=min_y, width=max_x - min_x + 1, height=max_y - min_y + 1)
        frames.append(native.scaled(scale_x, scale_y))

    return Layout(frames=tuple(frames), canvas_size=canvas_size, mode=LayoutMode.template)


def _builtin_template(canvas_size: Tuple[int, int], photo_count: int) -> Layout:
    if photo_count > len(BUILTIN_TEMPLATE_FRAMES):
        raise InsufficientRegionsError(found=len(BUILTIN_TEMPLATE_FRAMES), required=photo_count)

    canvas_width, canvas_height = canvas_size
    frames = tuple(
        Frame(x=nx, y=ny, width=nw, height=nh).scaled(canvas_width, canvas_height)
        for nx, ny, nw, nh in BUILTIN_TEMPLATE_FRAMES[:photo_count]
    )
    return Layout(frames=frames, canvas_size=canvas_size, mode=LayoutMode.template)


def resolve_layout(
    mode: LayoutMode,
    canvas_size: Tuple[int, int],
    photo_count: int,
    background: Optional[Image.Image] = None,
    strip_params: Optional[StripParams] = None,
) -> Layout:
    if mode == LayoutMode.template:
        return resolve_template(canvas_size, photo_count, background)
    return resolve_strip(canvas_size, photo_count, strip_params)
