"""
Template region detection.

Locates photo placement regions in a template background by flood-filling a
chroma-key marker colour (near-pure green).
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np
from PIL import Image

from app.config import settings
from app.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RegionDetectionConfig:
    """Configuration for marker region detection."""

    # Marker class thresholds on 0-255 channels: r, b below, g above
    max_red: int = 20
    max_blue: int = 20
    min_green: int = 235

    # Components smaller than this are treated as noise
    min_pixels: int = settings.marker_min_pixels


@dataclass
class DetectedRegion:
    """A connected marker component."""

    # Bounding box in canvas coordinates (x, y, w, h), bottom-left origin
    bbox: Tuple[int, int, int, int]

    # Number of marker pixels in the component
    pixel_count: int

    # Height of the scanned image, needed to flip back to scan space
    image_height: int

    def to_scan_box(self) -> Tuple[int, int, int, int]:
        """Inclusive (min_x, min_y, max_x, max_y) box, top-left origin."""
        return canvas_to_scan(self.bbox, self.image_height)


def scan_to_canvas(scan_box: Tuple[int, int, int, int], image_height: int) -> Tuple[int, int, int, int]:
    """Convert an inclusive top-left scan box to a bottom-left (x, y, w, h) box."""
    min_x, min_y, max_x, max_y = scan_box
    width = max_x - min_x + 1
    height = max_y - min_y + 1
    return (min_x, image_height - max_y - 1, width, height)


def canvas_to_scan(bbox: Tuple[int, int, int, int], image_height: int) -> Tuple[int, int, int, int]:
    """Inverse of scan_to_canvas."""
    x, y, w, h = bbox
    max_y = image_height - y - 1
    return (x, max_y - h + 1, x + w - 1, max_y)


def marker_mask(image, config: Optional[RegionDetectionConfig] = None) -> np.ndarray:
    """Boolean mask of pixels in the marker colour class."""
    if config is None:
        config = RegionDetectionConfig()

    if isinstance(image, Image.Image):
        pixels = np.asarray(image.convert("RGB"))
    else:
        pixels = np.asarray(image)
        if pixels.ndim == 2:
            return np.zeros(pixels.shape, dtype=bool)
        pixels = pixels[:, :, :3]

    red = pixels[:, :, 0].astype(np.int16)
    green = pixels[:, :, 1].astype(np.int16)
    blue = pixels[:, :, 2].astype(np.int16)
    return (red < config.max_red) & (blue < config.max_blue) & (green > config.min_green)


def detect_regions(
    image,
    config: Optional[RegionDetectionConfig] = None
) -> List[DetectedRegion]:
    """
    Detect marker-coloured placement regions in a template image.

    Args:
        image: PIL image or RGB(A) numpy array
        config: Detection configuration (uses defaults if None)

    Returns:
        Regions in row-major discovery order, bboxes in bottom-left canvas
        coordinates. Empty when nothing survives the noise floor.
    """
    if config is None:
        config = RegionDetectionConfig()

    mask = marker_mask(image, config)
    height, width = mask.shape
    logger.debug(f"Detecting marker regions in {width}x{height} image")

    # Flat scratch copy of the mask; cleared as pixels are claimed
    pending = bytearray(mask.astype(np.uint8).tobytes())

    regions = []
    for start in np.flatnonzero(mask).tolist():
        if not pending[start]:
            continue

        scan_box, count = _flood_fill(pending, width, height, start)
        if count < config.min_pixels:
            continue

        regions.append(DetectedRegion(
            bbox=scan_to_canvas(scan_box, height),
            pixel_count=count,
            image_height=height,
        ))

    logger.debug(f"Found {len(regions)} marker regions")
    return regions


def _flood_fill(pending: bytearray, width: int, height: int, start: int) -> Tuple[Tuple[int, int, int, int], int]:
    """4-connected fill with an explicit stack. Returns (scan box, pixel count)."""
    pending[start] = 0
    stack = [start]

    min_x = max_x = start % width
    min_y = max_y = start // width
    count = 0

    while stack:
        index = stack.pop()
        y, x = divmod(index, width)
        count += 1

        if x < min_x:
            min_x = x
        elif x > max_x:
            max_x = x
        if y < min_y:
            min_y = y
        elif y > max_y:
            max_y = y

        if x > 0 and pending[index - 1]:
            pending[index - 1] = 0
            stack.append(index - 1)
        if x < width - 1 and pending[index + 1]:
            pending[index + 1] = 0
            stack.append(index + 1)
        if y > 0 and pending[index - width]:
            pending[index - width] = 0
            stack.append(index - width)
        if y < height - 1 and pending[index + width]:
            pending[index + width] = 0
            stack.append(index + width)

    return (min_x, min_y, max_x, max_y), count
