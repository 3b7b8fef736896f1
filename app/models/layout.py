from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class LayoutMode(str, Enum):
    strip = "strip"
    template = "template"


@dataclass(frozen=True)
class Frame:
    """Axis-aligned placement rectangle, top-left origin, y grows downward."""

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

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def scaled(self, scale_x: float, scale_y: float) -> "Frame":
        return Frame(
            x=self.x * scale_x,
            y=self.y * scale_y,
            width=self.width * scale_x,
            height=self.height * scale_y,
        )

    def pixel_box(self) -> Tuple[int, int, int, int]:
        """Rounded (left, top, right, bottom) box used for rasterizing."""
        return (round(self.x), round(self.y), round(self.right), round(self.bottom))


@dataclass(frozen=True)
class Layout:
    frames: Tuple[Frame, ...]
    canvas_size: Tuple[int, int]
    mode: LayoutMode = LayoutMode.strip

    def __len__(self) -> int:
        return len(self.frames)
