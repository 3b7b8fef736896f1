from pydantic import BaseModel, Field
from typing import List, Optional

from app.config import settings
from app.models.layout import LayoutMode


class Adjustment(BaseModel):
    zoom: float = Field(1.0, ge=1.0, le=4.0)
    # Fractions of the frame's own width/height
    offset_x: float = Field(0.0, ge=-1.0, le=1.0)
    offset_y: float = Field(0.0, ge=-1.0, le=1.0)


class CollageSettings(BaseModel):
    layout_mode: LayoutMode = LayoutMode.strip
    spacing: float = Field(settings.spacing, ge=0, le=120)
    inset: float = Field(settings.inset, ge=0, le=320)
    bottom_margin_extra: float = Field(settings.bottom_margin_extra, ge=0, le=240)
    corner_radius: float = Field(settings.corner_radius, ge=0, le=80)
    draw_border: bool = settings.draw_border
    border_width: float = Field(settings.border_width, ge=0.5, le=20)
    mirror_photos: bool = settings.mirror_photos
    crop_to_four_by_three: bool = settings.crop_to_four_by_three
    strip_length_factor: float = Field(settings.strip_length_factor, ge=0.6, le=2.5)
    width_fraction: float = Field(settings.width_fraction, ge=0.1, le=1.0)

    @property
    def effective_border_width(self) -> float:
        return self.border_width if self.draw_border else 0.0


class CollageSettingsUpdate(BaseModel):
    layout_mode: Optional[LayoutMode] = None
    spacing: Optional[float] = Field(None, ge=0, le=120)
    inset: Optional[float] = Field(None, ge=0, le=320)
    bottom_margin_extra: Optional[float] = Field(None, ge=0, le=240)
    corner_radius: Optional[float] = Field(None, ge=0, le=80)
    draw_border: Optional[bool] = None
    border_width: Optional[float] = Field(None, ge=0.5, le=20)
    mirror_photos: Optional[bool] = None
    crop_to_four_by_three: Optional[bool] = None
    strip_length_factor: Optional[float] = Field(None, ge=0.6, le=2.5)
    width_fraction: Optional[float] = Field(None, ge=0.1, le=1.0)

    def apply_to(self, current: CollageSettings) -> CollageSettings:
        return current.model_copy(update=self.model_dump(exclude_none=True))


class BoothSession(BaseModel):
    session_id: str
    slots: List[Optional[str]]
    active_slot: int = 0
    adjustments: List[Adjustment]
    collage: CollageSettings = Field(default_factory=CollageSettings)
    background: Optional[str] = None

    @classmethod
    def new(cls, session_id: str, photo_count: int, collage: Optional[CollageSettings] = None) -> "BoothSession":
        return cls(
            session_id=session_id,
            slots=[None] * photo_count,
            adjustments=[Adjustment() for _ in range(photo_count)],
            collage=collage or CollageSettings(),
        )

    @property
    def photo_count(self) -> int:
        return len(self.slots)

    @property
    def filled_count(self) -> int:
        return sum(1 for slot in self.slots if slot is not None)

    @property
    def is_complete(self) -> bool:
        return all(slot is not None for slot in self.slots)

    def store_in_active_slot(self, photo: str) -> int:
        """Fill the active slot, then move to the next empty slot (wrapping),
        or simply the next slot when every slot is filled."""
        filled = self.active_slot
        self.slots[filled] = photo

        total = len(self.slots)
        candidates = [(filled + 1 + step) % total for step in range(total)]
        next_empty = next((idx for idx in candidates if self.slots[idx] is None), None)
        self.active_slot = next_empty if next_empty is not None else (filled + 1) % total
        return filled


class SessionCreateRequest(BaseModel):
    collage: Optional[CollageSettingsUpdate] = None


class SessionStatusResponse(BaseModel):
    session_id: Optional[str]
    photo_count: int
    filled_slots: List[bool] = []
    active_slot: int = 0
    ready: bool = False
    has_background: bool = False
    collage: Optional[CollageSettings] = None
    adjustments: List[Adjustment] = []


class PhotoCaptureResponse(BaseModel):
    success: bool
    slot: int
    active_slot: int
    filled_count: int
    ready: bool
    photo: str


class ExportResponse(BaseModel):
    success: bool
    message: str
    filename: Optional[str] = None
    download_url: Optional[str] = None
