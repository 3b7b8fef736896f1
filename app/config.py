from pydantic_settings import BaseSettings
from typing import Tuple
import os


class Settings(BaseSettings):
    app_name: str = "Photo Booth Strip Builder"
    app_description: str = "Snap 3 photos, build a strip collage, export an A4 PDF"
    debug: bool = False
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000

    camera_index: int = 0
    camera_width: int = 1920
    camera_height: int = 1080
    camera_fps: int = 30
    camera_probe_limit: int = 4
    preview_width: int = 640
    preview_mirror: bool = True

    photo_quality: int = 95
    preview_quality: int = 60
    exports_dir: str = "exports"

    photo_count: int = 3

    # Collage defaults
    spacing: float = 30
    inset: float = 150
    bottom_margin_extra: float = 240
    corner_radius: float = 8
    draw_border: bool = True
    border_width: float = 1
    mirror_photos: bool = False
    crop_to_four_by_three: bool = True
    strip_length_factor: float = 1.6
    width_fraction: float = 1.0

    # Region detection
    marker_min_pixels: int = 1000

    # Preview and export canvases (height is multiplied by the strip length factor)
    preview_canvas: Tuple[int, int] = (400, 800)
    export_canvas: Tuple[int, int] = (1000, 2000)

    # A4 in points (72 dpi)
    page_size: Tuple[float, float] = (595, 842)
    page_margin: float = 24

    class Config:
        env_file = ".env"


settings = Settings()
os.makedirs(settings.exports_dir, exist_ok=True)
