from PIL import Image, UnidentifiedImageError
import base64
import binascii
import io
from typing import Optional, Tuple

from app.config import settings
from app.logging import get_logger
from app.models.layout import Layout
from app.models.session import BoothSession
from app.services.compositor import CollageStyle, render_collage
from app.services.layout import InsufficientRegionsError, StripParams, resolve_layout, resolve_strip

logger = get_logger(__name__)


class PhotoService:
    def decode_image(self, photo_b64: str) -> Image.Image:
        try:
            img_data = base64.b64decode(photo_b64, validate=True)
            img = Image.open(io.BytesIO(img_data))
            img.load()
        except (binascii.Error, UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise ValueError(f"Invalid image data: {e}") from e
        return img

    def encode_image(self, img: Image.Image, image_format: str = "JPEG") -> str:
        buffer = io.BytesIO()
        if image_format == "JPEG":
            img.convert("RGB").save(buffer, format="JPEG", quality=settings.photo_quality)
        else:
            img.save(buffer, format=image_format)
        return base64.b64encode(buffer.getvalue()).decode('utf-8')

    def preview_canvas_size(self, session: BoothSession, width: Optional[int] = None, height: Optional[int] = None) -> Tuple[int, int]:
        base_width, base_height = settings.preview_canvas
        width = width or base_width
        height = height or base_height
        return (width, round(height * session.collage.strip_length_factor))

    def export_canvas_size(self, session: BoothSession) -> Tuple[int, int]:
        width, height = settings.export_canvas
        return (width, round(height * session.collage.strip_length_factor))

    def strip_params(self, session: BoothSession) -> StripParams:
        collage = session.collage
        return StripParams(
            spacing=collage.spacing,
            inset_top=collage.inset,
            inset_bottom=collage.inset + collage.bottom_margin_extra,
        )

    def resolve_session_layout(self, session: BoothSession, canvas_size: Tuple[int, int], background: Optional[Image.Image]) -> Layout:
        try:
            return resolve_layout(
                session.collage.layout_mode,
                canvas_size,
                session.photo_count,
                background=background,
                strip_params=self.strip_params(session),
            )
        except InsufficientRegionsError as e:
            logger.warning(f"{e}; falling back to strip layout")
            return resolve_strip(canvas_size, session.photo_count, self.strip_params(session))

    def build_collage(self, session: BoothSession, canvas_size: Tuple[int, int]) -> Optional[Image.Image]:
        """Render the session's collage, or None while any slot is still empty."""
        if not session.is_complete:
            return None

        photos = [self.decode_image(photo) for photo in session.slots]
        background = self.decode_image(session.background) if session.background else None
        layout = self.resolve_session_layout(session, canvas_size, background)

        collage = session.collage
        style = CollageStyle(
            corner_radius=collage.corner_radius,
            border_width=collage.effective_border_width,
            background=background,
            mirror=collage.mirror_photos,
            crop_to_four_by_three=collage.crop_to_four_by_three,
        )

        logger.debug(
            f"Rendering {layout.mode.value} collage {canvas_size[0]}x{canvas_size[1]} "
            f"for session {session.session_id}"
        )
        return render_collage(photos, layout, style, session.adjustments)


photo_service = PhotoService()
