"""
Single-page PDF export of a composited strip.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdf_canvas
import io
import os
import tempfile
import uuid
from datetime import datetime

from app.config import settings
from app.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Placement:
    """Image rectangle on the page in PDF points, bottom-left origin."""

    x: float
    y: float
    width: float
    height: float
    scale: float


@dataclass
class ExportResult:
    success: bool
    message: str
    path: Optional[str] = None


def rotate_to_landscape(strip: Image.Image) -> Image.Image:
    """Rotate 90 degrees counter-clockwise so the strip's long axis is horizontal.

    The strip's top edge ends up on the left and its left edge on the bottom.
    """
    return strip.transpose(Image.Transpose.ROTATE_90)


def compute_placement(
    image_size: Tuple[float, float],
    width_fraction: float,
    page_size: Tuple[float, float] = settings.page_size,
    margin: float = settings.page_margin,
) -> Placement:
    """Uniformly scale an (already rotated) image to a fraction of the printable
    width, centred horizontally with its top edge `margin` below the page top."""
    width_fraction = min(max(width_fraction, 0.0), 1.0)
    page_width, page_height = page_size
    image_width, image_height = image_size

    target_width = (page_width - 2 * margin) * width_fraction
    scale = target_width / image_width
    draw_height = image_height * scale

    return Placement(
        x=(page_width - target_width) / 2.0,
        y=page_height - margin - draw_height,
        width=target_width,
        height=draw_height,
        scale=scale,
    )


def paginate(
    strip: Image.Image,
    width_fraction: float,
    page_size: Tuple[float, float] = settings.page_size,
    margin: float = settings.page_margin,
) -> bytes:
    rotated = rotate_to_landscape(strip)
    placement = compute_placement(rotated.size, width_fraction, page_size, margin)

    buffer = io.BytesIO()
    pdf = pdf_canvas.Canvas(buffer, pagesize=page_size)
    pdf.drawImage(
        ImageReader(rotated.convert("RGB")),
        placement.x,
        placement.y,
        width=placement.width,
        height=placement.height,
    )
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


class DocumentService:
    def __init__(self, exports_dir: str = settings.exports_dir):
        self.exports_dir = exports_dir

    def new_filename(self) -> str:
        return f"photobooth_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}.pdf"

    def export(self, strip: Image.Image, width_fraction: float, filename: Optional[str] = None) -> ExportResult:
        data = paginate(strip, width_fraction)
        return self.write(data, filename or self.new_filename())

    def write(self, data: bytes, filename: str) -> ExportResult:
        """Write atomically: temp file in the target directory, then rename."""
        filepath = os.path.join(self.exports_dir, filename)
        tmp_path = None
        try:
            os.makedirs(self.exports_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.exports_dir, suffix=".part")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, filepath)
        except OSError as e:
            logger.error(f"Failed to save {filepath}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            return ExportResult(success=False, message=f"Failed to save: {e.strerror or e}")

        logger.info(f"Saved document to {filepath}")
        return ExportResult(success=True, message=f"Saved to {filepath}", path=filepath)

    def list_documents(self) -> List[dict]:
        documents = []
        if os.path.exists(self.exports_dir):
            for filename in os.listdir(self.exports_dir):
                if filename.lower().endswith(".pdf"):
                    filepath = os.path.join(self.exports_dir, filename)
                    stat = os.stat(filepath)
                    documents.append({
                        "filename": filename,
                        "size": stat.st_size,
                        "created": datetime.fromtimestamp(stat.st_ctime).isoformat(),
                        "download_url": f"/api/exports/{filename}"
                    })
        return sorted(documents, key=lambda x: x["created"], reverse=True)


document_service = DocumentService()
