import cv2
import base64
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional
from PIL import Image

from app.config import settings
from app.logging import get_logger

logger = get_logger(__name__)


class CameraService:
    """OpenCV camera. Every device access runs on one dedicated worker thread,
    so captures and preview reads never touch the device concurrently."""

    def __init__(self, device_index: int = settings.camera_index):
        self.camera = None
        self.device_index = device_index
        self.is_active = False
        self.last_error: Optional[str] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="camera")

    @property
    def can_capture(self) -> bool:
        return self.is_active and self.camera is not None and self.camera.isOpened()

    def initialize(self) -> bool:
        self._release()
        try:
            self.camera = cv2.VideoCapture(self.device_index)
            if not self.camera.isOpened():
                raise RuntimeError(f"Could not open camera {self.device_index}")

            self.camera.set(cv2.CAP_PROP_FRAME_WIDTH, settings.camera_width)
            self.camera.set(cv2.CAP_PROP_FRAME_HEIGHT, settings.camera_height)
            self.camera.set(cv2.CAP_PROP_FPS, settings.camera_fps)

            self.is_active = True
            self.last_error = None
            logger.info(f"Camera {self.device_index} initialized")
            return True
        except Exception as e:
            self.is_active = False
            self.last_error = f"Camera unavailable: {e}"
            logger.warning(f"Camera initialization failed: {e}")
            return False

    def initialize_async(self) -> "Future[bool]":
        return self._executor.submit(self.initialize)

    def _read_frame(self):
        if not self.can_capture:
            if not self.initialize():
                return None

        ret, frame = self.camera.read()
        if not ret:
            self.last_error = "Failed to read a frame from the camera"
            logger.warning(self.last_error)
            return None
        return frame

    def capture_photo(self) -> Optional[Image.Image]:
        frame = self._read_frame()
        if frame is None:
            return None
        return Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))

    def capture_async(self) -> "Future[Optional[Image.Image]]":
        """One-shot capture on the camera thread; resolves to an image or None."""
        return self._executor.submit(self.capture_photo)

    def get_preview_frame(self) -> Optional[str]:
        frame = self._read_frame()
        if frame is None:
            return None

        if settings.preview_mirror:
            frame = cv2.flip(frame, 1)
        height, width = frame.shape[:2]
        preview_height = int(height * settings.preview_width / width)
        frame = cv2.resize(frame, (settings.preview_width, preview_height))

        _, buffer = cv2.imencode('.jpg', frame, [cv2.IMWRITE_JPEG_QUALITY, settings.preview_quality])
        return base64.b64encode(buffer).decode('utf-8')

    def preview_async(self) -> "Future[Optional[str]]":
        return self._executor.submit(self.get_preview_frame)

    def list_devices(self) -> List[dict]:
        devices = []
        for index in range(settings.camera_probe_limit):
            if index == self.device_index and self.can_capture:
                devices.append({"index": index, "name": f"Camera {index}", "active": True})
                continue

            probe = cv2.VideoCapture(index)
            try:
                if probe.isOpened():
                    devices.append({"index": index, "name": f"Camera {index}", "active": False})
            finally:
                probe.release()
        return devices

    def list_devices_async(self) -> "Future[List[dict]]":
        return self._executor.submit(self.list_devices)

    def switch_device(self, index: int) -> bool:
        self.device_index = index
        return self.initialize()

    def switch_device_async(self, index: int) -> "Future[bool]":
        return self._executor.submit(self.switch_device, index)

    def _release(self):
        if self.camera is not None:
            self.camera.release()
        self.camera = None
        self.is_active = False

    def cleanup(self):
        self._executor.submit(self._release).result()
        self._executor.shutdown(wait=False)


camera_service = CameraService()
