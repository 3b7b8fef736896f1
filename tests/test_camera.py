import base64
import io

import numpy as np
import pytest
from PIL import Image

from app.services import camera as camera_module
from app.services.camera import CameraService


class FakeCapture:
    """Stand-in for cv2.VideoCapture returning a fixed BGR frame."""

    opened = True
    frame = None

    def __init__(self, index):
        self.index = index
        self.released = False

    def isOpened(self):
        return self.opened and not self.released

    def set(self, prop, value):
        return True

    def read(self):
        if self.frame is None:
            return False, None
        return True, self.frame.copy()

    def release(self):
        self.released = True


@pytest.fixture
def bgr_frame():
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    frame[:, :320] = (255, 0, 0)
    frame[:, 320:] = (0, 0, 255)
    return frame


@pytest.fixture
def camera(monkeypatch, bgr_frame):
    FakeCapture.opened = True
    FakeCapture.frame = bgr_frame
    monkeypatch.setattr(camera_module.cv2, "VideoCapture", FakeCapture)
    service = CameraService(device_index=0)
    yield service
    service.cleanup()


class TestCapture:
    def test_capture_future_resolves_once_with_rgb_image(self, camera):
        future = camera.capture_async()
        image = future.result(timeout=5)

        assert isinstance(image, Image.Image)
        assert image.size == (640, 480)
        assert image.getpixel((10, 10)) == (0, 0, 255)
        assert image.getpixel((630, 10)) == (255, 0, 0)
        assert camera.is_active

    def test_unopenable_camera_resolves_to_none(self, camera):
        FakeCapture.opened = False

        assert camera.capture_async().result(timeout=5) is None
        assert camera.last_error.startswith("Camera unavailable")
        assert not camera.can_capture

    def test_failed_read_resolves_to_none(self, camera):
        FakeCapture.frame = None

        assert camera.capture_async().result(timeout=5) is None
        assert "Failed to read" in camera.last_error


class TestPreview:
    def test_preview_is_mirrored_and_resized(self, camera):
        frame_b64 = camera.preview_async().result(timeout=5)
        preview = Image.open(io.BytesIO(base64.b64decode(frame_b64))).convert("RGB")

        assert preview.size == (640, 480)
        left = preview.getpixel((10, 240))
        assert left[0] > 200 and left[2] < 60


class TestDevices:
    def test_switch_device(self, camera):
        assert camera.switch_device_async(2).result(timeout=5) is True
        assert camera.device_index == 2
        assert camera.camera.index == 2

    def test_list_devices(self, camera):
        camera.initialize_async().result(timeout=5)
        devices = camera.list_devices_async().result(timeout=5)

        assert devices[0] == {"index": 0, "name": "Camera 0", "active": True}
        assert all(not d["active"] for d in devices[1:])
