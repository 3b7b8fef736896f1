"""Shared fixtures for the photo booth tests."""

import logging
from concurrent.futures import Future

import pytest
from PIL import Image, ImageDraw

MARKER = (0, 255, 0)


@pytest.fixture(autouse=True)
def configure_test_logging():
    """Keep service loggers quiet during tests."""
    for logger_name in ['app.services.layout', 'app.services.photo', 'app.services.document',
                        'app.services.camera', 'app.api.routes.session']:
        logging.getLogger(logger_name).setLevel(logging.ERROR)


@pytest.fixture
def solid_photo():
    """Factory for single-colour 1200x900 photos."""
    def make(color, size=(1200, 900)):
        return Image.new("RGB", size, color)
    return make


@pytest.fixture
def template_background():
    """Factory for white backgrounds with marker-green rectangles.

    Boxes are inclusive (min_x, min_y, max_x, max_y) in scan space.
    """
    def make(size, boxes):
        img = Image.new("RGB", size, (255, 255, 255))
        draw = ImageDraw.Draw(img)
        for box in boxes:
            draw.rectangle(box, fill=MARKER)
        return img
    return make


class FakeCamera:
    """Camera double that resolves capture futures immediately."""

    def __init__(self, color=(200, 40, 40), available=True):
        self.color = color
        self.available = available
        self.is_active = available
        self.device_index = 0
        self.last_error = None if available else "Camera unavailable: permission denied"
        self.captures = 0

    def _resolved(self, value):
        future = Future()
        future.set_result(value)
        return future

    def capture_async(self):
        if not self.available:
            return self._resolved(None)
        self.captures += 1
        return self._resolved(Image.new("RGB", (640, 480), self.color))

    def list_devices_async(self):
        return self._resolved([{"index": 0, "name": "Camera 0", "active": True}])

    def switch_device_async(self, index):
        if not self.available:
            return self._resolved(False)
        self.device_index = index
        return self._resolved(True)


@pytest.fixture
def fake_camera():
    return FakeCamera()
