import asyncio
import io
import threading

import anyio
import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.api import dependencies
from app.api.routes import session as session_routes
from app.main import app
from app.services.document import DocumentService
from app.services.photo import PhotoService
from conftest import FakeCamera


@pytest.fixture
def exports_dir(tmp_path):
    return tmp_path / "exports"


@pytest.fixture
def client(fake_camera, exports_dir):
    document_service = DocumentService(str(exports_dir))
    app.dependency_overrides[dependencies.get_camera_service] = lambda: fake_camera
    app.dependency_overrides[dependencies.get_document_service] = lambda: document_service

    session_routes.active_sessions.clear()
    session_routes.current_session = None

    yield TestClient(app)

    app.dependency_overrides.clear()
    session_routes.active_sessions.clear()
    session_routes.current_session = None


def png_upload(img):
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return {"file": ("background.png", buffer.getvalue(), "image/png")}


def fill_slots(client, count=3):
    for _ in range(count):
        response = client.post("/api/session/capture")
        assert response.status_code == 200


class TestSessionLifecycle:
    def test_create_and_status(self, client):
        response = client.post("/api/session/create")
        assert response.status_code == 200
        data = response.json()

        assert data["photo_count"] == 3
        assert data["filled_slots"] == [False, False, False]
        assert data["ready"] is False
        assert data["collage"]["layout_mode"] == "strip"

        status = client.get("/api/session/status").json()
        assert status["session_id"] == data["session_id"]

    def test_create_with_settings(self, client):
        response = client.post("/api/session/create", json={"collage": {"spacing": 10, "layout_mode": "template"}})
        collage = response.json()["collage"]

        assert collage["spacing"] == 10
        assert collage["layout_mode"] == "template"

    def test_status_without_session(self, client):
        data = client.get("/api/session/status").json()
        assert data["session_id"] is None
        assert data["photo_count"] == 0

    def test_routes_require_session(self, client):
        assert client.post("/api/session/capture").status_code == 404
        assert client.get("/api/session/preview").status_code == 404

    def test_reset(self, client):
        client.post("/api/session/create")
        assert client.delete("/api/session/reset").json() == {"success": True}
        assert client.get("/api/session/status").json()["session_id"] is None


class TestCapture:
    def test_capture_fills_slots_in_order(self, client, fake_camera):
        client.post("/api/session/create")

        first = client.post("/api/session/capture").json()
        assert first["slot"] == 0
        assert first["active_slot"] == 1
        assert first["ready"] is False

        fill_slots(client, 2)
        status = client.get("/api/session/status").json()
        assert status["ready"] is True
        assert fake_camera.captures == 3

    def test_camera_unavailable(self, client):
        app.dependency_overrides[dependencies.get_camera_service] = lambda: FakeCamera(available=False)
        client.post("/api/session/create")

        response = client.post("/api/session/capture")

        assert response.status_code == 503
        assert "permission denied" in response.json()["detail"]
        assert client.get("/api/session/status").json()["filled_slots"] == [False, False, False]

    def test_select_and_clear_slot(self, client):
        client.post("/api/session/create")
        fill_slots(client)

        data = client.post("/api/session/slots/1/select").json()
        assert data["active_slot"] == 1

        data = client.delete("/api/session/slots/1").json()
        assert data["filled_slots"] == [True, False, True]
        assert data["ready"] is False

        assert client.post("/api/session/slots/5/select").status_code == 400


class TestSettings:
    def test_partial_update(self, client):
        client.post("/api/session/create")
        data = client.put("/api/session/settings", json={"corner_radius": 20, "mirror_photos": True}).json()

        assert data["collage"]["corner_radius"] == 20
        assert data["collage"]["mirror_photos"] is True
        assert data["collage"]["spacing"] == 30

    @pytest.mark.parametrize("update", [
        {"spacing": 121},
        {"inset": -1},
        {"border_width": 0.1},
        {"strip_length_factor": 3.0},
        {"width_fraction": 0.05},
    ])
    def test_out_of_range_rejected(self, client, update):
        client.post("/api/session/create")
        assert client.put("/api/session/settings", json=update).status_code == 422

    def test_slot_adjustment(self, client):
        client.post("/api/session/create")
        data = client.put("/api/session/slots/2/adjustment", json={"zoom": 1.5, "offset_x": -0.2}).json()

        assert data["adjustments"][2]["zoom"] == 1.5
        assert data["adjustments"][2]["offset_x"] == -0.2
        assert client.put("/api/session/slots/0/adjustment", json={"zoom": 0.5}).status_code == 422


class TestBackground:
    def test_upload_and_clear(self, client, template_background):
        client.post("/api/session/create")
        background = template_background((300, 600), [(20, 20, 279, 179)])

        data = client.post("/api/session/background", files=png_upload(background)).json()
        assert data["has_background"] is True

        data = client.delete("/api/session/background").json()
        assert data["has_background"] is False

    def test_rejects_non_image(self, client):
        client.post("/api/session/create")
        response = client.post("/api/session/background", files={"file": ("notes.txt", b"hello", "text/plain")})
        assert response.status_code == 400

    def test_rejects_oversized_image(self, client, monkeypatch, template_background):
        client.post("/api/session/create")
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

        response = client.post("/api/session/background", files=png_upload(template_background((300, 600), [])))

        assert response.status_code == 400
        assert client.get("/api/session/status").json()["has_background"] is False


class TestPreviewAndExport:
    def test_preview_not_ready(self, client):
        client.post("/api/session/create")
        fill_slots(client, 2)

        response = client.get("/api/session/preview")
        assert response.status_code == 409
        assert client.post("/api/session/export").status_code == 409

    def test_preview_png(self, client):
        client.post("/api/session/create")
        fill_slots(client)

        response = client.get("/api/session/preview", params={"width": 200, "height": 400})

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert Image.open(io.BytesIO(response.content)).size == (200, 640)

    def test_template_preview_with_insufficient_markers_still_renders(self, client, template_background):
        client.post("/api/session/create", json={"collage": {"layout_mode": "template"}})
        client.post("/api/session/background", files=png_upload(template_background((300, 600), [])))
        fill_slots(client)

        assert client.get("/api/session/preview").status_code == 200

    def test_export_writes_pdf(self, client, exports_dir):
        client.post("/api/session/create")
        fill_slots(client)

        data = client.post("/api/session/export").json()

        assert data["success"] is True
        assert data["message"].startswith("Saved to")
        assert (exports_dir / data["filename"]).read_bytes().startswith(b"%PDF")

        listing = client.get("/api/exports/").json()
        assert [d["filename"] for d in listing["documents"]] == [data["filename"]]

        download = client.get(data["download_url"])
        assert download.status_code == 200
        assert download.headers["content-type"] == "application/pdf"

    def test_export_failure_is_reported(self, client, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("occupied")
        app.dependency_overrides[dependencies.get_document_service] = lambda: DocumentService(str(blocker))
        client.post("/api/session/create")
        fill_slots(client)

        response = client.post("/api/session/export")

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["message"].startswith("Failed to save")

    def test_missing_document(self, client):
        assert client.get("/api/exports/missing.pdf").status_code == 404


class TestCameraRoutes:
    def test_list_and_switch_devices(self, client):
        data = client.get("/api/camera/devices").json()
        assert data["devices"][0]["index"] == 0

        assert client.post("/api/camera/devices/1").json() == {"success": True, "current": 1}

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class GatedPhotoService(PhotoService):
    """Holds every render until the test releases it."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()

    def build_collage(self, session, canvas_size):
        self.started.set()
        self.release.wait(timeout=5)
        return super().build_collage(session, canvas_size)


@pytest.fixture
def anyio_backend():
    return "asyncio"


class TestRenderingConcurrency:
    @pytest.mark.anyio
    async def test_export_leaves_event_loop_free(self, client, template_background):
        gated = GatedPhotoService()
        app.dependency_overrides[dependencies.get_photo_service] = lambda: gated
        background = template_background((600, 1200), [(60, 60, 539, 419), (60, 460, 539, 819), (60, 860, 539, 1139)])

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as http:
            await http.post("/api/session/create", json={"collage": {"layout_mode": "template"}})
            await http.post("/api/session/background", files=png_upload(background))
            for _ in range(3):
                await http.post("/api/session/capture")

            export = asyncio.ensure_future(http.post("/api/session/export"))
            assert await anyio.to_thread.run_sync(gated.started.wait, 5)

            health = await http.get("/health")
            rendering_while_healthy = not export.done()
            gated.release.set()
            response = await export

        assert health.json()["status"] == "healthy"
        assert rendering_while_healthy
        assert response.json()["success"] is True
