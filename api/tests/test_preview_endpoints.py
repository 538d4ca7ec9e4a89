"""
Tests for the AI room preview endpoints.

Sessions are real; the composer each session talks to is swapped for a mock
right after the session is opened, so no request reaches Gemini.

    client -> /api/preview/sessions/... -> StagingSession -> composer.compose()
                                                              ^ mocked here
"""
import base64
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.exceptions import USER_FAILURE_MESSAGE, NoImageInResponse
from routers.preview import router
from services.session_store import session_store

app = FastAPI()
app.include_router(router, prefix="/api")

RECT = {"left": 0, "top": 0, "width": 1000, "height": 500}


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture(autouse=True)
def clean_store():
    yield
    session_store.close_all()


@pytest.fixture
def open_session(client, mock_composer):
    """Open a preview for the Oslo Sofa and return its id"""
    response = client.post("/api/preview/sessions", json={"product_id": 1})
    assert response.status_code == 201
    session_id = response.json()["session_id"]
    session_store.get(session_id).composer = mock_composer
    return session_id


@pytest.fixture
def marked_session(client, open_session):
    base = f"/api/preview/sessions/{open_session}"
    templates = client.get(base).json()["templates"]
    client.post(f"{base}/template", json={"url": templates[0]})
    client.post(f"{base}/marker", json={"client_x": 423, "client_y": 89.5, "rect": RECT})
    return open_session


@pytest.fixture
def result_session(client, marked_session):
    response = client.post(f"/api/preview/sessions/{marked_session}/process")
    assert response.json()["stage"] == "showing_result"
    return marked_session


class TestOpenSession:
    def test_open_returns_templates_for_room(self, client, open_session):
        state = client.get(f"/api/preview/sessions/{open_session}").json()
        assert state["stage"] == "selecting_room"
        assert state["product_id"] == 1
        assert len(state["templates"]) == 4
        assert state["is_processing"] is False

    def test_unknown_product(self, client):
        assert client.post("/api/preview/sessions", json={"product_id": 9999}).status_code == 404

    def test_unknown_session(self, client):
        assert client.get("/api/preview/sessions/nope").status_code == 404

    def test_close_session(self, client, open_session):
        assert client.delete(f"/api/preview/sessions/{open_session}").status_code == 204
        assert client.get(f"/api/preview/sessions/{open_session}").status_code == 404
        assert client.delete(f"/api/preview/sessions/{open_session}").status_code == 404


class TestRoomAndMarker:
    def test_template_not_offered(self, client, open_session):
        response = client.post(
            f"/api/preview/sessions/{open_session}/template", json={"url": "https://example.com/room.jpg"}
        )
        assert response.status_code == 400

    def test_upload_room_photo(self, client, open_session, jpeg_bytes):
        response = client.post(
            f"/api/preview/sessions/{open_session}/upload",
            files={"file": ("living-room.jpg", jpeg_bytes, "image/jpeg")},
        )
        assert response.status_code == 200
        state = response.json()
        assert state["stage"] == "placing_marker"
        assert state["room_image"].startswith("data:image/jpeg;base64,")

    def test_upload_unreadable_file(self, client, open_session):
        response = client.post(
            f"/api/preview/sessions/{open_session}/upload",
            files={"file": ("notes.txt", b"not a photo", "text/plain")},
        )
        assert response.status_code == 400
        assert client.get(f"/api/preview/sessions/{open_session}").json()["stage"] == "selecting_room"

    def test_marker_before_room_rejected(self, client, open_session):
        response = client.post(
            f"/api/preview/sessions/{open_session}/marker", json={"client_x": 10, "client_y": 10, "rect": RECT}
        )
        assert response.status_code == 409

    def test_marker_percentages(self, client, marked_session):
        state = client.get(f"/api/preview/sessions/{marked_session}").json()
        assert state["marker"]["x"] == pytest.approx(42.3)
        assert state["marker"]["y"] == pytest.approx(17.9)
        assert state["marker_style"] == {"left": "42.3%", "top": "17.9%"}

    def test_zero_size_rect_invalid(self, client, open_session):
        response = client.post(
            f"/api/preview/sessions/{open_session}/marker",
            json={"client_x": 10, "client_y": 10, "rect": {"left": 0, "top": 0, "width": 0, "height": 10}},
        )
        assert response.status_code == 422

    def test_back(self, client, marked_session):
        state = client.post(f"/api/preview/sessions/{marked_session}/back").json()
        assert state["stage"] == "selecting_room"
        assert state["room_image"] is None
        assert state["marker"] is None


class TestProcess:
    def test_process_sends_room_product_and_marker(self, client, marked_session, mock_composer):
        state = client.post(f"/api/preview/sessions/{marked_session}/process").json()

        assert state["stage"] == "showing_result"
        assert state["result_image"].startswith("data:image/png;base64,")
        room, product_image, name, marker = mock_composer.compose.await_args.args
        assert room == state["templates"][0]
        assert product_image == "https://cedora.com.au/cdn/shop/files/oslo-sofa-1.jpg"
        assert name == "Oslo Sofa"
        assert marker.x == pytest.approx(42.3)
        assert marker.y == pytest.approx(17.9)

    def test_process_failure_keeps_marker_placement(self, client, marked_session, mock_composer):
        mock_composer.compose.side_effect = NoImageInResponse(text_parts=1)
        response = client.post(f"/api/preview/sessions/{marked_session}/process")

        assert response.status_code == 200
        state = response.json()
        assert state["stage"] == "placing_marker"
        assert state["error"] == USER_FAILURE_MESSAGE
        assert state["is_processing"] is False

    def test_process_without_marker(self, client, open_session):
        base = f"/api/preview/sessions/{open_session}"
        templates = client.get(base).json()["templates"]
        client.post(f"{base}/template", json={"url": templates[0]})
        assert client.post(f"{base}/process").status_code == 409

    def test_retry_position(self, client, result_session):
        state = client.post(f"/api/preview/sessions/{result_session}/retry").json()
        assert state["stage"] == "placing_marker"
        assert state["result_image"] is None
        assert state["marker"] is None
        assert state["room_image"] == state["templates"][0]


class TestResultView:
    def test_focus_and_pan(self, client, result_session):
        base = f"/api/preview/sessions/{result_session}"
        assert client.post(f"{base}/pan/start", json={"client_x": 0, "client_y": 0}).status_code == 409

        state = client.post(f"{base}/focus").json()
        assert state["focused_view"] is True
        assert state["transform_origin"] == "42.3% 17.9%"

        client.post(f"{base}/pan/start", json={"client_x": 100, "client_y": 100})
        state = client.post(f"{base}/pan/move", json={"client_x": 150, "client_y": 100}).json()
        assert state["pan"]["x"] == pytest.approx(40.0)
        assert state["transform"] == "scale(3) translate(40px, 0px)"

        client.post(f"{base}/pan/end")
        state = client.post(f"{base}/focus").json()
        assert state["focused_view"] is False
        assert state["pan"] == {"x": 0.0, "y": 0.0}

    def test_focus_before_result(self, client, marked_session):
        assert client.post(f"/api/preview/sessions/{marked_session}/focus").status_code == 409

    def test_download(self, client, result_session, png_bytes):
        response = client.get(f"/api/preview/sessions/{result_session}/download")
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert 'filename="cedora-preview-oslo-sofa-' in response.headers["content-disposition"]
        assert response.content == png_bytes

    def test_download_without_result(self, client, marked_session):
        assert client.get(f"/api/preview/sessions/{marked_session}/download").status_code == 409

    def test_share_payload(self, client, result_session, png_bytes):
        payload = client.get(f"/api/preview/sessions/{result_session}/share").json()
        assert payload["title"] == "My Cedora Interior: Oslo Sofa"
        assert payload["text"] == "Check out how this Oslo Sofa looks in my space!"
        assert payload["filename"] == "cedora-preview.png"
        assert base64.b64decode(payload["data"]) == png_bytes


class TestPreviewHealth:
    def test_health_reports_configuration(self, client, monkeypatch):
        from routers import preview

        service = MagicMock()
        service.health_check = AsyncMock(return_value={"status": "unconfigured", "api_key_configured": False})
        monkeypatch.setattr(preview, "google_ai_service", service)

        response = client.get("/api/preview/health")
        assert response.json()["status"] == "unconfigured"
