"""
Tests for request/session correlation in the logging middleware.
"""
from fastapi import FastAPI
from fastapi.testclient import TestClient

from middleware.logging_middleware import (
    RequestLoggingMiddleware,
    get_request_id,
    get_session_id,
    session_id_from_path,
)

app = FastAPI()
app.add_middleware(RequestLoggingMiddleware)


@app.get("/api/preview/sessions/{session_id}/state")
async def session_state(session_id: str):
    return {"request_id": get_request_id(), "session_id": get_session_id()}


@app.get("/api/products/")
async def products():
    return {"session_id": get_session_id()}


class TestSessionIdFromPath:
    def test_preview_path(self):
        assert session_id_from_path("/api/preview/sessions/abc-123/process") == "abc-123"

    def test_session_root(self):
        assert session_id_from_path("/api/preview/sessions/abc-123") == "abc-123"

    def test_other_paths(self):
        assert session_id_from_path("/api/products/1") == ""


class TestRequestLoggingMiddleware:
    def test_ids_visible_to_handlers_and_echoed(self):
        client = TestClient(app)
        response = client.get("/api/preview/sessions/abc-123/state")

        assert response.status_code == 200
        body = response.json()
        assert body["session_id"] == "abc-123"
        assert len(body["request_id"]) == 8
        assert response.headers["X-Request-ID"] == body["request_id"]
        assert response.headers["X-Staging-Session"] == "abc-123"

    def test_no_session_header_outside_preview(self):
        response = TestClient(app).get("/api/products/")
        assert response.json() == {"session_id": ""}
        assert "X-Staging-Session" not in response.headers

