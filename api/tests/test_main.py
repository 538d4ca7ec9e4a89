"""
Smoke tests for the assembled application and logging setup.
"""
import json
import logging

import pytest
import structlog
from fastapi.testclient import TestClient

from core.config import settings
from core.logging import build_formatter, setup_logging
from main import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


class TestApp:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["version"] == settings.version

    def test_root_lists_endpoints(self, client):
        body = client.get("/").json()
        assert body["endpoints"] == {"products": "/api/products", "preview": "/api/preview"}

    def test_routers_mounted(self, client):
        response = client.get("/api/products/collections")
        assert response.status_code == 200
        assert "X-Request-ID" in response.headers


class TestLoggingSetup:
    def test_console_format(self, restore_root_logger, monkeypatch):
        monkeypatch.setattr(settings, "log_format", "console")
        monkeypatch.setattr(settings, "log_level", "DEBUG")
        setup_logging()

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert logging.getLogger("google_genai").level == logging.WARNING

    def test_json_lines_carry_request_context(self, monkeypatch):
        monkeypatch.setattr(settings, "log_format", "json")
        formatter = build_formatter()
        record = logging.LogRecord("services.staging_session", logging.INFO, __file__, 1, "Preview ready", None, None)

        structlog.contextvars.bind_contextvars(request_id="abcd1234", session_id="sess-1")
        try:
            line = json.loads(formatter.format(record))
        finally:
            structlog.contextvars.clear_contextvars()

        assert line["event"] == "Preview ready"
        assert line["request_id"] == "abcd1234"
        assert line["session_id"] == "sess-1"
        assert line["level"] == "info"
        assert line["logger"] == "services.staging_session"
