"""
Dropnote Backend — Application Factory Tests
==============================================

What:  Tests for create_app(), the route table, request IDs, error handlers
       and settings.
"""

import logging
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import ValidationError as PydanticValidationError

from dropnote.config import Settings
from dropnote.exceptions import DropnoteError
from dropnote.main import create_app, setup_logging
from dropnote.routes.messages import MessageActions
from dropnote.routes.table import declare_routes
from dropnote.routing import validate_routes


class TestRouteTable:
    """The declared table matches the service's HTTP surface."""

    def test_declared_routes(self):
        routes = declare_routes(MessageActions())

        assert [(r.name, r.method, r.pattern) for r in routes] == [
            ("Index", "GET", "/"),
            ("Styleguide", "GET", "/styleguide"),
            ("NewMessage", "POST", "/"),
            ("ShowMessage", "GET", "/{token}/"),
            ("DeleteMessage", "DELETE", "/{token}/"),
        ]

    def test_table_is_valid(self):
        routes = declare_routes(MessageActions())
        assert validate_routes(routes) == routes

    def test_message_handlers_bound_to_actions(self):
        actions = MessageActions()
        routes = {r.name: r for r in declare_routes(actions)}

        assert routes["NewMessage"].handler == actions.new_message
        assert routes["ShowMessage"].handler == actions.show_message
        assert routes["DeleteMessage"].handler == actions.delete_message


class TestRequestID:

    @pytest.mark.asyncio
    async def test_client_id_echoed(self, test_client):
        response = await test_client.get("/", headers={"X-Request-ID": "abc"})
        assert response.headers["X-Request-ID"] == "abc"

    @pytest.mark.asyncio
    async def test_id_generated_when_absent(self, test_client):
        response = await test_client.get("/")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_id_in_access_log(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="dropnote.access")

        await test_client.get("/styleguide", headers={"X-Request-ID": "trace-me"})

        records = [r for r in caplog.records if r.name == "dropnote.access"]
        assert len(records) == 1
        assert records[0].request_id == "trace-me"
        assert records[0].route == "Styleguide"


class TestStaticThroughApp:

    @pytest.mark.asyncio
    async def test_static_file_served(self, test_client, assets_dir):
        response = await test_client.get("/static/css/main.css")

        assert response.status_code == 200
        assert response.text == (assets_dir / "css" / "main.css").read_text()

    @pytest.mark.asyncio
    async def test_configured_prefix(self, assets_dir):
        settings = Settings(assets_dir=str(assets_dir), static_prefix="assets")
        app = create_app(settings=settings)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/assets/foo.css")

        assert response.status_code == 200


class TestErrorHandlers:

    @pytest.mark.asyncio
    async def test_unexpected_backend_error_is_500(self, test_settings, fake_backend):
        fake_backend.fetch_message = AsyncMock(side_effect=RuntimeError("db down"))
        app = create_app(settings=test_settings, backend=fake_backend)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/abc123/")

        assert response.status_code == 500
        assert response.json()["error"] == "internal_server_error"
        assert "db down" not in response.text

    @pytest.mark.asyncio
    async def test_backend_dropnote_error_is_500(self, test_settings, fake_backend):
        fake_backend.delete_message = AsyncMock(
            side_effect=DropnoteError("Storage rejected the delete", context={"token": "abc123"})
        )
        app = create_app(settings=test_settings, backend=fake_backend)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.delete("/abc123/", headers={"X-Request-ID": "req-9"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert body["message"] == "Storage rejected the delete"
        assert body["request_id"] == "req-9"
        assert "abc123" not in response.text


class TestSettings:

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="LOUD")

    @pytest.mark.parametrize("prefix", ["static", "/static", "static/", "/static/"])
    def test_static_prefix_normalized(self, prefix):
        assert Settings(static_prefix=prefix).static_prefix == "/static/"

    def test_root_static_prefix_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(static_prefix="/")

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("DROPNOTE_ASSETS_DIR", "/srv/assets")
        assert Settings().assets_dir == "/srv/assets"

    def test_check_assets_dir(self, assets_dir, tmp_path):
        Settings(assets_dir=str(assets_dir)).check_assets_dir()

        with pytest.raises(ValueError, match="does not exist"):
            Settings(assets_dir=str(tmp_path / "missing")).check_assets_dir()

        with pytest.raises(ValueError, match="not a directory"):
            Settings(assets_dir=str(assets_dir / "foo.css")).check_assets_dir()

    def test_setup_logging_applies_level(self):
        root = logging.getLogger()
        saved_level, saved_handlers = root.level, root.handlers[:]
        try:
            setup_logging(Settings(log_level="ERROR"))
            assert root.level == logging.ERROR
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
