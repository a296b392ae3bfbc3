"""
Dropnote Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures (function-scoped):
    ├── assets_dir: Temporary static directory with a stylesheet in it
    ├── test_settings: Settings pointing at assets_dir
    ├── fake_backend: In-memory MessageBackend double
    ├── recorder: Handler factory that records every call it receives
    ├── test_app: FastAPI app wired to fake_backend
    └── test_client: HTTPX AsyncClient for API endpoint testing
"""

import os
from typing import Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from fastapi.responses import PlainTextResponse
from httpx import ASGITransport, AsyncClient

# Settings are read at import time; keep tests quiet and self-contained.
os.environ["DROPNOTE_LOG_LEVEL"] = "WARNING"

from dropnote.config import Settings  # noqa: E402
from dropnote.services.message_backend import MessageBackend  # noqa: E402


STYLESHEET = "body { color: #222; }\n"


class FakeMessageBackend(MessageBackend):
    """Dict-backed backend that records what the handlers hand it."""

    def __init__(self):
        self.messages: Dict[str, str] = {}
        self.created: List[Tuple[bytes, str]] = []
        self.fetched: List[Tuple[str, str]] = []
        self.deleted: List[Tuple[str, str]] = []

    async def create_message(self, body: bytes, content_type: str) -> str:
        self.created.append((body, content_type))
        token = f"tok{len(self.created)}"
        self.messages[token] = body.decode("utf-8")
        return token

    async def fetch_message(self, token: str, client: str) -> Optional[str]:
        self.fetched.append((token, client))
        return self.messages.get(token)

    async def delete_message(self, token: str, client: str) -> bool:
        self.deleted.append((token, client))
        return self.messages.pop(token, None) is not None


class Recorder:
    """
    Builds handlers that log (label, path_params) and answer with the label.

    Usage:
        index = recorder.handler("index")
        ...
        assert recorder.calls == [("index", {})]
    """

    def __init__(self):
        self.calls: List[Tuple[str, dict]] = []

    def handler(self, label: str):
        async def handle(request):
            self.calls.append((label, dict(request.path_params)))
            return PlainTextResponse(label)

        handle.__name__ = f"handle_{label}"
        return handle

    def labels(self) -> List[str]:
        return [label for label, _ in self.calls]


@pytest.fixture
def assets_dir(tmp_path):
    """Static directory containing foo.css and css/main.css."""
    directory = tmp_path / "public"
    (directory / "css").mkdir(parents=True)
    (directory / "foo.css").write_text(STYLESHEET)
    (directory / "css" / "main.css").write_text(STYLESHEET)
    return directory


@pytest.fixture
def test_settings(assets_dir):
    return Settings(assets_dir=str(assets_dir))


@pytest.fixture
def fake_backend():
    return FakeMessageBackend()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def test_app(test_settings, fake_backend):
    from dropnote.main import create_app
    return create_app(settings=test_settings, backend=fake_backend)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_index(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
