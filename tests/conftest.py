import base64
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from api.main import app, get_gateway_transport
from relight import config

# PNG signature followed by filler; never decoded as an image
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4
JPEG_UPLOAD = b"\xff\xd8\xff\xe0" + b"\x00" * 2048


def files_response(data: bytes = PNG_BYTES, media_type: str = "image/png") -> dict:
    return {"files": [{"mediaType": media_type, "data": base64.b64encode(data).decode()}]}


class FakeGateway:
    """Stands in for the AI gateway; answers every request with ``status``/``body``."""

    def __init__(self):
        self.status = 200
        self.body = files_response()
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status, json=self.body)
        return httpx.Response(self.status, text=self.body)

    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def blob_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "LOCAL_BLOB_DIR", tmp_path)
    monkeypatch.setattr(config, "STORAGE_BACKEND", "local")
    monkeypatch.setattr(config, "PUBLIC_BASE_URL", "")
    return tmp_path


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("AI_GATEWAY_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def gateway():
    fake = FakeGateway()
    transport = httpx.MockTransport(fake.handler)
    app.dependency_overrides[get_gateway_transport] = lambda: transport
    yield fake
    app.dependency_overrides.pop(get_gateway_transport, None)


@pytest.fixture
def client(blob_dir, api_key, gateway):
    return TestClient(app)


@pytest.fixture
def form():
    return {"address": "1600 Amphitheatre Parkway, Mountain View, CA", "date": "2024-06-15", "bearing": "NW"}


def upload(data: bytes = JPEG_UPLOAD, content_type: str = "image/jpeg", name: str = "house.jpg"):
    return {"file": (name, data, content_type)}
