import base64
import json

import httpx
import pytest

from openai_image_mcp.config import Settings
from openai_image_mcp.providers.base_provider import BaseImageProvider
from openai_image_mcp.providers.http_provider import ImageApiClient

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"fake-image-payload"


def envelope(image_bytes: bytes = PNG_BYTES) -> dict:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return {"created": 1, "data": [{"b64_json": encoded}]}


class RecordingHandler:
    """MockTransport handler that records every request it sees."""

    def __init__(self, responder=None):
        self.requests = []
        self.responder = responder or (
            lambda request: httpx.Response(200, json=envelope())
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def json_bodies(self):
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def settings(monkeypatch):
    for name in (
        "OPENAI_API_KEY",
        "OPENAI_IMAGE_MCP__API_KEY",
        "OPENAI_IMAGE_MCP__BASE_URL",
        "OPENAI_IMAGE_MCP__LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return Settings(api_key="test-key", _env_file=None)


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def api_client(settings, handler):
    return make_client(settings, handler)


def make_client(settings, handler) -> ImageApiClient:
    return ImageApiClient.from_settings(
        settings, transport=httpx.MockTransport(handler)
    )


class FakeProvider(BaseImageProvider):
    def __init__(self, image_bytes: bytes = b"legacy-bytes"):
        self.image_bytes = image_bytes
        self.calls = []

    async def generate_image(self, prompt, model, options):
        self.calls.append((prompt, model, options))
        return self.image_bytes
