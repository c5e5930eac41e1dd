"""
Shared fixtures for OrderIntake tests.

Images are generated with Pillow at test time; the destination webhook is
an httpx.MockTransport so nothing leaves the process.
"""

import io
import json
import uuid

import httpx
import pytest
from PIL import Image

from app import create_app
from config import TestingConfig
from models.order import ImageAsset


WEBHOOK_URL = "https://script.example.com/macros/s/abc/exec"
WEBHOOK_SECRET = "s3cret"


class WebhookStub:
    """
    Stand-in for the destination webhook (or the relay, for client tests).

    Set ``status_code``/``body`` (JSON) or ``text`` (raw) for the answer,
    or ``error`` to raise an httpx exception instead of answering.
    """

    def __init__(self):
        self.calls = []
        self.status_code = 200
        self.body = {"success": True}
        self.text = None
        self.error = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def payloads(self):
        """JSON bodies of every call received."""
        return [json.loads(request.content) for request in self.calls]


# Fixtures - images

@pytest.fixture
def image_bytes():
    """Return a function producing encoded image bytes of a given size."""
    def _encode(width=750, height=900, fmt="PNG"):
        buffer = io.BytesIO()
        Image.new("RGB", (width, height), (200, 30, 30)).save(buffer, format=fmt)
        return buffer.getvalue()
    return _encode


@pytest.fixture
def make_image(tmp_path, image_bytes):
    """Return a function that writes an image to disk and describes it as an ImageAsset."""
    def _make(width=750, height=900, fmt="PNG", filename=None, content_type=None):
        ext = "png" if fmt == "PNG" else "jpg"
        filename = filename or f"art_{width}x{height}.{ext}"
        path = tmp_path / f"{uuid.uuid4().hex[:8]}_{filename}"
        path.write_bytes(image_bytes(width, height, fmt))
        return ImageAsset(
            filename=filename,
            content_type=content_type or ("image/png" if fmt == "PNG" else "image/jpeg"),
            size=path.stat().st_size,
            path=str(path),
        )
    return _make


# Fixtures - webhook and app

@pytest.fixture
def webhook():
    return WebhookStub()


@pytest.fixture
def http_client(webhook):
    client = httpx.Client(transport=httpx.MockTransport(webhook))
    yield client
    client.close()


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def app_factory(http_client, upload_dir):
    """Create apps against the stub webhook; keyword args override config."""
    def _create(**overrides):
        config = {
            "UPLOAD_FOLDER": str(upload_dir),
            "WEBHOOK_URL": WEBHOOK_URL,
            "WEBHOOK_SECRET": WEBHOOK_SECRET,
        }
        config.update(overrides)
        return create_app(TestingConfig, config_overrides=config, http_client=http_client)
    return _create


@pytest.fixture
def app(app_factory):
    return app_factory()


@pytest.fixture
def client(app):
    return app.test_client()
