"""
Pytest configuration and fixtures for backend tests
"""
import base64
import io
import os
import sys
import tempfile

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Settings must exist before the app is imported
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "tarot-backend-test.log"))

import pillow_heif
from PIL import Image

from app.main import app

pillow_heif.register_heif_opener()


@pytest.fixture(scope="function")
def client(monkeypatch):
    """Create a test client with a Gemini key configured"""
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def mock_reader():
    """Gemini reader stub returning a fixed reading"""
    reader = MagicMock()
    reader.generate_reading.return_value = "Sample reading"
    with patch('app.routes.reading_routes.get_tarot_reader', return_value=reader) as factory:
        reader.factory = factory
        yield reader


def _encode_image(image_format, **save_kwargs):
    img = Image.new("RGB", (32, 48), color=(120, 40, 200))
    buffer = io.BytesIO()
    img.save(buffer, format=image_format, **save_kwargs)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return _encode_image("PNG")


@pytest.fixture
def jpeg_bytes():
    return _encode_image("JPEG", quality=90)


@pytest.fixture
def heic_bytes():
    return _encode_image("HEIF", quality=90)


@pytest.fixture
def sample_image_b64(jpeg_bytes):
    """Sample base64 payload as sent by the wizard"""
    return base64.b64encode(jpeg_bytes).decode("ascii")


class StubReadingClient:
    """Stands in for the HTTP client to the interpretation API"""

    def __init__(self, reading="Sample reading", error=None, wizard=None):
        self.reading = reading
        self.error = error
        self.wizard = wizard
        self.calls = []
        self.states_seen = []

    def request_reading(self, prompt, image_b64):
        self.calls.append({"prompt": prompt, "image": image_b64})
        if self.wizard is not None:
            self.states_seen.append((self.wizard.step, self.wizard.is_loading))
        if self.error is not None:
            raise self.error
        return self.reading


@pytest.fixture
def stub_client():
    return StubReadingClient()


@pytest.fixture
def failing_client():
    return StubReadingClient(error=Exception("quota exceeded"))


@pytest.fixture
def make_client():
    """Factory for stub clients with a custom reading, error or observed wizard"""
    return StubReadingClient
