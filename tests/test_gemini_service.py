"""
Test cases for the Gemini tarot reader
"""
import base64
import pytest
from unittest.mock import MagicMock

from app.errors import ConfigurationError
from app.services.gemini_service import GeminiTarotReader


def test_build_contents(jpeg_bytes):
    """
    Test: Build the multimodal request
    Confirm: One user turn with the text part then the inline JPEG
    Input: prompt="Question", image=<base64 jpeg>
    Result: parts=[text, inline_data(image/jpeg)]
    """
    reader = GeminiTarotReader(api_key="key", model="test-model")
    image_b64 = base64.b64encode(jpeg_bytes).decode("ascii")

    contents = reader.build_contents("Question", image_b64)

    assert len(contents) == 1
    assert contents[0].role == "user"
    text_part, image_part = contents[0].parts
    assert text_part.text == "Question"
    assert image_part.inline_data.mime_type == "image/jpeg"
    assert image_part.inline_data.data == jpeg_bytes


def test_generate_reading():
    """
    Test: Call the model and return its text
    Confirm: generate_content called once with the configured model
    Input: Mocked client returning text="The Star brings hope"
    Result: "The Star brings hope"
    """
    reader = GeminiTarotReader(api_key="key", model="test-model")
    reader._client = MagicMock()
    reader._client.models.generate_content.return_value = MagicMock(text="The Star brings hope")

    reading = reader.generate_reading("Question", base64.b64encode(b"jpeg").decode("ascii"))

    assert reading == "The Star brings hope"
    call = reader._client.models.generate_content.call_args
    assert call.kwargs["model"] == "test-model"
    assert len(call.kwargs["contents"]) == 1


def test_empty_model_response():
    reader = GeminiTarotReader(api_key="key", model="test-model")
    reader._client = MagicMock()
    reader._client.models.generate_content.return_value = MagicMock(text=None)

    with pytest.raises(RuntimeError):
        reader.generate_reading("Question", base64.b64encode(b"jpeg").decode("ascii"))


def test_invalid_base64():
    """
    Test: Image payload is not base64
    Confirm: Rejected before any model call
    Input: image="***"
    Result: ValueError, generate_content not called
    """
    reader = GeminiTarotReader(api_key="key", model="test-model")
    reader._client = MagicMock()

    with pytest.raises(ValueError):
        reader.generate_reading("Question", "***")

    assert reader._client.models.generate_content.call_count == 0


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(ConfigurationError):
        GeminiTarotReader()


def test_model_from_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-custom")

    reader = GeminiTarotReader()

    assert reader.api_key == "env-key"
    assert reader.model == "gemini-custom"
