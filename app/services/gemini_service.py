import base64
import binascii
import logging

from google import genai
from google.genai import types

from app import config

logger = logging.getLogger(__name__)

CARD_IMAGE_MIME_TYPE = "image/jpeg"


class GeminiTarotReader:
    """ Send a question prompt and a card photo to Gemini and get the reading text"""

    def __init__(self, api_key: str = None, model: str = None):
        self.api_key = api_key or config.get_gemini_api_key()
        self.model = model or config.get_gemini_model()
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def build_contents(self, prompt: str, image_b64: str):
        """
        Single user turn: the text prompt followed by the inline card image.
        :param prompt: Question prompt for the model
        :param image_b64: Base64 JPEG without the data-URL prefix
        """
        try:
            image_bytes = base64.b64decode(image_b64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Image payload is not valid base64: {e}") from e

        return [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=prompt),
                    types.Part.from_bytes(data=image_bytes, mime_type=CARD_IMAGE_MIME_TYPE),
                ],
            )
        ]

    def generate_reading(self, prompt: str, image_b64: str) -> str:
        contents = self.build_contents(prompt, image_b64)

        logger.info(f"Requesting reading from {self.model} ({len(image_b64)} base64 chars)")
        response = self.client.models.generate_content(model=self.model, contents=contents)

        text = response.text
        if not text:
            raise RuntimeError("Gemini returned an empty response")

        logger.info(f"Reading generated ({len(text)} chars)")
        return text
