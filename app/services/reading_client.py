import logging
import requests

from app import config
from app.errors import ReadingRequestError

logger = logging.getLogger(__name__)


class ReadingClient:
    """ Calls the interpretation API on behalf of the wizard"""

    def __init__(self, api_url: str = None, session: requests.Session = None):
        self.api_url = api_url or config.get_reading_api_url()
        # module-level requests.post opens and closes its own session per call
        self.session = session

    def request_reading(self, prompt: str, image_b64: str) -> str:
        """
        POST the prompt and card image, return the reading text.
        :param prompt: Full interpretation prompt
        :param image_b64: Base64 image without the data-URL prefix
        """
        headers = {"Content-Type": "application/json"}
        payload = {"prompt": prompt, "image": image_b64}

        try:
            response = (self.session or requests).post(
                self.api_url,
                headers=headers,
                json=payload,
                timeout=config.get_reading_timeout(),
            )
        except requests.RequestException as e:
            raise ReadingRequestError(f"API request failed: {e}") from e

        try:
            result = response.json()
        except ValueError:
            result = {}
        if not isinstance(result, dict):
            result = {}

        if not response.ok:
            logger.warning(f"Reading API returned {response.status_code}: {result}")
            raise ReadingRequestError(result.get("error") or "API request failed")

        if result.get("error"):
            raise ReadingRequestError(result["error"])

        reading = result.get("reading")
        if not isinstance(reading, str):
            raise ReadingRequestError("API response did not include a reading")
        return reading
