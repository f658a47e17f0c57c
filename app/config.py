"""
Configuration settings for the Tarot Reading backend
"""
import os
from dotenv import load_dotenv

from app.errors import ConfigurationError

# Load .env file from project root (parent of app directory)
env_path = os.path.join(os.path.dirname(__file__), "..", ".env")
load_dotenv(dotenv_path=env_path)

# Gemini Configuration
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash-preview-05-20"

# Image Configuration
DEFAULT_HEIC_JPEG_QUALITY = 80  # 0.8 on the browser scale

# HTTP Configuration
# A single phone photo encoded as base64 needs a few megabytes
DEFAULT_MAX_BODY_BYTES = 5 * 1024 * 1024
DEFAULT_READING_API_URL = "http://127.0.0.1:8000/api/tarot-gpt"
DEFAULT_READING_TIMEOUT_SECONDS = 120
DEFAULT_WIZARD_WORKERS = 16
# Room for the prompt and JSON framing around the base64 photo
PROMPT_HEADROOM_BYTES = 64 * 1024

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "backend.log")


def get_gemini_api_key() -> str:
    api_key = os.getenv("GEMINI_API_KEY", "").strip()
    if not api_key:
        raise ConfigurationError(
            "GEMINI_API_KEY environment variable is not set. "
            "Please create a .env file in the project root with GEMINI_API_KEY."
        )
    return api_key


def get_gemini_model() -> str:
    return os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL)


def get_max_body_bytes() -> int:
    return int(os.getenv("MAX_BODY_BYTES", str(DEFAULT_MAX_BODY_BYTES)))


def get_reading_api_url() -> str:
    return os.getenv("READING_API_URL", DEFAULT_READING_API_URL)


def require_api_key_on_startup() -> bool:
    return os.getenv("REQUIRE_API_KEY_ON_STARTUP", "true").strip().lower() in ("1", "true", "yes")


def get_heic_jpeg_quality() -> int:
    return int(os.getenv("HEIC_JPEG_QUALITY", str(DEFAULT_HEIC_JPEG_QUALITY)))


def get_max_api_body_bytes() -> int:
    """JSON body limit for the reading API: a base64 photo at the upload limit plus the prompt."""
    max_photo = get_max_body_bytes()
    return 4 * ((max_photo + 2) // 3) + PROMPT_HEADROOM_BYTES


def get_reading_timeout() -> float:
    return float(os.getenv("READING_TIMEOUT_SECONDS", str(DEFAULT_READING_TIMEOUT_SECONDS)))


def get_wizard_workers() -> int:
    return int(os.getenv("WIZARD_WORKERS", str(DEFAULT_WIZARD_WORKERS)))
