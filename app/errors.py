"""
Exception types and the error-to-message adapter shared by the wizard and the API
"""

UNKNOWN_DETAIL = "unknown"


class ConfigurationError(RuntimeError):
    """Raised when a required setting (e.g. the Gemini API key) is missing"""


class ImageProcessingError(ValueError):
    """Raised when an uploaded card image cannot be decoded or converted"""


class ReadingRequestError(RuntimeError):
    """Raised by the reading client when the interpretation API call fails"""


class InvalidTransition(RuntimeError):
    """Raised when a wizard action is not allowed from the current step"""

    def __init__(self, step, action):
        super().__init__(f"Cannot {action} while in step {step.name}")
        self.step = step
        self.action = action


def describe_error(err, fallback: str = UNKNOWN_DETAIL) -> str:
    """
    Reduce an arbitrary failure to a human-readable message.

    SDK errors often carry a ``message`` attribute; anything else falls back
    to ``str(err)``, then to ``fallback`` when that is empty.
    """
    if isinstance(err, str):
        return err or fallback

    message = getattr(err, "message", None)
    if isinstance(message, str) and message.strip():
        return message

    if err is not None:
        text = str(err)
        if text.strip():
            return text

    return fallback
