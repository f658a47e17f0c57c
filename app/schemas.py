from pydantic import BaseModel
from typing import Optional


# ==================== Tarot Reading API =========================

class ReadingRequest(BaseModel):
    """Body of POST /api/tarot-gpt"""
    prompt: Optional[str] = None
    image: Optional[str] = None  # base64 JPEG, no data-URL prefix


class ReadingResponse(BaseModel):
    reading: str


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
