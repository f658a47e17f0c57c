#Receives the question prompt and card image and asks Gemini for the reading
import logging
from functools import lru_cache

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.errors import describe_error
from app.schemas import ErrorResponse, ReadingRequest, ReadingResponse
from app.services.gemini_service import GeminiTarotReader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tarot reading"])

INVALID_INPUT_MESSAGE = "The prompt or image is invalid."
GEMINI_FAILURE_MESSAGE = "Gemini API request failed"


@lru_cache(maxsize=1)
def get_tarot_reader() -> GeminiTarotReader:
    return GeminiTarotReader()


@router.post(
    "/tarot-gpt",
    response_model=ReadingResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def tarot_reading(request: Request):
    """
    Interpret one tarot card photo in the context of the user's question
    """
    try:
        body = ReadingRequest(**await request.json())

        if not (body.prompt or "").strip() or not body.image:
            return JSONResponse(status_code=400, content={"error": INVALID_INPUT_MESSAGE})

        reader = get_tarot_reader()
        reading = await run_in_threadpool(reader.generate_reading, body.prompt, body.image)

        return {"reading": reading}

    except Exception as e:
        logger.exception("Tarot reading request failed")
        return JSONResponse(
            status_code=500,
            content={"error": GEMINI_FAILURE_MESSAGE, "detail": describe_error(e)},
        )
