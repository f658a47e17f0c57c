from contextlib import asynccontextmanager

import anyio

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import sys

from app import config
from app.routes.reading_routes import router as reading_router
from app.routes.wizard_routes import router as wizard_router

# Configure logging with detailed format
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(config.LOG_FILE)
    ]
)
logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Tarot Reading Backend starting...")
    if config.require_api_key_on_startup():
        # Fail fast when the Gemini credential is missing
        config.get_gemini_api_key()
    # /card waits on /api/tarot-gpt, so its threads must not come from the pool the API uses
    app.state.wizard_limiter = anyio.CapacityLimiter(config.get_wizard_workers())
    yield
    logger.info("Tarot Reading Backend stopped")


app = FastAPI(title="Tarot Self-Reading", lifespan=lifespan)

# Allow all origins for development; tighten in production
app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
	# the reading API carries the photo as base64, a third larger than the upload
	if request.url.path.startswith("/api/"):
		max_bytes = config.get_max_api_body_bytes()
	else:
		max_bytes = config.get_max_body_bytes()
	content_length = request.headers.get("content-length")
	if content_length and content_length.isdigit() and int(content_length) > max_bytes:
		logger.warning(f"Rejected {request.url.path}: body of {content_length} bytes exceeds {max_bytes}")
		return JSONResponse(
			status_code=413,
			content={"error": f"Request body exceeds the limit of {max_bytes} bytes."},
		)
	return await call_next(request)


@app.get("/health")
async def health_check():
	return {"status": "ok"}


# Include the tarot reading JSON API
app.include_router(reading_router)
# Include the wizard pages
app.include_router(wizard_router)
