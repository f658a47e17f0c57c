"""
HTML pages for the tarot reading wizard
"""
import os
from typing import List

from anyio import to_thread
from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import UploadFile

from app.services.image_service import CardUpload
from app.services.reading_client import ReadingClient
from app.services.wizard import TarotWizard, WizardStep

router = APIRouter(tags=["wizard"])

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "..", "templates")
templates = Jinja2Templates(directory=TEMPLATES_DIR)

CARD_FIELD = "cards"


def get_reading_client() -> ReadingClient:
    return ReadingClient()


def render(request: Request, wizard: TarotWizard):
    return templates.TemplateResponse(
        request,
        f"{wizard.view()}.html",
        {"wizard": wizard},
    )


async def read_uploads(files: List) -> List[CardUpload]:
    uploads = []
    for f in files:
        # an empty file input still posts a part with no filename
        if not isinstance(f, UploadFile) or not f.filename:
            continue
        uploads.append(CardUpload(filename=f.filename, content_type=f.content_type, data=await f.read()))
    return uploads


@router.get("/")
async def ask_question(request: Request):
    return render(request, TarotWizard())


@router.post("/question")
async def submit_question(request: Request):
    form = await request.form()
    wizard = TarotWizard()
    wizard.submit_question(str(form.get("question", "")))
    return render(request, wizard)


@router.post("/card")
async def submit_card(request: Request):
    form = await request.form()
    wizard = TarotWizard.resume(WizardStep.UPLOAD_CARD, str(form.get("question", "")))
    if not wizard.question.strip():
        return render(request, TarotWizard())

    uploads = await read_uploads(form.getlist(CARD_FIELD))

    # requests is blocking; keep it off the event loop and out of the API's thread pool
    await to_thread.run_sync(
        wizard.submit_card,
        uploads,
        get_reading_client(),
        limiter=request.app.state.wizard_limiter,
    )
    return render(request, wizard)


@router.post("/restart")
async def restart():
    # the wizard keeps no server-side state; a fresh question page is the reset
    return RedirectResponse(url="/", status_code=303)
