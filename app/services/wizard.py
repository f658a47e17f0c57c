"""
Three-step tarot reading wizard: ask a question, upload the drawn card, show the reading.
"""
import logging
from enum import Enum
from typing import Sequence

from app.errors import InvalidTransition, describe_error
from app.services.image_service import CardUpload, prepare_card_image

logger = logging.getLogger(__name__)

NO_CARD_MESSAGE = "Please upload your card."
TOO_MANY_CARDS_MESSAGE = "Please upload exactly one card."
GENERIC_ERROR_MESSAGE = "An unknown error occurred."


class WizardStep(Enum):
    ASK_QUESTION = 1
    UPLOAD_CARD = 2
    SHOW_RESULT = 3


# (current step, action) -> next step
TRANSITIONS = {
    (WizardStep.ASK_QUESTION, "submit_question"): WizardStep.UPLOAD_CARD,
    (WizardStep.UPLOAD_CARD, "submit_card"): WizardStep.SHOW_RESULT,
    (WizardStep.SHOW_RESULT, "fail"): WizardStep.UPLOAD_CARD,
    (WizardStep.SHOW_RESULT, "restart"): WizardStep.ASK_QUESTION,
}


def build_reading_prompt(question: str) -> str:
    return (
        "The user has drawn a single tarot card.\n"
        "The user's question:\n"
        f"“{question.strip()}”\n\n"
        "Interpret the meaning of the card in detail, in the context of this question.\n"
        "Answer with as positive and hopeful a message as possible."
    )


class TarotWizard:
    """
    Tracks the wizard step and the data carried across steps.
    """

    def __init__(self):
        self.step = WizardStep.ASK_QUESTION
        self.question = ""
        self.card_image = None      # data URL for the preview
        self.reading = None
        self.error = None           # user-visible message from the last failure
        self.is_loading = False

    @classmethod
    def resume(cls, step: WizardStep, question: str = "") -> "TarotWizard":
        """Rebuild a wizard from the fields posted back by the browser."""
        wizard = cls()
        wizard.step = step
        wizard.question = question or ""
        return wizard

    def _transition(self, action: str):
        next_step = TRANSITIONS.get((self.step, action))
        if next_step is None:
            raise InvalidTransition(self.step, action)
        logger.debug(f"Wizard {self.step.name} --{action}--> {next_step.name}")
        self.step = next_step

    def submit_question(self, question: str) -> bool:
        """Move on to the upload step; empty questions are ignored."""
        if self.step != WizardStep.ASK_QUESTION:
            raise InvalidTransition(self.step, "submit_question")

        self.question = question or ""
        if not self.question.strip():
            return False

        self._transition("submit_question")
        return True

    def submit_card(self, uploads: Sequence[CardUpload], client) -> bool:
        """
        Validate the upload, prepare the image and request the reading.

        Returns True when a reading was received. On any failure the wizard
        is back in UPLOAD_CARD with ``error`` set and the question kept.
        """
        if self.step != WizardStep.UPLOAD_CARD:
            raise InvalidTransition(self.step, "submit_card")
        if self.is_loading:
            return False

        self.error = None
        self.reading = None

        if len(uploads) == 0:
            self.error = NO_CARD_MESSAGE
            return False
        if len(uploads) != 1:
            self.error = TOO_MANY_CARDS_MESSAGE
            return False

        self.is_loading = True
        try:
            image = prepare_card_image(uploads[0])
            self.card_image = image.data_url
            self._transition("submit_card")

            self.reading = client.request_reading(build_reading_prompt(self.question), image.payload)
            return True
        except Exception as e:
            self.fail(e)
            return False
        finally:
            self.is_loading = False

    def fail(self, err):
        message = describe_error(err, GENERIC_ERROR_MESSAGE)
        logger.warning(f"Card reading failed: {message}")
        self.error = f"An error occurred while reading your card: {message}"
        self.reading = None
        self.card_image = None
        if self.step == WizardStep.SHOW_RESULT:
            self._transition("fail")

    def restart(self):
        if self.is_loading:
            raise InvalidTransition(self.step, "restart")
        self._transition("restart")
        self.question = ""
        self.card_image = None
        self.reading = None
        self.error = None

    def view(self) -> str:
        """Name of the view to render for the current step."""
        if self.step == WizardStep.SHOW_RESULT:
            return "loading" if self.is_loading else "result"
        if self.step == WizardStep.UPLOAD_CARD:
            return "upload_card"
        return "ask_question"

