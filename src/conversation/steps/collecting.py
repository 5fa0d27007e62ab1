"""Collecting steps — fixed-order free-text entry of the top-level fields."""

from src.bot.keyboards import Button, KeyboardLayout
from src.conversation.coercion import coerce_field
from src.conversation.messages import describe_value, variant_menu_result
from src.conversation.steps.base import BaseStep, IncomingMessage, StepResult
from src.schemas.conversation import COLLECTING_STEPS, ChatSession, IntakeStep
from src.schemas.product import DraftField

PROMPTS: dict[DraftField, str] = {
    DraftField.NAME: "Enter product name:",
    DraftField.BRAND: "Enter brand:",
    DraftField.DESCRIPTION: "Enter description:",
    DraftField.BASE_PRICE: "Enter base price:",
    DraftField.CATEGORY: "Enter category ID:",
    DraftField.TAGS: "Enter tags (comma-separated):",
}

_ORDER = [step for step, _ in COLLECTING_STEPS]


def begin_new_product(chat_id: str) -> StepResult:
    """Fresh session positioned at the first collecting step."""
    session = ChatSession(chat_id=chat_id, step=IntakeStep.COLLECTING_NAME)
    result = CollectingStep(IntakeStep.COLLECTING_NAME).get_initial_message(session)
    result.response_text = f"👋 Starting a new product. {result.response_text}"
    return result


class CollectingStep(BaseStep):
    """One field of the collecting sequence.

    Free text fills the field and advances. Previous/Next/Skip move by one
    position without touching already-entered values.
    """

    def __init__(self, step: IntakeStep):
        self.step = step
        self.index = _ORDER.index(step)
        self.field = COLLECTING_STEPS[self.index][1]

    def get_initial_message(self, session: ChatSession) -> StepResult:
        text = PROMPTS[self.field]
        if session.draft.has_value(self.field):
            text += f"\n<i>Current: {describe_value(session.draft.get_field(self.field))}</i>"
        return StepResult(response_text=text, session=session, keyboard=KeyboardLayout.REPLY)

    def process(self, message: IncomingMessage, session: ChatSession) -> StepResult:
        text = message.text.strip()

        if text == Button.PREVIOUS:
            return self._move(session, self.index - 1)
        if text in (Button.NEXT, Button.SKIP):
            return self._move(session, self.index + 1)
        if not text:
            return self.reject(session)

        draft = session.draft.with_field(self.field, coerce_field(self.field, text))
        return self._move(session.evolve(draft=draft), self.index + 1)

    @staticmethod
    def _move(session: ChatSession, index: int) -> StepResult:
        index = max(index, 0)
        if index >= len(_ORDER):
            return variant_menu_result(
                session.evolve(step=IntakeStep.VARIANT_PROMPT),
                prefix="📦 Product info complete. Now add variants.",
            )
        step = _ORDER[index]
        return CollectingStep(step).get_initial_message(session.evolve(step=step))
