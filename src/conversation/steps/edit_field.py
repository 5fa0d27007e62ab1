"""Edit steps — change one top-level field from the review screen."""

from src.bot.keyboards import Button, KeyboardLayout
from src.conversation.coercion import coerce_field
from src.conversation.messages import describe_value, edit_menu_result, overview_result
from src.conversation.steps.base import BaseStep, IncomingMessage, StepResult
from src.schemas.conversation import EDIT_STEPS, ChatSession, IntakeStep
from src.schemas.product import DraftField

FIELD_LABELS: dict[DraftField, str] = {
    DraftField.NAME: Button.NAME,
    DraftField.BRAND: Button.BRAND,
    DraftField.DESCRIPTION: Button.DESCRIPTION,
    DraftField.BASE_PRICE: Button.BASE_PRICE,
    DraftField.CATEGORY: Button.CATEGORY,
    DraftField.TAGS: Button.TAGS,
}


def start_edit(session: ChatSession, field: DraftField) -> StepResult:
    session = session.evolve(
        step=EDIT_STEPS[field],
        editing_field=field,
        pending_text=None,
    )
    return EditFieldStep(field).get_initial_message(session)


class EditFieldStep(BaseStep):
    """``edit_<field>``: text is held as a pending value until Done.

    Done commits and shows the overview again. Back discards and re-opens
    the field menu instead of the overview.
    """

    def __init__(self, field: DraftField):
        self.field = field
        self.label = FIELD_LABELS[field]

    def get_initial_message(self, session: ChatSession) -> StepResult:
        text = f"✏️ Send new value for <b>{self.label}</b>"
        if self.field == DraftField.TAGS:
            text += " (comma-separated)"
        text += f":\n<i>Current: {describe_value(session.draft.get_field(self.field))}</i>"
        return StepResult(
            response_text=text,
            session=session,
            keyboard=KeyboardLayout.DONE_BACK_CANCEL,
        )

    def process(self, message: IncomingMessage, session: ChatSession) -> StepResult:
        text = message.text.strip()

        if text == Button.DONE:
            return self._commit(session)
        if text == Button.BACK:
            session = session.evolve(
                step=IntakeStep.VARIANT_CONFIRM, editing_field=None, pending_text=None
            )
            return edit_menu_result(session, prefix=f"↩️ {self.label} unchanged.")
        if not text:
            return self.reject(session)

        value = coerce_field(self.field, text)
        return StepResult(
            response_text=(
                f"New {self.label}: <b>{describe_value(value)}</b>\n"
                f"Press {Button.DONE} to save or {Button.BACK} to discard."
            ),
            session=session.evolve(pending_text=text),
            keyboard=KeyboardLayout.DONE_BACK_CANCEL,
        )

    def _commit(self, session: ChatSession) -> StepResult:
        draft = session.draft
        if session.pending_text is None:
            prefix = "No changes."
        else:
            draft = draft.with_field(self.field, coerce_field(self.field, session.pending_text))
            prefix = f"✅ {self.label} updated."
        session = session.evolve(
            step=IntakeStep.VARIANT_CONFIRM,
            draft=draft,
            editing_field=None,
            pending_text=None,
        )
        return overview_result(session, prefix=prefix)
