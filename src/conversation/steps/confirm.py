"""Confirm step — overview with Publish / Edit / Cancel."""

from src.bot.keyboards import Button
from src.conversation.messages import edit_menu_result, overview_result, variant_menu_result
from src.conversation.steps.base import BaseStep, IncomingMessage, StepResult
from src.conversation.steps.edit_field import FIELD_LABELS, start_edit
from src.schemas.conversation import ChatSession, IntakeStep

FIELD_BUTTONS = {label: field for field, label in FIELD_LABELS.items()}


class ConfirmStep(BaseStep):
    """``variant_confirm``. The field-edit menu is answered here as well."""

    def get_initial_message(self, session: ChatSession) -> StepResult:
        return overview_result(session)

    def process(self, message: IncomingMessage, session: ChatSession) -> StepResult:
        text = message.text.strip()

        if text == Button.PUBLISH:
            return StepResult(response_text="", session=session, publish=True)
        if text == Button.EDIT:
            return edit_menu_result(session)
        if text == Button.BACK:
            return overview_result(session)
        if text in FIELD_BUTTONS:
            return start_edit(session, FIELD_BUTTONS[text])
        if text == Button.VARIANTS:
            return variant_menu_result(session.evolve(step=IntakeStep.VARIANT_PROMPT))

        return self.reject(session)
