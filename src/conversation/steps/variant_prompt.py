"""Variant prompt — list variants, add one, remove one, or move on to review."""

import re

from src.bot.keyboards import Button
from src.conversation.messages import overview_result, variant_menu_result
from src.conversation.steps.base import BaseStep, IncomingMessage, StepResult
from src.conversation.steps.variant_wizard import start_variant
from src.schemas.conversation import ChatSession, IntakeStep

_REMOVE = re.compile(r"^(?:remove|delete)\s+#?(\d+)$", re.IGNORECASE)


class VariantPromptStep(BaseStep):
    def get_initial_message(self, session: ChatSession) -> StepResult:
        return variant_menu_result(session)

    def process(self, message: IncomingMessage, session: ChatSession) -> StepResult:
        text = message.text.strip()

        if text == Button.ADD_VARIANT:
            return start_variant(session)
        if text == Button.DONE:
            return overview_result(session.evolve(step=IntakeStep.VARIANT_CONFIRM))

        match = _REMOVE.match(text)
        if match:
            return self._remove(session, int(match.group(1)))

        return self.reject(session)

    @staticmethod
    def _remove(session: ChatSession, number: int) -> StepResult:
        variants = session.draft.variants
        if not 1 <= number <= len(variants):
            return variant_menu_result(session, prefix=f"⚠️ There is no variant #{number}.")
        remaining = variants[: number - 1] + variants[number:]
        session = session.evolve(draft=session.draft.evolve(variants=remaining))
        return variant_menu_result(session, prefix=f"🗑 Variant #{number} removed.")
