"""Start step — idle chat waiting for a new product."""

from src.bot.keyboards import Button, KeyboardLayout
from src.conversation.steps.base import IncomingMessage, StepResult, BaseStep
from src.schemas.conversation import ChatSession


class StartStep(BaseStep):
    """No draft in progress; only offers the new-product button."""

    def get_initial_message(self, session: ChatSession) -> StepResult:
        return StepResult(
            response_text=f"👋 Press {Button.NEW_PRODUCT} to add a product to the catalog.",
            session=session,
            keyboard=KeyboardLayout.NEW,
        )

    def process(self, message: IncomingMessage, session: ChatSession) -> StepResult:
        # "➕ New Product" is intercepted by the engine before step dispatch
        return self.get_initial_message(session)
