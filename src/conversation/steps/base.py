"""Base class for intake steps."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from src.bot.keyboards import KeyboardLayout
from src.schemas.conversation import ChatSession

UNKNOWN_INPUT_TEXT = "⚠️ Unknown input. Please follow the prompts."


@dataclass
class IncomingMessage:
    """One admin message. Attachments are carried as Telegram file ids."""

    chat_id: str
    text: str = ""
    image_file_ids: list[str] = field(default_factory=list)
    video_file_ids: list[str] = field(default_factory=list)

    @property
    def has_media(self) -> bool:
        return bool(self.image_file_ids or self.video_file_ids)


@dataclass
class StepResult:
    """Result of processing a step: the reply and the next session value."""

    response_text: str
    session: Optional[ChatSession]  # None = clear the session
    keyboard: Optional[KeyboardLayout] = None
    publish: bool = False  # engine persists session.draft before replying


class BaseStep(ABC):
    """A step is a pure function of (session, input) → StepResult."""

    @abstractmethod
    def process(self, message: IncomingMessage, session: ChatSession) -> StepResult:
        """Process admin input and return the reply and new session."""
        ...

    @abstractmethod
    def get_initial_message(self, session: ChatSession) -> StepResult:
        """Get the prompt for this step (when entering it)."""
        ...

    def reject(self, session: ChatSession) -> StepResult:
        """Unrecognized input: leave the session untouched and re-show the keyboard."""
        prompt = self.get_initial_message(session)
        return StepResult(
            response_text=UNKNOWN_INPUT_TEXT,
            session=session,
            keyboard=prompt.keyboard,
        )
