"""Inbound Telegram webhook payload.

Only the parts of an Update the intake bot reads. Unknown keys are ignored
so full Telegram updates validate as well.
"""

from typing import Optional, Union

from pydantic import BaseModel


class InboundChat(BaseModel):
    id: Union[int, str]


class InboundPhotoSize(BaseModel):
    file_id: str
    width: int = 0
    height: int = 0
    file_size: Optional[int] = None


class InboundVideo(BaseModel):
    file_id: str
    file_name: Optional[str] = None
    mime_type: Optional[str] = None


class InboundMessage(BaseModel):
    chat: InboundChat
    text: Optional[str] = None
    caption: Optional[str] = None
    photo: list[InboundPhotoSize] = []
    video: Optional[InboundVideo] = None

    @property
    def chat_id(self) -> str:
        return str(self.chat.id)

    def largest_photo(self) -> Optional[InboundPhotoSize]:
        """Telegram sends every resolution of a photo; keep the biggest."""
        if not self.photo:
            return None
        return max(self.photo, key=lambda p: (p.width * p.height, p.file_size or 0))


class TelegramWebhookPayload(BaseModel):
    update_id: Optional[int] = None
    message: Optional[InboundMessage] = None
