"""Chat transport adapter — outbound Telegram calls that never raise."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import structlog
from aiogram import Bot

from src.bot.factory import get_or_create_bot
from src.bot.keyboards import KeyboardLayout, build_keyboard
from src.config import settings

logger = structlog.get_logger()


@dataclass
class DeliveryResult:
    """Outcome of one outbound send."""

    ok: bool
    message_id: Optional[int] = None
    error: Optional[str] = None


class TelegramTransport:
    """Sends formatted messages with reply keyboards to a chat.

    Failures are logged and reported through ``DeliveryResult`` so a lost
    message never corrupts conversation state.
    """

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_message(
        self,
        chat_id: Union[int, str],
        text: str,
        keyboard: Optional[KeyboardLayout] = None,
    ) -> DeliveryResult:
        """Send an HTML message, optionally with a reply keyboard.

        Args:
            chat_id: Target chat
            text: HTML-formatted message body
            keyboard: Named keyboard layout, or None for no markup

        Returns:
            DeliveryResult with the Telegram message id on success
        """
        try:
            message = await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                parse_mode="HTML",
                reply_markup=build_keyboard(keyboard) if keyboard else None,
            )
        except Exception as e:
            logger.error(
                "telegram_send_failed",
                error=str(e),
                error_type=type(e).__name__,
                chat_id=str(chat_id),
            )
            return DeliveryResult(ok=False, error=str(e))

        logger.debug(
            "telegram_message_sent",
            chat_id=str(chat_id),
            message_id=message.message_id,
            keyboard=keyboard.value if keyboard else None,
        )
        return DeliveryResult(ok=True, message_id=message.message_id)


async def get_transport() -> TelegramTransport:
    """FastAPI dependency for the chat transport."""
    bot = await get_or_create_bot(settings.telegram_bot_token)
    return TelegramTransport(bot)
