"""Main message handler — serializes a chat's updates and routes them through IntakeEngine."""

import traceback
from typing import Optional

import structlog

from src.bot.transport import TelegramTransport
from src.conversation.engine import IntakeEngine
from src.conversation.session import SessionManager
from src.conversation.steps.base import IncomingMessage, StepResult
from src.schemas.telegram import InboundMessage

logger = structlog.get_logger()

PLEASE_WAIT_TEXT = "⏳ Please wait."
HANDLER_ERROR_TEXT = "❌ Something went wrong. Please try again."


async def handle_message(
    message: InboundMessage,
    transport: TelegramTransport,
    engine: IntakeEngine,
    session_manager: SessionManager,
    update_id: Optional[int] = None,
) -> bool:
    """Handle one admin message from Telegram.

    Overlapping deliveries for the same chat are answered with "please wait"
    and dropped. Redelivered updates (same ``update_id``) are ignored.

    Args:
        message: Inbound Telegram message
        transport: Chat transport for replies
        engine: IntakeEngine instance
        session_manager: Session store holding the chat lock
        update_id: Telegram update id, when present

    Returns:
        False if the message was dropped because the chat was busy
    """
    chat_id = message.chat_id

    async with session_manager.lock(chat_id) as acquired:
        if not acquired:
            await transport.send_message(chat_id, PLEASE_WAIT_TEXT)
            return False

        if update_id is not None and not await session_manager.mark_update_processed(update_id):
            return True

        incoming = _to_incoming(message)

        logger.info(
            "message_received",
            chat_id=chat_id,
            text_preview=incoming.text[:50],
            images=len(incoming.image_file_ids),
            videos=len(incoming.video_file_ids),
        )

        try:
            result: StepResult = await engine.handle_message(incoming)
        except Exception as e:
            logger.error(
                "handle_message_error",
                error=str(e),
                error_type=type(e).__name__,
                traceback=traceback.format_exc(),
                chat_id=chat_id,
            )
            await transport.send_message(chat_id, HANDLER_ERROR_TEXT)
            return True

        await _send_result(transport, chat_id, result)
        return True


def _to_incoming(message: InboundMessage) -> IncomingMessage:
    """Carry photo/video attachments as Telegram file ids."""
    incoming = IncomingMessage(
        chat_id=message.chat_id,
        text=message.text or message.caption or "",
    )

    photo = message.largest_photo()
    if photo:
        incoming.image_file_ids.append(photo.file_id)
    if message.video:
        incoming.video_file_ids.append(message.video.file_id)

    return incoming


async def _send_result(transport: TelegramTransport, chat_id: str, result: StepResult) -> None:
    """Send StepResult as a Telegram message."""
    if not result.response_text:
        logger.debug("send_result_skipped_empty", chat_id=chat_id)
        return

    delivery = await transport.send_message(chat_id, result.response_text, result.keyboard)
    if not delivery.ok:
        # State is already saved; the admin just does not see this reply
        logger.warning("reply_not_delivered", chat_id=chat_id, error=delivery.error)
