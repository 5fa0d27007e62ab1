"""Telegram webhook endpoint — receives updates from Telegram Bot API."""

import redis.asyncio as redis
import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.bot.handlers.message import handle_message
from src.bot.keyboards import KeyboardLayout
from src.bot.transport import TelegramTransport, get_transport
from src.config import settings
from src.conversation.engine import IntakeEngine
from src.conversation.session import SessionManager
from src.database import get_db
from src.redis_client import get_redis
from src.repositories.product import ProductRepository
from src.schemas.telegram import TelegramWebhookPayload

logger = structlog.get_logger()

router = APIRouter()

UNAUTHORIZED_TEXT = "❌ Unauthorized."
SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


@router.post("/webhook/telegram")
async def telegram_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis),
    transport: TelegramTransport = Depends(get_transport),
) -> JSONResponse:
    """Receive a Telegram update for the product intake bot.

    Returns:
        200 {"ok": true} when processed, 200 {"ok": false} when the chat was
        busy, 400 without a message, 403 {"ok": false} for non-admin senders
    """
    # 1. Optional shared secret set with setWebhook
    if settings.telegram_webhook_secret:
        if request.headers.get(SECRET_HEADER) != settings.telegram_webhook_secret:
            logger.warning("webhook_bad_secret")
            return JSONResponse({"ok": False}, status_code=401)

    # 2. Parse the update
    try:
        body = await request.json()
        payload = TelegramWebhookPayload.model_validate(body)
    except (ValueError, ValidationError) as e:
        logger.error("webhook_parse_error", error=str(e))
        return JSONResponse({"error": "Invalid update"}, status_code=400)

    message = payload.message
    if message is None:
        return JSONResponse({"error": "No message received"}, status_code=400)

    # 3. Only the configured admin may drive the bot
    chat_id = message.chat_id
    if chat_id != str(settings.admin_chat_id):
        logger.warning("webhook_unauthorized", chat_id=chat_id)
        await transport.send_message(chat_id, UNAUTHORIZED_TEXT, KeyboardLayout.REPLY)
        return JSONResponse({"ok": False}, status_code=403)

    # 4. Route to handler
    session_manager = SessionManager(redis_client)
    engine = IntakeEngine(session_manager, repository=ProductRepository(db))

    processed = await handle_message(
        message=message,
        transport=transport,
        engine=engine,
        session_manager=session_manager,
        update_id=payload.update_id,
    )
    return JSONResponse({"ok": processed})
