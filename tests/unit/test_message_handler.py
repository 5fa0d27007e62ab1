"""Tests for the Telegram message handler."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.bot.handlers.message import HANDLER_ERROR_TEXT, PLEASE_WAIT_TEXT, handle_message
from src.bot.keyboards import Button, KeyboardLayout
from src.bot.transport import DeliveryResult, TelegramTransport
from src.config import settings
from src.conversation.steps.base import StepResult
from src.repositories.product import normalize_product
from src.schemas.conversation import IntakeStep
from src.schemas.telegram import InboundMessage, TelegramWebhookPayload

ADMIN_CHAT_ID = "42"


def _message(text=None, **extra):
    body = {"chat": {"id": int(ADMIN_CHAT_ID)}, **extra}
    if text is not None:
        body["text"] = text
    return InboundMessage.model_validate(body)


class TestLocking:
    @pytest.mark.asyncio
    async def test_busy_chat_gets_one_please_wait_and_no_mutation(
        self, engine, store, fake_redis, transport
    ):
        await handle_message(_message(Button.NEW_PRODUCT), transport, engine, store, update_id=1)
        fake_redis.store["lock:intake:42"] = "other-delivery"
        snapshot = dict(fake_redis.store)
        transport.send_message.reset_mock()

        processed = await handle_message(
            _message("Watch X"), transport, engine, store, update_id=2
        )

        assert processed is False
        transport.send_message.assert_awaited_once_with(ADMIN_CHAT_ID, PLEASE_WAIT_TEXT)
        assert fake_redis.store == snapshot

    @pytest.mark.asyncio
    async def test_lock_released_after_processing(self, engine, store, fake_redis, transport):
        await handle_message(_message(Button.NEW_PRODUCT), transport, engine, store)
        assert "lock:intake:42" not in fake_redis.store

    @pytest.mark.asyncio
    async def test_lock_released_when_engine_fails(self, engine, store, fake_redis, transport):
        engine.handle_message = AsyncMock(side_effect=RuntimeError("boom"))

        processed = await handle_message(_message("hi"), transport, engine, store)

        assert processed is True
        transport.send_message.assert_awaited_once_with(ADMIN_CHAT_ID, HANDLER_ERROR_TEXT)
        assert "lock:intake:42" not in fake_redis.store


class TestRedelivery:
    @pytest.mark.asyncio
    async def test_same_update_is_processed_once(self, engine, store, transport):
        await handle_message(_message(Button.NEW_PRODUCT), transport, engine, store, update_id=7)
        await handle_message(_message("Watch X"), transport, engine, store, update_id=8)
        transport.send_message.reset_mock()

        processed = await handle_message(_message("Watch X"), transport, engine, store, update_id=8)

        assert processed is True
        transport.send_message.assert_not_awaited()
        saved = await store.get(ADMIN_CHAT_ID)
        assert saved.step == IntakeStep.COLLECTING_BRAND
        assert saved.draft.name == "Watch X"


class TestReplies:
    @pytest.mark.asyncio
    async def test_reply_sent_with_step_keyboard(self, engine, store, transport):
        await handle_message(_message(Button.NEW_PRODUCT), transport, engine, store)

        chat_id, text, keyboard = transport.send_message.await_args.args
        assert chat_id == ADMIN_CHAT_ID
        assert "Enter product name" in text
        assert keyboard == KeyboardLayout.REPLY

    @pytest.mark.asyncio
    async def test_failed_delivery_keeps_state(self, engine, store, transport):
        transport.send_message = AsyncMock(return_value=DeliveryResult(ok=False, error="timeout"))

        processed = await handle_message(_message(Button.NEW_PRODUCT), transport, engine, store)

        assert processed is True
        saved = await store.get(ADMIN_CHAT_ID)
        assert saved.step == IntakeStep.COLLECTING_NAME


class TestMedia:
    @pytest.mark.asyncio
    async def test_largest_photo_and_video_carried_as_file_ids(self, store, transport):
        engine = AsyncMock()
        engine.handle_message = AsyncMock(return_value=StepResult("", None))
        message = _message(
            caption="https://cdn.example/extra.jpg",
            photo=[
                {"file_id": "small", "width": 90, "height": 90},
                {"file_id": "large", "width": 1280, "height": 1280},
            ],
            video={"file_id": "vid"},
        )

        await handle_message(message, transport, engine, store)

        incoming = engine.handle_message.await_args.args[0]
        assert incoming.text == "https://cdn.example/extra.jpg"
        assert incoming.image_file_ids == ["large"]
        assert incoming.video_file_ids == ["vid"]
        assert incoming.has_media

    @pytest.mark.asyncio
    async def test_published_media_never_carries_bot_token(
        self, engine, store, repository, monkeypatch
    ):
        token = "123456:SECRET-BOT-TOKEN"
        monkeypatch.setattr(settings, "telegram_bot_token", token)
        bot = AsyncMock()
        bot.token = token
        bot.send_message = AsyncMock(return_value=MagicMock(message_id=1))
        transport = TelegramTransport(bot)

        for text in (
            Button.NEW_PRODUCT, "Watch X", "Acme", Button.SKIP, "1200", Button.SKIP,
            Button.SKIP, Button.ADD_VARIANT, "Silver", "#C0C0C0", Button.SKIP, "3",
        ):
            await handle_message(_message(text), transport, engine, store)
        await handle_message(
            _message(photo=[{"file_id": "AgACAgQAAxk", "width": 800, "height": 800}]),
            transport, engine, store,
        )
        for text in (Button.DONE, Button.DONE, Button.PUBLISH):
            await handle_message(_message(text), transport, engine, store)

        draft = repository.create_product.await_args.args[0]
        document = normalize_product(draft)
        assert document["variants"][0]["imageFileIds"] == ["AgACAgQAAxk"]
        assert document["variants"][0]["imageUrls"] == []
        assert token not in json.dumps(document)
        bot.get_file.assert_not_awaited()


class TestPayloadSchema:
    def test_minimal_payload(self):
        payload = TelegramWebhookPayload.model_validate(
            {"message": {"chat": {"id": 42}, "text": "hi"}}
        )
        assert payload.update_id is None
        assert payload.message.chat_id == "42"

    def test_full_telegram_update(self):
        payload = TelegramWebhookPayload.model_validate(
            {
                "update_id": 10,
                "message": {
                    "message_id": 5,
                    "date": 1700000000,
                    "from": {"id": 42, "is_bot": False, "first_name": "Admin"},
                    "chat": {"id": 42, "type": "private"},
                    "text": "✅ Done",
                },
            }
        )
        assert payload.update_id == 10
        assert payload.message.text == "✅ Done"
