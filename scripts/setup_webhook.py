"""Register the intake webhook with Telegram.

Usage: python -m scripts.setup_webhook
"""

import asyncio

from aiogram import Bot

from src.config import settings


async def setup_webhook() -> None:
    if not settings.telegram_bot_token or not settings.telegram_webhook_base_url:
        raise SystemExit("TELEGRAM_BOT_TOKEN and TELEGRAM_WEBHOOK_BASE_URL must be set")

    url = settings.telegram_webhook_base_url.rstrip("/") + "/webhook/telegram"
    bot = Bot(token=settings.telegram_bot_token)
    try:
        ok = await bot.set_webhook(
            url=url,
            allowed_updates=["message"],
            secret_token=settings.telegram_webhook_secret or None,
        )
        info = await bot.get_webhook_info()
    finally:
        await bot.session.close()

    print(f"Webhook URL: {url}")
    print(f"set_webhook: {ok}, pending updates: {info.pending_update_count}")
    if info.last_error_message:
        print(f"Last error: {info.last_error_message}")


if __name__ == "__main__":
    asyncio.run(setup_webhook())
