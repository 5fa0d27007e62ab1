"""Bot factory: one aiogram Bot per token, reused across webhook requests."""

from __future__ import annotations

from aiogram import Bot
from cachetools import TTLCache
import structlog

logger = structlog.get_logger()

# The intake bot runs on a single token; a short TTL picks up token rotation
_bot_cache: TTLCache[str, Bot] = TTLCache(maxsize=4, ttl=3600)


async def get_or_create_bot(telegram_token: str) -> Bot:
    """Return the cached Bot for ``telegram_token``, creating it on a miss."""
    bot = _bot_cache.get(telegram_token)
    if bot is None:
        if not telegram_token:
            logger.warning("bot_token_missing")
        bot = Bot(token=telegram_token)
        _bot_cache[telegram_token] = bot
        logger.debug("bot_created", token_prefix=telegram_token[:10])
    return bot


async def close_bots() -> None:
    """Close the HTTP sessions of every cached bot and empty the cache."""
    bots = list(_bot_cache.values())
    _bot_cache.clear()
    for bot in bots:
        await bot.session.close()
    logger.debug("bots_closed", count=len(bots))
