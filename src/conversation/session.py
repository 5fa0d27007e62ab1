"""Session manager — Redis CRUD for intake state, per-chat lock, update dedup."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import redis.asyncio as redis
import structlog
from redis.exceptions import LockNotOwnedError

from src.config import settings
from src.schemas.conversation import ChatSession

logger = structlog.get_logger()


class SessionManager:
    """Manages intake sessions in Redis with TTL.

    Sessions expire after ``session_ttl_seconds`` of inactivity. The per-chat
    lock lives in its own key so that it can be taken atomically and expire on
    its own if a handler dies while holding it.
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client
        self.ttl = settings.session_ttl_seconds
        self.lock_ttl = settings.lock_ttl_seconds
        self.update_ttl = settings.processed_update_ttl_seconds

    def _key(self, chat_id: str) -> str:
        return f"session:intake:{chat_id}"

    def _lock_key(self, chat_id: str) -> str:
        return f"lock:intake:{chat_id}"

    def _update_key(self, update_id: int) -> str:
        return f"update:intake:{update_id}"

    async def get(self, chat_id: str) -> Optional[ChatSession]:
        """Get session state from Redis."""
        data = await self.redis.get(self._key(chat_id))
        if data:
            return ChatSession.model_validate_json(data)
        return None

    async def get_or_create(self, chat_id: str) -> ChatSession:
        """Get the chat's session, or a fresh one at ``start`` (not yet saved)."""
        session = await self.get(chat_id)
        if session is None:
            logger.info("session_created", chat_id=chat_id)
            session = ChatSession(chat_id=chat_id)
        return session

    async def save(self, session: ChatSession) -> None:
        """Save session state to Redis with TTL."""
        await self.redis.setex(
            self._key(session.chat_id),
            self.ttl,
            session.model_dump_json(),
        )
        logger.debug(
            "session_saved",
            chat_id=session.chat_id,
            step=session.step.value,
            variant_step=session.variant_step.value if session.variant_step else None,
        )

    async def delete(self, chat_id: str) -> None:
        """Delete session from Redis."""
        await self.redis.delete(self._key(chat_id))
        logger.debug("session_deleted", chat_id=chat_id)

    async def exists(self, chat_id: str) -> bool:
        """Check if session exists."""
        return bool(await self.redis.exists(self._key(chat_id)))

    @asynccontextmanager
    async def lock(self, chat_id: str) -> AsyncIterator[bool]:
        """Try to take the chat's lock for the duration of the block.

        Yields True if the lock was acquired, False if another delivery for
        the same chat holds it. An acquired lock is released on every exit
        path, including exceptions, and only while this holder still owns it.
        """
        chat_lock = self.redis.lock(
            self._lock_key(chat_id), timeout=self.lock_ttl, blocking=False
        )
        acquired = bool(await chat_lock.acquire())
        if not acquired:
            logger.info("chat_lock_busy", chat_id=chat_id)
        try:
            yield acquired
        finally:
            if acquired:
                try:
                    await chat_lock.release()
                except LockNotOwnedError:
                    # Expired while held and possibly re-taken by another delivery
                    logger.warning("chat_lock_lost", chat_id=chat_id)

    async def mark_update_processed(self, update_id: int) -> bool:
        """Record a Telegram update id. Returns False if it was seen before."""
        is_new = await self.redis.set(
            self._update_key(update_id), "1", nx=True, ex=self.update_ttl
        )
        if not is_new:
            logger.info("duplicate_update", update_id=update_id)
        return bool(is_new)
