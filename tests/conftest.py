"""Test fixtures and configuration."""

import uuid

import pytest
from unittest.mock import AsyncMock, MagicMock
from redis.exceptions import LockError, LockNotOwnedError

from src.bot.transport import DeliveryResult, TelegramTransport
from src.conversation.engine import IntakeEngine
from src.conversation.session import SessionManager
from src.conversation.steps.base import IncomingMessage
from src.repositories.product import ProductRepository
from src.schemas.conversation import ChatSession, IntakeStep
from src.schemas.product import ColorOption, ProductDraft, VariantDraft

ADMIN_CHAT_ID = "42"


class FakeLock:
    """Token-owned lock with the acquire/release contract of redis-py's ``Lock``."""

    def __init__(self, redis, name, timeout=None, blocking=True):
        self.redis = redis
        self.name = name
        self.timeout = timeout
        self.token = None

    async def acquire(self):
        token = uuid.uuid4().hex
        if await self.redis.set(self.name, token, nx=True, ex=self.timeout):
            self.token = token
            return True
        return False

    async def release(self):
        token, self.token = self.token, None
        if token is None:
            raise LockError("Cannot release an unlocked lock")
        if self.redis.store.get(self.name) != token:
            raise LockNotOwnedError("Cannot release a lock that's no longer owned")
        await self.redis.delete(self.name)


class FakeRedis:
    """In-memory stand-in for the handful of Redis commands the app uses."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def exists(self, *keys):
        return sum(1 for key in keys if key in self.store)

    def lock(self, name, timeout=None, blocking=True, **kwargs):
        return FakeLock(self, name, timeout=timeout, blocking=blocking)


@pytest.fixture
def mock_redis():
    """Mock Redis client."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.setex = AsyncMock()
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock()
    redis.exists = AsyncMock(return_value=False)
    return redis


@pytest.fixture
def session_manager(mock_redis):
    """Create SessionManager with mock Redis."""
    return SessionManager(mock_redis)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def store(fake_redis):
    """SessionManager over the in-memory Redis double."""
    return SessionManager(fake_redis)


@pytest.fixture
def repository():
    """Product repository double returning a fixed id."""
    repo = AsyncMock(spec=ProductRepository)
    repo.create_product = AsyncMock(return_value="prod-123")
    return repo


@pytest.fixture
def engine(store, repository):
    """Create IntakeEngine over the in-memory store."""
    return IntakeEngine(store, repository=repository)


@pytest.fixture
def transport():
    """Transport double that records sends and always succeeds."""
    t = MagicMock(spec=TelegramTransport)
    t.send_message = AsyncMock(return_value=DeliveryResult(ok=True, message_id=1))
    return t


@pytest.fixture
def send(engine):
    """Send one admin text message through the engine."""

    async def _send(text="", **kwargs):
        return await engine.handle_message(
            IncomingMessage(chat_id=ADMIN_CHAT_ID, text=text, **kwargs)
        )

    return _send


@pytest.fixture
def sample_draft():
    return ProductDraft(
        name="Watch X",
        brand="Acme",
        description="Steel diver",
        base_price=1200.0,
        category_id="watches",
        tags=("steel", "limited"),
        variants=(
            VariantDraft(
                id="v-1",
                color=ColorOption(name="Silver", hex="#C0C0C0"),
                price=1250.0,
                stock="3",
                image_urls=("https://cdn.example/a.jpg", "https://cdn.example/b.jpg"),
                video_urls=(),
            ),
        ),
    )


@pytest.fixture
def confirm_session(sample_draft):
    """A session sitting on the review screen."""
    return ChatSession(
        chat_id=ADMIN_CHAT_ID,
        step=IntakeStep.VARIANT_CONFIRM,
        draft=sample_draft,
    )
