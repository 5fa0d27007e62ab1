"""FastAPI application entry point."""

import logging
import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI

from src.api.webhooks.telegram import router as telegram_router
from src.bot.factory import close_bots
from src.config import settings
from src.database import dispose_engine
from src.redis_client import close_redis

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer() if settings.environment == "development"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.log_level.upper(), logging.INFO)
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info(
        "app_starting",
        environment=settings.environment,
        webhook_base=settings.telegram_webhook_base_url,
        admin_configured=bool(settings.admin_chat_id),
    )
    yield
    logger.info("app_shutting_down")
    await close_bots()
    await close_redis()
    await dispose_engine()


app = FastAPI(
    title="Storefront Intake Bot API",
    description="Telegram wizard for adding products to the storefront catalog",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(telegram_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Storefront Intake Bot API",
        "version": "0.1.0",
        "status": "running",
    }
