"""Intake Engine — the product intake dialog orchestrator.

Applies the global interceptors, routes each message to the handler for the
session's current step, persists the resulting session, and publishes the
finished draft through the product repository.
"""

from __future__ import annotations

from typing import Optional

import structlog

from src.bot.keyboards import Button, KeyboardLayout
from src.conversation.messages import format_stock_summary
from src.conversation.session import SessionManager
from src.conversation.steps.base import BaseStep, IncomingMessage, StepResult
from src.conversation.steps.collecting import CollectingStep, begin_new_product
from src.conversation.steps.confirm import ConfirmStep
from src.conversation.steps.edit_field import EditFieldStep
from src.conversation.steps.start import StartStep
from src.conversation.steps.variant_prompt import VariantPromptStep
from src.conversation.steps.variant_wizard import VariantWizardStep
from src.repositories.product import ProductPersistenceError, ProductRepository
from src.schemas.conversation import (
    COLLECTING_STEPS,
    EDIT_STEPS,
    TERMINAL_STEPS,
    ChatSession,
    IntakeStep,
    VariantStep,
)

logger = structlog.get_logger()

CANCEL_COMMANDS = frozenset({"/cancel", Button.CANCEL})
NEW_PRODUCT_COMMANDS = frozenset({"/start", "/new", Button.NEW_PRODUCT})

CANCELLED_TEXT = "🚫 Cancelled."
PUBLISH_FAILED_TEXT = "❌ Error creating product."
NAME_REQUIRED_TEXT = "⚠️ Product name is required."
MEDIA_NOT_ACCEPTED_TEXT = "📎 Photos and videos are only accepted at the variant media step."

# Step registry: every non-terminal step has exactly one handler
STEP_HANDLERS: dict[IntakeStep, BaseStep] = {
    IntakeStep.START: StartStep(),
    **{step: CollectingStep(step) for step, _ in COLLECTING_STEPS},
    IntakeStep.VARIANT_PROMPT: VariantPromptStep(),
    IntakeStep.VARIANT_CONFIRM: ConfirmStep(),
    **{step: EditFieldStep(field) for field, step in EDIT_STEPS.items()},
}

VARIANT_WIZARD = VariantWizardStep()


def resolve_handler(session: ChatSession) -> BaseStep:
    """Pick the handler for the session's position.

    The variant sub-wizard takes precedence while it is active.
    """
    if session.in_variant_wizard:
        return VARIANT_WIZARD
    if session.step in TERMINAL_STEPS:
        # A terminal session should have been deleted; treat it as idle
        return STEP_HANDLERS[IntakeStep.START]
    return STEP_HANDLERS[session.step]


class IntakeEngine:
    """Main orchestrator for the product intake dialog."""

    def __init__(
        self,
        session_manager: SessionManager,
        repository: Optional[ProductRepository] = None,
    ):
        self.session_manager = session_manager
        self.repository = repository

    async def handle_message(self, message: IncomingMessage) -> StepResult:
        """Process one admin message and return the reply to send.

        The caller must hold the chat's lock.
        """
        chat_id = message.chat_id
        text = message.text.strip()

        # ── Cancel: always wins, whatever the step ──
        if text in CANCEL_COMMANDS:
            await self.session_manager.delete(chat_id)
            logger.info("intake_cancelled", chat_id=chat_id)
            return StepResult(
                response_text=CANCELLED_TEXT,
                session=None,
                keyboard=KeyboardLayout.NEW,
            )

        # ── New product: discard any draft and start over ──
        if text in NEW_PRODUCT_COMMANDS:
            result = begin_new_product(chat_id)
            await self.session_manager.save(result.session)
            logger.info("intake_started", chat_id=chat_id)
            return result

        # ── Normal step processing ──
        session = await self.session_manager.get_or_create(chat_id)
        step_before = session.step
        handler = resolve_handler(session)
        if message.has_media and session.variant_step != VariantStep.MEDIA:
            result = StepResult(
                response_text=MEDIA_NOT_ACCEPTED_TEXT,
                session=session,
                keyboard=handler.get_initial_message(session).keyboard,
            )
        else:
            result = handler.process(message, session)

        if result.publish:
            result = await self._publish(result.session)

        if result.session is None:
            await self.session_manager.delete(chat_id)
        else:
            await self.session_manager.save(result.session)

        logger.info(
            "message_processed",
            chat_id=chat_id,
            step_before=step_before.value,
            step=result.session.step.value if result.session else IntakeStep.PUBLISHED.value,
            variant_step=(
                result.session.variant_step.value
                if result.session and result.session.variant_step
                else None
            ),
        )
        return result

    async def _publish(self, session: ChatSession) -> StepResult:
        """Persist the draft. On failure the session stays at ``variant_confirm``."""
        draft = session.draft

        if not draft.name.strip():
            return StepResult(
                response_text=NAME_REQUIRED_TEXT,
                session=session,
                keyboard=KeyboardLayout.CONFIRM,
            )

        if self.repository is None:
            logger.error("no_product_repository", chat_id=session.chat_id)
            return StepResult(
                response_text=PUBLISH_FAILED_TEXT,
                session=session,
                keyboard=KeyboardLayout.CONFIRM,
            )

        try:
            if session.published_id:
                # Row already exists from an earlier attempt; only its id is missing
                product_id = await self.repository.backfill_id(session.published_id, draft)
            else:
                product_id = await self.repository.create_product(draft)
        except ProductPersistenceError as e:
            logger.error(
                "publish_failed",
                error=str(e),
                chat_id=session.chat_id,
                product_id=e.product_id,
                retried_id=session.published_id,
            )
            return StepResult(
                response_text=PUBLISH_FAILED_TEXT,
                session=session.evolve(published_id=e.product_id),
                keyboard=KeyboardLayout.CONFIRM,
            )

        stock_info = format_stock_summary(draft.variants)
        logger.info("product_published", chat_id=session.chat_id, product_id=product_id)
        return StepResult(
            response_text=(
                "✅ Product created and published!\n"
                f"ID: <code>{product_id}</code>\n"
                f"{stock_info}"
            ),
            session=None,
            keyboard=KeyboardLayout.NEW,
        )
