"""Conversation state schemas stored in Redis."""

from enum import Enum
from typing import Optional

from pydantic import model_validator

from src.schemas.product import DraftField, FrozenModel, ProductDraft, VariantDraft


class IntakeStep(str, Enum):
    """FSM steps for the product intake dialog.

    Order: start → collecting fields → variants → confirm → published.
    ``edit_<field>`` steps hang off ``variant_confirm`` and return to it.
    """

    START = "start"
    COLLECTING_NAME = "collecting_name"
    COLLECTING_BRAND = "collecting_brand"
    COLLECTING_DESCRIPTION = "collecting_description"
    COLLECTING_BASE_PRICE = "collecting_basePrice"
    COLLECTING_CATEGORY = "collecting_categoryId"
    COLLECTING_TAGS = "collecting_tags"
    VARIANT_PROMPT = "variant_prompt"
    VARIANT_CONFIRM = "variant_confirm"
    EDIT_NAME = "edit_name"
    EDIT_BRAND = "edit_brand"
    EDIT_DESCRIPTION = "edit_description"
    EDIT_BASE_PRICE = "edit_basePrice"
    EDIT_CATEGORY = "edit_categoryId"
    EDIT_TAGS = "edit_tags"
    PUBLISHED = "published"
    CANCELLED = "cancelled"


class VariantStep(str, Enum):
    """Steps of the nested variant sub-wizard."""

    COLOR_NAME = "color_name"
    COLOR_HEX = "color_hex"
    PRICE = "price"
    STOCK = "stock"
    MEDIA = "media"


# Fixed order of the collecting steps and the field each one fills
COLLECTING_STEPS: tuple[tuple[IntakeStep, DraftField], ...] = (
    (IntakeStep.COLLECTING_NAME, DraftField.NAME),
    (IntakeStep.COLLECTING_BRAND, DraftField.BRAND),
    (IntakeStep.COLLECTING_DESCRIPTION, DraftField.DESCRIPTION),
    (IntakeStep.COLLECTING_BASE_PRICE, DraftField.BASE_PRICE),
    (IntakeStep.COLLECTING_CATEGORY, DraftField.CATEGORY),
    (IntakeStep.COLLECTING_TAGS, DraftField.TAGS),
)

EDIT_STEPS: dict[DraftField, IntakeStep] = {
    field: IntakeStep(f"edit_{field.value}") for field in DraftField
}

TERMINAL_STEPS = frozenset({IntakeStep.PUBLISHED, IntakeStep.CANCELLED})


class ChatSession(FrozenModel):
    """Full per-chat wizard state persisted in Redis.

    At most one of {field edit, variant sub-wizard} is active, and the
    tags below always agree with ``step``.
    """

    chat_id: str
    step: IntakeStep = IntakeStep.START
    draft: ProductDraft = ProductDraft()

    # Top-level field edit
    editing_field: Optional[DraftField] = None
    pending_text: Optional[str] = None  # raw text, coerced on display/commit

    # Variant sub-wizard
    current_variant: Optional[VariantDraft] = None
    variant_step: Optional[VariantStep] = None

    # Row already inserted by a Publish whose id backfill failed
    published_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_modes(self) -> "ChatSession":
        is_edit_step = self.step in EDIT_STEPS.values()
        if is_edit_step != (self.editing_field is not None):
            raise ValueError("editing_field must be set exactly on edit steps")
        if is_edit_step and EDIT_STEPS[self.editing_field] != self.step:
            raise ValueError("editing_field does not match step")
        if self.pending_text is not None and not is_edit_step:
            raise ValueError("pending_text outside of an edit step")
        if (self.variant_step is None) != (self.current_variant is None):
            raise ValueError("variant_step and current_variant go together")
        if self.variant_step is not None and self.step != IntakeStep.VARIANT_PROMPT:
            raise ValueError("variant sub-wizard runs only from variant_prompt")
        return self

    @property
    def in_variant_wizard(self) -> bool:
        return self.variant_step is not None
