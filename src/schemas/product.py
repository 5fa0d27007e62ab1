"""Product draft schemas assembled by the intake conversation."""

import uuid
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict


class FrozenModel(BaseModel):
    """Immutable model; transitions build a new value with ``evolve``."""

    model_config = ConfigDict(frozen=True)

    def evolve(self, **changes: Any):
        """Return a validated copy with ``changes`` applied."""
        return type(self)(**{**dict(self), **changes})


class DraftField(str, Enum):
    """Top-level product fields; values are the stored document keys."""

    NAME = "name"
    BRAND = "brand"
    DESCRIPTION = "description"
    BASE_PRICE = "basePrice"
    CATEGORY = "categoryId"
    TAGS = "tags"


# DraftField → ProductDraft attribute
FIELD_ATTRIBUTES: dict[DraftField, str] = {
    DraftField.NAME: "name",
    DraftField.BRAND: "brand",
    DraftField.DESCRIPTION: "description",
    DraftField.BASE_PRICE: "base_price",
    DraftField.CATEGORY: "category_id",
    DraftField.TAGS: "tags",
}


def new_variant_id(existing: Iterable[str]) -> str:
    """Short random id, unique within one draft."""
    taken = set(existing)
    while True:
        variant_id = f"v-{uuid.uuid4().hex[:8]}"
        if variant_id not in taken:
            return variant_id


class ColorOption(FrozenModel):
    name: str = ""
    hex: str = ""


class VariantDraft(FrozenModel):
    """One color/price/stock/media combination of a product."""

    id: Optional[str] = None  # assigned when the variant is added to a draft
    color: ColorOption = ColorOption()
    price: Optional[float] = None  # None = fall back to the draft base price
    stock: str = "0"  # kept as a string in storage
    image_urls: tuple[str, ...] = ()
    video_urls: tuple[str, ...] = ()
    # Telegram attachments are kept as file ids, never as bot download links
    image_file_ids: tuple[str, ...] = ()
    video_file_ids: tuple[str, ...] = ()

    @property
    def image_count(self) -> int:
        return len(self.image_urls) + len(self.image_file_ids)

    @property
    def video_count(self) -> int:
        return len(self.video_urls) + len(self.video_file_ids)


class ProductDraft(FrozenModel):
    """In-progress product record."""

    name: str = ""
    brand: str = ""
    description: str = ""
    base_price: Optional[float] = None
    category_id: str = ""
    tags: tuple[str, ...] = ()
    variants: tuple[VariantDraft, ...] = ()

    def get_field(self, field: DraftField) -> Any:
        return getattr(self, FIELD_ATTRIBUTES[field])

    def with_field(self, field: DraftField, value: Any) -> "ProductDraft":
        return self.evolve(**{FIELD_ATTRIBUTES[field]: value})

    def has_value(self, field: DraftField) -> bool:
        value = self.get_field(field)
        return value is not None and value != "" and value != ()
