"""Product document model — one JSON document per catalog product."""

import uuid

from sqlalchemy import JSON, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin


def generate_product_id() -> str:
    return uuid.uuid4().hex


class ProductDocument(Base, TimestampMixin):
    __tablename__ = "products"

    # Assigned by the store on insert; the storefront reads it back from document["id"]
    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=generate_product_id
    )
    document: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False
    )
