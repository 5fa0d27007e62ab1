"""SQLAlchemy ORM models."""

from src.models.base import Base
from src.models.product import ProductDocument

__all__ = [
    "Base",
    "ProductDocument",
]
