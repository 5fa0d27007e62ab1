"""Product repository — writes finished drafts to the product document store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.conversation.coercion import parse_price
from src.models.product import ProductDocument
from src.schemas.product import ProductDraft, VariantDraft, new_variant_id

logger = structlog.get_logger()


class ProductPersistenceError(Exception):
    """Writing a product to the store failed."""

    def __init__(self, message: str, product_id: Optional[str] = None):
        super().__init__(message)
        self.product_id = product_id


def normalize_variant(variant: VariantDraft, variant_id: str) -> dict[str, Any]:
    return {
        "id": variant_id,
        "color": {"name": variant.color.name, "hex": variant.color.hex},
        "price": parse_price(variant.price),
        "stock": str(variant.stock or "0"),
        "imageUrls": list(variant.image_urls or ()),
        "videoUrls": list(variant.video_urls or ()),
        "imageFileIds": list(variant.image_file_ids or ()),
        "videoFileIds": list(variant.video_file_ids or ()),
    }


def normalize_product(
    draft: ProductDraft, created_at: Optional[datetime] = None
) -> dict[str, Any]:
    """Convert a draft into the stored document shape.

    Numbers are coerced (unparseable → 0), stock is a string, media lists
    are always arrays, and every variant gets an id.
    """
    created_at = created_at or datetime.now(timezone.utc)

    taken = [v.id for v in draft.variants if v.id]
    variants = []
    for variant in draft.variants:
        variant_id = variant.id
        if not variant_id:
            variant_id = new_variant_id(taken)
            taken.append(variant_id)
        variants.append(normalize_variant(variant, variant_id))

    return {
        "name": draft.name,
        "brand": draft.brand,
        "description": draft.description,
        "basePrice": parse_price(draft.base_price),
        "categoryId": draft.category_id,
        "tags": list(draft.tags or ()),
        "variants": variants,
        "createdAt": created_at.isoformat(),
    }


class ProductRepository:
    """Creates product documents."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_product(self, draft: ProductDraft) -> str:
        """Store a finished draft and return the generated product id.

        Two writes: the insert (which generates the id), then a backfill of
        the id into the document itself. If the backfill fails the row stays
        without ``document["id"]`` and the error carries its ``product_id``;
        finish it with ``backfill_id`` rather than inserting again.

        Raises:
            ProductPersistenceError: if either write fails
        """
        document = normalize_product(draft)
        product = ProductDocument(document=document)

        try:
            self.db.add(product)
            await self.db.flush()
            product_id = product.id
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("product_insert_failed", error=str(e), name=draft.name)
            raise ProductPersistenceError("product insert failed") from e

        await self._write_id(product_id, document)

        logger.info(
            "product_created",
            product_id=product_id,
            name=draft.name,
            variants=len(document["variants"]),
        )
        return product_id

    async def backfill_id(self, product_id: str, draft: ProductDraft) -> str:
        """Complete a product whose insert succeeded but whose id backfill did not.

        Rewrites the stored document from ``draft`` with its ``id`` set. No new
        row is inserted.

        Raises:
            ProductPersistenceError: if the write fails (``product_id`` set) or
                the row no longer exists (``product_id`` None)
        """
        document = normalize_product(draft)
        rowcount = await self._write_id(product_id, document)
        if rowcount == 0:
            logger.error("product_backfill_row_missing", product_id=product_id)
            raise ProductPersistenceError("product row missing")

        logger.info("product_id_backfilled", product_id=product_id, name=draft.name)
        return product_id

    async def _write_id(self, product_id: str, document: dict[str, Any]) -> int:
        try:
            result = await self.db.execute(
                update(ProductDocument)
                .where(ProductDocument.id == product_id)
                .values(document={**document, "id": product_id})
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "product_id_backfill_failed",
                error=str(e),
                product_id=product_id,
            )
            raise ProductPersistenceError(
                "product id backfill failed", product_id=product_id
            ) from e
        return result.rowcount

    async def import_documents(self, documents: Iterable[dict[str, Any]]) -> int:
        """Upsert ready-made product documents keyed by their own ``id``.

        Documents without an id are skipped. Returns the number written.
        """
        count = 0
        for document in documents:
            product_id = document.get("id")
            if not product_id:
                logger.warning("product_import_skipped", name=document.get("name"))
                continue
            await self.db.merge(ProductDocument(id=str(product_id), document=document))
            count += 1
        await self.db.commit()
        logger.info("products_imported", count=count)
        return count
