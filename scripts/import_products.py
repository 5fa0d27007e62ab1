"""Bulk import product documents from a JSON file into the product store.

Usage: python -m scripts.import_products public/products.json
"""

import asyncio
import json
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from src.config import settings
from src.models.base import Base
from src.repositories.product import ProductRepository


async def import_products(path: Path) -> int:
    """Create the products table if needed and upsert every document with an id."""
    documents = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(documents, list):
        raise SystemExit(f"{path}: expected a JSON array of products")

    engine = create_async_engine(settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession)

    async with session_factory() as session:
        count = await ProductRepository(session).import_documents(documents)

    await engine.dispose()
    print(f"Imported {count} of {len(documents)} products.")
    return count


if __name__ == "__main__":
    if len(sys.argv) != 2:
        raise SystemExit("usage: python -m scripts.import_products <products.json>")
    asyncio.run(import_products(Path(sys.argv[1])))
