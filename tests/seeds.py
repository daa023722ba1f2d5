"""Reusable seed data fixtures for integration tests."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import make_product

SEED_NAMES = ["Test Product", "Product 2", "Test Product 3"]


@pytest_asyncio.fixture
async def seeded_db(db: AsyncSession) -> AsyncSession:
    """Seed three products, inserted in the order of SEED_NAMES."""
    for index, name in enumerate(SEED_NAMES):
        db.add(make_product(name=name, price=100.0 + index * 10))
        await db.flush()
    await db.commit()
    return db
