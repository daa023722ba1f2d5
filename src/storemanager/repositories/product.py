"""Product data-access layer.

Plain persistence operations, no business logic and no HTTP concerns.
Writes are flushed immediately so ids are assigned and store failures surface
inside the calling service; the transaction itself belongs to ``get_db``.
"""

from typing import Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storemanager.models import Product


class ProductStore(Protocol):
    """Persistence capability the product service depends on."""

    async def save(self, product: Product) -> Product: ...

    async def find_by_id(self, product_id: int) -> Product | None: ...

    async def find_all(self) -> list[Product]: ...

    async def find_by_name_contains(self, fragment: str) -> list[Product]: ...

    async def exists_by_id(self, product_id: int) -> bool: ...

    async def delete_by_id(self, product_id: int) -> None: ...


class ProductRepository:
    """SQLAlchemy-backed ``ProductStore`` bound to a single session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def save(self, product: Product) -> Product:
        self.db.add(product)
        await self.db.flush()
        return product

    async def find_by_id(self, product_id: int) -> Product | None:
        return await self.db.get(Product, product_id)

    async def find_all(self) -> list[Product]:
        result = await self.db.execute(select(Product).order_by(Product.id))
        return list(result.scalars().all())

    async def find_by_name_contains(self, fragment: str) -> list[Product]:
        """Case-insensitive substring match on the name, in id order."""
        pattern = f"%{_escape_like(fragment.lower())}%"
        stmt = (
            select(Product)
            .where(func.lower(Product.name).like(pattern, escape="\\"))
            .order_by(Product.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def exists_by_id(self, product_id: int) -> bool:
        stmt = select(func.count(Product.id)).where(Product.id == product_id)
        result = await self.db.execute(stmt)
        return result.scalar_one() > 0

    async def delete_by_id(self, product_id: int) -> None:
        await self.db.execute(delete(Product).where(Product.id == product_id))


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
