"""Shared FastAPI dependencies.

Defined here rather than in main.py so routers can import them without a
circular import.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storemanager.db.session import get_db
from storemanager.repositories.product import ProductRepository, ProductStore

DB = Annotated[AsyncSession, Depends(get_db)]


def get_product_store(db: DB) -> ProductStore:
    return ProductRepository(db)


Store = Annotated[ProductStore, Depends(get_product_store)]
