"""Product business logic.

Validates payloads, applies partial updates and talks to the store. Every
expected failure comes back as an ``Err`` carrying a taxonomy error; store
exceptions raised during a write are converted here and nowhere else.
"""

from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from storemanager.errors import CreateError, DeleteError, Err, NotFoundError, Ok, Result, UpdateError
from storemanager.logging import get_logger
from storemanager.models import Product
from storemanager.repositories.product import ProductStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProductFields:
    """Incoming product attributes. ``None`` means the field was not supplied."""

    name: str | None = None
    price: float | None = None


def build_product(fields: ProductFields) -> Result[Product]:
    """Validate a creation payload and return an unsaved product."""
    if fields.name is None or not fields.name.strip():
        return Err(CreateError("Product name cannot be empty"))
    if fields.price is None:
        return Err(CreateError("Product price cannot be empty"))
    return Ok(Product(name=fields.name, price=fields.price))


def apply_changes(product: Product, fields: ProductFields) -> Product:
    """Overwrite the attributes present in ``fields``; absent ones are kept."""
    if fields.name is not None:
        product.name = fields.name
    if fields.price is not None:
        product.price = fields.price
    return product


async def list_products(store: ProductStore) -> list[Product]:
    products = await store.find_all()
    logger.info("products_listed", count=len(products))
    return products


async def get_product(store: ProductStore, product_id: int) -> Result[Product]:
    product = await store.find_by_id(product_id)
    if product is None:
        return Err(NotFoundError.for_id(product_id))
    logger.info("product_retrieved", product_id=product.id, name=product.name)
    return Ok(product)


async def find_products_by_name(store: ProductStore, name: str) -> Result[list[Product]]:
    products = await store.find_by_name_contains(name)
    if not products:
        return Err(NotFoundError(f"No results for: {name}"))
    logger.info("products_found_by_name", query=name, ids=[p.id for p in products])
    return Ok(products)


async def create_product(store: ProductStore, fields: ProductFields) -> Result[Product]:
    built = build_product(fields)
    if isinstance(built, Err):
        return built

    try:
        product = await store.save(built.value)
    except SQLAlchemyError as exc:
        return Err(CreateError("Error while creating product", cause=exc))

    logger.info("product_created", product_id=product.id, name=product.name, price=product.price)
    return Ok(product)


async def update_product(
    store: ProductStore, product_id: int, fields: ProductFields
) -> Result[Product]:
    """Apply a partial update. The product is saved even when nothing changed."""
    found = await get_product(store, product_id)
    if isinstance(found, Err):
        return found

    product = apply_changes(found.value, fields)
    try:
        product = await store.save(product)
    except SQLAlchemyError as exc:
        return Err(
            UpdateError(
                f"Error while updating product with ID: {product_id}",
                product_id=product_id,
                cause=exc,
            )
        )

    logger.info("product_updated", product_id=product.id, name=product.name, price=product.price)
    return Ok(product)


async def delete_product(store: ProductStore, product_id: int) -> Result[int]:
    if not await store.exists_by_id(product_id):
        return Err(
            NotFoundError(
                f"Cannot delete. Product with ID {product_id} doesn't exist",
                product_id=product_id,
            )
        )

    try:
        await store.delete_by_id(product_id)
    except SQLAlchemyError as exc:
        return Err(
            DeleteError(
                f"Error while deleting product with ID {product_id}",
                product_id=product_id,
                cause=exc,
            )
        )

    logger.info("product_deleted", product_id=product_id)
    return Ok(product_id)
