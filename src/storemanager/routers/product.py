"""Product endpoints.

Reads are public; writes need an ADMIN caller (enforced by SecurityMiddleware
before these handlers run). Handlers never validate on their own: they call
the service and translate an ``Err`` into the error envelope.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from storemanager.dependencies import Store
from storemanager.errors import Err, ProductError
from storemanager.logging import get_logger
from storemanager.schemas.error import error_body
from storemanager.schemas.product import ProductRequest, ProductResponse
from storemanager.services import product as products
from storemanager.services.product import ProductFields

router = APIRouter(prefix="/products", tags=["products"])
logger = get_logger(__name__)

DELETED_MESSAGE = "Product deleted successfully"


def _error_response(error: ProductError) -> JSONResponse:
    """Log the error at its kind's severity and render it. The cause stays in the log."""
    logger.log(
        error.log_level,
        f"product_{error.code}",
        error=error.message,
        product_id=error.product_id,
        exc_info=error.cause,
    )
    return JSONResponse(status_code=error.status_code, content=error_body(error.code, error.message))


def _fields(request: ProductRequest) -> ProductFields:
    return ProductFields(name=request.name, price=request.price)


@router.get("", response_model=list[ProductResponse])
async def list_products(store: Store) -> list[ProductResponse]:
    """List every product in id order. An empty catalog is an empty list."""
    return [ProductResponse.model_validate(p) for p in await products.list_products(store)]


@router.get("/name/{name}", response_model=list[ProductResponse])
async def find_products_by_name(name: str, store: Store) -> Response | list[ProductResponse]:
    """Case-insensitive substring search on the product name."""
    result = await products.find_products_by_name(store, name)
    if isinstance(result, Err):
        return _error_response(result.error)
    return [ProductResponse.model_validate(p) for p in result.value]


@router.get("/id/{product_id}", response_model=ProductResponse, include_in_schema=False)
@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, store: Store) -> Response | ProductResponse:
    result = await products.get_product(store, product_id)
    if isinstance(result, Err):
        return _error_response(result.error)
    return ProductResponse.model_validate(result.value)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(request: ProductRequest, store: Store) -> Response | ProductResponse:
    result = await products.create_product(store, _fields(request))
    if isinstance(result, Err):
        return _error_response(result.error)
    return ProductResponse.model_validate(result.value)


@router.put("/{product_id}", response_model=ProductResponse)
@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int, request: ProductRequest, store: Store
) -> Response | ProductResponse:
    """Partial update: only the fields present in the body are changed."""
    result = await products.update_product(store, product_id, _fields(request))
    if isinstance(result, Err):
        return _error_response(result.error)
    return ProductResponse.model_validate(result.value)


@router.delete("/{product_id}", response_class=PlainTextResponse)
async def delete_product(product_id: int, store: Store) -> Response:
    result = await products.delete_product(store, product_id)
    if isinstance(result, Err):
        return _error_response(result.error)
    return PlainTextResponse(DELETED_MESSAGE)
