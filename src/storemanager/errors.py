"""Product error taxonomy and the result type that carries it.

Services return ``Ok(value)`` or ``Err(error)`` instead of raising, and the
router turns an ``Err`` into the standard error envelope:
{"error": {"code": "...", "message": "..."}}.

Each error kind fixes its HTTP status and the severity it is logged at.
Failures outside this taxonomy are not caught; they reach the application-wide
handler in main.py as unexpected faults.
"""

import logging
from dataclasses import dataclass, field
from typing import ClassVar


@dataclass(frozen=True)
class ProductError:
    """Base class for every product error kind."""

    status_code: ClassVar[int] = 500
    code: ClassVar[str] = "product_error"
    log_level: ClassVar[int] = logging.ERROR

    message: str
    product_id: int | None = None
    cause: BaseException | None = field(default=None, compare=False, repr=False)


class NotFoundError(ProductError):
    """A lookup by id or name matched nothing."""

    status_code = 404
    code = "not_found"
    log_level = logging.INFO

    @classmethod
    def for_id(cls, product_id: int) -> "NotFoundError":
        return cls(f"Product with ID {product_id} was not found", product_id=product_id)


class CreateError(ProductError):
    """The payload failed validation or the store rejected the insert."""

    code = "create_failed"


class UpdateError(ProductError):
    """The store rejected the write of an updated product."""

    code = "update_failed"


class DeleteError(ProductError):
    """The store rejected the deletion."""

    code = "delete_failed"


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Err:
    error: ProductError


type Result[T] = Ok[T] | Err
