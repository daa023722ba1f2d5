"""Error response schemas.

Every error response uses the same envelope: {"error": {"code": "...", "message": "..."}}.
The security middleware, the product router and the handlers in main.py all build it
through ``error_body``.
"""

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Machine-readable code plus a human-readable message."""

    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail


def error_body(code: str, message: str) -> dict[str, object]:
    """Build the error envelope as a dict for JSONResponse."""
    return ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump()
