"""Product request and response schemas."""

from pydantic import BaseModel, Field


class ProductRequest(BaseModel):
    """Body of POST, PUT and PATCH /products. Both fields are optional on the wire;
    the service decides which ones are required for each operation."""

    name: str | None = None
    # NaN and Infinity cannot be rendered back as JSON, so they are rejected with a 422
    price: float | None = Field(default=None, allow_inf_nan=False)


class ProductResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    price: float
