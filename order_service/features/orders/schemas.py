"""Pydantic schemas for the orders feature."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OrderRequest(BaseModel):
    """Body of ``POST /order``."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    user_id: str = Field(..., min_length=1, max_length=64)
    product_id: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(..., gt=0, strict=True)
    location: str = Field(..., min_length=1, max_length=255)


class OrderCreatedMessage(OrderRequest):
    """Order-creation work message: the request plus the assigned id."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1, max_length=36)


class OrderAccepted(BaseModel):
    """Response of ``POST /order``; the id travels in ``X-Order-ID``."""

    message: str = "user order created"


class ErrorResponse(BaseModel):
    """Error body returned by the ingress."""

    error: str


__all__ = [
    "ErrorResponse",
    "OrderAccepted",
    "OrderCreatedMessage",
    "OrderRequest",
]
