from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_serializer

from schemas.auth import UserPublic
from schemas.base import CamelModel


class ProductCreate(CamelModel):
    name: str = Field(..., description="Product name", examples=["iPhone 15 Pro"])
    price: Decimal = Field(..., description="Product price in USD", examples=["999.99"])
    description: Optional[str] = Field(None, description="Product description")
    images: List[str] = Field(default_factory=list, description="Image URLs, at most five")


class ProductUpdate(CamelModel):
    """Partial update; fields left out keep their stored values."""

    name: Optional[str] = None
    price: Optional[Decimal] = None
    description: Optional[str] = None
    images: Optional[List[str]] = Field(
        None,
        description="Replacement image URLs; omit to keep the current images, [] to clear them",
    )


class ProductResponse(CamelModel):
    id: str
    name: str
    price: Decimal
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    owner_id: str
    owner: Optional[UserPublic] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("price", when_used="json")
    def serialize_price(self, price: Decimal) -> float:
        # Two-decimal amounts below 10**8 render exactly as JSON numbers.
        return float(price)


class ProductPage(CamelModel):
    items: List[ProductResponse]
    total: int
    page: int
    limit: int
    total_pages: int
