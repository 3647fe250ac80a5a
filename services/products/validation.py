from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, List, Mapping

from config import settings
from services.errors import BadRequestError

# Bounds of the products.name and products.price columns.
MAX_NAME_LENGTH = 255
MAX_PRICE = Decimal("99999999.99")
PRICE_QUANTUM = Decimal("0.01")


def to_price(value: Any) -> Decimal:
    """Convert a validated price to its stored two-decimal form."""
    return Decimal(str(value)).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(slots=True)
class FieldError:
    field: str
    message: str


@dataclass(slots=True)
class ValidationResult:
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, field_name: str, message: str) -> None:
        self.errors.append(FieldError(field=field_name, message=message))

    def as_details(self) -> list[dict[str, str]]:
        return [{"field": error.field, "message": error.message} for error in self.errors]

    def raise_for_errors(self) -> None:
        if self.errors:
            raise BadRequestError(self.errors[0].message, details=self.as_details())


def validate_product_input(
    fields: Mapping[str, Any],
    *,
    partial: bool = False,
    max_images: int = settings.MAX_IMAGES_PER_PRODUCT,
) -> ValidationResult:
    """Check product fields before they are persisted.

    With ``partial`` set only the keys present in ``fields`` are checked,
    which is how updates are validated.
    """
    result = ValidationResult()

    if not partial or "name" in fields:
        name = fields.get("name")
        if not isinstance(name, str) or not name.strip():
            result.add("name", "Product name must not be empty")
        elif len(name.strip()) > MAX_NAME_LENGTH:
            result.add("name", f"Product name must be at most {MAX_NAME_LENGTH} characters")

    if not partial or "price" in fields:
        price = fields.get("price")
        try:
            amount = Decimal(str(price)) if price is not None else None
        except InvalidOperation:
            amount = None
        if amount is None or not amount.is_finite():
            result.add("price", "Price must be a number")
        elif amount < 0:
            result.add("price", "Price must not be negative")
        elif amount > MAX_PRICE or to_price(amount) > MAX_PRICE:
            result.add("price", f"Price must not exceed {MAX_PRICE}")

    if "description" in fields:
        description = fields.get("description")
        if description is not None and not isinstance(description, str):
            result.add("description", "Description must be text")

    if not partial or "images" in fields:
        images = fields.get("images") or []
        if not isinstance(images, (list, tuple)) or not all(
            isinstance(url, str) and url.strip() for url in images
        ):
            result.add("images", "Images must be a list of URLs")
        elif len(images) > max_images:
            result.add("images", f"Maximum {max_images} images are allowed per product")

    return result
