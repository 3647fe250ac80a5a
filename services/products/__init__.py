from .product_service import ProductListResult, ProductService
from .validation import FieldError, ValidationResult, to_price, validate_product_input

__all__ = [
    "FieldError",
    "ProductListResult",
    "ProductService",
    "ValidationResult",
    "to_price",
    "validate_product_input",
]
