from .auth import AuthResponse, LoginRequest, RegisterRequest, UserPublic
from .product import ProductCreate, ProductPage, ProductResponse, ProductUpdate
from .responses import ApiResponse, ErrorResponse, error_response, success_response

__all__ = [
    "ApiResponse",
    "AuthResponse",
    "ErrorResponse",
    "LoginRequest",
    "ProductCreate",
    "ProductPage",
    "ProductResponse",
    "ProductUpdate",
    "RegisterRequest",
    "UserPublic",
    "error_response",
    "success_response",
]
