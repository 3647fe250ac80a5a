from . import users  # noqa: F401
from . import products  # noqa: F401

__all__ = [
    "users",
    "products",
]
