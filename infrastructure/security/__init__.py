from .passwords import PasswordHasher
from .tokens import TokenError, TokenExpiredError, TokenService

__all__ = [
    "PasswordHasher",
    "TokenError",
    "TokenExpiredError",
    "TokenService",
]
