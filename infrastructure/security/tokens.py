from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

import jwt

from config import settings


class TokenError(Exception):
    """Raised when a token cannot be verified."""


class TokenExpiredError(TokenError):
    pass


class TokenService:
    """Signs and verifies the bearer tokens handed to clients."""

    def __init__(
        self,
        *,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expires_in: Optional[timedelta] = None,
    ) -> None:
        self._secret = secret or settings.JWT_SECRET
        self._algorithm = algorithm or settings.JWT_ALGORITHM
        self._expires_in = expires_in or timedelta(hours=settings.JWT_EXPIRES_IN_HOURS)

    def sign(self, claims: Mapping[str, Any]) -> str:
        issued_at = datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = issued_at
        payload["exp"] = issued_at + self._expires_in
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired") from exc
        except jwt.PyJWTError as exc:
            raise TokenError("Invalid token") from exc
