from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from infrastructure.database.models.users import User
from infrastructure.database.repositories import UserRepository
from infrastructure.security import PasswordHasher, TokenError, TokenExpiredError, TokenService
from services.errors import BadRequestError, ConflictError, UnauthorizedError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass(slots=True)
class AuthResult:
    user: User
    access_token: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        *,
        password_hasher: PasswordHasher | None = None,
        token_service: TokenService | None = None,
    ) -> None:
        self.users = users
        self.password_hasher = password_hasher or PasswordHasher()
        self.token_service = token_service or TokenService()

    async def register(self, *, name: str, email: str, password: str) -> AuthResult:
        name = (name or "").strip()
        email = normalize_email(email or "")
        if not name or not email or not password:
            raise BadRequestError("Name, email and password are required")

        if await self.users.find_by_email(email):
            raise ConflictError("User with this email already exists")

        password_hash = await self.password_hasher.hash_async(password)
        try:
            user = await self.users.create_user(name=name, email=email, password_hash=password_hash)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration for the same email.
            raise ConflictError("User with this email already exists") from exc

        logger.info("Registered user %s", user.id)
        return AuthResult(user=user, access_token=self._issue_token(user))

    async def login(self, *, email: str, password: str) -> AuthResult:
        user = await self.users.find_by_email(normalize_email(email or ""))
        if user is None:
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not await self.password_hasher.verify_async(password or "", user.password_hash):
            logger.info("Rejected login for user %s", user.id)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        logger.info("User %s logged in", user.id)
        return AuthResult(user=user, access_token=self._issue_token(user))

    async def authenticate(self, token: str) -> User:
        try:
            claims = self.token_service.verify(token)
        except TokenExpiredError as exc:
            raise UnauthorizedError("Token has expired") from exc
        except TokenError as exc:
            raise UnauthorizedError("Invalid token") from exc

        user = await self.users.find_by_id(str(claims["sub"]))
        if user is None:
            raise UnauthorizedError("Invalid token")
        return user

    def _issue_token(self, user: User) -> str:
        return self.token_service.sign({"sub": user.id, "email": user.email})
