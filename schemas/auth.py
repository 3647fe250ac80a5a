from __future__ import annotations

from pydantic import EmailStr, Field

from schemas.base import CamelModel


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserPublic(CamelModel):
    id: str
    name: str
    email: str


class AuthResponse(CamelModel):
    access_token: str
    user: UserPublic
