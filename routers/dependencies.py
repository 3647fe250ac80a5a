from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.database import get_db
from infrastructure.database.models.users import User
from infrastructure.database.repositories import ProductRepository, UserRepository
from infrastructure.image_store import CloudinaryImageStore, ImageStoreGateway
from services.auth import AuthService
from services.errors import UnauthorizedError
from services.images import ImageStorageService
from services.products import ProductService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="JWT-auth")


def get_image_store() -> ImageStoreGateway:
    return CloudinaryImageStore()


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(UserRepository(db))


def get_image_storage_service(
    store: ImageStoreGateway = Depends(get_image_store),
) -> ImageStorageService:
    return ImageStorageService(store)


def get_product_service(
    db: AsyncSession = Depends(get_db),
    image_storage: ImageStorageService = Depends(get_image_storage_service),
) -> ProductService:
    return ProductService(ProductRepository(db), image_storage)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise UnauthorizedError("Missing bearer token")
    return await auth_service.authenticate(credentials.credentials)
