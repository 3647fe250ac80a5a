from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from config import settings
from infrastructure.database.models.products import Product
from infrastructure.database.models.users import User
from infrastructure.database.repositories import ProductRepository
from services.errors import BadRequestError, ForbiddenError, NotFoundError
from services.images import ImageFile, ImageStorageService
from services.products.validation import to_price, validate_product_input

logger = logging.getLogger(__name__)

ProductInput = Union[BaseModel, Mapping[str, Any]]

_MUTABLE_FIELDS = ("name", "price", "description", "images")


@dataclass(slots=True)
class ProductListResult:
    items: List[Product]
    total: int
    page: int
    limit: int
    total_pages: int


def _coerce_positive_int(value: Any, *, name: str, default: int) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        number = int(str(value).strip())
    except ValueError as exc:
        raise BadRequestError(f"{name} must be an integer") from exc
    if number < 1:
        raise BadRequestError(f"{name} must be at least 1")
    return number


def _to_fields(data: ProductInput, *, partial: bool) -> dict[str, Any]:
    if isinstance(data, BaseModel):
        fields = data.model_dump(exclude_unset=partial)
    else:
        fields = dict(data)
    return {key: value for key, value in fields.items() if key in _MUTABLE_FIELDS}


def _drop_nulls(fields: dict[str, Any]) -> dict[str, Any]:
    # A null value means "leave unchanged"; only the description may be cleared.
    return {
        key: value
        for key, value in fields.items()
        if value is not None or key == "description"
    }


class ProductService:
    """Catalog operations with ownership checks and image lifecycle handling."""

    def __init__(
        self,
        products: ProductRepository,
        image_storage: ImageStorageService,
        *,
        max_images: int = settings.MAX_IMAGES_PER_PRODUCT,
        default_limit: int = settings.DEFAULT_PAGE_LIMIT,
        max_limit: int = settings.MAX_PAGE_LIMIT,
    ) -> None:
        self.products = products
        self.image_storage = image_storage
        self.max_images = max_images
        self.default_limit = default_limit
        self.max_limit = max_limit

    async def create(self, data: ProductInput, owner: User) -> Product:
        fields = _to_fields(data, partial=False)
        fields.setdefault("images", [])
        fields.setdefault("description", None)
        validate_product_input(fields, max_images=self.max_images).raise_for_errors()

        product = await self.products.insert(
            name=fields["name"].strip(),
            price=to_price(fields["price"]),
            description=fields["description"],
            images=list(fields["images"] or []),
            owner_id=owner.id,
        )
        logger.info("User %s created product %s", owner.id, product.id)
        return await self.get_one(product.id)

    async def create_with_images(
        self,
        data: ProductInput,
        files: Sequence[ImageFile],
        owner: User,
    ) -> Product:
        fields = _to_fields(data, partial=False)
        supplied = list(fields.get("images") or [])
        files = list(files or [])
        validate_product_input(
            {**fields, "images": supplied}, max_images=self.max_images
        ).raise_for_errors()

        # Count check first so nothing is uploaded for a request that cannot succeed.
        self._check_image_count(len(supplied) + len(files))

        uploaded: List[str] = []
        if files:
            uploaded = await self.image_storage.upload_many(files)

        fields["images"] = supplied + uploaded
        return await self.create(fields, owner)

    async def list_products(
        self,
        page: Any = None,
        limit: Any = None,
        search: Optional[str] = None,
    ) -> ProductListResult:
        page_number = _coerce_positive_int(page, name="page", default=1)
        limit_number = min(
            _coerce_positive_int(limit, name="limit", default=self.default_limit),
            self.max_limit,
        )
        term = search.strip() if search else None

        items, total = await self.products.query(
            skip=(page_number - 1) * limit_number,
            take=limit_number,
            search=term or None,
        )
        return ProductListResult(
            items=items,
            total=total,
            page=page_number,
            limit=limit_number,
            total_pages=math.ceil(total / limit_number),
        )

    async def get_one(self, product_id: str) -> Product:
        product = await self.products.find_by_id(product_id)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    async def update(self, product_id: str, changes: ProductInput, requester: User) -> Product:
        product = await self.get_owned(product_id, requester, action="update")

        fields = _drop_nulls(_to_fields(changes, partial=True))

        validate_product_input(fields, partial=True, max_images=self.max_images).raise_for_errors()
        if not fields:
            return product

        if "name" in fields:
            fields["name"] = fields["name"].strip()
        if "price" in fields:
            fields["price"] = to_price(fields["price"])

        await self.products.update_fields(product_id, **fields)
        logger.info("User %s updated product %s (%s)", requester.id, product_id, ", ".join(sorted(fields)))
        return await self.get_one(product_id)

    async def update_with_images(
        self,
        product_id: str,
        changes: ProductInput,
        requester: User,
        *,
        keep_images: Optional[Sequence[str]] = None,
        files: Sequence[ImageFile] = (),
    ) -> Product:
        """Update a product, replacing its images with ``keep_images`` plus new uploads.

        When neither kept images nor files are given the stored images are
        left alone.
        """
        await self.get_owned(product_id, requester, action="update")

        fields = _drop_nulls(_to_fields(changes, partial=True))
        fields.pop("images", None)
        files = list(files or [])
        validate_product_input(fields, partial=True, max_images=self.max_images).raise_for_errors()

        if keep_images is not None or files:
            kept = list(keep_images or [])
            self._check_image_count(len(kept) + len(files))
            uploaded: List[str] = []
            if files:
                uploaded = await self.image_storage.upload_many(files)
            fields["images"] = kept + uploaded

        return await self.update(product_id, fields, requester)

    async def remove(self, product_id: str, requester: User) -> None:
        product = await self.get_owned(product_id, requester, action="delete")

        if product.images:
            await self._delete_images(product.id, list(product.images))

        await self.products.delete_by_id(product.id)
        logger.info("User %s deleted product %s", requester.id, product.id)

    async def _delete_images(self, product_id: str, urls: Sequence[str]) -> None:
        public_ids = []
        for url in urls:
            public_id = self.image_storage.extract_public_id(url)
            if public_id:
                public_ids.append(public_id)
            else:
                logger.debug("Skipping image %s of product %s: not a store URL", url, product_id)

        results = await asyncio.gather(
            *(self.image_storage.delete(public_id) for public_id in public_ids),
            return_exceptions=True,
        )
        for public_id, result in zip(public_ids, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Failed to delete image %s of product %s: %s",
                    public_id,
                    product_id,
                    result,
                )

    async def get_owned(self, product_id: str, requester: User, *, action: str) -> Product:
        """Fetch a product, refusing anyone but its owner."""
        product = await self.get_one(product_id)
        if product.owner_id != requester.id:
            raise ForbiddenError(f"You can only {action} your own products")
        return product

    def _check_image_count(self, count: int) -> None:
        if count > self.max_images:
            raise BadRequestError(
                f"Total image count ({count}) exceeds maximum of {self.max_images} images per product"
            )
