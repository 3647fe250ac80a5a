from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from infrastructure.database.models.products import Product


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ProductRepository:
    """Repository pattern for Product database operations"""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def insert(
        self,
        *,
        name: str,
        price: Any,
        description: Optional[str],
        images: Sequence[str],
        owner_id: str,
    ) -> Product:
        product = Product(
            name=name,
            price=price,
            description=description,
            images=list(images),
            owner_id=owner_id,
        )
        self.db.add(product)
        await self.db.flush()
        return product

    async def find_by_id(self, product_id: str) -> Optional[Product]:
        """Get a single product with its owner loaded."""
        stmt = (
            select(Product)
            .options(joinedload(Product.owner))
            .where(Product.id == product_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def query(
        self,
        *,
        skip: int,
        take: int,
        search: Optional[str] = None,
    ) -> Tuple[list[Product], int]:
        """Return one page of products, newest first, plus the total match count."""
        filters = []
        if search:
            pattern = _like_pattern(search)
            filters.append(
                or_(
                    Product.name.ilike(pattern, escape="\\"),
                    Product.description.ilike(pattern, escape="\\"),
                )
            )

        count_stmt = select(func.count()).select_from(Product).where(*filters)
        total = (await self.db.execute(count_stmt)).scalar_one()

        stmt = (
            select(Product)
            .options(joinedload(Product.owner))
            .where(*filters)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .offset(skip)
            .limit(take)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def update_fields(self, product_id: str, **fields: Any) -> None:
        product = await self.find_by_id(product_id)
        if product is None:
            raise ValueError(f"Product with ID {product_id} not found.")
        for key, value in fields.items():
            if key == "images":
                value = list(value)
            setattr(product, key, value)
        await self.db.flush()

    async def delete_by_id(self, product_id: str) -> None:
        await self.db.execute(delete(Product).where(Product.id == product_id))
        await self.db.flush()
