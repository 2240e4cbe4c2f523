import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.catalog import Product


async def get_product(session: AsyncSession, product_id: uuid.UUID) -> Product | None:
    return await session.get(Product, product_id)


async def get_products_by_ids(session: AsyncSession, product_ids: list[uuid.UUID]) -> list[Product]:
    """Resolve many products in one query. Unknown ids are left out, order is the database's."""
    if not product_ids:
        return []
    result = await session.execute(select(Product).where(Product.id.in_(list(dict.fromkeys(product_ids)))))
    return list(result.scalars().unique())
