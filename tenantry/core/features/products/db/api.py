# (c) Copyright Datacraft, 2026
"""Product database API."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .orm import Product


async def create_product(session: AsyncSession, name: str) -> Product:
	"""Insert a product and flush so its id is assigned."""
	product = Product(name=name)
	session.add(product)
	await session.flush()
	return product


async def get_product(session: AsyncSession, product_id: int) -> Product | None:
	return await session.get(Product, product_id)


async def list_products(session: AsyncSession) -> list[Product]:
	stmt = select(Product).order_by(Product.id)
	result = await session.execute(stmt)
	return list(result.scalars().all())
