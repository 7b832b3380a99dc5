# (c) Copyright Datacraft, 2026
"""Product API endpoints."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tenantry.core.tenancy import get_tenant_session
from . import schema
from .db import api as db_api

router = APIRouter(
	prefix="/products",
	tags=["products"],
)

logger = logging.getLogger(__name__)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
	product: schema.ProductCreate,
	request: Request,
	session: Annotated[AsyncSession, Depends(get_tenant_session)],
) -> Response:
	"""Create a product in the request tenant's schema."""
	created = await db_api.create_product(session, product.name)
	await session.commit()
	logger.debug(f"Product created (id={created.id})")

	location = request.url_for("get_product", product_id=created.id)
	return Response(
		status_code=status.HTTP_201_CREATED,
		headers={"Location": location.path},
	)


@router.get("")
async def list_products(
	session: Annotated[AsyncSession, Depends(get_tenant_session)],
) -> schema.ProductList:
	products = await db_api.list_products(session)
	return schema.ProductList(
		products=[schema.ProductInfo.model_validate(p) for p in products]
	)


@router.get("/{product_id}")
async def get_product(
	product_id: int,
	session: Annotated[AsyncSession, Depends(get_tenant_session)],
) -> schema.ProductInfo:
	product = await db_api.get_product(session, product_id)
	if product is None:
		raise HTTPException(status_code=404, detail="Product not found")
	return schema.ProductInfo.model_validate(product)
