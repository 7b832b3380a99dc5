# (c) Copyright Datacraft, 2026
"""Product Pydantic schemas."""
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .db.orm import NAME_MAX_LENGTH


class ProductCreate(BaseModel):
	"""Schema for creating a product."""
	name: str = Field(..., max_length=NAME_MAX_LENGTH)

	@field_validator("name")
	@classmethod
	def name_not_blank(cls, value: str) -> str:
		if not value.strip():
			raise ValueError("must not be blank")
		return value


class ProductInfo(BaseModel):
	id: int
	name: str

	model_config = ConfigDict(from_attributes=True)


class ProductList(BaseModel):
	products: list[ProductInfo]
