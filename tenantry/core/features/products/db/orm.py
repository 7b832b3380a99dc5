# (c) Copyright Datacraft, 2026
"""Product ORM model."""
from datetime import datetime

from sqlalchemy import BigInteger, String, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import TIMESTAMP

from tenantry.core.db.base import Base

NAME_MAX_LENGTH = 15


class Product(Base):
	"""A product owned by exactly one tenant schema."""
	__tablename__ = "product"

	id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
	name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
	created_at: Mapped[datetime] = mapped_column(
		TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
	)

	def __repr__(self):
		return f"Product(id={self.id}, name={self.name})"
