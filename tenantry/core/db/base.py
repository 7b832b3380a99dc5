# (c) Copyright Datacraft, 2026
"""Declarative base for tenant-local tables."""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
	"""Tables carry no schema; the connection's search path selects the tenant."""
