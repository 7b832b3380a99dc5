# (c) Copyright Datacraft, 2026
from .base import Base
from .engine import create_engine

__all__ = [
	'Base',
	'create_engine',
]
