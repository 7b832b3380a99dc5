# (c) Copyright Datacraft, 2026
from .orm import Product
from .api import create_product, get_product, list_products

__all__ = [
	"Product",
	"create_product",
	"get_product",
	"list_products",
]
