"""
Database models for the Catalog API.

All SQLAlchemy models are imported here so the metadata is complete.
"""

from catalog_api.models.user import User
from catalog_api.models.category import Category
from catalog_api.models.product import Product, product_category

__all__ = [
    "User",
    "Category",
    "Product",
    "product_category",
]
