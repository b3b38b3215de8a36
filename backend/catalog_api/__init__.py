"""Catalog API: products, categories, images and token authentication."""

__version__ = "1.0.0"
