"""
Database models for lookbook.

Import all models here so they are registered with SQLAlchemy.
"""
from ..database import Base
from .product import CatalogProduct

__all__ = ["Base", "CatalogProduct"]
