"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .menu_category import MenuCategory
from .menu_item import MenuItem
from .menu_item_variant import MenuItemVariant

__all__ = [
    "Base",
    "BaseModel",
    "MenuCategory",
    "MenuItem",
    "MenuItemVariant",
]
