"""
MenuItem model for orderable menu entries.

``is_veg`` was added to the table after the first deployments, so older
databases may not have it. The column deliberately has no Python-side default:
Core inserts that leave it out must not mention it at all.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from .base import BaseModel


class MenuItem(BaseModel):
    """
    MenuItem model representing a single dish or drink.

    Attributes:
        business_id: Owning business (tenant) identifier
        category_id: Category the item is listed under (None = uncategorized)
        name: Display name (matched case-insensitively within its category)
        price_npr: Price in whole Nepalese rupees, never negative
        description: Optional description text
        image_url: Optional image URL
        is_available: Whether the item can currently be ordered
        is_veg: Vegetarian flag (optional column, see module docstring)
        sort_order: Display ordering within the category

    Relationships:
        category: Many-to-One with MenuCategory
        variants: One-to-Many with MenuItemVariant (cascade delete)
    """

    __tablename__ = "menu_items"

    business_id = Column(String(36), nullable=False, index=True)
    category_id = Column(
        Integer,
        ForeignKey("menu_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name = Column(String(200), nullable=False)
    price_npr = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    is_veg = Column(Boolean, nullable=False, server_default=expression.true())
    sort_order = Column(Integer, nullable=False, default=0)

    category = relationship("MenuCategory", back_populates="items")
    variants = relationship(
        "MenuItemVariant",
        back_populates="menu_item",
        cascade="all, delete-orphan",
        order_by="MenuItemVariant.sort_order",
        lazy="select",
    )

    __table_args__ = (
        Index("idx_menu_item_business_category", "business_id", "category_id"),
    )

    def __repr__(self) -> str:
        """String representation of menu item."""
        return f"MenuItem(id={self.id}, name='{self.name}', price_npr={self.price_npr})"
