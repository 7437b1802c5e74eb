"""
MenuItemVariant model for per-item options such as sizes or portions.

The whole table is optional: deployments that predate variants do not have
it. ``is_veg`` is tri-state: True/False override the item's flag, None means
the variant inherits it.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class MenuItemVariant(BaseModel):
    """
    MenuItemVariant model representing one priced option of a menu item.

    Attributes:
        menu_item_id: Owning menu item (tenant scope comes from the item)
        name: Variant name (e.g., "Small", "Large")
        price_npr: Variant price in whole rupees
        is_active: Whether the variant can be ordered
        is_veg: True/False override, or None to inherit the item's flag
        sort_order: Display ordering within the item
    """

    __tablename__ = "menu_item_variants"

    menu_item_id = Column(
        Integer,
        ForeignKey("menu_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(200), nullable=False)
    price_npr = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    is_veg = Column(Boolean, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    menu_item = relationship("MenuItem", back_populates="variants")

    def __repr__(self) -> str:
        """String representation of menu item variant."""
        return f"MenuItemVariant(id={self.id}, name='{self.name}', price_npr={self.price_npr})"
