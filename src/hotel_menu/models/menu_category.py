"""
MenuCategory model for the two-level menu category tree.

A category with no parent is a root (e.g., "Pizza"); a category with a parent
is a child (e.g., "Classic" under "Pizza"). A child's parent must itself be a
root, so the tree never grows past two levels.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel


class MenuCategory(BaseModel):
    """
    MenuCategory model representing one node of a business's menu tree.

    Attributes:
        business_id: Owning business (tenant) identifier
        name: Display name (matched case-insensitively on import)
        description: Optional description text
        parent_id: Parent category for children, None for roots
        sort_order: Display ordering among siblings
        is_active: Whether the category is shown on the menu

    Relationships:
        parent: Many-to-One with MenuCategory
        children: One-to-Many with MenuCategory (cascade delete)
        items: One-to-Many with MenuItem
    """

    __tablename__ = "menu_categories"

    business_id = Column(String(36), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    parent_id = Column(
        Integer,
        ForeignKey("menu_categories.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    parent = relationship("MenuCategory", remote_side="MenuCategory.id", back_populates="children")
    children = relationship(
        "MenuCategory",
        back_populates="parent",
        cascade="all, delete-orphan",
        order_by="MenuCategory.sort_order",
        lazy="select",
    )
    # Items keep their row when a category goes away; the FK sets category_id to NULL
    items = relationship(
        "MenuItem", back_populates="category", passive_deletes=True, lazy="select"
    )

    __table_args__ = (
        Index("idx_menu_category_business_parent", "business_id", "parent_id"),
    )

    @property
    def is_root(self) -> bool:
        """True when the category has no parent."""
        return self.parent_id is None

    def __repr__(self) -> str:
        """String representation of menu category."""
        return f"MenuCategory(id={self.id}, name='{self.name}', parent_id={self.parent_id})"

    def to_dict(self, include_relationships: bool = False) -> dict:
        """
        Convert menu category to dictionary.

        Args:
            include_relationships: If True, include children

        Returns:
            Dictionary representation
        """
        result = super().to_dict(False)

        if include_relationships:
            result["children"] = [c.to_dict(False) for c in self.children]

        return result
