"""Tests for the menu catalog models."""

import pytest

from hotel_menu.models import MenuCategory, MenuItem, MenuItemVariant
from hotel_menu.services.tenant import TenantScope


class TestMenuCategory:
    """Tests for the MenuCategory model."""

    def test_tree_relationships(self, test_db):
        """Test parent and children links, with children ordered by sort_order."""
        session = test_db()
        pizza = MenuCategory(business_id="biz-1", name="Pizza")
        classic = MenuCategory(business_id="biz-1", name="Classic", sort_order=1)
        special = MenuCategory(business_id="biz-1", name="Special", sort_order=0)
        pizza.children.extend([classic, special])
        session.add(pizza)
        session.commit()

        assert pizza.is_root
        assert not classic.is_root
        assert classic.parent is pizza
        assert pizza.uuid
        assert pizza.created_at is not None

        session.expire_all()
        assert [c.name for c in pizza.children] == ["Special", "Classic"]

    def test_to_dict_with_children(self, test_db):
        """Test to_dict() includes children on request."""
        session = test_db()
        pizza = MenuCategory(business_id="biz-1", name="Pizza")
        pizza.children.append(MenuCategory(business_id="biz-1", name="Classic"))
        session.add(pizza)
        session.flush()

        data = pizza.to_dict(include_relationships=True)
        assert data["name"] == "Pizza"
        assert data["parent_id"] is None
        assert [c["name"] for c in data["children"]] == ["Classic"]
        assert isinstance(data["created_at"], str)


class TestMenuItem:
    """Tests for the MenuItem model."""

    def test_server_default_veg_and_variant_order(self, test_db):
        """Test is_veg defaults in the database and variants come back ordered."""
        session = test_db()
        item = MenuItem(business_id="biz-1", name="Margherita", price_npr=700)
        item.variants.extend(
            [
                MenuItemVariant(name="Large", price_npr=950, sort_order=1),
                MenuItemVariant(name="Small", price_npr=500, sort_order=0),
            ]
        )
        session.add(item)
        session.commit()
        session.expire_all()

        assert item.is_veg is True
        assert [v.name for v in item.variants] == ["Small", "Large"]
        assert item.variants[0].is_veg is None
        assert "Margherita" in repr(item)


class TestTenantScope:
    """Tests for TenantScope."""

    def test_business_id_is_trimmed(self):
        """Test the business id is trimmed."""
        assert TenantScope(" biz-1 ").business_id == "biz-1"

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_blank_business_id(self, value):
        """Test a blank business id is rejected."""
        with pytest.raises(ValueError):
            TenantScope(value)
