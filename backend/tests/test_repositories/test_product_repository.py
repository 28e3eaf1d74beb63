"""
Unit tests for ProductRepository

These tests run the repository against the in-memory storage backend.
"""
import pytest
from pydantic import ValidationError

from stockledger.domain.product import Product, ProductCreate, ProductUpdate
from stockledger.domain.sale import Sale
from stockledger.repositories.product_repository import ProductRepository


@pytest.fixture
def repo(storage, user_id):
    return ProductRepository(storage, user_id)


class TestProductRepository:
    """Test ProductRepository methods"""

    def test_find_by_id_returns_product(self, repo, create_product):
        """Test find_by_id returns a Product domain model"""
        # Arrange
        created = create_product(quantity=12, name="USB-C Cable", sku="CBL-USBC", category="cables")

        # Act
        product = repo.find_by_id(created.id)

        # Assert
        assert product is not None
        assert isinstance(product, Product)
        assert product.id == created.id
        assert product.sku == "CBL-USBC"
        assert product.name == "USB-C Cable"
        assert product.quantity == 12

    def test_find_by_id_returns_none_when_not_found(self, repo):
        """Test find_by_id returns None when product doesn't exist"""
        assert repo.find_by_id("missing") is None

    def test_find_by_id_is_scoped_to_owner(self, storage, other_user_id, create_product):
        created = create_product()

        assert ProductRepository(storage, other_user_id).find_by_id(created.id) is None

    def test_find_all_orders_by_name_and_counts(self, repo, create_product):
        """Test find_all returns products ordered by name plus the total"""
        # Arrange
        create_product(name="wireless mouse")
        create_product(name="Battery Pack")
        create_product(name="Screen Protector")

        # Act
        products, total = repo.find_all(limit=2)

        # Assert
        assert total == 3
        assert [p.name for p in products] == ["Battery Pack", "Screen Protector"]

    def test_find_all_with_offset(self, repo, create_product):
        for name in ["A", "B", "C"]:
            create_product(name=name)

        products, total = repo.find_all(limit=10, offset=2)

        assert total == 3
        assert [p.name for p in products] == ["C"]

    def test_find_all_search_matches_name_or_sku(self, repo, create_product):
        """Test search is case-insensitive on name and SKU"""
        create_product(name="Phone Case", sku="CASE-01")
        create_product(name="Charger", sku="CHG-PHONE")
        create_product(name="Headphones Stand", sku="HDP-01")
        create_product(name="Tripod")

        products, total = repo.find_all(search="phone")

        assert total == 3
        assert {p.name for p in products} == {"Phone Case", "Charger", "Headphones Stand"}

    def test_find_all_filters_by_category(self, repo, create_product):
        create_product(name="Cable", category="cables")
        create_product(name="Case", category="cases")

        products, total = repo.find_all(category="cases")

        assert total == 1
        assert products[0].name == "Case"

    def test_find_low_stock(self, repo, create_product):
        """Test low stock lists products at or below min_stock, lowest first"""
        create_product(name="Plenty", quantity=50, min_stock=5)
        create_product(name="Borderline", quantity=5, min_stock=5)
        create_product(name="Empty", quantity=0, min_stock=2)

        products = repo.find_low_stock()

        assert [p.name for p in products] == ["Empty", "Borderline"]

    def test_get_stats(self, repo, create_product):
        create_product(name="A", quantity=10, min_stock=2, category="cables")
        create_product(name="B", quantity=1, min_stock=2, category="cables")
        create_product(name="C", quantity=0)

        stats = repo.get_stats()

        assert stats["total_products"] == 3
        assert stats["total_units"] == 11
        assert stats["out_of_stock"] == 1
        assert stats["low_stock"] == 1
        assert stats["by_category"] == {"cables": 2, "uncategorized": 1}

    def test_get_stats_empty(self, repo):
        stats = repo.get_stats()

        assert stats["total_products"] == 0
        assert stats["total_units"] == 0
        assert stats["by_category"] == {}


class TestProductRepositoryWrites:
    """Test create, update and delete"""

    def test_create_keeps_extra_descriptive_fields(self, repo):
        product = repo.create(ProductCreate(name="Case", quantity=3, color="red"))

        stored = repo.find_by_id(product.id)
        assert stored.quantity == 3
        assert stored.model_extra == {"color": "red"}

    def test_create_assigns_its_own_id(self, repo):
        product = repo.create(ProductCreate(name="Case", quantity=3, id="legacy-1", createdAt="2020-01-01T00:00:00Z"))

        assert product.id != "legacy-1"
        assert product.created_at.year != 2020
        assert repo.find_by_id("legacy-1") is None
        assert repo.find_by_id(product.id).quantity == 3

    def test_create_rejects_negative_quantity(self):
        with pytest.raises(ValidationError):
            ProductCreate(name="Case", quantity=-1)

    def test_update_changes_descriptive_fields(self, repo, create_product):
        created = create_product(quantity=7, name="Old Name")

        updated = repo.update(created.id, ProductUpdate(name="New Name", minStock=3))

        assert updated.name == "New Name"
        assert updated.min_stock == 3
        assert updated.quantity == 7
        assert updated.updated_at is not None
        assert repo.find_by_id(created.id).name == "New Name"

    def test_update_cannot_change_quantity(self):
        """Test stock is not part of the update schema"""
        with pytest.raises(ValidationError):
            ProductUpdate(quantity=100)

    def test_update_keeps_stock_written_by_a_sale(self, repo, user_id, create_product, seller):
        created = create_product(quantity=7)
        seller.sell(user_id, created.id, 2)

        updated = repo.update(created.id, ProductUpdate(description="Sold in pairs"))

        assert updated.quantity == 5

    def test_update_missing_returns_none(self, repo):
        assert repo.update("missing", ProductUpdate(name="X")) is None

    def test_delete_keeps_sales(self, storage, repo, user_id, create_product, seller):
        """Test deleting a product leaves its sales untouched"""
        created = create_product(quantity=7)
        sale_id = seller.sell(user_id, created.id, 2)

        assert repo.delete(created.id) is True

        assert repo.find_by_id(created.id) is None
        assert storage.get_record(user_id, Sale.COLLECTION, sale_id) is not None

    def test_delete_missing_returns_false(self, repo):
        assert repo.delete("missing") is False


class TestProductDomainModel:
    """Test Product domain model properties"""

    def test_is_low_stock(self):
        product = Product(id="p1", name="Cable", quantity=5, min_stock=10)

        assert product.is_low_stock is True
        assert product.is_out_of_stock is False

    def test_is_out_of_stock(self):
        product = Product(id="p1", name="Cable", quantity=0)

        assert product.is_out_of_stock is True

    def test_to_dict_includes_computed_fields(self):
        product = Product(id="p1", name="Cable", quantity=20, min_stock=5)

        data = product.to_dict()

        assert data["is_low_stock"] is False
        assert data["is_out_of_stock"] is False
        assert isinstance(data["created_at"], str)

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            Product(id="p1", name="Cable", quantity=-1)
