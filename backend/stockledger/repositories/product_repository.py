"""
Product Repository - Data Access Layer for Products

Plain CRUD over the caller's namespace. Stock (``quantity``) can be set when
a product is created; after that it is changed only by the sell/undo engine,
so nothing here writes it.
"""
from typing import List, Optional, Tuple

from stockledger.domain.product import Product, ProductCreate, ProductUpdate
from stockledger.storage.base import StorageAdapter, TransactionContext


class ProductRepository:
    """
    Repository for Product data access

    Returns Product domain models, not raw dictionaries.
    """

    def __init__(self, storage: StorageAdapter, user_id: str):
        self.storage = storage
        self.user_id = user_id

    def _all(self) -> List[Product]:
        records = self.storage.list_records(self.user_id, Product.COLLECTION)
        return [Product.from_record(record) for record in records]

    def find_by_id(self, product_id: str) -> Optional[Product]:
        """
        Find product by ID

        Returns:
            Product or None if not found
        """
        record = self.storage.get_record(self.user_id, Product.COLLECTION, product_id)
        if not record:
            return None
        return Product.from_record(record)

    def find_all(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find products with filters, ordered by name

        Args:
            category: Filter by category
            search: Case-insensitive search in name or SKU
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of products, total count)
        """
        products = self._all()

        if category:
            products = [p for p in products if p.category == category]

        if search:
            term = search.lower()
            products = [
                p for p in products
                if term in p.name.lower() or (p.sku and term in p.sku.lower())
            ]

        products.sort(key=lambda p: (p.name.lower(), p.id))
        return products[offset:offset + limit], len(products)

    def find_low_stock(self) -> List[Product]:
        """Products at or below their minimum stock, lowest first"""
        products = [p for p in self._all() if p.is_low_stock]
        products.sort(key=lambda p: (p.quantity, p.name.lower()))
        return products

    def create(self, data: ProductCreate) -> Product:
        product = data.build()
        self.storage.insert_record(self.user_id, Product.COLLECTION, product.id, product.to_record())
        return product

    def update(self, product_id: str, data: ProductUpdate) -> Optional[Product]:
        """
        Update descriptive fields of a product

        Read-modify-write runs as an atomic unit so a concurrent sale is never
        overwritten with a stale quantity.

        Returns:
            Updated product or None if not found
        """

        def unit(txn: TransactionContext) -> Optional[Product]:
            record, _ = txn.get(Product.COLLECTION, product_id)
            if record is None:
                return None
            product = data.apply_to(Product.from_record(record))
            txn.put(Product.COLLECTION, product_id, product.to_record())
            return product

        return self.storage.atomic(self.user_id, unit)

    def delete(self, product_id: str) -> bool:
        """Delete a product; its sales are kept"""
        return self.storage.delete_record(self.user_id, Product.COLLECTION, product_id)

    def get_stats(self) -> dict:
        """
        Get product statistics

        Returns:
            Dictionary with totals, stock levels and per-category counts
        """
        products = self._all()
        by_category = {}
        for product in products:
            category = product.category or "uncategorized"
            by_category[category] = by_category.get(category, 0) + 1

        return {
            "total_products": len(products),
            "total_units": sum(p.quantity for p in products),
            "out_of_stock": sum(1 for p in products if p.is_out_of_stock),
            "low_stock": sum(1 for p in products if p.is_low_stock and not p.is_out_of_stock),
            "by_category": by_category,
        }
