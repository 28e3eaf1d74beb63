"""
Sale Repository - read-only access to sales

Sales are written only by the sell/undo engine.
"""
from typing import List, Optional, Tuple

from stockledger.domain.sale import Sale
from stockledger.storage.base import StorageAdapter


class SaleRepository:
    """Read access to a user's sales"""

    def __init__(self, storage: StorageAdapter, user_id: str):
        self.storage = storage
        self.user_id = user_id

    def find_by_id(self, sale_id: str) -> Optional[Sale]:
        record = self.storage.get_record(self.user_id, Sale.COLLECTION, sale_id)
        if not record:
            return None
        return Sale.from_record(record)

    def find_all(
        self,
        product_id: Optional[str] = None,
        include_cancelled: bool = True,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Sale], int]:
        """
        Find sales, newest first

        Returns:
            Tuple of (list of sales, total count)
        """
        records = self.storage.list_records(self.user_id, Sale.COLLECTION)
        sales = [Sale.from_record(record) for record in records]

        if product_id:
            sales = [s for s in sales if s.product_id == product_id]
        if not include_cancelled:
            sales = [s for s in sales if not s.is_cancelled]

        sales.sort(key=lambda s: (s.sale_date, s.id), reverse=True)
        return sales[offset:offset + limit], len(sales)
