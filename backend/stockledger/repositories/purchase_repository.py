"""
Purchase Repository
"""
from typing import List

from stockledger.domain.purchase import Purchase, PurchaseCreate
from stockledger.storage.base import StorageAdapter


class PurchaseRepository:

    def __init__(self, storage: StorageAdapter, user_id: str):
        self.storage = storage
        self.user_id = user_id

    def find_all(self) -> List[Purchase]:
        """All purchases, newest first"""
        records = self.storage.list_records(self.user_id, Purchase.COLLECTION)
        purchases = [Purchase.model_validate(record) for record in records]
        purchases.sort(key=lambda p: (p.purchase_date, p.id), reverse=True)
        return purchases

    def create(self, data: PurchaseCreate) -> Purchase:
        purchase = data.build()
        self.storage.insert_record(self.user_id, Purchase.COLLECTION, purchase.id, purchase.to_record())
        return purchase
