"""
Repair Order Repository
"""
from typing import List, Optional

from stockledger.domain.common import utc_now
from stockledger.domain.repair_order import RepairOrder, RepairOrderCreate
from stockledger.storage.base import StorageAdapter, TransactionContext


class RepairOrderRepository:

    def __init__(self, storage: StorageAdapter, user_id: str):
        self.storage = storage
        self.user_id = user_id

    def find_by_id(self, order_id: str) -> Optional[RepairOrder]:
        record = self.storage.get_record(self.user_id, RepairOrder.COLLECTION, order_id)
        if not record:
            return None
        return RepairOrder.model_validate(record)

    def find_all(self, status: Optional[str] = None) -> List[RepairOrder]:
        """Repair orders, newest first, optionally filtered by status"""
        records = self.storage.list_records(self.user_id, RepairOrder.COLLECTION)
        orders = [RepairOrder.model_validate(record) for record in records]
        if status:
            orders = [o for o in orders if o.status == status]
        orders.sort(key=lambda o: (o.received_at, o.id), reverse=True)
        return orders

    def create(self, data: RepairOrderCreate) -> RepairOrder:
        order = data.build()
        self.storage.insert_record(self.user_id, RepairOrder.COLLECTION, order.id, order.to_record())
        return order

    def update_status(self, order_id: str, status: str) -> Optional[RepairOrder]:
        """Set the status of a repair order; None if not found"""

        def unit(txn: TransactionContext) -> Optional[RepairOrder]:
            record, _ = txn.get(RepairOrder.COLLECTION, order_id)
            if record is None:
                return None
            record['status'] = status
            order = RepairOrder.model_validate(record)
            order.updated_at = utc_now()
            txn.put(RepairOrder.COLLECTION, order_id, order.to_record())
            return order

        return self.storage.atomic(self.user_id, unit)
