"""
Transaction Coordinator - the atomic sell operation

Selling decrements a product's stock and records an immutable sale in one
atomic unit: either both writes commit or neither does. Concurrent sells of
the same product race optimistically; the storage adapter re-runs the loser
with fresh reads, so stock can never go negative.
"""
import logging
from typing import Any, Dict, Optional

from stockledger.domain.product import Product
from stockledger.domain.sale import Sale
from stockledger.domain.common import utc_now
from stockledger.services.consistency_validator import check_quantity, check_sell
from stockledger.storage.base import StorageAdapter, TransactionContext

logger = logging.getLogger(__name__)


class TransactionCoordinator:
    """Runs ``sell`` against a StorageAdapter"""

    def __init__(self, storage: StorageAdapter):
        self.storage = storage

    def sell(self, user_id: str, product_id: str, quantity_sold: int,
             sale_data: Optional[Dict[str, Any]] = None,
             timeout: Optional[float] = None) -> str:
        """
        Sell ``quantity_sold`` units of a product.

        Args:
            user_id: Owner namespace (verified caller identity)
            product_id: Product to sell
            quantity_sold: Units to sell, must be > 0
            sale_data: Metadata stored verbatim on the sale
            timeout: Deadline in seconds for the whole call

        Returns:
            Id of the new sale

        Raises:
            InvalidQuantity, NotFound, InsufficientStock,
            TransactionConflict, TransactionTimeout
        """
        check_quantity(quantity_sold)

        def unit(txn: TransactionContext) -> str:
            record, _ = txn.get(Product.COLLECTION, product_id)
            product = Product.from_record(record) if record is not None else None
            check_sell(product, product_id, quantity_sold)

            product.quantity -= quantity_sold
            product.updated_at = utc_now()
            sale = Sale.new(product_id, quantity_sold, sale_data)

            txn.put(Product.COLLECTION, product_id, product.to_record())
            txn.put(Sale.COLLECTION, sale.id, sale.to_record())
            return sale.id

        sale_id = self.storage.atomic(user_id, unit, timeout=timeout)
        logger.info(f"Sold {quantity_sold} of product {product_id} (user {user_id}), sale {sale_id}")
        return sale_id
