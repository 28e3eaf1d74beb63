"""
Undo Coordinator - the compensating undo of a sale

Undo flags the sale as cancelled and puts its units back on the product, in
one atomic unit. The cancelled flag is one-way, so a sale is reversed at most
once even when two undos race: the loser re-reads the sale, sees it
cancelled, and fails with AlreadyCancelled.

If the product was deleted after the sale, the cancellation still commits
and the result carries a warning that stock was not restored.
"""
import logging
from typing import Optional

from stockledger.domain.common import utc_now
from stockledger.domain.product import Product
from stockledger.domain.sale import Sale, UndoResult
from stockledger.services.consistency_validator import check_undo
from stockledger.storage.base import StorageAdapter, TransactionContext

logger = logging.getLogger(__name__)


class UndoCoordinator:
    """Runs ``undo_sale`` against a StorageAdapter"""

    def __init__(self, storage: StorageAdapter):
        self.storage = storage

    def undo_sale(self, user_id: str, sale_id: str,
                  timeout: Optional[float] = None) -> UndoResult:
        """
        Reverse a sale exactly once.

        Raises:
            NotFound, AlreadyCancelled, TransactionConflict, TransactionTimeout
        """

        def unit(txn: TransactionContext) -> UndoResult:
            record, _ = txn.get(Sale.COLLECTION, sale_id)
            sale = Sale.from_record(record) if record is not None else None
            check_undo(sale, sale_id)

            now = utc_now()
            sale.is_cancelled = True
            sale.cancelled_at = now
            txn.put(Sale.COLLECTION, sale_id, sale.to_record())

            product_record, _ = txn.get(Product.COLLECTION, sale.product_id)
            if product_record is None:
                return UndoResult(
                    sale_id=sale_id,
                    product_id=sale.product_id,
                    quantity_restored=0,
                    product_restored=False,
                    warning=f"Product {sale.product_id} not found; stock not restored",
                )

            product = Product.from_record(product_record)
            product.quantity += sale.quantity_sold
            product.updated_at = now
            txn.put(Product.COLLECTION, sale.product_id, product.to_record())

            return UndoResult(
                sale_id=sale_id,
                product_id=sale.product_id,
                quantity_restored=sale.quantity_sold,
                product_restored=True,
            )

        result = self.storage.atomic(user_id, unit, timeout=timeout)

        if result.warning:
            logger.warning(f"Sale {sale_id} cancelled (user {user_id}): {result.warning}")
        else:
            logger.info(
                f"Sale {sale_id} cancelled (user {user_id}), "
                f"restored {result.quantity_restored} to product {result.product_id}"
            )
        return result
