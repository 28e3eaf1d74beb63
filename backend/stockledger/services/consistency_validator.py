"""
Consistency checks for sell and undo.

Pure functions over snapshots read inside the current transaction attempt.
The coordinators call them on every attempt, since a retry may see a
different snapshot.
"""
from typing import Optional

from stockledger.core.exceptions import (
    AlreadyCancelled,
    InsufficientStock,
    InvalidQuantity,
    NotFound,
)
from stockledger.domain.product import Product
from stockledger.domain.sale import Sale


def is_valid_quantity(quantity_sold) -> bool:
    # bool is an int subclass; True is not a quantity
    return isinstance(quantity_sold, int) and not isinstance(quantity_sold, bool) and quantity_sold > 0


def can_sell(product: Optional[Product], quantity_sold: int) -> bool:
    return (
        product is not None
        and is_valid_quantity(quantity_sold)
        and product.quantity >= quantity_sold
    )


def can_undo(sale: Optional[Sale]) -> bool:
    return sale is not None and not sale.is_cancelled


def check_quantity(quantity_sold):
    if not is_valid_quantity(quantity_sold):
        raise InvalidQuantity(f"quantity_sold must be a positive integer, got {quantity_sold!r}")


def check_sell(product: Optional[Product], product_id: str, quantity_sold: int):
    """Raise the precise error when ``can_sell`` would be False"""
    check_quantity(quantity_sold)
    if product is None:
        raise NotFound(f"Product {product_id} not found")
    if not can_sell(product, quantity_sold):
        raise InsufficientStock(product_id, product.quantity, quantity_sold)


def check_undo(sale: Optional[Sale], sale_id: str):
    """Raise the precise error when ``can_undo`` would be False"""
    if sale is None:
        raise NotFound(f"Sale {sale_id} not found")
    if not can_undo(sale):
        raise AlreadyCancelled(sale_id)
