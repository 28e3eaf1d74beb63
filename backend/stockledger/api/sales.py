"""
Sales API Endpoints
Sale history and the undo operation
"""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from stockledger.core.auth import TokenUser, get_current_user
from stockledger.core.exceptions import NotFound, StockLedgerError
from stockledger.core.storage import get_storage
from stockledger.domain.sale import UndoRequest
from stockledger.repositories.sale_repository import SaleRepository
from stockledger.services.undo_coordinator import UndoCoordinator
from stockledger.storage.base import StorageAdapter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def get_sales(
    product_id: Optional[str] = Query(None, description="Only sales of this product"),
    include_cancelled: bool = Query(True, description="Include undone sales"),
    limit: int = Query(100, ge=1, le=5000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """Get the caller's sales, newest first"""
    try:
        sales, total = SaleRepository(storage, user.id).find_all(
            product_id=product_id,
            include_cancelled=include_cancelled,
            limit=limit,
            offset=offset
        )
        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(sales),
            "data": [sale.to_dict() for sale in sales]
        }

    except StockLedgerError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching sales: {str(e)}")


@router.get("/{sale_id}")
def get_sale(
    sale_id: str,
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """Get one sale"""
    sale = SaleRepository(storage, user.id).find_by_id(sale_id)
    if not sale:
        raise NotFound(f"Sale {sale_id} not found")

    return {
        "status": "success",
        "data": sale.to_dict()
    }


@router.put("/{sale_id}/undo")
def undo_sale(
    sale_id: str,
    body: Optional[UndoRequest] = Body(None),
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """
    Undo a sale: flag it cancelled and restore its units to the product

    The body is accepted for compatibility with older clients; the stored
    sale decides which product is restored and by how much.

    Errors:
    - 404 sale not found
    - 400 sale already cancelled
    """
    result = UndoCoordinator(storage).undo_sale(user.id, sale_id)

    if body and body.quantity_sold is not None and body.quantity_sold != result.quantity_restored:
        logger.info(
            f"Undo of sale {sale_id}: client sent quantity {body.quantity_sold}, "
            f"restored stored quantity {result.quantity_restored}"
        )

    return {
        "status": "success",
        "message": "Sale cancelled successfully!",
        "data": result.model_dump()
    }
