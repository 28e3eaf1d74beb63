"""
Purchases API Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException

from stockledger.core.auth import TokenUser, get_current_user
from stockledger.core.exceptions import StockLedgerError
from stockledger.core.storage import get_storage
from stockledger.domain.purchase import PurchaseCreate
from stockledger.repositories.purchase_repository import PurchaseRepository
from stockledger.storage.base import StorageAdapter

router = APIRouter()


@router.get("")
def get_purchases(
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """Get the caller's purchases, newest first"""
    try:
        purchases = PurchaseRepository(storage, user.id).find_all()
        return {
            "status": "success",
            "count": len(purchases),
            "data": [purchase.to_dict() for purchase in purchases]
        }

    except StockLedgerError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching purchases: {str(e)}")


@router.post("", status_code=201)
def create_purchase(
    body: PurchaseCreate,
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """Record a purchase. Stock is not changed."""
    try:
        purchase = PurchaseRepository(storage, user.id).create(body)
        return {
            "status": "success",
            "message": "Purchase added successfully!",
            "data": purchase.to_dict()
        }

    except StockLedgerError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding purchase: {str(e)}")
