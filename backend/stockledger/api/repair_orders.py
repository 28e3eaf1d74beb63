"""
Repair Orders API Endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from stockledger.core.auth import TokenUser, get_current_user
from stockledger.core.exceptions import NotFound, StockLedgerError
from stockledger.core.storage import get_storage
from stockledger.domain.repair_order import RepairOrderCreate, RepairOrderStatusUpdate
from stockledger.repositories.repair_order_repository import RepairOrderRepository
from stockledger.storage.base import StorageAdapter

router = APIRouter()


@router.get("")
def get_repair_orders(
    status: Optional[str] = Query(None, description="Filter by status"),
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """Get the caller's repair orders, newest first"""
    try:
        orders = RepairOrderRepository(storage, user.id).find_all(status=status)
        return {
            "status": "success",
            "count": len(orders),
            "data": [order.to_dict() for order in orders]
        }

    except StockLedgerError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching repair orders: {str(e)}")


@router.post("", status_code=201)
def create_repair_order(
    body: RepairOrderCreate,
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """Take in a new repair order"""
    try:
        order = RepairOrderRepository(storage, user.id).create(body)
        return {
            "status": "success",
            "message": "Repair order added successfully!",
            "data": order.to_dict()
        }

    except StockLedgerError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding repair order: {str(e)}")


@router.get("/{order_id}")
def get_repair_order(
    order_id: str,
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    order = RepairOrderRepository(storage, user.id).find_by_id(order_id)
    if not order:
        raise NotFound(f"Repair order {order_id} not found")

    return {
        "status": "success",
        "data": order.to_dict()
    }


@router.put("/{order_id}/status")
def update_repair_order_status(
    order_id: str,
    body: RepairOrderStatusUpdate,
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    order = RepairOrderRepository(storage, user.id).update_status(order_id, body.status)
    if not order:
        raise NotFound(f"Repair order {order_id} not found")

    return {
        "status": "success",
        "message": "Repair order updated successfully!",
        "data": order.to_dict()
    }
