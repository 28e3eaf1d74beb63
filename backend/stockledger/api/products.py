"""
Products API Endpoints
Product catalog CRUD plus the sell operation
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from stockledger.core.auth import TokenUser, get_current_user
from stockledger.core.exceptions import NotFound, StockLedgerError
from stockledger.core.storage import get_storage
from stockledger.domain.product import ProductCreate, ProductUpdate
from stockledger.domain.sale import SellRequest
from stockledger.repositories.product_repository import ProductRepository
from stockledger.services.transaction_coordinator import TransactionCoordinator
from stockledger.storage.base import StorageAdapter

router = APIRouter()


@router.get("")
def get_products(
    category: Optional[str] = Query(None, description="Filter by category"),
    search: Optional[str] = Query(None, description="Search by name or SKU"),
    limit: int = Query(100, ge=1, le=5000),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """
    Get the caller's products ordered by name, with optional filters
    """
    try:
        repo = ProductRepository(storage, user.id)
        products, total = repo.find_all(
            category=category,
            search=search,
            limit=limit,
            offset=offset
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except StockLedgerError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.post("", status_code=201)
def create_product(
    body: ProductCreate,
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """Add a new product"""
    try:
        product = ProductRepository(storage, user.id).create(body)
        return {
            "status": "success",
            "message": "Product added successfully!",
            "data": product.to_dict()
        }

    except StockLedgerError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding product: {str(e)}")


@router.get("/stats")
def get_product_stats(
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """
    Get product statistics

    Returns:
    - Total products and units
    - Out of stock / low stock counts
    - Products by category
    """
    try:
        stats = ProductRepository(storage, user.id).get_stats()
        return {
            "status": "success",
            "data": stats
        }

    except StockLedgerError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/low-stock/alert")
def get_low_stock_products(
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """Products at or below their minimum stock"""
    try:
        products = ProductRepository(storage, user.id).find_low_stock()
        return {
            "status": "success",
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except StockLedgerError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching low stock products: {str(e)}")


@router.get("/{product_id}")
def get_product(
    product_id: str,
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """Get one product"""
    product = ProductRepository(storage, user.id).find_by_id(product_id)
    if not product:
        raise NotFound(f"Product {product_id} not found")

    return {
        "status": "success",
        "data": product.to_dict()
    }


@router.put("/{product_id}")
def update_product(
    product_id: str,
    body: ProductUpdate,
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """
    Update descriptive fields of a product

    Stock is not editable here: it changes only through sell and undo.
    """
    product = ProductRepository(storage, user.id).update(product_id, body)
    if not product:
        raise NotFound(f"Product {product_id} not found")

    return {
        "status": "success",
        "message": "Product updated successfully!",
        "data": product.to_dict()
    }


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """Delete a product. Its sales are kept."""
    if not ProductRepository(storage, user.id).delete(product_id):
        raise NotFound(f"Product {product_id} not found")

    return {
        "status": "success",
        "message": "Product deleted successfully!"
    }


@router.post("/{product_id}/sell")
def sell_product(
    product_id: str,
    body: SellRequest,
    user: TokenUser = Depends(get_current_user),
    storage: StorageAdapter = Depends(get_storage),
):
    """
    Sell units of a product

    Decrements stock and records the sale atomically.

    Errors:
    - 400 invalid quantity
    - 404 product not found
    - 409 insufficient stock, or too many concurrent conflicts
    - 504 deadline exceeded
    """
    coordinator = TransactionCoordinator(storage)
    sale_id = coordinator.sell(user.id, product_id, body.quantity_sold, body.sale_data)

    return {
        "status": "success",
        "message": "Sale recorded successfully!",
        "data": {
            "sale_id": sale_id,
            "product_id": product_id,
            "quantity_sold": body.quantity_sold
        }
    }
