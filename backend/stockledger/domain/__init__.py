"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities.
These models enforce type safety and validation across the application.
"""
from stockledger.domain.product import Product, ProductCreate, ProductUpdate
from stockledger.domain.sale import Sale, SellRequest, UndoRequest, UndoResult
from stockledger.domain.purchase import Purchase, PurchaseCreate
from stockledger.domain.repair_order import RepairOrder, RepairOrderCreate, RepairOrderStatusUpdate

__all__ = [
    'Product', 'ProductCreate', 'ProductUpdate',
    'Sale', 'SellRequest', 'UndoRequest', 'UndoResult',
    'Purchase', 'PurchaseCreate',
    'RepairOrder', 'RepairOrderCreate', 'RepairOrderStatusUpdate',
]
