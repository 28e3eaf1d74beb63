"""
Repository Layer - Data Access

Plain CRUD over a user's namespace, returning domain models. Repositories
never change product stock or a sale's cancelled flag.
"""
from stockledger.repositories.product_repository import ProductRepository
from stockledger.repositories.sale_repository import SaleRepository
from stockledger.repositories.purchase_repository import PurchaseRepository
from stockledger.repositories.repair_order_repository import RepairOrderRepository

__all__ = [
    'ProductRepository',
    'SaleRepository',
    'PurchaseRepository',
    'RepairOrderRepository'
]
