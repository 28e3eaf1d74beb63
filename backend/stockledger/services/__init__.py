"""
Service Layer - the sell/undo consistency engine
"""
from stockledger.services.transaction_coordinator import TransactionCoordinator
from stockledger.services.undo_coordinator import UndoCoordinator

__all__ = ['TransactionCoordinator', 'UndoCoordinator']
