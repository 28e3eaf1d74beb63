"""
Storage Layer - versioned records with atomic read-modify-write

Backends implement StorageAdapter; the engine only ever talks to the
abstract interface.
"""
from stockledger.storage.base import Key, StorageAdapter, TransactionContext
from stockledger.storage.memory import InMemoryStorageAdapter

__all__ = ['Key', 'StorageAdapter', 'TransactionContext', 'InMemoryStorageAdapter']
