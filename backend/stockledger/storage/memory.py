"""
In-memory storage backend

Thread-safe, process-local store of versioned JSON records. Versions come
from a single monotonically increasing clock, so a record that is deleted and
re-created never reuses a version a running transaction may have read.
"""
import copy
import threading
from typing import Dict, List, Optional, Tuple

from stockledger.core.exceptions import ConflictDetected
from stockledger.storage.base import (
    MISSING_VERSION,
    Deadline,
    Key,
    StorageAdapter,
    TransactionContext,
    make_key,
)


class InMemoryTransaction(TransactionContext):
    """One attempt against an InMemoryStorageAdapter"""

    def __init__(self, store: "InMemoryStorageAdapter", namespace: str, deadline: Deadline):
        super().__init__(namespace, deadline)
        self.store = store

    def _load(self, key: Key) -> Tuple[Optional[dict], int]:
        return self.store._read(key)

    def commit(self):
        with self.store._lock:
            # Validate everything first; apply only if the whole unit is valid
            for key, version in self.reads.items():
                current = self.store._version(key)
                if current != version:
                    raise ConflictDetected(
                        f"{key.collection}/{key.id} changed (read v{version}, now v{current})"
                    )
            for key in self.writes:
                if key not in self.reads and self.store._version(key) != MISSING_VERSION:
                    raise ConflictDetected(f"{key.collection}/{key.id} already exists")

            for key, record in self.writes.items():
                self.store._write(key, record)


class InMemoryStorageAdapter(StorageAdapter):
    """
    Storage backend holding all records in a dict.

    Only the commit step (validate read set, apply write buffer) runs under
    the lock; transaction functions run unlocked and race freely.
    """

    def __init__(self, max_attempts: int = 5, retry_delay: float = 0.01,
                 default_timeout: Optional[float] = 5.0):
        super().__init__(max_attempts=max_attempts, retry_delay=retry_delay,
                         default_timeout=default_timeout)
        self._lock = threading.RLock()
        self._records: Dict[Key, Tuple[dict, int]] = {}
        self._clock = 0

    def _begin(self, namespace: str, deadline: Deadline) -> InMemoryTransaction:
        return InMemoryTransaction(self, namespace, deadline)

    # Internal helpers; callers hold the lock or accept a point-in-time read

    def _read(self, key: Key) -> Tuple[Optional[dict], int]:
        with self._lock:
            entry = self._records.get(key)
            if entry is None:
                return None, MISSING_VERSION
            record, version = entry
            return copy.deepcopy(record), version

    def _version(self, key: Key) -> int:
        entry = self._records.get(key)
        return entry[1] if entry is not None else MISSING_VERSION

    def _write(self, key: Key, record: dict):
        self._clock += 1
        self._records[key] = (copy.deepcopy(record), self._clock)

    # CRUD primitives

    def list_records(self, namespace: str, collection: str) -> List[dict]:
        make_key(namespace, collection, "_")
        with self._lock:
            return [
                copy.deepcopy(record)
                for key, (record, _) in self._records.items()
                if key.namespace == namespace and key.collection == collection
            ]

    def get_record(self, namespace: str, collection: str, record_id: str) -> Optional[dict]:
        record, _ = self._read(make_key(namespace, collection, record_id))
        return record

    def get_version(self, namespace: str, collection: str, record_id: str) -> int:
        with self._lock:
            return self._version(make_key(namespace, collection, record_id))

    def insert_record(self, namespace: str, collection: str, record_id: str, record: dict) -> bool:
        key = make_key(namespace, collection, record_id)
        with self._lock:
            if key in self._records:
                return False
            self._write(key, record)
            return True

    def delete_record(self, namespace: str, collection: str, record_id: str) -> bool:
        key = make_key(namespace, collection, record_id)
        with self._lock:
            return self._records.pop(key, None) is not None
