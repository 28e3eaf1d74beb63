"""
Storage Adapter - atomic read-modify-write over versioned records

Records are JSON documents addressed by (namespace, collection, id). The
namespace is the owning user's id; nothing in this interface lets a caller
reach into another namespace.

``StorageAdapter.atomic`` runs a function against a TransactionContext with
optimistic concurrency: reads are remembered with their version, writes are
buffered, and the commit succeeds only if nothing that was read has changed
in the meantime. A lost race re-runs the function from scratch.

Author: StockLedger
Date: 2026-10-19
"""
import copy
import time
import random
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple, TypeVar

from stockledger.core.exceptions import (
    ConflictDetected,
    TransactionConflict,
    TransactionTimeout,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Version reported for a record that does not exist
MISSING_VERSION = 0


class Key(NamedTuple):
    namespace: str
    collection: str
    id: str


def make_key(namespace: str, collection: str, record_id: str) -> Key:
    """Build a storage key, rejecting empty components"""
    if not namespace:
        raise ValueError("namespace is required")
    if not collection:
        raise ValueError("collection is required")
    if not record_id:
        raise ValueError("record id is required")
    return Key(str(namespace), str(collection), str(record_id))


class Deadline:
    """Wall-clock budget shared by every attempt of one atomic call"""

    def __init__(self, timeout: Optional[float]):
        self.timeout = timeout
        self.expires_at = time.monotonic() + timeout if timeout is not None else None

    def remaining(self) -> Optional[float]:
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() >= self.expires_at

    def check(self, stage: str):
        if self.expired():
            raise TransactionTimeout(
                f"Transaction exceeded its {self.timeout}s deadline ({stage})"
            )


class TransactionContext(ABC):
    """
    One attempt of an atomic unit, bound to a single namespace.

    Subclasses provide ``_load`` (read a record with its version) and
    ``commit``; this class keeps the read set and the write buffer.
    """

    def __init__(self, namespace: str, deadline: Deadline):
        self.namespace = namespace
        self.deadline = deadline
        self.reads: Dict[Key, int] = {}
        self.writes: Dict[Key, dict] = {}

    @abstractmethod
    def _load(self, key: Key) -> Tuple[Optional[dict], int]:
        """Return (record, version) straight from the backend"""

    @abstractmethod
    def commit(self):
        """Validate the read set and apply the write buffer, all or nothing"""

    def rollback(self):
        self.writes.clear()

    def close(self):
        pass

    def get(self, collection: str, record_id: str) -> Tuple[Optional[dict], int]:
        """
        Read a record in this attempt.

        Returns (record, version); a missing record is (None, 0). Records
        written earlier in the same attempt are returned as written.
        """
        key = make_key(self.namespace, collection, record_id)
        if key in self.writes:
            return copy.deepcopy(self.writes[key]), self.reads.get(key, MISSING_VERSION)

        record, version = self._load(key)
        # First read wins: later reads in the same attempt must not hide a change
        self.reads.setdefault(key, version)
        return (copy.deepcopy(record) if record is not None else None), version

    def put(self, collection: str, record_id: str, record: dict):
        """
        Buffer a write. A key read in this attempt must be unchanged at
        commit; a key never read must still be absent (insert).
        """
        key = make_key(self.namespace, collection, record_id)
        self.writes[key] = copy.deepcopy(record)


class StorageAdapter(ABC):
    """
    Base class for storage backends.

    ``atomic`` implements the retry policy once for every backend; backends
    implement ``_begin`` plus the plain CRUD primitives used by repositories.
    """

    def __init__(self, max_attempts: int = 5, retry_delay: float = 0.01,
                 default_timeout: Optional[float] = 5.0):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.default_timeout = default_timeout

    @abstractmethod
    def _begin(self, namespace: str, deadline: Deadline) -> TransactionContext:
        """Start one attempt"""

    def atomic(self, namespace: str, fn: Callable[[TransactionContext], T],
               timeout: Optional[float] = None) -> T:
        """
        Run ``fn(ctx)`` as one atomic unit in ``namespace``.

        Conflicts re-run ``fn`` with fresh reads, up to ``max_attempts``
        times, then raise TransactionConflict. Any other exception raised by
        ``fn`` aborts the attempt and propagates unchanged. The deadline
        (``timeout`` seconds, default ``default_timeout``) covers all
        attempts and raises TransactionTimeout without partial effect.
        """
        if not namespace:
            raise ValueError("namespace is required")
        deadline = Deadline(self.default_timeout if timeout is None else timeout)

        for attempt in range(1, self.max_attempts + 1):
            deadline.check(f"before attempt {attempt}")
            txn = self._begin(namespace, deadline)
            try:
                logger.debug(f"Atomic attempt {attempt}/{self.max_attempts} in namespace {namespace}")
                result = fn(txn)
                deadline.check("before commit")
                txn.commit()
                if attempt > 1:
                    logger.info(f"Atomic unit committed on attempt {attempt}")
                return result

            except ConflictDetected as e:
                txn.rollback()
                logger.warning(f"Conflict on attempt {attempt}/{self.max_attempts}: {e}")
                if attempt < self.max_attempts:
                    self._backoff(attempt, deadline)

            except BaseException:
                txn.rollback()
                raise

            finally:
                txn.close()

        logger.error(f"Atomic unit in namespace {namespace} gave up after {self.max_attempts} attempts")
        raise TransactionConflict(
            f"Transaction kept conflicting with concurrent updates after {self.max_attempts} attempts"
        )

    def _backoff(self, attempt: int, deadline: Deadline):
        delay = self.retry_delay * (2 ** (attempt - 1))
        delay += random.uniform(0, delay)
        remaining = deadline.remaining()
        if remaining is not None and delay >= remaining:
            raise TransactionTimeout(
                f"Transaction exceeded its {deadline.timeout}s deadline (retry backoff)"
            )
        if delay > 0:
            time.sleep(delay)

    # ------------------------------------------------------------------
    # Plain CRUD primitives (each one a single atomic statement)
    # ------------------------------------------------------------------

    @abstractmethod
    def list_records(self, namespace: str, collection: str) -> List[dict]:
        """All records of a collection in a namespace"""

    @abstractmethod
    def get_record(self, namespace: str, collection: str, record_id: str) -> Optional[dict]:
        """One record or None"""

    @abstractmethod
    def insert_record(self, namespace: str, collection: str, record_id: str, record: dict) -> bool:
        """Insert a new record; False if the id is taken"""

    @abstractmethod
    def delete_record(self, namespace: str, collection: str, record_id: str) -> bool:
        """Delete a record; False if missing"""

    def ping(self) -> bool:
        """True when the backend is reachable"""
        return True
