"""
PostgreSQL storage backend

All records live in one table keyed by (namespace, collection, id) with the
document in a JSONB column and a version drawn from one sequence, so a
re-created record never reuses a version.

Each attempt of an atomic unit runs in a READ COMMITTED transaction and is
validated at commit the same way the in-memory backend validates it: every
key read must still be at the version read, which is checked against the
latest committed state. Existing rows are pinned with FOR SHARE or updated
with compare-and-swap on the version; keys read as absent are guarded by a
transaction-scoped advisory lock that inserters of the same key also take.
"""
import logging
from typing import List, Optional, Tuple

import psycopg2
from psycopg2 import errors
from psycopg2.extensions import ISOLATION_LEVEL_READ_COMMITTED
from psycopg2.extras import Json

from stockledger.core.database import get_db_connection_with_retry
from stockledger.core.exceptions import (
    ConflictDetected,
    StorageUnavailable,
    TransactionTimeout,
)
from stockledger.storage.base import (
    MISSING_VERSION,
    Deadline,
    Key,
    StorageAdapter,
    TransactionContext,
    make_key,
)

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE SEQUENCE IF NOT EXISTS record_versions;

CREATE TABLE IF NOT EXISTS records (
    namespace   TEXT NOT NULL,
    collection  TEXT NOT NULL,
    id          TEXT NOT NULL,
    data        JSONB NOT NULL,
    version     BIGINT NOT NULL,
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (namespace, collection, id)
)
"""

CONFLICT_ERRORS = (errors.SerializationFailure, errors.DeadlockDetected)


def _execute(cursor, sql, params=None):
    """Run a statement, mapping driver errors onto the engine's taxonomy"""
    try:
        cursor.execute(sql, params)
    except CONFLICT_ERRORS as e:
        raise ConflictDetected(str(e).strip()) from e
    except errors.QueryCanceled as e:
        raise TransactionTimeout(f"Statement cancelled by deadline: {str(e).strip()}") from e
    except psycopg2.OperationalError as e:
        raise StorageUnavailable(f"Database error: {str(e).strip()}") from e


def _lock_key(cursor, key: Key):
    """Advisory lock on a key until the current transaction ends"""
    _execute(cursor, "SELECT pg_advisory_xact_lock(hashtext(%s))",
             (f"{key.namespace}/{key.collection}/{key.id}",))


def _insert(cursor, key: Key, record: dict) -> bool:
    """Insert a new record under its key lock; False if the id is taken"""
    _lock_key(cursor, key)
    _execute(cursor, """
        INSERT INTO records (namespace, collection, id, data, version)
        VALUES (%s, %s, %s, %s, nextval('record_versions'))
        ON CONFLICT (namespace, collection, id) DO NOTHING
    """, (key.namespace, key.collection, key.id, Json(record)))
    return cursor.rowcount == 1


class PostgresTransaction(TransactionContext):
    """One attempt of an atomic unit on its own connection"""

    def __init__(self, adapter: "PostgresStorageAdapter", namespace: str, deadline: Deadline):
        super().__init__(namespace, deadline)
        self.conn = adapter._connect()
        try:
            self.conn.set_session(isolation_level=ISOLATION_LEVEL_READ_COMMITTED)
            self.cursor = self.conn.cursor()

            remaining = deadline.remaining()
            if remaining is not None:
                timeout_ms = max(1, int(remaining * 1000))
                _execute(self.cursor, "SET LOCAL statement_timeout = %s", (timeout_ms,))
        except Exception:
            self.conn.close()
            raise

    def _load(self, key: Key) -> Tuple[Optional[dict], int]:
        _execute(self.cursor, """
            SELECT data, version
            FROM records
            WHERE namespace = %s AND collection = %s AND id = %s
        """, (key.namespace, key.collection, key.id))
        row = self.cursor.fetchone()
        if not row:
            return None, MISSING_VERSION
        return row['data'], row['version']

    def _current_version(self, key: Key, for_share: bool = False) -> int:
        _execute(self.cursor, """
            SELECT version
            FROM records
            WHERE namespace = %s AND collection = %s AND id = %s
        """ + ("FOR SHARE" if for_share else ""), (key.namespace, key.collection, key.id))
        row = self.cursor.fetchone()
        return row['version'] if row else MISSING_VERSION

    def commit(self):
        # Keys in sorted order, so concurrent commits take their locks alike
        for key in sorted(self.reads):
            if key in self.writes:
                continue
            version = self.reads[key]
            if version == MISSING_VERSION:
                # The lock keeps the key absent until this transaction ends
                _lock_key(self.cursor, key)
                if self._current_version(key) != MISSING_VERSION:
                    raise ConflictDetected(f"{key.collection}/{key.id} was created since it was read")
            elif self._current_version(key, for_share=True) != version:
                raise ConflictDetected(f"{key.collection}/{key.id} changed since it was read")

        for key in sorted(self.writes):
            record = self.writes[key]
            version = self.reads.get(key, MISSING_VERSION)
            if version == MISSING_VERSION:
                if not _insert(self.cursor, key, record):
                    raise ConflictDetected(f"{key.collection}/{key.id} already exists")
            else:
                _execute(self.cursor, """
                    UPDATE records
                    SET data = %s, version = nextval('record_versions'), updated_at = now()
                    WHERE namespace = %s AND collection = %s AND id = %s AND version = %s
                """, (Json(record), key.namespace, key.collection, key.id, version))
                if self.cursor.rowcount != 1:
                    raise ConflictDetected(f"{key.collection}/{key.id} changed since it was read")

        try:
            self.conn.commit()
        except CONFLICT_ERRORS as e:
            raise ConflictDetected(str(e).strip()) from e

    def rollback(self):
        super().rollback()
        try:
            self.conn.rollback()
        except psycopg2.Error as e:
            logger.warning(f"Rollback failed: {e}")

    def close(self):
        try:
            self.cursor.close()
        finally:
            self.conn.close()


class PostgresStorageAdapter(StorageAdapter):
    """
    Storage backend on PostgreSQL (psycopg2).

    Usage:
        storage = PostgresStorageAdapter(settings.DATABASE_URL)
        storage.ensure_schema()
        storage.atomic(user_id, fn)
    """

    def __init__(self, database_url: str, max_attempts: int = 5, retry_delay: float = 0.01,
                 default_timeout: Optional[float] = 5.0):
        super().__init__(max_attempts=max_attempts, retry_delay=retry_delay,
                         default_timeout=default_timeout)
        if not database_url:
            raise ValueError("database_url is required for the postgres backend")
        self.database_url = database_url

    def _connect(self):
        try:
            return get_db_connection_with_retry(self.database_url)
        except psycopg2.OperationalError as e:
            raise StorageUnavailable(f"Could not connect to database: {str(e).strip()}") from e

    def _begin(self, namespace: str, deadline: Deadline) -> PostgresTransaction:
        return PostgresTransaction(self, namespace, deadline)

    def _with_cursor(self, work):
        """Run ``work(cursor)`` in its own transaction"""
        conn = self._connect()
        cursor = conn.cursor()
        try:
            result = work(cursor)
            conn.commit()
            return result
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def _run(self, sql: str, params=None, fetch: Optional[str] = None):
        """Run one statement in its own transaction"""

        def work(cursor):
            _execute(cursor, sql, params)
            if fetch == "one":
                return cursor.fetchone()
            if fetch == "all":
                return cursor.fetchall()
            return cursor.rowcount

        return self._with_cursor(work)

    def ensure_schema(self):
        self._run(SCHEMA_SQL)
        logger.info("records table ready")

    def list_records(self, namespace: str, collection: str) -> List[dict]:
        make_key(namespace, collection, "_")
        rows = self._run("""
            SELECT data
            FROM records
            WHERE namespace = %s AND collection = %s
        """, (namespace, collection), fetch="all")
        return [row['data'] for row in rows]

    def get_record(self, namespace: str, collection: str, record_id: str) -> Optional[dict]:
        key = make_key(namespace, collection, record_id)
        row = self._run("""
            SELECT data
            FROM records
            WHERE namespace = %s AND collection = %s AND id = %s
        """, tuple(key), fetch="one")
        return row['data'] if row else None

    def insert_record(self, namespace: str, collection: str, record_id: str, record: dict) -> bool:
        key = make_key(namespace, collection, record_id)
        return self._with_cursor(lambda cursor: _insert(cursor, key, record))

    def delete_record(self, namespace: str, collection: str, record_id: str) -> bool:
        key = make_key(namespace, collection, record_id)
        rowcount = self._run("""
            DELETE FROM records
            WHERE namespace = %s AND collection = %s AND id = %s
        """, tuple(key))
        return rowcount == 1

    def ping(self) -> bool:
        try:
            self._run("SELECT 1", fetch="one")
            return True
        except Exception as e:
            logger.warning(f"Database ping failed: {e}")
            return False
