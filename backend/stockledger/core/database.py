"""
PostgreSQL connections (psycopg2)

Used by the postgres storage backend. Connections are opened per
transaction and closed by the caller.
"""
import time
import logging

import psycopg2
from psycopg2.extras import RealDictCursor

from .config import settings

logger = logging.getLogger(__name__)

CONNECTION_TIMEOUT = settings.CONNECTION_TIMEOUT


def _database_url(database_url=None):
    url = database_url or settings.DATABASE_URL
    if not url:
        raise Exception("DATABASE_URL not configured")
    return url


def get_db_connection_with_retry(database_url=None, max_retries=None, retry_delay=None,
                                 cursor_factory=RealDictCursor):
    """
    Get a psycopg2 connection with automatic retry on connection failures

    Retries failed connections up to max_retries times with exponential
    backoff between attempts. Rows come back as dicts by default.

    Args:
        database_url: Connection string (default: settings.DATABASE_URL)
        max_retries: Maximum number of connection attempts (default: settings.DB_CONNECT_RETRIES)
        retry_delay: Initial delay between retries in seconds (default: settings.DB_RETRY_DELAY)
        cursor_factory: psycopg2 cursor factory for the connection

    Returns:
        psycopg2 connection object

    Raises:
        psycopg2.OperationalError: If all retry attempts fail

    Example:
        conn = get_db_connection_with_retry()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM records")
        results = cursor.fetchall()
        cursor.close()
        conn.close()
    """
    url = _database_url(database_url)
    max_retries = max_retries or settings.DB_CONNECT_RETRIES
    retry_delay = settings.DB_RETRY_DELAY if retry_delay is None else retry_delay

    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            conn = psycopg2.connect(
                url,
                cursor_factory=cursor_factory,
                connect_timeout=CONNECTION_TIMEOUT,
            )
            logger.debug(f"Database connection successful on attempt {attempt}")
            return conn

        except psycopg2.OperationalError as e:
            last_error = e
            error_msg = str(e)

            if "SSL connection has been closed unexpectedly" in error_msg:
                logger.warning(f"SSL connection error on attempt {attempt}/{max_retries}: {error_msg}")
            else:
                logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {error_msg}")

            # Don't retry on last attempt
            if attempt < max_retries:
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")
                raise last_error

    raise last_error if last_error else Exception("Connection failed after all retries")
