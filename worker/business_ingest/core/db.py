"""Database helpers for the ``businesses`` table.

The pipeline relies on four capabilities only: a name lookup for dedup, a
multi-row insert, a single-row insert and a by-name existence check. Rows
are never updated or deleted here. A unique index on ``businesses.name`` is
expected so that concurrent writers surface SQLSTATE 23505.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Set

import psycopg2
import psycopg2.errors
from psycopg2 import errorcodes, extras, pool

from business_ingest.core.config import get_settings

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.SimpleConnectionPool] = None

COLUMNS = (
    "name",
    "description",
    "category",
    "address",
    "city",
    "country",
    "phone",
    "website",
    "profile_url",
    "is_verified",
    "verification_status",
    "our_rating",
    "our_reviews_count",
)

_INSERT_PREFIX = f"INSERT INTO businesses ({', '.join(COLUMNS)}) VALUES "
_ROW_TEMPLATE = "(" + ", ".join(f"%({column})s" for column in COLUMNS) + ")"

_INSERT_MANY = _INSERT_PREFIX + "%s RETURNING id"
_INSERT_ONE = _INSERT_PREFIX + _ROW_TEMPLATE + " RETURNING id"
_SELECT_EXISTING_NAMES = "SELECT name FROM businesses WHERE name = ANY(%s)"
_SELECT_ID_BY_NAME = "SELECT id FROM businesses WHERE name = %s LIMIT 1"


def init_pool(minconn: int = 1, maxconn: int = 5) -> pool.SimpleConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for database connections")
        _connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


def is_unique_violation(exc: BaseException) -> bool:
    if isinstance(exc, psycopg2.errors.UniqueViolation):
        return True
    return isinstance(exc, psycopg2.Error) and exc.pgcode == errorcodes.UNIQUE_VIOLATION


def _prepare_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {column: row.get(column) for column in COLUMNS}


def find_existing_names(names: Iterable[str]) -> Set[str]:
    """Return the subset of ``names`` already present in storage."""
    wanted = sorted({name for name in names if name})
    if not wanted:
        return set()

    with get_connection() as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(_SELECT_EXISTING_NAMES, (wanted,))
                rows = cur.fetchall()
        finally:
            conn.rollback()
    return {row[0] for row in rows}


def find_business_id(name: str) -> Optional[int]:
    with get_connection() as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(_SELECT_ID_BY_NAME, (name,))
                row = cur.fetchone()
        finally:
            conn.rollback()
    return row[0] if row else None


def insert_businesses(rows: List[Dict[str, Any]]) -> List[int]:
    """Insert all rows in a single statement and transaction.

    Any failure rolls the whole statement back and is re-raised.
    """
    if not rows:
        return []

    params = [_prepare_row(row) for row in rows]
    with get_connection() as conn:
        try:
            with conn.cursor() as cur:
                returned = extras.execute_values(
                    cur,
                    _INSERT_MANY,
                    params,
                    template=_ROW_TEMPLATE,
                    page_size=len(params),
                    fetch=True,
                )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
    logger.debug("Inserted %d businesses", len(returned))
    return [row[0] for row in returned]


def insert_business(row: Dict[str, Any]) -> int:
    """Insert one row; unique violations propagate as psycopg2 errors."""
    params = _prepare_row(row)
    if not params["name"]:
        raise ValueError("name is required for insert")

    with get_connection() as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(_INSERT_ONE, params)
                new_id = cur.fetchone()[0]
            conn.commit()
        except Exception:
            conn.rollback()
            raise
    logger.debug("Inserted business %s", params["name"])
    return new_id
