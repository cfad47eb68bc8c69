# utils/db.py
"""
Supabase Postgres access.

One pooled SQLAlchemy engine per process, created on first use. Query
classes in utils/order_ranking read through it with pandas and write inside
get_transaction(); auth uses the two small execute helpers for profiles.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote_plus

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import QueuePool

from .config import config

logger = logging.getLogger(__name__)

_engine = None
_engine_lock = threading.Lock()


def get_db_engine():
    """Shared engine; built once under a lock."""
    global _engine

    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = _build_engine()

    return _engine


def _build_engine():
    db = config.get_db_config()
    settings = config.app_config

    dsn = "postgresql+psycopg2://{user}:{password}@{host}:{port}/{database}"
    pool_size = settings.get("DB_POOL_SIZE", 5)
    pool_recycle = settings.get("DB_POOL_RECYCLE", 1800)

    logger.info(f"🔌 Connecting to Supabase Postgres at {db['host']}:{db['port']}/{db['database']}")

    return create_engine(
        dsn.format(
            user=db["user"],
            password=quote_plus(str(db["password"])),
            host=db["host"],
            port=db["port"],
            database=db["database"],
        ),
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,
        connect_args={"sslmode": "require"},
    )


def check_db_connection() -> Tuple[bool, Optional[str]]:
    """
    Round-trip a trivial query.

    Returns:
        (True, None) when reachable, otherwise (False, message for the page)
    """
    try:
        with get_db_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, None
    except OperationalError as e:
        logger.error(f"❌ Database unreachable: {e}")
        return False, "Cannot connect to database. Please check your network connection."
    except Exception as e:
        logger.error(f"❌ Database error: {e}")
        return False, f"Database error: {e}"


def get_connection_pool_status() -> Dict[str, Any]:
    """Pool counters for the admin status panel."""
    if _engine is None:
        return {"status": "not_initialized"}

    pool = _engine.pool
    try:
        return {
            "status": "active",
            "pool_size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        }
    except AttributeError:
        # non-queue pools (tests) do not keep counters
        return {"status": "active", "pool": type(pool).__name__}


@contextmanager
def get_transaction():
    """
    Connection with an open transaction: committed when the block
    finishes, rolled back if it raises.
    """
    with get_db_engine().begin() as conn:
        yield conn


def execute_query(query: str, params: Dict = None) -> List[Dict]:
    """Run a SELECT and return rows as dicts."""
    with get_db_engine().connect() as conn:
        return [dict(row._mapping) for row in conn.execute(text(query), params or {})]


def execute_update(query: str, params: Dict = None) -> int:
    """Run a single INSERT/UPDATE/DELETE in its own transaction; returns rowcount."""
    with get_transaction() as conn:
        return conn.execute(text(query), params or {}).rowcount


__all__ = [
    'get_db_engine',
    'check_db_connection',
    'get_connection_pool_status',
    'get_transaction',
    'execute_query',
    'execute_update',
]
