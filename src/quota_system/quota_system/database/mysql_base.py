from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import InternalError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("Database connection failed: %s", exc)
        raise InternalError("Database unavailable") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            # Bounds every SELECT issued on this connection.
            cur.execute("SET SESSION MAX_EXECUTION_TIME=%s", (int(conn_factory.statement_timeout_ms),))
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        logger.error("Database statement failed: %s", exc)
        raise InternalError("Database error") from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def load_json(value: Any, default: Any = None) -> Any:
    """Normalize JSON column values across connector implementations.

    mysql-connector can return JSON as:
    - str
    - bytes / bytearray
    - already-decoded dict/list (C extension)
    """

    if value is None:
        return default

    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")

    if isinstance(value, str):
        return json.loads(value) if value else default

    return value


def dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)
