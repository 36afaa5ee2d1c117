from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError, RepositoryError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


def translate_error(err: mysql.connector.Error, what: str) -> Exception:
    """Map a driver error to a domain exception; the caller chains it with ``from``."""
    if getattr(err, "errno", None) == errorcode.ER_DUP_ENTRY:
        return ConflictError(f"Duplicate value while trying to {what}")
    return RepositoryError(f"Failed to {what}")


@contextmanager
def db_transaction(conn_factory: DatabaseConnection, what: str, *, dictionary: bool = True):
    """One connection, one transaction: every statement in the block commits or none does."""
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as err:
        logger.error("Cannot connect to database to %s: %s", what, err)
        raise RepositoryError(f"Failed to {what}") from err
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as err:
        conn.rollback()
        logger.error("Database error while trying to %s: %s", what, err)
        raise translate_error(err, what) from err
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


def where_clause(filters: Sequence[tuple[str, Any]], *, alias: str = "") -> tuple[str, list]:
    """Build ``WHERE`` from (column, value) pairs, skipping None values."""
    clauses = ["1=1"]
    params: list = []
    prefix = f"{alias}." if alias else ""
    for column, value in filters:
        if value is None:
            continue
        clauses.append(f"{prefix}{column}=%s")
        params.append(getattr(value, "value", value))
    return " AND ".join(clauses), params


def count(cur, table: str, where: str, params: list) -> int:
    cur.execute(f"SELECT COUNT(*) AS total FROM {table} WHERE {where}", tuple(params))
    row = fetchone(cur)
    return int(row["total"]) if row else 0
