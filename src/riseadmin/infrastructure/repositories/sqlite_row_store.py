import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Tuple

from ...domain.query import RowQuery
from ...domain.repositories import IRowStore, Row
from ...errors import DatabaseError
from ..db.pool import ConnectionPool

_LOGGER = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_sql(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    return value


class SQLiteRowStore(IRowStore):
    """:class:`IRowStore` backed by the pooled SQLite database.

    Table and column names are checked against the live schema before they are
    interpolated into SQL; values are always bound as parameters.
    """

    def __init__(self, pool: ConnectionPool):
        self._pool = pool
        self._columns: Dict[str, Tuple[str, ...]] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # IRowStore
    # ------------------------------------------------------------------
    def select(self, table: str, query: RowQuery) -> List[Row]:
        columns = self._known_columns(table)
        selected = query.columns or list(columns)
        self._check_columns(table, selected)
        where, params = self._where(table, query.filters)
        sql = f"SELECT {', '.join(selected)} FROM {table}{where}"

        terms: List[str] = []
        for term in query.ordering:
            self._check_columns(table, [term.column])
            if term.nulls_first is not None:
                terms.append(f"({term.column} IS NULL) {'DESC' if term.nulls_first else 'ASC'}")
            terms.append(f"{term.column} {term.order.value}")
        if terms:
            sql += " ORDER BY " + ", ".join(terms)
        if query.limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([int(query.limit), int(query.offset)])
        elif query.offset:
            sql += " LIMIT -1 OFFSET ?"
            params.append(int(query.offset))

        with self._pool.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [dict(row) for row in rows]

    def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        columns = self._known_columns(table)
        payload = dict(values)
        if "id" in columns and not payload.get("id"):
            payload["id"] = str(uuid.uuid4())
        now = _utc_now()
        for stamp in ("created_at", "updated_at"):
            if stamp in columns and not payload.get(stamp):
                payload[stamp] = now
        self._check_columns(table, payload.keys())

        names = list(payload)
        placeholders = ", ".join("?" for _ in names)
        sql = f"INSERT INTO {table} ({', '.join(names)}) VALUES ({placeholders})"
        with self._pool.connection() as conn:
            conn.execute(sql, [_to_sql(payload[name]) for name in names])
        _LOGGER.debug("Inserted row into %s", table)

        if "id" in payload:
            stored = self.select(table, RowQuery().eq("id", payload["id"]))
            if stored:
                return stored[0]
        return payload

    def update(self, table: str, values: Mapping[str, Any], eq: Mapping[str, Any]) -> int:
        if not eq:
            raise DatabaseError(f"Refusing to update every row of {table}")
        columns = self._known_columns(table)
        payload = dict(values)
        if "updated_at" in columns and "updated_at" not in payload:
            payload["updated_at"] = _utc_now()
        if not payload:
            return 0
        self._check_columns(table, payload.keys())
        assignments = ", ".join(f"{name} = ?" for name in payload)
        where, params = self._where(table, eq)
        sql = f"UPDATE {table} SET {assignments}{where}"
        with self._pool.connection() as conn:
            cursor = conn.execute(sql, [_to_sql(v) for v in payload.values()] + params)
            return cursor.rowcount

    def delete(self, table: str, eq: Mapping[str, Any]) -> int:
        if not eq:
            raise DatabaseError(f"Refusing to delete every row of {table}")
        where, params = self._where(table, eq)
        with self._pool.connection() as conn:
            cursor = conn.execute(f"DELETE FROM {table}{where}", params)
            return cursor.rowcount

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _known_columns(self, table: str) -> Tuple[str, ...]:
        with self._lock:
            cached = self._columns.get(table)
        if cached is not None:
            return cached
        with self._pool.connection() as conn:
            exists = conn.execute(
                "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
            ).fetchone()
            if not exists:
                raise DatabaseError(f"Unknown table: {table}")
            rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
        columns = tuple(row["name"] for row in rows)
        with self._lock:
            self._columns[table] = columns
        return columns

    def _check_columns(self, table: str, names) -> None:
        known = self._known_columns(table)
        unknown = [name for name in names if name not in known]
        if unknown:
            raise DatabaseError(f"Unknown column(s) for {table}: {', '.join(sorted(unknown))}")

    def _where(self, table: str, filters: Mapping[str, Any]) -> Tuple[str, List[Any]]:
        if not filters:
            return "", []
        self._check_columns(table, filters.keys())
        clauses: List[str] = []
        params: List[Any] = []
        for column, value in filters.items():
            if value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = ?")
                params.append(_to_sql(value))
        return " WHERE " + " AND ".join(clauses), params


__all__ = ["SQLiteRowStore"]
