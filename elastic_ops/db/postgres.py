from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

import psycopg2

from .batch_insert import BatchMetrics, batch_insert, quote_ident
from .gateway import Gateway, GatewayError

"""PostgreSQL implementation of the persistence gateway (psycopg2).

Each gateway call runs in its own transaction: commit on success, rollback and
GatewayError on failure. The two-step loading paper save is therefore two
transactions; see services.loading_paper_store for how a failed second step
is handled.
"""

__all__ = [
    "PostgresGateway",
]

logger = logging.getLogger(__name__)


def _where(filters: Mapping[str, Any] | None) -> tuple[str, list[Any]]:
    if not filters:
        return "", []
    clauses = [f"{quote_ident(k)} = %s" for k in filters]
    return " WHERE " + " AND ".join(clauses), list(filters.values())


def _rows_as_dicts(cursor: Any) -> list[dict[str, Any]]:
    names = [d[0] for d in (cursor.description or [])]
    return [dict(zip(names, rec, strict=False)) for rec in cursor.fetchall()]


class PostgresGateway(Gateway):
    """Gateway over one psycopg2 connection (autocommit off)."""

    def __init__(self, connection: Any, *, page_size: int = 1000) -> None:
        self._conn = connection
        self._page_size = page_size

    @classmethod
    def connect(cls, dsn: str) -> PostgresGateway:
        try:
            conn = psycopg2.connect(dsn)
        except Exception as e:
            raise GatewayError(f"connection failed: {e}") from e
        conn.autocommit = False
        return cls(conn)

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Any]:
        cur = self._conn.cursor()
        try:
            yield cur
            self._conn.commit()
        except Exception as e:
            try:
                self._conn.rollback()
            except Exception:  # pragma: no cover - connection already broken
                logger.debug("rollback failed after %s", action, exc_info=True)
            if isinstance(e, GatewayError):
                raise
            raise GatewayError(f"{action}: {e}") from e
        finally:
            cur.close()

    @staticmethod
    def _log_metrics(metrics: BatchMetrics) -> None:
        logger.debug("execute_values rows=%d elapsed=%.4fs", metrics.batch_size, metrics.elapsed_seconds)

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return []
        with self._transaction(f"insert {table}") as cur:
            result = batch_insert(
                cur,
                table,
                rows,
                returning=True,
                page_size=self._page_size,
                metrics_callback=self._log_metrics,
            )
        return result.returned_rows or []

    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        with self._transaction(f"select {table}") as cur:
            where, params = _where(filters)
            sql = f"SELECT * FROM {quote_ident(table)}{where}"
            if order_by:
                sql += f" ORDER BY {quote_ident(order_by)}{' DESC' if descending else ''}"
            cur.execute(sql, params)
            return _rows_as_dicts(cur)

    def update(
        self, table: str, values: Mapping[str, Any], *, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        if not values:
            raise GatewayError(f"update {table}: nothing to update")
        with self._transaction(f"update {table}") as cur:
            set_sql = ", ".join(f"{quote_ident(k)} = %s" for k in values)
            where, params = _where(filters)
            sql = f"UPDATE {quote_ident(table)} SET {set_sql}{where} RETURNING *"
            cur.execute(sql, [*values.values(), *params])
            return _rows_as_dicts(cur)

    def delete(self, table: str, *, filters: Mapping[str, Any]) -> int:
        if not filters:
            # 全件削除は許可しない
            raise GatewayError(f"delete {table}: refusing to delete without filters")
        with self._transaction(f"delete {table}") as cur:
            where, params = _where(filters)
            cur.execute(f"DELETE FROM {quote_ident(table)}{where}", params)
            return cur.rowcount

    def close(self) -> None:
        try:
            self._conn.close()
        except Exception:  # pragma: no cover
            logger.debug("connection close failed", exc_info=True)
