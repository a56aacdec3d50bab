from __future__ import annotations

import copy
import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

"""Persistence gateway interface.

Services only talk to a ``Gateway``; exactly one implementation is injected per
run (PostgresGateway in live mode, MemoryGateway in mock mode and tests).

Operations are record oriented: rows are plain dicts keyed by column name and
filters are equality matches (``{"paper_id": "..."}``). Any store failure is
raised as GatewayError; there are no retries.
"""

__all__ = [
    "GatewayError",
    "RecordNotFoundError",
    "Gateway",
    "MemoryGateway",
    "TABLES",
]

# 既知テーブル (MemoryGateway はこれ以外を拒否する)
TABLES = ("products", "shrinkage_reports", "loading_papers", "loading_paper_items")


class GatewayError(Exception):
    """Any failure reported by the backing store."""


class RecordNotFoundError(GatewayError):
    """A lookup by id matched no stored row."""


class Gateway(ABC):
    """Record store used by the catalog, report and loading paper services."""

    @abstractmethod
    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Insert rows and return them as stored (with generated ``id``)."""

    @abstractmethod
    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        """Return rows matching all equality filters, optionally ordered."""

    @abstractmethod
    def update(
        self, table: str, values: Mapping[str, Any], *, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        """Update matching rows and return them as stored."""

    @abstractmethod
    def delete(self, table: str, *, filters: Mapping[str, Any]) -> int:
        """Delete matching rows and return how many were removed."""

    def close(self) -> None:  # pragma: no cover - nothing to release by default
        pass


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class MemoryGateway(Gateway):
    """In-process store (mock mode).

    Generates uuid4 string ids and ``created_at`` stamps the way the hosted
    store does. Returned rows are copies, so callers cannot alias stored state.
    """

    def __init__(self) -> None:
        self._tables: dict[str, list[dict[str, Any]]] = {name: [] for name in TABLES}
        self._seq = 0

    def _table(self, table: str) -> list[dict[str, Any]]:
        try:
            return self._tables[table]
        except KeyError:
            raise GatewayError(f'relation "{table}" does not exist') from None

    @staticmethod
    def _matches(row: Mapping[str, Any], filters: Mapping[str, Any] | None) -> bool:
        if not filters:
            return True
        return all(row.get(k) == v for k, v in filters.items())

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        store = self._table(table)
        stored: list[dict[str, Any]] = []
        for row in rows:
            self._seq += 1
            record = {"id": str(uuid.uuid4()), "created_at": _now(), **dict(row)}
            # 同一タイムスタンプでも挿入順で並べられるように内部連番を持つ
            record["_seq"] = self._seq
            stored.append(record)
        store.extend(stored)
        return [self._public(r) for r in stored]

    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        rows = [r for r in self._table(table) if self._matches(r, filters)]
        if order_by is not None:
            rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by), r["_seq"]), reverse=descending)
        return [self._public(r) for r in rows]

    def update(
        self, table: str, values: Mapping[str, Any], *, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        changed = []
        for row in self._table(table):
            if self._matches(row, filters):
                row.update(values)
                if "updated_at" in row:
                    row["updated_at"] = _now()
                changed.append(self._public(row))
        return changed

    def delete(self, table: str, *, filters: Mapping[str, Any]) -> int:
        store = self._table(table)
        keep = [r for r in store if not self._matches(r, filters)]
        removed = len(store) - len(keep)
        store[:] = keep
        return removed

    @staticmethod
    def _public(row: Mapping[str, Any]) -> dict[str, Any]:
        out = copy.deepcopy(dict(row))
        out.pop("_seq", None)
        return out
