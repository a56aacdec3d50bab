from __future__ import annotations

import re
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

"""Batched INSERT via psycopg2.extras.execute_values.

Used by PostgresGateway for every insert: a loading paper's items go in as one
statement, and ``RETURNING *`` hands back the generated ids (the header insert
needs its id before the items can reference it).
"""

__all__ = [
    "BatchInsertError",
    "BatchMetrics",
    "InsertResult",
    "quote_ident",
    "batch_insert",
]

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of a single execute_values call."""
    batch_size: int
    elapsed_seconds: float
    start_time: float
    end_time: float


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    returned_rows: list[dict[str, Any]] | None = None


def quote_ident(name: str) -> str:
    """Double-quote a table/column name after checking it is a plain identifier."""
    if not _IDENT.match(name):
        raise BatchInsertError(f"invalid identifier: {name!r}")
    return f'"{name}"'


def _column_names(cursor: Any) -> list[str]:
    description = getattr(cursor, "description", None) or []
    return [d[0] for d in description]


def batch_insert(
    cursor: Any,
    table: str,
    rows: Iterable[Mapping[str, Any]],
    columns: Sequence[str] | None = None,
    returning: bool = False,
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Insert dict rows with one execute_values call.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table
    rows: row dicts; missing keys are inserted as NULL
    columns: column order (default: keys of the first row)
    returning: append ``RETURNING *`` and return the stored rows as dicts
    page_size: execute_values page size
    metrics_callback: receives BatchMetrics after the call (not invoked for empty input)
    """
    rows_list = [dict(r) for r in rows]
    if not rows_list:
        return InsertResult(inserted_rows=0, returned_rows=[] if returning else None)

    cols = list(columns) if columns is not None else list(rows_list[0].keys())
    cols_sql = ",".join(quote_ident(c) for c in cols)
    sql = f"INSERT INTO {quote_ident(table)} ({cols_sql}) VALUES %s"
    if returning:
        sql += " RETURNING *"
    values = [tuple(r.get(c) for c in cols) for r in rows_list]

    start_time = time.time()
    try:
        # fetch=True: page_size を超えても全ページ分の RETURNING 行を回収する
        fetched = execute_values(cursor, sql, values, page_size=page_size, fetch=returning)
    except Exception as e:
        raise BatchInsertError(str(e)) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(rows_list),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )

    returned = None
    if returning:
        names = _column_names(cursor)
        returned = [dict(zip(names, rec, strict=False)) for rec in (fetched or [])]

    return InsertResult(inserted_rows=len(rows_list), returned_rows=returned)
