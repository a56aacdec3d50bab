from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, fields, replace

"""Loading paper (shipping manifest) domain models.

A LoadingPaperDocument is built once by the normalizer and then replaced, never
mutated, by every edit transition. All classes here are frozen dataclasses so a
transition always yields a new value and the previous document stays intact.
"""

__all__ = [
    "DocumentHeader",
    "LineItem",
    "Totals",
    "LoadingPaperDocument",
    "ColumnVisibility",
    "SavedPaper",
    "compute_totals",
    "renumber",
]


@dataclass(frozen=True)
class DocumentHeader:
    """Header fields derived from the first row of the uploaded data.

    Everything except ``header_note`` is fixed at ingestion time.
    """
    dc_no: str = ""
    po_no: str = ""
    date: str = ""
    acc_name: str = ""
    acc_address: str = ""
    remarks: str = ""  # vehicle / free text carried over from the source row
    header_note: str = ""  # user editable after ingestion


@dataclass(frozen=True)
class LineItem:
    """One manifest line.

    ``sr`` is a view-order index (1..N, no gaps), not an identity: it is
    recomputed after sorting and after every delete.
    """
    sr: int
    detail_name: str = ""
    unit: str = ""
    job_no: str = ""
    pack: float = 0
    qty: float = 0
    weight: float = 0
    po_no: str = ""
    dc_no: str = ""
    remarks: str = ""
    edited_item_name: str | None = None


@dataclass(frozen=True)
class Totals:
    pack: float = 0
    qty: float = 0
    weight: float = 0


@dataclass(frozen=True)
class LoadingPaperDocument:
    header: DocumentHeader
    items: tuple[LineItem, ...]
    totals: Totals

    @property
    def serials(self) -> list[int]:
        return [it.sr for it in self.items]

    def find(self, sr: int) -> LineItem | None:
        for it in self.items:
            if it.sr == sr:
                return it
        return None


@dataclass(frozen=True)
class SavedPaper:
    """Listing entry for a stored loading paper (header columns only)."""
    id: str
    dc_no: str
    po_no: str
    date: str
    acc_name: str
    created_at: str | None = None


@dataclass(frozen=True)
class ColumnVisibility:
    """Per-render column toggles for the printable table (default: all shown)."""
    sr: bool = True
    po_no: bool = True
    job_no: bool = True
    dc_no: bool = True
    item: bool = True
    pack: bool = True
    qty: bool = True
    unit: bool = True
    net_weight: bool = True
    net_weight_per_ctn: bool = True
    gross_weight_per_ctn: bool = True

    @classmethod
    def column_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def hiding(cls, names: Iterable[str]) -> ColumnVisibility:
        """Build a mask with the given columns switched off.

        Raises:
            ValueError: If a name is not a known column
        """
        known = set(cls.column_names())
        hidden = {n.strip().replace("-", "_") for n in names}
        unknown = hidden - known
        if unknown:
            raise ValueError(f"unknown column(s): {sorted(unknown)}; expected one of {sorted(known)}")
        return cls(**{name: False for name in hidden})


def _summable(value: float) -> float:
    try:
        return value if math.isfinite(value) else 0
    except TypeError:
        return 0


def compute_totals(items: Iterable[LineItem]) -> Totals:
    """Elementwise sum of pack/qty/weight; non-finite values count as 0."""
    pack = qty = weight = 0
    for it in items:
        pack += _summable(it.pack)
        qty += _summable(it.qty)
        weight += _summable(it.weight)
    return Totals(pack=pack, qty=qty, weight=weight)


def renumber(items: Iterable[LineItem]) -> tuple[LineItem, ...]:
    """Reassign sr 1..N in the given order."""
    return tuple(replace(it, sr=i) for i, it in enumerate(items, start=1))
