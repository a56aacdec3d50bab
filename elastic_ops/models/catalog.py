from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

"""Product catalog and shrinkage report records as stored by the gateway."""

__all__ = [
    "Product",
    "ShrinkageReport",
]


@dataclass(frozen=True)
class Product:
    id: str
    product_code: str
    description: str
    width: str  # e.g. "20MM"
    color: str
    created_at: str | None = None

    @staticmethod
    def from_row(row: dict[str, Any]) -> Product:
        return Product(
            id=str(row.get("id", "")),
            product_code=str(row.get("product_code") or ""),
            description=str(row.get("description") or ""),
            width=str(row.get("width") or ""),
            color=str(row.get("color") or ""),
            created_at=_opt_str(row.get("created_at")),
        )

    @property
    def label(self) -> str:
        return f"{self.product_code} - {self.description} {self.width} {self.color}"


@dataclass(frozen=True)
class ShrinkageReport:
    """Laboratory shrinkage test certificate."""
    id: str
    product_code: str
    po_number: str
    dc_number: str
    date: str
    item_number: str
    product_description: str
    color: str
    shrinkage_requirement: str
    temp: str
    dimensional_change: str
    ph: str
    result: str  # "Pass" / "Fail"
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def passed(self) -> bool:
        return self.result == "Pass"

    @staticmethod
    def from_row(row: dict[str, Any]) -> ShrinkageReport:
        text = {
            k: str(row.get(k) or "")
            for k in (
                "product_code",
                "po_number",
                "dc_number",
                "date",
                "item_number",
                "product_description",
                "color",
                "shrinkage_requirement",
                "temp",
                "dimensional_change",
                "ph",
                "result",
            )
        }
        return ShrinkageReport(
            id=str(row.get("id", "")),
            created_at=_opt_str(row.get("created_at")),
            updated_at=_opt_str(row.get("updated_at")),
            **text,
        )

    def to_row(self) -> dict[str, Any]:
        row = asdict(self)
        for key in ("id", "created_at", "updated_at"):
            row.pop(key)
        return row


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
