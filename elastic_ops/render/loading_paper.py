from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from html import escape

import pandas as pd

from ..config.loader import CompanyConfig
from ..models.loading_paper import ColumnVisibility, LineItem, LoadingPaperDocument
from .formatting import (
    extract_display_name,
    fmt_date,
    fmt_number,
    fmt_weight,
    gross_weight_per_unit,
    net_weight_per_unit,
)
from .printing import PrintableDocument

"""Loading paper table projection and its printable page.

``render_loading_paper`` is a pure projection of the document: it never
changes the document and the per-carton weights it shows are not stored.
"""

__all__ = [
    "LEADING_COLUMNS",
    "TRAILING_COLUMNS",
    "REMARKS_COLUMN",
    "RenderedTable",
    "render_loading_paper",
    "to_frame",
    "to_html",
]

# (ColumnVisibility field, heading)
LEADING_COLUMNS = (
    ("sr", "Sr"),
    ("po_no", "PO No"),
    ("job_no", "Job No"),
    ("dc_no", "DC No"),
    ("item", "Item"),
)
TRAILING_COLUMNS = (
    ("pack", "Pack"),
    ("qty", "Qty"),
    ("unit", "Unit"),
    ("net_weight", "Net. Weight"),
    ("net_weight_per_ctn", "Net Wt/Ctn"),
    ("gross_weight_per_ctn", "Gross Wt/Ctn"),
)
REMARKS_COLUMN = "Remarks"
TOTALS_LABEL = "Totals"


@dataclass(frozen=True)
class RenderedTable:
    """Display-ready strings for one render.

    ``totals_span`` is the number of visible leading columns the totals label
    covers; ``totals_cells`` line up with the visible columns after them
    (Remarks included).
    """
    date: str
    customer_name: str
    customer_address: str
    remarks: str
    header_note: str
    columns: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    totals_span: int
    totals_cells: tuple[str, ...]


def _cell(field_name: str, item: LineItem, display_name: Callable[[str], str]) -> str:
    if field_name == "sr":
        return str(item.sr)
    if field_name == "po_no":
        return item.po_no or "-"
    if field_name == "job_no":
        return item.job_no
    if field_name == "dc_no":
        return item.dc_no or "-"
    if field_name == "item":
        return item.edited_item_name if item.edited_item_name is not None else display_name(item.detail_name)
    if field_name == "pack":
        return fmt_number(item.pack)
    if field_name == "qty":
        return fmt_number(item.qty)
    if field_name == "unit":
        return item.unit
    if field_name == "net_weight":
        return fmt_weight(item.weight)
    if field_name == "net_weight_per_ctn":
        return fmt_weight(net_weight_per_unit(item.weight, item.pack))
    if field_name == "gross_weight_per_ctn":
        return fmt_weight(gross_weight_per_unit(item.weight, item.pack))
    raise KeyError(field_name)


def render_loading_paper(
    document: LoadingPaperDocument,
    visibility: ColumnVisibility | None = None,
    display_name: Callable[[str], str] = extract_display_name,
) -> RenderedTable:
    """Project ``document`` onto the visible columns.

    Args:
        document: Current loading paper
        visibility: Column mask (default: everything shown)
        display_name: Item label rule applied when no edited name is set

    Returns:
        RenderedTable with one row per item plus the totals cells
    """
    vis = visibility or ColumnVisibility()
    leading = [(f, h) for f, h in LEADING_COLUMNS if getattr(vis, f)]
    trailing = [(f, h) for f, h in TRAILING_COLUMNS if getattr(vis, f)]
    shown = leading + trailing

    columns = tuple(h for _, h in shown) + (REMARKS_COLUMN,)
    rows = tuple(
        tuple(_cell(f, it, display_name) for f, _ in shown) + (it.remarks,)
        for it in document.items
    )

    totals = document.totals
    totals_by_field = {
        "pack": fmt_number(totals.pack),
        "qty": fmt_number(totals.qty),
        "net_weight": fmt_weight(totals.weight),
    }
    totals_cells = tuple(totals_by_field.get(f, "") for f, _ in trailing) + ("",)

    header = document.header
    return RenderedTable(
        date=fmt_date(header.date),
        customer_name=header.acc_name,
        customer_address=header.acc_address,
        remarks=header.remarks,
        header_note=header.header_note,
        columns=columns,
        rows=rows,
        totals_span=len(leading),
        totals_cells=totals_cells,
    )


def to_frame(table: RenderedTable) -> pd.DataFrame:
    return pd.DataFrame(list(table.rows), columns=list(table.columns))


def _totals_row(table: RenderedTable) -> str:
    cells = []
    if table.totals_span:
        cells.append(f'<td colspan="{table.totals_span}">{TOTALS_LABEL}</td>')
    cells.extend(f"<td>{escape(c)}</td>" for c in table.totals_cells)
    return "<tfoot>\n<tr>" + "".join(cells) + "</tr>\n</tfoot>"


def _items_html(table: RenderedTable) -> str:
    html = to_frame(table).to_html(index=False, border=0, classes="items", escape=True)
    return html.replace("</tbody>", "</tbody>\n" + _totals_row(table), 1)


def to_html(table: RenderedTable, company: CompanyConfig) -> PrintableDocument:
    """Landscape loading paper page (letterhead, customer block, items, footer)."""
    contact = " | ".join(escape(p) for p in (company.address, company.email) if p)
    body = f"""<div class="bar"></div>
<div class="page loading-paper">
  <header class="grid grid-2">
    <div>
      <h1>{escape(company.name)}</h1>
      <div class="muted">Loading Paper</div>
    </div>
    <div style="text-align:right"><span class="label">Date:</span> {escape(table.date)}</div>
  </header>
  <section class="grid grid-2" style="margin:12px 0">
    <div class="card">
      <div class="label">Customer</div>
      <div><strong>{escape(table.customer_name)}</strong></div>
      <div class="muted">{escape(table.customer_address)}</div>
    </div>
    <div class="card">
      <div class="label">Remarks / Vehicle</div>
      <div>{escape(table.remarks or "-")}</div>
      <div class="label" style="margin-top:8px">Additional Note</div>
      <div><strong>{escape(table.header_note)}</strong></div>
    </div>
  </section>
  <section>
    <div class="label">Items</div>
    {_items_html(table)}
  </section>
  <footer>
    <div>Prepared by: {escape(company.name)} | Logistics Department</div>
    <div>{contact}</div>
  </footer>
</div>
<div class="bar"></div>"""
    return PrintableDocument(title=f"Loading Paper {table.customer_name}".strip(), body=body)
