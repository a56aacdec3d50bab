from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from ..db.gateway import Gateway, GatewayError, RecordNotFoundError
from ..models.loading_paper import (
    DocumentHeader,
    LineItem,
    LoadingPaperDocument,
    SavedPaper,
    compute_totals,
)
from .normalizer import to_number, to_text

"""Saving and reloading loading papers through the gateway.

A save is two inserts: the header row into ``loading_papers`` (its generated id
is needed first), then every line into ``loading_paper_items`` with that id as
``paper_id``. If the second insert fails the header row is deleted again so no
paper is left without its items; the caller sees one GatewayError either way.
"""

__all__ = [
    "PAPERS_TABLE",
    "ITEMS_TABLE",
    "header_payload",
    "items_payload",
    "save_loading_paper",
    "list_loading_papers",
    "load_loading_paper",
    "delete_loading_paper",
]

logger = logging.getLogger(__name__)

PAPERS_TABLE = "loading_papers"
ITEMS_TABLE = "loading_paper_items"


def header_payload(header: DocumentHeader) -> dict[str, Any]:
    return asdict(header)


def items_payload(document: LoadingPaperDocument, paper_id: str) -> list[dict[str, Any]]:
    rows = []
    for it in document.items:
        row = asdict(it)
        row["paper_id"] = paper_id
        rows.append(row)
    return rows


def save_loading_paper(gateway: Gateway, document: LoadingPaperDocument) -> str:
    """Store a snapshot of ``document`` and return the new paper id.

    Raises:
        GatewayError: Either insert failed (header row removed again if it was created)
    """
    stored = gateway.insert(PAPERS_TABLE, [header_payload(document.header)])
    paper_id = stored[0].get("id") if stored else None
    if not paper_id:
        raise GatewayError("Failed to create loading paper")

    if not document.items:
        return str(paper_id)
    try:
        gateway.insert(ITEMS_TABLE, items_payload(document, str(paper_id)))
    except GatewayError as e:
        try:
            gateway.delete(PAPERS_TABLE, filters={"id": paper_id})
        except GatewayError as cleanup_error:
            logger.warning("orphan loading paper %s left after failed item insert: %s", paper_id, cleanup_error)
            raise GatewayError(f"save loading paper: {e} (cleanup failed: {cleanup_error})") from e
        raise GatewayError(f"save loading paper: {e}") from e

    logger.debug("saved loading paper id=%s items=%d", paper_id, len(document.items))
    return str(paper_id)


def _saved_paper(row: dict[str, Any]) -> SavedPaper:
    created = row.get("created_at")
    return SavedPaper(
        id=str(row.get("id", "")),
        dc_no=to_text(row.get("dc_no")),
        po_no=to_text(row.get("po_no")),
        date=to_text(row.get("date")),
        acc_name=to_text(row.get("acc_name")),
        created_at=None if created is None else to_text(created),
    )


def list_loading_papers(gateway: Gateway) -> list[SavedPaper]:
    """Stored papers, newest first."""
    rows = gateway.select(PAPERS_TABLE, order_by="created_at", descending=True)
    return [_saved_paper(r) for r in rows]


def _item_from_row(row: dict[str, Any]) -> LineItem:
    edited = row.get("edited_item_name")
    return LineItem(
        sr=int(row.get("sr") or 0),
        detail_name=to_text(row.get("detail_name")),
        unit=to_text(row.get("unit")),
        job_no=to_text(row.get("job_no")),
        pack=to_number(row.get("pack")),
        qty=to_number(row.get("qty")),
        weight=to_number(row.get("weight")),
        po_no=to_text(row.get("po_no")),
        dc_no=to_text(row.get("dc_no")),
        remarks=to_text(row.get("remarks")),
        edited_item_name=edited or None,
    )


def load_loading_paper(gateway: Gateway, paper_id: str) -> LoadingPaperDocument:
    """Rebuild a document from the store; items in stored ``sr`` order, totals refolded.

    Raises:
        RecordNotFoundError: No paper with ``paper_id``
    """
    headers = gateway.select(PAPERS_TABLE, filters={"id": paper_id})
    if not headers:
        raise RecordNotFoundError(f"loading paper not found: {paper_id}")
    row = headers[0]
    header = DocumentHeader(
        dc_no=to_text(row.get("dc_no")),
        po_no=to_text(row.get("po_no")),
        date=to_text(row.get("date")),
        acc_name=to_text(row.get("acc_name")),
        acc_address=to_text(row.get("acc_address")),
        remarks=to_text(row.get("remarks")),
        header_note=to_text(row.get("header_note")),
    )
    item_rows = gateway.select(ITEMS_TABLE, filters={"paper_id": paper_id}, order_by="sr")
    items = tuple(_item_from_row(r) for r in item_rows)
    return LoadingPaperDocument(header=header, items=items, totals=compute_totals(items))


def delete_loading_paper(gateway: Gateway, paper_id: str) -> None:
    """Delete the items, then the header row.

    Raises:
        RecordNotFoundError: No paper with ``paper_id``
    """
    removed_items = gateway.delete(ITEMS_TABLE, filters={"paper_id": paper_id})
    removed = gateway.delete(PAPERS_TABLE, filters={"id": paper_id})
    if not removed:
        raise RecordNotFoundError(f"loading paper not found: {paper_id}")
    logger.debug("deleted loading paper id=%s items=%d", paper_id, removed_items)
