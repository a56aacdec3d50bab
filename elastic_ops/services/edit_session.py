from __future__ import annotations

import logging
from dataclasses import replace

from ..models.loading_paper import LoadingPaperDocument, compute_totals, renumber

"""Edit transitions for a loaded loading paper.

Each function takes the current document and returns the next one; the input
is never modified. An ``sr`` that matches no item returns the input document
itself. Only ``delete_item`` changes the numeric fields, so it is the only
transition that recomputes totals.

EditSession wraps the transitions for callers that keep one live document
(the CLI applies --note/--remark/--delete-sr flags through it).
"""

__all__ = [
    "NoDocumentError",
    "set_header_note",
    "set_item_display_name",
    "set_item_remark",
    "delete_item",
    "EditSession",
]

logger = logging.getLogger(__name__)


class NoDocumentError(Exception):
    """Raised when an edit is requested before a document is loaded."""


def set_header_note(document: LoadingPaperDocument, value: str) -> LoadingPaperDocument:
    return replace(document, header=replace(document.header, header_note=value))


def _set_item_field(document: LoadingPaperDocument, sr: int, **changes: str) -> LoadingPaperDocument:
    if document.find(sr) is None:
        logger.debug("edit ignored: sr=%s not found", sr)
        return document
    items = tuple(replace(it, **changes) if it.sr == sr else it for it in document.items)
    # 数値列は変わらないので totals はそのまま
    return replace(document, items=items)


def set_item_display_name(document: LoadingPaperDocument, sr: int, value: str) -> LoadingPaperDocument:
    """Override the printed item name of line ``sr``."""
    return _set_item_field(document, sr, edited_item_name=value)


def set_item_remark(document: LoadingPaperDocument, sr: int, value: str) -> LoadingPaperDocument:
    """Set the per-line remark of line ``sr``."""
    return _set_item_field(document, sr, remarks=value)


def delete_item(document: LoadingPaperDocument, sr: int) -> LoadingPaperDocument:
    """Remove line ``sr``, renumber the rest in their current order, refold totals."""
    if document.find(sr) is None:
        logger.debug("delete ignored: sr=%s not found", sr)
        return document
    items = renumber(it for it in document.items if it.sr != sr)
    return replace(document, items=items, totals=compute_totals(items))


class EditSession:
    """Holds the single live document for one interaction sequence.

    A new ``load`` replaces the previous document wholesale.
    """

    def __init__(self, document: LoadingPaperDocument | None = None) -> None:
        self._document = document

    @property
    def document(self) -> LoadingPaperDocument:
        if self._document is None:
            raise NoDocumentError("no loading paper loaded")
        return self._document

    @property
    def loaded(self) -> bool:
        return self._document is not None

    def load(self, document: LoadingPaperDocument) -> None:
        self._document = document

    def reset(self) -> None:
        self._document = None

    def set_header_note(self, value: str) -> LoadingPaperDocument:
        self._document = set_header_note(self.document, value)
        return self._document

    def set_item_display_name(self, sr: int, value: str) -> LoadingPaperDocument:
        self._document = set_item_display_name(self.document, sr, value)
        return self._document

    def set_item_remark(self, sr: int, value: str) -> LoadingPaperDocument:
        self._document = set_item_remark(self.document, sr, value)
        return self._document

    def delete_item(self, sr: int) -> LoadingPaperDocument:
        self._document = delete_item(self.document, sr)
        return self._document
