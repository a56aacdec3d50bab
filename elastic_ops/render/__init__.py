"""Printable output: loading paper tables and lab report certificates."""

from .formatting import extract_display_name, fmt_date, fmt_weight
from .loading_paper import RenderedTable, render_loading_paper, to_html
from .printing import LANDSCAPE, PORTRAIT, PrintableDocument, page_directive, print_document
from .shrinkage_report import render_shrinkage_report

__all__ = [
    "LANDSCAPE",
    "PORTRAIT",
    "PrintableDocument",
    "RenderedTable",
    "extract_display_name",
    "fmt_date",
    "fmt_weight",
    "page_directive",
    "print_document",
    "render_loading_paper",
    "render_shrinkage_report",
    "to_html",
]
