"""Domain models for the elastic-ops tool.

Loading paper manifest types, catalog records, and the processing/error records
used by the batch importer.
"""

from .catalog import Product, ShrinkageReport
from .loading_paper import (
    ColumnVisibility,
    DocumentHeader,
    LineItem,
    LoadingPaperDocument,
    SavedPaper,
    Totals,
)

__all__ = [
    # Loading paper
    "ColumnVisibility",
    "DocumentHeader",
    "LineItem",
    "LoadingPaperDocument",
    "SavedPaper",
    "Totals",
    # Catalog
    "Product",
    "ShrinkageReport",
]
