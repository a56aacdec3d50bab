from __future__ import annotations

import logging
import webbrowser
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from html import escape
from pathlib import Path

"""Printable HTML documents and the print-time page directive.

Loading papers print landscape and lab reports portrait. The ``@page`` rule is
not part of the document itself: ``page_directive`` adds it for the duration of
one print request and removes it again, so a document printed once landscape
can be printed portrait afterwards without leftovers.
"""

__all__ = [
    "LANDSCAPE",
    "PORTRAIT",
    "PrintableDocument",
    "page_rule",
    "page_directive",
    "print_document",
]

logger = logging.getLogger(__name__)

LANDSCAPE = "landscape"
PORTRAIT = "portrait"
_ORIENTATIONS = (LANDSCAPE, PORTRAIT)

BASE_CSS = """
body { font-family: Helvetica, Arial, sans-serif; color: #0f172a; margin: 0; }
.page { padding: 10mm 12mm; box-sizing: border-box; }
.bar { height: 6px; background: linear-gradient(90deg, #1e293b, #475569, #1e293b); }
h1 { font-size: 22pt; font-weight: 900; margin: 0; letter-spacing: -0.5px; }
.muted { color: #64748b; font-size: 9pt; }
.label { font-size: 8pt; font-weight: 700; color: #64748b; text-transform: uppercase; letter-spacing: 1px; }
.card { border-left: 4px solid #0f172a; background: #f8fafc; padding: 8px 12px; }
.grid { display: grid; gap: 8px; }
.grid-2 { grid-template-columns: 1fr 1fr; }
.grid-3 { grid-template-columns: 1fr 1fr 1fr; }
table.items { width: 100%; border-collapse: collapse; font-size: 9pt; }
table.items th { background: #f1f5f9; text-align: left; text-transform: uppercase; font-size: 8pt; }
table.items th, table.items td { padding: 4px 8px; border-bottom: 1px solid #e2e8f0; }
table.items tfoot td { background: #f1f5f9; font-weight: 600; border-top: 1px solid #cbd5e1; }
.badge { display: inline-block; padding: 6px 24px; border-radius: 6px; color: #fff; font-weight: 900; }
.badge.pass { background: #059669; }
.badge.fail { background: #dc2626; }
footer { border-top: 2px solid #e2e8f0; margin-top: 16px; padding-top: 8px; font-size: 8pt; color: #475569; }
"""


@dataclass
class PrintableDocument:
    """A self-contained HTML page; ``styles`` are emitted in order into <head>."""
    title: str
    body: str
    styles: list[str] = field(default_factory=lambda: [BASE_CSS])

    def to_html(self) -> str:
        style_tags = "\n".join(f"<style>{s}</style>" for s in self.styles)
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
            f"<title>{escape(self.title)}</title>\n{style_tags}\n</head>\n"
            f"<body>\n{self.body}\n</body>\n</html>\n"
        )


def page_rule(orientation: str, size: str = "A4") -> str:
    if orientation not in _ORIENTATIONS:
        raise ValueError(f"orientation must be one of {_ORIENTATIONS}, got {orientation!r}")
    return f"@media print {{ @page {{ size: {size} {orientation}; margin: 0 !important; }} }}"


@contextmanager
def page_directive(document: PrintableDocument, orientation: str, size: str = "A4") -> Iterator[str]:
    """Attach the ``@page`` rule for one print request; always detached on exit."""
    rule = page_rule(orientation, size)
    document.styles.append(rule)
    try:
        yield rule
    finally:
        document.styles.remove(rule)


def print_document(
    document: PrintableDocument,
    path: Path,
    orientation: str,
    *,
    size: str = "A4",
    open_browser: bool = False,
) -> Path:
    """Write the print-ready HTML to ``path``; optionally open it for the browser's print dialog."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with page_directive(document, orientation, size):
        path.write_text(document.to_html(), encoding="utf-8")
    logger.debug("wrote %s (%s %s)", path, size, orientation)
    if open_browser:
        webbrowser.open(path.resolve().as_uri())
    return path
