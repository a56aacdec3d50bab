from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

"""Loading paper JSON reader.

Expected payload: a top-level object with a ``Rows`` array, one object per
manifest line (see the DC export of the ERP). Only the shape is checked here;
field coercion is the normalizer's job, so rows are returned untouched.
"""

__all__ = [
    "ParseError",
    "JsonSyntaxError",
    "EmptyDatasetError",
    "ParsedInput",
    "ROWS_KEY",
    "parse",
    "parse_file",
]

ROWS_KEY = "Rows"


class ParseError(Exception):
    """Base class for manifest payload errors."""


class JsonSyntaxError(ParseError):
    """Raised when the payload is not valid JSON."""


class EmptyDatasetError(ParseError):
    """Raised when the ``Rows`` array is missing, not an array, or empty."""


@dataclass(frozen=True)
class ParsedInput:
    rows: list[Any]  # raw row objects, not coerced
    header_row: Any  # rows[0], source of the document header


def parse(raw_text: str) -> ParsedInput:
    """Parse raw manifest text.

    Parameters
    ----------
    raw_text: JSON text as uploaded

    Returns
    -------
    ParsedInput with the unmodified row array and its first row

    Raises
    ------
    JsonSyntaxError: text is not valid JSON
    EmptyDatasetError: no usable ``Rows`` array
    """
    # JSONDecodeError に加え、桁数上限超えの整数や深すぎる入れ子も ValueError / RecursionError になる
    try:
        payload = json.loads(raw_text)
    except (ValueError, TypeError, RecursionError) as e:
        raise JsonSyntaxError(f"invalid JSON: {e}") from e

    rows = payload.get(ROWS_KEY) if isinstance(payload, dict) else None
    if not isinstance(rows, list) or not rows:
        raise EmptyDatasetError("No rows found in JSON")
    return ParsedInput(rows=rows, header_row=rows[0])


def parse_file(path: Path) -> ParsedInput:
    """Read ``path`` as UTF-8 (BOM tolerated) and parse it."""
    # ERP のエクスポートは BOM 付きのことがある
    return parse(path.read_text(encoding="utf-8-sig"))
