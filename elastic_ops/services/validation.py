from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

"""Form presence checks done before any gateway call."""

__all__ = [
    "ValidationError",
    "require_fields",
]


class ValidationError(Exception):
    """Required input is missing; nothing was sent to the store."""

    def __init__(self, message: str, missing: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.missing = tuple(missing)


def _blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def require_fields(form: Mapping[str, Any], names: Iterable[str], *, what: str) -> None:
    """Raise ValidationError listing every name whose value is absent or blank.

    Args:
        form: Submitted values
        names: Required keys, in the order they should be reported
        what: Record kind used in the message (e.g. "product")
    """
    missing = [n for n in names if _blank(form.get(n))]
    if missing:
        raise ValidationError(f"{what}: required field(s) missing: {', '.join(missing)}", missing)
