from __future__ import annotations

import pytest

from elastic_ops.services.validation import ValidationError, require_fields


def test_require_fields_lists_all_missing_in_order():
    with pytest.raises(ValidationError) as exc:
        require_fields({"a": "x", "b": None, "c": "  "}, ("c", "a", "b"), what="thing")
    assert exc.value.missing == ("c", "b")
    assert "thing" in str(exc.value)


def test_require_fields_passes():
    require_fields({"a": 0, "b": "y"}, ("a", "b"), what="thing")
