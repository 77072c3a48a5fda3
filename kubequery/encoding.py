"""Structured text encoding for resource sub-fields.

Every spec/status/data column is stored as compact JSON with sorted keys so
that two fetches of the same object produce byte-identical column values.
"""

from __future__ import annotations

import json
from typing import Any

from kubequery.errors import SerializationError


def encode_structured(value: Any, field_name: str = "value") -> str:
    """Encode *value* as compact JSON.

    Raises:
        SerializationError: *value* contains something JSON cannot represent
            (non-string keys of unsupported types, NaN, arbitrary objects).
    """
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Error marshalling {field_name}: {exc}") from exc


def decode_structured(text: str | None) -> Any:
    """Inverse of :func:`encode_structured`; ``None`` columns decode to ``None``."""
    if text is None:
        return None
    return json.loads(text)
