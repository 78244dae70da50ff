"""Locate the record collection inside an arbitrary JSON payload.

Admin APIs wrap their collections in all kinds of envelopes: a bare array,
``{"data": [...]}``, ``{"items": [...], "total": 42}``,
``{"points": [...]}`` for chart series, and so on.  :func:`extract_items`
finds the collection without knowing which endpoint produced the payload.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from adminlens.models import EngineConfig

DEFAULT_ENVELOPE_KEYS: tuple[str, ...] = tuple(EngineConfig().envelope_keys)


def extract_items(
    data: Any,
    envelope_keys: Optional[Sequence[str]] = None,
) -> Optional[list[Any]]:
    """Return the record collection held by *data*, or ``None``.

    1. A list payload is the collection itself (returned as a new list).
    2. A mapping payload is searched, in *envelope_keys* order, for the first
       key holding a non-empty list of records.
    3. Anything else has no collection.

    *data* is never modified.

    Example::

        >>> extract_items([{"id": 1}])
        [{'id': 1}]
        >>> extract_items({"total": 1, "results": [{"id": 1}]})
        [{'id': 1}]
        >>> extract_items({"total": 10, "page": 1}) is None
        True
    """
    if data is None:
        return None

    if isinstance(data, list):
        return list(data)

    if isinstance(data, Mapping):
        keys = DEFAULT_ENVELOPE_KEYS if envelope_keys is None else envelope_keys
        for key in keys:
            value = data.get(key)
            if is_record_list(value):
                return list(value)

    return None


def is_record_list(value: Any) -> bool:
    """Return ``True`` for a non-empty list whose first element is an object."""
    return isinstance(value, list) and bool(value) and isinstance(value[0], Mapping)
