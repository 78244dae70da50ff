"""Evaluate the declarative field-detection rule table.

The rule *data* lives in :class:`~adminlens.models.FieldRule` and
:data:`~adminlens.models.DEFAULT_FIELD_RULES`, so a product can ship its
own table through :class:`~adminlens.models.EngineConfig` without touching
the detector.  This module holds the predicates that give those rows
meaning: name matching and the :class:`~adminlens.models.ValueShape`
checks.
"""

from __future__ import annotations

import re
from numbers import Number
from typing import Any, Iterable, Mapping

from adminlens.models import FieldRule, ValueShape

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(?:$|[T ]\d{2}:\d{2})")
ACTOR_NAME_KEYS = ("name", "displayName", "display_name", "username", "email")


def matches_name(rule: FieldRule, field: str) -> bool:
    """Return ``True`` if *field* is listed in the rule or matches its pattern."""
    if field in rule.names:
        return True
    if rule.pattern is None:
        return False
    flags = re.IGNORECASE if rule.ignore_case else 0
    return re.search(rule.pattern, field, flags) is not None


def matches_values(rule: FieldRule, values: Iterable[Any]) -> bool:
    """Return ``True`` if at least one non-null value has the rule's shape."""
    check = _VALUE_CHECKS[rule.value_shape]
    return any(check(v) for v in values if v is not None)


def matches(rule: FieldRule, field: str, values: Iterable[Any]) -> bool:
    """Return ``True`` if *field* and its sampled *values* satisfy *rule*."""
    return matches_name(rule, field) and matches_values(rule, values)


def is_number(value: Any) -> bool:
    """Return ``True`` for ints and floats; booleans are not numbers here."""
    return isinstance(value, Number) and not isinstance(value, bool)


def is_iso_date(value: Any) -> bool:
    return isinstance(value, str) and ISO_DATE_RE.match(value) is not None


def is_actor(value: Any) -> bool:
    """A user reference: a plain string, or an object with a name-like key."""
    if isinstance(value, str):
        return bool(value)
    if isinstance(value, Mapping):
        return any(isinstance(value.get(key), str) for key in ACTOR_NAME_KEYS)
    return False


_VALUE_CHECKS = {
    ValueShape.ANY: lambda v: True,
    ValueShape.STRING: lambda v: isinstance(v, str),
    ValueShape.SCALAR: lambda v: isinstance(v, str) or is_number(v),
    ValueShape.ISO_DATE: is_iso_date,
    ValueShape.ACTOR: is_actor,
}
