"""Infer field roles from a sample of schema-less records.

Given a handful of records from a response, :func:`detect_fields` decides
which field identifies a record, which one dates it, which one describes
it, which one categorises it, who performed it, and which fields are
numeric metrics.  The presentation layer uses the result to pick chart
axes, timeline labels and table badges.

Detection runs in three phases, earlier phases taking precedence:

1. **Schema hints** -- when the operation's response schema is known,
   ``format: date-time`` marks a date, an "identifier" description marks
   an id, and a small ``enum`` marks a type.
2. **Name rules** -- the :class:`~adminlens.models.FieldRule` table, checked
   field by field in first-seen order.
3. **Value heuristics** -- metrics are fields that are numeric in most
   items; unresolved id, description and type roles fall back to
   uniqueness, string length and cardinality.

Only the first ``field_sample_size`` items are inspected, and the result
depends on nothing but that sample, the schema and the configuration.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from adminlens.exceptions import ContractError
from adminlens.models import DetectedFields, EngineConfig, FieldRole
from adminlens.shapes.rules import is_number, matches

_ROLE_ATTRS = {
    FieldRole.ID: "id_field",
    FieldRole.DATE: "date_field",
    FieldRole.DESCRIPTION: "description_field",
    FieldRole.TYPE: "type_field",
    FieldRole.ACTOR: "actor_field",
}


def detect_fields(
    items: Sequence[Any],
    schema: Optional[Mapping[str, Any]] = None,
    config: Optional[EngineConfig] = None,
) -> DetectedFields:
    """Detect field roles in *items*.

    Args:
        items: Record-like items, normally from
            :func:`~adminlens.shapes.items.extract_items`.  Entries that are
            not objects are ignored.
        schema: Optional response schema (already ``$ref``-resolved).  May
            describe the array, an envelope object, or a single item.
        config: Engine tunables; defaults apply when omitted.

    Returns:
        A :class:`~adminlens.models.DetectedFields`.  Empty when no
        records are present.

    Raises:
        ContractError: If *items* is not a list-like sequence.

    Example::

        fields = detect_fields([
            {"id": 1, "createdAt": "2024-01-01T00:00:00Z", "amount": 5},
            {"id": 2, "createdAt": "2024-01-02T00:00:00Z", "amount": 7},
        ])
        fields.date_field     # 'createdAt'
        fields.metric_fields  # ['amount']
    """
    if items is None or isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Sequence):
        raise ContractError(
            f"detect_fields() needs a sequence of records, got {type(items).__name__}"
        )
    config = config or EngineConfig()
    thresholds = config.thresholds

    sample = [item for item in items[: config.field_sample_size] if isinstance(item, Mapping)]
    if not sample:
        return DetectedFields()

    all_fields = _collect_fields(sample)
    values = {key: [item.get(key) for item in sample] for key in all_fields}
    roles: dict[str, Optional[str]] = {attr: None for attr in _ROLE_ATTRS.values()}

    # Phase 1: schema hints
    item_schema = _item_schema(schema, config.envelope_keys)
    properties = item_schema.get("properties") if item_schema else None
    if isinstance(properties, Mapping):
        for key, prop in properties.items():
            if key not in values or not isinstance(prop, Mapping):
                continue
            if roles["date_field"] is None and prop.get("format") == "date-time":
                roles["date_field"] = key
            description = prop.get("description")
            if (
                roles["id_field"] is None
                and isinstance(description, str)
                and "identifier" in description.lower()
            ):
                roles["id_field"] = key
            enum = prop.get("enum")
            if (
                roles["type_field"] is None
                and isinstance(enum, list)
                and len(enum) <= thresholds.schema_enum_max
            ):
                roles["type_field"] = key

    # Phase 2: name rules
    for key in all_fields:
        for rule in config.field_rules:
            attr = _ROLE_ATTRS[rule.role]
            if roles[attr] is None and matches(rule, key, values[key]):
                roles[attr] = key

    # Phase 3: value heuristics
    metric_fields = [
        key for key in all_fields
        if key not in (roles["date_field"], roles["id_field"])
        and sum(1 for v in values[key] if is_number(v)) >= len(sample) * thresholds.metric_ratio
    ]

    def candidates() -> list[str]:
        taken = {v for v in roles.values() if v is not None}
        return [k for k in all_fields if k not in taken and k not in metric_fields]

    if roles["id_field"] is None and len(sample) >= thresholds.id_min_items:
        roles["id_field"] = next(
            (k for k in candidates() if _is_unique_token(values[k])), None
        )

    if roles["description_field"] is None:
        roles["description_field"] = _longest_text_field(
            candidates(), values, thresholds.description_min_avg_length
        )

    if roles["type_field"] is None:
        for key in candidates():
            distinct = {"" if v is None else str(v) for v in values[key]}
            if (
                thresholds.type_min_distinct <= len(distinct) <= thresholds.type_max_distinct
                and len(distinct) <= len(sample) * thresholds.type_max_distinct_ratio
            ):
                roles["type_field"] = key
                break

    return DetectedFields(
        **roles,
        metric_fields=metric_fields,
        all_fields=all_fields,
    )


def _collect_fields(sample: Sequence[Mapping[str, Any]]) -> list[str]:
    """Field names across the sample in first-seen order."""
    seen: dict[str, None] = {}
    for item in sample:
        for key in item:
            seen.setdefault(key, None)
    return list(seen)


def _item_schema(
    schema: Optional[Mapping[str, Any]], envelope_keys: Sequence[str]
) -> Optional[Mapping[str, Any]]:
    """Find the schema describing one record.

    Handles an array schema (``items``), an envelope object whose wrapper
    property is an array, and a plain object schema.
    """
    if not isinstance(schema, Mapping):
        return None
    items = schema.get("items")
    if isinstance(items, Mapping):
        return items
    properties = schema.get("properties")
    if isinstance(properties, Mapping):
        for key in envelope_keys:
            wrapper = properties.get(key)
            if isinstance(wrapper, Mapping) and isinstance(wrapper.get("items"), Mapping):
                return wrapper["items"]
    return schema


def _is_unique_token(values: Sequence[Any]) -> bool:
    """Every value is a distinct, non-empty, whitespace-free string."""
    if not all(isinstance(v, str) and v and not any(c.isspace() for c in v) for v in values):
        return False
    return len(set(values)) == len(values)


def _longest_text_field(
    keys: Sequence[str], values: Mapping[str, Sequence[Any]], min_avg: float
) -> Optional[str]:
    best_key: Optional[str] = None
    best_avg = 0.0
    for key in keys:
        lengths = [len(v) for v in values[key] if isinstance(v, str) and v]
        if not lengths:
            continue
        avg = sum(lengths) / len(lengths)
        if avg > best_avg and avg > min_avg:
            best_key, best_avg = key, avg
    return best_key
