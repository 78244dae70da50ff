"""Resolve ``$ref`` pointers in request and response schemas.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/User"}``) to avoid repetition.  The console
renders forms and tables straight from schemas, so every pointer is replaced
by the schema it names before an operation leaves discovery.

Resolution walks the structural keywords of a schema -- ``properties``,
``items``, ``additionalProperties``, ``not``, ``oneOf``, ``anyOf`` and
``allOf`` -- so no pointer survives at any depth.

A pointer that cannot be followed is never dropped and never raises.  It is
replaced by an *unresolved marker*::

    {"x-unresolved-ref": "#/components/schemas/Missing",
     "x-unresolved-reason": "missing"}

with one of the reasons in :data:`UNRESOLVED_REASONS`.  Callers can test for
it with :func:`is_unresolved`.

The public functions are :func:`resolve_schema` and :func:`resolve_registry`.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

logger = logging.getLogger(__name__)

UNRESOLVED_REF_KEY = "x-unresolved-ref"
UNRESOLVED_REASON_KEY = "x-unresolved-reason"

REASON_MISSING = "missing"
REASON_EXTERNAL = "external"
REASON_CIRCULAR = "circular"
REASON_MAX_DEPTH = "max-depth"
UNRESOLVED_REASONS = frozenset(
    {REASON_MISSING, REASON_EXTERNAL, REASON_CIRCULAR, REASON_MAX_DEPTH}
)

DEFAULT_MAX_DEPTH = 10

_SCHEMA_REF_RE = re.compile(r"^#/components/schemas/(.+)$")
_SCHEMA_MAP_KEYWORDS = ("properties", "patternProperties")
_SCHEMA_KEYWORDS = ("items", "additionalProperties", "not")
_SCHEMA_LIST_KEYWORDS = ("oneOf", "anyOf", "allOf", "prefixItems")


def resolve_schema(
    schema: Mapping[str, Any] | None,
    registry: Mapping[str, Any],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[str, Any] | None:
    """Return a copy of *schema* with every ``$ref`` replaced.

    Args:
        schema: A schema fragment, possibly containing ``$ref`` pointers.
            ``None`` passes through as ``None``.
        registry: Named schemas, normally ``components.schemas``.
        max_depth: Nesting depth beyond which pointers are no longer
            followed and become ``max-depth`` markers.

    Returns:
        A new dict; neither *schema* nor *registry* is modified.

    Example::

        registry = {"User": {"type": "object",
                             "properties": {"id": {"type": "string"}}}}
        resolve_schema({"type": "array",
                        "items": {"$ref": "#/components/schemas/User"}}, registry)
        # {"type": "array", "items": {"type": "object", "properties": {...}}}
    """
    if schema is None:
        return None
    return _resolve(schema, registry, 0, max_depth, frozenset())


def resolve_registry(
    registry: Mapping[str, Any],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[str, Any]:
    """Resolve every schema of a registry against the registry itself.

    Non-mapping entries (which are invalid schemas) are copied unchanged.
    """
    resolved: dict[str, Any] = {}
    for name, schema in registry.items():
        if isinstance(schema, Mapping):
            resolved[name] = _resolve(schema, registry, 0, max_depth, frozenset({name}))
        else:
            resolved[name] = schema
    return resolved


def is_unresolved(schema: Any) -> bool:
    """Return ``True`` if *schema* is an unresolved-reference marker."""
    return isinstance(schema, Mapping) and UNRESOLVED_REF_KEY in schema


def ref_name(ref: str) -> str | None:
    """Extract the registry name from ``#/components/schemas/<name>``.

    Handles RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``).
    """
    match = _SCHEMA_REF_RE.match(ref)
    if not match:
        return None
    return match.group(1).replace("~1", "/").replace("~0", "~")


def _unresolved(ref: Any, reason: str) -> dict[str, Any]:
    logger.debug("Unresolved $ref %r (%s)", ref, reason)
    return {UNRESOLVED_REF_KEY: ref, UNRESOLVED_REASON_KEY: reason}


def _resolve(
    schema: Mapping[str, Any],
    registry: Mapping[str, Any],
    depth: int,
    max_depth: int,
    visiting: frozenset[str],
) -> dict[str, Any]:
    """Recursively resolve *schema*.

    ``visiting`` holds the registry names on the current resolution stack;
    sibling branches each get their own copy so a schema referenced twice
    side by side is expanded both times.
    """
    if "$ref" in schema:
        ref = schema["$ref"]
        if depth > max_depth:
            return _unresolved(ref, REASON_MAX_DEPTH)
        name = ref_name(ref) if isinstance(ref, str) else None
        if name is None:
            return _unresolved(ref, REASON_EXTERNAL)
        if name in visiting:
            return _unresolved(ref, REASON_CIRCULAR)
        target = registry.get(name)
        if not isinstance(target, Mapping):
            return _unresolved(ref, REASON_MISSING)
        return _resolve(target, registry, depth + 1, max_depth, visiting | {name})

    result = dict(schema)

    for keyword in _SCHEMA_MAP_KEYWORDS:
        props = result.get(keyword)
        if isinstance(props, Mapping):
            result[keyword] = {
                key: _resolve(prop, registry, depth + 1, max_depth, visiting)
                if isinstance(prop, Mapping) else prop
                for key, prop in props.items()
            }

    for keyword in _SCHEMA_KEYWORDS:
        sub = result.get(keyword)
        # additionalProperties may be a bare boolean
        if isinstance(sub, Mapping):
            result[keyword] = _resolve(sub, registry, depth + 1, max_depth, visiting)

    for keyword in _SCHEMA_LIST_KEYWORDS:
        variants = result.get(keyword)
        if isinstance(variants, list):
            result[keyword] = [
                _resolve(v, registry, depth + 1, max_depth, visiting)
                if isinstance(v, Mapping) else v
                for v in variants
            ]

    return result
