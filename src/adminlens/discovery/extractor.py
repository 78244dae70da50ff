"""Extract admin operations and the resource forest from an OpenAPI document.

This module walks the ``paths`` object of a raw OpenAPI document and builds
a :class:`~adminlens.models.ParsedSpec` for one managed product:

1. Detect the admin prefix from the product's base address and keep only
   the paths below it (:mod:`adminlens.discovery.paths`).
2. For every recognised HTTP method of every kept path, build an
   :class:`~adminlens.models.Operation` -- parameters, resource key,
   classified type (:mod:`adminlens.discovery.classifier`) and resolved
   request/response schemas (:mod:`adminlens.discovery.resolver`).
3. Assemble the resource forest (:mod:`adminlens.discovery.tree`).

Keys of a path item that are not HTTP methods (``parameters``,
``summary``, ``servers``, vendor extensions) are skipped without comment.

The single public entry point is :func:`parse_openapi_spec`.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from adminlens.discovery.classifier import classify_operation
from adminlens.discovery.paths import (
    detect_admin_prefix,
    extract_path_parameters,
    filter_admin_paths,
    path_to_resource_key,
)
from adminlens.discovery.resolver import resolve_registry, resolve_schema
from adminlens.discovery.tree import build_resource_tree
from adminlens.exceptions import ContractError
from adminlens.models import EngineConfig, HTTPMethod, Operation, ParsedSpec

logger = logging.getLogger(__name__)

_HTTP_METHODS = tuple(HTTPMethod)
_JSON_CONTENT_TYPE = "application/json"
_RESPONSE_STATUSES = ("200", "201")


def parse_openapi_spec(
    raw_spec: Mapping[str, Any],
    base_url: str,
    product_id: str,
    config: Optional[EngineConfig] = None,
    parsed_at: Optional[datetime] = None,
) -> ParsedSpec:
    """Build a :class:`~adminlens.models.ParsedSpec` from a raw OpenAPI dict.

    Args:
        raw_spec: The OpenAPI document as returned by
            :func:`~adminlens.discovery.loader.load_spec`.  It is not
            modified.
        base_url: The product's admin base address; its path is the admin
            prefix.
        product_id: Identifier of the product the document describes.
        config: Engine tunables; defaults apply when omitted.
        parsed_at: Timestamp to record; defaults to the current UTC time.

    Returns:
        A frozen :class:`~adminlens.models.ParsedSpec`.  Parsing the same
        document twice yields the same operations and resources.

    Raises:
        ContractError: If *raw_spec* is not a mapping.

    Example::

        raw = load_spec("openapi.json")
        parsed = parse_openapi_spec(raw, "http://localhost:3000/api/v1/admin", "acme")
        for op in parsed.all_operations:
            print(op.id, op.operation_type.value)
    """
    if not isinstance(raw_spec, Mapping):
        raise ContractError(
            f"parse_openapi_spec() needs a mapping, got {type(raw_spec).__name__}"
        )
    config = config or EngineConfig()

    admin_prefix = detect_admin_prefix(base_url)
    registry = _component_schemas(raw_spec)
    paths = raw_spec.get("paths")
    admin_paths = filter_admin_paths(paths if isinstance(paths, Mapping) else {}, admin_prefix)

    operations = _extract_operations(admin_paths, registry, config)
    logger.debug(
        "Discovered %d operations under %r for product %s",
        len(operations), admin_prefix, product_id,
    )

    info = raw_spec.get("info")
    info = info if isinstance(info, Mapping) else {}

    return ParsedSpec(
        product_id=product_id,
        spec_version=str(raw_spec.get("openapi", "")),
        api_title=str(info.get("title", "Untitled API")),
        api_version=str(info.get("version", "0.0.0")),
        admin_prefix=admin_prefix,
        resources=build_resource_tree(operations),
        all_operations=operations,
        schemas=resolve_registry(registry, config.max_schema_depth),
        parsed_at=parsed_at or datetime.now(timezone.utc),
    )


def _component_schemas(raw_spec: Mapping[str, Any]) -> Mapping[str, Any]:
    components = raw_spec.get("components")
    if not isinstance(components, Mapping):
        return {}
    schemas = components.get("schemas")
    return schemas if isinstance(schemas, Mapping) else {}


def _extract_operations(
    admin_paths: Mapping[str, Any],
    registry: Mapping[str, Any],
    config: EngineConfig,
) -> list[Operation]:
    """Create one operation per (method, stripped path) pair, in document order."""
    operations: list[Operation] = []

    for path, path_item in admin_paths.items():
        if not isinstance(path_item, Mapping):
            continue

        path_params = extract_path_parameters(path)
        resource_key = path_to_resource_key(path)

        for method_key, raw_op in path_item.items():
            method = _as_http_method(method_key)
            if method is None or not isinstance(raw_op, Mapping):
                continue

            tags = raw_op.get("tags")
            operations.append(
                Operation(
                    id=f"{method.value.upper()}:{path}",
                    resource_key=resource_key,
                    operation_type=classify_operation(method, path),
                    http_method=method,
                    path_template=path,
                    path_parameters=path_params,
                    request_body_schema=resolve_schema(
                        _request_body_schema(raw_op), registry, config.max_schema_depth
                    ),
                    response_schema=resolve_schema(
                        _response_schema(raw_op), registry, config.max_schema_depth
                    ),
                    summary=raw_op.get("summary"),
                    description=raw_op.get("description"),
                    tags=list(tags) if isinstance(tags, list) else [],
                )
            )

    return operations


def _as_http_method(key: Any) -> HTTPMethod | None:
    if not isinstance(key, str):
        return None
    lowered = key.lower()
    for method in _HTTP_METHODS:
        if method.value == lowered:
            return method
    return None


def _json_schema(content: Any) -> Mapping[str, Any] | None:
    """Return the schema of the JSON entry of a ``content`` map.

    ``application/json`` is preferred; any other ``*json`` media type
    (``application/problem+json``, ``application/vnd.api+json``) is the
    fallback.
    """
    if not isinstance(content, Mapping):
        return None
    candidates = [content.get(_JSON_CONTENT_TYPE)]
    candidates.extend(
        media for ct, media in content.items()
        if ct != _JSON_CONTENT_TYPE and isinstance(ct, str) and "json" in ct
    )
    for media in candidates:
        if isinstance(media, Mapping) and isinstance(media.get("schema"), Mapping):
            return media["schema"]
    return None


def _request_body_schema(raw_op: Mapping[str, Any]) -> Mapping[str, Any] | None:
    body = raw_op.get("requestBody")
    if not isinstance(body, Mapping):
        return None
    return _json_schema(body.get("content"))


def _response_schema(raw_op: Mapping[str, Any]) -> Mapping[str, Any] | None:
    responses = raw_op.get("responses")
    if not isinstance(responses, Mapping):
        return None
    for status in _RESPONSE_STATUSES:
        response = responses.get(status)
        # YAML documents may key responses by integer status code
        if response is None:
            response = responses.get(int(status))
        if isinstance(response, Mapping):
            schema = _json_schema(response.get("content"))
            if schema is not None:
                return schema
    return None
