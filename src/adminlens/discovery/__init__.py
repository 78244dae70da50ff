"""Description ingestion -- turn an OpenAPI document into a resource forest.

This sub-package runs once per product description.  It detects the admin
prefix, keeps and strips the admin paths, classifies every operation,
resolves its schemas, and assembles the resource tree into a frozen
:class:`~adminlens.models.ParsedSpec`.

Typical usage::

    from adminlens.discovery import load_spec, parse_openapi_spec

    raw = load_spec("https://acme.example.com/openapi.json")
    parsed = parse_openapi_spec(raw, "https://acme.example.com/api/v1/admin", "acme")

Sub-modules:

* :mod:`~adminlens.discovery.loader` -- I/O layer (URL, file, stdin) plus
  format detection and OpenAPI version validation.
* :mod:`~adminlens.discovery.paths` -- Admin prefix detection, path
  filtering, parameter extraction, and resource key derivation.
* :mod:`~adminlens.discovery.classifier` -- Method + path shape decision
  table for operation types.
* :mod:`~adminlens.discovery.resolver` -- ``$ref`` resolution with explicit
  unresolved markers.
* :mod:`~adminlens.discovery.tree` -- Resource forest construction and
  lookup helpers.
* :mod:`~adminlens.discovery.extractor` -- The :func:`parse_openapi_spec`
  pipeline.
* :mod:`~adminlens.discovery.endpoints` -- Dashboard endpoint ranking.
"""

from adminlens.discovery.classifier import classify_operation
from adminlens.discovery.endpoints import discover_endpoints
from adminlens.discovery.extractor import parse_openapi_spec
from adminlens.discovery.loader import load_payload, load_spec, validate_openapi_version
from adminlens.discovery.paths import (
    detect_admin_prefix,
    extract_path_parameters,
    filter_admin_paths,
    path_to_resource_key,
)
from adminlens.discovery.resolver import is_unresolved, resolve_schema
from adminlens.discovery.tree import build_resource_tree, find_resource, iter_resources

__all__ = [
    "build_resource_tree",
    "classify_operation",
    "detect_admin_prefix",
    "discover_endpoints",
    "extract_path_parameters",
    "filter_admin_paths",
    "find_resource",
    "is_unresolved",
    "iter_resources",
    "load_payload",
    "load_spec",
    "parse_openapi_spec",
    "path_to_resource_key",
    "resolve_schema",
    "validate_openapi_version",
]
