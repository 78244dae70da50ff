"""Path template utilities for admin endpoint discovery.

Every managed product serves its admin API under a common path prefix (e.g.
``/api/v1/admin``).  This module finds that prefix from the product's base
address, keeps only the description paths that live under it, and derives
the pieces of a path template the rest of discovery needs:

1. :func:`detect_admin_prefix` -- ``"http://host/api/v1/admin/"`` ->
   ``"/api/v1/admin"``.
2. :func:`filter_admin_paths` -- drop foreign paths, strip the prefix.
3. :func:`extract_path_parameters` -- ``"/users/{userId}"`` -> ``["userId"]``.
4. :func:`path_to_resource_key` -- ``"/users/{userId}/credits"`` ->
   ``"users.credits"``.

All functions are total: malformed input degrades to a best-effort result
instead of raising.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping
from urllib.parse import urlsplit

from adminlens.models import HTTPMethod

logger = logging.getLogger(__name__)

ROOT_RESOURCE_KEY = "root"

_API_PATH_RE = re.compile(r"(/api/.+)")
_PARAM_RE = re.compile(r"\{([^{}/]+)\}")
_METHOD_KEYS = frozenset(method.value for method in HTTPMethod)


def detect_admin_prefix(base_url: str) -> str:
    """Derive the admin path prefix from a product's base address.

    Tries structured URL parsing first.  When the input is not an absolute
    URL, falls back to the first ``/api/...`` path found in the string.

    Args:
        base_url: The product's admin base address (e.g.
            ``"http://localhost:3000/api/v1/admin"``).

    Returns:
        The path with trailing slashes removed, or ``""`` when nothing
        usable was found.  An empty prefix admits no paths in
        :func:`filter_admin_paths`.

    Example::

        >>> detect_admin_prefix("http://localhost:3000/api/v1/admin/")
        '/api/v1/admin'
        >>> detect_admin_prefix("not a url /api/v2/admin")
        '/api/v2/admin'
    """
    if not isinstance(base_url, str):
        return ""

    try:
        parts = urlsplit(base_url.strip())
    except ValueError:
        parts = None

    if parts is not None and parts.scheme and parts.netloc:
        return parts.path.rstrip("/")

    match = _API_PATH_RE.search(base_url)
    if match:
        return match.group(1).rstrip("/")
    return ""


def filter_admin_paths(
    paths: Mapping[str, Any], admin_prefix: str
) -> dict[str, Any]:
    """Keep the paths under *admin_prefix* and strip the prefix from them.

    The prefix must match at a segment boundary: ``/api/v1/admin`` admits
    ``/api/v1/admin/users`` but not ``/api/v1/administrators``.  The prefix
    path itself becomes ``"/"``.  Foreign paths are dropped silently.  When
    two paths strip to the same template (``/api/v1/admin`` and
    ``/api/v1/admin/``) their items are merged; the first declaration of a
    method wins.

    Args:
        paths: The description's ``paths`` object (path -> path item).
        admin_prefix: Prefix from :func:`detect_admin_prefix`.

    Returns:
        A new dict mapping stripped path templates to the original path
        items, in document order.
    """
    if not admin_prefix:
        return {}

    result: dict[str, Any] = {}
    for full_path, path_item in paths.items():
        stripped = strip_prefix(full_path, admin_prefix)
        if stripped is None:
            logger.debug("Skipping %s: outside admin prefix %s", full_path, admin_prefix)
            continue
        if stripped in result:
            result[stripped] = _merge_path_items(result[stripped], path_item, full_path)
        else:
            result[stripped] = path_item
    return result


def _merge_path_items(first: Any, later: Any, later_path: str) -> Any:
    """Combine two path items that strip to the same template.

    Keys of *first* win; a method *later* repeats is dropped with a debug
    record.  Neither input is modified.
    """
    if not isinstance(later, Mapping):
        return first
    if not isinstance(first, Mapping):
        return later

    merged = dict(first)
    declared = {_method_key(key) for key in merged} - {None}
    for key, value in later.items():
        method = _method_key(key)
        if method is None:
            merged.setdefault(key, value)
        elif method not in declared:
            merged[key] = value
            declared.add(method)
        else:
            logger.debug(
                "Ignoring duplicate %s from %s: already declared for the same path",
                key.upper(), later_path,
            )
    return merged


def _method_key(key: Any) -> str | None:
    if isinstance(key, str) and key.lower() in _METHOD_KEYS:
        return key.lower()
    return None


def strip_prefix(path: str, prefix: str) -> str | None:
    """Strip *prefix* from *path*, or return ``None`` if it does not apply."""
    if path == prefix:
        return "/"
    if not path.startswith(prefix):
        return None
    remainder = path[len(prefix):]
    if not remainder.startswith("/"):
        return None
    return remainder if remainder.strip("/") else "/"


def extract_path_parameters(path: str) -> list[str]:
    """Return parameter names from a path template, left to right.

    Only well-formed ``{name}`` placeholders are reported; stray braces are
    ignored.

    Example::

        >>> extract_path_parameters("/users/{userId}/credits/{creditId}")
        ['userId', 'creditId']
        >>> extract_path_parameters("/users/{broken")
        []
    """
    return _PARAM_RE.findall(path)


def path_to_resource_key(path: str) -> str:
    """Convert a stripped path template to a dotted resource key.

    Parameter segments and empty segments are dropped and the remaining
    literal segments are joined with ``.``.  A path made only of
    parameters maps to ``"root"``.

    Example::

        >>> path_to_resource_key("/users/{userId}/credits")
        'users.credits'
        >>> path_to_resource_key("/credits/config/tiers")
        'credits.config.tiers'
        >>> path_to_resource_key("/{id}")
        'root'
    """
    return ".".join(literal_segments(path)) or ROOT_RESOURCE_KEY


def split_segments(path: str) -> list[str]:
    """Split a path into non-empty segments.

    ``"/api/v1/users"`` -> ``["api", "v1", "users"]``
    ``"/"``             -> ``[]``
    """
    return [s for s in path.split("/") if s]


def is_path_param(segment: str) -> bool:
    """Return ``True`` if *segment* is a parameter placeholder (``{id}``).

    An opening brace is enough, so a malformed ``{id`` still counts as a
    parameter rather than becoming part of a resource key.
    """
    return segment.startswith("{")


def literal_segments(path: str) -> list[str]:
    """Return the non-parameter segments of *path* in order."""
    return [seg for seg in split_segments(path) if not is_path_param(seg)]
