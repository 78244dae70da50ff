"""Find the endpoints a product dashboard can load without user input.

A dashboard can only call endpoints that need no identifiers: a GET with
no path parameters on a resource that does not sit below a parent record.
:func:`discover_endpoints` collects those from the resource forest and
ranks them so summary widgets (stats, trends, activity) come before entity
tables.

Priority (lower is shown first):

==========  ==============================================================
1           stats-like resources (``stats``, ``dashboard``, ``summary``...)
2           trends
3           activity, events, audit
4           other dashboard-like resources (analytics, reports, metrics...)
5           other read-only resources (``config``...)
10          entity collections (a list with create/update/delete/detail)
==========  ==============================================================
"""

from __future__ import annotations

import re
from typing import Iterable

from adminlens.discovery.tree import iter_resources
from adminlens.models import (
    DiscoveredEndpoint,
    HTTPMethod,
    OperationType,
    Resource,
)

_DASHBOARD_RE = re.compile(
    r"stats|analytics|trend|summary|overview|metric|report|activity|event|audit|health|dashboard",
    re.IGNORECASE,
)
_STATS_RE = re.compile(r"^stats$|^statistics$|^dashboard$|^summary$|^overview$", re.IGNORECASE)
_TRENDS_RE = re.compile(r"trend", re.IGNORECASE)
_ACTIVITY_RE = re.compile(r"activity|event|audit", re.IGNORECASE)

_SKIPPED_KEYS = frozenset({"health"})
_WRITE_TYPES = frozenset({OperationType.CREATE, OperationType.UPDATE, OperationType.DELETE})
_LIST_TYPES = frozenset({OperationType.LIST, OperationType.SUB_LIST})


def discover_endpoints(resources: Iterable[Resource]) -> list[DiscoveredEndpoint]:
    """Return the parameterless GET endpoints of *resources*, ranked.

    Resources that require a parent id are skipped, as is ``health``
    (health checks are polled separately).  Results are ordered by
    priority, then resource key.
    """
    endpoints: list[DiscoveredEndpoint] = []

    for resource in iter_resources(resources):
        if resource.requires_parent_id or resource.key in _SKIPPED_KEYS:
            continue

        get_op = next(
            (
                op for op in resource.operations
                if op.http_method == HTTPMethod.GET and not op.path_parameters
            ),
            None,
        )
        if get_op is None:
            continue

        op_types = {op.operation_type for op in resource.operations}
        has_list = get_op.operation_type in _LIST_TYPES
        is_entity = has_list and bool(op_types & (_WRITE_TYPES | {OperationType.DETAIL}))
        is_dashboard = bool(
            _DASHBOARD_RE.search(resource.key) or _DASHBOARD_RE.search(resource.path_segment)
        )

        endpoints.append(
            DiscoveredEndpoint(
                path=get_op.path_template,
                resource_key=resource.key,
                resource_name=resource.name,
                response_schema=get_op.response_schema,
                operation_summary=get_op.summary,
                priority=_priority(resource.key, is_dashboard, is_entity),
                is_entity_collection=is_entity,
            )
        )

    endpoints.sort(key=lambda e: (e.priority, e.resource_key))
    return endpoints


def _priority(key: str, is_dashboard: bool, is_entity: bool) -> int:
    if is_dashboard and not is_entity:
        if _STATS_RE.search(key):
            return 1
        if _TRENDS_RE.search(key):
            return 2
        if _ACTIVITY_RE.search(key):
            return 3
        return 4
    if is_entity:
        return 10
    return 5
