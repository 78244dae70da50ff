"""Classify operations by HTTP method and path shape.

The console needs to know whether an endpoint lists a collection, shows one
record, creates, updates, deletes, or triggers an action, and whether it
does so on a top-level resource or on a sub-resource of some parent record.
That is decided purely from the HTTP method and the shape of the stripped
path template, using the decision table in :data:`OPERATION_RULES`.

Path shape vocabulary:

* *parameter* -- a ``{name}`` segment.
* *literal* -- any other segment.
* *nested* -- at least one parameter **and** more than one literal, i.e.
  the path addresses something below a parent record
  (``/users/{userId}/credits``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from adminlens.discovery.paths import is_path_param, split_segments
from adminlens.models import HTTPMethod, OperationType


@dataclass(frozen=True)
class PathShape:
    """Structural summary of a stripped path template."""

    param_count: int
    literal_count: int
    trailing_param: bool

    @property
    def has_params(self) -> bool:
        return self.param_count > 0

    @property
    def nested(self) -> bool:
        return self.param_count > 0 and self.literal_count > 1

    @classmethod
    def of(cls, path: str) -> PathShape:
        segments = split_segments(path)
        params = [seg for seg in segments if is_path_param(seg)]
        return cls(
            param_count=len(params),
            literal_count=len(segments) - len(params),
            trailing_param=bool(segments) and is_path_param(segments[-1]),
        )


@dataclass(frozen=True)
class OperationRule:
    """One row of the classification table."""

    methods: frozenset[HTTPMethod]
    matches: Callable[[PathShape], bool]
    result: OperationType


_GET = frozenset({HTTPMethod.GET})
_POST = frozenset({HTTPMethod.POST})
_WRITE = frozenset({HTTPMethod.PATCH, HTTPMethod.PUT})
_DELETE = frozenset({HTTPMethod.DELETE})

# Evaluated top to bottom; the first matching row wins.
OPERATION_RULES: tuple[OperationRule, ...] = (
    OperationRule(_GET, lambda s: not s.has_params, OperationType.LIST),
    OperationRule(_GET, lambda s: s.trailing_param and not s.nested, OperationType.DETAIL),
    OperationRule(_GET, lambda s: s.trailing_param and s.nested, OperationType.SUB_DETAIL),
    OperationRule(_GET, lambda s: s.has_params, OperationType.SUB_LIST),
    OperationRule(
        _POST, lambda s: not s.has_params and s.literal_count == 1, OperationType.CREATE
    ),
    OperationRule(_POST, lambda s: s.nested, OperationType.SUB_ACTION),
    OperationRule(_POST, lambda s: s.has_params, OperationType.ACTION),
    OperationRule(_POST, lambda s: True, OperationType.ACTION),
    OperationRule(_WRITE, lambda s: s.trailing_param and not s.nested, OperationType.UPDATE),
    OperationRule(_WRITE, lambda s: s.has_params, OperationType.SUB_ACTION),
    # Singleton resources such as PATCH /config.
    OperationRule(_WRITE, lambda s: True, OperationType.UPDATE),
    OperationRule(_DELETE, lambda s: s.trailing_param and not s.nested, OperationType.DELETE),
    OperationRule(_DELETE, lambda s: s.nested, OperationType.SUB_ACTION),
    OperationRule(_DELETE, lambda s: True, OperationType.ACTION),
)


def classify_operation(method: HTTPMethod | str, path: str) -> OperationType:
    """Choose the :class:`~adminlens.models.OperationType` for an operation.

    Args:
        method: HTTP method, as an enum member or a case-insensitive string.
        path: Path template with the admin prefix already stripped.

    Returns:
        The type from the first matching row of :data:`OPERATION_RULES`,
        or :attr:`~adminlens.models.OperationType.CUSTOM` when no row
        matches (HEAD, OPTIONS, TRACE, or unknown methods).

    Example::

        >>> classify_operation("GET", "/users/{userId}/credits")
        <OperationType.SUB_LIST: 'sub-list'>
        >>> classify_operation(HTTPMethod.POST, "/users")
        <OperationType.CREATE: 'create'>
    """
    try:
        http_method = HTTPMethod(method.lower() if isinstance(method, str) else method)
    except ValueError:
        return OperationType.CUSTOM

    shape = PathShape.of(path)
    for rule in OPERATION_RULES:
        if http_method in rule.methods and rule.matches(shape):
            return rule.result
    return OperationType.CUSTOM
