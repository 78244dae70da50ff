"""Canonical Pydantic models shared across all adminlens modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- serialised as JSON in the user's config directory
and passed explicitly into the engines:
    :class:`FieldRole`, :class:`ValueShape`, :class:`FieldRule`,
    :class:`DetectionThresholds`, :class:`EngineConfig`,
    :class:`OutputConfig`, :class:`GlobalConfig`, and :class:`ProductProfile`.

**Engine output models** -- produced by the discovery and shape engines and
consumed by presentation and storage layers:
    :class:`HTTPMethod`, :class:`OperationType`, :class:`DataShape`,
    :class:`Operation`, :class:`Resource`, :class:`ParsedSpec`,
    :class:`DetectedFields`, :class:`ClassifiedData`, and
    :class:`DiscoveredEndpoint`.

Engine output models are frozen: once a :class:`ParsedSpec` or
:class:`ClassifiedData` is built it can be shared between readers without
copying.  Re-ingesting a description produces a new value.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Field detection rules ---


class FieldRole(str, enum.Enum):
    """Canonical roles the field detector can assign to a record field."""

    ID = "id"
    DATE = "date"
    DESCRIPTION = "description"
    TYPE = "type"
    ACTOR = "actor"


class ValueShape(str, enum.Enum):
    """Value predicates a :class:`FieldRule` can require of sampled values.

    A rule's shape is satisfied when at least one non-null sampled value has
    that shape.
    """

    ANY = "any"
    STRING = "string"
    SCALAR = "scalar"  # string or number, never bool
    ISO_DATE = "iso-date"
    ACTOR = "actor"  # string, or an object exposing a name-like property


class FieldRule(BaseModel):
    """One row of the declarative field-detection rule table.

    A field is assigned ``role`` when its name is listed in ``names`` or
    matches ``pattern``, *and* the sampled values satisfy ``value_shape``.
    Rules are evaluated in table order; the first field to satisfy a role's
    rule wins that role.

    Example::

        FieldRule(role=FieldRole.ACTOR, pattern=r"^(actor|owner)$",
                  ignore_case=True, value_shape=ValueShape.ACTOR)
    """

    model_config = ConfigDict(frozen=True)

    role: FieldRole
    pattern: Optional[str] = Field(
        default=None, description="Regular expression searched against the field name"
    )
    names: list[str] = Field(
        default_factory=list, description="Exact field names that match regardless of pattern"
    )
    ignore_case: bool = False
    value_shape: ValueShape = ValueShape.ANY


DEFAULT_FIELD_RULES: list[FieldRule] = [
    FieldRule(
        role=FieldRole.DATE,
        names=[
            "createdAt", "updatedAt", "resolvedAt", "lastActiveAt", "expiresAt",
            "timestamp", "startedAt", "endedAt", "reservedAt", "date", "time",
        ],
        pattern=r"(?:_at|At|Date|_date|Time|_time|Timestamp)$",
        value_shape=ValueShape.ISO_DATE,
    ),
    FieldRule(
        role=FieldRole.ID,
        pattern=r"^id$|_id$|^uuid$|Id$",
        value_shape=ValueShape.SCALAR,
    ),
    FieldRule(
        role=FieldRole.TYPE,
        pattern=r"^type$|^kind$|^category$|^status$|^event_type$|^event$",
        ignore_case=True,
        value_shape=ValueShape.STRING,
    ),
    FieldRule(
        role=FieldRole.DESCRIPTION,
        pattern=r"description|message|text|summary|content",
        ignore_case=True,
        value_shape=ValueShape.STRING,
    ),
    FieldRule(
        role=FieldRole.ACTOR,
        pattern=r"^actor$|^user$|^author$|^by$|^created_by$|^createdBy$",
        ignore_case=True,
        value_shape=ValueShape.ACTOR,
    ),
]


class DetectionThresholds(BaseModel):
    """Numeric cut-offs used by the value heuristics of the field detector."""

    model_config = ConfigDict(frozen=True)

    metric_ratio: float = Field(
        default=0.8, description="Share of sampled items that must hold a number"
    )
    description_min_avg_length: float = Field(
        default=10, description="Average string length a fallback description must exceed"
    )
    type_min_distinct: int = 2
    type_max_distinct: int = 20
    type_max_distinct_ratio: float = Field(
        default=0.2, description="Distinct values allowed per sampled item for a fallback type"
    )
    schema_enum_max: int = Field(
        default=20, description="Largest schema enum still treated as a type hint"
    )
    id_min_items: int = Field(
        default=2, description="Items needed before uniqueness can identify an id field"
    )


class EngineConfig(BaseModel):
    """Tunables for the discovery and shape engines.

    Engines receive this explicitly (there is no module-level singleton), so
    different products can be classified with different rule tables in the
    same process.
    """

    model_config = ConfigDict(frozen=True)

    max_schema_depth: int = Field(
        default=10, ge=0, description="Deepest schema nesting at which $ref is still followed"
    )
    field_sample_size: int = Field(
        default=25, gt=0, description="Items inspected by the field detector"
    )
    envelope_keys: list[str] = Field(
        default_factory=lambda: [
            "points", "data", "items", "results", "records", "entries", "rows",
        ],
        description="Wrapper keys searched, in order, for a record collection",
    )
    field_rules: list[FieldRule] = Field(
        default_factory=lambda: list(DEFAULT_FIELD_RULES)
    )
    thresholds: DetectionThresholds = Field(default_factory=DetectionThresholds)


# --- Application config ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/adminlens/config.json``.

    Loaded and saved by :func:`~adminlens.config.load_global_config` and
    :func:`~adminlens.config.save_global_config`. See
    :func:`~adminlens.config.resolve_config` for the precedence chain.
    """

    default_product: Optional[str] = None
    output: OutputConfig = Field(default_factory=OutputConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)


class ProductProfile(BaseModel):
    """A managed product stored under the ``products/`` config directory.

    Bundles where the product's OpenAPI description lives and the base
    address its admin endpoints are served from; the admin prefix is
    detected from ``base_url``.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    spec: str = Field(description="URL or file path to the OpenAPI description")
    base_url: str = Field(description="Admin API base address, e.g. http://host/api/v1/admin")


# --- Discovery output models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised among the keys of an OpenAPI path item."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class OperationType(str, enum.Enum):
    """What an operation does to its resource, as the console understands it."""

    LIST = "list"  # GET /resource
    DETAIL = "detail"  # GET /resource/{id}
    CREATE = "create"  # POST /resource
    UPDATE = "update"  # PATCH/PUT /resource/{id}
    DELETE = "delete"  # DELETE /resource/{id}
    ACTION = "action"  # POST /resource/{id}/verb or POST /a/b
    SUB_LIST = "sub-list"  # GET /resource/{id}/sub
    SUB_DETAIL = "sub-detail"  # GET /resource/{id}/sub/{subId}
    SUB_ACTION = "sub-action"  # POST/PUT/PATCH/DELETE on a sub-resource
    CUSTOM = "custom"


class Operation(BaseModel):
    """One (HTTP method, path template) pair under the admin prefix.

    ``path_template`` has the admin prefix removed.  ``id`` is derived from
    the method and path so re-parsing the same document reproduces it.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    resource_key: str
    operation_type: OperationType
    http_method: HTTPMethod
    path_template: str
    path_parameters: list[str] = Field(default_factory=list)
    request_body_schema: Optional[dict[str, Any]] = None
    response_schema: Optional[dict[str, Any]] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class Resource(BaseModel):
    """A node of the resource forest.

    ``key`` is the dot-join of the ancestors' ``path_segment`` values and
    this node's own.  ``children`` are ordered by full key.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    parent_key: Optional[str] = None
    path_segment: str
    requires_parent_id: bool = False
    operations: list[Operation] = Field(default_factory=list)
    children: list[Resource] = Field(default_factory=list)


class ParsedSpec(BaseModel):
    """Complete discovery result for one product description.

    Produced by :func:`~adminlens.discovery.extractor.parse_openapi_spec`.

    See Also:
        :class:`Resource`: Nodes of :attr:`resources`.
        :class:`Operation`: Entries of :attr:`all_operations`.
    """

    model_config = ConfigDict(frozen=True)

    product_id: str
    spec_version: str = ""
    api_title: str = "Untitled API"
    api_version: str = "0.0.0"
    admin_prefix: str
    resources: list[Resource] = Field(default_factory=list)
    all_operations: list[Operation] = Field(default_factory=list)
    schemas: dict[str, Any] = Field(
        default_factory=dict, description="Component schemas with references resolved"
    )
    parsed_at: datetime


class DiscoveredEndpoint(BaseModel):
    """A parameterless GET endpoint a dashboard can call without user input."""

    model_config = ConfigDict(frozen=True)

    path: str
    resource_key: str
    resource_name: str
    response_schema: Optional[dict[str, Any]] = None
    operation_summary: Optional[str] = None
    priority: int
    is_entity_collection: bool = False


# --- Shape engine output models ---


class DataShape(str, enum.Enum):
    """How a response payload should be presented."""

    EMPTY = "empty"
    SCALAR = "scalar"
    SUMMARY = "summary"
    LIST = "list"
    TIME_SERIES = "time-series"
    EVENT_LOG = "event-log"


class DetectedFields(BaseModel):
    """Field roles inferred from a sample of records."""

    model_config = ConfigDict(frozen=True)

    id_field: Optional[str] = None
    date_field: Optional[str] = None
    description_field: Optional[str] = None
    type_field: Optional[str] = None
    actor_field: Optional[str] = None
    metric_fields: list[str] = Field(default_factory=list)
    all_fields: list[str] = Field(default_factory=list)


class ClassifiedData(BaseModel):
    """The shape verdict for one response payload."""

    model_config = ConfigDict(frozen=True)

    shape: DataShape
    fields: DetectedFields = Field(default_factory=DetectedFields)
    data: Any = None
    items: Optional[list[dict[str, Any]]] = None
    title: Optional[str] = None


Resource.model_rebuild()
