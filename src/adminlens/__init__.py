"""adminlens -- Turn OpenAPI descriptions into admin-console resource models.

This package ingests the OpenAPI description of a managed backend product
and produces a navigable tree of resources and classified operations, so a
generic admin console can render list/detail/create/action screens without
product-specific code.  A companion engine looks at the schema-less JSON
payloads those operations return and decides how they should be presented
(a summary card, a time-series chart, an event timeline, a table, ...).

Typical workflow::

    from adminlens.discovery import load_spec, parse_openapi_spec
    from adminlens.shapes import classify_response

    raw = load_spec("openapi.json")
    parsed = parse_openapi_spec(raw, "http://localhost:3000/api/v1/admin", "acme")
    verdict = classify_response(payload, operation.response_schema, operation.summary)

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and product profile management.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    discovery: Description ingestion and resource/operation discovery.
    shapes: Runtime response-shape classification.
"""

__version__ = "0.3.0"
