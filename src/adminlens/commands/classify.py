"""Classify command -- show how a response payload would be presented."""

from __future__ import annotations

from typing import Optional

import typer

from adminlens.output import error, format_response


def classify_command(
    payload: str = typer.Argument(help="URL, file path, or '-' for a JSON payload."),
    summary: Optional[str] = typer.Option(
        None, "--summary", help="Operation summary to pass through as the title."
    ),
    schema: Optional[str] = typer.Option(
        None, "--schema", help="File holding the (resolved) response schema."
    ),
) -> None:
    """Classify a JSON payload and print its shape and detected fields.

    Example::

        curl -s http://localhost:3000/api/v1/admin/stats/trends | adminlens classify -
        adminlens classify events.json --summary "Recent activity" --json
    """
    from adminlens.config import resolve_config
    from adminlens.discovery import load_payload, load_spec
    from adminlens.exceptions import AdminlensError
    from adminlens.shapes import classify_response

    try:
        config, _ = resolve_config()
        data = load_payload(payload)
        schema_dict = load_spec(schema) if schema else None
    except AdminlensError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    verdict = classify_response(data, schema_dict, summary, config=config.engine)
    format_response({
        "shape": verdict.shape.value,
        "title": verdict.title,
        "item_count": len(verdict.items) if verdict.items is not None else None,
        "fields": verdict.fields.model_dump(mode="json"),
    })
