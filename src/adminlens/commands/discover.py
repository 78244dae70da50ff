"""Discovery commands -- examine what a product's admin API exposes.

Provides ``adminlens discover``, ``adminlens operations`` and
``adminlens endpoints``.  Each command loads an OpenAPI description (from
the SOURCE argument or a saved product profile), runs discovery against
the admin base address, and prints the result as a tree or table.
"""

from __future__ import annotations

from typing import Optional

import typer

from adminlens.models import ParsedSpec
from adminlens.output import error, get_output, info, warning

SOURCE_ARGUMENT = typer.Argument(
    None, help="URL, file path, or '-' for the OpenAPI description."
)
BASE_URL_OPTION = typer.Option(
    None, "--base-url", "-b", help="Admin API base address (overrides the product's)."
)
PRODUCT_OPTION = typer.Option(
    None, "--product", "-p", help="Saved product profile to use."
)


def load_parsed_spec(
    source: Optional[str],
    base_url: Optional[str],
    product_name: Optional[str],
) -> ParsedSpec:
    """Resolve the description and base address, then run discovery.

    Explicit arguments win over the active product profile.

    Raises:
        typer.Exit: With the error's exit code when configuration, loading,
            or parsing fails, or with code 2 when no description or base
            address can be determined.
    """
    from adminlens.config import resolve_config
    from adminlens.discovery import load_spec, parse_openapi_spec, validate_openapi_version
    from adminlens.exceptions import AdminlensError, InvalidUsageError

    try:
        config, product = resolve_config(cli_product=product_name, cli_base_url=base_url)
    except AdminlensError as exc:
        error(f"Config error: {exc}")
        raise typer.Exit(code=exc.exit_code) from None

    spec_source = source or (product.spec if product else None)
    effective_base_url = base_url or (product.base_url if product else None)

    try:
        if spec_source is None:
            raise InvalidUsageError("No API description given. Pass SOURCE or --product.")
        if effective_base_url is None:
            raise InvalidUsageError("No admin base address given. Pass --base-url or --product.")
        raw = load_spec(spec_source)
        validate_openapi_version(raw)
        parsed = parse_openapi_spec(
            raw,
            effective_base_url,
            product.name if product else "default",
            config=config.engine,
        )
    except AdminlensError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not parsed.all_operations:
        warning(f"No operations found under admin prefix {parsed.admin_prefix!r}.")
    return parsed


def discover_command(
    source: Optional[str] = SOURCE_ARGUMENT,
    base_url: Optional[str] = BASE_URL_OPTION,
    product: Optional[str] = PRODUCT_OPTION,
) -> None:
    """Show the resource tree discovered under the admin prefix.

    Example::

        adminlens discover openapi.json --base-url http://localhost:3000/api/v1/admin
        adminlens discover --product acme --json
    """
    parsed = load_parsed_spec(source, base_url, product)
    info(f"{parsed.api_title} {parsed.api_version} -- admin prefix {parsed.admin_prefix}")
    get_output().print_resource_tree(parsed.resources, title=parsed.api_title)


def operations_command(
    source: Optional[str] = SOURCE_ARGUMENT,
    base_url: Optional[str] = BASE_URL_OPTION,
    product: Optional[str] = PRODUCT_OPTION,
) -> None:
    """List every admin operation with its resource and type."""
    parsed = load_parsed_spec(source, base_url, product)

    rows = [
        [
            op.http_method.value.upper(),
            op.path_template,
            op.resource_key,
            op.operation_type.value,
            op.summary or "-",
        ]
        for op in parsed.all_operations
    ]
    get_output().print_table(
        ["Method", "Path", "Resource", "Type", "Summary"],
        rows,
        title=f"{parsed.api_title} -- Operations ({len(rows)})",
    )


def endpoints_command(
    source: Optional[str] = SOURCE_ARGUMENT,
    base_url: Optional[str] = BASE_URL_OPTION,
    product: Optional[str] = PRODUCT_OPTION,
) -> None:
    """Rank the parameterless GET endpoints a dashboard can load."""
    from adminlens.discovery import discover_endpoints

    parsed = load_parsed_spec(source, base_url, product)
    endpoints = discover_endpoints(parsed.resources)
    if not endpoints:
        info("No dashboard endpoints found.")
        return

    rows = [
        [
            str(ep.priority),
            ep.resource_key,
            ep.path,
            "collection" if ep.is_entity_collection else "dashboard",
        ]
        for ep in endpoints
    ]
    get_output().print_table(
        ["Priority", "Resource", "Path", "Kind"], rows, title="Dashboard endpoints"
    )
