"""Product commands -- manage saved product profiles.

Provides the ``adminlens products`` sub-command group.  A product profile
records where a product's OpenAPI description lives and its admin base
address, so discovery commands can be run with ``--product NAME`` instead
of repeating both every time.
"""

from __future__ import annotations

import typer

from adminlens.output import error, get_output, info, success


products_app = typer.Typer(no_args_is_help=True)


@products_app.command("add")
def products_add(
    name: str = typer.Argument(help="Product identifier."),
    spec: str = typer.Option(..., "--spec", "-s", help="URL or path of the OpenAPI description."),
    base_url: str = typer.Option(..., "--base-url", "-b", help="Admin API base address."),
    default: bool = typer.Option(False, "--default", help="Make this the default product."),
) -> None:
    """Save a product profile.

    Example::

        adminlens products add acme --spec ./openapi.json \\
            --base-url http://localhost:3000/api/v1/admin --default
    """
    from adminlens.config import load_global_config, save_global_config, save_product
    from adminlens.discovery.paths import detect_admin_prefix
    from adminlens.models import ProductProfile

    if not detect_admin_prefix(base_url):
        error(f"Cannot find an admin path in base URL: {base_url}")
        raise typer.Exit(code=2)

    save_product(ProductProfile(name=name, spec=spec, base_url=base_url))
    if default:
        config = load_global_config()
        config.default_product = name
        save_global_config(config)
    success(f"Saved product '{name}'.")


@products_app.command("list")
def products_list() -> None:
    """List saved product profiles."""
    from adminlens.config import list_products, load_global_config, load_product

    names = list_products()
    if not names:
        info("No products saved. Run: adminlens products add <name> --spec ... --base-url ...")
        return

    default_name = load_global_config().default_product
    rows: list[list[str]] = []
    for name in names:
        product = load_product(name)
        rows.append([
            name,
            product.spec,
            product.base_url,
            "yes" if name == default_name else "",
        ])
    get_output().print_table(
        ["Product", "Spec", "Base URL", "Default"], rows, title="Products"
    )


@products_app.command("remove")
def products_remove(
    name: str = typer.Argument(help="Product identifier."),
) -> None:
    """Delete a saved product profile."""
    from adminlens.config import delete_product, load_global_config, save_global_config
    from adminlens.exceptions import ConfigError

    try:
        delete_product(name)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    config = load_global_config()
    if config.default_product == name:
        config.default_product = None
        save_global_config(config)
    success(f"Removed product '{name}'.")
