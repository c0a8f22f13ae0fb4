"""
Typer application for inspecting callback binding catalogues.

The commands only read catalogues; installing wrappers needs a live host
object and happens through :func:`callback_bridge.install_catalog`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from ..config import BridgeSettings, load_settings
from ..core import BindingCatalog, CatalogLoadError, NamespaceBinding, configure_logging, load_default_catalog

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Inspect the catalogue of callback-style host methods adapted by callback-bridge.\n\n"
        "Command groups:\n"
        "- catalog: list namespaces and describe their bound methods."
    ),
)
catalog_app = typer.Typer(help="List and describe catalogued namespaces.")
app.add_typer(catalog_app, name="catalog")


def _load_catalog(catalog_file: Optional[Path], settings: BridgeSettings) -> BindingCatalog:
    if catalog_file:
        return BindingCatalog.from_yaml(catalog_file)
    if settings.catalog_path:
        return BindingCatalog.from_yaml(settings.catalog_path)
    return load_default_catalog()


@app.callback(invoke_without_command=False)
def main(
    ctx: typer.Context,
    catalog_file: Optional[Path] = typer.Option(
        None,
        "--catalog",
        "-c",
        help="Override the catalogue YAML file.",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (e.g. DEBUG, INFO)."),
) -> None:
    """
    Load settings and the catalogue.

    Both are stored in Typer's state so child commands can retrieve them via
    :class:`typer.Context`.
    """

    try:
        settings = load_settings(strict=False)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    configure_logging(log_level or settings.log_level)
    try:
        catalog = _load_catalog(catalog_file, settings)
    except CatalogLoadError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    state = ctx.ensure_object(dict)
    state["catalog"] = catalog
    state["settings"] = settings


def _require_catalog(ctx: typer.Context) -> BindingCatalog:
    state = ctx.ensure_object(dict)
    catalog = state.get("catalog")
    if not isinstance(catalog, BindingCatalog):
        raise typer.Exit(code=2)
    return catalog


def _require_settings(ctx: typer.Context) -> BridgeSettings:
    state = ctx.ensure_object(dict)
    settings = state.get("settings")
    return settings if isinstance(settings, BridgeSettings) else BridgeSettings()


@catalog_app.command("list")
def catalog_list(ctx: typer.Context) -> None:
    """List catalogued namespaces with target and method counts."""

    catalog = _require_catalog(ctx)
    skipped = set(_require_settings(ctx).skip_namespaces)
    entries = catalog.list()
    if not entries:
        typer.echo("The catalog does not declare any namespaces.")
        raise typer.Exit(code=0)

    header = f"{'Namespace':<20} {'Targets':<8} {'Methods':<8} Status"
    typer.echo(header)
    typer.echo("-" * len(header))
    for entry in entries:
        status = "skipped" if entry.namespace in skipped else "active"
        typer.echo(f"{entry.namespace:<20} {len(list(entry.targets())):<8} {len(entry.methods):<8} {status}")


def _describe(entry: NamespaceBinding) -> None:
    typer.echo(f"Namespace: {entry.namespace}")
    typer.echo(f"Methods: {', '.join(entry.methods)}")
    if entry.members:
        typer.echo(f"Members: {', '.join(entry.members)}")
    typer.echo(f"Targets: {', '.join(entry.targets())}")
    if entry.reference:
        typer.echo(f"Reference: {entry.reference}")
    if entry.notes:
        typer.echo(f"Notes: {entry.notes}")


@catalog_app.command("describe")
def catalog_describe(
    ctx: typer.Context,
    namespace: str = typer.Argument(..., help="Namespace as written in the catalogue, e.g. 'tabs'."),
    output_json: bool = typer.Option(False, "--json", help="Emit the entry in JSON format."),
) -> None:
    """Show the methods and targets of one namespace."""

    catalog = _require_catalog(ctx)
    entry = catalog.get(namespace)
    if entry is None:
        typer.echo(f"Namespace '{namespace}' is not in the catalog.", err=True)
        raise typer.Exit(code=1)

    if output_json:
        typer.echo(entry.to_json())
        return
    _describe(entry)


if __name__ == "__main__":  # pragma: no cover
    app()
