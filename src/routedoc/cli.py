from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from routedoc.config import Settings
from routedoc.docs.facade import RouteDoc
from routedoc.errors import ConfigurationError


app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()


def load_target(target: str, app_dir: Optional[str] = None) -> RouteDoc:
    """
    Import `module:attribute` and return the RouteDoc it names.

    The attribute may also be a zero-argument factory returning a RouteDoc.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"target must look like 'module:attribute', got {target!r}")

    if app_dir:
        app_path = str(Path(app_dir).expanduser().resolve())
        if app_path not in sys.path:
            sys.path.insert(0, app_path)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"cannot import {module_name}: {e}") from e

    obj = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigurationError(f"{module_name} has no attribute {attr}") from e

    if not isinstance(obj, RouteDoc) and callable(obj):
        obj = obj()
    if not isinstance(obj, RouteDoc):
        raise ConfigurationError(f"{target} is not a RouteDoc (got {type(obj).__name__})")
    return obj


def _load(target: str, app_dir: Optional[str]) -> RouteDoc:
    try:
        return load_target(target, app_dir)
    except ConfigurationError as e:
        raise typer.BadParameter(str(e), param_hint="TARGET") from e


def _apply_settings(doc: RouteDoc, path: str) -> None:
    try:
        loaded = Settings.from_file(Path(path).expanduser())
    except ConfigurationError as e:
        raise typer.BadParameter(str(e), param_hint="--settings") from e

    update = {
        name: getattr(loaded, name)
        for name in ("title", "version", "description")
        if name in loaded.model_fields_set
    }
    doc.set_info(doc.document.info.model_copy(update=update))


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log registration details"),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


@app.command()
def export(
    target: str = typer.Argument(..., help="RouteDoc to export, as module:attribute"),
    format: str = typer.Option("json", help="Output format: json|yaml"),
    out: Optional[str] = typer.Option(None, help="Output path (default: print to stdout)"),
    app_dir: Optional[str] = typer.Option(None, help="Directory added to sys.path before import"),
    settings: Optional[str] = typer.Option(
        None, help="JSON/YAML settings file overriding the document title, version and description"
    ),
) -> None:
    fmt = format.lower().strip()
    if fmt not in ("json", "yaml"):
        raise typer.BadParameter("format must be one of: json, yaml")

    doc = _load(target, app_dir)
    if settings:
        _apply_settings(doc, settings)
    text = doc.generator.to_json() if fmt == "json" else doc.generator.to_yaml()

    if out:
        out_path = Path(out).expanduser()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
        console.print(f"[bold green]Wrote[/bold green] {fmt} document to: {out_path}")
    else:
        # raw document on stdout, no rich markup
        typer.echo(text)


@app.command()
def operations(
    target: str = typer.Argument(..., help="RouteDoc to inspect, as module:attribute"),
    tag: Optional[str] = typer.Option(None, help="Only operations with this tag"),
    app_dir: Optional[str] = typer.Option(None, help="Directory added to sys.path before import"),
) -> None:
    doc = _load(target, app_dir)
    api = doc.document

    table = Table(show_header=True, header_style="bold")
    table.add_column("METHOD", no_wrap=True)
    table.add_column("PATH")
    table.add_column("OPERATION ID")
    table.add_column("TAGS")
    table.add_column("SUMMARY")

    count = 0
    for path in sorted(api.paths):
        for method, op in api.paths[path].operations().items():
            if tag is not None and tag not in (op.tags or []):
                continue
            table.add_row(method, path, op.operation_id, ", ".join(op.tags or []), op.summary or "")
            count += 1

    console.print(f"[bold]{api.info.title}[/bold] {api.info.version}")
    console.print(f"[bold]Operations:[/bold] {count}")
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
