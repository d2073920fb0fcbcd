"""
Command line interface for the cmsite static site builder.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .api import ContentSourceError
from .config import BuildMode, ConfigError, SiteConfig, load_config, resolve_build_mode
from .pipeline import create_client, execute_build, plan_sitemap
from .render import RenderError
from .site import BuildError, BuildReport, DuplicateRouteError, MissingRecordError

console = Console()
app = typer.Typer(help="Build a static site from Contentful page entries.")
logger = logging.getLogger(__name__)

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]

BUILD_FAILURES = (ContentSourceError, MissingRecordError, DuplicateRouteError, BuildError, RenderError)


def _configure_logging(level_name: str) -> None:
    env_override = os.getenv("CMSITE_LOG_LEVEL")
    level_str = (env_override or level_name or "info").upper()
    if level_str not in {lvl.upper() for lvl in LOG_LEVELS}:
        level_str = "INFO"
    logging.basicConfig(
        level=getattr(logging, level_str, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.debug("Logging configured at %s", level_str)


def _resolve_config_path(value: Path) -> Path:
    """Ensure config path exists and return absolute path."""
    resolved = value.expanduser().resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"No config file found at {resolved}")
    if not resolved.is_file():
        raise typer.BadParameter(f"Config path must be a file, got directory: {resolved}")
    return resolved


def _load_config_or_exit(path: Path) -> SiteConfig:
    try:
        return load_config(path)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _resolve_mode_or_exit(mode: Optional[str]) -> BuildMode:
    try:
        return resolve_build_mode(mode)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _print_build_report(report: BuildReport) -> None:
    table = Table(title="Build Summary")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in report.summary_rows():
        table.add_row(key, value)
    console.print(table)


@app.callback(invoke_without_command=True)
def _root_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show cmsite version and exit.",
        is_flag=True,
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        help="Logging level (critical, error, warning, info, debug).",
        show_default=True,
        case_sensitive=False,
    ),
) -> None:
    """
    Default command when no subcommand is selected.
    """
    _configure_logging(log_level)

    if version:
        console.print(f"[bold green]cmsite[/] {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print("[bold yellow]cmsite[/] is ready. Run [cyan]cmsite build --config cmsite.toml[/] to build the site.")


@app.command()
def build(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to the site configuration TOML file.",
        callback=_resolve_config_path,
    ),
    mode: Optional[str] = typer.Option(
        None,
        "--mode",
        "-m",
        help="Build mode (development, production). CMSITE_MODE overrides it.",
        case_sensitive=False,
    ),
    clean: bool = typer.Option(
        True,
        "--clean/--no-clean",
        help="Remove files in the output directory that this build did not produce.",
    ),
) -> None:
    """
    Fetch pages from Contentful and write the static site.
    """
    site_config = _load_config_or_exit(config)
    build_mode = _resolve_mode_or_exit(mode)
    logger.info("Starting %s build from %s", build_mode, config)

    try:
        client = create_client(site_config)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    try:
        report = execute_build(site_config, mode=build_mode, clean=clean, client=client)
    except BUILD_FAILURES as exc:
        console.print(f"[bold red]Build failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    finally:
        client.close()

    _print_build_report(report)
    console.print("[bold green]Build completed.[/]")


@app.command()
def routes(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to the site configuration TOML file.",
        callback=_resolve_config_path,
    ),
    mode: Optional[str] = typer.Option(
        None,
        "--mode",
        "-m",
        help="Build mode (development, production). CMSITE_MODE overrides it.",
        case_sensitive=False,
    ),
) -> None:
    """
    Show the page routes a build would write, without writing anything.
    """
    site_config = _load_config_or_exit(config)
    build_mode = _resolve_mode_or_exit(mode)

    try:
        client = create_client(site_config)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    try:
        sitemap = plan_sitemap(site_config, client, mode=build_mode)
    except BUILD_FAILURES as exc:
        console.print(f"[bold red]Route planning failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    finally:
        client.close()

    table = Table(title=f"Page Routes ({build_mode})")
    table.add_column("Path", overflow="fold")
    table.add_column("Template")
    for route in sitemap.routes:
        table.add_row(route.path, route.template)
    console.print(table)
    console.print(f"[green]{len(sitemap)} route(s).[/]")


def main() -> None:
    """
    Entry-point used by the console script defined in pyproject.toml.
    """
    app()
