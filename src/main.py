"""
Theme build — CLI entrypoint.

Usage:
    themebuild build                    # one-shot full build
    themebuild build --optimize         # content-addressed, references rewritten
    themebuild build --watch --dirty    # skip icons, rebuild on change
    themebuild config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from src import __version__
from src.core.observability.logging_config import setup_logging


def _log_level(debug: bool, verbose: bool, quiet: bool) -> str:
    """--debug > --verbose > --quiet > THEMEBUILD_LOG_LEVEL > WARNING."""
    for flag, name in ((debug, "DEBUG"), (verbose, "INFO"), (quiet, "ERROR")):
        if flag:
            return name
    return os.environ.get("THEMEBUILD_LOG_LEVEL", "WARNING")


def _emit_json(payload: dict, ok: bool) -> None:
    click.echo(json.dumps(payload, indent=2))
    sys.exit(0 if ok else 1)


def _bullets(title: str, items: list[str], color: str) -> None:
    click.secho(title, fg=color, bold=color == "red")
    for item in items:
        click.echo(f"   • {item}")


@click.group()
@click.version_option(version=__version__, prog_name="themebuild")
@click.option("--verbose", "-v", is_flag=True, help="Log each phase.")
@click.option("--quiet", "-q", is_flag=True, help="Only print the final verdict.")
@click.option("--debug", is_flag=True, help="Log every file and tool invocation.")
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(dir_okay=False),
    help="Path to theme-build.yml (default: search upward from cwd).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool, config_path: str | None) -> None:
    """Theme build — compile the theme's assets and templates."""
    ctx.obj = {
        "quiet": quiet,
        "config_path": Path(config_path) if config_path else None,
    }
    setup_logging(
        level=_log_level(debug, verbose, quiet),
        log_file=os.environ.get("THEMEBUILD_LOG_FILE"),
        log_file_level=os.environ.get("THEMEBUILD_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )


@cli.command()
@click.option("--watch", is_flag=True, help="Rebuild on every source or template change.")
@click.option("--dirty", is_flag=True, help="Skip copying icons and static assets.")
@click.option("--optimize", is_flag=True, help="Minify, content-address outputs and rewrite template references.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the build report as JSON.")
@click.pass_obj
def build(obj: dict, watch: bool, dirty: bool, optimize: bool, as_json: bool) -> None:
    """Build the theme into the output directory."""
    from src.core.config.loader import ConfigError
    from src.core.models.build import BuildOptions
    from src.core.use_cases.build import run_build

    options = BuildOptions(watch=watch, dirty=dirty, optimize=optimize)
    chatty = not (as_json or obj["quiet"])

    if chatty:
        click.secho(f"🔨 Building theme ({options.mode_label})...", fg="cyan", bold=True)
        if watch:
            click.echo("   Watching for changes, press Ctrl+C to stop.")

    try:
        result = run_build(options, config_path=obj["config_path"])
    except ConfigError as e:
        if as_json:
            _emit_json({"ok": False, "error": str(e)}, ok=False)
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        _emit_json(result.to_dict(), ok=result.ok)

    if not result.ok:
        click.secho(f"❌ Build failed: {result.error}", fg="red", bold=True)
        sys.exit(1)

    click.secho("✅ Build succeeded", fg="green", bold=True)
    if not chatty:
        return

    report = result.report
    copied = report.copy.files if report.copy and report.copy.status == "done" else None
    click.echo(f"   Assets copied: {'skipped (--dirty)' if copied is None else copied}")

    last = report.last
    for phase in last.phases:
        click.echo(f"   {phase.name:10s} {phase.files:5d} files  {phase.duration_ms}ms")
    click.echo(f"   Manifest entries: {last.manifest_entries}")
    click.echo(f"   Duration: {last.duration_ms}ms")


@cli.group()
def config() -> None:
    """Inspect the build configuration."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_obj
def config_check(obj: dict, as_json: bool) -> None:
    """Validate theme-build.yml without building."""
    from src.core.use_cases.config_check import check_config

    result = check_config(config_path=obj["config_path"])
    if as_json:
        _emit_json(result.to_dict(), ok=result.valid)

    if result.valid:
        settings = result.settings
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Source: {settings.source_dir}")
        click.echo(f"   Output: {settings.output_dir}")
        click.echo(f"   Icon sets: {len(settings.icon_sets)}")
    else:
        _bullets("❌ Configuration errors:", result.errors, "red")

    if result.warnings:
        _bullets("⚠️  Warnings:", result.warnings, "yellow")

    if not result.valid:
        sys.exit(1)


if __name__ == "__main__":
    cli()
