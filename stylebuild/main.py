"""
stylebuild — CLI entrypoint.

Usage:
    python -m stylebuild            # same as "build"
    python -m stylebuild build
    python -m stylebuild --help
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from stylebuild import __version__
from stylebuild.core.observability.logging_config import resolve_level, setup_logging

_STATUS_STYLE = {
    "done": ("✅", "green"),
    "error": ("❌", "red"),
    "skipped": ("⏭", "yellow"),
}


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="stylebuild")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to stylebuild.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """stylebuild — compile the stylesheets and render the docs page."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(level=resolve_level(debug, verbose, quiet), quiet_third_party=not debug)

    if ctx.invoked_subcommand is None:
        ctx.invoke(build)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def build(ctx: click.Context, as_json: bool) -> None:
    """Build every stylesheet and the documentation page."""
    from stylebuild.core.use_cases.build import run_build

    result = run_build(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    pipeline = result.pipeline
    if pipeline is None:
        click.secho("❌ Build produced no pipeline result", fg="red")
        sys.exit(1)

    quiet = ctx.obj.get("quiet", False)
    verbose = ctx.obj.get("verbose", False)

    for stage in pipeline.stages:
        icon, color = _STATUS_STYLE.get(stage.status, ("•", "white"))
        if quiet and stage.status != "error":
            continue
        click.secho(f"{icon} {stage.label}", fg=color, nl=False)
        click.echo(f"  ({stage.duration_ms} ms)" if stage.status == "done" else "")
        if verbose:
            for line in stage.log_lines:
                click.echo(f"     {line}")
        if stage.error:
            click.secho(f"     {stage.error_type}: {stage.error}", fg="red")

    if not pipeline.ok:
        failed = pipeline.failed_stage
        name = failed.name if failed else "?"
        click.secho(f"\nBuild failed at stage '{name}'.", fg="red", bold=True)
        sys.exit(1)

    if not quiet:
        click.secho(f"\n📦 Output in {pipeline.dist_dir}", fg="cyan", bold=True)


if __name__ == "__main__":
    cli()
