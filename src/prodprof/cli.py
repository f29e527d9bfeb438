"""prodprof CLI — top-level command group."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console

from prodprof import __version__
from prodprof.config import CONFIG_FILE_NAME, ProdprofConfig, load_config, validate_config
from prodprof.errors import ProfilingError
from prodprof.parsing.mapping import MappingTable
from prodprof.pipeline import run_pipeline
from prodprof.reporters.json_reporter import serialize_results
from prodprof.reporters.terminal import reporter

logger = logging.getLogger(__name__)
console = Console()

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=_LOG_FORMAT)


def _config_to_dict(config: ProdprofConfig) -> dict[str, Any]:
    """Convert ProdprofConfig to dictionary for display."""
    result = asdict(config)
    # Remove the raw field as it's redundant
    result.pop("raw", None)
    return result


def _load_or_exit(path: str) -> ProdprofConfig:
    """Load the configuration, or report why it cannot be read and exit."""
    try:
        return load_config(path)
    except (yaml.YAMLError, ValueError, OSError) as e:
        logger.error("Cannot load %s: %s", CONFIG_FILE_NAME, e)
        reporter.print_error(f"Cannot load {CONFIG_FILE_NAME}: {e}")
        raise SystemExit(1) from e


def _apply_overrides(config: ProdprofConfig, overrides: dict[str, Any]) -> None:
    """Overwrite report settings with the CLI options that were given."""
    for key, value in overrides.items():
        if value is not None:
            setattr(config.report, key, value)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="prodprof")
@click.pass_context
def cli(ctx: click.Context, *, verbose: bool) -> None:
    """prodprof — aggregate production instrumentation reports."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose=verbose)


@cli.command("report")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory (holds .prodprof.yml).",
)
@click.option("--mapping", "mapping", default=None, help="Instrumentation mapping document.")
@click.option("--reports-dir", default=None, help="Directory of execution reports.")
@click.option("--output", default=None, help="Path of the aggregated JSON result.")
@click.option("--pattern", default=None, help="Glob selecting report files.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Report loader threads.")
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Print the aggregated result as JSON instead of a summary table.",
)
def report(
    path: str,
    mapping: str | None,
    reports_dir: str | None,
    output: str | None,
    pattern: str | None,
    workers: int | None,
    *,
    as_json: bool,
) -> None:
    """Aggregate execution reports against an instrumentation mapping.

    Example:
      prodprof report --mapping instrumentReport.txt --reports-dir reports
    """
    config = _load_or_exit(path)
    _apply_overrides(
        config,
        {
            "mapping": mapping,
            "reports_dir": reports_dir,
            "output": output,
            "pattern": pattern,
            "workers": workers,
        },
    )

    errors = validate_config(config)
    if errors:
        for error in errors:
            reporter.print_error(error)
        raise SystemExit(1)

    try:
        result = run_pipeline(
            config.mapping_path,
            config.reports_path,
            config.output_path,
            pattern=config.report.pattern,
            workers=config.report.workers,
        )
    except ProfilingError as e:
        logger.error("Profiling run failed: %s", e)
        reporter.print_error(str(e))
        raise SystemExit(1) from e
    except OSError as e:
        logger.error("Profiling run failed: %s", e)
        reporter.print_error(f"I/O error: {e}")
        raise SystemExit(1) from e

    if as_json:
        click.echo(json.dumps(serialize_results(result.results), indent=2, ensure_ascii=False))
        return

    reporter.print_profiling_summary(result.results, result.report_count)
    reporter.print_success(f"Wrote {result.output_path} ({result.duration_s:.2f}s)")


@cli.command("mapping")
@click.argument("mapping_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def mapping_cmd(mapping_file: Path) -> None:
    """Summarize an instrumentation mapping document."""
    try:
        table = MappingTable.from_path(mapping_file)
    except ProfilingError as e:
        reporter.print_error(str(e))
        raise SystemExit(1) from e

    reporter.print_mapping_summary(table)


@cli.group("config")
def config_group() -> None:
    """Inspect the report settings read from `.prodprof.yml`."""


@config_group.command("show")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory (holds .prodprof.yml).",
)
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Print the settings as JSON instead of YAML.",
)
def config_show(path: str, *, as_json: bool) -> None:
    """Print the report settings after defaults and environment fallbacks."""
    config = _load_or_exit(path)

    config_dict = _config_to_dict(config)
    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
        return

    console.print(f"[bold cyan]Report settings for {config.root}[/bold cyan]")
    console.print(f"[dim]mapping -> {config.mapping_path}[/dim]")
    console.print(f"[dim]reports -> {config.reports_path}[/dim]")
    console.print(f"[dim]output  -> {config.output_path}[/dim]")
    click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory (holds .prodprof.yml).",
)
def config_validate(path: str) -> None:
    """Check the report settings before running `prodprof report`."""
    config = _load_or_exit(path)

    errors = validate_config(config)
    if not errors:
        reporter.print_success("Report settings are valid")
        return

    for error in errors:
        reporter.print_error(error)
    console.print(f"[dim]{len(errors)} problem(s) in {CONFIG_FILE_NAME}[/dim]")
    raise SystemExit(1)


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
