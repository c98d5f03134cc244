"""SmartBOM CLI application entry point.

Built with `Typer <https://typer.tiangolo.com/>`_ and
`Rich <https://rich.readthedocs.io/>`_.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from smartbom.cli.errors import error_handler
from smartbom.clients import EnrichmentClient, LiteLLMEnrichmentClient, MockEnrichmentClient
from smartbom.clients.usage import UsageTracker
from smartbom.config import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    SmartBOMConfig,
    default_config_toml,
    load_config,
)
from smartbom.engine import EnrichmentPipeline
from smartbom.exceptions import ConfigurationError
from smartbom.loader import load_components, load_requirements
from smartbom.logging_setup import setup_logging
from smartbom.models import Component, PipelineResult, Requirements

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="smartbom",
    help="SmartBOM – enrich BOM components with alternatives and supplier offers.",
    add_completion=False,
    no_args_is_help=True,
)

_console = Console(stderr=True)
_stdout = Console()


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from smartbom import __version__

        _stdout.print(f"smartbom {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) output.",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration TOML file.",
    ),
) -> None:
    """Global options for SmartBOM CLI."""
    setup_logging("DEBUG" if verbose else "INFO")
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@app.command()
def init(
    path: Optional[Path] = typer.Argument(
        None,
        help="Project directory. Defaults to current directory.",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config."),
) -> None:
    """Write a default ``.smartbom/config.toml``."""
    with error_handler(_console):
        project_dir = (path or Path.cwd()).resolve()
        config_file = project_dir / DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE
        if config_file.exists() and not force:
            raise ConfigurationError(
                f"{config_file} already exists. Use --force to overwrite."
            )
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(default_config_toml(), encoding="utf-8")
        _stdout.print(f"[green]Wrote {config_file}[/green]")


# ---------------------------------------------------------------------------
# enrich
# ---------------------------------------------------------------------------


def _build_client(config: SmartBOMConfig, mock: bool) -> EnrichmentClient:
    if mock:
        return MockEnrichmentClient(
            alternatives_timeout=config.alternatives_timeout,
            suppliers_timeout=config.suppliers_timeout,
        )
    return LiteLLMEnrichmentClient.from_config(config)


async def _run_pipeline(
    client: EnrichmentClient,
    config: SmartBOMConfig,
    components: list[Component],
    requirements: Requirements,
) -> PipelineResult:
    try:
        return await EnrichmentPipeline.from_config(client, config).run(components, requirements)
    finally:
        await client.aclose()


def _summary_table(result: PipelineResult) -> Table:
    table = Table(title="SmartBOM enrichment", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Component")
    table.add_column("Alternatives", justify="right")
    table.add_column("Suppliers", justify="right")
    table.add_column("Lowest landed cost", justify="right")
    for number, component in enumerate(result.components, start=1):
        lowest = component.lowest_landed_cost()
        table.add_row(
            str(number),
            escape(component.name),
            str(len(component.alternatives)),
            str(len(component.suppliers)) if component.supplier_error is None else "[red]error[/red]",
            f"{lowest:,.2f}" if lowest is not None else "-",
        )
    return table


def _usage_table(tracker: UsageTracker) -> Table:
    table = Table(title="Research usage")
    table.add_column("Model")
    table.add_column("Calls", justify="right")
    table.add_column("Prompt tokens", justify="right")
    table.add_column("Completion tokens", justify="right")
    for model, usage in sorted(tracker.get_model_breakdown().items()):
        table.add_row(
            escape(model),
            str(usage["calls"]),
            f"{usage['prompt_tokens']:,}",
            f"{usage['completion_tokens']:,}",
        )
    return table


@app.command()
def enrich(
    ctx: typer.Context,
    input_file: Path = typer.Argument(..., help="Components file (.csv or .json)."),
    requirements_file: Optional[Path] = typer.Option(
        None,
        "--requirements",
        "-r",
        help="Sourcing requirements (.json or .toml).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the enriched result as JSON to this file (default: stdout).",
    ),
    mock: bool = typer.Option(
        False,
        "--mock",
        help="Use the offline mock research client.",
    ),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-b", help="Components enriched concurrently."
    ),
    batch_delay: Optional[float] = typer.Option(
        None, "--batch-delay", help="Seconds between batches."
    ),
) -> None:
    """Enrich every component with alternatives and supplier offers.

    Example::

        smartbom enrich bom.csv -r requirements.json -o enriched.json
        smartbom enrich bom.json --mock --batch-delay 0
    """
    with error_handler(_console):
        obj = ctx.obj or {}
        config = load_config(obj.get("config_path"))
        overrides = {
            key: value
            for key, value in (("batch_size", batch_size), ("batch_delay", batch_delay))
            if value is not None
        }
        if overrides:
            try:
                config = SmartBOMConfig(**{**config.model_dump(), **overrides})
            except ValueError as exc:
                raise ConfigurationError(f"Invalid option: {exc}") from exc

        setup_logging("DEBUG" if obj.get("verbose") else config.log_level, config.log_file)

        components = load_components(input_file)
        requirements = load_requirements(requirements_file)
        client = _build_client(config, mock)

        result = asyncio.run(_run_pipeline(client, config, components, requirements))

        payload = json.dumps(result.model_dump(mode="json", by_alias=True), indent=2)
        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(payload, encoding="utf-8")
            _console.print(f"[green]Wrote {output}[/green]")
        else:
            typer.echo(payload)

        _console.print(_summary_table(result))
        summary = result.summary
        _console.print(
            f"{summary.succeeded}/{summary.total} component(s) enriched, "
            f"{summary.alternatives} alternative(s), {summary.supplier_offers} supplier offer(s) "
            f"in {summary.elapsed_seconds:.1f}s"
        )
        for failure in result.failures:
            _console.print(f"[yellow]Failed:[/yellow] {escape(failure.describe())}")
        if isinstance(client, LiteLLMEnrichmentClient):
            _console.print(_usage_table(client.tracker))
            _console.print(
                f"{client.tracker.get_total_tokens():,} token(s) over "
                f"{client.tracker.get_total_calls()} research call(s)"
            )


if __name__ == "__main__":  # pragma: no cover
    app()
