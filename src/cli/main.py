"""Command-line entry point (Typer).

`webflow-populate populate <Collection>` fetches a collection and prints every
item with its references populated, as JSON on stdout. Spinners, summaries and
errors go to stderr so the dump can be piped.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from adapters.json_exporter import export_json, render_json
from adapters.webflow_api import WebflowClient
from cli import doctor
from cli.ui_components import StepSpinner, build_summary_table
from core.config import AppSettings
from core.domain.errors import PopulateError, StepFailed
from core.domain.models import FieldRule, PopulateOptions
from core.observability import configure_logging
from core.services.population_pipeline import (
    PipelineHooks,
    PipelineResult,
    PopulateRequest,
    populate_collection,
)

app = typer.Typer(
    no_args_is_help=True,
    help="Fetch a Webflow collection with every reference field fully populated.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console(stderr=True)


def _build_api(settings: AppSettings) -> WebflowClient:
    return WebflowClient(settings)


async def _populate(
    settings: AppSettings,
    request: PopulateRequest,
    hooks: PipelineHooks,
) -> PipelineResult:
    async with _build_api(settings) as api:
        return await populate_collection(api=api, settings=settings, request=request, hooks=hooks)


def _parse_rules(values: List[str]) -> list[FieldRule]:
    try:
        return [FieldRule.parse(value) for value in values]
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--map") from exc


@app.command()
def populate(
    collection_name: str = typer.Argument(..., help="The Webflow collection name (or singular name)."),
    site_id: Optional[str] = typer.Option(
        None, "--site-id", "-i", help="Webflow site ID (defaults to WEBFLOW_SITE_ID)."
    ),
    api_token: Optional[str] = typer.Option(
        None, "--api-token", "-k", help="Webflow API token (defaults to WEBFLOW_API_TOKEN)."
    ),
    dump: bool = typer.Option(True, "--dump/--no-dump", "-d/-D", help="Print the JSON result on stdout."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Also write the JSON result to this file."
    ),
    index: bool = typer.Option(
        True,
        "--index/--no-index",
        "-x/-X",
        help="Index items by --index-by instead of returning a list.",
    ),
    index_by: str = typer.Option(
        "slug", "--index-by", "-b", help="Field used as index key: slug, id, name or any field."
    ),
    map_rules: Optional[List[str]] = typer.Option(
        None, "--map", "-m", help="Move a field: SOURCE=DESTINATION (dotted paths, repeatable)."
    ),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth", min=1, help="Maximum reference nesting (defaults to WEBFLOW_MAX_DEPTH)."
    ),
    silent: bool = typer.Option(
        False, "--silent", "-s", help="Hide progress output unless there is an error."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output on stderr."),
) -> None:
    """Fetch all items of COLLECTION_NAME, fully populated, as JSON."""

    configure_logging(verbose=verbose, silent=silent)

    settings = AppSettings()
    updates = {"api_token": api_token, "site_id": site_id}
    settings = settings.model_copy(update={k: v for k, v in updates.items() if v})
    if not settings.site_id:
        raise typer.BadParameter("a site ID is required (--site-id or WEBFLOW_SITE_ID)", param_hint="--site-id")

    request = PopulateRequest(
        site_id=settings.site_id,
        collection_name=collection_name,
        options=PopulateOptions(
            rules=_parse_rules(map_rules or []),
            index=index,
            index_by=index_by,
        ),
        max_depth=max_depth,
    )

    spinner = StepSpinner(_console, silent=silent)
    try:
        result = asyncio.run(_populate(settings, request, spinner.hooks()))
    except StepFailed as exc:
        spinner.fail(str(exc.error))
        raise typer.Exit(code=1) from exc
    except PopulateError as exc:
        spinner.fail(str(exc))
        raise typer.Exit(code=1) from exc

    if output is not None:
        path = export_json(output=result.output, output_path=output)
        if not silent:
            _console.print(f"[green]Saved JSON to:[/green] {path}")

    if dump:
        typer.echo(render_json(result.output))

    if not silent:
        _console.print(build_summary_table(result))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
