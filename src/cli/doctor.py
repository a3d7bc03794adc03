"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.webflow_api import WebflowClient
from core.config import AppSettings, write_user_env_vars
from core.domain.errors import ContentAPIError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_api(settings: AppSettings) -> tuple[bool, str]:
    if not settings.site_id:
        return False, "No site ID -> cannot list collections"
    try:
        async with WebflowClient(settings) as api:
            collections = await api.list_collections(settings.site_id)
    except ContentAPIError as exc:
        return False, str(exc)
    return True, f"{len(collections)} collection(s) visible"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="webflow-populate Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.api_token:
        table.add_row("API token", "OK", "Bearer token configured")
    else:
        table.add_row("API token", "MISSING", "Set WEBFLOW_API_TOKEN or run `doctor setup-token`")
    if settings.site_id:
        table.add_row("Site ID", "OK", settings.site_id)
    else:
        table.add_row("Site ID", "MISSING", "Set WEBFLOW_SITE_ID or pass --site-id")
    table.add_row("API base_url", "OK", settings.api_base_url)
    table.add_row("Max depth", "OK", str(settings.max_depth))

    # Connectivity (best-effort)
    ok_api, detail_api = asyncio.run(_check_api(settings))
    table.add_row("API access", "OK" if ok_api else "FAIL", detail_api)

    _console.print(table)

    if not ok_api:
        _console.print(
            "\n[yellow]Note:[/yellow] `populate` needs a valid token and site ID to list collections."
        )
        raise typer.Exit(code=1)


@app.command(name="setup-token")
def setup_token() -> None:
    """Interactive token setup (stores config in the user config .env)."""

    api_token = typer.prompt("Webflow API token", hide_input=True, confirmation_prompt=False).strip()
    site_id = typer.prompt("Webflow site ID", default="", show_default=False).strip()

    if not api_token:
        raise typer.BadParameter("the API token is required")

    env_path = write_user_env_vars(
        {
            "WEBFLOW_API_TOKEN": api_token,
            "WEBFLOW_SITE_ID": site_id or None,
        }
    )

    _console.print(f"[green]Saved Webflow config to:[/green] {env_path}")
