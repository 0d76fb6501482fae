"""Integration admin CLI - serve the API and inspect the three tiers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import typer
from rich.console import Console
from rich.table import Table

from .config import settings
from .editor import IntegrationAdminEditor, Tier

app = typer.Typer(
    name="integration-admin",
    help="Configure systems, object rules and field mappings for the integration pipeline",
    no_args_is_help=True,
)
console = Console()

ApiUrl = typer.Option(None, "--api-url", help="Use a running admin API instead of the local database")


@asynccontextmanager
async def open_gateway(api_url: str | None) -> AsyncIterator:
    """Yield a gateway: HTTP when ``api_url`` is given, else the local database."""
    if api_url:
        from .client import AdminAPIClient

        async with AdminAPIClient(api_url) as api:
            yield api
        return

    from .database import async_session_factory, create_tables, engine
    from .gateway import DatabaseGateway

    await create_tables()
    try:
        yield DatabaseGateway(async_session_factory)
    finally:
        await engine.dispose()


def _bool(value: bool) -> str:
    return "[green]yes[/green]" if value else "[dim]no[/dim]"


def _exit_on_error(editor: IntegrationAdminEditor) -> None:
    if editor.error_message:
        console.print(f"[red]{editor.error_message}[/red]")
        raise typer.Exit(1)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("serve")
def serve(
    port: int = typer.Option(8030, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Launch the admin JSON API."""
    import uvicorn

    console.print(f"[bold cyan]Starting Integration Admin API at http://{host}:{port}[/bold cyan]")
    uvicorn.run("integration_admin.app:app", host=host, port=port, reload=reload)


@app.command("register-object")
def register_object(
    api_name: str = typer.Argument(..., help="Object api name, e.g. Opportunity"),
    table_name: str = typer.Argument(..., help="Table whose columns describe the object"),
    label: str = typer.Option(None, "--label", "-l", help="Display label"),
):
    """Make an object integratable so its fields can be mapped."""
    from .database import async_session_factory, create_tables, engine
    from .services import describe_svc

    async def _run():
        await create_tables()
        try:
            async with async_session_factory() as db:
                return await describe_svc.register_object(db, api_name, table_name, label)
        finally:
            await engine.dispose()

    obj = asyncio.run(_run())
    console.print(f"[green]Registered {obj.api_name} ({obj.label}) -> {obj.table_name}[/green]")


@app.command("systems")
def list_systems(api_url: str = ApiUrl):
    """Show configured systems."""

    async def _run() -> IntegrationAdminEditor:
        async with open_gateway(api_url) as gateway:
            editor = IntegrationAdminEditor(gateway)
            await editor.load_systems()
            return editor

    editor = asyncio.run(_run())
    _exit_on_error(editor)

    table = Table(title="Integration Systems")
    table.add_column("Developer Name", style="cyan")
    table.add_column("Label")
    table.add_column("Active")
    table.add_column("Max Retries", justify="right")
    for row in editor.drafts.snapshot(Tier.SYSTEMS):
        retries = row["max_retries"]
        table.add_row(
            row["developer_name"],
            row["label"],
            _bool(row["is_active"]),
            "" if retries is None else str(retries),
        )
    console.print(table)


@app.command("rules")
def list_rules(api_url: str = ApiUrl):
    """Show object rules (which objects forward events to which systems)."""

    async def _run() -> IntegrationAdminEditor:
        async with open_gateway(api_url) as gateway:
            editor = IntegrationAdminEditor(gateway)
            await editor.load_object_rules()
            return editor

    editor = asyncio.run(_run())
    _exit_on_error(editor)

    table = Table(title="Object Rules")
    table.add_column("Object", style="cyan")
    table.add_column("System", style="cyan")
    table.add_column("Developer Name")
    table.add_column("Trigger Reason")
    table.add_column("Active")
    for row in editor.drafts.snapshot(Tier.OBJECT_RULES):
        table.add_row(
            row["sobject_name"],
            row["system_api_name"],
            row["developer_name"],
            row["trigger_reason"],
            _bool(row["is_active"]),
        )
    console.print(table)


@app.command("fields")
def list_fields(
    sobject_name: str = typer.Argument(..., help="Object api name"),
    system_api_name: str = typer.Argument(..., help="System developer name"),
    api_url: str = ApiUrl,
):
    """Show field mappings for an object + system, with data types re-derived from describe."""

    async def _run() -> IntegrationAdminEditor:
        async with open_gateway(api_url) as gateway:
            editor = IntegrationAdminEditor(gateway)
            await editor.open_context(sobject_name, system_api_name)
            return editor

    editor = asyncio.run(_run())
    _exit_on_error(editor)

    table = Table(title=f"Field Mappings: {sobject_name} -> {system_api_name}")
    table.add_column("Source Field", style="cyan")
    table.add_column("Target Field")
    table.add_column("Data Type")
    table.add_column("Required")
    for row in editor.drafts.snapshot(Tier.FIELD_MAPPINGS):
        table.add_row(
            row["source_field_api"],
            row["target_field_name"],
            row["data_type"],
            _bool(row["is_required"]),
        )
    console.print(table)
    console.print(f"[dim]{len(editor.options.fields)} describable field(s) available[/dim]")


if __name__ == "__main__":
    app()
