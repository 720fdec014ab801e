"""Command-line interface for page-clipper."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt
from rich.table import Table

from page_clipper import __version__
from page_clipper.config import AppConfig
from page_clipper.credentials import Credentials, KeyringCredentialStore
from page_clipper.errors import ClipperError, describe_error
from page_clipper.interactive import DraftEditor, collections_table, draft_table
from page_clipper.pipeline import Orchestrator, PipelineState, open_services

app = typer.Typer(
    name="page-clipper",
    help="Capture a webpage into a document collection using an AI model.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()

DEFAULT_CONFIG_PATH = Path("~/.config/page-clipper/config.toml")


def version_callback(value: bool):
    if value:
        console.print(f"page-clipper version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _load_config(path: Optional[Path], verbose: bool) -> AppConfig:
    config_path = (path or DEFAULT_CONFIG_PATH).expanduser()
    if config_path.exists():
        config = AppConfig.from_toml(config_path)
    elif path is not None:
        console.print(f"[red]Config file not found: {config_path}[/red]")
        raise typer.Exit(1)
    else:
        config = AppConfig()
    if verbose:
        config.verbose = True
    _configure_logging(config.verbose)
    return config


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Turn webpages into structured collection items."""
    pass


@app.command()
def configure(
    guidance: Optional[str] = typer.Option(
        None,
        "--guidance",
        "-g",
        help="Default extra instructions for the AI model, saved to the config file",
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a TOML config file"),
):
    """Store the collection token, space id and AI key in the system keychain."""
    store = KeyringCredentialStore()
    current = Credentials.load(store)

    store_token = Prompt.ask("Collection store API token", password=True, default=current.store_token or None)
    space_id = Prompt.ask("Space ID", default=current.space_id or None)
    ai_key = Prompt.ask("AI model API key", password=True, default=current.ai_key or None)

    credentials = Credentials(store_token=store_token or "", space_id=space_id or "", ai_key=ai_key or "")
    if not credentials.save(store):
        console.print("[red]Could not save credentials to the keychain.[/red]")
        raise typer.Exit(1)
    if credentials.is_valid:
        console.print("[green]Credentials saved.[/green]")
    else:
        console.print("[yellow]Saved, but some credentials are still missing.[/yellow]")

    if guidance is not None:
        path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        config = AppConfig.from_toml(path) if path.exists() else AppConfig()
        config.user_guidance = guidance
        config.save(path)
        console.print(f"[green]Guidance saved to {path}[/green]")


@app.command("collections")
def list_collections(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a TOML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """List collections in the configured space."""
    config = _load_config(config_path, verbose)
    credentials = Credentials.load(KeyringCredentialStore())

    async def run():
        async with open_services(credentials, config) as services:
            return await services.store.list_collections()

    try:
        collections = asyncio.run(run())
    except ClipperError as e:
        console.print(f"[red]Error: {describe_error(e)}[/red]")
        raise typer.Exit(1)

    table = collections_table(collections)
    table.title = "Collections"
    console.print(table)


@app.command("schema")
def show_schema(
    collection_id: str = typer.Argument(..., help="Collection ID"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a TOML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """Show the schema of a collection."""
    config = _load_config(config_path, verbose)
    credentials = Credentials.load(KeyringCredentialStore())

    async def run():
        async with open_services(credentials, config) as services:
            return await services.store.fetch_schema(collection_id)

    try:
        schema = asyncio.run(run())
    except ClipperError as e:
        console.print(f"[red]Error: {describe_error(e)}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Schema ({schema.content_name} = {schema.content_key})")
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Options", style="dim")
    for prop in schema.properties:
        table.add_row(prop.key, prop.name, prop.type, ", ".join(prop.options or []))
    console.print(table)


@app.command()
def share(
    url: str = typer.Argument(..., help="URL of the page to capture"),
    collection_id: Optional[str] = typer.Option(
        None,
        "--collection",
        "-C",
        help="Collection ID to save into (prompted when omitted)",
    ),
    guidance: Optional[str] = typer.Option(
        None,
        "--guidance",
        "-g",
        help="Extra instructions for the AI model (overrides the config file)",
    ),
    edit: bool = typer.Option(
        True,
        "--edit/--no-edit",
        help="Review the draft before saving",
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a TOML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """
    Capture a webpage as a new collection item.

    Examples:

        page-clipper share https://example.com/article

        page-clipper share https://youtu.be/dQw4w9WgXcQ -C 1234 --no-edit
    """
    config = _load_config(config_path, verbose)
    if guidance is not None:
        config.user_guidance = guidance
    credentials = Credentials.load(KeyringCredentialStore())

    try:
        code = asyncio.run(_share(url, config, credentials, collection_id, edit))
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        raise typer.Exit(130)
    except ClipperError as e:
        console.print(f"[red]Error: {describe_error(e)}[/red]")
        raise typer.Exit(1)
    raise typer.Exit(code)


async def _share(
    url: str,
    config: AppConfig,
    credentials: Credentials,
    collection_id: Optional[str],
    edit: bool,
) -> int:
    editor = DraftEditor(console)

    async with open_services(credentials, config) as services:
        orchestrator = Orchestrator(url, services, config.user_guidance)
        try:
            with console.status(orchestrator.status) as status:
                unsubscribe = orchestrator.subscribe(lambda o: status.update(o.status))
                orchestrator.start()
                await orchestrator.wait()
                unsubscribe()
            if orchestrator.state is PipelineState.ERROR:
                console.print(f"[red]Error: {orchestrator.error_message}[/red]")
                return 1

            if collection_id:
                collection = next((c for c in orchestrator.collections if c.id == collection_id), None)
                if collection is None:
                    console.print(f"[red]Unknown collection: {collection_id}[/red]")
                    return 1
            else:
                collection = editor.choose_collection(orchestrator.collections)
                if collection is None:
                    return 1

            with console.status(f"Analyzing {url}...") as status:
                unsubscribe = orchestrator.subscribe(lambda o: status.update(o.status))
                orchestrator.select(collection)
                await orchestrator.wait()
                unsubscribe()
            if orchestrator.state is PipelineState.ERROR:
                console.print(f"[red]Error: {orchestrator.error_message}[/red]")
                return 1

            if edit:
                if not editor.edit(orchestrator):
                    orchestrator.cancel_editing()
                    console.print("[yellow]Discarded.[/yellow]")
                    return 0
            elif config.verbose:
                console.print(draft_table(orchestrator))

            with console.status("Saving...") as status:
                unsubscribe = orchestrator.subscribe(lambda o: status.update(o.status))
                orchestrator.save()
                await orchestrator.wait()
                unsubscribe()
            if orchestrator.state is PipelineState.ERROR:
                console.print(f"[red]Error: {orchestrator.error_message}[/red]")
                if orchestrator.item_id:
                    console.print(
                        f"[yellow]Item {orchestrator.item_id} was created without its "
                        "source link and image.[/yellow]"
                    )
                return 1

            console.print(f"[green]Saved to {collection.name}[/green] [dim]({orchestrator.item_id})[/dim]")
            return 0
        finally:
            orchestrator.teardown()


if __name__ == "__main__":
    app()
