"""Terminal prompts for picking a collection and reviewing a draft."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from page_clipper.editing import format_value, parse_input
from page_clipper.pipeline import Orchestrator, PipelineState
from page_clipper.store.models import Collection, Property, PropertyType


def collections_table(collections: list[Collection], numbered: bool = False) -> Table:
    table = Table(show_header=True)
    if numbered:
        table.add_column("#", style="dim", width=3)
    table.add_column("Name", style="cyan")
    table.add_column("Items", justify="right")
    table.add_column("ID", style="dim")
    for i, collection in enumerate(collections, 1):
        row = [collection.name, str(collection.item_count), collection.id]
        if numbered:
            row.insert(0, str(i))
        table.add_row(*row)
    return table


def draft_table(orchestrator: Orchestrator) -> Table:
    """Current draft laid out in schema order."""
    schema = orchestrator.schema
    table = Table(show_header=True, title="Draft")
    table.add_column("Field", style="cyan")
    table.add_column("Type", style="dim")
    table.add_column("Value")
    if schema is None:
        return table
    table.add_row(
        schema.content_name,
        "content",
        format_value(orchestrator.draft.get(schema.content_key)),
    )
    for prop in schema.properties:
        table.add_row(prop.display_name, prop.type, format_value(orchestrator.draft.get(prop.key)))
    return table


class DraftEditor:
    """Guide the user through choosing a collection and editing the draft."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def choose_collection(self, collections: list[Collection]) -> Optional[Collection]:
        """Ask which collection to save into. Returns None when there is none."""
        if not collections:
            self.console.print("[yellow]No collections found in this space.[/yellow]")
            return None
        if len(collections) == 1:
            return collections[0]

        self.console.print(collections_table(collections, numbered=True))
        choice = IntPrompt.ask(
            "Save into collection",
            choices=[str(i) for i in range(1, len(collections) + 1)],
            show_choices=False,
            default=1,
        )
        return collections[choice - 1]

    def edit(self, orchestrator: Orchestrator) -> bool:
        """Review and edit the draft in place. Returns True if the user wants to save."""
        if orchestrator.state is not PipelineState.EDITING or orchestrator.schema is None:
            return False
        schema = orchestrator.schema

        self.console.print()
        self.console.print(Panel.fit(
            f"[bold blue]{orchestrator.selected.name if orchestrator.selected else ''}[/bold blue]\n"
            "Press Enter to keep a value, or type a new one. A single '-' clears it.",
            border_style="blue",
        ))
        self.console.print(draft_table(orchestrator))

        if not Confirm.ask("Edit fields?", default=False):
            return Confirm.ask("Save this item?", default=True)

        content = Property(key=schema.content_key, name=schema.content_name)
        for prop in [content, *schema.properties]:
            self._edit_field(orchestrator, prop)

        self.console.print(draft_table(orchestrator))
        return Confirm.ask("Save this item?", default=True)

    def _edit_field(self, orchestrator: Orchestrator, prop: Property) -> None:
        current = format_value(orchestrator.draft.get(prop.key))
        label = f"{prop.display_name} [dim]({prop.type})[/dim]"

        if prop.is_select and prop.options:
            answer = Prompt.ask(label, choices=[*prop.options, "-"], default=current or "-")
        else:
            if prop.type == PropertyType.MULTI_SELECT.value and prop.options:
                self.console.print(f"  [dim]Options: {', '.join(prop.options)} (comma separated)[/dim]")
            elif prop.type == PropertyType.DATE.value:
                self.console.print("  [dim]Format: YYYY-MM-DD[/dim]")
            answer = Prompt.ask(label, default=current, show_default=bool(current))

        if answer == current:
            return
        orchestrator.update_field(prop.key, None if answer == "-" else parse_input(prop, answer))
