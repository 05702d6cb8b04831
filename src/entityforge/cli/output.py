"""Output formatting for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from entityforge.evolution.dialects import MigrationScript
from entityforge.exceptions import EntityForgeError
from entityforge.metadata.models import EntityMetadata

console = Console()


class OutputFormatter:
    """Formats output for terminal or JSON mode."""

    def __init__(self, json_mode: bool = False) -> None:
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode

    def print_metadata(self, entities: list[EntityMetadata]) -> None:
        """Print entity metadata with fields and relationships.

        Args:
            entities: Metadata snapshots to display
        """
        if self.json_mode:
            print(json.dumps([e.model_dump(mode="json") for e in entities], indent=2))
            return

        for entity in entities:
            console.print(f"\n[bold]Entity:[/bold] {entity.qualified_class_name}")
            console.print(f"Table: {entity.table_name}")
            console.print(f"Id type: {entity.id_type}")
            if entity.comment:
                console.print(f"Comment: {entity.comment}")

            fields_table = Table(show_header=True, header_style="bold cyan")
            fields_table.add_column("Field")
            fields_table.add_column("Type")
            fields_table.add_column("Column")
            fields_table.add_column("Nullable")
            fields_table.add_column("Relationship")
            for f in entity.fields:
                relationship = ""
                if f.is_relationship:
                    relationship = f"{f.relationship.annotation} -> {f.target_simple_name}"
                fields_table.add_row(
                    f"{f.name} (id)" if f.is_id else f.name,
                    f.type,
                    f.column,
                    "✓" if f.nullable else "",
                    relationship,
                )
            console.print(fields_table)

    def print_migration(self, script: MigrationScript) -> None:
        """Print a rendered migration script."""
        if self.json_mode:
            print(json.dumps(script.to_dict(), indent=2))
            return

        lexer = "sql" if script.path.endswith(".sql") else "xml"
        title = script.path
        if script.destructive:
            title = f"{title} [red](destructive)[/red]"
        console.print(Panel(Syntax(script.content, lexer), title=title, border_style="blue"))

    def print_success(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Print success message.

        Args:
            message: Success message
            details: Optional details to display
        """
        if self.json_mode:
            output = {"success": True, "message": message}
            if details:
                output.update(details)
            print(json.dumps(output, default=str, indent=2))
        else:
            console.print(f"✓ {message}", style="green")
            if details:
                for key, value in details.items():
                    console.print(f"  {key}: {value}", style="dim")

    def print_error(self, error: Exception) -> None:
        """Print error message.

        Args:
            error: Exception to display
        """
        if self.json_mode:
            if isinstance(error, EntityForgeError):
                print(json.dumps(error.to_dict(), default=str, indent=2))
            else:
                print(json.dumps({"error": str(error)}, indent=2))
        else:
            error_text = str(error)
            # For EntityForgeError, include context if available
            if isinstance(error, EntityForgeError) and error.context:
                context_str = "\n".join(
                    f"{k}: {v}" for k, v in error.context.items() if v is not None
                )
                error_text = f"{error_text}\n\n{context_str}"

            panel = Panel(
                error_text,
                title="[red]Error[/red]",
                border_style="red",
            )
            console.print(panel)

    def print_data(self, data: Any) -> None:
        """Print generic data (dict, list, etc.).

        Args:
            data: Data to print
        """
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
        else:
            console.print(data)
