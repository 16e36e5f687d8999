"""Output formatting for CLI commands."""

import json
from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from govquery.core.types import HealthResponse, SchemaInfo, SQLParseResult
from govquery.exceptions import BackendError, GovQueryError

console = Console()


def _jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, exclude_none=True)
    if isinstance(data, list):
        return [_jsonable(item) for item in data]
    return data


class OutputFormatter:
    """Formats output for terminal or JSON mode."""

    def __init__(self, json_mode: bool = False) -> None:
        self.json_mode = json_mode

    def print_table(
        self,
        title: str,
        data: list[dict[str, Any]],
        columns: list[str],
    ) -> None:
        """Print data as Rich table or JSON array.

        Args:
            title: Table title
            data: List of row dictionaries
            columns: Column names to display
        """
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
        else:
            table = Table(title=title, show_header=True, header_style="bold magenta")
            for col in columns:
                table.add_column(col)
            for row in data:
                table.add_row(*[str(row.get(col, "")) for col in columns])
            console.print(table)

    def print_health(self, health: HealthResponse) -> None:
        if self.json_mode:
            self.print_data(health)
            return

        style = "green" if health.is_healthy else "red"
        lines = [f"Status: [{style}]{health.status}[/{style}]"]
        if health.schemas_loaded is not None:
            lines.append(f"Schemas loaded: {health.schemas_loaded}")
        if health.modal_app_name:
            running = "running" if health.modal_app_running else "stopped"
            lines.append(f"Model app: {health.modal_app_name} ({running})")
        if health.error:
            lines.append(f"Error: {health.error}")
        console.print(Panel("\n".join(lines), title="Backend health", border_style=style))

    def print_schema(self, schema: SchemaInfo) -> None:
        """Print one table schema with its columns."""
        if self.json_mode:
            self.print_data(schema)
            return

        console.print(f"\n[bold]Table:[/bold] {schema.table_code} - {schema.table_name}")
        if schema.geography_levels:
            console.print(f"Geography levels: {', '.join(schema.geography_levels)}")

        if schema.columns:
            columns_table = Table(show_header=True, header_style="bold cyan")
            columns_table.add_column("Name")
            columns_table.add_column("Type")
            columns_table.add_column("Description")
            for column in schema.columns:
                columns_table.add_row(column.name, column.type, column.description or "")
            console.print(columns_table)

    def print_sql(self, sql: str, title: str | None = None) -> None:
        if self.json_mode:
            print(json.dumps({"sql": sql}, indent=2))
            return
        if title:
            console.print(f"[bold]{title}[/bold]")
        console.print(Syntax(sql, "sql", word_wrap=True))

    def print_validation(self, result: SQLParseResult) -> None:
        """Print a validation verdict with formatted SQL and clause breakdown."""
        if self.json_mode:
            self.print_data(result)
            return

        if not result.valid:
            console.print(f"✗ {result.error}", style="red")
            return

        console.print("✓ SQL is valid", style="green")
        if result.formatted_sql:
            console.print(Syntax(result.formatted_sql, "sql", word_wrap=True))
        if result.ast:
            for key, value in result.ast.model_dump(by_alias=True).items():
                if value:
                    console.print(f"  {key}: {value}", style="dim")
        if result.warnings:
            console.print("\n⚠️  Warnings:")
            for warning in result.warnings:
                console.print(f"  • {warning}")

    def print_success(self, message: str, details: dict[str, Any] | None = None) -> None:
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
        """Print an error, flagging an unreachable backend separately.

        In JSON mode ``GovQueryError.to_dict()`` is emitted as-is so scripts
        can branch on ``context.kind``.
        """
        if self.json_mode:
            payload = error.to_dict() if isinstance(error, GovQueryError) else {"error": str(error)}
            print(json.dumps(payload, default=str, indent=2))
            return

        title = "Error"
        if isinstance(error, BackendError) and error.unreachable:
            title = f"Backend unreachable ({error.context.get('kind')})"

        lines = [str(error)]
        if isinstance(error, GovQueryError) and error.context:
            lines.append("")
            lines.extend(
                f"{k}: {v}" for k, v in error.context.items() if v is not None and k != "kind"
            )
        console.print(Panel("\n".join(lines), title=f"[red]{title}[/red]", border_style="red"))

    def print_data(self, data: Any) -> None:
        """Print generic data (models, dicts, lists)."""
        if self.json_mode:
            print(json.dumps(_jsonable(data), default=str, indent=2))
        else:
            console.print(_jsonable(data))
