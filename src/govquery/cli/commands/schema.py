"""Schema discovery commands."""

from typing import Annotated

import typer

from govquery.cli.context import CLIContext
from govquery.cli.output import OutputFormatter

app = typer.Typer(help="Browse the backend's table schemas")


@app.command("list")
def schema_list(ctx: typer.Context) -> None:
    """List all tables known to the backend."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        schemas = cli_ctx.run(lambda client: client.list_schemas())
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e

    if cli_ctx.json_output:
        formatter.print_data(schemas)
        return

    formatter.print_table(
        f"Tables ({len(schemas)} total)",
        [
            {
                "Code": s.table_code,
                "Name": s.table_name,
                "Columns": len(s.columns),
                "Geography": ", ".join(s.geography_levels),
            }
            for s in schemas
        ],
        ["Code", "Name", "Columns", "Geography"],
    )


@app.command("show")
def schema_show(
    ctx: typer.Context,
    table_code: Annotated[str, typer.Argument(help="Table code (e.g., B01001)")],
) -> None:
    """Show one table's columns."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        schema = cli_ctx.run(lambda client: client.get_schema(table_code))
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e

    formatter.print_schema(schema)
