"""Query conversion and execution commands."""

from typing import Annotated

import typer

from govquery.cli.context import CLIContext
from govquery.cli.output import OutputFormatter
from govquery.cli.parsing import read_sql_input
from govquery.core.types import QueryRequest

app = typer.Typer(help="Convert questions to SQL and execute SQL")


@app.command("convert")
def query_convert(
    ctx: typer.Context,
    question: Annotated[str, typer.Argument(help="Natural language question")],
    table_codes: Annotated[
        list[str] | None,
        typer.Option("--table", "-t", help="Table code to focus on. Can be repeated."),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Model choice: auto, t5 or sqlcoder"),
    ] = None,
    simple: Annotated[
        bool,
        typer.Option("--simple", help="Use the simplified conversion path"),
    ] = False,
) -> None:
    """Convert a natural language question to SQL.

    Examples:

        govquery query convert "What is the population of California?"
        govquery query convert "Median income by state" -t B19013 --model sqlcoder
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        request = QueryRequest(query=question, table_codes=table_codes, model_choice=model)
        if simple:
            response = cli_ctx.run(lambda client: client.convert_to_sql_simple(request))
        else:
            response = cli_ctx.run(lambda client: client.convert_to_sql(request))
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e

    if cli_ctx.json_output:
        formatter.print_data(response)
        return

    if response.error:
        typer.echo(f"⚠️  Backend reported: {response.error}")
    formatter.print_sql(response.sql_query, title="Generated SQL")
    if response.confidence is not None:
        typer.echo(f"\nConfidence: {response.confidence:.2f}")
    if response.model_used:
        typer.echo(f"Model: {response.model_used}")
    if response.explanation:
        typer.echo(f"\n{response.explanation}")


@app.command("execute")
def query_execute(
    ctx: typer.Context,
    sql: Annotated[
        str | None,
        typer.Argument(help="SQL query to execute"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--file", "-f", help="Load SQL from file"),
    ] = None,
    max_rows: Annotated[
        int | None,
        typer.Option("--max-rows", "-n", help="Maximum rows to return"),
    ] = None,
    validate: Annotated[
        bool,
        typer.Option("--validate/--no-validate", help="Pre-check SQL locally before sending"),
    ] = True,
) -> None:
    """Execute SQL on the backend.

    Examples:

        govquery query execute "SELECT * FROM b01001 LIMIT 3"
        govquery query execute --file query.sql --max-rows 100
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        sql_content = read_sql_input(sql, from_file)
        result = cli_ctx.run(
            lambda client: client.execute_sql(sql_content, max_rows=max_rows, validate=validate)
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e

    if cli_ctx.json_output:
        formatter.print_data(result)
        if not result.success:
            raise typer.Exit(code=1)
        return

    if not result.success:
        typer.echo(f"✗ Query failed: {result.error or 'unknown error'}")
        raise typer.Exit(code=1)

    columns = result.columns or []
    rows = [
        dict(zip(columns, row, strict=False)) if isinstance(row, list) else row
        for row in result.rows or []
    ]
    formatter.print_table(f"{result.row_count or len(rows)} rows", rows, columns)
    if result.execution_time_ms is not None:
        typer.echo(f"\n⏱️  Execution time: {result.execution_time_ms:.2f}ms")
