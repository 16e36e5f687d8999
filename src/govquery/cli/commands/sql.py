"""Local and remote SQL validation commands."""

from typing import Annotated

import typer

from govquery.cli.context import CLIContext
from govquery.cli.output import OutputFormatter
from govquery.cli.parsing import read_sql_input
from govquery.sql.validator import format_sql, parse_sql

app = typer.Typer(help="Validate and format SQL")


@app.command("validate")
def sql_validate(
    ctx: typer.Context,
    sql: Annotated[
        str | None,
        typer.Argument(help="SQL query to validate"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--file", "-f", help="Load SQL from file"),
    ] = None,
    remote: Annotated[
        bool,
        typer.Option("--remote", help="Validate with the backend's parser instead"),
    ] = False,
) -> None:
    """Validate SQL without executing it.

    The local check is heuristic: it catches empty input, unknown leading
    keywords, unbalanced parentheses and SELECT without FROM.

    Examples:

        govquery sql validate "SELECT a FROM t"
        govquery sql validate --file query.sql --remote
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        sql_content = read_sql_input(sql, from_file)
        if remote:
            result = cli_ctx.run(lambda client: client.parse_sql(sql_content))
        else:
            result = parse_sql(sql_content)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e

    formatter.print_validation(result)
    if not result.valid:
        raise typer.Exit(code=1)


@app.command("format")
def sql_format(
    ctx: typer.Context,
    sql: Annotated[
        str | None,
        typer.Argument(help="SQL query to format"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--file", "-f", help="Load SQL from file"),
    ] = None,
) -> None:
    """Format SQL with one clause per line."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        sql_content = read_sql_input(sql, from_file)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e

    formatter.print_sql(format_sql(sql_content))
