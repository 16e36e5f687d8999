"""Input parsing utilities for CLI commands."""

from pathlib import Path

import typer


def read_sql_input(sql: str | None, from_file: str | None) -> str:
    """Resolve SQL text from an argument or a file.

    Args:
        sql: SQL passed on the command line
        from_file: Path to a file containing SQL

    Returns:
        SQL text

    Raises:
        typer.BadParameter: If neither or both sources are given
    """
    if from_file and sql:
        raise typer.BadParameter("Provide SQL or --file, not both")
    if from_file:
        return Path(from_file).read_text()
    if sql:
        return sql
    raise typer.BadParameter("Either provide SQL or use --file")
