"""govquery CLI - Main entry point."""

import logging
import sys
from typing import Annotated

import typer

import govquery
from govquery.cli.context import CLIContext
from govquery.cli.output import OutputFormatter
from govquery.core.types import ClientConfig

app = typer.Typer(
    name="govquery",
    help="govquery CLI - Natural language queries over government data",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    url: Annotated[
        str | None,
        typer.Option(
            "--url",
            "-u",
            envvar="GOVQUERY_BACKEND_URL",
            help="Backend base URL",
        ),
    ] = None,
    timeout_ms: Annotated[
        int | None,
        typer.Option("--timeout", help="Per-attempt timeout in milliseconds"),
    ] = None,
    retries: Annotated[
        int | None,
        typer.Option("--retries", help="Total attempts per backend call"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON (machine-readable)",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log requests, retries and cache activity"),
    ] = False,
) -> None:
    """Initialize CLI context with global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ClientConfig.from_env(
            base_url=url, timeout_ms=timeout_ms, retry_attempts=retries
        )
    except Exception as e:
        OutputFormatter(json_output).print_error(e)
        raise typer.Exit(code=1) from e

    ctx.obj = CLIContext(config=config, json_output=json_output)


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"govquery v{govquery.__version__}")


@app.command()
def health(ctx: typer.Context) -> None:
    """Check backend health. Exits with code 1 when the backend is unhealthy."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    result = cli_ctx.run(lambda client: client.health_check())
    formatter.print_health(result)
    if not result.is_healthy:
        raise typer.Exit(code=1)


@app.command()
def deploy(ctx: typer.Context) -> None:
    """Ask the backend to deploy its model app."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        result = cli_ctx.run(lambda client: client.deploy())
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e

    formatter.print_success(
        result.message or f"Deployment {result.status}",
        {"status": result.status, "app_name": result.app_name},
    )


from govquery.cli.commands import query, schema, sql  # noqa: E402

app.add_typer(schema.app, name="schema")
app.add_typer(query.app, name="query")
app.add_typer(sql.app, name="sql")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
