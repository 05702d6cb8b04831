"""entityforge CLI - Main entry point."""

import logging
import sys
from typing import Annotated

import typer

import entityforge
from entityforge.cli.context import (
    BASE_PACKAGE_ENV,
    DATABASE_URL_ENV,
    CLIContext,
    get_base_package,
    get_database_url,
)

# Create main Typer app
app = typer.Typer(
    name="entityforge",
    help="entityforge CLI - entity metadata, layered code generation and schema migrations",
    no_args_is_help=True,
)

# Store CLI context globally (will be set in callback)
state: dict[str, CLIContext] = {}


@app.callback()
def main_callback(
    ctx: typer.Context,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            "-d",
            envvar=DATABASE_URL_ENV,
            help="Database URL to introspect (PostgreSQL or SQLite)",
        ),
    ] = None,
    base_package: Annotated[
        str | None,
        typer.Option(
            "--base-package",
            "-p",
            envvar=BASE_PACKAGE_ENV,
            help="Base package of the generated code (e.g. com.example.shop)",
        ),
    ] = None,
    echo: Annotated[
        bool,
        typer.Option(
            "--echo",
            "-e",
            help="Echo SQL statements to console",
        ),
    ] = False,
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
        typer.Option(
            "--verbose",
            "-v",
            help="Log progress to stderr",
        ),
    ] = False,
) -> None:
    """Initialize CLI context with global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cli_ctx = CLIContext(
        database_url=get_database_url(database),
        base_package=get_base_package(base_package),
        echo=echo,
        json_output=json_output,
    )

    # Store in Typer context for command access
    ctx.obj = cli_ctx
    state["cli_ctx"] = cli_ctx


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"entityforge v{entityforge.__version__}")


# Register commands
from entityforge.cli.commands import generate, introspect, migrate

app.command(name="introspect")(introspect.introspect_command)
app.command(name="generate")(generate.generate_command)
app.command(name="migrate")(migrate.migrate_command)
app.command(name="create-migration")(migrate.create_migration_command)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
