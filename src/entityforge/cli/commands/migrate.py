"""Schema migration commands."""

import logging
from pathlib import Path
from typing import Annotated

import typer

from entityforge.cli.context import CLIContext
from entityforge.cli.output import OutputFormatter
from entityforge.cli.parsing import read_metadata_file, write_files
from entityforge.core.types import MigrationDialect
from entityforge.evolution.delta import diff
from entityforge.evolution.detection import detect_dialect
from entityforge.evolution.dialects import MigrationScript, VersionClock, render, render_create_table

logger = logging.getLogger(__name__)


def _resolve_dialect(dialect: str | None, project: str) -> MigrationDialect | str:
    if dialect:
        return dialect
    return detect_dialect(project)


def _emit(
    formatter: OutputFormatter, scripts: list[MigrationScript], project: str, write: bool
) -> None:
    if write:
        write_files(Path(project), {s.path: s.content for s in scripts})
    if formatter.json_mode:
        formatter.print_data([s.to_dict() for s in scripts])
        return
    for script in scripts:
        formatter.print_migration(script)
    if write:
        formatter.print_success(
            f"Wrote {len(scripts)} migration files", {"paths": [s.path for s in scripts]}
        )


def migrate_command(
    ctx: typer.Context,
    old_file: Annotated[str, typer.Argument(help="Previous metadata snapshots (JSON)")],
    new_file: Annotated[str, typer.Argument(help="Current metadata snapshots (JSON)")],
    dialect: Annotated[
        str | None,
        typer.Option("--dialect", help="flyway or liquibase (default: detected from --project)"),
    ] = None,
    project: Annotated[
        str,
        typer.Option("--project", help="Project root used for detection and --write"),
    ] = ".",
    write: Annotated[
        bool,
        typer.Option("--write", "-w", help="Write scripts into the project's migration directory"),
    ] = False,
) -> None:
    """Diff two metadata snapshots and render the migrations between them.

    Entities are matched by class name. Entities that only exist in the new
    snapshot get a create-table migration.

    Examples:

        entityforge migrate old.json new.json --dialect flyway

        entityforge migrate old.json new.json --project ../shop --write
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        target = _resolve_dialect(dialect, project)
        clock = VersionClock(target)
        old_by_class = {e.class_name: e for e in read_metadata_file(old_file)}

        scripts = []
        for new in read_metadata_file(new_file):
            old = old_by_class.pop(new.class_name, None)
            if old is None:
                scripts.append(render_create_table(new, target, clock.next_version()))
                continue
            delta = diff(old, new)
            if delta is not None:
                scripts.append(render(delta, target, clock.next_version()))
        for missing in old_by_class:
            logger.warning(f"Entity {missing} is gone from the new snapshot; its table is kept")

        if not scripts:
            formatter.print_success("No changes", {"migrations": 0})
            return
        _emit(formatter, scripts, project, write)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)


def create_migration_command(
    ctx: typer.Context,
    metadata_file: Annotated[str, typer.Argument(help="Metadata snapshots (JSON)")],
    dialect: Annotated[
        str | None,
        typer.Option("--dialect", help="flyway or liquibase (default: detected from --project)"),
    ] = None,
    project: Annotated[
        str,
        typer.Option("--project", help="Project root used for detection and --write"),
    ] = ".",
    write: Annotated[
        bool,
        typer.Option("--write", "-w", help="Write scripts into the project's migration directory"),
    ] = False,
) -> None:
    """Render the initial create-table migration for each entity.

    Examples:

        entityforge create-migration entities.json --dialect liquibase
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        target = _resolve_dialect(dialect, project)
        clock = VersionClock(target)
        scripts = [
            render_create_table(entity, target, clock.next_version())
            for entity in read_metadata_file(metadata_file)
        ]
        _emit(formatter, scripts, project, write)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
