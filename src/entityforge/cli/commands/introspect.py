"""Schema introspection command."""

from pathlib import Path
from typing import Annotated, Any

import typer

from entityforge.cli.context import CLIContext
from entityforge.cli.output import OutputFormatter
from entityforge.cli.parsing import write_files, write_metadata_file
from entityforge.core.types import SourceLanguage
from entityforge.generation.engine import CodeGenerator
from entityforge.metadata.builder import MetadataBuilder
from entityforge.schema.introspection import SqlAlchemySchemaSource, introspect


def introspect_command(
    ctx: typer.Context,
    tables: Annotated[
        list[str] | None,
        typer.Option("--table", "-t", help="Table to include. Can be repeated (default: all)."),
    ] = None,
    schema: Annotated[
        str | None,
        typer.Option("--schema", "-s", help="Database schema to read (default: the connection's)"),
    ] = None,
    out: Annotated[
        str | None,
        typer.Option("--out", "-o", help="Write metadata snapshots to this JSON file"),
    ] = None,
    generate_entities: Annotated[
        bool,
        typer.Option("--generate-entities", help="Also write a JPA entity class per table"),
    ] = False,
    language: Annotated[
        str,
        typer.Option("--language", "-l", help="Entity source language: java or kotlin"),
    ] = "java",
    project: Annotated[
        str,
        typer.Option("--project", help="Project root entity classes are written into"),
    ] = ".",
) -> None:
    """Read tables from a live database and derive entity metadata.

    Examples:

        entityforge --database sqlite:///./app.db introspect

        entityforge -d postgresql://localhost/shop -p com.example.shop introspect -t users -o entities.json

        entityforge -d sqlite:///./app.db -p com.example.shop introspect --generate-entities -l kotlin
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        conn = cli_ctx.get_connection()
        source = SqlAlchemySchemaSource(conn.inspector(), schema=schema)
        resolved = introspect(source, include=tables or None)
        entities = MetadataBuilder(cli_ctx.base_package).build_all(resolved)

        messages = []
        details: dict[str, Any] = {"entities": [e.class_name for e in entities]}
        if out:
            write_metadata_file(Path(out), entities)
            messages.append(f"Wrote {len(entities)} entity snapshots")
            details["path"] = out
        if generate_entities:
            lang = SourceLanguage(language.lower())
            generator = CodeGenerator()
            # Render every entity before writing any
            rendered = [generator.render_entity(e, lang) for e in entities]
            write_files(Path(project), {g.path: g.content for g in rendered})
            messages.append(f"Generated {len(rendered)} entity classes")
            details["files"] = sorted(g.path for g in rendered)

        if messages:
            formatter.print_success("; ".join(messages), details)
        else:
            formatter.print_metadata(entities)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()
