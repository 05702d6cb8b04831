"""Code generation command."""

from pathlib import Path
from typing import Annotated

import typer

from entityforge.cli.context import CLIContext
from entityforge.cli.output import OutputFormatter
from entityforge.cli.parsing import parse_features, read_metadata_file, write_files
from entityforge.generation.engine import CodeGenerator, suggest_dependencies


def generate_command(
    ctx: typer.Context,
    metadata_file: Annotated[str, typer.Argument(help="JSON file with metadata snapshots")],
    features: Annotated[
        list[str] | None,
        typer.Option(
            "--feature",
            "-f",
            help="Feature to generate (controller, service, dto, ...). Can be repeated (default: all).",
        ),
    ] = None,
    language: Annotated[
        str,
        typer.Option("--language", "-l", help="Source language: java or kotlin"),
    ] = "java",
    entity: Annotated[
        str | None,
        typer.Option("--entity", help="Only generate for this entity class"),
    ] = None,
    out: Annotated[
        str,
        typer.Option("--out", "-o", help="Project root to write files into"),
    ] = ".",
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="List files without writing them"),
    ] = False,
) -> None:
    """Generate layered source files from metadata snapshots.

    Every entity is rendered before anything is written, so a failure leaves
    the project untouched.

    Examples:

        entityforge generate entities.json --feature controller --feature service

        entityforge generate entities.json -l kotlin -o ../shop
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        config = parse_features(features, language)
        entities = read_metadata_file(metadata_file)
        if entity:
            entities = [e for e in entities if e.class_name == entity]
            if not entities:
                raise ValueError(f"Entity '{entity}' not found in {metadata_file}")

        generator = CodeGenerator()
        files: dict[str, str] = {}
        for metadata in entities:
            files.update(generator.generate(metadata, config))

        if not dry_run:
            write_files(Path(out), files)

        formatter.print_success(
            f"{'Planned' if dry_run else 'Generated'} {len(files)} files",
            {
                "files": sorted(files),
                "dependencies": suggest_dependencies(config),
            },
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
