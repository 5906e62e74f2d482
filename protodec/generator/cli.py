"""Command-line interface for protodec code generation."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from protodec.generator import cpptiny, parse, python
from protodec.generator.classifier import UnsupportedSchemaConstruct, classify_file
from protodec.generator.parser import ValidationError
from protodec.proto import DecodeError

if TYPE_CHECKING:
    from protodec.generator.classifier import MessageEmission
    from protodec.generator.descriptor import FileDescriptorSet

LANGUAGES = ("python", "cpptiny")

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False, show_path=False)],
        force=True,
    )


def _fail(message: str) -> NoReturn:
    click.echo(message, err=True)
    sys.exit(1)


def _load_schema(input_file: str) -> FileDescriptorSet:
    """Read and decode a compiled schema, exiting with a diagnostic on failure."""
    data = Path(input_file).read_bytes()
    try:
        return parse(data)
    except (DecodeError, ValidationError, UnsupportedSchemaConstruct) as e:
        logger.debug("Schema %s rejected", input_file, exc_info=True)
        _fail(f"Error: {input_file}: {e}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Protobuf decoder generator for compiled schemas."""
    _configure_logging(verbose)


@cli.command()
@click.option("--language", "-l", required=True, help="Target language (python, cpptiny)")
@click.option(
    "--input",
    "-i",
    "input_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Compiled schema (protoc -o)",
)
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--runtime-import",
    "runtime_import",
    is_flag=False,
    flag_value="protodec_runtime",
    default=None,
    help="Import path for the Python runtime. No value=protodec_runtime, omit=protodec.proto",
)
def gen(language: str, input_file: str, output_file: str, runtime_import: str | None) -> None:
    """Generate decoder code from a compiled schema."""
    if language not in LANGUAGES:
        _fail(f"Unknown language: {language}")

    schema = _load_schema(input_file)
    source_name = Path(input_file).name

    try:
        if language == "python":
            import_path = runtime_import if runtime_import is not None else "protodec.proto"
            generated_file = python.render(schema, runtime_import=import_path, source_name=source_name)
        else:
            generated_file = cpptiny.render(schema, source_name=source_name)
    except UnsupportedSchemaConstruct as e:
        _fail(f"Error: {input_file}: {e}")

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)
    logger.info("Wrote %s", output_file)


@cli.command()
@click.option("--language", "-l", required=True, help="Target language (python, cpptiny)")
@click.option("--output", "-o", "output_path", default=".", help="Output directory (python) or file (cpptiny)")
@click.option("--name", default="protodec_runtime", help="Runtime folder name (python only)")
def runtime(language: str, output_path: str, name: str) -> None:
    """Generate runtime support code."""
    if language == "cpptiny":
        generated_file = cpptiny.runtime()
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(generated_file)
    elif language == "python":
        runtime_dir = Path(output_path) / name
        runtime_dir.mkdir(parents=True, exist_ok=True)
        for filename, content in python.runtime().items():
            (runtime_dir / filename).write_text(content)
        print(f"Generated Python runtime in {runtime_dir}")
    else:
        _fail(f"Unknown language: {language}")


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Compiled schema (protoc -o)",
)
@click.option("--json", "output_json", is_flag=True, help="Output field classification as JSON")
@click.option("--raw", "output_raw", is_flag=True, help="Output the decoded schema as JSON")
def info(input_file: str, output_json: bool, output_raw: bool) -> None:
    """Display how each schema field will be decoded."""
    schema = _load_schema(input_file)

    if output_raw:
        print(schema.to_json(indent=2))
        return

    try:
        messages = classify_file(schema.file[0])
    except UnsupportedSchemaConstruct as e:
        _fail(f"Error: {input_file}: {e}")

    if output_json:
        _output_json(schema, messages)
    else:
        _output_plain(schema, messages)


def _output_json(schema: FileDescriptorSet, messages: list[MessageEmission]) -> None:
    """Output the classification as JSON."""
    file = schema.file[0]
    data = {
        "file": file.name,
        "package": file.package,
        "messages": [message.to_dict() for message in messages],
    }
    print(json.dumps(data, indent=2))


def _output_plain(schema: FileDescriptorSet, messages: list[MessageEmission]) -> None:
    """Output the classification using rich text formatting."""
    console = Console()
    file = schema.file[0]

    header = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
    header.add_column("Label", style="dim")
    header.add_column("Value", style="white")
    header.add_row("File", file.name or "-")
    header.add_row("Package", file.package or "-")
    header.add_row("Messages", str(len(messages)))
    console.print("[bold cyan]Schema[/bold cyan]")
    console.print(header)

    for message in messages:
        console.print()
        console.print(f"[bold cyan]{message.name}[/bold cyan]")

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("#", style="green", justify="right")
        table.add_column("Field", style="white")
        table.add_column("Type", style="yellow")
        table.add_column("Domain", style="dim")
        table.add_column("Label", style="dim")
        table.add_column("Default", style="white")

        for field in message.fields:
            if field.is_repeated:
                label = "repeated"
            elif field.is_required:
                label = "required"
            else:
                label = "optional"
            table.add_row(
                str(field.number),
                field.name,
                field.target_type_name,
                str(field.decode_domain),
                label,
                field.default_text or "",
            )

        console.print(table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
