import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from gfakit.config import Config, ConfigurationError
from gfakit.core.errors import GFAKitError
from gfakit.gafpaf import RecordReader
from gfakit.parser import GFAParser

app = typer.Typer(
    name="gfakit",
    help="Parse and validate GFA, PAF and GAF files.",
    add_completion=False,
    no_args_is_help=True
)


class RecordFormat(str, Enum):
    gfa = "gfa"
    paf = "paf"
    gaf = "gaf"


def setup_logging(verbose: bool, level: int = logging.INFO):
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _load_config(config_file: Optional[Path], **overrides: Any) -> Config:
    try:
        return Config().load(str(config_file) if config_file else None, overrides)
    except ConfigurationError as e:
        typer.echo(f"Configuration Error: {e}", err=True)
        raise typer.Exit(code=1)


def _text(name: bytes) -> str:
    return name.decode("utf-8", errors="replace")


@app.command()
def stats(
    gfa: Annotated[Path, typer.Argument(help="GFA file")],
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="YAML configuration file")] = None,
    usize_names: Annotated[bool, typer.Option(help="Check whether all segment IDs are integers")] = False,
    no_tags: Annotated[bool, typer.Option(help="Validate optional fields without keeping them")] = False,
    verbose: bool = False
):
    """Count the records of a GFA file."""
    config = _load_config(config_file, optional_fields="none" if no_tags else None)
    setup_logging(verbose, config.log_level())

    parser = GFAParser.from_config(config)
    try:
        graph = parser.parse_file(gfa, progress=config.get("progress"))
    except GFAKitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    table = Table(title=f"{gfa.name}")
    table.add_column("Record")
    table.add_column("Count", justify="right")
    version = graph.header.version
    table.add_row("Version", _text(version) if version is not None else "-")
    table.add_row("Segments", str(len(graph.segments)))
    table.add_row("Links", str(len(graph.links)))
    table.add_row("Containments", str(len(graph.containments)))
    table.add_row("Paths", str(len(graph.paths)))
    table.add_row("Skipped lines", str(parser.skipped_lines))
    Console().print(table)

    if usize_names:
        projected = graph.usize_names()
        typer.echo(f"Integer segment IDs: {'yes' if projected is not None else 'no'}")


@app.command()
def validate(
    input_file: Annotated[Path, typer.Argument(help="File to validate")],
    fmt: Annotated[RecordFormat, typer.Option("--format", "-f", help="Input format")] = RecordFormat.gfa,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="YAML configuration file")] = None,
    verbose: bool = False
):
    """Parse every line of a file and report the first fatal error."""
    config = _load_config(config_file)
    setup_logging(verbose, config.log_level())
    optional = config.optional_fields_class()
    progress = config.get("progress")

    try:
        if fmt is RecordFormat.gfa:
            parser = GFAParser.from_config(config)
            graph = parser.parse_file(input_file, progress=progress)
            typer.echo(f"OK: {len(graph)} records, {parser.skipped_lines} lines skipped")
        else:
            reader = RecordReader(fmt.value, optional)
            count = sum(1 for _ in reader.read_file(input_file, progress=progress))
            typer.echo(f"OK: {count} records, {reader.skipped_lines} lines skipped")
    except GFAKitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def path(
    gfa: Annotated[Path, typer.Argument(help="GFA file")],
    name: Annotated[str, typer.Argument(help="Path name")],
    verbose: bool = False
):
    """Print the steps of a path, one per line."""
    setup_logging(verbose)

    parser = GFAParser(segments=False, links=False, containments=False)
    try:
        graph = parser.parse_file(gfa)
        found = next((p for p in graph.paths if p.path_name == name.encode("utf-8")), None)
        if found is None:
            typer.echo(f"Error: Path {name} not found.", err=True)
            raise typer.Exit(code=1)
        for segment, orient in found.iter():
            typer.echo(f"{_text(segment)}\t{orient}")
    except GFAKitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def main():
    app()


if __name__ == "__main__":
    main()
