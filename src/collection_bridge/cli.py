"""CLI entry point for collection-bridge."""

import logging
import re
from pathlib import Path

import click

from collection_bridge.bulk import (
    ReplaceOptions,
    export_variables,
    find,
    import_variables,
    replace,
)
from collection_bridge.converter.convert import JSON_INDENT, convert
from collection_bridge.errors import CollectionError
from collection_bridge.parser.base import TARGET_FORMATS, UnifiedCollection
from collection_bridge.parser.detect import detect_format
from collection_bridge.parser.loader import load_collection, load_document

SCOPES = ["all", "variables", "requests"]


def _load(file_path: Path, fmt: str = "auto") -> UnifiedCollection:
    """Load a collection, turning collection errors into CLI errors."""
    try:
        return load_collection(file_path, fmt)
    except CollectionError as exc:
        raise click.ClickException(exc.detail) from exc


def _write(content: str, output: Path | None) -> None:
    if output is None:
        click.echo(content)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding="utf-8")
    click.echo(f"Saved to {output}", err=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def main(verbose: bool):
    """Collection Bridge: convert API collections between Postman, Insomnia and Thunder Client."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def detect(doc_path: Path):
    """Print the detected source format of a collection file."""
    try:
        click.echo(detect_format(load_document(doc_path)))
    except CollectionError as exc:
        raise click.ClickException(exc.detail) from exc


@main.command(name="convert")
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--to", "target", required=True, type=click.Choice(TARGET_FORMATS), help="Target format.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file; stdout when omitted.")
@click.option("--from", "source", default="auto", type=click.Choice(["auto", "postman", "insomnia", "thunderclient", "json"]), help="Source format.")
@click.option("--indent", default=JSON_INDENT, show_default=True, help="JSON indentation.")
def convert_cmd(doc_path: Path, target: str, output: Path | None, source: str, indent: int):
    """Convert a collection file to another format."""
    collection = _load(doc_path, source)
    click.echo(f"Loaded '{collection.name}' ({collection.source_format}).", err=True)
    _write(convert(collection, target, indent=indent), output)


@main.command(name="find")
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("term")
@click.option("--scope", default="all", type=click.Choice(SCOPES), help="Where to search.")
@click.option("--case-sensitive", is_flag=True, help="Match case exactly.")
def find_cmd(doc_path: Path, term: str, scope: str, case_sensitive: bool):
    """Search variables and requests of a collection."""
    collection = _load(doc_path)
    results = find(collection, term, scope=scope, case_sensitive=case_sensitive)
    for result in results:
        click.echo(f"{result.path} [{result.field}]: {result.value}")
    click.echo(f"Found {len(results)} match(es).", err=True)


@main.command(name="replace")
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--find", "find_text", required=True, help="Text or pattern to find.")
@click.option("--replace", "replace_text", required=True, help="Replacement text.")
@click.option("--scope", default="all", type=click.Choice(SCOPES), help="Where to replace.")
@click.option("--regex", is_flag=True, help="Treat --find as a regular expression.")
@click.option("--case-sensitive", is_flag=True, help="Match case exactly.")
@click.option("--to", "target", required=True, type=click.Choice(TARGET_FORMATS), help="Output format.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file; stdout when omitted.")
def replace_cmd(
    doc_path: Path,
    find_text: str,
    replace_text: str,
    scope: str,
    regex: bool,
    case_sensitive: bool,
    target: str,
    output: Path | None,
):
    """Find and replace across a collection, then write it out."""
    collection = _load(doc_path)
    options = ReplaceOptions(
        find=find_text,
        replace=replace_text,
        scope=scope,
        regex=regex,
        case_sensitive=case_sensitive,
    )
    try:
        result = replace(collection, options)
    except re.error as exc:
        raise click.ClickException(f"Invalid pattern: {exc}") from exc
    click.echo(f"Replaced {result.count} occurrence(s).", err=True)
    _write(convert(result.collection, target), output)


@main.command(name="vars-export")
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", default="csv", type=click.Choice(["csv", "json"]), help="Variable file format.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file; stdout when omitted.")
def vars_export(doc_path: Path, fmt: str, output: Path | None):
    """Export the variables of a collection."""
    _write(export_variables(_load(doc_path), fmt), output)


@main.command(name="vars-import")
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("vars_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--to", "target", required=True, type=click.Choice(TARGET_FORMATS), help="Output format.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file; stdout when omitted.")
def vars_import(doc_path: Path, vars_path: Path, target: str, output: Path | None):
    """Append variables from a CSV or JSON file, then write the collection out."""
    collection = _load(doc_path)
    fmt = "csv" if vars_path.suffix.lower() == ".csv" else "json"
    try:
        updated = import_variables(collection, vars_path.read_text(encoding="utf-8"), fmt)
    except CollectionError as exc:
        raise click.ClickException(exc.detail) from exc
    click.echo(f"Imported {len(updated.variables) - len(collection.variables)} variable(s).", err=True)
    _write(convert(updated, target), output)
