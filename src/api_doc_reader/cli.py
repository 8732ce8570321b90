"""CLI entry point for api-doc-reader."""

import logging
import sys
from pathlib import Path

import click

from api_doc_reader.config import ApiSource, load_config
from api_doc_reader.errors import ApiDocError
from api_doc_reader.loader.discover import discover_resources
from api_doc_reader.model.document import Document
from api_doc_reader.output.writer import FORMATS, detect_format, dump_document, write_document
from api_doc_reader.reader.reader import Reader


def _build_source(config_path: Path | None, locations: tuple[str, ...], **overrides) -> ApiSource:
    """Config file values, overridden by whatever was given on the command line."""
    source = load_config(config_path) if config_path else ApiSource()

    info_updates = {}
    title = overrides.pop("title", None)
    if title:
        info_updates["title"] = title
    api_version = overrides.pop("api_version", None)
    if api_version:
        info_updates["version"] = api_version

    updates = {k: v for k, v in overrides.items() if v is not None}
    if locations:
        updates["locations"] = list(locations)
    if info_updates:
        updates["info"] = source.info.model_copy(update=info_updates)
    return source.model_copy(update=updates)


def _read(source: ApiSource) -> Document:
    """Discover the source's resources and read them into a new document."""
    if not source.locations:
        raise click.UsageError("No resource locations given (pass LOCATIONS or set 'locations' in the config).")

    resources = discover_resources(source.locations)
    click.echo(f"Found {len(resources)} resource classes.", err=True)
    reader = Reader(source.new_document())
    return reader.read(
        resources,
        include_hidden=source.include_hidden,
        default_consumes=source.consumes,
        default_produces=source.produces,
        seed_tags=source.seed_tags,
        seed_parameters=source.parameters,
    )


@click.group()
@click.option("-v", "--verbose", count=True, help="Log progress (-v) or every scan decision (-vv).")
@click.option("--pythonpath", multiple=True, type=click.Path(exists=True, file_okay=False), help="Directory to import resource locations from (repeatable).")
def main(verbose: int, pythonpath: tuple[str, ...]):
    """API Doc Reader — build API description documents from annotated resource classes."""
    for entry in reversed(pythonpath):
        if entry not in sys.path:
            sys.path.insert(0, entry)
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("locations", nargs=-1)
@click.option("-c", "--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML/JSON API source configuration.")
@click.option("-o", "--output", "output_path", type=click.Path(path_type=Path), help="Output file for the API document.")
@click.option("--format", "output_format", type=click.Choice(FORMATS), help="Output format (default: from the file suffix).")
@click.option("--include-hidden/--exclude-hidden", default=None, help="Also document resources marked hidden.")
@click.option("--title", default=None, help="API title.")
@click.option("--api-version", default=None, help="API version.")
@click.option("--host", default=None, help="Host serving the API.")
@click.option("--base-path", default=None, help="Base path of every API path.")
def generate(locations: tuple[str, ...], config_path: Path | None, **options):
    """Scan resource classes and write the API document to a file."""
    try:
        source = _build_source(config_path, locations, **options)
        if source.output_path is None:
            raise click.UsageError("No output path given (pass -o or set 'output_path' in the config).")

        click.echo(f"Scanning {', '.join(source.locations)}...")
        document = _read(source)
        fmt = source.output_format or detect_format(source.output_path)
        write_document(document, source.output_path, fmt)
    except ApiDocError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Wrote {len(document.paths or {})} paths to {source.output_path}")


@main.command()
@click.argument("locations", nargs=-1)
@click.option("-c", "--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML/JSON API source configuration.")
@click.option("--format", "output_format", default="yaml", type=click.Choice(FORMATS), help="Output format.")
@click.option("--include-hidden/--exclude-hidden", default=None, help="Also document resources marked hidden.")
def show(locations: tuple[str, ...], config_path: Path | None, output_format: str, include_hidden: bool | None):
    """Scan resource classes and print the API document."""
    try:
        source = _build_source(config_path, locations, include_hidden=include_hidden)
        document = _read(source)
    except ApiDocError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(dump_document(document, output_format), nl=False)
