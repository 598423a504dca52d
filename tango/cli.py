"""
tango CLI - keep commented source and literate markdown in sync.

Commands:
- run: synchronize the project (default directory: current)
- status: show what `run` would regenerate, and any conflicts
- convert: convert a single file in either direction
- config: show or initialize tango.yaml
"""

import io
import json
import logging
import sys

import click

from tango import __version__
from tango.config import get_config_path, load_config, save_config
from tango.context import Context
from tango.convert import to_literate, to_source
from tango.errors import CheckInputError, ConcurrentUpdateError, TangoError

ROOT_OPTION = click.option(
    "--root", default=".", type=click.Path(exists=True, file_okay=False),
    help="Project root holding tango.yaml and the stamp (default: current directory)",
)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug)")
def cli(verbose: int):
    """tango - literate programming without a build step.

    Prose lives in source files as `//@ ` comments; markdown files carry
    the same content with code in fenced blocks. Whichever side changed
    regenerates the other.
    """
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load(root: str):
    try:
        return load_config(root)
    except TangoError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@ROOT_OPTION
@click.option("--strict", is_flag=True,
              help="Fail when a named link no longer matches its code block")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
def run(root: str, strict: bool, as_json: bool):
    """Synchronize source and literate files.

    Exits with status 1 on a conflict (both sides edited), a concurrent
    update, an I/O failure, or, with --strict, stale named links.
    """
    config = _load(root)
    config.strict = config.strict or strict

    try:
        report = Context(config, root).run()
    except CheckInputError as e:
        click.echo(f"Conflict: {e}", err=True)
        click.echo("Resolve by hand: decide which side is current, then touch it.", err=True)
        sys.exit(1)
    except ConcurrentUpdateError as e:
        click.echo(f"Error: {e}", err=True)
        click.echo("Re-run tango once the other writer is done.", err=True)
        sys.exit(1)
    except TangoError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        click.echo(report.summary())

    if report.warnings and config.strict:
        click.echo(f"Error: {len(report.warnings)} encoding warning(s) in strict mode", err=True)
        sys.exit(1)


@cli.command()
@ROOT_OPTION
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
def status(root: str, as_json: bool):
    """Show pending regenerations and conflicts without writing anything."""
    config = _load(root)
    try:
        report = Context(config, root).plan()
    except TangoError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        click.echo(report.summary())

    if report.conflicts:
        sys.exit(1)


@cli.group()
def convert():
    """Convert a single file (stdout unless -o is given)."""
    pass


def _convert_file(func, file: str, output: str, root: str):
    config = _load(root)
    buffer = io.StringIO()
    try:
        with open(file, encoding="utf-8") as source:
            result = func(source, buffer, config)
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"Error: cannot read {file}: {e}", err=True)
        sys.exit(1)

    if output:
        try:
            with open(output, "w", encoding="utf-8") as target:
                target.write(buffer.getvalue())
        except OSError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
    else:
        click.echo(buffer.getvalue(), nl=False)

    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)


@convert.command("to-literate")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False),
              help="Write here instead of stdout")
@ROOT_OPTION
def convert_to_literate(file: str, output: str, root: str):
    """Convert a commented source FILE to literate markdown."""
    _convert_file(to_literate, file, output, root)


@convert.command("to-source")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False),
              help="Write here instead of stdout")
@ROOT_OPTION
def convert_to_source(file: str, output: str, root: str):
    """Convert a literate markdown FILE to commented source."""
    _convert_file(to_source, file, output, root)


@cli.command("config")
@ROOT_OPTION
@click.option("--init", is_flag=True, help="Write tango.yaml with the current settings")
def config_cmd(root: str, init: bool):
    """Show the effective configuration, or write it with --init."""
    config = _load(root)

    if init:
        if get_config_path(root).exists():
            click.echo(f"Error: {get_config_path(root)} already exists", err=True)
            sys.exit(1)
        path = save_config(root, config)
        click.echo(f"Wrote {path}")
        return

    source = get_config_path(root)
    origin = str(source) if source.exists() else "defaults"
    click.echo(f"Configuration ({origin}):")
    for key, value in config.to_dict().items():
        click.echo(f"  {key}: {value}")


def main():
    cli()


if __name__ == "__main__":
    main()
