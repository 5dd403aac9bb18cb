"""
SQLDoc CLI - read and write JSON documents by address

Usage:
    sqldoc set <address> <json-value> [options]
    sqldoc get <address> [options]
    sqldoc collections
    sqldoc rows <collection> [options]
"""

import json
import logging
import sys
from typing import Optional

try:
    import click

    CLICK_AVAILABLE = True
except ImportError:
    CLICK_AVAILABLE = False
    click = None

from sqldoc import __version__, connect
from sqldoc.cli.formatters import get_formatter
from sqldoc.cli.formatters.base import leaf_rows
from sqldoc.core.errors import SqlDocError


@click.group()
@click.version_option(version=__version__, prog_name="sqldoc")
@click.option(
    "--db",
    "database",
    envvar="SQLDOC_DATABASE",
    default="sqldoc.duckdb",
    show_default=True,
    help="Database file (env: SQLDOC_DATABASE)",
)
@click.option(
    "--backend",
    "-b",
    envvar="SQLDOC_BACKEND",
    type=click.Choice(["auto", "duckdb", "sqlite"], case_sensitive=False),
    default="auto",
    help="Storage backend (default: auto - DuckDB if installed, else SQLite)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log generated SQL to stderr")
@click.pass_context
def cli(ctx, database: str, backend: str, verbose: bool):
    """
    SQLDoc - JSON documents on a flat relational table

    Values are stored as one row per leaf and addressed with JSONPath-like
    expressions such as users[0].address.city or users[*].name.
    """
    if not CLICK_AVAILABLE:
        print("CLI requires click library. Install with: pip install sqldoc")
        sys.exit(1)

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    ctx.ensure_object(dict)
    ctx.obj["database"] = database
    ctx.obj["backend"] = backend


def _open(ctx):
    return connect(ctx.obj["database"], backend=ctx.obj["backend"])


def _fail(message: str):
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@cli.command("set")
@click.argument("address", type=str)
@click.argument("value", type=str)
@click.option(
    "--string",
    "-s",
    "as_string",
    is_flag=True,
    help="Store VALUE verbatim as a string instead of parsing it as JSON",
)
@click.pass_context
def set_value(ctx, address: str, value: str, as_string: bool):
    """
    Write a JSON value at ADDRESS

    Examples:

        \b
        $ sqldoc set 'users[0]' '{"name": "John", "age": 30}'
        $ sqldoc set 'users[0].address.city' '"New York"'
        $ sqldoc set test "hello world" --string
    """
    if as_string:
        parsed = value
    else:
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as e:
            _fail(f"VALUE is not valid JSON ({e}). Use --string to store it as text")

    try:
        with _open(ctx) as store:
            store.set(address, parsed)
    except SqlDocError as e:
        _fail(str(e))


@cli.command("get")
@click.argument("address", type=str)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "table"], case_sensitive=False),
    default="json",
    help="Output format (default: json)",
)
@click.option("--compact", is_flag=True, help="Compact JSON output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def get_value(ctx, address: str, format: str, compact: bool, no_color: bool):
    """
    Read the JSON value at ADDRESS

    Examples:

        \b
        $ sqldoc get 'users[*].name'
        $ sqldoc get 'users[0]' -f table
    """
    fmt = format
    del format
    try:
        with _open(ctx) as store:
            value = store.get(address)
    except SqlDocError as e:
        _fail(str(e))

    formatter = get_formatter(fmt)
    if fmt == "table":
        output = formatter.format(leaf_rows(value), no_color=no_color or not sys.stdout.isatty())
    else:
        output = formatter.format(value, compact=compact)
    click.echo(output)


@cli.command()
@click.pass_context
def collections(ctx):
    """List collections"""
    try:
        with _open(ctx) as store:
            names = store.collections()
    except SqlDocError as e:
        _fail(str(e))

    for name in names:
        click.echo(name)


@cli.command()
@click.argument("collection", type=str)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format (default: table)",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--limit", "-l", type=int, default=None, help="Limit number of rows displayed")
@click.pass_context
def rows(ctx, collection: str, format: str, no_color: bool, limit: Optional[int]):
    """
    Show the stored (name, path, data) rows of COLLECTION
    """
    fmt = format
    del format
    try:
        with _open(ctx) as store:
            results = [row.to_dict() for row in store.rows(collection)]
    except SqlDocError as e:
        _fail(str(e))

    if limit is not None:
        results = results[:limit]

    formatter = get_formatter(fmt)
    click.echo(formatter.format(results, no_color=no_color or not sys.stdout.isatty()))


if __name__ == "__main__":
    cli()
