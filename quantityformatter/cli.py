import asyncio
import click
from click_default_group import DefaultGroup
import json
import sys

from .app import QuantityFormatter
from .plugins import get_plugins
from .utils import (
    QuantityError,
    parse_config,
    pairs_to_nested_config,
)
from .version import __version__

# Use Rich for tracebacks if it is installed
try:
    from rich.traceback import install

    install(show_locals=True)
except ImportError:
    pass


def formatter_options(fn):
    for decorator in reversed(
        (
            click.option(
                "-c",
                "--config",
                type=click.File(mode="r"),
                help="Path to JSON/YAML configuration file",
            ),
            click.option(
                "-s",
                "--setting",
                "settings",
                type=(str, str),
                multiple=True,
                help="Setting, e.g. -s unit_system imperial",
            ),
            click.option(
                "--plugins-dir",
                type=click.Path(exists=True, file_okay=False, dir_okay=True),
                help="Path to directory containing custom plugins",
            ),
        )
    ):
        fn = decorator(fn)
    return fn


def run_with_formatter(config, settings, plugins_dir, fn):
    "Start a QuantityFormatter and run the coroutine function fn against it"
    try:
        config_data = parse_config(config.read()) if config else {}
        formatter = QuantityFormatter(
            config=config_data,
            settings=pairs_to_nested_config(settings),
            plugins_dir=plugins_dir,
        )

        async def inner():
            await formatter.invoke_startup()
            return await fn(formatter)

        return asyncio.run(inner())
    except QuantityError as e:
        raise click.ClickException(str(e))


@click.group(cls=DefaultGroup, default="format")
@click.version_option(version=__version__)
def cli():
    """
    Format and parse engineering quantities

    \b
    quantityformatter format Bearing 0.7853981
    quantityformatter parse Bearing 'S 45 E'
    """


@cli.command()
@click.argument("key")
@click.argument("value", type=float)
@formatter_options
def format(key, value, config, settings, plugins_dir):
    "Format VALUE, in the persistence unit of quantity type KEY"

    async def inner(formatter):
        return await formatter.format_quantity(key, value)

    click.echo(run_with_formatter(config, settings, plugins_dir, inner))


@cli.command()
@click.argument("key")
@click.argument("text")
@formatter_options
@click.option("--json", "as_json", is_flag=True, help="Output result as JSON")
def parse(key, text, config, settings, plugins_dir, as_json):
    "Parse TEXT into the persistence unit of quantity type KEY"

    async def inner(formatter):
        return await formatter.parse_quantity(key, text)

    result = run_with_formatter(config, settings, plugins_dir, inner)
    if as_json:
        click.echo(json.dumps({"status": result.status.value, "value": result.value}))
    elif result.ok:
        click.echo(repr(result.value))
    else:
        click.echo(
            "Error: could not parse {!r} ({})".format(text, result.status.value),
            err=True,
        )
    if not result.ok:
        sys.exit(1)


@cli.command()
@click.option("--family", help="Only list units of this phenomenon, e.g. Units.ANGLE")
@formatter_options
def units(family, config, settings, plugins_dir):
    "List known units as JSON"

    async def inner(formatter):
        if family:
            return await formatter.units_provider.get_units_by_family(family)
        return await formatter.units_provider.get_all_units()

    found = run_with_formatter(config, settings, plugins_dir, inner)
    click.echo(
        json.dumps(
            [
                {
                    "name": unit.name,
                    "label": unit.label,
                    "phenomenon": unit.phenomenon,
                    "system": unit.system,
                }
                for unit in found
            ],
            indent=4,
            ensure_ascii=False,
        )
    )


@cli.command()
@formatter_options
def types(config, settings, plugins_dir):
    "List registered quantity types as JSON"

    async def inner(formatter):
        return formatter.quantity_types()

    quantity_types = run_with_formatter(config, settings, plugins_dir, inner)
    click.echo(json.dumps(quantity_types, indent=4, ensure_ascii=False))


@cli.command()
@click.option(
    "--plugins-dir",
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    help="Path to directory containing custom plugins",
)
def plugins(plugins_dir):
    "List currently installed plugins"
    QuantityFormatter(plugins_dir=plugins_dir)
    click.echo(json.dumps(get_plugins(), indent=4))
