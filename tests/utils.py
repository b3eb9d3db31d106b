from quantityformatter.format import Format
from quantityformatter.formatter import FormatterSpec
from quantityformatter.parser import ParserSpec
import pathlib

PLUGINS_DIR = str(pathlib.Path(__file__).parent / "plugins")

DMS_UNITS = [
    {"name": "Units.ARC_DEG", "label": "°"},
    {"name": "Units.ARC_MINUTE", "label": "'"},
    {"name": "Units.ARC_SECOND", "label": '"'},
]


def decimal_props(unit="Units.M", label=None, precision=4, traits=None, **extra):
    unit_props = {"name": unit}
    if label is not None:
        unit_props["label"] = label
    props = {
        "type": "Decimal",
        "precision": precision,
        "formatTraits": traits if traits is not None else ["showUnitLabel"],
        "composite": {"units": [unit_props]},
    }
    props.update(extra)
    return props


async def make_formatter_spec(units_provider, props, persistence_unit="Units.M"):
    unit = await units_provider.find_unit_by_name(persistence_unit)
    format = await Format.from_json("test", units_provider, props)
    return await FormatterSpec.create("test", format, units_provider, unit)


async def make_parser_spec(units_provider, props, persistence_unit="Units.M"):
    unit = await units_provider.find_unit_by_name(persistence_unit)
    format = await Format.from_json("test", units_provider, props)
    return await ParserSpec.create(format, units_provider, unit)
