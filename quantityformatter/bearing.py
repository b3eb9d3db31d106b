"""
Bearing quantity type: azimuths in radians shown as surveying bearings.

An azimuth of 45 degrees is written ``N 45°0'0" E``, one of 135 degrees
``S 45°0'0" E``. The numeric part is produced by the standard formatter and
parser, wrapped with the quadrant logic in this module.

Custom format props::

    {
        "addDirectionLabelGap": True,      # space around N/S and E/W
        "angleDirection": "clockwise",     # or "counter-clockwise"
        "legacyQuadrantParsing": False,    # legacy hemisphere rules
    }
"""

import logging
import math

from quantityformatter import hookimpl
from quantityformatter.formatter import FormatterSpec
from quantityformatter.parser import ParserSpec
from quantityformatter.quantity_types import (
    CheckboxPropEditorSpec,
    CustomQuantityTypeEntry,
    SelectOption,
    SelectPropEditorSpec,
    set_custom_prop,
)

logger = logging.getLogger(__name__)

TWO_PI = 2 * math.pi
HALF_PI = math.pi / 2
THREE_HALF_PI = 3 * math.pi / 2

QUADRANT_PREFIXES = ("N", "S", "S", "N")
QUADRANT_SUFFIXES = ("E", "E", "W", "W")

CLOCKWISE = "clockwise"
COUNTER_CLOCKWISE = "counter-clockwise"

DEFAULT_BEARING_FORMAT = {
    "composite": {
        "includeZero": True,
        "spacer": "",
        "units": [
            {"label": "°", "name": "Units.ARC_DEG"},
            {"label": "'", "name": "Units.ARC_MINUTE"},
            {"label": '"', "name": "Units.ARC_SECOND"},
        ],
    },
    "formatTraits": ["showUnitLabel"],
    "precision": 0,
    "type": "Decimal",
    "uomSeparator": "",
    "custom": {"addDirectionLabelGap": True, "angleDirection": CLOCKWISE},
}


def _custom(format):
    return format.custom_props or {}


def azimuth_to_bearing(magnitude, counter_clockwise=False):
    """
    Return (prefix, suffix, angle) for an azimuth in radians.

    Negative azimuths are made positive, normalised and then reflected, so
    -45 degrees becomes 315 degrees.
    """
    if counter_clockwise:
        magnitude = TWO_PI - magnitude

    adjusted = (abs(magnitude) + TWO_PI) % TWO_PI
    if magnitude < 0:
        adjusted = TWO_PI - adjusted

    # Upper boundaries are inclusive; exactly 0 falls through to quadrant 1
    angle = adjusted
    quadrant = 1
    if HALF_PI < adjusted <= math.pi:
        angle = math.pi - adjusted
        quadrant = 2
    elif math.pi < adjusted <= THREE_HALF_PI:
        angle = adjusted - math.pi
        quadrant = 3
    elif THREE_HALF_PI < adjusted < TWO_PI:
        angle = TWO_PI - adjusted
        quadrant = 4
    return QUADRANT_PREFIXES[quadrant - 1], QUADRANT_SUFFIXES[quadrant - 1], angle


def split_bearing(text):
    "Return (prefix, suffix, remainder) with one N/S and one E/W stripped"
    adjusted = text.upper().strip()
    prefix = suffix = None
    if adjusted[:1] in ("N", "S"):
        prefix = adjusted[0]
        adjusted = adjusted[1:]
    if adjusted[-1:] in ("E", "W"):
        suffix = adjusted[-1]
        adjusted = adjusted[:-1]
    return prefix, suffix, adjusted


def bearing_to_azimuth(prefix, suffix, value, counter_clockwise=False, legacy=False):
    if legacy:
        # Legacy rules: S/E is never corrected and N/W maps to pi - v
        if prefix == "N" and suffix == "W":
            value = math.pi - value
        elif prefix == "S" and suffix == "W":
            value = value + math.pi
        if value and counter_clockwise:
            value = value - TWO_PI
        return value

    if prefix == "S" and suffix == "E":
        value = math.pi - value
    elif prefix == "S" and suffix == "W":
        value = math.pi + value
    elif prefix == "N" and suffix == "W":
        value = TWO_PI - value
    if counter_clockwise:
        value = (TWO_PI - value) % TWO_PI
    return value


class BearingFormatterSpec:
    "Wraps a FormatterSpec, formatting the in-quadrant angle with N/S E/W labels"

    def __init__(self, spec):
        self.spec = spec

    @property
    def name(self):
        return self.spec.name

    @property
    def format(self):
        return self.spec.format

    @property
    def unit_conversions(self):
        return self.spec.unit_conversions

    @property
    def persistence_unit(self):
        return self.spec.persistence_unit

    def apply_formatting(self, magnitude):
        custom = _custom(self.format)
        prefix, suffix, angle = azimuth_to_bearing(
            magnitude, custom.get("angleDirection") == COUNTER_CLOCKWISE
        )
        gap = " " if custom.get("addDirectionLabelGap", True) else ""
        return "{}{}{}{}{}".format(
            prefix, gap, self.spec.apply_formatting(angle), gap, suffix
        )

    @classmethod
    async def create(cls, name, format, units_provider, persistence_unit):
        spec = await FormatterSpec.create(name, format, units_provider, persistence_unit)
        return cls(spec)


class BearingParserSpec:
    "Wraps a ParserSpec, turning N/S E/W bearings back into azimuths"

    def __init__(self, spec):
        self.spec = spec

    @property
    def format(self):
        return self.spec.format

    @property
    def unit_conversions(self):
        return self.spec.unit_conversions

    @property
    def out_unit(self):
        return self.spec.out_unit

    def parse_to_quantity_value(self, text):
        if not isinstance(text, str):
            return self.spec.parse_to_quantity_value(text)
        prefix, suffix, remainder = split_bearing(text)
        result = self.spec.parse_to_quantity_value(remainder)
        if not result.ok:
            return result
        custom = _custom(self.format)
        return result.with_value(
            bearing_to_azimuth(
                prefix,
                suffix,
                result.value,
                counter_clockwise=custom.get("angleDirection") == COUNTER_CLOCKWISE,
                legacy=bool(custom.get("legacyQuadrantParsing")),
            )
        )

    @classmethod
    async def create(cls, format, units_provider, out_unit):
        spec = await ParserSpec.create(format, units_provider, out_unit)
        return cls(spec)


def bearing_gap_prop_getter(props):
    return bool((props.get("custom") or {}).get("addDirectionLabelGap", True))


def bearing_gap_prop_setter(props, is_checked):
    return set_custom_prop(props, "addDirectionLabelGap", is_checked)


def bearing_angle_direction_getter(props):
    return (props.get("custom") or {}).get("angleDirection") or CLOCKWISE


def bearing_angle_direction_setter(props, value):
    return set_custom_prop(props, "angleDirection", value)


class BearingQuantityType(CustomQuantityTypeEntry):
    key = "Bearing"
    type = "Bearing"
    persistence_unit_name = "Units.RAD"
    label_key = "BearingQuantityType.label"
    description_key = "BearingQuantityType.description"
    default_format_props = DEFAULT_BEARING_FORMAT

    async def generate_formatter_spec(self, format_props, units_provider):
        format = await self.create_format(format_props, units_provider)
        return await BearingFormatterSpec.create(
            format.name, format, units_provider, self.persistence_unit
        )

    async def generate_parser_spec(self, format_props, units_provider):
        format = await self.create_format(format_props, units_provider)
        return await BearingParserSpec.create(
            format, units_provider, self.persistence_unit
        )

    @property
    def primary_prop_editor_specs(self):
        return [
            SelectPropEditorSpec(
                label="Angle Direction",
                select_options=(
                    SelectOption(CLOCKWISE, "Clockwise"),
                    SelectOption(COUNTER_CLOCKWISE, "Counter-Clockwise"),
                ),
                get_string=bearing_angle_direction_getter,
                set_string=bearing_angle_direction_setter,
            )
        ]

    @property
    def secondary_prop_editor_specs(self):
        return [
            CheckboxPropEditorSpec(
                label="Add Direction Label Gap",
                get_bool=bearing_gap_prop_getter,
                set_bool=bearing_gap_prop_setter,
            )
        ]

    @classmethod
    async def register_quantity_type(cls, registry, initial_props=None):
        entry = cls(initial_props)
        await entry.resolve_persistence_unit(registry.units_provider)
        was_registered = await registry.register(entry)
        if not was_registered:
            logger.info(
                "Unable to register QuantityType [%s] with key '%s'",
                cls.__name__,
                entry.key,
            )
        return was_registered


@hookimpl
def register_quantity_types(formatter):
    return [BearingQuantityType()]
