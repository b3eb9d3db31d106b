from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Tuple
import logging
import pint

from .utils import UnitConversionError, UnitNotFound

logger = logging.getLogger(__name__)

ANGLE = "Units.ANGLE"
LENGTH = "Units.LENGTH"
TEMPERATURE = "Units.TEMPERATURE"

UNIT_DEFINITIONS = (
    # Angle
    {
        "name": "Units.RAD",
        "label": "rad",
        "phenomenon": ANGLE,
        "system": "Units.SI",
        "unit": "radian",
        "alternate_labels": ["radian", "radians"],
    },
    {
        "name": "Units.ARC_DEG",
        "label": "°",
        "phenomenon": ANGLE,
        "system": "Units.METRIC",
        "unit": "degree",
        "alternate_labels": ["deg", "degree", "degrees", "^"],
    },
    {
        "name": "Units.ARC_MINUTE",
        "label": "'",
        "phenomenon": ANGLE,
        "system": "Units.METRIC",
        "unit": "arcminute",
        "alternate_labels": ["min", "arcmin", "′"],
    },
    {
        "name": "Units.ARC_SECOND",
        "label": '"',
        "phenomenon": ANGLE,
        "system": "Units.METRIC",
        "unit": "arcsecond",
        "alternate_labels": ["sec", "arcsec", "''", "″"],
    },
    {
        "name": "Units.GRAD",
        "label": "grad",
        "phenomenon": ANGLE,
        "system": "Units.METRIC",
        "unit": "grad",
        "alternate_labels": ["gon", "g"],
    },
    {
        "name": "Units.REVOLUTION",
        "label": "r",
        "phenomenon": ANGLE,
        "system": "Units.METRIC",
        "unit": "turn",
        "alternate_labels": ["rev", "revolution"],
    },
    # Length
    {
        "name": "Units.M",
        "label": "m",
        "phenomenon": LENGTH,
        "system": "Units.SI",
        "unit": "meter",
        "alternate_labels": ["meter", "meters", "metre"],
    },
    {
        "name": "Units.MM",
        "label": "mm",
        "phenomenon": LENGTH,
        "system": "Units.METRIC",
        "unit": "millimeter",
        "alternate_labels": ["millimeter", "millimeters"],
    },
    {
        "name": "Units.CM",
        "label": "cm",
        "phenomenon": LENGTH,
        "system": "Units.METRIC",
        "unit": "centimeter",
        "alternate_labels": ["centimeter", "centimeters"],
    },
    {
        "name": "Units.KM",
        "label": "km",
        "phenomenon": LENGTH,
        "system": "Units.METRIC",
        "unit": "kilometer",
        "alternate_labels": ["kilometer", "kilometers"],
    },
    {
        "name": "Units.IN",
        "label": '"',
        "phenomenon": LENGTH,
        "system": "Units.USCUSTOM",
        "unit": "inch",
        "alternate_labels": ["in", "inch", "inches"],
    },
    {
        "name": "Units.FT",
        "label": "'",
        "phenomenon": LENGTH,
        "system": "Units.USCUSTOM",
        "unit": "foot",
        "alternate_labels": ["ft", "foot", "feet"],
    },
    {
        "name": "Units.YRD",
        "label": "yd",
        "phenomenon": LENGTH,
        "system": "Units.USCUSTOM",
        "unit": "yard",
        "alternate_labels": ["yrd", "yard", "yards"],
    },
    {
        "name": "Units.MILE",
        "label": "mi",
        "phenomenon": LENGTH,
        "system": "Units.USCUSTOM",
        "unit": "mile",
        "alternate_labels": ["mile", "miles"],
    },
    # Temperature
    {
        "name": "Units.K",
        "label": "K",
        "phenomenon": TEMPERATURE,
        "system": "Units.SI",
        "unit": "kelvin",
        "alternate_labels": ["kelvin"],
    },
    {
        "name": "Units.CELSIUS",
        "label": "°C",
        "phenomenon": TEMPERATURE,
        "system": "Units.METRIC",
        "unit": "degree_Celsius",
        "alternate_labels": ["C", "degC"],
    },
    {
        "name": "Units.FAHRENHEIT",
        "label": "°F",
        "phenomenon": TEMPERATURE,
        "system": "Units.USCUSTOM",
        "unit": "degree_Fahrenheit",
        "alternate_labels": ["F", "degF"],
    },
)


@dataclass(frozen=True)
class UnitProps:
    name: str
    label: str
    phenomenon: str
    system: str
    alternate_labels: Tuple[str, ...] = field(default=(), compare=False)

    @property
    def parse_labels(self):
        "Every label a user may type for this unit, primary label first"
        return (self.label, self.name) + tuple(self.alternate_labels)


class UnitConversion(NamedTuple):
    # to = from * factor + offset
    factor: float
    offset: float = 0.0


@dataclass(frozen=True)
class UnitConversionSpec:
    name: str
    label: str
    factor: float = 1.0
    offset: float = 0.0
    system: Optional[str] = None
    parse_labels: Tuple[str, ...] = ()

    def convert(self, value):
        return value * self.factor + self.offset

    def matches_label(self, label):
        label = label.lower()
        return any(label == candidate.lower() for candidate in self.parse_labels)


class UnitsProvider(ABC):
    """
    Looks up unit definitions and the conversions between them.

    All lookups are coroutines: a provider may be backed by a remote catalog.
    """

    @abstractmethod
    async def find_unit_by_name(self, name):
        "Return UnitProps for a unit name, raise UnitNotFound if unknown"

    @abstractmethod
    async def get_units_by_family(self, phenomenon):
        "Return a list of UnitProps for every unit of a phenomenon"

    @abstractmethod
    async def get_conversion(self, from_unit, to_unit):
        "Return the UnitConversion needed to turn from_unit values into to_unit"

    async def find_unit(self, label, phenomenon=None, system=None):
        units = await self.get_all_units()
        for unit in units:
            if phenomenon and unit.phenomenon != phenomenon:
                continue
            if system and unit.system != system:
                continue
            if any(label.lower() == candidate.lower() for candidate in unit.parse_labels):
                return unit
        raise UnitNotFound("No unit matches label: {}".format(label))

    async def get_all_units(self):
        raise NotImplementedError


class PintUnitsProvider(UnitsProvider):
    "UnitsProvider backed by a named unit catalog and a pint UnitRegistry"

    def __init__(self, ureg=None, definitions=None):
        self.ureg = ureg or pint.UnitRegistry()
        self._units = {}
        self._pint_units = {}
        for definition in UNIT_DEFINITIONS + tuple(definitions or ()):
            self.add_definition(definition)

    def add_definition(self, definition):
        unit = UnitProps(
            name=definition["name"],
            label=definition["label"],
            phenomenon=definition["phenomenon"],
            system=definition.get("system", "Units.SI"),
            alternate_labels=tuple(definition.get("alternate_labels") or ()),
        )
        self._pint_units[unit.name] = definition["unit"]
        self._units[unit.name] = unit
        return unit

    async def find_unit_by_name(self, name):
        try:
            return self._units[name]
        except KeyError:
            raise UnitNotFound("Unknown unit: {}".format(name))

    async def get_all_units(self):
        return list(self._units.values())

    async def get_units_by_family(self, phenomenon):
        return [unit for unit in self._units.values() if unit.phenomenon == phenomenon]

    async def get_conversion(self, from_unit, to_unit):
        from_unit = await self._resolve(from_unit)
        to_unit = await self._resolve(to_unit)
        if from_unit.phenomenon != to_unit.phenomenon:
            raise UnitConversionError(
                "Cannot convert {} ({}) to {} ({})".format(
                    from_unit.name,
                    from_unit.phenomenon,
                    to_unit.name,
                    to_unit.phenomenon,
                )
            )
        try:
            source = self.ureg.Unit(self._pint_units[from_unit.name])
            target = self.ureg.Unit(self._pint_units[to_unit.name])
            offset = self.ureg.Quantity(0.0, source).to(target).magnitude
            factor = self.ureg.Quantity(1.0, source).to(target).magnitude - offset
        except (pint.UndefinedUnitError, pint.DimensionalityError) as e:
            raise UnitConversionError(str(e)) from e
        return UnitConversion(factor=factor, offset=offset)

    async def _resolve(self, unit):
        if isinstance(unit, UnitProps):
            return await self.find_unit_by_name(unit.name)
        return await self.find_unit_by_name(unit)


async def resolve_unit_conversions(format, units_provider, persistence_unit):
    """
    Resolve one UnitConversionSpec per composite unit of ``format``.

    Conversions go from ``persistence_unit`` into each composite unit and
    keep the composite declaration order. A format without composite units
    formats in the persistence unit itself.
    """
    if not format.units:
        return (
            UnitConversionSpec(
                name=persistence_unit.name,
                label=persistence_unit.label,
                system=persistence_unit.system,
                parse_labels=persistence_unit.parse_labels,
            ),
        )
    conversions = []
    for unit, label in format.units:
        conversion = await units_provider.get_conversion(persistence_unit, unit)
        logger.debug(
            "Resolved %s -> %s: factor=%r offset=%r",
            persistence_unit.name,
            unit.name,
            conversion.factor,
            conversion.offset,
        )
        conversions.append(
            UnitConversionSpec(
                name=unit.name,
                label=unit.label if label is None else label,
                factor=conversion.factor,
                offset=conversion.offset,
                system=unit.system,
                parse_labels=unit.parse_labels,
            )
        )
    return tuple(conversions)


async def create_unit_conversion_specs_for_unit(units_provider, out_unit):
    "Conversions from every unit of out_unit's phenomenon into out_unit"
    conversions = []
    for unit in await units_provider.get_units_by_family(out_unit.phenomenon):
        conversion = await units_provider.get_conversion(unit, out_unit)
        conversions.append(
            UnitConversionSpec(
                name=unit.name,
                label=unit.label,
                factor=conversion.factor,
                offset=conversion.offset,
                system=unit.system,
                parse_labels=unit.parse_labels,
            )
        )
    return tuple(conversions)
