from quantityformatter.format import Format
from quantityformatter.units import (
    PintUnitsProvider,
    UnitConversion,
    create_unit_conversion_specs_for_unit,
    resolve_unit_conversions,
)
from quantityformatter.utils import UnitConversionError, UnitNotFound
from .utils import DMS_UNITS
import math
import pytest


@pytest.mark.asyncio
async def test_find_unit_by_name(units_provider):
    unit = await units_provider.find_unit_by_name("Units.RAD")
    assert "Units.RAD" == unit.name
    assert "rad" == unit.label
    assert "Units.ANGLE" == unit.phenomenon
    assert "Units.SI" == unit.system


@pytest.mark.asyncio
async def test_find_unit_by_name_unknown(units_provider):
    with pytest.raises(UnitNotFound):
        await units_provider.find_unit_by_name("Units.FURLONG_PER_FORTNIGHT")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "label,phenomenon,expected",
    [
        ("deg", None, "Units.ARC_DEG"),
        ("FT", None, "Units.FT"),
        ("Units.KM", None, "Units.KM"),
        ("'", "Units.ANGLE", "Units.ARC_MINUTE"),
        ("'", "Units.LENGTH", "Units.FT"),
        ('"', "Units.LENGTH", "Units.IN"),
    ],
)
async def test_find_unit(units_provider, label, phenomenon, expected):
    unit = await units_provider.find_unit(label, phenomenon=phenomenon)
    assert expected == unit.name


@pytest.mark.asyncio
async def test_find_unit_unknown_label(units_provider):
    with pytest.raises(UnitNotFound):
        await units_provider.find_unit("parsec")


@pytest.mark.asyncio
async def test_get_units_by_family(units_provider):
    units = await units_provider.get_units_by_family("Units.TEMPERATURE")
    assert ["Units.K", "Units.CELSIUS", "Units.FAHRENHEIT"] == [u.name for u in units]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "from_unit,to_unit,factor,offset",
    [
        ("Units.RAD", "Units.ARC_DEG", 180 / math.pi, 0),
        ("Units.ARC_DEG", "Units.ARC_MINUTE", 60, 0),
        ("Units.M", "Units.FT", 1 / 0.3048, 0),
        ("Units.FT", "Units.IN", 12, 0),
        ("Units.KM", "Units.M", 1000, 0),
        ("Units.CELSIUS", "Units.FAHRENHEIT", 1.8, 32),
        ("Units.CELSIUS", "Units.K", 1, 273.15),
    ],
)
async def test_get_conversion(units_provider, from_unit, to_unit, factor, offset):
    conversion = await units_provider.get_conversion(from_unit, to_unit)
    assert isinstance(conversion, UnitConversion)
    assert conversion.factor == pytest.approx(factor)
    assert conversion.offset == pytest.approx(offset)


@pytest.mark.asyncio
async def test_get_conversion_accepts_unit_props(units_provider):
    rad = await units_provider.find_unit_by_name("Units.RAD")
    deg = await units_provider.find_unit_by_name("Units.ARC_DEG")
    conversion = await units_provider.get_conversion(deg, rad)
    assert conversion.factor == pytest.approx(math.pi / 180)


@pytest.mark.asyncio
async def test_get_conversion_between_phenomena(units_provider):
    with pytest.raises(UnitConversionError):
        await units_provider.get_conversion("Units.RAD", "Units.M")


@pytest.mark.asyncio
async def test_extra_unit_definitions(units_provider):
    provider = PintUnitsProvider(
        ureg=units_provider.ureg,
        definitions=[
            {
                "name": "Units.NAUT_MILE",
                "label": "nmi",
                "phenomenon": "Units.LENGTH",
                "system": "Units.INTERNATIONAL",
                "unit": "nautical_mile",
            }
        ],
    )
    nautical_mile = await provider.find_unit_by_name("Units.NAUT_MILE")
    assert () == nautical_mile.alternate_labels
    conversion = await provider.get_conversion("Units.NAUT_MILE", "Units.M")
    assert conversion.factor == pytest.approx(1852)


@pytest.mark.asyncio
async def test_unknown_pint_unit_fails_on_conversion(units_provider):
    provider = PintUnitsProvider(
        ureg=units_provider.ureg,
        definitions=[
            {
                "name": "Units.BOGUS",
                "label": "bg",
                "phenomenon": "Units.LENGTH",
                "unit": "not_a_real_pint_unit",
            }
        ],
    )
    with pytest.raises(UnitConversionError):
        await provider.get_conversion("Units.BOGUS", "Units.M")


@pytest.mark.asyncio
async def test_resolve_unit_conversions_keeps_composite_order(units_provider):
    rad = await units_provider.find_unit_by_name("Units.RAD")
    format = await Format.from_json(
        "dms",
        units_provider,
        {"type": "Decimal", "precision": 0, "composite": {"units": DMS_UNITS}},
    )
    conversions = await resolve_unit_conversions(format, units_provider, rad)
    assert ["Units.ARC_DEG", "Units.ARC_MINUTE", "Units.ARC_SECOND"] == [
        c.name for c in conversions
    ]
    assert ["°", "'", '"'] == [c.label for c in conversions]
    assert [c.factor for c in conversions] == pytest.approx(
        [180 / math.pi, 10800 / math.pi, 648000 / math.pi]
    )


@pytest.mark.asyncio
async def test_resolve_unit_conversions_default_label(units_provider):
    m = await units_provider.find_unit_by_name("Units.M")
    format = await Format.from_json(
        "ft",
        units_provider,
        {"type": "Decimal", "precision": 2, "composite": {"units": [{"name": "Units.FT"}]}},
    )
    (conversion,) = await resolve_unit_conversions(format, units_provider, m)
    assert "'" == conversion.label
    assert conversion.convert(1) == pytest.approx(3.28084)


@pytest.mark.asyncio
async def test_resolve_unit_conversions_without_composite(units_provider):
    rad = await units_provider.find_unit_by_name("Units.RAD")
    format = await Format.from_json("plain", units_provider, {"type": "Decimal"})
    (conversion,) = await resolve_unit_conversions(format, units_provider, rad)
    assert "Units.RAD" == conversion.name
    assert "rad" == conversion.label
    assert 1.0 == conversion.factor
    assert 0.0 == conversion.offset


class RecordingProvider(PintUnitsProvider):
    def __init__(self, ureg, fail_on):
        super().__init__(ureg=ureg)
        self.fail_on = fail_on
        self.requested = []

    async def get_conversion(self, from_unit, to_unit):
        self.requested.append(to_unit.name)
        if to_unit.name == self.fail_on:
            raise UnitNotFound("No conversion for {}".format(to_unit.name))
        return await super().get_conversion(from_unit, to_unit)


@pytest.mark.asyncio
async def test_resolve_unit_conversions_is_all_or_nothing(units_provider):
    format = await Format.from_json(
        "dms",
        units_provider,
        {"type": "Decimal", "precision": 0, "composite": {"units": DMS_UNITS}},
    )
    provider = RecordingProvider(units_provider.ureg, fail_on="Units.ARC_MINUTE")
    rad = await provider.find_unit_by_name("Units.RAD")
    with pytest.raises(UnitNotFound):
        await resolve_unit_conversions(format, provider, rad)
    # Stops at the failing unit, in declaration order
    assert ["Units.ARC_DEG", "Units.ARC_MINUTE"] == provider.requested


@pytest.mark.asyncio
async def test_create_unit_conversion_specs_for_unit(units_provider):
    rad = await units_provider.find_unit_by_name("Units.RAD")
    conversions = await create_unit_conversion_specs_for_unit(units_provider, rad)
    by_name = {c.name: c for c in conversions}
    assert {
        "Units.RAD",
        "Units.ARC_DEG",
        "Units.ARC_MINUTE",
        "Units.ARC_SECOND",
        "Units.GRAD",
        "Units.REVOLUTION",
    } == set(by_name)
    assert by_name["Units.ARC_DEG"].convert(180) == pytest.approx(math.pi)
    assert by_name["Units.REVOLUTION"].convert(1) == pytest.approx(2 * math.pi)
    assert by_name["Units.ARC_DEG"].matches_label("DEG")
