import copy
import re

from .utils import FormatError

FORMAT_TYPES = ("Decimal", "Fractional", "Scientific", "Station")

FORMAT_TRAITS = (
    "trailZeroes",
    "keepSingleZero",
    "zeroEmpty",
    "keepDecimalPoint",
    "applyRounding",
    "fractionDash",
    "showUnitLabel",
    "prependUnitLabel",
    "use1000Separator",
    "exponentOnlyNegative",
)

SHOW_SIGN_OPTIONS = ("noSign", "onlyNegative", "signAlways", "negativeParentheses")

SCIENTIFIC_TYPES = ("normalized", "zeroNormalized")

DECIMAL_PRECISIONS = tuple(range(13))

FRACTIONAL_PRECISIONS = (1, 2, 4, 8, 16, 32, 64, 128, 256)

MAX_COMPOSITE_UNITS = 4

_trait_separator_re = re.compile(r"[,;|]")


def _lookup_choice(value, choices, description):
    if isinstance(value, str):
        for choice in choices:
            if choice.lower() == value.lower():
                return choice
    raise FormatError("Invalid {}: {!r}".format(description, value))


def parse_format_traits(traits):
    "formatTraits may be a list or a string separated by , ; or |"
    if traits is None:
        return frozenset()
    if isinstance(traits, str):
        traits = [t.strip() for t in _trait_separator_re.split(traits) if t.strip()]
    if not isinstance(traits, (list, tuple, set, frozenset)):
        raise FormatError("formatTraits must be a list or a string")
    return frozenset(_lookup_choice(t, FORMAT_TRAITS, "format trait") for t in traits)


class Format:
    """
    A validated, immutable description of how to render a quantity.

    Build one with ``await Format.from_json(name, units_provider, props)``
    where ``props`` is a FormatProps dictionary::

        {
            "type": "Decimal",
            "precision": 4,
            "formatTraits": ["showUnitLabel"],
            "composite": {"units": [{"name": "Units.M", "label": "m"}]},
        }

    ``custom`` is passed through untouched as ``custom_props`` for quantity
    types that define their own options.
    """

    def __init__(
        self,
        name,
        type="Decimal",
        precision=6,
        round_factor=0.0,
        traits=frozenset(),
        decimal_separator=".",
        thousand_separator=",",
        uom_separator=" ",
        show_sign_option="onlyNegative",
        scientific_type=None,
        station_offset_size=None,
        station_separator="+",
        spacer=" ",
        include_zero=True,
        units=(),
        custom_props=None,
    ):
        self.name = name
        self.type = type
        self.precision = precision
        self.round_factor = round_factor
        self.traits = frozenset(traits)
        self.decimal_separator = decimal_separator
        self.thousand_separator = thousand_separator
        self.uom_separator = uom_separator
        self.show_sign_option = show_sign_option
        self.scientific_type = scientific_type
        self.station_offset_size = station_offset_size
        self.station_separator = station_separator
        self.spacer = spacer
        self.include_zero = include_zero
        # Tuple of (UnitProps, label or None), largest unit first
        self.units = tuple(units)
        self._custom_props = copy.deepcopy(custom_props)
        self._frozen = True

    def __setattr__(self, name, value):
        if getattr(self, "_frozen", False):
            raise AttributeError("Format objects are immutable")
        super().__setattr__(name, value)

    def __repr__(self):
        return "<Format {} type={} precision={} units={}>".format(
            self.name,
            self.type,
            self.precision,
            [unit.name for unit, _ in self.units],
        )

    def has_trait(self, trait):
        return trait in self.traits

    @property
    def has_units(self):
        return bool(self.units)

    @property
    def custom_props(self):
        "A copy, changing it does not change the Format"
        return copy.deepcopy(self._custom_props)

    @classmethod
    async def from_json(cls, name, units_provider, props):
        if not isinstance(props, dict):
            raise FormatError("Format props must be a dictionary")
        if "type" not in props:
            raise FormatError("Format {} is missing required 'type'".format(name))
        format_type = _lookup_choice(props["type"], FORMAT_TYPES, "format type")

        precision = props.get("precision", 6)
        if isinstance(precision, bool) or not isinstance(precision, int):
            raise FormatError("precision must be an integer")
        valid_precisions = (
            FRACTIONAL_PRECISIONS if format_type == "Fractional" else DECIMAL_PRECISIONS
        )
        if precision not in valid_precisions:
            raise FormatError(
                "Invalid precision {} for {} format".format(precision, format_type)
            )

        round_factor = props.get("roundFactor", 0.0)
        if not isinstance(round_factor, (int, float)) or round_factor < 0:
            raise FormatError("roundFactor must be a non-negative number")

        scientific_type = None
        if format_type == "Scientific":
            scientific_type = _lookup_choice(
                props.get("scientificType", "normalized"),
                SCIENTIFIC_TYPES,
                "scientificType",
            )

        station_offset_size = props.get("stationOffsetSize")
        if format_type == "Station":
            if (
                isinstance(station_offset_size, bool)
                or not isinstance(station_offset_size, int)
                or station_offset_size <= 0
            ):
                raise FormatError("Station formats require a positive stationOffsetSize")

        show_sign_option = _lookup_choice(
            props.get("showSignOption", "onlyNegative"),
            SHOW_SIGN_OPTIONS,
            "showSignOption",
        )

        spacer = " "
        include_zero = True
        units = []
        composite = props.get("composite")
        if composite is not None:
            if not isinstance(composite, dict):
                raise FormatError("composite must be a dictionary")
            spacer = composite.get("spacer", spacer)
            include_zero = composite.get("includeZero", include_zero)
            unit_specs = composite.get("units")
            if not unit_specs:
                raise FormatError(
                    "Format {} has a composite with no units".format(name)
                )
            if len(unit_specs) > MAX_COMPOSITE_UNITS:
                raise FormatError(
                    "Format {} has more than {} composite units".format(
                        name, MAX_COMPOSITE_UNITS
                    )
                )
            seen = set()
            for unit_spec in unit_specs:
                if not isinstance(unit_spec, dict) or not unit_spec.get("name"):
                    raise FormatError("Composite units require a 'name'")
                if unit_spec["name"] in seen:
                    raise FormatError(
                        "Duplicate composite unit: {}".format(unit_spec["name"])
                    )
                seen.add(unit_spec["name"])
                # Raises UnitNotFound for unknown names
                unit = await units_provider.find_unit_by_name(unit_spec["name"])
                units.append((unit, unit_spec.get("label")))
            await _check_composite_order(name, units_provider, units)

        return cls(
            name,
            type=format_type,
            precision=precision,
            round_factor=float(round_factor),
            traits=parse_format_traits(props.get("formatTraits")),
            decimal_separator=props.get("decimalSeparator", "."),
            thousand_separator=props.get("thousandSeparator", ","),
            uom_separator=props.get("uomSeparator", " "),
            show_sign_option=show_sign_option,
            scientific_type=scientific_type,
            station_offset_size=station_offset_size,
            station_separator=props.get("stationSeparator", "+"),
            spacer=spacer,
            include_zero=include_zero,
            units=units,
            custom_props=props.get("custom"),
        )

    def to_json(self):
        props = {
            "type": self.type,
            "precision": self.precision,
        }
        if self.round_factor:
            props["roundFactor"] = self.round_factor
        if self.traits:
            props["formatTraits"] = [t for t in FORMAT_TRAITS if t in self.traits]
        if self.decimal_separator != ".":
            props["decimalSeparator"] = self.decimal_separator
        if self.thousand_separator != ",":
            props["thousandSeparator"] = self.thousand_separator
        if self.uom_separator != " ":
            props["uomSeparator"] = self.uom_separator
        if self.show_sign_option != "onlyNegative":
            props["showSignOption"] = self.show_sign_option
        if self.scientific_type:
            props["scientificType"] = self.scientific_type
        if self.type == "Station":
            props["stationOffsetSize"] = self.station_offset_size
            props["stationSeparator"] = self.station_separator
        if self.units:
            units = []
            for unit, label in self.units:
                unit_props = {"name": unit.name}
                if label is not None:
                    unit_props["label"] = label
                units.append(unit_props)
            props["composite"] = {
                "includeZero": self.include_zero,
                "spacer": self.spacer,
                "units": units,
            }
        if self._custom_props is not None:
            props["custom"] = self.custom_props
        return props


async def _check_composite_order(name, units_provider, units):
    phenomena = {unit.phenomenon for unit, _ in units}
    if len(phenomena) > 1:
        raise FormatError(
            "Format {} mixes units of different phenomena: {}".format(
                name, ", ".join(sorted(phenomena))
            )
        )
    for (larger, _), (smaller, _) in zip(units, units[1:]):
        conversion = await units_provider.get_conversion(larger, smaller)
        if conversion.offset:
            raise FormatError(
                "Composite units of {} cannot have offsets: {} to {}".format(
                    name, larger.name, smaller.name
                )
            )
        if conversion.factor <= 1:
            raise FormatError(
                "Composite units of {} must go from largest to smallest: "
                "{} is not larger than {}".format(name, larger.name, smaller.name)
            )
