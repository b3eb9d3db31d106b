import math

from .units import resolve_unit_conversions

# Whole composite parts within this distance of the next integer count as
# that integer, so 44.99999999999999 degrees decomposes as 45
CARRY_TOLERANCE = 1.0e-9


def round_half_up(value, precision):
    scale = 10**precision
    return math.floor(value * scale + 0.5) / scale


def apply_round_factor(value, round_factor):
    if not round_factor:
        return value
    return math.floor(value / round_factor + 0.5) * round_factor


def group_thousands(digits, separator):
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return separator.join(groups)


def unit_ratio(larger, smaller):
    "How many of the smaller composite unit make up one of the larger"
    ratio = smaller.factor / larger.factor
    if abs(ratio - round(ratio)) < CARRY_TOLERANCE:
        return float(round(ratio))
    return ratio


def _round_component(value, format):
    if format.has_trait("applyRounding"):
        value = apply_round_factor(value, format.round_factor)
    if format.type == "Fractional":
        return math.floor(value * format.precision + 0.5) / format.precision
    return round_half_up(value, format.precision)


def _format_integer(value, format):
    digits = str(int(value))
    if format.has_trait("use1000Separator"):
        digits = group_thousands(digits, format.thousand_separator)
    return digits


def format_decimal(value, format, precision=None):
    if precision is None:
        precision = format.precision
    rounded = round_half_up(value, precision)
    if format.has_trait("zeroEmpty") and rounded == 0:
        return ""
    whole, _, fraction = "{:.{}f}".format(rounded, precision).partition(".")
    if not format.has_trait("trailZeroes"):
        fraction = fraction.rstrip("0")
    whole = _format_integer(whole, format)
    if fraction:
        return whole + format.decimal_separator + fraction
    if format.has_trait("keepSingleZero"):
        return whole + format.decimal_separator + "0"
    if format.has_trait("keepDecimalPoint"):
        return whole + format.decimal_separator
    return whole


def format_fractional(value, format):
    denominator = format.precision
    whole = math.floor(value)
    numerator = math.floor((value - whole) * denominator + 0.5)
    if numerator == denominator:
        whole += 1
        numerator = 0
    if format.has_trait("zeroEmpty") and whole == 0 and numerator == 0:
        return ""
    if numerator == 0:
        return _format_integer(whole, format)
    divisor = math.gcd(numerator, denominator)
    fraction = "{}/{}".format(numerator // divisor, denominator // divisor)
    if whole == 0:
        return fraction
    gap = "-" if format.has_trait("fractionDash") else " "
    return _format_integer(whole, format) + gap + fraction


def format_scientific(value, format):
    if value == 0:
        mantissa, exponent = 0.0, 0
    else:
        exponent = math.floor(math.log10(value))
        if format.scientific_type == "zeroNormalized":
            exponent += 1
        mantissa = value / 10**exponent
    upper = 1.0 if format.scientific_type == "zeroNormalized" else 10.0
    if round_half_up(mantissa, format.precision) >= upper:
        mantissa /= 10
        exponent += 1
    if exponent < 0:
        exponent_text = str(exponent)
    elif format.has_trait("exponentOnlyNegative"):
        exponent_text = str(exponent)
    else:
        exponent_text = "+" + str(exponent)
    return format_decimal(mantissa, format) + "e" + exponent_text


def format_station(value, format):
    size = format.station_offset_size
    rounded = round_half_up(value, format.precision)
    station = math.floor(rounded / 10**size + CARRY_TOLERANCE)
    offset = max(rounded - station * 10**size, 0.0)
    whole, separator, fraction = format_decimal(offset, format).partition(
        format.decimal_separator
    )
    return "{}{}{}{}{}".format(
        _format_integer(station, format),
        format.station_separator,
        whole.zfill(size),
        separator,
        fraction,
    )


def format_number(value, format):
    "Render a non-negative number according to the format type"
    if format.type == "Fractional":
        return format_fractional(value, format)
    if format.type == "Scientific":
        return format_scientific(value, format)
    if format.type == "Station":
        return format_station(value, format)
    return format_decimal(value, format)


def decompose(value, conversions):
    """
    Split a non-negative value in the first composite unit across all of the
    composite units. Every part but the last is a whole number.
    """
    parts = []
    last = len(conversions) - 1
    for index, conversion in enumerate(conversions):
        if index:
            value = value * unit_ratio(conversions[index - 1], conversion)
        if index < last:
            whole = math.floor(value + CARRY_TOLERANCE)
            parts.append(whole)
            value = max(value - whole, 0.0)
        else:
            parts.append(value)
    return parts


def carry(parts, conversions):
    "Push a rounded-up smallest part into the larger units"
    for index in range(len(parts) - 1, 0, -1):
        ratio = unit_ratio(conversions[index - 1], conversions[index])
        if parts[index] >= ratio - CARRY_TOLERANCE:
            parts[index] -= ratio
            parts[index - 1] += 1
    return parts


def _with_label(text, label, format):
    if not format.has_trait("showUnitLabel"):
        return text
    if format.has_trait("prependUnitLabel"):
        return label + format.uom_separator + text
    return text + format.uom_separator + label


def _apply_sign(text, negative, format):
    option = format.show_sign_option
    if option == "noSign":
        return text
    if option == "signAlways":
        return ("-" if negative else "+") + text
    if not negative:
        return text
    if option == "negativeParentheses":
        return "(" + text + ")"
    return "-" + text


def format_quantity(magnitude, spec):
    """
    Format ``magnitude``, a value in the spec's persistence unit, as text.

    This is the base algorithm shared by every formatter spec; custom
    formatters transform the magnitude and wrap the text around it.
    """
    format = spec.format
    conversions = spec.unit_conversions
    value = conversions[0].convert(magnitude)
    negative = value < 0
    value = abs(value)

    if len(conversions) == 1 or format.type in ("Scientific", "Station"):
        if format.has_trait("applyRounding"):
            value = apply_round_factor(value, format.round_factor)
        text = _with_label(format_number(value, format), conversions[0].label, format)
        is_zero = value == 0 or (
            format.type in ("Decimal", "Fractional")
            and _round_component(value, format) == 0
        )
        return _apply_sign(text, negative and not is_zero, format)

    parts = decompose(value, conversions)
    parts[-1] = _round_component(parts[-1], format)
    parts = carry(parts, conversions)
    is_zero = not any(parts)

    indexes = list(range(len(parts)))
    if not format.include_zero:
        indexes = [index for index in indexes if parts[index]] or [indexes[-1]]

    texts = []
    for index in indexes:
        if index == len(parts) - 1:
            text = format_number(parts[index], format)
        else:
            text = _format_integer(parts[index], format)
        texts.append(_with_label(text, conversions[index].label, format))
    return _apply_sign(format.spacer.join(texts), negative and not is_zero, format)


class FormatterSpec:
    """
    A Format bound to the conversions from a persistence unit.

    Instances are immutable, so one spec can be cached and shared to format
    any number of values.
    """

    def __init__(self, name, format, conversions, persistence_unit):
        self._name = name
        self._format = format
        self._conversions = tuple(conversions)
        self._persistence_unit = persistence_unit

    @property
    def name(self):
        return self._name

    @property
    def format(self):
        return self._format

    @property
    def unit_conversions(self):
        return self._conversions

    @property
    def persistence_unit(self):
        return self._persistence_unit

    def apply_formatting(self, magnitude):
        return format_quantity(magnitude, self)

    @staticmethod
    async def get_unit_conversions(format, units_provider, persistence_unit):
        return await resolve_unit_conversions(format, units_provider, persistence_unit)

    @classmethod
    async def create(cls, name, format, units_provider, persistence_unit):
        """
        Resolve the conversions for ``format`` from ``persistence_unit`` and
        return a new spec. Unknown units or impossible conversions raise
        before any spec is returned.
        """
        conversions = await cls.get_unit_conversions(
            format, units_provider, persistence_unit
        )
        return cls(name, format, conversions, persistence_unit)
