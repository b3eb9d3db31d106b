from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional
import math
import re

from .units import create_unit_conversion_specs_for_unit

NUMBER_RE = re.compile(
    r"""
    (?P<sign>[-+])?
    (?:
        (?P<whole>\d+)(?:\s+|-)(?P<numerator>\d+)/(?P<denominator>\d+)
        |(?P<fraction_numerator>\d+)/(?P<fraction_denominator>\d+)
        |(?P<decimal>(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)
    )
    """,
    re.VERBOSE,
)


class QuantityStatus(Enum):
    SUCCESS = "success"
    NO_VALUE_OR_UNIT_FOUND_IN_STRING = "no-value-or-unit-found-in-string"
    UNIT_LABEL_SUPPLIED_BUT_NOT_MATCHED = "unit-label-supplied-but-not-matched"
    UNABLE_TO_GENERATE_PARSE_TOKENS = "unable-to-generate-parse-tokens"
    UNABLE_TO_CONVERT_PARSE_TOKENS_TO_QUANTITY = (
        "unable-to-convert-parse-tokens-to-quantity"
    )


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing user input. ``value`` is set only on success.

    Parsing never raises for bad input, callers check ``ok`` or ``status``.
    """

    status: QuantityStatus
    value: Optional[float] = None

    def __post_init__(self):
        if (self.status is QuantityStatus.SUCCESS) != (self.value is not None):
            raise ValueError("ParseResult value must be set if and only if successful")

    @property
    def ok(self):
        return self.status is QuantityStatus.SUCCESS

    @classmethod
    def success(cls, value):
        return cls(QuantityStatus.SUCCESS, value)

    @classmethod
    def failure(cls, status):
        return cls(status)

    def with_value(self, value):
        return replace(self, value=value)


@dataclass(frozen=True)
class ParseToken:
    negative: bool
    number: float
    label: str


def _normalize(text, format):
    if format.type == "Station":
        text = re.sub(
            r"(?<=\d){}(?=\d)".format(re.escape(format.station_separator)), "", text
        )
    if format.thousand_separator and format.thousand_separator != format.decimal_separator:
        text = re.sub(
            r"(?<=\d){}(?=\d{{3}}(?!\d))".format(re.escape(format.thousand_separator)),
            "",
            text,
        )
    if format.decimal_separator != ".":
        text = re.sub(
            r"(?<=\d){}(?=\d)".format(re.escape(format.decimal_separator)), ".", text
        )
    return text


def _number(match):
    if match.group("whole") is not None:
        denominator = int(match.group("denominator"))
        if not denominator:
            return None
        return int(match.group("whole")) + int(match.group("numerator")) / denominator
    if match.group("fraction_numerator") is not None:
        denominator = int(match.group("fraction_denominator"))
        if not denominator:
            return None
        return int(match.group("fraction_numerator")) / denominator
    return float(match.group("decimal"))


def parse_into_tokens(text, format):
    """
    Split text into ParseTokens, or return None if it does not follow the
    number-and-label grammar.
    """
    text = _normalize(text.strip(), format)
    matches = list(NUMBER_RE.finditer(text))
    if not matches:
        return []
    prepend = format.has_trait("prependUnitLabel")
    if not prepend and text[: matches[0].start()].strip():
        return None
    if prepend and text[matches[-1].end() :].strip():
        return None
    tokens = []
    for index, match in enumerate(matches):
        if prepend:
            start = matches[index - 1].end() if index else 0
            label = text[start : match.start()]
        else:
            end = matches[index + 1].start() if index + 1 < len(matches) else len(text)
            label = text[match.end() : end]
        number = _number(match)
        if number is None:
            return None
        tokens.append(
            ParseToken(
                negative=match.group("sign") == "-",
                number=number,
                label=label.strip(),
            )
        )
    return tokens


def _conversion_by_name(name, conversions):
    for conversion in conversions:
        if conversion.name == name:
            return conversion
    return None


def find_conversion_by_label(label, conversions, format=None):
    """
    Labels declared on the format's composite units win, then the primary
    and alternate labels of every unit in the catalog.
    """
    lowered = label.lower()
    if format is not None:
        for unit, unit_label in format.units:
            if unit_label is not None and unit_label.lower() == lowered:
                conversion = _conversion_by_name(unit.name, conversions)
                if conversion is not None:
                    return conversion
    for conversion in conversions:
        if conversion.label.lower() == lowered:
            return conversion
    for conversion in conversions:
        if conversion.matches_label(label):
            return conversion
    return None


def _default_conversion(index, format, conversions, out_unit):
    if format.units:
        unit, _ = format.units[min(index, len(format.units) - 1)]
        name = unit.name
    elif out_unit is not None:
        name = out_unit.name
    else:
        return None
    return _conversion_by_name(name, conversions)


def parse_to_quantity_value(text, format, conversions, out_unit=None):
    """
    Parse ``text`` into a value in the persistence unit.

    ``conversions`` go from each accepted unit into the persistence unit.
    A leading minus sign applies to the whole composite value, so
    ``-10°30'`` is minus ten and a half degrees. The offset of the first
    unit is added once, after the scaled parts are summed.
    """
    if not isinstance(text, str):
        return ParseResult.failure(QuantityStatus.UNABLE_TO_GENERATE_PARSE_TOKENS)
    tokens = parse_into_tokens(text, format)
    if tokens is None:
        return ParseResult.failure(QuantityStatus.UNABLE_TO_GENERATE_PARSE_TOKENS)
    if not tokens:
        return ParseResult.failure(QuantityStatus.NO_VALUE_OR_UNIT_FOUND_IN_STRING)

    pairs = []
    for index, token in enumerate(tokens):
        if token.label:
            conversion = find_conversion_by_label(token.label, conversions, format)
            if conversion is None:
                return ParseResult.failure(
                    QuantityStatus.UNIT_LABEL_SUPPLIED_BUT_NOT_MATCHED
                )
        else:
            conversion = _default_conversion(index, format, conversions, out_unit)
            if conversion is None:
                return ParseResult.failure(
                    QuantityStatus.UNABLE_TO_CONVERT_PARSE_TOKENS_TO_QUANTITY
                )
        pairs.append((token, conversion))

    value = sum(token.number * conversion.factor for token, conversion in pairs)
    if pairs[0][0].negative:
        value = -value
    value += pairs[0][1].offset
    if not math.isfinite(value):
        return ParseResult.failure(
            QuantityStatus.UNABLE_TO_CONVERT_PARSE_TOKENS_TO_QUANTITY
        )
    return ParseResult.success(value)


class ParserSpec:
    "A Format bound to the conversions from every unit of a phenomenon"

    def __init__(self, out_unit, format, conversions):
        self._out_unit = out_unit
        self._format = format
        self._conversions = tuple(conversions)

    @property
    def format(self):
        return self._format

    @property
    def unit_conversions(self):
        return self._conversions

    @property
    def out_unit(self):
        return self._out_unit

    persistence_unit = out_unit

    def parse_to_quantity_value(self, text):
        return parse_to_quantity_value(
            text, self._format, self._conversions, self._out_unit
        )

    @classmethod
    async def create(cls, format, units_provider, out_unit):
        conversions = await create_unit_conversion_specs_for_unit(
            units_provider, out_unit
        )
        return cls(out_unit, format, conversions)
