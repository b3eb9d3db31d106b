from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, ClassVar, Optional, Tuple
import asyncio
import copy
import logging

from mergedeep import merge

from .format import Format
from .formatter import FormatterSpec
from .parser import ParserSpec
from .utils import PersistenceUnitNotResolved, QuantityError, UnknownQuantityType

logger = logging.getLogger(__name__)

UNIT_SYSTEMS = ("metric", "imperial", "usCustomary", "usSurvey")


@dataclass(frozen=True)
class SelectOption:
    value: str
    label: str


@dataclass(frozen=True)
class CustomQuantityPropEditorSpec:
    """
    Describes one extra control for editing a quantity type's format props.

    Getters read a value out of FormatProps, setters return new FormatProps
    and never modify the props they are given.
    """

    editor_type: ClassVar[str] = None
    label: str


@dataclass(frozen=True)
class CheckboxPropEditorSpec(CustomQuantityPropEditorSpec):
    editor_type: ClassVar[str] = "checkbox"
    get_bool: Callable[[dict], bool] = None
    set_bool: Callable[[dict, bool], dict] = None


@dataclass(frozen=True)
class SelectPropEditorSpec(CustomQuantityPropEditorSpec):
    editor_type: ClassVar[str] = "select"
    select_options: Tuple[SelectOption, ...] = ()
    get_string: Callable[[dict], str] = None
    set_string: Callable[[dict, str], dict] = None


@dataclass(frozen=True)
class TextInputPropEditorSpec(CustomQuantityPropEditorSpec):
    editor_type: ClassVar[str] = "text"
    get_string: Callable[[dict], str] = None
    set_string: Callable[[dict, str], dict] = None


def set_custom_prop(props, name, value):
    "Return a copy of props with custom[name] set to value"
    custom = dict(props.get("custom") or {})
    custom[name] = value
    return dict(props, custom=custom)


class CustomQuantityTypeEntry(ABC):
    """
    Base class for quantity types that can be added to a QuantityTypeRegistry.

    Subclasses set ``key``, ``type``, ``persistence_unit_name`` and
    ``default_format_props`` and implement the two spec factories. The
    persistence unit is resolved when the entry is registered; reading it
    before then is a programming error.
    """

    key: Optional[str] = None
    type: Optional[str] = None
    persistence_unit_name: Optional[str] = None
    label_key: Optional[str] = None
    description_key: Optional[str] = None
    default_format_props: Optional[dict] = None

    def __init__(self, format_props=None):
        self._format_props = copy.deepcopy(
            format_props if format_props is not None else self.default_format_props
        )
        self._format_props_overridden = format_props is not None
        self._persistence_unit = None
        self._label = None
        self._description = None

    def __repr__(self):
        return "<{} key={!r} persistence_unit={!r}>".format(
            self.__class__.__name__, self.key, self.persistence_unit_name
        )

    @property
    def format_props(self):
        return self._format_props

    @format_props.setter
    def format_props(self, value):
        self._format_props = value
        self._format_props_overridden = True

    def merge_format_props(self, overrides):
        "Deep-merge overrides, such as those from config, over every format"
        self._format_props = merge({}, self._format_props, overrides)

    @property
    def is_resolved(self):
        return self._persistence_unit is not None

    @property
    def persistence_unit(self):
        if self._persistence_unit is None:
            raise PersistenceUnitNotResolved(
                "Persistence unit {} of quantity type {} is not resolved, "
                "was it registered with a QuantityTypeRegistry?".format(
                    self.persistence_unit_name, self.key
                )
            )
        return self._persistence_unit

    async def resolve_persistence_unit(self, units_provider):
        self._persistence_unit = await units_provider.find_unit_by_name(
            self.persistence_unit_name
        )
        return self._persistence_unit

    @property
    def label(self):
        return self._label or self.type or self.key

    @property
    def description(self):
        return self._description or self.label

    def resolve_labels(self, translate=None):
        label = description = None
        if translate is not None:
            if self.label_key:
                label = translate(self.label_key)
            if self.description_key:
                description = translate(self.description_key)
        self._label = label or self.type or self.key
        self._description = description or self._label

    def identity(self):
        "Values that must match for two entries to count as the same registration"
        return (
            type(self),
            self.key,
            self.type,
            self.persistence_unit_name,
            self.format_props,
        )

    def is_equivalent(self, other):
        return isinstance(other, CustomQuantityTypeEntry) and (
            self.identity() == other.identity()
        )

    async def create_format(self, format_props, units_provider):
        return await Format.from_json(self.type or self.key, units_provider, format_props)

    @abstractmethod
    async def generate_formatter_spec(self, format_props, units_provider):
        "Return an object with apply_formatting(magnitude) -> str"

    @abstractmethod
    async def generate_parser_spec(self, format_props, units_provider):
        "Return an object with parse_to_quantity_value(text) -> ParseResult"

    def get_format_props_by_system(self, system):
        return self.format_props

    @property
    def primary_prop_editor_specs(self):
        return []

    @property
    def secondary_prop_editor_specs(self):
        return []


class StandardQuantityType(CustomQuantityTypeEntry):
    "A quantity type using the base formatter and parser with per-system defaults"

    def __init__(
        self,
        key,
        persistence_unit_name,
        format_props_by_system,
        type=None,
        label_key=None,
        description_key=None,
        format_props=None,
    ):
        self.key = key
        self.type = type or key
        self.persistence_unit_name = persistence_unit_name
        self.label_key = label_key
        self.description_key = description_key
        self.format_props_by_system = copy.deepcopy(format_props_by_system)
        self.default_format_props = self.format_props_by_system["metric"]
        super().__init__(format_props)

    def identity(self):
        return super().identity() + (self.format_props_by_system,)

    def merge_format_props(self, overrides):
        super().merge_format_props(overrides)
        self.format_props_by_system = {
            system: merge({}, props, overrides)
            for system, props in self.format_props_by_system.items()
        }

    def get_format_props_by_system(self, system):
        if self._format_props_overridden:
            return self.format_props
        return self.format_props_by_system.get(system, self.format_props)

    async def generate_formatter_spec(self, format_props, units_provider):
        format = await self.create_format(format_props, units_provider)
        return await FormatterSpec.create(
            format.name, format, units_provider, self.persistence_unit
        )

    async def generate_parser_spec(self, format_props, units_provider):
        format = await self.create_format(format_props, units_provider)
        return await ParserSpec.create(format, units_provider, self.persistence_unit)


class QuantityTypeRegistry:
    """
    Quantity type entries by key, bound to one UnitsProvider.

    Registration is serialised per key; an entry is only visible once its
    persistence unit and labels have been resolved.
    """

    def __init__(self, units_provider, translate=None):
        self.units_provider = units_provider
        self.translate = translate
        self._entries = {}
        self._locks = {}

    def __contains__(self, key):
        return key in self._entries

    def __iter__(self):
        return iter(list(self._entries.values()))

    def __len__(self):
        return len(self._entries)

    def keys(self):
        return list(self._entries.keys())

    async def register(self, entry):
        """
        Register ``entry`` under its key and return True.

        Registering an equivalent entry again is accepted; a different entry
        under an existing key returns False and leaves the original in place.
        """
        if not entry.key:
            raise QuantityError("Quantity type entries must have a key")
        lock = self._locks.setdefault(entry.key, asyncio.Lock())
        async with lock:
            existing = self._entries.get(entry.key)
            if existing is not None:
                if existing is entry or existing.is_equivalent(entry):
                    logger.debug("Quantity type %r is already registered", entry.key)
                    return True
                logger.debug(
                    "Rejected %r, key %r belongs to %r", entry, entry.key, existing
                )
                return False
            if not entry.is_resolved:
                await entry.resolve_persistence_unit(self.units_provider)
            entry.resolve_labels(self.translate)
            self._entries[entry.key] = entry
            logger.debug("Registered quantity type %r", entry.key)
            return True

    def lookup(self, key):
        return self._entries.get(key)

    def get(self, key):
        entry = self._entries.get(key)
        if entry is None:
            raise UnknownQuantityType("Unknown quantity type: {}".format(key))
        return entry

    def get_format_props(self, key, system=None):
        entry = self.get(key)
        if system is None:
            return entry.format_props
        return entry.get_format_props_by_system(system)

    async def generate_formatter_spec(self, key, format_props=None, system=None):
        entry = self.get(key)
        if format_props is None:
            format_props = self.get_format_props(key, system)
        return await entry.generate_formatter_spec(format_props, self.units_provider)

    async def generate_parser_spec(self, key, format_props=None, system=None):
        entry = self.get(key)
        if format_props is None:
            format_props = self.get_format_props(key, system)
        return await entry.generate_parser_spec(format_props, self.units_provider)

    def reset(self):
        self._entries.clear()
        self._locks.clear()
