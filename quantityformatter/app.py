import glob
import logging
import os

from .plugins import pm
from .quantity_types import QuantityTypeRegistry, UNIT_SYSTEMS
from .units import PintUnitsProvider
from .utils import (
    BadConfigError,
    StartupError,
    await_me_maybe,
    module_from_path,
)

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    "unit_system": "metric",
}


class QuantityFormatter:
    """
    Owns a QuantityTypeRegistry and caches the specs built from it.

    ``await formatter.invoke_startup()`` must be called before formatting:
    it collects quantity types from plugins and registers them.

    Config, as a dictionary or parsed from JSON/YAML::

        settings:
          unit_system: imperial
        strings:
          BearingQuantityType.label: Bearing
        quantity_types:
          Bearing:
            format:
              precision: 1
        units:
          - name: Units.CHAIN
            label: ch
            phenomenon: Units.LENGTH
            unit: chain
    """

    def __init__(
        self,
        config=None,
        units_provider=None,
        settings=None,
        plugins_dir=None,
    ):
        self._startup_invoked = False
        config = config or {}
        if not isinstance(config, dict):
            raise BadConfigError("config= should be a dictionary")
        self.config = config
        self._settings = dict(DEFAULT_SETTINGS)
        self._settings.update(config.get("settings") or {})
        self._settings.update(settings or {})
        unknown = set(self._settings) - set(DEFAULT_SETTINGS)
        if unknown:
            raise BadConfigError("Unknown settings: {}".format(", ".join(sorted(unknown))))
        self._check_unit_system(self._settings["unit_system"])
        self.units_provider = units_provider or PintUnitsProvider(
            definitions=config.get("units")
        )
        self.registry = QuantityTypeRegistry(self.units_provider, translate=self.translate)
        self._formatter_specs = {}
        self._parser_specs = {}
        self.plugins_dir = plugins_dir
        if self.plugins_dir:
            for filepath in glob.glob(os.path.join(self.plugins_dir, "*.py")):
                if not os.path.isfile(filepath):
                    continue
                mod = module_from_path(filepath, name=os.path.basename(filepath))
                try:
                    pm.register(mod)
                except ValueError:
                    # Plugin already registered
                    pass

    def _check_unit_system(self, unit_system):
        if unit_system not in UNIT_SYSTEMS:
            raise BadConfigError(
                "unit_system should be one of {}, got {!r}".format(
                    ", ".join(UNIT_SYSTEMS), unit_system
                )
            )

    def setting(self, key):
        return self._settings.get(key, None)

    def settings_dict(self):
        return dict(self._settings)

    @property
    def active_unit_system(self):
        return self._settings["unit_system"]

    def set_active_unit_system(self, unit_system):
        self._check_unit_system(unit_system)
        if unit_system != self._settings["unit_system"]:
            self._settings["unit_system"] = unit_system
            self.clear_caches()

    def translate(self, key):
        return (self.config.get("strings") or {}).get(key)

    def format_overrides(self, key):
        quantity_type_config = (self.config.get("quantity_types") or {}).get(key) or {}
        return quantity_type_config.get("format")

    async def invoke_startup(self):
        # This must be called for QuantityFormatter to be in a usable state
        if self._startup_invoked:
            return
        for hook in pm.hook.register_quantity_types(formatter=self):
            entries = await await_me_maybe(hook)
            for entry in entries or []:
                overrides = self.format_overrides(entry.key)
                if overrides:
                    entry.merge_format_props(overrides)
                if not await self.registry.register(entry):
                    raise StartupError(
                        "Duplicate quantity type key: {}".format(entry.key)
                    )
        for key in self.config.get("quantity_types") or {}:
            if key not in self.registry:
                logger.warning("Config for unknown quantity type %r ignored", key)
        for hook in pm.hook.startup(formatter=self):
            await await_me_maybe(hook)
        self._startup_invoked = True

    def _check_startup(self, method):
        if not self._startup_invoked:
            raise StartupError(
                "{}() called before await formatter.invoke_startup()".format(method)
            )

    def clear_caches(self):
        self._formatter_specs.clear()
        self._parser_specs.clear()

    async def register_quantity_type(self, entry):
        was_registered = await self.registry.register(entry)
        if was_registered:
            self.clear_caches()
        return was_registered

    async def find_unit_by_name(self, name):
        return await self.units_provider.find_unit_by_name(name)

    async def get_formatter_spec(self, key):
        self._check_startup("get_formatter_spec")
        cache_key = (key, self.active_unit_system)
        if cache_key not in self._formatter_specs:
            self._formatter_specs[cache_key] = await self.registry.generate_formatter_spec(
                key, system=self.active_unit_system
            )
        return self._formatter_specs[cache_key]

    async def get_parser_spec(self, key):
        self._check_startup("get_parser_spec")
        cache_key = (key, self.active_unit_system)
        if cache_key not in self._parser_specs:
            self._parser_specs[cache_key] = await self.registry.generate_parser_spec(
                key, system=self.active_unit_system
            )
        return self._parser_specs[cache_key]

    async def format_quantity(self, key, magnitude):
        spec = await self.get_formatter_spec(key)
        return spec.apply_formatting(magnitude)

    async def parse_quantity(self, key, text):
        spec = await self.get_parser_spec(key)
        return spec.parse_to_quantity_value(text)

    def quantity_types(self):
        self._check_startup("quantity_types")
        return [
            {
                "key": entry.key,
                "type": entry.type,
                "label": entry.label,
                "description": entry.description,
                "persistence_unit": entry.persistence_unit.name,
                "format": entry.get_format_props_by_system(self.active_unit_system),
            }
            for entry in self.registry
        ]
