import asyncio
import json
import types
import yaml


class QuantityError(Exception):
    "Base class for errors caused by a broken integration rather than bad input"


class FormatError(QuantityError):
    pass


class UnitNotFound(QuantityError, LookupError):
    pass


class UnitConversionError(QuantityError):
    pass


class PersistenceUnitNotResolved(QuantityError):
    pass


class UnknownQuantityType(QuantityError, LookupError):
    pass


class StartupError(QuantityError):
    pass


class BadConfigError(QuantityError):
    pass


async def await_me_maybe(value):
    if callable(value):
        value = value()
    if asyncio.iscoroutine(value):
        value = await value
    return value


def parse_config(content):
    # content can be JSON or YAML
    try:
        config = json.loads(content)
    except json.JSONDecodeError:
        try:
            config = yaml.safe_load(content)
        except yaml.YAMLError:
            raise BadConfigError("Config is not valid JSON or YAML")
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise BadConfigError("Config must be a JSON or YAML object")
    return config


def pairs_to_nested_config(pairs):
    """
    Parse a list of ("a.b.c", value) pairs into a nested dictionary

    Values are parsed as JSON where possible, otherwise kept as strings.
    """
    result = {}
    for key, value in pairs:
        try:
            value = json.loads(value)
        except (json.JSONDecodeError, TypeError):
            pass
        bits = key.split(".")
        current = result
        for bit in bits[:-1]:
            current = current.setdefault(bit, {})
            if not isinstance(current, dict):
                raise BadConfigError("Conflicting setting: {}".format(key))
        current[bits[-1]] = value
    return result


def module_from_path(path, name):
    # Adapted from http://sayspy.blogspot.com/2011/07/how-to-import-module-from-just-file.html
    mod = types.ModuleType(name)
    mod.__file__ = path
    with open(path, "r") as file:
        code = compile(file.read(), path, "exec", dont_inherit=True)
    exec(code, mod.__dict__)
    return mod
