from quantityformatter.version import __version_info__, __version__  # noqa
from quantityformatter.utils import QuantityError, StartupError  # noqa
from quantityformatter.parser import ParseResult, QuantityStatus  # noqa
from quantityformatter.quantity_types import (  # noqa
    CustomQuantityTypeEntry,
    QuantityTypeRegistry,
)
from .hookspecs import hookimpl  # noqa
from .hookspecs import hookspec  # noqa
