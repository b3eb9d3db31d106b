from pluggy import HookimplMarker
from pluggy import HookspecMarker

hookspec = HookspecMarker("quantityformatter")
hookimpl = HookimplMarker("quantityformatter")


@hookspec
def startup(formatter):
    """Fires after all quantity types have been registered"""


@hookspec
def register_quantity_types(formatter):
    """Return a list of CustomQuantityTypeEntry instances - can return list, callable or awaitable"""
