import pytest
import pytest_asyncio


def pytest_configure(config):
    import sys

    sys._called_from_test = True


def pytest_unconfigure(config):
    import sys

    del sys._called_from_test


def pytest_collection_modifyitems(items):
    # Run a CLI test first, before any event loop has been created
    move_to_front(items, "test_version")


def move_to_front(items, test_name):
    test = [fn for fn in items if fn.name == test_name]
    if test:
        items.insert(0, items.pop(items.index(test[0])))


@pytest.fixture(scope="session")
def units_provider():
    from quantityformatter.units import PintUnitsProvider

    return PintUnitsProvider()


@pytest_asyncio.fixture
async def registry(units_provider):
    from quantityformatter.quantity_types import QuantityTypeRegistry

    return QuantityTypeRegistry(units_provider)


@pytest_asyncio.fixture
async def formatter(units_provider):
    from quantityformatter.app import QuantityFormatter

    formatter = QuantityFormatter(units_provider=units_provider)
    await formatter.invoke_startup()
    return formatter
