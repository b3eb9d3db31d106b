from quantityformatter.cli import cli
from quantityformatter.plugins import DEFAULT_PLUGINS
from quantityformatter.version import __version__
from click.testing import CliRunner
import json
import math
import pytest
import textwrap


def test_version():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert 0 == result.exit_code
    assert __version__ in result.output


@pytest.mark.parametrize(
    "args",
    [
        ["format", "Bearing", str(math.pi / 4)],
        # format is the default command
        ["Bearing", str(math.pi / 4)],
    ],
)
def test_format(args):
    runner = CliRunner()
    result = runner.invoke(cli, args)
    assert 0 == result.exit_code, result.output
    assert "N 45°0'0\" E\n" == result.output


def test_format_negative_value():
    runner = CliRunner()
    result = runner.invoke(cli, ["format", "Length", "--", "-1.5"])
    assert 0 == result.exit_code, result.output
    assert "-1.5 m\n" == result.output


def test_format_unknown_quantity_type():
    runner = CliRunner()
    result = runner.invoke(cli, ["format", "Nope", "1"])
    assert 1 == result.exit_code
    assert "Error: Unknown quantity type: Nope" in result.output


def test_format_with_setting():
    runner = CliRunner()
    result = runner.invoke(
        cli, ["format", "Length", "1.524", "-s", "unit_system", "imperial"]
    )
    assert 0 == result.exit_code, result.output
    assert "5'0\"\n" == result.output


def test_bad_setting():
    runner = CliRunner()
    result = runner.invoke(cli, ["format", "Length", "1", "-s", "unit_system", "martian"])
    assert 1 == result.exit_code
    assert "unit_system should be one of" in result.output


def test_parse():
    runner = CliRunner()
    result = runner.invoke(cli, ["parse", "Bearing", "S 45 E"])
    assert 0 == result.exit_code, result.output
    assert float(result.output) == pytest.approx(3 * math.pi / 4)


def test_parse_json():
    runner = CliRunner()
    result = runner.invoke(cli, ["parse", "Length", "5 ft", "--json"])
    assert 0 == result.exit_code, result.output
    data = json.loads(result.output)
    assert "success" == data["status"]
    assert data["value"] == pytest.approx(1.524)


def test_parse_failure():
    runner = CliRunner()
    result = runner.invoke(cli, ["parse", "Length", "5 parsecs"])
    assert 1 == result.exit_code
    assert (
        "Error: could not parse '5 parsecs' (unit-label-supplied-but-not-matched)"
        in result.output
    )


def test_parse_failure_json():
    runner = CliRunner()
    result = runner.invoke(cli, ["parse", "Bearing", "not an angle", "--json"])
    assert 1 == result.exit_code
    assert {
        "status": "no-value-or-unit-found-in-string",
        "value": None,
    } == json.loads(result.output)


def test_config_file():
    runner = CliRunner()
    with runner.isolated_filesystem():
        with open("config.yml", "w") as fp:
            fp.write(
                textwrap.dedent(
                    """
                strings:
                  BearingQuantityType.label: Azimuth
                quantity_types:
                  Bearing:
                    format:
                      custom:
                        addDirectionLabelGap: false
                """
                )
            )
        result = runner.invoke(cli, ["format", "Bearing", "0", "-c", "config.yml"])
        assert 0 == result.exit_code, result.output
        assert "N0°0'0\"E\n" == result.output
        result = runner.invoke(cli, ["types", "--config", "config.yml"])
        assert 0 == result.exit_code, result.output
        types = {t["key"]: t for t in json.loads(result.output)}
        assert "Azimuth" == types["Bearing"]["label"]


def test_invalid_config_file():
    runner = CliRunner()
    with runner.isolated_filesystem():
        with open("config.json", "w") as fp:
            fp.write('["a", "list"]')
        result = runner.invoke(cli, ["types", "-c", "config.json"])
        assert 1 == result.exit_code
        assert "Config must be a JSON or YAML object" in result.output


def test_units():
    runner = CliRunner()
    result = runner.invoke(cli, ["units", "--family", "Units.TEMPERATURE"])
    assert 0 == result.exit_code, result.output
    assert [
        {
            "name": "Units.K",
            "label": "K",
            "phenomenon": "Units.TEMPERATURE",
            "system": "Units.SI",
        },
        {
            "name": "Units.CELSIUS",
            "label": "°C",
            "phenomenon": "Units.TEMPERATURE",
            "system": "Units.METRIC",
        },
        {
            "name": "Units.FAHRENHEIT",
            "label": "°F",
            "phenomenon": "Units.TEMPERATURE",
            "system": "Units.USCUSTOM",
        },
    ] == json.loads(result.output)


def test_units_all():
    runner = CliRunner()
    result = runner.invoke(cli, ["units"])
    assert 0 == result.exit_code, result.output
    names = [unit["name"] for unit in json.loads(result.output)]
    assert {"Units.RAD", "Units.M", "Units.K"} <= set(names)


def test_types():
    runner = CliRunner()
    result = runner.invoke(cli, ["types"])
    assert 0 == result.exit_code, result.output
    types = {t["key"]: t for t in json.loads(result.output)}
    assert {"Length", "Angle", "Station", "Bearing"} <= set(types)
    assert "Units.RAD" == types["Bearing"]["persistence_unit"]


def test_plugins():
    runner = CliRunner()
    result = runner.invoke(cli, ["plugins"])
    assert 0 == result.exit_code, result.output
    names = [p["name"] for p in json.loads(result.output)]
    for name in DEFAULT_PLUGINS:
        assert name in names
