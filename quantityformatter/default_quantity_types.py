from quantityformatter import hookimpl
from quantityformatter.quantity_types import StandardQuantityType

FEET_INCHES = {
    "type": "Fractional",
    "precision": 8,
    "formatTraits": ["keepSingleZero", "showUnitLabel"],
    "uomSeparator": "",
    "composite": {
        "spacer": "",
        "units": [{"name": "Units.FT", "label": "'"}, {"name": "Units.IN", "label": '"'}],
    },
}

DEGREES_MINUTES_SECONDS = {
    "type": "Decimal",
    "precision": 2,
    "formatTraits": ["showUnitLabel"],
    "uomSeparator": "",
    "composite": {
        "includeZero": True,
        "spacer": "",
        "units": [
            {"name": "Units.ARC_DEG", "label": "°"},
            {"name": "Units.ARC_MINUTE", "label": "'"},
            {"name": "Units.ARC_SECOND", "label": '"'},
        ],
    },
}

LENGTH_FORMATS = {
    "metric": {
        "type": "Decimal",
        "precision": 4,
        "formatTraits": ["keepSingleZero", "showUnitLabel"],
        "composite": {"units": [{"name": "Units.M", "label": "m"}]},
    },
    "imperial": FEET_INCHES,
    "usCustomary": FEET_INCHES,
    "usSurvey": {
        "type": "Decimal",
        "precision": 4,
        "formatTraits": ["keepSingleZero", "showUnitLabel"],
        "composite": {"units": [{"name": "Units.FT", "label": "ft"}]},
    },
}

ANGLE_FORMATS = {
    "metric": {
        "type": "Decimal",
        "precision": 4,
        "formatTraits": ["keepSingleZero", "showUnitLabel"],
        "uomSeparator": "",
        "composite": {"units": [{"name": "Units.ARC_DEG", "label": "°"}]},
    },
    "imperial": DEGREES_MINUTES_SECONDS,
    "usCustomary": DEGREES_MINUTES_SECONDS,
    "usSurvey": DEGREES_MINUTES_SECONDS,
}

STATION_FORMATS = {
    "metric": {
        "type": "Station",
        "precision": 2,
        "stationOffsetSize": 3,
        "formatTraits": ["trailZeroes", "keepSingleZero"],
        "composite": {"units": [{"name": "Units.M"}]},
    },
    "imperial": {
        "type": "Station",
        "precision": 2,
        "stationOffsetSize": 2,
        "formatTraits": ["trailZeroes", "keepSingleZero"],
        "composite": {"units": [{"name": "Units.FT"}]},
    },
}
STATION_FORMATS["usCustomary"] = STATION_FORMATS["imperial"]
STATION_FORMATS["usSurvey"] = STATION_FORMATS["imperial"]


def default_quantity_types():
    return [
        StandardQuantityType(
            "Length",
            "Units.M",
            LENGTH_FORMATS,
            label_key="LengthQuantityType.label",
            description_key="LengthQuantityType.description",
        ),
        StandardQuantityType(
            "Angle",
            "Units.RAD",
            ANGLE_FORMATS,
            label_key="AngleQuantityType.label",
            description_key="AngleQuantityType.description",
        ),
        StandardQuantityType(
            "Station",
            "Units.M",
            STATION_FORMATS,
            label_key="StationQuantityType.label",
            description_key="StationQuantityType.description",
        ),
    ]


@hookimpl
def register_quantity_types(formatter):
    return default_quantity_types()
