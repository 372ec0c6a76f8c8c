import logging
from datetime import date

from spoolproxy.models import InventreePart, PartParameter
from spoolproxy.parameters import (
    ParameterSettings,
    bed_temp,
    extruder_temp,
    filament_color,
    filament_density,
    filament_diameter,
    filament_material,
    spool_weight,
)


def _param(name, data, numeric=None):
    return PartParameter(data=data, data_numeric=numeric, template_pk=1, template_name=name)


def _part(parameters=()):
    return InventreePart(
        active=True,
        category=31,
        category_name="Filament",
        full_name="Example PLA Red",
        ipn=None,
        name="Example PLA Red",
        pk=7,
        creation_date=date(2025, 1, 1),
        notes=None,
        parameters=list(parameters),
    )


def test_default_template_names():
    settings = ParameterSettings()
    assert settings.filament_density == "3DPrint Filament Density"
    assert settings.filament_hex_color == "3DPrint Filament Color"
    assert settings.spool_weight == "3DPrint Spool Weight"


def test_density_and_diameter_from_parameters():
    part = _part(
        [
            _param("3DPrint Filament Density", "1.27", 1.27),
            _param("3DPrint Filament Diameter", "2.85", 2.85),
        ]
    )
    assert filament_density(part) == 1.27
    assert filament_diameter(part) == 2.85


def test_defaults_when_missing(caplog):
    part = _part()
    with caplog.at_level(logging.WARNING, logger="spoolproxy.parameters"):
        assert filament_density(part) == 1.24
        assert filament_diameter(part) == 1.75
        assert filament_material(part) == "PLA"
    assert len(caplog.records) == 3
    assert all("Example PLA Red" in record.getMessage() for record in caplog.records)


def test_density_without_numeric_value_falls_back():
    part = _part([_param("3DPrint Filament Density", "dense", None)])
    assert filament_density(part) == 1.24


def test_material_from_parameter():
    part = _part([_param("3DPrint Filament Material", "PETG")])
    assert filament_material(part) == "PETG"


def test_color_strips_hash_and_lowercases():
    part = _part([_param("3DPrint Filament Color", "#FF00AA")])
    assert filament_color(part) == "ff00aa"


def test_color_without_hash_is_lowercased():
    part = _part([_param("3DPrint Filament Color", "ABCDEF")])
    assert filament_color(part) == "abcdef"


def test_optional_values_absent():
    part = _part()
    assert filament_color(part) is None
    assert extruder_temp(part) is None
    assert bed_temp(part) is None
    assert spool_weight(part) is None


def test_temperatures_and_spool_weight():
    part = _part(
        [
            _param("3DPrint Extruder Temperature", "215", 215.0),
            _param("3DPrint Bed Temperature", "60", 60.0),
            _param("3DPrint Spool Weight", "180", 180.0),
        ]
    )
    assert extruder_temp(part) == 215.0
    assert bed_temp(part) == 60.0
    assert spool_weight(part) == 180.0


def test_custom_settings_names():
    settings = ParameterSettings(bed_temp="Bed")
    part = _part([_param("Bed", "70", 70.0), _param("3DPrint Bed Temperature", "60", 60.0)])
    assert bed_temp(part, settings) == 70.0
    assert bed_temp(part) == 60.0