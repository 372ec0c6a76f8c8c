"""Filament properties read from the parameters of an InvenTree part."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .models import InventreePart

logger = logging.getLogger(__name__)

DEFAULT_DENSITY = 1.24
DEFAULT_DIAMETER = 1.75
DEFAULT_MATERIAL = "PLA"


@dataclass(frozen=True)
class ParameterSettings:
    """Names of the InvenTree parameter templates that hold filament data."""

    extruder_temp: str = "3DPrint Extruder Temperature"
    bed_temp: str = "3DPrint Bed Temperature"
    filament_diameter: str = "3DPrint Filament Diameter"
    filament_density: str = "3DPrint Filament Density"
    filament_material: str = "3DPrint Filament Material"
    filament_hex_color: str = "3DPrint Filament Color"
    spool_weight: str = "3DPrint Spool Weight"


def _resolve(settings: ParameterSettings | None) -> ParameterSettings:
    return settings if settings is not None else ParameterSettings()


def _missing(what: str, part: InventreePart) -> None:
    logger.warning(
        "Filament %s parameter not found for part %s | %s",
        what,
        part.pk,
        part.full_name,
    )


def filament_density(
    part: InventreePart, settings: ParameterSettings | None = None
) -> float:
    """Density in g/cm3, falling back to 1.24 when the part has none."""
    value = part.select_parameter_numeric(_resolve(settings).filament_density)
    if value is None:
        _missing("density", part)
        return DEFAULT_DENSITY
    return value


def filament_diameter(
    part: InventreePart, settings: ParameterSettings | None = None
) -> float:
    """Diameter in mm, falling back to 1.75 when the part has none."""
    value = part.select_parameter_numeric(_resolve(settings).filament_diameter)
    if value is None:
        _missing("diameter", part)
        return DEFAULT_DIAMETER
    return value


def filament_material(
    part: InventreePart, settings: ParameterSettings | None = None
) -> str:
    """Material name, falling back to PLA when the part has none."""
    value = part.select_parameter_string(_resolve(settings).filament_material)
    if value is None:
        _missing("material", part)
        return DEFAULT_MATERIAL
    return value


def filament_color(
    part: InventreePart, settings: ParameterSettings | None = None
) -> str | None:
    """Lower-case hex colour without a leading '#', if the part has one."""
    value = part.select_parameter_string(_resolve(settings).filament_hex_color)
    if value is None:
        return None
    return value.removeprefix("#").lower()


def extruder_temp(
    part: InventreePart, settings: ParameterSettings | None = None
) -> float | None:
    return part.select_parameter_numeric(_resolve(settings).extruder_temp)


def bed_temp(
    part: InventreePart, settings: ParameterSettings | None = None
) -> float | None:
    return part.select_parameter_numeric(_resolve(settings).bed_temp)


def spool_weight(
    part: InventreePart, settings: ParameterSettings | None = None
) -> float | None:
    return part.select_parameter_numeric(_resolve(settings).spool_weight)