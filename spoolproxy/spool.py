"""Spoolman-shaped spool and filament records built from InvenTree data."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from . import parameters as params
from .models import InventreePart, InventreeStockItem
from .parameters import ParameterSettings

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
UNKNOWN_VENDOR_NAME = "Unknown"


def _format_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat()
    return text.removesuffix("+00:00") + "Z"


def _length_mm(weight_g: float, density: float, diameter: float) -> float:
    volume_mm3 = weight_g / density * 1000.0
    radius = diameter / 2.0
    return volume_mm3 / (math.pi * radius * radius)


@dataclass
class Vendor:
    id: int
    registered: datetime = EPOCH
    name: str = UNKNOWN_VENDOR_NAME
    comment: str | None = None
    empty_spool_weight: float | None = None
    external_id: str | None = None
    extras: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "registered": _format_datetime(self.registered),
            "name": self.name,
            "comment": self.comment,
            "empty_spool_weight": self.empty_spool_weight,
            "external_id": self.external_id,
            "extras": self.extras,
        }


@dataclass
class Filament:
    """A filament type; a part in InvenTree."""

    id: int
    registered: datetime
    density: float
    diameter: float
    name: str | None = None
    vendor: Vendor | None = None
    material: str | None = None
    price: float | None = None
    weight: float | None = None
    spool_weight: float | None = None
    article_number: str | None = None
    comment: str | None = None
    settings_extruder_temp: float | None = None
    settings_bed_temp: float | None = None
    color_hex: str | None = None
    multi_color_hexes: str | None = None
    multi_color_direction: list[str] | None = None
    external_id: str | None = None
    extras: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "registered": _format_datetime(self.registered),
            "name": self.name,
            "vendor": None if self.vendor is None else self.vendor.to_dict(),
            "material": self.material,
            "price": self.price,
            "density": self.density,
            "diameter": self.diameter,
            "weight": self.weight,
            "spool_weight": self.spool_weight,
            "article_number": self.article_number,
            "comment": self.comment,
            "settings_extruder_temp": self.settings_extruder_temp,
            "settings_bed_temp": self.settings_bed_temp,
            "color_hex": self.color_hex,
            "multi_color_hexes": self.multi_color_hexes,
            "multi_color_direction": self.multi_color_direction,
            "external_id": self.external_id,
            "extras": self.extras,
        }


@dataclass
class Spool:
    """A spool of filament; a stock item in InvenTree."""

    id: int
    registered: datetime
    first_used: datetime | None
    last_used: datetime | None
    filament: Filament
    price: float | None
    remaining_weight: float | None
    initial_weight: float | None
    spool_weight: float | None
    used_weight: float
    remaining_length: float | None
    used_length: float
    location: str | None
    lot_nr: str | None
    archived: bool
    extra: Any = field(default=None)

    @classmethod
    def from_inventree(
        cls,
        stock: InventreeStockItem,
        part: InventreePart,
        settings: ParameterSettings | None = None,
    ) -> Spool:
        """Build a spool from a stock item and its part.

        Raises ValueError when the stock item carries no supplier part detail,
        since the initial weight comes from its pack quantity.
        """
        if stock.supplier_part_detail is None:
            raise ValueError(
                f"stock item {stock.pk} has no supplier part detail; "
                "cannot determine the initial weight"
            )
        initial_weight = stock.supplier_part_detail.pack_quantity_native
        used_weight = initial_weight - stock.quantity

        density = params.filament_density(part, settings)
        diameter = params.filament_diameter(part, settings)
        material = params.filament_material(part, settings)
        empty_weight = params.spool_weight(part, settings)

        initial_length = _length_mm(initial_weight, density, diameter)
        used_length = _length_mm(used_weight, density, diameter)

        filament_price = (
            None
            if stock.purchase_price is None
            else stock.purchase_price * initial_weight
        )

        filament = Filament(
            id=part.pk,
            registered=EPOCH,
            name=part.name,
            vendor=Vendor(id=0),
            material=material,
            price=filament_price,
            density=density,
            diameter=diameter,
            weight=initial_weight,
            spool_weight=empty_weight,
            article_number=stock.mpn,
            comment=part.notes,
            settings_extruder_temp=params.extruder_temp(part, settings),
            settings_bed_temp=params.bed_temp(part, settings),
            color_hex=params.filament_color(part, settings),
            external_id=part.ipn,
        )

        return cls(
            id=stock.pk,
            registered=EPOCH,
            first_used=None,
            last_used=stock.updated,
            filament=filament,
            price=stock.purchase_price,
            remaining_weight=stock.quantity,
            initial_weight=initial_weight,
            spool_weight=empty_weight,
            used_weight=used_weight,
            remaining_length=initial_length - used_length,
            used_length=used_length,
            location=(
                None
                if stock.location_detail is None
                else stock.location_detail.pathstring
            ),
            lot_nr=stock.batch,
            archived=not part.active,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "registered": _format_datetime(self.registered),
            "first_used": _format_datetime(self.first_used),
            "last_used": _format_datetime(self.last_used),
            "filament": self.filament.to_dict(),
            "price": self.price,
            "remaining_weight": self.remaining_weight,
            "initial_weight": self.initial_weight,
            "spool_weight": self.spool_weight,
            "used_weight": self.used_weight,
            "remaining_length": self.remaining_length,
            "used_length": self.used_length,
            "location": self.location,
            "lot_nr": self.lot_nr,
            "archived": self.archived,
            "extra": self.extra,
        }