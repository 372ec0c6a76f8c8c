"""Records returned by the InvenTree REST API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping, TypeVar

UPDATED_FORMAT = "%Y-%m-%d %H:%M"

T = TypeVar("T")


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"expected a non-negative integer, got {value!r}")
    return value


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)


def _as_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {value!r}")
    return value


def _as_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"expected a boolean, got {value!r}")
    return value


def _as_date(value: Any) -> date:
    return date.fromisoformat(_as_str(value))


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        raise TypeError(f"expected a list, got {value!r}")
    return [_as_str(item) for item in value]


def _mapping(data: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{kind} must be a JSON object, got {data!r}")
    return data


def _required(data: Mapping[str, Any], key: str, convert: Callable[[Any], T]) -> T:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    value = data[key]
    if value is None:
        raise ValueError(f"field {key!r} must not be null")
    try:
        return convert(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid field {key!r}: {exc}") from exc


def _optional(
    data: Mapping[str, Any], key: str, convert: Callable[[Any], T]
) -> T | None:
    value = data.get(key)
    if value is None:
        return None
    try:
        return convert(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid field {key!r}: {exc}") from exc


def parse_updated(value: Any) -> datetime:
    """Parse a ``YYYY-MM-DD HH:MM`` timestamp as a UTC datetime."""
    if not isinstance(value, str):
        raise ValueError(f"expected a timestamp string, got {value!r}")
    return datetime.strptime(value, UPDATED_FORMAT).replace(tzinfo=timezone.utc)


def format_updated(value: datetime) -> str:
    """Format a datetime as a ``YYYY-MM-DD HH:MM`` UTC timestamp."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(UPDATED_FORMAT)


@dataclass
class LocationDetails:
    pk: int
    name: str
    pathstring: str

    @classmethod
    def from_dict(cls, data: Any) -> LocationDetails:
        data = _mapping(data, "location")
        return cls(
            pk=_required(data, "pk", _as_int),
            name=_required(data, "name", _as_str),
            pathstring=_required(data, "pathstring", _as_str),
        )


@dataclass
class PartParameter:
    data: str
    data_numeric: float | None
    template_pk: int
    template_name: str

    @classmethod
    def from_dict(cls, data: Any) -> PartParameter:
        data = _mapping(data, "part parameter")
        template = _mapping(
            _required(data, "template_detail", lambda v: v), "template_detail"
        )
        return cls(
            data=_required(data, "data", _as_str),
            data_numeric=_optional(data, "data_numeric", _as_float),
            template_pk=_required(template, "pk", _as_int),
            template_name=_required(template, "name", _as_str),
        )


@dataclass
class PartDetails:
    pk: int
    ipn: str | None
    barcode_hash: str
    category_default_location: int | None
    default_location: int | None
    default_expiry: int
    name: str
    revision: str | None
    full_name: str
    description: str
    image: str | None
    thumbnail: str | None
    active: bool
    locked: bool
    assembly: bool
    component: bool
    is_template: bool
    purchaseable: bool
    salable: bool
    testable: bool
    trackable: bool
    virtual: bool
    units: str | None
    pricing_min: float | None
    pricing_max: float | None

    @classmethod
    def from_dict(cls, data: Any) -> PartDetails:
        data = _mapping(data, "part details")
        return cls(
            pk=_required(data, "pk", _as_int),
            ipn=_optional(data, "IPN", _as_str),
            barcode_hash=_required(data, "barcode_hash", _as_str),
            category_default_location=_optional(
                data, "category_default_location", _as_int
            ),
            default_location=_optional(data, "default_location", _as_int),
            default_expiry=_required(data, "default_expiry", _as_int),
            name=_required(data, "name", _as_str),
            revision=_optional(data, "revision", _as_str),
            full_name=_required(data, "full_name", _as_str),
            description=_required(data, "description", _as_str),
            image=_optional(data, "image", _as_str),
            thumbnail=_optional(data, "thumbnail", _as_str),
            active=_required(data, "active", _as_bool),
            locked=_required(data, "locked", _as_bool),
            assembly=_required(data, "assembly", _as_bool),
            component=_required(data, "component", _as_bool),
            is_template=_required(data, "is_template", _as_bool),
            purchaseable=_required(data, "purchaseable", _as_bool),
            salable=_required(data, "salable", _as_bool),
            testable=_required(data, "testable", _as_bool),
            trackable=_required(data, "trackable", _as_bool),
            virtual=_required(data, "virtual", _as_bool),
            units=_optional(data, "units", _as_str),
            pricing_min=_optional(data, "pricing_min", _as_float),
            pricing_max=_optional(data, "pricing_max", _as_float),
        )


@dataclass
class InventreePart:
    active: bool
    category: int | None
    category_name: str | None
    full_name: str
    ipn: str | None
    name: str
    pk: int
    creation_date: date
    notes: str | None
    parameters: list[PartParameter] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> InventreePart:
        data = _mapping(data, "part")
        if "parameters" in data:
            parameters = _required(
                data,
                "parameters",
                lambda v: [PartParameter.from_dict(item) for item in _as_list(v)],
            )
        else:
            parameters = []
        return cls(
            active=_required(data, "active", _as_bool),
            category=_optional(data, "category", _as_int),
            category_name=_optional(data, "category_name", _as_str),
            full_name=_required(data, "full_name", _as_str),
            ipn=_optional(data, "IPN", _as_str),
            name=_required(data, "name", _as_str),
            pk=_required(data, "pk", _as_int),
            creation_date=_required(data, "creation_date", _as_date),
            notes=_optional(data, "notes", _as_str),
            parameters=parameters,
        )

    def _find_parameter(self, name: str) -> PartParameter | None:
        return next((p for p in self.parameters if p.template_name == name), None)

    def select_parameter_numeric(self, name: str) -> float | None:
        """Numeric value of the first parameter whose template has ``name``."""
        parameter = self._find_parameter(name)
        return None if parameter is None else parameter.data_numeric

    def select_parameter_string(self, name: str) -> str | None:
        """Text value of the first parameter whose template has ``name``."""
        parameter = self._find_parameter(name)
        return None if parameter is None else parameter.data


def _as_list(value: Any) -> list[Any]:
    if not isinstance(value, list):
        raise TypeError(f"expected a list, got {value!r}")
    return value


@dataclass
class SupplierPartDetails:
    description: str | None
    in_stock: bool | None
    link: str | None
    active: bool
    manufacturer_part: int
    mpn: str | None
    note: str | None
    pk: int
    barcode_hash: str
    packaging: str | None
    pack_quantity: str | None
    pack_quantity_native: float
    part: int
    sku: str
    supplier: int
    notes: str | None

    @classmethod
    def from_dict(cls, data: Any) -> SupplierPartDetails:
        data = _mapping(data, "supplier part")
        return cls(
            description=_optional(data, "description", _as_str),
            in_stock=_optional(data, "in_stock", _as_bool),
            link=_optional(data, "link", _as_str),
            active=_required(data, "active", _as_bool),
            manufacturer_part=_required(data, "manufacturer_part", _as_int),
            mpn=_optional(data, "MPN", _as_str),
            note=_optional(data, "note", _as_str),
            pk=_required(data, "pk", _as_int),
            barcode_hash=_required(data, "barcode_hash", _as_str),
            packaging=_optional(data, "packaging", _as_str),
            pack_quantity=_optional(data, "pack_quantity", _as_str),
            pack_quantity_native=_required(data, "pack_quantity_native", _as_float),
            part=_required(data, "part", _as_int),
            sku=_required(data, "SKU", _as_str),
            supplier=_required(data, "supplier", _as_int),
            notes=_optional(data, "notes", _as_str),
        )


@dataclass
class InventreeStockItem:
    pk: int
    part: int
    quantity: float
    serial: str | None
    batch: str | None
    location: int | None
    belongs_to: int | None
    build: int | None
    consumed_by: int | None
    customer: int | None
    delete_on_deplete: bool
    expiry_date: date | None
    in_stock: bool
    is_building: bool
    link: str
    notes: str | None
    owner: int | None
    packaging: str | None
    parent: int | None
    purchase_order: int | None
    purchase_order_reference: str | None
    sales_order: int | None
    sales_order_reference: str | None
    status: int
    status_text: str
    status_custom_key: int | None
    supplier_part: int
    sku: str | None
    mpn: str | None
    barcode_hash: str
    updated: datetime
    stocktake_date: date | None
    purchase_price: float | None
    purchase_price_currency: str | None
    allocated: float
    expired: bool
    installed_items: int | None
    child_items: int | None
    tracking_items: int | None
    tags: list[str]
    supplier_part_detail: SupplierPartDetails | None
    part_detail: PartDetails | None
    location_detail: LocationDetails | None

    @classmethod
    def from_dict(cls, data: Any) -> InventreeStockItem:
        data = _mapping(data, "stock item")
        return cls(
            pk=_required(data, "pk", _as_int),
            part=_required(data, "part", _as_int),
            quantity=_required(data, "quantity", _as_float),
            serial=_optional(data, "serial", _as_str),
            batch=_optional(data, "batch", _as_str),
            location=_optional(data, "location", _as_int),
            belongs_to=_optional(data, "belongs_to", _as_int),
            build=_optional(data, "build", _as_int),
            consumed_by=_optional(data, "consumed_by", _as_int),
            customer=_optional(data, "customer", _as_int),
            delete_on_deplete=_required(data, "delete_on_deplete", _as_bool),
            expiry_date=_optional(data, "expiry_date", _as_date),
            in_stock=_required(data, "in_stock", _as_bool),
            is_building=_required(data, "is_building", _as_bool),
            link=_required(data, "link", _as_str),
            notes=_optional(data, "notes", _as_str),
            owner=_optional(data, "owner", _as_int),
            packaging=_optional(data, "packaging", _as_str),
            parent=_optional(data, "parent", _as_int),
            purchase_order=_optional(data, "purchase_order", _as_int),
            purchase_order_reference=_optional(
                data, "purchase_order_reference", _as_str
            ),
            sales_order=_optional(data, "sales_order", _as_int),
            sales_order_reference=_optional(data, "sales_order_reference", _as_str),
            status=_required(data, "status", _as_int),
            status_text=_required(data, "status_text", _as_str),
            status_custom_key=_optional(data, "status_custom_key", _as_int),
            supplier_part=_required(data, "supplier_part", _as_int),
            sku=_optional(data, "SKU", _as_str),
            mpn=_optional(data, "MPN", _as_str),
            barcode_hash=_required(data, "barcode_hash", _as_str),
            updated=_required(data, "updated", parse_updated),
            stocktake_date=_optional(data, "stocktake_date", _as_date),
            purchase_price=_optional(data, "purchase_price", _as_float),
            purchase_price_currency=_optional(
                data, "purchase_price_currency", _as_str
            ),
            allocated=_required(data, "allocated", _as_float),
            expired=_required(data, "expired", _as_bool),
            installed_items=_optional(data, "installed_items", _as_int),
            child_items=_optional(data, "child_items", _as_int),
            tracking_items=_optional(data, "tracking_items", _as_int),
            tags=_required(data, "tags", _as_str_list),
            supplier_part_detail=_optional(
                data, "supplier_part_detail", SupplierPartDetails.from_dict
            ),
            part_detail=_optional(data, "part_detail", PartDetails.from_dict),
            location_detail=_optional(
                data, "location_detail", LocationDetails.from_dict
            ),
        )