"""Asynchronous client for the parts of the InvenTree REST API this proxy uses."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from .models import InventreePart, InventreeStockItem

logger = logging.getLogger(__name__)


def _param(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _params(**values: Any) -> dict[str, str]:
    return {key: _param(value) for key, value in values.items() if value is not None}


class _Query(Protocol):
    def to_params(self) -> dict[str, str]: ...


@dataclass
class PartListQuery:
    category: int | None = None
    parameters: bool | None = None

    def to_params(self) -> dict[str, str]:
        return _params(category=self.category, parameters=self.parameters)


@dataclass
class PartRetrieveQuery:
    parameters: bool | None = True

    def to_params(self) -> dict[str, str]:
        return _params(parameters=self.parameters)


@dataclass
class StockListQuery:
    category: int | None = None
    location_detail: bool | None = None
    supplier_part_detail: bool | None = None

    def to_params(self) -> dict[str, str]:
        return _params(
            category=self.category,
            location_detail=self.location_detail,
            supplier_part_detail=self.supplier_part_detail,
        )


@dataclass
class StockRetrieveQuery:
    location_detail: bool | None = True
    supplier_part_detail: bool | None = True
    part_detail: bool | None = True

    def to_params(self) -> dict[str, str]:
        return _params(
            location_detail=self.location_detail,
            supplier_part_detail=self.supplier_part_detail,
            part_detail=self.part_detail,
        )


@dataclass
class RemoveCreateItem:
    pk: int
    # Decimal string matching ^-?\d{0,10}(?:\.\d{0,5})?$
    quantity: str


@dataclass
class RemoveCreateBody:
    items: list[RemoveCreateItem] = field(default_factory=list)
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [{"pk": item.pk, "quantity": item.quantity} for item in self.items],
            "notes": self.notes,
        }


def _expect_list(payload: Any) -> list[Any]:
    if not isinstance(payload, list):
        raise ValueError(f"expected a JSON array, got {type(payload).__name__}")
    return payload


class InventreeApiClient:
    """Token-authenticated connection to an InvenTree server."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.removesuffix("/")
        self._client = httpx.AsyncClient(
            headers={"Authorization": f"Token {api_key}"},
            transport=transport,
            timeout=None,
        )

    def part(self) -> PartRepository:
        return PartRepository(self)

    def stock(self) -> StockRepository:
        return StockRepository(self)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> InventreeApiClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/api/{endpoint}"

    async def _get(self, endpoint: str, query: _Query | None = None) -> Any:
        url = self._url(endpoint)
        params = query.to_params() if query is not None else None
        logger.debug("GET request to %s with query: %r", url, query)
        response = await self._client.get(url, params=params)
        response.raise_for_status()
        text = response.text
        logger.debug("API response for %s: %s", url, text)
        return json.loads(text)

    async def _post(
        self, endpoint: str, body: dict[str, Any], query: _Query | None = None
    ) -> Any:
        url = self._url(endpoint)
        params = query.to_params() if query is not None else None
        logger.debug("POST request to %s with body: %r", url, body)
        response = await self._client.post(url, json=body, params=params)
        response.raise_for_status()
        text = response.text
        logger.debug("API response for %s: %s", url, text)
        return json.loads(text)

    async def _status(self, endpoint: str) -> httpx.Response:
        return await self._client.get(self._url(endpoint))


class PartRepository:
    """Part endpoints."""

    def __init__(self, client: InventreeApiClient) -> None:
        self._client = client

    async def list(self, query: PartListQuery | None = None) -> list[InventreePart]:
        payload = await self._client._get("part/", query)
        return [InventreePart.from_dict(item) for item in _expect_list(payload)]

    async def retrieve(
        self, part_id: int, query: PartRetrieveQuery | None = None
    ) -> InventreePart:
        payload = await self._client._get(f"part/{part_id}/", query)
        return InventreePart.from_dict(payload)


class StockRepository:
    """Stock item endpoints."""

    def __init__(self, client: InventreeApiClient) -> None:
        self._client = client

    async def list(
        self, query: StockListQuery | None = None
    ) -> list[InventreeStockItem]:
        payload = await self._client._get("stock/", query)
        return [InventreeStockItem.from_dict(item) for item in _expect_list(payload)]

    async def retrieve(
        self, stock_id: int, query: StockRetrieveQuery | None = None
    ) -> InventreeStockItem:
        payload = await self._client._get(f"stock/{stock_id}/", query)
        return InventreeStockItem.from_dict(payload)

    async def exists(self, stock_id: int) -> bool:
        """Whether the stock item exists; other HTTP errors are raised."""
        response = await self._client._status(f"stock/{stock_id}/")
        if response.status_code == httpx.codes.NOT_FOUND:
            return False
        response.raise_for_status()
        return True

    async def remove_create(self, body: RemoveCreateBody) -> Any:
        return await self._client._post("stock/remove/", body.to_dict())