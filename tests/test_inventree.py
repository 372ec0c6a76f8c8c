import json

import httpx
import pytest

from spoolproxy.inventree import (
    InventreeApiClient,
    PartListQuery,
    PartRetrieveQuery,
    RemoveCreateBody,
    RemoveCreateItem,
    StockListQuery,
    StockRetrieveQuery,
)

BASE = "https://inv.example.com"

PART = {
    "active": True,
    "category": 31,
    "full_name": "PLA Red",
    "name": "PLA Red",
    "pk": 7,
    "creation_date": "2025-08-28",
    "parameters": [],
}

STOCK = {
    "pk": 42,
    "part": 7,
    "quantity": 750.5,
    "delete_on_deplete": False,
    "in_stock": True,
    "is_building": False,
    "link": "",
    "status": 10,
    "status_text": "OK",
    "supplier_part": 11,
    "barcode_hash": "",
    "updated": "2025-08-29 00:11",
    "allocated": 0,
    "expired": False,
    "tags": [],
}


def make_client(responder, base_url=BASE):
    seen = []

    def handler(request):
        seen.append(request)
        return responder(request)

    client = InventreeApiClient(base_url, "placeholder", transport=httpx.MockTransport(handler))
    return client, seen


def json_response(payload, status=200):
    return lambda request: httpx.Response(status, json=payload)


def test_part_list_query_params():
    assert PartListQuery().to_params() == {}
    query = PartListQuery(category=31, parameters=True)
    params = query.to_params()
    assert params["category"] == str(query.category)
    assert params["parameters"] == "true"


def test_retrieve_query_defaults_enable_all_flags():
    assert PartRetrieveQuery().to_params() == {"parameters": "true"}
    stock_params = StockRetrieveQuery().to_params()
    assert set(stock_params) == {"location_detail", "supplier_part_detail", "part_detail"}
    assert set(stock_params.values()) == {"true"}


def test_false_and_none_flags():
    params = StockListQuery(location_detail=False).to_params()
    assert set(params) == {"location_detail"}
    assert params["location_detail"] != PartRetrieveQuery().to_params()["parameters"]


def test_remove_create_body_to_dict():
    body = RemoveCreateBody(
        items=[RemoveCreateItem(pk=42, quantity="12.50000")], notes="used"
    )
    assert body.to_dict() == {"items": [{"pk": 42, "quantity": "12.50000"}], "notes": "used"}


@pytest.mark.asyncio
async def test_part_list_sends_auth_and_query():
    client, seen = make_client(json_response([PART]))
    async with client:
        parts = await client.part().list(PartListQuery(category=31, parameters=True))
    assert [p.pk for p in parts] == [PART["pk"]]
    request = seen[0]
    assert request.method == "GET"
    assert request.headers["Authorization"] == "Token placeholder"
    assert request.url.path == "/api/part/"
    assert request.url.params["category"] == str(PART["category"])


@pytest.mark.asyncio
async def test_trailing_slash_stripped_from_base_url():
    client, seen = make_client(json_response(PART), base_url=BASE + "/")
    async with client:
        part = await client.part().retrieve(7)
    assert client.base_url == BASE
    assert part.name == PART["name"]
    assert str(seen[0].url).startswith(BASE + "/api/part/7/")


@pytest.mark.asyncio
async def test_part_retrieve_passes_query():
    client, seen = make_client(json_response(PART))
    async with client:
        await client.part().retrieve(7, PartRetrieveQuery())
    assert dict(seen[0].url.params) == PartRetrieveQuery().to_params()


@pytest.mark.asyncio
async def test_stock_list_and_retrieve():
    client, seen = make_client(
        lambda r: httpx.Response(200, json=[STOCK] if r.url.path.endswith("stock/") else STOCK)
    )
    async with client:
        items = await client.stock().list(StockListQuery(category=31))
        item = await client.stock().retrieve(42, StockRetrieveQuery())
    assert [i.pk for i in items] == [STOCK["pk"]]
    assert item.quantity == STOCK["quantity"]
    assert seen[1].url.path.endswith(f"/stock/{STOCK['pk']}/")
    assert dict(seen[1].url.params) == StockRetrieveQuery().to_params()


@pytest.mark.asyncio
async def test_list_requires_array():
    client, _ = make_client(json_response(PART))
    async with client:
        with pytest.raises(ValueError):
            await client.part().list()


@pytest.mark.asyncio
async def test_error_status_raises():
    client, _ = make_client(json_response({"detail": "nope"}, status=403))
    async with client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.stock().list()


@pytest.mark.asyncio
async def test_invalid_json_raises():
    client, _ = make_client(lambda r: httpx.Response(200, text="not json"))
    async with client:
        with pytest.raises(ValueError):
            await client.part().retrieve(1)


@pytest.mark.asyncio
@pytest.mark.parametrize("status,expected", [(200, True), (404, False)])
async def test_exists(status, expected):
    client, seen = make_client(json_response({}, status=status))
    async with client:
        assert await client.stock().exists(42) is expected
    assert seen[0].url.path.endswith("/stock/42/")


@pytest.mark.asyncio
async def test_exists_raises_on_server_error():
    client, _ = make_client(json_response({}, status=500))
    async with client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.stock().exists(42)


@pytest.mark.asyncio
async def test_remove_create_posts_body():
    body = RemoveCreateBody(items=[RemoveCreateItem(pk=42, quantity="3.00000")], notes="batch")
    client, seen = make_client(json_response({"ok": True}))
    async with client:
        result = await client.stock().remove_create(body)
    assert result == {"ok": True}
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/api/stock/remove/"
    assert json.loads(request.content) == body.to_dict()


@pytest.mark.asyncio
async def test_closed_client_refuses_requests():
    client, _ = make_client(json_response([]))
    await client.aclose()
    with pytest.raises(RuntimeError):
        await client.part().list()