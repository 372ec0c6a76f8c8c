"""HTTP service that presents InvenTree stock as a Spoolman-compatible API."""

from __future__ import annotations

import argparse
import asyncio
import functools
import json
import logging
import math
import os
import socket
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Awaitable, Callable

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Mount, Route, WebSocketRoute
from starlette.websockets import WebSocket

from .db import DbClient
from .flush import DEFAULT_INTERVAL, Context, start_flushing_job
from .inventree import (
    InventreeApiClient,
    PartListQuery,
    PartRetrieveQuery,
    StockListQuery,
    StockRetrieveQuery,
)
from .models import InventreeStockItem
from .parameters import ParameterSettings
from .spool import Spool

logger = logging.getLogger(__name__)

DEFAULT_PORT = 4000


class ApiError(Exception):
    """An error reported to API clients as a JSON body with a status code."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    @classmethod
    def bad_request(cls, message: Any) -> ApiError:
        return cls(400, str(message))

    @classmethod
    def not_found(cls, message: Any) -> ApiError:
        return cls(404, str(message))

    @classmethod
    def internal(cls, message: Any) -> ApiError:
        return cls(500, str(message))

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message}

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    def response(self) -> JSONResponse:
        return JSONResponse(self.to_dict(), status_code=self.status_code)


@dataclass(frozen=True)
class AppConfig:
    """Settings the HTTP service needs."""

    category_id: int
    parameters: ParameterSettings = field(default_factory=ParameterSettings)
    version: str = "0.1.0"
    debug_mode: bool = False
    flush_interval: float | None = DEFAULT_INTERVAL


def weight_for_length(use_length: float, diameter: float, density: float) -> float:
    """Grams of filament in ``use_length`` mm of the given diameter (mm) and density."""
    radius = diameter / 2.0
    volume_cm3 = (math.pi * radius * radius * use_length) / 1000.0
    return volume_cm3 * density


def _utc_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().removesuffix("+00:00") + "Z"


def _apply_pending(item: InventreeStockItem, pending: float) -> None:
    item.quantity = max(item.quantity - pending, 0.0)


def _optional_number(payload: dict[str, Any], key: str) -> float | None:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ApiError.bad_request(f"{key} must be a number")
    return float(value)


Handler = Callable[[Request], Awaitable[Response]]


def _api(handler: Handler) -> Handler:
    @functools.wraps(handler)
    async def wrapper(request: Request) -> Response:
        try:
            return await handler(request)
        except ApiError as exc:
            return exc.response()
        except Exception as exc:
            logger.exception("Request to %s failed", request.url.path)
            return ApiError.internal(exc).response()

    return wrapper


async def _not_found(request: Request, exc: Exception) -> Response:
    logger.warning(
        "A unhandled request was made to: %s %s", request.method, request.url
    )
    return PlainTextResponse("Not Found", status_code=404)


def create_app(context: Context, config: AppConfig) -> Starlette:
    """Build the ASGI application serving ``/api/v1``."""

    @_api
    async def info(request: Request) -> Response:
        return JSONResponse(
            {
                "version": config.version,
                "debug_mode": config.debug_mode,
                "automatic_updates": True,
                "data_dir": "./data",
                "logs_dir": "./logs",
                "backups_dir": "./backups",
                "db_type": "sqlite",
                "git_commit": "unknown",
                "build_date": _utc_iso(datetime.now(timezone.utc)),
            }
        )

    @_api
    async def health(request: Request) -> Response:
        return JSONResponse({"status": "healthy"})

    @_api
    async def backup(request: Request) -> Response:
        return JSONResponse({"path": "NOT IMPLEMENTED"})

    @_api
    async def find_spools(request: Request) -> Response:
        stock_items = await context.inv.stock().list(
            StockListQuery(
                category=config.category_id,
                supplier_part_detail=True,
                location_detail=True,
            )
        )
        async with context.db.acquire() as conn:
            for item in stock_items:
                pending = await context.db.select_pending_spool_usage(conn, item.pk)
                if pending is not None:
                    _apply_pending(item, pending)

        parts = await context.inv.part().list(
            PartListQuery(category=config.category_id, parameters=True)
        )
        by_pk: dict[int, Any] = {}
        for part in parts:
            by_pk.setdefault(part.pk, part)

        spools = [
            Spool.from_inventree(item, by_pk[item.part], config.parameters).to_dict()
            for item in stock_items
            if item.part in by_pk
        ]
        return JSONResponse(spools)

    @_api
    async def get_spool(request: Request) -> Response:
        spool_id: int = request.path_params["spool_id"]
        item = await context.inv.stock().retrieve(spool_id, StockRetrieveQuery())
        async with context.db.acquire() as conn:
            pending = await context.db.select_pending_spool_usage(conn, item.pk)
        if pending is not None:
            _apply_pending(item, pending)

        part = await context.inv.part().retrieve(item.part, PartRetrieveQuery())
        spool = Spool.from_inventree(item, part, config.parameters)
        return JSONResponse(spool.to_dict())

    @_api
    async def use_spool(request: Request) -> Response:
        spool_id: int = request.path_params["spool_id"]
        try:
            payload = await request.json()
        except ValueError as exc:
            raise ApiError.bad_request(f"Invalid JSON body: {exc}") from exc
        if not isinstance(payload, dict):
            raise ApiError.bad_request("Request body must be a JSON object")
        use_length = _optional_number(payload, "use_length")
        use_weight = _optional_number(payload, "use_weight")
        if use_length is None and use_weight is None:
            raise ApiError.bad_request(
                "Either use_length or use_weight must be provided"
            )

        item = await context.inv.stock().retrieve(spool_id, StockRetrieveQuery())
        part = await context.inv.part().retrieve(item.part, PartRetrieveQuery())
        spool = Spool.from_inventree(item, part, config.parameters)

        if use_weight is not None:
            used_weight = use_weight
        else:
            assert use_length is not None
            used_weight = weight_for_length(
                use_length, spool.filament.diameter, spool.filament.density
            )

        async with context.db.begin() as conn:
            await context.db.update_pending_spool_usage(conn, item.pk, used_weight)
            already_pending = (
                await context.db.select_pending_spool_usage(conn, item.pk) or 0.0
            )
            _apply_pending(item, already_pending)
            spool = Spool.from_inventree(item, part, config.parameters)

        return JSONResponse(spool.to_dict())

    async def spool_events(websocket: WebSocket) -> None:
        await websocket.accept()
        while True:
            message = await websocket.receive()
            logger.debug("got WS message: %r", message)
            if message["type"] == "websocket.disconnect":
                break

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        task = (
            start_flushing_job(context, config.flush_interval)
            if config.flush_interval is not None
            else None
        )
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task

    routes = [
        Mount(
            "/api/v1",
            routes=[
                Route("/info", info, methods=["GET"]),
                Route("/health", health, methods=["GET"]),
                Route("/backup", backup, methods=["POST"]),
                Route("/spool", find_spools, methods=["GET"]),
                WebSocketRoute("/spool", spool_events),
                Route("/spool/{spool_id:int}", get_spool, methods=["GET"]),
                Route("/spool/{spool_id:int}/use", use_spool, methods=["PUT"]),
            ],
        )
    ]
    return Starlette(
        routes=routes,
        exception_handlers={404: _not_found},
        lifespan=lifespan,
    )


def _listen_sockets(host: str | None, port: int) -> list[socket.socket]:
    if host:
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        return [socket.create_server((host, port), family=family)]
    sockets = [socket.create_server(("0.0.0.0", port), family=socket.AF_INET)]
    if socket.has_ipv6:
        sockets.append(
            socket.create_server(("::", port), family=socket.AF_INET6)
        )
    return sockets


async def _serve(args: argparse.Namespace) -> None:
    db = await DbClient.connect(args.db)
    inv = InventreeApiClient(args.inventree_url, args.inventree_token)
    try:
        await db.migrate()
        context = Context(inv=inv, db=db)
        config = AppConfig(category_id=args.category_id)
        app = create_app(context, config)
        server = uvicorn.Server(uvicorn.Config(app, log_config=None))
        await server.serve(sockets=_listen_sockets(args.host, args.port))
    finally:
        await inv.aclose()
        await db.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="spoolproxy",
        description="Serve InvenTree filament stock through a Spoolman-compatible API.",
    )
    parser.add_argument("--inventree-url", default=os.environ.get("INVENTREE_URL"))
    parser.add_argument(
        "--inventree-token", default=os.environ.get("INVENTREE_TOKEN")
    )
    parser.add_argument(
        "--category-id", type=int, default=os.environ.get("INVENTREE_CATEGORY_ID")
    )
    parser.add_argument(
        "--db", default=os.environ.get("SQLITE_DB_PATH", "sqlite://data.db")
    )
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--log-level", default=os.environ.get("LOG_LEVEL", "info"))
    args = parser.parse_args(argv)

    for name in ("inventree_url", "inventree_token", "category_id"):
        if getattr(args, name) is None:
            parser.error(f"--{name.replace('_', '-')} is required")
    args.category_id = int(args.category_id)

    logging.basicConfig(level=args.log_level.upper())
    logger.info("Starting Spoolman API Proxy Server...")
    try:
        asyncio.run(_serve(args))
    except KeyboardInterrupt:
        pass
    return 0