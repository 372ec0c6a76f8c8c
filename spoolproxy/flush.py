"""Periodic hand-over of pending spool usage to InvenTree."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from .db import DbClient
from .inventree import InventreeApiClient, RemoveCreateBody, RemoveCreateItem

logger = logging.getLogger(__name__)

FLUSH_NOTES = "Used via Spoolman Proxy (Batch Update)"
SETTLE_SECONDS = 120
DEFAULT_INTERVAL = 60.0


@dataclass
class Context:
    """Shared state of the running service."""

    inv: InventreeApiClient
    db: DbClient


async def flush_spool_usage_to_inventree(
    ctx: Context, now: datetime | None = None
) -> list[int]:
    """Send settled pending usage to InvenTree and return the flushed spool ids.

    Usage updated less than two minutes before ``now`` is left for a later run.
    Entries whose stock item no longer exists are dropped.
    """
    flushed: list[int] = []
    stock = ctx.inv.stock()
    async with ctx.db.acquire() as conn:
        pending = await ctx.db.list_pending_spool_usage(conn)
        for usage in pending:
            current = now if now is not None else datetime.now(timezone.utc)
            age = int((current - usage.last_updated_at).total_seconds())
            if age < SETTLE_SECONDS:
                logger.debug(
                    "Skipping spool_id %s with pending_weight %s as it was "
                    "updated less than 2 minutes ago",
                    usage.spool_id,
                    usage.pending_weight,
                )
                continue

            if not await stock.exists(usage.spool_id):
                await ctx.db.delete_pending_spool_usage(conn, usage.spool_id)
                continue

            body = RemoveCreateBody(
                items=[
                    RemoveCreateItem(
                        pk=usage.spool_id, quantity=f"{usage.pending_weight:.5f}"
                    )
                ],
                notes=FLUSH_NOTES,
            )
            await stock.remove_create(body)
            await ctx.db.reset_pending_spool_usage(conn, usage.spool_id)
            flushed.append(usage.spool_id)
    return flushed


async def run_flushing_job(ctx: Context, interval: float = DEFAULT_INTERVAL) -> None:
    """Flush pending usage now and then every ``interval`` seconds, forever."""
    logger.debug("Starting flushing job")
    while True:
        logger.debug("Flushing job running...")
        try:
            await flush_spool_usage_to_inventree(ctx)
        except Exception as exc:
            logger.error("Error flushing spool usage: %s", exc)
        await asyncio.sleep(interval)


def start_flushing_job(
    ctx: Context, interval: float = DEFAULT_INTERVAL
) -> asyncio.Task[None]:
    """Run the flushing job in the background of the current event loop."""
    return asyncio.create_task(run_flushing_job(ctx, interval))