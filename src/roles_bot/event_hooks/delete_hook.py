"""Drop bindings when their message is deleted."""

from __future__ import annotations

import logging
from typing import Iterable

import discord

from roles_bot import runtime

logger = logging.getLogger(__name__)


def _queue_removals(message_ids: Iterable[int]) -> int:
    rt = runtime.current()
    queued = 0
    for message_id in message_ids:
        # A setup still running for the message persists its bindings first.
        if message_id not in rt.store and not rt.pool.active(message_id):
            continue

        async def _remove(mid: int = message_id) -> None:
            await rt.store.remove(mid)

        rt.pool.submit(message_id, _remove)
        queued += 1
    return queued


async def handle(client: discord.Client, payload: discord.RawMessageDeleteEvent) -> None:
    if _queue_removals([payload.message_id]):
        logger.info("Bound message %s deleted", payload.message_id)


async def handle_bulk(client: discord.Client, payload: discord.RawBulkMessageDeleteEvent) -> None:
    queued = _queue_removals(payload.message_ids)
    if queued:
        logger.info("%d bound message(s) removed by bulk delete", queued)
