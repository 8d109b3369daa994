"""
Background maintenance for the binding store.

:func:`startup`/:func:`shutdown` schedule and cancel a periodic job;
:func:`validate_bindings` is the job itself, dropping binding sets whose
message is gone. It also runs once when the bot first becomes ready.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, List

from roles_bot.errors import ExternalCallFailed

if TYPE_CHECKING:
    from roles_bot.clients.platform import Platform
    from roles_bot.memory.bindings import BindingStore

logger = logging.getLogger(__name__)


async def startup(task_fn: Callable[[], Awaitable[None]], interval: float) -> asyncio.Task:
    """
    Schedule ``task_fn`` to run periodically every ``interval`` seconds.

    Exceptions raised by the task function are logged but do not stop the
    periodic execution.
    """

    async def _periodic() -> None:
        await asyncio.sleep(interval)   # delay initial loop
        while True:
            try:
                await task_fn()
            except Exception as exc:  # pragma: no cover - best effort logging
                logger.error("Maintenance cycle failed: %s", exc)
            await asyncio.sleep(interval)

    return asyncio.create_task(_periodic())


async def shutdown(task: asyncio.Task | None) -> None:
    """Cancel a task started with :func:`startup`; tolerant of ``None``."""

    if not task:
        return

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:  # pragma: no cover - normal cancellation
        pass


async def validate_bindings(store: "BindingStore", platform: "Platform") -> List[int]:
    """
    Remove binding sets whose message no longer exists.

    Messages that cannot be checked right now are kept. Returns the removed
    message ids.
    """

    stale: List[int] = []
    for binding_set in await store.all():
        try:
            exists = await platform.message_exists(binding_set.channel_id, binding_set.message_id)
        except ExternalCallFailed as exc:
            logger.warning(
                "Could not check message %s: %s", binding_set.message_id, exc.describe()
            )
            continue
        if not exists:
            stale.append(binding_set.message_id)

    if stale:
        await store.remove_many(stale)
        logger.info("Dropped %d binding set(s) for deleted messages", len(stale))
    return stale
