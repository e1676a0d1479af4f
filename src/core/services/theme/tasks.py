"""
Fail-fast fan-out for the phases of a generation.

``gather_all`` runs awaitables concurrently like ``asyncio.gather``, but
the first failure cancels every sibling and waits for them to unwind
before it is re-raised, so nothing of a failed phase keeps writing into
the output tree after the phase has reported its error.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Any


async def gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """Await all of ``aws``; results come back in argument order.

    Raises:
        The first exception raised by any of them, unwrapped.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(_await(aw)) for aw in aws]
    except BaseExceptionGroup as eg:
        raise eg.exceptions[0] from None
    return [t.result() for t in tasks]


async def _await(aw: Awaitable[Any]) -> Any:
    return await aw
