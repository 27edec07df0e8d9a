"""Two-task supervision for the process lifetime.

The watcher and its companion listener race: whichever exits first, cleanly
or with an error, decides the outcome, and the other is cancelled before we
return.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable

LOGGER = logging.getLogger(__name__)


async def run_until_first_exit(**coroutines: Awaitable[Any]) -> Any:
    """Run named coroutines until the first one finishes.

    Returns the first finisher's result or re-raises its exception. Every
    other task is cancelled and awaited so shutdown is orderly.
    """

    if not coroutines:
        raise ValueError("run_until_first_exit needs at least one coroutine")

    tasks = {
        asyncio.ensure_future(coroutine): name for name, coroutine in coroutines.items()
    }
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    except BaseException:
        pending = set(tasks)
        done = set()
        await _cancel_all(pending, tasks)
        raise

    await _cancel_all(pending, tasks)

    # Ties are broken by registration order so the outcome is deterministic.
    first = next(task for task in tasks if task in done)
    name = tasks[first]
    if first.cancelled():
        LOGGER.warning("Task %s was cancelled", name)
    elif first.exception() is not None:
        LOGGER.error("Task %s failed: %r", name, first.exception())
    else:
        LOGGER.info("Task %s exited", name)
    return first.result()


async def _cancel_all(pending, names) -> None:
    for task in pending:
        LOGGER.debug("Cancelling %s", names[task])
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
