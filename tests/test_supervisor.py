from __future__ import annotations

import asyncio

import pytest

from core.errors import DispatchError
from core.supervisor import run_until_first_exit


def test_first_clean_exit_cancels_the_other_task() -> None:
    cancelled = []

    async def forever() -> None:
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            cancelled.append("listener")
            raise

    async def quick() -> str:
        await asyncio.sleep(0)
        return "done"

    result = asyncio.run(run_until_first_exit(watcher=quick(), listener=forever()))

    assert result == "done"
    assert cancelled == ["listener"]


def test_first_failure_propagates_and_cancels_the_other_task() -> None:
    cancelled = []

    async def forever() -> None:
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            cancelled.append("listener")
            raise

    async def failing() -> None:
        await asyncio.sleep(0)
        raise DispatchError("Couldn't send webhook: 500", status_code=500)

    with pytest.raises(DispatchError):
        asyncio.run(run_until_first_exit(watcher=failing(), listener=forever()))

    assert cancelled == ["listener"]


def test_requires_at_least_one_coroutine() -> None:
    with pytest.raises(ValueError):
        asyncio.run(run_until_first_exit())
