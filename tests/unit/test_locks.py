import asyncio
from uuid import uuid4

import pytest

from medvault.core.locks import OwnerLocks


async def test_same_owner_is_serialized():
    locks = OwnerLocks()
    owner_id = uuid4()
    events = []

    async def work(name):
        async with locks.hold(owner_id):
            events.append(f"{name}-start")
            await asyncio.sleep(0.01)
            events.append(f"{name}-end")

    await asyncio.gather(work("a"), work("b"))

    assert events == ["a-start", "a-end", "b-start", "b-end"]


async def test_different_owners_run_concurrently():
    locks = OwnerLocks()
    first, second = uuid4(), uuid4()
    entered = asyncio.Event()

    async def hold_first():
        async with locks.hold(first):
            await asyncio.wait_for(entered.wait(), timeout=1)

    async def hold_second():
        async with locks.hold(second):
            entered.set()

    await asyncio.gather(hold_first(), hold_second())


async def test_released_locks_are_forgotten():
    locks = OwnerLocks()
    owner_id = uuid4()

    async def work():
        async with locks.hold(owner_id):
            await asyncio.sleep(0)

    await asyncio.gather(work(), work(), work())

    assert len(locks) == 0


async def test_lock_forgotten_after_error():
    locks = OwnerLocks()
    with pytest.raises(RuntimeError):
        async with locks.hold(uuid4()):
            raise RuntimeError("boom")

    assert len(locks) == 0
