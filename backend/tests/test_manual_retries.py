import pytest
from unittest.mock import AsyncMock

from app.services.client_storage import MemoryClientStorage
from app.services.manual_retries import MANUAL_RETRIES_KEY, ManualRetryCounter


@pytest.mark.asyncio
async def test_counter_starts_at_zero_and_counts_up():
    storage = MemoryClientStorage()
    counter = ManualRetryCounter(storage)

    assert await counter.load() == 0
    assert await counter.increment() == 1
    assert await counter.increment() == 2
    assert await storage.get_item(MANUAL_RETRIES_KEY) == "2"


@pytest.mark.asyncio
async def test_clear_resets_the_count():
    storage = MemoryClientStorage({MANUAL_RETRIES_KEY: "2"})
    counter = ManualRetryCounter(storage)

    await counter.clear()

    assert await counter.load() == 0
    assert await storage.get_item(MANUAL_RETRIES_KEY) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["abc", "-3", ""])
async def test_unreadable_count_is_treated_as_zero(raw):
    counter = ManualRetryCounter(MemoryClientStorage({MANUAL_RETRIES_KEY: raw}))
    assert await counter.load() == 0


@pytest.mark.asyncio
async def test_storage_failure_is_logged_not_raised():
    storage = AsyncMock()
    storage.get_item.side_effect = ConnectionError("redis down")
    storage.set_item.side_effect = ConnectionError("redis down")
    storage.remove_item.side_effect = ConnectionError("redis down")
    counter = ManualRetryCounter(storage)

    assert await counter.load() == 0
    assert await counter.increment() == 1
    await counter.clear()
