import json

import pytest
from unittest.mock import AsyncMock

from app.services.client_storage import MemoryClientStorage
from app.services.draft_store import DEFAULT_FORM, DRAFT_KEY, DraftStore, is_dirty


def test_default_form_is_not_dirty():
    assert is_dirty(DEFAULT_FORM) is False
    assert is_dirty({**DEFAULT_FORM, "full_name": "J"}) is True


@pytest.mark.asyncio
async def test_untouched_form_is_not_saved():
    storage = MemoryClientStorage()
    drafts = DraftStore(storage)
    assert await drafts.save(dict(DEFAULT_FORM)) is False
    assert await storage.get_item(DRAFT_KEY) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("changes", [
    {"full_name": "Jane"},
    {"email": "jane@", "message": "Line one\nLine two"},
    {"inquiry_type": "coaching", "urgency": "immediate", "preferred_contact": "phone"},
    {"full_name": "Zoë O'Neil", "company_name": "Acme & Sons", "phone": "+1 555"},
])
async def test_save_then_restore_round_trips(changes):
    storage = MemoryClientStorage()
    form = {**DEFAULT_FORM, **changes}
    assert await DraftStore(storage).save(form) is True

    # A new store over the same storage stands in for a page reload
    restored = await DraftStore(storage).restore()
    assert restored == form


@pytest.mark.asyncio
async def test_save_serializes_full_form_state():
    storage = MemoryClientStorage()
    await DraftStore(storage).save({"full_name": "Jane"})
    stored = json.loads(await storage.get_item(DRAFT_KEY))
    assert set(stored) == set(DEFAULT_FORM)
    assert stored["full_name"] == "Jane"


@pytest.mark.asyncio
async def test_restore_without_draft_returns_none():
    assert await DraftStore(MemoryClientStorage()).restore() is None


@pytest.mark.asyncio
async def test_corrupt_draft_is_discarded():
    storage = MemoryClientStorage({DRAFT_KEY: "{not json"})
    assert await DraftStore(storage).restore() is None
    assert await storage.get_item(DRAFT_KEY) is None


@pytest.mark.asyncio
async def test_clear_removes_draft():
    storage = MemoryClientStorage()
    drafts = DraftStore(storage)
    await drafts.save({"full_name": "Jane"})
    await drafts.clear()
    assert await drafts.restore() is None


@pytest.mark.asyncio
async def test_storage_errors_do_not_raise():
    storage = AsyncMock()
    storage.set_item.side_effect = ConnectionError("down")
    storage.get_item.side_effect = ConnectionError("down")
    storage.remove_item.side_effect = ConnectionError("down")
    drafts = DraftStore(storage)
    assert await drafts.save({"full_name": "Jane"}) is False
    assert await drafts.restore() is None
    await drafts.clear()
