"""In-progress consultation form state, kept in client storage across reloads."""
import json
import logging
from typing import Any, Mapping, Optional

from app.services.client_storage import ClientStorage

logger = logging.getLogger(__name__)

DRAFT_KEY = "consultation_form_draft"
DRAFT_RESTORED_NOTICE = "We restored your unsaved consultation request."

DEFAULT_FORM: dict[str, str] = {
    "full_name": "",
    "email": "",
    "phone": "",
    "company_name": "",
    "job_title": "",
    "inquiry_type": "consultation",
    "message": "",
    "preferred_contact": "email",
    "urgency": "flexible",
}


def is_dirty(form: Mapping[str, Any]) -> bool:
    """True if any field differs from its default."""
    for field, value in form.items():
        if value != DEFAULT_FORM.get(field, ""):
            return True
    return False


class DraftStore:
    """Saves, restores and discards the local draft.

    A draft is never submitted on its own; only an explicit submission creates
    an inquiry.
    """

    def __init__(self, storage: ClientStorage, key: str = DRAFT_KEY):
        self.storage = storage
        self.key = key

    async def save(self, form: Mapping[str, Any]) -> bool:
        if not is_dirty(form):
            return False
        state = {**DEFAULT_FORM, **{k: "" if v is None else str(v) for k, v in form.items()}}
        try:
            await self.storage.set_item(self.key, json.dumps(state))
        except Exception as e:
            logger.warning(f"Failed to save form draft: {type(e).__name__}: {e}")
            return False
        return True

    async def restore(self) -> Optional[dict[str, str]]:
        try:
            raw = await self.storage.get_item(self.key)
        except Exception as e:
            logger.warning(f"Failed to read form draft: {type(e).__name__}: {e}")
            return None
        if not raw:
            return None
        try:
            stored = json.loads(raw)
        except ValueError:
            stored = None
        if not isinstance(stored, dict):
            logger.warning("Discarding unreadable form draft")
            await self.clear()
            return None
        return {**DEFAULT_FORM, **{k: str(v) for k, v in stored.items() if v is not None}}

    async def clear(self) -> None:
        try:
            await self.storage.remove_item(self.key)
        except Exception as e:
            logger.warning(f"Failed to delete form draft: {type(e).__name__}: {e}")
