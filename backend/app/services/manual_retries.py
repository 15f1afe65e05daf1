"""Per-client count of manual retries after a retryable submission failure.

Each HTTP submission runs a fresh state machine, so the count of times the
user pressed "try again" lives in client storage between requests. It resets
once a submission succeeds.
"""
import logging

from app.services.client_storage import ClientStorage

logger = logging.getLogger(__name__)

MANUAL_RETRIES_KEY = "contact_form_manual_retries"


class ManualRetryCounter:
    def __init__(self, storage: ClientStorage, key: str = MANUAL_RETRIES_KEY):
        self.storage = storage
        self.key = key

    async def load(self) -> int:
        try:
            raw = await self.storage.get_item(self.key)
        except Exception as e:
            logger.warning(f"Failed to read manual retry count: {type(e).__name__}: {e}")
            return 0
        if not raw:
            return 0
        try:
            count = int(raw)
        except ValueError:
            logger.warning(f"Discarding unreadable manual retry count under '{self.key}'")
            return 0
        return max(count, 0)

    async def increment(self) -> int:
        count = await self.load() + 1
        try:
            await self.storage.set_item(self.key, str(count))
        except Exception as e:
            logger.warning(f"Failed to record manual retry: {type(e).__name__}: {e}")
        return count

    async def clear(self) -> None:
        try:
            await self.storage.remove_item(self.key)
        except Exception as e:
            logger.warning(f"Failed to reset manual retry count: {type(e).__name__}: {e}")
