"""Best-effort call to the contact-notification function.

The function sends one email to the firm and one to the submitter. Nothing
that happens here may fail a submission: the inquiry record already exists by
the time this runs, so every failure is logged and reported as ``False``.
"""
import asyncio
import logging
from typing import Any, Mapping, Optional

import httpx

from app.config import get_settings
from app.metrics import NOTIFICATION_DISPATCHES
from app.services.email_service import _redact_email

logger = logging.getLogger(__name__)

# Assigned by the store; never part of the notification payload
STORE_ASSIGNED_FIELDS = ("id", "created_at")


class NotificationDispatcher:
    def __init__(
        self,
        endpoint_url: str,
        anon_key: str,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint_url = endpoint_url
        self.anon_key = anon_key
        self.timeout = timeout
        self._client = client

    def build_request(self, inquiry: Mapping[str, Any]) -> httpx.Request:
        payload = {k: v for k, v in inquiry.items() if k not in STORE_ASSIGNED_FIELDS}
        return httpx.Request(
            "POST",
            self.endpoint_url,
            json=payload,
            headers={
                "Authorization": f"Bearer {self.anon_key}",
                "Content-Type": "application/json",
            },
        )

    async def dispatch(self, inquiry: Mapping[str, Any]) -> bool:
        """Send the notification request. Returns True only on a 200 response."""
        redacted = _redact_email(str(inquiry.get("email", "")))
        if not self.endpoint_url:
            logger.info(f"Notification endpoint not configured - skipping notification for {redacted}")
            NOTIFICATION_DISPATCHES.labels(result="skipped").inc()
            return False

        request = self.build_request(inquiry)
        try:
            response = await asyncio.wait_for(self._send(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Notification for {redacted} timed out after {self.timeout:.0f}s")
            NOTIFICATION_DISPATCHES.labels(result="timeout").inc()
            return False
        except httpx.HTTPError as e:
            logger.warning(f"Notification for {redacted} failed: {type(e).__name__}: {e}")
            NOTIFICATION_DISPATCHES.labels(result="error").inc()
            return False

        if response.status_code != 200:
            logger.warning(
                f"Notification for {redacted} rejected: status={response.status_code}, body={response.text[:200]}"
            )
            NOTIFICATION_DISPATCHES.labels(result="rejected").inc()
            return False

        logger.info(f"Notification sent for {redacted}")
        NOTIFICATION_DISPATCHES.labels(result="sent").inc()
        return True

    async def _send(self, request: httpx.Request) -> httpx.Response:
        if self._client is not None:
            return await self._client.send(request)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.send(request)


def get_notification_dispatcher() -> NotificationDispatcher:
    settings = get_settings()
    return NotificationDispatcher(
        settings.notification_endpoint,
        settings.supabase_anon_key,
        timeout=settings.notification_timeout_seconds,
    )
