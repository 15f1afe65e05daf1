"""Sliding-window submission quota for the consultation form.

Timestamps of successful submissions are kept as a JSON array of epoch
milliseconds in the client's storage. A submission is allowed while fewer than
``max_submissions`` timestamps fall inside the trailing window.

This is an abuse deterrent, not a security control: it is scoped to one client
and clearing the client's storage resets it.
"""
import json
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from app.services.client_storage import ClientStorage

logger = logging.getLogger(__name__)

RATE_LIMIT_KEY = "contact_form_submissions"
DEFAULT_MAX_SUBMISSIONS = 3
DEFAULT_WINDOW_SECONDS = 60 * 60


@dataclass(frozen=True)
class RateLimitStatus:
    allowed: bool
    remaining: int
    reset_at: Optional[datetime] = None


def _from_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


class SubmissionRateLimiter:
    """Client-side quota of N submissions per rolling window."""

    def __init__(
        self,
        storage: ClientStorage,
        max_submissions: int = DEFAULT_MAX_SUBMISSIONS,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
        key: str = RATE_LIMIT_KEY,
    ):
        self.storage = storage
        self.max_submissions = max_submissions
        self.window_ms = window_seconds * 1000
        self.clock = clock
        self.key = key

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    async def _load(self) -> list[int]:
        raw = await self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            stamps = json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding unreadable rate-limit state under '{self.key}'")
            return []
        if not isinstance(stamps, list):
            return []
        return [int(s) for s in stamps if isinstance(s, (int, float))]

    def _in_window(self, stamps: list[int], now_ms: int) -> list[int]:
        return [s for s in stamps if now_ms - s < self.window_ms]

    async def check(self) -> RateLimitStatus:
        """Whether one more submission fits in the current window."""
        now_ms = self._now_ms()
        try:
            recent = self._in_window(await self._load(), now_ms)
        except Exception as e:
            logger.warning(f"Client storage unavailable - rate limiting skipped: {type(e).__name__}: {e}")
            return RateLimitStatus(allowed=True, remaining=self.max_submissions - 1)

        if len(recent) >= self.max_submissions:
            return RateLimitStatus(
                allowed=False,
                remaining=0,
                reset_at=_from_ms(min(recent) + self.window_ms),
            )
        return RateLimitStatus(allowed=True, remaining=self.max_submissions - len(recent) - 1)

    async def record(self) -> None:
        """Consume one unit of quota. Call only after a successful submission."""
        now_ms = self._now_ms()
        try:
            recent = self._in_window(await self._load(), now_ms)
            recent.append(now_ms)
            await self.storage.set_item(self.key, json.dumps(recent))
        except Exception as e:
            logger.warning(f"Failed to record submission timestamp: {type(e).__name__}: {e}")

    async def get_remaining_time(self) -> Optional[int]:
        """Minutes until the oldest in-window submission expires, or None if under quota."""
        now_ms = self._now_ms()
        try:
            recent = self._in_window(await self._load(), now_ms)
        except Exception as e:
            logger.warning(f"Client storage unavailable - reset time unknown: {type(e).__name__}: {e}")
            return None
        if len(recent) < self.max_submissions:
            return None
        return math.ceil((min(recent) + self.window_ms - now_ms) / 60000)

    async def get_info(self) -> dict:
        status = await self.check()
        return {
            "allowed": status.allowed,
            "remaining": status.remaining,
            "max_per_window": self.max_submissions,
            "window_minutes": self.window_ms // 60000,
            "reset_in_minutes": await self.get_remaining_time(),
            "reset_at": status.reset_at,
        }
