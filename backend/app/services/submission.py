"""Consultation submission pipeline.

Drives one inquiry from form data to a terminal state::

    Idle -> Validating -> RateLimitCheck -> Submitting -> NotifyingBestEffort -> Succeeded
                 \\               \\               \\
                  +---------------+---------------+--> Failed(reason)

Each step runs strictly after the previous one. Network calls happen only in
``Submitting`` (the create-inquiry call, retried with backoff on transient
errors) and ``NotifyingBestEffort`` (the notification function, whose outcome
never changes the result). Everything the pipeline touches arrives through a
``SubmissionContext``, so it runs the same behind the HTTP API and in tests.
"""
import asyncio
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, ClassVar, Mapping, Optional, Protocol, Union

from pydantic import ValidationError

from app.metrics import INQUIRY_STORE_ATTEMPTS, INQUIRY_SUBMISSIONS
from app.schemas.inquiry import ConsultationInquiryCreate
from app.services.draft_store import DraftStore
from app.services.email_service import _redact_email
from app.services.inquiry_rate_limiter import SubmissionRateLimiter
from app.services.inquiry_store import InquiryStore, InquiryStoreError
from app.services.inquiry_validation import first_invalid_field, normalize_form, validate_inquiry
from app.utils.retry import backoff_delay

logger = logging.getLogger(__name__)

CONTACT_FALLBACK_MESSAGE = (
    "We're having trouble submitting your request. "
    "Please contact us directly at contact@rarefindtalent.com."
)
VALIDATION_MESSAGE = "Please correct the highlighted fields and try again."
SERVER_ERROR_MESSAGE = "We couldn't submit your request right now. Please try again."
OFFLINE_MESSAGE = "You appear to be offline. Check your connection and try again."


class FailureReason(str, enum.Enum):
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"
    OFFLINE = "offline"


# Failures the user may retry by hand
MANUALLY_RETRYABLE = frozenset({FailureReason.SERVER_ERROR, FailureReason.OFFLINE})


@dataclass(frozen=True)
class Idle:
    kind: ClassVar[str] = "idle"


@dataclass(frozen=True)
class Validating:
    kind: ClassVar[str] = "validating"


@dataclass(frozen=True)
class RateLimitCheck:
    kind: ClassVar[str] = "rate_limit_check"


@dataclass(frozen=True)
class Submitting:
    attempt: int = 1
    kind: ClassVar[str] = "submitting"


@dataclass(frozen=True)
class NotifyingBestEffort:
    record: dict = field(default_factory=dict)
    kind: ClassVar[str] = "notifying"


@dataclass(frozen=True)
class Succeeded:
    record: dict = field(default_factory=dict)
    kind: ClassVar[str] = "succeeded"


@dataclass(frozen=True)
class Failed:
    reason: FailureReason
    message: str
    errors: dict = field(default_factory=dict)
    first_invalid_field: Optional[str] = None
    reset_at: Optional[datetime] = None
    retry_in_minutes: Optional[int] = None
    status: Optional[int] = None
    can_retry: bool = False
    kind: ClassVar[str] = "failed"


SubmissionState = Union[Idle, Validating, RateLimitCheck, Submitting, NotifyingBestEffort, Succeeded, Failed]


class Notifier(Protocol):
    async def dispatch(self, inquiry: Mapping[str, Any]) -> bool:
        ...


def _always_online() -> bool:
    return True


@dataclass
class SubmissionContext:
    """Everything one submission reads or writes."""

    form: dict[str, Any]
    rate_limiter: SubmissionRateLimiter
    drafts: DraftStore
    store: InquiryStore
    notifier: Notifier
    is_online: Callable[[], bool] = _always_online
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    manual_retries: int = 0


def build_inquiry_payload(form: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize validated form data into the row the store receives."""
    cleaned = {k: v for k, v in normalize_form(form).items() if v not in (None, "")}
    return ConsultationInquiryCreate.model_validate(cleaned).model_dump()


def _schema_errors(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for error in exc.errors():
        field_name = str(error["loc"][0]) if error["loc"] else "form"
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field_name, message)
    return errors


class SubmissionOrchestrator:
    """Runs the submission state machine for one form."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        backoff_factor: float = 2.0,
        max_delay: float = 5.0,
        max_manual_retries: int = 2,
        notification_timeout: float = 15.0,
        on_transition: Optional[Callable[[SubmissionState], None]] = None,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.backoff_factor = backoff_factor
        self.max_delay = max_delay
        self.max_manual_retries = max_manual_retries
        self.notification_timeout = notification_timeout
        self.on_transition = on_transition
        self.state: SubmissionState = Idle()
        self.history: list[SubmissionState] = [self.state]

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "SubmissionOrchestrator":
        return cls(
            max_attempts=settings.submission_max_attempts,
            base_delay=settings.submission_backoff_base_seconds,
            backoff_factor=settings.submission_backoff_factor,
            max_delay=settings.submission_backoff_max_seconds,
            max_manual_retries=settings.submission_max_manual_retries,
            notification_timeout=settings.notification_timeout_seconds,
            **kwargs,
        )

    @property
    def kinds(self) -> list[str]:
        return [state.kind for state in self.history]

    def _transition(self, state: SubmissionState) -> SubmissionState:
        logger.debug(f"Submission state {self.state.kind} -> {state.kind}")
        self.state = state
        self.history.append(state)
        if self.on_transition is not None:
            self.on_transition(state)
        return state

    async def submit(self, ctx: SubmissionContext) -> SubmissionState:
        """Run one end-to-end submission and return its terminal state."""
        if not isinstance(self.state, (Idle, Failed)):
            raise RuntimeError(f"Submission already in progress ({self.state.kind})")

        self._transition(Validating())
        form = normalize_form(ctx.form)
        errors = validate_inquiry(form)
        if not errors:
            try:
                payload = build_inquiry_payload(form)
            except ValidationError as e:
                errors = _schema_errors(e)
        if errors:
            return self._finish(Failed(
                reason=FailureReason.VALIDATION,
                message=VALIDATION_MESSAGE,
                errors=errors,
                first_invalid_field=first_invalid_field(errors),
            ))

        self._transition(RateLimitCheck())
        quota = await ctx.rate_limiter.check()
        if not quota.allowed:
            minutes = await ctx.rate_limiter.get_remaining_time()
            return self._finish(Failed(
                reason=FailureReason.RATE_LIMITED,
                message=_rate_limit_message(minutes),
                reset_at=quota.reset_at,
                retry_in_minutes=minutes,
                status=429,
            ))

        if not ctx.is_online():
            return self._finish(self._retryable_failure(ctx, FailureReason.OFFLINE, OFFLINE_MESSAGE))

        redacted = _redact_email(payload["email"])
        attempt = 0
        while True:
            attempt += 1
            self._transition(Submitting(attempt=attempt))
            try:
                record = await ctx.store.create_inquiry(payload)
                INQUIRY_STORE_ATTEMPTS.labels(result="created").inc()
                break
            except InquiryStoreError as e:
                INQUIRY_STORE_ATTEMPTS.labels(result="failed").inc()
                if not e.is_transient:
                    logger.warning(f"Inquiry from {redacted} rejected: status={e.status}, code={e.code}")
                    return self._finish(Failed(
                        reason=FailureReason.CLIENT_ERROR,
                        message=e.message,
                        status=e.status,
                    ))
                if attempt >= self.max_attempts:
                    logger.error(
                        f"Inquiry from {redacted} failed after {attempt} attempts: status={e.status}, {e.message}"
                    )
                    return self._finish(self._retryable_failure(
                        ctx, FailureReason.SERVER_ERROR, SERVER_ERROR_MESSAGE, status=e.status,
                    ))
                delay = backoff_delay(attempt, self.base_delay, self.backoff_factor, self.max_delay)
                logger.warning(
                    f"Inquiry store error (attempt {attempt}/{self.max_attempts}): "
                    f"status={e.status}, {e.message}. Retrying in {delay:.1f}s"
                )
                await ctx.sleep(delay)

        logger.info(f"Inquiry {record.get('id')} created for {redacted}")
        await ctx.rate_limiter.record()
        await ctx.drafts.clear()

        self._transition(NotifyingBestEffort(record=record))
        await self._notify(ctx, {**payload, **record})
        return self._finish(Succeeded(record=record))

    async def retry(self, ctx: SubmissionContext) -> SubmissionState:
        """Manual end-to-end retry after a retryable failure."""
        if not isinstance(self.state, Failed) or not self.state.can_retry:
            logger.info(f"Manual retry ignored in state {self.state.kind}")
            return self.state
        ctx.manual_retries += 1
        return await self.submit(ctx)

    async def _notify(self, ctx: SubmissionContext, inquiry: dict[str, Any]) -> None:
        try:
            await asyncio.wait_for(ctx.notifier.dispatch(inquiry), timeout=self.notification_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Notification timed out after {self.notification_timeout:.0f}s")
        except Exception as e:
            # The inquiry is already stored; notification problems stay in the logs
            logger.warning(f"Notification failed: {type(e).__name__}: {e}")

    def _retryable_failure(
        self,
        ctx: SubmissionContext,
        reason: FailureReason,
        message: str,
        status: Optional[int] = None,
    ) -> Failed:
        if ctx.manual_retries >= self.max_manual_retries:
            return Failed(reason=reason, message=CONTACT_FALLBACK_MESSAGE, status=status, can_retry=False)
        return Failed(reason=reason, message=message, status=status, can_retry=True)

    def _finish(self, state: SubmissionState) -> SubmissionState:
        outcome = state.reason.value if isinstance(state, Failed) else state.kind
        INQUIRY_SUBMISSIONS.labels(outcome=outcome).inc()
        return self._transition(state)


def _rate_limit_message(minutes: Optional[int]) -> str:
    if minutes is None:
        return "Rate limit exceeded. Please try again later."
    return f"Rate limit exceeded. Please try again in {minutes} minute{'s' if minutes != 1 else ''}."
