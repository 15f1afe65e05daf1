import logging
import secrets
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, Request, Response, Security, status
from fastapi.security import APIKeyHeader
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.schemas.inquiry import (
    ConsultationInquiryRead,
    DraftResponse,
    DraftSaveRequest,
    DraftSaveResponse,
    RateLimitInfo,
    StoredInquiry,
)
from app.services.client_storage import ClientStorage, get_client_storage
from app.services.draft_store import DRAFT_RESTORED_NOTICE, DraftStore
from app.services.inquiry_rate_limiter import SubmissionRateLimiter
from app.services.inquiry_store import InquiryStore, InquiryStoreError, get_inquiry_store
from app.services.manual_retries import ManualRetryCounter
from app.services.notification_dispatcher import NotificationDispatcher, get_notification_dispatcher
from app.services.submission import (
    Failed,
    FailureReason,
    MANUALLY_RETRYABLE,
    SubmissionContext,
    SubmissionOrchestrator,
    Succeeded,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inquiries", tags=["inquiries"])

admin_key_header = APIKeyHeader(name="X-Admin-Key", auto_error=False)

FAILURE_STATUS = {
    FailureReason.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    FailureReason.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    FailureReason.CLIENT_ERROR: status.HTTP_400_BAD_REQUEST,
    FailureReason.SERVER_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    FailureReason.OFFLINE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_client_id(request: Request, x_client_id: Optional[str] = Header(None)) -> str:
    """The browser's client id, falling back to its address."""
    if x_client_id:
        return x_client_id.strip()[:128]
    return request.client.host if request.client else "unknown"


def get_storage(client_id: str = Depends(get_client_id)) -> ClientStorage:
    return get_client_storage(client_id)


def get_rate_limiter(storage: ClientStorage = Depends(get_storage)) -> SubmissionRateLimiter:
    settings = get_settings()
    return SubmissionRateLimiter(
        storage,
        max_submissions=settings.inquiry_rate_limit_max,
        window_seconds=settings.inquiry_rate_limit_window_minutes * 60,
    )


def get_draft_store(storage: ClientStorage = Depends(get_storage)) -> DraftStore:
    return DraftStore(storage)


def get_retry_counter(storage: ClientStorage = Depends(get_storage)) -> ManualRetryCounter:
    return ManualRetryCounter(storage)


def require_admin_key(api_key: Optional[str] = Security(admin_key_header)) -> None:
    expected = get_settings().admin_api_key
    if not expected:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inquiry listing is disabled")
    if not api_key or not secrets.compare_digest(api_key, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin key")


def _failure_response(state: Failed) -> JSONResponse:
    status_code = FAILURE_STATUS[state.reason]
    if state.reason is FailureReason.CLIENT_ERROR and state.status and 400 <= state.status < 500:
        status_code = state.status
    headers = {}
    if state.retry_in_minutes is not None:
        headers["Retry-After"] = str(state.retry_in_minutes * 60)
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content={
            "detail": state.message,
            "reason": state.reason.value,
            "errors": state.errors,
            "first_invalid_field": state.first_invalid_field,
            "reset_at": state.reset_at.isoformat() if state.reset_at else None,
            "retry_in_minutes": state.retry_in_minutes,
            "can_retry": state.can_retry,
        },
    )


@router.post("", response_model=ConsultationInquiryRead, status_code=status.HTTP_201_CREATED)
async def submit_inquiry(
    form: dict[str, Any] = Body(...),
    rate_limiter: SubmissionRateLimiter = Depends(get_rate_limiter),
    drafts: DraftStore = Depends(get_draft_store),
    store: InquiryStore = Depends(get_inquiry_store),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
    retries: ManualRetryCounter = Depends(get_retry_counter),
):
    """Submit a consultation request. No authentication required.

    A resubmission after a retryable failure counts as a manual retry; once
    the limit is reached the response points the user at direct contact.
    """
    ctx = SubmissionContext(
        form=form,
        rate_limiter=rate_limiter,
        drafts=drafts,
        store=store,
        notifier=notifier,
        manual_retries=await retries.load(),
    )
    orchestrator = SubmissionOrchestrator.from_settings(get_settings())
    state = await orchestrator.submit(ctx)
    if isinstance(state, Succeeded):
        await retries.clear()
        return state.record
    if state.reason in MANUALLY_RETRYABLE:
        await retries.increment()
    logger.info(f"Consultation submission failed: {state.reason.value}")
    return _failure_response(state)


@router.get("", response_model=List[StoredInquiry], dependencies=[Depends(require_admin_key)])
async def list_inquiries(
    limit: int = Query(100, ge=1, le=500),
    store: InquiryStore = Depends(get_inquiry_store),
):
    """Stored consultation requests, newest first. Staff only."""
    try:
        return await store.list_inquiries(limit=limit)
    except InquiryStoreError as e:
        logger.error(f"Failed to list inquiries: status={e.status}, {e.message}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Inquiries are unavailable right now",
        ) from e


@router.get("/rate-limit", response_model=RateLimitInfo)
async def rate_limit_info(rate_limiter: SubmissionRateLimiter = Depends(get_rate_limiter)):
    return await rate_limiter.get_info()


@router.get("/draft", response_model=DraftResponse)
async def restore_draft(drafts: DraftStore = Depends(get_draft_store)):
    draft = await drafts.restore()
    if draft is None:
        return DraftResponse(draft=None, restored=False)
    return DraftResponse(draft=draft, restored=True, notice=DRAFT_RESTORED_NOTICE)


@router.put("/draft", response_model=DraftSaveResponse)
async def save_draft(data: DraftSaveRequest, drafts: DraftStore = Depends(get_draft_store)):
    return DraftSaveResponse(saved=await drafts.save(data.form))


@router.delete("/draft", status_code=status.HTTP_204_NO_CONTENT)
async def discard_draft(drafts: DraftStore = Depends(get_draft_store)):
    await drafts.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
