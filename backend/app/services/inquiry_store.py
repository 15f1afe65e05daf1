"""Create-inquiry call against the store that owns inquiry records.

Two backends share one contract: ``create_inquiry(payload)`` returns the
created row (with its assigned ``id`` and ``created_at``) or raises
``InquiryStoreError`` carrying an HTTP-like status and a store error code.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import httpx
from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import AsyncSessionLocal
from app.models.contact_inquiry import ContactInquiry

logger = logging.getLogger(__name__)

INQUIRY_COLUMNS = (
    "full_name",
    "email",
    "phone",
    "company_name",
    "job_title",
    "inquiry_type",
    "message",
    "preferred_contact",
    "urgency",
)


class InquiryStoreError(Exception):
    """A create-inquiry call that did not produce a record.

    ``status`` is None when no response was received (network failure).
    """

    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    @property
    def is_transient(self) -> bool:
        """Worth retrying: no response, a server error, or throttling."""
        return self.status is None or self.status >= 500 or self.status == 429


class InquiryStore(ABC):
    @abstractmethod
    async def create_inquiry(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert one inquiry and return the created row."""
        pass

    @abstractmethod
    async def list_inquiries(self, limit: int = 100) -> list[dict[str, Any]]:
        """Stored inquiries, newest first."""
        pass


class HostedInquiryStore(InquiryStore):
    """Hosted relational store reached over its REST interface."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "contact_inquiries",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout
        self._client = client

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    async def create_inquiry(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/rest/v1/{self.table}"
        row = {column: payload.get(column) for column in INQUIRY_COLUMNS}
        try:
            if self._client is not None:
                response = await self._client.post(url, json=[row], headers=self._headers(), timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=[row], headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"Hosted store unreachable: {type(e).__name__}: {e}")
            raise InquiryStoreError(f"Could not reach the inquiry store: {e}") from e

        if response.is_error:
            raise self._error_from_response(response)

        data = response.json()
        if isinstance(data, list):
            if not data:
                raise InquiryStoreError("Inquiry store returned no row", status=500)
            data = data[0]
        return data

    async def list_inquiries(self, limit: int = 100) -> list[dict[str, Any]]:
        url = f"{self.base_url}/rest/v1/{self.table}"
        params = {"select": "*", "order": "created_at.desc", "limit": str(limit)}
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, headers=self._headers(), timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"Hosted store unreachable: {type(e).__name__}: {e}")
            raise InquiryStoreError(f"Could not reach the inquiry store: {e}") from e

        if response.is_error:
            raise self._error_from_response(response)
        data = response.json()
        return data if isinstance(data, list) else []

    @staticmethod
    def _error_from_response(response: httpx.Response) -> InquiryStoreError:
        code = None
        message = f"Inquiry store responded with {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = body.get("code")
            message = body.get("message") or body.get("error") or message
        logger.error(
            f"Inquiry store error: status={response.status_code}, code={code}, message={message}"
        )
        return InquiryStoreError(message, status=response.status_code, code=code)


class DatabaseInquiryStore(InquiryStore):
    """Writes inquiries through SQLAlchemy into ``contact_inquiries``."""

    def __init__(self, session_factory: Callable[[], AsyncSession] = AsyncSessionLocal):
        self.session_factory = session_factory

    async def create_inquiry(self, payload: dict[str, Any]) -> dict[str, Any]:
        values = {column: payload.get(column) for column in INQUIRY_COLUMNS}
        values["preferred_contact"] = values["preferred_contact"] or "email"
        values["urgency"] = values["urgency"] or "flexible"
        try:
            async with self.session_factory() as session:
                inquiry = ContactInquiry(**values)
                session.add(inquiry)
                await session.commit()
                await session.refresh(inquiry)
        except IntegrityError as e:
            logger.error(f"Rejected inquiry insert: {type(e).__name__}: {e}")
            raise InquiryStoreError("Inquiry was rejected by the database", status=409, code="23505") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to save inquiry: {type(e).__name__}: {e}")
            raise InquiryStoreError("Failed to save inquiry", status=500) from e
        return _row(inquiry)

    async def list_inquiries(self, limit: int = 100) -> list[dict[str, Any]]:
        query = select(ContactInquiry).order_by(desc(ContactInquiry.created_at)).limit(limit)
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                inquiries = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list inquiries: {type(e).__name__}: {e}")
            raise InquiryStoreError("Failed to list inquiries", status=500) from e
        return [_row(inquiry) for inquiry in inquiries]


def _row(inquiry: ContactInquiry) -> dict[str, Any]:
    return {
        "id": str(inquiry.id),
        "created_at": inquiry.created_at.isoformat(),
        **{column: getattr(inquiry, column) for column in INQUIRY_COLUMNS},
    }


def get_inquiry_store() -> InquiryStore:
    settings = get_settings()
    if settings.inquiry_store_backend == "hosted":
        if not settings.supabase_url:
            raise RuntimeError("SUPABASE_URL not configured - hosted inquiry store unavailable")
        return HostedInquiryStore(
            settings.supabase_url,
            settings.supabase_anon_key,
            table=settings.inquiries_table,
            timeout=settings.store_request_timeout_seconds,
        )
    return DatabaseInquiryStore()
