"""Inquiry emails: template rendering and the Resend HTTP provider."""
import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape
from jinja2.exceptions import TemplateError

from app.config import get_settings
from app.metrics import EMAILS_SENT
from app.schemas.inquiry import INQUIRY_TYPE_LABELS, URGENCY_LABELS

logger = logging.getLogger(__name__)


def _redact_email(email: str) -> str:
    """Redact email address for safe logging (e.g., u***@example.com)."""
    try:
        local, domain = email.split("@")
        return f"{local[0]}***@{domain}" if local else f"***@{domain}"
    except (ValueError, IndexError):
        return "***"


TEMPLATE_DIR = Path(__file__).parent.parent / "templates" / "emails"


class TemplateRenderer:
    """Jinja2 template renderer for email templates."""

    def __init__(self):
        self._env: Optional[Environment] = None

    def _get_env(self) -> Environment:
        if self._env is None:
            if TEMPLATE_DIR.exists():
                self._env = Environment(
                    loader=FileSystemLoader(str(TEMPLATE_DIR)),
                    autoescape=select_autoescape(['html', 'xml']),
                )
            else:
                logger.warning(f"Email template directory not found: {TEMPLATE_DIR}")
                self._env = Environment(autoescape=select_autoescape(['html', 'xml']))
        return self._env

    def render(self, template_name: str, **context) -> str:
        try:
            template = self._get_env().get_template(template_name)
            return template.render(**context)
        except TemplateError as e:
            logger.error(f"Failed to render template {template_name}: {e}")
            return f"Error rendering email template: {template_name}"


template_renderer = TemplateRenderer()


class EmailProvider(ABC):
    """Abstract base class for email providers."""

    @abstractmethod
    async def send(self, to: str, subject: str, html: str, text: str) -> bool:
        """Send an email. Returns True if the provider accepted it."""
        pass


class ResendProvider(EmailProvider):
    """Resend HTTP API provider."""

    def __init__(self, api_key: str, client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key
        self._client = client

    async def send(self, to: str, subject: str, html: str, text: str) -> bool:
        settings = get_settings()
        redacted = _redact_email(to)
        payload = {
            "from": f"{settings.email_from_name} <{settings.email_from_address}>",
            "to": [to],
            "subject": subject,
            "html": html,
            "text": text,
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        logger.info(f"Resend: sending email to {redacted}, subject='{subject}'")
        try:
            if self._client is not None:
                response = await self._client.post(settings.resend_api_url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=settings.email_timeout_seconds) as client:
                    response = await client.post(settings.resend_api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Resend: failed to send email to {redacted}: {type(e).__name__}: {e}")
            return False

        if response.is_error:
            logger.error(f"Resend: rejected email to {redacted}: status={response.status_code}, body={response.text[:200]}")
            return False
        logger.info(f"Resend: email accepted for {redacted}")
        return True


class InquiryEmailService:
    """Builds and sends the owner and submitter emails for one inquiry."""

    def __init__(self, provider: EmailProvider):
        self.provider = provider

    def _context(self, inquiry: Mapping[str, Any]) -> dict[str, Any]:
        inquiry_type = inquiry.get("inquiry_type") or ""
        urgency = inquiry.get("urgency") or ""
        return {
            "inquiry": inquiry,
            "inquiry_type_label": INQUIRY_TYPE_LABELS.get(inquiry_type, inquiry_type),
            "urgency_label": URGENCY_LABELS.get(urgency, urgency),
            "message_lines": (inquiry.get("message") or "").splitlines(),
            "app_name": "Rare Find Talent",
            "contact_email": get_settings().owner_email,
        }

    def build_owner_email(self, inquiry: Mapping[str, Any]) -> dict[str, str]:
        context = self._context(inquiry)
        return {
            "to": get_settings().owner_email,
            "subject": f"New Contact Form Submission from {inquiry.get('full_name')}",
            "html": template_renderer.render("inquiry_owner.html", **context),
            "text": template_renderer.render("inquiry_owner.txt", **context),
        }

    def build_submitter_email(self, inquiry: Mapping[str, Any]) -> dict[str, str]:
        context = self._context(inquiry)
        return {
            "to": str(inquiry.get("email")),
            "subject": "Thank You for Contacting Rare Find Talent",
            "html": template_renderer.render("inquiry_confirmation.html", **context),
            "text": template_renderer.render("inquiry_confirmation.txt", **context),
        }

    async def send_inquiry_notifications(self, inquiry: Mapping[str, Any]) -> dict[str, bool]:
        """Send both emails concurrently. One failing never cancels the other."""
        emails = {
            "owner": self.build_owner_email(inquiry),
            "submitter": self.build_submitter_email(inquiry),
        }
        results = await asyncio.gather(
            *(self.provider.send(**email) for email in emails.values()),
            return_exceptions=True,
        )

        outcome: dict[str, bool] = {}
        for kind, result in zip(emails, results):
            if isinstance(result, Exception):
                logger.error(f"Email '{kind}' raised {type(result).__name__}: {result}")
                sent = False
            else:
                sent = bool(result)
            EMAILS_SENT.labels(kind=kind, result="sent" if sent else "failed").inc()
            outcome[kind] = sent

        failed = [kind for kind, sent in outcome.items() if not sent]
        if failed:
            logger.error(f"Some emails failed to send: {', '.join(failed)}")
        return outcome
