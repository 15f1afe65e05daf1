import json

import httpx
import pytest
from unittest.mock import AsyncMock

from app.services.email_service import (
    InquiryEmailService,
    ResendProvider,
    _redact_email,
    template_renderer,
)

INQUIRY = {
    "full_name": "Jane Doe",
    "email": "jane@x.com",
    "phone": "+1 555 123 4567",
    "company_name": "Acme <Labs>",
    "job_title": None,
    "inquiry_type": "contract_services",
    "message": "First line\nSecond line",
    "preferred_contact": "phone",
    "urgency": "within-week",
}


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class TestTemplates:
    def test_owner_text_lists_submitted_fields(self):
        service = InquiryEmailService(AsyncMock())
        text = service.build_owner_email(INQUIRY)["text"]
        assert "Full Name: Jane Doe" in text
        assert "Service Interest: In-house Contract Services" in text
        assert "Timeline: Within a Week" in text
        assert "Job Title" not in text
        assert "First line\nSecond line" in text
        assert "Error rendering" not in text

    def test_owner_html_escapes_user_input(self):
        html = InquiryEmailService(AsyncMock()).build_owner_email(INQUIRY)["html"]
        assert "Acme &lt;Labs&gt;" in html
        assert "Acme <Labs>" not in html

    def test_confirmation_addresses_submitter(self):
        email = InquiryEmailService(AsyncMock()).build_submitter_email(INQUIRY)
        assert email["to"] == "jane@x.com"
        assert email["subject"] == "Thank You for Contacting Rare Find Talent"
        assert "Dear Jane Doe" in email["text"]
        assert "In-house Contract Services" in email["html"]

    def test_owner_email_goes_to_the_firm(self):
        email = InquiryEmailService(AsyncMock()).build_owner_email(INQUIRY)
        assert email["to"] == "contact@rarefindtalent.com"
        assert email["subject"] == "New Contact Form Submission from Jane Doe"

    def test_missing_template_returns_fallback(self):
        assert "Error rendering" in template_renderer.render("nonexistent.html")


def test_redact_email():
    assert _redact_email("jane@x.com") == "j***@x.com"
    assert _redact_email("not-an-email") == "***"


# ---------------------------------------------------------------------------
# InquiryEmailService
# ---------------------------------------------------------------------------


class TestSendInquiryNotifications:
    @pytest.mark.asyncio
    async def test_both_emails_sent(self):
        provider = AsyncMock()
        provider.send.return_value = True

        result = await InquiryEmailService(provider).send_inquiry_notifications(INQUIRY)

        assert result == {"owner": True, "submitter": True}
        recipients = {call.kwargs["to"] for call in provider.send.await_args_list}
        assert recipients == {"contact@rarefindtalent.com", "jane@x.com"}

    @pytest.mark.asyncio
    async def test_one_failure_does_not_cancel_the_other(self):
        async def send(to, subject, html, text):
            if to == "jane@x.com":
                raise httpx.ConnectError("boom")
            return True

        provider = AsyncMock()
        provider.send.side_effect = send

        result = await InquiryEmailService(provider).send_inquiry_notifications(INQUIRY)

        assert result == {"owner": True, "submitter": False}

    @pytest.mark.asyncio
    async def test_rejected_emails_reported(self):
        provider = AsyncMock()
        provider.send.return_value = False
        result = await InquiryEmailService(provider).send_inquiry_notifications(INQUIRY)
        assert result == {"owner": False, "submitter": False}


# ---------------------------------------------------------------------------
# ResendProvider
# ---------------------------------------------------------------------------


class TestResendProvider:
    @pytest.mark.asyncio
    async def test_posts_message_to_resend(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "email-1"})

        provider = ResendProvider("re_test", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        assert await provider.send("jane@x.com", "Hi", "<p>Hi</p>", "Hi") is True
        assert seen["auth"] == "Bearer re_test"
        assert seen["body"]["to"] == ["jane@x.com"]
        assert seen["body"]["from"] == "Rare Find Talent <noreply@rarefindtalent.com>"

    @pytest.mark.asyncio
    async def test_error_response_returns_false(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(
            lambda request: httpx.Response(422, json={"message": "invalid from"})
        ))
        assert await ResendProvider("re_test", client=client).send("jane@x.com", "Hi", "", "") is False

    @pytest.mark.asyncio
    async def test_network_error_returns_false(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        assert await ResendProvider("re_test", client=client).send("jane@x.com", "Hi", "", "") is False
