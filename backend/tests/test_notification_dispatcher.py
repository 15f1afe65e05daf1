import asyncio
import json

import httpx
import pytest
from unittest.mock import MagicMock, patch

from app.services import notification_dispatcher
from app.services.notification_dispatcher import NotificationDispatcher, get_notification_dispatcher

ENDPOINT = "https://fn.example.test/functions/v1/send-contact-notification"

INQUIRY = {
    "id": "b3c1",
    "created_at": "2026-01-01T00:00:00Z",
    "full_name": "Jane Doe",
    "email": "jane@x.com",
    "inquiry_type": "consultation",
    "preferred_contact": "email",
    "urgency": "flexible",
}


def _dispatcher(handler, timeout=15.0) -> NotificationDispatcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NotificationDispatcher(ENDPOINT, "anon-key", timeout=timeout, client=client)


def test_request_omits_store_assigned_fields():
    request = NotificationDispatcher(ENDPOINT, "anon-key").build_request(INQUIRY)

    body = json.loads(request.content)
    assert request.method == "POST"
    assert str(request.url) == ENDPOINT
    assert request.headers["authorization"] == "Bearer anon-key"
    assert "id" not in body
    assert "created_at" not in body
    assert body["full_name"] == "Jane Doe"


@pytest.mark.asyncio
async def test_dispatch_succeeds_on_200():
    dispatcher = _dispatcher(lambda request: httpx.Response(200, json={"message": "ok"}))
    assert await dispatcher.dispatch(INQUIRY) is True


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [201, 400, 405, 500])
async def test_dispatch_reports_any_other_status_as_failure(status):
    dispatcher = _dispatcher(lambda request: httpx.Response(status, json={"error": "nope"}))
    assert await dispatcher.dispatch(INQUIRY) is False


@pytest.mark.asyncio
async def test_dispatch_swallows_network_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    assert await _dispatcher(handler).dispatch(INQUIRY) is False


@pytest.mark.asyncio
async def test_dispatch_times_out():
    async def slow_send(request):
        await asyncio.sleep(1)
        return httpx.Response(200)

    dispatcher = NotificationDispatcher(ENDPOINT, "anon-key", timeout=0.05)
    with patch.object(dispatcher, "_send", side_effect=slow_send):
        assert await dispatcher.dispatch(INQUIRY) is False


@pytest.mark.asyncio
async def test_dispatch_skipped_without_endpoint():
    dispatcher = NotificationDispatcher("", "anon-key")
    assert await dispatcher.dispatch(INQUIRY) is False


def test_factory_reads_settings():
    settings = MagicMock(
        notification_endpoint=ENDPOINT,
        supabase_anon_key="anon-key",
        notification_timeout_seconds=15,
    )
    with patch.object(notification_dispatcher, "get_settings", return_value=settings):
        dispatcher = get_notification_dispatcher()
    assert dispatcher.endpoint_url == ENDPOINT
    assert dispatcher.timeout == 15
