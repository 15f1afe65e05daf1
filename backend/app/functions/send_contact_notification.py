"""Contact-notification function.

A standalone ASGI app deployed next to the hosted store and called by the
submission pipeline after an inquiry is stored. It emails the firm and the
submitter. Run it on its own with::

    uvicorn app.functions.send_contact_notification:function_app
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from app.config import get_settings
from app.services.email_service import InquiryEmailService, ResendProvider, _redact_email

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}

REQUIRED_FIELDS = ("full_name", "email", "inquiry_type")
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

function_app = FastAPI(
    title="send-contact-notification",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


def _json(status_code: int, content: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


def get_email_service() -> InquiryEmailService:
    settings = get_settings()
    return InquiryEmailService(ResendProvider(settings.resend_api_key))


@function_app.api_route("/", methods=ALL_METHODS)
async def send_contact_notification(request: Request) -> Response:
    try:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        if request.method != "POST":
            return _json(405, {"error": "Method not allowed"})

        form = await request.json()
        if not isinstance(form, dict) or not all(form.get(name) for name in REQUIRED_FIELDS):
            return _json(400, {"error": "Missing required fields"})

        if not get_settings().resend_api_key:
            logger.error("RESEND_API_KEY not configured")
            return _json(200, {
                "success": True,
                "message": "Form submitted successfully. Email notifications are pending configuration.",
            })

        results = await get_email_service().send_inquiry_notifications(form)
        logger.info(
            f"Inquiry notifications for {_redact_email(str(form['email']))}: "
            + ", ".join(f"{kind}={'sent' if sent else 'failed'}" for kind, sent in results.items())
        )
        return _json(200, {
            "success": True,
            "message": "Form submitted successfully. Email notifications sent.",
        })
    except Exception as e:
        logger.error(f"Error processing form: {type(e).__name__}: {e}")
        return _json(500, {
            "error": "An error occurred processing your request",
            "details": str(e),
        })
