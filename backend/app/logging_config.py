"""Logging for the consultation intake API.

Services log through the stdlib ``logging`` module; structlog renders every
record, stdlib or not, as one JSON line in production or a console line in
development. The request middleware binds ``request_id`` and ``client_id``
into the structlog context so each line of a submission can be traced back to
the browser that sent it. Submitter email addresses are masked before a line
is written.
"""

import logging
import re
import sys

import structlog

from app.config import get_settings

EMAIL_PATTERN = re.compile(r"\b([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b")

# Chatty per-request loggers from the HTTP client and the driver layer
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def mask_email(text: str) -> str:
    return EMAIL_PATTERN.sub(r"\1***@\2", text)


def redact_emails(logger, method_name, event_dict):
    """Mask addresses in the event and any string fields (jane@x.com -> j***@x.com)."""
    for key, value in event_dict.items():
        if isinstance(value, str) and "@" in value:
            event_dict[key] = mask_email(value)
    return event_dict


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for /health; load balancers poll it constantly."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args and isinstance(record.args, tuple) and len(record.args) >= 3:
            path = record.args[2]
            if isinstance(path, str) and path.startswith("/health"):
                return False
        return True


def configure_logging() -> None:
    settings = get_settings()
    is_production = settings.app_env == "production"
    log_level = logging.DEBUG if settings.app_debug else logging.INFO

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if is_production:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Redaction runs last so stdlib records and exception text are covered too
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            redact_emails,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())
