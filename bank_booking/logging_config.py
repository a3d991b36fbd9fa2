"""Structured logging configuration.

Purpose: JSON logs for the mock API, readable console logs for the terminal
client, both carrying the request id of the HTTP call being served.

Pattern: structlog with standard library integration and contextvars.
"""
import logging
import sys
import uuid

import structlog


def setup_structured_logging(log_level: str = "INFO", json_logs: bool = True):
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_logs: Render JSON lines; otherwise a human-readable console format
    """
    renderer = (
        structlog.processors.JSONRenderer() if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper())
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger (usually for __name__)."""
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Generate unique request ID."""
    return f"req-{uuid.uuid4().hex[:12]}"


class RequestIDMiddleware:
    """
    WSGI middleware giving every request an id.

    The id is taken from an incoming X-Request-ID header when present,
    bound into the structlog context for the duration of the request and
    echoed back in the response headers.
    """

    def __init__(self, app):
        self.app = app

    def __call__(self, environ, start_response):
        request_id = environ.get('HTTP_X_REQUEST_ID') or generate_request_id()
        environ['REQUEST_ID'] = request_id

        def custom_start_response(status, headers, exc_info=None):
            headers.append(('X-Request-ID', request_id))
            return start_response(status, headers, exc_info)

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            return self.app(environ, custom_start_response)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
