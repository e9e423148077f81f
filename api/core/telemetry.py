"""Request telemetry: one canonical log line per request.

Each request gets an id (the caller's ``X-Request-Id`` when it is sane, a
fresh uuid otherwise) that is echoed back, bound to structlog's contextvars
for every log line emitted during the request, and stamped on the wide event.
"""

import os
import re
import time
import uuid
from typing import Any

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.logger import bind_contextvars, clear_contextvars, get_logger
from core.wide_event import clear_wide_event, get_wide_event, init_wide_event

logger = get_logger(__name__)

SERVICE_NAME = os.getenv("SERVICE_NAME", "habit-battles-api")
SERVICE_VERSION = os.getenv("SERVICE_VERSION", "0.1.0")

SLOW_REQUEST_MS = 1000

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(headers: Headers) -> str:
    """Reuse an upstream request id if well-formed, else mint one."""
    incoming = headers.get("x-request-id", "")
    if _REQUEST_ID_RE.match(incoming):
        return incoming
    return uuid.uuid4().hex


def should_emit(event: dict[str, Any], status: int | None, duration_ms: float) -> bool:
    """Errors, slow requests and authenticated requests are always logged.

    Fast anonymous successes (health probes, mostly) are dropped.
    """
    return (
        status is None
        or status >= 400
        or duration_ms > SLOW_REQUEST_MS
        or bool(event.get("user_id"))
    )


class RequestTimingMiddleware:
    """Times each request and emits its wide event when the response finishes."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        headers = Headers(raw=list(scope.get("headers", [])))
        path = scope.get("path", "")
        client = scope.get("client")
        request_id = resolve_request_id(headers)

        bind_contextvars(request_id=request_id)
        init_wide_event().update(
            service_name=SERVICE_NAME,
            service_version=SERVICE_VERSION,
            request_id=request_id,
            http_method=scope.get("method", "UNKNOWN"),
            http_path=path,
            http_client_ip=client[0] if client else "unknown",
            client_timezone=headers.get("x-timezone"),
        )

        response_status: int | None = None

        def elapsed_ms() -> float:
            return (time.perf_counter() - start_time) * 1000

        def finish(**fields: Any) -> None:
            event = get_wide_event()
            event.update(fields)
            if should_emit(event, response_status, event["duration_ms"]):
                logger.info("request.completed", **event)
            clear_wide_event()
            clear_contextvars()

        async def send_wrapper(message: Message) -> None:
            nonlocal response_status

            if message["type"] == "http.response.start":
                response_status = int(message.get("status", 0))
                message["headers"] = [
                    *message.get("headers", []),
                    (b"x-request-duration-ms", f"{elapsed_ms():.2f}".encode()),
                    (b"x-request-id", request_id.encode()),
                ]
                await send(message)
                return

            await send(message)
            if message["type"] == "http.response.body" and not message.get(
                "more_body", False
            ):
                route = scope.get("route")
                finish(
                    http_route=getattr(route, "path", None) or path,
                    http_status_code=response_status,
                    duration_ms=round(elapsed_ms(), 2),
                    outcome="success"
                    if response_status and response_status < 400
                    else "error",
                )

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            response_status = None
            finish(
                duration_ms=round(elapsed_ms(), 2),
                outcome="exception",
                exception_type=type(exc).__name__,
            )
            raise
