"""Per-request correlation ID and access log."""

import time
import uuid

import structlog
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from storeledger.core.logging import get_logger, set_request_id

REQUEST_ID_HEADER = "x-request-id"

# Polled by load balancers; logging every hit only adds noise
QUIET_PATHS = frozenset({"/health"})

# Requests that can move ledger balances
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class RequestLogMiddleware:
    """
    Bind a request ID for the duration of a request and log its outcome.

    The ID comes from the incoming X-Request-ID header when a proxy already
    assigned one, otherwise a fresh UUID. It is echoed back on the response.
    Writes are logged at info, reads at debug.
    """

    def __init__(self, app: ASGIApp):
        self.app = app
        self.logger = get_logger(__name__)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        structlog.contextvars.clear_contextvars()

        request_id = None
        for name, value in scope.get("headers", []):
            if name.lower() == REQUEST_ID_HEADER.encode():
                request_id = value.decode("latin1")
                break
        request_id = request_id or str(uuid.uuid4())
        set_request_id(request_id)

        method = scope["method"]
        path = scope["path"]
        quiet = path in QUIET_PATHS
        log = self.logger.info if method in WRITE_METHODS else self.logger.debug
        started = time.perf_counter()
        status_code = None

        if not quiet:
            log("request.start", method=method, path=path)

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if not quiet:
                log(
                    "request.complete",
                    method=method,
                    path=path,
                    status_code=status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000, 1),
                )
