"""Attach request and ledger context to Sentry events."""

import sentry_sdk
from starlette.types import ASGIApp, Receive, Scope, Send

from storeledger.core.logging import get_request_id

# Path prefixes whose writes trigger a ledger cascade
LEDGER_WRITE_PREFIXES = ("/sales", "/returns", "/ledger")


class SentryContextMiddleware:
    """
    Tag Sentry events with the request ID bound by RequestLogMiddleware.

    Writes to routes that cascade ledger days also carry a `ledger_write`
    tag.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "")
        path = scope.get("path", "")
        request_id = get_request_id()

        sentry_sdk.set_tag("request_id", request_id)
        sentry_sdk.set_tag(
            "ledger_write",
            method in {"POST", "PUT", "PATCH", "DELETE"} and path.startswith(LEDGER_WRITE_PREFIXES),
        )
        sentry_sdk.set_context(
            "request",
            {"method": method, "path": path, "request_id": request_id},
        )

        await self.app(scope, receive, send)
