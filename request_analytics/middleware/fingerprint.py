"""Persist a fingerprint of every request before it reaches the application."""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp

from request_analytics.analytics import RequestAnalytics
from request_analytics.errors import StoreError
from request_analytics.services.extractor import extract_fingerprint
from request_analytics.telemetry import observe_write

logger = logging.getLogger(__name__)

APP_STATE_KEY = "request_analytics"


class FingerprintMiddleware(BaseHTTPMiddleware):
    """Write a request fingerprint to ClickHouse, then forward the request.

    When the write fails the client receives a 500 response carrying the
    store error text and the wrapped application is not called.
    """

    def __init__(self, app: ASGIApp, analytics: Optional[RequestAnalytics] = None) -> None:
        super().__init__(app)
        self._analytics = analytics

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        analytics = self._resolve_analytics(request)
        fingerprint = extract_fingerprint(request)

        start_time = time.perf_counter()
        try:
            await run_in_threadpool(analytics.write, fingerprint)
        except StoreError as exc:
            observe_write(time.perf_counter() - start_time, exc.stage.value)
            logger.error(
                "Rejecting %s %s: fingerprint %s",
                fingerprint.method,
                fingerprint.request_uri,
                exc,
            )
            return PlainTextResponse(str(exc), status_code=500)

        observe_write(time.perf_counter() - start_time)
        return await call_next(request)

    def _resolve_analytics(self, request: Request) -> RequestAnalytics:
        """Return the configured component, falling back to ``app.state``."""

        if self._analytics is not None:
            return self._analytics

        analytics = getattr(request.app.state, APP_STATE_KEY, None)
        if analytics is None:
            raise RuntimeError("Request analytics has not been initialised.")
        return analytics
