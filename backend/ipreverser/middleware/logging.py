"""
IP Reverser: Request Logging Middleware
=========================================

What:  One access-log line per request with method, path, status, and duration.
How:   Measures wall time around the downstream app and logs at a level
       chosen from the status code (5xx ERROR, 4xx WARNING, else INFO).
When:  Runs inside RequestIDMiddleware so the request ID is already set.

Log line:
    GET / 200 3.2ms [a1b2c3d4] from 10.0.0.7

    The peer shown is the transport address, not the proxy-derived client
    IP; the latter is logged by the reversal service itself.

Health probes (/health, /health/store) are not logged: they fire every few
seconds and would drown everything else.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ipreverser.middleware.request_id import request_id_var

logger = logging.getLogger("ipreverser.access")

SKIPPED_PATH_PREFIX = "/health"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Structured access logging for every non-probe request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path.startswith(SKIPPED_PATH_PREFIX):
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
