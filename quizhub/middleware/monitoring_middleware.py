import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from quizhub.core.logging import get_logger

logger = get_logger(__name__)

UNMONITORED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def _client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assigns a correlation id to each request and logs request/response pairs"""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        path = request.url.path
        monitored = path not in UNMONITORED_PATHS
        context = {"correlation_id": correlation_id, "method": request.method, "endpoint": path}
        started = time.perf_counter()

        if monitored:
            client_ip = _client_ip(request)
            logger.info(
                "%s %s from %s", request.method, path, client_ip,
                extra={**context, "client_ip": client_ip, "event_type": "api_request"}
            )

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id

        if monitored:
            elapsed_ms = (time.perf_counter() - started) * 1000
            if response.status_code >= 500:
                level = logging.ERROR
            elif response.status_code >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO
            logger.log(
                level,
                "%s %s -> %s in %.2fms", request.method, path, response.status_code, elapsed_ms,
                extra={
                    **context,
                    "status_code": response.status_code,
                    "execution_time_ms": round(elapsed_ms, 2),
                    "event_type": "api_response",
                }
            )

        return response
