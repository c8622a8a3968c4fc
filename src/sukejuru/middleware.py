import logging
import time
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from asgi_correlation_id import correlation_id
from asgi_correlation_id.middleware import CorrelationIdMiddleware

from sukejuru.config import app_cfg

logger = logging.getLogger(__name__)

# Probe endpoints polled by the load balancer; logged at debug only
_QUIET_PATHS = ("/health",)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One access log line per request with the request id and elapsed time."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        path = request.url.path
        level = logging.DEBUG if path.endswith(_QUIET_PATHS) else logging.INFO
        logger.log(
            level,
            f"request_id={correlation_id.get() or '-'} "
            f"client_ip={client_ip(request)} "
            f"{request.method} {path} "
            f"status={response.status_code} "
            f"elapsed_ms={elapsed_ms:.1f}"
        )
        return response


def client_ip(request: Request) -> str:
    """The caller's address; the first X-Forwarded-For hop wins behind a proxy."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else "unknown"


def configure_middleware(api: FastAPI) -> FastAPI:
    api.add_middleware(AccessLogMiddleware)
    api.add_middleware(
        CORSMiddleware,
        allow_origins=app_cfg.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"]
    )
    api.add_middleware(CorrelationIdMiddleware)

    logger.info(f"Middleware configured (CORS origins: {app_cfg.CORS_ALLOW_ORIGINS})")
    return api
