import logging
import httpx
from fastapi import APIRouter, Response, Request, status
from starlette.concurrency import run_in_threadpool

from sukejuru.apis.meta.models import HealthCheck, StatusChecks, StatusCheckValue
from sukejuru.apis.meta.status import StatusCheck, status_check
from sukejuru.config import app_cfg
from sukejuru.db.base import db_connection_check


logger = logging.getLogger(__name__)

meta_router = APIRouter(
    redirect_slashes=True,
    tags=["meta"]
)

# Export and OAuth only; everything else keeps working without Google
_optional_services = ["google-oauth"]


@meta_router.get("/health", status_code=status.HTTP_200_OK, operation_id="health_check")
async def health_check() -> HealthCheck:
    """
    Simple health check for load balancers and Kubernetes probes.
    Returns 200 OK if service is running.
    """
    return HealthCheck(status=StatusCheckValue.OK)


@status_check(name="database")
async def database_status() -> dict:
    is_healthy = await run_in_threadpool(db_connection_check)
    return {"status": StatusCheckValue.OK if is_healthy else StatusCheckValue.DOWN}


@status_check(name="openai")
async def openai_status(request: Request) -> dict:
    """The chat model is usable once a key is configured and the client exists."""
    if not app_cfg.OPENAI_API_KEY:
        return {"status": StatusCheckValue.DISABLED}
    if getattr(request.app.state, "llm_client", None) is None:
        return {"status": StatusCheckValue.DOWN}
    return {"status": StatusCheckValue.OK}


@status_check(name="supabase-auth")
async def supabase_auth_status(request: Request) -> dict:
    """Check that the BaaS auth service answers its health endpoint."""
    if not app_cfg.NEXT_PUBLIC_SUPABASE_URL:
        return {"status": StatusCheckValue.DISABLED}

    url = f"{app_cfg.NEXT_PUBLIC_SUPABASE_URL.rstrip('/')}/auth/v1/health"
    try:
        response = await request.app.state.http_client.get(
            url,
            headers={"apikey": app_cfg.NEXT_PUBLIC_SUPABASE_ANON_KEY}
        )
        if response.status_code == 200:
            return {"status": StatusCheckValue.OK}
        return {"status": StatusCheckValue.DOWN}
    except httpx.HTTPError as e:
        logger.error(f"Auth service connection error: {e}")
        return {"status": StatusCheckValue.DOWN}


@status_check(name="google-oauth")
async def google_oauth_status() -> dict:
    """Check that the Google OAuth client and state persistence are configured."""
    if not app_cfg.GOOGLE_CLIENT_ID:
        return {"status": StatusCheckValue.DISABLED}
    if not app_cfg.GOOGLE_CLIENT_SECRET or not app_cfg.SUPABASE_SERVICE_ROLE_KEY:
        return {"status": StatusCheckValue.DOWN}
    return {"status": StatusCheckValue.OK}


@meta_router.get("/status", status_code=status.HTTP_200_OK, operation_id="status_check")
async def service_status(
    request: Request,
    response: Response,
) -> StatusChecks:
    """Status of every external dependency; 503 when a required one is down."""
    logger.debug('Requesting component statuses...')

    result = await StatusCheck.run(request)
    status_checks = StatusChecks(services=result)

    for service_name, service_status in status_checks.services.items():
        if service_name in _optional_services:
            continue

        if service_status.get("status") == StatusCheckValue.DOWN:
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            logger.warning(f"Service {service_name} is DOWN - returning 503")
            break

    return status_checks
