import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from openai import AsyncOpenAI

from sukejuru.config import app_cfg
from sukejuru.db.base import create_tables, db_engine

logger = logging.getLogger(__name__)


async def run_startup_dependencies(app: FastAPI) -> None:
    """Initialize all application dependencies at startup."""
    logger.info("Starting sukejuru API")

    db_url_display = app_cfg.DATABASE_URL.split("@")[1] if "@" in app_cfg.DATABASE_URL else app_cfg.DATABASE_URL
    logger.info(f"Database URL: {db_url_display}")
    create_tables()
    logger.info("Database tables ready")

    app.state.http_client = httpx.AsyncClient(
        verify=app_cfg.VERIFY_SSL,
        timeout=app_cfg.DEFAULT_TIMEOUT
    )
    logger.info("Shared HTTP client created")

    if not app_cfg.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY not set - chat requests will fail until it is configured")
    app.state.llm_client = AsyncOpenAI(
        api_key=app_cfg.OPENAI_API_KEY or "missing",
        base_url=app_cfg.OPENAI_BASE_URL
    )
    logger.info(f"LLM client created for model {app_cfg.CHAT_MODEL}")

    logger.info("API ready to accept requests")


async def shutdown_dependencies(app: FastAPI) -> None:
    """Cleanup all application dependencies at shutdown."""
    logger.info("Shutting down sukejuru API...")

    try:
        if hasattr(app.state, "http_client"):
            await app.state.http_client.aclose()
            logger.info("HTTP client closed")

        if hasattr(app.state, "llm_client"):
            await app.state.llm_client.close()
            logger.info("LLM client closed")

        db_engine.dispose()
        logger.info("Database connection pool disposed successfully")

    except Exception as e:
        logger.error(f"Error during shutdown cleanup: {e}", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan (startup and shutdown)."""
    try:
        await run_startup_dependencies(app)
        yield
        await shutdown_dependencies(app)

    except Exception as e:
        logger.error(f"Error in lifespan management: {e}", exc_info=True)
        raise
