import logging
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from sukejuru.middleware import configure_middleware
from sukejuru.exception_handlers import (
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from sukejuru.lifespan import lifespan
from sukejuru.apis.assignments.router import assignments_router
from sukejuru.apis.chat.router import chat_router
from sukejuru.apis.courses.router import courses_router
from sukejuru.apis.events.router import events_router
from sukejuru.apis.google.router import google_router
from sukejuru.apis.interpreter.router import interpreter_router
from sukejuru.apis.meta.router import meta_router
from sukejuru.apis.profiles.router import profiles_router
from sukejuru.config import app_cfg

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

api = FastAPI(
    title="sukejuru API",
    description="Academic planner: calendar, todo list, course evaluations and a scheduling assistant",
    version="0.1.0",
    exception_handlers={
        StarletteHTTPException: http_exception_handler,
        RequestValidationError: validation_exception_handler,
        Exception: unhandled_exception_handler
    },
    lifespan=lifespan
)

api = configure_middleware(api)

for router in (
    meta_router,
    chat_router,
    interpreter_router,
    events_router,
    assignments_router,
    courses_router,
    profiles_router,
    google_router,
):
    api.include_router(router, prefix=app_cfg.API_ROUTER_PATH_PREFIX)

if __name__ == '__main__':
    uvicorn.run(
        app="sukejuru.main:api",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
