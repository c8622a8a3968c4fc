import inspect
import logging
import time
from typing import Awaitable, Callable

from sukejuru.apis.meta.models import StatusCheckValue

logger = logging.getLogger(__name__)


class StatusCheck:
    """Registry for status check functions."""

    _checks: dict[str, Callable[..., Awaitable[dict]]] = {}

    @classmethod
    def register(cls, name: str, func: Callable[..., Awaitable[dict]]):
        cls._checks[name] = func
        logger.debug(f"Registered status check: {name}")

    @classmethod
    async def run(cls, request=None) -> dict:
        """Run every registered check; a check that raises reports Down."""
        results = {}

        for name, check_func in cls._checks.items():
            started = time.monotonic()
            try:
                if "request" in inspect.signature(check_func).parameters:
                    check_result = await check_func(request)
                else:
                    check_result = await check_func()
                results[name] = {"status": check_result.get("status", StatusCheckValue.DOWN)}
            except Exception as e:
                logger.error(f"Status check failed for {name}: {e}")
                results[name] = {"status": StatusCheckValue.DOWN}

            logger.debug(f"Status check {name} took {(time.monotonic() - started) * 1000:.1f} ms")

        return results


def status_check(name: str):
    """
    Decorator to register a status check function.

    Usage:
        @status_check(name="database")
        async def database_status() -> dict:
            return {"status": StatusCheckValue.OK}
    """
    def decorator(func: Callable[..., Awaitable[dict]]):
        StatusCheck.register(name, func)
        return func
    return decorator
