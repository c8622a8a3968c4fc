import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from langfuse import Langfuse

from sukejuru.config import app_cfg

logger = logging.getLogger(__name__)


class LangfuseSetupError(Exception):
    """Tracing is enabled but the Langfuse credentials do not authenticate."""


class LangfuseProvider:
    """Process-wide Langfuse client; a no-op client while tracing is disabled."""

    _instance: Optional[Langfuse] = None
    _lock = threading.Lock()

    @classmethod
    def get_client(cls) -> Langfuse:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls._connect()
        return cls._instance

    @staticmethod
    def _connect() -> Langfuse:
        client = Langfuse(
            public_key=app_cfg.LANGFUSE_PUBLIC_KEY,
            secret_key=app_cfg.LANGFUSE_SECRET_KEY,
            host=app_cfg.LANGFUSE_BASE_URL,
            tracing_enabled=app_cfg.LANGFUSE_TRACING_ENABLED,
        )
        if not app_cfg.LANGFUSE_TRACING_ENABLED:
            return client

        try:
            authenticated = client.auth_check()
        except Exception as e:
            raise LangfuseSetupError(f"Could not reach Langfuse at {app_cfg.LANGFUSE_BASE_URL}: {e}") from e
        if not authenticated:
            raise LangfuseSetupError("Langfuse rejected LANGFUSE_PUBLIC_KEY / LANGFUSE_SECRET_KEY")

        logger.info(f"Tracing chat completions to {app_cfg.LANGFUSE_BASE_URL}")
        return client


@contextmanager
def chat_generation(user_id: str, messages: List[dict]) -> Iterator:
    """
    Generation span around one assistant completion.

    Yields the span; callers record the reply with `span.update(output=...)`.
    """
    with LangfuseProvider.get_client().start_as_current_observation(
        as_type="generation",
        name="chat-completion",
        model=app_cfg.CHAT_MODEL,
        input=messages,
        model_parameters={"temperature": app_cfg.CHAT_TEMPERATURE},
        metadata={"user_id": user_id, "history_turns": max(len(messages) - 2, 0)},
    ) as generation:
        yield generation
