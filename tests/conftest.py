"""
Shared fixtures: an in-memory store, a fake BaaS/Google upstream and a fake chat model.

Settings are read at import time, so the environment is prepared before the
application is imported.
"""
import json
import os
from pathlib import Path
from types import SimpleNamespace

DATA_DIR = Path(__file__).resolve().parent.parent / "data"

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["NEXT_PUBLIC_SUPABASE_URL"] = "https://baas.test"
os.environ["NEXT_PUBLIC_SUPABASE_ANON_KEY"] = "anon-key"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ["GOOGLE_CLIENT_ID"] = "client-id.apps.googleusercontent.com"
os.environ["GOOGLE_CLIENT_SECRET"] = "client-secret"
os.environ["LANGFUSE_TRACING_ENABLED"] = "false"
os.environ["DEFAULT_TIMEZONE"] = "Asia/Tokyo"
os.environ["COURSES_FILE"] = str(DATA_DIR / "courses.json")
os.environ["SEMESTERS_FILE"] = str(DATA_DIR / "semesters.json")

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import sukejuru.db.models  # noqa: E402,F401
from sukejuru.constants import (  # noqa: E402
    GOOGLE_CALENDAR_EVENTS_URL,
    GOOGLE_REVOKE_URL,
    GOOGLE_TOKEN_URL,
)
from sukejuru.db.base import Base, db_engine  # noqa: E402
from sukejuru.main import api  # noqa: E402

USER_ID = "user-1"
USER_EMAIL = "student@example.com"
OTHER_USER_ID = "user-2"

AUTH = {"Authorization": "Bearer valid-token"}
OTHER_AUTH = {"Authorization": "Bearer other-token"}

_USERS_BY_TOKEN = {
    "Bearer valid-token": {"id": USER_ID, "email": USER_EMAIL},
    "Bearer other-token": {"id": OTHER_USER_ID, "email": "other@example.com"},
}


class FakeUpstream:
    """MockTransport handler standing in for the BaaS auth service and Google's APIs."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.token_response = {"access_token": "fresh-access", "expires_in": 3600}
        self.failing_titles: set[str] = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if request.url.host == "baas.test":
            if request.url.path == "/auth/v1/health":
                return httpx.Response(200, json={"name": "GoTrue"})
            user = _USERS_BY_TOKEN.get(request.headers.get("authorization"))
            if request.url.path == "/auth/v1/user" and user:
                return httpx.Response(200, json=user)
            return httpx.Response(401, json={"msg": "invalid JWT"})

        if url.startswith(GOOGLE_TOKEN_URL):
            status_code = 400 if "error" in self.token_response else 200
            return httpx.Response(status_code, json=self.token_response)

        if url.startswith(GOOGLE_REVOKE_URL):
            return httpx.Response(200)

        if url.startswith(GOOGLE_CALENDAR_EVENTS_URL):
            body = json.loads(request.content)
            if body["summary"] in self.failing_titles:
                return httpx.Response(403, text="Calendar usage limits exceeded")
            return httpx.Response(200, json={"id": f"google-{len(self.calendar_requests())}", **body})

        return httpx.Response(404)

    def calls_to(self, prefix: str) -> list[httpx.Request]:
        return [request for request in self.requests if str(request.url).startswith(prefix)]

    def calendar_requests(self) -> list[httpx.Request]:
        return self.calls_to(GOOGLE_CALENDAR_EVENTS_URL)


class FakeCompletions:
    """Records chat completion calls and answers with a canned reply or error."""

    def __init__(self):
        self.calls: list[dict] = []
        self.reply: str | None = "Sure, I can help with that."
        self.error: Exception | None = None

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.reply))])


@pytest.fixture(autouse=True)
def database():
    Base.metadata.drop_all(bind=db_engine)
    Base.metadata.create_all(bind=db_engine)
    yield
    Base.metadata.drop_all(bind=db_engine)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def completions() -> FakeCompletions:
    return FakeCompletions()


@pytest.fixture
def client(upstream, completions) -> TestClient:
    api.state.http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    api.state.llm_client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return TestClient(api)
