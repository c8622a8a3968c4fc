from pydantic_settings import BaseSettings
from pydantic import field_validator


class ApiConfig(BaseSettings):
    # Application Configuration
    APP_NAME: str = "sukejuru"
    API_ROUTER_PATH_PREFIX: str = "/api"
    DEFAULT_TIMEZONE: str = "Asia/Tokyo"
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    # Chat model configuration
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str | None = None
    CHAT_MODEL: str = "gpt-4o-mini"
    CHAT_TEMPERATURE: float = 0.4
    CHAT_HISTORY_LIMIT: int = 20

    # Relational store (Supabase Postgres in production)
    DATABASE_URL: str = "sqlite:///./sukejuru.db"

    # BaaS auth service
    NEXT_PUBLIC_SUPABASE_URL: str = ""
    NEXT_PUBLIC_SUPABASE_ANON_KEY: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # Google Calendar bridge
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = "http://localhost:3000/api/auth/google/callback"
    GOOGLE_CALENDAR_SCOPE: str = "https://www.googleapis.com/auth/calendar.events"
    GOOGLE_EXPORT_CONCURRENCY: int = 5

    # Static reference data, re-read on every request
    COURSES_FILE: str = "data/courses.json"
    SEMESTERS_FILE: str = "data/semesters.json"

    # Trailing window used by the cancel_last_change command
    CANCEL_LAST_CHANGE_MINUTES: int = 10

    VERIFY_SSL: bool = True
    DEFAULT_TIMEOUT: int | None = 30

    # Langfuse Tracing Configuration
    LANGFUSE_TRACING_ENABLED: bool = False
    LANGFUSE_SECRET_KEY: str = ""
    LANGFUSE_PUBLIC_KEY: str = ""
    LANGFUSE_BASE_URL: str = "http://localhost:3000"

    @field_validator("VERIFY_SSL", "LANGFUSE_TRACING_ENABLED", mode="before")
    def convert_bool_strings(cls, value):
        if isinstance(value, str):
            if value.lower() == "true":
                return True
            elif value.lower() == "false":
                return False
        return value

    class Config:
        case_sensitive = True
        extra = "allow"


app_cfg = ApiConfig(_env_file=".env")
