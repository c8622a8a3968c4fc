from typing import Dict
from pydantic import BaseModel


class HealthCheck(BaseModel):
    """Response model to inform health status of API (is it up?)"""
    status: str = "OK"


class StatusCheckValue:
    """Allowed values for each service status"""
    OK: str = "OK"
    DOWN: str = "Down"
    DISABLED: str = "Disabled"


class StatusChecks(BaseModel):
    """Status of the database, the chat model, the auth service and the Google OAuth client"""
    services: Dict[str, Dict[str, str]]
