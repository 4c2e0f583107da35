"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, Field

from app.services.project_service import iso_utc

router = APIRouter()

HEALTH_VERSION = "1.0.0"
SERVICE_STARTED_AT = datetime.now(timezone.utc)


def _uptime_seconds(now: datetime) -> int:
    return max(0, int((now - SERVICE_STARTED_AT).total_seconds()))


def _uptime_human(seconds: int) -> str:
    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)
    if days > 0:
        return f"{days}d {hours}h {minutes}m {secs}s"
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


class HealthResponse(BaseModel):
    """GET /api/health response."""

    model_config = ConfigDict(extra="forbid")
    status: Annotated[str, Field(description="Always 'ok'")]
    version: Annotated[str, Field(description="Semver MAJOR.MINOR.PATCH")]
    timestamp: Annotated[str, Field(description="ISO8601 UTC")]
    started_at: Annotated[str, Field(description="ISO8601 UTC when the process started")]
    uptime_seconds: int
    uptime_human: str
    github_token_configured: Annotated[bool, Field(description="Authenticated GitHub calls enabled")]
    static_projects: Annotated[int, Field(description="Projects in the built-in catalog")]


@router.get("/version")
async def version():
    """Return API version."""
    return {"version": HEALTH_VERSION}


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    now = datetime.now(timezone.utc)
    up = _uptime_seconds(now)
    client = getattr(request.app.state, "github_client", None)
    catalog = getattr(request.app.state, "catalog", None)
    return HealthResponse(
        status="ok",
        version=HEALTH_VERSION,
        timestamp=iso_utc(now),
        started_at=iso_utc(SERVICE_STARTED_AT),
        uptime_seconds=up,
        uptime_human=_uptime_human(up),
        github_token_configured=bool(getattr(client, "has_token", False)),
        static_projects=len(catalog.projects) if catalog is not None else 0,
    )
