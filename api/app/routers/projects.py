"""Showcase project routes.

Every route answers with a body even on failure: the static catalog (or an
empty list for auto-discover) plus an ``error`` message, with HTTP 500.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.config import Settings
from app.dependencies import get_catalog, get_github_client, get_settings
from app.models.github import InclusionOptions
from app.services import project_service
from app.services.github_client import GitHubClient
from app.services.project_catalog import ProjectCatalog

router = APIRouter()
log = logging.getLogger(__name__)

REALTIME_ERROR = "Failed to fetch realtime data, using cached data"
ENHANCED_ERROR = "Failed to fetch realtime GitHub data, using cached data"
DISCOVER_ERROR = "Failed to discover projects"


@router.get("/projects")
async def list_projects(
    featured: Optional[bool] = Query(None, description="Only featured projects when true."),
    category: Optional[str] = Query(None, description="Category id, or 'all'."),
    catalog: ProjectCatalog = Depends(get_catalog),
    client: GitHubClient = Depends(get_github_client),
):
    try:
        projects = await project_service.enrich_projects_with_github_data(catalog, client)
        projects = project_service.filter_projects(projects, featured=featured, category=category)
    except Exception:
        log.exception("projects_realtime_failed")
        return JSONResponse(
            status_code=500,
            content={
                "projects": [p.to_json() for p in catalog.projects],
                "lastUpdated": project_service.iso_utc(project_service.utc_now()),
                "error": REALTIME_ERROR,
            },
        )
    return {
        "projects": [p.to_json() for p in projects],
        "lastUpdated": project_service.iso_utc(project_service.utc_now()),
    }


@router.get("/projects/enhanced")
async def list_enhanced_projects(
    featured: Optional[bool] = Query(None),
    category: Optional[str] = Query(None),
    catalog: ProjectCatalog = Depends(get_catalog),
    client: GitHubClient = Depends(get_github_client),
):
    try:
        pairs = await project_service.build_enhanced_projects(catalog, client)
        keep = {p.id for p in project_service.filter_projects((p for p, _ in pairs), featured, category)}
        pairs = [(p, stats) for p, stats in pairs if p.id in keep]
    except Exception:
        log.exception("projects_enhanced_failed")
        return JSONResponse(
            status_code=500,
            content={
                "projects": [p.to_json() for p in catalog.projects],
                "githubStats": {},
                "lastUpdated": project_service.iso_utc(project_service.utc_now()),
                "error": ENHANCED_ERROR,
            },
        )
    return {
        "projects": [p.to_json() for p, _ in pairs],
        "githubStats": {
            p.id: stats.model_dump(mode="json", by_alias=True) for p, stats in pairs if stats is not None
        },
        "lastUpdated": project_service.iso_utc(project_service.utc_now()),
    }


@router.get("/projects/auto-discover")
async def auto_discover(
    users: Optional[str] = Query(None, description="Comma-separated GitHub usernames."),
    include_archived: bool = Query(False, alias="includeArchived"),
    min_stars: Optional[int] = Query(None, alias="minStars", ge=0),
    settings: Settings = Depends(get_settings),
    catalog: ProjectCatalog = Depends(get_catalog),
    client: GitHubClient = Depends(get_github_client),
):
    raw_users = users if users else ",".join(settings.github_usernames)
    usernames = [u.strip() for u in raw_users.split(",") if u.strip()]
    stars = settings.auto_discover_min_stars if min_stars is None else min_stars
    options = InclusionOptions(include_archived=include_archived, include_forks=False, min_stars=stars)
    try:
        projects = await project_service.auto_discover_projects(
            client,
            usernames,
            options,
            settings.featured,
            catalog.overrides,
        )
    except Exception:
        log.exception("projects_auto_discover_failed users=%s", ",".join(usernames))
        return JSONResponse(
            status_code=500,
            content={"error": DISCOVER_ERROR, "projects": [], "count": 0},
        )
    return {
        "projects": [p.to_json() for p in projects],
        "count": len(projects),
        "users": usernames,
        "filters": {"includeArchived": include_archived, "minStars": stars},
        "lastUpdated": project_service.iso_utc(project_service.utc_now()),
    }
