"""Raw GitHub data routes: repository listing and profile statistics."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.config import Settings
from app.dependencies import get_github_client, get_settings
from app.services import github_profile_service, skills_service
from app.services.github_client import GitHubClient
from app.services.project_service import iso_utc, utc_now

router = APIRouter(prefix="/github")
log = logging.getLogger(__name__)

STATS_CACHE_CONTROL = "public, s-maxage=900, stale-while-revalidate=3600"
SKILLS_CACHE_CONTROL = "public, s-maxage=3600, stale-while-revalidate=7200"
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@router.get("/skills")
async def tech_stack(
    users: Optional[str] = Query(None, description="Comma-separated GitHub usernames."),
    limit: int = Query(skills_service.DEFAULT_LIMIT, ge=1, le=skills_service.MAX_LIMIT),
    include_forks: bool = Query(False, alias="includeForks"),
    include_archived: bool = Query(False, alias="includeArchived"),
    max_repos: int = Query(skills_service.DEFAULT_MAX_REPOS, alias="maxRepos", ge=0, le=120),
    settings: Settings = Depends(get_settings),
    client: GitHubClient = Depends(get_github_client),
):
    usernames = [u.strip() for u in (users or "").split(",") if u.strip()] or list(settings.github_usernames)
    try:
        skills, total_repos = await skills_service.build_tech_stack(
            client,
            usernames,
            limit=limit,
            include_forks=include_forks,
            include_archived=include_archived,
            max_repos=max_repos,
        )
    except Exception:
        log.exception("github_skills_failed users=%s", ",".join(usernames))
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to fetch skills",
                "skills": [],
                "count": 0,
                "users": usernames,
                "totalRepos": 0,
                "lastUpdated": iso_utc(utc_now()),
            },
        )
    return JSONResponse(
        content={
            "skills": [s.model_dump(mode="json", by_alias=True) for s in skills],
            "count": len(skills),
            "users": usernames,
            "totalRepos": total_repos,
            "filters": {"includeForks": include_forks, "includeArchived": include_archived},
            "lastUpdated": iso_utc(utc_now()),
        },
        headers={"Cache-Control": SKILLS_CACHE_CONTROL},
    )


@router.get("/{username}")
async def list_user_repos(
    username: str,
    include: Optional[str] = Query(None, description="Comma-separated extra usernames."),
    archived: bool = Query(False, description="Keep archived repositories."),
    client: GitHubClient = Depends(get_github_client),
):
    extra = [u.strip() for u in (include or "").split(",") if u.strip()]
    usernames = [username, *extra]
    try:
        repos = await client.fetch_all_user_repos(usernames)
        if not archived:
            repos = [r for r in repos if not r.archived]
        repos.sort(key=lambda r: r.pushed_at or _EPOCH, reverse=True)
    except Exception:
        log.exception("github_repos_failed user=%s", username)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch repositories", "repos": [], "count": 0},
        )
    return {
        "repos": [r.model_dump(mode="json") for r in repos],
        "count": len(repos),
        "users": usernames,
        "lastUpdated": iso_utc(utc_now()),
    }


@router.get("/{username}/stats")
async def user_stats(username: str, client: GitHubClient = Depends(get_github_client)):
    stats = await github_profile_service.fetch_comprehensive_stats(client, username)
    if stats is None:
        return JSONResponse(
            status_code=502,
            content={"error": "Failed to fetch GitHub stats", "username": username},
        )
    return JSONResponse(
        content=stats.model_dump(mode="json", by_alias=True),
        headers={"Cache-Control": STATS_CACHE_CONTROL},
    )
