"""Project pipelines behind the /api/projects routes."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional, Sequence

from app.config import FeaturedPolicy
from app.models.github import EnhancedRepoStats, InclusionOptions, RepoStats
from app.models.project import FeaturedCandidate, Project, ProjectMetadataOverride, ProjectStatus
from app.services.github_client import GitHubClient
from app.services.github_enhanced_service import get_enhanced_repo_stats
from app.services.project_catalog import ProjectCatalog
from app.services.project_mapper import enrich_project, repo_to_project, should_include_project, slugify
from app.services.project_quality import (
    score_project_quality,
    score_repository_quality,
    select_featured_with_policy,
)

log = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_utc(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def with_github_dates(project: Project, created_at: datetime, updated_at: datetime) -> Project:
    return project.model_copy(update={"created_at": created_at, "updated_at": max(updated_at, created_at)})


def filter_projects(
    projects: Iterable[Project],
    featured: Optional[bool] = None,
    category: Optional[str] = None,
) -> list[Project]:
    """Keep featured projects when ``featured`` is true; ``category`` "all" or empty means no filter."""
    out = list(projects)
    if featured:
        out = [p for p in out if p.featured]
    if category and category != "all":
        out = [p for p in out if p.category.value == category]
    return out


async def enrich_projects_with_github_data(catalog: ProjectCatalog, client: GitHubClient) -> list[Project]:
    """Static projects with created/updated dates refreshed from GitHub.

    Projects without a GitHub URL, or whose fetch failed, keep their static dates.
    """
    urls = catalog.github_urls
    stats = await client.fetch_multiple_repos(urls)
    stats_by_url: dict[str, Optional[RepoStats]] = dict(zip(urls, stats))

    projects: list[Project] = []
    for project in catalog.projects:
        repo_stats = stats_by_url.get(project.github_url) if project.github_url else None
        if repo_stats is None:
            projects.append(project)
            continue
        projects.append(with_github_dates(project, repo_stats.created_at, repo_stats.updated_at))
    return projects


async def build_enhanced_projects(
    catalog: ProjectCatalog,
    client: GitHubClient,
    now: Optional[datetime] = None,
) -> list[tuple[Project, Optional[EnhancedRepoStats]]]:
    now = now or utc_now()

    async def _one(project: Project) -> tuple[Project, Optional[EnhancedRepoStats]]:
        stats = await get_enhanced_repo_stats(client, project.github_url, now) if project.github_url else None
        if stats is not None:
            project = with_github_dates(project, stats.created_at, stats.last_push)
        score = score_project_quality(project, stats, now).score
        return project.model_copy(update={"quality_score": score}), stats

    return list(await asyncio.gather(*(_one(p) for p in catalog.projects)))


def unique_project_id(base_id: str, full_name: str, taken: set[str]) -> str:
    """First repo keeps the plain slug; same-named repos of other owners get ``-<owner>`` (then a counter)."""
    if base_id not in taken:
        return base_id
    candidate = f"{base_id}-{slugify(full_name.split('/', 1)[0])}"
    suffix = 2
    unique = candidate
    while unique in taken:
        unique = f"{candidate}-{suffix}"
        suffix += 1
    return unique


async def auto_discover_projects(
    client: GitHubClient,
    usernames: Sequence[str],
    options: InclusionOptions,
    policy: FeaturedPolicy,
    overrides: Mapping[str, ProjectMetadataOverride],
    now: Optional[datetime] = None,
) -> list[Project]:
    """Projects built purely from live GitHub data, scored, featured, newest push first."""
    now = now or utc_now()
    repos = await client.fetch_all_user_repos(usernames)

    scored: list[Project] = []
    seen_ids: set[str] = set()
    for repo in repos:
        if not should_include_project(repo, options):
            continue
        if repo.created_at is None and repo.last_activity_at is None:
            log.warning("auto_discover_skip_repo repo=%s reason=no_timestamps", repo.full_name)
            continue
        score = score_repository_quality(repo, now).score
        project = repo_to_project(repo)
        project_id = unique_project_id(project.id, repo.full_name, seen_ids)
        seen_ids.add(project_id)
        if project_id != project.id:
            project = project.model_copy(update={"id": project_id})
        project = enrich_project(project, overrides)
        scored.append(project.model_copy(update={"quality_score": score}))

    featured_ids = select_featured_with_policy(
        (
            FeaturedCandidate(
                id=p.id,
                score=p.quality_score or 0,
                archived=p.status == ProjectStatus.ARCHIVED,
            )
            for p in scored
        ),
        policy,
    )
    projects = [p.model_copy(update={"featured": p.id in featured_ids}) for p in scored]
    projects.sort(key=lambda p: p.updated_at, reverse=True)
    log.info(
        "auto_discover users=%s repos=%s projects=%s featured=%s",
        ",".join(usernames),
        len(repos),
        len(projects),
        len(featured_ids),
    )
    return projects
