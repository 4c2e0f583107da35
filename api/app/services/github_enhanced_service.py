"""Rich per-repository stats for project cards: commit activity, languages, contributors."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from app.models.github import (
    CommitActivityWeek,
    CommitGraphPoint,
    EnhancedRepoStats,
    GitHubContributor,
)
from app.services.github_client import GitHubClient, parse_github_url

log = logging.getLogger(__name__)

RECENT_COMMIT_WINDOW = timedelta(days=31)  # weekly buckets: include boundary weeks
TOP_CONTRIBUTORS = 5

_ACTIVITY_ADAPTER = TypeAdapter(list[CommitActivityWeek])
_CONTRIBUTORS_ADAPTER = TypeAdapter(list[GitHubContributor])


async def fetch_commit_activity(client: GitHubClient, owner: str, repo: str) -> list[CommitActivityWeek]:
    """Last 52 weeks of commits. GitHub answers 202 + ``{}`` while computing; that counts as empty."""
    data = await client.get_json_or_none(
        f"/repos/{owner}/{repo}/stats/commit_activity",
        context=f"commit_activity:{owner}/{repo}",
    )
    if not isinstance(data, list):
        return []
    try:
        return _ACTIVITY_ADAPTER.validate_python(data)
    except ValidationError:
        return []


async def fetch_language_stats(client: GitHubClient, owner: str, repo: str) -> dict[str, int]:
    data = await client.get_json_or_none(f"/repos/{owner}/{repo}/languages", context=f"languages:{owner}/{repo}")
    if not isinstance(data, dict):
        return {}
    return {str(k): int(v) for k, v in data.items() if isinstance(v, (int, float)) and not isinstance(v, bool)}


async def fetch_contributors(
    client: GitHubClient, owner: str, repo: str, limit: int = TOP_CONTRIBUTORS
) -> list[GitHubContributor]:
    data = await client.get_json_or_none(
        f"/repos/{owner}/{repo}/contributors",
        params={"per_page": limit},
        context=f"contributors:{owner}/{repo}",
    )
    if not isinstance(data, list):
        return []
    try:
        return _CONTRIBUTORS_ADAPTER.validate_python(data)[:limit]
    except ValidationError:
        return []


def transform_commit_activity_to_graph(activity: Sequence[CommitActivityWeek]) -> list[CommitGraphPoint]:
    return [
        CommitGraphPoint(
            date=datetime.fromtimestamp(week.week, tz=timezone.utc).date().isoformat(),
            count=week.total,
        )
        for week in activity
    ]


def calculate_recent_commits(
    activity: Sequence[CommitActivityWeek], now: Optional[datetime] = None
) -> int:
    now = now or datetime.now(timezone.utc)
    cutoff = (now - RECENT_COMMIT_WINDOW).timestamp()
    return sum(week.total for week in activity if week.week >= cutoff)


def _license_name(raw: Any) -> Optional[str]:
    name = getattr(raw, "name", None)
    return name if isinstance(name, str) else None


async def get_enhanced_repo_stats(
    client: GitHubClient, github_url: str, now: Optional[datetime] = None
) -> Optional[EnhancedRepoStats]:
    ref = parse_github_url(github_url)
    if ref is None:
        return None
    owner, name = ref
    repo, activity, languages, contributors = await asyncio.gather(
        client.fetch_repo(owner, name),
        fetch_commit_activity(client, owner, name),
        fetch_language_stats(client, owner, name),
        fetch_contributors(client, owner, name, TOP_CONTRIBUTORS),
    )
    if repo is None:
        log.debug("enhanced stats unavailable for %s", github_url)
        return None

    now = now or datetime.now(timezone.utc)
    created_at = repo.created_at or now
    return EnhancedRepoStats(
        updated_at=repo.updated_at or now,
        created_at=created_at,
        last_push=max(repo.pushed_at or now, created_at),
        stars=repo.stargazers_count,
        forks=repo.forks_count,
        open_issues=repo.open_issues_count,
        size=repo.size,
        primary_language=repo.language,
        languages=languages,
        topics=list(repo.topics),
        commit_activity=transform_commit_activity_to_graph(activity),
        total_commits=sum(week.total for week in activity),
        recent_commits_count=calculate_recent_commits(activity, now),
        contributor_count=len(contributors),
        top_contributors=contributors,
        license=_license_name(repo.license),
        is_archived=repo.archived,
        is_fork=repo.fork,
        has_issues=repo.has_issues,
    )
