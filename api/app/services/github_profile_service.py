"""Public GitHub metrics for one user: profile, repos, PRs, issues, reviews, orgs, activity."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import httpx
from pydantic import ValidationError

from app.models.github import GitHubRepository
from app.models.github_profile import (
    ActivitySummary,
    ContributionCalendar,
    ContributionDay,
    ContributionWeek,
    GitHubComprehensiveStats,
    GitHubEvent,
    GitHubOrg,
    GitHubUserProfile,
    IssueItem,
    IssueStats,
    LanguageShare,
    PullRequestItem,
    PullRequestStats,
    RepoHighlight,
    RepoSummary,
    ReviewItem,
    ReviewStats,
)
from app.services.github_client import GitHubAPIError, GitHubClient

log = logging.getLogger(__name__)

EVENT_PAGES = 3  # events API keeps 90 days / 300 events
LANGUAGE_REPO_LIMIT = 30
RECENT_ITEMS = 10
RECENT_EVENTS = 20
TOP_LANGUAGES = 10

CONTRIBUTION_QUERY = """
query($login: String!) {
  user(login: $login) {
    contributionsCollection {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            contributionCount
            date
          }
        }
      }
    }
  }
}
"""


def _repo_name_from_api_url(api_url: str, base_url: str) -> str:
    # "https://api.github.com/repos/facebook/react" -> "facebook/react"
    prefix = f"{base_url}/repos/"
    return api_url[len(prefix):] if api_url.startswith(prefix) else api_url


def _is_external(repo_full_name: str, username: str) -> bool:
    return not repo_full_name.lower().startswith(username.lower() + "/")


def contribution_level(count: int) -> int:
    if count <= 0:
        return 0
    if count <= 2:
        return 1
    if count <= 5:
        return 2
    if count <= 9:
        return 3
    return 4


async def fetch_profile(client: GitHubClient, username: str) -> Optional[GitHubUserProfile]:
    data = await client.get_json_or_none(f"/users/{username}", context=f"profile:{username}")
    if not isinstance(data, dict):
        return None
    try:
        return GitHubUserProfile.model_validate(data)
    except ValidationError:
        log.warning("github_profile_payload_invalid user=%s", username)
        return None


async def fetch_user_orgs(client: GitHubClient, username: str) -> list[GitHubOrg]:
    data = await client.get_json_or_none(
        f"/users/{username}/orgs", params={"per_page": 100}, context=f"orgs:{username}"
    )
    if not isinstance(data, list):
        return []
    return [
        GitHubOrg(
            login=org["login"],
            avatar_url=org.get("avatar_url") or "",
            html_url=f"https://github.com/{org['login']}",
            description=org.get("description"),
        )
        for org in data
        if isinstance(org, dict) and org.get("login")
    ]


async def fetch_recent_events(client: GitHubClient, username: str) -> list[GitHubEvent]:
    pages = await asyncio.gather(
        *(
            client.get_json_or_none(
                f"/users/{username}/events/public",
                params={"per_page": 100, "page": page},
                context=f"events:{username}",
            )
            for page in range(1, EVENT_PAGES + 1)
        )
    )
    events: list[GitHubEvent] = []
    for page in pages:
        if not isinstance(page, list):
            continue
        for item in page:
            if isinstance(item, dict) and item.get("type"):
                try:
                    events.append(GitHubEvent.model_validate(item))
                except ValidationError:
                    continue
    return events


def build_activity_summary(events: Sequence[GitHubEvent]) -> ActivitySummary:
    event_types: Counter[str] = Counter()
    repo_counts: Counter[str] = Counter()
    active_days: set[str] = set()
    for event in events:
        event_types[event.type] += 1
        repo_name = event.repo.get("name")
        if repo_name:
            repo_counts[repo_name] += 1
        if event.created_at:
            active_days.add(event.created_at.split("T", 1)[0])
    most_active = repo_counts.most_common(1)
    return ActivitySummary(
        event_types=dict(event_types),
        recent_events=list(events[:RECENT_EVENTS]),
        active_days=len(active_days),
        most_active_repo=most_active[0][0] if most_active else None,
    )


async def search_issues(client: GitHubClient, query: str, per_page: int = 100) -> tuple[int, list[dict]]:
    data = await client.get_json_or_none(
        "/search/issues",
        params={"q": query, "per_page": per_page, "sort": "created", "order": "desc"},
        context=f"search:{query}",
    )
    if not isinstance(data, dict):
        return 0, []
    items = [item for item in data.get("items") or [] if isinstance(item, dict)]
    return int(data.get("total_count") or 0), items


async def fetch_pr_stats(client: GitHubClient, username: str) -> PullRequestStats:
    (total, items), (merged, _), (open_count, _) = await asyncio.gather(
        search_issues(client, f"author:{username} type:pr"),
        search_issues(client, f"author:{username} type:pr is:merged"),
        search_issues(client, f"author:{username} type:pr is:open"),
    )
    prs: list[PullRequestItem] = []
    for pr in items:
        repo_url = pr.get("repository_url") or ""
        full_name = _repo_name_from_api_url(repo_url, client.base_url)
        prs.append(
            PullRequestItem(
                title=pr.get("title") or "",
                html_url=pr.get("html_url") or "",
                state=pr.get("state") or "open",
                merged_at=(pr.get("pull_request") or {}).get("merged_at"),
                created_at=pr.get("created_at") or "",
                repository_url=repo_url,
                repo_full_name=full_name,
                is_external=_is_external(full_name, username),
                number=int(pr.get("number") or 0),
            )
        )
    external = sum(1 for pr in prs if pr.is_external)
    return PullRequestStats(
        total=total,
        open=open_count,
        closed=total - open_count,
        merged=merged,
        to_external_repos=external,
        to_own_repos=len(prs) - external,
        repos_contributed_to=list(dict.fromkeys(pr.repo_full_name for pr in prs)),
        recent=prs[:RECENT_ITEMS],
    )


async def fetch_issue_stats(client: GitHubClient, username: str) -> IssueStats:
    (total, items), (open_count, _) = await asyncio.gather(
        search_issues(client, f"author:{username} type:issue"),
        search_issues(client, f"author:{username} type:issue is:open"),
    )
    issues: list[IssueItem] = []
    for issue in items:
        full_name = _repo_name_from_api_url(issue.get("repository_url") or "", client.base_url)
        issues.append(
            IssueItem(
                title=issue.get("title") or "",
                html_url=issue.get("html_url") or "",
                state=issue.get("state") or "open",
                created_at=issue.get("created_at") or "",
                repo_full_name=full_name,
                is_external=_is_external(full_name, username),
                number=int(issue.get("number") or 0),
                comments=int(issue.get("comments") or 0),
                reactions=int((issue.get("reactions") or {}).get("total_count") or 0),
            )
        )
    return IssueStats(
        total=total,
        open=open_count,
        closed=total - open_count,
        to_external_repos=sum(1 for issue in issues if issue.is_external),
        repos_filed_in=list(dict.fromkeys(issue.repo_full_name for issue in issues)),
        recent=issues[:RECENT_ITEMS],
    )


async def fetch_review_stats(client: GitHubClient, username: str) -> ReviewStats:
    total, items = await search_issues(client, f"reviewed-by:{username} type:pr -author:{username}")
    reviews = [
        ReviewItem(
            title=pr.get("title") or "",
            html_url=pr.get("html_url") or "",
            created_at=pr.get("created_at") or "",
            repo_full_name=_repo_name_from_api_url(pr.get("repository_url") or "", client.base_url),
        )
        for pr in items
    ]
    return ReviewStats(
        total=total,
        repos_reviewed=list(dict.fromkeys(r.repo_full_name for r in reviews)),
        recent=reviews[:RECENT_ITEMS],
    )


async def fetch_contribution_calendar(client: GitHubClient, username: str) -> Optional[ContributionCalendar]:
    """GraphQL contribution calendar; requires a token, otherwise None."""
    if not client.has_token:
        return None
    try:
        data: Any = await client.post_json(
            "/graphql", {"query": CONTRIBUTION_QUERY, "variables": {"login": username}}
        )
    except (GitHubAPIError, httpx.HTTPError, ValueError) as exc:
        log.warning("github_contributions_failed user=%s error=%s", username, exc)
        return None
    calendar = (
        ((((data or {}).get("data") or {}).get("user") or {}).get("contributionsCollection") or {})
        .get("contributionCalendar")
    )
    if not isinstance(calendar, dict):
        return None
    weeks = [
        ContributionWeek(
            days=[
                ContributionDay(
                    date=day.get("date") or "",
                    count=int(day.get("contributionCount") or 0),
                    level=contribution_level(int(day.get("contributionCount") or 0)),
                )
                for day in week.get("contributionDays") or []
            ]
        )
        for week in calendar.get("weeks") or []
    ]
    return ContributionCalendar(
        total_contributions=int(calendar.get("totalContributions") or 0),
        weeks=weeks,
    )


async def build_repo_summary(
    client: GitHubClient, username: str, repos: Sequence[GitHubRepository]
) -> RepoSummary:
    own = [r for r in repos if not r.fork and not r.archived][:LANGUAGE_REPO_LIMIT]
    language_pages = await asyncio.gather(
        *(
            client.get_json_or_none(f"/repos/{username}/{r.name}/languages", context=f"languages:{r.full_name}")
            for r in own
        )
    )
    totals: Counter[str] = Counter()
    for page in language_pages:
        if not isinstance(page, dict):
            continue
        for lang, size in page.items():
            if isinstance(size, int):
                totals[lang] += size

    total_bytes = sum(totals.values())
    top_languages = [
        LanguageShare(name=lang, percentage=round(size / total_bytes * 100, 1) if total_bytes else 0.0)
        for lang, size in totals.most_common(TOP_LANGUAGES)
    ]

    most_starred = max(repos, key=lambda r: r.stargazers_count, default=None)
    most_forked = max(repos, key=lambda r: r.forks_count, default=None)
    return RepoSummary(
        total_repos=len(repos),
        total_stars_received=sum(r.stargazers_count for r in repos),
        total_forks_received=sum(r.forks_count for r in repos),
        total_watchers=sum(r.watchers_count for r in repos),
        most_starred_repo=(
            RepoHighlight(name=most_starred.full_name, stars=most_starred.stargazers_count, url=most_starred.html_url)
            if most_starred
            else None
        ),
        most_forked_repo=(
            RepoHighlight(name=most_forked.full_name, forks=most_forked.forks_count, url=most_forked.html_url)
            if most_forked
            else None
        ),
        language_breakdown=dict(totals),
        top_languages=top_languages,
        open_source_repos=sum(1 for r in repos if not r.fork and not r.archived and not r.private),
        forked_repos=sum(1 for r in repos if r.fork),
        archived_repos=sum(1 for r in repos if r.archived),
    )


async def fetch_comprehensive_stats(client: GitHubClient, username: str) -> Optional[GitHubComprehensiveStats]:
    """Two-phase aggregation. Returns None when the profile cannot be fetched or a payload is unusable."""
    try:
        return await _aggregate_stats(client, username)
    except (TypeError, KeyError, AttributeError, ValueError):
        log.exception("github_stats_aggregation_failed user=%s", username)
        return None


async def _aggregate_stats(client: GitHubClient, username: str) -> Optional[GitHubComprehensiveStats]:
    profile, orgs, events, repos = await asyncio.gather(
        fetch_profile(client, username),
        fetch_user_orgs(client, username),
        fetch_recent_events(client, username),
        client.fetch_user_repos(username, sort="pushed"),
    )
    if profile is None:
        return None

    pr_stats, issue_stats, review_stats, calendar, repo_summary = await asyncio.gather(
        fetch_pr_stats(client, username),
        fetch_issue_stats(client, username),
        fetch_review_stats(client, username),
        fetch_contribution_calendar(client, username),
        build_repo_summary(client, username, repos),
    )
    return GitHubComprehensiveStats(
        profile=profile,
        repo_summary=repo_summary,
        pr_stats=pr_stats,
        issue_stats=issue_stats,
        review_stats=review_stats,
        contributions=calendar,
        orgs=orgs,
        activity=build_activity_summary(events),
        stars_given=-1,
        fetched_at=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    )
