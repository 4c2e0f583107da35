"""Enhanced per-repository stats (commit activity, languages, contributors)."""

from datetime import datetime, timedelta, timezone

import pytest
import respx
from httpx import Response

from app.models.github import CommitActivityWeek
from app.services.github_client import GitHubClient
from app.services.github_enhanced_service import (
    calculate_recent_commits,
    get_enhanced_repo_stats,
    transform_commit_activity_to_graph,
)

API = "https://api.github.com"
NOW = datetime(2024, 6, 15, tzinfo=timezone.utc)


def _week(days_ago: int, total: int) -> dict:
    return {"week": int((NOW - timedelta(days=days_ago)).timestamp()), "total": total, "days": [total, 0, 0, 0, 0, 0, 0]}


def test_transform_commit_activity_to_graph():
    points = transform_commit_activity_to_graph([CommitActivityWeek(week=1717286400, total=4)])
    assert [(p.date, p.count) for p in points] == [("2024-06-02", 4)]


def test_calculate_recent_commits_counts_last_month_only():
    activity = [CommitActivityWeek(**_week(d, t)) for d, t in ((60, 100), (35, 50), (28, 3), (7, 2), (0, 1))]
    assert calculate_recent_commits(activity, NOW) == 6


@pytest.mark.asyncio
@respx.mock
async def test_get_enhanced_repo_stats_combines_endpoints(repo_payload):
    respx.get(f"{API}/repos/bolabaden/demo").mock(
        return_value=Response(200, json=repo_payload(stargazers_count=12, topics=["docker"]))
    )
    respx.get(f"{API}/repos/bolabaden/demo/stats/commit_activity").mock(
        return_value=Response(200, json=[_week(100, 10), _week(7, 4)])
    )
    respx.get(f"{API}/repos/bolabaden/demo/languages").mock(
        return_value=Response(200, json={"Python": 9000, "Shell": 300})
    )
    contributors = respx.get(f"{API}/repos/bolabaden/demo/contributors").mock(
        return_value=Response(
            200,
            json=[{"login": "bolabaden", "contributions": 40, "avatar_url": "https://a/1", "type": "User"}],
        )
    )

    stats = await get_enhanced_repo_stats(GitHubClient(), "https://github.com/bolabaden/demo", NOW)

    assert stats is not None
    assert stats.stars == 12
    assert stats.total_commits == 14
    assert stats.recent_commits_count == 4
    assert stats.languages == {"Python": 9000, "Shell": 300}
    assert stats.primary_language == "Python"
    assert stats.contributor_count == 1
    assert stats.top_contributors[0].login == "bolabaden"
    assert stats.license == "MIT License"
    assert stats.last_push == datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert contributors.calls[0].request.url.params["per_page"] == "5"

    body = stats.model_dump(mode="json", by_alias=True)
    assert "recentCommitsCount" in body
    assert "topContributors" in body


@pytest.mark.asyncio
@respx.mock
async def test_get_enhanced_repo_stats_tolerates_pending_commit_stats(repo_payload):
    respx.get(f"{API}/repos/bolabaden/demo").mock(return_value=Response(200, json=repo_payload()))
    respx.get(f"{API}/repos/bolabaden/demo/stats/commit_activity").mock(return_value=Response(202, json={}))
    respx.get(f"{API}/repos/bolabaden/demo/languages").mock(return_value=Response(500, text="err"))
    respx.get(f"{API}/repos/bolabaden/demo/contributors").mock(return_value=Response(204))

    stats = await get_enhanced_repo_stats(GitHubClient(), "https://github.com/bolabaden/demo", NOW)

    assert stats is not None
    assert stats.commit_activity == []
    assert stats.total_commits == 0
    assert stats.languages == {}
    assert stats.top_contributors == []


@pytest.mark.asyncio
@respx.mock
async def test_get_enhanced_repo_stats_none_when_repo_missing():
    respx.get(f"{API}/repos/bolabaden/gone").mock(return_value=Response(404, json={}))
    respx.get(f"{API}/repos/bolabaden/gone/stats/commit_activity").mock(return_value=Response(404, json={}))
    respx.get(f"{API}/repos/bolabaden/gone/languages").mock(return_value=Response(404, json={}))
    respx.get(f"{API}/repos/bolabaden/gone/contributors").mock(return_value=Response(404, json={}))

    assert await get_enhanced_repo_stats(GitHubClient(), "https://github.com/bolabaden/gone", NOW) is None


@pytest.mark.asyncio
@respx.mock
async def test_get_enhanced_repo_stats_invalid_url_makes_no_request():
    assert await get_enhanced_repo_stats(GitHubClient(), "https://gitlab.com/a/b", NOW) is None
    assert len(respx.calls) == 0
