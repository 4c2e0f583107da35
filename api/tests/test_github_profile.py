"""Per-user GitHub statistics aggregation."""

import json

import pytest
import respx
from httpx import Response

from app.models.github_profile import GitHubEvent
from app.services.github_client import GitHubClient
from app.services.github_profile_service import (
    build_activity_summary,
    contribution_level,
    fetch_comprehensive_stats,
    fetch_contribution_calendar,
    fetch_pr_stats,
)

API = "https://api.github.com"


def _search_item(repo: str, number: int, **extra) -> dict:
    item = {
        "title": f"Change {number}",
        "html_url": f"https://github.com/{repo}/pull/{number}",
        "state": "closed",
        "created_at": "2024-05-01T00:00:00Z",
        "repository_url": f"{API}/repos/{repo}",
        "number": number,
    }
    item.update(extra)
    return item


@pytest.mark.parametrize("count,level", [(0, 0), (1, 1), (2, 1), (5, 2), (9, 3), (10, 4), (50, 4)])
def test_contribution_level(count, level):
    assert contribution_level(count) == level


def test_build_activity_summary():
    events = [
        GitHubEvent(type="PushEvent", repo={"name": "bolabaden/infra"}, created_at="2024-06-01T10:00:00Z"),
        GitHubEvent(type="PushEvent", repo={"name": "bolabaden/infra"}, created_at="2024-06-01T12:00:00Z"),
        GitHubEvent(type="IssuesEvent", repo={"name": "psf/requests"}, created_at="2024-06-02T09:00:00Z"),
    ]

    summary = build_activity_summary(events)

    assert summary.event_types == {"PushEvent": 2, "IssuesEvent": 1}
    assert summary.active_days == 2
    assert summary.most_active_repo == "bolabaden/infra"


@pytest.mark.asyncio
@respx.mock
async def test_fetch_pr_stats_splits_external_and_own():
    def _search(request):
        q = request.url.params["q"]
        if "is:merged" in q:
            return Response(200, json={"total_count": 2, "items": []})
        if "is:open" in q:
            return Response(200, json={"total_count": 1, "items": []})
        return Response(
            200,
            json={
                "total_count": 3,
                "items": [
                    _search_item("psf/requests", 1, pull_request={"merged_at": "2024-05-02T00:00:00Z"}),
                    _search_item("BolaBaden/infra", 2),
                    _search_item("psf/requests", 3, state="open"),
                ],
            },
        )

    respx.get(f"{API}/search/issues").mock(side_effect=_search)

    stats = await fetch_pr_stats(GitHubClient(), "bolabaden")

    assert stats.total == 3
    assert stats.merged == 2
    assert stats.open == 1
    assert stats.closed == 2
    assert stats.to_external_repos == 2
    assert stats.to_own_repos == 1
    assert stats.repos_contributed_to == ["psf/requests", "BolaBaden/infra"]
    assert stats.recent[0].merged_at == "2024-05-02T00:00:00Z"


@pytest.mark.asyncio
@respx.mock
async def test_contribution_calendar_requires_token():
    assert await fetch_contribution_calendar(GitHubClient(), "bolabaden") is None
    assert len(respx.calls) == 0


@pytest.mark.asyncio
@respx.mock
async def test_contribution_calendar_parses_graphql():
    route = respx.post(f"{API}/graphql").mock(
        return_value=Response(
            200,
            json={
                "data": {
                    "user": {
                        "contributionsCollection": {
                            "contributionCalendar": {
                                "totalContributions": 12,
                                "weeks": [
                                    {
                                        "contributionDays": [
                                            {"contributionCount": 0, "date": "2024-06-02"},
                                            {"contributionCount": 12, "date": "2024-06-03"},
                                        ]
                                    }
                                ],
                            }
                        }
                    }
                }
            },
        )
    )

    calendar = await fetch_contribution_calendar(GitHubClient(token="t"), "bolabaden")

    assert calendar is not None
    assert calendar.total_contributions == 12
    assert [d.level for d in calendar.weeks[0].days] == [0, 4]
    assert json.loads(route.calls[0].request.content)["variables"] == {"login": "bolabaden"}


@pytest.mark.asyncio
@respx.mock
async def test_contribution_calendar_error_is_none():
    respx.post(f"{API}/graphql").mock(return_value=Response(401, json={"message": "Bad credentials"}))
    assert await fetch_contribution_calendar(GitHubClient(token="t"), "bolabaden") is None


@pytest.mark.asyncio
@respx.mock
async def test_fetch_comprehensive_stats_none_without_profile():
    respx.get(f"{API}/users/ghost").mock(return_value=Response(404, json={"message": "Not Found"}))
    respx.get(f"{API}/users/ghost/orgs").mock(return_value=Response(404, json={}))
    respx.get(f"{API}/users/ghost/events/public").mock(return_value=Response(404, json={}))
    respx.get(f"{API}/users/ghost/repos").mock(return_value=Response(404, json={}))

    assert await fetch_comprehensive_stats(GitHubClient(), "ghost") is None


@pytest.mark.asyncio
@respx.mock
async def test_fetch_comprehensive_stats_aggregates(repo_payload):
    respx.get(f"{API}/users/bolabaden").mock(
        return_value=Response(200, json={"login": "bolabaden", "public_repos": 2, "followers": 7})
    )
    respx.get(f"{API}/users/bolabaden/orgs").mock(
        return_value=Response(200, json=[{"login": "acme", "avatar_url": "https://a/acme"}])
    )
    respx.get(f"{API}/users/bolabaden/events/public").mock(
        return_value=Response(
            200,
            json=[{"type": "PushEvent", "repo": {"name": "bolabaden/infra"}, "created_at": "2024-06-01T00:00:00Z"}],
        )
    )
    repos_route = respx.get(f"{API}/users/bolabaden/repos").mock(
        return_value=Response(
            200,
            json=[
                repo_payload("infra", stargazers_count=20, forks_count=2),
                repo_payload("old", stargazers_count=1, forks_count=5, archived=True),
            ],
        )
    )
    respx.get(f"{API}/repos/bolabaden/infra/languages").mock(
        return_value=Response(200, json={"Python": 750, "Shell": 250})
    )
    respx.get(f"{API}/search/issues").mock(return_value=Response(200, json={"total_count": 0, "items": []}))

    stats = await fetch_comprehensive_stats(GitHubClient(), "bolabaden")

    assert stats is not None
    assert stats.profile.login == "bolabaden"
    assert [o.html_url for o in stats.orgs] == ["https://github.com/acme"]
    assert stats.repo_summary.total_repos == 2
    assert stats.repo_summary.total_stars_received == 21
    assert stats.repo_summary.most_starred_repo.name == "bolabaden/infra"
    assert stats.repo_summary.most_forked_repo.name == "bolabaden/old"
    assert stats.repo_summary.archived_repos == 1
    assert [(lang.name, lang.percentage) for lang in stats.repo_summary.top_languages] == [("Python", 75.0), ("Shell", 25.0)]
    # three event pages requested, each returning the same single event
    assert stats.activity.event_types == {"PushEvent": 3}
    assert stats.contributions is None
    assert stats.stars_given == -1
    assert repos_route.calls[0].request.url.params["sort"] == "pushed"

    body = stats.model_dump(mode="json", by_alias=True)
    assert body["repoSummary"]["totalStarsReceived"] == 21
    assert "prStats" in body and "fetchedAt" in body


@pytest.mark.asyncio
@respx.mock
async def test_fetch_comprehensive_stats_malformed_calendar_is_none():
    respx.get(f"{API}/users/bolabaden").mock(return_value=Response(200, json={"login": "bolabaden"}))
    respx.get(f"{API}/users/bolabaden/orgs").mock(return_value=Response(200, json=[]))
    respx.get(f"{API}/users/bolabaden/events/public").mock(return_value=Response(200, json=[]))
    respx.get(f"{API}/users/bolabaden/repos").mock(return_value=Response(200, json=[]))
    respx.get(f"{API}/search/issues").mock(return_value=Response(200, json={"total_count": 0, "items": []}))
    respx.post(f"{API}/graphql").mock(
        return_value=Response(
            200,
            json={
                "data": {
                    "user": {
                        "contributionsCollection": {
                            "contributionCalendar": {"totalContributions": 1, "weeks": ["oops"]}
                        }
                    }
                }
            },
        )
    )

    assert await fetch_comprehensive_stats(GitHubClient(token="t"), "bolabaden") is None
