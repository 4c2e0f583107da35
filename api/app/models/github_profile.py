"""Aggregate public statistics for a GitHub user (GET /api/github/{username}/stats)."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _StatsModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GitHubUserProfile(BaseModel):
    """Profile as returned by ``GET /users/{username}`` (snake_case, passed through)."""

    model_config = ConfigDict(extra="ignore")

    login: str
    name: Optional[str] = None
    avatar_url: str = ""
    html_url: str = ""
    bio: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    email: Optional[str] = None
    blog: Optional[str] = None
    twitter_username: Optional[str] = None
    public_repos: int = 0
    public_gists: int = 0
    followers: int = 0
    following: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class PullRequestItem(_StatsModel):
    title: str
    html_url: str
    state: str
    merged_at: Optional[str] = None
    created_at: str
    repository_url: str
    repo_full_name: str
    is_external: bool
    number: int


class PullRequestStats(_StatsModel):
    total: int = 0
    open: int = 0
    closed: int = 0
    merged: int = 0
    to_external_repos: int = 0
    to_own_repos: int = 0
    repos_contributed_to: list[str] = Field(default_factory=list)
    recent: list[PullRequestItem] = Field(default_factory=list)


class IssueItem(_StatsModel):
    title: str
    html_url: str
    state: str
    created_at: str
    repo_full_name: str
    is_external: bool
    number: int
    comments: int = 0
    reactions: int = 0


class IssueStats(_StatsModel):
    total: int = 0
    open: int = 0
    closed: int = 0
    to_external_repos: int = 0
    repos_filed_in: list[str] = Field(default_factory=list)
    recent: list[IssueItem] = Field(default_factory=list)


class ReviewItem(_StatsModel):
    title: str
    html_url: str
    created_at: str
    repo_full_name: str


class ReviewStats(_StatsModel):
    total: int = 0
    repos_reviewed: list[str] = Field(default_factory=list)
    recent: list[ReviewItem] = Field(default_factory=list)


class ContributionDay(_StatsModel):
    date: str
    count: int
    level: int  # 0 = none .. 4 = max


class ContributionWeek(_StatsModel):
    days: list[ContributionDay] = Field(default_factory=list)


class ContributionCalendar(_StatsModel):
    total_contributions: int = 0
    weeks: list[ContributionWeek] = Field(default_factory=list)


class GitHubOrg(_StatsModel):
    login: str
    avatar_url: str = ""
    html_url: str = ""
    description: Optional[str] = None


class GitHubEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    repo: dict[str, Any] = Field(default_factory=dict)
    created_at: str = ""
    payload: dict[str, Any] = Field(default_factory=dict)


class ActivitySummary(_StatsModel):
    event_types: dict[str, int] = Field(default_factory=dict)
    recent_events: list[GitHubEvent] = Field(default_factory=list)
    active_days: int = 0
    most_active_repo: Optional[str] = None


class RepoHighlight(_StatsModel):
    name: str
    url: str
    stars: Optional[int] = None
    forks: Optional[int] = None


class LanguageShare(_StatsModel):
    name: str
    percentage: float


class RepoSummary(_StatsModel):
    total_repos: int = 0
    total_stars_received: int = 0
    total_forks_received: int = 0
    total_watchers: int = 0
    most_starred_repo: Optional[RepoHighlight] = None
    most_forked_repo: Optional[RepoHighlight] = None
    language_breakdown: dict[str, int] = Field(default_factory=dict)
    top_languages: list[LanguageShare] = Field(default_factory=list)
    open_source_repos: int = 0
    forked_repos: int = 0
    archived_repos: int = 0


class GitHubComprehensiveStats(_StatsModel):
    profile: GitHubUserProfile
    repo_summary: RepoSummary
    pr_stats: PullRequestStats
    issue_stats: IssueStats
    review_stats: ReviewStats
    contributions: Optional[ContributionCalendar] = None
    orgs: list[GitHubOrg] = Field(default_factory=list)
    activity: ActivitySummary
    stars_given: int = -1
    fetched_at: str
