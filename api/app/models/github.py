"""GitHub REST payloads and the stats derived from them."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class GitHubLicense(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    spdx_id: Optional[str] = None


class GitHubRepository(BaseModel):
    """Repository object as returned by ``GET /repos/{owner}/{repo}`` and ``/users/{user}/repos``.

    Unknown keys are kept so the raw listing endpoint can pass payloads through.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    name: str
    full_name: str
    html_url: str = ""
    homepage: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None
    topics: list[str] = Field(default_factory=list)
    license: Optional[GitHubLicense] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None

    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    watchers_count: int = 0
    size: int = 0  # KB

    archived: bool = False
    disabled: bool = False
    private: bool = False
    fork: bool = False
    has_issues: bool = False
    has_projects: bool = False
    has_downloads: bool = False
    has_wiki: bool = False
    has_pages: bool = False

    @field_validator("topics", mode="before")
    @classmethod
    def _topics_or_empty(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [t for t in value if isinstance(t, str)]
        return value

    @field_validator(
        "stargazers_count",
        "forks_count",
        "open_issues_count",
        "watchers_count",
        "size",
        mode="before",
    )
    @classmethod
    def _count_or_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator(
        "archived",
        "disabled",
        "private",
        "fork",
        "has_issues",
        "has_projects",
        "has_downloads",
        "has_wiki",
        "has_pages",
        mode="before",
    )
    @classmethod
    def _flag_or_false(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def last_activity_at(self) -> Optional[datetime]:
        return self.pushed_at or self.updated_at


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class RepoStats(_CamelModel):
    """Projection of a repository used to refresh a project's dates."""

    updated_at: datetime
    created_at: datetime
    stars: int = 0
    forks: int = 0
    open_issues: int = 0
    language: Optional[str] = None
    topics: list[str] = Field(default_factory=list)


class CommitActivityWeek(BaseModel):
    """One bucket of ``/stats/commit_activity``; ``week`` is a unix timestamp (Sunday)."""

    week: int
    total: int
    days: list[int] = Field(default_factory=list)


class CommitGraphPoint(BaseModel):
    date: str
    count: int


class GitHubContributor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: str
    contributions: int
    avatar_url: str


class EnhancedRepoStats(_CamelModel):
    updated_at: datetime
    created_at: datetime
    last_push: datetime
    stars: int = 0
    forks: int = 0
    open_issues: int = 0
    size: int = 0

    primary_language: Optional[str] = None
    languages: dict[str, int] = Field(default_factory=dict)
    topics: list[str] = Field(default_factory=list)

    commit_activity: list[CommitGraphPoint] = Field(default_factory=list)
    total_commits: int = 0
    recent_commits_count: int = 0

    contributor_count: int = 0
    top_contributors: list[GitHubContributor] = Field(default_factory=list)

    license: Optional[str] = None
    is_archived: bool = False
    is_fork: bool = False
    has_issues: bool = False


class InclusionOptions(BaseModel):
    """Toggles for deciding whether a repository is surfaced as a project."""

    model_config = ConfigDict(frozen=True)

    include_archived: bool = False
    include_forks: bool = False
    min_stars: int = 0
