"""Aggregate language bytes across a user's repositories into ranked TechStack entries.

Per language the service tracks total bytes, repository count, owners and the
first/last time it was seen (repo creation / last push). The rank blends

    share      0.35   sqrt(bytes share / 0.22), capped at 1
    breadth    0.25   repositories / 10, capped at 1
    intensity  0.20   log2(1 + bytes) / 23, capped at 1
    recency    0.20   stepped by months since the last push

Years of experience are the span between first and last sighting, at least 0.1.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Sequence

from app.models.github import GitHubRepository
from app.models.skills import SkillCategory, SkillInsights, SkillLevel, SkillRepository, TechStack
from app.services.github_client import GitHubClient
from app.services.github_enhanced_service import fetch_language_stats

log = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_MAX_REPOS = 40
MAX_REPOS_PER_SKILL = 12
_DAYS_PER_MONTH = 30.44
_DAYS_PER_YEAR = 365.25

LANGUAGE_CATEGORIES: dict[str, SkillCategory] = {
    "typescript": SkillCategory.FRONTEND,
    "javascript": SkillCategory.FRONTEND,
    "html": SkillCategory.FRONTEND,
    "css": SkillCategory.FRONTEND,
    "scss": SkillCategory.FRONTEND,
    "vue": SkillCategory.FRONTEND,
    "svelte": SkillCategory.FRONTEND,
    "astro": SkillCategory.FRONTEND,
    "hcl": SkillCategory.INFRASTRUCTURE,
    "dockerfile": SkillCategory.INFRASTRUCTURE,
    "nix": SkillCategory.INFRASTRUCTURE,
    "jinja": SkillCategory.INFRASTRUCTURE,
    "smarty": SkillCategory.INFRASTRUCTURE,
    "shell": SkillCategory.DEVOPS,
    "powershell": SkillCategory.DEVOPS,
    "batchfile": SkillCategory.DEVOPS,
    "makefile": SkillCategory.DEVOPS,
    "sql": SkillCategory.DATABASE,
    "plpgsql": SkillCategory.DATABASE,
    "tsql": SkillCategory.DATABASE,
    "plsql": SkillCategory.DATABASE,
    "jupyter notebook": SkillCategory.AI_ML,
    "cuda": SkillCategory.AI_ML,
    "r": SkillCategory.AI_ML,
}
DEFAULT_SKILL_CATEGORY = SkillCategory.BACKEND


def language_category(language: str) -> SkillCategory:
    return LANGUAGE_CATEGORIES.get(language.strip().lower(), DEFAULT_SKILL_CATEGORY)


def recency_weight(months_since_push: float) -> float:
    if months_since_push <= 1:
        return 1.0
    if months_since_push <= 3:
        return 0.95
    if months_since_push <= 6:
        return 0.9
    if months_since_push <= 12:
        return 0.82
    if months_since_push <= 18:
        return 0.74
    if months_since_push <= 24:
        return 0.66
    if months_since_push <= 36:
        return 0.56
    return 0.42


@dataclass
class LanguageAggregate:
    name: str
    total_bytes: int = 0
    owners: set[str] = field(default_factory=set)
    repos: list[GitHubRepository] = field(default_factory=list)
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None

    def add(self, repo: GitHubRepository, size: int) -> None:
        self.total_bytes += size
        self.owners.add(repo.full_name.split("/", 1)[0].lower())
        self.repos.append(repo)
        start = repo.created_at or repo.last_activity_at
        end = repo.last_activity_at or repo.created_at
        if start is not None and (self.first_seen is None or start < self.first_seen):
            self.first_seen = start
        if end is not None and (self.last_seen is None or end > self.last_seen):
            self.last_seen = end


def should_include_repo(
    repo: GitHubRepository, include_forks: bool = False, include_archived: bool = False
) -> bool:
    if repo.disabled or repo.private:
        return False
    if repo.fork and not include_forks:
        return False
    if repo.archived and not include_archived:
        return False
    return True


async def collect_language_bytes(
    client: GitHubClient, repos: Sequence[GitHubRepository], max_repos: int = DEFAULT_MAX_REPOS
) -> list[dict[str, int]]:
    """Language bytes per repo, in input order.

    Only the ``max_repos`` most recently pushed repos get a ``/languages`` call;
    the others, and repos whose call comes back empty, count their primary
    language with the repo size (KB) as bytes.
    """
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    ranked = sorted(range(len(repos)), key=lambda i: repos[i].last_activity_at or epoch, reverse=True)
    detailed = set(ranked[: max(0, max_repos)])

    async def _one(index: int) -> dict[str, int]:
        repo = repos[index]
        languages: dict[str, int] = {}
        if index in detailed:
            owner, _, name = repo.full_name.partition("/")
            languages = await fetch_language_stats(client, owner, name)
        if not languages and repo.language:
            languages = {repo.language: max(1, repo.size) * 1024}
        return languages

    return list(await asyncio.gather(*(_one(i) for i in range(len(repos)))))


def aggregate_languages(
    repos: Sequence[GitHubRepository], language_bytes: Sequence[dict[str, int]]
) -> dict[str, LanguageAggregate]:
    aggregates: dict[str, LanguageAggregate] = {}
    for repo, languages in zip(repos, language_bytes):
        for language, size in languages.items():
            if size <= 0:
                continue
            key = language.lower()
            if key not in aggregates:
                aggregates[key] = LanguageAggregate(name=language)
            aggregates[key].add(repo, size)
    return aggregates


def _experience_label(years: float) -> str:
    if years < 1:
        months = max(1, round(years * 12))
        return f"{months} month{'' if months == 1 else 's'} active usage"
    text = f"{years:.0f}" if years == int(years) else f"{years:.1f}"
    return f"{text} year{'' if years == 1 else 's'} active usage"


def _level(rank: float, years: float, repo_count: int) -> SkillLevel:
    if rank >= 0.75 and years >= 4 and repo_count >= 6:
        return SkillLevel.EXPERT
    if rank >= 0.55 and years >= 2 and repo_count >= 3:
        return SkillLevel.ADVANCED
    if rank >= 0.3 and years >= 0.5:
        return SkillLevel.INTERMEDIATE
    return SkillLevel.BEGINNER


def score_language(
    aggregate: LanguageAggregate, total_bytes: int, now: datetime
) -> tuple[float, TechStack]:
    share = aggregate.total_bytes / total_bytes if total_bytes > 0 else 0.0
    share_score = min(1.0, math.sqrt(share / 0.22))
    breadth = min(1.0, len(aggregate.repos) / 10)
    intensity = min(1.0, math.log2(1 + aggregate.total_bytes) / 23)
    months = (
        max(0.0, (now - aggregate.last_seen).total_seconds() / 86400 / _DAYS_PER_MONTH)
        if aggregate.last_seen
        else 600.0
    )
    recency = recency_weight(months)
    rank = 0.35 * share_score + 0.25 * breadth + 0.2 * intensity + 0.2 * recency

    span_days = (
        (aggregate.last_seen - aggregate.first_seen).total_seconds() / 86400
        if aggregate.first_seen and aggregate.last_seen
        else 0.0
    )
    years = round(max(0.1, span_days / _DAYS_PER_YEAR), 1)

    epoch = datetime.min.replace(tzinfo=timezone.utc)
    repos = sorted(aggregate.repos, key=lambda r: r.last_activity_at or epoch, reverse=True)
    repo_count = len(aggregate.repos)
    skill = TechStack(
        name=aggregate.name,
        category=language_category(aggregate.name),
        level=_level(rank, years, repo_count),
        years_of_experience=years,
        experience_label=_experience_label(years),
        description=(
            f"{aggregate.name} across {repo_count} repositor{'y' if repo_count == 1 else 'ies'}, "
            f"{round(share * 100, 1)}% of measured code."
        ),
        insights=SkillInsights(
            repository_count=repo_count,
            owner_count=len(aggregate.owners),
            byte_share_pct=round(share * 100, 1),
            recency_score_pct=round(recency * 100, 1),
        ),
        repositories=[
            SkillRepository(
                name=r.full_name,
                url=r.html_url,
                pushed_at=r.last_activity_at.isoformat() if r.last_activity_at else None,
            )
            for r in repos[:MAX_REPOS_PER_SKILL]
        ],
    )
    return rank, skill


async def build_tech_stack(
    client: GitHubClient,
    usernames: Sequence[str],
    *,
    limit: int = DEFAULT_LIMIT,
    include_forks: bool = False,
    include_archived: bool = False,
    max_repos: int = DEFAULT_MAX_REPOS,
    now: Optional[datetime] = None,
) -> tuple[list[TechStack], int]:
    """Ranked skills (best first, at most ``limit``) and the number of repos considered."""
    now = now or datetime.now(timezone.utc)
    repos = [
        r
        for r in await client.fetch_all_user_repos(usernames)
        if should_include_repo(r, include_forks=include_forks, include_archived=include_archived)
    ]
    if not repos:
        return [], 0

    language_bytes = await collect_language_bytes(client, repos, max_repos)
    aggregates = aggregate_languages(repos, language_bytes)
    total = sum(a.total_bytes for a in aggregates.values())
    scored = [score_language(a, total, now) for a in aggregates.values()]
    scored.sort(key=lambda item: (item[0], item[1].insights.repository_count), reverse=True)
    skills = [skill for _, skill in scored[: max(0, limit)]]
    log.info(
        "tech_stack users=%s repos=%s languages=%s returned=%s",
        ",".join(usernames),
        len(repos),
        len(aggregates),
        len(skills),
    )
    return skills, len(repos)
