"""Quality scoring (0-100) for repositories and projects, and featured-project selection.

Repository score, in points:

    stars         up to 40   40 * log1p(stars) / log1p(200), capped
    description   15         non-blank description
    topics        3 each     capped at 15
    recency       up to 30   linear decay to 0 at 730 days since last push
    archived      -25
    fork          -20

The total is clamped to [0, 100] and rounded.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Iterable, Optional

from app.config import FeaturedPolicy
from app.models.github import EnhancedRepoStats, GitHubRepository
from app.models.project import (
    FeaturedCandidate,
    Project,
    ProjectStatus,
    QualityFactor,
    QualityScoreResult,
)

STAR_POINTS = 40.0
STAR_PIVOT = 200
DESCRIPTION_POINTS = 15.0
TOPIC_POINTS = 3.0
TOPIC_POINTS_CAP = 15.0
RECENCY_POINTS = 30.0
RECENCY_HORIZON_DAYS = 730.0
ARCHIVED_PENALTY = 25.0
FORK_PENALTY = 20.0

UNSCORED_PROJECT_FACTOR = 0.75


def clamp01(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return min(1.0, max(0.0, value))


def log_normalize(value: float, pivot: float) -> float:
    if value <= 0 or pivot <= 0:
        return 0.0
    return clamp01(math.log1p(value) / math.log1p(pivot))


def _average(scores: list[float]) -> float:
    return sum(scores) / len(scores) if scores else 0.0


def _as_utc(ts: datetime) -> datetime:
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts


def _days_since(ts: Optional[datetime], now: datetime) -> Optional[float]:
    if ts is None:
        return None
    return (_as_utc(now) - _as_utc(ts)).total_seconds() / 86400.0


def linear_recency(ts: Optional[datetime], now: datetime) -> float:
    days = _days_since(ts, now)
    if days is None:
        return 0.0
    return clamp01(1.0 - max(0.0, days) / RECENCY_HORIZON_DAYS)


def stepped_recency(ts: Optional[datetime], now: datetime) -> float:
    days = _days_since(ts, now)
    if days is None:
        return 0.0
    if days <= 7:
        return 1.0
    if days <= 30:
        return 0.9
    if days <= 90:
        return 0.7
    if days <= 180:
        return 0.45
    if days <= 365:
        return 0.25
    return 0.1


def score_repository_quality(repo: GitHubRepository, now: Optional[datetime] = None) -> QualityScoreResult:
    """Points-based score; non-decreasing in stars and recency, lowered by archived/fork."""
    now = now or datetime.now(timezone.utc)
    topic_share = min(TOPIC_POINTS_CAP, TOPIC_POINTS * len(repo.topics)) / TOPIC_POINTS_CAP
    factors = [
        QualityFactor(
            key="stars",
            label="Popularity (stars)",
            weight=STAR_POINTS,
            score=log_normalize(repo.stargazers_count, STAR_PIVOT),
        ),
        QualityFactor(
            key="description",
            label="Has description",
            weight=DESCRIPTION_POINTS,
            score=1.0 if (repo.description or "").strip() else 0.0,
        ),
        QualityFactor(key="topics", label="Topics", weight=TOPIC_POINTS_CAP, score=topic_share),
        QualityFactor(
            key="activity",
            label="Recent activity",
            weight=RECENCY_POINTS,
            score=linear_recency(repo.last_activity_at, now),
        ),
        QualityFactor(
            key="archived",
            label="Archived penalty",
            weight=-ARCHIVED_PENALTY,
            score=1.0 if repo.archived else 0.0,
        ),
        QualityFactor(key="fork", label="Fork penalty", weight=-FORK_PENALTY, score=1.0 if repo.fork else 0.0),
    ]
    total = sum(f.weight * f.score for f in factors)
    return QualityScoreResult(score=int(round(min(100.0, max(0.0, total)))), factors=factors)


def _weighted(factors: list[QualityFactor]) -> int:
    total_weight = sum(f.weight for f in factors)
    if total_weight <= 0:
        return 0
    weighted = sum(clamp01(f.score) * f.weight for f in factors)
    return int(round(weighted / total_weight * 100))


def score_project_quality(
    project: Project,
    stats: Optional[EnhancedRepoStats] = None,
    now: Optional[datetime] = None,
) -> QualityScoreResult:
    """Weighted-average score for a showcase project, using enhanced GitHub stats when present.

    Without stats only local metadata is known, so the score is scaled down.
    """
    now = now or datetime.now(timezone.utc)
    factors = [
        QualityFactor(
            key="stars", label="Popularity (stars)", weight=0.14,
            score=log_normalize(stats.stars, 150) if stats else 0.0,
        ),
        QualityFactor(
            key="forks", label="Adoption (forks)", weight=0.08,
            score=log_normalize(stats.forks, 60) if stats else 0.0,
        ),
        QualityFactor(
            key="total-commits", label="Commit depth", weight=0.16,
            score=log_normalize(stats.total_commits, 500) if stats else 0.0,
        ),
        QualityFactor(
            key="recent-commits", label="Commit cadence", weight=0.14,
            score=log_normalize(stats.recent_commits_count, 60) if stats else 0.0,
        ),
        QualityFactor(
            key="last-push", label="Freshness", weight=0.12,
            score=stepped_recency(stats.last_push if stats else project.updated_at, now),
        ),
        QualityFactor(
            key="contributors", label="Contributor breadth", weight=0.10,
            score=log_normalize(stats.contributor_count, 10) if stats else 0.0,
        ),
        QualityFactor(
            key="issue-health", label="Maintenance health", weight=0.08,
            score=clamp01(1 - stats.open_issues / (stats.total_commits + 25)) if stats else 0.6,
        ),
        QualityFactor(
            key="technical-signal", label="Technical signal", weight=0.06,
            score=_average([
                log_normalize(len(project.technologies), 10),
                log_normalize(len(stats.languages), 8) if stats else 0.4,
            ]),
        ),
        QualityFactor(
            key="quality-metadata", label="Metadata completeness", weight=0.06,
            score=_average([
                1.0 if project.description else 0.0,
                1.0 if project.technologies else 0.0,
                1.0 if project.github_url else 0.0,
                1.0 if project.live_url else 0.0,
            ]),
        ),
        QualityFactor(
            key="stability", label="Repository stability", weight=0.06,
            score=(
                _average([0.0 if stats.is_archived else 1.0, 0.2 if stats.is_fork else 1.0])
                if stats
                else (0.0 if project.status == ProjectStatus.ARCHIVED else 0.9)
            ),
        ),
    ]
    score = _weighted(factors)
    if stats is None:
        score = int(round(score * UNSCORED_PROJECT_FACTOR))
    return QualityScoreResult(score=score, factors=factors)


def select_featured_project_ids(
    candidates: Iterable[FeaturedCandidate],
    *,
    min_score: float = 58,
    max_featured: int = 6,
    max_ratio: float = 0.35,
) -> set[str]:
    """Pick the ids to feature: drop archived / below-threshold, rank by score, cap.

    The cap is ``min(max_featured, floor(max_ratio * len(candidates)))``; ties keep
    input order. A cap of zero features nothing.
    """
    pool = list(candidates)
    cap = min(max_featured, math.floor(max_ratio * len(pool) + 1e-9))
    if cap <= 0:
        return set()
    eligible = [c for c in pool if not c.archived and c.score >= min_score]
    ranked = sorted(eligible, key=lambda c: c.score, reverse=True)
    return {c.id for c in ranked[:cap]}


def select_featured_with_policy(candidates: Iterable[FeaturedCandidate], policy: FeaturedPolicy) -> set[str]:
    return select_featured_project_ids(
        candidates,
        min_score=policy.min_score,
        max_featured=policy.max_featured,
        max_ratio=policy.max_ratio,
    )
