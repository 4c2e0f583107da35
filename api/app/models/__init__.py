"""Pydantic models."""

from app.models.github import EnhancedRepoStats, GitHubRepository, InclusionOptions, RepoStats
from app.models.github_profile import GitHubComprehensiveStats
from app.models.project import (
    Project,
    ProjectCategory,
    ProjectMetadataOverride,
    ProjectStatus,
    QualityScoreResult,
)

__all__ = [
    "EnhancedRepoStats",
    "GitHubComprehensiveStats",
    "GitHubRepository",
    "InclusionOptions",
    "Project",
    "ProjectCategory",
    "ProjectMetadataOverride",
    "ProjectStatus",
    "QualityScoreResult",
    "RepoStats",
]
