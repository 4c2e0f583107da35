from __future__ import annotations

from datetime import datetime, timezone
from types import MappingProxyType

import pytest

from app.models.github import GitHubRepository, InclusionOptions
from app.models.project import ProjectCategory, ProjectMetadataOverride, ProjectStatus
from app.services.project_mapper import (
    enrich_project,
    infer_category,
    repo_to_project,
    should_include_project,
    slugify,
    titleize,
)


def _repo(repo_payload, **overrides) -> GitHubRepository:
    return GitHubRepository.model_validate(repo_payload(**overrides))


@pytest.mark.parametrize(
    "overrides,expected",
    [
        ({"topics": ["llm"], "language": "TypeScript"}, ProjectCategory.AI_ML),
        ({"topics": ["kubernetes", "react"]}, ProjectCategory.INFRASTRUCTURE),
        ({"topics": [], "language": "TypeScript", "description": "x"}, ProjectCategory.FRONTEND),
        ({"topics": [], "language": "Go", "description": "x"}, ProjectCategory.BACKEND),
        ({"topics": ["postgres"], "language": None, "description": "x"}, ProjectCategory.DATABASE),
        ({"topics": [], "language": None, "description": "Auth helpers"}, ProjectCategory.SECURITY),
        ({"topics": [], "language": "Shell", "description": "dotfiles"}, ProjectCategory.DEVOPS),
    ],
)
def test_infer_category_rules_in_order(repo_payload, overrides, expected):
    assert infer_category(_repo(repo_payload, **overrides)) == expected


def test_infer_category_matches_description_words_not_substrings(repo_payload):
    repo = _repo(repo_payload, topics=[], language=None, description="A maintained fork of a paint tool")
    assert infer_category(repo) == ProjectCategory.DEVOPS


def test_slugify_and_titleize():
    assert slugify("My_Cool.Repo") == "my-cool-repo"
    assert titleize("ai-research-wizard") == "Ai Research Wizard"


def test_repo_to_project_maps_fields(repo_payload):
    repo = _repo(
        repo_payload,
        name="Media_Server",
        topics=["docker", "a", "b", "c", "d", "e"],
        homepage="https://media.example",
        archived=True,
    )

    project = repo_to_project(repo)

    assert project.id == "media-server"
    assert project.title == "Media_Server"
    assert project.technologies == ["Python", "docker", "a", "b", "c", "d"]
    assert project.status == ProjectStatus.ARCHIVED
    assert project.live_url == "https://media.example"
    assert project.github_url == "https://github.com/bolabaden/Media_Server"
    assert project.featured is False
    assert project.created_at == datetime(2023, 1, 1, tzinfo=timezone.utc)
    assert project.updated_at == datetime(2024, 6, 1, tzinfo=timezone.utc)


def test_repo_to_project_defaults_description_and_clamps_dates(repo_payload):
    repo = _repo(repo_payload, description=None, pushed_at="2020-01-01T00:00:00Z")

    project = repo_to_project(repo)

    assert project.description == "No description available"
    assert project.created_at <= project.updated_at


def test_repo_to_project_requires_a_timestamp(repo_payload):
    repo = _repo(repo_payload, created_at=None, updated_at=None, pushed_at=None)
    with pytest.raises(ValueError):
        repo_to_project(repo)


def test_enrich_project_merges_only_set_fields(repo_payload):
    project = repo_to_project(_repo(repo_payload, name="cloudcradle"))
    overrides = MappingProxyType(
        {"cloudcradle": ProjectMetadataOverride(featured=True, custom_title="CloudCradle", live_url="https://cc.example")}
    )

    enriched = enrich_project(project, overrides)

    assert enriched.title == "CloudCradle"
    assert enriched.featured is True
    assert enriched.live_url == "https://cc.example"
    assert enriched.description == project.description
    assert enrich_project(project, {}) is project


def test_should_include_project(repo_payload):
    assert should_include_project(_repo(repo_payload))
    assert not should_include_project(_repo(repo_payload, archived=True))
    assert should_include_project(_repo(repo_payload, archived=True), InclusionOptions(include_archived=True))
    assert not should_include_project(_repo(repo_payload, fork=True))
    assert not should_include_project(_repo(repo_payload, disabled=True), InclusionOptions(include_archived=True))
    assert not should_include_project(_repo(repo_payload, stargazers_count=2), InclusionOptions(min_stars=5))
    assert not should_include_project(_repo(repo_payload, description=None, stargazers_count=0))


def test_should_include_project_needs_description_or_stars(repo_payload):
    assert should_include_project(_repo(repo_payload, description="", stargazers_count=5))
    assert should_include_project(_repo(repo_payload, description="x", stargazers_count=0))
    assert not should_include_project(_repo(repo_payload, description="", stargazers_count=0))
