"""Map GitHub repositories onto showcase projects and merge curated metadata."""

from __future__ import annotations

import re
from typing import Mapping, NamedTuple, Optional

from app.models.github import GitHubRepository, InclusionOptions
from app.models.project import Project, ProjectCategory, ProjectMetadataOverride, ProjectStatus

MAX_TOPIC_TECHNOLOGIES = 5
NO_DESCRIPTION = "No description available"

_SLUG_INVALID = re.compile(r"[^a-z0-9-]")
_WORD = re.compile(r"[a-z0-9]+")


class CategoryRule(NamedTuple):
    category: ProjectCategory
    topics: frozenset[str]
    languages: frozenset[str]
    description_words: frozenset[str]


# First matching rule wins.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        ProjectCategory.AI_ML,
        topics=frozenset({"ai", "ml", "llm", "machine-learning", "gpt", "openai"}),
        languages=frozenset(),
        description_words=frozenset({"ai", "llm", "gpt"}),
    ),
    CategoryRule(
        ProjectCategory.INFRASTRUCTURE,
        topics=frozenset({"infrastructure", "devops", "kubernetes", "docker", "terraform", "iac"}),
        languages=frozenset(),
        description_words=frozenset({"infrastructure", "kubernetes", "terraform"}),
    ),
    CategoryRule(
        ProjectCategory.FRONTEND,
        topics=frozenset({"react", "nextjs", "vue", "frontend", "ui"}),
        languages=frozenset({"typescript", "javascript"}),
        description_words=frozenset({"website", "frontend"}),
    ),
    CategoryRule(
        ProjectCategory.BACKEND,
        topics=frozenset({"backend", "api", "server"}),
        languages=frozenset({"python", "go", "rust"}),
        description_words=frozenset({"api", "backend"}),
    ),
    CategoryRule(
        ProjectCategory.DATABASE,
        topics=frozenset({"database", "sql", "nosql", "mongodb", "postgres"}),
        languages=frozenset(),
        description_words=frozenset({"database"}),
    ),
    CategoryRule(
        ProjectCategory.SECURITY,
        topics=frozenset({"security", "auth", "encryption"}),
        languages=frozenset(),
        description_words=frozenset({"security", "auth"}),
    ),
)
DEFAULT_CATEGORY = ProjectCategory.DEVOPS


def infer_category(repo: GitHubRepository) -> ProjectCategory:
    topics = {t.lower() for t in repo.topics}
    language = (repo.language or "").lower()
    words = set(_WORD.findall((repo.description or "").lower()))
    for rule in CATEGORY_RULES:
        if topics & rule.topics or language in rule.languages or words & rule.description_words:
            return rule.category
    return DEFAULT_CATEGORY


def slugify(name: str) -> str:
    return _SLUG_INVALID.sub("-", name.lower())


def titleize(name: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in name.split("-"))


def repo_to_project(repo: GitHubRepository) -> Project:
    technologies = [t for t in [repo.language, *repo.topics[:MAX_TOPIC_TECHNOLOGIES]] if t]
    created_at = repo.created_at or repo.last_activity_at
    updated_at = repo.last_activity_at or created_at
    if created_at is None or updated_at is None:
        raise ValueError(f"repository {repo.full_name} has no timestamps")
    return Project(
        id=slugify(repo.name),
        title=titleize(repo.name),
        description=repo.description or NO_DESCRIPTION,
        technologies=technologies,
        category=infer_category(repo),
        status=ProjectStatus.ARCHIVED if repo.archived else ProjectStatus.ACTIVE,
        github_url=repo.html_url or None,
        live_url=repo.homepage or None,
        featured=False,
        created_at=created_at,
        updated_at=max(updated_at, created_at),
    )


def enrich_project(
    project: Project,
    overrides: Mapping[str, ProjectMetadataOverride],
) -> Project:
    """Merge the override registered for ``project.id``; fields the override leaves unset pass through."""
    meta = overrides.get(project.id)
    if meta is None:
        return project

    update: dict[str, object] = {}
    if meta.custom_title:
        update["title"] = meta.custom_title
    if meta.custom_description:
        update["description"] = meta.custom_description
    if meta.custom_technologies is not None:
        update["technologies"] = list(meta.custom_technologies)
    if meta.custom_category is not None:
        update["category"] = meta.custom_category
    if meta.long_description:
        update["long_description"] = meta.long_description
    if meta.live_url:
        update["live_url"] = meta.live_url
    if meta.featured is not None:
        update["featured"] = meta.featured
    return project.model_copy(update=update)


def should_include_project(repo: GitHubRepository, options: Optional[InclusionOptions] = None) -> bool:
    """Whether a repository is surfaced as a project. Disabled repos never are."""
    options = options or InclusionOptions()
    if repo.disabled:
        return False
    if repo.archived and not options.include_archived:
        return False
    if repo.fork and not options.include_forks:
        return False
    if repo.stargazers_count < options.min_stars:
        return False
    # no curation signal at all
    if not repo.description and repo.stargazers_count == 0:
        return False
    return True
