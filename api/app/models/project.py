"""Project view model and response envelopes."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ProjectCategory(str, Enum):
    FRONTEND = "frontend"
    BACKEND = "backend"
    INFRASTRUCTURE = "infrastructure"
    DATABASE = "database"
    AI_ML = "ai-ml"
    DEVOPS = "devops"
    SECURITY = "security"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Project(BaseModel):
    """A showcase project. Serialized with camelCase keys (``githubUrl``, ``createdAt``...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    title: str
    description: str
    technologies: list[str] = Field(default_factory=list)
    category: ProjectCategory
    status: ProjectStatus = ProjectStatus.ACTIVE
    github_url: Optional[str] = None
    live_url: Optional[str] = None
    featured: bool = False
    created_at: datetime
    updated_at: datetime
    long_description: Optional[str] = None
    quality_score: Optional[float] = None

    @model_validator(mode="after")
    def _dates_ordered(self) -> "Project":
        if self.created_at > self.updated_at:
            raise ValueError("createdAt must not be later than updatedAt")
        return self

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ProjectMetadataOverride(BaseModel):
    """Hand-authored overrides merged onto a project with the same id."""

    model_config = ConfigDict(frozen=True)

    featured: Optional[bool] = None
    custom_title: Optional[str] = None
    custom_description: Optional[str] = None
    custom_technologies: Optional[list[str]] = None
    custom_category: Optional[ProjectCategory] = None
    long_description: Optional[str] = None
    live_url: Optional[str] = None


class QualityFactor(BaseModel):
    key: str
    label: str
    weight: float
    score: float


class QualityScoreResult(BaseModel):
    score: int
    factors: list[QualityFactor] = Field(default_factory=list)


class FeaturedCandidate(BaseModel):
    id: str
    score: float
    archived: bool = False
