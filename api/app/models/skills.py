"""Language skills derived from repository language bytes (GET /api/github/skills)."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SkillCategory(str, Enum):
    FRONTEND = "frontend"
    BACKEND = "backend"
    INFRASTRUCTURE = "infrastructure"
    DATABASE = "database"
    AI_ML = "ai-ml"
    DEVOPS = "devops"


class SkillLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class _SkillModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SkillRepository(_SkillModel):
    name: str
    url: str
    pushed_at: Optional[str] = None


class SkillInsights(_SkillModel):
    repository_count: int
    owner_count: int
    byte_share_pct: float
    recency_score_pct: float


class TechStack(_SkillModel):
    name: str
    category: SkillCategory
    level: SkillLevel
    years_of_experience: float
    experience_label: str
    description: Optional[str] = None
    insights: SkillInsights
    repositories: list[SkillRepository] = Field(default_factory=list)
