"""Hand-authored showcase projects and metadata overrides.

Built once at startup (``build_catalog``) and shared read-only by every request.
The static projects double as the fallback payload when GitHub is unreachable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Mapping, Optional

from app.config import Settings
from app.models.project import Project, ProjectCategory, ProjectMetadataOverride, ProjectStatus

_MONTH = timedelta(days=30)


@dataclass(frozen=True)
class ProjectCatalog:
    projects: tuple[Project, ...]
    overrides: Mapping[str, ProjectMetadataOverride]

    def get(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    @property
    def github_urls(self) -> list[str]:
        return [p.github_url for p in self.projects if p.github_url]


def fallback_dates(now: datetime, months_ago: int = 6) -> dict[str, datetime]:
    """Dates relative to startup; "updated" lands a third of the way back from now."""
    return {
        "created_at": now - months_ago * _MONTH,
        "updated_at": now - (months_ago // 3) * _MONTH,
    }


def build_overrides(settings: Settings) -> Mapping[str, ProjectMetadataOverride]:
    return MappingProxyType(
        {
            "bolabaden-infra": ProjectMetadataOverride(
                featured=True,
                custom_title="Bolabaden Infrastructure",
            ),
            "bolabaden-site": ProjectMetadataOverride(
                featured=True,
                custom_title="Bolabaden NextJS Website",
                live_url=settings.site_url,
            ),
            "cloudcradle": ProjectMetadataOverride(featured=True),
            "ai-researchwizard": ProjectMetadataOverride(
                featured=True,
                custom_title="AI Research Wizard",
                live_url=settings.subdomain_url("gptr"),
            ),
            "constellation": ProjectMetadataOverride(featured=True),
            "llm_fallbacks": ProjectMetadataOverride(
                featured=False,
                custom_title="LLM Fallbacks",
            ),
        }
    )


def build_static_projects(settings: Settings, now: datetime) -> tuple[Project, ...]:
    repo = settings.github_profile_url
    return (
        Project(
            id="bolabaden-infra",
            title="Bolabaden Infrastructure",
            description=(
                f"Production-grade self-hosted infrastructure powering {settings.site_domain} "
                "and 8+ live services."
            ),
            long_description=(
                "Docker Compose orchestration of 20+ services behind Traefik with automatic TLS, "
                "health checks and self-healing; standardized environment and secrets handling."
            ),
            technologies=["Docker", "Kubernetes", "Traefik", "Redis", "MongoDB", "Portainer"],
            category=ProjectCategory.INFRASTRUCTURE,
            status=ProjectStatus.ACTIVE,
            github_url=f"{repo}/bolabaden-infra",
            featured=True,
            **fallback_dates(now, 10),
        ),
        Project(
            id="bolabaden-site",
            title="Bolabaden NextJS Website",
            description="Modern portfolio site with SSR, optimized performance, and real-time service integration.",
            technologies=["NextJS", "Tailwind CSS", "TypeScript", "React", "Docker"],
            category=ProjectCategory.FRONTEND,
            status=ProjectStatus.ACTIVE,
            github_url=f"{repo}/bolabaden-site",
            live_url=settings.site_url,
            featured=True,
            **fallback_dates(now, 10),
        ),
        Project(
            id="cloudcradle",
            title="CloudCradle",
            description="Terraform-based Oracle Cloud automation that provisions VCNs, clusters, and instances in minutes.",
            technologies=["Python", "Terraform", "Oracle Cloud", "Kubernetes"],
            category=ProjectCategory.INFRASTRUCTURE,
            status=ProjectStatus.ACTIVE,
            github_url=f"{repo}/cloudcradle",
            featured=True,
            **fallback_dates(now, 11),
        ),
        Project(
            id="ai-researchwizard",
            title="AI Research Wizard",
            description="Multi-model AI research platform that plans, searches, and writes sourced reports.",
            technologies=["Python", "FastAPI", "React", "Docker"],
            category=ProjectCategory.AI_ML,
            status=ProjectStatus.ACTIVE,
            github_url=f"{repo}/ai-researchwizard",
            live_url=settings.subdomain_url("gptr"),
            featured=True,
            **fallback_dates(now, 10),
        ),
        Project(
            id="llm_fallbacks",
            title="LLM Fallbacks",
            description="Fallback routing across LLM providers so requests survive provider outages and rate limits.",
            technologies=["Python", "LiteLLM", "LLM"],
            category=ProjectCategory.AI_ML,
            status=ProjectStatus.ACTIVE,
            github_url=f"{repo}/llm_fallbacks",
            featured=False,
            **fallback_dates(now, 22),
        ),
        Project(
            id="constellation",
            title="Constellation",
            description="Multi-node service mesh monitor with health-aware failover for self-hosted clusters.",
            technologies=["Go", "Docker", "Kubernetes", "Prometheus"],
            category=ProjectCategory.INFRASTRUCTURE,
            status=ProjectStatus.ACTIVE,
            github_url=f"{repo}/constellation",
            featured=True,
            **fallback_dates(now, 9),
        ),
    )


def build_catalog(settings: Settings, now: Optional[datetime] = None) -> ProjectCatalog:
    now = now or datetime.now(timezone.utc)
    return ProjectCatalog(
        projects=build_static_projects(settings, now),
        overrides=build_overrides(settings),
    )
