"""Service settings read from the environment once at startup."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_GITHUB_USERNAMES = "bolabaden,th3w1zard1"


class FeaturedPolicy(BaseModel):
    """Thresholds used when auto-selecting featured projects."""

    model_config = ConfigDict(frozen=True)

    min_score: int = 58
    max_featured: int = 6
    max_ratio: float = 0.35


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    github_token: Optional[str] = None
    github_api_url: str = DEFAULT_GITHUB_API_URL
    github_timeout_seconds: float = 10.0
    github_usernames: tuple[str, ...] = ("bolabaden", "th3w1zard1")
    github_owner: str = "bolabaden"
    site_domain: str = "bolabaden.org"
    featured: FeaturedPolicy = FeaturedPolicy()
    auto_discover_min_stars: int = 0
    allowed_origins: tuple[str, ...] = ("http://localhost:3000",)
    slow_request_ms: float = 1500.0
    log_all_requests: bool = False
    log_level: str = "INFO"

    @property
    def site_url(self) -> str:
        return f"https://{self.site_domain}"

    @property
    def github_profile_url(self) -> str:
        return f"https://github.com/{self.github_owner}"

    def subdomain_url(self, sub: str) -> str:
        return f"https://{sub}.{self.site_domain}"


def _env(environ: Mapping[str, str], name: str, default: str = "") -> str:
    return (environ.get(name) or default).strip()


def _env_flag(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = _env(environ, name, "1" if default else "").lower()
    return raw in {"1", "true", "yes", "on"}


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(_env(environ, name, str(default)))
    except ValueError:
        return default


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    try:
        return float(_env(environ, name, str(default)))
    except ValueError:
        return default


def _env_list(environ: Mapping[str, str], name: str, default: str) -> tuple[str, ...]:
    raw = _env(environ, name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _github_token(environ: Mapping[str, str]) -> Optional[str]:
    token = _env(environ, "GITHUB_TOKEN") or _env(environ, "GH_TOKEN")
    return token or None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from environment variables (``os.environ`` by default).

    Malformed numeric values fall back to their defaults rather than failing startup.
    """
    env = os.environ if environ is None else environ
    defaults = Settings()
    return Settings(
        github_token=_github_token(env),
        github_api_url=_env(env, "GITHUB_API_URL", DEFAULT_GITHUB_API_URL).rstrip("/"),
        github_timeout_seconds=max(1.0, _env_float(env, "GITHUB_TIMEOUT_SECONDS", defaults.github_timeout_seconds)),
        github_usernames=_env_list(env, "GITHUB_USERNAMES", DEFAULT_GITHUB_USERNAMES),
        github_owner=_env(env, "GITHUB_OWNER", defaults.github_owner),
        site_domain=_env(env, "SITE_DOMAIN", defaults.site_domain),
        featured=FeaturedPolicy(
            min_score=_env_int(env, "FEATURED_MIN_SCORE", defaults.featured.min_score),
            max_featured=_env_int(env, "FEATURED_MAX", defaults.featured.max_featured),
            max_ratio=_env_float(env, "FEATURED_MAX_RATIO", defaults.featured.max_ratio),
        ),
        auto_discover_min_stars=max(0, _env_int(env, "AUTO_DISCOVER_MIN_STARS", 0)),
        allowed_origins=_env_list(env, "ALLOWED_ORIGINS", "http://localhost:3000"),
        slow_request_ms=max(25.0, _env_float(env, "API_SLOW_REQUEST_MS", defaults.slow_request_ms)),
        log_all_requests=_env_flag(env, "API_LOG_ALL_REQUESTS", False),
        log_level=_env(env, "LOG_LEVEL", "INFO").upper(),
    )
