from __future__ import annotations

from datetime import datetime, timezone

from app.config import Settings, load_settings
from app.services.project_catalog import build_catalog, fallback_dates


def test_defaults_without_environment():
    settings = load_settings({})

    assert settings.github_token is None
    assert settings.github_api_url == "https://api.github.com"
    assert settings.github_usernames == ("bolabaden", "th3w1zard1")
    assert settings.featured.min_score == 58
    assert settings.featured.max_featured == 6
    assert settings.featured.max_ratio == 0.35
    assert settings.allowed_origins == ("http://localhost:3000",)
    assert settings.slow_request_ms == 1500.0
    assert settings.log_all_requests is False
    assert settings.site_url == "https://bolabaden.org"


def test_environment_overrides():
    settings = load_settings(
        {
            "GH_TOKEN": " tok ",
            "GITHUB_API_URL": "https://ghe.example/api/v3/",
            "GITHUB_USERNAMES": "alice, ,bob",
            "SITE_DOMAIN": "example.dev",
            "FEATURED_MAX": "2",
            "FEATURED_MAX_RATIO": "0.5",
            "API_SLOW_REQUEST_MS": "5",
            "API_LOG_ALL_REQUESTS": "yes",
            "ALLOWED_ORIGINS": "https://a.example,https://b.example",
            "LOG_LEVEL": "debug",
        }
    )

    assert settings.github_token == "tok"
    assert settings.github_api_url == "https://ghe.example/api/v3"
    assert settings.github_usernames == ("alice", "bob")
    assert settings.subdomain_url("gptr") == "https://gptr.example.dev"
    assert settings.featured.max_featured == 2
    assert settings.featured.max_ratio == 0.5
    assert settings.slow_request_ms == 25.0
    assert settings.log_all_requests is True
    assert settings.allowed_origins == ("https://a.example", "https://b.example")
    assert settings.log_level == "DEBUG"


def test_github_token_preferred_over_gh_token():
    assert load_settings({"GITHUB_TOKEN": "primary", "GH_TOKEN": "secondary"}).github_token == "primary"


def test_malformed_numbers_fall_back_to_defaults():
    settings = load_settings({"FEATURED_MIN_SCORE": "lots", "GITHUB_TIMEOUT_SECONDS": "soon"})
    assert settings.featured.min_score == 58
    assert settings.github_timeout_seconds == 10.0


def test_static_catalog_is_consistent():
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    catalog = build_catalog(Settings(site_domain="example.dev"), now)

    ids = [p.id for p in catalog.projects]
    assert len(ids) == len(set(ids)) == 6
    for project in catalog.projects:
        assert project.created_at <= project.updated_at <= now
        assert project.github_url.startswith("https://github.com/bolabaden/")
    assert catalog.get("bolabaden-site").live_url == "https://example.dev"
    assert catalog.get("missing") is None
    assert set(catalog.overrides) >= {"bolabaden-infra", "cloudcradle"}
    assert len(catalog.github_urls) == 6


def test_fallback_dates_are_ordered():
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    dates = fallback_dates(now, 1)
    assert dates["created_at"] < dates["updated_at"] == now
