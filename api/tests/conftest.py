"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.config import Settings  # noqa: E402
from app.main import app  # noqa: E402
from app.services.github_client import GitHubClient  # noqa: E402
from app.services.project_catalog import build_catalog  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_app_state() -> None:
    # Tests swap app.state.* for fakes; start each one from the defaults.
    settings = Settings()
    app.state.settings = settings
    app.state.catalog = build_catalog(settings)
    app.state.github_client = GitHubClient()


@pytest_asyncio.fixture
async def api_client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def repo_payload() -> Callable[..., dict[str, Any]]:
    """Factory for GitHub repository JSON as returned by the REST API."""

    def _make(name: str = "demo", owner: str = "bolabaden", **overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": name,
            "full_name": f"{owner}/{name}",
            "html_url": f"https://github.com/{owner}/{name}",
            "homepage": None,
            "description": f"{name} description",
            "language": "Python",
            "topics": [],
            "license": {"name": "MIT License", "spdx_id": "MIT"},
            "created_at": "2023-01-01T00:00:00Z",
            "updated_at": "2024-05-01T00:00:00Z",
            "pushed_at": "2024-06-01T00:00:00Z",
            "stargazers_count": 3,
            "forks_count": 1,
            "open_issues_count": 0,
            "watchers_count": 3,
            "size": 120,
            "archived": False,
            "disabled": False,
            "private": False,
            "fork": False,
            "has_issues": True,
        }
        payload.update(overrides)
        return payload

    return _make
