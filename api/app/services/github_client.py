"""GitHub REST client used by the project pipelines.

- optional token auth (GITHUB_TOKEN / GH_TOKEN via Settings)
- explicit per-request timeout
- every public fetch returns None / [] on failure; errors are logged, never raised
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, NamedTuple, Optional, Sequence
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from app.config import DEFAULT_GITHUB_API_URL, Settings
from app.models.github import GitHubRepository, RepoStats

logger = logging.getLogger(__name__)

GITHUB_HOST = "github.com"
USER_REPOS_PER_PAGE = 100
USER_REPOS_MAX_PAGES = 10  # 1000 repos per user


class GitHubAPIError(RuntimeError):
    def __init__(self, status_code: int, url: str, body: str = "") -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"GitHub API error {status_code} for {url}: {body}")


class RepoRef(NamedTuple):
    owner: str
    repo: str


def parse_github_url(github_url: str) -> Optional[RepoRef]:
    """Extract owner/repo from ``https://github.com/<owner>/<repo>[/...]``.

    Trailing slashes and extra path segments are ignored. Anything that is not
    an http(s) github.com URL with at least two path segments yields None.
    """
    try:
        parsed = urlparse((github_url or "").strip())
        hostname = parsed.hostname
    except ValueError:
        return None
    if parsed.scheme not in {"http", "https"} or hostname != GITHUB_HOST:
        return None
    parts = [part for part in parsed.path.split("/") if part]
    if len(parts) < 2:
        return None
    return RepoRef(owner=parts[0], repo=parts[1])


class GitHubClient:
    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = DEFAULT_GITHUB_API_URL,
        user_agent: str = "portfolio-showcase/1.0",
        timeout: float = 10.0,
    ) -> None:
        self._token = (token or "").strip() or None
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": user_agent,
        }
        if self._token:
            self._headers["Authorization"] = f"Bearer {self._token}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubClient":
        return cls(
            token=settings.github_token,
            base_url=settings.github_api_url,
            timeout=settings.github_timeout_seconds,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def has_token(self) -> bool:
        return self._token is not None

    def _url(self, path: str) -> str:
        return path if path.startswith("http") else f"{self._base_url}{path}"

    async def get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET JSON for a path or full URL. Raises GitHubAPIError for 4xx/5xx."""
        url = self._url(path)
        async with httpx.AsyncClient(timeout=self._timeout, headers=self._headers) as client:
            r = await client.get(url, params=params)
        if r.status_code >= 400:
            raise GitHubAPIError(r.status_code, url, r.text[:200])
        return r.json()

    async def post_json(self, path: str, payload: dict[str, Any]) -> Any:
        url = self._url(path)
        async with httpx.AsyncClient(timeout=self._timeout, headers=self._headers) as client:
            r = await client.post(url, json=payload)
        if r.status_code >= 400:
            raise GitHubAPIError(r.status_code, url, r.text[:200])
        return r.json()

    async def get_json_or_none(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        *,
        context: str = "",
    ) -> Any:
        """Like get_json, but non-2xx, transport and decode failures are logged and yield None."""
        try:
            return await self.get_json(path, params=params)
        except GitHubAPIError as exc:
            logger.warning(
                "github_api_error context=%s status=%s url=%s",
                context or path,
                exc.status_code,
                exc.url,
            )
        except httpx.HTTPError as exc:
            logger.error("github_request_failed context=%s error=%s", context or path, exc)
        except ValueError as exc:
            logger.warning("github_invalid_json context=%s error=%s", context or path, exc)
        return None

    # --- single repository ---

    async def fetch_repo(self, owner: str, repo: str) -> Optional[GitHubRepository]:
        data = await self.get_json_or_none(f"/repos/{owner}/{repo}", context=f"{owner}/{repo}")
        if not isinstance(data, dict):
            return None
        try:
            return GitHubRepository.model_validate(data)
        except ValidationError as exc:
            logger.warning("github_repo_payload_invalid repo=%s/%s errors=%s", owner, repo, exc.error_count())
            return None

    async def get_repo_stats(self, github_url: str) -> Optional[RepoStats]:
        ref = parse_github_url(github_url)
        if ref is None:
            return None
        repo = await self.fetch_repo(ref.owner, ref.repo)
        if repo is None:
            return None
        if repo.created_at is None or repo.last_activity_at is None:
            logger.warning("github_repo_missing_dates repo=%s", repo.full_name)
            return None
        return RepoStats(
            updated_at=repo.last_activity_at,
            created_at=repo.created_at,
            stars=repo.stargazers_count,
            forks=repo.forks_count,
            open_issues=repo.open_issues_count,
            language=repo.language,
            topics=list(repo.topics),
        )

    async def fetch_multiple_repos(self, github_urls: Sequence[str]) -> list[Optional[RepoStats]]:
        """Fetch stats for every URL concurrently; results follow input order, failures are None."""
        urls = list(github_urls)
        if not urls:
            return []
        results = await asyncio.gather(
            *(self.get_repo_stats(url) for url in urls),
            return_exceptions=True,
        )
        return [_settled(result, f"repo_stats:{url}") for url, result in zip(urls, results)]

    # --- user repositories ---

    def _parse_repos(self, items: Iterable[Any], username: str) -> list[GitHubRepository]:
        repos: list[GitHubRepository] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                repos.append(GitHubRepository.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "github_repo_payload_invalid user=%s name=%s errors=%s",
                    username,
                    item.get("full_name") or item.get("name"),
                    exc.error_count(),
                )
        return repos

    async def fetch_user_repos(
        self,
        username: str,
        per_page: int = USER_REPOS_PER_PAGE,
        max_pages: int = USER_REPOS_MAX_PAGES,
        sort: str = "updated",
    ) -> list[GitHubRepository]:
        """List public repos for a user, following pages until one comes back short.

        A failed page ends pagination; pages already fetched are kept.
        """
        out: list[GitHubRepository] = []
        for page in range(1, max_pages + 1):
            data = await self.get_json_or_none(
                f"/users/{username}/repos",
                params={"per_page": per_page, "page": page, "sort": sort},
                context=f"user_repos:{username}",
            )
            if not isinstance(data, list) or not data:
                break
            out.extend(self._parse_repos(data, username))
            if len(data) < per_page:
                break
        return out

    async def fetch_all_user_repos(self, usernames: Sequence[str]) -> list[GitHubRepository]:
        """Fetch every user's repos concurrently, flatten, and drop duplicate full_names (first wins)."""
        names = [name for name in usernames if name]
        if not names:
            return []
        results = await asyncio.gather(
            *(self.fetch_user_repos(name) for name in names),
            return_exceptions=True,
        )
        seen: set[str] = set()
        merged: list[GitHubRepository] = []
        for name, result in zip(names, results):
            repos = _settled(result, f"user_repos:{name}") or []
            for repo in repos:
                key = repo.full_name.lower()
                if key in seen:
                    continue
                seen.add(key)
                merged.append(repo)
        return merged


def _settled(result: Any, context: str) -> Any:
    if isinstance(result, Exception):
        logger.error("github_fetch_failed context=%s error=%r", context, result)
        return None
    if isinstance(result, BaseException):
        raise result
    return result
