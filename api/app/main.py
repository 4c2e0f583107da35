from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from app.config import Settings, load_settings
from app.routers import github, health, projects
from app.services.github_client import GitHubClient
from app.services.project_catalog import ProjectCatalog, build_catalog

logger = logging.getLogger("portfolio.api")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)

RUNTIME_HEADER = "x-portfolio-runtime-ms"


def _route_signature(request: Request) -> tuple[str, str]:
    route = request.scope.get("route")
    route_path = str(getattr(route, "path", "") or "") if route is not None else ""
    route_name = str(getattr(route, "name", "") or "") if route is not None else ""
    return route_path or request.url.path, route_name or "unknown"


def _client_identity(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",", 1)[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _append_exposed_headers(existing: Optional[str], extra: list[str]) -> str:
    merged: list[str] = []
    seen: set[str] = set()
    for value in [*(existing or "").split(","), *extra]:
        item = value.strip()
        if not item or item.lower() in seen:
            continue
        seen.add(item.lower())
        merged.append(item)
    return ", ".join(merged)


def _apply_runtime_headers(response: Response, elapsed_ms: float) -> None:
    response.headers[RUNTIME_HEADER] = f"{max(0.1, elapsed_ms):.4f}"
    response.headers["access-control-expose-headers"] = _append_exposed_headers(
        response.headers.get("access-control-expose-headers"),
        [RUNTIME_HEADER],
    )


def create_app(
    settings: Optional[Settings] = None,
    catalog: Optional[ProjectCatalog] = None,
    github_client: Optional[GitHubClient] = None,
) -> FastAPI:
    """Build the API; each argument defaults to what the environment describes."""
    settings = settings or load_settings()
    logging.getLogger("app").setLevel(settings.log_level)
    logger.setLevel(settings.log_level)

    app = FastAPI(title="Portfolio Showcase API", version=health.HEALTH_VERSION)
    app.state.settings = settings
    app.state.catalog = catalog or build_catalog(settings)
    app.state.github_client = github_client or GitHubClient.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_slow_requests(request: Request, call_next):
        start = time.perf_counter()
        status_code: Optional[int] = None
        exc_name: Optional[str] = None
        response = None
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as exc:
            exc_name = exc.__class__.__name__
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            status_code = status_code or 500
            if response is not None:
                _apply_runtime_headers(response, elapsed_ms)
            cfg: Settings = request.app.state.settings
            path, route_name = _route_signature(request)
            should_log = elapsed_ms >= cfg.slow_request_ms or cfg.log_all_requests or status_code >= 500
            if path.startswith("/api") and should_log:
                logger.warning(
                    "slow_api_request method=%s path=%s route=%s status=%s elapsed_ms=%.2f client=%s exception=%s",
                    request.method,
                    path,
                    route_name,
                    status_code,
                    elapsed_ms,
                    _client_identity(request),
                    exc_name or "none",
                )

    @app.get("/", include_in_schema=False)
    async def root():
        """Redirect to API documentation."""
        return RedirectResponse(url="/docs")

    app.include_router(projects.router, prefix="/api", tags=["projects"])
    app.include_router(github.router, prefix="/api", tags=["github"])
    app.include_router(health.router, prefix="/api", tags=["health"])

    logger.info(
        "api_configured github_token=%s usernames=%s static_projects=%s",
        app.state.github_client.has_token,
        ",".join(settings.github_usernames),
        len(app.state.catalog.projects),
    )
    return app


app = create_app()
