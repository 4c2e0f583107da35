"""FastAPI dependencies exposing the objects built once in ``create_app``."""

from fastapi import Request

from app.config import Settings
from app.services.github_client import GitHubClient
from app.services.project_catalog import ProjectCatalog


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog(request: Request) -> ProjectCatalog:
    return request.app.state.catalog


def get_github_client(request: Request) -> GitHubClient:
    return request.app.state.github_client
