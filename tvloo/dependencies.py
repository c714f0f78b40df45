"""
Dependency Providers

The application owns one AddonService (and through it one cache per source).
It is attached to ``app.state`` by the application factory and handed to
route handlers through FastAPI's dependency injection, so tests can build an
app around their own sources.
"""
from fastapi import Request

from tvloo.schemas import Manifest
from tvloo.services.addon_service import AddonService
from tvloo.services.sources import DataSources


def get_addon_service(request: Request) -> AddonService:
    """Addon service registered on the running application"""
    return request.app.state.addon_service


def get_sources(request: Request) -> DataSources:
    """Cached data sources of the running application"""
    return request.app.state.addon_service.sources


def get_manifest(request: Request) -> Manifest:
    return request.app.state.manifest
