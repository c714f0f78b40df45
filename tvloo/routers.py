from typing import Annotated
from urllib.parse import parse_qsl
import logging

from fastapi import APIRouter, Depends

from tvloo import __version__
from tvloo.dependencies import get_addon_service, get_manifest, get_sources
from tvloo.schemas import (
    CacheStatsResponse,
    CatalogResponse,
    HealthResponse,
    Manifest,
    MetaResponse,
    StreamResponse,
)
from tvloo.services.addon_service import AddonService
from tvloo.services.cache import CacheStats
from tvloo.services.sources import DataSources


logger = logging.getLogger(__name__)

main_router = APIRouter()


def parse_extra(extra: str | None) -> dict[str, str]:
    """Decode a Stremio extra path segment like 'search=news&skip=50'"""
    if not extra:
        return {}
    return dict(parse_qsl(extra, keep_blank_values=True))


def _stats_response(stats: CacheStats | None) -> CacheStatsResponse | None:
    return CacheStatsResponse(**stats.to_dict()) if stats is not None else None


@main_router.get("/manifest.json", response_model=Manifest)
async def manifest(manifest: Annotated[Manifest, Depends(get_manifest)]) -> Manifest:
    """Addon manifest"""
    return manifest


@main_router.get("/catalog/{content_type}/{catalog_id}.json", response_model=CatalogResponse)
@main_router.get("/catalog/{content_type}/{catalog_id}/{extra}.json", response_model=CatalogResponse)
async def catalog(
    content_type: str,
    catalog_id: str,
    service: Annotated[AddonService, Depends(get_addon_service)],
    extra: str | None = None
) -> CatalogResponse:
    """
    Channel catalog

    Args:
        content_type: Content type ('tv')
        catalog_id: Catalog id from the manifest
        extra: Optional 'search=...&skip=...' segment

    Returns:
        One page of channel metas
    """
    extras = parse_extra(extra)
    logger.info(f"Catalog request: {content_type}/{catalog_id} extras={extras}")
    return await service.catalog(
        content_type,
        catalog_id,
        search=extras.get("search"),
        skip=extras.get("skip"),
    )


@main_router.get("/meta/{content_type}/{channel_id}.json", response_model=MetaResponse)
async def meta(
    content_type: str,
    channel_id: str,
    service: Annotated[AddonService, Depends(get_addon_service)]
) -> MetaResponse:
    """Channel detail"""
    return await service.meta(content_type, channel_id)


@main_router.get("/stream/{content_type}/{channel_id}.json", response_model=StreamResponse)
async def stream(
    content_type: str,
    channel_id: str,
    service: Annotated[AddonService, Depends(get_addon_service)]
) -> StreamResponse:
    """Playable stream of a channel"""
    return await service.stream(content_type, channel_id)


@main_router.get("/health", response_model=HealthResponse)
async def health_check(sources: Annotated[DataSources, Depends(get_sources)]) -> HealthResponse:
    """Health check endpoint"""
    stats = sources.stats()
    return HealthResponse(
        status="ok",
        version=__version__,
        playlist=_stats_response(stats["playlist"]),
        guide=_stats_response(stats["guide"]),
    )


@main_router.get("/cache/stats")
async def cache_stats(sources: Annotated[DataSources, Depends(get_sources)]) -> dict:
    """Cache statistics for both sources"""
    return {name: stats.to_dict() if stats else None for name, stats in sources.stats().items()}


@main_router.post("/cache/clear")
async def clear_cache(sources: Annotated[DataSources, Depends(get_sources)]) -> dict:
    """
    Drop cached playlist and guide data

    The next query downloads both sources again.
    """
    logger.info("Cache clear triggered via API")
    sources.clear()
    return {"status": "cleared"}
