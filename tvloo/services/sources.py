"""
Data Sources

Wires the upstream playlist and guide into their own TimedCache instances.
"""
import asyncio
from functools import partial
import logging

import httpx

from tvloo.config import CustomSettings
from tvloo.services.cache import CacheStats, TimedCache
from tvloo.services.fetch_types import Channel, Guide
from tvloo.services.guide_parser import parse_xmltv
from tvloo.services.playlist_parser import parse_m3u
from tvloo.utils.http import fetch_text
from tvloo.utils.logging_helpers import log_parse_summary, log_source_download


logger = logging.getLogger(__name__)


async def load_playlist(
    url: str,
    *,
    timeout: float = 10.0,
    max_retries: int = 2,
    transport: httpx.AsyncBaseTransport | None = None
) -> list[Channel]:
    """Download and parse the playlist.

    Raises:
        FetchError: If the playlist cannot be downloaded
    """
    log_source_download(logger, "playlist", url)
    content = await fetch_text(url, timeout=timeout, max_retries=max_retries, transport=transport)
    channels = parse_m3u(content)
    log_parse_summary(logger, "playlist", len(channels), "channels")
    return channels


async def load_guide(
    url: str,
    *,
    timeout: float = 30.0,
    max_retries: int = 2,
    transport: httpx.AsyncBaseTransport | None = None
) -> Guide:
    """Download and parse the XMLTV guide.

    Guides can be tens of megabytes, so parsing is offloaded to the default
    thread pool executor to avoid blocking the event loop.

    Raises:
        FetchError: If the guide cannot be downloaded
    """
    log_source_download(logger, "guide", url)
    content = await fetch_text(url, timeout=timeout, max_retries=max_retries, transport=transport)
    loop = asyncio.get_running_loop()
    guide = await loop.run_in_executor(None, parse_xmltv, content)
    log_parse_summary(logger, "guide", sum(len(p) for p in guide.values()), "programmes")
    return guide


class DataSources:
    """Playlist cache plus optional guide cache, queried together."""

    def __init__(
        self,
        playlist: TimedCache[list[Channel]],
        guide: TimedCache[Guide] | None = None
    ):
        self.playlist = playlist
        self.guide = guide

    async def get_channels(self) -> list[Channel]:
        return await self.playlist.get() or []

    async def get_guide(self) -> Guide | None:
        if self.guide is None:
            return None
        return await self.guide.get()

    async def load(self) -> tuple[list[Channel], Guide | None]:
        """Fetch channels and guide concurrently."""
        channels, guide = await asyncio.gather(self.get_channels(), self.get_guide())
        return channels, guide

    def clear(self) -> None:
        self.playlist.clear()
        if self.guide is not None:
            self.guide.clear()

    def stats(self) -> dict[str, CacheStats | None]:
        return {
            "playlist": self.playlist.stats(),
            "guide": self.guide.stats() if self.guide is not None else None,
        }


def build_sources(
    settings: CustomSettings,
    transport: httpx.AsyncBaseTransport | None = None
) -> DataSources:
    """
    Create the playlist and guide caches from settings.

    Args:
        settings: Loaded application settings
        transport: Optional httpx transport shared by both loaders (used by tests)

    Returns:
        DataSources with independent caches
    """
    playlist_cache = TimedCache(
        "playlist",
        partial(
            load_playlist,
            settings.m3u_url,
            timeout=settings.playlist_timeout_sec,
            max_retries=settings.fetch_max_retries,
            transport=transport,
        ),
        settings.playlist_cache_ttl_sec,
    )

    guide_cache = None
    if settings.epg_url:
        guide_cache = TimedCache(
            "guide",
            partial(
                load_guide,
                settings.epg_url,
                timeout=settings.guide_timeout_sec,
                max_retries=settings.fetch_max_retries,
                transport=transport,
            ),
            settings.guide_cache_ttl_sec,
        )

    return DataSources(playlist_cache, guide_cache)
