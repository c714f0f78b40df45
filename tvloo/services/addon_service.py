"""
Addon Service

Business logic behind the catalog, meta and stream handlers. Handlers always
answer with a well-formed response: when no data can be loaded they return
an empty catalog, a null meta or no streams.
"""
from datetime import datetime
import logging

from tvloo.schemas import (
    ADDON_LOGO,
    ADDON_NAME,
    CATALOG_ID,
    CONTENT_TYPE,
    CatalogDefinition,
    CatalogExtra,
    CatalogResponse,
    Manifest,
    MetaPreview,
    MetaResponse,
    Stream,
    StreamResponse,
)
from tvloo.services.fetch_types import Channel, Guide
from tvloo.services.playlist_parser import CHANNEL_ID_PREFIX
from tvloo.services.program_lookup import current_program, next_program
from tvloo.services.sources import DataSources
from tvloo.utils.timezone import format_clock_time, utc_now

logger = logging.getLogger(__name__)

CATALOG_PAGE_SIZE = 50


def build_manifest(catalog_name: str) -> Manifest:
    """Manifest with the configured catalog name"""
    return Manifest(
        catalogs=[
            CatalogDefinition(
                name=catalog_name,
                extra=[CatalogExtra(name="search"), CatalogExtra(name="skip")],
            )
        ],
        id_prefixes=[CHANNEL_ID_PREFIX],
    )


def parse_skip(value: str | int | None) -> int:
    """Pagination offset from a request extra; invalid values mean 0"""
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


class AddonService:
    """Answers host queries from the cached playlist and guide."""

    def __init__(
        self,
        sources: DataSources,
        display_timezone: str = "UTC",
        page_size: int = CATALOG_PAGE_SIZE
    ):
        self.sources = sources
        self.display_timezone = display_timezone
        self.page_size = page_size

    def describe(self, channel: Channel, guide: Guide | None, now: datetime | None = None) -> str:
        """
        Text block for a channel: its group plus what is on now and next.

        Args:
            channel: Playlist channel
            guide: Parsed guide or None
            now: Reference time (defaults to current UTC time)

        Returns:
            Multi-line description
        """
        now = now or utc_now()
        parts = []

        if channel.group:
            parts.append(f"📺 {channel.group}")

        current = current_program(guide, channel.tvg_id, now)
        if current:
            parts.append(f"\n▶️ {current.title}")
            parts.append(f"   {self._clock(current.start)} - {self._clock(current.stop)}")

            upcoming = next_program(guide, channel.tvg_id, now)
            if upcoming:
                parts.append(f"\n⏭️ {self._clock(upcoming.start)} : {upcoming.title}")

        return "\n".join(parts) if parts else "📺 TV"

    def stream_title(self, channel: Channel, guide: Guide | None, now: datetime | None = None) -> str:
        title = channel.name
        current = current_program(guide, channel.tvg_id, now or utc_now())
        if current:
            title += f"\n▶️ {current.title}"
        if channel.group:
            title += f"\n📺 {channel.group}"
        return title

    def to_meta(self, channel: Channel, guide: Guide | None, now: datetime | None = None) -> MetaPreview:
        artwork = channel.logo or ADDON_LOGO
        return MetaPreview(
            id=channel.id,
            name=channel.name,
            poster=artwork,
            background=artwork,
            logo=artwork,
            description=self.describe(channel, guide, now),
        )

    async def catalog(
        self,
        content_type: str,
        catalog_id: str,
        search: str | None = None,
        skip: str | int | None = None
    ) -> CatalogResponse:
        """
        One page of channels, optionally filtered by name.

        Args:
            content_type: Requested content type (only 'tv' is served)
            catalog_id: Requested catalog id
            search: Case-insensitive substring matched against channel names
            skip: Pagination offset

        Returns:
            Catalog page (empty on unknown catalog or missing data)
        """
        if content_type != CONTENT_TYPE or catalog_id != CATALOG_ID:
            return CatalogResponse()

        try:
            channels, guide = await self.sources.load()

            if search:
                term = search.lower()
                channels = [channel for channel in channels if term in channel.name.lower()]

            offset = parse_skip(skip)
            page = channels[offset:offset + self.page_size]

            now = utc_now()
            return CatalogResponse(metas=[self.to_meta(channel, guide, now) for channel in page])
        except Exception as e:
            logger.error(f"Catalog request failed: {e}", exc_info=True)
            return CatalogResponse()

    async def meta(self, content_type: str, channel_id: str) -> MetaResponse:
        if not self._is_own_id(content_type, channel_id):
            return MetaResponse()

        try:
            channel, guide = await self._find_channel(channel_id)
            if channel is None:
                return MetaResponse()
            return MetaResponse(meta=self.to_meta(channel, guide))
        except Exception as e:
            logger.error(f"Meta request failed for {channel_id}: {e}", exc_info=True)
            return MetaResponse()

    async def stream(self, content_type: str, channel_id: str) -> StreamResponse:
        if not self._is_own_id(content_type, channel_id):
            return StreamResponse()

        try:
            channel, guide = await self._find_channel(channel_id)
            if channel is None:
                return StreamResponse()
            return StreamResponse(streams=[
                Stream(name=ADDON_NAME, title=self.stream_title(channel, guide), url=channel.url)
            ])
        except Exception as e:
            logger.error(f"Stream request failed for {channel_id}: {e}", exc_info=True)
            return StreamResponse()

    async def _find_channel(self, channel_id: str) -> tuple[Channel | None, Guide | None]:
        """First channel with the given id (ids derived from equal names collide)"""
        channels, guide = await self.sources.load()
        channel = next((ch for ch in channels if ch.id == channel_id), None)
        if channel is None:
            logger.info(f"Channel not found: {channel_id}")
        return channel, guide

    def _clock(self, value: datetime) -> str:
        return format_clock_time(value, self.display_timezone)

    @staticmethod
    def _is_own_id(content_type: str, channel_id: str) -> bool:
        return content_type == CONTENT_TYPE and channel_id.startswith(CHANNEL_ID_PREFIX)
