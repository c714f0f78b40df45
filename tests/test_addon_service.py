"""
Tests for catalog, meta and stream handlers.
"""
import asyncio
from datetime import datetime, timezone

from tvloo.schemas import ADDON_LOGO, CATALOG_ID
from tvloo.services.addon_service import AddonService, build_manifest, parse_skip
from tvloo.services.cache import TimedCache
from tvloo.services.fetch_types import Channel, Program
from tvloo.services.playlist_parser import derive_channel_id, parse_m3u
from tvloo.services.sources import DataSources
from tvloo.utils.http import FetchError

from tests.conftest import SAMPLE_PLAYLIST


NOW = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

GUIDE = {
    "chan1": [
        Program(
            start=datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc),
            stop=datetime(2024, 1, 15, 11, 0, tzinfo=timezone.utc),
            title="Journal",
        ),
        Program(
            start=datetime(2024, 1, 15, 11, 0, tzinfo=timezone.utc),
            stop=datetime(2024, 1, 15, 11, 15, tzinfo=timezone.utc),
            title="Météo",
        ),
    ]
}


def static(value):
    async def loader():
        return value
    return loader


def failing():
    async def loader():
        raise FetchError("http://example.com/list.m3u", "HTTP 500")
    return loader


def broken():
    async def loader():
        raise RuntimeError("guide parser crashed")
    return loader


def make_service(channels_loader, guide_loader=None, **kwargs) -> AddonService:
    playlist = TimedCache("playlist", channels_loader, 1800)
    guide = TimedCache("guide", guide_loader, 3600) if guide_loader else None
    return AddonService(DataSources(playlist, guide), display_timezone="UTC", **kwargs)


def numbered_channels(count: int) -> list[Channel]:
    return parse_m3u("".join(f"#EXTINF:-1,Channel {i}\nhttp://example.com/{i}\n" for i in range(count)))


class TestDescribe:
    """Test description text blocks."""

    def test_group_current_and_next(self):
        service = make_service(static([]))
        channel = parse_m3u(SAMPLE_PLAYLIST)[0]

        description = service.describe(channel, GUIDE, NOW)

        assert description == "📺 News\n\n▶️ Journal\n   10:00 - 11:00\n\n⏭️ 11:00 : Météo"

    def test_display_timezone(self):
        service = make_service(static([]))
        service.display_timezone = "Europe/Paris"
        channel = parse_m3u(SAMPLE_PLAYLIST)[0]

        assert "11:00 - 12:00" in service.describe(channel, GUIDE, NOW)

    def test_group_only(self):
        service = make_service(static([]))
        channel = parse_m3u(SAMPLE_PLAYLIST)[0]

        assert service.describe(channel, None, NOW) == "📺 News"

    def test_nothing_known(self):
        service = make_service(static([]))
        channel = parse_m3u(SAMPLE_PLAYLIST)[2]

        assert service.describe(channel, GUIDE, NOW) == "📺 TV"

    def test_stream_title(self):
        service = make_service(static([]))
        channel = parse_m3u(SAMPLE_PLAYLIST)[0]

        assert service.stream_title(channel, GUIDE, NOW) == "Channel One\n▶️ Journal\n📺 News"


class TestCatalog:
    """Test catalog pages."""

    def test_lists_channels_with_artwork(self):
        service = make_service(static(parse_m3u(SAMPLE_PLAYLIST)))

        response = asyncio.run(service.catalog("tv", CATALOG_ID))

        assert [m.name for m in response.metas] == ["Channel One", "BBC Earth", "Sports Plus"]
        assert response.metas[0].poster == "http://logo.example.com/one.png"
        assert response.metas[1].poster == ADDON_LOGO
        assert response.metas[0].poster_shape == "square"

    def test_search_is_case_insensitive(self):
        service = make_service(static(parse_m3u(SAMPLE_PLAYLIST)))

        response = asyncio.run(service.catalog("tv", CATALOG_ID, search="bbc"))

        assert [m.name for m in response.metas] == ["BBC Earth"]

    def test_pagination(self):
        service = make_service(static(numbered_channels(120)))

        first = asyncio.run(service.catalog("tv", CATALOG_ID))
        third = asyncio.run(service.catalog("tv", CATALOG_ID, skip="100"))

        assert len(first.metas) == 50
        assert first.metas[0].name == "Channel 0"
        assert [m.name for m in third.metas] == [f"Channel {i}" for i in range(100, 120)]

    def test_unknown_catalog_is_empty(self):
        service = make_service(static(parse_m3u(SAMPLE_PLAYLIST)))

        assert asyncio.run(service.catalog("movie", CATALOG_ID)).metas == []
        assert asyncio.run(service.catalog("tv", "other")).metas == []

    def test_no_data_is_empty(self):
        service = make_service(failing(), failing())

        assert asyncio.run(service.catalog("tv", CATALOG_ID)).metas == []

    def test_unexpected_guide_error_still_lists_channels(self):
        service = make_service(static(parse_m3u(SAMPLE_PLAYLIST)), broken())

        response = asyncio.run(service.catalog("tv", CATALOG_ID))

        assert [m.name for m in response.metas] == ["Channel One", "BBC Earth", "Sports Plus"]

    def test_guide_failure_still_lists_channels(self):
        service = make_service(static(parse_m3u(SAMPLE_PLAYLIST)), failing())

        response = asyncio.run(service.catalog("tv", CATALOG_ID))

        assert len(response.metas) == 3
        assert response.metas[0].description == "📺 News"


class TestMetaAndStream:
    """Test single channel lookups."""

    def test_meta_found(self):
        service = make_service(static(parse_m3u(SAMPLE_PLAYLIST)))
        channel_id = derive_channel_id("BBC Earth")

        response = asyncio.run(service.meta("tv", channel_id))

        assert response.meta.id == channel_id
        assert response.meta.name == "BBC Earth"
        assert response.meta.description == "📺 Docs"

    def test_meta_unknown_id(self):
        service = make_service(static(parse_m3u(SAMPLE_PLAYLIST)))

        assert asyncio.run(service.meta("tv", "tvloo-doesnotexist")).meta is None
        assert asyncio.run(service.meta("tv", "other-prefix")).meta is None
        assert asyncio.run(service.meta("movie", derive_channel_id("BBC Earth"))).meta is None

    def test_meta_without_data(self):
        service = make_service(failing())

        assert asyncio.run(service.meta("tv", derive_channel_id("BBC Earth"))).meta is None

    def test_stream_found(self):
        service = make_service(static(parse_m3u(SAMPLE_PLAYLIST)))

        response = asyncio.run(service.stream("tv", derive_channel_id("Sports Plus")))

        assert len(response.streams) == 1
        stream = response.streams[0]
        assert stream.url == "http://example.com/sports"
        assert stream.title == "Sports Plus"
        assert stream.name == "TVLoo"
        assert stream.behavior_hints.not_web_ready is True

    def test_stream_unknown_id(self):
        service = make_service(static(parse_m3u(SAMPLE_PLAYLIST)))

        assert asyncio.run(service.stream("tv", "tvloo-nope")).streams == []

    def test_stream_without_data(self):
        service = make_service(failing())

        assert asyncio.run(service.stream("tv", derive_channel_id("Sports Plus"))).streams == []


class TestHelpers:
    """Test manifest and request helpers."""

    def test_manifest(self):
        manifest = build_manifest("My Channels").model_dump(by_alias=True)

        assert manifest["id"] == "com.tvloo.iptv"
        assert manifest["resources"] == ["catalog", "meta", "stream"]
        assert manifest["types"] == ["tv"]
        assert manifest["idPrefixes"] == ["tvloo-"]
        catalog = manifest["catalogs"][0]
        assert catalog["id"] == CATALOG_ID
        assert catalog["name"] == "My Channels"
        assert catalog["extra"] == [
            {"name": "search", "isRequired": False},
            {"name": "skip", "isRequired": False},
        ]

    def test_parse_skip(self):
        assert parse_skip(None) == 0
        assert parse_skip("abc") == 0
        assert parse_skip("50") == 50
        assert parse_skip("-10") == 0
        assert parse_skip(25) == 25
