"""
Shared fixtures for TVLoo tests.
"""
from datetime import datetime, timedelta, timezone

import pytest

from tvloo.config import CustomSettings


SAMPLE_PLAYLIST = '''#EXTM3U
#EXTINF:-1 tvg-id="chan1" tvg-name="Channel One" tvg-logo="http://logo.example.com/one.png" group-title="News",Ignored Label
http://example.com/stream1
#EXTINF:-1 tvg-id="BBC.fr" group-title="Docs",BBC Earth
http://example.com/bbc
#EXTINF:-1,Sports Plus
http://example.com/sports
'''


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def xmltv_time(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y%m%d%H%M%S +0000")


def programme_xml(channel: str, start: datetime, stop: datetime, title: str) -> str:
    return (
        f'<programme start="{xmltv_time(start)}" stop="{xmltv_time(stop)}" channel="{channel}">'
        f'<title lang="fr">{title}</title></programme>'
    )


def live_guide(channel: str = "chan1") -> str:
    """Guide with one programme airing now and one starting later"""
    now = datetime.now(timezone.utc).replace(microsecond=0)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n<tv>\n'
        + programme_xml(channel, now - timedelta(minutes=30), now + timedelta(minutes=30), "Live Show")
        + "\n"
        + programme_xml(channel, now + timedelta(minutes=30), now + timedelta(minutes=90), "Late Show")
        + "\n</tv>\n"
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_playlist() -> str:
    return SAMPLE_PLAYLIST


@pytest.fixture
def settings() -> CustomSettings:
    return CustomSettings(
        _env_file=None,
        m3u_url="http://example.com/list.m3u",
        epg_url="http://example.com/guide.xml",
        fetch_max_retries=1,
        display_timezone="UTC",
    )
