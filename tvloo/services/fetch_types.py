"""
Shared dataclasses produced by the playlist and guide parsers.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Channel:
    """One playlist entry: metadata line plus its stream URL."""
    id: str
    name: str
    url: str
    tvg_id: str | None = None
    logo: str | None = None
    group: str | None = None


@dataclass(frozen=True, slots=True)
class Program:
    """One guide programme, times in UTC."""
    start: datetime
    stop: datetime
    title: str
    description: str | None = None
    category: str | None = None

    def is_airing(self, now: datetime) -> bool:
        return self.start <= now < self.stop


# Channel identifier -> programmes ordered by start time
Guide = dict[str, list[Program]]


__all__ = ["Channel", "Program", "Guide"]
