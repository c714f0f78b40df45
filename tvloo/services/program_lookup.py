"""
Program Lookup

Finds the programme airing now, or the next one, for a playlist channel.
Playlist ``tvg-id`` values rarely match guide keys exactly, so the lookup
tries a fixed sequence of identifier normalizations.
"""
from datetime import datetime
from typing import Callable

from tvloo.services.fetch_types import Guide, Program
from tvloo.utils.timezone import utc_now

COUNTRY_SUFFIX = ".fr"


def _verbatim(tvg_id: str) -> str:
    return tvg_id


def _lowercase(tvg_id: str) -> str:
    return tvg_id.lower()


def _strip_country_suffix(tvg_id: str) -> str:
    if tvg_id.lower().endswith(COUNTRY_SUFFIX):
        return tvg_id[:-len(COUNTRY_SUFFIX)]
    return tvg_id


def _before_first_dot(tvg_id: str) -> str:
    return tvg_id.split(".", 1)[0]


def _lowercase_without_suffix(tvg_id: str) -> str:
    return _strip_country_suffix(tvg_id).lower()


def _lowercase_before_first_dot(tvg_id: str) -> str:
    return _before_first_dot(tvg_id).lower()


# Tried in order, duplicates removed
IDENTIFIER_STRATEGIES: tuple[Callable[[str], str], ...] = (
    _verbatim,
    _lowercase,
    _strip_country_suffix,
    _before_first_dot,
    _lowercase_without_suffix,
    _lowercase_before_first_dot,
)


def identifier_variants(tvg_id: str) -> list[str]:
    """Distinct candidate guide keys for a playlist tvg-id, in lookup order"""
    variants: list[str] = []
    for strategy in IDENTIFIER_STRATEGIES:
        variant = strategy(tvg_id)
        if variant and variant not in variants:
            variants.append(variant)
    return variants


def _schedule_for(guide: Guide | None, tvg_id: str | None) -> list[Program]:
    """Programmes of the first identifier variant present in the guide"""
    if not guide or not tvg_id:
        return []
    for variant in identifier_variants(tvg_id):
        programs = guide.get(variant)
        if programs:
            return programs
    return []


def current_program(guide: Guide | None, tvg_id: str | None, now: datetime | None = None) -> Program | None:
    """
    Programme airing at ``now`` on the given channel

    Intervals are half-open: a programme stops being current at its own stop
    time.

    Args:
        guide: Parsed guide (may be None when no guide is configured)
        tvg_id: Channel identifier from the playlist
        now: Reference time (defaults to current UTC time)

    Returns:
        The airing programme or None
    """
    now = now or utc_now()
    for program in _schedule_for(guide, tvg_id):
        if program.is_airing(now):
            return program
    return None


def next_program(guide: Guide | None, tvg_id: str | None, now: datetime | None = None) -> Program | None:
    """First programme starting strictly after ``now`` on the given channel"""
    now = now or utc_now()
    for program in _schedule_for(guide, tvg_id):
        if program.start > now:
            return program
    return None
