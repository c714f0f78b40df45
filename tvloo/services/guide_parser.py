from datetime import datetime
import logging
import re

from tvloo.services.fetch_types import Guide, Program
from tvloo.utils.text import decode_xml_entities
from tvloo.utils.timezone import parse_xmltv_time, utc_now

logger = logging.getLogger(__name__)

UNKNOWN_PROGRAM_TITLE = "Programme inconnu"

_PROGRAMME_RE = re.compile(r"<programme\b([^>]*)>(.*?)</programme>", re.DOTALL)
_START_RE = re.compile(r'\bstart="([^"]+)"')
_STOP_RE = re.compile(r'\bstop="([^"]+)"')
_CHANNEL_RE = re.compile(r'\bchannel="([^"]+)"')
_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>")
_DESC_RE = re.compile(r"<desc[^>]*>([^<]+)</desc>")
_CATEGORY_RE = re.compile(r"<category[^>]*>([^<]+)</category>")


def parse_xmltv(content: str, now: datetime | None = None) -> Guide:
    """
    Parse XMLTV text into programmes grouped by channel identifier

    The guide is scanned for ``<programme>`` blocks rather than parsed as a
    document, so truncated or otherwise invalid XML still yields every block
    that is intact. Blocks missing a start, stop or channel attribute are
    skipped.

    Args:
        content: Raw XMLTV text
        now: Fallback for unparseable timestamps (defaults to current UTC time)

    Returns:
        Mapping of channel id to programmes sorted by start time
    """
    fallback = now if now is not None else utc_now()
    guide: Guide = {}
    skipped = 0

    for match in _PROGRAMME_RE.finditer(content):
        attributes, body = match.group(1), match.group(2)
        start = _search(_START_RE, attributes)
        stop = _search(_STOP_RE, attributes)
        channel_id = _search(_CHANNEL_RE, attributes)
        if start is None or stop is None or channel_id is None:
            skipped += 1
            continue

        title = _search_text(_TITLE_RE, body)
        program = Program(
            start=parse_xmltv_time(start, fallback),
            stop=parse_xmltv_time(stop, fallback),
            title=title if title is not None else UNKNOWN_PROGRAM_TITLE,
            description=_search_text(_DESC_RE, body),
            category=_search_text(_CATEGORY_RE, body),
        )
        guide.setdefault(channel_id, []).append(program)

    for programs in guide.values():
        programs.sort(key=lambda p: p.start)

    if skipped:
        logger.debug("Skipped %s malformed programme blocks", skipped)
    logger.info("Guide parsed: %s channels", len(guide))

    return guide


def _search(regex: re.Pattern, text: str) -> str | None:
    match = regex.search(text)
    return match.group(1) if match else None


def _search_text(regex: re.Pattern, text: str) -> str | None:
    """First matching element text, entity-decoded"""
    value = _search(regex, text)
    return decode_xml_entities(value) if value is not None else None
