import base64
import logging
import re

from tvloo.services.fetch_types import Channel

logger = logging.getLogger(__name__)

CHANNEL_ID_PREFIX = "tvloo-"
UNKNOWN_CHANNEL_NAME = "Chaîne inconnue"

_EXTINF_TAG = "#EXTINF:"
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")
_ATTRIBUTE_RES = {
    "tvg_id": re.compile(r'tvg-id="([^"]*)"'),
    "tvg_name": re.compile(r'tvg-name="([^"]*)"'),
    "logo": re.compile(r'tvg-logo="([^"]*)"'),
    "group": re.compile(r'group-title="([^"]*)"'),
}


def derive_channel_id(name: str) -> str:
    """
    Build the stable, URL-safe identifier of a channel

    The id only depends on the display name, so two channels sharing a name
    share an id.
    """
    encoded = base64.b64encode(name.encode("utf-8")).decode("ascii")
    return CHANNEL_ID_PREFIX + _NON_ALNUM_RE.sub("", encoded)


def parse_m3u(content: str) -> list[Channel]:
    """
    Parse M3U playlist text into channels, in source order

    Every ``#EXTINF:`` line opens a pending entry which is completed by the
    next non-blank line that is not a comment. An entry that never receives a
    URL is dropped. Malformed metadata never raises; missing attributes are
    simply left empty.

    Args:
        content: Raw playlist text

    Returns:
        List of channels
    """
    channels: list[Channel] = []
    pending: dict[str, str | None] | None = None

    for raw_line in content.split("\n"):
        line = raw_line.strip()

        if line.startswith(_EXTINF_TAG):
            if pending is not None:
                logger.debug("Dropping playlist entry without URL: %s", pending["name"])
            pending = _parse_extinf(line)
        elif line and not line.startswith("#") and pending is not None:
            channels.append(Channel(
                id=derive_channel_id(pending["name"]),
                name=pending["name"],
                url=line,
                tvg_id=pending["tvg_id"],
                logo=pending["logo"],
                group=pending["group"],
            ))
            pending = None

    if pending is not None:
        logger.debug("Dropping trailing playlist entry without URL: %s", pending["name"])

    return channels


def _parse_extinf(line: str) -> dict[str, str | None]:
    """Extract attributes and the display name from an #EXTINF line"""
    fields = {key: _match_attribute(regex, line) for key, regex in _ATTRIBUTE_RES.items()}

    label = None
    comma_index = line.rfind(",")
    if comma_index != -1:
        label = line[comma_index + 1:].strip() or None

    fields["name"] = fields.pop("tvg_name") or label or UNKNOWN_CHANNEL_NAME
    return fields


def _match_attribute(regex: re.Pattern, line: str) -> str | None:
    match = regex.search(line)
    if not match or not match.group(1):
        return None
    return match.group(1)
