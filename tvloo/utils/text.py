"""
Text helpers

Decoding of the small set of XML character entities found in XMLTV guides.
"""
import re


_NUMERIC_ENTITY_RE = re.compile(r"&#(\d+);")

# Applied in order, one pass each
_NAMED_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&apos;", "'"),
)


def _decode_numeric(match: re.Match) -> str:
    try:
        return chr(int(match.group(1)))
    except (ValueError, OverflowError):
        return match.group(0)


def decode_xml_entities(text: str) -> str:
    """
    Decode XML entities in guide text

    Handles the five predefined named entities and decimal character
    references (``&#NN;``). Unknown entities are left untouched.

    Args:
        text: Raw text content taken from a guide element

    Returns:
        Decoded text
    """
    for entity, replacement in _NAMED_ENTITIES:
        text = text.replace(entity, replacement)
    return _NUMERIC_ENTITY_RE.sub(_decode_numeric, text)
