"""
Tests for XML entity decoding.
"""
from tvloo.utils.text import decode_xml_entities


class TestDecodeXmlEntities:
    """Test the guide text decoder."""

    def test_named_entities(self):
        assert decode_xml_entities("Tom &amp; Jerry") == "Tom & Jerry"
        assert decode_xml_entities("&lt;b&gt;") == "<b>"
        assert decode_xml_entities("&quot;Quoted&quot; &apos;single&apos;") == "\"Quoted\" 'single'"

    def test_numeric_entities(self):
        assert decode_xml_entities("Caf&#233;") == "Café"
        assert decode_xml_entities("&#39;") == "'"

    def test_plain_text_unchanged(self):
        assert decode_xml_entities("Journal de 20h") == "Journal de 20h"

    def test_unknown_entity_left_alone(self):
        assert decode_xml_entities("&nbsp;") == "&nbsp;"

    def test_out_of_range_reference_left_alone(self):
        assert decode_xml_entities("&#99999999999;") == "&#99999999999;"
