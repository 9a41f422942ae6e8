"""Tests for the JSON-LD, Microdata and RDFa parsers."""

from unittest.mock import patch

from structdata.constants import FORMAT_JSONLD, FORMAT_MICRODATA, FORMAT_RDFA, RAW_SNIPPET_LENGTH
from structdata.document import load_document
from structdata.parsers import PARSERS, JsonLdParser, MicrodataParser, RdfaParser


def parser_for(parser_cls, html, base_url=None):
    return parser_cls(load_document(html, base_url=base_url))


class TestParserRegistry:
    """Test cases for the PARSERS map."""

    def test_all_formats_registered_in_order(self):
        assert list(PARSERS) == [FORMAT_JSONLD, FORMAT_MICRODATA, FORMAT_RDFA]

    def test_format_names(self):
        for format_name, parser_cls in PARSERS.items():
            assert parser_cls.format_name == format_name


class TestJsonLdParser:
    """Test cases for JsonLdParser."""

    def test_detect(self, page_with_jsonld):
        html = page_with_jsonld('{"@context": "https://schema.org", "@type": "Person", "name": "Jane"}')

        assert parser_for(JsonLdParser, html).detect() is True
        assert parser_for(JsonLdParser, "<html><body></body></html>").detect() is False

    def test_detect_ignores_case_and_parameters(self):
        html = '<script type="Application/LD+JSON; charset=utf-8">{"@context": "https://schema.org", "@type": "Thing", "name": "x"}</script>'
        parser = parser_for(JsonLdParser, html)

        assert parser.detect() is True
        assert len(parser.extract()) == 1

    def test_extract_single_object(self, page_with_jsonld):
        html = page_with_jsonld('{"@context": "https://schema.org", "@type": "Person", "name": "Jane"}')
        payloads = parser_for(JsonLdParser, html).extract()

        assert len(payloads) == 1
        assert payloads[0].format == FORMAT_JSONLD
        assert payloads[0].source_index == 0
        assert payloads[0].data["name"] == "Jane"
        assert payloads[0].is_error is False

    def test_extract_array_block(self, page_with_jsonld):
        html = page_with_jsonld(
            '[{"@context": "https://schema.org", "@type": "Person", "name": "A"},'
            ' {"@context": "https://schema.org", "@type": "Person", "name": "B"}]'
        )
        payloads = parser_for(JsonLdParser, html).extract()

        assert [p.data["name"] for p in payloads] == ["A", "B"]
        assert all(p.source_index == 0 for p in payloads)

    def test_malformed_block_recorded_and_later_blocks_extracted(self, page_with_jsonld):
        html = page_with_jsonld(
            '{"@context": "https://schema.org", "@type": "Person", "name": }',
            '{"@context": "https://schema.org", "@type": "Organization", "name": "Acme"}',
        )
        payloads = parser_for(JsonLdParser, html).extract()

        assert len(payloads) == 2
        assert payloads[0].is_error
        assert payloads[0].source_index == 0
        assert payloads[0].error.startswith("Invalid JSON-LD syntax")
        assert payloads[0].data is None
        assert payloads[1].data["@type"] == "Organization"
        assert payloads[1].source_index == 1

    def test_malformed_raw_is_truncated(self, page_with_jsonld):
        html = page_with_jsonld("{" + '"x": 1,' * 100)
        payloads = parser_for(JsonLdParser, html).extract()

        assert payloads[0].is_error
        assert len(payloads[0].raw) <= RAW_SNIPPET_LENGTH

    def test_too_deeply_nested_block_recorded(self, page_with_jsonld):
        html = page_with_jsonld(
            "[" * 100000,
            '{"@context": "https://schema.org", "@type": "Person", "name": "Jane"}',
        )
        payloads = parser_for(JsonLdParser, html).extract()

        assert len(payloads) == 2
        assert payloads[0].is_error
        assert "nested too deeply" in payloads[0].error
        assert len(payloads[0].raw) <= RAW_SNIPPET_LENGTH
        assert payloads[1].data["name"] == "Jane"

    def test_objects_without_context_or_type_are_skipped(self, page_with_jsonld):
        html = page_with_jsonld(
            '{"@type": "Person", "name": "No context"}',
            '{"@context": "https://schema.org", "name": "No type"}',
            '{"@context": "https://schema.org", "@id": "https://example.com/#org"}',
        )
        payloads = parser_for(JsonLdParser, html).extract()

        assert len(payloads) == 1
        assert payloads[0].data["@id"] == "https://example.com/#org"

    def test_graph_container_is_accepted(self, page_with_jsonld):
        html = page_with_jsonld(
            '{"@context": "https://schema.org", "@graph": ['
            '{"@type": "Organization", "name": "Acme"}, {"@type": "WebSite", "name": "Acme"}]}'
        )
        parser = parser_for(JsonLdParser, html)
        payloads = parser.extract()

        assert len(payloads) == 1
        assert parser.extract_schema_types(payloads) == ["Organization", "WebSite"]

    def test_empty_block_skipped(self, page_with_jsonld):
        html = page_with_jsonld("   ")

        assert parser_for(JsonLdParser, html).extract() == []

    def test_is_valid(self):
        assert JsonLdParser.is_valid({"@context": "https://schema.org", "@type": "Thing"})
        assert JsonLdParser.is_valid({"@graph": []})
        assert not JsonLdParser.is_valid({"@type": "Thing"})


MICRODATA_PERSON = """
<html><body>
<div itemscope itemtype="https://schema.org/Person" itemid="#jane">
  <h2 itemprop="name">Jane Doe</h2>
  <a itemprop="url" href="/jane">Profile</a>
  <img itemprop="image" src="img/jane.png" alt="Jane">
  <span itemprop="telephone">555-0100</span>
  <span itemprop="telephone">555-0101</span>
  <meta itemprop="birthDate" content="1980-04-01">
  <div itemprop="worksFor" itemscope itemtype="https://schema.org/Organization">
    <span itemprop="name">Acme</span>
  </div>
</div>
</body></html>
"""


class TestMicrodataParser:
    """Test cases for MicrodataParser."""

    def test_detect(self):
        assert parser_for(MicrodataParser, MICRODATA_PERSON).detect() is True
        assert parser_for(MicrodataParser, "<html><body><p>x</p></body></html>").detect() is False

    def test_extract_person(self):
        parser = parser_for(MicrodataParser, MICRODATA_PERSON, base_url="https://example.com/team/")
        payloads = parser.extract()

        assert len(payloads) == 1
        data = payloads[0].data
        assert data["@type"] == "Person"
        assert data["@id"] == "#jane"
        assert data["name"] == "Jane Doe"
        assert data["url"] == "https://example.com/jane"
        assert data["image"] == "https://example.com/team/img/jane.png"
        assert data["birthDate"] == "1980-04-01"

    def test_repeated_property_becomes_list(self):
        data = parser_for(MicrodataParser, MICRODATA_PERSON).extract()[0].data

        assert data["telephone"] == ["555-0100", "555-0101"]

    def test_nested_scope_is_isolated(self):
        data = parser_for(MicrodataParser, MICRODATA_PERSON).extract()[0].data

        assert data["worksFor"] == {"@type": "Organization", "name": "Acme"}
        assert data["name"] == "Jane Doe"

    def test_sibling_roots(self):
        html = """
        <div itemscope itemtype="http://schema.org/Person"><span itemprop="name">A</span></div>
        <div itemscope itemtype="http://schema.org/Person"><span itemprop="name">B</span></div>
        """
        payloads = parser_for(MicrodataParser, html).extract()

        assert [p.data["name"] for p in payloads] == ["A", "B"]
        assert [p.source_index for p in payloads] == [0, 1]

    def test_failing_root_does_not_stop_siblings(self):
        html = """
        <div id="broken" itemscope itemtype="http://schema.org/Person"><span itemprop="name">A</span></div>
        <div itemscope itemtype="http://schema.org/Person"><span itemprop="name">B</span></div>
        """
        original = MicrodataParser._extract_item

        def extract_item(parser, scope):
            if scope.get("id") == "broken":
                raise ValueError("boom")
            return original(parser, scope)

        with patch.object(MicrodataParser, "_extract_item", extract_item):
            payloads = parser_for(MicrodataParser, html).extract()

        assert len(payloads) == 2
        assert payloads[0].is_error
        assert payloads[0].source_index == 0
        assert payloads[0].error == "Microdata extraction failed: boom"
        assert 'id="broken"' in payloads[0].raw
        assert payloads[1].data["name"] == "B"
        assert payloads[1].source_index == 1

    def test_untyped_or_empty_scope_skipped(self):
        html = """
        <div itemscope><span itemprop="name">No type</span></div>
        <div itemscope itemtype="https://schema.org/Thing"></div>
        """

        assert parser_for(MicrodataParser, html).extract() == []

    def test_multiple_types(self):
        html = '<div itemscope itemtype="https://schema.org/Product https://schema.org/Car"><span itemprop="name">Z</span></div>'
        data = parser_for(MicrodataParser, html).extract()[0].data

        assert data["@type"] == ["Product", "Car"]

    def test_extract_schema_types_includes_nested(self):
        parser = parser_for(MicrodataParser, MICRODATA_PERSON)

        assert parser.extract_schema_types(parser.extract()) == ["Person", "Organization"]


RDFA_PERSON = """
<html prefix="dc: http://purl.org/dc/terms/"><body>
<div vocab="https://schema.org/" typeof="Person">
  <span property="name">Jane Doe</span>
  <a property="url" href="https://jane.example.com/">Site</a>
  <span property="dc:title" content="Engineer">Eng.</span>
  <div property="address" typeof="PostalAddress">
    <span property="streetAddress">1 Main St</span>
  </div>
</div>
</body></html>
"""


class TestRdfaParser:
    """Test cases for RdfaParser."""

    def test_failing_root_does_not_stop_siblings(self):
        html = """
        <div id="broken" vocab="https://schema.org/" typeof="Person"><span property="name">A</span></div>
        <div vocab="https://schema.org/" typeof="Person"><span property="name">B</span></div>
        """
        original = RdfaParser._extract_item

        def extract_item(parser, element, namespaces):
            if element.get("id") == "broken":
                raise ValueError("boom")
            return original(parser, element, namespaces)

        with patch.object(RdfaParser, "_extract_item", extract_item):
            payloads = parser_for(RdfaParser, html).extract()

        assert len(payloads) == 2
        assert payloads[0].is_error
        assert payloads[0].error == "RDFa extraction failed: boom"
        assert payloads[1].data["name"] == "B"
        assert payloads[1].source_index == 1

    def test_detect(self):
        assert parser_for(RdfaParser, RDFA_PERSON).detect() is True
        assert parser_for(RdfaParser, "<html><body><p>x</p></body></html>").detect() is False

    def test_extract_person(self):
        payloads = parser_for(RdfaParser, RDFA_PERSON).extract()

        assert len(payloads) == 1
        data = payloads[0].data
        assert data["@context"] == "https://schema.org/"
        assert data["@type"] == "Person"
        assert data["name"] == "Jane Doe"
        assert data["url"] == "https://jane.example.com/"

    def test_content_attribute_and_prefix(self):
        data = parser_for(RdfaParser, RDFA_PERSON).extract()[0].data

        assert data["title"] == "Engineer"

    def test_nested_typeof(self):
        data = parser_for(RdfaParser, RDFA_PERSON).extract()[0].data

        assert data["address"] == {"@type": "PostalAddress", "streetAddress": "1 Main St"}
        assert "streetAddress" not in data

    def test_namespaces(self):
        namespaces = parser_for(RdfaParser, RDFA_PERSON).namespaces()

        assert namespaces["dc"] == "http://purl.org/dc/terms/"
        assert namespaces["schema"] == "http://schema.org/"

    def test_prefixed_typeof(self):
        html = '<div typeof="schema:Event"><span property="schema:name">Launch</span></div>'
        data = parser_for(RdfaParser, html).extract()[0].data

        assert data["@type"] == "Event"
        assert data["name"] == "Launch"

    def test_about_sets_id(self):
        html = '<div about="https://example.com/#me" typeof="Person"><span property="name">Me</span></div>'
        data = parser_for(RdfaParser, html).extract()[0].data

        assert data["@id"] == "https://example.com/#me"

    def test_vocab_without_properties_skipped(self):
        html = '<body vocab="https://schema.org/"><p>Just text</p></body>'

        assert parser_for(RdfaParser, html).extract() == []

    def test_is_valid(self):
        assert RdfaParser.is_valid({"@type": "Person"})
        assert RdfaParser.is_valid({"name": "x"})
        assert not RdfaParser.is_valid({"@context": "https://schema.org/"})
