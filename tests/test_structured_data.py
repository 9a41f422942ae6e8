"""Tests for the structured data analyzer."""

import json

import pytest

from structdata.constants import FORMAT_JSONLD, FORMAT_MICRODATA, FORMAT_RDFA, MSG_ADD_STRUCTURED_DATA
from structdata.models import AnalysisOutcome, SEOProjection
from structdata.structured_data import StructuredDataAnalyzer, analyze, provide_seo_data

PERSON = json.dumps({
    "@context": "https://schema.org",
    "@type": "Person",
    "name": "Jane Doe",
    "url": "https://example.com/jane",
    "image": "https://example.com/jane.png",
})

BREADCRUMB = json.dumps({
    "@context": "https://schema.org",
    "@type": "BreadcrumbList",
    "itemListElement": [
        {"@type": "ListItem", "position": 1, "name": "Home", "item": "https://example.com/"},
        {"@type": "ListItem", "position": 2, "name": "Shoes", "item": "https://example.com/shoes"},
    ],
})

MIXED_PAGE = f"""
<html>
<head><script type="application/ld+json">{PERSON}</script></head>
<body>
  <div itemscope itemtype="https://schema.org/Organization">
    <span itemprop="name">Acme</span>
    <a itemprop="url" href="/">Home</a>
  </div>
  <div vocab="https://schema.org/" typeof="Event">
    <span property="name">Launch</span>
    <time property="startDate" datetime="2024-06-01T18:00">June 1</time>
  </div>
</body>
</html>
"""


class TestStructuredDataAnalyzer:
    """Test cases for StructuredDataAnalyzer."""

    @pytest.fixture
    def analyzer(self):
        return StructuredDataAnalyzer()

    def test_no_structured_data(self, analyzer):
        outcome = analyzer.analyze("<html><head><title>Plain</title></head><body><p>Text</p></body></html>")

        assert isinstance(outcome, AnalysisOutcome)
        assert outcome.score == 0
        assert outcome.details.has_structured_data is False
        assert outcome.details.items == []
        assert outcome.details.recommendations[0].message == MSG_ADD_STRUCTURED_DATA
        assert len(outcome.details.recommendations) == 2

    def test_single_clean_item_scores_40(self, analyzer, page_with_jsonld):
        outcome = analyzer.analyze(page_with_jsonld(PERSON))
        details = outcome.details

        assert outcome.score == 40
        assert details.score == 40
        assert details.has_structured_data is True
        assert details.format_count == 1
        assert details.formats[FORMAT_JSONLD].found is True
        assert details.formats[FORMAT_JSONLD].items == 1
        assert details.formats[FORMAT_MICRODATA].found is False
        assert details.error_count == 0
        assert details.warning_count == 0
        assert details.schema_types["Person"].total == 1
        assert details.schema_types["Person"].valid == 1

    def test_malformed_block_does_not_stop_extraction(self, analyzer, page_with_jsonld):
        outcome = analyzer.analyze(page_with_jsonld('{"@type": "Person", "name": ', PERSON))
        details = outcome.details

        assert len(details.parse_errors) == 1
        assert details.parse_errors[0].source_index == 0
        assert len(details.items) == 1
        assert details.items[0].source_index == 1
        assert details.formats[FORMAT_JSONLD].parse_errors == 1
        assert details.error_count == 1
        # 40 minus one error penalty
        assert outcome.score == 37

    def test_undecodable_nesting_is_isolated(self, analyzer, page_with_jsonld):
        outcome = analyzer.analyze(page_with_jsonld("[" * 100000, PERSON))
        details = outcome.details

        assert details.error is None
        assert len(details.parse_errors) == 1
        assert [item.schema_type for item in details.items] == ["Person"]
        assert outcome.score == 37

    def test_deep_object_is_isolated(self, analyzer, page_with_jsonld):
        deep = {"@type": "Thing", "name": "leaf"}
        for _ in range(400):
            deep = {"@type": "Thing", "subjectOf": deep}
        deep["@context"] = "https://schema.org"

        outcome = analyzer.analyze(page_with_jsonld(json.dumps(deep), PERSON))
        details = outcome.details

        assert details.error is None
        assert len(details.parse_errors) == 1
        assert details.parse_errors[0].source_index == 0
        assert details.formats[FORMAT_JSONLD].parse_errors == 1
        assert [item.schema_type for item in details.items] == ["Person"]
        assert outcome.score == 37

    def test_deterministic(self, analyzer, page_with_jsonld):
        html = page_with_jsonld(PERSON, BREADCRUMB)
        first = analyzer.analyze(html)
        second = analyzer.analyze(html)

        assert first.score == second.score
        assert [i.to_dict(include_meta=False) for i in first.details.items] == \
            [i.to_dict(include_meta=False) for i in second.details.items]
        assert [r.message for r in first.details.recommendations] == \
            [r.message for r in second.details.recommendations]

    def test_all_formats(self, analyzer):
        outcome = analyzer.analyze(MIXED_PAGE, url="https://example.com/about")
        details = outcome.details

        assert details.format_count == 3
        assert [item.source_format for item in details.items] == [FORMAT_JSONLD, FORMAT_MICRODATA, FORMAT_RDFA]
        organization = details.items[1]
        assert organization.get("url") == "https://example.com/"
        assert details.items[2].get("startDate") == "2024-06-01T18:00"
        assert 0 <= outcome.score <= 100

    def test_special_validation_runs(self, analyzer, page_with_jsonld):
        details = analyzer.analyze(page_with_jsonld(BREADCRUMB)).details

        assert details.special_validation.validated_items == 1
        assert details.special_validation.valid_items == 1
        assert "BreadcrumbList" in details.special_validation.by_type

    def test_nested_types_counted(self, analyzer, page_with_jsonld):
        details = analyzer.analyze(page_with_jsonld(BREADCRUMB)).details

        assert details.schema_types["ListItem"].total == 2
        assert details.schema_types["ListItem"].nested == 2
        assert details.schema_types["BreadcrumbList"].nested == 0

    def test_graph_items(self, analyzer, page_with_jsonld):
        graph = json.dumps({
            "@context": "https://schema.org",
            "@graph": [
                {"@type": "Organization", "name": "Acme", "url": "https://acme.example"},
                {"@type": "WebSite", "name": "Acme", "url": "https://acme.example"},
            ],
        })
        details = analyzer.analyze(page_with_jsonld(graph)).details

        assert details.formats[FORMAT_JSONLD].items == 2
        assert [item.schema_type for item in details.items] == ["Organization", "WebSite"]

    def test_bad_input_yields_error_result(self, analyzer):
        outcome = analyzer.analyze(object())

        assert outcome.score == 0
        assert outcome.details.has_structured_data is False
        assert "Unsupported document type" in outcome.details.error

    def test_stage_failure_yields_error_result(self, page_with_jsonld):
        class BrokenParser:
            format_name = FORMAT_JSONLD

            def __init__(self, document):
                pass

            def detect(self):
                raise RuntimeError("boom")

        analyzer = StructuredDataAnalyzer(parsers={FORMAT_JSONLD: BrokenParser})
        outcome = analyzer.analyze(page_with_jsonld(PERSON))

        assert outcome.score == 0
        assert outcome.details.error == "boom"

    def test_to_dict(self, analyzer, page_with_jsonld):
        data = analyzer.analyze(page_with_jsonld(PERSON)).to_dict()

        assert data["score"] == 40
        details = data["details"]
        assert details["hasStructuredData"] is True
        assert details["items"][0]["@type"] == "Person"
        assert "error" not in details
        json.dumps(data)

    def test_provide_seo_data(self, analyzer, page_with_jsonld):
        projection = analyzer.provide_seo_data(page_with_jsonld(PERSON, BREADCRUMB))

        assert isinstance(projection, SEOProjection)
        assert projection.has_structured_data is True
        assert projection.item_count == 2
        assert projection.schema_types["ListItem"] == 2
        assert projection.to_dict()["formatCount"] == 1


class TestModuleHelpers:
    """Test cases for the module-level helpers."""

    def test_analyze(self, page_with_jsonld):
        assert analyze(page_with_jsonld(PERSON)).score == 40

    def test_provide_seo_data(self, page_with_jsonld):
        assert provide_seo_data(page_with_jsonld(PERSON)).score == 40
