"""Shared fixtures for the structured data tests."""

import pytest

from structdata.constants import FORMAT_JSONLD
from structdata.models import RawPayload
from structdata.normalizer import ItemNormalizer


@pytest.fixture
def make_item():
    """Build a CanonicalItem from a JSON-LD shaped dict."""
    def _make(data, format_name=FORMAT_JSONLD, index=0):
        payload = RawPayload(format=format_name, source_index=index, data=data)
        return ItemNormalizer().normalize([payload])[0]
    return _make


def jsonld_page(*blocks: str) -> str:
    """Wrap raw JSON-LD block texts in a minimal HTML page."""
    scripts = "\n".join(
        f'<script type="application/ld+json">{block}</script>' for block in blocks
    )
    return f"<html><head><title>Test</title>{scripts}</head><body><h1>Test</h1></body></html>"


@pytest.fixture
def page_with_jsonld():
    return jsonld_page
