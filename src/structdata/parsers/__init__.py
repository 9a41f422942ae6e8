"""
Format parsers

One parser per embedded structured data format:
- JSON-LD (``<script type="application/ld+json">``)
- Microdata (``itemscope`` / ``itemprop``)
- RDFa (``vocab`` / ``typeof`` / ``property``)
"""

from typing import Any, Callable, Dict, Iterable, List, Protocol

from structdata.constants import FORMAT_JSONLD, FORMAT_MICRODATA, FORMAT_RDFA
from structdata.document import PageDocument
from structdata.models import RawPayload
from structdata.parsers.jsonld import JsonLdParser
from structdata.parsers.microdata import MicrodataParser
from structdata.parsers.rdfa import RdfaParser


class FormatParser(Protocol):
    """Capabilities every format parser offers for one document."""

    format_name: str

    def detect(self) -> bool:
        ...

    def extract(self) -> List[RawPayload]:
        ...

    def extract_schema_types(self, items: Iterable[Any]) -> List[str]:
        ...


ParserFactory = Callable[[PageDocument], FormatParser]

# Format name -> parser class, in detection order
PARSERS: Dict[str, ParserFactory] = {
    FORMAT_JSONLD: JsonLdParser,
    FORMAT_MICRODATA: MicrodataParser,
    FORMAT_RDFA: RdfaParser,
}

__all__ = [
    'FormatParser',
    'ParserFactory',
    'PARSERS',
    'JsonLdParser',
    'MicrodataParser',
    'RdfaParser',
]
