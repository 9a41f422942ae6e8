"""RDFa (Lite) parser."""

import logging
import re
from typing import Any, Dict, Iterable, List

from bs4 import Tag

from structdata.constants import DEFAULT_RDFA_NAMESPACES, FORMAT_RDFA
from structdata.document import PageDocument
from structdata.models import RawPayload
from structdata.parsers._common import (
    add_property,
    attr_text,
    collect_schema_types,
    element_value,
    error_payload,
    has_properties,
    type_name,
)

logger = logging.getLogger(__name__)

# "og: http://ogp.me/ns# dc: http://purl.org/dc/terms/"
PREFIX_PATTERN = re.compile(r'([\w.-]*):\s+(\S+)')

RDFA_ATTRIBUTES = ('property', 'typeof', 'vocab', 'resource', 'about')


class RdfaParser:
    """Extract RDFa items from a document."""

    format_name = FORMAT_RDFA

    def __init__(self, document: PageDocument):
        self.document = document

    def detect(self) -> bool:
        return any(
            self.document.soup.find(attrs={attribute: True}) is not None
            for attribute in RDFA_ATTRIBUTES
        )

    def namespaces(self) -> Dict[str, str]:
        """Known prefixes: the defaults plus ``prefix`` declarations on html/head/body."""
        namespaces = dict(DEFAULT_RDFA_NAMESPACES)
        for tag_name in ('html', 'head', 'body'):
            element = self.document.soup.find(tag_name)
            if element is not None and element.get('prefix'):
                for prefix, uri in PREFIX_PATTERN.findall(attr_text(element, 'prefix')):
                    namespaces[prefix] = uri
        return namespaces

    def _roots(self) -> List[Tag]:
        """Vocab elements and outermost typeof/about elements, in document order."""
        roots = []
        for element in self.document.find_all(True):
            if element.has_attr('vocab'):
                roots.append(element)
            elif element.has_attr('typeof') or element.has_attr('about'):
                if element.find_parent(attrs={'typeof': True}) is None:
                    roots.append(element)
        return roots

    def extract(self) -> List[RawPayload]:
        payloads: List[RawPayload] = []
        namespaces = self.namespaces()

        for index, root in enumerate(self._roots()):
            try:
                item = self._extract_item(root, namespaces)
            except Exception as e:
                payloads.append(error_payload(
                    FORMAT_RDFA, index, f"RDFa extraction failed: {e}", str(root)
                ))
                continue

            if self.is_valid(item):
                payloads.append(RawPayload(format=FORMAT_RDFA, source_index=index, data=item))
            else:
                logger.debug(f"Skipping RDFa element {index}: no type and no properties")

        logger.debug(f"Extracted {len(payloads)} RDFa payload(s)")
        return payloads

    def _expand_term(self, term: str, namespaces: Dict[str, str]) -> str:
        """Strip a known prefix (``schema:Person``) or reduce a URI to its term."""
        if '://' in term:
            return type_name(term)
        prefix, sep, local = term.partition(':')
        if sep and prefix in namespaces and local:
            return local
        return term

    def _extract_item(self, element: Tag, namespaces: Dict[str, str]) -> dict:
        item: dict = {}

        vocab = attr_text(element, 'vocab').strip()
        if vocab:
            item['@context'] = vocab

        if element.has_attr('typeof'):
            types = [
                t for t in (self._expand_term(token, namespaces)
                            for token in attr_text(element, 'typeof').split())
                if t
            ]
            if len(types) == 1:
                item['@type'] = types[0]
            elif types:
                item['@type'] = types

        subject = attr_text(element, 'about') or attr_text(element, 'resource')
        if subject.strip():
            item['@id'] = subject.strip()

        self._walk(element, item, namespaces)
        return item

    def _walk(self, boundary: Tag, item: dict, namespaces: Dict[str, str]) -> None:
        """Attribute ``property`` elements below ``boundary`` to ``item``.

        Descent stops at elements that open their own ``typeof`` scope.
        """
        for child in boundary.find_all(True, recursive=False):
            names = attr_text(child, 'property').split()
            if names:
                value = self._property_value(child, namespaces)
                for name in names:
                    add_property(item, self._expand_term(name, namespaces), value)

            if child.has_attr('typeof'):
                continue
            self._walk(child, item, namespaces)

    def _property_value(self, element: Tag, namespaces: Dict[str, str]) -> Any:
        if element.has_attr('typeof'):
            return self._extract_item(element, namespaces)
        if element.has_attr('content'):
            return attr_text(element, 'content')
        if element.has_attr('resource'):
            return self.document.resolve_url(attr_text(element, 'resource'))
        return element_value(element, self.document)

    @staticmethod
    def is_valid(item: dict) -> bool:
        return '@type' in item or has_properties(item)

    def extract_schema_types(self, items: Iterable[Any]) -> List[str]:
        return collect_schema_types(items, nested=True)
