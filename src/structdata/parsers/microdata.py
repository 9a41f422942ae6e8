"""Microdata parser."""

import logging
from typing import Any, Iterable, List

from bs4 import Tag

from structdata.constants import FORMAT_MICRODATA
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


class MicrodataParser:
    """Extract ``itemscope`` items from a document."""

    format_name = FORMAT_MICRODATA

    def __init__(self, document: PageDocument):
        self.document = document

    def detect(self) -> bool:
        soup = self.document.soup
        return (
            soup.find(attrs={'itemscope': True}) is not None
            or soup.find(attrs={'itemtype': True}) is not None
        )

    def _roots(self) -> List[Tag]:
        """Scopes that are not nested inside another scope."""
        return [
            scope for scope in self.document.find_all(attrs={'itemscope': True})
            if scope.find_parent(attrs={'itemscope': True}) is None
        ]

    def extract(self) -> List[RawPayload]:
        payloads: List[RawPayload] = []

        for index, root in enumerate(self._roots()):
            try:
                item = self._extract_item(root)
            except Exception as e:
                payloads.append(error_payload(
                    FORMAT_MICRODATA, index, f"Microdata extraction failed: {e}", str(root)
                ))
                continue

            if self.is_valid(item):
                payloads.append(RawPayload(format=FORMAT_MICRODATA, source_index=index, data=item))
            else:
                logger.debug(f"Skipping Microdata scope {index}: no type or no properties")

        logger.debug(f"Extracted {len(payloads)} Microdata payload(s)")
        return payloads

    def _extract_item(self, scope: Tag) -> dict:
        item: dict = {}

        types = [t for t in (type_name(token) for token in attr_text(scope, 'itemtype').split()) if t]
        if len(types) == 1:
            item['@type'] = types[0]
        elif types:
            item['@type'] = types

        itemid = attr_text(scope, 'itemid').strip()
        if itemid:
            item['@id'] = itemid

        self._walk(scope, item)
        return item

    def _walk(self, boundary: Tag, item: dict) -> None:
        """Attribute the properties below ``boundary`` to ``item``.

        Descent stops at nested scopes; their properties belong to them.
        """
        for child in boundary.find_all(True, recursive=False):
            names = attr_text(child, 'itemprop').split()
            if names:
                if child.has_attr('itemscope'):
                    value = self._extract_item(child)
                else:
                    value = element_value(child, self.document)
                for name in names:
                    add_property(item, name, value)

            if child.has_attr('itemscope'):
                continue
            self._walk(child, item)

    @staticmethod
    def is_valid(item: dict) -> bool:
        return bool(item.get('@type')) and has_properties(item)

    def extract_schema_types(self, items: Iterable[Any]) -> List[str]:
        return collect_schema_types(items, nested=True)
