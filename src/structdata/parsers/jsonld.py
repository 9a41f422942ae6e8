"""JSON-LD parser."""

import json
import logging
from typing import Any, Iterable, List

from bs4 import Tag

from structdata.constants import FORMAT_JSONLD, JSONLD_MIME_TYPE
from structdata.document import PageDocument
from structdata.models import RawPayload
from structdata.parsers._common import attr_text, collect_schema_types, error_payload

logger = logging.getLogger(__name__)


def is_jsonld_script(tag: Tag) -> bool:
    """True for ``<script type="application/ld+json">``, ignoring case and parameters."""
    if tag.name != 'script':
        return False
    mime = attr_text(tag, 'type').split(';')[0].strip().lower()
    return mime == JSONLD_MIME_TYPE


class JsonLdParser:
    """Extract JSON-LD blocks from a document."""

    format_name = FORMAT_JSONLD

    def __init__(self, document: PageDocument):
        self.document = document

    def _blocks(self) -> List[Tag]:
        return self.document.find_all(is_jsonld_script)

    def detect(self) -> bool:
        return len(self._blocks()) > 0

    def extract(self) -> List[RawPayload]:
        """Parse every JSON-LD block.

        Returns:
            One payload per accepted object, plus one error payload per
            block whose text is not valid JSON
        """
        payloads: List[RawPayload] = []

        for index, script in enumerate(self._blocks()):
            text = script.get_text()
            if not text.strip():
                continue

            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                payloads.append(error_payload(
                    FORMAT_JSONLD, index, f"Invalid JSON-LD syntax: {e}", text.strip()
                ))
                continue
            except RecursionError:
                payloads.append(error_payload(
                    FORMAT_JSONLD, index, "JSON-LD block is nested too deeply to parse", text.strip()
                ))
                continue

            objects = data if isinstance(data, list) else [data]
            for obj in objects:
                if not isinstance(obj, dict):
                    logger.debug(f"Skipping non-object JSON-LD value in block {index}")
                    continue
                if not self.is_valid(obj):
                    logger.debug(
                        f"Skipping JSON-LD object in block {index}: "
                        "needs @context and @type or @id"
                    )
                    continue
                payloads.append(RawPayload(format=FORMAT_JSONLD, source_index=index, data=obj))

        logger.debug(f"Extracted {len(payloads)} JSON-LD payload(s)")
        return payloads

    @staticmethod
    def is_valid(obj: dict) -> bool:
        if isinstance(obj.get('@graph'), list):
            return True
        return '@context' in obj and ('@type' in obj or '@id' in obj)

    def extract_schema_types(self, items: Iterable[Any]) -> List[str]:
        return collect_schema_types(items, nested=False, graph=True)
