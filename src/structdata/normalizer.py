"""Normalize format-specific payloads into CanonicalItems."""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Union

from structdata.constants import (
    FORMAT_DISPLAY_NAMES,
    FORMAT_JSONLD,
    MAX_ITEM_DEPTH,
    META_KEYS,
    RAW_SNIPPET_LENGTH,
    SCHEMA_ORG_CONTEXT,
)
from structdata.models import CanonicalItem, ContextOrigin, RawPayload
from structdata.utils import nesting_level, type_names

logger = logging.getLogger(__name__)

GRAPH_KEY = '@graph'
VALUE_KEY = '@value'


class ItemNormalizer:
    """Turn accepted RawPayloads into CanonicalItems.

    Every item produced by one ``normalize`` call shares the same
    ``extracted_at`` timestamp. Payloads that cannot be normalized are
    collected in ``failures`` as error payloads; the rest still go through.
    """

    def __init__(self, max_depth: int = MAX_ITEM_DEPTH):
        self.max_depth = max_depth
        self.failures: List[RawPayload] = []

    def normalize(self, payloads: Iterable[RawPayload]) -> List[CanonicalItem]:
        """Normalize extracted payloads.

        Args:
            payloads: Parser output; error payloads are skipped

        Returns:
            Top-level items in payload order, with ``@graph`` members expanded
        """
        extracted_at = datetime.now(timezone.utc)
        items: List[CanonicalItem] = []
        self.failures = []

        for payload in payloads:
            if payload.is_error or payload.data is None:
                continue

            if nesting_level(payload.data, self.max_depth) > self.max_depth:
                self._fail(payload, f"nested more than {self.max_depth} levels deep")
                continue

            try:
                items.extend(self._normalize_payload(payload, extracted_at))
            except RecursionError:
                self._fail(payload, "nested too deeply to normalize")

        logger.debug(f"Normalized {len(items)} item(s)")
        return items

    def _normalize_payload(self, payload: RawPayload, extracted_at: datetime) -> List[CanonicalItem]:
        data = payload.data
        context = self._resolve_context(data.get('@context'), payload.format)

        if not isinstance(data.get(GRAPH_KEY), list):
            return [self._build(data, payload, context, extracted_at)]

        items = []
        if '@type' in data or '@id' in data:
            items.append(self._build(data, payload, context, extracted_at))
        for member in data[GRAPH_KEY]:
            if not isinstance(member, dict):
                continue
            if '@type' not in member and '@id' not in member:
                logger.debug(f"Dropping untyped @graph member in {payload.format} block {payload.source_index}")
                continue
            member_context = context
            if '@context' in member:
                member_context = self._resolve_context(member['@context'], payload.format)
            items.append(self._build(member, payload, member_context, extracted_at))
        return items

    def _fail(self, payload: RawPayload, reason: str) -> None:
        display = FORMAT_DISPLAY_NAMES.get(payload.format, payload.format)
        logger.warning(f"{display} block {payload.source_index} rejected: {reason}")
        self.failures.append(RawPayload(
            format=payload.format,
            source_index=payload.source_index,
            error=f"{display} data is {reason}",
            raw=', '.join(type_names(payload.data.get('@type')))[:RAW_SNIPPET_LENGTH],
        ))

    @staticmethod
    def _resolve_context(original: Any, format_name: str) -> ContextOrigin:
        if format_name == FORMAT_JSONLD:
            if original is None or isinstance(original, str):
                return ContextOrigin(original=original, normalized=SCHEMA_ORG_CONTEXT)
            return ContextOrigin(original=original, normalized=original)
        if original:
            return ContextOrigin(original=original, normalized=original)
        return ContextOrigin(original=None, normalized=SCHEMA_ORG_CONTEXT)

    def _build(
        self,
        data: dict,
        payload: RawPayload,
        context: ContextOrigin,
        extracted_at: datetime,
    ) -> CanonicalItem:
        properties = {
            key: self._convert(value, payload, context, extracted_at)
            for key, value in data.items()
            if key not in META_KEYS and key != GRAPH_KEY
        }
        return CanonicalItem(
            schema_type=_schema_type(data.get('@type')),
            schema_id=data['@id'] if isinstance(data.get('@id'), str) else None,
            properties=properties,
            source_format=payload.format,
            source_index=payload.source_index,
            extracted_at=extracted_at,
            context=context,
        )

    def _convert(
        self,
        value: Any,
        payload: RawPayload,
        context: ContextOrigin,
        extracted_at: datetime,
    ) -> Any:
        if isinstance(value, dict):
            if VALUE_KEY in value:
                return value[VALUE_KEY]
            return self._build(value, payload, context, extracted_at)
        if isinstance(value, list):
            return [self._convert(v, payload, context, extracted_at) for v in value]
        return value


def _schema_type(raw: Any) -> Union[str, list, None]:
    if isinstance(raw, str):
        return raw or None
    if isinstance(raw, list):
        names = [t for t in raw if isinstance(t, str) and t]
        return names or None
    return None


def normalize(payloads: Iterable[RawPayload]) -> List[CanonicalItem]:
    """Convenience wrapper around a fresh ItemNormalizer."""
    return ItemNormalizer().normalize(payloads)
