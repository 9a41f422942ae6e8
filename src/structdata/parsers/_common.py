"""Helpers shared by the format parsers."""

import logging
from typing import Any, Iterable, List

from bs4 import Tag

from structdata.constants import (
    FORMAT_DISPLAY_NAMES,
    HREF_ELEMENTS,
    LOG_SNIPPET_LENGTH,
    RAW_SNIPPET_LENGTH,
    SRC_ELEMENTS,
    VALUE_ELEMENTS,
)
from structdata.document import PageDocument
from structdata.models import CanonicalItem, RawPayload
from structdata.utils import type_names

logger = logging.getLogger(__name__)


def attr_text(element: Tag, name: str) -> str:
    """Attribute value as a single string (bs4 may hand back a token list)."""
    value = element.get(name)
    if value is None:
        return ''
    if isinstance(value, list):
        return ' '.join(value)
    return value


def element_value(element: Tag, document: PageDocument) -> str:
    """Property value of an element that is not itself an item."""
    name = element.name
    if name == 'meta':
        return attr_text(element, 'content').strip()
    if name in HREF_ELEMENTS:
        return document.resolve_url(attr_text(element, 'href'))
    if name in SRC_ELEMENTS:
        return document.resolve_url(attr_text(element, 'src'))
    if name == 'object':
        return document.resolve_url(attr_text(element, 'data'))
    if name == 'time' and element.get('datetime'):
        return attr_text(element, 'datetime').strip()
    if name in VALUE_ELEMENTS and element.get('value'):
        return attr_text(element, 'value').strip()
    return element.get_text().strip()


def type_name(token: str) -> str:
    """Reduce a vocabulary URI to its term: ``http://schema.org/Person`` -> ``Person``."""
    return token.split('/')[-1].split('#')[-1]


def add_property(item: dict, name: str, value: Any) -> None:
    """Set a property, coalescing repeated names into an ordered list."""
    if name not in item:
        item[name] = value
    elif isinstance(item[name], list):
        item[name].append(value)
    else:
        item[name] = [item[name], value]


def has_properties(data: dict) -> bool:
    return any(not key.startswith('@') for key in data)


def error_payload(format_name: str, index: int, message: str, raw: str) -> RawPayload:
    """Build (and log) the record for one malformed annotation block."""
    raw = raw or ''
    logger.warning(
        f"{FORMAT_DISPLAY_NAMES.get(format_name, format_name)} block {index} "
        f"could not be parsed: {message} [{raw[:LOG_SNIPPET_LENGTH]}...]"
    )
    return RawPayload(
        format=format_name,
        source_index=index,
        error=message,
        raw=raw[:RAW_SNIPPET_LENGTH],
    )


def collect_schema_types(
    items: Iterable[Any],
    nested: bool = True,
    graph: bool = False,
) -> List[str]:
    """Flatten the type markers of extracted items into a first-seen list.

    Args:
        items: RawPayloads, CanonicalItems or raw dicts
        nested: Also collect types of nested property objects
        graph: Also collect types of ``@graph`` members

    Returns:
        De-duplicated type names in first-seen order
    """
    seen: List[str] = []

    def add(names: List[str]) -> None:
        for name in names:
            if name not in seen:
                seen.append(name)

    def visit(node: Any, top: bool) -> None:
        if isinstance(node, RawPayload):
            if not node.is_error:
                visit(node.data, top)
        elif isinstance(node, CanonicalItem):
            add(node.types)
            if nested:
                for value in node.properties.values():
                    visit(value, False)
        elif isinstance(node, dict):
            if node.get('_error'):
                return
            add(type_names(node.get('@type')))
            if graph and isinstance(node.get('@graph'), list):
                for member in node['@graph']:
                    visit(member, False)
            if nested:
                for key, value in node.items():
                    if not key.startswith('@') and not key.startswith('_'):
                        visit(value, False)
        elif isinstance(node, list) and (top or nested):
            for element in node:
                visit(element, top)

    for item in items:
        visit(item, True)
    return seen
