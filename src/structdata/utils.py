"""Small value helpers shared by the parsers and validators."""

from typing import Any, List, Optional


def as_list(value: Any) -> list:
    """Wrap a single value in a list; ``None`` becomes an empty list."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def type_names(value: Any) -> List[str]:
    """Flatten a raw ``@type`` value (string or list) into type names."""
    return [t for t in as_list(value) if isinstance(t, str) and t]


def text_value(value: Any) -> Optional[str]:
    """Return the textual form of a property value, or None.

    Lists (coalesced duplicates) yield their first textual element.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        for element in value:
            text = text_value(element)
            if text:
                return text
    return None


def parse_number(value: Any) -> Optional[float]:
    """Parse a numeric property value the lenient way browsers do."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def is_absolute_url(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower().startswith(('http://', 'https://'))


def nesting_level(value: Any, limit: int) -> int:
    """Depth of nested dicts/lists in ``value``, counted without recursion.

    Stops descending once ``limit`` is exceeded, so the result is at most
    ``limit + 1``.
    """
    deepest = 0
    stack = [(value, 0)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue
        depth += 1
        deepest = max(deepest, depth)
        if depth > limit:
            return deepest
        stack.extend((child, depth) for child in children)
    return deepest
