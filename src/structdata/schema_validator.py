"""
Schema.org conformance checks for a single item.

Checks performed:
- a type is declared and known
- the item carries at least one property
- required and recommended properties per type
- property values match the expected Schema.org data types
- properties are defined for the type
- nested typed items, recursively
"""

import re
from datetime import datetime
from typing import Any, List, Optional
from urllib.parse import urlparse

from structdata.models import CanonicalItem, ItemValidation, ValidationIssue
from structdata.schema_definitions import ANY_THING, DATA_TYPES, get_definition
from structdata.utils import parse_number

ISO_DATE_PATTERN = re.compile(
    r'^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}(:\d{2})?(\.\d+)?(Z|[+-]\d{2}:\d{2})?)?$'
)

# Schemes that are valid URLs without a network location
OPAQUE_URL_SCHEMES = ('mailto', 'tel', 'urn', 'data')


def is_valid_date(value: str) -> bool:
    if not ISO_DATE_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value[:10], '%Y-%m-%d')
    except ValueError:
        return False
    return True


def is_valid_url(value: str) -> bool:
    parsed = urlparse(value.strip())
    if not parsed.scheme:
        return False
    return bool(parsed.netloc) or parsed.scheme.lower() in OPAQUE_URL_SCHEMES


def matches_type(value: Any, expected: str) -> bool:
    """Check one value against one expected Schema.org type."""
    if isinstance(value, CanonicalItem):
        # Untyped nested objects are accepted as-is
        return not value.types or expected == ANY_THING or expected in value.types
    if expected not in DATA_TYPES:
        # A literal never satisfies an object type
        return False
    if expected == 'Text':
        return isinstance(value, str)
    if expected == 'Number':
        return parse_number(value) is not None
    if expected == 'Boolean':
        return isinstance(value, bool) or value in ('true', 'false')
    if expected in ('Date', 'DateTime'):
        return isinstance(value, str) and is_valid_date(value)
    if expected == 'URL':
        return isinstance(value, str) and is_valid_url(value)
    return False


def _join(prefix: str, path: Optional[str]) -> str:
    return f"{prefix}.{path}" if path else prefix


class SchemaValidator:
    """Validate one CanonicalItem against the Schema.org definition table."""

    def validate(self, item: Any) -> ItemValidation:
        """Validate an item and every typed item nested inside it.

        Args:
            item: Normalized item

        Returns:
            ItemValidation; valid when no errors were found
        """
        result = ItemValidation()

        if not isinstance(item, CanonicalItem):
            result.errors.append(ValidationIssue(
                severity='error',
                message="Structured data is not a valid object.",
                code='invalid-data',
            ))
            result.valid = False
            return result

        result.types = item.types
        self._check_structure(item, result)
        for schema_type in item.types:
            self._check_type(item, schema_type, result)
        self._check_nested(item, result)

        result.valid = not result.errors
        return result

    def _check_structure(self, item: CanonicalItem, result: ItemValidation) -> None:
        if not item.types:
            result.errors.append(ValidationIssue(
                severity='error',
                message="@type is missing. Most structured data needs a Schema.org type.",
                code='missing-type',
            ))
        else:
            for schema_type in item.types:
                if not get_definition(schema_type):
                    result.warnings.append(ValidationIssue(
                        severity='warning',
                        message=f"'{schema_type}' is not a known Schema.org type.",
                        code='unknown-type',
                        schema_type=schema_type,
                    ))

        if not any(not key.startswith('@') for key in item.properties) and not item.schema_id:
            result.errors.append(ValidationIssue(
                severity='error',
                message="Structured data has no properties.",
                code='empty-schema',
            ))

    def _check_type(self, item: CanonicalItem, schema_type: str, result: ItemValidation) -> None:
        definition = get_definition(schema_type)
        if not definition:
            return

        for prop in definition.get('required', []):
            if prop not in item:
                result.errors.append(ValidationIssue(
                    severity='error',
                    message=f"'{schema_type}' is missing required property '{prop}'.",
                    code='missing-required-property',
                    schema_type=schema_type,
                    property_name=prop,
                    path=prop,
                ))

        for prop in definition.get('recommended', []):
            if prop not in item:
                result.warnings.append(ValidationIssue(
                    severity='warning',
                    message=f"'{schema_type}' is missing recommended property '{prop}'.",
                    code='missing-recommended-property',
                    schema_type=schema_type,
                    property_name=prop,
                    path=prop,
                ))

        properties = definition.get('properties', {})
        for prop, expected_types in properties.items():
            if prop in item:
                self._check_value_type(item.get(prop), expected_types, prop, schema_type, result)

        for prop in item.properties:
            if prop.startswith('@') or prop.startswith('_'):
                continue
            if prop not in properties:
                result.warnings.append(ValidationIssue(
                    severity='warning',
                    message=f"'{prop}' is not a standard property of '{schema_type}'.",
                    code='unknown-property',
                    schema_type=schema_type,
                    property_name=prop,
                    path=prop,
                ))

    def _check_value_type(
        self,
        value: Any,
        expected_types: List[str],
        prop: str,
        schema_type: str,
        result: ItemValidation,
    ) -> None:
        values = value if isinstance(value, list) else [value]
        for single in values:
            if any(matches_type(single, expected) for expected in expected_types):
                continue
            result.warnings.append(ValidationIssue(
                severity='warning',
                message=(
                    f"Value of '{prop}' on '{schema_type}' does not match the "
                    f"expected type ({', '.join(expected_types)})."
                ),
                code='invalid-property-type',
                schema_type=schema_type,
                property_name=prop,
                path=prop,
                details={'expected_types': list(expected_types)},
            ))

    def _check_nested(self, item: CanonicalItem, result: ItemValidation) -> None:
        for path, nested in item.iter_nested():
            if not nested.types:
                continue
            nested_result = SchemaValidator().validate(nested)
            for issue in nested_result.errors:
                issue.path = _join(path, issue.path)
                result.errors.append(issue)
            for issue in nested_result.warnings:
                issue.path = _join(path, issue.path)
                result.warnings.append(issue)
