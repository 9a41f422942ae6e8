"""Data models for structured data analysis."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator, Optional, Tuple, Union

from structdata.constants import (
    FORMATS,
    IMPORTANCE_MEDIUM,
    SCHEMA_ORG_CONTEXT,
)


@dataclass(frozen=True)
class RawPayload:
    """One annotation extracted from the document, before normalization.

    Exactly one of ``data`` and ``error`` is set. Error payloads keep a
    truncated copy of the offending markup in ``raw``.
    """

    format: str
    source_index: int
    data: Optional[dict] = None
    error: Optional[str] = None
    raw: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict:
        if self.is_error:
            return {
                'format': self.format,
                'index': self.source_index,
                'error': self.error,
                'raw': self.raw,
            }
        return {
            'format': self.format,
            'index': self.source_index,
            'data': self.data,
        }


@dataclass(frozen=True)
class ContextOrigin:
    """Vocabulary context of an item: as written, and as interpreted."""

    original: Any = None
    normalized: Any = SCHEMA_ORG_CONTEXT

    def to_dict(self) -> dict:
        return {'_original': self.original, '_normalized': self.normalized}


@dataclass(frozen=True)
class CanonicalItem:
    """A structured data item in the format-independent representation."""

    schema_type: Union[str, list, None]
    schema_id: Optional[str]
    properties: dict
    source_format: str
    source_index: int
    extracted_at: datetime
    context: ContextOrigin = field(default_factory=ContextOrigin)

    @property
    def types(self) -> list:
        """All type names, in declaration order."""
        if self.schema_type is None:
            return []
        if isinstance(self.schema_type, list):
            return list(self.schema_type)
        return [self.schema_type]

    @property
    def primary_type(self) -> Optional[str]:
        types = self.types
        return types[0] if types else None

    def has_type(self, name: str) -> bool:
        return name in self.types

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)

    def has(self, key: str) -> bool:
        """True when the property exists and is not empty."""
        value = self.properties.get(key)
        return value is not None and value != '' and value != [] and value != {}

    def __contains__(self, key: str) -> bool:
        return key in self.properties

    def iter_nested(self) -> Iterator[Tuple[str, "CanonicalItem"]]:
        """Yield (path, item) for every directly nested item."""
        for key, value in self.properties.items():
            if isinstance(value, CanonicalItem):
                yield key, value
            elif isinstance(value, list):
                for i, element in enumerate(value):
                    if isinstance(element, CanonicalItem):
                        yield f"{key}[{i}]", element

    def to_dict(self, include_meta: bool = True) -> dict:
        """Render the item as a JSON-LD shaped dictionary."""
        data: dict = {}
        if include_meta:
            data['@context'] = self.context.to_dict()
        if self.schema_type is not None:
            data['@type'] = self.schema_type
        if self.schema_id is not None:
            data['@id'] = self.schema_id

        for key, value in self.properties.items():
            data[key] = _serialize(value)

        if include_meta:
            data['_format'] = self.source_format
            data['_index'] = self.source_index
            data['_extracted'] = self.extracted_at.isoformat()
        return data


def _serialize(value: Any) -> Any:
    if isinstance(value, CanonicalItem):
        return value.to_dict(include_meta=False)
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


@dataclass
class ValidationIssue:
    """A single error or warning raised while validating an item."""

    severity: str  # error/warning
    message: str
    code: str
    item_index: Optional[int] = None
    path: Optional[str] = None
    schema_type: Optional[str] = None
    item_id: Optional[str] = None
    property_name: Optional[str] = None
    format: Optional[str] = None
    details: dict = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.severity == 'error'

    def to_dict(self) -> dict:
        data = {
            'severity': self.severity,
            'message': self.message,
            'code': self.code,
        }
        for key in ('item_index', 'path', 'schema_type', 'item_id', 'property_name', 'format'):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.details:
            data['details'] = dict(self.details)
        return data


@dataclass
class TypeStatistic:
    """Occurrence counters for one schema type."""

    total: int = 0
    valid: int = 0
    nested: int = 0

    def to_dict(self) -> dict:
        return {'total': self.total, 'valid': self.valid, 'nested': self.nested}


@dataclass
class Recommendation:
    """Actionable advice derived from the analysis."""

    message: str
    importance: str = IMPORTANCE_MEDIUM  # high/medium/low
    schema_type: Optional[str] = None

    @property
    def key(self) -> Tuple[str, Optional[str]]:
        return (self.message, self.schema_type)

    def to_dict(self) -> dict:
        data = {'message': self.message, 'importance': self.importance}
        if self.schema_type is not None:
            data['schema_type'] = self.schema_type
        return data


@dataclass
class Suggestion:
    """Improvement hint from the validation engine (not an issue)."""

    message: str
    code: str

    def to_dict(self) -> dict:
        return {'message': self.message, 'code': self.code}


@dataclass
class FormatSummary:
    """Presence and item counts for one format."""

    found: bool = False
    items: int = 0
    parse_errors: int = 0

    def to_dict(self) -> dict:
        return {'found': self.found, 'items': self.items, 'parse_errors': self.parse_errors}


@dataclass
class IssueCounter:
    """Item/error/warning tallies for one format or type."""

    items: int = 0
    errors: int = 0
    warnings: int = 0

    def to_dict(self) -> dict:
        return {'items': self.items, 'errors': self.errors, 'warnings': self.warnings}


@dataclass
class ItemValidation:
    """Generic validation outcome for one item."""

    valid: bool = True
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    index: Optional[int] = None
    format: Optional[str] = None
    types: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'index': self.index,
            'format': self.format,
            'types': list(self.types),
            'valid': self.valid,
            'errors': [e.to_dict() for e in self.errors],
            'warnings': [w.to_dict() for w in self.warnings],
        }


@dataclass
class ValidationSummary:
    """Aggregate of the generic validation engine over all items."""

    valid: int = 0
    total: int = 0
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    suggestions: list = field(default_factory=list)
    format_stats: dict = field(default_factory=lambda: {f: IssueCounter() for f in FORMATS})
    type_stats: dict = field(default_factory=dict)
    item_results: list = field(default_factory=list)
    score: int = 0

    def to_dict(self) -> dict:
        return {
            'valid': self.valid,
            'total': self.total,
            'score': self.score,
            'errors': [e.to_dict() for e in self.errors],
            'warnings': [w.to_dict() for w in self.warnings],
            'suggestions': [s.to_dict() for s in self.suggestions],
            'format_stats': {k: v.to_dict() for k, v in self.format_stats.items()},
            'type_stats': {k: v.to_dict() for k, v in self.type_stats.items()},
        }


@dataclass
class SpecialValidationResult:
    """Outcome of one special-type validator run on one item."""

    valid: bool
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    stats: dict = field(default_factory=dict)
    recommendations: list = field(default_factory=list)


@dataclass
class TypeBreakdown:
    """Special validation totals for one schema type."""

    total: int = 0
    valid: int = 0
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    stats: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'total': self.total,
            'valid': self.valid,
            'errors': [e.to_dict() for e in self.errors],
            'warnings': [w.to_dict() for w in self.warnings],
            'stats': self.stats,
        }


@dataclass
class SpecialValidationSummary:
    """Aggregate of every special-type validator run."""

    validated_items: int = 0
    valid_items: int = 0
    invalid_items: int = 0
    by_type: dict = field(default_factory=dict)
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    recommendations: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'validated_items': self.validated_items,
            'valid_items': self.valid_items,
            'invalid_items': self.invalid_items,
            'by_type': {k: v.to_dict() for k, v in self.by_type.items()},
            'errors': [e.to_dict() for e in self.errors],
            'warnings': [w.to_dict() for w in self.warnings],
            'recommendations': [r.to_dict() for r in self.recommendations],
        }


@dataclass
class AnalysisResult:
    """Structured data analysis results."""

    has_structured_data: bool = False
    score: int = 0  # 0-100

    # Format breakdown
    formats: dict = field(default_factory=lambda: {f: FormatSummary() for f in FORMATS})

    # Normalized items and their types
    items: list = field(default_factory=list)
    schema_types: dict = field(default_factory=dict)

    # Validation
    validation: ValidationSummary = field(default_factory=ValidationSummary)
    special_validation: SpecialValidationSummary = field(default_factory=SpecialValidationSummary)

    recommendations: list = field(default_factory=list)

    # Malformed annotation blocks
    parse_errors: list = field(default_factory=list)

    summary: dict = field(default_factory=dict)

    # Set when the analysis itself failed
    error: Optional[str] = None

    @property
    def format_count(self) -> int:
        return sum(1 for summary in self.formats.values() if summary.found)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def error_count(self) -> int:
        return len(self.validation.errors)

    @property
    def warning_count(self) -> int:
        return len(self.validation.warnings)

    def to_dict(self) -> dict:
        data = {
            'hasStructuredData': self.has_structured_data,
            'score': self.score,
            'formats': {k: v.to_dict() for k, v in self.formats.items()},
            'items': [item.to_dict() for item in self.items],
            'schemaTypes': {k: v.to_dict() for k, v in self.schema_types.items()},
            'validation': self.validation.to_dict(),
            'specialValidation': self.special_validation.to_dict(),
            'recommendations': [r.to_dict() for r in self.recommendations],
            'parseErrors': [p.to_dict() for p in self.parse_errors],
            'summary': dict(self.summary),
        }
        if self.error is not None:
            data['error'] = self.error
        return data


@dataclass
class AnalysisOutcome:
    """What ``analyze()`` hands back: the score plus the full details."""

    score: int
    details: AnalysisResult

    def to_dict(self) -> dict:
        return {'score': self.score, 'details': self.details.to_dict()}


@dataclass
class SEOProjection:
    """Reduced view of an analysis for page-level SEO scoring."""

    score: int = 0
    has_structured_data: bool = False
    format_count: int = 0
    item_count: int = 0
    schema_type_count: int = 0
    schema_types: dict = field(default_factory=dict)
    error_count: int = 0
    warning_count: int = 0
    recommendations: list = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "SEOProjection":
        return cls(
            score=result.score,
            has_structured_data=result.has_structured_data,
            format_count=result.format_count,
            item_count=result.item_count,
            schema_type_count=len(result.schema_types),
            schema_types={k: v.total for k, v in result.schema_types.items()},
            error_count=result.error_count,
            warning_count=result.warning_count,
            recommendations=list(result.recommendations),
            error=result.error,
        )

    def to_dict(self) -> dict:
        data = {
            'score': self.score,
            'hasStructuredData': self.has_structured_data,
            'formatCount': self.format_count,
            'itemCount': self.item_count,
            'schemaTypeCount': self.schema_type_count,
            'schemaTypes': dict(self.schema_types),
            'errorCount': self.error_count,
            'warningCount': self.warning_count,
            'recommendations': [r.to_dict() for r in self.recommendations],
        }
        if self.error is not None:
            data['error'] = self.error
        return data
