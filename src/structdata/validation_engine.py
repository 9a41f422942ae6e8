"""Run generic validation over every extracted item and summarize it."""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from structdata.config import AnalysisThresholds, default_thresholds
from structdata.constants import (
    FORMAT_DISPLAY_NAMES,
    FORMAT_JSONLD,
    FORMAT_MICRODATA,
    FORMAT_RDFA,
    HIGHLIGHTED_TYPES,
)
from structdata.models import (
    CanonicalItem,
    IssueCounter,
    ItemValidation,
    RawPayload,
    Suggestion,
    ValidationIssue,
    ValidationSummary,
)
from structdata.schema_validator import SchemaValidator

logger = logging.getLogger(__name__)

UNKNOWN_TYPE = 'UnknownType'


def nesting_depth(item: CanonicalItem, depth: int = 0, limit: int = 10) -> int:
    """Deepest level of nested items below ``item`` (0 when flat)."""
    if depth > limit:
        return depth
    deepest = depth
    for _, nested in item.iter_nested():
        deepest = max(deepest, nesting_depth(nested, depth + 1, limit))
    return deepest


class ValidationEngine:
    """Validate items with SchemaValidator and aggregate the results.

    Each call to ``validate_items`` starts from empty counters.
    """

    def __init__(
        self,
        validator: Optional[SchemaValidator] = None,
        thresholds: Optional[AnalysisThresholds] = None,
    ):
        self.validator = validator or SchemaValidator()
        self.thresholds = thresholds or default_thresholds

    def validate_items(
        self,
        items: Sequence[CanonicalItem],
        parse_errors: Iterable[RawPayload] = (),
    ) -> ValidationSummary:
        """Validate all items.

        Args:
            items: Normalized top-level items
            parse_errors: Error payloads of malformed blocks; each one
                counts as an invalid item with one error

        Returns:
            ValidationSummary with issues, per-format/per-type stats,
            suggestions and the engine score
        """
        summary = ValidationSummary()

        for payload in parse_errors:
            self._record_parse_error(payload, summary)

        for index, item in enumerate(items):
            result = self._validate_one(index, item)
            self._record(result, summary)

        self._check_id_consistency(items, summary)

        summary.score = self._calculate_score(summary)
        summary.suggestions = self._build_suggestions(items, summary)

        logger.debug(
            f"Validated {summary.total} item(s): {summary.valid} valid, "
            f"{len(summary.errors)} error(s), {len(summary.warnings)} warning(s)"
        )
        return summary

    def _validate_one(self, index: int, item: CanonicalItem) -> ItemValidation:
        format_name = getattr(item, 'source_format', None)
        try:
            result = self.validator.validate(item)
        except Exception as e:
            logger.warning(f"Validation of item {index} failed: {e}")
            result = ItemValidation(valid=False, errors=[ValidationIssue(
                severity='error',
                message=f"Item could not be validated: {e}",
                code='validation-failure',
            )])

        result.index = index
        result.format = format_name
        if isinstance(item, CanonicalItem):
            result.types = item.types

        item_id = item.schema_id if isinstance(item, CanonicalItem) else None
        primary_type = result.types[0] if result.types else None
        for issue in result.errors + result.warnings:
            issue.item_index = index
            issue.format = format_name
            if issue.schema_type is None:
                issue.schema_type = primary_type
            if issue.item_id is None:
                issue.item_id = item_id
        return result

    def _record(self, result: ItemValidation, summary: ValidationSummary) -> None:
        summary.total += 1
        summary.item_results.append(result)
        if result.valid:
            summary.valid += 1

        summary.errors.extend(result.errors)
        summary.warnings.extend(result.warnings)

        format_stats = summary.format_stats.get(result.format)
        if format_stats is not None:
            format_stats.items += 1
            format_stats.errors += len(result.errors)
            format_stats.warnings += len(result.warnings)

        for schema_type in result.types or [UNKNOWN_TYPE]:
            type_stats = summary.type_stats.setdefault(schema_type, IssueCounter())
            type_stats.items += 1
            type_stats.errors += len(result.errors)
            type_stats.warnings += len(result.warnings)

    def _record_parse_error(self, payload: RawPayload, summary: ValidationSummary) -> None:
        display = FORMAT_DISPLAY_NAMES.get(payload.format, payload.format)
        summary.total += 1
        summary.errors.append(ValidationIssue(
            severity='error',
            message=f"{display} block {payload.source_index} could not be parsed: {payload.error}",
            code='parse-error',
            item_index=payload.source_index,
            format=payload.format,
        ))
        format_stats = summary.format_stats.get(payload.format)
        if format_stats is not None:
            format_stats.items += 1
            format_stats.errors += 1

    def _check_id_consistency(self, items: Sequence[CanonicalItem], summary: ValidationSummary) -> None:
        """Warn when the same @id is declared with different types."""
        seen: Dict[str, List[str]] = {}
        for index, item in enumerate(items):
            if not isinstance(item, CanonicalItem) or not item.schema_id or not item.types:
                continue
            first_types = seen.setdefault(item.schema_id, item.types)
            if set(first_types) == set(item.types):
                continue

            issue = ValidationIssue(
                severity='warning',
                message=(
                    f"@id '{item.schema_id}' is declared as {', '.join(item.types)} "
                    f"here but as {', '.join(first_types)} elsewhere."
                ),
                code='id-type-mismatch',
                item_index=index,
                schema_type=item.primary_type,
                item_id=item.schema_id,
                format=item.source_format,
            )
            summary.warnings.append(issue)
            if item.source_format in summary.format_stats:
                summary.format_stats[item.source_format].warnings += 1
            for schema_type in item.types:
                summary.type_stats[schema_type].warnings += 1
            for result in summary.item_results:
                if result.index == index:
                    result.warnings.append(issue)

    @staticmethod
    def _calculate_score(summary: ValidationSummary) -> int:
        if summary.total == 0:
            return 0
        score = summary.valid / summary.total * 100
        score = max(0.0, score - min(50, len(summary.errors) * 5))
        score = max(0.0, score - min(25, len(summary.warnings) * 2))
        return int(score + 0.5)

    def _build_suggestions(
        self,
        items: Sequence[CanonicalItem],
        summary: ValidationSummary,
    ) -> List[Suggestion]:
        suggestions: List[Suggestion] = []

        error_codes = {issue.code for issue in summary.errors}
        if error_codes:
            suggestions.append(Suggestion(
                message=f"{len(error_codes)} kind(s) of error were found.",
                code='multiple-error-types',
            ))

        for format_name, stats in summary.format_stats.items():
            if stats.items and stats.errors:
                display = FORMAT_DISPLAY_NAMES.get(format_name, format_name)
                suggestions.append(Suggestion(
                    message=f"{display} markup has {stats.errors} error(s).",
                    code=f"{format_name}-errors",
                ))

        suggestions.extend(self._summarize_property_issues(summary, 'missing-required-property'))

        for schema_type, label in HIGHLIGHTED_TYPES.items():
            stats = summary.type_stats.get(schema_type)
            if stats and stats.items and stats.errors:
                suggestions.append(Suggestion(
                    message=f"{label} structured data has {stats.errors} error(s).",
                    code=f"{schema_type.lower()}-errors",
                ))

        untyped = summary.type_stats.get(UNKNOWN_TYPE)
        if untyped and untyped.items:
            suggestions.append(Suggestion(
                message=f"{untyped.items} structured data item(s) have no type.",
                code='unknown-type-items',
            ))

        counts = {name: stats.items for name, stats in summary.format_stats.items() if stats.items}
        total = sum(counts.values())
        if total == 0:
            suggestions.append(Suggestion(
                message=(
                    "Implement structured data so pages can appear as rich results. "
                    "JSON-LD is the recommended format."
                ),
                code='add-structured-data',
            ))
            return suggestions

        jsonld_items = counts.get(FORMAT_JSONLD, 0)
        if len(counts) > 1 and jsonld_items < total / 2:
            suggestions.append(Suggestion(
                message=(
                    "Several structured data formats are mixed. Consolidate on JSON-LD, "
                    "the format Google recommends."
                ),
                code='use-jsonld-format',
            ))
        elif not jsonld_items and (counts.get(FORMAT_MICRODATA) or counts.get(FORMAT_RDFA)):
            suggestions.append(Suggestion(
                message="JSON-LD is not used on this page. Google recommends the JSON-LD format.",
                code='consider-jsonld-format',
            ))

        if summary.total > self.thresholds.many_items_threshold:
            suggestions.append(Suggestion(
                message="There are many structured data items. Remove duplicates and keep only what is needed.",
                code='optimize-structured-data-count',
            ))

        max_depth = self.thresholds.max_nesting_depth
        if any(
            isinstance(item, CanonicalItem) and nesting_depth(item) > max_depth
            for item in items
        ):
            suggestions.append(Suggestion(
                message="Some structured data is deeply nested. A flatter structure is easier to parse.",
                code='reduce-nesting-depth',
            ))

        return suggestions

    @staticmethod
    def _summarize_property_issues(summary: ValidationSummary, code: str) -> List[Suggestion]:
        """One suggestion per type listing the properties flagged with ``code``."""
        missing: Dict[str, List[str]] = {}
        for issue in summary.errors:
            if issue.code != code or not issue.schema_type or not issue.property_name:
                continue
            props = missing.setdefault(issue.schema_type, [])
            if issue.property_name not in props:
                props.append(issue.property_name)

        return [
            Suggestion(
                message=f"'{schema_type}' is missing required properties: {', '.join(props)}",
                code=code,
            )
            for schema_type, props in missing.items()
        ]
