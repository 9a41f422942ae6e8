"""
Special-type validators

Stricter checks for the schema types that drive rich results:
- BreadcrumbList
- FAQPage
- Product

SpecialValidatorFactory dispatches items to these by type name.
"""

import dataclasses
import logging
from typing import Dict, Iterable, Mapping, Optional

from structdata.config import AnalysisThresholds, default_thresholds
from structdata.constants import (
    BREADCRUMB_LIST_TYPE,
    FAQ_PAGE_TYPE,
    IMPORTANCE_ORDER,
    PRODUCT_TYPE,
)
from structdata.exceptions import ValidatorRegistrationError
from structdata.models import (
    CanonicalItem,
    SpecialValidationResult,
    SpecialValidationSummary,
    TypeBreakdown,
)
from structdata.special_validators.breadcrumb import BreadcrumbValidator
from structdata.special_validators.faq import FAQValidator
from structdata.special_validators.product import ProductValidator

logger = logging.getLogger(__name__)

# Type name -> validator class; classes are instantiated with the thresholds
DEFAULT_VALIDATORS: Mapping[str, type] = {
    BREADCRUMB_LIST_TYPE: BreadcrumbValidator,
    FAQ_PAGE_TYPE: FAQValidator,
    PRODUCT_TYPE: ProductValidator,
}


def _check_entry(schema_type: str, validator_cls: object) -> None:
    if not callable(getattr(validator_cls, 'validate', None)):
        raise ValidatorRegistrationError(schema_type, validator_cls)


def _merge_stats(target: dict, source: dict) -> None:
    """Add numeric counters from ``source`` into ``target``, recursively."""
    for key, value in source.items():
        if isinstance(value, dict):
            _merge_stats(target.setdefault(key, {}), value)
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            target[key] = target.get(key, 0) + value
        else:
            target.setdefault(key, value)


class SpecialValidatorFactory:
    """Run the registered special validator for every matching item."""

    def __init__(
        self,
        registry: Optional[Mapping[str, type]] = None,
        thresholds: Optional[AnalysisThresholds] = None,
    ):
        """Initialize the factory.

        Args:
            registry: Type name -> validator class (defaults to DEFAULT_VALIDATORS)
            thresholds: Thresholds handed to each validator

        Raises:
            ValidatorRegistrationError: If an entry has no callable validate()
        """
        registry = DEFAULT_VALIDATORS if registry is None else registry
        for schema_type, validator_cls in registry.items():
            _check_entry(schema_type, validator_cls)
        self.registry: Dict[str, type] = dict(registry)
        self.thresholds = thresholds or default_thresholds

    def register(self, schema_type: str, validator_cls: type) -> None:
        _check_entry(schema_type, validator_cls)
        self.registry[schema_type] = validator_cls

    def has_validator_for(self, schema_type: str) -> bool:
        return schema_type in self.registry

    def create_validator(self, schema_type: str):
        """Fresh validator instance for a type, or None if unregistered."""
        validator_cls = self.registry.get(schema_type)
        if validator_cls is None:
            return None
        return validator_cls(self.thresholds)

    def validate(self, items: Iterable[CanonicalItem]) -> SpecialValidationSummary:
        """Validate every item whose type has a registered validator.

        Args:
            items: Top-level normalized items

        Returns:
            SpecialValidationSummary; items of several recognized types
            are counted once per type
        """
        summary = SpecialValidationSummary()

        for index, item in enumerate(items):
            if not isinstance(item, CanonicalItem):
                continue
            for schema_type in item.types:
                validator = self.create_validator(schema_type)
                if validator is None:
                    continue
                result = validator.validate(item)
                self._fold(summary, schema_type, index, item, result)

        summary.recommendations.sort(key=lambda r: IMPORTANCE_ORDER.get(r.importance, len(IMPORTANCE_ORDER)))

        logger.debug(
            f"Special validation: {summary.validated_items} validated, "
            f"{summary.valid_items} valid, {summary.invalid_items} invalid"
        )
        return summary

    @staticmethod
    def _fold(
        summary: SpecialValidationSummary,
        schema_type: str,
        index: int,
        item: CanonicalItem,
        result: SpecialValidationResult,
    ) -> None:
        summary.validated_items += 1
        if result.valid:
            summary.valid_items += 1
        else:
            summary.invalid_items += 1

        breakdown = summary.by_type.setdefault(schema_type, TypeBreakdown())
        breakdown.total += 1
        if result.valid:
            breakdown.valid += 1
        _merge_stats(breakdown.stats, result.stats)

        for issue in result.errors:
            stamped = dataclasses.replace(
                issue, schema_type=schema_type, item_id=item.schema_id, item_index=index,
                format=item.source_format,
            )
            summary.errors.append(stamped)
            breakdown.errors.append(stamped)

        for issue in result.warnings:
            stamped = dataclasses.replace(
                issue, schema_type=schema_type, item_id=item.schema_id, item_index=index,
                format=item.source_format,
            )
            summary.warnings.append(stamped)
            breakdown.warnings.append(stamped)

        seen = {r.key for r in summary.recommendations}
        for recommendation in result.recommendations:
            stamped = dataclasses.replace(recommendation, schema_type=schema_type)
            if stamped.key not in seen:
                seen.add(stamped.key)
                summary.recommendations.append(stamped)


__all__ = [
    'DEFAULT_VALIDATORS',
    'SpecialValidatorFactory',
    'BreadcrumbValidator',
    'FAQValidator',
    'ProductValidator',
]
