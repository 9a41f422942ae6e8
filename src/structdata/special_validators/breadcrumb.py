"""BreadcrumbList validation."""

import logging
from typing import Any, Optional

from structdata.config import AnalysisThresholds, default_thresholds
from structdata.constants import (
    BREADCRUMB_LIST_TYPE,
    IMPORTANCE_HIGH,
    IMPORTANCE_MEDIUM,
    LIST_ITEM_TYPE,
)
from structdata.models import CanonicalItem, Recommendation, SpecialValidationResult
from structdata.special_validators._common import error, warning
from structdata.utils import as_list, is_absolute_url, parse_number, text_value

logger = logging.getLogger(__name__)


def _entry_url(entry: CanonicalItem) -> Optional[str]:
    """Target URL of a breadcrumb entry: its ``item`` reference, else its own ``url``."""
    target = entry.get('item')
    if isinstance(target, list):
        target = target[0] if target else None
    if isinstance(target, str) and target.strip():
        return target.strip()
    if isinstance(target, CanonicalItem):
        if target.schema_id:
            return target.schema_id
        for key in ('id', 'url'):
            value = text_value(target.get(key))
            if value:
                return value
    return text_value(entry.get('url')) or None


def _entry_has_name(entry: CanonicalItem) -> bool:
    if text_value(entry.get('name')):
        return True
    target = entry.get('item')
    return isinstance(target, CanonicalItem) and bool(text_value(target.get('name')))


class BreadcrumbValidator:
    """Check a BreadcrumbList for ordered, linked, named entries."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or default_thresholds
        self._reset()

    def _reset(self) -> None:
        self.errors = []
        self.warnings = []
        self.stats = {
            'totalItems': 0,
            'validItems': 0,
            'itemPosition': {'correct': 0, 'incorrect': 0, 'missing': 0},
            'itemUrl': {'absolute': 0, 'relative': 0, 'missing': 0},
        }

    def validate(self, item: Any) -> SpecialValidationResult:
        self._reset()

        if not isinstance(item, CanonicalItem) or not item.has_type(BREADCRUMB_LIST_TYPE):
            self.errors.append(error(
                "Breadcrumb data must use the BreadcrumbList type.",
                'invalid-breadcrumb-type',
            ))
            return self._results()

        entries = as_list(item.get('itemListElement'))
        if not entries:
            self.errors.append(error(
                "BreadcrumbList needs an itemListElement list.",
                'missing-item-list-element',
                path='itemListElement',
            ))
            return self._results()

        self.stats['totalItems'] = len(entries)
        if len(entries) < self.thresholds.breadcrumb_min_items:
            self.warnings.append(warning(
                f"A breadcrumb should have at least {self.thresholds.breadcrumb_min_items} items to be useful.",
                'insufficient-breadcrumb-items',
                path='itemListElement',
            ))

        valid_entries = 0
        for index, entry in enumerate(entries):
            if self._check_entry(index, entry):
                valid_entries += 1
        self.stats['validItems'] = valid_entries

        logger.debug(f"Breadcrumb validated: {valid_entries}/{len(entries)} entries valid")
        return self._results()

    def _check_entry(self, index: int, entry: Any) -> bool:
        """Validate one ListItem; True when it raised no errors."""
        number = index + 1
        path = f"itemListElement[{index}]"
        errors_before = len(self.errors)

        if not isinstance(entry, CanonicalItem) or not entry.has_type(LIST_ITEM_TYPE):
            self.errors.append(error(
                f"Breadcrumb entry #{number} must use the ListItem type.",
                'invalid-list-item-type',
                path=path,
            ))
            return False

        position = entry.get('position')
        if position is None or position == '':
            self.stats['itemPosition']['missing'] += 1
            self.errors.append(error(
                f"Breadcrumb entry #{number} has no position.",
                'missing-position',
                path=f"{path}.position",
            ))
        elif parse_number(position) != number:
            self.stats['itemPosition']['incorrect'] += 1
            self.errors.append(error(
                f"Breadcrumb entry #{number} has position {position}; expected {number}.",
                'incorrect-position',
                path=f"{path}.position",
            ))
        else:
            self.stats['itemPosition']['correct'] += 1

        if not _entry_has_name(entry):
            self.warnings.append(warning(
                f"Breadcrumb entry #{number} has no name.",
                'missing-name',
                path=f"{path}.name",
            ))

        url = _entry_url(entry)
        if not url:
            self.stats['itemUrl']['missing'] += 1
            self.warnings.append(warning(
                f"Breadcrumb entry #{number} has no URL.",
                'missing-url',
                path=f"{path}.item",
            ))
        elif is_absolute_url(url):
            self.stats['itemUrl']['absolute'] += 1
        else:
            self.stats['itemUrl']['relative'] += 1
            self.warnings.append(warning(
                f"Breadcrumb entry #{number} uses a relative URL. Use an absolute URL instead.",
                'relative-url',
                path=f"{path}.item",
            ))

        return len(self.errors) == errors_before

    def _recommendations(self) -> list:
        recommendations = []
        positions = self.stats['itemPosition']
        urls = self.stats['itemUrl']

        if positions['incorrect'] or positions['missing']:
            recommendations.append(Recommendation(
                "Breadcrumb positions must start at 1 and increase by one for each entry.",
                IMPORTANCE_HIGH,
            ))
        if urls['relative']:
            recommendations.append(Recommendation(
                "Use absolute URLs instead of relative URLs in breadcrumb entries.",
                IMPORTANCE_MEDIUM,
            ))
        if urls['missing']:
            recommendations.append(Recommendation(
                "Every breadcrumb entry should link to a URL.",
                IMPORTANCE_HIGH,
            ))
        if self.stats['totalItems'] < self.thresholds.breadcrumb_min_items:
            recommendations.append(Recommendation(
                f"Build breadcrumbs from at least {self.thresholds.breadcrumb_min_items} entries "
                "so users get a clear navigation path.",
                IMPORTANCE_MEDIUM,
            ))
        return recommendations

    def _results(self) -> SpecialValidationResult:
        return SpecialValidationResult(
            valid=not self.errors,
            errors=list(self.errors),
            warnings=list(self.warnings),
            stats=self.stats,
            recommendations=self._recommendations(),
        )
