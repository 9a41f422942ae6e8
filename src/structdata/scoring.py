"""
Structured Data Scoring

Turns analysis counts into a 0-100 score and a prioritized list of
recommendations.
"""

import logging
from typing import Iterable, List, Optional

from structdata.config import AnalysisThresholds, default_thresholds
from structdata.constants import (
    COMMON_SCHEMA_TYPES,
    IMPORTANCE_HIGH,
    IMPORTANCE_LOW,
    IMPORTANCE_MEDIUM,
    IMPORTANCE_ORDER,
    MSG_ADD_STRUCTURED_DATA,
    MSG_ADOPT_JSONLD,
    MSG_FIX_ERRORS,
    MSG_MATCH_CONTENT,
    MSG_START_WITH_JSONLD,
    MSG_SUGGEST_TYPES,
)
from structdata.models import Recommendation

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(value + 0.5)


def sort_recommendations(recommendations: Iterable[Recommendation]) -> List[Recommendation]:
    """Drop (message, schema_type) duplicates and order high -> medium -> low.

    The sort is stable, so equal-importance entries keep their order.
    """
    seen = set()
    unique = []
    for recommendation in recommendations:
        if recommendation.key in seen:
            continue
        seen.add(recommendation.key)
        unique.append(recommendation)
    return sorted(unique, key=lambda r: IMPORTANCE_ORDER.get(r.importance, len(IMPORTANCE_ORDER)))


class StructuredDataScorer:
    """Score structured data and synthesize recommendations."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or default_thresholds

    def calculate_score(
        self,
        has_structured_data: bool,
        format_count: int,
        item_count: int,
        type_count: int,
        error_count: int,
        warning_count: int,
        special_validated: int = 0,
        special_valid: int = 0,
    ) -> int:
        """Calculate the structured data score.

        Scoring breakdown:
        - Presence: 30 points
        - Formats used: up to 15 points
        - Item count: up to 15 points
        - Type diversity: up to 10 points
        - Generic validation errors/warnings: up to -30 points
        - Special validation pass rate: up to 20 points

        Args:
            has_structured_data: Whether any format was detected
            format_count: Number of formats found
            item_count: Number of normalized top-level items
            type_count: Number of distinct top-level types
            error_count: Generic validation errors
            warning_count: Generic validation warnings
            special_validated: Items run through a special validator
            special_valid: Of those, the ones that passed

        Returns:
            Score between 0 and 100
        """
        if not has_structured_data:
            return 0

        t = self.thresholds
        score = t.presence_points
        score += min(format_count * t.points_per_format, t.max_format_points)

        if item_count >= t.full_item_count:
            score += t.max_item_points
        else:
            score += item_count * t.points_per_item

        if type_count >= t.full_type_count:
            score += t.max_type_points
        else:
            score += type_count * t.points_per_type

        score -= min(error_count * t.error_penalty, t.max_error_penalty)
        score -= min(warning_count * t.warning_penalty, t.max_warning_penalty)

        if special_validated > 0:
            score += round_half_up(special_valid / special_validated * t.special_validation_points)

        return max(0, min(100, score))

    def build_recommendations(
        self,
        has_structured_data: bool,
        jsonld_found: bool,
        error_count: int,
        special_recommendations: Iterable[Recommendation] = (),
        detected_types: Iterable[str] = (),
    ) -> List[Recommendation]:
        """Build the prioritized recommendation list.

        Args:
            has_structured_data: Whether any format was detected
            jsonld_found: Whether JSON-LD was detected
            error_count: Generic validation errors
            special_recommendations: Recommendations from special validators
            detected_types: Every detected type, nested ones included

        Returns:
            At most ``max_recommendations`` entries, high importance first
        """
        if not has_structured_data:
            return [
                Recommendation(MSG_ADD_STRUCTURED_DATA, IMPORTANCE_HIGH),
                Recommendation(MSG_START_WITH_JSONLD, IMPORTANCE_MEDIUM),
            ]

        recommendations: List[Recommendation] = []

        if not jsonld_found:
            recommendations.append(Recommendation(MSG_ADOPT_JSONLD, IMPORTANCE_MEDIUM))

        if error_count > 0:
            recommendations.append(Recommendation(
                MSG_FIX_ERRORS.format(count=error_count), IMPORTANCE_HIGH,
            ))

        recommendations.extend(special_recommendations)

        detected = set(detected_types)
        missing = [t for t in COMMON_SCHEMA_TYPES if t not in detected]
        if missing:
            suggested = ', '.join(missing[:self.thresholds.suggested_type_count])
            recommendations.append(Recommendation(
                MSG_SUGGEST_TYPES.format(types=suggested), IMPORTANCE_LOW,
            ))

        recommendations.append(Recommendation(MSG_MATCH_CONTENT, IMPORTANCE_MEDIUM))

        result = sort_recommendations(recommendations)[:self.thresholds.max_recommendations]
        logger.debug(f"Built {len(result)} recommendation(s)")
        return result
