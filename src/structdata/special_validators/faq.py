"""FAQPage validation."""

import logging
from typing import Any, Optional

from structdata.config import AnalysisThresholds, default_thresholds
from structdata.constants import (
    ANSWER_TYPE,
    FAQ_PAGE_TYPE,
    IMPORTANCE_HIGH,
    IMPORTANCE_LOW,
    IMPORTANCE_MEDIUM,
    QUESTION_TYPE,
)
from structdata.models import CanonicalItem, Recommendation, SpecialValidationResult
from structdata.special_validators._common import error, warning
from structdata.utils import as_list, text_value

logger = logging.getLogger(__name__)


class FAQValidator:
    """Check an FAQPage for well-formed question/answer pairs.

    Length thresholds come from AnalysisThresholds (faq_*).
    """

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or default_thresholds
        self._reset()

    def _reset(self) -> None:
        self.errors = []
        self.warnings = []
        self.stats = {
            'totalItems': 0,
            'validItems': 0,
            'questions': {'valid': 0, 'tooShort': 0, 'tooLong': 0, 'missing': 0},
            'answers': {'valid': 0, 'tooShort': 0, 'missing': 0},
        }

    def validate(self, item: Any) -> SpecialValidationResult:
        self._reset()

        if not isinstance(item, CanonicalItem) or not item.has_type(FAQ_PAGE_TYPE):
            self.errors.append(error("FAQ data must use the FAQPage type.", 'invalid-faq-type'))
            return self._results()

        entries = as_list(item.get('mainEntity'))
        if not entries:
            self.errors.append(error(
                "FAQPage needs a mainEntity property.",
                'missing-main-entity',
                path='mainEntity',
            ))
            return self._results()

        min_items = self.thresholds.faq_min_items
        self.stats['totalItems'] = len(entries)
        if len(entries) < min_items:
            self.warnings.append(warning(
                f"An FAQPage should contain at least {min_items} questions to be useful.",
                'insufficient-faq-items',
                path='mainEntity',
            ))

        valid_entries = 0
        for index, entry in enumerate(entries):
            if self._check_question(index, entry):
                valid_entries += 1
        self.stats['validItems'] = valid_entries

        logger.debug(f"FAQPage validated: {valid_entries}/{len(entries)} questions valid")
        return self._results()

    def _check_question(self, index: int, entry: Any) -> bool:
        """Validate one Question and its accepted answer; True when error-free."""
        number = index + 1
        path = f"mainEntity[{index}]"
        errors_before = len(self.errors)
        questions = self.stats['questions']
        answers = self.stats['answers']

        if not isinstance(entry, CanonicalItem) or not entry.has_type(QUESTION_TYPE):
            self.errors.append(error(
                f"FAQ entry #{number} must use the Question type.",
                'invalid-question-type',
                path=path,
            ))
            return False

        name = text_value(entry.get('name'))
        if not name:
            questions['missing'] += 1
            self.errors.append(error(
                f"FAQ entry #{number} has no question text (name).",
                'missing-question',
                path=f"{path}.name",
            ))
        elif len(name) < self.thresholds.faq_question_min_length:
            questions['tooShort'] += 1
            self.warnings.append(warning(
                f"FAQ entry #{number} has a very short question ({len(name)} characters).",
                'short-question',
                path=f"{path}.name",
            ))
        elif len(name) > self.thresholds.faq_question_max_length:
            questions['tooLong'] += 1
            self.warnings.append(warning(
                f"FAQ entry #{number} has a very long question ({len(name)} characters).",
                'long-question',
                path=f"{path}.name",
            ))
        else:
            questions['valid'] += 1

        answer = entry.get('acceptedAnswer')
        if isinstance(answer, list):
            answer = answer[0] if answer else None
        if answer is None or answer == '':
            answers['missing'] += 1
            self.errors.append(error(
                f"FAQ entry #{number} has no acceptedAnswer.",
                'missing-answer',
                path=f"{path}.acceptedAnswer",
            ))
            return False

        if not isinstance(answer, CanonicalItem) or not answer.has_type(ANSWER_TYPE):
            self.errors.append(error(
                f"The answer of FAQ entry #{number} must use the Answer type.",
                'invalid-answer-type',
                path=f"{path}.acceptedAnswer",
            ))
            return False

        text = text_value(answer.get('text'))
        if not text:
            answers['missing'] += 1
            self.errors.append(error(
                f"The answer of FAQ entry #{number} has no text.",
                'missing-answer-text',
                path=f"{path}.acceptedAnswer.text",
            ))
        elif len(text) < self.thresholds.faq_answer_min_length:
            answers['tooShort'] += 1
            self.warnings.append(warning(
                f"The answer of FAQ entry #{number} is very short ({len(text)} characters).",
                'short-answer',
                path=f"{path}.acceptedAnswer.text",
            ))
        else:
            answers['valid'] += 1

        return len(self.errors) == errors_before

    def _recommendations(self) -> list:
        recommendations = []
        questions = self.stats['questions']
        answers = self.stats['answers']
        t = self.thresholds

        if questions['missing']:
            recommendations.append(Recommendation(
                "Every FAQ entry needs its question in the name property.",
                IMPORTANCE_HIGH,
            ))
        if questions['tooShort']:
            recommendations.append(Recommendation(
                f"Write specific, clear questions of at least {t.faq_question_min_length} characters.",
                IMPORTANCE_MEDIUM,
            ))
        if questions['tooLong']:
            recommendations.append(Recommendation(
                f"Keep questions concise, within {t.faq_question_max_length} characters.",
                IMPORTANCE_LOW,
            ))
        if answers['missing']:
            recommendations.append(Recommendation(
                "Every FAQ question needs an answer in the acceptedAnswer property.",
                IMPORTANCE_HIGH,
            ))
        if answers['tooShort']:
            recommendations.append(Recommendation(
                f"Answers should be at least {t.faq_answer_min_length} characters and genuinely informative.",
                IMPORTANCE_MEDIUM,
            ))
        if self.stats['totalItems'] < t.faq_min_items:
            recommendations.append(Recommendation(
                f"Include at least {t.faq_min_items} Q&A entries so search engines can show the FAQ.",
                IMPORTANCE_MEDIUM,
            ))
        recommendations.append(Recommendation(
            "Keep FAQ entries identical to the questions and answers visible on the page.",
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
