"""
Structured Data Analyzer

Detects, validates and scores structured data markup:
- JSON-LD (preferred format)
- Microdata
- RDFa
- Schema.org compliance
- Rich result types (BreadcrumbList, FAQPage, Product)
"""

import logging
from typing import Dict, List, Mapping, Optional

from structdata.config import AnalysisThresholds, default_thresholds
from structdata.constants import FORMAT_JSONLD
from structdata.document import PageDocument, load_document
from structdata.models import (
    AnalysisOutcome,
    AnalysisResult,
    CanonicalItem,
    FormatSummary,
    RawPayload,
    SEOProjection,
    TypeStatistic,
)
from structdata.normalizer import ItemNormalizer
from structdata.parsers import PARSERS, ParserFactory
from structdata.scoring import StructuredDataScorer
from structdata.special_validators import SpecialValidatorFactory
from structdata.validation_engine import ValidationEngine

logger = logging.getLogger(__name__)


class StructuredDataAnalyzer:
    """Analyze structured data markup on web pages."""

    def __init__(
        self,
        parsers: Optional[Mapping[str, ParserFactory]] = None,
        normalizer: Optional[ItemNormalizer] = None,
        validation_engine: Optional[ValidationEngine] = None,
        special_validators: Optional[SpecialValidatorFactory] = None,
        scorer: Optional[StructuredDataScorer] = None,
        thresholds: Optional[AnalysisThresholds] = None,
    ):
        """Initialize the structured data analyzer.

        Args:
            parsers: Format name -> parser factory (defaults to PARSERS)
            normalizer: Payload normalizer
            validation_engine: Generic Schema.org validation engine
            special_validators: Special-type validator factory
            scorer: Score and recommendation synthesizer
            thresholds: Analysis thresholds for the default collaborators
        """
        self.thresholds = thresholds or default_thresholds
        self.parsers: Dict[str, ParserFactory] = dict(PARSERS if parsers is None else parsers)
        self.normalizer = normalizer or ItemNormalizer()
        self.validation_engine = validation_engine or ValidationEngine(thresholds=self.thresholds)
        self.special_validators = special_validators or SpecialValidatorFactory(thresholds=self.thresholds)
        self.scorer = scorer or StructuredDataScorer(self.thresholds)

    def analyze(self, document, url: str = "") -> AnalysisOutcome:
        """
        Analyze structured data on a page.

        Args:
            document: HTML text/bytes, BeautifulSoup tree or PageDocument
            url: Page URL, used to resolve relative links

        Returns:
            AnalysisOutcome; a failed analysis yields a zero score with
            ``details.error`` set
        """
        try:
            page = load_document(document, base_url=url or None)
            result = self._run(page)
        except Exception as e:
            logger.exception(f"Structured data analysis failed for {url or 'document'}")
            result = AnalysisResult(error=str(e))

        return AnalysisOutcome(score=result.score, details=result)

    def provide_seo_data(self, document, url: str = "") -> SEOProjection:
        """Analyze and reduce the result to the fields page-level SEO scoring uses."""
        return SEOProjection.from_result(self.analyze(document, url).details)

    def _run(self, page: PageDocument) -> AnalysisResult:
        result = AnalysisResult()

        payloads = self._detect_and_extract(page, result)
        result.has_structured_data = any(f.found for f in result.formats.values())

        # Normalize
        result.items = self.normalizer.normalize(payloads)
        for failure in getattr(self.normalizer, 'failures', []):
            result.formats.setdefault(failure.format, FormatSummary()).parse_errors += 1
            result.parse_errors.append(failure)
        for item in result.items:
            result.formats.setdefault(item.source_format, FormatSummary()).items += 1

        # Validate
        if result.has_structured_data:
            result.validation = self.validation_engine.validate_items(
                result.items, parse_errors=result.parse_errors
            )
            result.special_validation = self.special_validators.validate(result.items)

        result.summary = {
            'total_items': len(result.items),
            'format_count': result.format_count,
        }

        result.schema_types = self._collect_schema_types(result)

        top_level_types = {t for item in result.items for t in item.types}
        result.score = self.scorer.calculate_score(
            has_structured_data=result.has_structured_data,
            format_count=result.format_count,
            item_count=len(result.items),
            type_count=len(top_level_types),
            error_count=result.error_count,
            warning_count=result.warning_count,
            special_validated=result.special_validation.validated_items,
            special_valid=result.special_validation.valid_items,
        )

        result.recommendations = self.scorer.build_recommendations(
            has_structured_data=result.has_structured_data,
            jsonld_found=result.formats.get(FORMAT_JSONLD, FormatSummary()).found,
            error_count=result.error_count,
            special_recommendations=result.special_validation.recommendations,
            detected_types=list(result.schema_types),
        )

        logger.debug(
            f"Structured data score {result.score}: {len(result.items)} item(s), "
            f"{result.error_count} error(s), {result.warning_count} warning(s)"
        )
        return result

    def _detect_and_extract(self, page: PageDocument, result: AnalysisResult) -> List[RawPayload]:
        payloads: List[RawPayload] = []

        for format_name, factory in self.parsers.items():
            parser = factory(page)
            summary = result.formats.setdefault(format_name, FormatSummary())
            if not parser.detect():
                continue

            summary.found = True
            extracted = parser.extract()
            errors = [p for p in extracted if p.is_error]
            summary.parse_errors = len(errors)
            result.parse_errors.extend(errors)
            payloads.extend(extracted)

            logger.debug(
                f"{format_name}: {len(extracted) - len(errors)} payload(s), "
                f"{len(errors)} parse error(s), types {parser.extract_schema_types(extracted)}"
            )

        return payloads

    @staticmethod
    def _collect_schema_types(result: AnalysisResult) -> Dict[str, TypeStatistic]:
        """Count type occurrences, nested items included."""
        stats: Dict[str, TypeStatistic] = {}
        valid_items = {r.index for r in result.validation.item_results if r.valid}

        def count_nested(item: CanonicalItem) -> None:
            for _, nested in item.iter_nested():
                for schema_type in nested.types:
                    stat = stats.setdefault(schema_type, TypeStatistic())
                    stat.total += 1
                    stat.nested += 1
                count_nested(nested)

        for index, item in enumerate(result.items):
            for schema_type in item.types:
                stat = stats.setdefault(schema_type, TypeStatistic())
                stat.total += 1
                if index in valid_items:
                    stat.valid += 1
            count_nested(item)

        return stats


def analyze(
    source,
    url: str = "",
    thresholds: Optional[AnalysisThresholds] = None,
) -> AnalysisOutcome:
    """Analyze a page with a fresh StructuredDataAnalyzer."""
    return StructuredDataAnalyzer(thresholds=thresholds).analyze(source, url)


def provide_seo_data(
    source,
    url: str = "",
    thresholds: Optional[AnalysisThresholds] = None,
) -> SEOProjection:
    """SEO projection of a page from a fresh StructuredDataAnalyzer."""
    return StructuredDataAnalyzer(thresholds=thresholds).provide_seo_data(source, url)
