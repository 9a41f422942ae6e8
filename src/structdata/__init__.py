"""Structured data (JSON-LD, Microdata, RDFa) analyzer and validator."""

__version__ = "0.1.0"

from structdata.structured_data import StructuredDataAnalyzer, analyze, provide_seo_data
from structdata.document import PageDocument, load_document
from structdata.normalizer import ItemNormalizer, normalize
from structdata.parsers import PARSERS, JsonLdParser, MicrodataParser, RdfaParser
from structdata.schema_validator import SchemaValidator
from structdata.validation_engine import ValidationEngine
from structdata.special_validators import (
    SpecialValidatorFactory,
    BreadcrumbValidator,
    FAQValidator,
    ProductValidator,
)
from structdata.scoring import StructuredDataScorer
from structdata.fetcher import PageFetcher
from structdata.models import (
    RawPayload,
    CanonicalItem,
    ValidationIssue,
    Recommendation,
    AnalysisResult,
    AnalysisOutcome,
    SEOProjection,
)
from structdata.exceptions import (
    StructuredDataError,
    DocumentLoadError,
    ValidatorRegistrationError,
    FetchError,
)
from structdata.config import settings, AnalysisThresholds, default_thresholds

__all__ = [
    "StructuredDataAnalyzer",
    "analyze",
    "provide_seo_data",
    "PageDocument",
    "load_document",
    "ItemNormalizer",
    "normalize",
    "PARSERS",
    "JsonLdParser",
    "MicrodataParser",
    "RdfaParser",
    "SchemaValidator",
    "ValidationEngine",
    "SpecialValidatorFactory",
    "BreadcrumbValidator",
    "FAQValidator",
    "ProductValidator",
    "StructuredDataScorer",
    "PageFetcher",
    "RawPayload",
    "CanonicalItem",
    "ValidationIssue",
    "Recommendation",
    "AnalysisResult",
    "AnalysisOutcome",
    "SEOProjection",
    "StructuredDataError",
    "DocumentLoadError",
    "ValidatorRegistrationError",
    "FetchError",
    "settings",
    "AnalysisThresholds",
    "default_thresholds",
]
