# src/structdata/constants.py
"""Centralized constants for the structured data analyzer.

This module contains fixed tables and magic values that are used across
multiple modules. For user-configurable thresholds, see config.py and
AnalysisThresholds.
"""

# =============================================================================
# Formats
# =============================================================================

FORMAT_JSONLD = 'json-ld'
FORMAT_MICRODATA = 'microdata'
FORMAT_RDFA = 'rdfa'

# Order in which formats are detected and reported
FORMATS = (FORMAT_JSONLD, FORMAT_MICRODATA, FORMAT_RDFA)

FORMAT_DISPLAY_NAMES = {
    FORMAT_JSONLD: 'JSON-LD',
    FORMAT_MICRODATA: 'Microdata',
    FORMAT_RDFA: 'RDFa',
    'unknown': 'Unknown format',
}

JSONLD_MIME_TYPE = 'application/ld+json'

# Vocabulary assumed when a payload declares no context
SCHEMA_ORG_CONTEXT = 'https://schema.org'

# Keys that describe an item rather than carry one of its properties
META_KEYS = ('@context', '@type', '@id')


# =============================================================================
# Element value extraction (Microdata / RDFa)
# =============================================================================

# Elements whose value is their resolved href
HREF_ELEMENTS = frozenset({'a', 'area', 'link'})

# Elements whose value is their resolved src
SRC_ELEMENTS = frozenset({'audio', 'embed', 'iframe', 'img', 'source', 'track', 'video'})

# Elements whose value is the value attribute, falling back to text
VALUE_ELEMENTS = frozenset({'data', 'meter'})

# Maximum characters of offending markup kept on a parse-error record
RAW_SNIPPET_LENGTH = 200

# Maximum characters of offending markup written to the log
LOG_SNIPPET_LENGTH = 100

# Deepest object/array nesting accepted in one annotation block
MAX_ITEM_DEPTH = 64


# =============================================================================
# RDFa
# =============================================================================

DEFAULT_RDFA_NAMESPACES = {
    '': 'http://schema.org/',
    'schema': 'http://schema.org/',
    'og': 'http://ogp.me/ns#',
    'fb': 'http://ogp.me/ns/fb#',
    'rdfs': 'http://www.w3.org/2000/01/rdf-schema#',
}


# =============================================================================
# Recommendations
# =============================================================================

IMPORTANCE_HIGH = 'high'
IMPORTANCE_MEDIUM = 'medium'
IMPORTANCE_LOW = 'low'

IMPORTANCE_ORDER = {
    IMPORTANCE_HIGH: 0,
    IMPORTANCE_MEDIUM: 1,
    IMPORTANCE_LOW: 2,
}

# Checklist of types most pages benefit from, in suggestion order
COMMON_SCHEMA_TYPES = [
    'Organization',
    'LocalBusiness',
    'Product',
    'Article',
    'BreadcrumbList',
    'FAQPage',
    'HowTo',
    'Recipe',
    'Event',
    'Person',
    'WebSite',
]

# Types whose generic validation errors get a dedicated summary warning
HIGHLIGHTED_TYPES = {
    'Organization': 'Organization',
    'LocalBusiness': 'Local business',
    'Product': 'Product',
    'BreadcrumbList': 'Breadcrumb',
    'Article': 'Article',
    'BlogPosting': 'Blog post',
    'FAQPage': 'FAQ page',
    'WebPage': 'Web page',
}

MSG_ADD_STRUCTURED_DATA = (
    "Add structured data to the page. Use the Schema.org vocabulary in "
    "JSON-LD, Microdata or RDFa format."
)
MSG_START_WITH_JSONLD = "Start with JSON-LD, the format recommended by Google."
MSG_ADOPT_JSONLD = (
    "Consider adding structured data in JSON-LD format. It is the format "
    "Google recommends and is easier to maintain separately from the HTML."
)
MSG_FIX_ERRORS = (
    "Fix {count} structured data error(s). Structured data with errors may "
    "not be used by search engines."
)
MSG_SUGGEST_TYPES = (
    "If relevant to the page content, consider adding these schema types: {types}"
)
MSG_MATCH_CONTENT = (
    "Make sure all structured data matches the content actually visible on the page."
)


# =============================================================================
# Special validators
# =============================================================================

BREADCRUMB_LIST_TYPE = 'BreadcrumbList'
LIST_ITEM_TYPE = 'ListItem'
FAQ_PAGE_TYPE = 'FAQPage'
QUESTION_TYPE = 'Question'
ANSWER_TYPE = 'Answer'
PRODUCT_TYPE = 'Product'
AGGREGATE_RATING_TYPE = 'AggregateRating'

# Schema.org ItemAvailability values accepted on an Offer
VALID_AVAILABILITY = frozenset({
    'https://schema.org/InStock',
    'https://schema.org/OutOfStock',
    'https://schema.org/PreOrder',
    'https://schema.org/Discontinued',
    'http://schema.org/InStock',
    'http://schema.org/OutOfStock',
    'http://schema.org/PreOrder',
    'http://schema.org/Discontinued',
})

# Any of these counts as a standard product identifier
PRODUCT_IDENTIFIER_PROPERTIES = ('gtin', 'gtin8', 'gtin12', 'gtin13', 'gtin14', 'isbn', 'mpn')

# Upper bound of the rating scale assumed when bestRating is absent
DEFAULT_BEST_RATING = 5.0
