# src/structdata/schema_definitions.py
"""Schema.org type definitions used by the generic validator.

Each entry maps a type name to:
- properties: property name -> accepted value types (data types such as
  Text, Number, Boolean, Date, DateTime, URL, or Schema.org type names)
- required: properties whose absence is an error
- recommended: properties whose absence is a warning
"""

from typing import Dict

# Schema.org primitive data types understood by the validator
DATA_TYPES = ('Text', 'Number', 'Boolean', 'Date', 'DateTime', 'URL')

# Expected type that any nested object satisfies
ANY_THING = 'Thing'

SCHEMA_DEFINITIONS: Dict[str, Dict[str, object]] = {
    'Thing': {
        'properties': {
            'name': ['Text'],
            'description': ['Text'],
            'url': ['URL'],
            'image': ['URL', 'ImageObject'],
            'sameAs': ['URL'],
        },
        'required': [],
        'recommended': ['name', 'url'],
    },

    # Creative works
    'Article': {
        'properties': {
            'headline': ['Text'],
            'author': ['Person', 'Organization'],
            'publisher': ['Organization'],
            'datePublished': ['Date'],
            'dateModified': ['Date'],
            'articleBody': ['Text'],
            'articleSection': ['Text'],
            'wordCount': ['Number'],
            'mainEntityOfPage': ['URL', 'WebPage'],
            'image': ['URL', 'ImageObject'],
        },
        'required': ['headline'],
        'recommended': ['author', 'datePublished', 'image', 'publisher'],
    },
    'BlogPosting': {
        'properties': {
            'headline': ['Text'],
            'author': ['Person', 'Organization'],
            'publisher': ['Organization'],
            'datePublished': ['Date'],
            'dateModified': ['Date'],
            'articleBody': ['Text'],
            'wordCount': ['Number'],
            'mainEntityOfPage': ['URL', 'WebPage'],
            'image': ['URL', 'ImageObject'],
        },
        'required': ['headline'],
        'recommended': ['author', 'datePublished', 'image', 'publisher'],
    },
    'WebPage': {
        'properties': {
            'name': ['Text'],
            'description': ['Text'],
            'url': ['URL'],
            'author': ['Person', 'Organization'],
            'publisher': ['Organization'],
            'datePublished': ['Date'],
            'dateModified': ['Date'],
            'breadcrumb': ['BreadcrumbList', 'Text'],
            'mainEntity': ['Thing'],
            'speakable': ['SpeakableSpecification', 'URL'],
            'primaryImageOfPage': ['ImageObject'],
        },
        'required': [],
        'recommended': ['name', 'description', 'dateModified', 'datePublished'],
    },

    # Commerce
    'Product': {
        'properties': {
            'name': ['Text'],
            'description': ['Text'],
            'image': ['URL', 'ImageObject'],
            'brand': ['Brand', 'Organization'],
            'sku': ['Text'],
            'mpn': ['Text'],
            'gtin13': ['Text'],
            'offers': ['Offer', 'AggregateOffer'],
            'aggregateRating': ['AggregateRating'],
            'review': ['Review', 'AggregateRating'],
        },
        'required': ['name'],
        'recommended': ['image', 'offers'],
    },
    'Offer': {
        'properties': {
            'price': ['Number'],
            'priceCurrency': ['Text'],
            'availability': ['Text'],
            'url': ['URL'],
            'seller': ['Organization'],
            'validFrom': ['DateTime'],
            'validThrough': ['DateTime'],
            'itemCondition': ['Text'],
            'priceValidUntil': ['Date'],
        },
        'required': ['price', 'priceCurrency'],
        'recommended': ['availability', 'url'],
    },

    # Reviews and ratings
    'Review': {
        'properties': {
            'author': ['Person', 'Organization'],
            'datePublished': ['Date'],
            'reviewBody': ['Text'],
            'reviewRating': ['Rating'],
            'itemReviewed': ['Thing'],
            'name': ['Text'],
        },
        'required': ['itemReviewed'],
        'recommended': ['author', 'reviewRating'],
    },
    'Rating': {
        'properties': {
            'ratingValue': ['Number'],
            'bestRating': ['Number'],
            'worstRating': ['Number'],
            'ratingCount': ['Number'],
        },
        'required': ['ratingValue'],
        'recommended': ['bestRating', 'worstRating'],
    },
    'AggregateRating': {
        'properties': {
            'ratingValue': ['Number'],
            'bestRating': ['Number'],
            'worstRating': ['Number'],
            'ratingCount': ['Number'],
            'reviewCount': ['Number'],
            'itemReviewed': ['Thing'],
        },
        'required': ['ratingValue'],
        'recommended': ['ratingCount', 'reviewCount', 'bestRating', 'worstRating'],
    },

    # Lists
    'ItemList': {
        'properties': {
            'itemListElement': ['ListItem', 'Thing'],
            'itemListOrder': ['Text'],
            'numberOfItems': ['Number'],
        },
        'required': ['itemListElement'],
        'recommended': ['numberOfItems'],
    },
    'ListItem': {
        'properties': {
            'position': ['Number'],
            'item': ['Thing'],
            'name': ['Text'],
            'url': ['URL'],
        },
        'required': ['position'],
        'recommended': ['item'],
    },
    'BreadcrumbList': {
        'properties': {
            'itemListElement': ['ListItem'],
            'numberOfItems': ['Number'],
        },
        'required': ['itemListElement'],
        'recommended': ['numberOfItems'],
    },

    # FAQ
    'FAQPage': {
        'properties': {
            'mainEntity': ['Question', 'ItemList'],
        },
        'required': ['mainEntity'],
        'recommended': [],
    },
    'Question': {
        'properties': {
            'name': ['Text'],
            'text': ['Text'],
            'answerCount': ['Number'],
            'acceptedAnswer': ['Answer', 'ItemList'],
            'suggestedAnswer': ['Answer', 'ItemList'],
        },
        'required': ['name'],
        'recommended': ['acceptedAnswer'],
    },
    'Answer': {
        'properties': {
            'text': ['Text'],
            'author': ['Person', 'Organization'],
            'dateCreated': ['Date'],
            'upvoteCount': ['Number'],
            'url': ['URL'],
        },
        'required': ['text'],
        'recommended': ['author'],
    },

    # Events
    'Event': {
        'properties': {
            'name': ['Text'],
            'startDate': ['DateTime'],
            'endDate': ['DateTime'],
            'location': ['Place', 'PostalAddress', 'VirtualLocation', 'Text'],
            'description': ['Text'],
            'image': ['URL', 'ImageObject'],
            'organizer': ['Person', 'Organization'],
            'performer': ['Person', 'Organization'],
            'offers': ['Offer'],
            'eventStatus': ['Text'],
            'eventAttendanceMode': ['Text'],
        },
        'required': ['name', 'startDate'],
        'recommended': ['location', 'image', 'endDate'],
    },

    # People and organizations
    'Person': {
        'properties': {
            'name': ['Text'],
            'givenName': ['Text'],
            'familyName': ['Text'],
            'email': ['Text'],
            'telephone': ['Text'],
            'url': ['URL'],
            'jobTitle': ['Text'],
            'worksFor': ['Organization'],
            'address': ['PostalAddress', 'Text'],
            'birthDate': ['Date'],
            'image': ['URL', 'ImageObject'],
            'sameAs': ['URL'],
        },
        'required': ['name'],
        'recommended': ['image', 'url'],
    },
    'Organization': {
        'properties': {
            'name': ['Text'],
            'legalName': ['Text'],
            'url': ['URL'],
            'logo': ['URL', 'ImageObject'],
            'address': ['PostalAddress', 'Text'],
            'contactPoint': ['ContactPoint'],
            'sameAs': ['URL'],
            'telephone': ['Text'],
            'email': ['Text'],
            'location': ['Place'],
            'foundingDate': ['Date'],
            'founder': ['Person', 'Organization'],
            'numberOfEmployees': ['Number'],
        },
        'required': ['name'],
        'recommended': ['logo', 'url', 'address'],
    },
    'LocalBusiness': {
        'properties': {
            'name': ['Text'],
            'address': ['PostalAddress', 'Text'],
            'telephone': ['Text'],
            'email': ['Text'],
            'url': ['URL'],
            'image': ['URL', 'ImageObject'],
            'logo': ['URL', 'ImageObject'],
            'priceRange': ['Text'],
            'openingHours': ['Text'],
            'openingHoursSpecification': ['OpeningHoursSpecification'],
            'geo': ['GeoCoordinates'],
            'servesCuisine': ['Text'],
            'paymentAccepted': ['Text'],
            'currenciesAccepted': ['Text'],
        },
        'required': ['name', 'address'],
        'recommended': ['telephone', 'openingHours', 'priceRange', 'image'],
    },

    # Media
    'ImageObject': {
        'properties': {
            'contentUrl': ['URL'],
            'url': ['URL'],
            'width': ['Number'],
            'height': ['Number'],
            'caption': ['Text'],
            'exifData': ['Text'],
            'thumbnail': ['URL', 'ImageObject'],
        },
        'required': ['contentUrl'],
        'recommended': ['width', 'height'],
    },
    'VideoObject': {
        'properties': {
            'contentUrl': ['URL'],
            'embedUrl': ['URL'],
            'duration': ['Text'],
            'thumbnailUrl': ['URL'],
            'uploadDate': ['Date'],
            'width': ['Number'],
            'height': ['Number'],
            'description': ['Text'],
            'transcript': ['Text'],
            'caption': ['Text'],
            'thumbnail': ['URL', 'ImageObject'],
        },
        'required': ['contentUrl'],
        'recommended': ['thumbnailUrl', 'uploadDate', 'duration'],
    },

    # Places
    'Place': {
        'properties': {
            'name': ['Text'],
            'address': ['PostalAddress', 'Text'],
            'geo': ['GeoCoordinates'],
            'telephone': ['Text'],
            'openingHoursSpecification': ['OpeningHoursSpecification'],
            'photo': ['ImageObject', 'URL'],
            'url': ['URL'],
        },
        'required': ['name'],
        'recommended': ['address', 'geo'],
    },
    'PostalAddress': {
        'properties': {
            'streetAddress': ['Text'],
            'addressLocality': ['Text'],
            'addressRegion': ['Text'],
            'postalCode': ['Text'],
            'addressCountry': ['Text'],
        },
        'required': ['streetAddress'],
        'recommended': ['addressLocality', 'addressCountry'],
    },
    'GeoCoordinates': {
        'properties': {
            'latitude': ['Number'],
            'longitude': ['Number'],
            'elevation': ['Number'],
        },
        'required': ['latitude', 'longitude'],
        'recommended': [],
    },

    # Recipes
    'Recipe': {
        'properties': {
            'name': ['Text'],
            'author': ['Person', 'Organization'],
            'description': ['Text'],
            'image': ['URL', 'ImageObject'],
            'recipeIngredient': ['Text'],
            'recipeInstructions': ['Text', 'ItemList'],
            'cookTime': ['Text'],
            'prepTime': ['Text'],
            'totalTime': ['Text'],
            'recipeYield': ['Text'],
            'nutrition': ['NutritionInformation'],
            'aggregateRating': ['AggregateRating'],
            'review': ['Review'],
            'recipeCuisine': ['Text'],
            'keywords': ['Text'],
        },
        'required': ['name', 'recipeIngredient', 'recipeInstructions'],
        'recommended': ['image', 'author', 'cookTime', 'recipeYield'],
    },
}


def get_definition(type_name: str) -> Dict[str, object]:
    """Return the definition for a type, or an empty dict if unknown."""
    return SCHEMA_DEFINITIONS.get(type_name, {})
