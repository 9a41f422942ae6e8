"""Product validation for merchant listing rich results."""

from typing import Any, Optional

from structdata.config import AnalysisThresholds, default_thresholds
from structdata.constants import (
    AGGREGATE_RATING_TYPE,
    DEFAULT_BEST_RATING,
    IMPORTANCE_HIGH,
    IMPORTANCE_MEDIUM,
    PRODUCT_IDENTIFIER_PROPERTIES,
    PRODUCT_TYPE,
    VALID_AVAILABILITY,
)
from structdata.models import CanonicalItem, Recommendation, SpecialValidationResult
from structdata.special_validators._common import error, warning
from structdata.utils import as_list, is_absolute_url, parse_number, text_value


def _image_url(image: Any) -> Optional[str]:
    if isinstance(image, str):
        return image.strip() or None
    if isinstance(image, CanonicalItem):
        return text_value(image.get('url')) or text_value(image.get('contentUrl')) or image.schema_id
    return None


class ProductValidator:
    """Check a Product for the properties merchant listings rely on."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or default_thresholds
        self._reset()

    def _reset(self) -> None:
        self.errors = []
        self.warnings = []
        self.stats = {
            'totalProducts': 0,
            'validProducts': 0,
            'name': {'present': 0, 'missing': 0},
            'image': {'present': 0, 'missing': 0, 'invalid': 0},
            'description': {'present': 0, 'missing': 0, 'tooShort': 0},
            'offers': {
                'present': 0,
                'missing': 0,
                'total': 0,
                'hasPrice': 0,
                'hasPriceCurrency': 0,
                'hasAvailability': 0,
                'invalidPrice': 0,
            },
            'aggregateRating': {'present': 0, 'missing': 0, 'valid': 0, 'invalid': 0},
            'brand': {'present': 0, 'missing': 0},
            'sku': {'present': 0, 'missing': 0},
            'gtin': {'present': 0, 'missing': 0},
        }

    def validate(self, item: Any) -> SpecialValidationResult:
        self._reset()

        if not isinstance(item, CanonicalItem) or not item.has_type(PRODUCT_TYPE):
            self.errors.append(error("Product data must use the Product type.", 'invalid-product-type'))
            return self._results()

        self.stats['totalProducts'] += 1

        if text_value(item.get('name')):
            self.stats['name']['present'] += 1
        else:
            self.stats['name']['missing'] += 1
            self.errors.append(error("Product has no name.", 'missing-name', path='name'))

        self._check_images(item)
        self._check_description(item)
        self._check_offers(item)
        self._check_rating(item)
        self._check_identifiers(item)

        if not self.errors:
            self.stats['validProducts'] += 1
        return self._results()

    def _check_images(self, item: CanonicalItem) -> None:
        images = [image for image in as_list(item.get('image')) if image not in (None, '')]
        if not images:
            self.stats['image']['missing'] += 1
            self.errors.append(error("Product has no image.", 'missing-image', path='image'))
            return

        self.stats['image']['present'] += 1
        for index, image in enumerate(images):
            url = _image_url(image)
            if not url:
                self.stats['image']['invalid'] += 1
                self.errors.append(error(
                    f"Product image #{index + 1} has no URL.",
                    'missing-image-url',
                    path=f"image[{index}]",
                ))
            elif not is_absolute_url(url):
                self.stats['image']['invalid'] += 1
                self.warnings.append(warning(
                    f"Product image #{index + 1} uses a relative URL. Use an absolute URL instead.",
                    'relative-image-url',
                    path=f"image[{index}]",
                ))

    def _check_description(self, item: CanonicalItem) -> None:
        description = text_value(item.get('description'))
        if not description:
            self.stats['description']['missing'] += 1
            self.warnings.append(warning(
                "Product has no description. Add one to help users and search engines.",
                'missing-description',
                path='description',
            ))
            return

        self.stats['description']['present'] += 1
        if len(description) < self.thresholds.product_description_min_length:
            self.stats['description']['tooShort'] += 1
            self.warnings.append(warning(
                f"Product description is very short ({len(description)} characters).",
                'short-description',
                path='description',
            ))

    def _check_offers(self, item: CanonicalItem) -> None:
        offers = [offer for offer in as_list(item.get('offers')) if offer not in (None, '')]
        stats = self.stats['offers']
        if not offers:
            stats['missing'] += 1
            self.errors.append(error("Product has no offers.", 'missing-offers', path='offers'))
            return

        stats['present'] += 1
        stats['total'] += len(offers)
        for index, offer in enumerate(offers):
            number = index + 1
            path = f"offers[{index}]"
            if not isinstance(offer, CanonicalItem):
                self.errors.append(error(
                    f"Product offer #{number} is not an Offer object.",
                    'missing-price',
                    path=path,
                ))
                continue

            price = offer.get('price')
            if price in (None, ''):
                price = offer.get('lowPrice')
            if price in (None, ''):
                self.errors.append(error(
                    f"Product offer #{number} has no price or lowPrice.",
                    'missing-price',
                    path=f"{path}.price",
                ))
            else:
                stats['hasPrice'] += 1
                if parse_number(price) is None:
                    stats['invalidPrice'] += 1
                    self.errors.append(error(
                        f"Product offer #{number} price is not a valid number: {price}",
                        'invalid-price-format',
                        path=f"{path}.price",
                    ))

            if text_value(offer.get('priceCurrency')):
                stats['hasPriceCurrency'] += 1
            else:
                self.errors.append(error(
                    f"Product offer #{number} has no priceCurrency.",
                    'missing-price-currency',
                    path=f"{path}.priceCurrency",
                ))

            availability = text_value(offer.get('availability'))
            if not availability:
                self.warnings.append(warning(
                    f"Product offer #{number} has no availability.",
                    'missing-availability',
                    path=f"{path}.availability",
                ))
            else:
                stats['hasAvailability'] += 1
                if availability not in VALID_AVAILABILITY:
                    self.warnings.append(warning(
                        f"Product offer #{number} has an invalid availability value: {availability}",
                        'invalid-availability',
                        path=f"{path}.availability",
                    ))

    def _check_rating(self, item: CanonicalItem) -> None:
        rating = item.get('aggregateRating')
        stats = self.stats['aggregateRating']
        if rating in (None, ''):
            stats['missing'] += 1
            self.warnings.append(warning(
                "Product has no aggregateRating. Ratings make the listing stand out in search results.",
                'missing-rating',
                path='aggregateRating',
            ))
            return

        stats['present'] += 1
        if not isinstance(rating, CanonicalItem) or not rating.has_type(AGGREGATE_RATING_TYPE):
            stats['invalid'] += 1
            self.errors.append(error(
                "Product rating must use the AggregateRating type.",
                'invalid-rating-type',
                path='aggregateRating',
            ))
            return

        if not rating.has('ratingValue') or not rating.has('reviewCount'):
            stats['invalid'] += 1
            self.errors.append(error(
                "Product rating needs both ratingValue and reviewCount.",
                'incomplete-rating',
                path='aggregateRating',
            ))
            return

        stats['valid'] += 1
        best = parse_number(rating.get('bestRating'))
        if best is None:
            best = DEFAULT_BEST_RATING
        value = parse_number(rating.get('ratingValue'))
        if value is None or value < 0 or value > best:
            self.warnings.append(warning(
                f"Product rating value is invalid: {rating.get('ratingValue')}",
                'invalid-rating-value',
                path='aggregateRating.ratingValue',
            ))
        count = parse_number(rating.get('reviewCount'))
        if count is None or count <= 0:
            self.warnings.append(warning(
                f"Product review count is invalid: {rating.get('reviewCount')}",
                'invalid-review-count',
                path='aggregateRating.reviewCount',
            ))

    def _check_identifiers(self, item: CanonicalItem) -> None:
        brand = item.get('brand')
        if brand in (None, ''):
            self.stats['brand']['missing'] += 1
            self.warnings.append(warning(
                "Product has no brand. Add brand information.",
                'missing-brand',
                path='brand',
            ))
        else:
            self.stats['brand']['present'] += 1
            if isinstance(brand, CanonicalItem) and not text_value(brand.get('name')):
                self.warnings.append(warning(
                    "Product brand object has no name.",
                    'missing-brand-name',
                    path='brand.name',
                ))

        if item.has('sku'):
            self.stats['sku']['present'] += 1
        else:
            self.stats['sku']['missing'] += 1
            self.warnings.append(warning(
                "Product has no sku. A SKU helps identify the product.",
                'missing-sku',
                path='sku',
            ))

        if any(item.has(prop) for prop in PRODUCT_IDENTIFIER_PROPERTIES):
            self.stats['gtin']['present'] += 1
        else:
            self.stats['gtin']['missing'] += 1
            self.warnings.append(warning(
                "Product has no standard identifier such as GTIN, ISBN or MPN.",
                'missing-product-identifier',
            ))

    def _recommendations(self) -> list:
        recommendations = []
        stats = self.stats
        offers = stats['offers']
        min_length = self.thresholds.product_description_min_length

        if stats['name']['missing']:
            recommendations.append(Recommendation(
                "Every product needs a name.", IMPORTANCE_HIGH,
            ))
        if stats['image']['missing'] or stats['image']['invalid']:
            recommendations.append(Recommendation(
                "Give every product a valid, absolute (http:// or https://) image URL.",
                IMPORTANCE_HIGH,
            ))
        if offers['missing']:
            recommendations.append(Recommendation(
                "Every product needs price information in its offers property.",
                IMPORTANCE_HIGH,
            ))
        if offers['hasPrice'] < offers['total'] or offers['hasPriceCurrency'] < offers['total']:
            recommendations.append(Recommendation(
                "Every offer needs both price and priceCurrency.",
                IMPORTANCE_HIGH,
            ))
        if stats['description']['missing'] or stats['description']['tooShort']:
            recommendations.append(Recommendation(
                f"Give every product a detailed description of at least {min_length} characters.",
                IMPORTANCE_MEDIUM,
            ))
        if stats['aggregateRating']['missing']:
            recommendations.append(Recommendation(
                "Add aggregateRating so review stars can appear in search results.",
                IMPORTANCE_MEDIUM,
            ))
        if stats['brand']['missing']:
            recommendations.append(Recommendation(
                "Add a brand property to state the product brand clearly.",
                IMPORTANCE_MEDIUM,
            ))
        if stats['gtin']['missing']:
            recommendations.append(Recommendation(
                "Where possible, add a standard product identifier such as gtin, isbn or mpn.",
                IMPORTANCE_MEDIUM,
            ))
        if offers['hasAvailability'] < offers['total']:
            recommendations.append(Recommendation(
                "Add availability to every offer to show stock status.",
                IMPORTANCE_MEDIUM,
            ))
        recommendations.append(Recommendation(
            "Keep product structured data consistent with the product details shown on the page.",
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
