"""
Additive relevance scoring. Every product starts at BASE_SCORE and collects points
for matching the request; nothing subtracts, so a better match can only score higher.

 HOW IT AFFECTS OUTFIT SUGGESTIONS:
 - Higher scoring products sit at the front of each candidate pool
 - The completion service sees the pool in that order and repair substitutes from it
 - Occasion (+40) and price fit (+30..40) dominate; style/fit/fabric break ties

 TUNING RECOMMENDATIONS:
 - Raise OCCASION_BONUS to make occasion tagging stricter than budget
 - Add occasions to FORMALITY_BY_OCCASION (1 = athletic ... 5 = black tie)
"""
from __future__ import annotations

import logging
from typing import Dict, List

from ..schemas import PriceRange, Product, UserProfile

logger = logging.getLogger(__name__)


BASE_SCORE = 50.0
OCCASION_BONUS = 40.0
STYLE_POINTS_PER_TAG = 5.0
STYLE_CAP = 20.0
FIT_INFO_BONUS = 5.0
PREFERRED_FIT_BONUS = 5.0
FABRIC_POINTS = 2.0
FABRIC_CAP = 10.0
FORMALITY_MAX = 20.0
FORMALITY_STEP = 10.0
PRICE_FIT_BONUS = 30.0
PRICE_CENTER_MAX = 10.0
DESCRIPTION_BONUS = 5.0
IN_STOCK_BONUS = 5.0

PREFERRED_FITS = {"fitted", "tailored", "regular"}
QUALITY_FABRICS = {"breathable", "moisture_wicking", "soft", "durable", "wrinkle_resistant"}

FORMALITY_BY_OCCASION: Dict[str, int] = {
    "workout": 1,
    "casual": 2,
    "everyday": 2,
    "date": 3,
    "work": 4,
    "party": 4,
    "formal": 5,
    "wedding": 5,
}
DEFAULT_FORMALITY = 3


def _style_points(product: Product, style_keywords: List[str]) -> float:
    prefs = [p.lower() for p in style_keywords if p]
    tags = [t.lower() for t in product.style_categories + product.style_tags if t]
    matches = sum(1 for tag in tags if any(tag in pref for pref in prefs))
    return min(STYLE_CAP, matches * STYLE_POINTS_PER_TAG)


def _fit_points(product: Product) -> float:
    if not product.body_fits:
        return 0.0
    points = FIT_INFO_BONUS
    if any(fit.lower() in PREFERRED_FITS for fit in product.body_fits):
        points += PREFERRED_FIT_BONUS
    return points


def _fabric_points(product: Product) -> float:
    matches = sum(1 for f in product.fabric_properties if f.lower() in QUALITY_FABRICS)
    return min(FABRIC_CAP, matches * FABRIC_POINTS)


def _formality_points(product: Product, occasion: str) -> float:
    expected = FORMALITY_BY_OCCASION.get(occasion.lower(), DEFAULT_FORMALITY)
    actual = product.formality_level or DEFAULT_FORMALITY
    return max(0.0, FORMALITY_MAX - abs(actual - expected) * FORMALITY_STEP)


def _price_points(price: float, price_range: PriceRange) -> float:
    low, high = price_range.min, price_range.upper
    if not (low <= price <= high):
        return 0.0
    span = high - low
    if span <= 0:
        return PRICE_FIT_BONUS + PRICE_CENTER_MAX
    distance = abs(price - (low + high) / 2)
    return PRICE_FIT_BONUS + max(0.0, PRICE_CENTER_MAX - distance / span * PRICE_CENTER_MAX)


def score_product(product: Product, profile: UserProfile) -> float:
    """Relevance of one product to the request profile. Never raises; missing data just earns fewer points."""
    score = BASE_SCORE
    occasion = (profile.occasion or "").lower()

    if occasion and occasion in (o.lower() for o in product.occasions):
        score += OCCASION_BONUS
    score += _style_points(product, profile.style_keywords)
    score += _fit_points(product)
    score += _fabric_points(product)
    score += _formality_points(product, occasion)
    score += _price_points(product.price, profile.price_range)
    if len(product.description) > 50:
        score += DESCRIPTION_BONUS
    if product.availability is not False:
        score += IN_STOCK_BONUS
    return score


def score_products(products: List[Product], profile: UserProfile) -> List[Product]:
    """Return copies of products with relevance_score filled in (input order kept)."""
    scored = [p.model_copy(update={"relevance_score": score_product(p, profile)}) for p in products]
    if scored:
        values = [p.relevance_score for p in scored]
        logger.debug(
            f"Scored {len(scored)} products: top {max(values):.1f}, "
            f"avg {sum(values) / len(values):.1f}, bottom {min(values):.1f}"
        )
    return scored
