"""
Catalog query interface: raw product rows for one category, filtered by price band
and occasion.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import CatalogError
from ..models import CatalogProduct
from ..schemas import SLOTS, PriceRange

logger = logging.getLogger(__name__)

# Slack around the per-category band so near-budget items still reach the scorer
PRICE_BAND_LOW = 0.8
PRICE_BAND_HIGH = 1.2

"""
Keyword sanity checks on name + description. Catalog categories are noisy
(perfume filed under tops, sneakers under bottoms); reject words win over accept words.
"""
NON_APPAREL = [
    "perfume", "fragrance", "eau de", "cologne", "scent",
    "bag", "purse", "wallet", "belt", "watch", "jewelry",
    "hat", "cap", "beanie", "scarf", "glove",
]
CATEGORY_RULES: Dict[str, Dict[str, List[str]]] = {
    "top": {
        "reject": NON_APPAREL + [
            "shoe", "sneaker", "boot", "sandal", "trainer", "runner",
            "pant", "jean", "trouser", "legging", "short", "skirt", "jogger",
        ],
        "accept": [
            "shirt", "blouse", "top", "tank", "tee", "t-shirt",
            "sweater", "cardigan", "hoodie", "sweatshirt",
            "jacket", "blazer", "coat", "vest", "tunic", "polo",
        ],
    },
    "bottom": {
        "reject": NON_APPAREL + [
            "shoe", "sneaker", "boot", "sandal", "trainer", "runner",
            "shirt", "blouse", "top", "tank", "tee", "sweater", "jacket", "coat",
        ],
        "accept": [
            "pant", "jean", "trouser", "legging", "short",
            "skirt", "jogger", "culotte", "cargo", "chino", "slack",
        ],
    },
    "shoes": {
        "reject": NON_APPAREL + [
            "shirt", "blouse", "top", "tank", "tee", "sweater", "jacket",
            "pant", "jean", "trouser", "legging", "short", "skirt",
        ],
        "accept": [
            "shoe", "sneaker", "boot", "sandal", "trainer",
            "runner", "loafer", "heel", "flat", "pump", "slipper",
        ],
    },
}

WORKOUT_HARD_REJECT = [
    "beaded", "sequin", "rhinestone", "crystal embellished",
    "tuxedo", "formal dress", "gala", "cocktail dress",
    "evening gown", "party dress", "prom", "wedding dress",
    "faux fur coat", "fur jacket", "velvet gown", "satin dress",
    "strapless dress", "off shoulder gown", "ballgown",
    "pencil skirt formal", "blazer suit", "dress shirt formal",
]
WORKOUT_ACCEPT = [
    "athletic", "sport", "gym", "fitness", "training", "workout",
    "activewear", "performance", "running", "yoga", "jogging",
    "moisture", "breathable", "stretch", "compression", "dri-fit",
    "sneaker", "trainer", "running shoe", "athletic shoe",
    "legging", "jogger", "sweatshirt", "hoodie", "tank top",
    "sports bra", "bike short", "track pant",
]

"""
Per-category share of the total outfit budget, by tier: (min fraction, max fraction).
A max fraction of None leaves the category band open-ended.
"""
BUDGET_TIERS: Dict[str, Dict[str, tuple]] = {
    "luxury": {"top": (0.30, None), "bottom": (0.35, None), "shoes": (0.35, None)},
    "premium": {"top": (0.30, 0.40), "bottom": (0.35, 0.45), "shoes": (0.25, 0.40)},
    "moderate": {"top": (0.25, 0.35), "bottom": (0.30, 0.40), "shoes": (0.25, 0.35)},
    "budget": {"top": (0.25, 0.33), "bottom": (0.30, 0.38), "shoes": (0.25, 0.33)},
}


def _text(row: Dict[str, Any]) -> str:
    return f"{row.get('product_name') or row.get('name') or ''} {row.get('description') or ''}".lower()


def is_valid_for_category(row: Dict[str, Any], slot: str) -> bool:
    rules = CATEGORY_RULES.get(slot)
    if rules is None:
        return False
    text = _text(row)
    if any(k in text for k in rules["reject"]):
        return False
    return any(k in text for k in rules["accept"])


def is_valid_for_occasion(row: Dict[str, Any], occasion: str) -> bool:
    """Only workouts are screened: obvious formalwear (2+ markers) is dropped."""
    if (occasion or "").lower() != "workout":
        return True
    text = _text(row)
    reject_hits = sum(1 for k in WORKOUT_HARD_REJECT if k in text)
    if reject_hits >= 2:
        return False
    return reject_hits == 0 or any(k in text for k in WORKOUT_ACCEPT)


def budget_tier(price_range: PriceRange) -> str:
    if price_range.unlimited or price_range.min >= 500:
        return "luxury"
    if price_range.min >= 300:
        return "premium"
    if price_range.min >= 150:
        return "moderate"
    return "budget"


def calculate_category_budgets(price_range: PriceRange) -> Dict[str, PriceRange]:
    """Split the total outfit budget into per-category price bands"""
    tier = budget_tier(price_range)
    total_max = price_range.max if price_range.max is not None else 0
    budgets = {}
    for slot, (low, high) in BUDGET_TIERS[tier].items():
        if high is None:
            budgets[slot] = PriceRange(min=round(price_range.min * low), max=None, is_unlimited=True)
        else:
            budgets[slot] = PriceRange(min=round(price_range.min * low), max=round(total_max * high))
    logger.debug(f"Budget tier {tier}: " + ", ".join(
        f"{s} {b.min:.0f}-{'inf' if b.unlimited else f'{b.max:.0f}'}" for s, b in budgets.items()
    ))
    return budgets


class ProductCatalog:
    """SQLAlchemy-backed catalog reader"""

    def __init__(self, limit: Optional[int] = 300):
        self.limit = limit

    def fetch(self, db: Session, slot: str, occasion: str, price_range: PriceRange) -> List[Dict[str, Any]]:
        """Raw rows for one outfit slot, inside the price band and fit for the occasion."""
        query = db.query(CatalogProduct).filter(CatalogProduct.category == slot)
        query = query.filter(CatalogProduct.price >= price_range.min * PRICE_BAND_LOW)
        if not price_range.unlimited:
            query = query.filter(CatalogProduct.price <= price_range.upper * PRICE_BAND_HIGH)
        query = query.order_by(CatalogProduct.id)
        if self.limit:
            query = query.limit(self.limit)

        try:
            rows = [p.to_dict() for p in query.all()]
        except SQLAlchemyError as e:
            logger.error(f"Catalog query for {slot} failed: {e}")
            raise CatalogError(f"Catalog query for {slot} failed", category=slot) from e

        by_category = [r for r in rows if is_valid_for_category(r, slot)]
        by_occasion = [r for r in by_category if is_valid_for_occasion(r, occasion)]
        logger.info(
            f"Catalog {slot}: {len(rows)} in band, {len(by_category)} after category filter, "
            f"{len(by_occasion)} after occasion filter"
        )
        return by_occasion

    def fetch_all(self, db: Session, occasion: str, price_range: PriceRange) -> Dict[str, List[Dict[str, Any]]]:
        """Rows for every slot, each fetched against its own budget band"""
        budgets = calculate_category_budgets(price_range)
        return {slot: self.fetch(db, slot, occasion, budgets[slot]) for slot in SLOTS}
