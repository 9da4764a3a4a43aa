from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from ..schemas import SLOTS, EnrichedOutfit, OutfitItem, OutfitProposal, Product, UserProfile
from .color_matcher import color_harmony
from .normalize import PLACEHOLDER_IMAGE

logger = logging.getLogger(__name__)

LookupMaps = Dict[str, Dict[str, Product]]

DEFAULT_WHY = "A perfectly curated look for your style profile."
DEFAULT_NOTES = ["Style with confidence", "Perfect for your occasion"]
SUCCESS_QUALITY = 90.0
FALLBACK_QUALITY = 85.0

PLACEHOLDER_NAMES = {"top": "Stylish Top", "bottom": "Classic Bottom", "shoes": "Elegant Shoes"}
PLACEHOLDER_PRICE = 50.0
PLACEHOLDER_BRAND = "ASOS"

SHOE_FORMALITY = [
    ("athletic", ["sneaker", "trainer", "athletic", "running", "sport", "gym"]),
    ("dressy", ["heel", "stiletto", "pump", "platform heel", "kitten", "strappy heel", "dress shoe"]),
    ("casual", ["flat", "sandal", "loafer", "slip-on", "canvas", "espadrille", "mule"]),
]

"""
Title words that contradict the chosen shoes, and what replaces them.
Each rule: (word that must be in the title, shoe formalities it conflicts with, replacements)
"""
TITLE_RULES = [
    ("casual", {"dressy"}, [("casual", "polished"), ("relaxed", "refined"), ("effortless", "elegant")]),
    ("sporty", {"dressy"}, [("sporty", "dynamic"), ("athletic", "energetic")]),
    ("elegant", {"athletic"}, [("elegant", "modern"), ("sophisticated", "contemporary")]),
    ("formal", {"casual", "athletic"}, [("formal", "smart")]),
]


def shoe_formality(shoe_name: str) -> str:
    name = (shoe_name or "").lower()
    for label, indicators in SHOE_FORMALITY:
        if any(ind in name for ind in indicators):
            return label
    return "neutral"


def reconcile_title(title: str, shoe_name: str) -> str:
    """Rewrite title words the shoes contradict (a "casual" look in stilettos becomes "polished")."""
    formality = shoe_formality(shoe_name)
    for trigger, conflicts, replacements in TITLE_RULES:
        if formality in conflicts and trigger in title.lower():
            for old, new in replacements:
                title = re.sub(old, new, title, flags=re.IGNORECASE)
    return title


def build_lookup_maps(products_by_slot: Dict[str, List[Product]]) -> LookupMaps:
    """id (string form) -> Product, per slot"""
    return {
        slot: {str(p.id): p for p in products_by_slot.get(slot, [])}
        for slot in SLOTS
    }


def _item(product: Product, slot: str) -> OutfitItem:
    images = product.images or [PLACEHOLDER_IMAGE]
    return OutfitItem(
        id=product.id,
        name=product.name,
        brand=product.brand,
        price=product.price,
        images=images,
        image=images[0],
        url=product.url,
        product_url=product.url,
        color=product.color,
        description=product.description,
        category=slot,
    )


def _placeholder(slot: str, index: int) -> Product:
    return Product(
        id=f"{slot}-{index}",
        name=PLACEHOLDER_NAMES[slot],
        price=PLACEHOLDER_PRICE,
        brand=PLACEHOLDER_BRAND,
        category=slot,
        images=[PLACEHOLDER_IMAGE],
        url="#",
    )


def _outfit(
    proposal: OutfitProposal,
    products: Dict[str, Product],
    index: int,
    within_budget: bool,
    quality_default: float,
    fallback: bool,
) -> EnrichedOutfit:
    items = [_item(products[slot], slot) for slot in SLOTS]
    name = proposal.name or f"Curated Look {index + 1}"
    if not fallback:
        name = reconcile_title(name, products["shoes"].name)
    score, label = color_harmony([item.color for item in items])
    return EnrichedOutfit(
        id=f"outfit-{index}",
        name=name,
        total_price=sum(item.price for item in items),
        within_budget=within_budget,
        quality_score=proposal.confidence_score or quality_default,
        items=items,
        why_it_works=proposal.why_it_works or DEFAULT_WHY,
        stylist_notes=proposal.stylist_notes or list(DEFAULT_NOTES),
        color_score=score,
        color_harmony=label,
        is_fallback=fallback,
    )


def fallback_outfit(
    proposal: OutfitProposal,
    eligible: Dict[str, List[Product]],
    index: int,
) -> EnrichedOutfit:
    """Outfit from the same-position product of each slot, or placeholders past the end.

    Never price-checked, so within_budget is always False.
    """
    products = {}
    for slot in SLOTS:
        options = eligible.get(slot) or []
        products[slot] = options[index] if index < len(options) else _placeholder(slot, index)
    return _outfit(proposal, products, index, within_budget=False,
                   quality_default=FALLBACK_QUALITY, fallback=True)


def enrich_outfit(
    proposal: OutfitProposal,
    lookup: LookupMaps,
    eligible: Dict[str, List[Product]],
    profile: UserProfile,
    index: int,
) -> EnrichedOutfit:
    """Resolve one proposal to full products.

    total_price is recomputed from the resolved prices; the proposal's own total is ignored.
    """
    resolved: Dict[str, Optional[Product]] = {}
    for slot in SLOTS:
        ref_id = getattr(proposal, slot).id
        resolved[slot] = None if ref_id is None else lookup.get(slot, {}).get(str(ref_id))
    missing = [slot for slot, product in resolved.items() if product is None]
    if missing:
        logger.warning(
            f"Outfit {index + 1}: unresolved {', '.join(missing)} "
            f"({', '.join(str(getattr(proposal, s).id) for s in missing)}), using fallback"
        )
        return fallback_outfit(proposal, eligible, index)

    total = sum(p.price for p in resolved.values())
    return _outfit(proposal, resolved, index,
                   within_budget=profile.price_range.contains(total),
                   quality_default=SUCCESS_QUALITY, fallback=False)


def enrich_outfits(
    proposals: List[OutfitProposal],
    eligible: Dict[str, List[Product]],
    profile: UserProfile,
) -> List[EnrichedOutfit]:
    """Exactly one enriched outfit per proposal, in batch order."""
    lookup = build_lookup_maps(eligible)
    outfits = [enrich_outfit(p, lookup, eligible, profile, i) for i, p in enumerate(proposals)]
    fallbacks = sum(1 for o in outfits if o.is_fallback)
    logger.info(f"Enriched {len(outfits)} outfits ({fallbacks} fallback)")
    return outfits


def diversity_report(outfits: List[EnrichedOutfit]) -> Dict[str, int]:
    """Distinct product ids per slot across the batch"""
    distinct: Dict[str, set] = {slot: set() for slot in SLOTS}
    for outfit in outfits:
        for item in outfit.items:
            distinct[item.category].add(str(item.id))
    report = {slot: len(ids) for slot, ids in distinct.items()}
    logger.info(f"Diversity check over {len(outfits)} outfits: {report}")
    return report
