from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..config import settings
from ..schemas import SLOTS, CandidatePool, Product
from .normalize import has_valid_image

logger = logging.getLogger(__name__)


@dataclass
class Selection:
    """Outcome of candidate selection.

    pool: capped shortlists sent to the completion service
    eligible: every image-valid product per slot, relevance-sorted, uncapped;
        enrichment resolves ids and builds fallbacks against these
    low_inventory: slots with fewer eligible products than the warning threshold
    """
    pool: CandidatePool
    eligible: Dict[str, List[Product]] = field(default_factory=dict)
    low_inventory: List[str] = field(default_factory=list)


def rank_by_relevance(products: List[Product]) -> List[Product]:
    """Sort descending by relevance_score; equal scores keep catalog order (stable sort)."""
    return sorted(products, key=lambda p: p.relevance_score, reverse=True)


def _unique(products: List[Product]) -> List[Product]:
    seen = set()
    out: List[Product] = []
    for p in products:
        key = str(p.id)
        if key in seen:
            continue
        seen.add(key)
        out.append(p)
    return out


def select_candidates(
    products_by_slot: Dict[str, List[Product]],
    has_valid_image_fn: Callable[[Product], bool] = has_valid_image,
    max_pool_size: Optional[int] = None,
    min_inventory: Optional[int] = None,
) -> Selection:
    """Filter to products with real imagery, rank them and cap each slot's pool.

    Low inventory is reported, never raised; the pipeline proceeds and later stages
    degrade through the enrichment fallback.
    """
    max_pool_size = settings.CANDIDATE_POOL_SIZE if max_pool_size is None else max_pool_size
    min_inventory = settings.MIN_CATEGORY_INVENTORY if min_inventory is None else min_inventory

    eligible: Dict[str, List[Product]] = {}
    low_inventory: List[str] = []
    pools: Dict[str, List[Product]] = {}

    for slot, pool_name in SLOTS.items():
        products = products_by_slot.get(slot) or []
        with_images = [p for p in products if has_valid_image_fn(p)]
        ranked = _unique(rank_by_relevance(with_images))
        eligible[slot] = ranked
        pools[pool_name] = ranked[:max_pool_size]

        dropped = len(products) - len(with_images)
        if dropped:
            logger.debug(f"{pool_name}: dropped {dropped} products without a usable image")
        if len(ranked) < min_inventory:
            logger.warning(f"Low inventory for {pool_name}: {len(ranked)} products (want {min_inventory})")
            low_inventory.append(slot)

    pool = CandidatePool(**pools)
    logger.info(
        f"Candidate pools: {len(pool.tops)} tops, {len(pool.bottoms)} bottoms, {len(pool.shoes)} shoes"
    )
    return Selection(pool=pool, eligible=eligible, low_inventory=low_inventory)
