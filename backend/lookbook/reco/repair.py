"""
Cross-outfit uniqueness repair.

The completion service is asked to never reuse a product, but it sometimes does.
repair_proposals walks the batch in order and, per slot, swaps any id that an
earlier outfit already claimed for the best-ranked pool product nobody has claimed
yet. Ids are compared by their string form so 12 and "12" are the same product.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from ..schemas import SLOTS, CandidatePool, OutfitProposal, ProductRef

logger = logging.getLogger(__name__)

UNRESOLVED = ProductRef(id=None)


def _key(ref: ProductRef) -> Optional[str]:
    return None if ref.id is None else str(ref.id)


def find_duplicates(proposals: List[OutfitProposal]) -> Dict[str, int]:
    """Count repeated ids per slot, in batch order. Nothing is changed."""
    seen: Dict[str, Set[str]] = {slot: set() for slot in SLOTS}
    duplicates: Dict[str, int] = {slot: 0 for slot in SLOTS}
    for proposal in proposals:
        for slot in SLOTS:
            key = _key(getattr(proposal, slot))
            if key is None:
                continue
            if key in seen[slot]:
                duplicates[slot] += 1
            else:
                seen[slot].add(key)
    return duplicates


def _next_unused(pool: CandidatePool, slot: str, used: Set[str]) -> Optional[ProductRef]:
    # Pool order is relevance order, so the first free product is the best substitute
    for product in pool.for_slot(slot):
        if str(product.id) not in used:
            return ProductRef(id=product.id)
    return None


def repair_proposals(proposals: List[OutfitProposal], pool: CandidatePool) -> List[OutfitProposal]:
    """Return the batch with every repeated id replaced, same length and order.

    Clean batches come back unchanged. When a slot's pool has no unused product
    left, the repeated reference is cleared (id None) rather than raising;
    enrichment can't resolve it and builds a fallback for that outfit only.
    """
    duplicates = find_duplicates(proposals)
    total = sum(duplicates.values())
    if total == 0:
        logger.debug(f"No duplicate products across {len(proposals)} outfits")
        return list(proposals)

    logger.warning(f"Found {total} duplicate product references {duplicates}, repairing")

    used: Dict[str, Set[str]] = {slot: set() for slot in SLOTS}
    repaired: List[OutfitProposal] = []
    unresolved = 0

    for proposal in proposals:
        updates = {}
        for slot in SLOTS:
            key = _key(getattr(proposal, slot))
            if key is None:
                continue
            if key in used[slot]:
                replacement = _next_unused(pool, slot, used[slot])
                if replacement is None:
                    unresolved += 1
                    logger.warning(f"Outfit {proposal.outfit_number}: no unused {slot} left for duplicate {key}")
                    updates[slot] = UNRESOLVED
                    continue
                logger.info(f"Outfit {proposal.outfit_number}: {slot} {key} -> {replacement.id}")
                updates[slot] = replacement
                key = str(replacement.id)
            used[slot].add(key)
        repaired.append(proposal.model_copy(update=updates) if updates else proposal)

    if unresolved:
        logger.warning(f"{unresolved} duplicate references left unresolved")
    return repaired
