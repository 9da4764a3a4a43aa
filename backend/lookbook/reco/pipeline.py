"""
Outfit generation pipeline: score -> select -> request completion -> repair -> enrich.

One call is one request. Nothing is shared between runs except the completion cache
the caller chooses to pass in.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..config import settings
from ..core.exceptions import LookbookException, ValidationError, error_payload
from ..schemas import (
    SLOTS,
    ColorSummary,
    FeedbackEntry,
    GenerateOutfitsResponse,
    Product,
    UserProfile,
)
from ..utils.cache import CompletionCache
from ..utils.llm_client import CompletionClient
from ..utils.profiler import Profiler
from .color_matcher import summarize
from .enrich import diversity_report, enrich_outfits
from .normalize import has_valid_image, normalize_products
from .repair import repair_proposals
from .requestor import request_outfits
from .scorer import score_products
from .selector import select_candidates

logger = logging.getLogger(__name__)

RawCatalog = Dict[str, List[Dict[str, Any]]]

# Accept both slot names and pool names for raw catalog input
_CATALOG_KEYS = {slot: (slot, pool) for slot, pool in SLOTS.items()}


class OutfitPipeline:
    """Runs one outfit batch end to end.

    client: the completion service
    cache: optional CompletionCache owned by the caller
    """

    def __init__(
        self,
        client: CompletionClient,
        cache: Optional[CompletionCache] = None,
        batch_size: Optional[int] = None,
        max_pool_size: Optional[int] = None,
        min_inventory: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        self.client = client
        self.cache = cache
        self.batch_size = settings.OUTFIT_BATCH_SIZE if batch_size is None else batch_size
        self.max_pool_size = settings.CANDIDATE_POOL_SIZE if max_pool_size is None else max_pool_size
        self.min_inventory = settings.MIN_CATEGORY_INVENTORY if min_inventory is None else min_inventory
        self.temperature = temperature

        if self.batch_size < 1:
            raise ValidationError(f"batch_size must be at least 1, got {self.batch_size}", field="batch_size")
        if self.max_pool_size < 1:
            raise ValidationError(f"max_pool_size must be at least 1, got {self.max_pool_size}", field="max_pool_size")

    @staticmethod
    def _ingest(catalog: RawCatalog) -> Dict[str, List[Product]]:
        products: Dict[str, List[Product]] = {}
        for slot, keys in _CATALOG_KEYS.items():
            rows = next((catalog[k] for k in keys if catalog.get(k)), [])
            products[slot] = normalize_products(rows, slot)
        return products

    async def run(
        self,
        catalog: RawCatalog,
        profile: UserProfile,
        feedback: Optional[List[FeedbackEntry]] = None,
    ) -> GenerateOutfitsResponse:
        """Generate one batch. Hard failures raise LookbookException subclasses."""
        profiler = Profiler()
        logger.info(
            f"Generating {self.batch_size} outfits for occasion '{profile.occasion}' "
            f"(budget {profile.price_range.min:.0f}-{profile.price_range.upper:.0f})"
        )

        with profiler.measure("ingest"):
            products = self._ingest(catalog)

        with profiler.measure("score"):
            scored = {slot: score_products(items, profile) for slot, items in products.items()}

        with profiler.measure("select"):
            selection = select_candidates(
                scored, has_valid_image, self.max_pool_size, self.min_inventory
            )

        with profiler.measure("completion"):
            proposals = await request_outfits(
                self.client,
                selection.pool,
                profile,
                feedback,
                batch_size=self.batch_size,
                cache=self.cache,
                temperature=self.temperature,
            )

        with profiler.measure("repair"):
            proposals = repair_proposals(proposals, selection.pool)

        with profiler.measure("enrich"):
            outfits = enrich_outfits(proposals, selection.eligible, profile)
            diversity = diversity_report(outfits)
            colors = summarize([(o.color_score, o.color_harmony) for o in outfits])

        profiler.log_summary("[Outfits] ")
        return GenerateOutfitsResponse(
            success=True,
            outfits=outfits,
            color_summary=ColorSummary(**colors),
            diversity=diversity,
            low_inventory=selection.low_inventory,
            timings=profiler.as_milliseconds(),
        )


async def generate_outfits(
    catalog: RawCatalog,
    profile: UserProfile,
    client: CompletionClient,
    feedback: Optional[List[FeedbackEntry]] = None,
    cache: Optional[CompletionCache] = None,
    **options: Any,
) -> Dict[str, Any]:
    """Library entry point.

    Returns {"success": True, "outfits": [...], ...} or, on any hard failure,
    {"success": False, "error": ..., "details": ...}. Never a partial batch.
    """
    try:
        pipeline = OutfitPipeline(client, cache=cache, **options)
        result = await pipeline.run(catalog, profile, feedback)
    except LookbookException as e:
        logger.error(f"Outfit generation failed: {e.error_code} - {e.message}")
        return error_payload(e)
    return result.model_dump(by_alias=True)
