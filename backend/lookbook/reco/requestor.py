"""
Outfit completion requestor.

Builds the stylist prompt from the candidate pool, the profile and past feedback,
asks the completion service for a batch of outfits and validates what comes back.
A response that isn't a JSON object with an `outfits` array of exactly the batch
size is a hard failure (CompletionFormatError); the batch is never padded or cut.
A single outfit with a missing or null slot stays in the batch with that slot
unresolved, and enrichment gives it a fallback.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..core.exceptions import CompletionFormatError
from ..schemas import CandidatePool, FeedbackEntry, OutfitProposal, Product, UserProfile
from ..utils.cache import CompletionCache, generate_cache_key
from ..utils.llm_client import CompletionClient, extract_json

logger = logging.getLogger(__name__)

TOKEN_WARNING_THRESHOLD = 50000


def estimate_tokens(text: str) -> int:
    """Rough token estimation (1 token ≈ 4 characters for English text)."""
    return len(text) // 4


def format_candidates(products: List[Product]) -> str:
    """Compact one-line-per-product listing for the prompt"""
    lines = []
    for p in products:
        parts = [
            f"ID:{p.id}",
            f"Name:{p.name}",
            f"Price:${p.price:.2f}",
            f"Brand:{p.brand}",
            f"Color:{p.color}",
            f"Score:{p.relevance_score:.0f}",
        ]
        if p.description:
            parts.append(f"Desc:{p.description[:100]}")
        lines.append(" | ".join(parts))
    return "\n".join(lines) if lines else "(none available)"


def format_feedback_history(feedback: List[FeedbackEntry], limit: Optional[int] = None) -> str:
    """USER FEEDBACK HISTORY section for the first `limit` entries; empty when there is none"""
    limit = settings.FEEDBACK_HISTORY_LIMIT if limit is None else limit
    entries = feedback[:limit]
    if not entries:
        return ""
    lines = ["USER FEEDBACK HISTORY (learn from these preferences):"]
    for entry in entries:
        verb = "Liked" if entry.feedback_type == "like" else "Disliked"
        line = f'- {verb} "{entry.outfit_name}"'
        if entry.reason:
            line += f": {entry.reason}"
        if entry.feedback_text:
            line += f" ({entry.feedback_text})"
        lines.append(line)
    return "\n".join(lines)


def _profile_section(profile: UserProfile) -> str:
    lines = [
        f"Occasion: {profile.occasion}",
        f"Style keywords: {', '.join(profile.style_keywords) or 'not specified'}",
    ]
    if profile.body_profile:
        body = ", ".join(f"{k}: {v}" for k, v in profile.body_profile.items() if v)
        lines.append(f"Body profile: {body}")
    if profile.preferred_colors:
        lines.append(f"User-selected colors (build around these): {', '.join(profile.preferred_colors)}")
    if profile.color_strategy and profile.color_strategy.avoid:
        lines.append(f"Colors to avoid: {', '.join(profile.color_strategy.avoid)}")
    return "\n".join(lines)


def build_outfit_prompt(
    pool: CandidatePool,
    profile: UserProfile,
    feedback: Optional[List[FeedbackEntry]] = None,
    batch_size: int = 9,
) -> str:
    price = profile.price_range
    budget = f"${price.min:.0f} minimum, no maximum" if price.unlimited else f"${price.min:.0f} - ${price.max:.0f}"
    history = format_feedback_history(feedback or [])
    history_block = f"\n{history}\n" if history else ""

    return f"""You are an expert fashion stylist. Create {batch_size} complete outfits from the products below.

USER PROFILE:
{_profile_section(profile)}

BUDGET (total per outfit): {budget}
{history_block}
AVAILABLE TOPS ({len(pool.tops)}):
{format_candidates(pool.tops)}

AVAILABLE BOTTOMS ({len(pool.bottoms)}):
{format_candidates(pool.bottoms)}

AVAILABLE SHOES ({len(pool.shoes)}):
{format_candidates(pool.shoes)}

OUTFIT REQUIREMENTS:
- Each outfit MUST have exactly one top, one bottom and one pair of shoes
- Reference products ONLY by the ID shown above, copied exactly; never invent products
- Keep each outfit's total price inside the budget where possible
- Coordinate colors and match the occasion's formality
- Higher Score means a better match for this user

ZERO PRODUCT REUSE:
- Every product ID may appear in AT MOST ONE outfit across all {batch_size} outfits
- No top, bottom or shoe is repeated anywhere in the batch

RESPONSE FORMAT (JSON only, no markdown, no comments):
{{
    "outfits": [
        {{
            "outfitNumber": 1,
            "name": "Short evocative outfit title",
            "top": {{"id": "<top id>"}},
            "bottom": {{"id": "<bottom id>"}},
            "shoes": {{"id": "<shoes id>"}},
            "totalPrice": 0,
            "withinBudget": true,
            "whyItWorks": "1-2 sentences on why these pieces work together for this user",
            "stylistNotes": ["styling tip", "styling tip"],
            "confidenceScore": 90
        }}
    ]
}}

VALIDATION RULES:
- "outfits" must contain exactly {batch_size} entries
- Every "id" must be one of the IDs listed above for that category

Return valid JSON only."""


def parse_completion(text: str, batch_size: int) -> List[OutfitProposal]:
    """Validate completion text into exactly batch_size proposals, or raise CompletionFormatError."""
    parsed = extract_json(text)
    if parsed is None:
        raise CompletionFormatError("response is not valid JSON", preview=(text or "")[:200])

    outfits = parsed.get("outfits")
    if not isinstance(outfits, list):
        raise CompletionFormatError("missing 'outfits' array", keys=sorted(parsed.keys()))
    if len(outfits) != batch_size:
        raise CompletionFormatError(
            f"expected {batch_size} outfits, got {len(outfits)}",
            expected=batch_size,
            received=len(outfits),
        )

    proposals: List[OutfitProposal] = []
    for i, raw in enumerate(outfits):
        if not isinstance(raw, dict):
            logger.warning(f"Outfit {i + 1} is not an object, treating every slot as unresolved")
            raw = {}
        try:
            proposal = OutfitProposal.model_validate(raw)
        except PydanticValidationError as e:
            errors = e.errors(include_url=False, include_context=False, include_input=False)
            raise CompletionFormatError(f"outfit {i + 1} is malformed", index=i, errors=errors) from e
        if proposal.outfit_number is None:
            proposal = proposal.model_copy(update={"outfit_number": i + 1})
        proposals.append(proposal)
    return proposals


async def request_outfits(
    client: CompletionClient,
    pool: CandidatePool,
    profile: UserProfile,
    feedback: Optional[List[FeedbackEntry]] = None,
    batch_size: Optional[int] = None,
    cache: Optional[CompletionCache] = None,
    temperature: Optional[float] = None,
) -> List[OutfitProposal]:
    """Ask the completion service for one batch of outfit proposals."""
    batch_size = settings.OUTFIT_BATCH_SIZE if batch_size is None else batch_size
    temperature = settings.LLM_TEMPERATURE if temperature is None else temperature

    prompt = build_outfit_prompt(pool, profile, feedback, batch_size)
    estimated = estimate_tokens(prompt)
    if estimated > TOKEN_WARNING_THRESHOLD:
        logger.warning(f"Prompt is large (~{estimated} tokens)")
    logger.info(f"Requesting {batch_size} outfits (~{estimated} prompt tokens)")

    cache_key = generate_cache_key("outfits", prompt, client.service, client.model, temperature)
    if cache is not None:
        cached: Optional[List[Dict[str, Any]]] = cache.get(cache_key)
        if cached is not None:
            logger.info("Using cached outfit proposals")
            return [OutfitProposal.model_validate(p) for p in cached]

    text = await client.complete(prompt, response_format="json_object", temperature=temperature)
    proposals = parse_completion(text, batch_size)

    if cache is not None:
        cache.set(cache_key, [p.model_dump() for p in proposals])
    return proposals
