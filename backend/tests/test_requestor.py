"""
Tests for the outfit completion requestor: prompt building, response validation, caching.
"""
import asyncio

import pytest

from lookbook.core.exceptions import CompletionFormatError
from lookbook.reco.requestor import (
    build_outfit_prompt,
    format_candidates,
    format_feedback_history,
    parse_completion,
    request_outfits,
)
from lookbook.schemas import ColorStrategy, FeedbackEntry, PriceRange, UserProfile
from lookbook.utils.cache import CompletionCache

from conftest import FakeCompletionClient, completion_json, make_product, outfit_dict


def _batch(n: int = 3):
    return [outfit_dict(i + 1, i + 1, 11 + i, 21 + i) for i in range(n)]


def test_format_candidates_lists_ids_and_fields() -> None:
    text = format_candidates([make_product(7, price=19.5, brand="COS", description="x" * 150)])
    assert text.startswith("ID:7 | Name:top 7 | Price:$19.50 | Brand:COS")
    assert "Desc:" + "x" * 100 in text
    assert "x" * 101 not in text


def test_format_candidates_empty() -> None:
    assert format_candidates([]) == "(none available)"


def test_feedback_history_is_capped() -> None:
    feedback = [FeedbackEntry(outfit_name=f"Look {i}", feedback_type="like") for i in range(15)]
    history = format_feedback_history(feedback, limit=10)
    assert history.splitlines()[0] == "USER FEEDBACK HISTORY (learn from these preferences):"
    assert len(history.splitlines()) == 11
    assert '"Look 9"' in history
    assert '"Look 10"' not in history


def test_feedback_line_format() -> None:
    entry = FeedbackEntry(outfit_name="Night Out", feedback_type="dislike", reason="too loud", feedback_text="tone it down")
    assert format_feedback_history([entry]).splitlines()[1] == '- Disliked "Night Out": too loud (tone it down)'


def test_no_feedback_means_no_section() -> None:
    assert format_feedback_history([]) == ""


def test_prompt_contains_pool_profile_and_rules(pool, profile) -> None:
    prompt = build_outfit_prompt(pool, profile, batch_size=3)
    assert "Create 3 complete outfits" in prompt
    assert "Occasion: work" in prompt
    assert "$50 - $200" in prompt
    assert "ZERO PRODUCT REUSE" in prompt
    for product in pool.tops + pool.bottoms + pool.shoes:
        assert f"ID:{product.id} |" in prompt
    assert "USER FEEDBACK HISTORY" not in prompt


def test_prompt_mentions_colors_and_unlimited_budget(pool) -> None:
    profile = UserProfile(
        price_range=PriceRange(min=300, max=None),
        color_strategy=ColorStrategy(primary=["navy"], avoid=["orange"]),
    )
    prompt = build_outfit_prompt(pool, profile, batch_size=3)
    assert "$300 minimum, no maximum" in prompt
    assert "build around these): navy" in prompt
    assert "Colors to avoid: orange" in prompt


def test_parse_completion_accepts_exact_batch() -> None:
    proposals = parse_completion(completion_json(_batch()), 3)
    assert [p.top.id for p in proposals] == [1, 2, 3]
    assert proposals[0].why_it_works == "Balanced proportions"
    assert proposals[0].confidence_score == 92


def test_parse_completion_strips_code_fences() -> None:
    text = "Here you go:\n```json\n" + completion_json(_batch()) + "\n```"
    assert len(parse_completion(text, 3)) == 3


def test_parse_completion_numbers_missing_outfits() -> None:
    batch = _batch()
    for outfit in batch:
        del outfit["outfitNumber"]
    assert [p.outfit_number for p in parse_completion(completion_json(batch), 3)] == [1, 2, 3]


@pytest.mark.parametrize(
    "text",
    [
        "not json at all",
        '{"looks": []}',
        '{"outfits": "none"}',
        completion_json(_batch(2)),
        completion_json(_batch(4)),
        completion_json(_batch(2) + [{"name": "x", "top": {"id": 1}, "confidenceScore": "very high"}]),
    ],
)
def test_parse_completion_rejects_malformed(text) -> None:
    with pytest.raises(CompletionFormatError) as exc_info:
        parse_completion(text, 3)
    assert exc_info.value.status_code == 502
    assert exc_info.value.error_code == "MALFORMED_COMPLETION"


def test_wrong_count_is_reported() -> None:
    with pytest.raises(CompletionFormatError) as exc_info:
        parse_completion(completion_json(_batch(5)), 3)
    assert exc_info.value.details["expected"] == 3
    assert exc_info.value.details["received"] == 5


def test_request_outfits_calls_client(pool, profile) -> None:
    client = FakeCompletionClient(completion_json(_batch()))
    proposals = asyncio.run(request_outfits(client, pool, profile, batch_size=3, temperature=0.5))
    assert len(proposals) == 3
    assert client.calls == [{"response_format": "json_object", "temperature": 0.5}]
    assert "Create 3 complete outfits" in client.prompts[0]


def test_request_outfits_includes_feedback(pool, profile) -> None:
    client = FakeCompletionClient(completion_json(_batch()))
    feedback = [FeedbackEntry(outfit_name="Boardroom Ready", feedback_type="like", reason="sharp")]
    asyncio.run(request_outfits(client, pool, profile, feedback, batch_size=3))
    assert '- Liked "Boardroom Ready": sharp' in client.prompts[0]


def test_cache_hit_skips_second_call(pool, profile) -> None:
    client = FakeCompletionClient(completion_json(_batch()))
    cache = CompletionCache(maxsize=4, ttl=60)
    first = asyncio.run(request_outfits(client, pool, profile, batch_size=3, cache=cache))
    second = asyncio.run(request_outfits(client, pool, profile, batch_size=3, cache=cache))
    assert len(client.prompts) == 1
    assert first == second
    assert len(cache) == 1


def test_different_profile_misses_cache(pool, profile) -> None:
    client = FakeCompletionClient(completion_json(_batch()))
    cache = CompletionCache()
    asyncio.run(request_outfits(client, pool, profile, batch_size=3, cache=cache))
    other = profile.model_copy(update={"occasion": "date"})
    asyncio.run(request_outfits(client, pool, other, batch_size=3, cache=cache))
    assert len(client.prompts) == 2


def test_malformed_response_is_not_cached(pool, profile) -> None:
    client = FakeCompletionClient("sorry, I can't help with that")
    cache = CompletionCache()
    with pytest.raises(CompletionFormatError):
        asyncio.run(request_outfits(client, pool, profile, batch_size=3, cache=cache))
    assert len(cache) == 0


def test_missing_or_null_slots_stay_unresolved() -> None:
    batch = _batch()
    batch[0]["top"] = None
    del batch[1]["shoes"]
    batch[2]["bottom"] = {"name": "no id"}
    proposals = parse_completion(completion_json(batch), 3)
    assert len(proposals) == 3
    assert proposals[0].top.id is None
    assert proposals[1].shoes.id is None
    assert proposals[2].bottom.id is None
    assert proposals[0].bottom.id == 11


def test_non_object_outfit_is_kept_unresolved() -> None:
    proposals = parse_completion(completion_json(_batch(2) + ["not an outfit"]), 3)
    assert len(proposals) == 3
    assert proposals[2].outfit_number == 3
    assert (proposals[2].top.id, proposals[2].bottom.id, proposals[2].shoes.id) == (None, None, None)
