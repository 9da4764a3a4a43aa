"""
End-to-end tests for the outfit pipeline with a scripted completion service.
"""
import asyncio

from lookbook.core.exceptions import ExternalServiceError
from lookbook.reco import OutfitPipeline, generate_outfits
from lookbook.utils.cache import CompletionCache

from conftest import FakeCompletionClient, completion_json, outfit_dict, raw_row


def _repeating_batch(n: int = 9):
    """Every outfit proposes the same top; bottoms and shoes are distinct"""
    return completion_json([outfit_dict(i + 1, 100, 200 + i, 300 + i) for i in range(n)])


def _distinct(outfits, slot):
    return {item["id"] for o in outfits for item in o["items"] if item["category"] == slot}


def test_generate_outfits_repairs_duplicates(catalog, profile) -> None:
    client = FakeCompletionClient(_repeating_batch())
    result = asyncio.run(generate_outfits(catalog, profile, client))

    assert result["success"] is True
    outfits = result["outfits"]
    assert len(outfits) == 9
    assert not any(o["isFallback"] for o in outfits)
    assert len(_distinct(outfits, "top")) == 9
    assert result["diversity"] == {"top": 9, "bottom": 9, "shoes": 9}
    assert result["lowInventory"] == []
    assert outfits[0]["items"][0]["id"] == 100


def test_result_uses_camel_case_keys(catalog, profile) -> None:
    result = asyncio.run(generate_outfits(catalog, profile, FakeCompletionClient(_repeating_batch())))
    assert {"success", "outfits", "colorSummary", "diversity", "lowInventory", "timings"} <= set(result)
    outfit = result["outfits"][0]
    assert {"totalPrice", "withinBudget", "qualityScore", "whyItWorks", "stylistNotes"} <= set(outfit)
    assert "productUrl" in outfit["items"][0]
    assert {"score", "select", "completion", "repair", "enrich"} <= set(result["timings"])


def test_prices_come_from_catalog(catalog, profile) -> None:
    result = asyncio.run(generate_outfits(catalog, profile, FakeCompletionClient(_repeating_batch())))
    first = result["outfits"][0]
    # top 100 (30) + bottom 200 (40) + shoes 300 (50); the proposal said 1
    assert first["totalPrice"] == 120
    assert first["withinBudget"] is True


def test_exhausted_shoes_fall_back(catalog, profile) -> None:
    catalog["shoes"] = [raw_row(300, "shoes"), raw_row(301, "shoes")]
    batch = completion_json([outfit_dict(i + 1, 100 + i, 200 + i, 300) for i in range(9)])
    result = asyncio.run(generate_outfits(catalog, profile, FakeCompletionClient(batch)))

    assert result["success"] is True
    outfits = result["outfits"]
    assert len(outfits) == 9
    assert [o["isFallback"] for o in outfits] == [False, False] + [True] * 7
    assert [o["items"][2]["id"] for o in outfits[:2]] == [300, 301]
    assert outfits[5]["items"][2]["id"] == "shoes-5"
    assert all(len(o["items"]) == 3 for o in outfits)
    assert result["lowInventory"] == ["shoes"]


def test_catalog_accepts_slot_keys(catalog, profile) -> None:
    by_slot = {"top": catalog["tops"], "bottom": catalog["bottoms"], "shoes": catalog["shoes"]}
    result = asyncio.run(generate_outfits(by_slot, profile, FakeCompletionClient(_repeating_batch())))
    assert result["success"] is True


def test_malformed_completion_returns_error(catalog, profile) -> None:
    result = asyncio.run(generate_outfits(catalog, profile, FakeCompletionClient('{"outfits": []}')))
    assert result["success"] is False
    assert result["error"] == "Outfit generation failed"
    assert "expected 9 outfits, got 0" in result["details"]
    assert result["error_code"] == "MALFORMED_COMPLETION"


def test_service_failure_returns_error(catalog, profile) -> None:
    def fail(prompt):
        raise ExternalServiceError("OpenAI", "timed out")

    result = asyncio.run(generate_outfits(catalog, profile, FakeCompletionClient(fail)))
    assert result == {
        "success": False,
        "error": "Outfit generation failed",
        "details": "OpenAI service error: timed out",
        "error_code": "EXTERNAL_SERVICE_ERROR",
    }


def test_smaller_batch_size(catalog, profile) -> None:
    batch = completion_json([outfit_dict(i + 1, 100 + i, 200 + i, 300 + i) for i in range(3)])
    client = FakeCompletionClient(batch)
    result = asyncio.run(generate_outfits(catalog, profile, client, batch_size=3))
    assert len(result["outfits"]) == 3
    assert "Create 3 complete outfits" in client.prompts[0]


def test_pool_is_capped_in_prompt(catalog, profile) -> None:
    client = FakeCompletionClient(_repeating_batch())
    asyncio.run(generate_outfits(catalog, profile, client, max_pool_size=4))
    assert "AVAILABLE TOPS (4)" in client.prompts[0]


def test_pipeline_reuses_cache(catalog, profile) -> None:
    client = FakeCompletionClient(_repeating_batch())
    pipeline = OutfitPipeline(client, cache=CompletionCache())
    first = asyncio.run(pipeline.run(catalog, profile))
    second = asyncio.run(pipeline.run(catalog, profile))
    assert len(client.prompts) == 1
    assert [o.name for o in first.outfits] == [o.name for o in second.outfits]


def test_profile_is_not_modified(catalog, profile) -> None:
    before = profile.model_dump()
    asyncio.run(generate_outfits(catalog, profile, FakeCompletionClient(_repeating_batch())))
    assert profile.model_dump() == before


def test_bad_batch_size_is_rejected(catalog, profile) -> None:
    client = FakeCompletionClient(_repeating_batch())
    result = asyncio.run(generate_outfits(catalog, profile, client, batch_size=0))
    assert result["success"] is False
    assert result["error_code"] == "VALIDATION_ERROR"
    assert client.prompts == []


def test_null_slot_falls_back_for_that_outfit_only(catalog, profile) -> None:
    outfits = [outfit_dict(i + 1, 100 + i, 200 + i, 300 + i) for i in range(9)]
    outfits[4]["top"] = None
    result = asyncio.run(generate_outfits(catalog, profile, FakeCompletionClient(completion_json(outfits))))

    assert result["success"] is True
    assert len(result["outfits"]) == 9
    assert [o["isFallback"] for o in result["outfits"]] == [False] * 4 + [True] + [False] * 4
    assert len(result["outfits"][4]["items"]) == 3


def test_gemini_html_body_returns_error(catalog, profile, monkeypatch) -> None:
    from lookbook.utils.llm_client import GeminiCompletionClient

    class HtmlPage:
        status_code = 200
        text = "<html>maintenance</html>"

        def json(self):
            raise ValueError("not json")

    client = GeminiCompletionClient("g-test")
    monkeypatch.setattr(client, "_post", lambda body: HtmlPage())
    result = asyncio.run(generate_outfits(catalog, profile, client))
    assert result["success"] is False
    assert result["error_code"] == "EXTERNAL_SERVICE_ERROR"
