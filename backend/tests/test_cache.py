"""
Tests for the completion cache and cache keys.
"""
import time

from lookbook.utils.cache import CompletionCache, generate_cache_key


def test_cache_key_is_stable_and_prefixed() -> None:
    key = generate_cache_key("outfits", "prompt", "OpenAI", "gpt-4o", 0.8)
    assert key.startswith("outfits:")
    assert key == generate_cache_key("outfits", "prompt", "OpenAI", "gpt-4o", 0.8)
    assert key != generate_cache_key("outfits", "prompt", "OpenAI", "gpt-4o", 0.2)


def test_set_get_and_invalidate() -> None:
    cache = CompletionCache(maxsize=4, ttl=60)
    cache.set("a", [1, 2])
    assert "a" in cache
    assert cache.get("a") == [1, 2]
    assert cache.invalidate("a") is True
    assert cache.get("a") is None
    assert cache.invalidate("a") is False


def test_bounded_size() -> None:
    cache = CompletionCache(maxsize=2, ttl=60)
    for key in ("a", "b", "c"):
        cache.set(key, key)
    assert len(cache) == 2
    assert cache.maxsize == 2
    assert "a" not in cache


def test_entries_expire() -> None:
    cache = CompletionCache(maxsize=2, ttl=0.05)
    cache.set("a", 1)
    time.sleep(0.1)
    assert cache.get("a") is None


def test_clear() -> None:
    cache = CompletionCache()
    cache.set("a", 1)
    cache.clear()
    assert len(cache) == 0
