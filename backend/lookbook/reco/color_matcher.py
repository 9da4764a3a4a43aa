from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

import webcolors

# Same-family matching
COLOR_FAMILIES: List[List[str]] = [
    ["blue", "navy", "cobalt", "azure", "turquoise"],
    ["red", "crimson", "burgundy", "maroon"],
    ["pink", "rose", "blush", "coral"],
    ["green", "emerald", "olive", "sage", "mint"],
    ["purple", "violet", "lavender", "plum"],
    ["yellow", "gold", "mustard", "amber"],
    ["orange", "coral", "peach", "terracotta"],
    ["brown", "tan", "beige", "camel", "khaki"],
]

# Neutrals go with everything
NEUTRALS = ["black", "white", "gray", "grey", "beige", "brown", "cream", "ivory", "charcoal", "navy"]

COMPLEMENTARY_PAIRS: List[Tuple[str, str]] = [
    ("blue", "orange"),
    ("red", "green"),
    ("yellow", "purple"),
    ("navy", "rust"),
    ("teal", "coral"),
]

ANALOGOUS_SETS: List[List[str]] = [
    ["blue", "green", "teal"],
    ["red", "orange", "pink"],
    ["yellow", "green", "lime"],
    ["purple", "pink", "magenta"],
    ["orange", "yellow", "gold"],
]

"""
Outfit harmony score (0-100).

 HOW IT AFFECTS OUTFIT SUGGESTIONS:
 - Starts at BASE; each compatible neighbouring pair (top/bottom, bottom/shoes) adds PAIR_BONUS
 - A neutral anywhere adds NEUTRAL_BONUS, more than three distinct colors costs TOO_MANY_PENALTY
 - Labels: >= 80 excellent, >= 65 good, >= 50 acceptable, otherwise clashing
"""
BASE = 60
PAIR_BONUS = 10
NEUTRAL_BONUS = 10
TOO_MANY_PENALTY = 15
HARMONY_LABELS: List[Tuple[int, str]] = [(80, "excellent"), (65, "good"), (50, "acceptable")]
UNKNOWN_COLORS = {"", "n/a", "na", "none", "unknown"}


def normalize_color(color: str) -> str:
    """Lowercase a color; hex codes become their CSS name when one exists."""
    value = (color or "").strip().lower()
    if value.startswith("#"):
        try:
            return webcolors.hex_to_name(value)
        except ValueError:
            return value
    return value


def _mentions(color: str, words: Iterable[str]) -> bool:
    return any(w in color for w in words)


def colors_compatible(first: str, second: str) -> bool:
    c1, c2 = normalize_color(first), normalize_color(second)
    if c1 in UNKNOWN_COLORS or c2 in UNKNOWN_COLORS:
        return False
    if _mentions(c1, NEUTRALS) or _mentions(c2, NEUTRALS):
        return True
    if any(_mentions(c1, fam) and _mentions(c2, fam) for fam in COLOR_FAMILIES):
        return True
    if any((a in c1 and b in c2) or (b in c1 and a in c2) for a, b in COMPLEMENTARY_PAIRS):
        return True
    return any(_mentions(c1, s) and _mentions(c2, s) for s in ANALOGOUS_SETS)


def harmony_label(score: int) -> str:
    for threshold, label in HARMONY_LABELS:
        if score >= threshold:
            return label
    return "clashing"


def color_harmony(colors: List[str]) -> Tuple[int, str]:
    """Score the item colors of one outfit, in outfit order."""
    normalized = [normalize_color(c) for c in colors]
    score = BASE
    for first, second in zip(normalized, normalized[1:]):
        if colors_compatible(first, second):
            score += PAIR_BONUS
    if any(c not in UNKNOWN_COLORS and _mentions(c, NEUTRALS) for c in normalized):
        score += NEUTRAL_BONUS
    if len({c for c in normalized if c not in UNKNOWN_COLORS}) > 3:
        score -= TOO_MANY_PENALTY
    score = max(0, min(100, score))
    return score, harmony_label(score)


def summarize(scores: List[Tuple[int, str]]) -> Dict[str, object]:
    """Batch-level view: average score and how many outfits fell in each band."""
    counts: Dict[str, int] = {label: 0 for _, label in HARMONY_LABELS}
    counts["clashing"] = 0
    for _, label in scores:
        counts[label] += 1
    average = round(sum(s for s, _ in scores) / len(scores), 1) if scores else 0.0
    return {"average_score": average, "harmony_counts": counts}
