"""String and token-set similarity measures."""

from __future__ import annotations

import math
from collections.abc import Sequence

from rapidfuzz.distance import Levenshtein


def jaccard_similarity(tokens_a: Sequence[str], tokens_b: Sequence[str]) -> float:
    """Intersection over union of two token collections, duplicates collapsed."""
    if not tokens_a and not tokens_b:
        return 1.0
    if not tokens_a or not tokens_b:
        return 0.0
    set_a = set(tokens_a)
    set_b = set(tokens_b)
    return len(set_a & set_b) / len(set_a | set_b)


def levenshtein_distance(a: str, b: str) -> int:
    """Unit-cost edit distance (insertions, deletions, substitutions)."""
    return Levenshtein.distance(a, b)


def levenshtein_similarity(a: str, b: str) -> float:
    """Edit distance scaled to [0, 1] by the longer string's length."""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return (max_len - levenshtein_distance(a, b)) / max_len


def quantity_ratio(qty_a: float | None, qty_b: float | None) -> float | None:
    """min/max of two quantities, or None when either is missing, zero or not finite.

    Negative quantities (credit lines) are compared as they are.
    """
    if not qty_a or not qty_b:
        return None
    if not (math.isfinite(qty_a) and math.isfinite(qty_b)):
        return None
    return min(qty_a, qty_b) / max(qty_a, qty_b)
