"""Confidence calculation for candidate item pairs."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import reduce

from tendermatch.config import BoostWeights
from tendermatch.normalize import are_units_equivalent, normalize
from tendermatch.similarity import quantity_ratio
from tendermatch.types import PreparedItem


@dataclass(frozen=True)
class ItemPair:
    response: PreparedItem
    itt: PreparedItem

    @property
    def descriptions_equal(self) -> bool:
        # Stopword-only descriptions share the empty key and count as equal
        return self.response.description.key == self.itt.description.key


Boost = Callable[[float, ItemPair, BoostWeights], float]


def code_base_confidence(pair: ItemPair, similarity: float = 1.0) -> float:
    """Base confidence for a code match.

    Only an exact code (similarity 1.0) can reach 0.9/1.0; near-miss codes
    are scaled by 0.8 even when the descriptions agree.
    """
    if similarity == 1.0:
        return 1.0 if pair.descriptions_equal else 0.9
    return similarity * 0.8


def description_base_confidence(similarity: float) -> float:
    """Base confidence for a description match, banded by token similarity."""
    if similarity == 1.0:
        return 0.8
    if similarity >= 0.8:
        return 0.7
    if similarity >= 0.6:
        return 0.6
    return similarity * 0.8


def unit_boost(confidence: float, pair: ItemPair, weights: BoostWeights) -> float:
    if pair.response.unit and pair.itt.unit and are_units_equivalent(
        pair.response.unit, pair.itt.unit
    ):
        return min(1.0, confidence + weights.unit)
    return confidence


def section_boost(confidence: float, pair: ItemPair, weights: BoostWeights) -> float:
    if is_section_match(pair.response.section, pair.itt.section):
        return min(1.0, confidence + weights.section)
    return confidence


def quantity_boost(confidence: float, pair: ItemPair, weights: BoostWeights) -> float:
    ratio = quantity_ratio(pair.response.qty, pair.itt.qty)
    if ratio is not None and ratio >= weights.quantity_ratio:
        return min(1.0, confidence + weights.quantity)
    return confidence


def is_section_match(section_guess: str, section_id: str) -> bool:
    """Compare a free-text section guess with an ITT section identifier."""
    if not section_guess or not section_id:
        return False
    return (
        normalize(section_guess, remove_stopwords=False).key
        == normalize(section_id, remove_stopwords=False).key
    )


CODE_BOOSTS: tuple[Boost, ...] = (unit_boost, section_boost)
DESCRIPTION_BOOSTS: tuple[Boost, ...] = (unit_boost, section_boost, quantity_boost)


def apply_boosts(
    confidence: float,
    pair: ItemPair,
    boosts: Sequence[Boost],
    weights: BoostWeights,
) -> float:
    """Fold the boosts over a base confidence and round to 3 decimals."""
    boosted = reduce(lambda acc, boost: boost(acc, pair, weights), boosts, confidence)
    return round(boosted, 3)
