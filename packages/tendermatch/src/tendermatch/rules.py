"""Ordered match rules: the first rule that fires decides a pair's candidate."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from tendermatch.config import MatchConfig
from tendermatch.scoring import (
    CODE_BOOSTS,
    DESCRIPTION_BOOSTS,
    ItemPair,
    apply_boosts,
    code_base_confidence,
    description_base_confidence,
)
from tendermatch.similarity import jaccard_similarity, levenshtein_similarity
from tendermatch.types import MatchType


@dataclass(frozen=True)
class RuleHit:
    match_type: MatchType
    confidence: float
    reason: str
    similarity: float = 1.0


Rule = Callable[[ItemPair, MatchConfig], RuleHit | None]


def exact_code_rule(pair: ItemPair, config: MatchConfig) -> RuleHit | None:
    code = pair.response.item_code
    if not code or code != pair.itt.item_code:
        return None
    confidence = apply_boosts(
        code_base_confidence(pair), pair, CODE_BOOSTS, config.boosts
    )
    return RuleHit("exact_code", confidence, f"Exact code match: {code}")


def exact_description_rule(pair: ItemPair, config: MatchConfig) -> RuleHit | None:
    if not pair.descriptions_equal:
        return None
    confidence = apply_boosts(
        description_base_confidence(1.0), pair, DESCRIPTION_BOOSTS, config.boosts
    )
    return RuleHit(
        "exact_description", confidence, "Exact description match after normalization"
    )


def fuzzy_description_rule(pair: ItemPair, config: MatchConfig) -> RuleHit | None:
    similarity = jaccard_similarity(
        pair.response.description.tokens, pair.itt.description.tokens
    )
    if similarity < config.stages.fuzzy_description_floor:
        return None

    confidence = apply_boosts(
        description_base_confidence(similarity), pair, DESCRIPTION_BOOSTS, config.boosts
    )
    if confidence < config.options.low_confidence_threshold:
        return None
    return RuleHit(
        "fuzzy_description",
        confidence,
        f"Fuzzy description match ({similarity:.0%} similarity)",
        similarity,
    )


def fuzzy_code_rule(pair: ItemPair, config: MatchConfig) -> RuleHit | None:
    response_code = pair.response.item_code
    itt_code = pair.itt.item_code
    if not response_code or not itt_code:
        return None
    if max(len(response_code), len(itt_code)) > config.stages.fuzzy_code_max_length:
        return None

    similarity = levenshtein_similarity(response_code, itt_code)
    if similarity < config.stages.fuzzy_code_floor:
        return None

    confidence = apply_boosts(
        code_base_confidence(pair, similarity), pair, CODE_BOOSTS, config.boosts
    )
    if confidence < config.options.low_confidence_threshold:
        return None
    return RuleHit(
        "fuzzy_code",
        confidence,
        f"Fuzzy code match ({similarity:.0%} similarity)",
        similarity,
    )


EXACT_RULES: tuple[Rule, ...] = (exact_code_rule, exact_description_rule)
FUZZY_RULES: tuple[Rule, ...] = (fuzzy_description_rule, fuzzy_code_rule)


def rules_for(config: MatchConfig) -> tuple[Rule, ...]:
    if config.options.enable_fuzzy_matching:
        return EXACT_RULES + FUZZY_RULES
    return EXACT_RULES


def evaluate_pair(
    pair: ItemPair, config: MatchConfig, rules: Sequence[Rule] | None = None
) -> RuleHit | None:
    """Run the rules in order and return the first hit."""
    for rule in rules if rules is not None else rules_for(config):
        hit = rule(pair, config)
        if hit is not None:
            return hit
    return None
