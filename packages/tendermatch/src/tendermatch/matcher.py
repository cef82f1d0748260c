"""Main orchestration: preprocessing, staged comparison, ranking."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, replace
from typing import Any

import structlog

from tendermatch.config import MatchConfig, MatchingOptions
from tendermatch.preprocess import prepare_itt_items, prepare_response_item
from tendermatch.rules import Rule, evaluate_pair, rules_for
from tendermatch.scoring import ItemPair
from tendermatch.types import ITTItem, MatchCandidate, MatchSummary, PreparedItem, ResponseItem

log = structlog.get_logger()


def _check_items(name: str, items: Any, item_type: type) -> None:
    if not isinstance(items, (list, tuple)):
        raise TypeError(
            f"{name} must be a list of {item_type.__name__}, got {type(items).__name__}"
        )
    for item in items:
        if not isinstance(item, item_type):
            raise TypeError(
                f"{name} must only contain {item_type.__name__}, got {type(item).__name__}"
            )


class MatchingEngine:
    """Proposes ITT item candidates for contractor response items.

    The engine keeps no state between calls; every call prepares its own
    projections, so one instance can serve several workers.
    """

    def __init__(self, config: MatchConfig | None = None) -> None:
        self.config = config or MatchConfig()

    @property
    def options(self) -> MatchingOptions:
        return self.config.options

    def find_matches(
        self,
        itt_items: Sequence[ITTItem],
        response_items: Sequence[ResponseItem],
    ) -> list[MatchCandidate]:
        """Return ranked candidates for every response item, in input order.

        Each response item keeps at most ``max_suggestions`` candidates at or
        above ``low_confidence_threshold``. The same ITT item may be proposed
        for several response items.
        """
        _check_items("itt_items", itt_items, ITTItem)
        _check_items("response_items", response_items, ResponseItem)

        if not itt_items or not response_items:
            log.info(
                "match_skipped_empty_input",
                itt_items=len(itt_items),
                response_items=len(response_items),
            )
            return []

        log.info(
            "match_start",
            itt_items=len(itt_items),
            response_items=len(response_items),
            options=asdict(self.options),
        )

        prepared_itt = prepare_itt_items(itt_items)
        rules = rules_for(self.config)

        candidates: list[MatchCandidate] = []
        for response_item in response_items:
            candidates.extend(self.match_response_item(response_item, prepared_itt, rules))

        summary = summarize(candidates, self.options)
        log.info(
            "match_done",
            total=summary.total,
            high_confidence=summary.high_confidence,
            low_confidence=summary.low_confidence,
            response_items_matched=summary.response_items_matched,
            by_type=summary.by_type,
        )
        return candidates

    def match_response_item(
        self,
        response_item: ResponseItem,
        prepared_itt: Sequence[PreparedItem],
        rules: Sequence[Rule] | None = None,
    ) -> list[MatchCandidate]:
        """Rank the prepared ITT items against one response item."""
        options = self.options
        response = prepare_response_item(response_item)

        scored: list[MatchCandidate] = []
        for itt in prepared_itt:
            hit = evaluate_pair(ItemPair(response, itt), self.config, rules)
            if hit is None or hit.confidence < options.low_confidence_threshold:
                continue
            scored.append(MatchCandidate(
                itt_item_id=itt.item.itt_item_id,
                response_item_id=response_item.response_item_id,
                contractor_id=response_item.contractor_id,
                confidence=hit.confidence,
                match_type=hit.match_type,
                reason=hit.reason,
            ))

        # Stable sort: ties keep ITT item order
        scored.sort(key=lambda c: c.confidence, reverse=True)
        kept = scored[: options.max_suggestions]

        if kept:
            log.debug(
                "response_item_matched",
                response_item_id=response_item.response_item_id,
                description=response.description.original,
                candidates=len(scored),
                top=[(c.itt_item_id, c.confidence, c.match_type) for c in kept],
            )
        return kept


def find_matches(
    itt_items: Sequence[ITTItem],
    response_items: Sequence[ResponseItem],
    options: MatchingOptions | Mapping[str, Any] | None = None,
) -> list[MatchCandidate]:
    """Run the engine once with the given options (defaults when omitted)."""
    if not isinstance(options, MatchingOptions):
        options = MatchingOptions.from_mapping(options)
    engine = MatchingEngine(replace(MatchConfig(), options=options))
    return engine.find_matches(itt_items, response_items)


def summarize(
    candidates: Sequence[MatchCandidate], options: MatchingOptions | None = None
) -> MatchSummary:
    """Count candidates by confidence band and match type."""
    options = options or MatchingOptions()
    summary = MatchSummary(total=len(candidates))
    for candidate in candidates:
        if candidate.confidence >= options.fuzzy_threshold:
            summary.high_confidence += 1
        else:
            summary.low_confidence += 1
        summary.by_type[candidate.match_type] += 1
    summary.response_items_matched = len({c.response_item_id for c in candidates})
    return summary
