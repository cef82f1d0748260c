"""Section and contractor totals built from reviewed matches."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import structlog

from tendermatch.types import ITTItem, Match, ResponseItem

log = structlog.get_logger()

# Only reviewer-accepted matches contribute priced amounts
COUNTED_STATUS = "accepted"


@dataclass
class SectionTotal:
    section_id: str
    itt_total: float = 0.0
    totals_by_contractor: dict[str, float] = field(default_factory=dict)


@dataclass
class Assessment:
    sections: list[SectionTotal] = field(default_factory=list)
    contractor_totals: dict[str, float] = field(default_factory=dict)


def response_amount(item: ResponseItem) -> float | None:
    """The priced amount of a response line, rounded to cents.

    An explicit amount wins. A labelled line ("Included", "By others") has no
    amount. Otherwise qty x rate is used when both are known.
    """
    if item.amount is not None:
        return round(item.amount, 2)
    if item.amount_label:
        return None
    if item.qty is not None and item.rate is not None:
        value = item.qty * item.rate
        return round(value, 2) if math.isfinite(value) else None
    return None


def _matches_by_itt_item(matches: Iterable[Match]) -> dict[str, list[Match]]:
    grouped: dict[str, list[Match]] = {}
    for match in matches:
        grouped.setdefault(match.itt_item_id, []).append(match)
    return grouped


def section_totals(
    itt_items: Sequence[ITTItem],
    response_items: Sequence[ResponseItem],
    matches: Iterable[Match],
) -> Assessment:
    """Total the ITT amounts and accepted contractor amounts per section.

    Sections appear in the order their first ITT item appears. Each ITT
    line keeps one response per contractor (the last match on file for that
    contractor), and that response counts only if its match is accepted and
    it has a numeric amount.
    """
    responses_by_id = {r.response_item_id: r for r in response_items}
    grouped = _matches_by_itt_item(matches)

    sections: dict[str, SectionTotal] = {}
    contractor_totals: dict[str, float] = {}

    for itt in itt_items:
        section = sections.setdefault(itt.section_id, SectionTotal(itt.section_id))
        section.itt_total += itt.amount or 0.0

        per_contractor: dict[str, tuple[Match, ResponseItem]] = {}
        for match in grouped.get(itt.itt_item_id, []):
            response = responses_by_id.get(match.response_item_id)
            if response is not None:
                per_contractor[match.contractor_id] = (match, response)

        for contractor_id, (match, response) in per_contractor.items():
            amount = response_amount(response)
            if match.status != COUNTED_STATUS or amount is None:
                continue
            section.totals_by_contractor[contractor_id] = (
                section.totals_by_contractor.get(contractor_id, 0.0) + amount
            )
            contractor_totals[contractor_id] = contractor_totals.get(contractor_id, 0.0) + amount

    log.info(
        "assessment_built",
        sections=len(sections),
        contractors=len(contractor_totals),
    )
    return Assessment(sections=list(sections.values()), contractor_totals=contractor_totals)
