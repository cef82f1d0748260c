"""Match review workflow around the engine: auto-match, review, manual matches."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import structlog

from tendermatch.config import MatchConfig
from tendermatch.matcher import MatchingEngine
from tendermatch.store import MatchStore, match_id_for, utc_now
from tendermatch.types import (
    BINDING_STATUSES,
    MATCH_STATUSES,
    ITTItem,
    Match,
    MatchCandidate,
    ResponseItem,
)

log = structlog.get_logger()


class MatchNotFoundError(KeyError):
    """Raised when a match id is not in the store."""


class MatchConflictError(Exception):
    """Raised when a response item is already bound to another ITT item."""

    def __init__(self, response_item_id: str, existing: Match) -> None:
        super().__init__(
            f"Response item {response_item_id} is already {existing.status} "
            f"against ITT item {existing.itt_item_id}"
        )
        self.response_item_id = response_item_id
        self.existing = existing


@dataclass
class AutoMatchResult:
    candidates: list[MatchCandidate] = field(default_factory=list)
    created: list[Match] = field(default_factory=list)
    skipped_existing: int = 0
    skipped_bound: int = 0


def bound_response_item_ids(matches: Iterable[Match]) -> set[str]:
    """Response items that already have an accepted or manual match."""
    return {m.response_item_id for m in matches if m.status in BINDING_STATUSES}


def _in_project(project_id: str, item_project_id: str) -> bool:
    # Items read from flat files may not carry a project id
    return not item_project_id or item_project_id == project_id


def auto_match(
    project_id: str,
    itt_items: Sequence[ITTItem],
    response_items: Sequence[ResponseItem],
    store: MatchStore,
    config: MatchConfig | None = None,
) -> AutoMatchResult:
    """Run the engine for a project and record new candidates as suggestions.

    Response items already bound to an accepted/manual match are left out,
    and a candidate whose (response item, ITT item) pair is already on file
    is skipped whatever that match's status is.
    """
    project_itt = [i for i in itt_items if _in_project(project_id, i.project_id)]
    project_responses = [r for r in response_items if _in_project(project_id, r.project_id)]

    bound = bound_response_item_ids(store.query(project_id=project_id))
    unbound = [r for r in project_responses if r.response_item_id not in bound]

    result = AutoMatchResult(skipped_bound=len(project_responses) - len(unbound))

    log.info(
        "auto_match_start",
        project_id=project_id,
        itt_items=len(project_itt),
        response_items=len(unbound),
        skipped_bound=result.skipped_bound,
    )

    result.candidates = MatchingEngine(config).find_matches(project_itt, unbound)

    now = utc_now()
    for candidate in result.candidates:
        match_id = match_id_for(candidate.response_item_id, candidate.itt_item_id)
        if store.get(match_id) is not None:
            result.skipped_existing += 1
            continue
        match = Match(
            match_id=match_id,
            project_id=project_id,
            itt_item_id=candidate.itt_item_id,
            contractor_id=candidate.contractor_id,
            response_item_id=candidate.response_item_id,
            status="suggested",
            confidence=candidate.confidence,
            created_at=now,
            updated_at=now,
        )
        store.upsert(match, save=False)
        result.created.append(match)

    if result.created:
        store.save()

    log.info(
        "auto_match_done",
        project_id=project_id,
        candidates=len(result.candidates),
        created=len(result.created),
        skipped_existing=result.skipped_existing,
    )
    return result


def _ensure_unbound(store: MatchStore, response_item_id: str, match_id: str) -> None:
    for other in store.for_response_item(response_item_id):
        if other.match_id != match_id and other.status in BINDING_STATUSES:
            raise MatchConflictError(response_item_id, other)


def update_match_status(
    store: MatchStore,
    match_id: str,
    status: str,
    comment: str | None = None,
) -> Match:
    """Move a match to a new review status.

    Accepting (or marking manual) fails with MatchConflictError while another
    match for the same response item is accepted or manual.
    """
    if status not in MATCH_STATUSES:
        raise ValueError(f"Unknown match status: {status!r}")

    match = store.get(match_id)
    if match is None:
        raise MatchNotFoundError(match_id)

    if status in BINDING_STATUSES:
        _ensure_unbound(store, match.response_item_id, match.match_id)

    previous = match.status
    match.status = status
    if comment is not None:
        match.comment = comment
    match.updated_at = utc_now()
    store.upsert(match)

    log.info(
        "match_status_updated",
        match_id=match_id,
        previous=previous,
        status=status,
    )
    return match


def create_manual_match(
    store: MatchStore,
    project_id: str,
    itt_item_id: str,
    response_item: ResponseItem,
    comment: str | None = None,
) -> Match:
    """Bind a response item to an ITT item chosen by the reviewer."""
    match_id = match_id_for(response_item.response_item_id, itt_item_id)
    _ensure_unbound(store, response_item.response_item_id, match_id)

    now = utc_now()
    existing = store.get(match_id)
    match = Match(
        match_id=match_id,
        project_id=project_id,
        itt_item_id=itt_item_id,
        contractor_id=response_item.contractor_id,
        response_item_id=response_item.response_item_id,
        status="manual",
        confidence=1.0,
        created_at=existing.created_at if existing else now,
        updated_at=now,
        comment=comment,
    )
    store.upsert(match)

    log.info(
        "manual_match_created",
        match_id=match_id,
        itt_item_id=itt_item_id,
        response_item_id=response_item.response_item_id,
    )
    return match


def visible_matches(
    matches: Iterable[Match],
    status: str = "all",
    contractor_id: str | None = None,
) -> list[Match]:
    """Matches as shown for review.

    Suggestions for a response item that already has an accepted or manual
    match are stale and never shown.
    """
    if status != "all" and status not in MATCH_STATUSES:
        raise ValueError(f"Unknown match status filter: {status!r}")

    matches = list(matches)
    bound = bound_response_item_ids(matches)
    return [
        m for m in matches
        if (status == "all" or m.status == status)
        and (contractor_id is None or m.contractor_id == contractor_id)
        and not (m.status == "suggested" and m.response_item_id in bound)
    ]
