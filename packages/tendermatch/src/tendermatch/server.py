"""FastAPI service for reviewing match suggestions."""

import threading
from dataclasses import replace
from pathlib import Path

import structlog
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from tendermatch.assessment import section_totals
from tendermatch.config import MatchConfig, MatchingOptions
from tendermatch.io import read_itt_items, read_response_items
from tendermatch.store import MatchStore
from tendermatch.types import Match
from tendermatch.workflow import (
    MatchConflictError,
    MatchNotFoundError,
    auto_match,
    create_manual_match,
    update_match_status,
    visible_matches,
)

log = structlog.get_logger()


class MatchResponse(BaseModel):
    """A stored match."""

    match_id: str
    project_id: str
    itt_item_id: str
    contractor_id: str
    response_item_id: str
    status: str
    confidence: float
    comment: str | None = None
    created_at: str
    updated_at: str


class AutoMatchRequest(BaseModel):
    """Optional matching option overrides for one auto-match run."""

    fuzzy_threshold: float | None = None
    low_confidence_threshold: float | None = None
    enable_fuzzy_matching: bool | None = None
    max_suggestions: int | None = None


class AutoMatchResponse(BaseModel):
    candidates: int
    created: int
    skipped_existing: int
    skipped_bound: int


class UpdateStatusRequest(BaseModel):
    match_id: str
    status: str
    comment: str | None = None


class CreateManualMatchRequest(BaseModel):
    itt_item_id: str
    response_item_id: str
    comment: str | None = None


class ItemEntry(BaseModel):
    """An ITT or response line shown in the review lists."""

    id: str
    description: str
    item_code: str | None = None
    unit: str | None = None
    contractor_id: str | None = None


class SectionTotalResponse(BaseModel):
    section_id: str
    itt_total: float
    totals_by_contractor: dict[str, float]


class AssessmentResponse(BaseModel):
    sections: list[SectionTotalResponse]
    contractor_totals: dict[str, float]


def _to_response(match: Match) -> MatchResponse:
    return MatchResponse(**match.to_dict())


def create_app(
    itt_path: str,
    responses_path: str,
    matches_path: str,
    project_id: str = "default",
) -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(title="tendermatch review")

    # Load data at startup
    log.info("server_loading_data", itt=itt_path, responses=responses_path)
    itt_items = read_itt_items(itt_path)
    response_items = read_response_items(responses_path)
    responses_by_id = {r.response_item_id: r for r in response_items}
    itt_ids = {i.itt_item_id for i in itt_items}

    store = MatchStore(Path(matches_path))
    store.load()
    # Store-touching routes are plain defs run in FastAPI's threadpool;
    # the lock keeps each read-then-write against the store atomic
    store_lock = threading.Lock()

    @app.get("/api/health")
    async def health() -> dict[str, int | str]:
        return {
            "status": "ok",
            "itt_items": len(itt_items),
            "response_items": len(response_items),
        }

    @app.get("/api/items/itt")
    async def get_itt_items(q: str = "") -> list[ItemEntry]:
        """Get ITT items, optionally filtered by a description query."""
        q_lower = q.lower()
        return [
            ItemEntry(id=i.itt_item_id, description=i.description, item_code=i.item_code, unit=i.unit)
            for i in itt_items
            if q_lower in i.description.lower()
        ]

    @app.get("/api/items/responses")
    async def get_response_items(q: str = "", contractor: str | None = None) -> list[ItemEntry]:
        """Get response items, optionally filtered by query and contractor."""
        q_lower = q.lower()
        return [
            ItemEntry(
                id=r.response_item_id,
                description=r.description,
                item_code=r.item_code,
                unit=r.unit,
                contractor_id=r.contractor_id,
            )
            for r in response_items
            if q_lower in r.description.lower()
            and (contractor is None or r.contractor_id == contractor)
        ]

    @app.get("/api/matches")
    def get_matches(status: str = "all", contractor: str | None = None) -> list[MatchResponse]:
        """Get matches for review; stale suggestions are hidden."""
        try:
            with store_lock:
                matches = visible_matches(store.query(project_id=project_id), status, contractor)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return [_to_response(m) for m in matches]

    @app.post("/api/match/auto")
    def run_auto_match(req: AutoMatchRequest | None = None) -> AutoMatchResponse:
        """Propose suggestions for every unbound response item."""
        overrides = req.model_dump() if req else {}
        try:
            options = MatchingOptions().with_overrides(**overrides)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        with store_lock:
            result = auto_match(
                project_id,
                itt_items,
                response_items,
                store,
                replace(MatchConfig(), options=options),
            )
        return AutoMatchResponse(
            candidates=len(result.candidates),
            created=len(result.created),
            skipped_existing=result.skipped_existing,
            skipped_bound=result.skipped_bound,
        )

    @app.post("/api/match/status")
    def set_status(req: UpdateStatusRequest) -> MatchResponse:
        """Accept, reject or otherwise re-label a match."""
        try:
            with store_lock:
                match = update_match_status(store, req.match_id, req.status, req.comment)
        except MatchNotFoundError:
            raise HTTPException(status_code=404, detail="Match not found")
        except MatchConflictError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _to_response(match)

    @app.post("/api/match/manual", status_code=201)
    def create_manual(req: CreateManualMatchRequest) -> MatchResponse:
        """Bind a response item to a reviewer-chosen ITT item."""
        response_item = responses_by_id.get(req.response_item_id)
        if response_item is None:
            raise HTTPException(status_code=404, detail="Response item not found")
        if req.itt_item_id not in itt_ids:
            raise HTTPException(status_code=404, detail="ITT item not found")
        try:
            with store_lock:
                match = create_manual_match(
                    store, project_id, req.itt_item_id, response_item, req.comment
                )
        except MatchConflictError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return _to_response(match)

    @app.get("/api/assessment")
    def get_assessment() -> AssessmentResponse:
        """Section and contractor totals from accepted matches."""
        with store_lock:
            matches = store.query(project_id=project_id)
        assessment = section_totals(itt_items, response_items, matches)
        return AssessmentResponse(
            sections=[
                SectionTotalResponse(
                    section_id=s.section_id,
                    itt_total=s.itt_total,
                    totals_by_contractor=s.totals_by_contractor,
                )
                for s in assessment.sections
            ],
            contractor_totals=assessment.contractor_totals,
        )

    return app
