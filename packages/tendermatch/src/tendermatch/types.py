"""Core types for the tendermatch item matching system."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

MatchType = Literal["exact_code", "exact_description", "fuzzy_description", "fuzzy_code"]
MatchStatus = Literal["suggested", "accepted", "rejected", "manual"]

MATCH_STATUSES: tuple[str, ...] = ("suggested", "accepted", "rejected", "manual")
# A response item bound by one of these is no longer offered suggestions
BINDING_STATUSES: frozenset[str] = frozenset({"accepted", "manual"})


def _field(record: Mapping[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if snake in record:
        return record[snake]
    return record.get(camel, default)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    return text or None


def _number(value: Any) -> float | None:
    """Coerce a spreadsheet cell to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


@dataclass(frozen=True)
class ITTItem:
    """A line of the buyer's bill of quantities."""

    itt_item_id: str
    description: str
    section_id: str = ""
    project_id: str = ""
    item_code: str | None = None
    unit: str | None = None
    qty: float | None = None
    rate: float | None = None
    amount: float | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ITTItem:
        """Build an item from a loose record with snake_case or camelCase keys."""
        item_id = _text(_field(record, "itt_item_id", "ittItemId"))
        if item_id is None:
            raise ValueError(f"ITT item record has no itt_item_id: {dict(record)!r}")
        return cls(
            itt_item_id=item_id,
            description=_text(record.get("description")) or "",
            section_id=_text(_field(record, "section_id", "sectionId")) or "",
            project_id=_text(_field(record, "project_id", "projectId")) or "",
            item_code=_text(_field(record, "item_code", "itemCode")),
            unit=_text(record.get("unit")),
            qty=_number(record.get("qty")),
            rate=_number(record.get("rate")),
            amount=_number(record.get("amount")),
        )


@dataclass(frozen=True)
class ResponseItem:
    """A priced line extracted from a contractor's response."""

    response_item_id: str
    contractor_id: str
    description: str
    project_id: str = ""
    section_guess: str | None = None
    item_code: str | None = None
    unit: str | None = None
    qty: float | None = None
    rate: float | None = None
    amount: float | None = None
    amount_label: str | None = None  # e.g. "Included" when amount is not a number

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ResponseItem:
        """Build an item from a loose record with snake_case or camelCase keys."""
        item_id = _text(_field(record, "response_item_id", "responseItemId"))
        if item_id is None:
            raise ValueError(f"Response item record has no response_item_id: {dict(record)!r}")
        raw_amount = record.get("amount")
        amount = _number(raw_amount)
        amount_label = _text(_field(record, "amount_label", "amountLabel"))
        if amount is None and amount_label is None:
            amount_label = _text(raw_amount)
        return cls(
            response_item_id=item_id,
            contractor_id=_text(_field(record, "contractor_id", "contractorId")) or "",
            description=_text(record.get("description")) or "",
            project_id=_text(_field(record, "project_id", "projectId")) or "",
            section_guess=_text(_field(record, "section_guess", "sectionGuess")),
            item_code=_text(_field(record, "item_code", "itemCode")),
            unit=_text(record.get("unit")),
            qty=_number(record.get("qty")),
            rate=_number(record.get("rate")),
            amount=amount,
            amount_label=amount_label,
        )


@dataclass(frozen=True)
class NormalizedText:
    original: str = ""
    normalized: str = ""
    tokens: tuple[str, ...] = ()
    sorted_tokens: tuple[str, ...] = ()
    key: str = ""


@dataclass(frozen=True)
class PreparedItem:
    """Comparison-ready projection of an ITT or response item."""

    item: ITTItem | ResponseItem
    item_code: str
    description: NormalizedText
    unit: str
    section: str
    qty: float | None = None


@dataclass(frozen=True)
class MatchCandidate:
    itt_item_id: str
    response_item_id: str
    contractor_id: str
    confidence: float
    match_type: MatchType
    reason: str


@dataclass
class Match:
    """A persisted correspondence between a response item and an ITT item."""

    match_id: str
    project_id: str
    itt_item_id: str
    contractor_id: str
    response_item_id: str
    status: MatchStatus
    confidence: float
    created_at: str
    updated_at: str
    comment: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "project_id": self.project_id,
            "itt_item_id": self.itt_item_id,
            "contractor_id": self.contractor_id,
            "response_item_id": self.response_item_id,
            "status": self.status,
            "confidence": self.confidence,
            "comment": self.comment,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class MatchSummary:
    total: int = 0
    high_confidence: int = 0
    low_confidence: int = 0
    response_items_matched: int = 0
    by_type: dict[str, int] = field(default_factory=lambda: {
        "exact_code": 0, "exact_description": 0, "fuzzy_description": 0, "fuzzy_code": 0
    })
