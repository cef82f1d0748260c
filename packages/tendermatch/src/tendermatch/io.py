"""CSV/JSONL/Excel input and output for item records and match candidates."""

from __future__ import annotations

import csv
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import pandas as pd

from tendermatch.types import ITTItem, MatchCandidate, ResponseItem

T = TypeVar("T")

EXCEL_SUFFIXES = {".xlsx", ".xls"}

CANDIDATE_FIELDS = [
    "response_item_id", "itt_item_id", "contractor_id",
    "confidence", "match_type", "reason",
]


def read_itt_items(path: str | Path) -> list[ITTItem]:
    """Read ITT items from CSV, JSONL or Excel."""
    return _read_items(Path(path), ITTItem.from_record)


def read_response_items(path: str | Path) -> list[ResponseItem]:
    """Read contractor response items from CSV, JSONL or Excel."""
    return _read_items(Path(path), ResponseItem.from_record)


def _read_items(path: Path, build: Callable[[dict[str, Any]], T]) -> list[T]:
    if path.suffix == ".jsonl":
        records = _read_jsonl(path)
    elif path.suffix in EXCEL_SUFFIXES:
        records = _read_excel(path)
    else:
        records = _read_csv(path)
    return [build(record) for record in records]


def _read_csv(path: Path) -> list[dict[str, Any]]:
    with path.open(newline="", encoding="utf-8-sig") as f:
        return [row for row in csv.DictReader(f) if any(str(v or "").strip() for v in row.values())]


def _read_jsonl(path: Path) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    with path.open(encoding="utf-8-sig") as f:
        for line in f:
            if not line.strip():
                continue
            records.append(json.loads(line))
    return records


def _read_excel(path: Path) -> list[dict[str, Any]]:
    df = pd.read_excel(path, dtype=object).dropna(how="all")
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def write_candidates(candidates: list[MatchCandidate], path: str | Path) -> None:
    """Write match candidates to CSV, JSONL or Excel."""
    path = Path(path)
    rows = [_candidate_row(c) for c in candidates]

    if path.suffix == ".jsonl":
        with path.open("w", encoding="utf-8") as f:
            for row in rows:
                f.write(json.dumps(row) + "\n")
    elif path.suffix in EXCEL_SUFFIXES:
        pd.DataFrame(rows, columns=CANDIDATE_FIELDS).to_excel(path, index=False)
    else:
        with path.open("w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CANDIDATE_FIELDS)
            writer.writeheader()
            writer.writerows(rows)


def _candidate_row(candidate: MatchCandidate) -> dict[str, Any]:
    return {
        "response_item_id": candidate.response_item_id,
        "itt_item_id": candidate.itt_item_id,
        "contractor_id": candidate.contractor_id,
        "confidence": candidate.confidence,
        "match_type": candidate.match_type,
        "reason": candidate.reason,
    }
