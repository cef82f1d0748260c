"""File-backed storage for match records."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
import json

import structlog

from tendermatch.types import Match


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def match_id_for(response_item_id: str, itt_item_id: str) -> str:
    """Match ids are deterministic so a pair is never stored twice."""
    return f"{response_item_id}:{itt_item_id}"


@dataclass
class MatchStore:
    """Persistent storage for suggested, reviewed and manual matches."""

    path: Path
    matches: dict[str, Match] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.log = structlog.get_logger()
        if isinstance(self.path, str):
            self.path = Path(self.path)

    def load(self) -> None:
        """Load matches from disk."""
        if not self.path.exists():
            self.log.info("match_store_file_not_found", path=str(self.path))
            self.matches = {}
            return

        try:
            with open(self.path) as f:
                data = json.load(f)

            self.matches = {}
            for m in data.get("matches", []):
                match = Match(
                    match_id=m["match_id"],
                    project_id=m["project_id"],
                    itt_item_id=m["itt_item_id"],
                    contractor_id=m["contractor_id"],
                    response_item_id=m["response_item_id"],
                    status=m["status"],
                    confidence=float(m["confidence"]),
                    created_at=m["created_at"],
                    updated_at=m.get("updated_at", m["created_at"]),
                    comment=m.get("comment"),
                )
                self.matches[match.match_id] = match
            self.log.info("match_store_loaded", count=len(self.matches))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            self.log.error("match_store_load_error", path=str(self.path), error=str(e))
            self.matches = {}

    def save(self) -> None:
        """Save matches to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        data = {"matches": [m.to_dict() for m in self.matches.values()]}

        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)

        self.log.debug("match_store_saved", count=len(self.matches))

    def get(self, match_id: str) -> Match | None:
        return self.matches.get(match_id)

    def query(
        self,
        project_id: str | None = None,
        status: str | None = None,
        contractor_id: str | None = None,
    ) -> list[Match]:
        """List matches, optionally filtered by project, status and contractor."""
        return [
            m for m in self.matches.values()
            if (project_id is None or m.project_id == project_id)
            and (status is None or m.status == status)
            and (contractor_id is None or m.contractor_id == contractor_id)
        ]

    def for_response_item(self, response_item_id: str) -> list[Match]:
        return [m for m in self.matches.values() if m.response_item_id == response_item_id]

    def upsert(self, match: Match, save: bool = True) -> Match:
        """Insert or replace a match by id."""
        self.matches[match.match_id] = match
        if save:
            self.save()
        return match

    def delete(self, match_id: str) -> bool:
        """Remove a match by id."""
        removed = self.matches.pop(match_id, None)
        if removed is None:
            return False
        self.save()
        self.log.info("match_deleted", match_id=match_id)
        return True
