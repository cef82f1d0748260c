"""Tests for the JSON-file match store."""

from pathlib import Path
import json

from tendermatch.store import MatchStore, match_id_for
from tendermatch.types import Match


def make_match(response_item_id: str = "r1", itt_item_id: str = "i1", **kwargs) -> Match:
    values = dict(
        match_id=match_id_for(response_item_id, itt_item_id),
        project_id="p1",
        itt_item_id=itt_item_id,
        contractor_id="c1",
        response_item_id=response_item_id,
        status="suggested",
        confidence=0.85,
        created_at="2024-01-01T00:00:00+00:00",
        updated_at="2024-01-01T00:00:00+00:00",
    )
    values.update(kwargs)
    return Match(**values)


class TestMatchStore:
    def test_missing_file_gives_empty_store(self, tmp_path: Path):
        store = MatchStore(tmp_path / "matches.json")
        store.load()
        assert store.matches == {}

    def test_corrupt_file_gives_empty_store(self, tmp_path: Path):
        path = tmp_path / "matches.json"
        path.write_text("{not json")
        store = MatchStore(path)
        store.load()
        assert store.matches == {}

    def test_save_and_load(self, tmp_path: Path):
        path = tmp_path / "nested" / "matches.json"
        store = MatchStore(path)
        store.upsert(make_match(comment="checked"))

        data = json.loads(path.read_text())
        assert data["matches"][0]["match_id"] == "r1:i1"

        reloaded = MatchStore(path)
        reloaded.load()
        assert reloaded.get("r1:i1") == make_match(comment="checked")

    def test_accepts_string_path(self, tmp_path: Path):
        store = MatchStore(str(tmp_path / "matches.json"))
        assert isinstance(store.path, Path)

    def test_upsert_replaces_by_id(self, tmp_path: Path):
        store = MatchStore(tmp_path / "matches.json")
        store.upsert(make_match())
        store.upsert(make_match(status="accepted"))
        assert len(store.matches) == 1
        assert store.get("r1:i1").status == "accepted"

    def test_upsert_without_save(self, tmp_path: Path):
        path = tmp_path / "matches.json"
        store = MatchStore(path)
        store.upsert(make_match(), save=False)
        assert not path.exists()

    def test_query_filters(self, tmp_path: Path):
        store = MatchStore(tmp_path / "matches.json")
        store.upsert(make_match("r1", "i1"))
        store.upsert(make_match("r2", "i1", status="accepted", contractor_id="c2"))
        store.upsert(make_match("r3", "i2", project_id="p2"))

        assert len(store.query()) == 3
        assert [m.match_id for m in store.query(project_id="p1")] == ["r1:i1", "r2:i1"]
        assert [m.match_id for m in store.query(status="accepted")] == ["r2:i1"]
        assert [m.match_id for m in store.query(contractor_id="c2")] == ["r2:i1"]

    def test_for_response_item(self, tmp_path: Path):
        store = MatchStore(tmp_path / "matches.json")
        store.upsert(make_match("r1", "i1"))
        store.upsert(make_match("r1", "i2"))
        store.upsert(make_match("r2", "i1"))
        assert [m.itt_item_id for m in store.for_response_item("r1")] == ["i1", "i2"]

    def test_delete(self, tmp_path: Path):
        store = MatchStore(tmp_path / "matches.json")
        store.upsert(make_match())
        assert store.delete("r1:i1") is True
        assert store.delete("r1:i1") is False
        assert store.get("r1:i1") is None
