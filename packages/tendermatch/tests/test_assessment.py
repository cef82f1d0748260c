"""Tests for section and contractor totals."""

import pytest

from tendermatch.assessment import response_amount, section_totals
from tendermatch.types import ITTItem, Match, ResponseItem


def make_match(response_item_id: str, itt_item_id: str, contractor_id: str, status: str = "accepted") -> Match:
    return Match(
        match_id=f"{response_item_id}:{itt_item_id}",
        project_id="p1",
        itt_item_id=itt_item_id,
        contractor_id=contractor_id,
        response_item_id=response_item_id,
        status=status,
        confidence=0.9,
        created_at="2024-01-01T00:00:00+00:00",
        updated_at="2024-01-01T00:00:00+00:00",
    )


ITT_ITEMS = [
    ITTItem(itt_item_id="i1", description="Excavate trench", section_id="S1", amount=1000.0),
    ITTItem(itt_item_id="i2", description="Concrete slab", section_id="S2", amount=5000.0),
    ITTItem(itt_item_id="i3", description="Steel handrail", section_id="S1", amount=None),
]

RESPONSES = [
    ResponseItem(response_item_id="a1", contractor_id="c1", description="Excav. trench", amount=900.0),
    ResponseItem(response_item_id="a2", contractor_id="c1", description="Conc. slab", qty=10.0, rate=480.5),
    ResponseItem(response_item_id="a3", contractor_id="c1", description="Handrail", amount_label="Included"),
    ResponseItem(response_item_id="b1", contractor_id="c2", description="Trench excavation", amount=1100.0),
    ResponseItem(response_item_id="b2", contractor_id="c2", description="Slab", amount=5200.0),
]


class TestResponseAmount:
    def test_explicit_amount_rounded(self):
        item = ResponseItem(response_item_id="r", contractor_id="c", description="x", amount=10.456)
        assert response_amount(item) == 10.46

    def test_label_means_no_amount(self):
        item = ResponseItem(
            response_item_id="r", contractor_id="c", description="x",
            qty=2.0, rate=3.0, amount_label="Included",
        )
        assert response_amount(item) is None

    def test_qty_times_rate(self):
        item = ResponseItem(response_item_id="r", contractor_id="c", description="x", qty=2.0, rate=3.25)
        assert response_amount(item) == 6.5

    def test_nothing_priced(self):
        item = ResponseItem(response_item_id="r", contractor_id="c", description="x", qty=2.0)
        assert response_amount(item) is None


def test_section_totals():
    matches = [
        make_match("a1", "i1", "c1"),
        make_match("a2", "i2", "c1"),
        make_match("a3", "i3", "c1"),
        make_match("b1", "i1", "c2"),
        make_match("b2", "i2", "c2", status="suggested"),
    ]

    assessment = section_totals(ITT_ITEMS, RESPONSES, matches)

    assert [s.section_id for s in assessment.sections] == ["S1", "S2"]
    s1, s2 = assessment.sections
    assert s1.itt_total == 1000.0
    assert s1.totals_by_contractor == {"c1": 900.0, "c2": 1100.0}
    assert s2.itt_total == 5000.0
    assert s2.totals_by_contractor == {"c1": pytest.approx(4805.0)}
    assert assessment.contractor_totals == {"c1": pytest.approx(5705.0), "c2": 1100.0}


def test_only_accepted_matches_count():
    matches = [
        make_match("a1", "i1", "c1", status="suggested"),
        make_match("b1", "i1", "c2", status="rejected"),
        make_match("a2", "i2", "c1", status="manual"),
    ]
    assessment = section_totals(ITT_ITEMS, RESPONSES, matches)
    assert all(s.totals_by_contractor == {} for s in assessment.sections)
    assert assessment.contractor_totals == {}


def test_unknown_response_items_ignored():
    assessment = section_totals(ITT_ITEMS, RESPONSES, [make_match("zz", "i1", "c1")])
    assert assessment.contractor_totals == {}


def test_no_matches():
    assessment = section_totals(ITT_ITEMS, RESPONSES, [])
    assert [(s.section_id, s.itt_total) for s in assessment.sections] == [("S1", 1000.0), ("S2", 5000.0)]
