"""Tests for the end-to-end matching engine."""

import pytest

from tendermatch.config import MatchConfig, MatchingOptions
from tendermatch.matcher import MatchingEngine, find_matches, summarize
from tendermatch.types import ITTItem, MatchCandidate, ResponseItem


def itt(item_id: str, description: str, **kwargs) -> ITTItem:
    return ITTItem(itt_item_id=item_id, description=description, project_id="project-1", **kwargs)


def resp(item_id: str, description: str, contractor_id: str = "contractor-1", **kwargs) -> ResponseItem:
    return ResponseItem(
        response_item_id=item_id,
        contractor_id=contractor_id,
        description=description,
        project_id="project-1",
        **kwargs,
    )


def ranked_slab_items() -> tuple[list[ITTItem], ResponseItem]:
    """Five ITT lines with the same description and different boosts."""
    itt_items = [
        itt("i1", "Concrete slab", section_id="S2"),                        # 0.80
        itt("i2", "Concrete slab", unit="m3"),                              # 0.85
        itt("i3", "Concrete slab", unit="m3", section_id="S1"),             # 0.88
        itt("i4", "Concrete slab", unit="m3", section_id="S1", qty=10.0),   # 0.90
        itt("i5", "Concrete slab", qty=9.5),                                # 0.82
    ]
    response = resp("r1", "Concrete slab", unit="m3", section_guess="S1", qty=10.0)
    return itt_items, response


def test_exact_code_match():
    results = find_matches(
        [itt("i1", "Excavate trench", item_code="1.2.3")],
        [resp("r1", "excav. trench", item_code="1.2.3")],
    )
    assert results == [
        MatchCandidate(
            itt_item_id="i1",
            response_item_id="r1",
            contractor_id="contractor-1",
            confidence=1.0,
            match_type="exact_code",
            reason="Exact code match: 1.2.3",
        )
    ]


def test_exact_description_without_code():
    results = find_matches(
        [itt("i1", "Supply and install PVC pipe", unit="m")],
        [resp("r1", "install PVC pipe supply", unit="m")],
    )
    assert len(results) == 1
    assert results[0].match_type == "exact_description"
    assert results[0].confidence == 0.85


def test_same_millimetre_size_on_both_sides():
    results = find_matches(
        [itt("i1", "Supply and install 300mm PVC pipe", unit="m")],
        [resp("r1", "install 300mm PVC pipe supply", unit="m")],
    )
    assert results[0].match_type == "exact_description"
    assert results[0].confidence == 0.85


def test_millimetre_size_on_one_side_is_fuzzy():
    results = find_matches(
        [itt("i1", "Supply and install 300mm PVC pipe", unit="m")],
        [resp("r1", "install PVC pipe supply", unit="m")],
    )
    assert results[0].match_type == "fuzzy_description"
    assert results[0].confidence == 0.75


def test_low_overlap_excluded():
    results = find_matches(
        [itt("i1", "Concrete kerb precast straight laid haunched bedded jointed")],
        [resp("r1", "Concrete gully grating cast iron heavy duty frame")],
    )
    assert results == []


def test_max_suggestions_keeps_best_in_order():
    itt_items, response = ranked_slab_items()
    results = find_matches(itt_items, [response])
    assert [r.itt_item_id for r in results] == ["i4", "i3", "i2"]
    assert [r.confidence for r in results] == [0.9, 0.88, 0.85]


def test_max_suggestions_larger_than_candidates():
    itt_items, response = ranked_slab_items()
    results = find_matches(itt_items, [response], {"max_suggestions": 10})
    assert len(results) == 5
    assert [r.itt_item_id for r in results] == ["i4", "i3", "i2", "i5", "i1"]
    confidences = [r.confidence for r in results]
    assert confidences == sorted(confidences, reverse=True)


def test_ties_keep_itt_order():
    results = find_matches(
        [itt("a", "Concrete slab"), itt("b", "Concrete slab"), itt("c", "Concrete slab")],
        [resp("r1", "Concrete slab")],
        MatchingOptions(max_suggestions=2),
    )
    assert [r.itt_item_id for r in results] == ["a", "b"]


def test_results_follow_response_order_without_dedup():
    itt_items = [itt("i1", "Concrete slab"), itt("i2", "Steel handrail")]
    responses = [
        resp("r2", "Steel handrail", contractor_id="contractor-2"),
        resp("r1", "Concrete slab"),
        resp("r3", "Slab concrete", contractor_id="contractor-2"),
    ]
    results = find_matches(itt_items, responses)
    assert [(r.response_item_id, r.itt_item_id) for r in results] == [
        ("r2", "i2"),
        ("r1", "i1"),
        ("r3", "i1"),
    ]
    assert results[0].contractor_id == "contractor-2"


def test_idempotent():
    itt_items, response = ranked_slab_items()
    responses = [response, resp("r2", "Steel beam", item_code="B1")]
    engine = MatchingEngine()
    assert engine.find_matches(itt_items, responses) == engine.find_matches(itt_items, responses)


def test_empty_inputs():
    items = [itt("i1", "Concrete slab")]
    responses = [resp("r1", "Concrete slab")]
    assert find_matches([], responses) == []
    assert find_matches(items, []) == []


def test_threshold_filters_exact_matches():
    results = find_matches(
        [itt("i1", "Concrete slab")],
        [resp("r1", "Concrete slab")],
        {"low_confidence_threshold": 0.9},
    )
    assert results == []


def test_fuzzy_matching_disabled():
    itt_items = [itt("i1", "Supply and install 300mm PVC pipe")]
    responses = [resp("r1", "install PVC pipe supply")]
    assert find_matches(itt_items, responses)
    assert find_matches(itt_items, responses, {"enable_fuzzy_matching": False}) == []


def test_engine_uses_config():
    config = MatchConfig(options=MatchingOptions(max_suggestions=1))
    itt_items, response = ranked_slab_items()
    results = MatchingEngine(config).find_matches(itt_items, [response])
    assert [r.itt_item_id for r in results] == ["i4"]


def test_sparse_items_tolerated():
    itt_items = [itt("i1", ""), itt("i2", "Concrete slab", qty=float("nan"))]
    responses = [resp("r1", ""), resp("r2", "Concrete slab", qty=0.0)]
    results = find_matches(itt_items, responses)
    assert [(r.response_item_id, r.itt_item_id, r.confidence) for r in results] == [
        ("r1", "i1", 0.8),
        ("r2", "i2", 0.8),
    ]


def test_exact_code_with_stopword_only_descriptions():
    results = find_matches(
        [itt("i1", "Item", item_code="A1")],
        [resp("r1", "Sum", item_code="A1")],
    )
    assert [(r.match_type, r.confidence) for r in results] == [("exact_code", 1.0)]


def test_stopword_only_descriptions_without_codes():
    results = find_matches([itt("i1", "Lump sum")], [resp("r1", "Item")])
    assert [(r.match_type, r.confidence) for r in results] == [("exact_description", 0.8)]


def test_negative_quantities_get_quantity_boost():
    results = find_matches(
        [itt("i1", "Credit for omitted kerb", qty=-5.0)],
        [resp("r1", "Credit for omitted kerb", qty=-5.0)],
    )
    assert results[0].confidence == 0.82


class TestInputValidation:
    def test_non_list_input(self):
        with pytest.raises(TypeError):
            find_matches("not a list", [])

    def test_wrong_item_type(self):
        with pytest.raises(TypeError):
            find_matches([{"itt_item_id": "i1", "description": "x"}], [resp("r1", "x")])

    def test_items_swapped(self):
        with pytest.raises(TypeError):
            find_matches([resp("r1", "x")], [itt("i1", "x")])

    @pytest.mark.parametrize("options", [
        {"max_suggestions": 0},
        {"max_suggestions": 2.5},
        {"low_confidence_threshold": -0.1},
        {"fuzzy_threshold": 1.5},
        {"enable_fuzzy_matching": "yes"},
        {"unknown_option": 1},
    ])
    def test_invalid_options(self, options):
        with pytest.raises(ValueError):
            find_matches([itt("i1", "x")], [resp("r1", "x")], options)


def test_summarize():
    itt_items, response = ranked_slab_items()
    results = find_matches(
        itt_items + [itt("i6", "Steel beam", item_code="B1.1")],
        [response, resp("r2", "Timber post", item_code="B1.2")],
        {"max_suggestions": 10},
    )
    summary = summarize(results)
    assert summary.total == 6
    assert summary.response_items_matched == 2
    assert summary.high_confidence == 5
    assert summary.low_confidence == 1
    assert summary.by_type["exact_description"] == 5
    assert summary.by_type["fuzzy_code"] == 1
