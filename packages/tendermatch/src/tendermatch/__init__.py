"""tendermatch - Tender item matching system."""

from tendermatch.config import MatchConfig, MatchingOptions
from tendermatch.matcher import MatchingEngine, find_matches, summarize
from tendermatch.normalize import are_units_equivalent, normalize, normalize_item_code
from tendermatch.types import ITTItem, Match, MatchCandidate, NormalizedText, ResponseItem

__all__ = [
    "ITTItem",
    "Match",
    "MatchCandidate",
    "MatchConfig",
    "MatchingEngine",
    "MatchingOptions",
    "NormalizedText",
    "ResponseItem",
    "are_units_equivalent",
    "find_matches",
    "normalize",
    "normalize_item_code",
    "summarize",
]
