"""Configuration for the tendermatch item matching engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any


def _check_unit_interval(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value!r}")


@dataclass(frozen=True)
class MatchingOptions:
    """Options accepted by the matching engine.

    fuzzy_threshold only splits results into high/low confidence for
    reporting; low_confidence_threshold is the hard cutoff.
    """

    fuzzy_threshold: float = 0.75
    low_confidence_threshold: float = 0.6
    enable_fuzzy_matching: bool = True
    max_suggestions: int = 3

    def __post_init__(self) -> None:
        _check_unit_interval("fuzzy_threshold", self.fuzzy_threshold)
        _check_unit_interval("low_confidence_threshold", self.low_confidence_threshold)
        if not isinstance(self.enable_fuzzy_matching, bool):
            raise ValueError(
                f"enable_fuzzy_matching must be a bool, got {self.enable_fuzzy_matching!r}"
            )
        if isinstance(self.max_suggestions, bool) or not isinstance(self.max_suggestions, int):
            raise ValueError(f"max_suggestions must be an int, got {self.max_suggestions!r}")
        if self.max_suggestions <= 0:
            raise ValueError(f"max_suggestions must be positive, got {self.max_suggestions}")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> MatchingOptions:
        """Build options from a partial mapping; missing keys keep their defaults."""
        if not values:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown matching options: {', '.join(unknown)}")
        return cls(**dict(values))

    def with_overrides(self, **overrides: Any) -> MatchingOptions:
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


@dataclass(frozen=True)
class BoostWeights:
    unit: float = 0.05
    section: float = 0.03
    quantity: float = 0.02
    quantity_ratio: float = 0.9  # min(q1, q2) / max(q1, q2) needed for the quantity boost


@dataclass(frozen=True)
class StageLimits:
    fuzzy_description_floor: float = 0.4
    fuzzy_code_floor: float = 0.7
    fuzzy_code_max_length: int = 10


@dataclass(frozen=True)
class MatchConfig:
    options: MatchingOptions = field(default_factory=MatchingOptions)
    boosts: BoostWeights = field(default_factory=BoostWeights)
    stages: StageLimits = field(default_factory=StageLimits)
