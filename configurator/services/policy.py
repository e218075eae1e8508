"""Tunable constants for the rules engine, grouped into explicit objects.

Engine functions take a policy argument instead of reading module globals;
``configurator.conf`` builds the project-wide instances from settings once.
"""
from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class CompatibilityPolicy:
    # Fraction of PSU wattage the selected parts may draw.
    safety_margin: float = 0.8
    # Whole-build PSU advisory (check_selection).
    base_system_watts: float = 150.0
    recommended_headroom: float = 1.25


@dataclass(frozen=True)
class ScoringPolicy:
    # Attribute value that maps to a sub-score of 100 before capping.
    reference_ceilings: Dict[str, float] = field(
        default_factory=lambda: {"cpu": 16.0, "gpu": 24.0, "ram": 128.0}
    )
    sub_score_cap: float = 95.0
    bottleneck_threshold: float = 30.0
    sub_score_weights: Dict[str, float] = field(
        default_factory=lambda: {"cpu": 0.35, "gpu": 0.40, "ram": 0.25}
    )
    performance_weight: float = 0.5
    balance_weight: float = 0.5
    # Balance term loses this many points per point of sub-score spread.
    spread_penalty: float = 0.5
    grade_bands: Tuple[Tuple[float, str], ...] = (
        (90, "A"),
        (75, "B"),
        (60, "C"),
        (45, "D"),
        (30, "E"),
    )
    high_score: float = 70.0
    low_score: float = 40.0
    # PSU load fraction outside this window costs points.
    psu_efficient_load: Tuple[float, float] = (0.35, 0.8)
    psu_optimal_load: Tuple[float, float] = (0.45, 0.7)

    def grade_for(self, score):
        for floor, grade in self.grade_bands:
            if score >= floor:
                return grade
        return "F"


DEFAULT_COMPATIBILITY_POLICY = CompatibilityPolicy()
DEFAULT_SCORING_POLICY = ScoringPolicy()
