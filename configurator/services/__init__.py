from .compatibility import (
    CompatibilityIssue,
    CompatibilityVerdict,
    Incompatibility,
    check_selection,
    filter_compatible,
)
from .insights import format_insight_summary, insight_panel, split_comments
from .policy import CompatibilityPolicy, ScoringPolicy
from .selection import BuildSelection, as_selection, filled_categories
from .synergy import Comment, SynergyResult, compute_synergy
from .diagnostics import performance_tier

__all__ = [
    "BuildSelection",
    "Comment",
    "CompatibilityIssue",
    "CompatibilityPolicy",
    "CompatibilityVerdict",
    "Incompatibility",
    "ScoringPolicy",
    "SynergyResult",
    "as_selection",
    "check_selection",
    "compute_synergy",
    "filled_categories",
    "filter_compatible",
    "format_insight_summary",
    "insight_panel",
    "performance_tier",
    "split_comments",
]
