"""Synergy scoring: how well the selected parts work together.

Sub-scores for CPU, GPU and RAM are scaled against reference ceilings and
capped, so no single part can claim a perfect mark. The aggregate mixes
raw performance with balance between the sub-scores, then applies the
rule adjustments below before clipping to 0-100.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .diagnostics import PerformanceTier, advanced_findings, performance_tier, psu_load
from .policy import DEFAULT_SCORING_POLICY
from .selection import as_selection

logger = logging.getLogger(__name__)

GAMING_POWERHOUSE = "Gaming Powerhouse"
WORKSTATION_BEAST = "Workstation Beast"
BALANCED = "Balanced All-Rounder"
ENTRY_GAMING = "Entry Gaming"
UNCLASSIFIED = "Unclassified"

SUB_SCORE_LABELS = {"cpu": "CPU", "gpu": "GPU", "ram": "RAM"}

# Categories worth nudging the user about when empty.
PRESENCE_HINTS = (
    ("cpu", "Add a CPU to see how well it feeds your graphics card."),
    ("gpu", "Add a graphics card to get a gaming performance estimate."),
    ("ram", "Add memory to complete the balance analysis."),
    ("motherboard", "Add a motherboard to check socket and memory support."),
    ("psu", "Add a power supply to check power headroom."),
    ("cooling", "Add a CPU cooler to check thermal capacity."),
)

GRADE_FEEDBACK = {
    "A": (
        "Outstanding synergy. Every part is pulling its weight.",
        "Exceptional pairing. This build is tuned with no obvious weak link.",
        "Top marks. The components complement each other very well.",
    ),
    "B": (
        "Strong synergy with only minor trade-offs.",
        "A well matched build; a small tweak could push it to the top grade.",
        "Solid pairing. Most parts are well suited to each other.",
    ),
    "C": (
        "Reasonable synergy, but one area is holding the build back.",
        "A workable build with room to rebalance a part or two.",
        "Decent pairing. Check the notes below for the weakest link.",
    ),
    "D": (
        "Noticeable imbalance between the main components.",
        "Several parts are mismatched; review the bottleneck notes.",
        "This build leaves performance on the table. Rebalancing would help.",
    ),
    "E": (
        "Poor synergy. Key components are working against each other.",
        "Significant mismatches. Consider swapping the weakest part first.",
        "This combination struggles. The notes below show where to start.",
    ),
    "F": (
        "Very low synergy. Add or replace core components to improve it.",
        "The build is missing key parts or is heavily unbalanced.",
        "Start with a CPU, graphics card and memory to get a meaningful grade.",
    ),
}


@dataclass(frozen=True)
class Comment:
    text: str
    advanced: bool = False


@dataclass(frozen=True)
class Bottleneck:
    limiting: str  # the under-powered part
    limited: str  # the part being held back
    gap: float


@dataclass(frozen=True)
class SynergyResult:
    score: int
    grade: str
    profile: str
    comments: Tuple[Comment, ...] = ()
    sub_scores: Dict[str, float] = field(default_factory=dict)
    bottlenecks: Tuple[Bottleneck, ...] = ()
    performance_tier: Optional[PerformanceTier] = None

    def to_dict(self):
        return {
            "score": self.score,
            "grade": self.grade,
            "profile": self.profile,
            "sub_scores": {k: round(v, 1) for k, v in self.sub_scores.items()},
            "bottlenecks": [
                {"limiting": b.limiting, "limited": b.limited, "gap": round(b.gap, 1)}
                for b in self.bottlenecks
            ],
            "performance_tier": (
                {"tier": self.performance_tier.tier, "fps": self.performance_tier.fps}
                if self.performance_tier
                else None
            ),
            "comments": [
                {"text": c.text, "advanced": c.advanced} for c in self.comments
            ],
        }


EMPTY_RESULT = SynergyResult(score=0, grade="F", profile=UNCLASSIFIED)


def _metrics(selection):
    cpu = selection.single("cpu")
    gpu = selection.single("gpu")
    kits = selection.all_of("ram")
    return {
        "cores": (cpu.cores or 0) if cpu else 0,
        "vram": (gpu.vram_gb or 0) if gpu else 0,
        "ram": sum(k.capacity_gb or 0 for k in kits),
    }


def sub_scores(selection, policy=None):
    """CPU/GPU/RAM sub-scores for the categories that are present."""
    policy = policy or DEFAULT_SCORING_POLICY
    selection = as_selection(selection)
    metrics = _metrics(selection)
    raw = {"cpu": metrics["cores"], "gpu": metrics["vram"], "ram": metrics["ram"]}
    scores = {}
    for category in ("cpu", "gpu", "ram"):
        if category not in selection:
            continue
        ceiling = policy.reference_ceilings[category]
        scores[category] = min(policy.sub_score_cap, raw[category] / ceiling * 100)
    return scores


def find_bottlenecks(scores, policy=None):
    policy = policy or DEFAULT_SCORING_POLICY
    threshold = policy.bottleneck_threshold
    found = []
    # (stronger, weaker): the weaker part limits the stronger one
    pairs = (("gpu", "cpu"), ("cpu", "gpu"), ("gpu", "ram"), ("cpu", "ram"))
    for strong, weak in pairs:
        if strong in scores and weak in scores:
            gap = scores[strong] - scores[weak]
            if gap > threshold:
                found.append(Bottleneck(limiting=weak, limited=strong, gap=gap))
    return tuple(found)


def _adjustments(selection, policy, base_watts):
    """Point adjustments for specific pairings, positive or negative."""
    m = _metrics(selection)
    cores, vram, ram = m["cores"], m["vram"], m["ram"]
    has_cpu = "cpu" in selection
    has_gpu = "gpu" in selection
    has_ram = "ram" in selection
    cooler = selection.single("cooling")
    storage = selection.single("storage")
    load = psu_load(selection, base_watts)
    delta = 0

    if has_gpu and has_cpu:
        if vram >= 16 and cores < 8:
            delta -= 12
        if vram >= 20 and cores < 12:
            delta -= 10
    if has_ram and has_gpu and ram < 32 and vram >= 12:
        delta -= 8
    if has_ram and has_cpu and ram > 64 and cores < 8:
        delta -= 6
    lo, hi = policy.psu_efficient_load
    if load and (load < lo or load > hi):
        delta -= 6
    if storage and "sata" in (storage.interface or "").lower() and vram >= 16:
        delta -= 5
    if has_cpu and cooler is None and cores >= 12:
        delta -= 8
    if cooler and "air" in (cooler.cooler_type or "").lower() and cores >= 16:
        delta -= 10

    if vram >= 16 and cores >= 12 and ram >= 64:
        delta += 8
    if vram >= 12 and cores >= 8 and ram >= 32:
        delta += 5
    lo, hi = policy.psu_optimal_load
    if load and lo <= load <= hi:
        delta += 4
    return delta


def aggregate_score(selection, scores, policy=None, base_watts=150.0):
    policy = policy or DEFAULT_SCORING_POLICY
    if not scores:
        return 0
    weights = policy.sub_score_weights
    total_weight = sum(weights[k] for k in scores)
    performance = (
        sum(weights[k] * v for k, v in scores.items())
        / total_weight
        / policy.sub_score_cap
        * 100
    )
    spread = max(scores.values()) - min(scores.values())
    balance = max(0.0, 100 - spread * policy.spread_penalty)
    score = (
        policy.performance_weight * performance
        + policy.balance_weight * balance
        + _adjustments(selection, policy, base_watts)
    )
    return int(round(max(0.0, min(100.0, score))))


def classify_profile(selection, scores, policy=None):
    policy = policy or DEFAULT_SCORING_POLICY
    if len(selection) < 2 or not scores:
        return UNCLASSIFIED
    high, low = policy.high_score, policy.low_score
    cpu = scores.get("cpu", 0)
    gpu = scores.get("gpu", 0)
    ram = scores.get("ram", 0)
    if cpu >= high and gpu >= high:
        return GAMING_POWERHOUSE
    if cpu >= high and ram >= high and gpu < low:
        return WORKSTATION_BEAST
    if all(v < low for v in scores.values()):
        return ENTRY_GAMING
    return BALANCED


def grade_feedback(grade, score):
    variants = GRADE_FEEDBACK[grade]
    return variants[score % len(variants)]


def _bottleneck_text(b):
    limiting = SUB_SCORE_LABELS[b.limiting]
    limited = SUB_SCORE_LABELS[b.limited]
    if b.limiting == "ram":
        return (
            f"Memory is the weak link: the {limited} outclasses your RAM by "
            f"{b.gap:.0f} points. More capacity would let it stretch its legs."
        )
    return (
        f"Possible {limiting} bottleneck: the {limited} scores {b.gap:.0f} "
        f"points higher, so it may wait on the {limiting} in demanding games."
    )


def _balance_text(scores):
    if len(scores) < 2:
        return None
    spread = max(scores.values()) - min(scores.values())
    if spread <= 15:
        return "Core components are evenly matched."
    strongest = max(scores, key=scores.get)
    weakest = min(scores, key=scores.get)
    return (
        f"Your {SUB_SCORE_LABELS[strongest]} is the strongest part and the "
        f"{SUB_SCORE_LABELS[weakest]} the weakest ({spread:.0f} point spread)."
    )


def compute_synergy(selection, policy=None, base_watts=150.0):
    """Score, grade, profile and ordered comments for ``selection``.

    Pure and total: an empty selection scores 0 (grade F, Unclassified) with
    no comments.
    """
    policy = policy or DEFAULT_SCORING_POLICY
    selection = as_selection(selection)
    if not len(selection):
        return EMPTY_RESULT

    scores = sub_scores(selection, policy)
    bottlenecks = find_bottlenecks(scores, policy)
    score = aggregate_score(selection, scores, policy, base_watts)
    grade = policy.grade_for(score)
    profile = classify_profile(selection, scores, policy)
    tier = performance_tier(selection.single("gpu"))

    comments = [Comment(grade_feedback(grade, score))]
    if tier is not None:
        comments.append(
            Comment(f"Expected performance tier: {tier.tier} ({tier.fps}).")
        )
    comments.extend(Comment(_bottleneck_text(b)) for b in bottlenecks)
    balance = _balance_text(scores)
    if balance:
        comments.append(Comment(balance))
    comments.extend(
        Comment(hint) for category, hint in PRESENCE_HINTS if category not in selection
    )
    comments.extend(
        Comment(text, advanced=True)
        for text in advanced_findings(selection, base_watts)
    )

    logger.debug(
        "Synergy %s (%s) profile=%s sub_scores=%s", score, grade, profile, scores
    )
    return SynergyResult(
        score=score,
        grade=grade,
        profile=profile,
        comments=tuple(comments),
        sub_scores=scores,
        bottlenecks=bottlenecks,
        performance_tier=tier,
    )
