import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from catalog.schema import MULTI_SELECT_CATEGORIES, Component

from .policy import DEFAULT_COMPATIBILITY_POLICY
from .power import (
    declared_draw,
    estimated_cpu_watts,
    estimated_gpu_watts,
    estimated_system_watts,
    selected_draw,
)
from .selection import as_selection

logger = logging.getLogger(__name__)

RULE_INTERFACE = "interface"
RULE_PHYSICAL = "physical_fit"
RULE_POWER = "power_budget"
RULE_CATEGORY = "category"


@dataclass(frozen=True)
class Incompatibility:
    component: Component
    reason: str
    rule: str


@dataclass(frozen=True)
class CompatibilityVerdict:
    category: str
    compatible: Tuple[Component, ...]
    incompatible: Tuple[Incompatibility, ...]


@dataclass(frozen=True)
class CompatibilityIssue:
    severity: str  # "critical" | "warning"
    title: str
    description: str
    recommendation: str
    affected: Tuple[str, ...]


# --- Normalisation ---
def norm(s):
    """Normalize socket / interface strings to a compact alphanumeric form.

    - lowercases
    - strips the word 'socket'
    - removes any non-alphanumeric characters
    so 'Socket AM5', 'AM5' and 'am-5' compare equal.
    """
    s = str(s or "").lower()
    s = s.replace("socket", "")
    return re.sub(r"[^a-z0-9]", "", s)


def form_factor_rank(text):
    """Size rank of a board or case form factor; 0 when unknown.

    Mini-ITX=1, Micro-ATX=2, ATX=3, E-ATX=4. Case descriptions such as
    'ATX Mid Tower' or 'Micro-ATX Mini Tower' rank by the largest board
    they mention.
    """
    ff = norm(text)
    if not ff:
        return 0
    if "eatx" in ff or "extended" in ff or "fulltower" in ff:
        return 4
    if "micro" in ff or "matx" in ff:
        return 2
    if "itx" in ff:
        return 1
    if "atx" in ff:
        return 3
    # A bare 'Mini Tower' takes Micro-ATX boards at most.
    if "minitower" in ff:
        return 2
    if "tower" in ff:
        return 3
    if "mini" in ff:
        return 1
    return 0


# --- Pairwise predicates (permissive when data is missing) ---
def sockets_match(a, b):
    a, b = norm(a), norm(b)
    if not a or not b:
        return True
    return a == b


def memory_supported(ram, board):
    ram_type = norm(ram.memory_type)
    support = [norm(s) for s in board.memory_support if norm(s)]
    if not ram_type or not support:
        return True
    return any(ram_type in s or s in ram_type for s in support)


def board_fits_case(board, case):
    board_rank = form_factor_rank(board.form_factor)
    if not board_rank:
        return True
    supported = [s for s in case.supported_form_factors if s]
    if supported:
        if norm(board.form_factor) in {norm(s) for s in supported}:
            return True
        ranks = [form_factor_rank(s) for s in supported]
        ranks = [r for r in ranks if r]
        return bool(ranks) and board_rank <= max(ranks)
    case_rank = form_factor_rank(case.form_factor)
    if not case_rank:
        return True
    return board_rank <= case_rank


def is_air_cooler(cooler):
    kind = norm(cooler.cooler_type)
    if not kind:
        return True
    return not any(t in kind for t in ("aio", "liquid", "water"))


def _exceeds(value, limit):
    return value is not None and limit is not None and value > limit


def ram_modules_used(kits):
    # A kit with no module count still occupies one slot.
    return sum((kit.modules or 1) for kit in kits)


# --- Rule 1: socket / interface ---
def _interface_violation(selection, candidate):
    category = candidate.category
    if category == "cpu":
        board = selection.single("motherboard")
        if board and not sockets_match(candidate.socket, board.socket):
            return (
                f"Socket mismatch: {candidate.label} uses socket "
                f"{candidate.socket} but {board.label} has socket {board.socket}."
            )
    elif category == "motherboard":
        cpu = selection.single("cpu")
        if cpu and not sockets_match(cpu.socket, candidate.socket):
            return (
                f"Socket mismatch: {candidate.label} has socket "
                f"{candidate.socket} but {cpu.label} uses socket {cpu.socket}."
            )
        for kit in selection.all_of("ram"):
            if not memory_supported(kit, candidate):
                return (
                    f"Memory type mismatch: {candidate.label} supports "
                    f"{', '.join(candidate.memory_support)}, not "
                    f"{kit.memory_type} ({kit.label})."
                )
    elif category == "ram":
        board = selection.single("motherboard")
        if board and not memory_supported(candidate, board):
            return (
                f"Memory type mismatch: {board.label} supports "
                f"{', '.join(board.memory_support)}, not {candidate.memory_type}."
            )
    return None


# --- Rule 2: physical fit ---
def _gpu_clearance(gpu, case):
    if _exceeds(gpu.length_mm, case.max_gpu_length_mm):
        return (
            f"{gpu.label} ({gpu.length_mm:g}mm) exceeds the {case.label} "
            f"maximum GPU length ({case.max_gpu_length_mm:g}mm)."
        )
    return None


def _cooler_clearance(cooler, case):
    if is_air_cooler(cooler) and _exceeds(
        cooler.height_mm, case.max_cooler_height_mm
    ):
        return (
            f"{cooler.label} ({cooler.height_mm:g}mm) exceeds the {case.label} "
            f"maximum CPU cooler height ({case.max_cooler_height_mm:g}mm)."
        )
    return None


def _psu_clearance(psu, case):
    if _exceeds(psu.length_mm, case.max_psu_length_mm):
        return (
            f"{psu.label} ({psu.length_mm:g}mm) exceeds the {case.label} "
            f"maximum PSU length ({case.max_psu_length_mm:g}mm)."
        )
    return None


def _board_clearance(board, case):
    if not board_fits_case(board, case):
        return (
            f"{board.label} ({board.form_factor}) will not fit in the "
            f"{case.label}."
        )
    return None


def _slot_violation(kits, board):
    if board.memory_slots is None:
        return None
    used = ram_modules_used(kits)
    if used > board.memory_slots:
        return (
            f"{used} memory modules selected but {board.label} has only "
            f"{board.memory_slots} slots."
        )
    return None


def _physical_violation(selection, candidate):
    category = candidate.category
    case = selection.single("case")
    if category == "case":
        checks = (
            (selection.single("motherboard"), _board_clearance),
            (selection.single("gpu"), _gpu_clearance),
            (selection.single("cooling"), _cooler_clearance),
            (selection.single("psu"), _psu_clearance),
        )
        for part, check in checks:
            if part is not None:
                reason = check(part, candidate)
                if reason:
                    return reason
        return None
    if category == "motherboard":
        if case is not None:
            reason = _board_clearance(candidate, case)
            if reason:
                return reason
        return _slot_violation(selection.all_of("ram"), candidate)
    if category == "ram":
        board = selection.single("motherboard")
        if board is not None:
            return _slot_violation(selection.all_of("ram") + (candidate,), board)
        return None
    if case is None:
        return None
    if category == "gpu":
        return _gpu_clearance(candidate, case)
    if category == "cooling":
        return _cooler_clearance(candidate, case)
    if category == "psu":
        return _psu_clearance(candidate, case)
    return None


# --- Rule 3: power budget ---
def _power_violation(selection, candidate, policy):
    margin = policy.safety_margin
    if candidate.category == "psu":
        if not candidate.wattage:
            return None
        draw = selected_draw(selection)
        budget = candidate.wattage * margin
        if draw > budget:
            return (
                f"Selected parts draw {draw:g}W but {candidate.label} only "
                f"budgets {budget:g}W ({margin:.0%} of {candidate.wattage:g}W)."
            )
        return None

    psu = selection.single("psu")
    if psu is None or not psu.wattage:
        return None
    # A single-slot pick replaces whatever currently fills that slot.
    replaced = (
        None if candidate.category in MULTI_SELECT_CATEGORIES
        else candidate.category
    )
    draw = selected_draw(selection, exclude_category=replaced)
    total = draw + declared_draw(candidate)
    budget = psu.wattage * margin
    if total > budget:
        return (
            f"Power budget exceeded: {total:g}W needed with {candidate.label}, "
            f"{psu.label} allows {budget:g}W ({margin:.0%} of {psu.wattage:g}W)."
        )
    return None


def evaluate_candidate(selection, candidate, policy=None):
    """Return the first rule ``candidate`` breaks, or None when it fits."""
    policy = policy or DEFAULT_COMPATIBILITY_POLICY
    reason = _interface_violation(selection, candidate)
    if reason:
        return Incompatibility(candidate, reason, RULE_INTERFACE)
    reason = _physical_violation(selection, candidate)
    if reason:
        return Incompatibility(candidate, reason, RULE_PHYSICAL)
    reason = _power_violation(selection, candidate, policy)
    if reason:
        return Incompatibility(candidate, reason, RULE_POWER)
    return None


def filter_compatible(selection, candidates, category, policy=None):
    """Split ``candidates`` for ``category`` into compatible / incompatible.

    Rules run in order (socket/interface, physical fit, power budget) and
    stop at the first failure. Rules whose counterpart is not selected yet
    are skipped.
    """
    selection = as_selection(selection)
    compatible = []
    incompatible = []
    for candidate in candidates:
        if candidate.category != category:
            incompatible.append(
                Incompatibility(
                    candidate,
                    f"{candidate.label} is a {candidate.category} component, "
                    f"not {category}.",
                    RULE_CATEGORY,
                )
            )
            continue
        verdict = evaluate_candidate(selection, candidate, policy)
        if verdict is None:
            compatible.append(candidate)
        else:
            incompatible.append(verdict)
    logger.debug(
        "Compatibility for %s: %d compatible, %d incompatible",
        category,
        len(compatible),
        len(incompatible),
    )
    return CompatibilityVerdict(category, tuple(compatible), tuple(incompatible))


# --- Whole-selection check ---
def _issue(severity, title, description, recommendation, *parts):
    return CompatibilityIssue(
        severity=severity,
        title=title,
        description=description,
        recommendation=recommendation,
        affected=tuple(p.label for p in parts),
    )


def check_selection(selection, policy=None):
    """List problems among the parts already selected, worst first."""
    policy = policy or DEFAULT_COMPATIBILITY_POLICY
    selection = as_selection(selection)
    cpu = selection.single("cpu")
    board = selection.single("motherboard")
    gpu = selection.single("gpu")
    case = selection.single("case")
    psu = selection.single("psu")
    cooler = selection.single("cooling")
    kits = selection.all_of("ram")
    issues = []

    if cpu and board and not sockets_match(cpu.socket, board.socket):
        issues.append(_issue(
            "critical",
            "CPU & Motherboard Socket Mismatch",
            f"The {cpu.label} uses {cpu.socket} socket, but the {board.label} "
            f"has {board.socket} socket. These components are not compatible.",
            "Select a CPU and motherboard with matching sockets.",
            cpu, board,
        ))

    if cpu and board and cpu.generation and board.compatible_generations:
        generations = {norm(g) for g in board.compatible_generations}
        if norm(cpu.generation) not in generations:
            issues.append(_issue(
                "warning",
                "CPU Generation Compatibility",
                f"The {board.label} may not fully support the {cpu.label} "
                f"without a BIOS update.",
                "Ensure the motherboard BIOS is updated to support this CPU "
                "generation.",
                cpu, board,
            ))

    if board:
        for kit in kits:
            if not memory_supported(kit, board):
                issues.append(_issue(
                    "critical",
                    "RAM Type Incompatibility",
                    f"The {board.label} supports "
                    f"{', '.join(board.memory_support)}, but you've selected "
                    f"{kit.memory_type} memory.",
                    "Select memory that matches the motherboard's supported "
                    "type.",
                    kit, board,
                ))
        slots = _slot_violation(kits, board)
        if slots:
            issues.append(_issue(
                "critical",
                "Not Enough Memory Slots",
                slots,
                "Use fewer, higher-capacity modules.",
                board, *kits,
            ))

    if case:
        physical = (
            (board, _board_clearance, "Motherboard & Case Size Mismatch",
             "Select a case that supports your motherboard form factor."),
            (gpu, _gpu_clearance, "GPU Too Large for Case",
             "Select a larger case or a more compact graphics card."),
            (cooler, _cooler_clearance, "CPU Cooler Too Tall",
             "Select a lower profile cooler or a larger case."),
            (psu, _psu_clearance, "PSU Too Long for Case",
             "Select a more compact power supply or a larger case."),
        )
        for part, check, title, recommendation in physical:
            if part is None:
                continue
            description = check(part, case)
            if description:
                issues.append(
                    _issue("critical", title, description, recommendation,
                           part, case)
                )

    if cpu and gpu and psu and psu.wattage:
        estimated = estimated_system_watts(selection, policy.base_system_watts)
        recommended = round(estimated * policy.recommended_headroom)
        if psu.wattage < recommended:
            short = psu.wattage < estimated
            issues.append(_issue(
                "critical" if short else "warning",
                "Critical PSU Shortage" if short else "Low PSU Headroom",
                f"Your system will draw approximately {estimated:.0f}W under "
                f"load (CPU: {estimated_cpu_watts(cpu):.0f}W + GPU: "
                f"{estimated_gpu_watts(gpu):.0f}W + System: "
                f"{policy.base_system_watts:.0f}W). The {psu.label} provides "
                f"{psu.wattage:.0f}W"
                + (", which is insufficient." if short
                   else ", leaving minimal headroom.")
                + f" We recommend {recommended}W.",
                "Upgrade to a higher wattage PSU before building."
                if short else
                "Consider a higher wattage PSU for efficiency and upgrade "
                "headroom.",
                cpu, gpu, psu,
            ))

    if cpu and cooler and _exceeds(cpu.power_draw, cooler.tdp_support):
        issues.append(_issue(
            "warning",
            "CPU Cooler May Be Inadequate",
            f"The {cpu.label} has a {cpu.power_draw:g}W TDP, but the "
            f"{cooler.label} is rated for {cooler.tdp_support:g}W.",
            "Consider a more powerful cooling solution for optimal "
            "temperatures.",
            cpu, cooler,
        ))

    issues.sort(key=lambda i: 0 if i.severity == "critical" else 1)
    return issues


def has_critical_issues(selection, policy=None):
    return any(i.severity == "critical" for i in check_selection(selection, policy))
