"""Hardware heuristics behind the advanced insight comments.

Everything here reads plain Components and returns plain values, so it is
safe to call on partial selections: a missing part simply yields no finding.
"""
import re
from dataclasses import dataclass

from .power import estimated_cpu_watts, estimated_gpu_watts


@dataclass(frozen=True)
class PerformanceTier:
    tier: str
    fps: str


TIER_EXTREME = PerformanceTier("Extreme", "8K 60+ FPS / 4K 240+ FPS")
TIER_ULTRA = PerformanceTier("Ultra", "4K 120+ FPS")
TIER_HIGH = PerformanceTier("High", "1440p 144+ FPS")
TIER_MEDIUM = PerformanceTier("Medium", "1080p 144 FPS")
TIER_ENTRY = PerformanceTier("Entry", "1080p 60 FPS")

# (name fragments that must all appear, tier); first match wins
TIER_BY_NAME = (
    (("5090",), TIER_EXTREME),
    (("5080",), TIER_EXTREME),
    (("4090",), TIER_ULTRA),
    (("4080",), TIER_ULTRA),
    (("4070", "ti super"), TIER_ULTRA),
    (("4070",), TIER_HIGH),
    (("7900 xtx",), TIER_HIGH),
    (("7900xtx",), TIER_HIGH),
    (("4060",), TIER_MEDIUM),
    (("7800",), TIER_MEDIUM),
    (("7700",), TIER_MEDIUM),
)

TIER_BY_VRAM = (
    (20, TIER_EXTREME),
    (16, TIER_ULTRA),
    (12, TIER_HIGH),
    (8, TIER_MEDIUM),
)


def performance_tier(gpu):
    """Expected gaming tier for ``gpu``; model family first, then VRAM."""
    if gpu is None or not gpu.name:
        return None
    name = gpu.name.lower()
    for fragments, tier in TIER_BY_NAME:
        if all(f in name for f in fragments):
            return tier
    vram = gpu.vram_gb or 0
    for floor, tier in TIER_BY_VRAM:
        if vram >= floor:
            return tier
    return TIER_ENTRY


def gpu_class(gpu):
    """flagship / high-end / mid-range / budget."""
    name = (gpu.name or "").lower()
    vram = gpu.vram_gb or 0
    if "4090" in name or "5090" in name or "7900 xtx" in name or vram >= 22:
        return "flagship"
    if any(s in name for s in ("4080", "5080", "4070 ti", "7900 xt")) or vram >= 16:
        return "high-end"
    if any(s in name for s in ("4070", "5070", "7800 xt", "7700 xt")):
        return "mid-range"
    return "budget"


CHIPSET_PCIE_GEN = (
    (r"B450|X470|Z390|H370|B365|B360", 3),
    (r"B550|X570|Z490|Z590|B560|H570", 4),
    (r"B650E|X670E|X870E", 5),
    (r"B650|X670|X870|Z690|Z790|Z890|B660|B760|B860", 4),
)


def pcie_generation(chipset):
    if not chipset:
        return None
    chipset = chipset.upper()
    for pattern, gen in CHIPSET_PCIE_GEN:
        if re.search(pattern, chipset):
            return gen
    return None


def cooler_kind(cooler):
    """AIO, Air, Low Profile, Stock or Unknown from type and name."""
    kind = (cooler.cooler_type or "").lower()
    name = (cooler.name or "").lower()
    if "aio" in kind or "liquid" in kind or any(
        s in name for s in ("aio", "liquid", "water")
    ):
        return "AIO"
    if "air" in kind or "air" in name or "tower" in name:
        return "Air"
    if "low" in kind or "low profile" in name:
        return "Low Profile"
    if "stock" in kind or "stock" in name:
        return "Stock"
    return "Unknown"


def radiator_size_mm(cooler):
    match = re.search(r"\b(120|240|280|360|420)\s*(mm)?\b", (cooler.name or "").lower())
    return int(match.group(1)) if match else None


def ram_speed(kit):
    if kit.speed_mhz:
        return int(kit.speed_mhz)
    name = (kit.name or "").lower()
    match = re.search(r"ddr\d[-\s]?(\d{3,5})", name) or re.search(
        r"(\d{3,5})\s*mhz", name
    )
    return int(match.group(1)) if match else None


def ram_sticks(kit):
    if kit.modules:
        return int(kit.modules)
    match = re.search(r"(\d)\s*x\s*\d+\s*gb", (kit.name or "").lower())
    return int(match.group(1)) if match else None


def psu_load(selection, base_watts=150.0):
    """Estimated load as a fraction of PSU wattage, 0 when unknown."""
    psu = selection.single("psu")
    if psu is None or not psu.wattage:
        return 0.0
    if selection.single("cpu") is None and selection.single("gpu") is None:
        return 0.0
    load = (
        estimated_cpu_watts(selection.single("cpu"))
        + estimated_gpu_watts(selection.single("gpu"))
        + base_watts
    )
    return load / psu.wattage


def advanced_findings(selection, base_watts=150.0):
    """Technical notes for enthusiasts, in a fixed order."""
    cpu = selection.single("cpu")
    gpu = selection.single("gpu")
    board = selection.single("motherboard")
    cooler = selection.single("cooling")
    storage = selection.single("storage")
    psu = selection.single("psu")
    kits = selection.all_of("ram")

    cores = (cpu.cores or 0) if cpu else 0
    vram = (gpu.vram_gb or 0) if gpu else 0
    ram_cap = sum(k.capacity_gb or 0 for k in kits)
    notes = []

    if gpu and cpu and vram >= 16 and cores < 8:
        notes.append(
            "A high-end GPU with fewer than 8 CPU cores can be held back in "
            "simulation and strategy titles; a 10-12 core CPU keeps frame "
            "times steadier."
        )
    if kits and cpu and ram_cap >= 128 and cores < 12:
        notes.append(
            "Very large memory without a high core count: parallel workloads "
            "will run out of CPU threads before they use the RAM."
        )
    if kits and gpu and ram_cap >= 64 and vram < 10:
        notes.append(
            "Plenty of memory but a modest GPU; for graphical work upgrade the "
            "GPU before adding more RAM."
        )
    if kits and gpu and ram_cap == 16 and vram >= 12:
        notes.append(
            "16GB can limit large texture packs and editing sessions; 32GB is "
            "the better match for this GPU."
        )

    # Memory configuration
    sticks = sum(ram_sticks(k) or 0 for k in kits)
    if kits and sticks == 1 and ram_cap >= 16:
        notes.append(
            f"Single-channel memory (1x{ram_cap:g}GB) costs 15-30% in "
            f"memory-bound tasks; 2x{max(4, ram_cap // 2):g}GB gives dual "
            "channel for the same capacity."
        )
    if sticks == 4 and ram_cap <= 32:
        notes.append(
            "Four DIMMs on a dual-channel platform add no bandwidth over two "
            "larger sticks and can lower the achievable memory speed."
        )
    speeds = [s for s in (ram_speed(k) for k in kits) if s]
    speed = min(speeds) if speeds else None
    if (
        cpu
        and speed
        and re.search(r"ryzen\s*[579]\s*[79]\d{3}", (cpu.name or "").lower())
        and speed < 6000
    ):
        notes.append(
            f"Ryzen DDR5 platforms run best at 6000 MT/s; the selected "
            f"{speed} MT/s kit leaves some CPU-bound performance unused."
        )
    if board and speed and board.max_memory_speed and speed > board.max_memory_speed:
        notes.append(
            f"RAM rated {speed} MT/s is above the {board.label} validated "
            f"maximum of {board.max_memory_speed} MT/s and may run downclocked."
        )

    # PCIe bandwidth
    if gpu and board:
        gen = pcie_generation(board.chipset)
        tier = gpu_class(gpu)
        if gen and gen <= 3 and tier == "flagship":
            notes.append(
                f"PCIe 3.0 on the {board.chipset} chipset can cost a flagship "
                f"GPU 8-12% in bandwidth-heavy titles; a PCIe 4.0 board suits "
                f"the {gpu.label} better."
            )
        elif gen and gen <= 3 and tier == "high-end":
            notes.append(
                "PCIe 3.0 with a high-end GPU costs roughly 3-5%; acceptable on "
                "a budget."
            )

    # Power supply
    load = psu_load(selection, base_watts)
    if load and load < 0.35:
        notes.append(
            f"PSU typical load is about {load:.0%}; a smaller unit would sit "
            "higher on its efficiency curve and run quieter."
        )
    elif load > 0.8:
        notes.append(
            f"PSU headroom is tight (about {load:.0%} load); transient spikes "
            "or a future GPU upgrade may stress it."
        )
    if psu and psu.wattage and (cpu or gpu):
        peak = estimated_cpu_watts(cpu) + estimated_gpu_watts(gpu)
        if peak > psu.wattage - 120:
            notes.append(
                "Transient headroom is limited; the next wattage tier would "
                "add stability."
            )

    # Cooling
    if cpu and cooler:
        kind = cooler_kind(cooler)
        tdp = estimated_cpu_watts(cpu)
        if kind == "Air" and cores >= 16:
            notes.append(
                "Air cooling on a many-core CPU may throttle during long "
                "renders; a 360mm AIO or premium dual-tower is advised."
            )
        if kind == "Stock" and tdp >= 95:
            notes.append(
                f"A stock cooler will run a {tdp:g}W CPU at its thermal limit; "
                "use a tower cooler or a 240mm+ AIO."
            )
        if kind == "Low Profile" and tdp >= 95:
            notes.append(
                f"A low-profile cooler is marginal for a {tdp:g}W CPU under "
                "sustained load."
            )
        size = radiator_size_mm(cooler)
        if kind == "AIO" and size and size <= 240 and tdp >= 170:
            notes.append(
                f"A {size}mm AIO is the minimum for a {tdp:g}W CPU; 280 or "
                "360mm keeps all-core loads cooler."
            )

    # Storage
    if storage is None:
        notes.append(
            "No storage selected; pick a fast NVMe drive for the OS and main "
            "workloads."
        )
    elif "sata" in (storage.interface or "").lower() and vram >= 12:
        notes.append(
            "A SATA SSD in a performance build slows asset streaming; a Gen4 "
            "NVMe drive loads faster."
        )
    if storage is not None and ram_cap >= 96 and (storage.capacity_gb or 0) < 1000:
        notes.append(
            "Very high RAM with under 1TB of storage; a larger NVMe drive "
            "gives project files room to use that memory."
        )
    return notes
