"""Power draw helpers.

The compatibility filter only trusts declared ``power_draw`` values. The
whole-build advisories estimate a realistic load instead, falling back to
typical figures by model family when the catalog entry has no rating.
"""
import re

# (pattern, watts), first match wins
CPU_POWER_BY_NAME = (
    (r"9950x|14900ks|13900ks|9900x3d|7950x3d", 170),
    (r"9900x|14900k|13900k|7950x", 150),
    (r"9800x3d|14700k|13700k|7900x|7800x3d", 120),
    (r"14600k|13600k|7700x|7600x", 100),
)
CPU_DEFAULT_WATTS = 95

GPU_POWER_BY_NAME = (
    (r"rtx\s?5090|rtx\s?4090", 575),
    (r"rtx\s?5080|rtx\s?4080\s?super", 385),
    (r"rtx\s?4080", 320),
    (r"rtx\s?5070\s?ti|rtx\s?4070\s?ti\s?super", 285),
    (r"rtx\s?5070|rtx\s?4070\s?super", 220),
    (r"rtx\s?4070", 200),
    (r"rtx\s?5060\s?ti|rtx\s?4060\s?ti", 165),
    (r"rtx\s?5060|rtx\s?4060", 140),
    (r"rx\s?7900\s?xtx", 355),
    (r"rx\s?7900\s?xt", 315),
    (r"rx\s?7800\s?xt", 263),
    (r"rx\s?7700\s?xt", 245),
)
GPU_DEFAULT_WATTS = 200


def declared_draw(component):
    """Declared power draw in watts; missing values count as zero."""
    if component is None or component.category == "psu":
        return 0.0
    return float(component.power_draw or 0)


def selected_draw(selection, exclude_category=None):
    return sum(
        declared_draw(c)
        for c in selection.components()
        if c.category != exclude_category
    )


def _by_name(name, table):
    lowered = (name or "").lower()
    for pattern, watts in table:
        if re.search(pattern, lowered):
            return watts
    return None


def estimated_cpu_watts(cpu):
    if cpu is None:
        return 0
    if cpu.power_draw:
        return cpu.power_draw
    watts = _by_name(cpu.name, CPU_POWER_BY_NAME)
    if watts is not None:
        return watts
    cores = cpu.cores or 0
    if cores >= 16:
        return 170
    if cores >= 12:
        return 120
    if cores >= 8:
        return 100
    if cores:
        return 65
    return CPU_DEFAULT_WATTS


def estimated_gpu_watts(gpu):
    if gpu is None:
        return 0
    if gpu.power_draw:
        return gpu.power_draw
    watts = _by_name(gpu.name, GPU_POWER_BY_NAME)
    return GPU_DEFAULT_WATTS if watts is None else watts


def estimated_system_watts(selection, base_watts=150.0):
    """CPU + GPU + a flat allowance for board, memory, storage and fans."""
    return (
        estimated_cpu_watts(selection.single("cpu"))
        + estimated_gpu_watts(selection.single("gpu"))
        + base_watts
    )
