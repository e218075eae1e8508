"""Explicit schema for catalog components.

Catalog records arrive from the database, CSV exports or the Contentful
delivery API with loosely typed fields ("850W", "1,000", "ATX, Micro-ATX").
``component_from_record`` is the single place where such a record is checked
and coerced into an immutable ``Component``; nothing downstream inspects raw
records.
"""
import re
from dataclasses import dataclass
from typing import Optional, Tuple

CATEGORIES = (
    "case",
    "motherboard",
    "cpu",
    "gpu",
    "ram",
    "storage",
    "psu",
    "cooling",
)

# Categories that may hold more than one selected component.
MULTI_SELECT_CATEGORIES = frozenset({"ram"})

INT_FIELDS = {
    "stock_level",
    "cores",
    "threads",
    "memory_slots",
    "modules",
    "speed_mhz",
    "max_memory_speed",
}

FLOAT_FIELDS = {
    "price",
    "power_draw",
    "wattage",
    "vram_gb",
    "capacity_gb",
    "length_mm",
    "height_mm",
    "tdp_support",
    "max_gpu_length_mm",
    "max_cooler_height_mm",
    "max_psu_length_mm",
}

LIST_FIELDS = {
    "memory_support",
    "supported_form_factors",
    "compatible_generations",
}

TEXT_FIELDS = {
    "name",
    "brand",
    "socket",
    "chipset",
    "form_factor",
    "generation",
    "memory_type",
    "interface",
    "cooler_type",
}

# Alternate spellings seen in CMS entries and CSV exports.
FIELD_ALIASES = {
    "tdp": "power_draw",
    "power": "power_draw",
    "powerConsumption": "power_draw",
    "powerDraw": "power_draw",
    "vram": "vram_gb",
    "memory_size_gb": "vram_gb",
    "capacity": "capacity_gb",
    "length": "length_mm",
    "height": "height_mm",
    "tdpSupport": "tdp_support",
    "maxGpuLength": "max_gpu_length_mm",
    "maxCpuCoolerHeight": "max_cooler_height_mm",
    "maxPsuLength": "max_psu_length_mm",
    "formFactor": "form_factor",
    "ramSupport": "memory_support",
    "ramSlots": "memory_slots",
    "compatibility": "supported_form_factors",
    "type": "memory_type",
    "coolerType": "cooler_type",
    "speed": "speed_mhz",
    "stockLevel": "stock_level",
    "cpuCompatability": "compatible_generations",
}

# Aliases whose meaning depends on the category they appear in.
CATEGORY_ALIASES = {
    "motherboard": {"compatibility": "compatible_generations"},
    "cooling": {"type": "cooler_type"},
}


class InvalidComponent(ValueError):
    """Raised when a catalog record cannot be turned into a Component."""


@dataclass(frozen=True)
class Component:
    id: str
    category: str
    name: str = ""
    brand: Optional[str] = None
    price: float = 0.0
    stock_level: int = 0
    socket: Optional[str] = None
    chipset: Optional[str] = None
    form_factor: Optional[str] = None
    generation: Optional[str] = None
    cores: Optional[int] = None
    threads: Optional[int] = None
    power_draw: Optional[float] = None
    wattage: Optional[float] = None
    vram_gb: Optional[float] = None
    capacity_gb: Optional[float] = None
    modules: Optional[int] = None
    memory_type: Optional[str] = None
    speed_mhz: Optional[int] = None
    memory_slots: Optional[int] = None
    max_memory_speed: Optional[int] = None
    interface: Optional[str] = None
    cooler_type: Optional[str] = None
    length_mm: Optional[float] = None
    height_mm: Optional[float] = None
    tdp_support: Optional[float] = None
    max_gpu_length_mm: Optional[float] = None
    max_cooler_height_mm: Optional[float] = None
    max_psu_length_mm: Optional[float] = None
    memory_support: Tuple[str, ...] = ()
    supported_form_factors: Tuple[str, ...] = ()
    compatible_generations: Tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return self.name or f"{self.category.upper()} #{self.id}"


COMPONENT_FIELDS = (
    INT_FIELDS | FLOAT_FIELDS | LIST_FIELDS | TEXT_FIELDS
)


def clean_number(value) -> str:
    if value is None:
        return ""
    s = str(value).strip().replace(",", "")
    m = re.search(r"[-+]?\d*\.?\d+", s)
    return m.group(0) if m else ""


def cast_number(field: str, value):
    """Coerce ``value`` to the numeric type of ``field``; None when unusable."""
    if value in ("", None):
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        raw = value
    else:
        raw = clean_number(value)
        if raw == "":
            return None
    try:
        number = float(raw)
    except (TypeError, ValueError):
        return None
    if number != number:  # NaN from pandas
        return None
    return int(number) if field in INT_FIELDS else number


def split_list(value) -> Tuple[str, ...]:
    if value in (None, ""):
        return ()
    if isinstance(value, str):
        parts = re.split(r"[,|;/]", value)
    else:
        try:
            parts = [str(v) for v in value]
        except TypeError:
            parts = [str(value)]
    return tuple(p.strip() for p in parts if p and p.strip())


def _clean_text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value != value:
        return None
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
        if value is None:
            return None
    text = str(value).strip()
    if not text or text.upper() == "N/A":
        return None
    return text


def normalize_value(field: str, value):
    if field in INT_FIELDS or field in FLOAT_FIELDS:
        return cast_number(field, value)
    if field in LIST_FIELDS:
        return split_list(value)
    return _clean_text(value)


def canonical_field(category: str, key: str) -> str:
    per_category = CATEGORY_ALIASES.get(category, {})
    if key in per_category:
        return per_category[key]
    return FIELD_ALIASES.get(key, key)


def component_from_record(category, record, component_id=None) -> Component:
    """Validate a raw catalog record and return an immutable Component.

    ``record`` is any mapping of attribute names to raw values. Unknown keys
    are ignored; missing or malformed numeric attributes become ``None``.
    Raises ``InvalidComponent`` for an unknown category or a missing id.
    """
    category = (str(category or "")).strip().lower()
    if category not in CATEGORIES:
        raise InvalidComponent(f"Unknown component category: {category!r}")

    raw_id = component_id if component_id is not None else record.get("id")
    if raw_id in (None, ""):
        raise InvalidComponent(f"{category} record has no id")

    data = {}
    for key, value in record.items():
        field = canonical_field(category, key)
        if field not in COMPONENT_FIELDS:
            continue
        normalized = normalize_value(field, value)
        # Canonical keys win over aliases; empty values never overwrite.
        if normalized in (None, ()) and field in data:
            continue
        if key != field and data.get(field) not in (None, ()):
            continue
        data[field] = normalized

    if data.get("price") is None:
        data["price"] = 0.0
    if data.get("stock_level") is None:
        data["stock_level"] = 0
    if data.get("name") is None:
        data["name"] = ""

    return Component(id=str(raw_id), category=category, **data)
