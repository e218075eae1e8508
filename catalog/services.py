import logging
from dataclasses import asdict

from django.utils.text import slugify

from .models import MODEL_BY_CATEGORY
from .schema import (
    LIST_FIELDS,
    InvalidComponent,
    canonical_field,
    normalize_value,
)

logger = logging.getLogger(__name__)


def model_for(category):
    return MODEL_BY_CATEGORY.get((category or "").lower())


def _convert(obj):
    try:
        return obj.to_component()
    except InvalidComponent as e:
        # One broken row must not hide the rest of the category.
        logger.warning("Skipping catalog row %s: %s", obj.pk, e)
        return None


def load_catalog(category, in_stock_only=False):
    """Return every catalog entry of ``category`` as Components."""
    Model = model_for(category)
    if Model is None:
        return []
    qs = Model.objects.all()
    if in_stock_only:
        qs = qs.filter(stock_level__gt=0)
    components = [c for c in (_convert(obj) for obj in qs) if c is not None]
    logger.debug("Loaded %d %s components", len(components), category)
    return components


def get_components(category, ids):
    """Fetch components by primary key, keeping the order of ``ids``."""
    Model = model_for(category)
    if Model is None or not ids:
        return []
    wanted = []
    for raw in ids:
        try:
            wanted.append(int(raw))
        except (TypeError, ValueError):
            logger.debug("Ignoring non-numeric %s id %r", category, raw)
    found = {obj.pk: obj for obj in Model.objects.filter(pk__in=wanted)}
    components = []
    for pk in wanted:
        obj = found.get(pk)
        if obj is None:
            continue
        component = _convert(obj)
        if component is not None:
            components.append(component)
    return components


def get_component(category, component_id):
    matches = get_components(category, [component_id])
    return matches[0] if matches else None


def serialize_component(component):
    data = asdict(component)
    data["label"] = component.label
    return data


def model_fields_from_record(category, record, valid_fields):
    """Map a raw CSV/CMS record onto model field values.

    Keys go through the schema aliases; list attributes are stored comma
    separated. Unknown keys and empty values are dropped.
    """
    data = {}
    for key, value in record.items():
        if key is None:
            continue
        field = canonical_field(category, str(key).strip())
        if field not in valid_fields:
            continue
        if field in LIST_FIELDS:
            val = ", ".join(normalize_value(field, value)) or None
        elif field == "slug":
            val = str(value or "").strip() or None
        else:
            val = normalize_value(field, value)
        if val is not None and data.get(field) is None:
            data[field] = val
    return data


def ensure_slug(category, data):
    if data.get("slug"):
        return
    base = " ".join(str(p) for p in (data.get("brand"), data.get("name")) if p)
    if base:
        data["slug"] = slugify(f"{category} {base}")
