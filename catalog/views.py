from django.http import HttpResponseBadRequest, JsonResponse
from django.views.decorators.http import require_GET

from .schema import CATEGORIES
from .services import load_catalog, model_for, serialize_component

ACRONYM_MAP = {
    'cpu': 'CPU', 'gpu': 'GPU', 'psu': 'PSU', 'ram': 'RAM', 'vram': 'VRAM',
    'tdp': 'TDP', 'gb': 'GB', 'mm': 'mm', 'mhz': 'MHz', 'id': 'ID',
}

# Bookkeeping columns that mean nothing to a shopper.
DETAIL_EXCLUDE = {"id", "slug", "contentful_id"}


def prettify_label(field_name: str) -> str:
    parts = field_name.split('_')
    pretty_parts = []
    for p in parts:
        key = p.lower() if p else p
        if key in ACRONYM_MAP:
            pretty_parts.append(ACRONYM_MAP[key])
        else:
            pretty_parts.append(p.capitalize())
    return ' '.join(pretty_parts)


def format_value(val):
    if val is None or val == "":
        return "-"
    if isinstance(val, bool):
        return "Yes" if val else "No"
    return str(val)


@require_GET
def component_list(request):
    category = (request.GET.get('category') or '').lower()
    if category not in CATEGORIES:
        return HttpResponseBadRequest('Unknown component category')
    in_stock = request.GET.get('in_stock') in ('1', 'true', 'yes')
    components = load_catalog(category, in_stock_only=in_stock)
    return JsonResponse({
        "category": category,
        "components": [serialize_component(c) for c in components],
    })


@require_GET
def component_details(request):
    ctype = (request.GET.get('type') or '').lower()
    cid = request.GET.get('id')
    if not ctype or not cid:
        return HttpResponseBadRequest('Missing type or id')
    Model = model_for(ctype)
    if not Model:
        return HttpResponseBadRequest('Unknown component type')
    try:
        obj = Model.objects.get(pk=int(cid))
    except (ValueError, Model.DoesNotExist):
        return HttpResponseBadRequest('Component not found')

    rows = []
    for field in Model._meta.fields:
        if field.name in DETAIL_EXCLUDE:
            continue
        rows.append({
            "label": prettify_label(field.name),
            "value": format_value(getattr(obj, field.name)),
        })

    return JsonResponse({
        "title": str(obj),
        "type": ctype,
        "rows": rows,
    })
