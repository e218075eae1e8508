import logging

from django.contrib.auth.decorators import login_required
from django.http import Http404, HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from catalog.schema import CATEGORIES
from catalog.services import get_component, load_catalog, serialize_component

from .conf import get_compatibility_policy, get_scoring_policy
from .forms import (
    BuildRequestForm,
    InsightOptionsForm,
    RemoveComponentForm,
    SaveConfigurationForm,
    SelectComponentForm,
)
from .models import (
    SESSION_KEY,
    BuildRequest,
    SavedConfiguration,
    selection_for_ids,
)
from .services import build_request as flow
from .services.compatibility import check_selection, filter_compatible
from .services.insights import format_insight_summary, insight_panel, split_comments
from .services.selection import BuildSelection, should_show_insights
from .services.synergy import compute_synergy

logger = logging.getLogger(__name__)


def session_selection(request):
    return selection_for_ids(request.session.get(SESSION_KEY))


def store_selection(request, selection):
    request.session[SESSION_KEY] = selection.to_ids()


def _base_watts():
    return get_compatibility_policy().base_system_watts


def _synergy(selection):
    return compute_synergy(selection, get_scoring_policy(), _base_watts())


def _form_error(form):
    return JsonResponse({"error": "Invalid request", "fields": form.errors}, status=400)


def _issue_dict(issue):
    return {
        "severity": issue.severity,
        "title": issue.title,
        "description": issue.description,
        "recommendation": issue.recommendation,
        "affected": list(issue.affected),
    }


def selection_payload(selection):
    items = {}
    for category in selection:
        parts = [serialize_component(c) for c in selection.all_of(category)]
        items[category] = parts if category == "ram" else parts[0]
    return {
        "selection": items,
        "ids": selection.to_ids(),
        "total_price": selection.total_price(),
        "issues": [
            _issue_dict(i)
            for i in check_selection(selection, get_compatibility_policy())
        ],
        "insights": insight_panel(
            selection, policy=get_scoring_policy(), base_watts=_base_watts()
        ),
    }


@require_GET
def selection_detail(request):
    return JsonResponse(selection_payload(session_selection(request)))


@require_POST
def select_component(request):
    form = SelectComponentForm(request.POST)
    if not form.is_valid():
        return _form_error(form)
    category = form.cleaned_data["category"]
    component = get_component(category, form.cleaned_data["component_id"])
    if component is None:
        raise Http404("Component not found")
    selection = session_selection(request)
    if category != "ram":
        # Picking a new part for a single-slot category replaces the old one.
        selection.remove(category)
    selection.select(component)
    store_selection(request, selection)
    logger.debug("Selected %s %s", category, component.id)
    return JsonResponse(selection_payload(selection))


@require_POST
def remove_component(request):
    form = RemoveComponentForm(request.POST)
    if not form.is_valid():
        return _form_error(form)
    selection = session_selection(request)
    selection.remove(form.cleaned_data["category"], form.cleaned_data.get("component_id"))
    store_selection(request, selection)
    return JsonResponse(selection_payload(selection))


@require_POST
def clear_selection(request):
    request.session.pop(SESSION_KEY, None)
    return JsonResponse(selection_payload(BuildSelection()))


@require_GET
def compatible_components(request, category):
    if category not in CATEGORIES:
        raise Http404("Unknown category")
    selection = session_selection(request)
    candidates = load_catalog(category, in_stock_only=request.GET.get("in_stock") == "1")
    verdict = filter_compatible(
        selection, candidates, category, get_compatibility_policy()
    )
    return JsonResponse(
        {
            "category": category,
            "compatible": [serialize_component(c) for c in verdict.compatible],
            "incompatible": [
                {
                    "component": serialize_component(i.component),
                    "reason": i.reason,
                    "rule": i.rule,
                }
                for i in verdict.incompatible
            ],
        }
    )


@require_GET
def insights(request):
    form = InsightOptionsForm(request.GET)
    if not form.is_valid():
        return _form_error(form)
    mode = form.cleaned_data["mode"]
    selection = session_selection(request)
    if not should_show_insights(selection):
        # Hidden panel, same as the "insights" key of the selection payload.
        return JsonResponse(None, safe=False)
    result = _synergy(selection)
    basic, advanced = split_comments(result, mode)
    data = result.to_dict()
    data.update(
        {
            "mode": mode,
            "basic": basic,
            "advanced": advanced if form.cleaned_data["advanced"] else [],
        }
    )
    return JsonResponse(data)


@require_GET
def insight_summary(request):
    form = InsightOptionsForm(request.GET)
    if not form.is_valid():
        return _form_error(form)
    result = _synergy(session_selection(request))
    text = format_insight_summary(
        result,
        include_advanced=form.cleaned_data["advanced"],
        mode=form.cleaned_data["mode"],
    )
    return HttpResponse(text, content_type="text/plain; charset=utf-8")


def _saved_dict(config):
    return {
        "id": config.pk,
        "name": str(config),
        "selection": config.selection,
        "total_price": float(config.total_price),
        "synergy_score": config.synergy_score,
        "synergy_grade": config.synergy_grade,
        "profile": config.profile,
        "updated_at": config.updated_at.isoformat(),
    }


@login_required
@require_POST
def save_configuration(request):
    form = SaveConfigurationForm(request.POST)
    if not form.is_valid():
        return _form_error(form)
    selection = session_selection(request)
    if not len(selection):
        return JsonResponse({"error": "Nothing selected"}, status=400)
    config = SavedConfiguration.objects.create(
        user=request.user,
        name=form.cleaned_data["name"],
        selection=selection.to_ids(),
    )
    logger.info("User %s saved configuration %s", request.user.pk, config.pk)
    return JsonResponse(_saved_dict(config), status=201)


@login_required
@require_GET
def saved_configurations(request):
    configs = SavedConfiguration.objects.filter(user=request.user)
    return JsonResponse({"configurations": [_saved_dict(c) for c in configs]})


@login_required
@require_POST
def load_configuration(request, pk):
    config = get_object_or_404(SavedConfiguration, pk=pk, user=request.user)
    selection = config.build_selection()
    store_selection(request, selection)
    return JsonResponse(selection_payload(selection))


@login_required
@require_POST
def delete_configuration(request, pk):
    config = get_object_or_404(SavedConfiguration, pk=pk, user=request.user)
    config.delete()
    return JsonResponse({"deleted": pk})


@require_POST
def submit_build_request(request):
    selection = session_selection(request)
    state = flow.BuildRequestFlow()
    try:
        state = flow.confirm_components(state, selection, get_compatibility_policy())
    except flow.InvalidTransition as e:
        return JsonResponse({"error": e.reason, "state": e.state}, status=400)

    form = BuildRequestForm(request.POST)
    if not form.is_valid():
        return JsonResponse(
            {"error": "Invalid contact details", "fields": form.errors, "state": state.state},
            status=400,
        )
    try:
        state = flow.provide_contact(state, **form.cleaned_data)
    except flow.InvalidTransition as e:
        return JsonResponse({"error": e.reason, "state": e.state}, status=400)

    def persist(current):
        record = BuildRequest.objects.create(
            user=request.user if request.user.is_authenticated else None,
            selection=current.selection,
            contact_name=current.contact["name"],
            contact_email=current.contact["email"],
            contact_phone=current.contact["phone"],
            notes=current.contact["notes"],
            total_price=selection.total_price(),
        )
        return record.reference

    state = flow.submit(state, persist)
    if state.state == flow.FAILED:
        state = flow.submit(flow.retry(state), persist)
    if state.state != flow.SUBMITTED:
        return JsonResponse(
            {"error": "Could not store the build request", "state": state.state},
            status=503,
        )
    return JsonResponse({"reference": state.reference, "state": state.state}, status=201)
