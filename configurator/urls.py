from django.urls import path

from . import views

urlpatterns = [
    # Session selection (AJAX)
    path("selection/", views.selection_detail, name="selection_detail"),
    path("selection/select/", views.select_component, name="select_component"),
    path("selection/remove/", views.remove_component, name="remove_component"),
    path("selection/clear/", views.clear_selection, name="clear_selection"),
    # Candidates for one category, split by compatibility
    path(
        "compatible/<str:category>/",
        views.compatible_components,
        name="compatible_components",
    ),
    path("insights/", views.insights, name="insights"),
    path("insights/summary/", views.insight_summary, name="insight_summary"),
    # Saved configurations (requires login)
    path("builds/", views.saved_configurations, name="saved_configurations"),
    path("builds/save/", views.save_configuration, name="save_configuration"),
    path(
        "builds/<int:pk>/load/",
        views.load_configuration,
        name="load_configuration",
    ),
    path(
        "builds/<int:pk>/delete/",
        views.delete_configuration,
        name="delete_configuration",
    ),
    path("build-request/", views.submit_build_request, name="submit_build_request"),
]
