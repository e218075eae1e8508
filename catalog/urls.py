from django.urls import path

from . import views

urlpatterns = [
    path("components/", views.component_list, name="component_list"),
    # Detail rows for the component modal
    path("component/", views.component_details, name="component_details"),
]
