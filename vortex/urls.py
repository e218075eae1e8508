from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("accounts/", include("allauth.urls")),
    path("catalog/", include("catalog.urls")),
    path("configurator/", include("configurator.urls")),
]
