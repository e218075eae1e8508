from django.contrib import admin

from .models import BuildRequest, SavedConfiguration


@admin.register(SavedConfiguration)
class SavedConfigurationAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "user",
        "total_price",
        "synergy_score",
        "synergy_grade",
        "profile",
        "updated_at",
    )
    list_filter = ("synergy_grade", "profile", "created_at")
    search_fields = ("name", "user__username")
    readonly_fields = ("total_price", "synergy_score", "synergy_grade", "profile")


@admin.register(BuildRequest)
class BuildRequestAdmin(admin.ModelAdmin):
    list_display = (
        "reference",
        "contact_name",
        "contact_email",
        "total_price",
        "status",
        "created_at",
    )
    list_filter = ("status", "created_at")
    search_fields = ("reference", "contact_name", "contact_email")
    readonly_fields = ("reference", "selection", "created_at")
