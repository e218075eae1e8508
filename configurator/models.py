import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

from catalog.services import get_components

from .conf import get_compatibility_policy, get_scoring_policy
from .services.selection import BuildSelection
from .services.synergy import compute_synergy

# Session key holding the visitor's in-progress selection as an id mapping.
SESSION_KEY = "build_selection"


def selection_for_ids(ids):
    """Resolve a stored ``{category: id}`` mapping against the catalog."""
    return BuildSelection.from_ids(ids or {}, get_components)


class SavedConfiguration(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="saved_configurations",
    )
    name = models.CharField(max_length=120, blank=True)
    selection = models.JSONField(default=dict)
    total_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    synergy_score = models.IntegerField(default=0)
    synergy_grade = models.CharField(max_length=1, default="F")
    profile = models.CharField(max_length=40, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]

    def __str__(self):
        return self.name or f"Configuration {self.pk}"

    def build_selection(self):
        return selection_for_ids(self.selection)

    def calculate_totals(self):
        selection = self.build_selection()
        price = Decimal(str(selection.total_price()))
        result = compute_synergy(
            selection,
            get_scoring_policy(),
            get_compatibility_policy().base_system_watts,
        )
        return price, result

    def save(self, *args, **kwargs):
        price, result = self.calculate_totals()
        self.total_price = price
        self.synergy_score = result.score
        self.synergy_grade = result.grade
        self.profile = result.profile
        super().save(*args, **kwargs)


def new_reference():
    return uuid.uuid4().hex[:10].upper()


class BuildRequest(models.Model):
    STATUS_CHOICES = [
        ("submitted", "Submitted"),
        ("in_progress", "In progress"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
    ]

    reference = models.CharField(max_length=20, unique=True, default=new_reference)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="build_requests",
    )
    selection = models.JSONField(default=dict)
    contact_name = models.CharField(max_length=120)
    contact_email = models.EmailField()
    contact_phone = models.CharField(max_length=40, blank=True)
    notes = models.TextField(blank=True)
    total_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="submitted")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.reference} ({self.contact_email})"
