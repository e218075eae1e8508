from django.db import models

from .schema import component_from_record


class CatalogItem(models.Model):
    """Fields shared by every catalog category."""

    CATEGORY = None

    name = models.CharField(max_length=200)
    brand = models.CharField(max_length=100, blank=True, null=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    stock_level = models.IntegerField(default=0)
    power_draw = models.IntegerField(blank=True, null=True)
    slug = models.SlugField(max_length=200, unique=True, blank=True, null=True)
    contentful_id = models.CharField(max_length=64, blank=True, null=True)

    class Meta:
        abstract = True
        ordering = ("name",)

    def __str__(self):
        return self.name or f"{self.__class__.__name__} #{self.pk}"

    def to_component(self):
        record = {f.name: getattr(self, f.name) for f in self._meta.fields}
        return component_from_record(self.CATEGORY, record, component_id=self.pk)


class Case(CatalogItem):
    CATEGORY = "case"

    form_factor = models.CharField(max_length=100, blank=True, null=True)
    # comma separated, e.g. "ATX, Micro-ATX, Mini-ITX"
    supported_form_factors = models.CharField(max_length=200, blank=True, null=True)
    max_gpu_length_mm = models.IntegerField(blank=True, null=True)
    max_cooler_height_mm = models.IntegerField(blank=True, null=True)
    max_psu_length_mm = models.IntegerField(blank=True, null=True)


class Motherboard(CatalogItem):
    CATEGORY = "motherboard"

    socket = models.CharField(max_length=50, blank=True, null=True)
    chipset = models.CharField(max_length=50, blank=True, null=True)
    form_factor = models.CharField(max_length=50, blank=True, null=True)
    memory_support = models.CharField(max_length=100, blank=True, null=True)
    memory_slots = models.IntegerField(blank=True, null=True)
    max_memory_speed = models.IntegerField(blank=True, null=True)
    compatible_generations = models.CharField(max_length=200, blank=True, null=True)


class CPU(CatalogItem):
    CATEGORY = "cpu"

    socket = models.CharField(max_length=50, blank=True, null=True)
    generation = models.CharField(max_length=100, blank=True, null=True)
    cores = models.IntegerField(blank=True, null=True)
    threads = models.IntegerField(blank=True, null=True)


class GPU(CatalogItem):
    CATEGORY = "gpu"

    vram_gb = models.IntegerField(blank=True, null=True)
    length_mm = models.IntegerField(blank=True, null=True)


class RAM(CatalogItem):
    CATEGORY = "ram"

    capacity_gb = models.IntegerField(blank=True, null=True)
    modules = models.IntegerField(blank=True, null=True)
    memory_type = models.CharField(max_length=10, blank=True, null=True)
    speed_mhz = models.IntegerField(blank=True, null=True)


class Storage(CatalogItem):
    CATEGORY = "storage"

    capacity_gb = models.IntegerField(blank=True, null=True)
    interface = models.CharField(max_length=100, blank=True, null=True)


class PSU(CatalogItem):
    CATEGORY = "psu"

    wattage = models.IntegerField(blank=True, null=True)
    length_mm = models.IntegerField(blank=True, null=True)
    efficiency = models.CharField(max_length=100, blank=True, null=True)


class Cooler(CatalogItem):
    CATEGORY = "cooling"

    cooler_type = models.CharField(max_length=50, blank=True, null=True)
    height_mm = models.IntegerField(blank=True, null=True)
    tdp_support = models.IntegerField(blank=True, null=True)


MODEL_BY_CATEGORY = {
    model.CATEGORY: model
    for model in (Case, Motherboard, CPU, GPU, RAM, Storage, PSU, Cooler)
}
