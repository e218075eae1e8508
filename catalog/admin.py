from django.contrib import admin

from .models import CPU, GPU, PSU, RAM, Case, Cooler, Motherboard, Storage


class CatalogItemAdmin(admin.ModelAdmin):
    search_fields = ("name", "brand", "slug")
    list_filter = ("brand",)


@admin.register(Case)
class CaseAdmin(CatalogItemAdmin):
    list_display = ("name", "brand", "form_factor", "max_gpu_length_mm", "max_cooler_height_mm", "price", "stock_level")
    list_filter = ("brand", "form_factor")


@admin.register(Motherboard)
class MotherboardAdmin(CatalogItemAdmin):
    list_display = ("name", "socket", "chipset", "form_factor", "memory_support", "memory_slots", "price", "stock_level")
    list_filter = ("socket", "form_factor", "memory_support")


@admin.register(CPU)
class CPUAdmin(CatalogItemAdmin):
    list_display = ("brand", "name", "socket", "generation", "cores", "threads", "power_draw", "price", "stock_level")
    list_filter = ("brand", "socket")


@admin.register(GPU)
class GPUAdmin(CatalogItemAdmin):
    list_display = ("brand", "name", "vram_gb", "length_mm", "power_draw", "price", "stock_level")


@admin.register(RAM)
class RAMAdmin(CatalogItemAdmin):
    list_display = ("name", "capacity_gb", "modules", "memory_type", "speed_mhz", "price", "stock_level")
    list_filter = ("memory_type", "modules")


@admin.register(Storage)
class StorageAdmin(CatalogItemAdmin):
    list_display = ("brand", "name", "capacity_gb", "interface", "price", "stock_level")
    list_filter = ("brand", "interface")


@admin.register(PSU)
class PSUAdmin(CatalogItemAdmin):
    list_display = ("brand", "name", "wattage", "efficiency", "length_mm", "price", "stock_level")
    list_filter = ("brand", "efficiency")


@admin.register(Cooler)
class CoolerAdmin(CatalogItemAdmin):
    list_display = ("name", "cooler_type", "height_mm", "tdp_support", "price", "stock_level")
    list_filter = ("cooler_type",)
