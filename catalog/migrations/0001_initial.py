from django.db import migrations, models


def base_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("name", models.CharField(max_length=200)),
        ("brand", models.CharField(blank=True, max_length=100, null=True)),
        ("price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
        ("stock_level", models.IntegerField(default=0)),
        ("power_draw", models.IntegerField(blank=True, null=True)),
        ("slug", models.SlugField(blank=True, max_length=200, null=True, unique=True)),
        ("contentful_id", models.CharField(blank=True, max_length=64, null=True)),
    ]


def options():
    return {"ordering": ("name",), "abstract": False}


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Case",
            fields=base_fields() + [
                ("form_factor", models.CharField(blank=True, max_length=100, null=True)),
                ("supported_form_factors", models.CharField(blank=True, max_length=200, null=True)),
                ("max_gpu_length_mm", models.IntegerField(blank=True, null=True)),
                ("max_cooler_height_mm", models.IntegerField(blank=True, null=True)),
                ("max_psu_length_mm", models.IntegerField(blank=True, null=True)),
            ],
            options=options(),
        ),
        migrations.CreateModel(
            name="Motherboard",
            fields=base_fields() + [
                ("socket", models.CharField(blank=True, max_length=50, null=True)),
                ("chipset", models.CharField(blank=True, max_length=50, null=True)),
                ("form_factor", models.CharField(blank=True, max_length=50, null=True)),
                ("memory_support", models.CharField(blank=True, max_length=100, null=True)),
                ("memory_slots", models.IntegerField(blank=True, null=True)),
                ("max_memory_speed", models.IntegerField(blank=True, null=True)),
                ("compatible_generations", models.CharField(blank=True, max_length=200, null=True)),
            ],
            options=options(),
        ),
        migrations.CreateModel(
            name="CPU",
            fields=base_fields() + [
                ("socket", models.CharField(blank=True, max_length=50, null=True)),
                ("generation", models.CharField(blank=True, max_length=100, null=True)),
                ("cores", models.IntegerField(blank=True, null=True)),
                ("threads", models.IntegerField(blank=True, null=True)),
            ],
            options=options(),
        ),
        migrations.CreateModel(
            name="GPU",
            fields=base_fields() + [
                ("vram_gb", models.IntegerField(blank=True, null=True)),
                ("length_mm", models.IntegerField(blank=True, null=True)),
            ],
            options=options(),
        ),
        migrations.CreateModel(
            name="RAM",
            fields=base_fields() + [
                ("capacity_gb", models.IntegerField(blank=True, null=True)),
                ("modules", models.IntegerField(blank=True, null=True)),
                ("memory_type", models.CharField(blank=True, max_length=10, null=True)),
                ("speed_mhz", models.IntegerField(blank=True, null=True)),
            ],
            options=options(),
        ),
        migrations.CreateModel(
            name="Storage",
            fields=base_fields() + [
                ("capacity_gb", models.IntegerField(blank=True, null=True)),
                ("interface", models.CharField(blank=True, max_length=100, null=True)),
            ],
            options=options(),
        ),
        migrations.CreateModel(
            name="PSU",
            fields=base_fields() + [
                ("wattage", models.IntegerField(blank=True, null=True)),
                ("length_mm", models.IntegerField(blank=True, null=True)),
                ("efficiency", models.CharField(blank=True, max_length=100, null=True)),
            ],
            options=options(),
        ),
        migrations.CreateModel(
            name="Cooler",
            fields=base_fields() + [
                ("cooler_type", models.CharField(blank=True, max_length=50, null=True)),
                ("height_mm", models.IntegerField(blank=True, null=True)),
                ("tdp_support", models.IntegerField(blank=True, null=True)),
            ],
            options=options(),
        ),
    ]
