import os
import tempfile
from io import StringIO
from unittest import mock

import pandas as pd
import requests
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse

from catalog.management.commands import sync_contentful
from catalog.models import CPU, PSU, RAM, Motherboard
from catalog.schema import InvalidComponent, cast_number, component_from_record
from catalog.services import get_components, load_catalog
from catalog.utils.catalog_clean import build_slug, clean_frame, split_brand


class TestComponentSchema(SimpleTestCase):
    def test_numeric_coercion(self):
        psu = component_from_record(
            "psu", {"id": 1, "name": "RM850x", "wattage": "850W", "price": "1,099.50"}
        )
        self.assertEqual(psu.wattage, 850.0)
        self.assertEqual(psu.price, 1099.5)
        self.assertEqual(cast_number("cores", "8.0"), 8)
        self.assertIsNone(cast_number("cores", "n/a"))
        self.assertIsNone(cast_number("price", float("nan")))

    def test_aliases(self):
        gpu = component_from_record("gpu", {"id": 2, "vram": "12 GB", "tdp": "200W"})
        self.assertEqual(gpu.vram_gb, 12.0)
        self.assertEqual(gpu.power_draw, 200.0)
        ram = component_from_record("ram", {"id": 3, "type": "DDR5", "capacity": 32})
        self.assertEqual(ram.memory_type, "DDR5")
        self.assertEqual(ram.capacity_gb, 32.0)

    def test_category_specific_aliases(self):
        cooler = component_from_record("cooling", {"id": 4, "type": "AIO"})
        self.assertEqual(cooler.cooler_type, "AIO")
        self.assertIsNone(cooler.memory_type)
        board = component_from_record("motherboard", {"id": 5, "compatibility": "Zen 4, Zen 5"})
        self.assertEqual(board.compatible_generations, ("Zen 4", "Zen 5"))
        case = component_from_record("case", {"id": 6, "compatibility": "ATX|Micro-ATX; Mini-ITX"})
        self.assertEqual(case.supported_form_factors, ("ATX", "Micro-ATX", "Mini-ITX"))

    def test_canonical_key_beats_alias(self):
        for record in ({"id": 1, "power_draw": 100, "tdp": 65}, {"id": 1, "tdp": 65, "power_draw": 100}):
            self.assertEqual(component_from_record("cpu", record).power_draw, 100.0)

    def test_blank_text_and_defaults(self):
        cpu = component_from_record("CPU ", {"id": 7, "socket": "N/A", "name": None})
        self.assertEqual(cpu.category, "cpu")
        self.assertIsNone(cpu.socket)
        self.assertEqual(cpu.name, "")
        self.assertEqual(cpu.price, 0.0)
        self.assertEqual(cpu.label, "CPU #7")

    def test_invalid_records(self):
        with self.assertRaises(InvalidComponent):
            component_from_record("fans", {"id": 1})
        with self.assertRaises(InvalidComponent):
            component_from_record("cpu", {"name": "No id"})


class TestCatalogServices(TestCase):
    def setUp(self):
        self.a = CPU.objects.create(name="Alpha", socket="AM5", cores=8, price=300, stock_level=5)
        self.b = CPU.objects.create(name="Beta", socket="AM4", cores=6, price=150, stock_level=0)

    def test_to_component(self):
        board = Motherboard.objects.create(name="B650", memory_support="DDR4, DDR5", memory_slots=4)
        component = board.to_component()
        self.assertEqual(component.id, str(board.pk))
        self.assertEqual(component.category, "motherboard")
        self.assertEqual(component.memory_support, ("DDR4", "DDR5"))
        self.assertEqual(RAM.objects.create(name="Kit", memory_type="DDR5").to_component().memory_type, "DDR5")

    def test_get_components_keeps_order(self):
        found = get_components("cpu", [self.b.pk, "junk", self.a.pk, 9999])
        self.assertEqual([c.name for c in found], ["Beta", "Alpha"])
        self.assertEqual(get_components("fans", [1]), [])

    def test_load_catalog_in_stock(self):
        self.assertEqual([c.name for c in load_catalog("cpu")], ["Alpha", "Beta"])
        self.assertEqual([c.name for c in load_catalog("cpu", in_stock_only=True)], ["Alpha"])


class TestImportCatalog(TestCase):
    def _write_csv(self, text):
        fd, path = tempfile.mkstemp(suffix=".csv")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        self.addCleanup(os.remove, path)
        return path

    def test_import_and_update(self):
        path = self._write_csv(
            "name,brand,socket,cores,tdp,price\n"
            "Ryzen 7 7700X,AMD,AM5,8,105W,$329.00\n"
            ",AMD,AM5,6,65,99\n"
            "Core i5-14600K,Intel,LGA1700,14,125,\n"
        )
        out = StringIO()
        call_command("import_catalog", "--category", "cpu", "--csv", path, "--require-price", stdout=out, verbosity=0)
        self.assertIn("1 created, 0 updated, 2 skipped", out.getvalue())

        cpu = CPU.objects.get()
        self.assertEqual(cpu.slug, "cpu-amd-ryzen-7-7700x")
        self.assertEqual(cpu.power_draw, 105)
        self.assertEqual(float(cpu.price), 329.0)

        out = StringIO()
        call_command("import_catalog", "--category", "cpu", "--csv", path, stdout=out, verbosity=0)
        self.assertIn("1 created, 1 updated, 1 skipped", out.getvalue())
        self.assertEqual(CPU.objects.count(), 2)

    def test_dry_run_writes_nothing(self):
        path = self._write_csv("name,wattage\nRM650,650W\n")
        out = StringIO()
        call_command("import_catalog", "--category", "psu", "--csv", path, "--dry-run", stdout=out, verbosity=0)
        self.assertIn("[DRY-RUN]", out.getvalue())
        self.assertFalse(PSU.objects.exists())

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command("import_catalog", "--category", "psu", "--csv", "/nonexistent/file.csv", verbosity=0)


def contentful_response(items, total):
    resp = mock.Mock()
    resp.json.return_value = {"items": items, "total": total}
    resp.raise_for_status.return_value = None
    return resp


class TestContentfulSync(TestCase):
    def test_fetch_entries_pages(self):
        session = mock.Mock()
        session.get.side_effect = [
            contentful_response([{"sys": {"id": "a"}}, {"sys": {"id": "b"}}], 3),
            contentful_response([{"sys": {"id": "c"}}], 3),
        ]
        entries = list(sync_contentful.fetch_entries(session, "http://cms", "tok", "pcCpu", page_size=2))
        self.assertEqual([e["sys"]["id"] for e in entries], ["a", "b", "c"])
        self.assertEqual(session.get.call_args_list[1].kwargs["params"]["skip"], 2)

    @override_settings(CONTENTFUL_SPACE_ID="", CONTENTFUL_ACCESS_TOKEN="")
    def test_requires_credentials(self):
        with self.assertRaises(CommandError):
            call_command("sync_contentful")

    @override_settings(CONTENTFUL_SPACE_ID="space", CONTENTFUL_ACCESS_TOKEN="token")
    def test_sync_creates_and_updates(self):
        entries = [
            {"sys": {"id": "e1"}, "fields": {"name": "RTX 4070", "brand": "NVIDIA", "vram": "12GB", "tdp": "200W", "price": 549}},
            {"sys": {"id": "e2"}, "fields": {"brand": "Nameless"}},
        ]
        with mock.patch.object(sync_contentful, "fetch_entries", return_value=iter(entries)):
            out = StringIO()
            call_command("sync_contentful", "--category", "gpu", stdout=out)
        self.assertIn("1 created, 0 updated, 1 skipped", out.getvalue())

        with mock.patch.object(sync_contentful, "fetch_entries", return_value=iter(entries[:1])):
            out = StringIO()
            call_command("sync_contentful", "--category", "gpu", stdout=out)
        self.assertIn("0 created, 1 updated, 0 skipped", out.getvalue())

        gpu = load_catalog("gpu")[0]
        self.assertEqual(gpu.vram_gb, 12.0)
        self.assertEqual(gpu.power_draw, 200.0)

    @override_settings(CONTENTFUL_SPACE_ID="space", CONTENTFUL_ACCESS_TOKEN="token")
    def test_request_failure_is_command_error(self):
        with mock.patch.object(sync_contentful, "fetch_entries", side_effect=requests.ConnectionError("down")):
            with self.assertRaises(CommandError):
                call_command("sync_contentful", "--category", "cpu")


class TestCatalogClean(SimpleTestCase):
    def setUp(self):
        self.raw = pd.DataFrame({
            "name": ["Corsair RM850x", "Corsair RM850x", "  ", "EVGA 500 W1"],
            "wattage": ["850W", "850W", "600W", "500 W"],
            "price": ["$129.99", "$129.99", "", "0"],
        })

    def test_helpers(self):
        self.assertEqual(split_brand("Corsair RM850x"), ("Corsair", "RM850x"))
        self.assertEqual(split_brand(None), (None, None))
        self.assertEqual(build_slug("psu", "Corsair", "RM850x Shift"), "psu-corsair-rm850x-shift")

    def test_clean_frame(self):
        df = clean_frame(self.raw, "psu")
        self.assertEqual(list(df["slug"]), ["psu-corsair-rm850x", "psu-evga-500-w1"])
        self.assertEqual(list(df["brand"]), ["Corsair", "EVGA"])
        self.assertEqual(df.loc[0, "wattage"], 850.0)

    def test_require_price(self):
        df = clean_frame(self.raw, "psu", require_price=True)
        self.assertEqual(list(df["name"]), ["RM850x"])

    def test_alias_columns(self):
        raw = pd.DataFrame({"name": ["Fractal North"], "brand": ["Fractal"], "compatibility": ["ATX|mATX"]})
        df = clean_frame(raw, "case")
        self.assertEqual(df.loc[0, "supported_form_factors"], "ATX, mATX")
        self.assertEqual(df.loc[0, "slug"], "case-fractal-fractal-north")


class TestCatalogViews(TestCase):
    def setUp(self):
        self.cpu = CPU.objects.create(name="Ryzen 5 7600X", socket="AM5", cores=6, price=229, stock_level=3)

    def test_component_list(self):
        resp = self.client.get(reverse("component_list"), {"category": "cpu"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["components"][0]["name"], "Ryzen 5 7600X")
        self.assertEqual(data["components"][0]["label"], "Ryzen 5 7600X")

    def test_component_list_unknown_category(self):
        resp = self.client.get(reverse("component_list"), {"category": "fans"})
        self.assertEqual(resp.status_code, 400)

    def test_component_details(self):
        resp = self.client.get(reverse("component_details"), {"type": "cpu", "id": self.cpu.pk})
        self.assertEqual(resp.status_code, 200)
        rows = {r["label"]: r["value"] for r in resp.json()["rows"]}
        self.assertEqual(rows["Socket"], "AM5")
        self.assertEqual(rows["Power Draw"], "-")
        self.assertNotIn("Slug", rows)

    def test_component_details_errors(self):
        url = reverse("component_details")
        self.assertEqual(self.client.get(url, {"type": "cpu"}).status_code, 400)
        self.assertEqual(self.client.get(url, {"type": "fans", "id": 1}).status_code, 400)
        self.assertEqual(self.client.get(url, {"type": "cpu", "id": 9999}).status_code, 400)
