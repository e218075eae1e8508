from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import Client, TestCase
from django.urls import reverse

from catalog.models import CPU, GPU, PSU, RAM, Motherboard
from configurator.models import SESSION_KEY, BuildRequest, SavedConfiguration


class ConfiguratorFixtureMixin:
    def setUp(self):
        self.cpu = CPU.objects.create(name="Ryzen 5 7600X", socket="AM5", cores=6, power_draw=105, price=229)
        self.intel = CPU.objects.create(name="Core i5-14600K", socket="LGA1700", cores=14, power_draw=125, price=299)
        self.board = Motherboard.objects.create(
            name="B650 Tomahawk", socket="AM5", chipset="B650", memory_support="DDR5",
            memory_slots=4, price=199,
        )
        self.gpu = GPU.objects.create(name="RTX 4070", vram_gb=12, power_draw=200, price=549)
        self.ram = RAM.objects.create(name="32GB DDR5-6000", capacity_gb=32, modules=2, memory_type="DDR5", price=99)
        self.psu = PSU.objects.create(name="RM650", wattage=650, price=89)
        self.client = Client()

    def select(self, obj, category):
        return self.client.post(
            reverse("select_component"), {"category": category, "component_id": obj.pk}
        )


class SelectionViewTests(ConfiguratorFixtureMixin, TestCase):
    def test_select_and_read_back(self):
        resp = self.select(self.cpu, "cpu")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["ids"], {"cpu": str(self.cpu.pk)})
        self.assertIsNone(data["insights"])

        self.select(self.board, "motherboard")
        self.select(self.gpu, "gpu")
        data = self.client.get(reverse("selection_detail")).json()
        self.assertEqual(data["total_price"], 977.0)
        self.assertEqual(data["issues"], [])
        self.assertEqual(data["insights"]["filled_categories"], 3)

    def test_select_rejects_bad_input(self):
        resp = self.client.post(reverse("select_component"), {"category": "fans", "component_id": 1})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post(reverse("select_component"), {"category": "cpu", "component_id": 9999})
        self.assertEqual(resp.status_code, 404)

    def test_select_requires_post(self):
        resp = self.client.get(reverse("select_component"))
        self.assertEqual(resp.status_code, 405)

    def test_remove_and_clear(self):
        self.select(self.cpu, "cpu")
        self.select(self.ram, "ram")
        resp = self.client.post(reverse("remove_component"), {"category": "cpu"})
        self.assertEqual(resp.json()["ids"], {"ram": [str(self.ram.pk)]})
        resp = self.client.post(reverse("clear_selection"))
        self.assertEqual(resp.json()["ids"], {})
        self.assertNotIn(SESSION_KEY, self.client.session)

    def test_compatible_components(self):
        self.select(self.board, "motherboard")
        resp = self.client.get(reverse("compatible_components", args=["cpu"]))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual([c["name"] for c in data["compatible"]], ["Ryzen 5 7600X"])
        self.assertEqual(data["incompatible"][0]["rule"], "interface")

    def test_compatible_unknown_category(self):
        resp = self.client.get(reverse("compatible_components", args=["fans"]))
        self.assertEqual(resp.status_code, 404)

    def test_insights_modes(self):
        for obj, category in ((self.cpu, "cpu"), (self.board, "motherboard"), (self.gpu, "gpu")):
            self.select(obj, category)
        standard = self.client.get(reverse("insights")).json()
        pro = self.client.get(reverse("insights"), {"mode": "pro", "advanced": "1"}).json()
        self.assertEqual(standard["mode"], "standard")
        self.assertLessEqual(len(standard["basic"]), 5)
        self.assertEqual(standard["advanced"], [])
        self.assertGreaterEqual(len(pro["basic"]), len(standard["basic"]))
        self.assertTrue(pro["advanced"])
        self.assertEqual(standard["score"], pro["score"])

    def test_insights_hidden_below_three_categories(self):
        self.select(self.cpu, "cpu")
        self.select(self.gpu, "gpu")
        resp = self.client.get(reverse("insights"), {"mode": "pro", "advanced": "1"})
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json())
        self.select(self.board, "motherboard")
        self.assertEqual(self.client.get(reverse("insights")).json()["grade"], "C")

    def test_insights_bad_mode(self):
        resp = self.client.get(reverse("insights"), {"mode": "turbo"})
        self.assertEqual(resp.status_code, 400)

    def test_summary_is_plain_text(self):
        self.select(self.cpu, "cpu")
        resp = self.client.get(reverse("insight_summary"))
        self.assertEqual(resp["Content-Type"], "text/plain; charset=utf-8")
        self.assertTrue(resp.content.decode().startswith("Kevin's Insight - "))


class SavedConfigurationTests(ConfiguratorFixtureMixin, TestCase):
    def setUp(self):
        super().setUp()
        User = get_user_model()
        self.user = User.objects.create_user(username="tester", password="pass1234")
        self.other = User.objects.create_user(username="other", password="pass1234")

    def test_totals_recomputed_on_save(self):
        config = SavedConfiguration.objects.create(
            user=self.user,
            selection={"cpu": str(self.cpu.pk), "gpu": str(self.gpu.pk), "motherboard": str(self.board.pk)},
        )
        self.assertEqual(float(config.total_price), 977.0)
        self.assertEqual(config.synergy_grade, "C")
        self.assertEqual(config.profile, "Balanced All-Rounder")

    def test_save_list_load_delete(self):
        self.client.login(username="tester", password="pass1234")
        self.select(self.cpu, "cpu")
        self.select(self.ram, "ram")
        resp = self.client.post(reverse("save_configuration"), {"name": "Budget AM5"})
        self.assertEqual(resp.status_code, 201)
        pk = resp.json()["id"]

        listing = self.client.get(reverse("saved_configurations")).json()
        self.assertEqual([c["name"] for c in listing["configurations"]], ["Budget AM5"])

        self.client.post(reverse("clear_selection"))
        resp = self.client.post(reverse("load_configuration", args=[pk]))
        self.assertEqual(resp.json()["ids"], {"cpu": str(self.cpu.pk), "ram": [str(self.ram.pk)]})

        resp = self.client.post(reverse("delete_configuration", args=[pk]))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(SavedConfiguration.objects.exists())

    def test_save_empty_selection(self):
        self.client.login(username="tester", password="pass1234")
        resp = self.client.post(reverse("save_configuration"))
        self.assertEqual(resp.status_code, 400)

    def test_cannot_touch_other_users_configuration(self):
        config = SavedConfiguration.objects.create(user=self.other, selection={"cpu": str(self.cpu.pk)})
        self.client.login(username="tester", password="pass1234")
        self.assertEqual(self.client.post(reverse("load_configuration", args=[config.pk])).status_code, 404)
        self.assertEqual(self.client.post(reverse("delete_configuration", args=[config.pk])).status_code, 404)
        self.assertTrue(SavedConfiguration.objects.filter(pk=config.pk).exists())

    def test_clear_command(self):
        SavedConfiguration.objects.create(user=self.user, selection={})
        SavedConfiguration.objects.create(user=self.other, selection={})
        SavedConfiguration.objects.create(user=None, selection={})
        out = StringIO()
        call_command("clear_saved_configurations", "--user", "tester", "--yes", stdout=out)
        self.assertIn("Deleted 1 configuration(s).", out.getvalue())
        call_command("clear_saved_configurations", "--anonymous", "--yes", stdout=out)
        self.assertEqual(SavedConfiguration.objects.count(), 1)
        with self.assertRaises(CommandError):
            call_command("clear_saved_configurations", "--user", "ghost", "--yes")
        with self.assertRaises(CommandError):
            call_command("clear_saved_configurations")


class BuildRequestViewTests(ConfiguratorFixtureMixin, TestCase):
    def test_submit(self):
        self.select(self.cpu, "cpu")
        self.select(self.board, "motherboard")
        resp = self.client.post(
            reverse("submit_build_request"),
            {"name": "Ada Lovelace", "email": "ada@example.com", "phone": "0123"},
        )
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertEqual(data["state"], "submitted")
        record = BuildRequest.objects.get(reference=data["reference"])
        self.assertEqual(record.contact_email, "ada@example.com")
        self.assertEqual(float(record.total_price), 428.0)
        self.assertEqual(record.selection, {"motherboard": str(self.board.pk), "cpu": str(self.cpu.pk)})

    def test_incompatible_selection_rejected(self):
        self.select(self.intel, "cpu")
        self.select(self.board, "motherboard")
        resp = self.client.post(
            reverse("submit_build_request"), {"name": "Ada", "email": "ada@example.com"}
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["state"], "collecting_components")
        self.assertFalse(BuildRequest.objects.exists())

    def test_invalid_email_rejected(self):
        self.select(self.cpu, "cpu")
        resp = self.client.post(reverse("submit_build_request"), {"name": "Ada", "email": "nope"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["state"], "collecting_contact_info")
