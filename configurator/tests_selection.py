from django.test import SimpleTestCase

from catalog.schema import Component
from configurator.services.selection import (
    BuildSelection,
    as_selection,
    filled_categories,
    should_show_insights,
)


def part(category, id, **attrs):
    return Component(id=str(id), category=category, name=f"{category} {id}", **attrs)


class TestBuildSelection(SimpleTestCase):
    def test_single_slot_categories_replace(self):
        selection = BuildSelection()
        selection.select(part("cpu", 1)).select(part("cpu", 2))
        self.assertEqual(selection["cpu"].id, "2")
        self.assertEqual(len(selection), 1)

    def test_ram_accumulates_kits(self):
        selection = BuildSelection([part("ram", 1), part("ram", 2)])
        self.assertEqual([k.id for k in selection["ram"]], ["1", "2"])
        selection.remove("ram", 1)
        self.assertEqual([k.id for k in selection["ram"]], ["2"])
        selection.remove("ram")
        self.assertNotIn("ram", selection)

    def test_iteration_follows_category_order(self):
        selection = BuildSelection([part("psu", 1), part("case", 2), part("cpu", 3)])
        self.assertEqual(list(selection), ["case", "cpu", "psu"])

    def test_total_price(self):
        selection = BuildSelection([part("cpu", 1, price=199.99), part("ram", 2, price=80.01)])
        self.assertEqual(selection.total_price(), 280.0)

    def test_ids_round_trip_through_fetch(self):
        original = BuildSelection([part("cpu", 1), part("ram", 2), part("ram", 3)])
        ids = original.to_ids()
        self.assertEqual(ids, {"cpu": "1", "ram": ["2", "3"]})
        catalog = {c.id: c for c in original.components()}

        def fetch(category, wanted):
            return [catalog[str(i)] for i in wanted if str(i) in catalog]

        self.assertEqual(BuildSelection.from_ids(ids, fetch).to_ids(), ids)

    def test_unknown_category_rejected(self):
        with self.assertRaises(ValueError):
            BuildSelection().select(Component(id="1", category="fans"))


class TestAsSelection(SimpleTestCase):
    def test_raw_records(self):
        selection = as_selection({"cpu": {"cores": "8", "socket": "AM5"}, "fans": {"id": 1}})
        self.assertEqual(list(selection), ["cpu"])
        self.assertEqual(selection["cpu"].cores, 8)
        self.assertEqual(selection["cpu"].id, "cpu-0")

    def test_recategorises_components(self):
        selection = as_selection({"cooling": part("cpu", 1)})
        self.assertEqual(selection["cooling"].category, "cooling")

    def test_panel_threshold(self):
        two = {"cpu": part("cpu", 1), "gpu": part("gpu", 2)}
        self.assertEqual(filled_categories(two), 2)
        self.assertFalse(should_show_insights(two))
        two["case"] = part("case", 3)
        self.assertTrue(should_show_insights(two))
