from django.test import SimpleTestCase

from catalog.schema import Component
from configurator.services.diagnostics import advanced_findings, pcie_generation, performance_tier
from configurator.services.insights import format_insight_summary, insight_panel, split_comments
from configurator.services.policy import ScoringPolicy
from configurator.services.selection import BuildSelection
from configurator.services.synergy import (
    BALANCED,
    ENTRY_GAMING,
    GAMING_POWERHOUSE,
    GRADE_FEEDBACK,
    UNCLASSIFIED,
    WORKSTATION_BEAST,
    compute_synergy,
    sub_scores,
)


def part(category, id, **attrs):
    return Component(id=str(id), category=category, name=attrs.pop("name", f"{category} {id}"), **attrs)


EXAMPLE = {
    "cpu": {"cores": 6, "socket": "AM5"},
    "gpu": {"vram": 12},
    "motherboard": {"socket": "AM5"},
}


class TestSynergyScore(SimpleTestCase):
    def test_empty_selection(self):
        result = compute_synergy({})
        self.assertEqual(result.score, 0)
        self.assertEqual(result.grade, "F")
        self.assertEqual(result.profile, UNCLASSIFIED)
        self.assertEqual(result.comments, ())

    def test_example_sub_scores(self):
        scores = sub_scores(EXAMPLE)
        self.assertAlmostEqual(scores["cpu"], 37.5)
        self.assertAlmostEqual(scores["gpu"], 50.0)
        self.assertNotIn("ram", scores)

        result = compute_synergy(EXAMPLE)
        self.assertEqual(result.bottlenecks, ())
        self.assertEqual(result.profile, BALANCED)
        self.assertEqual(result.score, 70)
        self.assertEqual(result.grade, "C")

    def test_sub_scores_are_capped(self):
        scores = sub_scores({"cpu": {"cores": 64}, "gpu": {"vram": 48}, "ram": {"capacity": 256}})
        self.assertEqual(set(scores.values()), {95.0})

    def test_score_is_bounded(self):
        selections = [
            {"cpu": {"cores": 2}},
            {"cpu": {"cores": 4}, "gpu": {"vram": 24}, "ram": {"capacity": 8}},
            {"cpu": {"cores": 24}, "gpu": {"vram": 24}, "ram": {"capacity": 128}, "psu": {"wattage": 1000}},
            {"gpu": {"vram": 0}, "case": {"name": "Box"}},
        ]
        for selection in selections:
            result = compute_synergy(selection)
            self.assertGreaterEqual(result.score, 0)
            self.assertLessEqual(result.score, 100)
            self.assertEqual(result.grade, ScoringPolicy().grade_for(result.score))

    def test_grade_bands(self):
        policy = ScoringPolicy()
        cases = [(100, "A"), (90, "A"), (89, "B"), (75, "B"), (60, "C"), (45, "D"), (30, "E"), (29, "F"), (0, "F")]
        for score, grade in cases:
            self.assertEqual(policy.grade_for(score), grade)

    def test_deterministic(self):
        selection = BuildSelection([
            part("cpu", 1, cores=8, name="AMD Ryzen 7 7700X"),
            part("gpu", 2, vram_gb=16, name="RTX 4080"),
            part("ram", 3, capacity_gb=32, modules=2, speed_mhz=5600),
        ])
        self.assertEqual(compute_synergy(selection), compute_synergy(selection))

    def test_air_cooling_on_many_cores_costs_points(self):
        aio = compute_synergy({"cpu": {"cores": 16}, "cooling": {"type": "AIO"}})
        air = compute_synergy({"cpu": {"cores": 16}, "cooling": {"type": "Air"}})
        self.assertEqual(aio.score - air.score, 10)


class TestProfiles(SimpleTestCase):
    def test_single_category_is_unclassified(self):
        self.assertEqual(compute_synergy({"gpu": {"vram": 24}}).profile, UNCLASSIFIED)

    def test_gaming_powerhouse(self):
        result = compute_synergy({"cpu": {"cores": 16}, "gpu": {"vram": 24}, "ram": {"capacity": 64}})
        self.assertEqual(result.profile, GAMING_POWERHOUSE)
        # 95 GPU and 95 CPU vs 50 RAM
        self.assertEqual(
            [(b.limiting, b.limited) for b in result.bottlenecks], [("ram", "gpu"), ("ram", "cpu")]
        )

    def test_workstation_beast(self):
        result = compute_synergy({"cpu": {"cores": 16}, "gpu": {"vram": 8}, "ram": {"capacity": 128}})
        self.assertEqual(result.profile, WORKSTATION_BEAST)

    def test_entry_gaming(self):
        result = compute_synergy({"cpu": {"cores": 4}, "gpu": {"vram": 6}})
        self.assertEqual(result.profile, ENTRY_GAMING)

    def test_cpu_bottleneck(self):
        result = compute_synergy({"cpu": {"cores": 4}, "gpu": {"vram": 24}})
        self.assertEqual([(b.limiting, b.limited) for b in result.bottlenecks], [("cpu", "gpu")])
        self.assertTrue(any("CPU bottleneck" in c.text for c in result.comments))

    def test_ram_starved_cpu(self):
        result = compute_synergy({"cpu": {"cores": 16}, "ram": {"capacity": 8}, "case": {}})
        self.assertEqual([(b.limiting, b.limited) for b in result.bottlenecks], [("ram", "cpu")])
        self.assertTrue(any("Memory is the weak link" in c.text for c in result.comments))


class TestComments(SimpleTestCase):
    def setUp(self):
        self.selection = BuildSelection([
            part("cpu", 1, cores=6, socket="AM5", name="AMD Ryzen 5 7600X"),
            part("gpu", 2, vram_gb=12, name="NVIDIA RTX 4070"),
            part("motherboard", 3, socket="AM5", chipset="B650"),
        ])

    def test_order(self):
        result = compute_synergy(self.selection)
        texts = [c.text for c in result.comments]
        self.assertIn(texts[0], GRADE_FEEDBACK[result.grade])
        self.assertTrue(texts[1].startswith("Expected performance tier: High"))
        flags = [c.advanced for c in result.comments]
        # advanced comments only ever follow the basic ones
        self.assertEqual(flags, sorted(flags))
        self.assertTrue(any(flags))

    def test_split_comments_standard_and_pro(self):
        result = compute_synergy(self.selection)
        basic, advanced = split_comments(result, "standard")
        pro_basic, pro_advanced = split_comments(result, "pro")
        self.assertEqual(len(basic), 5)
        self.assertEqual(len(pro_basic), 6)
        self.assertEqual(advanced, pro_advanced)

    def test_summary_text(self):
        result = compute_synergy(self.selection)
        text = format_insight_summary(result)
        self.assertTrue(text.startswith("Kevin's Insight - Balanced All-Rounder\n"))
        self.assertIn(f"Synergy Grade: {result.grade} ({result.score}/100)", text)
        self.assertNotIn("Advanced Analysis", text)
        self.assertIn("Advanced Analysis:", format_insight_summary(result, include_advanced=True))

    def test_panel_hidden_below_three_categories(self):
        self.assertIsNone(insight_panel({"cpu": {"cores": 8}, "gpu": {"vram": 8}}))
        panel = insight_panel(self.selection)
        self.assertEqual(panel["filled_categories"], 3)
        self.assertEqual(panel["advanced"], [])
        self.assertGreater(panel["advanced_count"], 0)


class TestDiagnostics(SimpleTestCase):
    def test_performance_tier_by_name_then_vram(self):
        self.assertEqual(performance_tier(part("gpu", 1, name="RTX 4070 Ti Super")).tier, "Ultra")
        self.assertEqual(performance_tier(part("gpu", 2, name="RTX 4070")).tier, "High")
        self.assertEqual(performance_tier(part("gpu", 3, name="Arc A770", vram_gb=16)).tier, "Ultra")
        self.assertEqual(performance_tier(part("gpu", 4, name="GT 1030", vram_gb=2)).tier, "Entry")
        self.assertIsNone(performance_tier(None))

    def test_pcie_generation_from_chipset(self):
        self.assertEqual(pcie_generation("B450"), 3)
        self.assertEqual(pcie_generation("X670E"), 5)
        self.assertEqual(pcie_generation("Z790"), 4)
        self.assertIsNone(pcie_generation(""))

    def test_single_channel_and_board_speed(self):
        selection = BuildSelection([
            part("motherboard", 1, max_memory_speed=3200),
            part("ram", 2, capacity_gb=16, modules=1, speed_mhz=3600),
            part("storage", 3, capacity_gb=1000, interface="NVMe"),
        ])
        notes = advanced_findings(selection)
        self.assertTrue(any("Single-channel" in n for n in notes))
        self.assertTrue(any("downclocked" in n for n in notes))

    def test_ryzen_ddr5_sweet_spot(self):
        selection = BuildSelection([
            part("cpu", 1, name="AMD Ryzen 7 7800X3D", cores=8),
            part("ram", 2, name="32GB (2x16GB) DDR5-5200", capacity_gb=32),
        ])
        notes = advanced_findings(selection)
        self.assertTrue(any("6000 MT/s" in n for n in notes))
