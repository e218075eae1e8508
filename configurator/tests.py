from django.test import SimpleTestCase, override_settings

from catalog.schema import Component
from configurator import conf
from configurator.services.compatibility import (
    RULE_CATEGORY,
    RULE_INTERFACE,
    RULE_PHYSICAL,
    RULE_POWER,
    board_fits_case,
    check_selection,
    filter_compatible,
    form_factor_rank,
    norm,
)
from configurator.services.policy import CompatibilityPolicy
from configurator.services.selection import BuildSelection


def part(category, id, **attrs):
    return Component(id=str(id), category=category, name=attrs.pop("name", f"{category} {id}"), **attrs)


class TestSocketRule(SimpleTestCase):
    def setUp(self):
        self.am5_board = part("motherboard", 1, socket="AM5", memory_support=("DDR5",))
        self.am5_cpu = part("cpu", 10, socket="AM5", cores=8)
        self.intel_cpu = part("cpu", 11, socket="LGA1700", cores=8)

    def test_socket_gating(self):
        selection = BuildSelection([self.am5_board])
        verdict = filter_compatible(selection, [self.am5_cpu, self.intel_cpu], "cpu")
        self.assertEqual(verdict.compatible, (self.am5_cpu,))
        self.assertEqual(len(verdict.incompatible), 1)
        rejected = verdict.incompatible[0]
        self.assertEqual(rejected.component, self.intel_cpu)
        self.assertEqual(rejected.rule, RULE_INTERFACE)
        self.assertIn("socket", rejected.reason.lower())

    def test_socket_names_are_normalised(self):
        self.assertEqual(norm("Socket AM5"), norm("am-5"))
        board = part("motherboard", 2, socket="Socket AM5")
        verdict = filter_compatible(BuildSelection([board]), [self.am5_cpu], "cpu")
        self.assertEqual(verdict.compatible, (self.am5_cpu,))

    def test_order_independence(self):
        """Picking the CPU first must reject the same boards as board-first rejects CPUs."""
        intel_board = part("motherboard", 3, socket="LGA1700")
        cpu_first = filter_compatible(
            BuildSelection([self.intel_cpu]), [self.am5_board, intel_board], "motherboard"
        )
        self.assertEqual(cpu_first.compatible, (intel_board,))
        board_first = filter_compatible(
            BuildSelection([self.am5_board]), [self.intel_cpu], "cpu"
        )
        self.assertEqual(board_first.compatible, ())

    def test_missing_socket_is_permissive(self):
        verdict = filter_compatible(BuildSelection([part("motherboard", 4)]), [self.intel_cpu], "cpu")
        self.assertEqual(verdict.compatible, (self.intel_cpu,))

    def test_ram_type_must_match_board(self):
        ddr4 = part("ram", 20, memory_type="DDR4", capacity_gb=16, modules=2)
        ddr5 = part("ram", 21, memory_type="DDR5", capacity_gb=32, modules=2)
        verdict = filter_compatible(BuildSelection([self.am5_board]), [ddr4, ddr5], "ram")
        self.assertEqual(verdict.compatible, (ddr5,))
        self.assertEqual(verdict.incompatible[0].rule, RULE_INTERFACE)

    def test_wrong_category_candidate_is_rejected(self):
        verdict = filter_compatible(BuildSelection(), [self.am5_board], "cpu")
        self.assertEqual(verdict.compatible, ())
        self.assertEqual(verdict.incompatible[0].rule, RULE_CATEGORY)


class TestPhysicalFit(SimpleTestCase):
    def setUp(self):
        self.case = part(
            "case",
            1,
            form_factor="Micro-ATX Mini Tower",
            max_gpu_length_mm=300,
            max_cooler_height_mm=160,
            max_psu_length_mm=160,
        )

    def test_gpu_length(self):
        short = part("gpu", 2, length_mm=280)
        long = part("gpu", 3, length_mm=336)
        verdict = filter_compatible(BuildSelection([self.case]), [short, long], "gpu")
        self.assertEqual(verdict.compatible, (short,))
        self.assertEqual(verdict.incompatible[0].rule, RULE_PHYSICAL)

    def test_liquid_cooler_skips_height_check(self):
        tower = part("cooling", 4, cooler_type="Air", height_mm=165)
        aio = part("cooling", 5, cooler_type="AIO Liquid", height_mm=200)
        verdict = filter_compatible(BuildSelection([self.case]), [tower, aio], "cooling")
        self.assertEqual(verdict.compatible, (aio,))

    def test_board_form_factor(self):
        atx = part("motherboard", 6, form_factor="ATX")
        matx = part("motherboard", 7, form_factor="Micro-ATX")
        itx = part("motherboard", 8, form_factor="Mini-ITX")
        verdict = filter_compatible(BuildSelection([self.case]), [atx, matx, itx], "motherboard")
        self.assertEqual(verdict.compatible, (matx, itx))

    def test_supported_form_factor_list_wins(self):
        case = part("case", 9, supported_form_factors=("ATX", "Micro-ATX"))
        self.assertTrue(board_fits_case(part("motherboard", 1, form_factor="Micro ATX"), case))
        self.assertTrue(board_fits_case(part("motherboard", 2, form_factor="Mini-ITX"), case))
        self.assertFalse(board_fits_case(part("motherboard", 3, form_factor="E-ATX"), case))

    def test_case_candidate_checked_against_selected_parts(self):
        gpu = part("gpu", 10, length_mm=320)
        roomy = part("case", 11, max_gpu_length_mm=400)
        verdict = filter_compatible(BuildSelection([gpu]), [self.case, roomy], "case")
        self.assertEqual(verdict.compatible, (roomy,))

    def test_memory_slots(self):
        board = part("motherboard", 12, memory_slots=2)
        kit = part("ram", 13, modules=2, capacity_gb=32)
        selection = BuildSelection([board, kit])
        another = part("ram", 14, modules=2, capacity_gb=32)
        verdict = filter_compatible(selection, [another], "ram")
        self.assertEqual(verdict.compatible, ())
        self.assertEqual(verdict.incompatible[0].rule, RULE_PHYSICAL)

    def test_bare_mini_tower_takes_micro_atx_at_most(self):
        case = part("case", 15, form_factor="Mini Tower")
        self.assertEqual(form_factor_rank("Mini Tower"), 2)
        self.assertFalse(board_fits_case(part("motherboard", 16, form_factor="ATX"), case))
        self.assertTrue(board_fits_case(part("motherboard", 17, form_factor="Micro-ATX"), case))
        self.assertEqual(form_factor_rank("ATX Mini Tower"), 3)
        self.assertEqual(form_factor_rank("Mid Tower"), 3)


class TestPowerBudget(SimpleTestCase):
    def setUp(self):
        self.cpu = part("cpu", 1, power_draw=120)
        self.psu = part("psu", 2, wattage=500)

    def test_power_rule_skipped_without_psu(self):
        hungry = part("gpu", 3, power_draw=900)
        verdict = filter_compatible(BuildSelection([self.cpu]), [hungry], "gpu")
        self.assertEqual(verdict.compatible, (hungry,))

    def test_budget_uses_safety_margin(self):
        # 500W * 0.8 = 400W budget, 120W already drawn
        fits = part("gpu", 4, power_draw=280)
        too_much = part("gpu", 5, power_draw=281)
        verdict = filter_compatible(BuildSelection([self.cpu, self.psu]), [fits, too_much], "gpu")
        self.assertEqual(verdict.compatible, (fits,))
        self.assertEqual(verdict.incompatible[0].rule, RULE_POWER)

    def test_monotonic_in_draw(self):
        selection = BuildSelection([self.cpu, self.psu])
        candidates = [part("gpu", 10 + w, power_draw=w) for w in range(0, 500, 20)]
        verdict = filter_compatible(selection, candidates, "gpu")
        accepted = {c.power_draw for c in verdict.compatible}
        for c in verdict.incompatible:
            # anything rejected draws more than everything accepted
            self.assertGreater(c.component.power_draw, max(accepted))

    def test_replacement_excludes_current_part(self):
        current = part("gpu", 6, power_draw=250)
        swap = part("gpu", 7, power_draw=270)
        verdict = filter_compatible(BuildSelection([self.cpu, self.psu, current]), [swap], "gpu")
        self.assertEqual(verdict.compatible, (swap,))

    def test_psu_candidate_checked_against_current_draw(self):
        gpu = part("gpu", 8, power_draw=300)
        small = part("psu", 9, wattage=450)
        large = part("psu", 10, wattage=750)
        verdict = filter_compatible(BuildSelection([self.cpu, gpu]), [small, large], "psu")
        self.assertEqual(verdict.compatible, (large,))

    def test_zero_watt_psu_is_treated_as_unknown(self):
        dud = part("psu", 14, wattage=0)
        gpu = part("gpu", 15, power_draw=100)
        verdict = filter_compatible(BuildSelection([self.cpu, dud]), [gpu], "gpu")
        self.assertEqual(verdict.compatible, (gpu,))
        verdict = filter_compatible(BuildSelection([self.cpu]), [dud], "psu")
        self.assertEqual(verdict.compatible, (dud,))

    def test_custom_margin(self):
        policy = CompatibilityPolicy(safety_margin=1.0)
        gpu = part("gpu", 11, power_draw=380)
        verdict = filter_compatible(BuildSelection([self.cpu, self.psu]), [gpu], "gpu", policy)
        self.assertEqual(verdict.compatible, (gpu,))

    def test_interface_rule_runs_before_power(self):
        board = part("motherboard", 12, socket="AM5")
        cpu = part("cpu", 13, socket="LGA1700", power_draw=1000)
        verdict = filter_compatible(BuildSelection([board, self.psu]), [cpu], "cpu")
        self.assertEqual(verdict.incompatible[0].rule, RULE_INTERFACE)


class TestExampleScenario(SimpleTestCase):
    def test_cpu_candidates_without_psu(self):
        selection = {
            "cpu": {"cores": 6, "socket": "AM5"},
            "gpu": {"vram": 12},
            "motherboard": {"socket": "AM5"},
        }
        am5 = part("cpu", 1, socket="AM5", cores=8, power_draw=5000)
        lga = part("cpu", 2, socket="LGA1700", cores=8)
        verdict = filter_compatible(selection, [am5, lga], "cpu")
        self.assertEqual(verdict.compatible, (am5,))
        self.assertEqual(verdict.incompatible[0].rule, RULE_INTERFACE)

    def test_deterministic(self):
        selection = BuildSelection([part("motherboard", 1, socket="AM5"), part("psu", 2, wattage=650)])
        candidates = [part("cpu", i, socket="AM5" if i % 2 else "AM4", power_draw=60 * i) for i in range(1, 10)]
        first = filter_compatible(selection, candidates, "cpu")
        second = filter_compatible(selection, candidates, "cpu")
        self.assertEqual(first, second)


class TestCheckSelection(SimpleTestCase):
    def test_empty_selection_has_no_issues(self):
        self.assertEqual(check_selection({}), [])

    def test_socket_mismatch_is_critical(self):
        selection = BuildSelection([
            part("cpu", 1, socket="AM5", name="Ryzen 5 7600X"),
            part("motherboard", 2, socket="LGA1700", name="Z790 Board"),
        ])
        issues = check_selection(selection)
        self.assertEqual(issues[0].severity, "critical")
        self.assertIn("Socket", issues[0].title)
        self.assertEqual(issues[0].affected, ("Ryzen 5 7600X", "Z790 Board"))

    def test_psu_shortage_uses_estimated_draw(self):
        selection = BuildSelection([
            part("cpu", 1, name="Intel Core i9-14900K"),
            part("gpu", 2, name="NVIDIA RTX 4090"),
            part("psu", 3, wattage=750),
        ])
        issues = check_selection(selection)
        # 150 (14900K) + 575 (4090) + 150 base = 875W > 750W
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].title, "Critical PSU Shortage")
        self.assertIn("875W", issues[0].description)

    def test_low_headroom_is_warning(self):
        selection = BuildSelection([
            part("cpu", 1, power_draw=100),
            part("gpu", 2, power_draw=200),
            part("psu", 3, wattage=500),
        ])
        # 450W estimated, about 560W recommended
        issues = check_selection(selection)
        self.assertEqual([i.severity for i in issues], ["warning"])

    def test_warnings_sort_after_critical(self):
        selection = BuildSelection([
            part("cpu", 1, socket="AM5", generation="Zen 5", power_draw=170),
            part("motherboard", 2, socket="AM5", compatible_generations=("Zen 4",)),
            part("cooling", 3, cooler_type="Air", height_mm=170, tdp_support=150),
            part("case", 4, max_cooler_height_mm=160),
        ])
        severities = [i.severity for i in check_selection(selection)]
        self.assertEqual(severities, ["critical", "warning", "warning"])


class TestPolicySettings(SimpleTestCase):
    def tearDown(self):
        conf.reset()

    def test_defaults(self):
        with override_settings(CONFIGURATOR={}):
            self.assertEqual(conf.get_compatibility_policy().safety_margin, 0.8)
            self.assertEqual(conf.get_scoring_policy().bottleneck_threshold, 30)

    def test_overrides_and_unknown_keys(self):
        with override_settings(CONFIGURATOR={"COMPATIBILITY": {"safety_margin": 0.9, "bogus": 1}}):
            policy = conf.get_compatibility_policy()
            self.assertEqual(policy.safety_margin, 0.9)
            self.assertEqual(policy.base_system_watts, 150)
