import json
from datetime import date, timedelta

from django.test import SimpleTestCase, override_settings

from analytics.insights import (
    NO_DATA_TITLE,
    InsightFilters,
    apply_filters,
    build_athlete_insights,
    kpi_trend,
    matches_filters,
)
from analytics.tests_insights_calc import make_training

PERIOD = (date(2024, 1, 1), date(2024, 1, 30))


def build(current, compare=None, **kwargs):
    return build_athlete_insights(trainings_current=current, trainings_compare=compare, period=PERIOD, **kwargs)


class FilterTests(SimpleTestCase):
    def test_single_predicate(self):
        t = make_training(date(2024, 1, 1), intensity="high", type_="Corrida")
        self.assertTrue(matches_filters(t, InsightFilters()))
        self.assertTrue(matches_filters(t, InsightFilters(intensity="high", training_type="Corrida")))
        self.assertFalse(matches_filters(t, InsightFilters(intensity="low")))
        self.assertFalse(matches_filters(t, InsightFilters(training_type="corrida")))

    def test_apply_filters_keeps_order(self):
        a = make_training(date(2024, 1, 1), intensity="high", pk=1)
        b = make_training(date(2024, 1, 2), intensity="low", pk=2)
        c = make_training(date(2024, 1, 3), intensity="high", pk=3)
        self.assertEqual([t.id for t in apply_filters([a, b, c], InsightFilters(intensity="high"))], [1, 3])


class KpiTrendTests(SimpleTestCase):
    def test_zero_baseline(self):
        self.assertEqual(kpi_trend(0, 0), "stable")
        self.assertEqual(kpi_trend(5, 0), "up")

    def test_tolerance_band(self):
        self.assertEqual(kpi_trend(104, 100), "stable")
        self.assertEqual(kpi_trend(110, 100), "up")
        self.assertEqual(kpi_trend(90, 100), "down")


class EmptyInsightsTests(SimpleTestCase):
    def test_no_data_payload(self):
        payload = build([])

        self.assertEqual(payload["period"], {"from": "2024-01-01", "to": "2024-01-30"})
        self.assertEqual(len(payload["kpis"]), 4)
        self.assertTrue(all(k["value"] == 0 for k in payload["kpis"]))
        self.assertTrue(all("delta" not in k and "trend" not in k for k in payload["kpis"]))
        self.assertEqual([r["count"] for r in payload["distribution"]["byIntensity"]], [0, 0, 0])
        self.assertEqual(payload["distribution"]["byType"], [])
        self.assertEqual(payload["timeSeries"], [])
        self.assertEqual(payload["highlights"], [])
        self.assertEqual(len(payload["insights"]), 1)
        self.assertEqual(payload["insights"][0]["id"], "no-data")
        self.assertEqual(payload["insights"][0]["severity"], "info")
        self.assertEqual(payload["insights"][0]["title"], NO_DATA_TITLE)

    def test_filtered_out_trainings_count_as_no_data(self):
        payload = build([make_training(date(2024, 1, 2), intensity="low")], intensity_filter="high")
        self.assertEqual(payload["insights"][0]["id"], "no-data")

    def test_no_data_still_reports_deltas_against_compare(self):
        compare = [make_training(date(2023, 12, 20)), make_training(date(2023, 12, 21))]
        payload = build([], compare, compare_period=(date(2023, 12, 2), date(2023, 12, 31)))

        total = payload["kpis"][0]
        self.assertEqual(total["delta"], -2)
        self.assertEqual(total["trend"], "down")
        self.assertEqual(payload["period"]["compareFrom"], "2023-12-02")
        self.assertEqual(payload["period"]["compareTo"], "2023-12-31")


class KpiTests(SimpleTestCase):
    def test_kpis_in_fixed_order_with_units(self):
        payload = build(
            [
                make_training(date(2024, 1, 1), 30, "moderate"),
                make_training(date(2024, 1, 2), 45, "high"),
                make_training(date(2024, 1, 3), 60, "low"),
            ]
        )
        kpis = payload["kpis"]
        self.assertEqual([k["unit"] for k in kpis], ["entrenamientos", "min", "unidades", "score"])
        self.assertEqual([k["value"] for k in kpis[:3]], [3, 135, 255])
        self.assertEqual(kpis[3]["value"], 1.9)

    def test_empty_compare_set_gives_up_trend(self):
        payload = build([make_training(date(2024, 1, 1)), make_training(date(2024, 1, 2))], [])
        total = payload["kpis"][0]
        self.assertEqual(total["delta"], 2)
        self.assertEqual(total["trend"], "up")

    def test_filters_apply_to_compare_set_too(self):
        current = [make_training(date(2024, 1, 1), intensity="high")]
        compare = [make_training(date(2023, 12, 20), intensity="high"), make_training(date(2023, 12, 21), intensity="low")]
        payload = build(current, compare, intensity_filter="high")
        self.assertEqual(payload["kpis"][0]["delta"], 0)
        self.assertEqual(payload["kpis"][0]["trend"], "stable")


class InsightRulesTests(SimpleTestCase):
    def weekly_trainings(self, loads_in_minutes):
        # Un entrenamiento "moderate" por semana: carga = 2 * minutos.
        start = date(2024, 1, 1)
        return [
            make_training(start + timedelta(weeks=i), minutes, "moderate", pk=i + 1)
            for i, minutes in enumerate(loads_in_minutes)
        ]

    def test_rule_order_and_severities(self):
        payload = build(self.weekly_trainings([50, 50, 50, 125]))
        insights = payload["insights"]

        self.assertEqual(
            [i["id"] for i in insights],
            [
                "load-spike",
                "high-monotony",
                "load-trend-up",
                "low-consistency",
                "intensity-focus",
                "frequent-training-type",
                "most-active-week",
            ],
        )
        by_id = {i["id"]: i for i in insights}
        self.assertEqual(by_id["load-spike"]["severity"], "critical")
        self.assertEqual(by_id["load-spike"]["type"], "spike")
        self.assertEqual(by_id["high-monotony"]["severity"], "warning")
        self.assertEqual(by_id["low-consistency"]["severity"], "warning")
        self.assertIn("2024-01-22", by_id["most-active-week"]["description"])

    def test_moderate_spike_is_warning(self):
        payload = build(self.weekly_trainings([100, 110, 90, 105, 200]))
        spike = next(i for i in payload["insights"] if i["type"] == "spike")
        self.assertEqual(spike["severity"], "warning")

    def test_downward_trend_is_warning(self):
        payload = build(self.weekly_trainings([110, 100, 90, 80]))
        trend = next(i for i in payload["insights"] if i["id"].startswith("load-trend"))
        self.assertEqual((trend["id"], trend["severity"]), ("load-trend-down", "warning"))

    def test_good_consistency(self):
        start = date(2024, 1, 1)
        trainings = [
            make_training(start + timedelta(weeks=w, days=d), 30, "low")
            for w in range(2)
            for d in range(2)
        ]
        ids = [i["id"] for i in build(trainings)["insights"]]
        self.assertIn("good-consistency", ids)
        self.assertNotIn("intensity-focus", ids)

    def test_single_week_skips_multi_week_rules(self):
        ids = [i["id"] for i in build([make_training(date(2024, 1, 1), 30, "high")])["insights"]]
        self.assertEqual(ids, ["intensity-focus", "frequent-training-type"])


class HighlightsTests(SimpleTestCase):
    @override_settings(INSIGHTS_HIGHLIGHTS_LIMIT=5)
    def test_top_five_by_load(self):
        trainings = [make_training(date(2024, 1, 1) + timedelta(days=i), 10 + i, "low", pk=i + 1) for i in range(7)]
        highlights = build(trainings)["highlights"]

        self.assertEqual(len(highlights), 5)
        self.assertEqual([h["id"] for h in highlights], [f"top-load-{n}" for n in range(1, 6)])
        self.assertEqual([h["trainingId"] for h in highlights], [7, 6, 5, 4, 3])
        self.assertEqual(
            highlights[0],
            {
                "id": "top-load-1",
                "trainingId": 7,
                "type": "Corrida",
                "reason": "highest_load",
                "value": 16,
                "unit": "unidades",
                "date": "2024-01-07",
            },
        )


class IdempotenceTests(SimpleTestCase):
    def test_same_input_same_json(self):
        trainings = [
            make_training(date(2024, 1, 1) + timedelta(days=3 * i), 20 + i, ("low", "moderate", "high")[i % 3], pk=i)
            for i in range(10)
        ]
        first = json.dumps(build(trainings, trainings[:3], compare_period=PERIOD))
        second = json.dumps(build(trainings, trainings[:3], compare_period=PERIOD))
        self.assertEqual(first, second)
