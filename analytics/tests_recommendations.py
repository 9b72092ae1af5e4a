from django.test import SimpleTestCase

from analytics.recommendations import (
    DISCLAIMER,
    MAX_RECOMMENDATIONS,
    RECOMMENDATION_RULES,
    STABLE_PATTERN_MESSAGE,
    generate_recommendations,
)

SPIKE, MONOTONY, DOWN_TREND, GOOD_CONSISTENCY = (text for _, _, text in RECOMMENDATION_RULES)


def insight(type_, severity):
    return {"id": f"{type_}-{severity}", "type": type_, "severity": severity, "title": "", "description": ""}


class RecommendationTests(SimpleTestCase):
    def test_priority_order_and_cap(self):
        recs = generate_recommendations(
            [
                insight("consistency", "info"),
                insight("trend", "warning"),
                insight("monotony", "warning"),
                insight("spike", "warning"),
            ]
        )
        self.assertEqual(MAX_RECOMMENDATIONS, 3)
        self.assertEqual(recs.items, [SPIKE, MONOTONY, DOWN_TREND])

    def test_critical_spike_counts(self):
        self.assertEqual(generate_recommendations([insight("spike", "critical")]).items, [SPIKE])

    def test_good_consistency(self):
        recs = generate_recommendations([insight("trend", "info"), insight("consistency", "info")])
        self.assertEqual(recs.items, [GOOD_CONSISTENCY])

    def test_duplicates_collapse(self):
        recs = generate_recommendations([insight("spike", "warning"), insight("spike", "critical")])
        self.assertEqual(recs.items, [SPIKE])

    def test_fallback_when_nothing_fires(self):
        for insights in ([], [insight("trend", "info")], [insight("consistency", "warning")]):
            with self.subTest(insights=insights):
                self.assertEqual(generate_recommendations(insights).items, [STABLE_PATTERN_MESSAGE])

    def test_disclaimer_always_present(self):
        payload = generate_recommendations([]).as_payload()
        self.assertEqual(payload["disclaimer"], DISCLAIMER)
        self.assertEqual(payload["items"], [STABLE_PATTERN_MESSAGE])
