from datetime import date, datetime, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase

from analytics import insights_calc
from analytics.insights_calc import (
    Trend,
    WeeklyAggregate,
    calculate_intensity_distribution,
    calculate_type_distribution,
    calculate_weekly_time_series,
    compute_consistency,
    compute_monotony_index,
    compute_trend,
    detect_spike,
    get_top_trainings_by_load,
)
from analytics.load import average_intensity_score, compute_training_load, intensity_score
from core.models import Training


def make_training(day: date, minutes=30, intensity="moderate", type_="Corrida", pk=None, hour=12, tz=dt_timezone.utc):
    return Training(
        id=pk,
        athlete_id=1,
        type=type_,
        duration_minutes=minutes,
        intensity=intensity,
        created_at=datetime(day.year, day.month, day.day, hour, tzinfo=tz),
    )


def week(start: date, load: int, count: int = 1) -> WeeklyAggregate:
    return WeeklyAggregate(
        week_start=start, week_end=start + timedelta(days=6), minutes=load, load=load, trainings_count=count
    )


class TrainingLoadTests(SimpleTestCase):
    def test_load_is_minutes_times_intensity_score(self):
        self.assertEqual(compute_training_load(make_training(date(2024, 1, 1), 30, "moderate")), 60)
        self.assertEqual(compute_training_load(make_training(date(2024, 1, 1), 45, "high")), 135)
        self.assertEqual(compute_training_load(make_training(date(2024, 1, 1), 60, "low")), 60)

    def test_unknown_intensity_falls_back_to_one_and_warns(self):
        with self.assertLogs("analytics.load", level="WARNING") as logs:
            self.assertEqual(intensity_score("extreme"), 1)
        self.assertIn("analytics.load.unknown_intensity", logs.output[0])

    def test_average_intensity_empty_is_zero(self):
        self.assertEqual(average_intensity_score([]), 0.0)

    def test_average_intensity_is_duration_weighted(self):
        trainings = [
            make_training(date(2024, 1, 1), 30, "moderate"),
            make_training(date(2024, 1, 2), 45, "high"),
            make_training(date(2024, 1, 3), 60, "low"),
        ]
        self.assertAlmostEqual(average_intensity_score(trainings), (60 + 135 + 60) / (30 + 45 + 60))


class WeeklyTimeSeriesTests(SimpleTestCase):
    def test_empty_input_gives_empty_series(self):
        self.assertEqual(calculate_weekly_time_series([]), [])

    def test_groups_by_iso_week_monday_start(self):
        series = calculate_weekly_time_series(
            [
                make_training(date(2024, 1, 8), 40, "low"),
                make_training(date(2024, 1, 1), 30, "moderate"),
                make_training(date(2024, 1, 3), 45, "high"),
            ]
        )
        self.assertEqual(len(series), 2)
        first, second = series
        self.assertEqual(first.week_start, date(2024, 1, 1))
        self.assertEqual(first.week_end, date(2024, 1, 7))
        self.assertEqual(first.trainings_count, 2)
        self.assertEqual(first.minutes, 75)
        self.assertEqual(first.load, 60 + 135)
        self.assertEqual(second.week_start, date(2024, 1, 8))
        self.assertEqual(second.trainings_count, 1)
        self.assertEqual(second.load, 40)

    def test_year_boundary_lands_in_same_iso_week(self):
        series = calculate_weekly_time_series(
            [make_training(date(2024, 12, 30)), make_training(date(2025, 1, 1))]
        )
        self.assertEqual(len(series), 1)
        self.assertEqual(series[0].week_start, date(2024, 12, 30))
        self.assertEqual(series[0].week_end, date(2025, 1, 5))
        self.assertEqual(series[0].trainings_count, 2)

    def test_uses_utc_date_of_aware_timestamps(self):
        # Domingo 23:30 en UTC-3 es lunes 02:30 UTC: cae en la semana siguiente.
        minus_three = dt_timezone(timedelta(hours=-3))
        training = make_training(date(2024, 1, 7), hour=23, tz=minus_three)
        training.created_at = training.created_at.replace(minute=30)

        series = calculate_weekly_time_series([training])
        self.assertEqual(series[0].week_start, date(2024, 1, 8))

    def test_series_is_sparse(self):
        series = calculate_weekly_time_series([make_training(date(2024, 1, 1)), make_training(date(2024, 1, 22))])
        self.assertEqual([w.week_start for w in series], [date(2024, 1, 1), date(2024, 1, 22)])

    def test_payload_uses_iso_dates(self):
        payload = calculate_weekly_time_series([make_training(date(2024, 1, 3), 30, "high")])[0].as_payload()
        self.assertEqual(
            payload,
            {"weekStart": "2024-01-01", "weekEnd": "2024-01-07", "minutes": 30, "load": 90, "trainingsCount": 1},
        )


class DistributionTests(SimpleTestCase):
    def test_intensity_distribution_always_has_three_rows(self):
        rows = calculate_intensity_distribution([])
        self.assertEqual(
            rows,
            [
                {"intensity": "low", "count": 0, "percentage": 0},
                {"intensity": "moderate", "count": 0, "percentage": 0},
                {"intensity": "high", "count": 0, "percentage": 0},
            ],
        )

    def test_intensity_percentages_are_rounded_independently(self):
        rows = calculate_intensity_distribution(
            [
                make_training(date(2024, 1, 1), intensity="low"),
                make_training(date(2024, 1, 2), intensity="moderate"),
                make_training(date(2024, 1, 3), intensity="high"),
            ]
        )
        self.assertEqual([r["percentage"] for r in rows], [33, 33, 33])

    def test_type_distribution_is_literal_and_sorted(self):
        trainings = [
            make_training(date(2024, 1, 1), type_="Natación"),
            make_training(date(2024, 1, 2), type_="corrida"),
            make_training(date(2024, 1, 3), type_="Corrida"),
            make_training(date(2024, 1, 4), type_="Corrida"),
        ]
        rows = calculate_type_distribution(trainings)
        self.assertEqual([r["type"] for r in rows], ["Corrida", "Natación", "corrida"])
        self.assertEqual(rows[0], {"type": "Corrida", "count": 2, "percentage": 50})

    def test_percentage_rounds_half_up(self):
        trainings = [make_training(date(2024, 1, 1), type_="Bici")] + [
            make_training(date(2024, 1, 2), type_="Corrida") for _ in range(7)
        ]
        rows = {r["type"]: r["percentage"] for r in calculate_type_distribution(trainings)}
        self.assertEqual(rows["Bici"], 13)
        self.assertEqual(rows["Corrida"], 88)

    def test_top_trainings_by_load_is_stable(self):
        a = make_training(date(2024, 1, 1), 30, "moderate", pk=1)  # 60
        b = make_training(date(2024, 1, 2), 60, "low", pk=2)  # 60
        c = make_training(date(2024, 1, 3), 45, "high", pk=3)  # 135
        self.assertEqual([t.id for t in get_top_trainings_by_load([a, b, c], limit=5)], [3, 1, 2])
        self.assertEqual([t.id for t in get_top_trainings_by_load([a, b, c], limit=2)], [3, 1])


class MonotonyTests(SimpleTestCase):
    def test_needs_three_weeks(self):
        self.assertIsNone(compute_monotony_index([]))
        self.assertIsNone(compute_monotony_index([100, 120]))

    def test_constant_loads_give_sentinel(self):
        self.assertEqual(compute_monotony_index([100, 100, 100, 100]), 999)

    def test_mean_over_population_stddev(self):
        self.assertAlmostEqual(compute_monotony_index([80, 100, 120, 90]), 6.59, places=2)


class SpikeTests(SimpleTestCase):
    def test_last_week_spike(self):
        result = detect_spike([100, 110, 90, 105, 200])
        self.assertTrue(result.is_spike)
        self.assertEqual(result.spike_week_index, 4)
        self.assertAlmostEqual(result.ratio, 200 / 101.25)

    def test_single_point_is_not_a_spike(self):
        result = detect_spike([100])
        self.assertFalse(result.is_spike)
        self.assertEqual(result.ratio, 0)
        self.assertIsNone(result.spike_week_index)

    def test_below_threshold_reports_ratio_without_index(self):
        result = detect_spike([100, 120])
        self.assertFalse(result.is_spike)
        self.assertAlmostEqual(result.ratio, 1.2)
        self.assertIsNone(result.spike_week_index)

    def test_zero_previous_mean(self):
        self.assertFalse(detect_spike([0, 0, 50]).is_spike)

    def test_ratio_exactly_at_threshold_is_spike(self):
        self.assertTrue(detect_spike([100, 150]).is_spike)


class ConsistencyTests(SimpleTestCase):
    def test_empty(self):
        result = compute_consistency([])
        self.assertEqual((result.active_weeks, result.streak, result.consistency_rate), (0, 0, 0.0))

    def test_streak_counts_backwards_until_break(self):
        start = date(2024, 1, 1)
        weeks = [week(start + timedelta(weeks=i), 100, count) for i, count in enumerate([2, 1, 3, 2])]
        result = compute_consistency(weeks)
        self.assertEqual(result.active_weeks, 3)
        self.assertEqual(result.streak, 2)
        self.assertEqual(result.consistency_rate, 75.0)

    def test_threshold_is_parameterized(self):
        start = date(2024, 1, 1)
        weeks = [week(start, 100, 3), week(start + timedelta(weeks=1), 100, 2)]
        result = compute_consistency(weeks, min_trainings_per_week=3)
        self.assertEqual((result.active_weeks, result.streak), (1, 0))


class TrendTests(SimpleTestCase):
    def test_unknown_with_few_points_or_zero_reference(self):
        self.assertEqual(compute_trend([80, 90]), Trend.UNKNOWN)
        self.assertEqual(compute_trend([0, 0, 100]), Trend.UNKNOWN)

    def test_up_and_down(self):
        self.assertEqual(compute_trend([80, 90, 100, 110]), Trend.UP)
        self.assertEqual(compute_trend([110, 100, 90, 80]), Trend.DOWN)

    def test_three_points_use_single_reference_week(self):
        self.assertEqual(compute_trend([100, 50, 50]), Trend.DOWN)

    def test_flat_within_tolerance(self):
        self.assertEqual(compute_trend([100, 100, 102, 101]), Trend.FLAT)


class PolicyConstantsTests(SimpleTestCase):
    def test_pinned_values(self):
        self.assertEqual(insights_calc.MONOTONY_SENTINEL, 999)
        self.assertEqual(insights_calc.MONOTONY_MIN_STDDEV, 0.1)
        self.assertEqual(insights_calc.MIN_WEEKS_FOR_MONOTONY, 3)
        self.assertEqual(insights_calc.SPIKE_RATIO_THRESHOLD, 1.5)
        self.assertEqual(insights_calc.TREND_TOLERANCE, 0.05)
        self.assertEqual(insights_calc.TREND_WINDOW, 2)
        self.assertEqual(insights_calc.MIN_WEEKS_FOR_TREND, 3)
        self.assertEqual(insights_calc.CONSISTENCY_MIN_TRAININGS_PER_WEEK, 2)
