from datetime import date, datetime, time, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase, override_settings

from analytics.range_utils import (
    day_bounds,
    iso_week_key,
    iso_week_number,
    iso_week_start,
    resolve_insights_period,
    to_utc_date,
)

NOW = datetime(2024, 3, 15, 10, 0, tzinfo=dt_timezone.utc)


class WeekHelpersTests(SimpleTestCase):
    def test_iso_week_start_crosses_year(self):
        self.assertEqual(iso_week_start(date(2025, 1, 1)), date(2024, 12, 30))
        self.assertEqual(iso_week_key(date(2024, 12, 30)), (2025, 1))
        self.assertEqual(iso_week_number(date(2024, 12, 30)), 1)

    def test_iso_week_start_of_monday_is_itself(self):
        self.assertEqual(iso_week_start(date(2024, 1, 8)), date(2024, 1, 8))
        self.assertEqual(iso_week_start(date(2024, 1, 14)), date(2024, 1, 8))

    def test_to_utc_date(self):
        minus_three = dt_timezone(timedelta(hours=-3))
        self.assertEqual(to_utc_date(datetime(2024, 1, 7, 22, 0, tzinfo=minus_three)), date(2024, 1, 8))
        self.assertEqual(to_utc_date(date(2024, 1, 7)), date(2024, 1, 7))

    def test_day_bounds(self):
        start, end = day_bounds(date(2024, 1, 1), date(2024, 1, 7))
        self.assertEqual(start, datetime(2024, 1, 1, 0, 0, tzinfo=dt_timezone.utc))
        self.assertEqual(end, datetime.combine(date(2024, 1, 7), time.max, tzinfo=dt_timezone.utc))
        self.assertEqual(end.microsecond, 999999)


class ResolveInsightsPeriodTests(SimpleTestCase):
    def test_presets_end_today(self):
        p7 = resolve_insights_period("7", now=NOW)
        self.assertEqual((p7.start, p7.end), (date(2024, 3, 9), date(2024, 3, 15)))
        p30 = resolve_insights_period("30", now=NOW)
        self.assertEqual(p30.start, date(2024, 2, 15))
        self.assertEqual(p30.days, 30)
        self.assertFalse(p30.has_compare)

    def test_compare_is_previous_period_of_same_length(self):
        p = resolve_insights_period("7", now=NOW, compare=True)
        self.assertEqual(p.compare_end, date(2024, 3, 8))
        self.assertEqual(p.compare_start, date(2024, 3, 2))
        self.assertEqual((p.compare_end - p.compare_start).days + 1, p.days)

    def test_now_is_normalized_to_utc(self):
        late_local = datetime(2024, 3, 15, 23, 30, tzinfo=dt_timezone(timedelta(hours=-3)))
        self.assertEqual(resolve_insights_period("7", now=late_local).end, date(2024, 3, 16))

    def test_custom_range(self):
        p = resolve_insights_period("custom", date(2024, 1, 10), date(2024, 1, 19), now=NOW, compare=True)
        self.assertEqual((p.start, p.end), (date(2024, 1, 10), date(2024, 1, 19)))
        self.assertEqual((p.compare_start, p.compare_end), (date(2023, 12, 31), date(2024, 1, 9)))

    def test_custom_single_day(self):
        p = resolve_insights_period("custom", date(2024, 1, 10), date(2024, 1, 10), now=NOW, compare=True)
        self.assertEqual((p.compare_start, p.compare_end), (date(2024, 1, 9), date(2024, 1, 9)))

    def test_custom_errors(self):
        with self.assertRaisesMessage(ValueError, "custom_range_required"):
            resolve_insights_period("custom", date(2024, 1, 10), None, now=NOW)
        with self.assertRaisesMessage(ValueError, "start_after_end"):
            resolve_insights_period("custom", date(2024, 1, 11), date(2024, 1, 10), now=NOW)

    def test_long_custom_range_is_accepted_by_default(self):
        p = resolve_insights_period("custom", date(2023, 1, 1), date(2024, 12, 31), now=NOW)
        self.assertEqual(p.days, 731)

    @override_settings(INSIGHTS_MAX_CUSTOM_RANGE_DAYS=10)
    def test_custom_range_limit_is_opt_in(self):
        with self.assertRaisesMessage(ValueError, "range_too_large"):
            resolve_insights_period("custom", date(2024, 1, 1), date(2024, 1, 11), now=NOW)

    def test_unknown_period(self):
        with self.assertRaisesMessage(ValueError, "invalid_period"):
            resolve_insights_period("14", now=NOW)
