from datetime import date, timedelta

from django.test import SimpleTestCase

from analytics.goals import DEFAULT_GOALS, AthleteGoals, compute_weekly_progress, normalize_goals
from analytics.insights_calc import WeeklyAggregate


def week(start, minutes, count):
    return WeeklyAggregate(
        week_start=start, week_end=start + timedelta(days=6), minutes=minutes, load=minutes, trainings_count=count
    )


class NormalizeGoalsTests(SimpleTestCase):
    def test_defaults(self):
        self.assertEqual(normalize_goals(None), DEFAULT_GOALS)
        self.assertEqual(DEFAULT_GOALS, AthleteGoals(weekly_minutes_goal=150, weekly_trainings_goal=3))

    def test_clamps_and_truncates(self):
        goals = normalize_goals({"weeklyMinutesGoal": "5000", "weeklyTrainingsGoal": "2.7"})
        self.assertEqual(goals, AthleteGoals(weekly_minutes_goal=2000, weekly_trainings_goal=2))
        goals = normalize_goals({"weeklyMinutesGoal": -3, "weeklyTrainingsGoal": 20})
        self.assertEqual(goals, AthleteGoals(weekly_minutes_goal=0, weekly_trainings_goal=14))

    def test_non_numeric_falls_back_to_default(self):
        goals = normalize_goals({"weeklyMinutesGoal": "abc", "weeklyTrainingsGoal": ""})
        self.assertEqual(goals, DEFAULT_GOALS)

    def test_non_finite_falls_back_to_default(self):
        for raw in ("inf", "-inf", "1e400", "nan"):
            with self.subTest(raw=raw):
                goals = normalize_goals({"weeklyMinutesGoal": raw, "weeklyTrainingsGoal": raw})
                self.assertEqual(goals, DEFAULT_GOALS)


class WeeklyProgressTests(SimpleTestCase):
    def test_progress_for_current_iso_week(self):
        weekly = [week(date(2024, 1, 1), 200, 4), week(date(2024, 1, 8), 90, 2)]
        progress = compute_weekly_progress(DEFAULT_GOALS, weekly, today=date(2024, 1, 10))

        self.assertEqual(progress.current_minutes, 90)
        self.assertEqual(progress.current_trainings, 2)
        self.assertEqual(progress.minutes_progress, 60)
        self.assertEqual(progress.trainings_progress, 67)
        self.assertFalse(progress.is_complete)

    def test_progress_clamps_at_100(self):
        progress = compute_weekly_progress(DEFAULT_GOALS, [week(date(2024, 1, 8), 300, 5)], today=date(2024, 1, 14))
        self.assertEqual((progress.minutes_progress, progress.trainings_progress), (100, 100))
        self.assertTrue(progress.is_complete)

    def test_no_trainings_this_week(self):
        progress = compute_weekly_progress(DEFAULT_GOALS, [week(date(2024, 1, 1), 300, 5)], today=date(2024, 1, 8))
        self.assertEqual(progress.as_payload()["currentMinutes"], 0)
        self.assertEqual(progress.minutes_progress, 0)

    def test_zero_goal_does_not_divide_by_zero(self):
        goals = AthleteGoals(weekly_minutes_goal=0, weekly_trainings_goal=0)
        progress = compute_weekly_progress(goals, [], today=date(2024, 1, 8))
        self.assertEqual(progress.minutes_progress, 0)
        self.assertTrue(progress.is_complete)
