from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date

from analytics.insights_calc import WeeklyAggregate, round_half_up
from analytics.range_utils import iso_week_start

WEEKLY_MINUTES_GOAL_MAX = 2000
WEEKLY_TRAININGS_GOAL_MAX = 14


@dataclass(frozen=True)
class AthleteGoals:
    weekly_minutes_goal: int
    weekly_trainings_goal: int


DEFAULT_GOALS = AthleteGoals(weekly_minutes_goal=150, weekly_trainings_goal=3)


@dataclass(frozen=True)
class WeeklyProgress:
    current_minutes: int
    current_trainings: int
    goal_minutes: int
    goal_trainings: int
    minutes_progress: int
    trainings_progress: int
    is_complete: bool

    def as_payload(self) -> dict:
        return {
            "currentMinutes": self.current_minutes,
            "currentTrainings": self.current_trainings,
            "goalMinutes": self.goal_minutes,
            "goalTrainings": self.goal_trainings,
            "minutesProgress": self.minutes_progress,
            "trainingsProgress": self.trainings_progress,
            "isComplete": self.is_complete,
        }


def _clamp_int(raw, default: int, upper: int) -> int:
    try:
        value = int(float(raw))
    except (TypeError, ValueError, OverflowError):
        value = default
    return max(0, min(upper, value))


def normalize_goals(raw: Mapping | None) -> AthleteGoals:
    """
    Metas semanales saneadas: minutos 0..2000, entrenamientos 0..14.
    Faltantes, no numéricos o no finitos ("inf", "1e400") caen al default.
    """
    raw = raw or {}
    minutes = raw.get("weeklyMinutesGoal")
    trainings = raw.get("weeklyTrainingsGoal")
    return AthleteGoals(
        weekly_minutes_goal=_clamp_int(
            DEFAULT_GOALS.weekly_minutes_goal if minutes in (None, "") else minutes,
            DEFAULT_GOALS.weekly_minutes_goal,
            WEEKLY_MINUTES_GOAL_MAX,
        ),
        weekly_trainings_goal=_clamp_int(
            DEFAULT_GOALS.weekly_trainings_goal if trainings in (None, "") else trainings,
            DEFAULT_GOALS.weekly_trainings_goal,
            WEEKLY_TRAININGS_GOAL_MAX,
        ),
    )


def _percent(current: int, goal: int) -> int:
    return int(max(0, min(100, round_half_up(current / max(1, goal) * 100))))


def compute_weekly_progress(
    goals: AthleteGoals,
    weekly_aggregates: Sequence[WeeklyAggregate],
    *,
    today: date,
) -> WeeklyProgress:
    """Progreso de la semana ISO que contiene `today` (0 si no hubo entrenamientos)."""
    week_start = iso_week_start(today)
    current = next((w for w in weekly_aggregates if w.week_start == week_start), None)
    minutes = current.minutes if current else 0
    trainings = current.trainings_count if current else 0

    return WeeklyProgress(
        current_minutes=minutes,
        current_trainings=trainings,
        goal_minutes=goals.weekly_minutes_goal,
        goal_trainings=goals.weekly_trainings_goal,
        minutes_progress=_percent(minutes, goals.weekly_minutes_goal),
        trainings_progress=_percent(trainings, goals.weekly_trainings_goal),
        is_complete=minutes >= goals.weekly_minutes_goal and trainings >= goals.weekly_trainings_goal,
    )
