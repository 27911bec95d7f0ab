from __future__ import annotations

import datetime
from typing import Iterable

import pandas as pd

from algorithms import MathTools, WeightConverter
from models import ExerciseDefinition, MuscleGroup, SessionRecord, round_half_up


class StatisticsService:
    """Session volume and calendar statistics."""

    def __init__(self, weight_unit: str = "lb") -> None:
        self.weight_unit = weight_unit

    def _working_volume(self, session: SessionRecord) -> dict[str, float]:
        """Non-warmup volume per exercise id, in ``self.weight_unit``."""
        volumes: dict[str, float] = {}
        for log in session.exercises:
            pairs = [
                (s.reps, WeightConverter.convert(s.weight, s.weight_unit, self.weight_unit))
                for s in log.working_sets
            ]
            if pairs:
                volumes[log.exercise_id] = volumes.get(log.exercise_id, 0.0) + MathTools.volume(pairs)
        return volumes

    def session_volume(self, session: SessionRecord) -> float:
        return sum(self._working_volume(session).values())

    def session_muscle_impact(
        self,
        session: SessionRecord,
        exercises: dict[str, ExerciseDefinition],
        muscle_groups: Iterable[MuscleGroup],
    ) -> dict[str, int]:
        """Distribute each exercise's working volume over its muscles."""
        names = {m.id: m.name for m in muscle_groups}
        impact: dict[str, int] = {}
        for exercise_id, volume in self._working_volume(session).items():
            exercise = exercises.get(exercise_id)
            if exercise is None:
                continue
            for contrib in exercise.muscle_contributions:
                name = names.get(contrib.muscle_group_id, contrib.muscle_group_id)
                share = round_half_up(volume * contrib.contribution_percentage / 100)
                impact[name] = impact.get(name, 0) + share
        return impact

    def weekly_volume(self, sessions: Iterable[SessionRecord], as_of: datetime.datetime) -> float:
        """Working volume over the trailing seven days."""
        start = as_of - datetime.timedelta(days=7)
        return sum(
            self.session_volume(s) for s in sessions if start <= s.start_time <= as_of
        )

    def _frame(self, sessions: Iterable[SessionRecord]) -> pd.DataFrame:
        rows = []
        for s in sessions:
            duration = 0.0
            if s.end_time is not None:
                duration = (s.end_time - s.start_time).total_seconds() / 60
            rows.append(
                {
                    "date": s.start_time.date(),
                    "volume": self.session_volume(s),
                    "duration": duration,
                    "type": s.workout_type,
                }
            )
        return pd.DataFrame(rows, columns=["date", "volume", "duration", "type"])

    def daily_activity(self, sessions: Iterable[SessionRecord]) -> dict[str, dict]:
        """Per-day session count, volume, duration in minutes and workout types."""
        df = self._frame(sessions)
        if df.empty:
            return {}
        activity: dict[str, dict] = {}
        for day, group in df.groupby("date", sort=True):
            activity[day.isoformat()] = {
                "count": int(len(group)),
                "volume": float(group["volume"].sum()),
                "duration": float(group["duration"].sum()),
                "types": list(dict.fromkeys(t for t in group["type"] if t)),
            }
        return activity

    def activity_summary(
        self, sessions: Iterable[SessionRecord], as_of: datetime.date
    ) -> dict[str, int]:
        """Session totals for the current week (starting Sunday), month and overall.

        Sessions dated after ``as_of`` are not counted.
        """
        if isinstance(as_of, datetime.datetime):
            as_of = as_of.date()
        df = self._frame(sessions)
        df = df[df["date"] <= as_of]
        if df.empty:
            return {"this_week": 0, "this_month": 0, "total": 0}
        week_start = as_of - datetime.timedelta(days=(as_of.weekday() + 1) % 7)
        dates = pd.to_datetime(df["date"])
        this_week = int((dates >= pd.Timestamp(week_start)).sum())
        this_month = int(((dates.dt.year == as_of.year) & (dates.dt.month == as_of.month)).sum())
        return {"this_week": this_week, "this_month": this_month, "total": int(len(df))}
