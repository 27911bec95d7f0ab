import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models import (
    ExerciseDefinition,
    ExerciseLog,
    MuscleContribution,
    MuscleGroup,
    SessionRecord,
    SetRecord,
)
from stats_service import StatisticsService

BENCH = ExerciseDefinition(
    "bench",
    "Bench Press",
    muscle_contributions=(
        MuscleContribution("chest", 70, True),
        MuscleContribution("triceps", 30),
    ),
)
MUSCLES = (MuscleGroup("chest", "Chest"), MuscleGroup("triceps", "Triceps"))


def _session(sid: str, start: datetime.datetime, minutes: int = 60, wtype: str = "strength") -> SessionRecord:
    return SessionRecord(
        sid,
        start,
        end_time=start + datetime.timedelta(minutes=minutes),
        workout_type=wtype,
        exercises=(
            ExerciseLog("bench", (SetRecord(50, 10, is_warmup=True), SetRecord(100, 10))),
        ),
    )


class StatisticsServiceTest(unittest.TestCase):
    def setUp(self) -> None:
        self.stats = StatisticsService("lb")

    def test_session_volume_skips_warmups(self) -> None:
        session = _session("s1", datetime.datetime(2024, 6, 3, 18, 0))
        self.assertEqual(self.stats.session_volume(session), 1000.0)

    def test_muscle_impact(self) -> None:
        session = _session("s1", datetime.datetime(2024, 6, 3, 18, 0))
        impact = self.stats.session_muscle_impact(session, {"bench": BENCH}, MUSCLES)
        self.assertEqual(impact, {"Chest": 700, "Triceps": 300})

    def test_weekly_volume(self) -> None:
        sessions = [
            _session("s1", datetime.datetime(2024, 6, 3, 18, 0)),
            _session("s2", datetime.datetime(2024, 5, 20, 18, 0)),
        ]
        self.assertEqual(self.stats.weekly_volume(sessions, datetime.datetime(2024, 6, 5, 12, 0)), 1000.0)

    def test_kg_sets_converted(self) -> None:
        session = SessionRecord(
            "s1",
            datetime.datetime(2024, 6, 3),
            exercises=(ExerciseLog("bench", (SetRecord(100, 1, weight_unit="kg"),)),),
        )
        self.assertAlmostEqual(self.stats.session_volume(session), 220.462)

    def test_daily_activity(self) -> None:
        sessions = [
            _session("s1", datetime.datetime(2024, 6, 3, 7, 0), 45, "strength"),
            _session("s2", datetime.datetime(2024, 6, 3, 18, 0), 30, "cardio"),
            _session("s3", datetime.datetime(2024, 6, 4, 18, 0), 60, "strength"),
        ]
        activity = self.stats.daily_activity(sessions)
        self.assertEqual(list(activity), ["2024-06-03", "2024-06-04"])
        day = activity["2024-06-03"]
        self.assertEqual(day["count"], 2)
        self.assertEqual(day["volume"], 2000.0)
        self.assertEqual(day["duration"], 75.0)
        self.assertEqual(day["types"], ["strength", "cardio"])
        self.assertEqual(self.stats.daily_activity([]), {})

    def test_activity_summary(self) -> None:
        sessions = [
            _session("s1", datetime.datetime(2024, 6, 1, 18, 0)),
            _session("s2", datetime.datetime(2024, 6, 3, 18, 0)),
            _session("s3", datetime.datetime(2024, 5, 20, 18, 0)),
        ]
        summary = self.stats.activity_summary(sessions, datetime.date(2024, 6, 5))
        self.assertEqual(summary, {"this_week": 1, "this_month": 2, "total": 3})
        self.assertEqual(
            self.stats.activity_summary([], datetime.date(2024, 6, 5)),
            {"this_week": 0, "this_month": 0, "total": 0},
        )

    def test_activity_summary_ignores_future_sessions(self) -> None:
        sessions = [
            _session("s1", datetime.datetime(2024, 6, 3, 18, 0)),
            _session("s2", datetime.datetime(2024, 6, 6, 18, 0)),
            _session("s3", datetime.datetime(2024, 7, 2, 18, 0)),
        ]
        summary = self.stats.activity_summary(sessions, datetime.date(2024, 6, 5))
        self.assertEqual(summary, {"this_week": 1, "this_month": 1, "total": 1})
        self.assertEqual(
            self.stats.activity_summary(sessions[1:], datetime.date(2024, 6, 5)),
            {"this_week": 0, "this_month": 0, "total": 0},
        )


if __name__ == "__main__":
    unittest.main()
