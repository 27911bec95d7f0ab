import datetime
from typing import Iterable, Optional

from exceptions import InvalidInputError
from models import ExerciseDefinition, RecoveryState, SessionRecord
from scoring_schema import RecoverySettings
from .math_tools import MathTools

MIN_RECOVERY_HOURS = 1.0


class RecoveryModel:
    """Estimate how recovered a muscle is since it was last trained."""

    @staticmethod
    def recovery_hours(rpe: float, settings: RecoverySettings) -> float:
        hours = settings.base_hours + (rpe - settings.rpe_reference) * settings.hours_per_rpe_point
        return max(MIN_RECOVERY_HOURS, hours)

    @classmethod
    def state(
        cls, hours_since: float, settings: RecoverySettings, rpe: Optional[float] = None
    ) -> RecoveryState:
        if hours_since < 0:
            raise InvalidInputError("hours_since must be non-negative")
        needed = cls.recovery_hours(settings.default_rpe if rpe is None else rpe, settings)
        fraction = MathTools.clamp(hours_since / needed, 0.0, 1.0)
        if fraction >= 1.0:
            label = "recovered"
        elif fraction >= 0.5:
            label = "recovering"
        else:
            label = "fatigued"
        return RecoveryState(fraction=fraction, state=label, hours_since=hours_since)

    @staticmethod
    def last_trained(
        sessions: Iterable[SessionRecord],
        exercises: dict[str, ExerciseDefinition],
        muscle_group_id: str,
        as_of: datetime.datetime,
        settings: RecoverySettings,
    ) -> Optional[datetime.datetime]:
        """Start time of the latest session that loaded the muscle substantially."""
        latest = None
        for session in sessions:
            if session.start_time > as_of:
                continue
            for log in session.exercises:
                exercise = exercises.get(log.exercise_id)
                contrib = exercise.contribution_to(muscle_group_id) if exercise else None
                if contrib and contrib.contribution_percentage >= settings.min_contribution:
                    if latest is None or session.start_time > latest:
                        latest = session.start_time
                    break
        return latest

    @classmethod
    def muscle_recovery(
        cls,
        sessions: Iterable[SessionRecord],
        exercises: dict[str, ExerciseDefinition],
        muscle_group_id: str,
        as_of: datetime.datetime,
        settings: RecoverySettings,
    ) -> RecoveryState:
        last = cls.last_trained(sessions, exercises, muscle_group_id, as_of, settings)
        if last is None:
            return RecoveryState(fraction=1.0, state="recovered")
        hours = (as_of - last).total_seconds() / 3600
        return cls.state(hours, settings)
