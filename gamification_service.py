import datetime
import logging
from typing import Iterable, Optional

from algorithms import MathTools, WeightConverter
from models import (
    ExerciseDefinition,
    NewPersonalRecord,
    PersonalRecord,
    SessionRecord,
    SetRecord,
    StreakSummary,
)
from scoring_schema import ScoringConfig
from scoring_service import ScoringService

logger = logging.getLogger(__name__)


class GamificationService:
    """Personal records and workout streaks."""

    def __init__(self, config: ScoringConfig) -> None:
        self.config = config

    def set_1rm(self, s: SetRecord, unit: Optional[str] = None) -> float:
        """Estimated 1RM of a set expressed in ``unit`` (defaults to the set's)."""
        est = MathTools.estimate_1rm(s.weight, s.reps, self.config.one_rep_max)
        return WeightConverter.convert(est, s.weight_unit, unit or s.weight_unit)

    def best_set(self, sets: Iterable[SetRecord], unit: str) -> tuple[Optional[SetRecord], float]:
        """Return the working set with the highest estimated 1RM."""
        best: Optional[SetRecord] = None
        best_e1rm = 0.0
        for s in sets:
            if s.is_warmup or s.weight <= 0 or s.reps < 1:
                continue
            est = self.set_1rm(s, unit)
            if est > best_e1rm:
                best, best_e1rm = s, est
        return best, best_e1rm

    def detect_new_prs(
        self,
        session: SessionRecord,
        exercises: dict[str, ExerciseDefinition],
        existing: Iterable[PersonalRecord],
        unit: Optional[str] = None,
    ) -> list[NewPersonalRecord]:
        """Return the PRs set in ``session``.

        An exercise sets a PR when its best working set beats the best
        previously recorded estimated 1RM, or when no PR existed yet.
        """
        unit = unit or self.config.weight_unit
        best_prs = ScoringService.best_personal_records(existing)
        found: list[NewPersonalRecord] = []
        for log in session.exercises:
            best, e1rm = self.best_set(log.sets, unit)
            if best is None:
                continue
            previous = best_prs.get(log.exercise_id)
            prev_e1rm = None
            if previous is not None:
                prev_e1rm = WeightConverter.convert(previous.estimated_1rm, previous.weight_unit, unit)
                if e1rm <= prev_e1rm:
                    continue
            exercise = exercises.get(log.exercise_id)
            found.append(
                NewPersonalRecord(
                    exercise_id=log.exercise_id,
                    exercise_name=exercise.name if exercise else log.exercise_id,
                    weight=WeightConverter.convert(best.weight, best.weight_unit, unit),
                    reps=best.reps,
                    estimated_1rm=e1rm,
                    improvement=None if prev_e1rm is None else e1rm - prev_e1rm,
                )
            )
            logger.debug("new PR on %s: %.2f", log.exercise_id, e1rm)
        return found

    @staticmethod
    def workout_streak(
        workout_dates: Iterable[datetime.date], as_of: datetime.date
    ) -> StreakSummary:
        """Return current and record workout streak lengths.

        The current streak only counts when the latest workout was on
        ``as_of`` or the day before.
        """
        if isinstance(as_of, datetime.datetime):
            as_of = as_of.date()
        days = sorted(
            {d.date() if isinstance(d, datetime.datetime) else d for d in workout_dates}
        )
        days = [d for d in days if d <= as_of]
        if not days:
            return StreakSummary(current=0, longest=0)
        record = 1
        run = 1
        for i in range(1, len(days)):
            if (days[i] - days[i - 1]).days == 1:
                run += 1
            else:
                record = max(record, run)
                run = 1
        record = max(record, run)
        current = run if (as_of - days[-1]).days <= 1 else 0
        return StreakSummary(current=current, longest=max(record, current))

    @staticmethod
    def streak_after_session(
        previous_start: Optional[datetime.datetime],
        new_start: datetime.datetime,
        current_streak: int,
    ) -> int:
        """Update a running streak when a new session is logged."""
        if previous_start is None:
            return 1
        gap = (new_start.date() - previous_start.date()).days
        if gap == 0:
            return current_streak or 1
        if gap == 1:
            return (current_streak or 0) + 1
        return 1
