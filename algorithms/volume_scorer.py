import datetime
from typing import Iterable, Optional

from exceptions import InvalidInputError
from models import ExerciseDefinition, SessionRecord, SetRecord, round_half_up
from scoring_schema import ScoringConfig, VolumeLandmarks
from .math_tools import MathTools

WEEK = datetime.timedelta(days=7)


class VolumeScorer:
    """Score weekly hard-set volume against MEV/MAV/MRV landmarks."""

    @staticmethod
    def is_hard_set(s: SetRecord, min_rpe: float) -> bool:
        """A working set at or above ``min_rpe``; sets without RPE count as hard."""
        if s.is_warmup:
            return False
        return not s.rpe or s.rpe >= min_rpe

    @staticmethod
    def landmarks_for(training_age_years: float, config: ScoringConfig) -> VolumeLandmarks:
        if training_age_years < 0:
            raise InvalidInputError("training_age_years must be non-negative")
        eligible = [b for b in config.volume_landmarks.values() if b.min_years <= training_age_years]
        return max(eligible, key=lambda b: b.min_years)

    @classmethod
    def score(cls, weekly_hard_sets: float, training_age_years: float, config: ScoringConfig) -> float:
        """Return a 0-100 volume score.

        Up to MRV the curve is piecewise linear through (0, 0), MEV, MAV and
        MRV. Past MRV the ``above_mrv_policy`` either holds the MRV score
        (``plateau``) or removes ``decline_per_set`` points per extra set down
        to ``decline_floor`` (``decline``).
        """
        if weekly_hard_sets < 0:
            raise InvalidInputError("weekly_hard_sets must be non-negative")
        sets = round_half_up(weekly_hard_sets)
        lm = cls.landmarks_for(training_age_years, config)
        curve = config.volume_curve
        if sets <= lm.mrv:
            return MathTools.interpolate(
                [0.0, lm.mev, lm.mav, lm.mrv],
                [0.0, curve.score_at_mev, curve.score_at_mav, curve.score_at_mrv],
                float(sets),
            )
        if curve.above_mrv_policy == "plateau":
            return curve.score_at_mrv
        declined = curve.score_at_mrv - (sets - lm.mrv) * curve.decline_per_set
        return max(curve.decline_floor, declined)

    @classmethod
    def weekly_hard_sets(
        cls,
        sessions: Iterable[SessionRecord],
        exercises: dict[str, ExerciseDefinition],
        muscle_group_id: str,
        as_of: datetime.datetime,
        config: ScoringConfig,
        window: Optional[datetime.timedelta] = None,
    ) -> float:
        """Contribution-weighted hard sets for one muscle over the trailing week."""
        start = as_of - (window or WEEK)
        min_contrib = config.aggregation.min_contribution
        total = 0.0
        for session in sessions:
            if not start <= session.start_time <= as_of:
                continue
            for log in session.exercises:
                exercise = exercises.get(log.exercise_id)
                if exercise is None:
                    continue
                contrib = exercise.contribution_to(muscle_group_id)
                if contrib is None or contrib.contribution_percentage < min_contrib:
                    continue
                hard = sum(1 for s in log.sets if cls.is_hard_set(s, config.hard_set_min_rpe))
                total += hard * contrib.contribution_percentage / 100
        return total
