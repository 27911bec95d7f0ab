from __future__ import annotations

import datetime
import logging
from typing import Iterable, Optional

from algorithms import (
    EvidenceGate,
    MathTools,
    RankResolver,
    RecencyDecay,
    RecoveryModel,
    StrengthNormalizer,
    VolumeScorer,
)
from models import (
    BodyProfile,
    ExerciseDefinition,
    MuscleGroup,
    MuscleScore,
    PersonalRecord,
    RankTier,
    RecoveryState,
    ScoreChange,
    ScoreReport,
    SessionRecord,
    TrainingSnapshot,
)
from scoring_schema import ScoringConfig

logger = logging.getLogger(__name__)


class ScoringService:
    """Compute per-muscle and overall rank scores from a training snapshot."""

    def __init__(self, config: ScoringConfig) -> None:
        self.config = config

    @staticmethod
    def best_personal_records(history: Iterable[PersonalRecord]) -> dict[str, PersonalRecord]:
        """Return the PR with the highest estimated 1RM for each exercise."""
        best: dict[str, PersonalRecord] = {}
        for pr in history:
            if pr.estimated_1rm <= 0:
                continue
            current = best.get(pr.exercise_id)
            if current is None or pr.estimated_1rm > current.estimated_1rm:
                best[pr.exercise_id] = pr
        return best

    def exercise_strength_score(
        self,
        pr: PersonalRecord,
        exercise: ExerciseDefinition,
        profile: BodyProfile,
        as_of: datetime.date,
    ) -> float:
        """Decayed, normalized strength score for one exercise PR."""
        raw = StrengthNormalizer.strength_score(
            pr.estimated_1rm,
            profile.body_weight,
            profile.sex,
            self.config,
            age=profile.age_on(as_of),
            strength_standard=exercise.strength_standard or 1.0,
            lift_unit=pr.weight_unit,
            body_weight_unit=profile.weight_unit,
        )
        days = RecencyDecay.days_between(pr.date, as_of)
        return RecencyDecay.apply(raw, days, self.config.decay)

    def contributing_exercises(
        self, muscle: MuscleGroup, exercises: Iterable[ExerciseDefinition]
    ) -> list[tuple[ExerciseDefinition, float]]:
        threshold = self.config.aggregation.min_contribution
        found = []
        for exercise in exercises:
            contrib = exercise.contribution_to(muscle.id)
            if contrib is not None and contrib.contribution_percentage >= threshold:
                found.append((exercise, contrib.contribution_percentage))
        return found

    def muscle_strength_score(
        self,
        muscle: MuscleGroup,
        exercises: Iterable[ExerciseDefinition],
        best_prs: dict[str, PersonalRecord],
        profile: Optional[BodyProfile],
        as_of: datetime.date,
    ) -> float:
        """Contribution-weighted strength score for ``muscle``.

        The weighted mean is scaled by ``min(1, max_contribution / full_credit_contribution)`` so
        a muscle only ever trained as a minor contributor cannot reach the
        top of the range. Exercises without a PR, or an incomplete profile,
        carry no weight at all.
        """
        if profile is None or not profile.complete:
            return 0.0
        scores: list[float] = []
        weights: list[float] = []
        max_contribution = 0.0
        for exercise, contribution in self.contributing_exercises(muscle, exercises):
            pr = best_prs.get(exercise.id)
            if pr is None:
                continue
            scores.append(self.exercise_strength_score(pr, exercise, profile, as_of))
            weights.append(contribution / 100)
            max_contribution = max(max_contribution, contribution)
        if not weights:
            return 0.0
        scale = min(1.0, max_contribution / self.config.aggregation.full_credit_contribution)
        return MathTools.clamp(MathTools.weighted_mean(scores, weights) * scale, 0.0, 100.0)

    def volume_score(self, weekly_hard_sets: float, profile: Optional[BodyProfile]) -> float:
        training_age = profile.training_age_years if profile is not None else 1.0
        return VolumeScorer.score(weekly_hard_sets, training_age, self.config)

    def score_muscle(
        self,
        snapshot: TrainingSnapshot,
        muscle: MuscleGroup,
        best_prs: Optional[dict[str, PersonalRecord]] = None,
    ) -> MuscleScore:
        if best_prs is None:
            best_prs = self.best_personal_records(snapshot.personal_records)
        strength = self.muscle_strength_score(
            muscle, snapshot.exercises, best_prs, snapshot.profile, snapshot.as_of
        )
        volume = self.volume_score(snapshot.weekly_hard_sets.get(muscle.id, 0.0), snapshot.profile)
        combined = MathTools.muscle_composite(strength, volume, self.config.composite_weights)
        gated = EvidenceGate.apply_counts(combined, snapshot.session_counts, self.config)
        final = MathTools.clamp(gated, 0.0, 100.0)
        logger.debug(
            "%s: strength=%.2f volume=%.2f combined=%.2f final=%.2f",
            muscle.name,
            strength,
            volume,
            combined,
            final,
        )
        return MuscleScore(
            muscle_group=muscle,
            strength_score=strength,
            volume_score=volume,
            combined_score=combined,
            score=final,
            rank=RankResolver.resolve(final, self.config),
        )

    def overall_score(self, scores: Iterable[float]) -> float:
        """Arithmetic mean over every muscle group, untrained ones included."""
        values = list(scores)
        if not values:
            return 0.0
        return MathTools.clamp(sum(values) / len(values), 0.0, 100.0)

    def score(self, snapshot: TrainingSnapshot) -> ScoreReport:
        best_prs = self.best_personal_records(snapshot.personal_records)
        muscles = tuple(self.score_muscle(snapshot, m, best_prs) for m in snapshot.muscle_groups)
        overall = self.overall_score(m.score for m in muscles)
        return ScoreReport(
            muscles=muscles,
            overall_score=overall,
            overall_rank=RankResolver.resolve(overall, self.config),
        )

    def snapshot_from_sessions(
        self,
        as_of: datetime.datetime,
        muscle_groups: Iterable[MuscleGroup],
        exercises: Iterable[ExerciseDefinition],
        sessions: Iterable[SessionRecord],
        personal_records: Iterable[PersonalRecord] = (),
        profile: Optional[BodyProfile] = None,
    ) -> TrainingSnapshot:
        """Derive weekly hard sets and session counts from raw sessions."""
        sessions = list(sessions)
        muscle_groups = tuple(muscle_groups)
        exercises = tuple(exercises)
        by_id = {e.id: e for e in exercises}
        hard_sets = {
            m.id: VolumeScorer.weekly_hard_sets(sessions, by_id, m.id, as_of, self.config)
            for m in muscle_groups
        }
        return TrainingSnapshot(
            as_of=as_of,
            muscle_groups=muscle_groups,
            exercises=exercises,
            personal_records=tuple(personal_records),
            profile=profile,
            weekly_hard_sets=hard_sets,
            session_counts=EvidenceGate.session_counts((s.start_time for s in sessions), as_of),
        )

    def trained_muscles(
        self, session: SessionRecord, exercises: dict[str, ExerciseDefinition]
    ) -> set[str]:
        """Muscle group ids meaningfully loaded by ``session``."""
        threshold = self.config.aggregation.min_contribution
        trained = set()
        for log in session.exercises:
            exercise = exercises.get(log.exercise_id)
            if exercise is None:
                continue
            for contrib in exercise.muscle_contributions:
                if contrib.contribution_percentage >= threshold:
                    trained.add(contrib.muscle_group_id)
        return trained

    @staticmethod
    def score_changes(
        before: ScoreReport, after: ScoreReport, muscle_group_ids: Iterable[str]
    ) -> dict[str, ScoreChange]:
        """Compare two reports for the given muscles, keyed by muscle name."""
        old = {m.muscle_group.id: m for m in before.muscles}
        new = {m.muscle_group.id: m for m in after.muscles}
        changes: dict[str, ScoreChange] = {}
        for mid in sorted(muscle_group_ids):
            if mid not in new:
                continue
            after_score = new[mid]
            prev = old.get(mid)
            b = prev.display_score if prev else 0
            rank_before = prev.rank.tier if prev else RankTier.BRONZE
            a = after_score.display_score
            rank_after = after_score.rank.tier
            changes[after_score.muscle_group.name] = ScoreChange(
                before=b,
                after=a,
                change=a - b,
                rank_before=rank_before,
                rank_after=rank_after,
                rank_up=rank_after != rank_before and a > b,
            )
        return changes

    def recovery(
        self,
        muscle_groups: Iterable[MuscleGroup],
        exercises: Iterable[ExerciseDefinition],
        sessions: Iterable[SessionRecord],
        as_of: datetime.datetime,
    ) -> dict[str, RecoveryState]:
        """Recovery state per muscle name; untrained muscles are fully recovered."""
        sessions = list(sessions)
        by_id = {e.id: e for e in exercises}
        return {
            m.name.lower(): RecoveryModel.muscle_recovery(
                sessions, by_id, m.id, as_of, self.config.recovery
            )
            for m in muscle_groups
        }
