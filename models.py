from __future__ import annotations

import datetime
import enum
import math
from dataclasses import dataclass, field
from typing import Optional


class RankTier(enum.Enum):
    """Ordered rank tiers, lowest first."""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    DIAMOND = "diamond"
    APEX = "apex"
    MYTHIC = "mythic"

    @property
    def order(self) -> int:
        return list(RankTier).index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RankTier):
            return NotImplemented
        return self.order < other.order


@dataclass(frozen=True)
class BodyProfile:
    body_weight: Optional[float] = None
    sex: Optional[str] = None
    birth_date: Optional[datetime.date] = None
    training_age_years: float = 1.0
    weight_unit: str = "lb"

    def age_on(self, as_of: datetime.date) -> Optional[int]:
        """Return completed years of age on ``as_of``."""
        if self.birth_date is None:
            return None
        if isinstance(as_of, datetime.datetime):
            as_of = as_of.date()
        age = as_of.year - self.birth_date.year
        if (as_of.month, as_of.day) < (self.birth_date.month, self.birth_date.day):
            age -= 1
        return age

    @property
    def complete(self) -> bool:
        """Whether the profile carries everything strength scoring needs."""
        return bool(self.body_weight) and bool(self.sex) and self.birth_date is not None


@dataclass(frozen=True)
class MuscleGroup:
    id: str
    name: str


@dataclass(frozen=True)
class MuscleContribution:
    muscle_group_id: str
    contribution_percentage: float
    is_primary: bool = False


@dataclass(frozen=True)
class ExerciseDefinition:
    id: str
    name: str
    strength_standard: float = 1.0
    muscle_contributions: tuple[MuscleContribution, ...] = ()

    def contribution_to(self, muscle_group_id: str) -> Optional[MuscleContribution]:
        for contrib in self.muscle_contributions:
            if contrib.muscle_group_id == muscle_group_id:
                return contrib
        return None


@dataclass(frozen=True)
class SetRecord:
    weight: float
    reps: int
    rpe: Optional[float] = None
    is_warmup: bool = False
    weight_unit: str = "lb"


@dataclass(frozen=True)
class ExerciseLog:
    exercise_id: str
    sets: tuple[SetRecord, ...] = ()

    @property
    def working_sets(self) -> list[SetRecord]:
        return [s for s in self.sets if not s.is_warmup]


@dataclass(frozen=True)
class SessionRecord:
    id: str
    start_time: datetime.datetime
    end_time: Optional[datetime.datetime] = None
    workout_type: str = "custom"
    exercises: tuple[ExerciseLog, ...] = ()


@dataclass(frozen=True)
class PersonalRecord:
    exercise_id: str
    weight: float
    reps: int
    estimated_1rm: float
    date: datetime.date
    weight_unit: str = "lb"


@dataclass(frozen=True)
class SessionCounts:
    last_28_days: int = 0
    last_56_days: int = 0


@dataclass(frozen=True)
class TrainingSnapshot:
    """Everything the engine needs to score one user at one point in time."""

    as_of: datetime.date
    muscle_groups: tuple[MuscleGroup, ...]
    exercises: tuple[ExerciseDefinition, ...]
    personal_records: tuple[PersonalRecord, ...] = ()
    profile: Optional[BodyProfile] = None
    weekly_hard_sets: dict[str, float] = field(default_factory=dict)
    session_counts: SessionCounts = SessionCounts()


@dataclass(frozen=True)
class RankResult:
    tier: RankTier
    progress: float


@dataclass(frozen=True)
class MuscleScore:
    muscle_group: MuscleGroup
    strength_score: float
    volume_score: float
    combined_score: float
    score: float
    rank: RankResult

    @property
    def display_score(self) -> int:
        return round_half_up(self.score)


@dataclass(frozen=True)
class ScoreReport:
    muscles: tuple[MuscleScore, ...]
    overall_score: float
    overall_rank: RankResult

    def by_name(self) -> dict[str, MuscleScore]:
        return {m.muscle_group.name: m for m in self.muscles}

    def to_dict(self) -> dict:
        return {
            "rank": {
                "overall": self.overall_rank.tier.value,
                "score": int(self.overall_score),
                "progress": round_half_up(self.overall_rank.progress),
            },
            "muscleScores": {
                m.muscle_group.name.lower(): {
                    "score": m.display_score,
                    "rank": m.rank.tier.value,
                    "strength": round(m.strength_score, 2),
                    "volume": round(m.volume_score, 2),
                }
                for m in self.muscles
            },
        }


@dataclass(frozen=True)
class ScoreChange:
    before: int
    after: int
    change: int
    rank_before: RankTier
    rank_after: RankTier
    rank_up: bool


@dataclass(frozen=True)
class NewPersonalRecord:
    exercise_id: str
    exercise_name: str
    weight: float
    reps: int
    estimated_1rm: float
    improvement: Optional[float]

    def as_record(self, date: datetime.date, weight_unit: str = "lb") -> PersonalRecord:
        return PersonalRecord(
            self.exercise_id, self.weight, self.reps, self.estimated_1rm, date, weight_unit
        )


@dataclass(frozen=True)
class RecoveryState:
    fraction: float
    state: str
    hours_since: Optional[float] = None


@dataclass(frozen=True)
class StreakSummary:
    current: int
    longest: int


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int(math.floor(value + 0.5))
