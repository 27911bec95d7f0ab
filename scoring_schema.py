from __future__ import annotations

from typing import Literal, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from exceptions import ConfigurationError

SUPPORTED_VERSIONS = {1}
TIER_ORDER = ("bronze", "silver", "gold", "diamond", "apex", "mythic")
SEXES = ("male", "female")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TierRange(_Frozen):
    min: float = Field(ge=0, le=100)
    max: float = Field(ge=0, le=100)
    color: Optional[str] = None

    @model_validator(mode="after")
    def _ordered(self) -> "TierRange":
        if self.min >= self.max:
            raise ValueError("tier min must be below max")
        return self


class PercentileBand(_Frozen):
    percentile: float = Field(ge=0, le=100)
    metric_value: float = Field(ge=0)


class PercentileScore(_Frozen):
    percentile: float = Field(ge=0, le=100)
    score: float = Field(ge=0, le=100)


class OneRepMaxSettings(_Frozen):
    formula: Literal["epley", "brzycki"] = "epley"
    rep_ceiling: int = Field(ge=1)

    @model_validator(mode="after")
    def _safe_ceiling(self) -> "OneRepMaxSettings":
        # Brzycki divides by zero at 37 reps
        if self.formula == "brzycki" and self.rep_ceiling > 36:
            raise ValueError("brzycki rep_ceiling must not exceed 36")
        return self


class AgeFactor(_Frozen):
    age: float = Field(ge=0)
    factor: float = Field(gt=0)


class AgeAdjustment(_Frozen):
    enabled: bool
    factors: list[AgeFactor] = []

    @model_validator(mode="after")
    def _factors_present(self) -> "AgeAdjustment":
        if self.enabled and not self.factors:
            raise ValueError("age_adjustment.factors required when enabled")
        ages = [f.age for f in self.factors]
        if ages != sorted(ages) or len(set(ages)) != len(ages):
            raise ValueError("age_adjustment.factors must be strictly increasing by age")
        return self


class VolumeLandmarks(_Frozen):
    min_years: float = Field(ge=0)
    mev: float = Field(gt=0)
    mav: float = Field(gt=0)
    mrv: float = Field(gt=0)

    @model_validator(mode="after")
    def _ordered(self) -> "VolumeLandmarks":
        if not self.mev < self.mav < self.mrv:
            raise ValueError("volume landmarks must satisfy mev < mav < mrv")
        return self


class VolumeCurve(_Frozen):
    score_at_mev: float = Field(ge=0, le=100)
    score_at_mav: float = Field(ge=0, le=100)
    score_at_mrv: float = Field(ge=0, le=100)
    above_mrv_policy: Literal["plateau", "decline"]
    decline_per_set: float = Field(default=0.0, ge=0)
    decline_floor: float = Field(default=0.0, ge=0, le=100)

    @model_validator(mode="after")
    def _monotone(self) -> "VolumeCurve":
        if not self.score_at_mev <= self.score_at_mav <= self.score_at_mrv:
            raise ValueError("volume curve scores must be non-decreasing up to MRV")
        if self.decline_floor > self.score_at_mrv:
            raise ValueError("decline_floor must not exceed score_at_mrv")
        return self


class DecaySettings(_Frozen):
    half_life_days: float = Field(gt=0)


class CompositeWeights(_Frozen):
    strength: float = Field(ge=0, le=1)
    volume: float = Field(ge=0, le=1)

    @model_validator(mode="after")
    def _sum_to_one(self) -> "CompositeWeights":
        if abs(self.strength + self.volume - 1.0) > 1e-9:
            raise ValueError("composite weights must sum to 1")
        return self


class GateStep(_Frozen):
    min_sessions: int = Field(ge=0)
    max_score: float = Field(ge=0, le=100)


class AggregationSettings(_Frozen):
    min_contribution: float = Field(ge=0, le=100)
    full_credit_contribution: float = Field(gt=0, le=100)


class RecoverySettings(_Frozen):
    base_hours: float = Field(gt=0)
    rpe_reference: float = Field(ge=0, le=10)
    hours_per_rpe_point: float = Field(ge=0)
    default_rpe: float = Field(ge=0, le=10)
    min_contribution: float = Field(ge=0, le=100)


class ScoringConfig(_Frozen):
    """Validated, immutable scoring parameters."""

    version: int
    weight_unit: Literal["kg", "lb"]
    rank_tiers: dict[str, TierRange]
    percentile_bands: dict[str, list[PercentileBand]]
    percentile_scores: list[PercentileScore]
    one_rep_max: OneRepMaxSettings
    allometric_exponent: float = Field(gt=0, le=1)
    age_adjustment: AgeAdjustment
    volume_landmarks: dict[str, VolumeLandmarks]
    volume_curve: VolumeCurve
    hard_set_min_rpe: float = Field(ge=0, le=10)
    decay: DecaySettings
    composite_weights: CompositeWeights
    evidence_gating: dict[int, list[GateStep]]
    aggregation: AggregationSettings
    recovery: RecoverySettings

    @model_validator(mode="after")
    def _check_version(self) -> "ScoringConfig":
        if self.version not in SUPPORTED_VERSIONS:
            raise ValueError(f"unsupported config version {self.version}")
        return self

    @model_validator(mode="after")
    def _check_tiers(self) -> "ScoringConfig":
        if tuple(self.rank_tiers) != TIER_ORDER:
            raise ValueError(f"rank_tiers must list {', '.join(TIER_ORDER)} in order")
        ranges = list(self.rank_tiers.values())
        if ranges[0].min != 0 or ranges[-1].max != 100:
            raise ValueError("rank_tiers must cover 0 to 100")
        for lower, upper in zip(ranges, ranges[1:]):
            if lower.max != upper.min:
                raise ValueError("rank_tiers must be contiguous")
        return self

    @model_validator(mode="after")
    def _check_percentiles(self) -> "ScoringConfig":
        for sex in SEXES:
            bands = self.percentile_bands.get(sex)
            if not bands or len(bands) < 2:
                raise ValueError(f"percentile_bands.{sex} needs at least two bands")
            _require_increasing([b.percentile for b in bands], f"percentile_bands.{sex} percentiles", strict=True)
            _require_increasing([b.metric_value for b in bands], f"percentile_bands.{sex} metric values")
        anchors = self.percentile_scores
        if len(anchors) < 2:
            raise ValueError("percentile_scores needs at least two anchors")
        _require_increasing([a.percentile for a in anchors], "percentile_scores percentiles", strict=True)
        _require_increasing([a.score for a in anchors], "percentile_scores scores")
        silver = self.rank_tiers["silver"]
        median_score = float(
            np.interp(50.0, [a.percentile for a in anchors], [a.score for a in anchors])
        )
        if abs(median_score - (silver.min + silver.max) / 2) > 1e-6:
            raise ValueError("the 50th percentile must score at the middle of the silver tier")
        return self

    @model_validator(mode="after")
    def _check_landmarks(self) -> "ScoringConfig":
        if not any(b.min_years == 0 for b in self.volume_landmarks.values()):
            raise ValueError("volume_landmarks needs a bracket with min_years 0")
        return self

    @model_validator(mode="after")
    def _check_gating(self) -> "ScoringConfig":
        for window in (28, 56):
            if window not in self.evidence_gating:
                raise ValueError(f"evidence_gating missing {window}-day window")
        for window, steps in self.evidence_gating.items():
            if not steps or steps[0].min_sessions != 0:
                raise ValueError(f"evidence_gating.{window} must start at min_sessions 0")
            _require_increasing([s.min_sessions for s in steps], f"evidence_gating.{window} sessions", strict=True)
            _require_increasing([s.max_score for s in steps], f"evidence_gating.{window} scores")
        return self

    def tier_range(self, tier: str) -> TierRange:
        return self.rank_tiers[tier]

    def bands_for(self, sex: str) -> list[PercentileBand]:
        try:
            return self.percentile_bands[sex]
        except KeyError:
            raise ConfigurationError(f"no percentile bands for sex {sex!r}") from None

    def gate_steps(self, window_days: int) -> list[GateStep]:
        try:
            return self.evidence_gating[window_days]
        except KeyError:
            raise ConfigurationError(f"no evidence gating steps for {window_days}-day window") from None


def _require_increasing(values: list[float], label: str, strict: bool = False) -> None:
    for a, b in zip(values, values[1:]):
        if b < a or (strict and b == a):
            raise ValueError(f"{label} must be {'strictly ' if strict else ''}increasing")


def validate_scoring_config(data: dict) -> ScoringConfig:
    if not isinstance(data, dict):
        raise ConfigurationError("scoring config must be a mapping")
    try:
        return ScoringConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(str(e))
