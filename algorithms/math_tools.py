import logging
import math
from typing import Iterable, List

import numpy as np

from exceptions import InvalidInputError
from scoring_schema import CompositeWeights, OneRepMaxSettings

logger = logging.getLogger(__name__)


class MathTools:
    """Provides essential mathematical utilities for lift scoring."""

    EPLEY_DIVISOR: float = 30.0
    BRZYCKI_A: float = 1.0278
    BRZYCKI_B: float = 0.0278

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        return max(min_value, min(value, max_value))

    @staticmethod
    def _validate_set(weight: float, reps: int) -> None:
        if isinstance(reps, bool) or not isinstance(reps, (int, np.integer)):
            raise InvalidInputError("reps must be an integer")
        if reps < 1:
            raise InvalidInputError("reps must be at least 1")
        if not math.isfinite(weight) or weight <= 0:
            raise InvalidInputError("weight must be positive")

    @classmethod
    def epley_1rm(cls, weight: float, reps: int) -> float:
        """Return the estimated one-rep max using the Epley formula."""
        return weight * (1 + reps / cls.EPLEY_DIVISOR)

    @classmethod
    def brzycki_1rm(cls, weight: float, reps: int) -> float:
        """Return the estimated one-rep max using the Brzycki formula."""
        return weight / (cls.BRZYCKI_A - cls.BRZYCKI_B * reps)

    @classmethod
    def estimate_1rm(cls, weight: float, reps: int, settings: OneRepMaxSettings) -> float:
        """Estimate a one-rep max from a single working set.

        Reps above ``settings.rep_ceiling`` are clamped to the ceiling before
        the formula is applied, so high-rep sets never reach the singular
        point of Brzycki and never inflate Epley without bound. A single
        rep returns ``weight`` unchanged.
        """
        cls._validate_set(weight, reps)
        if reps == 1:
            return float(weight)
        rep_term = min(int(reps), settings.rep_ceiling)
        if settings.formula == "brzycki":
            est = cls.brzycki_1rm(weight, rep_term)
        else:
            est = cls.epley_1rm(weight, rep_term)
        if not math.isfinite(est) or est < weight:
            logger.warning(
                "%s 1RM estimate %r invalid for %s x %s, using raw weight",
                settings.formula,
                est,
                weight,
                reps,
            )
            return float(weight)
        return float(est)

    @staticmethod
    def volume(sets: list[tuple[int, float]]) -> float:
        """Compute training volume as the sum of reps times weight."""
        vol = 0.0
        for reps, weight in sets:
            vol += reps * weight
        return vol

    @staticmethod
    def interpolate(x: List[float], y: List[float], x_new: float) -> float:
        """Piecewise-linear interpolation, clamped to the end points."""
        if not x or not y:
            raise InvalidInputError("interpolation needs at least one point")
        if len(x) == 1:
            return float(y[0])
        return float(np.interp(x_new, x, y))

    @staticmethod
    def weighted_mean(values: Iterable[float], weights: Iterable[float]) -> float:
        """Return the weighted mean, or 0.0 when the weights sum to zero."""
        v = np.array(list(values), dtype=float)
        w = np.array(list(weights), dtype=float)
        total = float(np.sum(w))
        if v.size == 0 or total <= 0:
            return 0.0
        return float(np.sum(v * w) / total)

    @staticmethod
    def muscle_composite(
        strength_score: float, volume_score: float, weights: CompositeWeights
    ) -> float:
        """Blend strength and volume scores into one muscle score."""
        for label, value in (("strength_score", strength_score), ("volume_score", volume_score)):
            if not 0.0 <= value <= 100.0:
                raise InvalidInputError(f"{label} must be within [0, 100], got {value}")
        combined = strength_score * weights.strength + volume_score * weights.volume
        return MathTools.clamp(combined, 0.0, 100.0)
