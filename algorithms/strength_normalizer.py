from typing import Optional

from exceptions import InvalidInputError
from scoring_schema import ScoringConfig
from .math_tools import MathTools
from .weight_converter import WeightConverter


class StrengthNormalizer:
    """Turn an estimated 1RM into a body-weight independent strength score."""

    @staticmethod
    def age_factor(age: Optional[float], config: ScoringConfig) -> float:
        """Return the age multiplier; 1.0 whenever age adjustment is disabled."""
        adjustment = config.age_adjustment
        if not adjustment.enabled or age is None:
            return 1.0
        ages = [f.age for f in adjustment.factors]
        factors = [f.factor for f in adjustment.factors]
        return MathTools.interpolate(ages, factors, float(age))

    @staticmethod
    def allometric_metric(
        estimated_1rm: float,
        body_weight: float,
        config: ScoringConfig,
        *,
        strength_standard: float = 1.0,
        age: Optional[float] = None,
    ) -> float:
        """Scale ``estimated_1rm`` by ``body_weight ** exponent``.

        Both weights must already be expressed in ``config.weight_unit``.
        """
        if estimated_1rm <= 0:
            raise InvalidInputError("estimated_1rm must be positive")
        if body_weight <= 0:
            raise InvalidInputError("body_weight must be positive")
        if strength_standard <= 0:
            raise InvalidInputError("strength_standard must be positive")
        scaled = estimated_1rm / body_weight ** config.allometric_exponent
        return scaled * strength_standard * StrengthNormalizer.age_factor(age, config)

    @staticmethod
    def percentile(metric: float, sex: str, config: ScoringConfig) -> float:
        """Map a strength metric onto the population percentile for ``sex``."""
        bands = config.bands_for(sex)
        return MathTools.interpolate(
            [b.metric_value for b in bands], [b.percentile for b in bands], metric
        )

    @staticmethod
    def percentile_to_score(percentile: float, config: ScoringConfig) -> float:
        anchors = config.percentile_scores
        return MathTools.interpolate(
            [a.percentile for a in anchors], [a.score for a in anchors], percentile
        )

    @classmethod
    def metric_to_score(cls, metric: float, sex: str, config: ScoringConfig) -> float:
        """Map a strength metric to a 0-100 score via the percentile bands.

        Metrics outside the configured bands clamp to the nearest edge.
        """
        if metric < 0:
            raise InvalidInputError("strength metric must be non-negative")
        score = cls.percentile_to_score(cls.percentile(metric, sex, config), config)
        return MathTools.clamp(score, 0.0, 100.0)

    @classmethod
    def strength_score(
        cls,
        estimated_1rm: float,
        body_weight: float,
        sex: str,
        config: ScoringConfig,
        *,
        age: Optional[float] = None,
        strength_standard: float = 1.0,
        lift_unit: Optional[str] = None,
        body_weight_unit: Optional[str] = None,
    ) -> float:
        """Return the undecayed 0-100 strength score for one lift."""
        unit = config.weight_unit
        e1rm = WeightConverter.convert(estimated_1rm, lift_unit or unit, unit)
        bw = WeightConverter.convert(body_weight, body_weight_unit or unit, unit)
        metric = cls.allometric_metric(
            e1rm, bw, config, strength_standard=strength_standard, age=age
        )
        return cls.metric_to_score(metric, sex, config)
