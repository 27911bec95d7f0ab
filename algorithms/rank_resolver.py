from exceptions import InvalidInputError
from models import RankResult, RankTier
from scoring_schema import ScoringConfig
from .math_tools import MathTools


class RankResolver:
    """Resolve scores into rank tiers."""

    @staticmethod
    def tier(score: float, config: ScoringConfig) -> RankTier:
        if not 0.0 <= score <= 100.0:
            raise InvalidInputError(f"score must be within [0, 100], got {score}")
        resolved = RankTier.BRONZE
        for name, band in config.rank_tiers.items():
            if score >= band.min:
                resolved = RankTier(name)
        return resolved

    @classmethod
    def resolve(cls, score: float, config: ScoringConfig) -> RankResult:
        """Return the tier for ``score`` and the progress towards the next tier."""
        tier = cls.tier(score, config)
        names = list(config.rank_tiers)
        idx = names.index(tier.value)
        current = config.tier_range(tier.value)
        if idx + 1 >= len(names):
            return RankResult(tier, 100.0)
        next_min = config.tier_range(names[idx + 1]).min
        progress = (score - current.min) / (next_min - current.min) * 100
        return RankResult(tier, MathTools.clamp(progress, 0.0, 100.0))
