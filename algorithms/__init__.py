from .math_tools import MathTools
from .weight_converter import WeightConverter
from .strength_normalizer import StrengthNormalizer
from .recency_decay import RecencyDecay
from .volume_scorer import VolumeScorer
from .evidence_gate import EvidenceGate
from .rank_resolver import RankResolver
from .recovery import RecoveryModel

__all__ = [
    "MathTools",
    "WeightConverter",
    "StrengthNormalizer",
    "RecencyDecay",
    "VolumeScorer",
    "EvidenceGate",
    "RankResolver",
    "RecoveryModel",
]
