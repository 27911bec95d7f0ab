import datetime

from exceptions import InvalidInputError
from scoring_schema import DecaySettings


class RecencyDecay:
    """Exponential half-life decay of scores backed by ageing records."""

    @staticmethod
    def days_between(record_date: datetime.date, as_of: datetime.date) -> int:
        """Whole days from ``record_date`` to ``as_of``; future records count as 0."""
        if isinstance(record_date, datetime.datetime):
            record_date = record_date.date()
        if isinstance(as_of, datetime.datetime):
            as_of = as_of.date()
        return max(0, (as_of - record_date).days)

    @staticmethod
    def apply(score: float, days_since_pr: float, settings: DecaySettings) -> float:
        if score < 0:
            raise InvalidInputError("score must be non-negative")
        if days_since_pr < 0:
            raise InvalidInputError("days_since_pr must be non-negative")
        if days_since_pr == 0:
            return float(score)
        decayed = score * 2 ** (-days_since_pr / settings.half_life_days)
        return max(0.0, decayed)
