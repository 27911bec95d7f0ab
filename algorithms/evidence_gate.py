import datetime
import logging
from typing import Iterable

from exceptions import InvalidInputError
from models import SessionCounts
from scoring_schema import ScoringConfig

logger = logging.getLogger(__name__)

SHORT_WINDOW = 28
LONG_WINDOW = 56


class EvidenceGate:
    """Cap scores that are not yet backed by enough recent training."""

    @staticmethod
    def effective_window(counts: SessionCounts) -> tuple[int, int]:
        """Return ``(sessions, window_days)`` for the more favourable window.

        Ties go to the 56-day window.
        """
        if counts.last_28_days < 0 or counts.last_56_days < 0:
            raise InvalidInputError("session counts must be non-negative")
        sessions = max(counts.last_28_days, counts.last_56_days)
        window = LONG_WINDOW if counts.last_56_days >= counts.last_28_days else SHORT_WINDOW
        return sessions, window

    @staticmethod
    def ceiling(session_count: int, window_days: int, config: ScoringConfig) -> float:
        if session_count < 0:
            raise InvalidInputError("session_count must be non-negative")
        allowed = 0.0
        for step in config.gate_steps(window_days):
            if session_count >= step.min_sessions:
                allowed = step.max_score
        return allowed

    @classmethod
    def apply(cls, score: float, session_count: int, window_days: int, config: ScoringConfig) -> float:
        """Return ``score`` capped at the ceiling; never raises a score."""
        cap = cls.ceiling(session_count, window_days, config)
        if score > cap:
            logger.debug(
                "evidence gate capped %.2f to %.2f (%d sessions / %d days)",
                score,
                cap,
                session_count,
                window_days,
            )
            return cap
        return score

    @classmethod
    def apply_counts(cls, score: float, counts: SessionCounts, config: ScoringConfig) -> float:
        sessions, window = cls.effective_window(counts)
        return cls.apply(score, sessions, window, config)

    @staticmethod
    def session_counts(
        start_times: Iterable[datetime.datetime], as_of: datetime.datetime
    ) -> SessionCounts:
        """Count sessions started within the trailing 28 and 56 days."""
        short_start = as_of - datetime.timedelta(days=SHORT_WINDOW)
        long_start = as_of - datetime.timedelta(days=LONG_WINDOW)
        short = long = 0
        for start in start_times:
            if start > as_of:
                continue
            if start >= long_start:
                long += 1
            if start >= short_start:
                short += 1
        return SessionCounts(last_28_days=short, last_56_days=long)
