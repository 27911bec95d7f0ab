import argparse
import datetime
import json
import logging
from typing import Optional

import yaml

from algorithms import MathTools, RankResolver, WeightConverter
from config import DEFAULT_CONFIG_PATH, load_scoring_config
from exceptions import ConfigurationError, InvalidInputError
from gamification_service import GamificationService
from models import (
    BodyProfile,
    ExerciseDefinition,
    ExerciseLog,
    MuscleContribution,
    MuscleGroup,
    PersonalRecord,
    SessionRecord,
    SetRecord,
)
from scoring_schema import ScoringConfig
from scoring_service import ScoringService
from stats_service import StatisticsService

logger = logging.getLogger(__name__)


def _as_datetime(value) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    return datetime.datetime.fromisoformat(str(value))


def _as_date(value) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value))


def parse_snapshot(data: dict, config: ScoringConfig, as_of: Optional[str] = None) -> dict:
    """Turn a snapshot document into engine input records."""
    raw_as_of = as_of or data.get("as_of")
    if not raw_as_of:
        raise InvalidInputError("snapshot needs an as_of date")
    when = _as_datetime(raw_as_of)
    prof = data.get("profile")
    profile = None
    if prof:
        birth = prof.get("birth_date")
        profile = BodyProfile(
            body_weight=prof.get("body_weight"),
            sex=prof.get("sex"),
            birth_date=_as_date(birth) if birth else None,
            training_age_years=float(prof.get("training_age_years", 1)),
            weight_unit=prof.get("weight_unit", config.weight_unit),
        )
    muscles = [MuscleGroup(str(m["id"]), m["name"]) for m in data.get("muscle_groups", [])]
    exercises = [
        ExerciseDefinition(
            id=str(e["id"]),
            name=e["name"],
            strength_standard=float(e.get("strength_standard", 1.0)),
            muscle_contributions=tuple(
                MuscleContribution(
                    str(c["muscle_group_id"]),
                    float(c["contribution_percentage"]),
                    bool(c.get("is_primary", False)),
                )
                for c in e.get("muscle_contributions", [])
            ),
        )
        for e in data.get("exercises", [])
    ]
    records = []
    for pr in data.get("personal_records", []):
        est = pr.get("estimated_1rm")
        if est is None:
            est = MathTools.estimate_1rm(pr["weight"], int(pr["reps"]), config.one_rep_max)
        records.append(
            PersonalRecord(
                exercise_id=str(pr["exercise_id"]),
                weight=float(pr["weight"]),
                reps=int(pr["reps"]),
                estimated_1rm=float(est),
                date=_as_date(pr["date"]),
                weight_unit=pr.get("weight_unit", config.weight_unit),
            )
        )
    sessions = [
        SessionRecord(
            id=str(s.get("id", i)),
            start_time=_as_datetime(s["start_time"]),
            end_time=_as_datetime(s["end_time"]) if s.get("end_time") else None,
            workout_type=s.get("workout_type", "custom"),
            exercises=tuple(
                ExerciseLog(
                    str(log["exercise_id"]),
                    tuple(
                        SetRecord(
                            weight=float(st["weight"]),
                            reps=int(st["reps"]),
                            rpe=st.get("rpe"),
                            is_warmup=bool(st.get("is_warmup", False)),
                            weight_unit=st.get("weight_unit", config.weight_unit),
                        )
                        for st in log.get("sets", [])
                    ),
                )
                for log in s.get("exercises", [])
            ),
        )
        for i, s in enumerate(data.get("sessions", []))
    ]
    return {
        "as_of": when,
        "profile": profile,
        "muscle_groups": muscles,
        "exercises": exercises,
        "personal_records": records,
        "sessions": sessions,
    }


def score_snapshot(config: ScoringConfig, data: dict, as_of: Optional[str] = None) -> dict:
    parsed = parse_snapshot(data, config, as_of)
    scoring = ScoringService(config)
    stats = StatisticsService(config.weight_unit)
    when = parsed["as_of"]
    snapshot = scoring.snapshot_from_sessions(
        when,
        parsed["muscle_groups"],
        parsed["exercises"],
        parsed["sessions"],
        parsed["personal_records"],
        parsed["profile"],
    )
    report = scoring.score(snapshot).to_dict()
    recovery = scoring.recovery(parsed["muscle_groups"], parsed["exercises"], parsed["sessions"], when)
    streak = GamificationService.workout_streak((s.start_time for s in parsed["sessions"]), when)
    report["muscleRecovery"] = {name: round(r.fraction, 3) for name, r in recovery.items()}
    report["stats"] = {
        "currentStreak": streak.current,
        "longestStreak": streak.longest,
        "weeklyVolume": round(stats.weekly_volume(parsed["sessions"], when), 2),
        **stats.activity_summary(parsed["sessions"], when),
    }
    return report


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Muscle rank scoring commands")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH)
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sc = sub.add_parser("score")
    sc.add_argument("--snapshot", required=True)
    sc.add_argument("--as-of", dest="as_of", default=None)

    rk = sub.add_parser("rank")
    rk.add_argument("score", type=float)

    est = sub.add_parser("e1rm")
    est.add_argument("weight", type=float)
    est.add_argument("reps", type=int)

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=["kg", "lb"], required=True)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "convert":
        if args.unit == "kg":
            print(f"{args.weight} kg = {WeightConverter.kg_to_lb(args.weight)} lb")
        else:
            print(f"{args.weight} lb = {WeightConverter.lb_to_kg(args.weight)} kg")
        return

    try:
        config = load_scoring_config(args.config)
        if args.cmd == "score":
            with open(args.snapshot, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            print(json.dumps(score_snapshot(config, data, args.as_of), indent=2))
        elif args.cmd == "rank":
            result = RankResolver.resolve(args.score, config)
            print(f"{result.tier.value} ({result.progress:.0f}% to next tier)")
        elif args.cmd == "e1rm":
            value = MathTools.estimate_1rm(args.weight, args.reps, config.one_rep_max)
            print(f"{value:.2f} {config.weight_unit}")
    except (ConfigurationError, InvalidInputError) as e:
        logger.error("%s", e)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
