import os
import sys
import io
import unittest
from contextlib import redirect_stdout

import yaml

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from cli import main, parse_snapshot, score_snapshot
from config import load_scoring_config
from exceptions import InvalidInputError

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SNAPSHOT = os.path.join(ROOT, "sample_snapshot.yaml")


class CLITest(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.config = load_scoring_config()
        with open(SNAPSHOT, "r", encoding="utf-8") as f:
            cls.data = yaml.safe_load(f)

    def test_parse_snapshot_fills_estimates(self) -> None:
        parsed = parse_snapshot(self.data, self.config)
        bench = [pr for pr in parsed["personal_records"] if pr.exercise_id == "bench"][0]
        self.assertAlmostEqual(bench.estimated_1rm, 200 * (1 + 5 / 30))
        self.assertEqual(parsed["profile"].age_on(parsed["as_of"]), 30)
        self.assertEqual(len(parsed["sessions"]), 2)

    def test_missing_as_of(self) -> None:
        data = dict(self.data)
        data.pop("as_of")
        with self.assertRaises(InvalidInputError):
            parse_snapshot(data, self.config)

    def test_score_snapshot(self) -> None:
        result = score_snapshot(self.config, self.data)
        self.assertEqual(
            set(result["muscleScores"]), {"chest", "triceps", "quads", "glutes", "back"}
        )
        self.assertEqual(result["muscleScores"]["back"]["score"], 0)
        self.assertIn(result["rank"]["overall"], ["bronze", "silver", "gold", "diamond", "apex", "mythic"])
        self.assertEqual(result["stats"]["currentStreak"], 2)
        self.assertEqual(result["stats"]["total"], 2)
        self.assertEqual(result["muscleRecovery"]["back"], 1.0)
        self.assertLess(result["muscleRecovery"]["chest"], 1.0)
        self.assertEqual(result, score_snapshot(self.config, self.data))

    def test_rank_command(self) -> None:
        buf = io.StringIO()
        with redirect_stdout(buf):
            main(["rank", "30"])
        self.assertEqual(buf.getvalue().strip(), "silver (50% to next tier)")

    def test_e1rm_command(self) -> None:
        buf = io.StringIO()
        with redirect_stdout(buf):
            main(["e1rm", "200", "5"])
        self.assertEqual(buf.getvalue().strip(), "233.33 lb")

    def test_invalid_input_exits(self) -> None:
        with self.assertRaises(SystemExit):
            main(["e1rm", "200", "0"])

    def test_convert_command(self) -> None:
        buf = io.StringIO()
        with redirect_stdout(buf):
            main(["convert", "--weight", "100", "--unit", "kg"])
        self.assertEqual(buf.getvalue().strip(), "100.0 kg = 220.46 lb")


if __name__ == "__main__":
    unittest.main()
