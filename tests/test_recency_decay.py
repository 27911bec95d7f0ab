import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import RecencyDecay
from config import load_scoring_config
from exceptions import InvalidInputError


class RecencyDecayTest(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.settings = load_scoring_config().decay

    def test_no_decay_on_day_zero(self) -> None:
        self.assertEqual(RecencyDecay.apply(73.5, 0, self.settings), 73.5)

    def test_half_life(self) -> None:
        self.assertAlmostEqual(RecencyDecay.apply(80.0, 28, self.settings), 40.0)
        self.assertAlmostEqual(RecencyDecay.apply(80.0, 56, self.settings), 20.0)

    def test_monotone_non_increasing(self) -> None:
        prev = RecencyDecay.apply(90.0, 0, self.settings)
        for days in range(1, 400):
            cur = RecencyDecay.apply(90.0, days, self.settings)
            self.assertLessEqual(cur, prev)
            self.assertGreaterEqual(cur, 0.0)
            prev = cur

    def test_invalid_inputs(self) -> None:
        with self.assertRaises(InvalidInputError):
            RecencyDecay.apply(50.0, -1, self.settings)
        with self.assertRaises(InvalidInputError):
            RecencyDecay.apply(-5.0, 3, self.settings)

    def test_days_between(self) -> None:
        pr_date = datetime.date(2024, 5, 1)
        self.assertEqual(RecencyDecay.days_between(pr_date, datetime.date(2024, 5, 29)), 28)
        self.assertEqual(
            RecencyDecay.days_between(pr_date, datetime.datetime(2024, 5, 2, 23, 59)), 1
        )
        self.assertEqual(RecencyDecay.days_between(pr_date, datetime.date(2024, 4, 1)), 0)


if __name__ == "__main__":
    unittest.main()
