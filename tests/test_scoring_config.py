import os
import sys
import copy
import unittest

from pydantic import ValidationError

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import ScoringConfigFile, default_config_path, load_scoring_config
from exceptions import ConfigurationError
from scoring_schema import validate_scoring_config


class ScoringConfigTest(unittest.TestCase):
    def setUp(self) -> None:
        self.raw = ScoringConfigFile().read()
        self.yaml_path = "test_scoring.yaml"

    def tearDown(self) -> None:
        if os.path.exists(self.yaml_path):
            os.remove(self.yaml_path)

    def _mutated(self) -> dict:
        return copy.deepcopy(self.raw)

    def test_default_config_loads(self) -> None:
        config = load_scoring_config()
        self.assertEqual(config.version, 1)
        self.assertAlmostEqual(config.allometric_exponent, 0.67)
        self.assertEqual(config.decay.half_life_days, 28)
        self.assertEqual(list(config.rank_tiers)[0], "bronze")
        self.assertEqual(set(config.evidence_gating), {28, 56})

    def test_config_is_immutable(self) -> None:
        config = load_scoring_config()
        with self.assertRaises(ValidationError):
            config.allometric_exponent = 0.5

    def test_missing_file(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_scoring_config("does_not_exist.yaml")

    def test_default_path_falls_back_to_installed_copy(self) -> None:
        with open(self.yaml_path, "w", encoding="utf-8") as f:
            f.write("version: 1\n")
        self.assertEqual(default_config_path(("does_not_exist.yaml", self.yaml_path)), self.yaml_path)
        self.assertEqual(
            default_config_path(("does_not_exist.yaml", "missing_too.yaml")), "does_not_exist.yaml"
        )
        self.assertTrue(os.path.exists(default_config_path()))

    def test_empty_file(self) -> None:
        with open(self.yaml_path, "w", encoding="utf-8") as f:
            f.write("")
        with self.assertRaises(ConfigurationError):
            load_scoring_config(self.yaml_path)

    def test_missing_section_fails_fast(self) -> None:
        for key in ("rank_tiers", "percentile_bands", "decay", "evidence_gating", "allometric_exponent"):
            data = self._mutated()
            del data[key]
            with self.assertRaises(ConfigurationError, msg=key):
                validate_scoring_config(data)

    def test_unknown_version(self) -> None:
        data = self._mutated()
        data["version"] = 2
        with self.assertRaises(ConfigurationError):
            validate_scoring_config(data)

    def test_tiers_must_be_contiguous(self) -> None:
        data = self._mutated()
        data["rank_tiers"]["gold"]["min"] = 45
        with self.assertRaises(ConfigurationError):
            validate_scoring_config(data)

    def test_tiers_must_cover_full_range(self) -> None:
        data = self._mutated()
        data["rank_tiers"]["mythic"]["max"] = 95
        with self.assertRaises(ConfigurationError):
            validate_scoring_config(data)

    def test_median_lands_mid_silver(self) -> None:
        data = self._mutated()
        data["percentile_scores"][1]["score"] = 25
        with self.assertRaises(ConfigurationError):
            validate_scoring_config(data)

    def test_brzycki_ceiling_below_singularity(self) -> None:
        data = self._mutated()
        data["one_rep_max"] = {"formula": "brzycki", "rep_ceiling": 37}
        with self.assertRaises(ConfigurationError):
            validate_scoring_config(data)
        data["one_rep_max"] = {"formula": "brzycki", "rep_ceiling": 20}
        self.assertEqual(validate_scoring_config(data).one_rep_max.formula, "brzycki")

    def test_gating_window_required(self) -> None:
        data = self._mutated()
        del data["evidence_gating"][56]
        with self.assertRaises(ConfigurationError):
            validate_scoring_config(data)

    def test_gating_starts_at_zero_sessions(self) -> None:
        data = self._mutated()
        data["evidence_gating"][28] = data["evidence_gating"][28][1:]
        with self.assertRaises(ConfigurationError):
            validate_scoring_config(data)

    def test_landmarks_ordered(self) -> None:
        data = self._mutated()
        data["volume_landmarks"]["novice"]["mav"] = 3
        with self.assertRaises(ConfigurationError):
            validate_scoring_config(data)

    def test_composite_weights_sum(self) -> None:
        data = self._mutated()
        data["composite_weights"] = {"strength": 0.8, "volume": 0.3}
        with self.assertRaises(ConfigurationError):
            validate_scoring_config(data)

    def test_non_mapping_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            validate_scoring_config(["not", "a", "mapping"])

    def test_unknown_sex_lookup(self) -> None:
        config = load_scoring_config()
        with self.assertRaises(ConfigurationError):
            config.bands_for("unknown")
        with self.assertRaises(ConfigurationError):
            config.gate_steps(14)


if __name__ == "__main__":
    unittest.main()
