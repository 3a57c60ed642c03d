import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from fpl_advisor.config import ChipSettings, EngineSettings, Settings


class TestEngineSettings(unittest.TestCase):
    def test_defaults(self):
        settings = EngineSettings()
        self.assertEqual(settings.horizon, 2)
        self.assertEqual(settings.min_minutes_pct, 80)
        self.assertEqual(settings.dgw_damp, 0.94)
        self.assertEqual(settings.pair_universe, 140)
        self.assertEqual(settings.triple_universe, 90)
        self.assertFalse(settings.bench_guard)

    def test_combo_bar_below_single_rejected(self):
        with self.assertRaises(ValidationError):
            EngineSettings(min_delta_single=2.5, min_delta_combo=2.0)

    def test_out_of_range_rejected(self):
        with self.assertRaises(ValidationError):
            EngineSettings(min_minutes_pct=120)
        with self.assertRaises(ValidationError):
            EngineSettings(horizon=0)

    def test_environment_override(self):
        with patch.dict(os.environ, {"ENGINE_HORIZON": "4", "CHIP_TC_MIN": "9.5"}):
            self.assertEqual(EngineSettings().horizon, 4)
            self.assertEqual(ChipSettings().tc_min, 9.5)


class TestSettings(unittest.TestCase):
    def test_has_manager(self):
        with patch.dict(os.environ, {"FPL_MANAGER_ID": "1234"}):
            self.assertTrue(Settings().has_manager())
        with patch.dict(os.environ, {"FPL_MANAGER_ID": "0"}):
            self.assertFalse(Settings().has_manager())


if __name__ == "__main__":
    unittest.main()
