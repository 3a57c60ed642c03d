import unittest

from factories import OWNED, make_fixture, make_manager, make_player, round_robin

from fpl_advisor.config import ChipSettings, EngineSettings
from fpl_advisor.optimizer.presets import (
    Mode,
    apply_mode,
    auto_tune,
    auto_tune_chips,
    risky_starter_count,
    with_overrides,
)

GW = 10
TEAMS = list(range(1, 11))


def _players(risky_ids=()):
    return {
        pid: make_player(pid, pos, team, chance=50 if pid in risky_ids else None)
        for pid, (pos, team) in OWNED.items()
    }


def _dgw_fixtures():
    extra = [make_fixture(90, GW, 1, 3), make_fixture(91, GW, 2, 4)]
    return round_robin(GW, TEAMS) + extra


class TestModes(unittest.TestCase):
    def test_default_is_unchanged(self):
        base = EngineSettings()
        self.assertEqual(apply_mode(base, Mode.DEFAULT), base)

    def test_named_modes(self):
        pro = apply_mode(EngineSettings(), "pro")
        champ = apply_mode(EngineSettings(), Mode.CHAMP)

        self.assertEqual(pro.min_delta_single, 0.5)
        self.assertEqual(pro.hit_threshold, 5.0)
        self.assertEqual(champ.horizon, 3)
        self.assertEqual(champ.min_minutes_pct, 78)

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            apply_mode(EngineSettings(), "yolo")

    def test_overrides_are_validated(self):
        with self.assertRaises(ValueError):
            with_overrides(EngineSettings(), min_delta_single=3.0, min_delta_combo=1.0)


class TestAutoTune(unittest.TestCase):
    def test_risky_starters_raise_bars(self):
        base = EngineSettings()
        players = _players(risky_ids=(3, 4, 5))

        tuned = auto_tune(base, make_manager(), players, round_robin(GW, TEAMS), GW, TEAMS)

        self.assertEqual(risky_starter_count(make_manager(), players), 3)
        self.assertEqual(tuned.min_minutes_pct, 88)
        self.assertEqual(tuned.hit_threshold, 7.0)
        self.assertEqual(tuned.horizon, base.horizon)
        self.assertEqual(base.min_minutes_pct, 80)

    def test_one_risky_starter(self):
        tuned = auto_tune(
            EngineSettings(), make_manager(), _players(risky_ids=(8,)), round_robin(GW, TEAMS), GW, TEAMS
        )
        self.assertEqual(tuned.min_minutes_pct, 82)
        self.assertEqual(tuned.hit_threshold, 6.0)

    def test_double_heavy_week_looks_further(self):
        tuned = auto_tune(EngineSettings(), make_manager(), _players(), _dgw_fixtures(), GW, TEAMS)

        self.assertEqual(tuned.horizon, 3)
        self.assertEqual(tuned.dgw_damp, 0.92)
        self.assertEqual(tuned.hit_threshold, 4.0)
        self.assertEqual(tuned.min_minutes_pct, 77)

    def test_blank_heavy_week_looks_one_ahead(self):
        fixtures = round_robin(GW, [1, 2, 3, 4])
        tuned = auto_tune(EngineSettings(), make_manager(), _players(), fixtures, GW, TEAMS)

        self.assertEqual(tuned.horizon, 1)
        self.assertGreaterEqual(tuned.hit_threshold, 6.0)

    def test_unknown_players_not_counted(self):
        players = _players(risky_ids=(3,))
        del players[3]
        self.assertEqual(risky_starter_count(make_manager(), players), 0)


class TestAutoTuneChips(unittest.TestCase):
    def test_double_heavy(self):
        tuned = auto_tune_chips(ChipSettings(), _dgw_fixtures(), GW, TEAMS)
        self.assertEqual(tuned.tc_min, 7.0)
        self.assertEqual(tuned.fh_min, 12.0)

    def test_blank_heavy(self):
        tuned = auto_tune_chips(ChipSettings(), round_robin(GW, [1, 2, 3, 4]), GW, TEAMS)
        self.assertEqual(tuned.tc_min, 8.5)
        self.assertEqual(tuned.bb_min, 12.0)
        self.assertEqual(tuned.fh_min, 8.0)

    def test_normal_week_unchanged(self):
        base = ChipSettings()
        self.assertEqual(auto_tune_chips(base, round_robin(GW, TEAMS), GW, TEAMS), base)


if __name__ == "__main__":
    unittest.main()
