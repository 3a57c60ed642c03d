import unittest

from factories import MID, make_manager, make_player, make_teams, owned_players, round_robin

from fpl_advisor.config import ChipSettings, EngineSettings
from fpl_advisor.data.models import Snapshot
from fpl_advisor.optimizer import AdviceOutcome, Mode, NoManagerError, SquadAdvisor, create_advisor

GW = 10
TEAMS = list(range(1, 11))


def _snapshot(with_manager=True):
    star = make_player(100, MID, team_id=6, price=5.0, ppg=8.0, name="Star")
    return Snapshot(
        players=tuple(owned_players() + [star]),
        teams=tuple(make_teams()),
        fixtures=tuple(round_robin(GW, TEAMS) + round_robin(GW + 1, TEAMS, start_id=20)),
        manager=make_manager(bank=0.5) if with_manager else None,
        next_gameweek=GW,
    )


class TestSquadAdvisor(unittest.TestCase):
    def setUp(self):
        self.snapshot = _snapshot()
        self.advisor = SquadAdvisor(self.snapshot, EngineSettings(), ChipSettings())

    def test_single_upgrade_recommended(self):
        advice = self.advisor.advise_transfers()

        self.assertEqual(advice.outcome, AdviceOutcome.UPGRADE)
        self.assertEqual(advice.recommended, "B")
        move = advice.recommended_plan.moves[0]
        self.assertEqual((move.out_id, move.in_id), (9, 100))
        self.assertIs(self.advisor.advise_transfers(), advice)

    def test_lineup_after_plan_leaves_squad_untouched(self):
        current = self.advisor.best_lineup("A")
        after = self.advisor.best_lineup("B")

        current_ids = {c.player_id for c in current.starters + current.bench}
        after_ids = {c.player_id for c in after.starters + after.bench}
        self.assertIn(9, current_ids)
        self.assertIn(100, after_ids)
        self.assertNotIn(9, after_ids)
        self.assertEqual(after.captain_id, 100)
        self.assertIn(9, self.snapshot.manager.player_ids)
        self.assertGreater(after.total, current.total)

    def test_explain(self):
        lines = self.advisor.explain("B")
        self.assertEqual(len(lines), 1)
        self.assertIn("Star", lines[0])

    def test_draft_uses_derived_budget(self):
        result = self.advisor.draft()

        # No deadline value known: 15 x 5.0m list prices plus 0.5m bank
        self.assertAlmostEqual(result.budget, 75.5)
        self.assertTrue(result.is_complete)
        self.assertIn(100, [p.id for p in result.players])
        self.assertIsNotNone(self.advisor.drafted_lineup(result))

    def test_chip_entry_points(self):
        self.assertIsNotNone(self.advisor.chip_advice())
        self.assertEqual(len(self.advisor.bench_boost_check().reports), 4)
        self.assertEqual(self.advisor.wildcard_advice().gameweek, GW)

    def test_market_only_snapshot(self):
        advisor = SquadAdvisor(_snapshot(with_manager=False))

        with self.assertRaises(NoManagerError):
            advisor.advise_transfers()
        self.assertEqual(advisor.budget(), EngineSettings().default_budget)


class TestRepeatability(unittest.TestCase):
    def setUp(self):
        # Teams 6, 8 and 10 play away in both weeks, so these tie with 100 on EV
        tied = (
            make_player(101, MID, team_id=8, price=4.5, ppg=8.0),
            make_player(102, MID, team_id=10, price=4.5, ppg=8.0),
        )
        base = _snapshot()
        self.snapshot = base.model_copy(update={"players": base.players + tied})

    def test_identical_inputs_give_identical_advice(self):
        first = SquadAdvisor(self.snapshot)
        second = SquadAdvisor(self.snapshot)

        self.assertEqual(first.advise_transfers().plans, second.advise_transfers().plans)
        self.assertEqual(first.best_lineup("B"), second.best_lineup("B"))
        self.assertEqual(first.draft(), second.draft())

    def test_ties_break_on_price_then_id(self):
        values = SquadAdvisor(self.snapshot).values()
        self.assertEqual(values[100], values[101])
        self.assertEqual(values[101], values[102])

        result = SquadAdvisor(self.snapshot).draft()
        self.assertEqual([p.id for p in result.chosen[MID]][:3], [101, 102, 100])


class TestCreateAdvisor(unittest.TestCase):
    def test_mode_applied(self):
        advisor = create_advisor(_snapshot(), mode=Mode.PRO)
        self.assertEqual(advisor.settings.hit_threshold, 5.0)

    def test_auto_tune_keeps_base_settings(self):
        base = EngineSettings()
        advisor = create_advisor(_snapshot(), settings=base, auto=True)

        self.assertEqual(base.horizon, 2)
        self.assertEqual(advisor.settings.min_minutes_pct, 80)
        self.assertEqual(advisor.chip_settings, ChipSettings())


if __name__ == "__main__":
    unittest.main()
