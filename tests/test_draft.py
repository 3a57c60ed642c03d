import unittest
from collections import Counter

from factories import DEF, FWD, GK, MID, make_player

from fpl_advisor.config import EngineSettings
from fpl_advisor.data.models import Position
from fpl_advisor.optimizer.constraints import MAX_PER_TEAM, POSITION_QUOTAS
from fpl_advisor.optimizer.draft import DraftStatus, InfeasibleDraftError, SquadDrafter


def _market():
    """One player per position on each of ten teams; price is fixed by position."""
    players = []
    values = {}
    pid = 1
    for team in range(1, 11):
        for position in (GK, DEF, MID, FWD):
            price = 4.0 + (pid % 4)
            players.append(make_player(pid, position, team, price=price))
            values[pid] = price + (pid % 7) * 0.1
            pid += 1
    return players, values


class TestDrafter(unittest.TestCase):
    def setUp(self):
        self.drafter = SquadDrafter(EngineSettings())
        self.market, self.values = _market()

    def test_full_squad_under_budget(self):
        result = self.drafter.draft(self.market, self.values, budget=100.0)

        self.assertEqual(result.status, DraftStatus.COMPLETE)
        for position, quota in POSITION_QUOTAS.items():
            self.assertEqual(len(result.chosen[position]), quota)
        self.assertLessEqual(result.spend, 100.0 + 1e-9)
        counts = Counter(p.team_id for p in result.players)
        self.assertLessEqual(max(counts.values()), MAX_PER_TEAM)
        self.assertEqual(len({p.id for p in result.players}), 15)

    def test_generous_budget_takes_best_keepers(self):
        result = self.drafter.draft(self.market, self.values, budget=1000.0)

        keepers = [p for p in self.market if p.position == GK]
        best = sorted(keepers, key=lambda p: (-self.values[p.id], p.price, p.id))[:2]
        self.assertEqual([p.id for p in result.chosen[Position.GK]], [p.id for p in best])

    def test_exact_budget_is_enough(self):
        # Every legal squad from this market costs 87.0m
        result = self.drafter.draft(self.market, self.values, budget=87.0)

        self.assertTrue(result.is_complete)
        self.assertAlmostEqual(result.spend, 87.0)
        self.assertAlmostEqual(result.budget_left, 0.0)

    def test_skips_unaffordable_best_pick(self):
        market = [
            make_player(1, GK, team_id=1, price=6.0),
            make_player(2, GK, team_id=2, price=4.0),
            make_player(3, DEF, team_id=3, price=5.5),
            make_player(4, DEF, team_id=4, price=3.5),
        ]
        values = {1: 9.0, 2: 3.0, 3: 6.0, 4: 1.0}

        result = self.drafter.draft(market, values, budget=9.5, quotas={GK: 1, DEF: 1})

        self.assertTrue(result.is_complete)
        self.assertEqual([p.id for p in result.players], [1, 4])

    def test_greedy_leaves_room_for_open_slots(self):
        market = [
            make_player(1, GK, team_id=1, price=9.0),
            make_player(2, GK, team_id=2, price=4.0),
            make_player(3, DEF, team_id=3, price=5.0),
        ]
        values = {1: 10.0, 2: 1.0, 3: 5.0}

        result = self.drafter.draft(market, values, budget=10.0, quotas={GK: 1, DEF: 1})

        self.assertTrue(result.is_complete)
        self.assertEqual([p.id for p in result.players], [2, 3])
        self.assertAlmostEqual(result.spend, 9.0)

    def test_reserve_is_cheapest_fill_of_open_slots(self):
        by_price = {
            GK: [make_player(2, GK, 2, price=4.0), make_player(1, GK, 1, price=9.0)],
            DEF: [make_player(4, DEF, 4, price=4.5), make_player(3, DEF, 3, price=5.0)],
            MID: [],
            FWD: [],
        }
        chosen = {pos: [] for pos in Position}

        reserve = SquadDrafter.reserve(by_price, chosen, {GK: 1, DEF: 2}, by_price[GK][1])

        self.assertAlmostEqual(reserve, 9.5)

    def test_cheap_fill_runs_when_squad_cannot_complete(self):
        result = self.drafter.draft(self.market, self.values, budget=20.0)

        # Greedy keeps room for all 15 slots and takes nobody; cheap-fill
        # then spends the budget cheapest first
        self.assertEqual(len(result.chosen[Position.GK]), 2)
        self.assertEqual(len(result.chosen[Position.FWD]), 1)
        self.assertEqual(result.shortfall[Position.MID], 5)
        self.assertAlmostEqual(result.spend, 20.0)

    def test_ineligible_players_never_drafted(self):
        doubtful = make_player(999, MID, team_id=1, price=4.0, chance=79)
        values = dict(self.values)
        values[999] = 50.0

        result = self.drafter.draft(self.market + [doubtful], values, budget=100.0)

        self.assertNotIn(999, [p.id for p in result.players])

    def test_infeasible_reports_shortfall(self):
        result = self.drafter.draft(self.market, self.values, budget=20.0)

        self.assertEqual(result.status, DraftStatus.INFEASIBLE)
        self.assertTrue(result.shortfall)
        with self.assertRaises(InfeasibleDraftError) as ctx:
            result.require_complete()
        self.assertEqual(ctx.exception.shortfall, result.shortfall)

    def test_candidates_feed_lineup(self):
        result = self.drafter.draft(self.market, self.values, budget=100.0)
        candidates = result.candidates()

        self.assertEqual(len(candidates), 15)
        self.assertAlmostEqual(sum(c.score for c in candidates), result.total_ev)


if __name__ == "__main__":
    unittest.main()
