import unittest

from factories import MID, make_fixture, make_player

from fpl_advisor.optimizer.reasons import (
    AlreadyOwned,
    InsufficientBank,
    Rejection,
    RejectionCode,
    SamePlayer,
    TeamLimit,
    explain_move,
    minutes_label,
    summarize,
    tally,
)
from fpl_advisor.optimizer.transfers import TransferMove

NAMES = dict(out_id=1, in_id=2, out_name="Out", in_name="In")


class TestRejections(unittest.TestCase):
    def test_codes_and_text(self):
        bank = InsufficientBank(**NAMES, shortfall=0.7)
        self.assertEqual(bank.code, RejectionCode.INSUFFICIENT_BANK)
        self.assertIn("0.7m", bank.text)
        self.assertTrue(bank.text.startswith("Out -> In"))
        self.assertIn("team 6", TeamLimit(**NAMES, team_id=6).detail())

    def test_only_concrete_rejections_carry_a_code(self):
        self.assertEqual(SamePlayer(**NAMES).code, RejectionCode.SAME_PLAYER)
        self.assertIn("equals OUT", SamePlayer(**NAMES).text)
        self.assertFalse(hasattr(Rejection(**NAMES), "code"))

    def test_summary_most_common_first(self):
        rejections = [AlreadyOwned(**NAMES)] * 3 + [TeamLimit(**NAMES, team_id=4)] * 5
        self.assertEqual(tally(rejections)[RejectionCode.TEAM_LIMIT], 5)
        self.assertEqual(
            summarize(rejections),
            ["team limit >3: 5x", "already-owned targets: 3x"],
        )
        self.assertEqual(summarize([]), [])


class TestExplainMove(unittest.TestCase):
    def test_doubtful_out_double_in(self):
        players = {
            1: make_player(1, MID, team_id=1, ppg=4.0, chance=50, name="Doubt"),
            2: make_player(2, MID, team_id=2, ppg=6.0, name="Hot"),
        }
        fixtures = [
            make_fixture(1, 10, 2, 3),
            make_fixture(2, 10, 4, 2),
            make_fixture(3, 10, 1, 5, home_difficulty=5),
        ]
        move = TransferMove(
            out_id=1, in_id=2, out_name="Doubt", in_name="Hot", out_team_id=1,
            in_team_id=2, position=MID, out_sell=5.0, in_price=5.0, ev_delta=3.0,
            bank_left=0.0,
        )

        text = explain_move(move, players, fixtures, 10, 1)

        self.assertIn("injury/doubt", text)
        self.assertIn("tough fixtures", text)
        self.assertIn("Double Gameweek", text)
        self.assertIn("hotter recent form", text)

    def test_unknown_player_gives_empty(self):
        move = TransferMove(
            out_id=1, in_id=2, out_name="A", in_name="B", out_team_id=1,
            in_team_id=2, position=MID, out_sell=5.0, in_price=5.0, ev_delta=1.0,
            bank_left=0.0,
        )
        self.assertEqual(explain_move(move, {}, [], 10, 1), "")

    def test_minutes_labels(self):
        self.assertEqual(minutes_label(100), "nailed")
        self.assertEqual(minutes_label(75), "rotation risk")
        self.assertEqual(minutes_label(25), "major doubt")


if __name__ == "__main__":
    unittest.main()
