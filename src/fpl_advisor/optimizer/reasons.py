"""
Transfer rejection reasons and human-readable explanations.

Every candidate the transfer search turns down is recorded as one of a closed
set of rejection types, each carrying only the data relevant to it.
"""

from collections import Counter
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar, Iterable

from ..data.models import Fixture, Player
from ..predictions.fixtures import FixtureOutlook, fixture_outlook

if TYPE_CHECKING:
    from .transfers import TransferMove


class RejectionCode(StrEnum):
    """Why a candidate transfer was turned down."""

    SAME_PLAYER = "same-player"
    ALREADY_OWNED = "already-owned"
    INSUFFICIENT_BANK = "insufficient-bank"
    TEAM_LIMIT = "team-limit"
    BELOW_MIN_DELTA = "below-min-delta"
    BENCH_GUARD = "bench-guard"


SUMMARY_LABELS = {
    RejectionCode.SAME_PLAYER: "same-player collisions",
    RejectionCode.ALREADY_OWNED: "already-owned targets",
    RejectionCode.INSUFFICIENT_BANK: "bank shortfall",
    RejectionCode.TEAM_LIMIT: "team limit >3",
    RejectionCode.BELOW_MIN_DELTA: "gain below threshold",
    RejectionCode.BENCH_GUARD: "bench upgrades too small",
}


@dataclass(frozen=True)
class Rejection:
    """Base rejection: which swap was considered."""

    out_id: int
    in_id: int
    out_name: str
    in_name: str

    # Set by each concrete rejection
    code: ClassVar[RejectionCode]

    def detail(self) -> str:
        raise NotImplementedError

    @property
    def text(self) -> str:
        return f"{self.out_name} -> {self.in_name}: {self.detail()}"


@dataclass(frozen=True)
class SamePlayer(Rejection):
    code = RejectionCode.SAME_PLAYER

    def detail(self) -> str:
        return "Candidate equals OUT player"


@dataclass(frozen=True)
class AlreadyOwned(Rejection):
    code = RejectionCode.ALREADY_OWNED

    def detail(self) -> str:
        return "Already in your team"


@dataclass(frozen=True)
class InsufficientBank(Rejection):
    shortfall: float = 0.0

    code = RejectionCode.INSUFFICIENT_BANK

    def detail(self) -> str:
        return f"Insufficient bank (need {self.shortfall:.1f}m more)"


@dataclass(frozen=True)
class TeamLimit(Rejection):
    team_id: int = 0

    code = RejectionCode.TEAM_LIMIT

    def detail(self) -> str:
        return f"Would break per-team limit for team {self.team_id} (max 3)"


@dataclass(frozen=True)
class BelowMinDelta(Rejection):
    delta: float = 0.0
    threshold: float = 0.0

    code = RejectionCode.BELOW_MIN_DELTA

    def detail(self) -> str:
        return f"Upgrade below +{self.threshold:.2f} (gain {self.delta:+.2f})"


@dataclass(frozen=True)
class BenchGuard(Rejection):
    delta: float = 0.0
    threshold: float = 0.0

    code = RejectionCode.BENCH_GUARD

    def detail(self) -> str:
        return f"Bench upgrade below +{self.threshold:.2f} (gain {self.delta:+.2f})"


def tally(rejections: Iterable[Rejection]) -> Counter[RejectionCode]:
    """Count rejections by code."""
    return Counter(r.code for r in rejections)


def summarize(rejections: Iterable[Rejection], top: int = 3) -> list[str]:
    """Most common rejection reasons as short human lines."""
    counts = tally(rejections)
    return [
        f"{SUMMARY_LABELS[code]}: {n}x"
        for code, n in counts.most_common(top)
    ]


# =============================================================================
# Move Explanations
# =============================================================================


def minutes_label(probability: int) -> str:
    if probability >= 90:
        return "nailed"
    if probability >= 70:
        return "rotation risk"
    return "major doubt"


def explain_move(
    move: "TransferMove",
    players: dict[int, Player],
    fixtures: list[Fixture],
    start_gameweek: int,
    horizon: int,
) -> str:
    """
    One-line reason for a suggested transfer.

    Combines minutes security, fixture outlook over the horizon and a
    points-per-game comparison. Returns "" if either player is unknown.
    """
    out_player = players.get(move.out_id)
    in_player = players.get(move.in_id)
    if out_player is None or in_player is None:
        return ""

    out_minutes = minutes_label(out_player.minutes_probability)
    in_minutes = minutes_label(in_player.minutes_probability)
    out_fix = fixture_outlook(fixtures, out_player.team_id, start_gameweek, horizon)
    in_fix = fixture_outlook(fixtures, in_player.team_id, start_gameweek, horizon)

    out_bits = []
    if out_minutes == "rotation risk":
        out_bits.append("minutes risk")
    if out_minutes == "major doubt":
        out_bits.append("injury/doubt")
    if out_fix == FixtureOutlook.BLANK:
        out_bits.append("blank week")
    if out_fix == FixtureOutlook.TOUGH:
        out_bits.append("tough fixtures")

    in_bits = []
    if in_minutes == "nailed":
        in_bits.append("regular starter")
    if in_fix == FixtureOutlook.GOOD:
        in_bits.append("kinder fixtures")
    if in_fix == FixtureOutlook.DOUBLE:
        in_bits.append("Double Gameweek")
    if in_player.points_per_game >= out_player.points_per_game + 0.4:
        in_bits.append("hotter recent form")
    else:
        in_bits.append("solid recent form")

    out_txt = f"replace due to {' + '.join(out_bits)}" if out_bits else "upgrade the spot"
    in_txt = f"bring in for {' + '.join(in_bits)}"
    return f"{move.out_name}: {out_txt}. {move.in_name}: {in_txt}."
