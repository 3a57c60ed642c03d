"""
Formation Selector.

Picks the starting XI shape, bench and captaincy that maximize total score
for one target week from any scored pool of players.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..data.models import Position
from .constraints import FORMATIONS, formation_label

logger = logging.getLogger(__name__)

BENCH_OUTFIELD = 3


@dataclass(frozen=True)
class LineupCandidate:
    """A scored player available for selection."""

    player_id: int
    position: Position
    score: float
    team_id: int = 0
    price: float = 0.0
    name: str = ""


@dataclass
class Lineup:
    """Best XI, bench and captaincy for one week."""

    formation: tuple[int, int, int]
    goalkeeper: LineupCandidate
    defenders: list[LineupCandidate]
    midfielders: list[LineupCandidate]
    forwards: list[LineupCandidate]
    bench_outfield: list[LineupCandidate] = field(default_factory=list)
    reserve_keeper: LineupCandidate | None = None
    captain_id: int | None = None
    vice_captain_id: int | None = None

    @property
    def starters(self) -> list[LineupCandidate]:
        return [self.goalkeeper, *self.defenders, *self.midfielders, *self.forwards]

    @property
    def bench(self) -> list[LineupCandidate]:
        """Outfield bench in order, then the reserve keeper."""
        bench = list(self.bench_outfield)
        if self.reserve_keeper is not None:
            bench.append(self.reserve_keeper)
        return bench

    @property
    def total(self) -> float:
        return sum(c.score for c in self.starters)

    @property
    def bench_total(self) -> float:
        return sum(c.score for c in self.bench)

    @property
    def captain_score(self) -> float:
        return next((c.score for c in self.starters if c.player_id == self.captain_id), 0.0)

    @property
    def label(self) -> str:
        return formation_label(self.formation)


def _order_key(c: LineupCandidate) -> tuple[float, float, int]:
    return (-c.score, c.price, c.player_id)


def select_lineup(candidates: Iterable[LineupCandidate]) -> Lineup | None:
    """
    Choose the best legal lineup from a scored pool.

    For every formation the pool can fill, take the best keeper and the
    top-scoring players per position. The highest total wins; on equal
    totals the earlier formation in FORMATIONS is kept.

    Args:
        candidates: Scored players (the squad, a hypothetical squad or a
            larger market pool)

    Returns:
        The best Lineup, or None if no formation can be filled
    """
    by_pos: dict[Position, list[LineupCandidate]] = {pos: [] for pos in Position}
    for c in candidates:
        by_pos[c.position].append(c)
    for pool in by_pos.values():
        pool.sort(key=_order_key)

    keepers = by_pos[Position.GK]
    if not keepers:
        logger.debug("No goalkeeper in pool, no lineup possible")
        return None

    best: Lineup | None = None
    best_total = float("-inf")

    for shape in FORMATIONS:
        n_def, n_mid, n_fwd = shape
        if (
            len(by_pos[Position.DEF]) < n_def
            or len(by_pos[Position.MID]) < n_mid
            or len(by_pos[Position.FWD]) < n_fwd
        ):
            continue

        lineup = Lineup(
            formation=shape,
            goalkeeper=keepers[0],
            defenders=by_pos[Position.DEF][:n_def],
            midfielders=by_pos[Position.MID][:n_mid],
            forwards=by_pos[Position.FWD][:n_fwd],
        )
        total = lineup.total
        if total > best_total:
            best, best_total = lineup, total

    if best is None:
        logger.debug("Pool cannot fill any formation")
        return None

    n_def, n_mid, n_fwd = best.formation
    remaining = (
        by_pos[Position.DEF][n_def:]
        + by_pos[Position.MID][n_mid:]
        + by_pos[Position.FWD][n_fwd:]
    )
    best.bench_outfield = sorted(remaining, key=_order_key)[:BENCH_OUTFIELD]
    best.reserve_keeper = keepers[1] if len(keepers) > 1 else None

    ranked = sorted(best.starters, key=_order_key)
    best.captain_id = ranked[0].player_id
    best.vice_captain_id = ranked[1].player_id if len(ranked) > 1 else None

    return best
