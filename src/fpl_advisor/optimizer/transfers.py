"""
Transfer Candidate Search.

Two-stage search over the market:

1. Singles: every legal same-position swap of an owned player for a market
   player that fits the bank, keeps every team at or under three players and
   clears the minimum gain. Rejected candidates are recorded with a reason.
2. Combinations: exhaustive k-subsets (k = 2, 3) over a bounded prefix of the
   best singles, validated as a unit and ranked by net value after hits.
"""

import logging
import math
from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from ..config import EngineSettings
from ..data.models import Player, Position
from ..predictions.projections import is_eligible
from .constraints import (
    MAX_PER_TEAM,
    PRICE_EPSILON,
    SQUAD_SIZE,
    exceeds_team_limit,
    hit_cost,
    within_budget,
)
from .reasons import (
    AlreadyOwned,
    BelowMinDelta,
    BenchGuard,
    InsufficientBank,
    Rejection,
    SamePlayer,
    TeamLimit,
)
from .squad import SquadRow, squad_team_counts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferMove:
    """A single same-position swap."""

    out_id: int
    in_id: int
    out_name: str
    in_name: str
    out_team_id: int
    in_team_id: int
    position: Position
    out_sell: float
    in_price: float
    ev_delta: float
    bank_left: float
    bench_out: bool = False

    @property
    def price_delta(self) -> float:
        """Money spent by the move (negative when it frees funds)."""
        return self.in_price - self.out_sell


@dataclass
class SinglesResult:
    """Output of the singles stage."""

    moves: list[TransferMove] = field(default_factory=list)
    rejections: list[Rejection] = field(default_factory=list)
    scanned: int = 0
    halted: bool = False

    @property
    def best(self) -> TransferMove | None:
        return self.moves[0] if self.moves else None


@dataclass(frozen=True)
class Combination:
    """A validated k-move subset."""

    moves: tuple[TransferMove, ...]
    raw_delta: float
    hit_cost: int
    spend: float

    @property
    def net(self) -> float:
        return self.raw_delta - self.hit_cost


class KCombinations:
    """
    All k-subsets of range(n) as index tuples in lexicographic order.

    Iterating twice yields the same sequence; nothing is materialized up front.
    """

    def __init__(self, n: int, k: int):
        if n < 0 or k < 0:
            raise ValueError(f"n and k must be non-negative (n={n}, k={k})")
        self.n = n
        self.k = k

    def __len__(self) -> int:
        return math.comb(self.n, self.k)

    def __iter__(self) -> Iterator[tuple[int, ...]]:
        return self._choose(self.k, 0, ())

    def _choose(
        self, k: int, start: int, acc: tuple[int, ...]
    ) -> Iterator[tuple[int, ...]]:
        if k == 0:
            yield acc
            return
        for i in range(start, self.n - k + 1):
            yield from self._choose(k - 1, i + 1, acc + (i,))


def market_pools(
    market: Iterable[Player],
    values: dict[int, float],
    settings: EngineSettings,
) -> dict[Position, list[Player]]:
    """
    Eligible market players per position, best first.

    Ordered by EV descending, then price ascending, then id, and capped to
    ``max_pool_per_position``.
    """
    pools: dict[Position, list[Player]] = {pos: [] for pos in Position}
    for player in market:
        if is_eligible(player, settings):
            pools[player.position].append(player)

    for pos, pool in pools.items():
        pool.sort(key=lambda p: (-values.get(p.id, 0.0), p.price, p.id))
        del pool[settings.max_pool_per_position:]

    return pools


class TransferSearch:
    """
    Bounded transfer search.

    Example:
        >>> search = TransferSearch(EngineSettings())
        >>> singles = search.find_singles(rows, players, values, bank=1.5)
        >>> pair = search.best_combination(singles.moves, 2, rows, bank=1.5, free_transfers=1)
    """

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or EngineSettings()

    # =========================================================================
    # Singles
    # =========================================================================

    def find_singles(
        self,
        rows: Sequence[SquadRow],
        market: Iterable[Player],
        values: dict[int, float],
        bank: float,
        owned: Iterable[int] | None = None,
    ) -> SinglesResult:
        """
        Find every legal single transfer.

        Args:
            rows: Annotated squad
            market: All players
            values: EV table keyed by player id
            bank: Money in the bank
            owned: Owned ids, including any the annotator skipped

        Returns:
            SinglesResult with moves sorted by EV gain, best first
        """
        cfg = self.settings
        owned_ids = {row.id for row in rows} | set(owned or ())
        counts = squad_team_counts(rows)
        pools = market_pools(market, values, cfg)

        outs = sorted(rows, key=lambda r: (r.ev, -r.sell_price, r.id))[:SQUAD_SIZE]
        result = SinglesResult()

        for out in outs:
            if result.halted:
                break
            for cand in pools[out.position]:
                result.scanned += 1
                rejection = self._check_single(out, cand, values, bank, owned_ids, counts)
                if rejection is not None:
                    result.rejections.append(rejection)
                    continue

                price_delta = cand.price - out.sell_price
                result.moves.append(
                    TransferMove(
                        out_id=out.id,
                        in_id=cand.id,
                        out_name=out.name,
                        in_name=cand.display_name,
                        out_team_id=out.team_id,
                        in_team_id=cand.team_id,
                        position=out.position,
                        out_sell=out.sell_price,
                        in_price=cand.price,
                        ev_delta=values.get(cand.id, 0.0) - out.ev,
                        bank_left=bank - price_delta,
                        bench_out=not out.is_starter,
                    )
                )
                if len(result.moves) >= cfg.max_singles:
                    result.halted = True
                    break

        result.moves.sort(key=lambda m: m.ev_delta, reverse=True)
        logger.info(
            f"Singles: {len(result.moves)} accepted, {len(result.rejections)} rejected "
            f"from {result.scanned} candidates"
            + (" (scan cap reached)" if result.halted else "")
        )
        return result

    def _check_single(
        self,
        out: SquadRow,
        cand: Player,
        values: dict[int, float],
        bank: float,
        owned: set[int],
        counts: Counter[int],
    ) -> Rejection | None:
        """Return why ``out -> cand`` is illegal, or None if it is accepted."""
        cfg = self.settings
        names = dict(
            out_id=out.id, in_id=cand.id, out_name=out.name, in_name=cand.display_name
        )

        if cand.id == out.id:
            return SamePlayer(**names)
        if cand.id in owned:
            return AlreadyOwned(**names)

        price_delta = cand.price - out.sell_price
        if price_delta > bank + PRICE_EPSILON:
            return InsufficientBank(**names, shortfall=price_delta - bank)

        if cand.team_id != out.team_id and counts.get(cand.team_id, 0) + 1 > MAX_PER_TEAM:
            return TeamLimit(**names, team_id=cand.team_id)

        delta = values.get(cand.id, 0.0) - out.ev
        if delta < cfg.min_delta_single:
            return BelowMinDelta(**names, delta=delta, threshold=cfg.min_delta_single)

        if cfg.bench_guard and not out.is_starter and delta < cfg.bench_min_delta:
            return BenchGuard(**names, delta=delta, threshold=cfg.bench_min_delta)

        return None

    # =========================================================================
    # Combinations
    # =========================================================================

    def combo_threshold(self, k: int) -> float:
        """Minimum summed EV gain for a k-move combination."""
        cfg = self.settings
        return cfg.min_delta_combo + cfg.step_raw_per_extra * max(0, k - 2)

    def universe_size(self, k: int) -> int:
        return self.settings.pair_universe if k <= 2 else self.settings.triple_universe

    def validate_combination(
        self,
        moves: Sequence[TransferMove],
        counts: Counter[int],
        bank: float,
        free_transfers: int,
    ) -> Combination | None:
        """
        Validate a subset of singles as one plan.

        Rejects duplicate OUT or IN players, any team above three after all
        moves, total spend above the bank and total gain below the
        combination threshold.
        """
        out_ids: set[int] = set()
        in_ids: set[int] = set()
        after = Counter(counts)
        spend = 0.0
        raw = 0.0

        for move in moves:
            if move.out_id in out_ids or move.in_id in in_ids:
                return None
            out_ids.add(move.out_id)
            in_ids.add(move.in_id)

            if move.in_team_id != move.out_team_id:
                after[move.out_team_id] -= 1
                after[move.in_team_id] += 1
            spend += move.price_delta
            raw += move.ev_delta

        if exceeds_team_limit(after):
            return None
        if not within_budget(spend, bank):
            return None
        if raw < self.combo_threshold(len(moves)):
            return None

        return Combination(
            moves=tuple(moves),
            raw_delta=raw,
            hit_cost=hit_cost(len(moves), free_transfers),
            spend=spend,
        )

    def best_combination(
        self,
        singles: Sequence[TransferMove],
        k: int,
        rows: Sequence[SquadRow],
        bank: float,
        free_transfers: int,
    ) -> Combination | None:
        """
        Best valid k-move combination by net value.

        Exhaustive over the first ``pair_universe`` (k=2) or
        ``triple_universe`` (k=3) singles. The first subset found wins ties.

        Args:
            singles: Single moves sorted best first
            k: Number of moves (2 or 3)
            rows: Annotated squad (for team counts)
            bank: Money in the bank
            free_transfers: Free transfers available

        Returns:
            The best Combination, or None if no subset is valid
        """
        if k < 2 or len(singles) < k:
            return None

        universe = list(singles[: self.universe_size(k)])
        counts = squad_team_counts(rows)
        best: Combination | None = None
        checked = 0

        for idx in KCombinations(len(universe), k):
            checked += 1
            combo = self.validate_combination(
                [universe[i] for i in idx], counts, bank, free_transfers
            )
            if combo is not None and (best is None or combo.net > best.net):
                best = combo

        logger.debug(
            f"Combinations k={k}: checked {checked} over {len(universe)} singles, "
            f"best net={best.net if best else None}"
        )
        return best
