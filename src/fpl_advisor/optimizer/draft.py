"""
Budget-Constrained Drafter.

Greedily builds a full 15-player squad from the open market for
"what-if full rebuild" scenarios (wildcard, free hit).
"""

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from ..config import EngineSettings
from ..data.models import Player, Position
from ..predictions.projections import is_eligible
from .constraints import MAX_PER_TEAM, POSITION_QUOTAS, within_budget
from .formation import LineupCandidate

logger = logging.getLogger(__name__)


class DraftStatus(StrEnum):
    COMPLETE = "complete"
    INFEASIBLE = "infeasible"


class InfeasibleDraftError(Exception):
    """Raised when a full squad cannot be drafted under the constraints."""

    def __init__(self, message: str, shortfall: dict[Position, int]):
        self.message = message
        self.shortfall = shortfall
        super().__init__(self.message)


@dataclass
class DraftResult:
    """A drafted squad with its spend."""

    chosen: dict[Position, list[Player]]
    budget: float
    spend: float
    values: dict[int, float] = field(default_factory=dict)
    shortfall: dict[Position, int] = field(default_factory=dict)

    @property
    def status(self) -> DraftStatus:
        return DraftStatus.INFEASIBLE if self.shortfall else DraftStatus.COMPLETE

    @property
    def is_complete(self) -> bool:
        return self.status == DraftStatus.COMPLETE

    @property
    def budget_left(self) -> float:
        return max(0.0, self.budget - self.spend)

    @property
    def players(self) -> list[Player]:
        return [p for pos in Position for p in self.chosen.get(pos, [])]

    @property
    def total_ev(self) -> float:
        return sum(self.values.get(p.id, 0.0) for p in self.players)

    def candidates(self) -> list[LineupCandidate]:
        """Drafted players as Formation Selector input."""
        return [
            LineupCandidate(
                player_id=p.id,
                position=p.position,
                score=self.values.get(p.id, 0.0),
                team_id=p.team_id,
                price=p.price,
                name=p.display_name,
            )
            for p in self.players
        ]

    def require_complete(self) -> "DraftResult":
        """
        Return self if every quota was filled.

        Raises:
            InfeasibleDraftError: If the pool was too constrained
        """
        if not self.is_complete:
            missing = ", ".join(f"{pos.name} x{n}" for pos, n in self.shortfall.items())
            raise InfeasibleDraftError(
                f"Couldn't build a full squad under {self.budget:.1f}m "
                f"(missing {missing}); try relaxing the minutes cutoff",
                dict(self.shortfall),
            )
        return self


class SquadDrafter:
    """
    Greedy squad builder.

    Quotas are 2 GK, 5 DEF, 5 MID and 3 FWD with at most three players per
    team. A greedy pass takes the best EV per position that still leaves
    room for the cheapest fill of every open slot; a cheap-fill pass then
    completes any unmet quota cheapest first.
    """

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or EngineSettings()

    def build_pools(
        self, market: Iterable[Player], values: dict[int, float]
    ) -> dict[Position, list[Player]]:
        """Eligible players with positive EV per position, best first."""
        pools: dict[Position, list[Player]] = {pos: [] for pos in Position}
        for player in market:
            if is_eligible(player, self.settings) and values.get(player.id, 0.0) > 0:
                pools[player.position].append(player)
        for pool in pools.values():
            pool.sort(key=lambda p: (-values.get(p.id, 0.0), p.price, p.id))
        return pools

    @staticmethod
    def reserve(
        by_price: dict[Position, list[Player]],
        chosen: dict[Position, list[Player]],
        quotas: dict[Position, int],
        pending: Player,
    ) -> float:
        """
        Cheapest possible cost of the slots still open once ``pending`` joins.

        Team caps are ignored, so this is a lower bound.
        """
        total = 0.0
        for pos in Position:
            open_slots = quotas.get(pos, 0) - len(chosen[pos])
            if pos == pending.position:
                open_slots -= 1
            if open_slots <= 0:
                continue
            taken = {p.id for p in chosen[pos]} | {pending.id}
            prices = [p.price for p in by_price[pos] if p.id not in taken][:open_slots]
            total += sum(prices)
        return total

    def draft(
        self,
        market: Iterable[Player],
        values: dict[int, float],
        budget: float,
        quotas: dict[Position, int] | None = None,
    ) -> DraftResult:
        """
        Draft a squad.

        Args:
            market: All players
            values: EV table keyed by player id
            budget: Total spend ceiling
            quotas: Players per position (defaults to 2/5/5/3)

        Returns:
            DraftResult; check ``status`` or call ``require_complete()``
        """
        quotas = quotas or POSITION_QUOTAS
        pools = self.build_pools(market, values)
        chosen: dict[Position, list[Player]] = {pos: [] for pos in Position}
        counts: Counter[int] = Counter()
        spend = 0.0
        by_price = {
            pos: sorted(pool, key=lambda p: (p.price, -values.get(p.id, 0.0), p.id))
            for pos, pool in pools.items()
        }

        def try_add(player: Player, keep_room: bool = False) -> bool:
            nonlocal spend
            extra = self.reserve(by_price, chosen, quotas, player) if keep_room else 0.0
            if not within_budget(spend + player.price + extra, budget):
                return False
            if counts[player.team_id] >= MAX_PER_TEAM:
                return False
            chosen[player.position].append(player)
            counts[player.team_id] += 1
            spend += player.price
            return True

        # Greedy pass
        for pos in Position:
            need = quotas.get(pos, 0)
            for player in pools[pos]:
                if len(chosen[pos]) >= need:
                    break
                try_add(player, keep_room=True)

        # Cheap-fill pass
        for pos in Position:
            need = quotas.get(pos, 0)
            if len(chosen[pos]) >= need:
                continue
            taken = {p.id for p in chosen[pos]}
            for player in (p for p in by_price[pos] if p.id not in taken):
                if len(chosen[pos]) >= need:
                    break
                try_add(player)

        shortfall = {
            pos: quotas.get(pos, 0) - len(chosen[pos])
            for pos in Position
            if len(chosen[pos]) < quotas.get(pos, 0)
        }
        result = DraftResult(
            chosen=chosen,
            budget=budget,
            spend=spend,
            values={p.id: values.get(p.id, 0.0) for pos in Position for p in chosen[pos]},
            shortfall=shortfall,
        )

        if shortfall:
            logger.warning(f"Draft infeasible under {budget:.1f}m, shortfall {shortfall}")
        else:
            logger.info(f"Drafted squad: spend {spend:.1f}m of {budget:.1f}m")
        return result
