"""
Chip Advisory.

Estimates what each chip is worth in the target gameweek and whether it
clears its threshold:

- Triple Captain (TC): the captain's projected score is added once more
- Bench Boost (BB): the bench's projected score is added
- Free Hit (FH): best affordable market XI minus your XI
- Wildcard (WC): driven by how many starters need fixing and the hits
  that would cost without it
"""

import logging
import math
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from ..config import ChipSettings, EngineSettings
from ..data.models import ChipType, Fixture, ManagerState, Player, Position
from ..predictions.fixtures import fixtures_for_team, gameweek_fixture_counts, side_difficulty
from ..predictions.projections import is_eligible
from .constraints import FORMATIONS, HIT_COST, MAX_PER_TEAM
from .formation import Lineup, LineupCandidate
from .plans import Plan, is_eligible_plan, rank_score
from .squad import apply_plan

logger = logging.getLogger(__name__)

CHIP_LABELS = {
    ChipType.TRIPLE_CAPTAIN: "Triple Captain",
    ChipType.BENCH_BOOST: "Bench Boost",
    ChipType.FREE_HIT: "Free Hit",
    ChipType.WILDCARD: "Wildcard",
}


@dataclass
class ChipValue:
    """Value estimate for using a chip in the target gameweek."""

    chip: ChipType
    gameweek: int
    estimated_value: float  # Extra points gained vs not using chip
    threshold: float
    available: bool = True
    reasoning: list[str] = field(default_factory=list)

    @property
    def passes(self) -> bool:
        return self.available and self.estimated_value >= self.threshold

    @property
    def label(self) -> str:
        return CHIP_LABELS[self.chip]


@dataclass
class ChipRecommendation:
    """Chip recommendation for one gameweek."""

    gameweek: int
    recommended_chip: ChipType | None
    chip_values: list[ChipValue]
    reasoning: str


@dataclass
class MarketXI:
    """Best market XI under the team cap, with its soft budget penalty."""

    formation: tuple[int, int, int]
    players: list[LineupCandidate]
    score: float
    cost: float
    over_budget: float
    penalty: float

    @property
    def adjusted_score(self) -> float:
        return self.score - self.penalty


@dataclass
class BenchBoostReport:
    """Bench Boost value if played alongside one transfer plan."""

    plan_key: str
    moves: int
    bench_ev: float
    total_ev: float
    hit_cost: int
    net: float
    play_now: bool


@dataclass
class BenchBoostAdvice:
    available: bool
    reports: list[BenchBoostReport]
    best: BenchBoostReport | None


class WildcardCall(StrEnum):
    PLAY = "Play Wildcard"
    SAVE = "Save Wildcard"
    UNAVAILABLE = "Wildcard not available"


@dataclass
class WildcardAdvice:
    gameweek: int
    recommendation: WildcardCall
    wildcards_used: int
    risky_starters: list[int]
    blank_starters: list[int]
    dgw_starters: list[int]
    must_fix: int
    likely_hits: int
    free_transfers: int
    tough_swing: bool
    reasons: list[str] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.recommendation != WildcardCall.UNAVAILABLE


class ChipOptimizer:
    """
    Chip advice for one manager and target gameweek.

    Values passed in should be single-week scores for ``gameweek``.
    """

    def __init__(
        self,
        players: Mapping[int, Player],
        fixtures: Iterable[Fixture],
        gameweek: int,
        chip_settings: ChipSettings | None = None,
        engine_settings: EngineSettings | None = None,
    ):
        """
        Initialize the chip optimizer.

        Args:
            players: Player catalog keyed by id
            fixtures: Fixture calendar
            gameweek: Target gameweek
            chip_settings: Chip thresholds; defaults if omitted
            engine_settings: Engine settings; defaults if omitted
        """
        self.players = players
        self.fixtures = list(fixtures)
        self.gameweek = gameweek
        self.chip_settings = chip_settings or ChipSettings()
        self.engine_settings = engine_settings or EngineSettings()
        self.counts = gameweek_fixture_counts(self.fixtures, gameweek)

    def is_available(self, manager: ManagerState, chip: ChipType) -> bool:
        allowance = self.chip_settings.wildcards_per_season if chip == ChipType.WILDCARD else 1
        return manager.chip_uses(chip) < allowance

    # =========================================================================
    # Single-week chip values
    # =========================================================================

    def calculate_triple_captain_value(
        self, lineup: Lineup, available: bool = True
    ) -> ChipValue:
        """TC value = captain's projected score (counted a third time)."""
        cfg = self.chip_settings
        captain = next(
            (c for c in lineup.starters if c.player_id == lineup.captain_id), None
        )
        if captain is None:
            return ChipValue(
                ChipType.TRIPLE_CAPTAIN, self.gameweek, 0.0, cfg.tc_min, available,
                ["No clear captain."],
            )

        reasons = [f"Captain candidate: {captain.name} (proj {captain.score:.2f})"]
        if self.counts.get(captain.team_id, 0) > 1:
            reasons.append("Has DGW this GW.")
        else:
            reasons.append("Single GW but strong ceiling.")
        return ChipValue(
            ChipType.TRIPLE_CAPTAIN, self.gameweek, captain.score, cfg.tc_min, available, reasons
        )

    def calculate_bench_boost_value(
        self, lineup: Lineup, available: bool = True
    ) -> ChipValue:
        """BB value = sum of bench projections (3 outfield + reserve keeper)."""
        cfg = self.chip_settings
        bench = lineup.bench
        value = sum(c.score for c in bench)
        reasons = [f"Bench value: {value:.2f} ({', '.join(c.name for c in bench)})"]
        if any(self.counts.get(c.team_id, 0) > 1 for c in bench):
            reasons.append("Bench includes DGW fixture(s).")
        else:
            reasons.append("Bench fixtures look OK.")
        return ChipValue(ChipType.BENCH_BOOST, self.gameweek, value, cfg.bb_min, available, reasons)

    def build_market_xi(
        self, values: Mapping[int, float], budget: float
    ) -> MarketXI | None:
        """
        Best market XI for the week.

        Greedy per position under the three-per-team cap. Cost above
        ``budget`` is not forbidden but penalized per 1.0m over.
        """
        penalty_rate = self.chip_settings.fh_over_budget_penalty
        pools: dict[Position, list[LineupCandidate]] = {pos: [] for pos in Position}
        for player in self.players.values():
            if not is_eligible(player, self.engine_settings):
                continue
            pools[player.position].append(
                LineupCandidate(
                    player_id=player.id,
                    position=player.position,
                    score=values.get(player.id, 0.0),
                    team_id=player.team_id,
                    price=player.price,
                    name=player.display_name,
                )
            )
        for pool in pools.values():
            pool.sort(key=lambda c: (-c.score, c.price, c.player_id))

        if not pools[Position.GK]:
            return None

        best: MarketXI | None = None
        for shape in FORMATIONS:
            team_count: Counter[int] = Counter()
            xi: list[LineupCandidate] = []

            def take(pool: list[LineupCandidate], need: int) -> None:
                taken = 0
                for c in pool:
                    if taken >= need:
                        break
                    if team_count[c.team_id] >= MAX_PER_TEAM:
                        continue
                    team_count[c.team_id] += 1
                    xi.append(c)
                    taken += 1

            take(pools[Position.GK], 1)
            for pos, need in zip((Position.DEF, Position.MID, Position.FWD), shape):
                take(pools[pos], need)
            if len(xi) != 1 + sum(shape):
                continue

            cost = sum(c.price for c in xi)
            score = sum(c.score for c in xi)
            over = max(0.0, cost - budget)
            candidate = MarketXI(shape, xi, score, cost, over, over * penalty_rate)
            if best is None or candidate.adjusted_score > best.adjusted_score:
                best = candidate

        return best

    def calculate_free_hit_value(
        self,
        lineup: Lineup,
        values: Mapping[int, float],
        bank: float,
        available: bool = True,
    ) -> ChipValue:
        """FH value = market XI (penalized) minus your XI."""
        cfg = self.chip_settings
        xi_cost = sum(
            self.players[c.player_id].price for c in lineup.starters if c.player_id in self.players
        )
        market = self.build_market_xi(values, xi_cost + bank)
        if market is None:
            return ChipValue(
                ChipType.FREE_HIT, self.gameweek, 0.0, cfg.fh_min, available,
                ["Market XI could not be built."],
            )

        gain = market.adjusted_score - lineup.total
        reasons = [
            f"Market XI proj: {market.adjusted_score:.2f} vs your XI {lineup.total:.2f} "
            f"(gain {gain:+.2f})"
        ]
        if market.over_budget > 0:
            reasons.append(f"Soft penalty for ~{market.over_budget:.1f}m over a rough XI budget.")
        else:
            reasons.append("Budget approximated OK.")
        return ChipValue(ChipType.FREE_HIT, self.gameweek, gain, cfg.fh_min, available, reasons)

    def recommend(
        self,
        manager: ManagerState,
        lineup: Lineup,
        values: Mapping[int, float],
    ) -> ChipRecommendation:
        """
        Recommend TC, BB, FH or hold for the target gameweek.

        The chip with the largest estimated gain is recommended if it is
        available and clears its threshold.
        """
        chip_values = [
            self.calculate_triple_captain_value(
                lineup, self.is_available(manager, ChipType.TRIPLE_CAPTAIN)
            ),
            self.calculate_bench_boost_value(
                lineup, self.is_available(manager, ChipType.BENCH_BOOST)
            ),
            self.calculate_free_hit_value(
                lineup, values, manager.bank, self.is_available(manager, ChipType.FREE_HIT)
            ),
        ]
        chip_values.sort(key=lambda v: v.estimated_value, reverse=True)

        top = next((v for v in chip_values if v.available), None)
        if top is not None and top.passes:
            reasoning = f"{top.label}: projected gain {top.estimated_value:+.2f}"
            chip = top.chip
        else:
            reasoning = "Hold (no chip clears thresholds)"
            chip = None

        logger.info(f"Chip advice GW{self.gameweek}: {reasoning}")
        return ChipRecommendation(self.gameweek, chip, chip_values, reasoning)

    # =========================================================================
    # Bench Boost alongside transfer plans
    # =========================================================================

    def bench_boost_by_plan(
        self,
        manager: ManagerState,
        plans: Iterable[Plan],
        values: Mapping[int, float],
    ) -> BenchBoostAdvice:
        """
        Bench Boost value for each transfer plan.

        The bench is squad slots 12-15 after the plan is applied (an IN
        player takes the OUT player's slot). BB is worth playing with a plan
        when the chip is available, bench EV reaches ``bb_plan_min`` and the
        plan itself clears the transfer hit bar.
        """
        cfg = self.chip_settings
        plans = list(plans)
        available = self.is_available(manager, ChipType.BENCH_BOOST)
        reports = []

        for plan in plans:
            after = apply_plan(manager, plan)
            bench_ev = sum(values.get(p.player_id, 0.0) for p in after.bench)
            total_ev = sum(values.get(pid, 0.0) for pid in after.player_ids)
            play_now = (
                available
                and bench_ev >= cfg.bb_plan_min
                and (plan.size <= 1 or plan.net >= self.engine_settings.hit_threshold)
            )
            reports.append(
                BenchBoostReport(
                    plan_key=plan.key,
                    moves=plan.size,
                    bench_ev=round(bench_ev, 1),
                    total_ev=round(total_ev, 1),
                    hit_cost=plan.hit_cost,
                    net=plan.net,
                    play_now=play_now,
                )
            )

        eligible = [
            (r, plan)
            for r, plan in zip(reports, plans)
            if r.play_now and is_eligible_plan(plan, self.engine_settings)
        ]
        eligible.sort(key=lambda rp: (-rank_score(rp[1], self.engine_settings), rp[0].moves))
        best = eligible[0][0] if eligible else None
        return BenchBoostAdvice(available=available, reports=reports, best=best)

    # =========================================================================
    # Wildcard
    # =========================================================================

    def wildcard_advice(self, manager: ManagerState) -> WildcardAdvice:
        """
        Decide whether the squad needs a Wildcard.

        Must-fix starters are those below ``wc_risky_min`` minutes probability
        or blanking this gameweek. Fixing them with transfers would cost
        4 points per move beyond the free transfers.
        """
        cfg = self.chip_settings
        used = manager.chip_uses(ChipType.WILDCARD)
        free_transfers = manager.available_free_transfers

        starters = [
            self.players[p.player_id] for p in manager.starters if p.player_id in self.players
        ]
        risky = [p.id for p in starters if p.minutes_probability < cfg.wc_risky_min]
        blank = [p.id for p in starters if self.counts.get(p.team_id, 0) == 0]
        dgw = [p.id for p in starters if self.counts.get(p.team_id, 0) > 1]
        must_fix = len(set(risky) | set(blank))
        likely_hits = max(0, must_fix - free_transfers) * HIT_COST

        hard = 0
        for p in starters:
            matches = fixtures_for_team(self.fixtures, self.gameweek, p.team_id)
            if matches and side_difficulty(matches[0], matches[0].home_team_id == p.team_id) >= 4:
                hard += 1
        tough_swing = bool(starters) and hard >= math.ceil(len(starters) / 2)

        reasons = []
        if used >= cfg.wildcards_per_season:
            call = WildcardCall.UNAVAILABLE
            allowance = cfg.wildcards_per_season
            plural = "Wildcard" if allowance == 1 else "Wildcards"
            reasons.append(f"You have already used your {allowance} {plural} this season.")
        else:
            call = WildcardCall.SAVE
            if must_fix >= cfg.wc_risky_count:
                call = WildcardCall.PLAY
                reasons.append("Several of your starters are risks or have a blank next week.")
            if likely_hits >= cfg.wc_hit_bar:
                call = WildcardCall.PLAY
                reasons.append("You'd likely need multiple hits to fix the team without a Wildcard.")
            if call != WildcardCall.PLAY and tough_swing:
                reasons.append("Upcoming fixtures don't suit many of your starters.")
            if call == WildcardCall.SAVE and len(dgw) >= 3:
                reasons.append("You already have decent Double Gameweek coverage among starters.")

        return WildcardAdvice(
            gameweek=self.gameweek,
            recommendation=call,
            wildcards_used=used,
            risky_starters=risky,
            blank_starters=blank,
            dgw_starters=dgw,
            must_fix=must_fix,
            likely_hits=likely_hits,
            free_transfers=free_transfers,
            tough_swing=tough_swing,
            reasons=reasons,
        )
