"""
Advisor facade.

Ties the value model, transfer search, plan ranking, formation selector,
drafter and chip advice together for one frozen snapshot.
"""

import logging
from functools import cached_property

from ..config import ChipSettings, EngineSettings
from ..data.models import ManagerState, Player, Snapshot
from ..data.processors import derive_budget
from ..predictions.projections import ProjectionEngine
from .chips import BenchBoostAdvice, ChipOptimizer, ChipRecommendation, WildcardAdvice
from .draft import DraftResult, SquadDrafter
from .formation import Lineup, LineupCandidate, select_lineup
from .plans import TransferAdvice, advise_transfers
from .presets import Mode, apply_mode, auto_tune, auto_tune_chips
from .reasons import explain_move
from .squad import SquadRow, annotate_squad, apply_plan

logger = logging.getLogger(__name__)


class NoManagerError(ValueError):
    """Raised when squad advice is requested for a market-only snapshot."""


class SquadAdvisor:
    """
    Advice for one manager from one snapshot.

    Holds no state beyond per-request caches; build a new advisor per
    request.

    Example:
        >>> advisor = SquadAdvisor(snapshot)
        >>> advice = advisor.advise_transfers()
        >>> lineup = advisor.best_lineup(plan_key=advice.recommended)
    """

    def __init__(
        self,
        snapshot: Snapshot,
        settings: EngineSettings | None = None,
        chip_settings: ChipSettings | None = None,
    ):
        """
        Initialize the advisor.

        Args:
            snapshot: Frozen request inputs
            settings: Engine settings; defaults if omitted
            chip_settings: Chip thresholds; defaults if omitted
        """
        self.snapshot = snapshot
        self.settings = settings or EngineSettings()
        self.chip_settings = chip_settings or ChipSettings()
        self.gameweek = snapshot.next_gameweek
        self.players: dict[int, Player] = snapshot.players_by_id()
        self.teams = snapshot.teams_by_id()
        self.projections = ProjectionEngine(snapshot.players, snapshot.fixtures, self.settings)
        self._advice: TransferAdvice | None = None

    @property
    def manager(self) -> ManagerState:
        if self.snapshot.manager is None:
            raise NoManagerError("Snapshot has no manager; pass a manager id")
        return self.snapshot.manager

    # =========================================================================
    # Values
    # =========================================================================

    def values(self) -> dict[int, float]:
        """EV over the configured horizon from the target gameweek."""
        return self.projections.project_all_players(self.gameweek)

    def week_values(self, gameweek: int | None = None) -> dict[int, float]:
        """Single-week scores for lineup and chip decisions."""
        return self.projections.project_all_players(gameweek or self.gameweek, horizon=1)

    def annotated_squad(self, manager: ManagerState | None = None) -> list[SquadRow]:
        return annotate_squad(manager or self.manager, self.players, self.values(), self.teams)

    # =========================================================================
    # Transfers
    # =========================================================================

    def advise_transfers(self) -> TransferAdvice:
        """Plans A-D with the recommended plan."""
        if self._advice is None:
            manager = self.manager
            self._advice = advise_transfers(
                self.annotated_squad(manager),
                self.snapshot.players,
                self.values(),
                manager.bank,
                manager.available_free_transfers,
                self.settings,
                owned=manager.player_ids,
            )
        return self._advice

    def explain(self, plan_key: str) -> list[str]:
        """Human reasons for each move in a plan."""
        plan = self.advise_transfers().plans[plan_key]
        fixtures = list(self.snapshot.fixtures)
        return [
            explain_move(move, self.players, fixtures, self.gameweek, self.settings.horizon)
            for move in plan.moves
        ]

    def squad_after(self, plan_key: str = "A") -> ManagerState:
        """Hypothetical squad after applying a plan; the original is kept."""
        key = plan_key.upper()
        if key == "A":
            return self.manager
        return apply_plan(self.manager, self.advise_transfers().plans[key])

    # =========================================================================
    # Lineup
    # =========================================================================

    def lineup_candidates(
        self, manager: ManagerState, values: dict[int, float]
    ) -> list[LineupCandidate]:
        candidates = []
        for pid in manager.player_ids:
            player = self.players.get(pid)
            if player is None:
                logger.debug(f"Owned player {pid} not in catalog, skipping")
                continue
            candidates.append(
                LineupCandidate(
                    player_id=pid,
                    position=player.position,
                    score=values.get(pid, 0.0),
                    team_id=player.team_id,
                    price=player.price,
                    name=player.display_name,
                )
            )
        return candidates

    def best_lineup(
        self, plan_key: str = "A", target_gameweek: int | None = None
    ) -> Lineup | None:
        """
        Best XI for one week, optionally after applying a transfer plan.

        Args:
            plan_key: Plan to apply first ("A" keeps the current squad)
            target_gameweek: Week to score; defaults to the next gameweek

        Returns:
            Lineup, or None if the squad cannot fill any formation
        """
        manager = self.squad_after(plan_key)
        values = self.week_values(target_gameweek)
        return select_lineup(self.lineup_candidates(manager, values))

    # =========================================================================
    # Draft
    # =========================================================================

    def budget(self) -> float:
        if self.snapshot.manager is None:
            return self.settings.default_budget
        return derive_budget(
            self.manager,
            self.players,
            default_budget=self.settings.default_budget,
            floor=self.settings.budget_floor,
        )

    def draft(self, budget: float | None = None) -> DraftResult:
        """Greedy full-squad rebuild under the manager's budget."""
        budget = budget if budget is not None else self.budget()
        return SquadDrafter(self.settings).draft(self.snapshot.players, self.values(), budget)

    def drafted_lineup(self, result: DraftResult) -> Lineup | None:
        """Best XI from a drafted squad, scored over the target week."""
        values = self.week_values()
        return select_lineup(
            LineupCandidate(
                player_id=c.player_id,
                position=c.position,
                score=values.get(c.player_id, 0.0),
                team_id=c.team_id,
                price=c.price,
                name=c.name,
            )
            for c in result.candidates()
        )

    # =========================================================================
    # Chips
    # =========================================================================

    @cached_property
    def chip_optimizer(self) -> ChipOptimizer:
        return ChipOptimizer(
            self.players,
            self.snapshot.fixtures,
            self.gameweek,
            self.chip_settings,
            self.settings,
        )

    def chip_advice(self) -> ChipRecommendation | None:
        """TC/BB/FH advice for the target gameweek, None if no lineup."""
        lineup = self.best_lineup()
        if lineup is None:
            return None
        return self.chip_optimizer.recommend(self.manager, lineup, self.week_values())

    def bench_boost_check(self) -> BenchBoostAdvice:
        plans = self.advise_transfers().plans.values()
        return self.chip_optimizer.bench_boost_by_plan(self.manager, plans, self.values())

    def wildcard_advice(self) -> WildcardAdvice:
        return self.chip_optimizer.wildcard_advice(self.manager)


def create_advisor(
    snapshot: Snapshot,
    settings: EngineSettings | None = None,
    chip_settings: ChipSettings | None = None,
    mode: Mode | str = Mode.DEFAULT,
    auto: bool = False,
) -> SquadAdvisor:
    """
    Factory function to create an advisor with preset configurations.

    Args:
        snapshot: Frozen request inputs
        settings: Base engine settings
        chip_settings: Base chip thresholds
        mode: Named preset applied on top of ``settings``
        auto: Tune settings to the squad and gameweek

    Returns:
        Configured SquadAdvisor
    """
    settings = apply_mode(settings or EngineSettings(), mode)
    chip_settings = chip_settings or ChipSettings()

    if auto:
        team_ids = [t.id for t in snapshot.teams]
        fixtures = list(snapshot.fixtures)
        if snapshot.manager is not None:
            settings = auto_tune(
                settings,
                snapshot.manager,
                snapshot.players_by_id(),
                fixtures,
                snapshot.next_gameweek,
                team_ids,
            )
        chip_settings = auto_tune_chips(chip_settings, fixtures, snapshot.next_gameweek, team_ids)

    return SquadAdvisor(snapshot, settings, chip_settings)
