"""
Plan Ranking & Recommendation.

Builds the four candidate plans (0, 1, 2 and 3 moves), charges hits for
moves beyond the free transfers, and picks one recommendation:

- 0 and 1 move plans are always eligible.
- A plan with 2+ moves must reach a net of
  ``hit_threshold + hit_step_per_extra * (moves - 1)``.
- Eligible plans rank by ``net - soft_penalty_per_extra * max(0, moves - 1)``.
- A multi-move winner that beats the best 0/1-move plan by less than
  ``conservative_margin`` loses to it.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from ..config import EngineSettings
from ..data.models import Player
from .constraints import hit_cost
from .reasons import RejectionCode, summarize, tally
from .squad import SquadRow
from .transfers import Combination, SinglesResult, TransferMove, TransferSearch

logger = logging.getLogger(__name__)

PLAN_KEYS = ("A", "B", "C", "D")


class AdviceOutcome(StrEnum):
    """Headline result of a transfer advisory."""

    UPGRADE = "upgrade"
    NO_ATTRACTIVE_UPGRADE = "no_attractive_upgrade"


@dataclass(frozen=True)
class Plan:
    """A set of 0-3 transfers with its gain, hit and net value."""

    key: str
    moves: tuple[TransferMove, ...] = ()
    raw_delta: float = 0.0
    hit_cost: int = 0
    spend: float = 0.0
    notes: tuple[str, ...] = ()

    @property
    def net(self) -> float:
        return self.raw_delta - self.hit_cost

    @property
    def size(self) -> int:
        return len(self.moves)

    @property
    def is_empty(self) -> bool:
        return not self.moves

    def bank_after(self, bank: float) -> float:
        return bank - self.spend


def _hold_notes(rejections: Counter[RejectionCode] | None, summary: Sequence[str]) -> tuple[str, ...]:
    if rejections and summary:
        return ("No legal upgrades cleared the bar.", *summary)
    return ("No clear upgrades; better to roll the free transfer.",)


def empty_plan(key: str, notes: Iterable[str] = ()) -> Plan:
    return Plan(key=key, notes=tuple(notes))


def single_plan(
    singles: Sequence[TransferMove], free_transfers: int, settings: EngineSettings
) -> Plan:
    """Plan B: the best single move, or nothing."""
    if not singles:
        return empty_plan("B", ["No legal single transfer found."])

    best = singles[0]
    if best.ev_delta < settings.min_delta_single:
        return empty_plan("B", [f"Best single was below +{settings.min_delta_single:.2f}."])

    hit = hit_cost(1, free_transfers)
    notes = [f"-{hit} applied (only {free_transfers} FT assumed)"] if hit else []
    return Plan(
        key="B",
        moves=(best,),
        raw_delta=best.ev_delta,
        hit_cost=hit,
        spend=best.price_delta,
        notes=tuple(notes),
    )


def combination_plan(key: str, combo: Combination | None) -> Plan:
    """Plan C/D from a validated combination."""
    if combo is None:
        return empty_plan(key, ["No affordable/legal combination found."])

    notes = []
    if combo.hit_cost:
        notes.append(f"Includes -{combo.hit_cost} hit; net {combo.net:+.2f}")
    return Plan(
        key=key,
        moves=combo.moves,
        raw_delta=combo.raw_delta,
        hit_cost=combo.hit_cost,
        spend=combo.spend,
        notes=tuple(notes),
    )


def build_plans(
    singles: SinglesResult,
    rows: Sequence[SquadRow],
    bank: float,
    free_transfers: int,
    search: TransferSearch,
) -> dict[str, Plan]:
    """
    Build plans A-D.

    Args:
        singles: Output of the singles stage
        rows: Annotated squad
        bank: Money in the bank
        free_transfers: Free transfers available
        search: The search that produced ``singles`` (for combinations)

    Returns:
        Dict of plan key to Plan
    """
    summary = summarize(singles.rejections)
    plans = {
        "A": empty_plan("A", _hold_notes(tally(singles.rejections), summary)),
        "B": single_plan(singles.moves, free_transfers, search.settings),
    }
    for key, k in (("C", 2), ("D", 3)):
        combo = search.best_combination(singles.moves, k, rows, bank, free_transfers)
        plans[key] = combination_plan(key, combo)
    return plans


def is_eligible_plan(plan: Plan, settings: EngineSettings) -> bool:
    """Zero and one move plans always qualify; bigger ones must clear the rising bar."""
    if plan.size <= 1:
        return True
    bar = settings.hit_threshold + settings.hit_step_per_extra * (plan.size - 1)
    return plan.net >= bar


def rank_score(plan: Plan, settings: EngineSettings) -> float:
    return plan.net - settings.soft_penalty_per_extra * max(0, plan.size - 1)


def rank_plans(plans: Iterable[Plan], settings: EngineSettings) -> list[Plan]:
    """Eligible plans best first; all plans if none are eligible."""
    plans = list(plans)
    pool = [p for p in plans if is_eligible_plan(p, settings)] or plans
    return sorted(pool, key=lambda p: (-rank_score(p, settings), p.size, p.key))


def recommend_plan(plans: dict[str, Plan], settings: EngineSettings) -> Plan:
    """
    Pick the recommended plan.

    Args:
        plans: Plans keyed A-D
        settings: Engine settings

    Returns:
        The recommended Plan
    """
    ranked = rank_plans(plans.values(), settings)
    top = ranked[0]

    if top.size >= 2:
        small = [p for p in ranked if p.size <= 1]
        if small and top.net - small[0].net < settings.conservative_margin:
            logger.info(
                f"Plan {top.key} beats plan {small[0].key} by only "
                f"{top.net - small[0].net:.2f}, preferring fewer moves"
            )
            return small[0]

    return top


@dataclass
class TransferAdvice:
    """Everything a presentation layer needs to show transfer advice."""

    plans: dict[str, Plan]
    recommended: str
    outcome: AdviceOutcome
    bank: float
    free_transfers: int
    rejections: Counter[RejectionCode] = field(default_factory=Counter)
    rejection_summary: list[str] = field(default_factory=list)
    singles_found: int = 0

    @property
    def recommended_plan(self) -> Plan:
        return self.plans[self.recommended]

    def ranked(self, settings: EngineSettings) -> list[Plan]:
        return rank_plans(self.plans.values(), settings)


def advise_transfers(
    rows: Sequence[SquadRow],
    market: Iterable[Player],
    values: dict[int, float],
    bank: float,
    free_transfers: int,
    settings: EngineSettings | None = None,
    owned: Iterable[int] | None = None,
) -> TransferAdvice:
    """
    Run the full transfer advisory for one squad.

    Args:
        rows: Annotated squad
        market: All players
        values: EV table keyed by player id
        bank: Money in the bank
        free_transfers: Free transfers available
        settings: Engine settings; defaults if omitted
        owned: Owned ids, including any the annotator skipped

    Returns:
        TransferAdvice with plans A-D and the recommendation
    """
    settings = settings or EngineSettings()
    search = TransferSearch(settings)
    singles = search.find_singles(rows, market, values, bank, owned)
    plans = build_plans(singles, rows, bank, free_transfers, search)
    chosen = recommend_plan(plans, settings)

    outcome = AdviceOutcome.UPGRADE if chosen.moves else AdviceOutcome.NO_ATTRACTIVE_UPGRADE
    logger.info(
        f"Recommended plan {chosen.key}: {chosen.size} move(s), "
        f"raw {chosen.raw_delta:+.2f}, hit -{chosen.hit_cost}, net {chosen.net:+.2f}"
    )

    return TransferAdvice(
        plans=plans,
        recommended=chosen.key,
        outcome=outcome,
        bank=bank,
        free_transfers=free_transfers,
        rejections=tally(singles.rejections),
        rejection_summary=summarize(singles.rejections),
        singles_found=len(singles.moves),
    )
