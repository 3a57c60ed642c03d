"""
FPL Optimization Engine.

Transfer search, plan ranking, lineup selection, drafting and chip advice.
"""

from .constraints import (
    FORMATIONS,
    HIT_COST,
    MAX_PER_TEAM,
    POSITION_QUOTAS,
    SQUAD_SIZE,
    hit_cost,
)
from .squad import SquadRow, annotate_squad, apply_plan, squad_violations
from .reasons import Rejection, RejectionCode, explain_move, summarize
from .transfers import Combination, KCombinations, TransferMove, TransferSearch
from .plans import AdviceOutcome, Plan, TransferAdvice, advise_transfers, recommend_plan
from .formation import Lineup, LineupCandidate, select_lineup
from .draft import DraftResult, DraftStatus, InfeasibleDraftError, SquadDrafter
from .chips import (
    BenchBoostAdvice,
    ChipOptimizer,
    ChipRecommendation,
    ChipValue,
    WildcardAdvice,
    WildcardCall,
)
from .presets import Mode, apply_mode, auto_tune, auto_tune_chips
from .solver import NoManagerError, SquadAdvisor, create_advisor

__all__ = [
    # Main classes
    "SquadAdvisor",
    "NoManagerError",
    # Factory
    "create_advisor",
    # Constants
    "FORMATIONS",
    "HIT_COST",
    "MAX_PER_TEAM",
    "POSITION_QUOTAS",
    "SQUAD_SIZE",
    "hit_cost",
    # Squad
    "SquadRow",
    "annotate_squad",
    "apply_plan",
    "squad_violations",
    # Transfers
    "Combination",
    "KCombinations",
    "Rejection",
    "RejectionCode",
    "TransferMove",
    "TransferSearch",
    "explain_move",
    "summarize",
    # Plans
    "AdviceOutcome",
    "Plan",
    "TransferAdvice",
    "advise_transfers",
    "recommend_plan",
    # Lineup and draft
    "Lineup",
    "LineupCandidate",
    "select_lineup",
    "DraftResult",
    "DraftStatus",
    "InfeasibleDraftError",
    "SquadDrafter",
    # Chips
    "BenchBoostAdvice",
    "ChipOptimizer",
    "ChipRecommendation",
    "ChipValue",
    "WildcardAdvice",
    "WildcardCall",
    # Presets
    "Mode",
    "apply_mode",
    "auto_tune",
    "auto_tune_chips",
]
