"""
FPL Rule Constraints.

Squad composition rules shared by the transfer search, the formation
selector and the drafter.
"""

from collections import Counter
from collections.abc import Iterable

from ..data.models import Position

# =============================================================================
# Squad Composition Constants
# =============================================================================

SQUAD_SIZE = 15

# Squad quotas per position
POSITION_QUOTAS: dict[Position, int] = {
    Position.GK: 2,
    Position.DEF: 5,
    Position.MID: 5,
    Position.FWD: 3,
}

# Legal (DEF, MID, FWD) shapes; one GK is always added.
# Order matters: the first shape wins a tie on total score.
FORMATIONS: tuple[tuple[int, int, int], ...] = (
    (3, 4, 3),
    (3, 5, 2),
    (4, 4, 2),
    (4, 3, 3),
    (5, 3, 2),
    (5, 4, 1),
    (4, 5, 1),
)

# Max players per Premier League team
MAX_PER_TEAM = 3

# Transfer costs
HIT_COST = 4  # Points deducted per extra transfer

# Float noise allowed when comparing prices against the bank
PRICE_EPSILON = 1e-9


def team_counts(team_ids: Iterable[int]) -> Counter[int]:
    """Count players per real-world team."""
    return Counter(team_ids)


def exceeds_team_limit(counts: Counter[int]) -> bool:
    return any(count > MAX_PER_TEAM for count in counts.values())


def hit_cost(moves: int, free_transfers: int) -> int:
    """Points deducted for ``moves`` transfers with ``free_transfers`` available."""
    return HIT_COST * max(0, moves - free_transfers)


def within_budget(spend: float, budget: float) -> bool:
    return spend <= budget + PRICE_EPSILON


def formation_label(shape: tuple[int, int, int]) -> str:
    return "-".join(str(n) for n in shape)
