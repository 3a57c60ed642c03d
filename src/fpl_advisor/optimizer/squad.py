"""
Squad Annotator.

Joins a manager's picks to the player catalog and a value table, and applies
transfer plans to produce hypothetical squads.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..data.models import ManagerState, Player, Position, SquadPick, Team
from .constraints import MAX_PER_TEAM, team_counts

if TYPE_CHECKING:
    from .plans import Plan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SquadRow:
    """One owned player joined with catalog data and EV."""

    id: int
    name: str
    team_id: int
    team: str
    position: Position
    slot: int
    is_starter: bool
    sell_price: float
    list_price: float
    ev: float


def annotate_squad(
    manager: ManagerState,
    players: dict[int, Player],
    values: dict[int, float],
    teams: dict[int, Team] | None = None,
) -> list[SquadRow]:
    """
    Annotate the manager's picks.

    Picks whose player id is missing from the catalog are skipped; every
    downstream count treats them as absent.

    Args:
        manager: Manager state with picks
        players: Player catalog keyed by id
        values: EV table keyed by player id
        teams: Team lookup for short names (optional)

    Returns:
        List of SquadRow in slot order
    """
    teams = teams or {}
    rows = []

    for pick in sorted(manager.picks, key=lambda p: p.position):
        player = players.get(pick.player_id)
        if player is None:
            logger.debug(f"Owned player {pick.player_id} not in catalog, skipping")
            continue

        team = teams.get(player.team_id)
        rows.append(
            SquadRow(
                id=player.id,
                name=player.display_name,
                team_id=player.team_id,
                team=team.short_name if team else "?",
                position=player.position,
                slot=pick.position,
                is_starter=pick.is_starter,
                sell_price=pick.sale_price(player.price),
                list_price=player.price,
                ev=values.get(player.id, 0.0),
            )
        )

    if len(rows) < len(manager.picks):
        logger.info(f"Annotated {len(rows)}/{len(manager.picks)} picks")
    return rows


def squad_team_counts(rows: list[SquadRow]) -> Counter[int]:
    """Players per team among the annotated rows."""
    return team_counts(row.team_id for row in rows)


def squad_violations(manager: ManagerState, players: dict[int, Player]) -> list[str]:
    """Rule violations including the per-team limit."""
    violations = manager.validate_squad()
    counts = team_counts(
        players[pid].team_id for pid in manager.player_ids if pid in players
    )
    for team_id, count in sorted(counts.items()):
        if count > MAX_PER_TEAM:
            violations.append(
                f"Too many players from team {team_id}: {count} > {MAX_PER_TEAM}"
            )
    return violations


def apply_plan(manager: ManagerState, plan: "Plan") -> ManagerState:
    """
    Apply a transfer plan and return the resulting squad.

    The incoming player takes the outgoing player's slot, the bank drops by
    the plan's spend and the free transfers are consumed. ``manager`` is
    never modified.

    Raises:
        ValueError: If a move sells a player the manager does not own
    """
    if not plan.moves:
        return manager

    picks: dict[int, SquadPick] = {p.player_id: p for p in manager.picks}
    for move in plan.moves:
        old = picks.pop(move.out_id, None)
        if old is None:
            raise ValueError(f"Player {move.out_id} is not in the squad")
        picks[move.in_id] = SquadPick(
            player_id=move.in_id,
            position=old.position,
            purchase_price=move.in_price,
            selling_price=move.in_price,
        )

    moves = len(plan.moves)
    return manager.model_copy(
        update={
            "picks": tuple(sorted(picks.values(), key=lambda p: p.position)),
            "bank": round(manager.bank - plan.spend, 1),
            "transfers_used": manager.transfers_used + moves,
            "free_transfers": max(0, manager.available_free_transfers - moves),
        }
    )
