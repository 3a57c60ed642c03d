"""
Data Models Module.

Contains Pydantic models for FPL entities and processors for API responses.
"""

from .models import (
    ChipType,
    ChipUsage,
    Fixture,
    GameweekInfo,
    ManagerState,
    Player,
    Position,
    Snapshot,
    SquadPick,
    Team,
)
from .processors import (
    current_gameweek,
    derive_bank,
    derive_budget,
    next_gameweek,
    process_fixtures,
    process_gameweeks,
    process_manager,
    process_players,
    process_snapshot,
    process_teams,
)

__all__ = [
    # Models
    "ChipType",
    "ChipUsage",
    "Fixture",
    "GameweekInfo",
    "ManagerState",
    "Player",
    "Position",
    "Snapshot",
    "SquadPick",
    "Team",
    # Processors
    "current_gameweek",
    "derive_bank",
    "derive_budget",
    "next_gameweek",
    "process_fixtures",
    "process_gameweeks",
    "process_manager",
    "process_players",
    "process_snapshot",
    "process_teams",
]
