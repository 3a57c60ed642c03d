"""
Player Value Model and Fixture Difficulty Service.
"""

from .fixtures import (
    FixtureOutlook,
    difficulty_multiplier,
    fixture_badge,
    fixture_outlook,
    fixtures_for_team,
    gameweek_fixture_counts,
    side_difficulty,
)
from .projections import ProjectionEngine, is_eligible, player_ev, project_players

__all__ = [
    # Fixtures
    "FixtureOutlook",
    "difficulty_multiplier",
    "fixture_badge",
    "fixture_outlook",
    "fixtures_for_team",
    "gameweek_fixture_counts",
    "side_difficulty",
    # Projections
    "ProjectionEngine",
    "is_eligible",
    "player_ev",
    "project_players",
]
