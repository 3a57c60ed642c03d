"""
Player Value Model.

Turns a player's points-per-game, minutes probability and upcoming fixture
difficulty into a single expected value (EV) over a gameweek horizon:

    EV = sum over fixtures of
         ppg * (minutes / 100) * difficulty_mult * home_away_mult * damp

where damp is 1.0 for a team's first fixture in a gameweek and the
double-gameweek damping factor for every later one. Blank gameweeks add 0.
"""

import logging
from collections import defaultdict
from typing import Iterable

from ..config import EngineSettings
from ..data.models import Fixture, Player
from .fixtures import difficulty_multiplier, fixtures_for_team, side_difficulty

logger = logging.getLogger(__name__)


def is_eligible(player: Player, settings: EngineSettings) -> bool:
    """Player clears the minutes-probability cutoff."""
    return player.minutes_probability >= settings.min_minutes_pct


def fixture_ev(
    player: Player,
    fixture: Fixture,
    settings: EngineSettings,
    damp: float = 1.0,
) -> float:
    """EV contribution of one fixture, ignoring the eligibility gate."""
    is_home = fixture.home_team_id == player.team_id
    home_away = settings.home_mult if is_home else settings.away_mult
    return (
        player.points_per_game
        * (player.minutes_probability / 100)
        * difficulty_multiplier(side_difficulty(fixture, is_home))
        * home_away
        * damp
    )


def player_ev(
    player: Player,
    fixtures: Iterable[Fixture],
    start_gameweek: int,
    settings: EngineSettings,
    horizon: int | None = None,
) -> float:
    """
    Expected value of a player from ``start_gameweek`` over the horizon.

    Args:
        player: Player to score
        fixtures: Fixture calendar
        start_gameweek: First gameweek counted
        settings: Engine settings (cutoff, damping, multipliers, horizon)
        horizon: Override for settings.horizon

    Returns:
        EV, or 0.0 if the player is below the minutes cutoff or has no
        positive scoring rate
    """
    if not is_eligible(player, settings):
        return 0.0
    if player.points_per_game <= 0:
        return 0.0

    fixtures = list(fixtures)
    weeks = max(1, horizon if horizon is not None else settings.horizon)
    ev = 0.0

    for gameweek in range(start_gameweek, start_gameweek + weeks):
        for idx, fixture in enumerate(fixtures_for_team(fixtures, gameweek, player.team_id)):
            damp = 1.0 if idx == 0 else settings.dgw_damp
            ev += fixture_ev(player, fixture, settings, damp)

    return ev


class ProjectionEngine:
    """
    Scores a whole player catalog for one request.

    Fixtures are indexed by team once so scoring 700 players does not rescan
    the full calendar per player. The value table is cached per
    (start gameweek, horizon) since the inputs are frozen for the request.
    """

    def __init__(
        self,
        players: Iterable[Player],
        fixtures: Iterable[Fixture],
        settings: EngineSettings | None = None,
    ):
        """
        Initialize the projection engine.

        Args:
            players: All players
            fixtures: All fixtures
            settings: Engine settings; defaults if omitted
        """
        self.players = {p.id: p for p in players}
        self.settings = settings or EngineSettings()

        self._fixtures_by_team: dict[int, list[Fixture]] = defaultdict(list)
        for fixture in fixtures:
            self._fixtures_by_team[fixture.home_team_id].append(fixture)
            self._fixtures_by_team[fixture.away_team_id].append(fixture)

        self._cache: dict[tuple[int, int], dict[int, float]] = {}

    def project_player(
        self, player: Player, start_gameweek: int, horizon: int | None = None
    ) -> float:
        return player_ev(
            player,
            self._fixtures_by_team.get(player.team_id, []),
            start_gameweek,
            self.settings,
            horizon,
        )

    def project_all_players(
        self, start_gameweek: int, horizon: int | None = None
    ) -> dict[int, float]:
        """
        EV for every player in the catalog.

        Args:
            start_gameweek: First gameweek counted
            horizon: Override for settings.horizon (1 scores a single week)

        Returns:
            Dict mapping player_id to EV
        """
        weeks = horizon if horizon is not None else self.settings.horizon
        key = (start_gameweek, weeks)
        if key not in self._cache:
            values = {
                pid: self.project_player(player, start_gameweek, weeks)
                for pid, player in self.players.items()
            }
            eligible = sum(1 for v in values.values() if v > 0)
            logger.info(
                f"Projected {len(values)} players for GW{start_gameweek} "
                f"(+{weeks - 1}), {eligible} with positive EV"
            )
            self._cache[key] = values
        return self._cache[key]


def project_players(
    players: Iterable[Player],
    fixtures: Iterable[Fixture],
    start_gameweek: int,
    settings: EngineSettings | None = None,
    horizon: int | None = None,
) -> dict[int, float]:
    """Convenience wrapper: EV table for a catalog."""
    engine = ProjectionEngine(players, fixtures, settings)
    return engine.project_all_players(start_gameweek, horizon)
