"""
Engine presets and squad-aware auto-tuning.

Modes are named bundles of engine overrides. Auto-tuning then nudges the
settings for the situation: a fragile XI raises the minutes cutoff and the
hit bar, a double-gameweek-heavy week looks further ahead, and a blank-heavy
week looks only one week ahead and demands more before taking hits.
"""

import logging
from enum import StrEnum
from typing import Any

from ..config import ChipSettings, EngineSettings
from ..data.models import Fixture, ManagerState, Player
from ..predictions.fixtures import gameweek_fixture_counts

logger = logging.getLogger(__name__)

RISKY_CUTOFF = 80
DGW_HEAVY_TEAMS = 3
BLANK_HEAVY_TEAMS = 4


class Mode(StrEnum):
    """Named engine presets."""

    DEFAULT = "default"
    PRO = "pro"
    CHAMP = "champ"


MODE_OVERRIDES: dict[Mode, dict[str, Any]] = {
    Mode.DEFAULT: {},
    Mode.PRO: {
        "horizon": 2,
        "min_minutes_pct": 80,
        "dgw_damp": 0.92,
        "min_delta_single": 0.5,
        "min_delta_combo": 1.5,
        "max_pool_per_position": 400,
        "max_singles": 500,
        "hit_threshold": 5.0,
    },
    Mode.CHAMP: {
        "horizon": 3,
        "min_minutes_pct": 78,
        "dgw_damp": 0.94,
        "min_delta_single": 0.4,
        "min_delta_combo": 1.2,
        "max_pool_per_position": 500,
        "max_singles": 700,
        "hit_threshold": 4.0,
    },
}


def with_overrides(settings: EngineSettings, **overrides: Any) -> EngineSettings:
    """New validated EngineSettings with some fields replaced."""
    return EngineSettings(**{**settings.model_dump(), **overrides})


def apply_mode(settings: EngineSettings, mode: Mode | str) -> EngineSettings:
    return with_overrides(settings, **MODE_OVERRIDES[Mode(mode)])


def risky_starter_count(
    manager: ManagerState, players: dict[int, Player], cutoff: int = RISKY_CUTOFF
) -> int:
    """Starters below ``cutoff`` minutes probability (unknown ids are skipped)."""
    return sum(
        1
        for pick in manager.starters
        if pick.player_id in players and players[pick.player_id].minutes_probability < cutoff
    )


def gameweek_context(
    fixtures: list[Fixture], gameweek: int, team_ids: list[int]
) -> tuple[int, int]:
    """(teams with a double, teams with a blank) in ``gameweek``."""
    counts = gameweek_fixture_counts(fixtures, gameweek)
    dgw_teams = sum(1 for c in counts.values() if c > 1)
    blank_teams = sum(1 for t in team_ids if counts.get(t, 0) == 0)
    return dgw_teams, blank_teams


def _risky_minutes(base: int, risky: int) -> int:
    if risky >= 3:
        return base + 8
    if risky == 2:
        return base + 5
    if risky == 1:
        return base + 2
    return base


def auto_tune(
    settings: EngineSettings,
    manager: ManagerState,
    players: dict[int, Player],
    fixtures: list[Fixture],
    gameweek: int,
    team_ids: list[int],
) -> EngineSettings:
    """
    Tune engine settings for this squad and gameweek.

    Args:
        settings: Starting settings (after any mode)
        manager: Manager state
        players: Player catalog keyed by id
        fixtures: Fixture calendar
        gameweek: Target gameweek
        team_ids: All team ids (for blank detection)

    Returns:
        New EngineSettings; ``settings`` is not modified
    """
    risky = risky_starter_count(manager, players)
    dgw_teams, blank_teams = gameweek_context(fixtures, gameweek, team_ids)

    horizon = settings.horizon
    damp = settings.dgw_damp
    min_pct = min(100, _risky_minutes(settings.min_minutes_pct, risky))
    hit = settings.hit_threshold + (1.0 if risky >= 3 else 0.0)

    if dgw_teams >= DGW_HEAVY_TEAMS:
        horizon = 3
        damp = 0.92
        hit = min(hit, 4.0)
        min_pct = max(75, min_pct - 3)

    if blank_teams >= BLANK_HEAVY_TEAMS:
        horizon = 1
        hit = max(hit, 6.0)
        if risky >= 2:
            min_pct = max(min_pct, 85)

    logger.info(
        f"Auto-tune: {risky} risky starters, {dgw_teams} DGW teams, "
        f"{blank_teams} blank teams -> h={horizon}, min={min_pct}%, "
        f"damp={damp}, hit>={hit}"
    )
    return with_overrides(
        settings,
        horizon=horizon,
        dgw_damp=damp,
        min_minutes_pct=min_pct,
        hit_threshold=hit,
    )


def auto_tune_chips(
    chip_settings: ChipSettings,
    fixtures: list[Fixture],
    gameweek: int,
    team_ids: list[int],
) -> ChipSettings:
    """
    Tune chip thresholds for the gameweek.

    DGW-heavy weeks make Triple Captain easier and Free Hit harder;
    blank-heavy weeks do the opposite and demand a stronger bench.
    """
    dgw_teams, blank_teams = gameweek_context(fixtures, gameweek, team_ids)
    tc_min, bb_min, fh_min = chip_settings.tc_min, chip_settings.bb_min, chip_settings.fh_min

    if dgw_teams >= DGW_HEAVY_TEAMS:
        tc_min = 7.0
        fh_min = 12.0

    if blank_teams >= BLANK_HEAVY_TEAMS:
        tc_min = max(tc_min, 8.5)
        bb_min = max(bb_min, 12.0)
        fh_min = min(fh_min, 8.0)

    return ChipSettings(
        **{**chip_settings.model_dump(), "tc_min": tc_min, "bb_min": bb_min, "fh_min": fh_min}
    )
