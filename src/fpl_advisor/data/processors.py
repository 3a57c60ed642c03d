"""
Data Processors for FPL API Responses.

Transforms raw API JSON responses into typed Pydantic models and derives
the manager-level figures the engine needs (bank, budget, free transfers,
target gameweek).
"""

import logging
from datetime import datetime
from typing import Any

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

logger = logging.getLogger(__name__)


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _tenths(value: Any) -> float | None:
    """Convert an API amount in tenths (e.g. 55) to millions (5.5)."""
    if value is None:
        return None
    return float(value) / 10.0


def parse_chance_of_playing(value: Any) -> int | None:
    """
    Parse chance_of_playing_next_round.

    The API sends null for fully available players and occasionally a
    string. Anything unparseable is treated as fully available.
    """
    if value is None:
        return None
    try:
        return max(0, min(100, int(float(value))))
    except (TypeError, ValueError):
        return None


# =============================================================================
# Bootstrap Static Processing
# =============================================================================


def process_players(elements: list[dict[str, Any]]) -> list[Player]:
    """
    Process player data from bootstrap-static 'elements' array.

    Args:
        elements: List of player dictionaries from API

    Returns:
        List of Player models
    """
    players = []

    for elem in elements:
        try:
            player = Player(
                id=elem["id"],
                name=f"{elem.get('first_name', '')} {elem.get('second_name', '')}".strip(),
                web_name=elem.get("web_name", "") or "",
                team_id=elem["team"],
                position=Position(elem["element_type"]),
                # Price is in tenths (e.g., 100 = 10.0m)
                price=elem.get("now_cost", 0) / 10.0,
                points_per_game=float(elem.get("points_per_game", 0) or 0),
                chance_of_playing=parse_chance_of_playing(
                    elem.get("chance_of_playing_next_round")
                ),
                form=float(elem.get("form", 0) or 0),
            )
            players.append(player)

        except Exception as e:
            logger.warning(f"Error processing player {elem.get('id')}: {e}")
            continue

    logger.info(f"Processed {len(players)} players")
    return players


def process_teams(teams_data: list[dict[str, Any]]) -> list[Team]:
    """Process team data from bootstrap-static 'teams' array."""
    teams = []

    for team_data in teams_data:
        try:
            teams.append(
                Team(
                    id=team_data["id"],
                    name=team_data.get("name", ""),
                    short_name=team_data.get("short_name", ""),
                )
            )
        except Exception as e:
            logger.warning(f"Error processing team {team_data.get('id')}: {e}")
            continue

    logger.info(f"Processed {len(teams)} teams")
    return teams


def process_gameweeks(events: list[dict[str, Any]]) -> list[GameweekInfo]:
    """Process gameweek data from bootstrap-static 'events' array."""
    gameweeks = []

    for event in events:
        try:
            gameweeks.append(
                GameweekInfo(
                    id=event["id"],
                    name=event.get("name", f"Gameweek {event['id']}"),
                    deadline=_parse_time(event.get("deadline_time")),
                    is_current=bool(event.get("is_current", False)),
                    is_next=bool(event.get("is_next", False)),
                    finished=bool(event.get("finished", False)),
                )
            )
        except Exception as e:
            logger.warning(f"Error processing gameweek {event.get('id')}: {e}")
            continue

    logger.info(f"Processed {len(gameweeks)} gameweeks")
    return gameweeks


def current_gameweek(gameweeks: list[GameweekInfo]) -> int:
    """Current gameweek, else next, else first unfinished, else last."""
    for predicate in (
        lambda gw: gw.is_current,
        lambda gw: gw.is_next,
        lambda gw: not gw.finished,
    ):
        found = next((gw for gw in gameweeks if predicate(gw)), None)
        if found is not None:
            return found.id
    return gameweeks[-1].id if gameweeks else 1


def next_gameweek(gameweeks: list[GameweekInfo]) -> int:
    """
    The gameweek advice targets.

    The flagged next gameweek; else the one after the current gameweek
    (or the current one at season end); else the first unfinished; else
    the last.
    """
    nxt = next((gw for gw in gameweeks if gw.is_next), None)
    if nxt is not None:
        return nxt.id

    for i, gw in enumerate(gameweeks):
        if gw.is_current:
            return gameweeks[i + 1].id if i + 1 < len(gameweeks) else gw.id

    unfinished = next((gw for gw in gameweeks if not gw.finished), None)
    if unfinished is not None:
        return unfinished.id
    return gameweeks[-1].id if gameweeks else 1


# =============================================================================
# Fixture Processing
# =============================================================================


def process_fixtures(fixtures_data: list[dict[str, Any]]) -> list[Fixture]:
    """
    Process fixture data from fixtures endpoint.

    Missing difficulty ratings are kept as None and read as neutral later.

    Args:
        fixtures_data: List of fixture dictionaries from API

    Returns:
        List of Fixture models
    """
    fixtures = []

    for fix in fixtures_data:
        try:
            fixture = Fixture(
                id=fix["id"],
                gameweek=fix.get("event") or 0,  # Can be None for unscheduled
                home_team_id=fix["team_h"],
                away_team_id=fix["team_a"],
                home_difficulty=fix.get("team_h_difficulty", fix.get("difficulty")),
                away_difficulty=fix.get("team_a_difficulty", fix.get("difficulty")),
                kickoff_time=_parse_time(fix.get("kickoff_time")),
                finished=bool(fix.get("finished", False)),
            )
            fixtures.append(fixture)

        except Exception as e:
            logger.warning(f"Error processing fixture {fix.get('id')}: {e}")
            continue

    logger.info(f"Processed {len(fixtures)} fixtures")
    return fixtures


# =============================================================================
# Manager Processing
# =============================================================================


def process_chips_used(history: dict[str, Any] | None) -> list[ChipUsage]:
    """Process the 'chips' array of the entry history endpoint."""
    used = []
    for chip in (history or {}).get("chips", []) or []:
        try:
            used.append(ChipUsage(chip=ChipType(chip.get("name", "")), gameweek=chip["event"]))
        except (KeyError, ValueError) as e:
            logger.warning(f"Skipping unknown chip record {chip}: {e}")
    return used


def derive_bank(entry: dict[str, Any] | None, picks: dict[str, Any] | None) -> float:
    """Bank from the picks entry history, else the entry's last deadline bank, else 0."""
    bank = _tenths(((picks or {}).get("entry_history") or {}).get("bank"))
    if bank is not None:
        return bank
    bank = _tenths((entry or {}).get("last_deadline_bank"))
    if bank is not None:
        return bank
    return 0.0


def process_manager(
    entry: dict[str, Any] | None,
    picks: dict[str, Any],
    history: dict[str, Any] | None = None,
) -> ManagerState:
    """
    Build ManagerState from the entry, picks and history endpoints.

    The public picks endpoint does not expose selling prices, so those stay
    None and the annotator falls back to market price.
    """
    entry = entry or {}
    squad_picks = [
        SquadPick(
            player_id=pick["element"],
            position=pick["position"],
            is_captain=pick.get("is_captain", False),
            is_vice_captain=pick.get("is_vice_captain", False),
            purchase_price=_tenths(pick.get("purchase_price")),
            selling_price=_tenths(pick.get("selling_price")),
        )
        for pick in picks.get("picks", [])
    ]

    entry_history = picks.get("entry_history") or {}
    manager = ManagerState(
        manager_id=entry.get("id", 0) or 0,
        team_name=entry.get("name", "") or "",
        picks=squad_picks,
        bank=derive_bank(entry, picks),
        transfers_used=entry_history.get("event_transfers", 0) or 0,
        chips_used=process_chips_used(history),
        squad_value=_tenths(entry.get("last_deadline_value")),
        deadline_bank=_tenths(entry.get("last_deadline_bank")),
    )

    logger.info(
        f"Processed squad: {len(manager.picks)} players, "
        f"bank={manager.bank:.1f}, FTs={manager.available_free_transfers}"
    )
    return manager


def derive_budget(
    manager: ManagerState,
    players: dict[int, Player],
    default_budget: float = 100.0,
    floor: float = 70.0,
) -> float:
    """
    Total budget available for a full rebuild.

    Squad value plus bank at the last deadline when known, else the sum of
    current list prices of the owned players plus bank. Anything missing or
    at or below ``floor`` is treated as unknown and ``default_budget`` is used.
    """
    if manager.squad_value is not None and manager.deadline_bank is not None:
        budget = manager.squad_value + manager.deadline_bank
    else:
        budget = sum(
            players[pid].price for pid in manager.player_ids if pid in players
        ) + manager.bank

    if budget <= floor:
        logger.debug(f"Derived budget {budget:.1f} at or below floor, using {default_budget}")
        return default_budget
    return round(budget, 1)


# =============================================================================
# Full Snapshot Processing
# =============================================================================


def process_snapshot(
    bootstrap: dict[str, Any],
    fixtures_data: list[dict[str, Any]],
    entry: dict[str, Any] | None = None,
    picks: dict[str, Any] | None = None,
    history: dict[str, Any] | None = None,
) -> Snapshot:
    """
    Process raw endpoint payloads into one Snapshot.

    Args:
        bootstrap: Full bootstrap-static API response
        fixtures_data: Fixtures endpoint response
        entry: Entry endpoint response (optional)
        picks: Entry picks response (optional)
        history: Entry history response (optional)

    Returns:
        Snapshot ready for the engine
    """
    gameweeks = process_gameweeks(bootstrap.get("events", []))
    manager = process_manager(entry, picks, history) if picks else None

    return Snapshot(
        players=process_players(bootstrap.get("elements", [])),
        teams=process_teams(bootstrap.get("teams", [])),
        fixtures=process_fixtures(fixtures_data),
        gameweeks=gameweeks,
        manager=manager,
        next_gameweek=next_gameweek(gameweeks),
    )
