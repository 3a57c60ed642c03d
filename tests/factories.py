"""Synthetic catalogs and squads shared by the test modules."""

from datetime import datetime, timedelta, timezone

from fpl_advisor.data.models import (
    ChipType,
    ChipUsage,
    Fixture,
    ManagerState,
    Player,
    Position,
    SquadPick,
    Team,
)

GK, DEF, MID, FWD = Position.GK, Position.DEF, Position.MID, Position.FWD

BASE_KICKOFF = datetime(2025, 8, 16, 12, 0, tzinfo=timezone.utc)

# Owned ids 1-15: three per team across teams 1-5
OWNED = {
    1: (GK, 1), 2: (GK, 2),
    3: (DEF, 1), 4: (DEF, 2), 5: (DEF, 3), 6: (DEF, 4), 7: (DEF, 5),
    8: (MID, 1), 9: (MID, 2), 10: (MID, 3), 11: (MID, 4), 12: (MID, 5),
    13: (FWD, 3), 14: (FWD, 4), 15: (FWD, 5),
}

# Slot order: GK, 4 DEF, 4 MID, 2 FWD, then bench GK, DEF, MID, FWD
SLOT_ORDER = [1, 3, 4, 5, 6, 8, 9, 10, 11, 13, 14, 2, 7, 12, 15]


def make_player(
    pid: int,
    position: Position,
    team_id: int,
    price: float = 5.0,
    ppg: float = 4.0,
    chance: int | None = None,
    name: str | None = None,
) -> Player:
    return Player(
        id=pid,
        web_name=name or f"P{pid}",
        team_id=team_id,
        position=position,
        price=price,
        points_per_game=ppg,
        chance_of_playing=chance,
    )


def make_fixture(
    fid: int,
    gameweek: int,
    home: int,
    away: int,
    home_difficulty: int | None = 3,
    away_difficulty: int | None = 3,
    kickoff: datetime | None = None,
) -> Fixture:
    return Fixture(
        id=fid,
        gameweek=gameweek,
        home_team_id=home,
        away_team_id=away,
        home_difficulty=home_difficulty,
        away_difficulty=away_difficulty,
        kickoff_time=kickoff,
    )


def owned_players(price: float = 5.0, ppg: float = 4.0) -> list[Player]:
    return [make_player(pid, pos, team, price, ppg) for pid, (pos, team) in OWNED.items()]


def make_teams(count: int = 10) -> list[Team]:
    return [Team(id=i, name=f"Team {i}", short_name=f"T{i:02d}") for i in range(1, count + 1)]


def make_manager(
    ids: list[int] | None = None,
    bank: float = 0.0,
    transfers_used: int = 0,
    free_transfers: int | None = 1,
    chips: list[ChipType] | None = None,
    selling: dict[int, float] | None = None,
) -> ManagerState:
    """Manager owning ``ids`` in slot order (defaults to SLOT_ORDER)."""
    ids = ids or SLOT_ORDER
    selling = selling or {}
    return ManagerState(
        manager_id=42,
        team_name="Test XI",
        picks=tuple(
            SquadPick(player_id=pid, position=slot, selling_price=selling.get(pid))
            for slot, pid in enumerate(ids, start=1)
        ),
        bank=bank,
        transfers_used=transfers_used,
        free_transfers=free_transfers,
        chips_used=tuple(ChipUsage(chip=c, gameweek=1) for c in (chips or [])),
    )


def round_robin(gameweek: int, team_ids: list[int], start_id: int = 1) -> list[Fixture]:
    """One fixture per pair of consecutive teams, neutral difficulty."""
    fixtures = []
    for i in range(0, len(team_ids) - 1, 2):
        fixtures.append(
            make_fixture(
                start_id + i // 2,
                gameweek,
                team_ids[i],
                team_ids[i + 1],
                kickoff=BASE_KICKOFF + timedelta(days=7 * gameweek, hours=i),
            )
        )
    return fixtures


def flat_values(players: list[Player], value: float = 4.0) -> dict[int, float]:
    return {p.id: value for p in players}
