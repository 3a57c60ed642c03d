"""
Pydantic data models for FPL Advisor.

These models represent the read-only inputs of one advisory request:
players, teams, fixtures, gameweeks and the manager's squad state.
"""

from datetime import datetime
from enum import IntEnum, StrEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Position(IntEnum):
    """Player positions in FPL (matches FPL element_type)."""

    GK = 1
    DEF = 2
    MID = 3
    FWD = 4


class ChipType(StrEnum):
    """Available FPL chips."""

    WILDCARD = "wildcard"
    FREE_HIT = "freehit"
    BENCH_BOOST = "bboost"
    TRIPLE_CAPTAIN = "3xc"


# =============================================================================
# Catalog Models
# =============================================================================


class Player(BaseModel):
    """Represents a Premier League player in FPL."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="FPL element ID")
    name: str = Field(default="", description="Player's display name")
    web_name: str = Field(default="", description="Short name shown in FPL")
    team_id: int = Field(description="Premier League team ID")
    position: Position = Field(description="Playing position")
    price: float = Field(description="Current price in millions (e.g., 10.5)")
    points_per_game: float = Field(default=0.0, description="Average points per game")
    chance_of_playing: int | None = Field(
        default=None, description="Chance of playing next round (0-100)"
    )
    form: float = Field(default=0.0, description="Recent form rating")

    @computed_field
    @property
    def minutes_probability(self) -> int:
        """Chance of playing clamped to 0-100; unknown means fully available."""
        if self.chance_of_playing is None:
            return 100
        return max(0, min(100, self.chance_of_playing))

    @property
    def display_name(self) -> str:
        return self.web_name or self.name or f"#{self.id}"


class Team(BaseModel):
    """Premier League team."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="FPL team ID")
    name: str = Field(default="", description="Full team name")
    short_name: str = Field(default="", description="3-letter abbreviation")


class Fixture(BaseModel):
    """A single Premier League match."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Fixture ID")
    gameweek: int = Field(description="Gameweek number (0 if unscheduled)")
    home_team_id: int = Field(description="Home team ID")
    away_team_id: int = Field(description="Away team ID")
    home_difficulty: int | None = Field(
        default=None, description="FDR for home team (clamped when scored)"
    )
    away_difficulty: int | None = Field(
        default=None, description="FDR for away team (clamped when scored)"
    )
    kickoff_time: datetime | None = Field(default=None, description="Match kickoff time")
    finished: bool = Field(default=False, description="Has the match finished")

    def involves(self, team_id: int) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)


class GameweekInfo(BaseModel):
    """Information about a gameweek."""

    id: int = Field(description="Gameweek number")
    name: str = Field(default="", description="Display name (e.g., 'Gameweek 10')")
    deadline: datetime | None = Field(default=None, description="Transfer deadline")
    is_current: bool = Field(default=False)
    is_next: bool = Field(default=False)
    finished: bool = Field(default=False)


# =============================================================================
# Manager State
# =============================================================================


class SquadPick(BaseModel):
    """A player in the manager's squad with its slot and prices."""

    model_config = ConfigDict(frozen=True)

    player_id: int = Field(description="Player's FPL element ID")
    position: int = Field(ge=1, le=15, description="Position in squad (1-15)")
    is_captain: bool = Field(default=False)
    is_vice_captain: bool = Field(default=False)
    purchase_price: float | None = Field(default=None, description="Price when purchased")
    selling_price: float | None = Field(default=None, description="Current selling price")

    @computed_field
    @property
    def is_starter(self) -> bool:
        """Check if player is in starting XI (positions 1-11)."""
        return self.position <= 11

    def sale_price(self, market_price: float) -> float:
        """Selling price, else purchase price, else current market price."""
        if self.selling_price is not None:
            return self.selling_price
        if self.purchase_price is not None:
            return self.purchase_price
        return market_price


class ChipUsage(BaseModel):
    """A chip the manager has already played."""

    chip: ChipType
    gameweek: int = Field(description="Gameweek the chip was played")


class ManagerState(BaseModel):
    """
    Everything the engine knows about one manager for a request.

    Passed explicitly into every call; the engine never stores it. Applying a
    transfer plan produces a new ManagerState and leaves this one untouched.
    """

    model_config = ConfigDict(frozen=True)

    manager_id: int = Field(default=0)
    team_name: str = Field(default="")
    picks: tuple[SquadPick, ...] = Field(description="15 players in squad")
    bank: float = Field(default=0.0, description="Money in bank (millions)")
    transfers_used: int = Field(
        default=0, ge=0, description="Transfers already made this gameweek"
    )
    free_transfers: int | None = Field(
        default=None,
        ge=0,
        le=5,
        description="Known free transfers; derived from transfers_used when missing",
    )
    chips_used: tuple[ChipUsage, ...] = Field(default_factory=tuple)
    squad_value: float | None = Field(
        default=None, description="Squad value at last deadline (millions)"
    )
    deadline_bank: float | None = Field(
        default=None, description="Bank at last deadline (millions)"
    )

    @computed_field
    @property
    def available_free_transfers(self) -> int:
        """Free transfers assumed for this gameweek."""
        if self.free_transfers is not None:
            return self.free_transfers
        return 2 if self.transfers_used == 0 else 1

    @property
    def player_ids(self) -> list[int]:
        return [p.player_id for p in self.picks]

    @property
    def starters(self) -> list[SquadPick]:
        return sorted((p for p in self.picks if p.is_starter), key=lambda p: p.position)

    @property
    def bench(self) -> list[SquadPick]:
        return sorted((p for p in self.picks if not p.is_starter), key=lambda p: p.position)

    def chip_uses(self, chip: ChipType) -> int:
        """How many times a chip has been played this season."""
        return sum(1 for c in self.chips_used if c.chip == chip)

    def validate_squad(self) -> list[str]:
        """Validate squad against FPL rules. Returns list of violations."""
        violations = []

        if len(self.picks) != 15:
            violations.append(f"Squad must have 15 players, has {len(self.picks)}")

        ids = self.player_ids
        if len(set(ids)) != len(ids):
            violations.append("Squad contains duplicate players")

        slots = [p.position for p in self.picks]
        if len(set(slots)) != len(slots):
            violations.append("Squad contains duplicate slot positions")

        # Team limits need player data; see optimizer.squad.squad_violations

        return violations


# =============================================================================
# Request Snapshot
# =============================================================================


class Snapshot(BaseModel):
    """One frozen bundle of inputs for an advisory request."""

    model_config = ConfigDict(frozen=True)

    players: tuple[Player, ...]
    teams: tuple[Team, ...] = Field(default_factory=tuple)
    fixtures: tuple[Fixture, ...] = Field(default_factory=tuple)
    gameweeks: tuple[GameweekInfo, ...] = Field(default_factory=tuple)
    manager: ManagerState | None = None
    next_gameweek: int = Field(ge=1, description="Gameweek the advice targets")

    def players_by_id(self) -> dict[int, Player]:
        return {p.id: p for p in self.players}

    def teams_by_id(self) -> dict[int, Team]:
        return {t.id: t for t in self.teams}
