"""
Fixture Difficulty Service.

Resolves a team's matches in a gameweek and converts FDR ratings into
multipliers for the value model.
"""

from collections import Counter
from datetime import datetime, timezone
from enum import StrEnum
from typing import Iterable

from ..data.models import Fixture

NEUTRAL_DIFFICULTY = 3
MIN_DIFFICULTY = 2
MAX_DIFFICULTY = 5

# Sorts fixtures with no kickoff time after every scheduled one
_NO_KICKOFF = datetime.max.replace(tzinfo=timezone.utc)


def _kickoff_key(fixture: Fixture) -> tuple[datetime, int]:
    kickoff = fixture.kickoff_time
    if kickoff is None:
        return (_NO_KICKOFF, fixture.id)
    if kickoff.tzinfo is None:
        kickoff = kickoff.replace(tzinfo=timezone.utc)
    return (kickoff, fixture.id)


def fixtures_for_team(
    fixtures: Iterable[Fixture], gameweek: int, team_id: int
) -> list[Fixture]:
    """
    A team's fixtures in one gameweek, earliest kickoff first.

    Fixtures without a kickoff time sort last; equal kickoffs fall back to
    fixture id so the "first fixture" of a double is always the same one.
    """
    matches = [f for f in fixtures if f.gameweek == gameweek and f.involves(team_id)]
    return sorted(matches, key=_kickoff_key)


def side_difficulty(fixture: Fixture, is_home: bool) -> int:
    """FDR for one side of a fixture; missing ratings read as neutral (3)."""
    value = fixture.home_difficulty if is_home else fixture.away_difficulty
    return NEUTRAL_DIFFICULTY if value is None else value


def difficulty_multiplier(fdr: int | float | None) -> float:
    """
    Scale EV by fixture difficulty.

    FDR is clamped to 2..5, so 2 (easy) gives 1.10 and 5 (hard) gives 0.80.
    """
    if fdr is None:
        fdr = NEUTRAL_DIFFICULTY
    x = max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, fdr))
    return 1.30 - 0.10 * x


def gameweek_fixture_counts(fixtures: Iterable[Fixture], gameweek: int) -> Counter[int]:
    """Fixture count per team for one gameweek (missing team means a blank)."""
    counts: Counter[int] = Counter()
    for fixture in fixtures:
        if fixture.gameweek == gameweek:
            counts[fixture.home_team_id] += 1
            counts[fixture.away_team_id] += 1
    return counts


def fixture_badge(team_id: int, counts: Counter[int]) -> str:
    count = counts.get(team_id, 0)
    if count > 1:
        return "(DGW)"
    if count == 0:
        return "(Blank)"
    return ""


class FixtureOutlook(StrEnum):
    """How a team's fixtures look over a horizon."""

    BLANK = "blank"
    DOUBLE = "double"
    GOOD = "good"
    TOUGH = "tough"
    MIXED = "mixed"


def fixture_outlook(
    fixtures: Iterable[Fixture], team_id: int, start: int, horizon: int
) -> FixtureOutlook:
    """
    Summarize a team's fixtures from ``start`` over ``horizon`` gameweeks.

    All blank is BLANK, any double is DOUBLE, otherwise the average FDR
    decides: <= 2.7 GOOD, >= 3.7 TOUGH, else MIXED.
    """
    fixtures = list(fixtures)
    difficulties: list[int] = []
    has_double = False

    for gameweek in range(start, start + max(1, horizon)):
        matches = fixtures_for_team(fixtures, gameweek, team_id)
        if len(matches) > 1:
            has_double = True
        difficulties.extend(
            side_difficulty(f, f.home_team_id == team_id) for f in matches
        )

    if not difficulties:
        return FixtureOutlook.BLANK
    if has_double:
        return FixtureOutlook.DOUBLE

    avg = sum(difficulties) / len(difficulties)
    if avg <= 2.7:
        return FixtureOutlook.GOOD
    if avg >= 3.7:
        return FixtureOutlook.TOUGH
    return FixtureOutlook.MIXED
