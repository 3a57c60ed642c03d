"""
FPL API endpoint definitions.

Only the public, unauthenticated endpoints the advisor reads.
Note: The FPL API is undocumented and unofficial - URLs may change.
"""

FPL_BASE_URL = "https://fantasy.premierleague.com/api"

# Bootstrap Static - players, teams, gameweeks
BOOTSTRAP_STATIC = f"{FPL_BASE_URL}/bootstrap-static/"

# Fixtures - teams, difficulties, kickoff times
# Can filter with ?event=N or ?future=1
FIXTURES = f"{FPL_BASE_URL}/fixtures/"

# Entry (Manager) - team name, last deadline value and bank
ENTRY = f"{FPL_BASE_URL}/entry/{{manager_id}}/"

# Entry History - season history and chips played
ENTRY_HISTORY = f"{FPL_BASE_URL}/entry/{{manager_id}}/history/"

# Entry Picks - squad for a gameweek, with bank and transfers made
# Only works if the team is public
ENTRY_PICKS = f"{FPL_BASE_URL}/entry/{{manager_id}}/event/{{event_id}}/picks/"


def get_entry_url(manager_id: int) -> str:
    """Get URL for manager entry."""
    return ENTRY.format(manager_id=manager_id)


def get_entry_history_url(manager_id: int) -> str:
    """Get URL for manager history."""
    return ENTRY_HISTORY.format(manager_id=manager_id)


def get_entry_picks_url(manager_id: int, event_id: int) -> str:
    """Get URL for manager's picks in a gameweek."""
    return ENTRY_PICKS.format(manager_id=manager_id, event_id=event_id)


def get_fixtures_url(event_id: int | None = None, future_only: bool = False) -> str:
    """
    Get URL for fixtures with optional filters.

    Args:
        event_id: Specific gameweek to filter by
        future_only: Only return upcoming fixtures
    """
    url = FIXTURES
    params = []

    if event_id is not None:
        params.append(f"event={event_id}")
    if future_only:
        params.append("future=1")

    if params:
        url += "?" + "&".join(params)

    return url
