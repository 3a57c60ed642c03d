"""
FPL API Integration Module.

Provides clients for reading the Fantasy Premier League API.
"""

from .client import (
    DataUnavailableError,
    FPLAPIError,
    FPLClient,
    FPLNotFoundError,
    FPLPrivateTeamError,
    SyncFPLClient,
)

__all__ = [
    # Client
    "FPLClient",
    "SyncFPLClient",
    # Errors
    "DataUnavailableError",
    "FPLAPIError",
    "FPLNotFoundError",
    "FPLPrivateTeamError",
]
