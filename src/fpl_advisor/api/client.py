"""
FPL API Client.

Async HTTP client for the public Fantasy Premier League API. Includes retry
logic and a snapshot fetch that issues the independent reads in parallel and
fails the whole request if any of them fails.
"""

import asyncio
import logging
from typing import Any

import httpx

from ..data.models import Snapshot
from ..data.processors import current_gameweek, process_gameweeks, process_snapshot
from .endpoints import (
    BOOTSTRAP_STATIC,
    get_entry_history_url,
    get_entry_picks_url,
    get_entry_url,
    get_fixtures_url,
)

logger = logging.getLogger(__name__)


class FPLAPIError(Exception):
    """Base exception for FPL API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class FPLNotFoundError(FPLAPIError):
    """Raised when resource not found."""

    pass


class FPLPrivateTeamError(FPLAPIError):
    """Raised when a manager's picks are not publicly visible."""

    pass


class DataUnavailableError(FPLAPIError):
    """
    A required read failed or timed out.

    The advisory is aborted; the caller should tell the user to retry.
    """

    pass


class FPLClient:
    """
    Async client for the FPL API.

    Handles HTTP requests with automatic retries, timeouts, and error handling.
    """

    DEFAULT_TIMEOUT = 10.0
    MAX_RETRIES = 3
    RETRY_DELAY = 1.0  # seconds
    RETRY_BACKOFF = 2.0  # multiplier for exponential backoff

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_delay: float = RETRY_DELAY,
    ):
        """
        Initialize the FPL client.

        Args:
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            transport: Optional httpx transport (used by tests)
            retry_delay: Initial delay between retries in seconds
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "FPLClient":
        """Async context manager entry."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_client(self) -> None:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
                headers={
                    "User-Agent": "FPL-Advisor/0.1",
                    "Accept": "application/json",
                },
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, url: str, **kwargs: Any) -> dict[str, Any] | list[Any]:
        """
        Make a GET request with retry logic.

        Args:
            url: Request URL
            **kwargs: Additional arguments for httpx

        Returns:
            JSON response data

        Raises:
            FPLAPIError: On request failure after retries
        """
        await self._ensure_client()
        assert self._client is not None

        last_error: Exception | None = None
        delay = self.retry_delay

        for attempt in range(self.max_retries):
            try:
                logger.debug(f"Request attempt {attempt + 1}: GET {url}")

                response = await self._client.get(url, **kwargs)

                if response.status_code == 200:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise FPLAPIError(
                            f"Invalid JSON response from {url}",
                            status_code=response.status_code,
                        ) from e

                elif response.status_code in (401, 403):
                    raise FPLPrivateTeamError(
                        f"Access denied (is the team private?): {url}",
                        status_code=response.status_code,
                    )

                elif response.status_code == 404:
                    raise FPLNotFoundError(
                        f"Resource not found: {url}",
                        status_code=404,
                    )

                elif response.status_code == 429:
                    retry_after = float(response.headers.get("Retry-After", delay * 2))
                    logger.warning(f"Rate limited, waiting {retry_after}s")
                    last_error = FPLAPIError("Rate limited", status_code=429)
                    await asyncio.sleep(retry_after)
                    continue

                elif response.status_code >= 500:
                    logger.warning(
                        f"Server error {response.status_code}, "
                        f"retrying in {delay}s"
                    )
                    last_error = FPLAPIError(
                        f"Server error {response.status_code}",
                        status_code=response.status_code,
                    )
                    await asyncio.sleep(delay)
                    delay *= self.RETRY_BACKOFF
                    continue

                else:
                    raise FPLAPIError(
                        f"Unexpected status code: {response.status_code}",
                        status_code=response.status_code,
                    )

            except httpx.TimeoutException as e:
                logger.warning(f"Request timeout, attempt {attempt + 1}")
                last_error = e
                await asyncio.sleep(delay)
                delay *= self.RETRY_BACKOFF

            except httpx.RequestError as e:
                logger.warning(f"Request error: {e}, attempt {attempt + 1}")
                last_error = e
                await asyncio.sleep(delay)
                delay *= self.RETRY_BACKOFF

        raise FPLAPIError(
            f"Request failed after {self.max_retries} attempts: {last_error}"
        )

    # =========================================================================
    # Public API Methods
    # =========================================================================

    async def get_bootstrap_static(self) -> dict[str, Any]:
        """Get bootstrap-static data (players, teams, gameweeks)."""
        data = await self.get(BOOTSTRAP_STATIC)
        self._validate_bootstrap(data)
        return data  # type: ignore

    async def get_fixtures(
        self,
        event_id: int | None = None,
        future_only: bool = False,
    ) -> list[dict[str, Any]]:
        """Get fixture data."""
        data = await self.get(get_fixtures_url(event_id, future_only))
        return data  # type: ignore

    async def get_entry(self, manager_id: int) -> dict[str, Any]:
        """Get public manager information."""
        data = await self.get(get_entry_url(manager_id))
        return data  # type: ignore

    async def get_entry_history(self, manager_id: int) -> dict[str, Any]:
        """Get manager's season history, including chips played."""
        data = await self.get(get_entry_history_url(manager_id))
        return data  # type: ignore

    async def get_entry_picks(self, manager_id: int, event_id: int) -> dict[str, Any]:
        """
        Get manager's team for a specific gameweek.

        Note: Only works if team is public.
        """
        data = await self.get(get_entry_picks_url(manager_id, event_id))
        return data  # type: ignore

    async def fetch_snapshot(self, manager_id: int | None = None) -> Snapshot:
        """
        Fetch everything one advisory request needs.

        Bootstrap, fixtures, entry and history are read in parallel; the picks
        for the current gameweek follow once the gameweek is known. Any failed
        read aborts the whole fetch so the engine never runs on partial data.

        Args:
            manager_id: Manager to load; None fetches the market only

        Returns:
            Snapshot ready for the engine

        Raises:
            FPLPrivateTeamError: If the manager's team is not public
            DataUnavailableError: If any other required read fails
        """
        try:
            if manager_id:
                bootstrap, fixtures, entry, history = await asyncio.gather(
                    self.get_bootstrap_static(),
                    self.get_fixtures(),
                    self.get_entry(manager_id),
                    self.get_entry_history(manager_id),
                )
                gameweek = current_gameweek(process_gameweeks(bootstrap.get("events", [])))
                picks = await self.get_entry_picks(manager_id, gameweek)
            else:
                bootstrap, fixtures = await asyncio.gather(
                    self.get_bootstrap_static(),
                    self.get_fixtures(),
                )
                entry = history = picks = None
            return process_snapshot(bootstrap, fixtures, entry, picks, history)
        except FPLPrivateTeamError as e:
            # Retrying cannot help here
            logger.error(f"Snapshot fetch failed: {e}")
            raise
        except FPLAPIError as e:
            logger.error(f"Snapshot fetch failed: {e}")
            raise DataUnavailableError(
                f"Data unavailable, please retry: {e.message}",
                status_code=e.status_code,
            ) from e
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Snapshot payload unreadable: {e}")
            raise DataUnavailableError(
                f"Data unavailable, please retry: unreadable FPL data ({e})"
            ) from e

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate_bootstrap(self, data: Any) -> None:
        """Validate bootstrap-static response structure."""
        if not isinstance(data, dict):
            raise FPLAPIError("Invalid bootstrap response: expected dict")

        required_fields = ["elements", "teams", "events"]
        missing = [f for f in required_fields if f not in data]

        if missing:
            raise FPLAPIError(
                f"Invalid bootstrap response: missing fields {missing}. "
                "The FPL API structure may have changed."
            )


# =============================================================================
# Synchronous Wrapper
# =============================================================================


class SyncFPLClient:
    """
    Synchronous wrapper for FPLClient.

    Each call runs in its own event loop with a fresh async client.
    Useful for CLI and simple scripts.
    """

    def __init__(self, **kwargs: Any):
        """Initialize with same args as FPLClient."""
        self._kwargs = kwargs

    async def _fetch_snapshot(self, manager_id: int | None) -> Snapshot:
        async with FPLClient(**self._kwargs) as client:
            return await client.fetch_snapshot(manager_id)

    def fetch_snapshot(self, manager_id: int | None = None) -> Snapshot:
        """Fetch a snapshot synchronously."""
        return asyncio.run(self._fetch_snapshot(manager_id))
