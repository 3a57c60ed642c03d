import asyncio
import unittest

import httpx

from fpl_advisor.api.client import (
    DataUnavailableError,
    FPLAPIError,
    FPLClient,
    FPLPrivateTeamError,
    SyncFPLClient,
)

BOOTSTRAP = {
    "elements": [
        {
            "id": 1,
            "web_name": "Keeper",
            "team": 1,
            "element_type": 1,
            "now_cost": 45,
            "points_per_game": "3.5",
        },
        {
            "id": 2,
            "web_name": "Striker",
            "team": 2,
            "element_type": 4,
            "now_cost": 80,
            "points_per_game": "6.0",
            "chance_of_playing_next_round": 75,
        },
    ],
    "teams": [
        {"id": 1, "name": "Alpha", "short_name": "ALP"},
        {"id": 2, "name": "Beta", "short_name": "BET"},
    ],
    "events": [
        {"id": 4, "is_current": True, "finished": False},
        {"id": 5, "is_next": True, "finished": False},
    ],
}

FIXTURES = [
    {
        "id": 10,
        "event": 5,
        "team_h": 1,
        "team_a": 2,
        "team_h_difficulty": 3,
        "team_a_difficulty": 2,
        "kickoff_time": "2025-09-20T14:00:00Z",
    }
]

ENTRY = {"id": 77, "name": "Test FC", "last_deadline_bank": 20, "last_deadline_value": 990}
HISTORY = {"chips": [{"name": "wildcard", "event": 3}]}
PICKS = {
    "picks": [{"element": 1, "position": 1}, {"element": 2, "position": 11}],
    "entry_history": {"bank": 15, "event_transfers": 1},
}


def _router(overrides=None, calls=None):
    """Mock FPL API keyed by URL path; ``overrides`` maps path to a status code."""
    overrides = overrides or {}
    routes = {
        "/api/bootstrap-static/": BOOTSTRAP,
        "/api/fixtures/": FIXTURES,
        "/api/entry/77/": ENTRY,
        "/api/entry/77/history/": HISTORY,
        "/api/entry/77/event/4/picks/": PICKS,
    }

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if calls is not None:
            calls.append(path)
        if path in overrides:
            return httpx.Response(overrides[path])
        if path in routes:
            return httpx.Response(200, json=routes[path])
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def _fetch(transport, manager_id=None, max_retries=2):
    async def run():
        async with FPLClient(transport=transport, max_retries=max_retries, retry_delay=0) as client:
            return await client.fetch_snapshot(manager_id)

    return asyncio.run(run())


class TestFetchSnapshot(unittest.TestCase):
    def test_market_only(self):
        snapshot = _fetch(_router())

        self.assertIsNone(snapshot.manager)
        self.assertEqual(snapshot.next_gameweek, 5)
        self.assertEqual(len(snapshot.players), 2)
        self.assertAlmostEqual(snapshot.players_by_id()[2].price, 8.0)
        self.assertEqual(snapshot.players_by_id()[2].minutes_probability, 75)
        self.assertEqual(snapshot.fixtures[0].away_difficulty, 2)

    def test_with_manager_reads_current_gameweek_picks(self):
        calls = []
        snapshot = _fetch(_router(calls=calls), manager_id=77)

        manager = snapshot.manager
        self.assertIn("/api/entry/77/event/4/picks/", calls)
        self.assertEqual(manager.manager_id, 77)
        self.assertAlmostEqual(manager.bank, 1.5)
        self.assertAlmostEqual(manager.squad_value, 99.0)
        self.assertEqual(manager.available_free_transfers, 1)
        self.assertEqual(len(manager.chips_used), 1)

    def test_any_failed_read_aborts(self):
        transport = _router(overrides={"/api/entry/77/history/": 500})
        with self.assertRaises(DataUnavailableError) as ctx:
            _fetch(transport, manager_id=77)
        self.assertIn("retry", ctx.exception.message)

    def test_private_picks_abort(self):
        transport = _router(overrides={"/api/entry/77/event/4/picks/": 403})
        with self.assertRaises(FPLPrivateTeamError) as ctx:
            _fetch(transport, manager_id=77)
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertNotIsInstance(ctx.exception, DataUnavailableError)

    def test_non_json_body_aborts(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/fixtures/":
                return httpx.Response(200, text="<html>maintenance</html>")
            return httpx.Response(200, json=BOOTSTRAP)

        with self.assertRaises(DataUnavailableError) as ctx:
            _fetch(httpx.MockTransport(handler))
        self.assertIn("retry", ctx.exception.message)

    def test_unreadable_payload_aborts(self):
        broken = dict(BOOTSTRAP, events=5)

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/fixtures/":
                return httpx.Response(200, json=FIXTURES)
            return httpx.Response(200, json=broken)

        with self.assertRaises(DataUnavailableError) as ctx:
            _fetch(httpx.MockTransport(handler))
        self.assertIn("retry", ctx.exception.message)

    def test_sync_wrapper(self):
        snapshot = SyncFPLClient(transport=_router(), retry_delay=0).fetch_snapshot()
        self.assertEqual(snapshot.teams_by_id()[1].short_name, "ALP")


class TestRetries(unittest.TestCase):
    def test_server_error_then_success(self):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request.url.path)
            if len(attempts) == 1:
                return httpx.Response(503)
            return httpx.Response(200, json=FIXTURES)

        async def run():
            async with FPLClient(transport=httpx.MockTransport(handler), retry_delay=0) as client:
                return await client.get_fixtures()

        self.assertEqual(asyncio.run(run()), FIXTURES)
        self.assertEqual(len(attempts), 2)

    def test_gives_up_after_max_retries(self):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(1)
            return httpx.Response(500)

        async def run():
            async with FPLClient(
                transport=httpx.MockTransport(handler), max_retries=3, retry_delay=0
            ) as client:
                return await client.get_fixtures()

        with self.assertRaises(FPLAPIError):
            asyncio.run(run())
        self.assertEqual(len(attempts), 3)

    def test_invalid_bootstrap(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"elements": []})

        async def run():
            async with FPLClient(transport=httpx.MockTransport(handler), retry_delay=0) as client:
                return await client.get_bootstrap_static()

        with self.assertRaises(FPLAPIError):
            asyncio.run(run())


if __name__ == "__main__":
    unittest.main()
