"""Shared fixtures for the test suite."""

import os

# Settings are read once at import time, so the environment is pinned first.
os.environ.setdefault("BALLDONTLIE_API_KEY", "test-key")
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ["PAGE_DELAY"] = "0"
os.environ["HTTP_MAX_ATTEMPTS"] = "1"

from datetime import date

import pytest

from data.cache import get_cache
from data.models.schemas import Matchup


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = "" if payload is None else "json"
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeStore:
    """In-memory SupabaseStore that records every call."""

    def __init__(self, tables=None, fail_on_select=False):
        self.tables = tables or {}
        self.fail_on_select = fail_on_select
        self.calls = []

    def select(self, table, columns="*", filters=None, order=None, limit=None):
        self.calls.append(("select", table, filters))
        if self.fail_on_select:
            raise RuntimeError("connection refused")
        rows = list(self.tables.get(table, []))
        return rows[:limit] if limit else rows

    def upsert(self, table, rows, on_conflict):
        self.calls.append(("upsert", table, on_conflict, list(rows)))
        return len(rows)

    def insert(self, table, rows):
        self.calls.append(("insert", table, list(rows)))
        return len(rows)

    def delete(self, table, filters):
        self.calls.append(("delete", table, filters))

    def ops(self):
        return [call[0] for call in self.calls]


@pytest.fixture(autouse=True)
def clear_cache():
    """Each test starts with an empty process cache."""
    get_cache().clear()
    yield
    get_cache().clear()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def game_date():
    return date(2024, 1, 15)


@pytest.fixture
def nba_rows():
    """A strong home side and a weak away side."""
    return [
        {
            "team_name": "Boston Celtics (BOS)",
            "win_rate": 0.75,
            "pace": 99.0,
            "offensive_rating": 120.0,
            "defensive_rating": 108.0,
            "recent_form": "W-W-W-W-L",
        },
        {
            "team_name": "Detroit Pistons (DET)",
            "win_rate": 0.2,
            "pace": 101.0,
            "offensive_rating": 108.0,
            "defensive_rating": 118.0,
            "recent_form": "L-L-L-W-L",
        },
    ]


@pytest.fixture
def nba_matchup(game_date):
    return Matchup(league="nba", home_abbr="BOS", away_abbr="DET", game_date=game_date, game_id="1")
