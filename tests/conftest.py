"""
Shared fixtures: an in-memory stand-in for the Supabase query builder.
"""

import random
from collections import defaultdict
from datetime import date

import pytest

from league_scheduler.models import Team, LeagueSettings
from league_scheduler.services.supabase_store import SupabaseLeagueStore


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Supports the subset of the postgrest builder the store uses."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.operation = "select"
        self.filters = []
        self.orders = []
        self.payload = []
        self.on_conflict = None

    def select(self, columns="*"):
        self.operation = "select"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def insert(self, rows):
        self.operation = "insert"
        self.payload = rows if isinstance(rows, list) else [rows]
        return self

    def upsert(self, rows, on_conflict=None):
        self.operation = "upsert"
        self.payload = rows if isinstance(rows, list) else [rows]
        self.on_conflict = on_conflict
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self):
        if self.table in self.client.failing_tables:
            raise ConnectionError(f"relation {self.table} unreachable")

        rows = self.client.tables[self.table]

        if self.operation == "select":
            result = [dict(row) for row in rows if self._matches(row)]
            for column, desc in reversed(self.orders):
                result.sort(key=lambda row: row.get(column), reverse=desc)
            return FakeResponse(result)

        if self.operation == "insert":
            inserted = []
            for row in self.payload:
                stored = dict(row)
                stored.setdefault("id", self.client.next_id())
                rows.append(stored)
                inserted.append(dict(stored))
            return FakeResponse(inserted)

        if self.operation == "upsert":
            keys = [k.strip() for k in (self.on_conflict or "id").split(",")]
            written = []
            for row in self.payload:
                existing = next(
                    (r for r in rows if all(r.get(k) == row.get(k) for k in keys)), None
                )
                if existing is not None:
                    existing.update(row)
                    written.append(dict(existing))
                else:
                    stored = dict(row)
                    stored.setdefault("id", self.client.next_id())
                    rows.append(stored)
                    written.append(dict(stored))
            return FakeResponse(written)

        if self.operation == "delete":
            removed = [dict(row) for row in rows if self._matches(row)]
            self.client.tables[self.table] = [row for row in rows if not self._matches(row)]
            return FakeResponse(removed)

        raise AssertionError(f"unsupported operation {self.operation}")


class FakeSupabaseClient:

    def __init__(self):
        self.tables = defaultdict(list)
        self.failing_tables = set()
        self._last_id = 0

    def next_id(self):
        self._last_id += 1
        return self._last_id

    def table(self, name):
        return FakeQuery(self, name)


MATCH_DATE = date(2024, 3, 5)
LEAGUE_DAY = "Tuesday"


def team_names(count):
    return [f"Team {chr(ord('A') + i)}" if i < 26 else f"Team {i:02d}" for i in range(count)]


def make_teams(count, day=LEAGUE_DAY):
    return [Team(name=name, day=day, rank=float(i + 1)) for i, name in enumerate(team_names(count))]


def seed_teams(client, count, day=LEAGUE_DAY):
    for i, name in enumerate(team_names(count)):
        client.tables["teams"].append({
            "id": client.next_id(),
            "team_name": name,
            "day": day,
            "average_score": float(i + 1)
        })
    return team_names(count)


def seed_absence(client, team_name, absence_date=MATCH_DATE):
    client.tables["absences"].append({
        "id": client.next_id(),
        "team_name": team_name,
        "absence_date": absence_date.isoformat()
    })


@pytest.fixture
def fake_client():
    return FakeSupabaseClient()


@pytest.fixture
def store(fake_client):
    return SupabaseLeagueStore(client=fake_client)


@pytest.fixture
def settings():
    return LeagueSettings()


@pytest.fixture
def rng():
    return random.Random(1234)
