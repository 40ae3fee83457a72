"""Shared test fixtures for PostgreSQL MCP tests."""
from contextlib import asynccontextmanager

import pytest

from postgres_mcp.db import FieldInfo, QueryResult


class FakeConnection:
    """Records every execute() call and replays queued results in order."""

    def __init__(self, results=None, error=None):
        self.results = list(results or [])
        self.error = error
        self.calls = []

    async def execute(self, query, params=None, tool_name=None):
        self.calls.append((query, params, tool_name))
        if self.error is not None:
            raise self.error
        if self.results:
            return self.results.pop(0)
        return QueryResult()


class SpyPool:
    """Connection provider counting acquisitions and releases."""

    def __init__(self, conn=None):
        self.conn = conn or FakeConnection()
        self.acquired = 0
        self.released = 0

    @asynccontextmanager
    async def connection(self):
        self.acquired += 1
        try:
            yield self.conn
        finally:
            self.released += 1


@pytest.fixture
def fake_conn():
    return FakeConnection()


@pytest.fixture
def spy_pool(fake_conn):
    return SpyPool(fake_conn)


@pytest.fixture
def sample_columns():
    return [
        {
            "column_name": "id",
            "data_type": "integer",
            "is_nullable": "NO",
            "column_default": "nextval('weather_data_id_seq'::regclass)",
            "character_maximum_length": None,
            "numeric_precision": 32,
            "numeric_scale": 0,
        },
        {
            "column_name": "city",
            "data_type": "character varying",
            "is_nullable": "NO",
            "column_default": None,
            "character_maximum_length": 100,
            "numeric_precision": None,
            "numeric_scale": None,
        },
        {
            "column_name": "temperature_celsius",
            "data_type": "numeric",
            "is_nullable": "YES",
            "column_default": None,
            "character_maximum_length": None,
            "numeric_precision": 5,
            "numeric_scale": 2,
        },
    ]


@pytest.fixture
def sample_rows():
    return [
        {"id": 1, "city": "Lisbon", "temperature_celsius": 21.5},
        {"id": 2, "city": "Oslo", "temperature_celsius": 4.0},
    ]


@pytest.fixture
def sample_result(sample_rows):
    return QueryResult(
        rows=sample_rows,
        row_count=len(sample_rows),
        fields=[
            FieldInfo("id", 23),
            FieldInfo("city", 1043),
            FieldInfo("temperature_celsius", 1700),
        ],
    )


@pytest.fixture
def make_pool():
    """Build a spy pool around a fresh fake connection."""

    def factory(results=None, error=None):
        return SpyPool(FakeConnection(results=results, error=error))

    return factory
