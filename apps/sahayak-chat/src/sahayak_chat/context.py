"""Grounding context: cultural facts and current weather, read-only."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import aiosqlite

from sahayak_common.logging import get_logger

from .errors import ContextFetchError
from .prompt import GroundingContext, culture_line, weather_line

log = get_logger(__name__)

CULTURE_TABLE = "cg_culture"
WEATHER_TABLE = "cg_weather"

# table -> column holding the row's freshness
_RECENCY_COLUMNS = {
    CULTURE_TABLE: "created_at",
    WEATHER_TABLE: "last_updated",
}

_CREATE_CULTURE_TABLE = """
CREATE TABLE IF NOT EXISTS cg_culture (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    type TEXT,
    region TEXT,
    created_at TEXT NOT NULL
);
"""

_CREATE_WEATHER_TABLE = """
CREATE TABLE IF NOT EXISTS cg_weather (
    id TEXT PRIMARY KEY,
    district_name TEXT NOT NULL,
    temperature REAL,
    humidity REAL,
    wind_speed REAL,
    weather_condition TEXT,
    last_updated TEXT NOT NULL
);
"""


class ContextProvider(Protocol):
    async def fetch_recent(self, table: str, limit: int) -> list[dict[str, Any]]:
        """Return up to ``limit`` rows of ``table``, newest first."""
        ...


class SQLiteContextProvider:
    """Reads the grounding tables from the service's SQLite database."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Open the database and create the grounding tables if missing."""
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.execute(_CREATE_CULTURE_TABLE)
        await self._db.execute(_CREATE_WEATHER_TABLE)
        await self._db.commit()
        log.info("context_provider_ready", db_path=self._db_path)

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    async def fetch_recent(self, table: str, limit: int) -> list[dict[str, Any]]:
        order_column = _RECENCY_COLUMNS.get(table)
        if order_column is None:
            raise ContextFetchError(f"Unknown context table: {table}")
        if self._db is None:
            raise ContextFetchError("Context provider not initialized")
        try:
            cursor = await self._db.execute(
                f"SELECT * FROM {table} ORDER BY {order_column} DESC LIMIT ?",
                (limit,),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise ContextFetchError(f"Reading {table} failed: {e}") from e
        return [dict(row) for row in rows]


async def _fetch_section(
    provider: ContextProvider, table: str, limit: int, timeout: float
) -> list[dict[str, Any]]:
    """Fetch one corpus; any failure or timeout yields an empty section."""
    if limit <= 0:
        return []
    try:
        rows = await asyncio.wait_for(provider.fetch_recent(table, limit), timeout=timeout)
    except asyncio.TimeoutError:
        log.warning("context_fetch_timeout", table=table, timeout=timeout)
        return []
    except Exception as e:
        log.warning("context_fetch_failed", table=table, error=str(e))
        return []
    return list(rows)[:limit]


async def gather_context(
    provider: ContextProvider,
    culture_limit: int,
    weather_limit: int,
    timeout: float,
) -> GroundingContext:
    """Fetch both corpora concurrently and reduce them to prompt lines."""
    culture_rows, weather_rows = await asyncio.gather(
        _fetch_section(provider, CULTURE_TABLE, culture_limit, timeout),
        _fetch_section(provider, WEATHER_TABLE, weather_limit, timeout),
    )
    return GroundingContext(
        cultural=tuple(culture_line(row) for row in culture_rows),
        weather=tuple(weather_line(row) for row in weather_rows),
    )
