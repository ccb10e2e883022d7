"""Persistence layer for lottery history, shared results and draw counters."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator, List, Optional
from uuid import uuid4


logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("draftlottery.sqlite")
DEFAULT_SHARE_TTL_DAYS = 30
DRAW_COUNTER = "lottery_draws"


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


@dataclass
class HistoryRecord:
    history_id: str
    username: str
    created_at: datetime
    league_id: Optional[str]
    league_name: Optional[str]
    season: Optional[str]
    results: List[dict]
    teams: List[dict]
    configs: dict
    share_id: Optional[str]


@dataclass
class ShareRecord:
    share_id: str
    created_at: datetime
    expires_at: datetime
    league_id: Optional[str]
    league_name: Optional[str]
    season: Optional[str]
    results: List[dict]
    teams: List[dict]
    configs: dict

    @property
    def expired(self) -> bool:
        return self.expires_at <= datetime.now(timezone.utc)


class LotteryStore:
    """Simple SQLite-backed store for lottery history and shares."""

    def __init__(self, db_path: Path | str | None = None, *, share_ttl_days: int | None = None):
        self._use_uri = False
        if db_path is None:
            db_path = os.getenv("DRAFTLOTTERY_DB_PATH") or DEFAULT_DB_PATH
        if isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path: Path | str = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        if share_ttl_days is None:
            share_ttl_days = _env_int("DRAFTLOTTERY_SHARE_TTL_DAYS", DEFAULT_SHARE_TTL_DAYS, min_value=1)
        self.share_ttl = timedelta(days=share_ttl_days)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._session() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS history (
                id TEXT PRIMARY KEY,
                username TEXT NOT NULL,
                created_at TEXT NOT NULL,
                league_id TEXT,
                league_name TEXT,
                season TEXT,
                results_json TEXT NOT NULL,
                teams_json TEXT NOT NULL,
                configs_json TEXT NOT NULL,
                share_id TEXT
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS history_username ON history (username)")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS shares (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                expires_at TEXT NOT NULL,
                league_id TEXT,
                league_name TEXT,
                season TEXT,
                results_json TEXT NOT NULL,
                teams_json TEXT NOT NULL,
                configs_json TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS counters (
                name TEXT PRIMARY KEY,
                value INTEGER NOT NULL
            )
            """
        )

    def save_history(
        self,
        *,
        username: str,
        results: List[dict],
        teams: List[dict],
        configs: dict,
        league_id: Optional[str] = None,
        league_name: Optional[str] = None,
        season: Optional[str] = None,
        share_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> HistoryRecord:
        history_id = uuid4().hex
        created_at = created_at or datetime.now(timezone.utc)
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO history (
                    id, username, created_at, league_id, league_name, season,
                    results_json, teams_json, configs_json, share_id
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    history_id,
                    username,
                    created_at.isoformat(),
                    league_id,
                    league_name,
                    season,
                    json.dumps(results),
                    json.dumps(teams),
                    json.dumps(configs),
                    share_id,
                ),
            )
        record = self.get_history(history_id)
        if record is None:  # pragma: no cover
            raise KeyError(f"History {history_id} not found after insert")
        return record

    def get_history(self, history_id: str) -> Optional[HistoryRecord]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM history WHERE id = ?", (history_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_history(row)

    def list_history(self, username: str, limit: int = 50) -> List[HistoryRecord]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM history WHERE username = ? ORDER BY datetime(created_at) DESC, created_at DESC LIMIT ?",
                (username, limit),
            ).fetchall()
        return [self._row_to_history(row) for row in rows]

    def delete_history(self, history_id: str, username: str) -> bool:
        """Delete an entry owned by ``username``; False when nothing matched."""

        with self._session() as conn:
            cursor = conn.execute(
                "DELETE FROM history WHERE id = ? AND username = ?",
                (history_id, username),
            )
            deleted = cursor.rowcount
        return deleted > 0

    def save_share(
        self,
        *,
        results: List[dict],
        teams: List[dict],
        configs: dict,
        league_id: Optional[str] = None,
        league_name: Optional[str] = None,
        season: Optional[str] = None,
        share_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> ShareRecord:
        share_id = share_id or uuid4().hex
        created_at = created_at or datetime.now(timezone.utc)
        expires_at = created_at + self.share_ttl
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO shares (
                    id, created_at, expires_at, league_id, league_name, season,
                    results_json, teams_json, configs_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    share_id,
                    created_at.isoformat(),
                    expires_at.isoformat(),
                    league_id,
                    league_name,
                    season,
                    json.dumps(results),
                    json.dumps(teams),
                    json.dumps(configs),
                ),
            )
        return ShareRecord(
            share_id=share_id,
            created_at=created_at,
            expires_at=expires_at,
            league_id=league_id,
            league_name=league_name,
            season=season,
            results=list(results),
            teams=list(teams),
            configs=dict(configs),
        )

    def get_share(self, share_id: str) -> Optional[ShareRecord]:
        """Return a live share; expired shares are deleted and reported missing."""

        with self._session() as conn:
            row = conn.execute("SELECT * FROM shares WHERE id = ?", (share_id,)).fetchone()
            if row is None:
                return None
            record = self._row_to_share(row)
            if record.expired:
                conn.execute("DELETE FROM shares WHERE id = ?", (share_id,))
                logger.info("Deleted expired share %s", share_id)
                return None
        return record

    def increment_counter(self, name: str = DRAW_COUNTER, amount: int = 1) -> int:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO counters (name, value) VALUES (?, ?)
                ON CONFLICT(name) DO UPDATE SET value = value + excluded.value
                """,
                (name, amount),
            )
            row = conn.execute("SELECT value FROM counters WHERE name = ?", (name,)).fetchone()
        return int(row["value"])

    def get_counter(self, name: str = DRAW_COUNTER) -> int:
        with self._session() as conn:
            row = conn.execute("SELECT value FROM counters WHERE name = ?", (name,)).fetchone()
        return int(row["value"]) if row else 0

    def _row_to_history(self, row: sqlite3.Row) -> HistoryRecord:
        return HistoryRecord(
            history_id=row["id"],
            username=row["username"],
            created_at=datetime.fromisoformat(row["created_at"]),
            league_id=row["league_id"],
            league_name=row["league_name"],
            season=row["season"],
            results=json.loads(row["results_json"]),
            teams=json.loads(row["teams_json"]),
            configs=json.loads(row["configs_json"]),
            share_id=row["share_id"],
        )

    def _row_to_share(self, row: sqlite3.Row) -> ShareRecord:
        return ShareRecord(
            share_id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            expires_at=datetime.fromisoformat(row["expires_at"]),
            league_id=row["league_id"],
            league_name=row["league_name"],
            season=row["season"],
            results=json.loads(row["results_json"]),
            teams=json.loads(row["teams_json"]),
            configs=json.loads(row["configs_json"]),
        )


__all__ = [
    "DRAW_COUNTER",
    "HistoryRecord",
    "LotteryStore",
    "ShareRecord",
]
