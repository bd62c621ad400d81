"""SQLite database connection and schema management."""

import json
import os
import sqlite3
from pathlib import Path
from typing import Any

import structlog

from shared.dal.models import PlayerProfile, PlayerSession

logger = structlog.get_logger()

_DB_FILE_PERMISSIONS = 0o600
_MEMORY_PATH = ":memory:"

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS games (
    id TEXT PRIMARY KEY,
    version INTEGER NOT NULL,
    status TEXT NOT NULL,
    last_activity INTEGER NOT NULL DEFAULT 0,
    data TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_games_last_activity
    ON games (last_activity DESC);

CREATE TABLE IF NOT EXISTS player_profiles (
    name_key TEXT PRIMARY KEY,
    data TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS player_sessions (
    id TEXT PRIMARY KEY,
    game_id TEXT,
    data TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_player_sessions_game_id
    ON player_sessions (game_id);
"""

# subdirectories written by the legacy file-based server
LEGACY_GAMES_DIR = "games"
LEGACY_PROFILES_DIR = "player_profiles"
LEGACY_SESSIONS_DIR = "players"


class Database:
    """SQLite database wrapper with schema management and legacy import support."""

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Return the active connection or raise if disconnected."""
        if self._conn is None:
            raise RuntimeError("Database is not connected")
        return self._conn

    @property
    def is_memory(self) -> bool:
        return self._path == _MEMORY_PATH

    def connect(self) -> None:
        """Open the database, apply pragmas, create schema, and harden file permissions."""
        if not self.is_memory:
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA busy_timeout=5000")
        self._conn.executescript(_SCHEMA_SQL)

        self._harden_permissions()

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def import_legacy_json(self, legacy_dir: str | Path | None) -> dict[str, int]:
        """Import games, profiles and sessions from a legacy data directory.

        Each table is only filled when it is still empty, so running the import
        twice is harmless. All records are parsed before anything is written and
        the inserts run in a single transaction; any failure causes a full
        rollback. Returns the number of imported records per table.
        """
        counts = {"games": 0, "player_profiles": 0, "player_sessions": 0}
        if legacy_dir is None:
            return counts

        root = Path(legacy_dir)
        if not root.is_dir():
            logger.warning("legacy data directory not found, skipping import", path=str(root))
            return counts

        conn = self.connection
        games = [] if self._has_rows("games") else self._read_legacy_games(root / LEGACY_GAMES_DIR)
        profiles = [] if self._has_rows("player_profiles") else self._read_legacy_profiles(root / LEGACY_PROFILES_DIR)
        sessions = [] if self._has_rows("player_sessions") else self._read_legacy_sessions(root / LEGACY_SESSIONS_DIR)

        try:
            conn.execute("BEGIN")
            for game in games:
                conn.execute(
                    "INSERT INTO games (id, version, status, last_activity, data) VALUES (?, ?, ?, ?, ?)",
                    (game["id"], game["version"], game.get("status", "lobby"), game.get("lastActivity") or 0,
                     json.dumps(game)),
                )
            for profile in profiles:
                conn.execute(
                    "INSERT INTO player_profiles (name_key, data) VALUES (?, ?)",
                    (profile.name_key, profile.model_dump_json(by_alias=True)),
                )
            for session in sessions:
                conn.execute(
                    "INSERT INTO player_sessions (id, game_id, data) VALUES (?, ?, ?)",
                    (session.player_id, session.game_id, session.model_dump_json(by_alias=True)),
                )
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise

        counts.update(games=len(games), player_profiles=len(profiles), player_sessions=len(sessions))
        logger.info("imported legacy data", path=str(root), **counts)
        return counts

    def _has_rows(self, table: str) -> bool:
        row = self.connection.execute(f"SELECT COUNT(*) FROM {table}").fetchone()  # noqa: S608
        if row[0] > 0:
            logger.info("table already has data, skipping import", table=table)
            return True
        return False

    @staticmethod
    def _read_json_files(directory: Path) -> list[tuple[str, dict[str, Any]]]:
        """Read every ``*.json`` object in a directory as (file stem, data)."""
        if not directory.is_dir():
            return []
        records: list[tuple[str, dict[str, Any]]] = []
        for path in sorted(directory.glob("*.json")):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                msg = f"Failed to read legacy JSON file: {path}"
                raise OSError(msg) from exc
            if not isinstance(data, dict):
                msg = f"Expected JSON object at root in {path}"
                raise OSError(msg)
            records.append((path.stem, data))
        return records

    def _read_legacy_games(self, directory: Path) -> list[dict[str, Any]]:
        games = []
        for stem, data in self._read_json_files(directory):
            game_id = str(data.get("id") or stem)
            games.append({**data, "id": game_id, "code": data.get("code") or game_id, "version": 1})
        return games

    def _read_legacy_profiles(self, directory: Path) -> list[PlayerProfile]:
        profiles = []
        for stem, data in self._read_json_files(directory):
            try:
                profiles.append(PlayerProfile.model_validate(data))
            except ValueError as exc:
                msg = f"Invalid player profile in {directory / stem}.json"
                raise OSError(msg) from exc
        return profiles

    def _read_legacy_sessions(self, directory: Path) -> list[PlayerSession]:
        sessions = []
        for stem, data in self._read_json_files(directory):
            try:
                sessions.append(PlayerSession.model_validate({"playerId": stem, **data}))
            except ValueError as exc:
                msg = f"Invalid player session in {directory / stem}.json"
                raise OSError(msg) from exc
        return sessions

    def _harden_permissions(self) -> None:
        """Set restrictive file permissions on POSIX systems (best effort).

        Covers the WAL/SHM sibling files too, since they hold database content.
        """
        if os.name != "posix" or self.is_memory:  # pragma: no cover
            return
        for suffix in ("", "-wal", "-shm"):
            p = Path(self._path + suffix)
            if p.exists():
                try:
                    p.chmod(_DB_FILE_PERMISSIONS)
                except OSError:
                    logger.warning("could not set file permissions", permissions=oct(_DB_FILE_PERMISSIONS), path=str(p))
