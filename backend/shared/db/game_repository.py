"""SQLite-backed game repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from typing import TYPE_CHECKING, Any

import structlog

from shared.dal.game_repository import GameRepository, StaleWriteError

if TYPE_CHECKING:
    from shared.db.connection import Database

logger = structlog.get_logger()


class SqliteGameRepository(GameRepository):
    """SQLite implementation of GameRepository.

    Stores full game documents as JSON with status, activity and version
    columns alongside for listing and compare-and-swap updates.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def get_game(self, game_id: str) -> dict[str, Any] | None:
        """Retrieve a single game document, with ``version`` taken from its column."""
        row = self._db.connection.execute(
            "SELECT data, version FROM games WHERE id = ?",
            (game_id,),
        ).fetchone()
        if row is None:
            return None
        return {**json.loads(row[0]), "version": row[1]}

    async def create_game(self, game_id: str, data: dict[str, Any]) -> bool:
        """Insert a game at version 1. Returns False on duplicate id."""
        async with self._lock:
            document = {**data, "version": 1}
            try:
                self._db.connection.execute(
                    "INSERT INTO games (id, version, status, last_activity, data) VALUES (?, ?, ?, ?, ?)",
                    (game_id, 1, document.get("status", ""), document.get("lastActivity") or 0, json.dumps(document)),
                )
                self._db.connection.commit()
            except sqlite3.IntegrityError:
                self._db.connection.rollback()
                logger.warning("game id already taken", game_id=game_id)
                return False
            return True

    async def save_game(self, game_id: str, data: dict[str, Any], expected_version: int) -> int:
        """Compare-and-swap update on the version column.

        Raises StaleWriteError when the game is gone or another writer already
        saved a newer version.
        """
        async with self._lock:
            new_version = expected_version + 1
            document = {**data, "version": new_version}
            cursor = self._db.connection.execute(
                "UPDATE games SET version = ?, status = ?, last_activity = ?, data = ? WHERE id = ? AND version = ?",
                (
                    new_version,
                    document.get("status", ""),
                    document.get("lastActivity") or 0,
                    json.dumps(document),
                    game_id,
                    expected_version,
                ),
            )
            self._db.connection.commit()
            if cursor.rowcount == 0:
                logger.warning("stale game write rejected", game_id=game_id, expected_version=expected_version)
                raise StaleWriteError(game_id, expected_version)
            return new_version

    async def delete_game(self, game_id: str) -> bool:
        async with self._lock:
            cursor = self._db.connection.execute("DELETE FROM games WHERE id = ?", (game_id,))
            self._db.connection.commit()
            return cursor.rowcount > 0

    async def list_games(self) -> list[dict[str, Any]]:
        """All game documents, most recently active first."""
        rows = self._db.connection.execute(
            "SELECT data, version FROM games ORDER BY last_activity DESC, id",
        ).fetchall()
        return [{**json.loads(row[0]), "version": row[1]} for row in rows]

    async def count_games(self) -> int:
        row = self._db.connection.execute("SELECT COUNT(*) FROM games").fetchone()
        return row[0]
