"""SQLite-backed player session repository."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

from shared.dal.models import PlayerSession
from shared.dal.session_repository import SessionRepository

if TYPE_CHECKING:
    from shared.db.connection import Database


class SqliteSessionRepository(SessionRepository):
    """SQLite implementation of SessionRepository."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def get_session(self, player_id: str) -> PlayerSession | None:
        row = self._db.connection.execute(
            "SELECT data FROM player_sessions WHERE id = ?",
            (player_id,),
        ).fetchone()
        if row is None:
            return None
        return PlayerSession.model_validate(json.loads(row[0]))

    async def save_session(self, session: PlayerSession) -> None:
        async with self._lock:
            self._db.connection.execute(
                "INSERT OR REPLACE INTO player_sessions (id, game_id, data) VALUES (?, ?, ?)",
                (session.player_id, session.game_id, session.model_dump_json(by_alias=True)),
            )
            self._db.connection.commit()

    async def delete_session(self, player_id: str) -> bool:
        async with self._lock:
            cursor = self._db.connection.execute("DELETE FROM player_sessions WHERE id = ?", (player_id,))
            self._db.connection.commit()
            return cursor.rowcount > 0

    async def list_sessions(self) -> list[PlayerSession]:
        rows = self._db.connection.execute("SELECT data FROM player_sessions ORDER BY id").fetchall()
        return [PlayerSession.model_validate(json.loads(row[0])) for row in rows]
