"""SQLite-backed player profile repository."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

from shared.dal.models import PlayerProfile
from shared.dal.profile_repository import ProfileRepository

if TYPE_CHECKING:
    from shared.db.connection import Database


class SqliteProfileRepository(ProfileRepository):
    """SQLite implementation of ProfileRepository, keyed by lowercased name."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def get_profile(self, name: str) -> PlayerProfile | None:
        """Look up a profile by name (case-insensitive)."""
        row = self._db.connection.execute(
            "SELECT data FROM player_profiles WHERE name_key = ?",
            (name.strip().lower(),),
        ).fetchone()
        if row is None:
            return None
        return PlayerProfile.model_validate(json.loads(row[0]))

    async def save_profile(self, profile: PlayerProfile) -> None:
        async with self._lock:
            self._db.connection.execute(
                "INSERT OR REPLACE INTO player_profiles (name_key, data) VALUES (?, ?)",
                (profile.name_key, profile.model_dump_json(by_alias=True)),
            )
            self._db.connection.commit()
