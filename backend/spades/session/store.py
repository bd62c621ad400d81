"""
Persistence gateway for Spades games.

Wraps the schemaless repositories with validation into SpadesGame values,
migrate-on-read, optimistic-concurrency saves and per-game locks. Callers
that load, mutate and save a game hold ``lock(game_id)`` around the whole
cycle; the version check in the repository catches writers in other
processes.
"""

from __future__ import annotations

import asyncio
import contextlib
import sqlite3
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from shared.dal.game_repository import StaleWriteError
from shared.dal.models import PlayerSession
from spades.logic.enums import ValidationCode
from spades.logic.exceptions import GameNotFoundError, StaleGameError
from spades.logic.migration import migrate_game, repair_legacy_document
from spades.logic.state import SpadesGame, now_ms

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from shared.dal.game_repository import GameRepository
    from shared.dal.session_repository import SessionRepository

logger = structlog.get_logger()


class GameStore:
    def __init__(self, games: GameRepository, sessions: SessionRepository) -> None:
        self._games = games
        self._sessions = sessions
        self._game_locks: dict[str, asyncio.Lock] = {}  # game_id -> Lock
        self._lock_users: dict[str, int] = {}  # game_id -> holders and waiters

    @contextlib.asynccontextmanager
    async def lock(self, game_id: str) -> AsyncIterator[None]:
        """
        Serialize load-mutate-save cycles on one game within this process.

        A game's lock lives only while someone holds or waits for it, so
        lookups of unknown or deleted ids leave nothing behind.
        """
        lock = self._game_locks.get(game_id)
        if lock is None:
            lock = asyncio.Lock()
            self._game_locks[game_id] = lock
        self._lock_users[game_id] = self._lock_users.get(game_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[game_id] - 1
            if remaining:
                self._lock_users[game_id] = remaining
            else:
                del self._lock_users[game_id]
                del self._game_locks[game_id]

    async def load(self, game_id: str, *, persist_migration: bool = True) -> SpadesGame:
        """
        Load and migrate a game.

        When migration changed the record and ``persist_migration`` is set, the
        migrated game is written back. A failed write is logged and the migrated
        in-memory game is returned anyway.

        Raises:
            GameNotFoundError: If no game is stored under ``game_id``

        """
        document = await self._games.get_game(game_id)
        if document is None:
            raise GameNotFoundError("Game not found", code=ValidationCode.GAME_NOT_FOUND, gameId=game_id)

        repaired = repair_legacy_document(document)
        game, changed = migrate_game(SpadesGame.model_validate(repaired))
        if (changed or repaired is not document) and persist_migration:
            logger.info("migrated legacy game record", game_id=game_id)
            try:
                game = await self.save(game)
            except (StaleGameError, sqlite3.Error):
                logger.warning("failed to persist migrated game, serving unsaved copy", game_id=game_id)
        return game

    async def create(self, game: SpadesGame) -> SpadesGame | None:
        """Insert a new game; returns None when its id is already taken."""
        if not await self._games.create_game(game.id, game.to_wire()):
            return None
        return game.model_copy(update={"version": 1})

    async def save(self, game: SpadesGame) -> SpadesGame:
        """
        Persist ``game`` if the stored copy is still at ``game.version``.

        Raises:
            StaleGameError: If another writer saved the game first

        """
        try:
            version = await self._games.save_game(game.id, game.to_wire(), game.version)
        except StaleWriteError as e:
            raise StaleGameError(game.id) from e
        return game.model_copy(update={"version": version})

    async def delete(self, game_id: str) -> bool:
        return await self._games.delete_game(game_id)

    async def list_games(self) -> list[SpadesGame]:
        """Every readable game, migrated in memory, most recently active first."""
        games = []
        for document in await self._games.list_games():
            try:
                game = SpadesGame.model_validate(repair_legacy_document(document))
            except ValidationError:
                logger.warning("skipping unreadable game record", game_id=document.get("id"))
                continue
            games.append(migrate_game(game)[0])
        return games

    async def count(self) -> int:
        return await self._games.count_games()

    async def register_sessions(self, game: SpadesGame, player_ids: Iterable[str]) -> None:
        """Create presence records for newly seated human players."""
        now = now_ms()
        for pid in player_ids:
            player = game.players[pid]
            if player.is_computer:
                continue
            await self._sessions.save_session(
                PlayerSession(player_id=pid, game_id=game.id, name=player.name, joined_at=now, last_seen=now)
            )

    async def drop_sessions(self, player_ids: Iterable[str]) -> None:
        for pid in player_ids:
            await self._sessions.delete_session(pid)
