"""Admin bulk operations: denormalized listings and bulk deletes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shared.dal.models import PlayerSession
from spades.logic.exceptions import GameNotFoundError
from spades.logic.state import now_ms
from spades.session.types import AdminGameSummary, AdminPlayerSummary, DeleteReport

if TYPE_CHECKING:
    from shared.dal.session_repository import SessionRepository
    from spades.session.store import GameStore

logger = structlog.get_logger()

DEFAULT_ONLINE_WINDOW_SECONDS = 300


class AdminService:
    def __init__(
        self,
        store: GameStore,
        sessions: SessionRepository,
        *,
        online_window_seconds: int = DEFAULT_ONLINE_WINDOW_SECONDS,
    ) -> None:
        self._store = store
        self._sessions = sessions
        self._online_window_ms = online_window_seconds * 1000

    async def list_games(self) -> list[AdminGameSummary]:
        return [
            AdminGameSummary(
                id=game.id,
                code=game.code,
                title=game.title or "Untitled Game",
                host=game.host_name,
                players=len(game.players),
                status=game.status.value,
                created_at=game.created_at,
                last_activity=game.last_activity or game.created_at,
            )
            for game in await self._store.list_games()
        ]

    async def delete_games(self, game_ids: list[str]) -> DeleteReport:
        """Delete games and the sessions of everyone seated in them."""
        deleted: list[str] = []
        failed: list[str] = []
        for game_id in game_ids:
            async with self._store.lock(game_id):
                try:
                    game = await self._store.load(game_id, persist_migration=False)
                except GameNotFoundError:
                    failed.append(game_id)
                    continue
                await self._store.drop_sessions(game.players)
                if await self._store.delete(game_id):
                    deleted.append(game_id)
                else:
                    failed.append(game_id)
        logger.info("admin deleted games", deleted=len(deleted), failed=len(failed))
        return DeleteReport(deleted, failed)

    def _is_online(self, session: PlayerSession, now: int) -> bool:
        return session.is_online and session.last_seen > now - self._online_window_ms

    async def list_players(self) -> list[AdminPlayerSummary]:
        """Session summaries; a player only counts as online if seen within the online window."""
        now = now_ms()
        return [
            AdminPlayerSummary(
                id=session.player_id,
                name=session.name,
                game_id=session.game_id,
                last_seen=session.last_seen,
                is_online=self._is_online(session, now),
            )
            for session in await self._sessions.list_sessions()
        ]

    async def delete_players(self, player_ids: list[str]) -> DeleteReport:
        deleted: list[str] = []
        failed: list[str] = []
        for player_id in player_ids:
            (deleted if await self._sessions.delete_session(player_id) else failed).append(player_id)
        logger.info("admin deleted players", deleted=len(deleted), failed=len(failed))
        return DeleteReport(deleted, failed)

    async def touch_player(
        self,
        player_id: str,
        *,
        is_online: bool = True,
        last_seen: int | None = None,
    ) -> PlayerSession:
        """Presence heartbeat; unknown ids get a guest record."""
        now = now_ms()
        session = await self._sessions.get_session(player_id)
        if session is None:
            session = PlayerSession(player_id=player_id, joined_at=now)
        session = session.model_copy(update={"is_online": is_online, "last_seen": last_seen or now})
        await self._sessions.save_session(session)
        return session
