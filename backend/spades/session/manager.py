"""
Spades game service: create, join, read and dispatch actions.

Every mutation runs as lock, load, pure transition, save. The pure logic
in ``spades.logic`` never touches storage; this service owns the sequencing
and the side effects (session records, profile stats).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from spades.logic.action_handlers import apply_action, require_seated
from spades.logic.actions import parse_action
from spades.logic.ai_player import AIPlayer
from spades.logic.enums import GameStatus
from spades.logic.game import add_player, create_game, generate_game_code, is_auto_name
from spades.logic.migration import migrate_game
from spades.logic.state import DEFAULT_BID_TIMER_SECONDS, DEFAULT_MAX_PLAYERS, DEFAULT_MAX_ROUNDS, now_ms
from spades.session.types import ActionOutcome, GameJoined

if TYPE_CHECKING:
    from collections.abc import Callable

    from spades.logic.state import SpadesGame, TeamConfig
    from spades.session.identity import PlayerIdentityService
    from spades.session.store import GameStore

logger = structlog.get_logger()

DEFAULT_CODE_GENERATION_ATTEMPTS = 50


class GameCreationError(Exception):
    """No unused game code could be allocated."""


class SpadesGameService:
    def __init__(
        self,
        store: GameStore,
        identity: PlayerIdentityService,
        ai: AIPlayer | None = None,
        *,
        code_generation_attempts: int = DEFAULT_CODE_GENERATION_ATTEMPTS,
        code_factory: Callable[[], str] = generate_game_code,
    ) -> None:
        self._store = store
        self._identity = identity
        self._ai = ai or AIPlayer()
        self._code_generation_attempts = code_generation_attempts
        self._code_factory = code_factory

    async def create_game(  # noqa: PLR0913
        self,
        host_name: str,
        *,
        team_config: TeamConfig | None = None,
        total_rounds: int = DEFAULT_MAX_ROUNDS,
        max_players: int = DEFAULT_MAX_PLAYERS,
        title: str = "",
        description: str = "",
        bidding_style: str = "visible",
        bid_timer: int = DEFAULT_BID_TIMER_SECONDS,
    ) -> GameJoined:
        """
        Create a game under a fresh code with the caller as host.

        Raises:
            GameCreationError: If every generated code was already taken

        """
        for _ in range(self._code_generation_attempts):
            code = self._code_factory()
            game, host_id = create_game(
                code,
                host_name,
                self._ai,
                team_config=team_config,
                max_rounds=total_rounds,
                max_players=max_players,
                title=title,
                description=description,
                bidding_style=bidding_style,
                bid_timer=bid_timer,
            )
            stored = await self._store.create(game)
            if stored is None:
                logger.debug("game code collision, retrying", game_id=code)
                continue
            await self._store.register_sessions(stored, [host_id])
            logger.info("game created", game_id=code, player_id=host_id, auto=stored.is_auto_game)
            return GameJoined(stored, host_id, auto_mode=is_auto_name(host_name))

        raise GameCreationError(f"No free game code after {self._code_generation_attempts} attempts")

    async def join_game(self, code: str, player_name: str, *, team: str | None = None) -> GameJoined:
        """
        Seat ``player_name`` in the lobby game ``code``.

        Raises:
            GameNotFoundError: If no game has that code
            InvalidPhaseError: If the game already started or is full

        """
        async with self._store.lock(code):
            game = await self._store.load(code)
            new_game, player_id = add_player(game, player_name, self._ai, team=team)
            stored = await self._store.save(new_game)
            await self._store.register_sessions(stored, [player_id])
        return GameJoined(stored, player_id, auto_mode=is_auto_name(player_name))

    async def get_game_state(self, game_id: str) -> SpadesGame:
        """Current game, with any pending legacy migration persisted."""
        async with self._store.lock(game_id):
            return await self._store.load(game_id)

    async def dispatch_action(
        self,
        game_id: str,
        player_id: str,
        action: str,
        data: dict[str, Any] | None = None,
    ) -> ActionOutcome:
        """
        Apply one player action to a game and persist the result.

        Raises:
            GameRuleError: If the game is missing, the actor is not seated, the
                action is unknown or malformed, or a rule precondition fails
            StaleGameError: If another process saved the game concurrently

        """
        async with self._store.lock(game_id):
            game = await self._store.load(game_id, persist_migration=False)
            require_seated(game, player_id)
            parsed = parse_action(action, data)
            result = apply_action(game, player_id, parsed, self._ai)

            if result.deleted or result.game is None:
                await self._store.drop_sessions(result.removed_player_ids)
                await self._store.delete(game.id)
                logger.info("game removed", game_id=game.id, action=action)
                return ActionOutcome(None, deleted=True)

            new_game, _ = migrate_game(result.game)
            stored = await self._store.save(new_game.model_copy(update={"last_activity": now_ms()}))
            await self._store.drop_sessions(result.removed_player_ids)

        if game.status != GameStatus.COMPLETED and stored.status == GameStatus.COMPLETED:
            await self._identity.record_completed_game(stored)
        logger.info("action applied", game_id=game.id, player_id=player_id, action=action, status=stored.status)
        return ActionOutcome(stored)
