"""
Action handlers for Spades game actions.

Each handler is a pure function ``(game, actor_id, action, ai) -> ActionResult``.
Every precondition is checked before a new value is built; a violation raises
a GameRuleError subclass and leaves the input untouched. Handlers are used by
SpadesGameService, which owns loading, locking and persistence.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, NamedTuple

import structlog

from spades.logic.actions import (
    EditPlayerTricksAction,
    NoDataAction,
    SpadesAction,
    SubmitBidAction,
    SubmitTricksAction,
)
from spades.logic.ai_player_controller import fill_ai_bids, fill_ai_tricks
from spades.logic.enums import GameAction, GameStatus, RoundStatus, ValidationCode
from spades.logic.exceptions import (
    ForbiddenActionError,
    InvalidPhaseError,
    InvalidValueError,
)
from spades.logic.round import begin_play, finalize_round, start_round
from spades.logic.state_utils import (
    all_players_bid,
    all_players_reported_tricks,
    replace_active_round,
    with_bid,
    with_tricks,
    without_player_entries,
)

if TYPE_CHECKING:
    from spades.logic.ai_player import AIPlayer
    from spades.logic.state import SpadesGame, SpadesRound

logger = structlog.get_logger()

MIN_PLAYERS_TO_START = 2


class ActionResult(NamedTuple):
    """
    Result of an action handler execution.

    ``game`` is None when the action deleted the game; ``removed_player_ids``
    lists players whose session records the caller should drop.
    """

    game: SpadesGame | None
    deleted: bool = False
    removed_player_ids: tuple[str, ...] = ()


def require_seated(game: SpadesGame, actor_id: str) -> None:
    if actor_id not in game.players:
        raise ForbiddenActionError("Player not in game", code=ValidationCode.NOT_IN_GAME, playerId=actor_id)


def _require_host(game: SpadesGame, actor_id: str, action: GameAction) -> None:
    if not game.players[actor_id].is_host:
        raise ForbiddenActionError(f"Only the host can {action}", code=ValidationCode.HOST_ONLY, action=action.value)


def _require_status(game: SpadesGame, expected: GameStatus, action: GameAction) -> None:
    if game.status != expected:
        raise InvalidPhaseError(
            f"Cannot {action} while game is {game.status}",
            code=ValidationCode.WRONG_PHASE,
            action=action.value,
            status=game.status.value,
            expected=expected.value,
        )


def _require_trick_range(game: SpadesGame, tricks: int) -> None:
    if not 0 <= tricks <= game.current_round:
        raise InvalidValueError(
            f"Tricks must be between 0 and {game.current_round}",
            code=ValidationCode.INDIVIDUAL_LIMIT,
            min=0,
            max=game.current_round,
        )


def _active_round(game: SpadesGame) -> SpadesRound:
    round_state = game.active_round
    if round_state is None:
        raise InvalidPhaseError(
            "No round in progress",
            code=ValidationCode.WRONG_PHASE,
            status=game.status.value,
        )
    return round_state


def _enter_playing(game: SpadesGame, round_state: SpadesRound) -> SpadesGame:
    playing = round_state.model_copy(update={"status": RoundStatus.PLAYING})
    return replace_active_round(game, playing).model_copy(update={"status": GameStatus.PLAYING})


def _enter_review_if_complete(game: SpadesGame) -> SpadesGame:
    round_state = _active_round(game)
    if not all_players_reported_tricks(game, round_state):
        return game
    review = round_state.model_copy(update={"status": RoundStatus.REVIEW})
    return replace_active_round(game, review).model_copy(update={"status": GameStatus.TRICK_REVIEW})


def handle_start_game(game: SpadesGame, actor_id: str, action: NoDataAction, ai: AIPlayer) -> ActionResult:
    _require_host(game, actor_id, action.action)
    _require_status(game, GameStatus.LOBBY, action.action)
    if len(game.players) < MIN_PLAYERS_TO_START:
        raise InvalidPhaseError(
            f"Need at least {MIN_PLAYERS_TO_START} players to start",
            code=ValidationCode.NOT_ENOUGH_PLAYERS,
            players=len(game.players),
            required=MIN_PLAYERS_TO_START,
        )
    return ActionResult(begin_play(game, ai))


def handle_submit_bid(game: SpadesGame, actor_id: str, action: SubmitBidAction, ai: AIPlayer) -> ActionResult:
    _require_status(game, GameStatus.BIDDING, action.action)
    round_state = _active_round(game)
    if actor_id in round_state.bids:
        raise InvalidPhaseError("Bid already submitted for this round", code=ValidationCode.ALREADY_BID)
    if not 0 <= action.bid <= game.current_round:
        raise InvalidValueError(
            f"Invalid bid. Must be between 0 and {game.current_round}",
            code=ValidationCode.BID_OUT_OF_RANGE,
            min=0,
            max=game.current_round,
        )

    new_game = fill_ai_bids(replace_active_round(game, with_bid(round_state, actor_id, action.bid)), ai)
    round_state = _active_round(new_game)
    if all_players_bid(new_game, round_state):
        new_game = _enter_playing(new_game, round_state)
        logger.info("bidding complete", game_id=game.id, round=game.current_round)
    return ActionResult(new_game)


def handle_submit_tricks(game: SpadesGame, actor_id: str, action: SubmitTricksAction, ai: AIPlayer) -> ActionResult:
    _require_status(game, GameStatus.PLAYING, action.action)
    round_state = _active_round(game)
    if actor_id in round_state.tricks:
        raise InvalidPhaseError("Tricks already submitted for this round", code=ValidationCode.ALREADY_SUBMITTED)
    _require_trick_range(game, action.tricks)

    new_game = replace_active_round(game, with_tricks(round_state, actor_id, action.tricks))
    new_game = fill_ai_tricks(new_game, ai)
    return ActionResult(_enter_review_if_complete(new_game))


def handle_edit_player_tricks(
    game: SpadesGame,
    actor_id: str,
    action: EditPlayerTricksAction,
    ai: AIPlayer,  # noqa: ARG001
) -> ActionResult:
    _require_host(game, actor_id, action.action)
    _require_status(game, GameStatus.TRICK_REVIEW, action.action)
    if action.target_player_id not in game.players:
        raise InvalidValueError(
            "Target player is not in this game",
            code=ValidationCode.UNKNOWN_PLAYER,
            targetPlayerId=action.target_player_id,
        )
    _require_trick_range(game, action.new_tricks)

    # the total is only checked at approval, the host may pass through invalid sums
    round_state = with_tricks(_active_round(game), action.target_player_id, action.new_tricks)
    return ActionResult(replace_active_round(game, round_state))


def handle_approve_tricks(game: SpadesGame, actor_id: str, action: NoDataAction, ai: AIPlayer) -> ActionResult:  # noqa: ARG001
    _require_host(game, actor_id, action.action)
    _require_status(game, GameStatus.TRICK_REVIEW, action.action)
    return ActionResult(finalize_round(game))


def handle_start_trick_tracking(game: SpadesGame, actor_id: str, action: NoDataAction, ai: AIPlayer) -> ActionResult:
    _require_host(game, actor_id, action.action)
    _require_status(game, GameStatus.BIDDING, action.action)
    round_state = _active_round(game)
    if not all_players_bid(game, round_state):
        raise InvalidPhaseError("Not all players have bid", code=ValidationCode.BIDS_INCOMPLETE)

    new_game = fill_ai_tricks(_enter_playing(game, round_state), ai)
    return ActionResult(_enter_review_if_complete(new_game))


def handle_complete_round(game: SpadesGame, actor_id: str, action: NoDataAction, ai: AIPlayer) -> ActionResult:  # noqa: ARG001
    _require_host(game, actor_id, action.action)
    _require_status(game, GameStatus.PLAYING, action.action)
    if not all_players_reported_tricks(game, _active_round(game)):
        raise InvalidPhaseError("Not all players have submitted tricks", code=ValidationCode.TRICKS_INCOMPLETE)
    return ActionResult(finalize_round(game))


def handle_next_round(game: SpadesGame, actor_id: str, action: NoDataAction, ai: AIPlayer) -> ActionResult:
    _require_host(game, actor_id, action.action)
    _require_status(game, GameStatus.SCORING, action.action)
    if game.current_round >= game.max_rounds:
        logger.info("game completed", game_id=game.id, rounds=game.current_round)
        return ActionResult(game.model_copy(update={"status": GameStatus.COMPLETED}))
    return ActionResult(start_round(game, ai))


def handle_leave_game(game: SpadesGame, actor_id: str, action: NoDataAction, ai: AIPlayer) -> ActionResult:  # noqa: ARG001
    leaving = game.players[actor_id]
    players = {pid: p for pid, p in game.players.items() if pid != actor_id}

    if not players:
        logger.info("last player left, deleting game", game_id=game.id, player_id=actor_id)
        return ActionResult(None, deleted=True, removed_player_ids=(actor_id,))

    update: dict[str, Any] = {"players": players}
    if leaving.is_host:
        new_host_id = next(iter(players))
        players[new_host_id] = players[new_host_id].model_copy(update={"is_host": True})
        update["host_id"] = new_host_id
        update["host_name"] = players[new_host_id].name
        logger.info("host transferred", game_id=game.id, player_id=new_host_id)
    if len(players) < MIN_PLAYERS_TO_START:
        update["status"] = GameStatus.LOBBY

    new_game = game.model_copy(update=update)
    round_state = new_game.active_round
    if round_state is not None and round_state.status != RoundStatus.COMPLETED:
        new_game = replace_active_round(new_game, without_player_entries(round_state, actor_id))
    return ActionResult(new_game, removed_player_ids=(actor_id,))


def handle_delete_game(game: SpadesGame, actor_id: str, action: NoDataAction, ai: AIPlayer) -> ActionResult:  # noqa: ARG001
    _require_host(game, actor_id, action.action)
    logger.info("game deleted by host", game_id=game.id, action=action.action.value)
    return ActionResult(None, deleted=True, removed_player_ids=tuple(game.players))


ActionHandler = Callable[["SpadesGame", str, Any, "AIPlayer"], ActionResult]

ACTION_HANDLERS: dict[GameAction, ActionHandler] = {
    GameAction.START_GAME: handle_start_game,
    GameAction.SUBMIT_BID: handle_submit_bid,
    GameAction.SUBMIT_TRICKS: handle_submit_tricks,
    GameAction.EDIT_PLAYER_TRICKS: handle_edit_player_tricks,
    GameAction.APPROVE_TRICKS: handle_approve_tricks,
    GameAction.START_TRICK_TRACKING: handle_start_trick_tracking,
    GameAction.COMPLETE_ROUND: handle_complete_round,
    GameAction.NEXT_ROUND: handle_next_round,
    GameAction.LEAVE_GAME: handle_leave_game,
    GameAction.DELETE_GAME: handle_delete_game,
    GameAction.CANCEL_GAME: handle_delete_game,
}


def apply_action(game: SpadesGame, actor_id: str, action: SpadesAction, ai: AIPlayer) -> ActionResult:
    """
    Run the handler for ``action`` on behalf of ``actor_id``.

    Raises:
        ForbiddenActionError: If the actor is not seated in the game
        GameRuleError: Any precondition failure from the handler

    """
    require_seated(game, actor_id)
    handler = ACTION_HANDLERS[action.action]
    return handler(game, actor_id, action, ai)
