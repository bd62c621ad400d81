"""
AI fill passes for computer players.

Fills run synchronously inside the action that triggers them, so every
response already carries the settled post-AI state. Trick fills are
budget-aware: the round's trick total can never be pushed past the round
number by a computer player.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from spades.logic.state_utils import replace_active_round, with_bid, with_tricks

if TYPE_CHECKING:
    from spades.logic.ai_player import AIPlayer
    from spades.logic.state import SpadesGame, SpadesPlayer

logger = structlog.get_logger()


def computer_players(game: SpadesGame) -> list[SpadesPlayer]:
    """Computer players in seat (insertion) order."""
    return [p for p in game.players.values() if p.is_computer]


def fill_ai_bids(game: SpadesGame, ai: AIPlayer) -> SpadesGame:
    """Record a bid for every computer player that has not bid this round."""
    round_state = game.active_round
    if round_state is None:
        return game

    for player in computer_players(game):
        if player.id in round_state.bids:
            continue
        bid = ai.decide_bid(player.personality, game.current_round)
        round_state = with_bid(round_state, player.id, bid)
        logger.debug("ai bid", game_id=game.id, player_id=player.id, bid=bid)

    return replace_active_round(game, round_state)


def fill_ai_tricks(game: SpadesGame, ai: AIPlayer) -> SpadesGame:
    """
    Record tricks for every computer player that has not reported yet.

    All but the last pending computer player get their personality suggestion
    capped at the remaining budget; the last one takes the remainder exactly.
    The budget is floored at zero when humans already over-reported.
    """
    round_state = game.active_round
    if round_state is None:
        return game

    pending = [p for p in computer_players(game) if p.id not in round_state.tricks]
    for index, player in enumerate(pending):
        remaining = max(0, game.current_round - round_state.trick_total)
        if index == len(pending) - 1:
            tricks = remaining
        else:
            suggested = ai.decide_tricks(player.personality, round_state.bids.get(player.id, 0))
            tricks = min(suggested, remaining)
        round_state = with_tricks(round_state, player.id, tricks)
        logger.debug("ai tricks", game_id=game.id, player_id=player.id, tricks=tricks, remaining=remaining)

    return replace_active_round(game, round_state)
