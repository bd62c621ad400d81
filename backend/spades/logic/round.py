"""
Round lifecycle: opening a round and finalizing it into scores.

Both the review path (approveTricks) and the direct path (completeRound)
finish a round through ``finalize_round``, so scoring and the per-round
score record have a single implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from spades.logic.ai_player_controller import fill_ai_bids
from spades.logic.enums import GameStatus, RoundStatus
from spades.logic.exceptions import TrickTotalError
from spades.logic.scoring import score_round
from spades.logic.state import SpadesGame, SpadesRound
from spades.logic.state_utils import replace_active_round

if TYPE_CHECKING:
    from spades.logic.ai_player import AIPlayer

logger = structlog.get_logger()


def start_round(game: SpadesGame, ai: AIPlayer) -> SpadesGame:
    """
    Append the next empty round, enter bidding and let computer players bid.

    The new round number is ``current_round + 1``.
    """
    round_number = game.current_round + 1
    new_game = game.model_copy(
        update={
            "current_round": round_number,
            "rounds": (*game.rounds, SpadesRound(round=round_number)),
            "status": GameStatus.BIDDING,
        }
    )
    logger.info("round started", game_id=game.id, round=round_number)
    return fill_ai_bids(new_game, ai)


def begin_play(game: SpadesGame, ai: AIPlayer) -> SpadesGame:
    """
    Leave the lobby and open round 1.

    Round history is reset first, so a table forced back to the lobby by
    departures restarts cleanly instead of appending to stale rounds.
    """
    fresh = game.model_copy(
        update={
            "current_round": 0,
            "rounds": (),
            "scores": {team: 0 for team in game.scores},
            "round_scores": {},
        }
    )
    logger.info("game started", game_id=game.id, player_count=len(game.players))
    return start_round(fresh, ai)


def finalize_round(game: SpadesGame) -> SpadesGame:
    """
    Score the active round and move the game to ``scoring``.

    Scores are computed only when the round has none yet, so re-finalizing
    a round never double-counts team totals.

    Raises:
        TrickTotalError: If the reported tricks do not add up to the round number

    """
    round_state = game.active_round
    if round_state is None:
        raise ValueError(f"Game {game.id} has no active round")

    total = round_state.trick_total
    if total != game.current_round:
        raise TrickTotalError(current=total, required=game.current_round)

    scores = dict(round_state.scores)
    team_scores = dict(game.scores)
    if not scores:
        scores = score_round(round_state.bids, round_state.tricks, list(game.players))
        if not game.is_individual:
            for pid, delta in scores.items():
                team = game.players[pid].team
                if team is not None:
                    team_scores[team] = team_scores.get(team, 0) + delta

    round_scores = {**game.round_scores, game.current_round: scores}
    completed = round_state.model_copy(update={"scores": scores, "status": RoundStatus.COMPLETED})
    new_game = replace_active_round(game, completed).model_copy(
        update={
            "scores": team_scores,
            "round_scores": round_scores,
            "status": GameStatus.SCORING,
        }
    )
    logger.info("round finalized", game_id=game.id, round=game.current_round)
    return new_game
