"""
Name-based player identity: profiles, active-game lookup and resume.

There is no authentication; a player is whoever claims a name. Active games
are found by scanning every stored game for a case-insensitive name match,
so results always reflect the latest saved state without a separate index.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shared.dal.models import GameHistoryEntry, PlayerProfile, PlayerStats
from spades.logic.enums import GameStatus, PlayerStatus, RoundStatus, ValidationCode
from spades.logic.exceptions import (
    ForbiddenActionError,
    InvalidPhaseError,
    InvalidValueError,
    ProfileNotFoundError,
)
from spades.logic.game import generate_player_id
from spades.logic.scoring import player_totals
from spades.logic.state import now_ms
from spades.logic.state_utils import update_player
from spades.session.types import ActiveGameSummary, LoginResult, ProfileView, ResumeResult

if TYPE_CHECKING:
    from shared.dal.profile_repository import ProfileRepository
    from spades.logic.state import SpadesGame
    from spades.session.store import GameStore

logger = structlog.get_logger()

DEFAULT_HISTORY_LIMIT = 10


def _require_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidValueError("Player name is required", code=ValidationCode.INVALID_NAME)
    return cleaned


def _find_seat(game: SpadesGame, name: str) -> str | None:
    """Player id of the first seat whose name matches case-insensitively."""
    key = name.strip().lower()
    return next((pid for pid, p in game.players.items() if p.name.lower() == key), None)


def winning_player_ids(game: SpadesGame) -> set[str]:
    """
    Players who won a completed game.

    Teams mode: everyone on the team(s) with the top cumulative score.
    Individual mode: the player(s) with the top cumulative round total.
    Ties share the win.
    """
    if not game.is_individual and game.scores:
        best = max(game.scores.values())
        teams = {team for team, score in game.scores.items() if score == best}
        return {pid for pid, p in game.players.items() if p.team in teams}

    totals = player_totals(game.round_scores)
    seated = {pid: totals.get(pid, 0) for pid in game.players}
    if not seated:
        return set()
    best = max(seated.values())
    return {pid for pid, total in seated.items() if total == best}


class PlayerIdentityService:
    def __init__(
        self,
        store: GameStore,
        profiles: ProfileRepository,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._store = store
        self._profiles = profiles
        self._history_limit = history_limit

    async def login(self, name: str) -> LoginResult:
        """Create or refresh the profile for ``name`` and list the player's unfinished games."""
        name = _require_name(name)
        now = now_ms()
        profile = await self._profiles.get_profile(name)
        if profile is None:
            profile = PlayerProfile(
                player_id=generate_player_id(),
                name=name,
                created_at=now,
                last_login=now,
                login_count=1,
            )
            logger.info("player profile created", player_name=name)
        else:
            profile = profile.model_copy(update={"login_count": profile.login_count + 1, "last_login": now})
        await self._profiles.save_profile(profile)

        return LoginResult(profile, await self.active_games(name))

    async def active_games(self, name: str) -> list[ActiveGameSummary]:
        """Unfinished games seating ``name``, most recently active first."""
        summaries = []
        for game in await self._store.list_games():
            if game.status == GameStatus.COMPLETED:
                continue
            player_id = _find_seat(game, name)
            if player_id is None:
                continue
            summaries.append(
                ActiveGameSummary(
                    game_id=game.id,
                    game_code=game.code,
                    title=game.title,
                    status=game.status.value,
                    current_round=game.current_round,
                    total_rounds=game.max_rounds,
                    player_count=len(game.players),
                    last_activity=game.last_activity,
                    player_id=player_id,
                )
            )
        summaries.sort(key=lambda s: s.last_activity, reverse=True)
        return summaries

    async def resume(self, name: str, game_id: str) -> ResumeResult:
        """
        Re-enter an unfinished game by name and mark the seat active.

        Raises:
            GameNotFoundError: If the game does not exist
            ForbiddenActionError: If nobody by that name is seated
            InvalidPhaseError: If the game has already completed

        """
        name = _require_name(name)
        async with self._store.lock(game_id):
            game = await self._store.load(game_id)
            player_id = _find_seat(game, name)
            if player_id is None:
                raise ForbiddenActionError("You are not in this game", code=ValidationCode.NOT_IN_GAME, gameId=game_id)
            if game.status == GameStatus.COMPLETED:
                raise InvalidPhaseError("This game has already ended", code=ValidationCode.GAME_COMPLETED)

            now = now_ms()
            game = update_player(game, player_id, status=PlayerStatus.ACTIVE, last_activity=now)
            game = await self._store.save(game.model_copy(update={"last_activity": now}))
            await self._store.register_sessions(game, [player_id])

        logger.info("player resumed game", game_id=game_id, player_id=player_id)
        return ResumeResult(game.id, player_id, game)

    async def get_profile(self, name: str) -> ProfileView:
        profile = await self._profiles.get_profile(_require_name(name))
        if profile is None:
            raise ProfileNotFoundError("Player profile not found", code=ValidationCode.PROFILE_NOT_FOUND)
        return ProfileView(profile, await self.active_games(name), profile.recent_games)

    async def record_completed_game(self, game: SpadesGame) -> None:
        """Fold a completed game into the stats and history of every seated human with a profile."""
        winners = winning_player_ids(game)
        totals = player_totals(game.round_scores)
        completed_rounds = [r for r in game.rounds if r.status == RoundStatus.COMPLETED]
        now = now_ms()

        for pid, player in game.players.items():
            if player.is_computer:
                continue
            profile = await self._profiles.get_profile(player.name)
            if profile is None or any(entry.game_id == game.id for entry in profile.recent_games):
                continue

            final_score = totals.get(pid, 0)
            bids = [r for r in completed_rounds if pid in r.bids]
            made = sum(1 for r in bids if r.tricks.get(pid) == r.bids[pid])
            stats = _fold_stats(profile.stats, won=pid in winners, score=final_score, bids=len(bids), made=made)
            entry = GameHistoryEntry(
                game_id=game.id,
                title=game.title,
                game_mode=game.team_config.game_mode.value,
                completed_at=now,
                rounds_played=len(completed_rounds),
                final_score=final_score,
                won=pid in winners,
                player_count=len(game.players),
            )
            recent = (entry, *profile.recent_games)[: self._history_limit]
            await self._profiles.save_profile(profile.model_copy(update={"stats": stats, "recent_games": recent}))
            logger.info("player stats updated", game_id=game.id, player_id=pid, won=entry.won)


def _fold_stats(stats: PlayerStats, *, won: bool, score: int, bids: int, made: int) -> PlayerStats:
    played = stats.games_played + 1
    games_won = stats.games_won + int(won)
    total_score = stats.total_score + score
    total_bids = stats.total_bids + bids
    bids_made = stats.bids_made + made
    return PlayerStats(
        games_played=played,
        games_won=games_won,
        games_lost=stats.games_lost + int(not won),
        win_rate=round(games_won / played * 100, 1),
        total_score=total_score,
        average_score=round(total_score / played, 1),
        best_score=score if stats.games_played == 0 else max(stats.best_score, score),
        total_bids=total_bids,
        bids_made=bids_made,
        bid_accuracy=round(bids_made / total_bids * 100, 1) if total_bids else 0,
    )
