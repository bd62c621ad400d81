from __future__ import annotations

import contextlib
import json
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, cast

import structlog
from pydantic import BaseModel, ValidationError
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from shared.build_info import APP_VERSION, GIT_COMMIT
from shared.db import Database, SqliteGameRepository, SqliteProfileRepository, SqliteSessionRepository
from shared.logging import bind_request_context, setup_logging
from spades.logic.enums import ErrorKind
from spades.logic.exceptions import GameRuleError
from spades.logic.state import SpadesGame
from spades.server.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from spades.server.settings import SpadesServerSettings
from spades.server.types import (
    ActionRequest,
    CreateGameRequest,
    DeleteGamesRequest,
    DeletePlayersRequest,
    JoinGameRequest,
    LoginRequest,
    PlayerStatusRequest,
    ResumeRequest,
)
from spades.session.admin import AdminService
from spades.session.identity import PlayerIdentityService
from spades.session.manager import GameCreationError, SpadesGameService
from spades.session.store import GameStore

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request

    from spades.logic.ai_player import AIPlayer

logger = structlog.get_logger()

_ERROR_STATUS: dict[ErrorKind, HTTPStatus] = {
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.FORBIDDEN: HTTPStatus.FORBIDDEN,
    ErrorKind.INVALID_PHASE: HTTPStatus.BAD_REQUEST,
    ErrorKind.INVALID_VALUE: HTTPStatus.BAD_REQUEST,
    ErrorKind.INVARIANT_VIOLATION: HTTPStatus.BAD_REQUEST,
    ErrorKind.UNKNOWN_ACTION: HTTPStatus.BAD_REQUEST,
    ErrorKind.CONFLICT: HTTPStatus.CONFLICT,
}

AUTO_CREATE_MESSAGE = "Auto mode activated! Computer players added and game started."
AUTO_JOIN_MESSAGE = "Auto mode activated! Computer players added."


class InvalidRequestError(Exception):
    """Request body was not JSON or failed model validation."""


async def _game_rule_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    error = cast("GameRuleError", exc)
    logger.info("request rejected", kind=error.kind, validation=error.code, error_message=error.message)
    return JSONResponse(error.to_payload(), status_code=_ERROR_STATUS[error.kind])


async def _invalid_request_handler(_request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=HTTPStatus.UNPROCESSABLE_ENTITY)


async def _game_creation_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.error("game creation failed", error_message=str(exc))
    return JSONResponse({"error": str(exc)}, status_code=HTTPStatus.SERVICE_UNAVAILABLE)


async def _parse_body[T: BaseModel](request: Request, model: type[T]) -> T:
    raw_body = await request.body()
    try:
        body: Any = json.loads(raw_body) if raw_body.strip() else {}
    except ValueError:
        raise InvalidRequestError("Invalid JSON body") from None
    if not isinstance(body, dict):
        raise InvalidRequestError("JSON body must be an object")
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise InvalidRequestError(str(e)) from None


def _game_service(request: Request) -> SpadesGameService:
    return request.app.state.game_service


def _identity(request: Request) -> PlayerIdentityService:
    return request.app.state.identity_service


def _admin(request: Request) -> AdminService:
    return request.app.state.admin_service


def _game_wire(game: SpadesGame) -> dict[str, Any]:
    return game.to_wire()


async def health(request: Request) -> JSONResponse:
    store: GameStore = request.app.state.store
    return JSONResponse(
        {"status": "ok", "version": APP_VERSION, "commit": GIT_COMMIT, "activeGames": await store.count()},
    )


async def create_game(request: Request) -> JSONResponse:
    req = await _parse_body(request, CreateGameRequest)
    result = await _game_service(request).create_game(
        req.host_name,
        team_config=req.team_config,
        total_rounds=req.total_rounds,
        max_players=req.max_players,
        title=req.title,
        description=req.description,
        bidding_style=req.bidding_style,
        bid_timer=req.bid_timer,
    )
    bind_request_context(game_id=result.game.id, player_id=result.player_id)
    return JSONResponse(
        {
            "gameId": result.game.id,
            "code": result.game.code,
            "playerId": result.player_id,
            "game": _game_wire(result.game),
            "autoMode": result.auto_mode,
            "message": AUTO_CREATE_MESSAGE if result.auto_mode else None,
        },
    )


async def join_game(request: Request) -> JSONResponse:
    req = await _parse_body(request, JoinGameRequest)
    bind_request_context(game_id=req.code)
    result = await _game_service(request).join_game(req.code, req.player_name, team=req.team)
    return JSONResponse(
        {
            "playerId": result.player_id,
            "game": _game_wire(result.game),
            "autoMode": result.auto_mode,
            "message": AUTO_JOIN_MESSAGE if result.auto_mode else None,
        },
    )


async def get_game(request: Request) -> JSONResponse:
    game_id = request.path_params["game_id"].strip().upper()
    bind_request_context(game_id=game_id)
    game = await _game_service(request).get_game_state(game_id)
    return JSONResponse({"game": _game_wire(game)})


async def game_action(request: Request) -> JSONResponse:
    req = await _parse_body(request, ActionRequest)
    bind_request_context(game_id=req.game_id, player_id=req.player_id, action=req.action)
    outcome = await _game_service(request).dispatch_action(req.game_id, req.player_id, req.action, req.data)
    return JSONResponse(outcome.to_wire())


async def login(request: Request) -> JSONResponse:
    req = await _parse_body(request, LoginRequest)
    result = await _identity(request).login(req.name)
    return JSONResponse(result.to_wire())


async def resume(request: Request) -> JSONResponse:
    req = await _parse_body(request, ResumeRequest)
    bind_request_context(game_id=req.game_id)
    result = await _identity(request).resume(req.player_name, req.game_id)
    return JSONResponse(result.to_wire())


async def player_profile(request: Request) -> JSONResponse:
    view = await _identity(request).get_profile(request.path_params["name"])
    return JSONResponse(view.to_wire())


async def player_games(request: Request) -> JSONResponse:
    games = await _identity(request).active_games(request.path_params["name"])
    return JSONResponse({"success": True, "activeGames": [g.model_dump(by_alias=True) for g in games]})


async def player_status(request: Request) -> JSONResponse:
    req = await _parse_body(request, PlayerStatusRequest)
    session = await _admin(request).touch_player(req.player_id, is_online=req.is_online, last_seen=req.last_seen)
    return JSONResponse({"success": True, "player": session.model_dump(mode="json", by_alias=True)})


async def admin_list_games(request: Request) -> JSONResponse:
    games = await _admin(request).list_games()
    return JSONResponse({"games": [g.model_dump(by_alias=True) for g in games]})


async def admin_delete_games(request: Request) -> JSONResponse:
    req = await _parse_body(request, DeleteGamesRequest)
    report = await _admin(request).delete_games(req.game_ids)
    return JSONResponse(
        {
            "success": True,
            "deletedGames": report.deleted,
            "failedGames": report.failed,
            "message": f"Deleted {len(report.deleted)} games",
        },
    )


async def admin_list_players(request: Request) -> JSONResponse:
    players = await _admin(request).list_players()
    return JSONResponse({"players": [p.model_dump(by_alias=True) for p in players]})


async def admin_delete_players(request: Request) -> JSONResponse:
    req = await _parse_body(request, DeletePlayersRequest)
    report = await _admin(request).delete_players(req.player_ids)
    return JSONResponse(
        {
            "success": True,
            "deletedPlayers": report.deleted,
            "failedPlayers": report.failed,
            "message": f"Deleted {len(report.deleted)} players",
        },
    )


def create_app(
    settings: SpadesServerSettings | None = None,
    ai: AIPlayer | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = SpadesServerSettings()

    routes = [
        Route("/health", health, methods=["GET"], name="health"),
        Route("/api/create", create_game, methods=["POST"], name="create_game"),
        Route("/api/join", join_game, methods=["POST"], name="join_game"),
        Route("/api/game/{game_id}", get_game, methods=["GET"], name="get_game"),
        Route("/api/action", game_action, methods=["POST"], name="game_action"),
        Route("/api/players/login", login, methods=["POST"], name="player_login"),
        Route("/api/players/resume", resume, methods=["POST"], name="player_resume"),
        Route("/api/players/status", player_status, methods=["POST"], name="player_status"),
        Route("/api/players/{name}/profile", player_profile, methods=["GET"], name="player_profile"),
        Route("/api/players/{name}/games", player_games, methods=["GET"], name="player_games"),
        Route("/api/admin/games", admin_list_games, methods=["GET"], name="admin_list_games"),
        Route("/api/admin/games", admin_delete_games, methods=["DELETE"], name="admin_delete_games"),
        Route("/api/admin/players", admin_list_players, methods=["GET"], name="admin_list_players"),
        Route("/api/admin/players", admin_delete_players, methods=["DELETE"], name="admin_delete_players"),
    ]

    db = Database(settings.database_path)
    db.connect()
    db.import_legacy_json(settings.legacy_data_dir)

    sessions = SqliteSessionRepository(db)
    store = GameStore(SqliteGameRepository(db), sessions)
    identity_service = PlayerIdentityService(
        store,
        SqliteProfileRepository(db),
        history_limit=settings.history_limit,
    )
    game_service = SpadesGameService(
        store,
        identity_service,
        ai,
        code_generation_attempts=settings.code_generation_attempts,
    )
    admin_service = AdminService(store, sessions, online_window_seconds=settings.online_window_seconds)

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:  # pragma: no cover
        yield
        db.close()

    app = Starlette(
        routes=routes,
        lifespan=lifespan,
        exception_handlers={
            GameRuleError: _game_rule_error_handler,
            InvalidRequestError: _invalid_request_handler,
            GameCreationError: _game_creation_error_handler,
        },
    )
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(SecurityHeadersMiddleware)  # type: ignore[arg-type]
    app.add_middleware(RequestContextMiddleware)  # type: ignore[arg-type]

    app.state.db = db
    app.state.settings = settings
    app.state.store = store
    app.state.game_service = game_service
    app.state.identity_service = identity_service
    app.state.admin_service = admin_service

    logger.info("spades server ready", database=settings.database_path)
    return app


def get_app() -> Starlette:  # pragma: no cover
    """Factory function for uvicorn --factory spades.server.app:get_app."""
    s = SpadesServerSettings()
    setup_logging(log_dir=s.log_dir)
    return create_app(settings=s)
