"""
Typed action payloads for the single action endpoint.

The wire carries ``{"action": "<name>", "data": {...}}``. Parsing happens in one
place: an unknown action name raises UnknownActionError, a known action with
a malformed payload raises InvalidValueError. Handlers only ever see values
of the closed ``SpadesAction`` union.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from spades.logic.enums import GameAction, ValidationCode
from spades.logic.exceptions import InvalidValueError, UnknownActionError

_ACTION_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class SubmitBidAction(BaseModel):
    model_config = _ACTION_CONFIG

    action: Literal[GameAction.SUBMIT_BID] = GameAction.SUBMIT_BID
    bid: int


class SubmitTricksAction(BaseModel):
    model_config = _ACTION_CONFIG

    action: Literal[GameAction.SUBMIT_TRICKS] = GameAction.SUBMIT_TRICKS
    tricks: int


class EditPlayerTricksAction(BaseModel):
    model_config = _ACTION_CONFIG

    action: Literal[GameAction.EDIT_PLAYER_TRICKS] = GameAction.EDIT_PLAYER_TRICKS
    target_player_id: str = Field(min_length=1)
    new_tricks: int


class NoDataAction(BaseModel):
    """Actions whose only input is the actor."""

    model_config = _ACTION_CONFIG

    action: Literal[
        GameAction.START_GAME,
        GameAction.APPROVE_TRICKS,
        GameAction.START_TRICK_TRACKING,
        GameAction.COMPLETE_ROUND,
        GameAction.NEXT_ROUND,
        GameAction.LEAVE_GAME,
        GameAction.DELETE_GAME,
        GameAction.CANCEL_GAME,
    ]


SpadesAction = Annotated[
    SubmitBidAction | SubmitTricksAction | EditPlayerTricksAction | NoDataAction,
    Field(discriminator="action"),
]

_action_adapter: TypeAdapter[SpadesAction] = TypeAdapter(SpadesAction)

_KNOWN_ACTIONS = frozenset(a.value for a in GameAction)


def parse_action(action: str, data: dict[str, Any] | None) -> SpadesAction:
    """Validate a wire action name plus payload into a typed action."""
    if action not in _KNOWN_ACTIONS:
        raise UnknownActionError(action)
    try:
        return _action_adapter.validate_python({**(data or {}), "action": action})
    except ValidationError as e:
        fields = sorted({".".join(str(part) for part in err["loc"][1:]) for err in e.errors()})
        raise InvalidValueError(
            f"Invalid payload for {action}",
            code=ValidationCode.INVALID_PAYLOAD,
            fields=fields,
        ) from e
