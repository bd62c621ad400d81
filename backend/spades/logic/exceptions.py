"""Typed domain exceptions for Spades rule violations.

Every precondition failure raises a subclass of GameRuleError before any new
state is built, so a rejected action never leaves a partial mutation behind.
The HTTP boundary converts them into JSON responses using ``kind`` (taxonomy),
``code`` (validation discriminator) and ``details``.
"""

from __future__ import annotations

from typing import Any

from spades.logic.enums import ErrorKind, ValidationCode


class GameRuleError(Exception):
    """Base exception for game rule violations."""

    kind: ErrorKind = ErrorKind.INVALID_VALUE

    def __init__(self, message: str, *, code: ValidationCode, **details: Any) -> None:  # noqa: ANN401
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON error body sent to clients."""
        return {"error": self.message, "kind": self.kind.value, "validation": self.code.value, **self.details}


class GameNotFoundError(GameRuleError):
    """Game (or player profile) lookup failed."""

    kind = ErrorKind.NOT_FOUND


class ProfileNotFoundError(GameNotFoundError):
    """No player profile exists for the given name."""


class ForbiddenActionError(GameRuleError):
    """Actor is not in the game or lacks host privilege."""

    kind = ErrorKind.FORBIDDEN


class InvalidPhaseError(GameRuleError):
    """Action attempted while the game is not in the required status."""

    kind = ErrorKind.INVALID_PHASE


class InvalidValueError(GameRuleError):
    """Numeric or textual payload outside its legal range."""

    kind = ErrorKind.INVALID_VALUE


class TrickTotalError(GameRuleError):
    """Round finalization attempted while the trick total differs from the round number."""

    kind = ErrorKind.INVARIANT_VIOLATION

    def __init__(self, *, current: int, required: int) -> None:
        super().__init__(
            f"Total tricks must equal {required}. Current total: {current}",
            code=ValidationCode.TOTAL_NOT_CORRECT,
            current=current,
            required=required,
        )


class UnknownActionError(GameRuleError):
    """Dispatch received an action string with no handler."""

    kind = ErrorKind.UNKNOWN_ACTION

    def __init__(self, action: str) -> None:
        super().__init__("Unknown action", code=ValidationCode.UNKNOWN_ACTION, action=action)


class StaleGameError(GameRuleError):
    """A concurrent writer saved the game first; the caller may reload and retry."""

    kind = ErrorKind.CONFLICT

    def __init__(self, game_id: str) -> None:
        super().__init__(
            "Game was modified concurrently, please retry",
            code=ValidationCode.STALE_WRITE,
            gameId=game_id,
        )
