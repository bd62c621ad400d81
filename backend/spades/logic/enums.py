"""
String enum definitions for Spades game concepts.
"""

from enum import StrEnum


class GameStatus(StrEnum):
    """What the table is collectively doing."""

    LOBBY = "lobby"
    BIDDING = "bidding"
    PLAYING = "playing"
    TRICK_REVIEW = "trick_review"
    SCORING = "scoring"
    COMPLETED = "completed"


class RoundStatus(StrEnum):
    """How far a single round's bookkeeping has progressed."""

    BIDDING = "bidding"
    PLAYING = "playing"
    REVIEW = "review"
    COMPLETED = "completed"


class GameMode(StrEnum):
    TEAMS = "teams"
    INDIVIDUAL = "individual"


class PlayerStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Personality(StrEnum):
    """Computer player temperament, drives bid and trick generation."""

    CONSERVATIVE = "conservative"
    SMART = "smart"
    AGGRESSIVE = "aggressive"


class GameAction(StrEnum):
    """Action identifiers accepted by the dispatcher."""

    START_GAME = "startGame"
    SUBMIT_BID = "submitBid"
    SUBMIT_TRICKS = "submitTricks"
    EDIT_PLAYER_TRICKS = "editPlayerTricks"
    APPROVE_TRICKS = "approveTricks"
    START_TRICK_TRACKING = "startTrickTracking"
    COMPLETE_ROUND = "completeRound"
    NEXT_ROUND = "nextRound"
    LEAVE_GAME = "leaveGame"
    DELETE_GAME = "deleteGame"
    CANCEL_GAME = "cancelGame"


class ErrorKind(StrEnum):
    """Error taxonomy exposed to clients."""

    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_PHASE = "invalid_phase"
    INVALID_VALUE = "invalid_value"
    INVARIANT_VIOLATION = "invariant_violation"
    UNKNOWN_ACTION = "unknown_action"
    CONFLICT = "conflict"


class ValidationCode(StrEnum):
    """Machine-checkable discriminators so clients can branch without parsing messages."""

    GAME_NOT_FOUND = "game_not_found"
    PROFILE_NOT_FOUND = "profile_not_found"
    NOT_IN_GAME = "not_in_game"
    HOST_ONLY = "host_only"
    WRONG_PHASE = "wrong_phase"
    NOT_ENOUGH_PLAYERS = "not_enough_players"
    ALREADY_BID = "already_bid"
    ALREADY_SUBMITTED = "already_submitted"
    BIDS_INCOMPLETE = "bids_incomplete"
    TRICKS_INCOMPLETE = "tricks_incomplete"
    GAME_IN_PROGRESS = "game_in_progress"
    GAME_FULL = "game_full"
    GAME_COMPLETED = "game_completed"
    BID_OUT_OF_RANGE = "bid_out_of_range"
    INDIVIDUAL_LIMIT = "individual_limit"
    TOTAL_NOT_CORRECT = "total_not_correct"
    UNKNOWN_PLAYER = "unknown_player"
    INVALID_PAYLOAD = "invalid_payload"
    INVALID_NAME = "invalid_name"
    UNKNOWN_ACTION = "unknown_action"
    STALE_WRITE = "stale_write"
