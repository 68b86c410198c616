"""Exceptions raised by the engine.

Everything under :class:`TurnError` is a recoverable rejection of a single
command: the engine catches these at the command boundary and hands them back
inside a rejected :class:`~rummikub.engine.TurnResult`.
"""


class RummikubError(Exception):
    """Base class for all engine errors."""


class InvalidSettings(RummikubError, ValueError):
    """Ruleset out of bounds, or a game that cannot be set up with it."""


class CorruptSaveError(RummikubError, ValueError):
    """A persisted game record is malformed or inconsistent."""


class TurnError(RummikubError):
    """A command was rejected. The game stays valid and playable."""


class PoolExhausted(TurnError):
    def __init__(self, message: str = "No tiles available in the pool") -> None:
        super().__init__(message)


class NotFound(TurnError):
    pass


class InvalidBoard(TurnError):
    pass


class InsufficientInitialMeld(TurnError):
    def __init__(self, required: int, played: int) -> None:
        super().__init__(f"Initial meld must be at least {required} points (played {played})")
        self.required = required
        self.played = played


class IllegalReturn(TurnError):
    pass


class NotYourTurn(TurnError):
    pass


class GameFinished(TurnError):
    def __init__(self, message: str = "Game already finished") -> None:
        super().__init__(message)


class InvalidPosition(TurnError):
    pass


class IllegalPass(TurnError):
    pass
