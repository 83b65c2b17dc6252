"""
Game error hierarchy for Whispers.

Every error carries the HTTP status the handlers should answer with and
whether the caller may simply retry the same request.
"""

from typing import Optional

class GameError(Exception):
    """Base exception for game-related errors."""
    status_code = 400
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        data = {'error': self.message}
        if self.retryable:
            data['retryable'] = True
        return data

class GameValidationError(GameError):
    """Bad or missing input, wrong game status, dead or ineligible player."""
    status_code = 400

class GamePermissionError(GameError):
    """The acting player is not allowed to perform the action."""
    status_code = 403

class GameNotFoundError(GameError):
    """Raised when a game, player, or related record does not exist."""
    status_code = 404

class GameLockContentionError(GameError):
    """Raised when another request is already updating the same game."""
    status_code = 409
    retryable = True

class GamePersistenceError(GameError):
    """Raised when the database transaction fails; nothing was committed."""
    status_code = 500

class InvalidGameStateError(GameError):
    """Raised when stored game data violates the game's invariants."""
    status_code = 500

class PhaseNotDueError(GameError):
    """Raised when an automatic advance finds the phase timer still running or switched off."""
    status_code = 409

    def __init__(self, message: str, time_remaining_ms: Optional[int] = None):
        super().__init__(message)
        self.time_remaining_ms = time_remaining_ms
