"""
Game Logic Module for Whispers.

The resolution core (vote resolver, phase state machine, game lock and
auto-phase trigger) plus the managers that persist and decorate it.
"""

from .errors import (
    GameError, GameValidationError, GamePermissionError, GameNotFoundError,
    GameLockContentionError, GamePersistenceError, InvalidGameStateError,
    PhaseNotDueError
)
from .models import (
    GameStatus, Phase, Role, Winner, VoteRecord, PlayerState,
    EliminationResult, PhaseOutcome, AutoPhaseEntry, AutoPhaseReport
)
from .vote_resolver import resolve_elimination
from .phase_machine import (
    traitor_count_for, validate_start, assign_roles, next_phase,
    count_alive, evaluate_win, can_vote, advance_state
)
from .game_lock import GameLockRegistry
from .auto_phase import AutoPhaseScheduler
from .manager import GameManager
from .narrative_manager import NarrativeManager
from .whisper_manager import WhisperManager
from .room_manager import RoomManager

__all__ = [
    'GameError',
    'GameValidationError',
    'GamePermissionError',
    'GameNotFoundError',
    'GameLockContentionError',
    'GamePersistenceError',
    'InvalidGameStateError',
    'PhaseNotDueError',
    'GameStatus',
    'Phase',
    'Role',
    'Winner',
    'VoteRecord',
    'PlayerState',
    'EliminationResult',
    'PhaseOutcome',
    'AutoPhaseEntry',
    'AutoPhaseReport',
    'resolve_elimination',
    'traitor_count_for',
    'validate_start',
    'assign_roles',
    'next_phase',
    'count_alive',
    'evaluate_win',
    'can_vote',
    'advance_state',
    'GameLockRegistry',
    'AutoPhaseScheduler',
    'GameManager',
    'NarrativeManager',
    'WhisperManager',
    'RoomManager'
]
