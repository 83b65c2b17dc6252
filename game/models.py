"""
Data models for game management.

These are pure data structures passed between the resolution core,
the game manager, and the handlers. None of them touch the database.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from enum import Enum

class GameStatus(str, Enum):
    """Lifecycle of a game. Transitions only move forward."""
    WAITING = "WAITING"
    PLAYING = "PLAYING"
    ENDED = "ENDED"

class Phase(str, Enum):
    """Voting round type."""
    DAY = "DAY"
    NIGHT = "NIGHT"

class Role(str, Enum):
    """A player's hidden faction."""
    TRAITOR = "TRAITOR"
    FAITHFUL = "FAITHFUL"

class Winner(str, Enum):
    """Faction declared winner when a game ends."""
    FAITHFULS = "FAITHFULS"
    TRAITORS = "TRAITORS"

@dataclass(frozen=True)
class VoteRecord:
    """A single live vote for one (phase, day)."""
    voter_id: str
    target_id: str
    phase: Optional[Phase] = None
    day: Optional[int] = None

@dataclass(frozen=True)
class PlayerState:
    """The slice of a player the resolution core needs."""
    id: str
    role: Optional[Role]
    is_alive: bool = True

@dataclass
class EliminationResult:
    """Outcome of tallying one phase's votes."""
    eliminated_id: Optional[str]
    tally: Dict[str, int] = field(default_factory=dict)
    tie_broken: bool = False
    tied_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'eliminatedId': self.eliminated_id,
            'tally': dict(self.tally),
            'tieBroken': self.tie_broken,
            'tiedIds': list(self.tied_ids)
        }

@dataclass
class PhaseOutcome:
    """Everything the manager must persist after one phase advance."""
    from_phase: Phase
    from_day: int
    next_phase: Phase
    next_day: int
    elimination: EliminationResult
    winner: Optional[Winner] = None
    alive_traitors: int = 0
    alive_faithfuls: int = 0

    @property
    def eliminated_id(self) -> Optional[str]:
        return self.elimination.eliminated_id

    @property
    def game_ended(self) -> bool:
        return self.winner is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'fromPhase': self.from_phase.value,
            'fromDay': self.from_day,
            'nextPhase': self.next_phase.value,
            'nextDay': self.next_day,
            'eliminatedPlayerId': self.eliminated_id,
            'voteCount': dict(self.elimination.tally),
            'tieBroken': self.elimination.tie_broken,
            'gameEnded': self.game_ended,
            'winner': self.winner.value if self.winner else None,
            'aliveTraitors': self.alive_traitors,
            'aliveFaithfuls': self.alive_faithfuls
        }

@dataclass
class AutoPhaseEntry:
    """Result of checking a single game during an auto-phase sweep."""
    game_id: str
    game_code: str
    action: str  # phase_advanced, no_action, error
    outcome: Optional[PhaseOutcome] = None
    time_remaining_ms: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {
            'gameId': self.game_id,
            'gameCode': self.game_code,
            'action': self.action
        }
        if self.outcome:
            data.update({
                'fromPhase': self.outcome.from_phase.value,
                'toPhase': self.outcome.next_phase.value,
                'day': self.outcome.next_day,
                'eliminatedPlayerId': self.outcome.eliminated_id,
                'gameEnded': self.outcome.game_ended,
                'winner': self.outcome.winner.value if self.outcome.winner else None
            })
        if self.time_remaining_ms is not None:
            data['timeRemainingMs'] = self.time_remaining_ms
        if self.error:
            data['error'] = self.error
        return data

@dataclass
class AutoPhaseReport:
    """Batch report of one auto-phase sweep."""
    games_checked: int = 0
    results: List[AutoPhaseEntry] = field(default_factory=list)

    @property
    def advanced(self) -> List[AutoPhaseEntry]:
        return [r for r in self.results if r.action == 'phase_advanced']

    @property
    def errors(self) -> List[AutoPhaseEntry]:
        return [r for r in self.results if r.action == 'error']

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'message': 'Auto-phase check completed',
            'gamesChecked': self.games_checked,
            'results': [r.to_dict() for r in self.results]
        }
