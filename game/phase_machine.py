"""
Phase and win-condition state machine for Whispers.

Pure game rules: start validation, role assignment, DAY/NIGHT advancement
and win evaluation. Nothing here reads or writes the database; the game
manager feeds it the loaded roster and persists what it returns.
"""

import logging
import random
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import GameValidationError, InvalidGameStateError
from .models import Phase, PhaseOutcome, PlayerState, Role, VoteRecord, Winner
from .vote_resolver import resolve_elimination

logger = logging.getLogger(__name__)

NIGHT_VOTE_ERROR = "Only traitors can vote during night phase"

def traitor_count_for(player_count: int) -> int:
    """One traitor per three players, never fewer than one."""
    return max(1, player_count // 3)

def validate_start(player_count: int, min_players: int, max_players: int) -> Tuple[int, int]:
    """
    Check that a game with ``player_count`` players may start.

    Returns:
        tuple: (traitor_count, faithful_count)

    Raises:
        GameValidationError: If the count is outside the configured bounds
            or would leave the traitors at parity from the first day
    """
    if player_count < min_players:
        raise GameValidationError(f"Need at least {min_players} players to start")

    if player_count > max_players:
        raise GameValidationError(f"Maximum {max_players} players allowed")

    traitor_count = traitor_count_for(player_count)
    faithful_count = player_count - traitor_count

    if traitor_count >= faithful_count:
        raise GameValidationError("Too many traitors for game balance")

    return traitor_count, faithful_count

def assign_roles(player_ids: Sequence[str], rng: Optional[random.Random] = None) -> Dict[str, Role]:
    """
    Shuffle the players and hand out roles.

    The first ``traitor_count_for(n)`` shuffled players become traitors,
    everyone else is faithful.
    """
    rng = rng or random.SystemRandom()
    shuffled = list(player_ids)
    rng.shuffle(shuffled)

    traitor_count = traitor_count_for(len(shuffled))
    return {
        player_id: (Role.TRAITOR if index < traitor_count else Role.FAITHFUL)
        for index, player_id in enumerate(shuffled)
    }

def next_phase(phase: Phase, day: int) -> Tuple[Phase, int]:
    """DAY,d -> NIGHT,d and NIGHT,d -> DAY,d+1."""
    if phase == Phase.DAY:
        return Phase.NIGHT, day
    return Phase.DAY, day + 1

def count_alive(roster: Iterable[PlayerState]) -> Tuple[int, int]:
    """Return (alive_traitors, alive_faithfuls)."""
    alive_traitors = 0
    alive_faithfuls = 0
    for player in roster:
        if not player.is_alive:
            continue
        if player.role == Role.TRAITOR:
            alive_traitors += 1
        elif player.role == Role.FAITHFUL:
            alive_faithfuls += 1
    return alive_traitors, alive_faithfuls

def evaluate_win(roster: Iterable[PlayerState]) -> Optional[Winner]:
    """
    Decide the winner from an alive roster.

    No traitors left means the faithfuls win; traitors at or above the
    faithful count win. Otherwise the game continues and None is returned.
    """
    alive_traitors, alive_faithfuls = count_alive(roster)

    if alive_traitors == 0:
        return Winner.FAITHFULS

    if alive_traitors >= alive_faithfuls:
        return Winner.TRAITORS

    return None

def can_vote(voter: PlayerState, target: PlayerState, phase: Phase) -> Tuple[bool, Optional[str]]:
    """
    Check the voting rules for a voter and target in a phase.

    Returns:
        tuple: (allowed, error_message)
    """
    if not voter.is_alive:
        return False, "Dead players cannot vote"

    if not target.is_alive:
        return False, "Cannot vote for dead players"

    if voter.id == target.id:
        return False, "Cannot vote for yourself"

    if phase == Phase.NIGHT and voter.role != Role.TRAITOR:
        return False, NIGHT_VOTE_ERROR

    return True, None

def _check_votes(phase: Phase, day: int, roster_by_id: Dict[str, PlayerState],
                 votes: List[VoteRecord]):
    for vote in votes:
        if vote.phase is not None and (vote.phase != phase or vote.day != day):
            raise InvalidGameStateError(
                f"Vote by {vote.voter_id} belongs to {vote.phase.value} {vote.day}, not {phase.value} {day}"
            )

        voter = roster_by_id.get(vote.voter_id)
        target = roster_by_id.get(vote.target_id)
        if voter is None or target is None:
            raise InvalidGameStateError(f"Vote by {vote.voter_id} references an unknown player")

        allowed, error_message = can_vote(voter, target, phase)
        if not allowed:
            raise InvalidGameStateError(f"Invalid stored vote by {vote.voter_id}: {error_message}")

def advance_state(phase: Phase, day: int, roster: Sequence[PlayerState],
                  votes: Iterable[VoteRecord],
                  rng: Optional[random.Random] = None) -> PhaseOutcome:
    """
    Compute the result of ending the current phase.

    Resolves the votes, applies the elimination to a copy of the roster and
    evaluates the win condition on that post-elimination roster, so the
    decision never depends on a second read of the database.

    Args:
        phase: Phase being closed
        day: Day being closed
        roster: Every player of the game as currently stored
        votes: Live votes for (phase, day)
        rng: Random source for tie-breaks

    Returns:
        PhaseOutcome describing the transition

    Raises:
        InvalidGameStateError: If a vote breaks the voting rules
    """
    votes = list(votes)
    roster_by_id = {player.id: player for player in roster}
    _check_votes(phase, day, roster_by_id, votes)

    elimination = resolve_elimination(votes, rng=rng)

    post_roster = [
        PlayerState(id=p.id, role=p.role, is_alive=p.is_alive and p.id != elimination.eliminated_id)
        for p in roster
    ]
    winner = evaluate_win(post_roster)
    alive_traitors, alive_faithfuls = count_alive(post_roster)

    if winner:
        # Phase and day freeze at their last values once the game ends
        to_phase, to_day = phase, day
        logger.info(f"Game over after {phase.value} {day}: {winner.value} win")
    else:
        to_phase, to_day = next_phase(phase, day)

    return PhaseOutcome(
        from_phase=phase,
        from_day=day,
        next_phase=to_phase,
        next_day=to_day,
        elimination=elimination,
        winner=winner,
        alive_traitors=alive_traitors,
        alive_faithfuls=alive_faithfuls
    )
