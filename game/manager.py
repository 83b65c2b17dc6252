"""
Game Manager - Coordinator for game operations.

Single entry point used by the HTTP handlers, Socket.IO handlers and the
auto-phase scheduler. Validates requests, runs the pure resolution core
inside one database transaction and, once the game lock is released,
invalidates the snapshot cache, decorates the new phase with narrative
text and notifies connected clients.
"""

import logging
import random
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from config import settings
from cache import get_game_snapshot, get_game_version, set_game_snapshot, invalidate_game
from database import getters, setters
from database.models import Game, Player
from utils.constants import GAME_CODE_ATTEMPTS
from utils.helpers import (
    generate_game_code, generate_id, utcnow, as_utc, to_iso,
    validate_player_name, is_name_taken
)
from .auto_phase import time_remaining_ms
from .errors import (
    GameValidationError, GamePermissionError, GameNotFoundError, GamePersistenceError,
    PhaseNotDueError
)
from .game_lock import GameLockRegistry
from .models import GameStatus, Phase, PhaseOutcome, PlayerState, Role, VoteRecord
from .phase_machine import (
    NIGHT_VOTE_ERROR, advance_state, assign_roles, can_vote, validate_start
)
from .session import game_session

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str, Dict[str, Any]], None]

def player_state(player: Player) -> PlayerState:
    """Slice of a stored player the resolution core works on."""
    return PlayerState(
        id=player.id,
        role=Role(player.role) if player.role else None,
        is_alive=player.is_alive
    )

class GameManager:
    """Coordinates all game operations."""

    def __init__(self, lock_registry: Optional[GameLockRegistry] = None,
                 narrative_manager=None, room_manager=None,
                 notifier: Optional[Notifier] = None,
                 rng: Optional[random.Random] = None,
                 min_players: Optional[int] = None, max_players: Optional[int] = None):
        """
        Initialize the game manager.

        Args:
            lock_registry: Per-game lock registry (a new one if None)
            narrative_manager: Generates narration and missions after a phase change
            room_manager: Sets up the Room of Secrets when a game starts
            notifier: Callable(event, game_id, payload) used to push updates
            rng: Random source for role assignment and tie-breaks
            min_players: Smallest game that may start (settings if None)
            max_players: Largest game that may start (settings if None)
        """
        self.locks = lock_registry or GameLockRegistry()
        self.narrative_manager = narrative_manager
        self.room_manager = room_manager
        self.notifier = notifier
        self.rng = rng
        self.min_players = min_players if min_players is not None else settings.MIN_PLAYERS
        self.max_players = max_players if max_players is not None else settings.MAX_PLAYERS

    # ==========================================================================
    # LOBBY
    # ==========================================================================

    def create_game(self, host_name: str) -> Dict[str, Any]:
        """
        Create a game with its host as the first player.

        Returns:
            dict with gameId, gameCode, hostId and playerId
        """
        is_valid, error = validate_player_name(host_name)
        if not is_valid:
            raise GameValidationError(error)

        game_id = generate_id()
        host_id = generate_id()

        with game_session("create game") as session:
            code = self._unique_game_code(session)
            setters.create_game(
                session, game_id, code, host_id, host_name.strip(),
                settings.DEFAULT_PHASE_DURATION_HOURS
            )

        return {'gameId': game_id, 'gameCode': code, 'hostId': host_id, 'playerId': host_id}

    def join_game(self, player_name: str, game_code: str) -> Dict[str, Any]:
        """
        Add a player to a waiting game.

        Returns:
            dict with gameId, playerId and playerName
        """
        is_valid, error = validate_player_name(player_name)
        if not is_valid:
            raise GameValidationError(error)
        if not game_code or not game_code.strip():
            raise GameValidationError("Game code is required")

        player_name = player_name.strip()
        player_id = generate_id()

        with game_session("join game") as session:
            game = getters.get_game_by_code(session, game_code)
            if not game:
                raise GameNotFoundError("Game not found")

            if game.status != GameStatus.WAITING.value:
                raise GameValidationError("Game has already started")

            if is_name_taken(player_name, [p.name for p in game.players]):
                raise GameValidationError("Player name already taken")

            if len(game.players) >= self.max_players:
                raise GameValidationError(f"Game is full (max {self.max_players} players)")

            setters.create_player(session, player_id, game.id, player_name)
            game_id = game.id

        self._after_write(game_id, 'game_updated', {'playerJoined': player_name})
        return {'gameId': game_id, 'playerId': player_id, 'playerName': player_name}

    def start_game(self, game_id: str, host_id: str) -> Dict[str, Any]:
        """
        Move a waiting game to DAY 1 and hand out roles.

        Raises:
            GameLockContentionError: If the game is being updated
        """
        if not host_id:
            raise GameValidationError("Host ID is required")

        with self.locks.hold(game_id):
            with game_session("start game") as session:
                game = self._load_game(session, game_id)

                if game.host_id != host_id:
                    raise GamePermissionError("Only the host can start the game")

                if game.status != GameStatus.WAITING.value:
                    raise GameValidationError("Game has already started")

                traitor_count, faithful_count = validate_start(
                    len(game.players), self.min_players, self.max_players
                )
                roles = assign_roles([p.id for p in game.players], rng=self.rng)
                setters.start_game(
                    session, game, {pid: role.value for pid, role in roles.items()}, utcnow()
                )

        if self.room_manager:
            try:
                self.room_manager.setup_room(game_id)
            except Exception as e:
                logger.error(f"Room setup failed for game {game_id}: {e}")

        self._after_write(game_id, 'game_updated', {'status': GameStatus.PLAYING.value})
        return {
            'success': True,
            'message': 'Game started successfully',
            'traitorCount': traitor_count,
            'faithfulCount': faithful_count
        }

    # ==========================================================================
    # VOTING AND PHASES
    # ==========================================================================

    def cast_vote(self, game_id: str, voter_id: str, target_id: str) -> Dict[str, Any]:
        """
        Record a vote for the current phase, replacing the voter's earlier one.

        Raises:
            GameValidationError: Wrong status, unknown or dead players, self vote
            GamePermissionError: A faithful voting at night
        """
        if not voter_id or not target_id:
            raise GameValidationError("Voter ID and target ID are required")

        with game_session("submit vote") as session:
            game = self._load_game(session, game_id)

            if game.status != GameStatus.PLAYING.value:
                raise GameValidationError("Game is not in progress")

            players = {p.id: p for p in game.players}
            voter = players.get(voter_id)
            target = players.get(target_id)
            if not voter or not target:
                raise GameValidationError("Invalid voter or target")

            phase = Phase(game.current_phase)
            allowed, error = can_vote(player_state(voter), player_state(target), phase)
            if not allowed:
                if error == NIGHT_VOTE_ERROR:
                    raise GamePermissionError(error)
                raise GameValidationError(error)

            setters.upsert_vote(session, game.id, voter_id, target_id, phase.value, game.current_day)
            day = game.current_day

        self._after_write(game_id, 'game_updated', {'voterId': voter_id})
        return {'success': True, 'phase': phase.value, 'day': day}

    def advance_phase(self, game_id: str, host_id: Optional[str] = None,
                      trigger: str = 'manual', now: Optional[datetime] = None) -> PhaseOutcome:
        """
        End the current phase: eliminate, check for a winner, move on.

        Holds the game lock for the whole read-resolve-write sequence and
        commits phase, eliminations and winner in one transaction. Narration
        and missions for the new phase are generated after the lock is
        released and never fail the advance.

        Args:
            game_id: Game to advance
            host_id: Acting host, required unless ``trigger`` is 'auto'
            trigger: 'manual' for host requests, 'auto' for the scheduler
            now: Time used for timestamps (current UTC time if None)

        Returns:
            PhaseOutcome of the transition

        Raises:
            GameLockContentionError: If another advance is in flight
            PhaseNotDueError: If an automatic advance finds the timer running or disabled
            GamePersistenceError: If the transaction failed
        """
        if trigger != 'auto' and not host_id:
            raise GameValidationError("Host ID is required")

        now = as_utc(now) if now else utcnow()

        with self.locks.hold(game_id):
            with game_session("advance phase") as session:
                game = self._load_game(session, game_id)

                if trigger != 'auto' and game.host_id != host_id:
                    raise GamePermissionError("Only the host can advance phases")

                if game.status != GameStatus.PLAYING.value:
                    raise GameValidationError("Game is not in progress")

                if trigger == 'auto':
                    self._check_phase_due(game, now)

                phase = Phase(game.current_phase)
                day = game.current_day
                votes = [
                    VoteRecord(voter_id=v.voter_id, target_id=v.target_id,
                               phase=Phase(v.phase), day=v.day)
                    for v in getters.get_phase_votes(session, game.id, phase.value, day)
                ]
                outcome = advance_state(
                    phase, day, [player_state(p) for p in game.players], votes, rng=self.rng
                )

                eliminated_name = None
                if outcome.eliminated_id:
                    setters.eliminate_player(game, outcome.eliminated_id)
                    eliminated_name = next(
                        p.name for p in game.players if p.id == outcome.eliminated_id
                    )

                if outcome.game_ended:
                    setters.end_game(game, outcome.winner.value, now)
                else:
                    setters.clear_phase_votes(
                        session, game.id, outcome.next_phase.value, outcome.next_day
                    )
                    setters.set_game_phase(game, outcome.next_phase.value, outcome.next_day, now)

        logger.info(f"Game {game_id} advanced ({trigger}) from {phase.value} {day}: "
                    f"eliminated={outcome.eliminated_id} winner={outcome.winner}")

        invalidate_game(game_id)
        if not outcome.game_ended:
            recent_event = f"{eliminated_name} was eliminated" if eliminated_name else None
            self._decorate_phase(game_id, recent_event)

        payload = outcome.to_dict()
        payload['trigger'] = trigger
        self._notify('phase_advanced', game_id, payload)
        if outcome.game_ended:
            self._notify('game_ended', game_id, {'winner': outcome.winner.value})
        return outcome

    # ==========================================================================
    # AUTO-PHASE
    # ==========================================================================

    def configure_auto_phase(self, game_id: str, host_id: str, enabled: bool,
                             duration_hours: Optional[float] = None) -> Dict[str, Any]:
        """Enable or disable automatic advancement and restart the phase timer."""
        if not host_id:
            raise GameValidationError("Host ID is required")

        if not isinstance(enabled, bool):
            raise GameValidationError("Enabled must be true or false")

        if duration_hours is None:
            duration_hours = settings.DEFAULT_PHASE_DURATION_HOURS
        try:
            duration_hours = float(duration_hours)
        except (TypeError, ValueError):
            raise GameValidationError("Phase duration must be a number of hours")
        if duration_hours <= 0:
            raise GameValidationError("Phase duration must be positive")

        with self.locks.hold(game_id):
            with game_session("configure auto-phase") as session:
                game = self._load_game(session, game_id)

                if game.host_id != host_id:
                    raise GamePermissionError("Only the host can configure auto-phase")

                if game.status != GameStatus.PLAYING.value:
                    raise GameValidationError("Game must be in progress")

                setters.set_auto_phase(game, enabled, duration_hours, utcnow())
                result = {
                    'message': 'Auto-phase enabled' if game.auto_phase_enabled else 'Auto-phase disabled',
                    'autoPhaseEnabled': game.auto_phase_enabled,
                    'phaseDurationHours': game.phase_duration_hours,
                    'phaseStartedAt': to_iso(game.phase_started_at)
                }

        self._after_write(game_id, 'game_updated', {'autoPhaseEnabled': result['autoPhaseEnabled']})
        return result

    def get_auto_phase_status(self, game_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Auto-phase settings of a game with the time left in the current phase."""
        with game_session("fetch auto-phase status") as session:
            game = self._load_game(session, game_id)

            remaining = None
            if game.auto_phase_enabled and game.phase_started_at:
                remaining = time_remaining_ms(game.phase_started_at, game.phase_duration_hours, now)

            return {
                'autoPhaseEnabled': game.auto_phase_enabled,
                'phaseDurationHours': game.phase_duration_hours,
                'phaseStartedAt': to_iso(game.phase_started_at),
                'currentPhase': game.current_phase,
                'currentDay': game.current_day,
                'timeRemaining': remaining
            }

    def get_auto_phase_candidates(self) -> List[Dict[str, Any]]:
        """Games the auto-phase sweep has to look at."""
        with game_session("list auto-phase games") as session:
            return [
                {
                    'id': game.id,
                    'code': game.code,
                    'phase_started_at': as_utc(game.phase_started_at),
                    'phase_duration_hours': game.phase_duration_hours
                }
                for game in getters.get_auto_phase_games(session)
            ]

    # ==========================================================================
    # READ MODELS
    # ==========================================================================

    def get_game_state(self, game_id: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Game snapshot for polling clients.

        Roles are only shown to players entitled to them: the viewer's own
        role, fellow traitors to a traitor, and everyone once the game ended.
        """
        snapshot = get_game_snapshot(game_id)
        if snapshot is None:
            version = get_game_version(game_id)
            with game_session("fetch game") as session:
                snapshot = self._build_snapshot(session, self._load_game(session, game_id))
            set_game_snapshot(game_id, snapshot, version)

        return self._view_for(snapshot, viewer_id)

    def get_reveal(self, game_id: str) -> Dict[str, Any]:
        """Full history of a finished game: roles, votes, narrative and whispers."""
        with game_session("fetch reveal data") as session:
            game = self._load_game(session, game_id)

            if game.status != GameStatus.ENDED.value:
                raise GameValidationError("Game must be completed to view reveal")

            names = {p.id: p.name for p in game.players}
            phase_order = {Phase.DAY.value: 0, Phase.NIGHT.value: 1}

            def chronological(rows):
                return sorted(rows, key=lambda r: (r.day, phase_order.get(r.phase, 2), r.id))

            return {
                'game': {
                    'id': game.id,
                    'code': game.code,
                    'status': game.status,
                    'winner': game.winner,
                    'endedAt': to_iso(game.ended_at)
                },
                'players': [self._player_dict(p, include_role=True) for p in game.players],
                'votes': [
                    {
                        'voterId': v.voter_id,
                        'voterName': names.get(v.voter_id),
                        'targetId': v.target_id,
                        'targetName': names.get(v.target_id),
                        'phase': v.phase,
                        'day': v.day
                    }
                    for v in chronological(game.votes)
                ],
                'missions': [
                    {
                        'id': m.id,
                        'playerId': m.player_id,
                        'playerName': names.get(m.player_id),
                        'phase': m.phase,
                        'day': m.day,
                        'content': m.content,
                        'completed': m.completed
                    }
                    for m in chronological(game.missions)
                ],
                'narrations': [
                    {'phase': n.phase, 'day': n.day, 'content': n.content}
                    for n in chronological(game.narrations)
                ],
                'whispers': [
                    {
                        'fromPlayerName': names.get(w.from_player_id),
                        'toPlayerName': names.get(w.to_player_id),
                        'content': w.content,
                        'phase': w.phase,
                        'day': w.day,
                        'isLeaked': w.is_leaked
                    }
                    for w in chronological(game.whispers)
                ],
                'chaosEvents': [
                    {'type': e.type, 'content': e.content, 'phase': e.phase, 'day': e.day}
                    for e in chronological(game.chaos_events)
                ]
            }

    # ==========================================================================
    # INTERNALS
    # ==========================================================================

    def _load_game(self, session, game_id: str) -> Game:
        game = getters.get_game_by_id(session, game_id)
        if not game:
            raise GameNotFoundError("Game not found")
        return game

    @staticmethod
    def _check_phase_due(game: Game, now: datetime):
        """Refuse an automatic advance unless the stored timer has run out."""
        if not game.auto_phase_enabled or not game.phase_started_at:
            raise PhaseNotDueError("Auto-phase is not enabled for this game")

        remaining = time_remaining_ms(game.phase_started_at, game.phase_duration_hours, now)
        if remaining > 0:
            raise PhaseNotDueError("Phase timer has not run out", remaining)

    def _unique_game_code(self, session) -> str:
        for _ in range(GAME_CODE_ATTEMPTS):
            code = generate_game_code()
            if not getters.is_game_code_taken(session, code):
                return code
        raise GamePersistenceError("Failed to generate unique game code")

    def _build_snapshot(self, session, game: Game) -> Dict[str, Any]:
        votes = getters.get_phase_votes(session, game.id, game.current_phase, game.current_day) \
            if game.status == GameStatus.PLAYING.value else []

        vote_count: Dict[str, int] = {}
        for vote in votes:
            vote_count[vote.target_id] = vote_count.get(vote.target_id, 0) + 1

        return {
            'id': game.id,
            'code': game.code,
            'hostId': game.host_id,
            'status': game.status,
            'currentPhase': game.current_phase,
            'currentDay': game.current_day,
            'winner': game.winner,
            'autoPhaseEnabled': game.auto_phase_enabled,
            'phaseDurationHours': game.phase_duration_hours,
            'phaseStartedAt': to_iso(game.phase_started_at),
            'players': [self._player_dict(p, include_role=True) for p in game.players],
            'currentVotes': vote_count,
            'hasVoted': [vote.voter_id for vote in votes]
        }

    def _player_dict(self, player: Player, include_role: bool) -> Dict[str, Any]:
        return {
            'id': player.id,
            'name': player.name,
            'isAlive': player.is_alive,
            'isHost': player.is_host,
            'role': player.role if include_role else None
        }

    def _view_for(self, snapshot: Dict[str, Any], viewer_id: Optional[str]) -> Dict[str, Any]:
        if snapshot['status'] == GameStatus.ENDED.value:
            return snapshot

        viewer_role = next(
            (p['role'] for p in snapshot['players'] if p['id'] == viewer_id), None
        )

        view = dict(snapshot)
        view['players'] = []
        for player in snapshot['players']:
            visible = player['id'] == viewer_id or (
                viewer_role == Role.TRAITOR.value and player['role'] == Role.TRAITOR.value
            )
            view['players'].append(dict(player, role=player['role'] if visible else None))
        return view

    def _decorate_phase(self, game_id: str, recent_event: Optional[str]):
        if not self.narrative_manager:
            return
        try:
            self.narrative_manager.narrate_phase(game_id, recent_event=recent_event)
            self.narrative_manager.hand_out_missions(game_id)
        except Exception as e:
            logger.error(f"Narrative generation failed for game {game_id}: {e}")

    def _after_write(self, game_id: str, event: str, payload: Dict[str, Any]):
        invalidate_game(game_id)
        self._notify(event, game_id, payload)

    def _notify(self, event: str, game_id: str, payload: Dict[str, Any]):
        if not self.notifier:
            return
        try:
            self.notifier(event, game_id, payload)
        except Exception as e:
            logger.error(f"Failed to emit {event} for game {game_id}: {e}")
