"""
Narrative Manager - narration, missions and chaos events.

Stores at most one narration and one chaos event per phase and one mission
per alive player per phase. Text comes from the AI narrator outside of any
database transaction, since a slow model must not hold a connection open.
"""

import logging
from typing import Any, Dict, Optional

from ai import Narrator, NarrativeContext, PlayerContext
from database import getters, setters
from database.models import Game, PlayerMission, ChaosEvent
from utils.helpers import to_iso
from .errors import GameValidationError, GamePermissionError, GameNotFoundError
from .models import GameStatus
from .session import game_session

logger = logging.getLogger(__name__)

def mission_to_dict(mission: PlayerMission) -> Dict[str, Any]:
    return {
        'id': mission.id,
        'playerId': mission.player_id,
        'phase': mission.phase,
        'day': mission.day,
        'content': mission.content,
        'completed': mission.completed,
        'createdAt': to_iso(mission.created_at)
    }

def chaos_event_to_dict(event: ChaosEvent) -> Dict[str, Any]:
    return {
        'id': event.id,
        'type': event.type,
        'content': event.content,
        'phase': event.phase,
        'day': event.day,
        'createdAt': to_iso(event.created_at)
    }

class NarrativeManager:
    """Generates and stores the narrative decoration of a game."""

    def __init__(self, narrator: Optional[Narrator] = None):
        self.narrator = narrator or Narrator()

    # Narration

    def generate_narration(self, game_id: str, host_id: str) -> Dict[str, Any]:
        """Host-requested narration for the current phase."""
        if not game_id or not host_id:
            raise GameValidationError("Game ID and Host ID are required")
        return self._narrate(game_id, host_id=host_id)

    def narrate_phase(self, game_id: str, recent_event: Optional[str] = None) -> Dict[str, Any]:
        """Narration generated by the server right after a phase change."""
        return self._narrate(game_id, recent_event=recent_event)

    def _narrate(self, game_id: str, host_id: Optional[str] = None,
                 recent_event: Optional[str] = None) -> Dict[str, Any]:
        with game_session("generate narration") as session:
            game = self._load_playing_game(session, game_id, host_id,
                                           "Only the host can generate narrations")
            existing = getters.get_phase_narration(session, game_id, game.current_phase, game.current_day)
            if existing:
                return {'narration': existing.content, 'message': 'Narration already exists for this phase'}
            context = self._context(game, recent_event)

        content = self.narrator.generate_narration(context)

        with game_session("save narration") as session:
            existing = getters.get_phase_narration(session, game_id, context.current_phase, context.current_day)
            if existing:
                return {'narration': existing.content, 'message': 'Narration already exists for this phase'}
            setters.create_narration(session, game_id, context.current_phase, context.current_day, content)

        logger.info(f"Stored narration for game {game_id} {context.current_phase} {context.current_day}")
        return {'narration': content, 'message': 'Narration generated successfully'}

    # Missions

    def generate_missions(self, game_id: str, host_id: str) -> Dict[str, Any]:
        """Host-requested missions for every alive player."""
        if not game_id or not host_id:
            raise GameValidationError("Game ID and Host ID are required")
        return self._hand_out(game_id, host_id=host_id)

    def hand_out_missions(self, game_id: str) -> Dict[str, Any]:
        """Missions generated by the server right after a phase change."""
        return self._hand_out(game_id)

    def _hand_out(self, game_id: str, host_id: Optional[str] = None) -> Dict[str, Any]:
        with game_session("generate missions") as session:
            game = self._load_playing_game(session, game_id, host_id,
                                           "Only the host can generate missions")
            phase, day = game.current_phase, game.current_day

            existing = getters.get_phase_missions(session, game_id, phase, day)
            if existing:
                return {'message': 'Missions already exist for this phase', 'missionsGenerated': len(existing)}

            context = self._context(game)
            players = [
                (p.id, PlayerContext(name=p.name, role=p.role, is_alive=p.is_alive))
                for p in game.players if p.is_alive and p.role
            ]

        contents = {
            player_id: self.narrator.generate_mission(context, player)
            for player_id, player in players
        }

        with game_session("save missions") as session:
            existing = getters.get_phase_missions(session, game_id, phase, day)
            if existing:
                return {'message': 'Missions already exist for this phase', 'missionsGenerated': len(existing)}
            count = setters.create_missions(session, game_id, phase, day, contents)

        logger.info(f"Handed out {count} missions for game {game_id} {phase} {day}")
        return {'message': 'Missions generated successfully', 'missionsGenerated': count,
                'phase': phase, 'day': day}

    def get_player_missions(self, game_id: str, player_id: str) -> Dict[str, Any]:
        if not player_id:
            raise GameValidationError("Player ID is required")

        with game_session("fetch missions") as session:
            if not getters.get_player_in_game(session, game_id, player_id):
                raise GameNotFoundError("Player not found in game")
            return {'missions': [mission_to_dict(m) for m in getters.get_player_missions(session, game_id, player_id)]}

    def toggle_mission(self, game_id: str, mission_id: int, player_id: str) -> Dict[str, Any]:
        """Flip the completion flag of one of the player's own missions."""
        if not player_id:
            raise GameValidationError("Player ID is required")

        with game_session("update mission") as session:
            mission = getters.get_mission(session, mission_id)
            if not mission:
                raise GameNotFoundError("Mission not found")

            if mission.game_id != game_id or mission.player_id != player_id:
                raise GamePermissionError("Mission belongs to another player")

            mission.completed = not mission.completed
            state = 'completed' if mission.completed else 'incomplete'
            return {'mission': mission_to_dict(mission), 'message': f'Mission marked as {state}'}

    # Chaos events

    def generate_chaos_event(self, game_id: str, host_id: str) -> Dict[str, Any]:
        """Host-triggered twist for the current phase."""
        if not game_id or not host_id:
            raise GameValidationError("Game ID and Host ID are required")

        with game_session("generate chaos event") as session:
            game = self._load_playing_game(session, game_id, host_id,
                                           "Only the host can trigger chaos events")
            existing = getters.get_phase_chaos_event(session, game_id, game.current_phase, game.current_day)
            if existing:
                return {'event': chaos_event_to_dict(existing),
                        'message': 'Chaos event already exists for this phase'}
            context = self._context(game)

        content = self.narrator.generate_chaos_event(context)

        with game_session("save chaos event") as session:
            existing = getters.get_phase_chaos_event(session, game_id, context.current_phase, context.current_day)
            if existing:
                return {'event': chaos_event_to_dict(existing),
                        'message': 'Chaos event already exists for this phase'}
            event = setters.create_chaos_event(session, game_id, context.current_phase,
                                               context.current_day, content)
            return {'event': chaos_event_to_dict(event), 'message': 'Chaos event generated successfully'}

    # Helpers

    def _load_playing_game(self, session, game_id: str, host_id: Optional[str],
                           permission_message: str) -> Game:
        game = getters.get_game_by_id(session, game_id)
        if not game:
            raise GameNotFoundError("Game not found")

        if host_id is not None and game.host_id != host_id:
            raise GamePermissionError(permission_message)

        if game.status != GameStatus.PLAYING.value:
            raise GameValidationError("Game must be in progress")

        return game

    def _context(self, game: Game, recent_event: Optional[str] = None) -> NarrativeContext:
        return NarrativeContext(
            game_id=game.id,
            current_phase=game.current_phase,
            current_day=game.current_day,
            player_count=len(game.players),
            alive_player_count=sum(1 for p in game.players if p.is_alive),
            recent_event=recent_event
        )
