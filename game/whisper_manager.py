"""
Whisper Manager - private messages between players.

Each alive player may send one whisper per phase to another alive player.
Receivers only learn who sent a whisper once it has leaked.
"""

import logging
from typing import Any, Dict

from database import getters, setters
from database.models import Whisper
from utils.constants import MAX_WHISPER_LENGTH
from utils.helpers import to_iso
from .errors import GameValidationError, GameNotFoundError
from .models import GameStatus
from .session import game_session

logger = logging.getLogger(__name__)

class WhisperManager:
    """Sends and lists whispers."""

    def send_whisper(self, game_id: str, from_player_id: str, to_player_id: str,
                     content: str) -> Dict[str, Any]:
        """
        Send a whisper for the current phase.

        Raises:
            GameValidationError: Missing fields, message too long, dead or
                unknown players, self whisper, or a second whisper this phase
            GameNotFoundError: If the game does not exist
        """
        content = (content or '').strip()
        if not from_player_id or not to_player_id or not content:
            raise GameValidationError("All fields are required")

        if len(content) > MAX_WHISPER_LENGTH:
            raise GameValidationError(f"Message too long (max {MAX_WHISPER_LENGTH} characters)")

        with game_session("send whisper") as session:
            game = getters.get_game_by_id(session, game_id)
            if not game:
                raise GameNotFoundError("Game not found")

            if game.status != GameStatus.PLAYING.value:
                raise GameValidationError("Game must be in progress")

            players = {p.id: p for p in game.players}
            sender = players.get(from_player_id)
            receiver = players.get(to_player_id)
            if not sender or not receiver:
                raise GameValidationError("Invalid players")

            if not sender.is_alive or not receiver.is_alive:
                raise GameValidationError("Dead players cannot send or receive whispers")

            if from_player_id == to_player_id:
                raise GameValidationError("Cannot send whisper to yourself")

            if getters.get_phase_whisper(session, game_id, from_player_id,
                                         game.current_phase, game.current_day):
                raise GameValidationError("You can only send one whisper per phase")

            whisper = setters.create_whisper(
                session, game_id, from_player_id, to_player_id, content,
                game.current_phase, game.current_day
            )
            logger.info(f"Whisper sent in game {game.code} during {game.current_phase} {game.current_day}")

            return {
                'whisper': self._whisper_dict(whisper, receiver_name=receiver.name),
                'message': 'Whisper sent successfully'
            }

    def get_whispers(self, game_id: str, player_id: str) -> Dict[str, Any]:
        """Whispers a player sent and received, most recent first."""
        if not player_id:
            raise GameValidationError("Player ID is required")

        with game_session("fetch whispers") as session:
            if not getters.get_player_in_game(session, game_id, player_id):
                raise GameNotFoundError("Player not found in game")

            names = {p.id: p.name for p in getters.get_players_in_game(session, game_id)}

            sent = [
                self._whisper_dict(w, receiver_name=names.get(w.to_player_id))
                for w in getters.get_sent_whispers(session, game_id, player_id)
            ]
            received = [
                self._whisper_dict(
                    w, sender_name=names.get(w.from_player_id) if w.is_leaked else None
                )
                for w in getters.get_received_whispers(session, game_id, player_id)
            ]
            return {'sent': sent, 'received': received}

    def _whisper_dict(self, whisper: Whisper, sender_name=None, receiver_name=None) -> Dict[str, Any]:
        data = {
            'id': whisper.id,
            'toPlayerId': whisper.to_player_id,
            'content': whisper.content,
            'phase': whisper.phase,
            'day': whisper.day,
            'isLeaked': whisper.is_leaked,
            'createdAt': to_iso(whisper.created_at)
        }
        if receiver_name is not None:
            data['fromPlayerId'] = whisper.from_player_id
            data['toPlayerName'] = receiver_name
        elif whisper.is_leaked:
            data['fromPlayerId'] = whisper.from_player_id
            data['fromPlayerName'] = sender_name
        return data
