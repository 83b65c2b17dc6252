"""
Room Manager - the Room of Secrets.

A shared room of symbolic objects. Alive players destroy, clean, visit
or leave personal items on objects; every interaction adds an anonymous
line written by the AI narrator to the room log.
"""

import logging
import random
from typing import Any, Dict, Optional, Tuple

from ai import Narrator, RoomInteractionContext
from database import getters, setters
from database.models import Game, Player, RoomObject
from utils.constants import ROOM_OBJECTS, ROOM_ACTION_STATES, PERSONAL_ITEMS_PER_PLAYER
from utils.helpers import get_random_personal_items, to_iso
from .errors import GameValidationError, GamePermissionError, GameNotFoundError
from .models import GameStatus
from .session import game_session

logger = logging.getLogger(__name__)

class RoomManager:
    """Creates the room, serves per-player views and applies interactions."""

    def __init__(self, narrator: Optional[Narrator] = None, rng: Optional[random.Random] = None):
        self.narrator = narrator or Narrator()
        self.rng = rng

    def initialize_room(self, game_id: str, host_id: str) -> Dict[str, Any]:
        """Host-requested room setup; a no-op when the room already exists."""
        if not host_id:
            raise GameValidationError("Host ID is required")
        return self._initialize(game_id, host_id)

    def setup_room(self, game_id: str) -> Dict[str, Any]:
        """Room setup run by the server when a game starts."""
        return self._initialize(game_id)

    def _initialize(self, game_id: str, host_id: Optional[str] = None) -> Dict[str, Any]:
        with game_session("initialize room") as session:
            game = getters.get_game_by_id(session, game_id)
            if not game:
                raise GameNotFoundError("Game not found")

            if host_id is not None and game.host_id != host_id:
                raise GamePermissionError("Only the host can initialize the room")

            if game.room_objects:
                return {
                    'message': 'Room already initialized',
                    'objectCount': len(game.room_objects),
                    'personalItemCount': len(game.personal_items)
                }

            items_by_player = {
                player.id: get_random_personal_items(PERSONAL_ITEMS_PER_PLAYER, rng=self.rng)
                for player in game.players
            }
            object_count, item_count = setters.create_room(session, game_id, ROOM_OBJECTS, items_by_player)

            return {
                'message': 'Room initialized successfully',
                'objectCount': object_count,
                'personalItemCount': item_count
            }

    def get_room(self, game_id: str, player_id: str) -> Dict[str, Any]:
        """The room as seen by one player, with the items they can still place."""
        if not player_id:
            raise GameValidationError("Player ID is required")

        with game_session("fetch room data") as session:
            game = getters.get_game_by_id(session, game_id)
            if not game:
                raise GameNotFoundError("Game not found")

            if not getters.get_player_in_game(session, game_id, player_id):
                raise GameNotFoundError("Player not found in game")

            names = {p.id: p.name for p in game.players}
            placed = getters.get_placed_items(session, game_id, player_id)
            placed_names = {item.item_name for item in placed}
            objects = {obj.id: obj.name for obj in game.room_objects}

            return {
                'game': {
                    'id': game.id,
                    'currentPhase': game.current_phase,
                    'currentDay': game.current_day,
                    'status': game.status
                },
                'roomObjects': [
                    {
                        'id': obj.id,
                        'name': obj.name,
                        'description': obj.description,
                        'state': obj.state,
                        'lastAction': obj.last_action,
                        'placedItems': [
                            {'itemName': item.item_name, 'playerName': names.get(item.player_id)}
                            for item in obj.placed_items
                        ],
                        'canInteract': self._can_interact(obj, player_id)
                    }
                    for obj in getters.get_room_objects(session, game_id)
                ],
                'personalItems': [
                    {'id': item.id, 'name': item.name}
                    for item in getters.get_personal_items(session, game_id, player_id)
                    if item.name not in placed_names
                ],
                'placedItems': [
                    {
                        'itemName': item.item_name,
                        'objectId': item.object_id,
                        'objectName': objects.get(item.object_id),
                        'phase': item.phase,
                        'day': item.day
                    }
                    for item in placed
                ]
            }

    def interact(self, game_id: str, player_id: str, object_id: int, action: str,
                 item_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Apply one interaction with a room object and log it.

        The request is validated, the log line is generated outside the
        transaction, then the request is validated again and written.

        Raises:
            GameValidationError: Bad action, dead player, repeated interaction,
                or an item the player does not own or already placed
            GameNotFoundError: Unknown game or room object
        """
        if not player_id or not object_id or not action:
            raise GameValidationError("Missing required fields")

        action = action.upper()
        if action not in ROOM_ACTION_STATES:
            raise GameValidationError("Invalid action")

        if action == 'PLACE' and not item_name:
            raise GameValidationError("Item name is required to place an item")

        with game_session("process interaction") as session:
            _, player, room_object = self._check_interaction(
                session, game_id, player_id, object_id, action, item_name
            )
            context = RoomInteractionContext(
                action=action,
                object_name=room_object.name,
                player_name=player.name,
                item_name=item_name if action == 'PLACE' else None
            )

        log_content = self.narrator.generate_room_interaction_log(context)
        new_state = ROOM_ACTION_STATES[action]

        with game_session("process interaction") as session:
            game, _, room_object = self._check_interaction(
                session, game_id, player_id, object_id, action, item_name
            )

            if action == 'PLACE':
                setters.place_item(session, game_id, player_id, item_name, room_object.id,
                                   game.current_phase, game.current_day)

            setters.update_room_object(room_object, new_state, action, player_id)
            setters.create_room_log(session, game_id, log_content, game.current_phase, game.current_day)

        logger.info(f"Room interaction in game {game_id}: {action} on object {object_id}")
        return {
            'success': True,
            'message': 'Interaction completed successfully',
            'newState': new_state,
            'logContent': log_content
        }

    def get_room_log(self, game_id: str) -> Dict[str, Any]:
        with game_session("fetch room logs") as session:
            if not getters.get_game_by_id(session, game_id):
                raise GameNotFoundError("Game not found")

            return {
                'logs': [
                    {
                        'id': log.id,
                        'content': log.content,
                        'phase': log.phase,
                        'day': log.day,
                        'createdAt': to_iso(log.created_at)
                    }
                    for log in getters.get_room_logs(session, game_id)
                ]
            }

    def _can_interact(self, room_object: RoomObject, player_id: str) -> bool:
        return room_object.last_updated_by != player_id or room_object.state == 'UNTOUCHED'

    def _check_interaction(self, session, game_id: str, player_id: str, object_id: int,
                           action: str, item_name: Optional[str]) -> Tuple[Game, Player, RoomObject]:
        game = getters.get_game_by_id(session, game_id)
        if not game:
            raise GameNotFoundError("Game not found")

        if game.status != GameStatus.PLAYING.value:
            raise GameValidationError("Game must be in progress")

        player = next((p for p in game.players if p.id == player_id), None)
        if not player or not player.is_alive:
            raise GameValidationError("Invalid or dead player")

        room_object = getters.get_room_object(session, game_id, object_id)
        if not room_object:
            raise GameNotFoundError("Room object not found")

        if not self._can_interact(room_object, player_id):
            raise GameValidationError("You were the last to act on this object")

        if action == 'PLACE':
            owned = {item.name for item in getters.get_personal_items(session, game_id, player_id)}
            if item_name not in owned:
                raise GameValidationError("You do not have this personal item")

            placed = {item.item_name for item in getters.get_placed_items(session, game_id, player_id)}
            if item_name in placed:
                raise GameValidationError("This item has already been placed")

        return game, player, room_object
