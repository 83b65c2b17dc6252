"""
Socket.IO Event Handlers for Whispers.

Clients join the room named after their game id and receive the
``game_updated``, ``phase_advanced`` and ``game_ended`` pushes emitted by
the game manager.
"""

import logging
from flask import request
from flask_socketio import emit, join_room, leave_room

logger = logging.getLogger(__name__)

def make_notifier(socketio):
    """
    Build the notifier the game manager calls after each change.

    Returns:
        Callable(event, game_id, payload) emitting to the game's room
    """
    def notify(event, game_id, payload):
        socketio.emit(event, dict(payload, gameId=game_id), room=game_id)
    return notify

def register_socket_handlers(socketio, game_manager):
    """
    Register all Socket.IO event handlers.

    Args:
        socketio: SocketIO instance
        game_manager: Game management instance
    """

    @socketio.on('connect')
    def handle_connect():
        """Handle client connection."""
        logger.info(f"Client connected: {request.sid}")
        emit('connected', {'message': 'Connected to server successfully'})

    @socketio.on('disconnect')
    def handle_disconnect():
        """Handle client disconnection."""
        logger.info(f"Client disconnected: {request.sid}")

    @socketio.on('join_game')
    def handle_join_game(data):
        """Subscribe the client to updates of one game."""
        game_id = (data or {}).get('gameId')
        if not game_id:
            emit('error', {'message': 'Missing game ID'})
            return

        try:
            state = game_manager.get_game_state(game_id, (data or {}).get('playerId'))
        except Exception as e:
            logger.warning(f"Client {request.sid} could not join game {game_id}: {e}")
            emit('error', {'message': 'Game not found'})
            return

        join_room(game_id)
        logger.info(f"Client {request.sid} joined game room {game_id}")
        emit('game_updated', dict(state, gameId=game_id))

    @socketio.on('leave_game')
    def handle_leave_game(data):
        """Stop receiving updates of a game."""
        game_id = (data or {}).get('gameId')
        if game_id:
            leave_room(game_id)
            emit('left_game', {'gameId': game_id})
