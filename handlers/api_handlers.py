"""
API Route Handlers for Whispers.

Pure routing layer that delegates to the game managers.
Contains no business logic - only request/response handling.
"""

import logging
from flask import jsonify, request
from game.errors import GameError

logger = logging.getLogger(__name__)

def _json_body():
    """Request JSON as a dict, empty when the body is missing or malformed."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

def register_api_handlers(app, game_manager, narrative_manager, whisper_manager,
                          room_manager, scheduler):
    """
    Register all API route handlers.

    Args:
        app: Flask application instance
        game_manager: Game management instance
        narrative_manager: Narration, missions and chaos events
        whisper_manager: Private messages between players
        room_manager: Room of Secrets
        scheduler: Auto-phase scheduler
    """

    @app.route('/api/health')
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'message': 'Whispers game server is running',
            'autoPhaseRunning': scheduler.running
        })

    # Games

    @app.route('/api/games', methods=['POST'])
    def create_game():
        data = _json_body()
        return jsonify(game_manager.create_game(data.get('hostName')))

    @app.route('/api/join', methods=['POST'])
    def join_game():
        data = _json_body()
        return jsonify(game_manager.join_game(data.get('playerName'), data.get('gameCode')))

    @app.route('/api/games/<game_id>')
    def get_game(game_id):
        """Game snapshot; roles are filtered for the optional ?playerId= viewer."""
        return jsonify(game_manager.get_game_state(game_id, request.args.get('playerId')))

    @app.route('/api/games/<game_id>/start', methods=['POST'])
    def start_game(game_id):
        data = _json_body()
        return jsonify(game_manager.start_game(game_id, data.get('hostId')))

    @app.route('/api/games/<game_id>/vote', methods=['POST'])
    def cast_vote(game_id):
        data = _json_body()
        return jsonify(game_manager.cast_vote(game_id, data.get('voterId'), data.get('targetId')))

    @app.route('/api/games/<game_id>/next-phase', methods=['POST'])
    def next_phase(game_id):
        data = _json_body()
        outcome = game_manager.advance_phase(game_id, host_id=data.get('hostId'))
        return jsonify(dict(outcome.to_dict(), success=True))

    @app.route('/api/games/<game_id>/reveal')
    def reveal(game_id):
        return jsonify(game_manager.get_reveal(game_id))

    # Auto-phase

    @app.route('/api/games/<game_id>/auto-phase', methods=['GET'])
    def get_auto_phase(game_id):
        return jsonify(game_manager.get_auto_phase_status(game_id))

    @app.route('/api/games/<game_id>/auto-phase', methods=['POST'])
    def configure_auto_phase(game_id):
        data = _json_body()
        return jsonify(game_manager.configure_auto_phase(
            game_id,
            data.get('hostId'),
            data.get('enabled'),
            data.get('durationHours')
        ))

    @app.route('/api/auto-phase-check', methods=['POST'])
    def auto_phase_check():
        """Run one auto-phase sweep, for cron jobs."""
        return jsonify(scheduler.check_and_advance_all().to_dict())

    # Narrative

    @app.route('/api/narration/generate', methods=['POST'])
    def generate_narration():
        data = _json_body()
        return jsonify(narrative_manager.generate_narration(data.get('gameId'), data.get('hostId')))

    @app.route('/api/missions/generate', methods=['POST'])
    def generate_missions():
        data = _json_body()
        return jsonify(narrative_manager.generate_missions(data.get('gameId'), data.get('hostId')))

    @app.route('/api/games/<game_id>/missions')
    def get_missions(game_id):
        return jsonify(narrative_manager.get_player_missions(game_id, request.args.get('playerId')))

    @app.route('/api/games/<game_id>/missions/<int:mission_id>/toggle', methods=['POST'])
    def toggle_mission(game_id, mission_id):
        data = _json_body()
        return jsonify(narrative_manager.toggle_mission(game_id, mission_id, data.get('playerId')))

    @app.route('/api/events/chaos', methods=['POST'])
    def chaos_event():
        data = _json_body()
        return jsonify(narrative_manager.generate_chaos_event(data.get('gameId'), data.get('hostId')))

    # Whispers

    @app.route('/api/games/<game_id>/whispers', methods=['GET'])
    def get_whispers(game_id):
        return jsonify(whisper_manager.get_whispers(game_id, request.args.get('playerId')))

    @app.route('/api/games/<game_id>/whispers', methods=['POST'])
    def send_whisper(game_id):
        data = _json_body()
        return jsonify(whisper_manager.send_whisper(
            game_id, data.get('fromPlayerId'), data.get('toPlayerId'), data.get('content')
        ))

    # Room of Secrets

    @app.route('/api/games/<game_id>/room/initialize', methods=['POST'])
    def initialize_room(game_id):
        data = _json_body()
        return jsonify(room_manager.initialize_room(game_id, data.get('hostId')))

    @app.route('/api/games/<game_id>/room')
    def get_room(game_id):
        return jsonify(room_manager.get_room(game_id, request.args.get('playerId')))

    @app.route('/api/games/<game_id>/room/interact', methods=['POST'])
    def interact(game_id):
        data = _json_body()
        object_id = data.get('objectId')
        try:
            object_id = int(object_id) if object_id is not None else None
        except (TypeError, ValueError):
            return jsonify({'error': 'Invalid object ID'}), 400
        return jsonify(room_manager.interact(
            game_id, data.get('playerId'), object_id, data.get('action'), data.get('itemName')
        ))

    @app.route('/api/games/<game_id>/room/log')
    def room_log(game_id):
        return jsonify(room_manager.get_room_log(game_id))

    # Error handlers
    @app.errorhandler(GameError)
    def game_error(error):
        """Map game errors to their HTTP status."""
        if error.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {error.message}")
        else:
            logger.info(f"{request.method} {request.path} rejected: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Unhandled error on {request.method} {request.path}: {error}")
        return jsonify({'error': 'Internal server error'}), 500

    logger.info("API handlers registered successfully")
