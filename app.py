"""
Whispers - A Traitors-style Social Deduction Game Backend

Flask-SocketIO backend API. Players join with a short code, receive a
secret TRAITOR or FAITHFUL role and vote each other out in alternating
DAY and NIGHT phases. App.py is purely server setup and handler
registration.
"""

import logging
import random
from typing import Optional

from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from config import settings
from ai import Narrator
from database import init_database
from game import (
    GameLockRegistry, GameManager, NarrativeManager, WhisperManager, RoomManager,
    AutoPhaseScheduler
)
from handlers import register_socket_handlers, register_api_handlers, make_notifier

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def create_app(narrator: Optional[Narrator] = None, rng: Optional[random.Random] = None,
               async_mode: Optional[str] = None):
    """
    Application factory that creates and configures the Flask app.

    Args:
        narrator: AI narrator to use (a new OpenAI-backed one if None)
        rng: Random source for roles, tie-breaks and personal items
        async_mode: Socket.IO async mode (settings if None)

    Returns:
        tuple: (app, socketio); the managers are in app.extensions['whispers']
    """

    # Flask configuration
    app = Flask(__name__)
    app.config['SECRET_KEY'] = settings.SECRET_KEY

    cors_origins = settings.CORS_ORIGINS.split(',')
    CORS(app, origins=cors_origins)

    # ProxyFix for deployment behind reverse proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode or settings.SOCKETIO_ASYNC_MODE,
        ping_timeout=60,
        ping_interval=25
    )

    logger.info("Initializing game managers...")
    narrator = narrator or Narrator()
    narrative_manager = NarrativeManager(narrator=narrator)
    room_manager = RoomManager(narrator=narrator, rng=rng)
    whisper_manager = WhisperManager()
    game_manager = GameManager(
        lock_registry=GameLockRegistry(),
        narrative_manager=narrative_manager,
        room_manager=room_manager,
        notifier=make_notifier(socketio),
        rng=rng
    )
    scheduler = AutoPhaseScheduler(game_manager)

    logger.info("Registering handlers...")
    register_socket_handlers(socketio, game_manager)
    register_api_handlers(app, game_manager, narrative_manager, whisper_manager,
                          room_manager, scheduler)

    app.extensions['whispers'] = {
        'game_manager': game_manager,
        'narrative_manager': narrative_manager,
        'whisper_manager': whisper_manager,
        'room_manager': room_manager,
        'scheduler': scheduler
    }

    logger.info("Initializing database...")
    init_database()

    logger.info("Application initialization complete")
    return app, socketio

def main():
    """Main entry point for development server."""
    app, socketio = create_app()

    if settings.AUTO_PHASE_INTERVAL_SECONDS > 0:
        app.extensions['whispers']['scheduler'].start(socketio, settings.AUTO_PHASE_INTERVAL_SECONDS)

    logger.info(f"Starting Whispers game server on port {settings.PORT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"CORS origins: {settings.CORS_ORIGINS}")

    socketio.run(app, debug=settings.DEBUG, port=settings.PORT, host='0.0.0.0')

if __name__ == '__main__':
    main()
