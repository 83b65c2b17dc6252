import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Only load the .env file if we're not on Render (i.e., we are in a local environment)
if os.environ.get("RENDER") != "true":
    load_dotenv()

# Flask Configuration
SECRET_KEY = os.getenv('SECRET_KEY', 'a_very_secret_key_that_should_be_changed')
CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

# Database Configuration
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///whispers.db')

# Redis Configuration (optional - snapshots are not cached without it)
REDIS_URL = os.getenv('REDIS_URL')
GAME_CACHE_TTL_SECONDS = int(os.getenv('GAME_CACHE_TTL_SECONDS', 5))

# OpenAI Configuration
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", 20))
OPENAI_MAX_RETRIES = int(os.getenv("OPENAI_MAX_RETRIES", 2))

# Game Configuration
MIN_PLAYERS = int(os.getenv('MIN_PLAYERS', 4))
MAX_PLAYERS = int(os.getenv('MAX_PLAYERS', 12))
DEFAULT_PHASE_DURATION_HOURS = float(os.getenv('DEFAULT_PHASE_DURATION_HOURS', 12))

# Auto-phase sweep interval; 0 disables the background sweep
AUTO_PHASE_INTERVAL_SECONDS = int(os.getenv('AUTO_PHASE_INTERVAL_SECONDS', 0))

# Server Configuration
SOCKETIO_ASYNC_MODE = os.getenv('SOCKETIO_ASYNC_MODE', 'eventlet')
PORT = int(os.getenv('PORT', 5000))
DEBUG = os.environ.get('RENDER', '') != 'true'

# Render Configuration
IS_RENDER = os.environ.get("RENDER", "") == "true"

if IS_RENDER:
    logger.info(f"Running on Render - OPENAI_API_KEY present: {'Yes' if OPENAI_API_KEY else 'No'}")
else:
    logger.debug(f"Running locally - OPENAI_API_KEY present: {'Yes' if OPENAI_API_KEY else 'No'}")
