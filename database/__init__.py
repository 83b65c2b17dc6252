"""
Database Package for Whispers.

Provides clean imports for all database functionality.
"""

# Models
from .models import (
    Base,
    Game,
    Player,
    Vote,
    Narration,
    PlayerMission,
    ChaosEvent,
    Whisper,
    RoomObject,
    PersonalItem,
    PlacedItem,
    RoomLog
)

# Configuration and session management
from .config import (
    engine,
    SessionLocal,
    get_db_session,
    init_database,
    reset_database
)

__all__ = [
    # Models
    "Base",
    "Game",
    "Player",
    "Vote",
    "Narration",
    "PlayerMission",
    "ChaosEvent",
    "Whisper",
    "RoomObject",
    "PersonalItem",
    "PlacedItem",
    "RoomLog",

    # Configuration
    "engine",
    "SessionLocal",
    "get_db_session",
    "init_database",
    "reset_database",
]
