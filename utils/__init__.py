"""
Utilities module for Whispers.

This module contains constants and helper functions
used throughout the application.
"""

from .constants import ROOM_OBJECTS, PERSONAL_ITEMS, MAX_WHISPER_LENGTH
from .helpers import (
    generate_game_code, generate_id, utcnow, as_utc, to_iso,
    validate_player_name, is_name_taken, get_random_personal_items
)

__all__ = [
    'ROOM_OBJECTS',
    'PERSONAL_ITEMS',
    'MAX_WHISPER_LENGTH',
    'generate_game_code',
    'generate_id',
    'utcnow',
    'as_utc',
    'to_iso',
    'validate_player_name',
    'is_name_taken',
    'get_random_personal_items'
]
