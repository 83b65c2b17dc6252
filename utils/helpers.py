"""
Helper utilities for Whispers.

This module contains utility functions used throughout the application
for validation, generation, and data manipulation.
"""

import random
import string
import uuid
from datetime import datetime, timezone
from typing import List, Optional
from .constants import (
    GAME_CODE_LENGTH, MIN_NAME_LENGTH, MAX_NAME_LENGTH,
    PERSONAL_ITEMS, PERSONAL_ITEMS_PER_PLAYER
)

def generate_game_code(length: int = GAME_CODE_LENGTH) -> str:
    """Generate a random game join code."""
    characters = string.ascii_uppercase + string.digits
    return ''.join(random.choices(characters, k=length))

def generate_id() -> str:
    """Generate an opaque identifier for games and players."""
    return str(uuid.uuid4())

def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)

def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a datetime read back from the database to aware UTC.

    SQLite drops timezone information, so naive values are assumed to be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def to_iso(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 string of a stored datetime, or None."""
    value = as_utc(value)
    return value.isoformat() if value else None

def validate_player_name(name: Optional[str]) -> tuple[bool, Optional[str]]:
    """
    Validate a display name for the game.

    Returns:
        tuple: (is_valid, error_message)
    """
    if not name or not name.strip():
        return False, "Player name is required"

    name = name.strip()
    if len(name) < MIN_NAME_LENGTH:
        return False, f"Player name must be at least {MIN_NAME_LENGTH} characters"

    if len(name) > MAX_NAME_LENGTH:
        return False, f"Player name must be {MAX_NAME_LENGTH} characters or less"

    return True, None

def is_name_taken(name: str, existing_names: List[str]) -> bool:
    """Case-insensitive check of a name against the names already in a game."""
    name_lower = name.strip().lower()
    return any(existing.lower() == name_lower for existing in existing_names)

def get_random_personal_items(count: int = PERSONAL_ITEMS_PER_PLAYER,
                              rng: Optional[random.Random] = None) -> List[str]:
    """
    Pick distinct personal items for a player.

    Args:
        count: Number of items to pick
        rng: Random source (module random if None)

    Returns:
        List of item names
    """
    rng = rng or random
    return rng.sample(PERSONAL_ITEMS, min(count, len(PERSONAL_ITEMS)))
