"""
Redis Cache Getters for Whispers.

Read operations for cached game snapshots.
Handles fallbacks when Redis is unavailable.
"""

import logging
from typing import Optional, Dict, Any
from .client import redis_client
from .models import RedisKeys

logger = logging.getLogger(__name__)

def get_game_version(game_id: str) -> int:
    """Write counter of a game, 0 before its first invalidation."""
    value = redis_client.get(RedisKeys.game_version_key(game_id))
    return value if isinstance(value, int) else 0

def get_game_snapshot(game_id: str) -> Optional[Dict[str, Any]]:
    """Get a cached game snapshot, or None on a miss or a stale entry."""
    data = redis_client.get(RedisKeys.game_snapshot_key(game_id))
    if not isinstance(data, dict) or not isinstance(data.get('snapshot'), dict):
        return None

    if data.get('version') != get_game_version(game_id):
        logger.debug(f"Discarding snapshot of game {game_id} built before its last write")
        return None

    logger.debug(f"Snapshot cache hit for game {game_id}")
    return data['snapshot']
