"""
Redis Cache Setters for Whispers.

Write operations for cached game snapshots.
Handles fallbacks when Redis is unavailable.
"""

import logging
from typing import Dict, Any
from config import settings
from .client import redis_client
from .models import RedisKeys

logger = logging.getLogger(__name__)

# Outlives any snapshot by far
GAME_VERSION_TTL_SECONDS = 24 * 3600

def set_game_snapshot(game_id: str, snapshot: Dict[str, Any], version: int) -> bool:
    """
    Cache a game snapshot for GAME_CACHE_TTL_SECONDS.

    ``version`` is the game's write counter read before the snapshot was
    built; the entry is ignored once a later write bumped the counter.
    """
    return redis_client.set(
        RedisKeys.game_snapshot_key(game_id),
        {'version': version, 'snapshot': snapshot},
        settings.GAME_CACHE_TTL_SECONDS
    )

def invalidate_game(game_id: str) -> bool:
    """Bump the write counter of a game and drop its cached snapshot."""
    redis_client.incr(RedisKeys.game_version_key(game_id), GAME_VERSION_TTL_SECONDS)
    deleted = redis_client.delete(RedisKeys.game_snapshot_key(game_id))
    if deleted:
        logger.debug(f"Invalidated snapshot cache for game {game_id}")
    return deleted
