"""
Redis Cache Module for Whispers.

Short-lived game snapshots served to polling clients. The database stays
the source of truth; every write invalidates the snapshot of its game.
"""

from .client import redis_client, RedisClient
from .models import RedisKeys
from .getters import get_game_snapshot, get_game_version
from .setters import set_game_snapshot, invalidate_game

__all__ = [
    'redis_client',
    'RedisClient',
    'RedisKeys',
    'get_game_snapshot',
    'get_game_version',
    'set_game_snapshot',
    'invalidate_game'
]
