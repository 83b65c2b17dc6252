"""
Redis Cache Keys for Whispers.
"""

class RedisKeys:
    """Redis key patterns for consistent data organization."""

    GAME_SNAPSHOT = "whispers:game:{game_id}"
    GAME_VERSION = "whispers:game:{game_id}:version"

    @staticmethod
    def game_snapshot_key(game_id: str) -> str:
        return RedisKeys.GAME_SNAPSHOT.format(game_id=game_id)

    @staticmethod
    def game_version_key(game_id: str) -> str:
        return RedisKeys.GAME_VERSION.format(game_id=game_id)
