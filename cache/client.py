"""
Redis Client Configuration for Whispers.

Manages the optional Redis connection with error handling and fallbacks.
Without REDIS_URL the client stays disconnected and every call is a no-op.
"""

import json
import logging
from typing import Any, Optional

import redis
from redis.exceptions import ConnectionError, TimeoutError, RedisError

from config import settings

logger = logging.getLogger(__name__)

class RedisClient:
    """Redis client wrapper with error handling and fallbacks."""

    def __init__(self, url: Optional[str] = None):
        self.url = url if url is not None else settings.REDIS_URL
        self.client = None
        self.connected = False
        if self.url:
            self._connect()
        else:
            logger.info("REDIS_URL not set, game snapshot cache disabled")

    def _connect(self):
        """Establish Redis connection."""
        try:
            self.client = redis.from_url(
                self.url,
                decode_responses=True,
                socket_timeout=2,
                socket_connect_timeout=2,
                retry_on_timeout=True
            )

            # Test connection
            self.client.ping()
            self.connected = True
            logger.info("Redis connection established successfully")

        except (ConnectionError, TimeoutError, RedisError) as e:
            logger.warning(f"Redis connection failed: {e}. Using fallback mode.")
            self.connected = False
            self.client = None
        except Exception as e:
            logger.error(f"Unexpected error connecting to Redis: {e}")
            self.connected = False
            self.client = None

    def is_connected(self) -> bool:
        """Check if Redis is connected and available."""
        return self.connected and self.client is not None

    def get(self, key: str) -> Optional[Any]:
        """Get a JSON value from Redis, None when missing or unavailable."""
        if not self.is_connected():
            return None

        try:
            value = self.client.get(key)
            if value is None:
                return None
            return json.loads(value)
        except (ConnectionError, TimeoutError) as e:
            logger.warning(f"Redis get failed for key {key}: {e}")
            self.connected = False
            return None
        except RedisError as e:
            logger.warning(f"Redis get failed for key {key}: {e}")
            return None
        except json.JSONDecodeError:
            logger.warning(f"Discarding unreadable cache entry {key}")
            return None

    def set(self, key: str, value: Any, expiry: Optional[int] = None) -> bool:
        """Store a JSON-serializable value with optional expiry in seconds."""
        if not self.is_connected():
            return False

        try:
            payload = json.dumps(value)
            if expiry:
                return bool(self.client.setex(key, expiry, payload))
            return bool(self.client.set(key, payload))
        except (ConnectionError, TimeoutError) as e:
            logger.warning(f"Redis set failed for key {key}: {e}")
            self.connected = False
            return False
        except (RedisError, TypeError) as e:
            logger.warning(f"Redis set failed for key {key}: {e}")
            return False

    def incr(self, key: str, expiry: Optional[int] = None) -> Optional[int]:
        """Increment an integer counter, None when unavailable."""
        if not self.is_connected():
            return None

        try:
            value = self.client.incr(key)
            if expiry:
                self.client.expire(key, expiry)
            return value
        except (ConnectionError, TimeoutError) as e:
            logger.warning(f"Redis incr failed for key {key}: {e}")
            self.connected = False
            return None
        except RedisError as e:
            logger.warning(f"Redis incr failed for key {key}: {e}")
            return None

    def delete(self, key: str) -> bool:
        """Delete key from Redis."""
        if not self.is_connected():
            return False

        try:
            return bool(self.client.delete(key))
        except (ConnectionError, TimeoutError) as e:
            logger.warning(f"Redis delete failed for key {key}: {e}")
            self.connected = False
            return False
        except RedisError as e:
            logger.warning(f"Redis delete failed for key {key}: {e}")
            return False

# Global Redis client instance
redis_client = RedisClient()
