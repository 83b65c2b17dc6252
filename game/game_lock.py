"""
Per-game lock registry for Whispers.

Serializes phase advancement for a single game inside this process.
A second caller for a game that is already being updated is refused
immediately with a retryable error instead of waiting in line.

This guards concurrent requests hitting the same process only; a
multi-process deployment needs a shared lock in front of it.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Set, TypeVar

from .errors import GameLockContentionError

logger = logging.getLogger(__name__)

T = TypeVar('T')

class GameLockRegistry:
    """
    Tracks which game ids are currently being updated.

    Entries exist only while a lock is held, so the registry never
    grows beyond the number of in-flight updates.
    """

    def __init__(self):
        self._held: Set[str] = set()
        self._guard = threading.Lock()
        logger.debug("Game lock registry initialized")

    def acquire(self, game_id: str):
        """
        Take the lock for a game.

        Raises:
            GameLockContentionError: If the game is already locked
        """
        with self._guard:
            if game_id in self._held:
                logger.warning(f"Lock contention on game {game_id}")
                raise GameLockContentionError(
                    "Game state is currently being updated. Please try again."
                )
            self._held.add(game_id)
        logger.debug(f"Acquired lock for game {game_id}")

    def release(self, game_id: str):
        """Release the lock for a game. Releasing an unheld lock is a no-op."""
        with self._guard:
            self._held.discard(game_id)
        logger.debug(f"Released lock for game {game_id}")

    def is_locked(self, game_id: str) -> bool:
        with self._guard:
            return game_id in self._held

    def held_count(self) -> int:
        """Number of games currently locked."""
        with self._guard:
            return len(self._held)

    @contextmanager
    def hold(self, game_id: str):
        """Context manager that holds the game lock for the block."""
        self.acquire(game_id)
        try:
            yield
        finally:
            self.release(game_id)

    def with_lock(self, game_id: str, fn: Callable[..., T], *args, **kwargs) -> T:
        """Run ``fn`` while holding the lock for ``game_id`` and return its result."""
        with self.hold(game_id):
            return fn(*args, **kwargs)
