"""
Transaction boundary shared by the game managers.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from database import get_db_session
from .errors import GameError, GamePersistenceError

logger = logging.getLogger(__name__)

@contextmanager
def game_session(action: str):
    """
    Open one database transaction for a game operation.

    Game errors raised inside the block roll the transaction back and pass
    through unchanged. Database failures roll back and surface as
    GamePersistenceError, so callers never observe a partial write.

    Args:
        action: Short description used in the error message ("advance phase")
    """
    try:
        with get_db_session() as session:
            yield session
    except GameError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error while trying to {action}: {e}")
        raise GamePersistenceError(f"Failed to {action}") from e
