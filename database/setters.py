"""
Database Setters for Whispers.

Contains write operations to the database. Every function takes the
session of the caller and only flushes; the caller's
``get_db_session()`` block decides when the transaction commits.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable

from sqlalchemy.orm import Session

from .models import (
    Game, Player, Vote, Narration, PlayerMission, ChaosEvent, Whisper,
    RoomObject, PersonalItem, PlacedItem, RoomLog
)

logger = logging.getLogger(__name__)

# ==============================================================================
# GAME AND PLAYER SETTERS
# ==============================================================================

def create_game(session: Session, game_id: str, code: str, host_id: str, host_name: str,
                phase_duration_hours: float) -> Game:
    """Create a new game together with its host player."""
    game = Game(
        id=game_id,
        code=code,
        host_id=host_id,
        phase_duration_hours=phase_duration_hours
    )
    session.add(game)
    session.add(Player(id=host_id, game_id=game_id, name=host_name, is_host=True))
    session.flush()
    logger.info(f"Created game {code} hosted by '{host_name}'")
    return game

def create_player(session: Session, player_id: str, game_id: str, name: str) -> Player:
    """Create a new player in a game."""
    player = Player(id=player_id, game_id=game_id, name=name, is_host=False)
    session.add(player)
    session.flush()
    logger.info(f"Created player '{name}' in game {game_id}")
    return player

def start_game(session: Session, game: Game, roles: Dict[str, str], started_at: datetime):
    """Move a game to PLAYING on DAY 1 and store each player's role."""
    game.status = 'PLAYING'
    game.current_phase = 'DAY'
    game.current_day = 1
    game.started_at = started_at
    game.phase_started_at = started_at

    for player in game.players:
        player.role = roles[player.id]

    session.flush()
    logger.info(f"Started game {game.code} with {len(roles)} players")

def upsert_vote(session: Session, game_id: str, voter_id: str, target_id: str,
                phase: str, day: int) -> Vote:
    """Cast a vote, overwriting the voter's earlier vote of the same phase."""
    vote = session.query(Vote).filter_by(
        game_id=game_id, voter_id=voter_id, phase=phase, day=day
    ).first()

    if vote:
        vote.target_id = target_id
        logger.info(f"Updated vote in game {game_id}: {voter_id} -> {target_id}")
    else:
        vote = Vote(game_id=game_id, voter_id=voter_id, target_id=target_id, phase=phase, day=day)
        session.add(vote)
        logger.info(f"Created vote in game {game_id}: {voter_id} -> {target_id}")

    session.flush()
    return vote

def clear_phase_votes(session: Session, game_id: str, phase: str, day: int) -> int:
    """Delete any votes already recorded for a (phase, day)."""
    deleted = session.query(Vote).filter_by(game_id=game_id, phase=phase, day=day)\
        .delete(synchronize_session=False)
    if deleted:
        logger.warning(f"Cleared {deleted} stale votes for {phase} {day} in game {game_id}")
    return deleted

def eliminate_player(game: Game, player_id: str):
    """Mark a player of the game as dead."""
    for player in game.players:
        if player.id == player_id:
            player.is_alive = False
            logger.info(f"Eliminated player '{player.name}' in game {game.code}")
            return
    raise ValueError(f"Player {player_id} is not in game {game.id}")

def set_game_phase(game: Game, phase: str, day: int, phase_started_at: datetime):
    """Move a game to a new phase and restart its phase timer."""
    game.current_phase = phase
    game.current_day = day
    game.phase_started_at = phase_started_at

def end_game(game: Game, winner: str, ended_at: datetime):
    """Declare a winner and close the game. Phase and day are left as they are."""
    game.status = 'ENDED'
    game.winner = winner
    game.ended_at = ended_at
    game.auto_phase_enabled = False
    logger.info(f"Ended game {game.code}: {winner} won")

def set_auto_phase(game: Game, enabled: bool, duration_hours: float, now: datetime):
    """Enable or disable automatic phase advancement."""
    game.auto_phase_enabled = enabled
    game.phase_duration_hours = duration_hours
    game.phase_started_at = now if enabled else None

# ==============================================================================
# NARRATIVE SETTERS
# ==============================================================================

def create_narration(session: Session, game_id: str, phase: str, day: int, content: str) -> Narration:
    """Store the narration of a phase."""
    narration = Narration(game_id=game_id, phase=phase, day=day, content=content)
    session.add(narration)
    session.flush()
    return narration

def create_missions(session: Session, game_id: str, phase: str, day: int,
                    contents: Dict[str, str]) -> int:
    """Store one mission per player for a phase. Returns the number created."""
    for player_id, content in contents.items():
        session.add(PlayerMission(game_id=game_id, player_id=player_id, phase=phase,
                                  day=day, content=content))
    session.flush()
    return len(contents)

def create_chaos_event(session: Session, game_id: str, phase: str, day: int,
                       content: str, event_type: str = 'AI_GENERATED') -> ChaosEvent:
    """Store the chaos event of a phase."""
    event = ChaosEvent(game_id=game_id, phase=phase, day=day, content=content, type=event_type)
    session.add(event)
    session.flush()
    return event

def create_whisper(session: Session, game_id: str, from_player_id: str, to_player_id: str,
                   content: str, phase: str, day: int) -> Whisper:
    """Store a whisper."""
    whisper = Whisper(
        game_id=game_id,
        from_player_id=from_player_id,
        to_player_id=to_player_id,
        content=content,
        phase=phase,
        day=day
    )
    session.add(whisper)
    session.flush()
    return whisper

# ==============================================================================
# ROOM SETTERS
# ==============================================================================

def create_room(session: Session, game_id: str, objects: Iterable[tuple],
                items_by_player: Dict[str, Iterable[str]]) -> tuple[int, int]:
    """
    Create the room objects and personal items of a game.

    Returns:
        tuple: (object_count, personal_item_count)
    """
    object_count = 0
    for name, description in objects:
        session.add(RoomObject(game_id=game_id, name=name, description=description))
        object_count += 1

    item_count = 0
    for player_id, items in items_by_player.items():
        for item_name in items:
            session.add(PersonalItem(game_id=game_id, player_id=player_id, name=item_name))
            item_count += 1

    session.flush()
    logger.info(f"Created room for game {game_id}: {object_count} objects, {item_count} personal items")
    return object_count, item_count

def place_item(session: Session, game_id: str, player_id: str, item_name: str,
               object_id: int, phase: str, day: int) -> PlacedItem:
    """Leave a personal item on a room object."""
    placed = PlacedItem(game_id=game_id, player_id=player_id, item_name=item_name,
                        object_id=object_id, phase=phase, day=day)
    session.add(placed)
    session.flush()
    return placed

def update_room_object(room_object: RoomObject, state: str, action: str, player_id: str):
    """Record the latest interaction with a room object."""
    room_object.state = state
    room_object.last_action = action
    room_object.last_updated_by = player_id

def create_room_log(session: Session, game_id: str, content: str, phase: str, day: int) -> RoomLog:
    """Append a line to the room log."""
    log = RoomLog(game_id=game_id, content=content, phase=phase, day=day)
    session.add(log)
    session.flush()
    return log
