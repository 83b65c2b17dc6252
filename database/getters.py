"""
Database Getters for Whispers.

Contains read operations from the database. Every function takes the
session of the caller so reads and writes of one operation share a
single transaction.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from .models import (
    Game, Player, Vote, Narration, PlayerMission, ChaosEvent, Whisper,
    RoomObject, PersonalItem, PlacedItem, RoomLog
)

logger = logging.getLogger(__name__)

# ==============================================================================
# GAME GETTERS
# ==============================================================================

def get_game_by_id(session: Session, game_id: str) -> Optional[Game]:
    """Get a game by its ID."""
    return session.query(Game).filter_by(id=game_id).first()

def get_game_by_code(session: Session, code: str) -> Optional[Game]:
    """Get a game by its join code (case-insensitive)."""
    return session.query(Game).filter_by(code=code.strip().upper()).first()

def is_game_code_taken(session: Session, code: str) -> bool:
    """Check if a join code is already used."""
    return session.query(Game.id).filter_by(code=code).first() is not None

def get_auto_phase_games(session: Session) -> List[Game]:
    """Get all in-progress games with auto-phase enabled and a running timer."""
    return session.query(Game).filter(
        Game.status == 'PLAYING',
        Game.auto_phase_enabled.is_(True),
        Game.phase_started_at.isnot(None)
    ).all()

# ==============================================================================
# PLAYER GETTERS
# ==============================================================================

def get_player_in_game(session: Session, game_id: str, player_id: str) -> Optional[Player]:
    """Get a player by ID, only if they belong to the game."""
    return session.query(Player).filter_by(id=player_id, game_id=game_id).first()

def get_players_in_game(session: Session, game_id: str) -> List[Player]:
    """Get all players of a game in join order."""
    return session.query(Player).filter_by(game_id=game_id)\
        .order_by(Player.joined_at.asc()).all()

# ==============================================================================
# VOTE GETTERS
# ==============================================================================

def get_phase_votes(session: Session, game_id: str, phase: str, day: int) -> List[Vote]:
    """Get the live votes of one (phase, day)."""
    return session.query(Vote).filter_by(game_id=game_id, phase=phase, day=day)\
        .order_by(Vote.id.asc()).all()

# ==============================================================================
# NARRATIVE GETTERS
# ==============================================================================

def get_phase_narration(session: Session, game_id: str, phase: str, day: int) -> Optional[Narration]:
    """Get the narration of one phase, if it was generated."""
    return session.query(Narration).filter_by(game_id=game_id, phase=phase, day=day).first()

def get_phase_missions(session: Session, game_id: str, phase: str, day: int) -> List[PlayerMission]:
    """Get the missions handed out for one phase."""
    return session.query(PlayerMission).filter_by(game_id=game_id, phase=phase, day=day).all()

def get_player_missions(session: Session, game_id: str, player_id: str) -> List[PlayerMission]:
    """Get every mission a player received, most recent first."""
    return session.query(PlayerMission).filter_by(game_id=game_id, player_id=player_id)\
        .order_by(PlayerMission.day.desc(), PlayerMission.id.desc()).all()

def get_mission(session: Session, mission_id: int) -> Optional[PlayerMission]:
    """Get a mission by ID."""
    return session.query(PlayerMission).filter_by(id=mission_id).first()

def get_phase_chaos_event(session: Session, game_id: str, phase: str, day: int) -> Optional[ChaosEvent]:
    """Get the chaos event of one phase, if one was triggered."""
    return session.query(ChaosEvent).filter_by(game_id=game_id, phase=phase, day=day).first()

# ==============================================================================
# WHISPER GETTERS
# ==============================================================================

def get_phase_whisper(session: Session, game_id: str, from_player_id: str,
                      phase: str, day: int) -> Optional[Whisper]:
    """Get the whisper a player already sent this phase, if any."""
    return session.query(Whisper).filter_by(
        game_id=game_id, from_player_id=from_player_id, phase=phase, day=day
    ).first()

def get_sent_whispers(session: Session, game_id: str, player_id: str) -> List[Whisper]:
    """Get whispers sent by a player, most recent first."""
    return session.query(Whisper).filter_by(game_id=game_id, from_player_id=player_id)\
        .order_by(Whisper.created_at.desc(), Whisper.id.desc()).all()

def get_received_whispers(session: Session, game_id: str, player_id: str) -> List[Whisper]:
    """Get whispers received by a player, most recent first."""
    return session.query(Whisper).filter_by(game_id=game_id, to_player_id=player_id)\
        .order_by(Whisper.created_at.desc(), Whisper.id.desc()).all()

# ==============================================================================
# ROOM GETTERS
# ==============================================================================

def get_room_objects(session: Session, game_id: str) -> List[RoomObject]:
    """Get all room objects of a game ordered by name."""
    return session.query(RoomObject).filter_by(game_id=game_id)\
        .order_by(RoomObject.name.asc()).all()

def get_room_object(session: Session, game_id: str, object_id: int) -> Optional[RoomObject]:
    """Get a room object, only if it belongs to the game."""
    return session.query(RoomObject).filter_by(id=object_id, game_id=game_id).first()

def get_personal_items(session: Session, game_id: str, player_id: str) -> List[PersonalItem]:
    """Get a player's personal items ordered by name."""
    return session.query(PersonalItem).filter_by(game_id=game_id, player_id=player_id)\
        .order_by(PersonalItem.name.asc()).all()

def get_placed_items(session: Session, game_id: str, player_id: str) -> List[PlacedItem]:
    """Get the items a player has already placed."""
    return session.query(PlacedItem).filter_by(game_id=game_id, player_id=player_id).all()

def get_room_logs(session: Session, game_id: str) -> List[RoomLog]:
    """Get the room log, most recent first."""
    return session.query(RoomLog).filter_by(game_id=game_id)\
        .order_by(RoomLog.day.desc(), RoomLog.phase.desc(),
                  RoomLog.created_at.desc(), RoomLog.id.desc()).all()
