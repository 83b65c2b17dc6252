"""
Database Models for Whispers.

Contains all SQLAlchemy model definitions for the game.
Pure data models with no business logic.
"""

from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, Text, DateTime, Float, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship, declarative_base

# Create the base class for models
Base = declarative_base()

def _now():
    return datetime.now(timezone.utc)

class Game(Base):
    """Represents a game session players join with a short code."""

    __tablename__ = 'games'

    id = Column(String(36), primary_key=True)
    code = Column(String(10), unique=True, nullable=False, index=True)
    host_id = Column(String(36), nullable=False)

    # Game state
    status = Column(String(10), default='WAITING', nullable=False)  # WAITING, PLAYING, ENDED
    current_phase = Column(String(10), default='DAY', nullable=False)  # DAY, NIGHT
    current_day = Column(Integer, default=0, nullable=False)
    winner = Column(String(10), nullable=True)  # FAITHFULS, TRAITORS

    # Auto-phase
    auto_phase_enabled = Column(Boolean, default=False, nullable=False)
    phase_duration_hours = Column(Float, default=12, nullable=False)
    phase_started_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_now)
    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    # Relationships
    players = relationship('Player', back_populates='game', cascade='all, delete-orphan',
                           order_by='Player.joined_at')
    votes = relationship('Vote', back_populates='game', cascade='all, delete-orphan')
    narrations = relationship('Narration', back_populates='game', cascade='all, delete-orphan')
    missions = relationship('PlayerMission', back_populates='game', cascade='all, delete-orphan')
    chaos_events = relationship('ChaosEvent', back_populates='game', cascade='all, delete-orphan')
    whispers = relationship('Whisper', back_populates='game', cascade='all, delete-orphan')
    room_objects = relationship('RoomObject', back_populates='game', cascade='all, delete-orphan')
    personal_items = relationship('PersonalItem', back_populates='game', cascade='all, delete-orphan')
    placed_items = relationship('PlacedItem', back_populates='game', cascade='all, delete-orphan')
    room_logs = relationship('RoomLog', back_populates='game', cascade='all, delete-orphan')

    # Indexes
    __table_args__ = (
        Index('idx_game_status_auto', 'status', 'auto_phase_enabled'),
    )

    def __repr__(self):
        return f"<Game(code='{self.code}', status='{self.status}', phase='{self.current_phase}', day={self.current_day})>"

class Player(Base):
    """Represents a player in a game."""

    __tablename__ = 'players'

    id = Column(String(36), primary_key=True)
    name = Column(String(50), nullable=False)

    # Player status
    is_alive = Column(Boolean, default=True, nullable=False)
    is_host = Column(Boolean, default=False, nullable=False)
    role = Column(String(10), nullable=True)  # TRAITOR, FAITHFUL; null before start

    # Timestamps
    joined_at = Column(DateTime(timezone=True), default=_now)

    # Foreign key
    game_id = Column(String(36), ForeignKey('games.id'), nullable=False)

    # Relationships
    game = relationship('Game', back_populates='players')
    votes_cast = relationship('Vote', foreign_keys='Vote.voter_id', back_populates='voter')
    votes_against = relationship('Vote', foreign_keys='Vote.target_id', back_populates='target')

    # Indexes
    __table_args__ = (
        Index('idx_player_game_name', 'game_id', 'name'),
    )

    def __repr__(self):
        return f"<Player(name='{self.name}', alive={self.is_alive})>"

class Vote(Base):
    """A vote for elimination, unique per voter and (phase, day)."""

    __tablename__ = 'votes'

    id = Column(Integer, primary_key=True)
    phase = Column(String(10), nullable=False)
    day = Column(Integer, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    # Foreign keys
    game_id = Column(String(36), ForeignKey('games.id'), nullable=False)
    voter_id = Column(String(36), ForeignKey('players.id'), nullable=False)
    target_id = Column(String(36), ForeignKey('players.id'), nullable=False)

    # Relationships
    game = relationship('Game', back_populates='votes')
    voter = relationship('Player', foreign_keys=[voter_id], back_populates='votes_cast')
    target = relationship('Player', foreign_keys=[target_id], back_populates='votes_against')

    __table_args__ = (
        UniqueConstraint('game_id', 'voter_id', 'phase', 'day', name='uq_vote_voter_phase_day'),
        Index('idx_vote_game_phase_day', 'game_id', 'phase', 'day'),
    )

    def __repr__(self):
        return f"<Vote(voter='{self.voter_id}', target='{self.target_id}', {self.phase} {self.day})>"

class Narration(Base):
    """Atmospheric narration generated for one phase."""

    __tablename__ = 'narrations'

    id = Column(Integer, primary_key=True)
    phase = Column(String(10), nullable=False)
    day = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now)

    game_id = Column(String(36), ForeignKey('games.id'), nullable=False)
    game = relationship('Game', back_populates='narrations')

    __table_args__ = (
        UniqueConstraint('game_id', 'phase', 'day', name='uq_narration_phase_day'),
    )

class PlayerMission(Base):
    """A secret social objective handed to a player for one phase."""

    __tablename__ = 'player_missions'

    id = Column(Integer, primary_key=True)
    phase = Column(String(10), nullable=False)
    day = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now)

    game_id = Column(String(36), ForeignKey('games.id'), nullable=False)
    player_id = Column(String(36), ForeignKey('players.id'), nullable=False)

    game = relationship('Game', back_populates='missions')
    player = relationship('Player')

    __table_args__ = (
        Index('idx_mission_game_phase_day', 'game_id', 'phase', 'day'),
    )

class ChaosEvent(Base):
    """A twist announced for one phase."""

    __tablename__ = 'chaos_events'

    id = Column(Integer, primary_key=True)
    type = Column(String(20), default='AI_GENERATED', nullable=False)
    content = Column(Text, nullable=False)
    phase = Column(String(10), nullable=False)
    day = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now)

    game_id = Column(String(36), ForeignKey('games.id'), nullable=False)
    game = relationship('Game', back_populates='chaos_events')

    __table_args__ = (
        UniqueConstraint('game_id', 'phase', 'day', name='uq_chaos_phase_day'),
    )

class Whisper(Base):
    """A private message; one per sender per phase."""

    __tablename__ = 'whispers'

    id = Column(Integer, primary_key=True)
    content = Column(String(140), nullable=False)
    phase = Column(String(10), nullable=False)
    day = Column(Integer, nullable=False)
    is_leaked = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now)

    game_id = Column(String(36), ForeignKey('games.id'), nullable=False)
    from_player_id = Column(String(36), ForeignKey('players.id'), nullable=False)
    to_player_id = Column(String(36), ForeignKey('players.id'), nullable=False)

    game = relationship('Game', back_populates='whispers')
    from_player = relationship('Player', foreign_keys=[from_player_id])
    to_player = relationship('Player', foreign_keys=[to_player_id])

    __table_args__ = (
        UniqueConstraint('game_id', 'from_player_id', 'phase', 'day', name='uq_whisper_sender_phase_day'),
    )

class RoomObject(Base):
    """A symbolic object in the Room of Secrets."""

    __tablename__ = 'room_objects'

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)
    state = Column(String(20), default='UNTOUCHED', nullable=False)
    last_action = Column(String(20), nullable=True)
    last_updated_by = Column(String(36), nullable=True)

    game_id = Column(String(36), ForeignKey('games.id'), nullable=False)
    game = relationship('Game', back_populates='room_objects')
    placed_items = relationship('PlacedItem', back_populates='room_object', cascade='all, delete-orphan')

class PersonalItem(Base):
    """A trinket a player may leave in the room."""

    __tablename__ = 'personal_items'

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False)

    game_id = Column(String(36), ForeignKey('games.id'), nullable=False)
    player_id = Column(String(36), ForeignKey('players.id'), nullable=False)

    game = relationship('Game', back_populates='personal_items')
    player = relationship('Player')

class PlacedItem(Base):
    """A personal item left on a room object."""

    __tablename__ = 'placed_items'

    id = Column(Integer, primary_key=True)
    item_name = Column(String(50), nullable=False)
    phase = Column(String(10), nullable=False)
    day = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now)

    game_id = Column(String(36), ForeignKey('games.id'), nullable=False)
    player_id = Column(String(36), ForeignKey('players.id'), nullable=False)
    object_id = Column(Integer, ForeignKey('room_objects.id'), nullable=False)

    game = relationship('Game', back_populates='placed_items')
    player = relationship('Player')
    room_object = relationship('RoomObject', back_populates='placed_items')

class RoomLog(Base):
    """Anonymous, AI-written line describing a room interaction."""

    __tablename__ = 'room_logs'

    id = Column(Integer, primary_key=True)
    content = Column(Text, nullable=False)
    phase = Column(String(10), nullable=False)
    day = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now)

    game_id = Column(String(36), ForeignKey('games.id'), nullable=False)
    game = relationship('Game', back_populates='room_logs')
