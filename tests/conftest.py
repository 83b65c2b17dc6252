"""Pytest configuration and fixtures."""

import os
import random
import tempfile

# The engine is built when `database` is first imported, so the test
# database has to be configured before any project import.
_db_dir = tempfile.mkdtemp(prefix="whispers-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["REDIS_URL"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["MIN_PLAYERS"] = "4"
os.environ["MAX_PLAYERS"] = "12"

import pytest

from database import get_db_session, reset_database
from database.models import Player
from game import GameManager, NarrativeManager, RoomManager, WhisperManager


class FakeNarrator:
    """Narrator double returning fixed text and recording every call."""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def _record(self, kind, text):
        self.calls.append(kind)
        if self.fail:
            raise RuntimeError(f"{kind} generation exploded")
        return text

    def generate_narration(self, context):
        return self._record("narration", f"Night falls on day {context.current_day}.")

    def generate_mission(self, context, player):
        return self._record("mission", f"Mission for {player.name}")

    def generate_chaos_event(self, context):
        return self._record("chaos", "All votes are anonymous this round.")

    def generate_room_interaction_log(self, context):
        return self._record("room_log", f"Something stirs near the {context.object_name.lower()}.")


class EventRecorder:
    """Notifier double collecting (event, game_id, payload) tuples."""

    def __init__(self):
        self.events = []

    def __call__(self, event, game_id, payload):
        self.events.append((event, game_id, payload))

    def names(self):
        return [event for event, _, _ in self.events]


@pytest.fixture(autouse=True)
def clean_database():
    """Every test starts from empty tables."""
    reset_database()
    yield


@pytest.fixture
def narrator():
    return FakeNarrator()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def narrative_manager(narrator):
    return NarrativeManager(narrator=narrator)


@pytest.fixture
def room_manager(narrator):
    return RoomManager(narrator=narrator, rng=random.Random(7))


@pytest.fixture
def whisper_manager():
    return WhisperManager()


@pytest.fixture
def game_manager(narrative_manager, room_manager, recorder):
    return GameManager(
        narrative_manager=narrative_manager,
        room_manager=room_manager,
        notifier=recorder,
        rng=random.Random(42),
    )


def build_game(manager, names):
    """Create a game hosted by names[0] with the others joined, in order.

    Returns:
        (game_id, {name: player_id})
    """
    created = manager.create_game(names[0])
    ids = {names[0]: created["hostId"]}
    for name in names[1:]:
        joined = manager.join_game(name, created["gameCode"])
        ids[name] = joined["playerId"]
    return created["gameId"], ids


def force_roles(game_id, roles_by_player_id):
    """Overwrite the randomly assigned roles so scenarios are deterministic."""
    with get_db_session() as session:
        for player in session.query(Player).filter_by(game_id=game_id).all():
            player.role = roles_by_player_id[player.id]


def load_player(player_id):
    with get_db_session() as session:
        return session.query(Player).filter_by(id=player_id).one()


@pytest.fixture
def four_player_game(game_manager):
    """Started 4-player game: Cara is the traitor, Hana hosts.

    Returns:
        (game_id, {name: player_id})
    """
    game_id, ids = build_game(game_manager, ["Hana", "Ada", "Ben", "Cara"])
    game_manager.start_game(game_id, ids["Hana"])
    force_roles(game_id, {
        ids["Hana"]: "FAITHFUL",
        ids["Ada"]: "FAITHFUL",
        ids["Ben"]: "FAITHFUL",
        ids["Cara"]: "TRAITOR",
    })
    return game_id, ids
