"""Tests for start validation, role assignment and phase advancement rules."""

import random

import pytest

from game.errors import GameValidationError, InvalidGameStateError
from game.models import Phase, PlayerState, Role, VoteRecord, Winner
from game.phase_machine import (
    advance_state, assign_roles, can_vote, count_alive, evaluate_win,
    next_phase, traitor_count_for, validate_start
)


def roster(traitors, faithfuls, dead=()):
    players = [PlayerState(id=f"t{i}", role=Role.TRAITOR) for i in range(traitors)]
    players += [PlayerState(id=f"f{i}", role=Role.FAITHFUL) for i in range(faithfuls)]
    return [PlayerState(id=p.id, role=p.role, is_alive=p.id not in dead) for p in players]


class TestStart:
    @pytest.mark.parametrize("players,traitors", [(3, 1), (4, 1), (5, 1), (6, 2), (9, 3), (12, 4)])
    def test_traitor_count_formula(self, players, traitors):
        assert traitor_count_for(players) == traitors

    def test_validate_start_counts(self):
        assert validate_start(4, 4, 12) == (1, 3)
        assert validate_start(12, 4, 12) == (4, 8)

    def test_too_few_players(self):
        with pytest.raises(GameValidationError, match="Need at least 4 players"):
            validate_start(3, 4, 12)

    def test_too_many_players(self):
        with pytest.raises(GameValidationError, match="Maximum 12 players"):
            validate_start(13, 4, 12)

    def test_balance_check_rejects_two_player_games(self):
        with pytest.raises(GameValidationError, match="Too many traitors"):
            validate_start(2, 1, 12)

    def test_assign_roles_matches_formula(self):
        ids = [f"p{i}" for i in range(9)]

        roles = assign_roles(ids, rng=random.Random(3))

        assert set(roles) == set(ids)
        assert sum(1 for r in roles.values() if r == Role.TRAITOR) == 3
        assert sum(1 for r in roles.values() if r == Role.FAITHFUL) == 6

    def test_assign_roles_varies_with_seed(self):
        ids = [f"p{i}" for i in range(6)]

        traitor_sets = {
            frozenset(pid for pid, role in assign_roles(ids, rng=random.Random(seed)).items()
                      if role == Role.TRAITOR)
            for seed in range(30)
        }

        assert len(traitor_sets) > 1


class TestTransitions:
    def test_day_goes_to_night_same_day(self):
        assert next_phase(Phase.DAY, 1) == (Phase.NIGHT, 1)

    def test_night_goes_to_next_day(self):
        assert next_phase(Phase.NIGHT, 1) == (Phase.DAY, 2)


class TestWinCondition:
    def test_no_traitors_left_faithfuls_win(self):
        assert evaluate_win(roster(1, 3, dead={"t0"})) == Winner.FAITHFULS

    def test_parity_traitors_win(self):
        assert evaluate_win(roster(1, 1)) == Winner.TRAITORS

    def test_traitor_majority_wins(self):
        assert evaluate_win(roster(2, 1)) == Winner.TRAITORS

    def test_game_continues(self):
        assert evaluate_win(roster(1, 2)) is None
        assert evaluate_win(roster(2, 5, dead={"f0"})) is None

    def test_dead_players_are_not_counted(self):
        assert count_alive(roster(2, 4, dead={"t1", "f0", "f1"})) == (1, 2)


class TestCanVote:
    def setup_method(self):
        self.traitor = PlayerState(id="t", role=Role.TRAITOR)
        self.faithful = PlayerState(id="f", role=Role.FAITHFUL)
        self.other = PlayerState(id="o", role=Role.FAITHFUL)
        self.ghost = PlayerState(id="g", role=Role.FAITHFUL, is_alive=False)

    def test_day_vote_allowed(self):
        assert can_vote(self.faithful, self.traitor, Phase.DAY) == (True, None)

    def test_dead_voter(self):
        assert can_vote(self.ghost, self.traitor, Phase.DAY) == (False, "Dead players cannot vote")

    def test_dead_target(self):
        assert can_vote(self.traitor, self.ghost, Phase.DAY) == (False, "Cannot vote for dead players")

    def test_self_vote(self):
        assert can_vote(self.faithful, self.faithful, Phase.DAY) == (False, "Cannot vote for yourself")

    def test_only_traitors_vote_at_night(self):
        allowed, error = can_vote(self.faithful, self.other, Phase.NIGHT)
        assert not allowed
        assert error == "Only traitors can vote during night phase"
        assert can_vote(self.traitor, self.faithful, Phase.NIGHT) == (True, None)


class TestAdvanceState:
    def test_elimination_and_phase_change(self):
        players = roster(1, 3)
        ballot = [
            VoteRecord("f0", "f1", Phase.DAY, 1),
            VoteRecord("f2", "f1", Phase.DAY, 1),
            VoteRecord("f1", "f2", Phase.DAY, 1),
            VoteRecord("t0", "f0", Phase.DAY, 1),
        ]

        outcome = advance_state(Phase.DAY, 1, players, ballot)

        assert outcome.eliminated_id == "f1"
        assert (outcome.next_phase, outcome.next_day) == (Phase.NIGHT, 1)
        assert outcome.winner is None
        assert (outcome.alive_traitors, outcome.alive_faithfuls) == (1, 2)

    def test_win_is_evaluated_after_elimination(self):
        players = roster(1, 2)

        outcome = advance_state(Phase.NIGHT, 1, players, [VoteRecord("t0", "f0", Phase.NIGHT, 1)])

        assert outcome.winner == Winner.TRAITORS
        assert outcome.game_ended
        assert (outcome.next_phase, outcome.next_day) == (Phase.NIGHT, 1)

    def test_eliminating_last_traitor(self):
        players = roster(1, 3)
        ballot = [VoteRecord(f"f{i}", "t0", Phase.DAY, 2) for i in range(3)]

        outcome = advance_state(Phase.DAY, 2, players, ballot)

        assert outcome.winner == Winner.FAITHFULS
        assert outcome.alive_traitors == 0

    def test_no_votes_still_advances(self):
        outcome = advance_state(Phase.NIGHT, 3, roster(1, 3), [])

        assert outcome.eliminated_id is None
        assert (outcome.next_phase, outcome.next_day) == (Phase.DAY, 4)

    def test_input_roster_is_not_mutated(self):
        players = roster(1, 3)

        advance_state(Phase.DAY, 1, players, [VoteRecord("f0", "f1", Phase.DAY, 1)])

        assert all(p.is_alive for p in players)

    def test_vote_from_another_phase_is_rejected(self):
        with pytest.raises(InvalidGameStateError):
            advance_state(Phase.DAY, 2, roster(1, 3), [VoteRecord("f0", "f1", Phase.DAY, 1)])

    def test_vote_by_dead_player_is_rejected(self):
        players = roster(1, 3, dead={"f0"})

        with pytest.raises(InvalidGameStateError):
            advance_state(Phase.DAY, 1, players, [VoteRecord("f0", "t0", Phase.DAY, 1)])

    def test_night_vote_by_faithful_is_rejected(self):
        with pytest.raises(InvalidGameStateError):
            advance_state(Phase.NIGHT, 1, roster(1, 3), [VoteRecord("f0", "f1", Phase.NIGHT, 1)])

    def test_unknown_player_is_rejected(self):
        with pytest.raises(InvalidGameStateError):
            advance_state(Phase.DAY, 1, roster(1, 3), [VoteRecord("nobody", "f1", Phase.DAY, 1)])

    def test_outcome_to_dict(self):
        outcome = advance_state(Phase.DAY, 1, roster(1, 3), [VoteRecord("f0", "t0", Phase.DAY, 1)])

        data = outcome.to_dict()

        assert data["eliminatedPlayerId"] == "t0"
        assert data["gameEnded"] is True
        assert data["winner"] == "FAITHFULS"
        assert data["voteCount"] == {"t0": 1}
