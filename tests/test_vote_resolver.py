"""Tests for plurality vote resolution."""

import random
from collections import Counter

import pytest

from game.models import Phase, VoteRecord
from game.vote_resolver import resolve_elimination


def votes(*pairs):
    return [VoteRecord(voter_id=voter, target_id=target) for voter, target in pairs]


class TestResolveElimination:
    def test_no_votes_means_no_elimination(self):
        result = resolve_elimination([])

        assert result.eliminated_id is None
        assert result.tally == {}
        assert result.tie_broken is False

    def test_unique_maximum_is_eliminated(self):
        result = resolve_elimination(votes(("a", "x"), ("b", "x"), ("c", "y"), ("x", "z")))

        assert result.eliminated_id == "x"
        assert result.tally == {"x": 2, "y": 1, "z": 1}
        assert result.tie_broken is False
        assert result.tied_ids == []

    def test_unique_maximum_is_deterministic(self):
        ballot = votes(("a", "x"), ("b", "x"), ("c", "y"))

        picks = {resolve_elimination(ballot, rng=random.Random(seed)).eliminated_id for seed in range(50)}

        assert picks == {"x"}

    def test_single_vote_eliminates_its_target(self):
        result = resolve_elimination(votes(("a", "b")))

        assert result.eliminated_id == "b"
        assert result.tie_broken is False

    def test_tie_picks_a_member_of_the_tied_set(self):
        ballot = votes(("a", "b"), ("b", "c"), ("c", "a"))

        for seed in range(100):
            result = resolve_elimination(ballot, rng=random.Random(seed))
            assert result.eliminated_id in {"a", "b", "c"}
            assert result.tie_broken is True
            assert result.tied_ids == ["a", "b", "c"]

    def test_lower_counts_are_never_chosen_in_a_tie(self):
        ballot = votes(("a", "x"), ("b", "x"), ("c", "y"), ("d", "y"), ("e", "z"))

        for seed in range(100):
            result = resolve_elimination(ballot, rng=random.Random(seed))
            assert result.eliminated_id in {"x", "y"}

    def test_tie_break_is_uniform(self):
        ballot = votes(("a", "b"), ("b", "c"), ("c", "a"))
        rng = random.Random(12345)
        trials = 30000

        counts = Counter(resolve_elimination(ballot, rng=rng).eliminated_id for _ in range(trials))

        assert set(counts) == {"a", "b", "c"}
        for target in ("a", "b", "c"):
            assert abs(counts[target] / trials - 1 / 3) < 0.02

    def test_tie_break_is_independent_of_vote_order(self):
        forward = votes(("a", "b"), ("b", "c"), ("c", "a"))
        backward = list(reversed(forward))

        for seed in range(20):
            first = resolve_elimination(forward, rng=random.Random(seed)).eliminated_id
            second = resolve_elimination(backward, rng=random.Random(seed)).eliminated_id
            assert first == second

    def test_default_random_source(self):
        result = resolve_elimination(votes(("a", "b"), ("b", "a")))

        assert result.eliminated_id in {"a", "b"}
        assert result.tie_broken is True

    def test_votes_may_carry_their_phase(self):
        ballot = [VoteRecord(voter_id="a", target_id="b", phase=Phase.NIGHT, day=2)]

        assert resolve_elimination(ballot).eliminated_id == "b"

    def test_missing_target_is_rejected(self):
        with pytest.raises(ValueError):
            resolve_elimination([VoteRecord(voter_id="a", target_id="")])

    def test_duplicate_voter_is_rejected(self):
        with pytest.raises(ValueError):
            resolve_elimination(votes(("a", "b"), ("a", "c")))

    def test_to_dict(self):
        data = resolve_elimination(votes(("a", "b"), ("c", "b"))).to_dict()

        assert data == {"eliminatedId": "b", "tally": {"b": 2}, "tieBroken": False, "tiedIds": []}
