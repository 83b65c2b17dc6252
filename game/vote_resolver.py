"""
Vote Resolver for Whispers.

Tallies the votes of one (phase, day) and picks the player to eliminate.
Pure function over its input - the caller persists the result.
"""

import logging
import random
from collections import Counter
from typing import Iterable, Optional

from .models import EliminationResult, VoteRecord

logger = logging.getLogger(__name__)

_system_random = random.SystemRandom()

def resolve_elimination(votes: Iterable[VoteRecord],
                        rng: Optional[random.Random] = None) -> EliminationResult:
    """
    Compute the plurality target of a set of votes.

    A unique maximum is eliminated outright. When several targets share the
    maximum, one of them is picked uniformly at random and ``tie_broken`` is
    set. No votes means no elimination.

    Args:
        votes: Votes cast for the current phase, at most one per voter
        rng: Random source for tie-breaks (SystemRandom if None)

    Returns:
        EliminationResult with the eliminated id, tally and tie flag

    Raises:
        ValueError: If a vote has no target or a voter appears twice
    """
    seen_voters = set()
    tally: Counter = Counter()

    for vote in votes:
        if not vote.target_id:
            raise ValueError(f"Vote by {vote.voter_id!r} has no target")
        if vote.voter_id in seen_voters:
            raise ValueError(f"Voter {vote.voter_id!r} has more than one vote in this phase")
        seen_voters.add(vote.voter_id)
        tally[vote.target_id] += 1

    if not tally:
        return EliminationResult(eliminated_id=None, tally={}, tie_broken=False)

    max_votes = max(tally.values())
    # Sorted so a seeded rng gives the same pick regardless of vote order
    tied = sorted(target for target, count in tally.items() if count == max_votes)

    if len(tied) == 1:
        return EliminationResult(eliminated_id=tied[0], tally=dict(tally), tie_broken=False)

    chooser = rng or _system_random
    eliminated_id = chooser.choice(tied)
    logger.info(f"Vote tie broken randomly: {len(tied)} players tied, selected {eliminated_id}")

    return EliminationResult(
        eliminated_id=eliminated_id,
        tally=dict(tally),
        tie_broken=True,
        tied_ids=tied
    )
