"""
Lock-Weighted Vote Tracker

Implements:
  - 1 locked token = 1 vote, per proposed implementation
  - Votes only ever grow: re-casting needs more locked balance first
  - Revocation resets a voter's weight on one proposal to zero
  - A single most-voted pointer, updated in O(1)

The pointer moves only when a ballot strictly overtakes the current
leader, so ties keep the earlier proposal in front. Only the leader is
tracked; proposals are never ranked, so a vote costs O(1) however many
implementations have been proposed.
"""

from typing import Any, Dict, Optional

from ..logger import get_logger
from .errors import (
    ImplementationZero,
    InsufficientLockedBalance,
    NoVotesToRevoke,
)
from .events import EventLog, MostVotedImplementationUpdated, VoteCast, VoteRevoked
from .locking import LockLedger
from .state import GovernanceState, is_zero

logger = get_logger(__name__)


class VoteTracker:
    """
    Per-epoch ballots keyed by proposed implementation.

    Responsibilities:
        - Accept votes weighted by the voter's locked balance
        - Track per-proposal totals and per-voter vota
        - Maintain the most-voted pointer
    """

    def __init__(self, state: GovernanceState, locks: LockLedger, events: EventLog):
        self._state = state
        self._locks = locks
        self._events = events

    # ── Views ─────────────────────────────────────────────────────────

    def get_votes(self, voter: str, implementation: str) -> int:
        """Voter's current votum for *implementation*."""
        return self._state.current.ballot(implementation).votum(voter)

    def total_votes(self, implementation: Optional[str]) -> int:
        if implementation is None:
            return 0
        return self._state.current.ballot(implementation).total_votes

    @property
    def most_voted_implementation(self) -> Optional[str]:
        return self._state.current.most_voted

    # ── Cast vote ─────────────────────────────────────────────────────

    def cast_vote(self, voter: str, implementation: str) -> VoteCast:
        """
        Set the voter's weight on *implementation* to their full locked balance.

        Raises:
            ImplementationZero:         proposing the null identity
            InsufficientLockedBalance:  locked balance does not exceed the current votum
        """
        if is_zero(implementation):
            raise ImplementationZero()

        epoch = self._state.current
        old_votum = epoch.ballot(implementation).votum(voter)
        new_votum = self._locks.locked_balance_of(voter)
        if new_votum <= old_votum:
            raise InsufficientLockedBalance(voter, implementation, new_votum, old_votum)

        delta = new_votum - old_votum
        ballot = epoch.ballot_for_update(implementation)
        ballot.total_votes += delta
        ballot.vota[voter] = new_votum

        event = self._events.emit(
            VoteCast,
            voter=voter,
            implementation=implementation,
            delta=delta,
            votum=new_votum,
        )
        logger.info(
            f"VoteCast: {voter} → {implementation} +{delta} "
            f"(total={ballot.total_votes}, epoch {epoch.number})"
        )

        if ballot.total_votes > self.total_votes(epoch.most_voted):
            if epoch.most_voted != implementation:
                epoch.most_voted = implementation
                self._events.emit(
                    MostVotedImplementationUpdated,
                    implementation=implementation,
                    total_votes=ballot.total_votes,
                )
                logger.info(
                    f"MostVotedImplementationUpdated: {implementation} "
                    f"({ballot.total_votes} votes)"
                )

        return event

    # ── Revoke vote ───────────────────────────────────────────────────

    def revoke_vote(self, voter: str, implementation: str) -> VoteRevoked:
        """
        Withdraw the voter's whole votum from *implementation*.

        The most-voted pointer is left as is, even if it now points at a
        ballot that another proposal outweighs; schedulers and the upgrade
        authorizer re-check vote totals against quorum before acting.
        """
        epoch = self._state.current
        old_votum = epoch.ballot(implementation).votum(voter)
        if old_votum == 0:
            raise NoVotesToRevoke(voter, implementation)

        ballot = epoch.ballot_for_update(implementation)
        ballot.total_votes -= old_votum
        ballot.vota[voter] = 0

        logger.info(
            f"VoteRevoked: {voter} ✗ {implementation} -{old_votum} "
            f"(total={ballot.total_votes}, epoch {epoch.number})"
        )
        return self._events.emit(
            VoteRevoked, voter=voter, implementation=implementation, value=old_votum
        )

    # ── Queries ───────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        epoch = self._state.current
        return {
            "epoch": epoch.number,
            "mostVoted": epoch.most_voted,
            "ballots": {impl: b.to_dict() for impl, b in epoch.ballots.items()},
        }

    def __repr__(self) -> str:
        return f"<VoteTracker proposals={len(self._state.current.ballots)}>"
