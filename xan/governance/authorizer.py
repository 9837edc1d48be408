"""
Upgrade Authorization

The last gate before the proxy switches implementation. Whatever happened
between scheduling and now (more locking, revoked votes, a new leader),
the candidate is re-validated against the track that scheduled it.
"""

from ..clock import Clock
from ..logger import get_logger
from .errors import (
    GovernanceInvariantError,
    ImplementationNotMostVoted,
    ImplementationZero,
    UpgradeNotScheduled,
)
from .scheduling import (
    COUNCIL,
    CouncilScheduler,
    QuorumGate,
    VOTER_BODY,
    VoterBodyScheduler,
    require_delay_elapsed,
)
from .state import GovernanceState, is_zero

logger = get_logger(__name__)


class UpgradeAuthorizer:
    """
    Callback handed to the proxy as ``authorize_upgrade``.

    Returns the name of the track that authorized the candidate, raises
    otherwise.
    """

    def __init__(
        self,
        state: GovernanceState,
        gate: QuorumGate,
        voter_body: VoterBodyScheduler,
        council: CouncilScheduler,
        clock: Clock,
    ):
        self._state = state
        self._gate = gate
        self._voter_body = voter_body
        self._council = council
        self._clock = clock

    def __call__(self, candidate: str) -> str:
        return self.authorize(candidate)

    def authorize(self, candidate: str) -> str:
        if is_zero(candidate):
            raise ImplementationZero()

        voter_body_match = self._voter_body.scheduled.implementation == candidate
        council_match = self._council.scheduled.implementation == candidate

        if voter_body_match and council_match:
            raise GovernanceInvariantError(
                f"{candidate} is scheduled by both the voter body and the council",
                implementation=candidate,
            )

        if voter_body_match:
            self._authorize_voter_body(candidate)
            track = VOTER_BODY
        elif council_match:
            self._authorize_council(candidate)
            track = COUNCIL
        else:
            raise UpgradeNotScheduled("voter body or council", candidate)

        logger.info(
            f"Upgrade to {candidate} authorized by the {track} "
            f"(epoch {self._state.epoch_number})"
        )
        return track

    def _authorize_voter_body(self, candidate: str):
        most_voted = self._state.current.most_voted
        if most_voted != candidate:
            raise ImplementationNotMostVoted(candidate, most_voted)
        self._gate.require_reached(candidate)
        require_delay_elapsed(self._voter_body.scheduled, self._clock.now())

    def _authorize_council(self, candidate: str):
        self._gate.require_not_reached(self._state.current.most_voted)
        require_delay_elapsed(self._council.scheduled, self._clock.now())
