"""
Upgrade Scheduling: two competing tracks

  - VoterBodyScheduler: anyone may schedule the most-voted implementation
    once it exceeds quorum and enough supply is locked. Scheduling always
    pre-empts (vetoes) a pending council upgrade.
  - CouncilScheduler:   the council may schedule any implementation, but
    only while the voter body has no qualifying decision; anyone may veto
    it as soon as the voter body qualifies.

Both tracks share a fixed delay window and at most one of them holds a
schedule at any time.
"""

from typing import Any, Callable, Dict, Optional

from ..clock import Clock
from ..logger import get_logger
from .errors import (
    DelayPeriodNotEnded,
    DelayPeriodNotStarted,
    ImplementationZero,
    QuorumAndMinLockedSupplyReached,
    QuorumOrMinLockedSupplyNotReached,
    UnauthorizedCaller,
    UpgradeAlreadyScheduled,
    UpgradeCancellationInvalid,
    UpgradeNotScheduled,
)
from .events import (
    CouncilUpgradeCancelled,
    CouncilUpgradeScheduled,
    CouncilUpgradeVetoed,
    EventLog,
    VoterBodyUpgradeCancelled,
    VoterBodyUpgradeScheduled,
)
from .state import GovernanceState, Schedule, is_zero
from .voting import VoteTracker

logger = get_logger(__name__)

VOTER_BODY = "voter body"
COUNCIL = "council"


def require_delay_elapsed(schedule: Schedule, now: int):
    """
    The delay window is over once ``now`` reaches ``end_time``.

    Time is coarse, so equality counts as elapsed.
    """
    if schedule.end_time == 0:
        raise DelayPeriodNotStarted(schedule.end_time, now)
    if now < schedule.end_time:
        raise DelayPeriodNotEnded(schedule.end_time, now)


# ══════════════════════════════════════════════════════════════════════
#  QUORUM GATE
# ══════════════════════════════════════════════════════════════════════

class QuorumGate:
    """
    Decides whether the voter body has a qualifying decision.

    An implementation qualifies when its votes EXCEED the quorum threshold
    (a fraction of the locked supply) and the locked supply has reached the
    minimum (a fraction of the total token supply).
    """

    def __init__(
        self,
        state: GovernanceState,
        votes: VoteTracker,
        total_supply_fn: Callable[[], int],
    ):
        self._state = state
        self._votes = votes
        self._total_supply = total_supply_fn

    def votes(self, implementation: Optional[str]) -> int:
        return self._votes.total_votes(implementation)

    def quorum_threshold(self) -> int:
        return self._state.parameters.quorum_threshold(self._state.current.locked_supply)

    def min_locked_supply(self) -> int:
        return self._state.parameters.min_locked_supply(self._total_supply())

    def is_reached(self, implementation: Optional[str]) -> bool:
        if is_zero(implementation):
            return False
        return (
            self._votes.total_votes(implementation) > self.quorum_threshold()
            and self._state.current.locked_supply >= self.min_locked_supply()
        )

    def require_reached(self, implementation: Optional[str]):
        if not self.is_reached(implementation):
            raise QuorumOrMinLockedSupplyNotReached(
                implementation,
                self._votes.total_votes(implementation),
                self.quorum_threshold(),
                self._state.current.locked_supply,
                self.min_locked_supply(),
            )

    def require_not_reached(self, implementation: Optional[str]):
        if self.is_reached(implementation):
            raise QuorumAndMinLockedSupplyReached(
                implementation,
                self._votes.total_votes(implementation),
                self.quorum_threshold(),
                self._state.current.locked_supply,
            )


# ══════════════════════════════════════════════════════════════════════
#  COUNCIL TRACK
# ══════════════════════════════════════════════════════════════════════

class CouncilScheduler:
    """Fallback track driven by the governance council."""

    def __init__(
        self,
        state: GovernanceState,
        gate: QuorumGate,
        clock: Clock,
        events: EventLog,
    ):
        self._state = state
        self._gate = gate
        self._clock = clock
        self._events = events

    @property
    def council(self) -> str:
        return self._state.current.council

    @property
    def scheduled(self) -> Schedule:
        return self._state.current.council_schedule

    def _require_council(self, caller: str):
        if caller != self.council:
            raise UnauthorizedCaller(caller, self.council)

    def schedule(self, caller: str, implementation: str) -> CouncilUpgradeScheduled:
        self._require_council(caller)
        if is_zero(implementation):
            raise ImplementationZero()

        epoch = self._state.current
        self._gate.require_not_reached(epoch.most_voted)

        if not epoch.council_schedule.is_empty:
            raise UpgradeAlreadyScheduled(
                COUNCIL,
                epoch.council_schedule.implementation,
                epoch.council_schedule.end_time,
            )
        # A stale voter-body schedule still occupies the single upgrade slot
        if not epoch.voter_body_schedule.is_empty:
            raise UpgradeAlreadyScheduled(
                VOTER_BODY,
                epoch.voter_body_schedule.implementation,
                epoch.voter_body_schedule.end_time,
            )

        end_time = self._clock.now() + self._state.parameters.delay_duration
        epoch.council_schedule.set(implementation, end_time)

        logger.info(
            f"CouncilUpgradeScheduled: {implementation} (ETA={end_time}, "
            f"epoch {epoch.number})"
        )
        return self._events.emit(
            CouncilUpgradeScheduled, implementation=implementation, end_time=end_time
        )

    def cancel(self, caller: str) -> CouncilUpgradeCancelled:
        """The council may withdraw its own proposal at any time."""
        self._require_council(caller)

        schedule = self.scheduled
        if schedule.is_empty:
            raise UpgradeNotScheduled(COUNCIL)

        implementation, end_time = schedule.implementation, schedule.end_time
        schedule.clear()

        logger.warning(f"CouncilUpgradeCancelled: {implementation}")
        return self._events.emit(
            CouncilUpgradeCancelled, implementation=implementation, end_time=end_time
        )

    def veto(self) -> Optional[CouncilUpgradeVetoed]:
        """
        Voter-body check on the council; callable by anyone.

        Requires the most-voted implementation to qualify. Returns None when
        there was no pending council upgrade to clear.
        """
        self._gate.require_reached(self._state.current.most_voted)
        return self.clear_vetoed()

    def clear_vetoed(self) -> Optional[CouncilUpgradeVetoed]:
        schedule = self.scheduled
        if schedule.is_empty:
            return None

        implementation, end_time = schedule.implementation, schedule.end_time
        schedule.clear()

        logger.warning(f"CouncilUpgradeVetoed: {implementation} (ETA was {end_time})")
        return self._events.emit(
            CouncilUpgradeVetoed, implementation=implementation, end_time=end_time
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"council": self.council, "scheduled": self.scheduled.to_dict()}


# ══════════════════════════════════════════════════════════════════════
#  VOTER-BODY TRACK
# ══════════════════════════════════════════════════════════════════════

class VoterBodyScheduler:
    """Primary track driven by locked-token votes; takes precedence over the council."""

    def __init__(
        self,
        state: GovernanceState,
        gate: QuorumGate,
        council: CouncilScheduler,
        clock: Clock,
        events: EventLog,
    ):
        self._state = state
        self._gate = gate
        self._council = council
        self._clock = clock
        self._events = events

    @property
    def scheduled(self) -> Schedule:
        return self._state.current.voter_body_schedule

    def schedule(self) -> VoterBodyUpgradeScheduled:
        """Schedule the current most-voted implementation; callable by anyone."""
        epoch = self._state.current
        schedule = epoch.voter_body_schedule
        if not schedule.is_empty:
            raise UpgradeAlreadyScheduled(
                VOTER_BODY, schedule.implementation, schedule.end_time
            )

        implementation = epoch.most_voted
        self._gate.require_reached(implementation)

        end_time = self._clock.now() + self._state.parameters.delay_duration
        schedule.set(implementation, end_time)

        logger.info(
            f"VoterBodyUpgradeScheduled: {implementation} (ETA={end_time}, "
            f"votes={self._gate.votes(implementation)}, epoch {epoch.number})"
        )
        event = self._events.emit(
            VoterBodyUpgradeScheduled, implementation=implementation, end_time=end_time
        )
        self._council.clear_vetoed()
        return event

    def cancel(self) -> VoterBodyUpgradeCancelled:
        """
        Drop a schedule whose implementation no longer qualifies.

        Only possible after the delay window, and only if the scheduled
        implementation lost the most-voted position or the quorum /
        min-locked-supply bar in the meantime.
        """
        epoch = self._state.current
        schedule = epoch.voter_body_schedule
        if schedule.is_empty:
            raise UpgradeNotScheduled(VOTER_BODY)

        require_delay_elapsed(schedule, self._clock.now())

        implementation = schedule.implementation
        if epoch.most_voted == implementation and self._gate.is_reached(implementation):
            raise UpgradeCancellationInvalid(implementation, schedule.end_time)

        end_time = schedule.end_time
        schedule.clear()

        logger.warning(f"VoterBodyUpgradeCancelled: {implementation} no longer qualifies")
        return self._events.emit(
            VoterBodyUpgradeCancelled, implementation=implementation, end_time=end_time
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"scheduled": self.scheduled.to_dict()}
