"""
Governance Errors

Every failure aborts the operation before any state is touched and carries
the values that caused it, so off-chain tooling can react without
re-deriving state. Errors are grouped by category:

  - AuthorizationError     wrong caller for a council-only operation
  - PreconditionError      insufficient unlocked/locked balance, nothing to revoke
  - GovernanceGateError    quorum / min-locked-supply, most-voted, track precedence
  - SchedulingStateError   already scheduled, nothing scheduled, cancellation invalid
  - TimingError            delay not started / not ended
"""

from typing import Any, Dict, Optional

from ..exceptions import XanException


# ══════════════════════════════════════════════════════════════════════
#  BASE CLASSES
# ══════════════════════════════════════════════════════════════════════

class GovernanceError(XanException):
    """Base governance exception."""

    def __init__(self, message: str = "", **values: Any):
        self.values: Dict[str, Any] = values
        for name, value in values.items():
            setattr(self, name, value)
        super().__init__(message or self.__class__.__name__)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
            **self.values,
        }


class AuthorizationError(GovernanceError):
    """Caller is not allowed to perform the operation."""


class PreconditionError(GovernanceError):
    """Caller's own balances or votes do not permit the operation."""


class GovernanceGateError(GovernanceError):
    """Aggregate voting conditions do not permit the operation."""


class SchedulingStateError(GovernanceError):
    """Schedule slots are not in the required state."""


class TimingError(GovernanceError):
    """Delay window is not in the required state."""


class GovernanceInvariantError(GovernanceError):
    """Internal consistency check failed. Indicates a bug, never user error."""


# ══════════════════════════════════════════════════════════════════════
#  AUTHORIZATION
# ══════════════════════════════════════════════════════════════════════

class UnauthorizedCaller(AuthorizationError):
    def __init__(self, caller: str, expected: str):
        super().__init__(
            f"{caller} is not the governance council ({expected})",
            caller=caller, expected=expected,
        )


# ══════════════════════════════════════════════════════════════════════
#  PRECONDITIONS
# ══════════════════════════════════════════════════════════════════════

class InsufficientUnlockedBalance(PreconditionError):
    def __init__(self, account: str, unlocked: int, requested: int):
        super().__init__(
            f"{account} unlocked balance {unlocked} < requested {requested}",
            account=account, unlocked=unlocked, requested=requested,
        )


class InsufficientLockedBalance(PreconditionError):
    """A vote must strictly increase the voter's weight on a proposal."""

    def __init__(self, voter: str, implementation: str, locked: int, votum: int):
        super().__init__(
            f"{voter} locked balance {locked} does not exceed current vote "
            f"{votum} for {implementation}",
            voter=voter, implementation=implementation, locked=locked, votum=votum,
        )


class InvalidLockAmount(PreconditionError):
    def __init__(self, value: Any):
        super().__init__(f"Lock amount must be a non-negative integer, got {value!r}", value=value)


class NoVotesToRevoke(PreconditionError):
    def __init__(self, voter: str, implementation: str):
        super().__init__(
            f"{voter} has no votes to revoke for {implementation}",
            voter=voter, implementation=implementation,
        )


class ImplementationZero(PreconditionError):
    def __init__(self):
        super().__init__("Implementation is the zero address")


# ══════════════════════════════════════════════════════════════════════
#  GOVERNANCE GATES
# ══════════════════════════════════════════════════════════════════════

class QuorumOrMinLockedSupplyNotReached(GovernanceGateError):
    def __init__(
        self,
        implementation: Optional[str],
        votes: int,
        threshold: int,
        locked_supply: int,
        min_locked_supply: int,
    ):
        super().__init__(
            f"{implementation} has {votes} votes (quorum requires > {threshold}) "
            f"with locked supply {locked_supply} (minimum {min_locked_supply})",
            implementation=implementation, votes=votes, threshold=threshold,
            locked_supply=locked_supply, min_locked_supply=min_locked_supply,
        )


class QuorumAndMinLockedSupplyReached(GovernanceGateError):
    """The voter body has a qualifying decision, so the council may not act."""

    def __init__(self, implementation: str, votes: int, threshold: int, locked_supply: int):
        super().__init__(
            f"Voter body reached quorum for {implementation} "
            f"({votes} > {threshold}, locked supply {locked_supply})",
            implementation=implementation, votes=votes, threshold=threshold,
            locked_supply=locked_supply,
        )


class ImplementationNotMostVoted(GovernanceGateError):
    def __init__(self, implementation: str, most_voted: Optional[str]):
        super().__init__(
            f"{implementation} is not the most-voted implementation ({most_voted})",
            implementation=implementation, most_voted=most_voted,
        )


# ══════════════════════════════════════════════════════════════════════
#  SCHEDULING STATE
# ══════════════════════════════════════════════════════════════════════

class UpgradeAlreadyScheduled(SchedulingStateError):
    def __init__(self, track: str, implementation: str, end_time: int):
        super().__init__(
            f"{track} upgrade to {implementation} already scheduled (ends {end_time})",
            track=track, implementation=implementation, end_time=end_time,
        )


class UpgradeNotScheduled(SchedulingStateError):
    def __init__(self, track: str, implementation: Optional[str] = None):
        target = f" for {implementation}" if implementation else ""
        super().__init__(
            f"No {track} upgrade scheduled{target}",
            track=track, implementation=implementation,
        )


class UpgradeCancellationInvalid(SchedulingStateError):
    """The scheduled implementation still qualifies, so it cannot be cancelled."""

    def __init__(self, implementation: str, end_time: int):
        super().__init__(
            f"Scheduled upgrade to {implementation} still qualifies",
            implementation=implementation, end_time=end_time,
        )


# ══════════════════════════════════════════════════════════════════════
#  TIMING
# ══════════════════════════════════════════════════════════════════════

class DelayPeriodNotStarted(TimingError):
    def __init__(self, end_time: int, now: int):
        super().__init__(
            f"Delay period not started (end_time={end_time})",
            end_time=end_time, now=now,
        )


class DelayPeriodNotEnded(TimingError):
    def __init__(self, end_time: int, now: int):
        super().__init__(
            f"Delay period ends at {end_time} (now={now}, remaining={end_time - now}s)",
            end_time=end_time, now=now,
        )
