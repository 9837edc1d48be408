"""
XAN Upgrade Governance

Provides:
  - GovernanceState / Epoch / Ballot / Schedule      (state.py)
  - LockLedger                                       (locking.py)
  - VoteTracker                                      (voting.py)
  - QuorumGate / VoterBodyScheduler / CouncilScheduler (scheduling.py)
  - UpgradeAuthorizer                                (authorizer.py)
  - Notification records and EventLog               (events.py)
  - Error taxonomy                                   (errors.py)
"""

from .errors import (
    AuthorizationError,
    DelayPeriodNotEnded,
    DelayPeriodNotStarted,
    GovernanceError,
    GovernanceGateError,
    GovernanceInvariantError,
    ImplementationNotMostVoted,
    ImplementationZero,
    InsufficientLockedBalance,
    InsufficientUnlockedBalance,
    InvalidLockAmount,
    NoVotesToRevoke,
    PreconditionError,
    QuorumAndMinLockedSupplyReached,
    QuorumOrMinLockedSupplyNotReached,
    SchedulingStateError,
    TimingError,
    UnauthorizedCaller,
    UpgradeAlreadyScheduled,
    UpgradeCancellationInvalid,
    UpgradeNotScheduled,
)
from .events import (
    Approval,
    CouncilUpgradeCancelled,
    CouncilUpgradeScheduled,
    CouncilUpgradeVetoed,
    Event,
    EventLog,
    Locked,
    MostVotedImplementationUpdated,
    Transfer,
    Upgraded,
    VoteCast,
    VoteRevoked,
    VoterBodyUpgradeCancelled,
    VoterBodyUpgradeScheduled,
)
from .state import (
    Ballot,
    Epoch,
    GovernanceParameters,
    GovernanceState,
    Schedule,
)
from .locking import LockLedger
from .voting import VoteTracker
from .scheduling import (
    CouncilScheduler,
    QuorumGate,
    VoterBodyScheduler,
)
from .authorizer import UpgradeAuthorizer

__all__ = [
    # Errors
    "AuthorizationError",
    "DelayPeriodNotEnded",
    "DelayPeriodNotStarted",
    "GovernanceError",
    "GovernanceGateError",
    "GovernanceInvariantError",
    "ImplementationNotMostVoted",
    "ImplementationZero",
    "InsufficientLockedBalance",
    "InsufficientUnlockedBalance",
    "InvalidLockAmount",
    "NoVotesToRevoke",
    "PreconditionError",
    "QuorumAndMinLockedSupplyReached",
    "QuorumOrMinLockedSupplyNotReached",
    "SchedulingStateError",
    "TimingError",
    "UnauthorizedCaller",
    "UpgradeAlreadyScheduled",
    "UpgradeCancellationInvalid",
    "UpgradeNotScheduled",
    # Events
    "Approval",
    "CouncilUpgradeCancelled",
    "CouncilUpgradeScheduled",
    "CouncilUpgradeVetoed",
    "Event",
    "EventLog",
    "Locked",
    "MostVotedImplementationUpdated",
    "Transfer",
    "Upgraded",
    "VoteCast",
    "VoteRevoked",
    "VoterBodyUpgradeCancelled",
    "VoterBodyUpgradeScheduled",
    # State
    "Ballot",
    "Epoch",
    "GovernanceParameters",
    "GovernanceState",
    "Schedule",
    # Components
    "LockLedger",
    "VoteTracker",
    "QuorumGate",
    "VoterBodyScheduler",
    "CouncilScheduler",
    "UpgradeAuthorizer",
]
