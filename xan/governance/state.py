"""
Governance State

All governance data is scoped to an epoch: the span during which one
implementation is active. Epochs are stored under a monotonically
increasing counter, so ending an epoch is a single counter bump; the old
record stays in memory but nothing reads it again.

    GovernanceState
      └─ epochs[n] : Epoch
            ├─ locked balances + locked supply
            ├─ ballots[implementation] : Ballot
            ├─ most_voted pointer
            ├─ voter_body_schedule : Schedule
            ├─ council_schedule    : Schedule
            └─ council identity
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..constants import (
    GOVERNANCE_DELAY_DURATION_SECONDS,
    GOVERNANCE_MIN_LOCKED_SUPPLY_DENOMINATOR,
    GOVERNANCE_MIN_LOCKED_SUPPLY_NUMERATOR,
    GOVERNANCE_QUORUM_RATIO_DENOMINATOR,
    GOVERNANCE_QUORUM_RATIO_NUMERATOR,
    ZERO_ADDRESS,
)
from ..exceptions import ConfigurationError
from ..logger import get_logger

logger = get_logger(__name__)


def is_zero(identity: Optional[str]) -> bool:
    """True for the null identity (None, empty or the zero address)."""
    return not identity or identity == ZERO_ADDRESS


# ══════════════════════════════════════════════════════════════════════
#  PARAMETERS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GovernanceParameters:
    """Fixed rules of the governance game, shared by every component."""
    delay_duration: int = GOVERNANCE_DELAY_DURATION_SECONDS
    quorum_numerator: int = GOVERNANCE_QUORUM_RATIO_NUMERATOR
    quorum_denominator: int = GOVERNANCE_QUORUM_RATIO_DENOMINATOR
    min_locked_supply_numerator: int = GOVERNANCE_MIN_LOCKED_SUPPLY_NUMERATOR
    min_locked_supply_denominator: int = GOVERNANCE_MIN_LOCKED_SUPPLY_DENOMINATOR

    def __post_init__(self):
        if self.delay_duration <= 0:
            raise ConfigurationError(f"delay_duration must be positive, got {self.delay_duration}")
        if self.quorum_denominator <= 0 or self.min_locked_supply_denominator <= 0:
            raise ConfigurationError(
                f"Ratio denominators must be positive, got {self.quorum_denominator} "
                f"and {self.min_locked_supply_denominator}"
            )

    def quorum_threshold(self, locked_supply: int) -> int:
        return locked_supply * self.quorum_numerator // self.quorum_denominator

    def min_locked_supply(self, total_supply: int) -> int:
        return (
            total_supply * self.min_locked_supply_numerator
            // self.min_locked_supply_denominator
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "delayDuration": self.delay_duration,
            "quorumRatio": f"{self.quorum_numerator}/{self.quorum_denominator}",
            "minLockedSupplyRatio": (
                f"{self.min_locked_supply_numerator}/{self.min_locked_supply_denominator}"
            ),
        }


# ══════════════════════════════════════════════════════════════════════
#  RECORDS
# ══════════════════════════════════════════════════════════════════════

@dataclass
class Ballot:
    """Votes for one proposed implementation."""
    total_votes: int = 0
    vota: Dict[str, int] = field(default_factory=dict)  # voter → weight

    def votum(self, voter: str) -> int:
        return self.vota.get(voter, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalVotes": self.total_votes,
            "voters": sum(1 for v in self.vota.values() if v > 0),
        }


@dataclass
class Schedule:
    """A pending upgrade. Empty when *implementation* is None."""
    implementation: Optional[str] = None
    end_time: int = 0

    @property
    def is_empty(self) -> bool:
        return self.implementation is None

    def set(self, implementation: str, end_time: int):
        self.implementation = implementation
        self.end_time = end_time

    def clear(self):
        self.implementation = None
        self.end_time = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "implementation": self.implementation,
            "endTime": self.end_time,
        }


@dataclass
class Epoch:
    """Governance state of one active implementation."""
    number: int
    implementation: str
    council: str
    started_at: int = 0
    locked: Dict[str, int] = field(default_factory=dict)
    locked_supply: int = 0
    ballots: Dict[str, Ballot] = field(default_factory=dict)
    most_voted: Optional[str] = None
    voter_body_schedule: Schedule = field(default_factory=Schedule)
    council_schedule: Schedule = field(default_factory=Schedule)

    def locked_balance(self, account: str) -> int:
        return self.locked.get(account, 0)

    def ballot(self, implementation: str) -> Ballot:
        """Read-only lookup; unknown implementations read as an empty ballot."""
        return self.ballots.get(implementation) or Ballot()

    def ballot_for_update(self, implementation: str) -> Ballot:
        if implementation not in self.ballots:
            self.ballots[implementation] = Ballot()
        return self.ballots[implementation]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "implementation": self.implementation,
            "council": self.council,
            "startedAt": self.started_at,
            "lockedSupply": self.locked_supply,
            "lockers": sum(1 for v in self.locked.values() if v > 0),
            "mostVoted": self.most_voted,
            "ballots": {impl: b.to_dict() for impl, b in self.ballots.items()},
            "voterBodySchedule": self.voter_body_schedule.to_dict(),
            "councilSchedule": self.council_schedule.to_dict(),
        }


# ══════════════════════════════════════════════════════════════════════
#  GOVERNANCE STATE
# ══════════════════════════════════════════════════════════════════════

class GovernanceState:
    """
    The single governance record threaded through every component.

    Components never hold epoch data themselves; they ask for
    ``state.current`` on each call so an upgrade is visible to all of
    them at once.
    """

    def __init__(
        self,
        implementation: str,
        council: str,
        parameters: Optional[GovernanceParameters] = None,
        started_at: int = 0,
    ):
        self.parameters = parameters or GovernanceParameters()
        self._epochs: Dict[int, Epoch] = {}
        self._current = 0
        self._epochs[0] = Epoch(
            number=0,
            implementation=implementation,
            council=council,
            started_at=started_at,
        )
        logger.info(f"Governance epoch 0 opened for {implementation} (council={council})")

    @property
    def current(self) -> Epoch:
        return self._epochs[self._current]

    @property
    def epoch_number(self) -> int:
        return self._current

    def epoch(self, number: int) -> Optional[Epoch]:
        """Historical lookup (ended epochs are inert but still readable)."""
        return self._epochs.get(number)

    def advance_epoch(self, implementation: str, started_at: int) -> Epoch:
        """Start a fresh, empty epoch for *implementation*; the council carries over."""
        previous = self.current
        number = self._current + 1
        self._epochs[number] = Epoch(
            number=number,
            implementation=implementation,
            council=previous.council,
            started_at=started_at,
        )
        self._current = number
        logger.info(
            f"Governance epoch {number} opened for {implementation} "
            f"(epoch {previous.number} closed)"
        )
        return self._epochs[number]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "epoch": self._current,
            "parameters": self.parameters.to_dict(),
            "current": self.current.to_dict(),
        }

    def __repr__(self) -> str:
        return (
            f"<GovernanceState epoch={self._current} "
            f"implementation={self.current.implementation}>"
        )
