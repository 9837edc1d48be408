"""
Notifications

Every successful state transition appends one of these records to the
token's EventLog so off-chain observers can follow the contract without
reading its storage. Records are immutable and carry the epoch and the
clock time at which they were emitted.
"""

from dataclasses import asdict, dataclass
from typing import Any, Callable, ClassVar, Dict, Iterator, List, Optional, Type, TypeVar

from ..clock import Clock


E = TypeVar("E", bound="Event")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


# ══════════════════════════════════════════════════════════════════════
#  BASE
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Event:
    """Common fields of every notification."""
    NAME: ClassVar[str] = "Event"

    epoch: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        data = {"event": self.NAME}
        data.update({_camel(k): v for k, v in asdict(self).items()})
        return data


# ══════════════════════════════════════════════════════════════════════
#  LEDGER
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Transfer(Event):
    """Balance moved. Mint and burn use the zero address on one side."""
    NAME: ClassVar[str] = "Transfer"

    sender: str
    recipient: str
    value: int


@dataclass(frozen=True)
class Approval(Event):
    NAME: ClassVar[str] = "Approval"

    owner: str
    spender: str
    value: int


# ══════════════════════════════════════════════════════════════════════
#  LOCKING / VOTING
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Locked(Event):
    NAME: ClassVar[str] = "Locked"

    account: str
    value: int


@dataclass(frozen=True)
class VoteCast(Event):
    """*delta* is the weight added to the ballot, *votum* the voter's new weight."""
    NAME: ClassVar[str] = "VoteCast"

    voter: str
    implementation: str
    delta: int
    votum: int


@dataclass(frozen=True)
class VoteRevoked(Event):
    NAME: ClassVar[str] = "VoteRevoked"

    voter: str
    implementation: str
    value: int


@dataclass(frozen=True)
class MostVotedImplementationUpdated(Event):
    NAME: ClassVar[str] = "MostVotedImplementationUpdated"

    implementation: str
    total_votes: int


# ══════════════════════════════════════════════════════════════════════
#  SCHEDULING
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VoterBodyUpgradeScheduled(Event):
    NAME: ClassVar[str] = "VoterBodyUpgradeScheduled"

    implementation: str
    end_time: int


@dataclass(frozen=True)
class VoterBodyUpgradeCancelled(Event):
    NAME: ClassVar[str] = "VoterBodyUpgradeCancelled"

    implementation: str
    end_time: int


@dataclass(frozen=True)
class CouncilUpgradeScheduled(Event):
    NAME: ClassVar[str] = "CouncilUpgradeScheduled"

    implementation: str
    end_time: int


@dataclass(frozen=True)
class CouncilUpgradeCancelled(Event):
    NAME: ClassVar[str] = "CouncilUpgradeCancelled"

    implementation: str
    end_time: int


@dataclass(frozen=True)
class CouncilUpgradeVetoed(Event):
    NAME: ClassVar[str] = "CouncilUpgradeVetoed"

    implementation: str
    end_time: int


@dataclass(frozen=True)
class Upgraded(Event):
    """Emitted under the epoch that ended; *new_epoch* is the one that started."""
    NAME: ClassVar[str] = "Upgraded"

    previous_implementation: str
    implementation: str
    new_epoch: int


# ══════════════════════════════════════════════════════════════════════
#  EVENT LOG
# ══════════════════════════════════════════════════════════════════════

class EventLog:
    """
    Append-only notification log shared by the ledger and governance.

    Records are stamped with the epoch reported by *epoch_fn* and the
    time reported by *clock* at the moment they are emitted.
    """

    def __init__(self, clock: Clock, epoch_fn: Optional[Callable[[], int]] = None):
        self._clock = clock
        self._epoch_fn = epoch_fn or (lambda: 0)
        self._events: List[Event] = []

    def emit(self, event_type: Type[E], **fields: Any) -> E:
        event = event_type(
            epoch=self._epoch_fn(),
            timestamp=self._clock.now(),
            **fields,
        )
        self._events.append(event)
        return event

    def of_type(self, event_type: Type[E]) -> List[E]:
        return [e for e in self._events if isinstance(e, event_type)]

    def last(self, event_type: Optional[Type[E]] = None) -> Optional[Event]:
        if event_type is None:
            return self._events[-1] if self._events else None
        matching = self.of_type(event_type)
        return matching[-1] if matching else None

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._events]

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"<EventLog events={len(self._events)}>"
