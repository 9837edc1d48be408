"""
XAN Governed Token

The contract surface callers use. Wires together:
  - FungibleLedger       balances, allowances, supply
  - LockLedger           per-epoch locked balances (pre-decrease guard)
  - VoteTracker          lock-weighted ballots per proposed implementation
  - VoterBodyScheduler   token-holder upgrade track
  - CouncilScheduler     fallback council track
  - UpgradeAuthorizer    last gate before the implementation switch
  - UpgradeableProxy     the active implementation identity

Entry points take the acting identity explicitly (the transaction sender).
Each one validates everything it needs before its first write, so a failed
call leaves no trace.
"""

from typing import Any, Dict, List, Optional, Tuple

from ..clock import Clock, SystemClock
from ..constants import XAN_DECIMALS, XAN_INITIAL_SUPPLY, XAN_NAME, XAN_SYMBOL
from ..governance import (
    CouncilScheduler,
    CouncilUpgradeCancelled,
    CouncilUpgradeScheduled,
    CouncilUpgradeVetoed,
    Event,
    EventLog,
    GovernanceParameters,
    GovernanceState,
    LockLedger,
    Locked,
    QuorumGate,
    Upgraded,
    UpgradeAuthorizer,
    VoteCast,
    VoteRevoked,
    VoterBodyScheduler,
    VoterBodyUpgradeCancelled,
    VoterBodyUpgradeScheduled,
    VoteTracker,
)
from ..governance.state import Epoch
from ..logger import configure_logging, get_logger
from ..proxy import UpgradeableProxy
from .ledger import FungibleLedger

logger = get_logger(__name__)


class XanToken:
    """
    Upgradeable fungible token governed by locked-balance votes.

    Usage::

        token = XanToken.deploy(initial_holder=ALICE, council=COUNCIL,
                                implementation=IMPL_V1, clock=ManualClock(0))
        token.lock(ALICE, 10 ** 27)
        token.cast_vote(ALICE, IMPL_V2)
        token.schedule_voter_body_upgrade(ALICE)
    """

    def __init__(
        self,
        implementation: str,
        council: str,
        *,
        name: str = XAN_NAME,
        symbol: str = XAN_SYMBOL,
        decimals: int = XAN_DECIMALS,
        parameters: Optional[GovernanceParameters] = None,
        clock: Optional[Clock] = None,
    ):
        self._clock = clock or SystemClock()
        self._state = GovernanceState(
            implementation=implementation,
            council=council,
            parameters=parameters,
            started_at=self._clock.now(),
        )
        self._events = EventLog(self._clock, lambda: self._state.epoch_number)

        self._ledger = FungibleLedger(name, symbol, decimals, self._events)
        self._locks = LockLedger(self._state, self._ledger.balance_of, self._events)
        self._ledger.set_pre_decrease_hook(self._locks.check_unlocked)

        self._votes = VoteTracker(self._state, self._locks, self._events)
        self._gate = QuorumGate(self._state, self._votes, lambda: self._ledger.total_supply)
        self._council = CouncilScheduler(self._state, self._gate, self._clock, self._events)
        self._voter_body = VoterBodyScheduler(
            self._state, self._gate, self._council, self._clock, self._events
        )
        self._authorizer = UpgradeAuthorizer(
            self._state, self._gate, self._voter_body, self._council, self._clock
        )
        self._proxy = UpgradeableProxy(
            implementation,
            authorize_upgrade=self._authorizer,
            on_upgraded=self._start_new_epoch,
        )
        self._last_upgrade: Optional[Upgraded] = None

    @classmethod
    def deploy(
        cls,
        initial_holder: str,
        council: str,
        implementation: str,
        initial_supply: int = XAN_INITIAL_SUPPLY,
        **kwargs: Any,
    ) -> "XanToken":
        """Create the token and mint the whole initial supply to *initial_holder*."""
        token = cls(implementation, council, **kwargs)
        token._ledger.mint(initial_holder, initial_supply)
        logger.info(
            f"{token.symbol} deployed: supply={initial_supply} → {initial_holder}, "
            f"council={council}, implementation={implementation}"
        )
        return token

    @classmethod
    def from_config(cls, config, clock: Optional[Clock] = None) -> "XanToken":
        """Validate *config* and deploy from it."""
        config.validate()
        configure_logging(log_level=config.logging.level)
        return cls.deploy(
            initial_holder=config.token.initial_holder,
            council=config.governance.council,
            implementation=config.governance.initial_implementation,
            initial_supply=config.token.initial_supply,
            name=config.token.name,
            symbol=config.token.symbol,
            decimals=config.token.decimals,
            parameters=config.governance.parameters(),
            clock=clock,
        )

    # ── Token metadata ────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._ledger.name

    @property
    def symbol(self) -> str:
        return self._ledger.symbol

    @property
    def decimals(self) -> int:
        return self._ledger.decimals

    # ── Ledger views ──────────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._ledger.total_supply

    def balance_of(self, account: str) -> int:
        return self._ledger.balance_of(account)

    def allowance(self, owner: str, spender: str) -> int:
        return self._ledger.allowance(owner, spender)

    # ── Ledger operations ─────────────────────────────────────────────

    def transfer(self, sender: str, recipient: str, value: int):
        return self._ledger.transfer(sender, recipient, value)

    def approve(self, owner: str, spender: str, value: int):
        return self._ledger.approve(owner, spender, value)

    def transfer_from(self, spender: str, owner: str, recipient: str, value: int):
        return self._ledger.transfer_from(spender, owner, recipient, value)

    def burn(self, owner: str, value: int):
        return self._ledger.burn(owner, value)

    # ── Locking ───────────────────────────────────────────────────────

    def locked_balance_of(self, account: str) -> int:
        return self._locks.locked_balance_of(account)

    def unlocked_balance_of(self, account: str) -> int:
        return self._locks.unlocked_balance_of(account)

    @property
    def locked_supply(self) -> int:
        return self._locks.locked_supply

    def lock(self, sender: str, value: int) -> Locked:
        return self._locks.lock(sender, value)

    def transfer_and_lock(self, sender: str, recipient: str, value: int) -> Locked:
        """
        Move *value* to *recipient* and lock it there.

        After the transfer the recipient's unlocked balance has grown by
        *value*, so the lock that follows cannot fail.
        """
        self._ledger.transfer(sender, recipient, value)
        return self._locks.lock(recipient, value)

    # ── Voting ────────────────────────────────────────────────────────

    def get_votes(self, voter: str, implementation: str) -> int:
        return self._votes.get_votes(voter, implementation)

    def total_votes(self, implementation: Optional[str]) -> int:
        return self._votes.total_votes(implementation)

    @property
    def most_voted_implementation(self) -> Optional[str]:
        return self._votes.most_voted_implementation

    def cast_vote(self, sender: str, implementation: str) -> VoteCast:
        return self._votes.cast_vote(sender, implementation)

    def revoke_vote(self, sender: str, implementation: str) -> VoteRevoked:
        return self._votes.revoke_vote(sender, implementation)

    # ── Quorum ────────────────────────────────────────────────────────

    def calculate_quorum_threshold(self) -> int:
        return self._gate.quorum_threshold()

    def min_locked_supply(self) -> int:
        return self._gate.min_locked_supply()

    def is_quorum_and_min_locked_supply_reached(self, implementation: Optional[str]) -> bool:
        return self._gate.is_reached(implementation)

    # ── Voter-body track ──────────────────────────────────────────────

    def scheduled_voter_body_upgrade(self) -> Tuple[Optional[str], int]:
        s = self._voter_body.scheduled
        return s.implementation, s.end_time

    def schedule_voter_body_upgrade(self, sender: str) -> VoterBodyUpgradeScheduled:
        logger.debug(f"{sender} schedules voter-body upgrade")
        return self._voter_body.schedule()

    def cancel_voter_body_upgrade(self, sender: str) -> VoterBodyUpgradeCancelled:
        logger.debug(f"{sender} cancels voter-body upgrade")
        return self._voter_body.cancel()

    # ── Council track ─────────────────────────────────────────────────

    @property
    def governance_council(self) -> str:
        return self._council.council

    def scheduled_council_upgrade(self) -> Tuple[Optional[str], int]:
        s = self._council.scheduled
        return s.implementation, s.end_time

    def schedule_council_upgrade(self, sender: str, implementation: str) -> CouncilUpgradeScheduled:
        return self._council.schedule(sender, implementation)

    def cancel_council_upgrade(self, sender: str) -> CouncilUpgradeCancelled:
        return self._council.cancel(sender)

    def veto_council_upgrade(self, sender: str) -> Optional[CouncilUpgradeVetoed]:
        logger.debug(f"{sender} vetoes council upgrade")
        return self._council.veto()

    # ── Upgrade ───────────────────────────────────────────────────────

    @property
    def implementation(self) -> str:
        return self._proxy.implementation

    @property
    def current_epoch(self) -> int:
        return self._state.epoch_number

    def epoch(self, number: Optional[int] = None) -> Optional[Epoch]:
        """Governance record of epoch *number* (default: the current one)."""
        if number is None:
            return self._state.current
        return self._state.epoch(number)

    def authorize_upgrade(self, candidate: str) -> str:
        """Dry-run of the upgrade gate; raises exactly what ``upgrade_to`` would."""
        return self._authorizer.authorize(candidate)

    def upgrade_to(self, sender: str, candidate: str) -> Upgraded:
        """
        Switch to *candidate* and start a fresh governance epoch.

        Any caller may execute an authorized upgrade; the council carries
        into the new epoch unchanged.
        """
        logger.debug(f"{sender} requests upgrade to {candidate}")
        self._proxy.upgrade_to(candidate)
        return self._last_upgrade

    def _start_new_epoch(self, previous: str, candidate: str):
        old_epoch = self._state.epoch_number
        self._last_upgrade = self._events.emit(
            Upgraded,
            previous_implementation=previous,
            implementation=candidate,
            new_epoch=old_epoch + 1,
        )
        self._state.advance_epoch(candidate, started_at=self._clock.now())

    # ── Notifications ─────────────────────────────────────────────────

    @property
    def events(self) -> List[Event]:
        return self._events.events

    @property
    def event_log(self) -> EventLog:
        return self._events

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self._ledger.to_dict(),
            "proxy": self._proxy.to_dict(),
            "governance": self._state.to_dict(),
            "quorumThreshold": self.calculate_quorum_threshold(),
            "minLockedSupply": self.min_locked_supply(),
            "events": len(self._events),
        }

    def __repr__(self) -> str:
        return (
            f"<XanToken {self.symbol} supply={self.total_supply} "
            f"epoch={self.current_epoch} implementation={self.implementation}>"
        )
