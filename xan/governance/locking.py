"""
Lock Ledger

Locking commits balance as voting weight for the rest of the epoch. There
is no unlock: locked balance becomes spendable again only when an upgrade
ends the epoch and the fresh epoch starts with nothing locked.

Invariants kept here:
  - locked(account) ≤ balance(account)
  - Σ locked(account) == epoch.locked_supply
"""

from typing import Callable

from ..logger import get_logger
from .errors import InsufficientUnlockedBalance, InvalidLockAmount
from .events import EventLog, Locked
from .state import GovernanceState

logger = get_logger(__name__)


class LockLedger:
    """
    Per-account locked balances of the current epoch.

    Args:
        state:       Governance record (read through ``state.current``)
        balance_of:  Callable(account) → int, the ledger's total balance
        events:      Shared notification log
    """

    def __init__(
        self,
        state: GovernanceState,
        balance_of: Callable[[str], int],
        events: EventLog,
    ):
        self._state = state
        self._balance_of = balance_of
        self._events = events

    # ── Views ─────────────────────────────────────────────────────────

    def locked_balance_of(self, account: str) -> int:
        return self._state.current.locked_balance(account)

    def unlocked_balance_of(self, account: str) -> int:
        return self._balance_of(account) - self.locked_balance_of(account)

    @property
    def locked_supply(self) -> int:
        return self._state.current.locked_supply

    # ── Guard ─────────────────────────────────────────────────────────

    def check_unlocked(self, account: str, value: int):
        """Pre-decrease hook: *value* must be covered by unlocked balance."""
        unlocked = self.unlocked_balance_of(account)
        if value > unlocked:
            raise InsufficientUnlockedBalance(account, unlocked, value)

    # ── Lock ──────────────────────────────────────────────────────────

    def lock(self, account: str, value: int) -> Locked:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidLockAmount(value)
        self.check_unlocked(account, value)

        epoch = self._state.current
        epoch.locked[account] = epoch.locked_balance(account) + value
        epoch.locked_supply += value

        logger.info(
            f"Locked: {account} +{value} (locked={epoch.locked[account]}, "
            f"supply={epoch.locked_supply}, epoch {epoch.number})"
        )
        return self._events.emit(Locked, account=account, value=value)
