"""
Fungible Ledger

Balance bookkeeping for the governed token with an ERC-20–style interface
(transfer, approve, transferFrom, balanceOf, mint, burn). Amounts are integer
base units.

Governance plugs into the ledger through one seam: the pre-decrease hook.
Every path that lowers an account's balance calls the hook before any state
is touched, and the hook vetoes by raising. Minting has no source account
and never calls it.
"""

from typing import Any, Callable, Dict, Optional, Tuple

from ..constants import ZERO_ADDRESS
from ..exceptions import XanException
from ..governance.events import Approval, EventLog, Transfer
from ..logger import get_logger

logger = get_logger(__name__)

PreDecreaseHook = Callable[[str, int], None]


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class LedgerError(XanException):
    """Base exception for ledger operations."""


class InsufficientBalanceError(LedgerError):
    """Raised when the source balance is too low."""

    def __init__(self, account: str, balance: int, requested: int):
        self.account = account
        self.balance = balance
        self.requested = requested
        super().__init__(f"{account} balance {balance} < requested {requested}")


class InsufficientAllowanceError(LedgerError):
    """Raised when spender allowance is too low."""

    def __init__(self, owner: str, spender: str, allowance: int, requested: int):
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.requested = requested
        super().__init__(
            f"Allowance of {spender} over {owner} is {allowance} < requested {requested}"
        )


class InvalidAmountError(LedgerError):
    """Raised for non-integer or out-of-range amounts."""


class InvalidRecipientError(LedgerError):
    """Raised when value would be sent to the zero address."""


# ══════════════════════════════════════════════════════════════════════
#  LEDGER
# ══════════════════════════════════════════════════════════════════════

class FungibleLedger:
    """
    Balances, allowances and total supply.

    Mirrors ERC-20 semantics:
        - balance_of(address) → int
        - transfer(sender, recipient, value)
        - approve(owner, spender, value)
        - transfer_from(spender, owner, recipient, value)
        - total_supply → int

    The zero address is the mint/burn sentinel and never holds balance.
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int,
        events: EventLog,
        pre_decrease_hook: Optional[PreDecreaseHook] = None,
    ):
        if not name:
            raise LedgerError("Token name cannot be empty")
        if not symbol:
            raise LedgerError("Token symbol cannot be empty")
        if decimals < 0 or decimals > 18:
            raise LedgerError(f"Decimals must be 0-18, got {decimals}")

        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._events = events
        self._pre_decrease_hook = pre_decrease_hook

        self._total_supply = 0
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}  # (owner, spender)

    # ── Hook ──────────────────────────────────────────────────────────

    def set_pre_decrease_hook(self, hook: Optional[PreDecreaseHook]):
        self._pre_decrease_hook = hook

    def _before_decrease(self, account: str, value: int):
        if self._pre_decrease_hook is not None:
            self._pre_decrease_hook(account, value)

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def holders(self) -> Dict[str, int]:
        return {a: b for a, b in self._balances.items() if b > 0}

    # ── Validation ────────────────────────────────────────────────────

    @staticmethod
    def _require_amount(value: int, allow_zero: bool = False):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidAmountError(f"Amount must be an integer, got {value!r}")
        if value < 0 or (value == 0 and not allow_zero):
            raise InvalidAmountError(f"Amount must be positive, got {value}")

    @staticmethod
    def _require_recipient(recipient: str):
        if not recipient or recipient == ZERO_ADDRESS:
            raise InvalidRecipientError("Cannot send value to the zero address")

    def _check_debit(self, account: str, value: int):
        """All checks a debit of *account* must pass, hook first."""
        self._before_decrease(account, value)
        bal = self.balance_of(account)
        if bal < value:
            raise InsufficientBalanceError(account, bal, value)

    def check_transfer(self, sender: str, recipient: str, value: int):
        """Raise exactly what ``transfer`` would raise, without moving value."""
        self._require_amount(value)
        self._require_recipient(recipient)
        self._check_debit(sender, value)

    # ── Core operations ───────────────────────────────────────────────

    def transfer(self, sender: str, recipient: str, value: int) -> Transfer:
        self.check_transfer(sender, recipient, value)
        return self._move(sender, recipient, value)

    def approve(self, owner: str, spender: str, value: int) -> Approval:
        self._require_amount(value, allow_zero=True)
        if not spender or spender == ZERO_ADDRESS:
            raise InvalidRecipientError("Cannot approve the zero address")

        self._allowances[(owner, spender)] = value
        logger.debug(f"Approval: {owner} → {spender} allowance={value} {self.symbol}")
        return self._events.emit(Approval, owner=owner, spender=spender, value=value)

    def transfer_from(
        self,
        spender: str,
        owner: str,
        recipient: str,
        value: int,
    ) -> Transfer:
        """Transfer on behalf of *owner* using spender's allowance."""
        self._require_amount(value)
        self._require_recipient(recipient)
        allow = self.allowance(owner, spender)
        if allow < value:
            raise InsufficientAllowanceError(owner, spender, allow, value)
        self._check_debit(owner, value)

        self._allowances[(owner, spender)] = allow - value
        return self._move(owner, recipient, value)

    def mint(self, recipient: str, value: int) -> Transfer:
        """Issue new balance. Fresh balance is unlocked, so no hook runs."""
        self._require_amount(value)
        self._require_recipient(recipient)

        self._total_supply += value
        self._balances[recipient] = self.balance_of(recipient) + value
        logger.info(f"Mint: {value} {self.symbol} → {recipient}")
        return self._events.emit(
            Transfer, sender=ZERO_ADDRESS, recipient=recipient, value=value
        )

    def burn(self, owner: str, value: int) -> Transfer:
        self._require_amount(value)
        self._check_debit(owner, value)

        self._balances[owner] = self.balance_of(owner) - value
        self._total_supply -= value
        logger.info(f"Burn: {owner} burned {value} {self.symbol}")
        return self._events.emit(
            Transfer, sender=owner, recipient=ZERO_ADDRESS, value=value
        )

    def _move(self, sender: str, recipient: str, value: int) -> Transfer:
        self._balances[sender] = self.balance_of(sender) - value
        self._balances[recipient] = self.balance_of(recipient) + value
        logger.debug(f"Transfer: {sender} → {recipient} {value} {self.symbol}")
        return self._events.emit(
            Transfer, sender=sender, recipient=recipient, value=value
        )

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "totalSupply": self._total_supply,
            "holders": len(self.holders()),
        }

    def __repr__(self) -> str:
        return f"<FungibleLedger {self.symbol} supply={self._total_supply}>"
