"""
XAN Token

Provides:
  - FungibleLedger   : Balances, allowances and supply with a pre-decrease hook
  - XanToken         : Upgradeable token facade wiring ledger and governance
"""

from .ledger import (
    FungibleLedger,
    LedgerError,
    InsufficientBalanceError,
    InsufficientAllowanceError,
    InvalidAmountError,
    InvalidRecipientError,
)
from .xan_token import XanToken

__all__ = [
    # Ledger
    "FungibleLedger",
    "LedgerError",
    "InsufficientBalanceError",
    "InsufficientAllowanceError",
    "InvalidAmountError",
    "InvalidRecipientError",
    # Facade
    "XanToken",
]
