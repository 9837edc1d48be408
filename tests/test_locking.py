"""
Lock Ledger Test Suite

Coverage:
  - lock: locked / unlocked balance, locked supply, Locked notification
  - Pre-decrease guard on transfer, transfer_from and burn
  - transfer_and_lock atomicity
  - No partial effects on failure
"""

import sys
import os

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from xan.clock import ManualClock
from xan.governance import (
    InsufficientUnlockedBalance,
    InvalidLockAmount,
    Locked,
    Transfer,
)
from xan.tokens import InsufficientAllowanceError, InvalidRecipientError, XanToken
from xan.constants import ZERO_ADDRESS


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20
COUNCIL = "0x" + "cc" * 20
IMPL_V1 = "0x" + "01" * 20


def make_token(supply=1000, holder=ALICE):
    return XanToken.deploy(
        initial_holder=holder,
        council=COUNCIL,
        implementation=IMPL_V1,
        initial_supply=supply,
        clock=ManualClock(1_000),
    )


# ══════════════════════════════════════════════════════════════════════
#  LOCK
# ══════════════════════════════════════════════════════════════════════

class TestLock:

    def test_lock(self):
        token = make_token()
        ev = token.lock(ALICE, 300)
        assert isinstance(ev, Locked)
        assert ev.account == ALICE
        assert ev.value == 300
        assert token.locked_balance_of(ALICE) == 300
        assert token.unlocked_balance_of(ALICE) == 700
        assert token.locked_supply == 300
        assert token.balance_of(ALICE) == 1000

    def test_locks_accumulate(self):
        token = make_token()
        token.lock(ALICE, 100)
        token.lock(ALICE, 250)
        assert token.locked_balance_of(ALICE) == 350
        assert token.locked_supply == 350

    def test_lock_entire_balance(self):
        token = make_token()
        token.lock(ALICE, 1000)
        assert token.unlocked_balance_of(ALICE) == 0

    def test_lock_more_than_unlocked_raises(self):
        token = make_token()
        token.lock(ALICE, 600)
        with pytest.raises(InsufficientUnlockedBalance) as exc:
            token.lock(ALICE, 401)
        assert exc.value.unlocked == 400
        assert exc.value.requested == 401
        assert token.locked_balance_of(ALICE) == 600
        assert token.locked_supply == 600

    def test_lock_without_balance_raises(self):
        token = make_token()
        with pytest.raises(InsufficientUnlockedBalance):
            token.lock(BOB, 1)

    @pytest.mark.parametrize("value", [-5, 2.0, False, "10"])
    def test_invalid_amount_raises(self, value):
        token = make_token()
        with pytest.raises(InvalidLockAmount):
            token.lock(ALICE, value)
        assert token.locked_supply == 0

    def test_lock_zero_is_noop(self):
        token = make_token()
        token.lock(ALICE, 100)
        ev = token.lock(ALICE, 0)
        assert isinstance(ev, Locked)
        assert ev.value == 0
        assert token.locked_balance_of(ALICE) == 100
        assert token.locked_supply == 100

    def test_lock_zero_without_balance(self):
        token = make_token()
        token.lock(BOB, 0)
        assert token.locked_balance_of(BOB) == 0
        assert token.event_log.last(Locked).account == BOB

    def test_locked_supply_sums_accounts(self):
        token = make_token()
        token.transfer(ALICE, BOB, 400)
        token.lock(ALICE, 100)
        token.lock(BOB, 250)
        assert token.locked_supply == 350

    def test_locked_event_stamped(self):
        token = make_token()
        ev = token.lock(ALICE, 1)
        assert ev.epoch == 0
        assert ev.timestamp == 1_000


# ══════════════════════════════════════════════════════════════════════
#  DECREASE GUARD
# ══════════════════════════════════════════════════════════════════════

class TestDecreaseGuard:
    """Locked balance cannot leave the account in the same epoch."""

    def test_transfer_blocked_by_lock(self):
        token = make_token()
        token.lock(ALICE, 900)
        with pytest.raises(InsufficientUnlockedBalance):
            token.transfer(ALICE, BOB, 101)
        assert token.balance_of(ALICE) == 1000
        assert token.balance_of(BOB) == 0

    def test_transfer_of_unlocked_part(self):
        token = make_token()
        token.lock(ALICE, 900)
        token.transfer(ALICE, BOB, 100)
        assert token.balance_of(ALICE) == 900
        assert token.unlocked_balance_of(ALICE) == 0

    def test_transfer_from_blocked_by_lock(self):
        token = make_token()
        token.approve(ALICE, BOB, 1000)
        token.lock(ALICE, 1000)
        with pytest.raises(InsufficientUnlockedBalance):
            token.transfer_from(BOB, ALICE, CAROL, 1)
        assert token.allowance(ALICE, BOB) == 1000

    def test_allowance_checked_before_lock(self):
        token = make_token()
        token.lock(ALICE, 1000)
        with pytest.raises(InsufficientAllowanceError):
            token.transfer_from(BOB, ALICE, CAROL, 1)

    def test_burn_blocked_by_lock(self):
        token = make_token()
        token.lock(ALICE, 500)
        with pytest.raises(InsufficientUnlockedBalance):
            token.burn(ALICE, 501)
        assert token.total_supply == 1000
        token.burn(ALICE, 500)
        assert token.total_supply == 500
        assert token.locked_balance_of(ALICE) == 500

    def test_incoming_transfer_to_locked_account(self):
        token = make_token()
        token.transfer(ALICE, BOB, 100)
        token.lock(BOB, 100)
        token.transfer(ALICE, BOB, 50)
        assert token.balance_of(BOB) == 150
        assert token.unlocked_balance_of(BOB) == 50

    def test_locked_never_exceeds_balance(self):
        token = make_token()
        token.transfer(ALICE, BOB, 300)
        token.lock(ALICE, 700)
        token.lock(BOB, 300)
        for account in (ALICE, BOB):
            assert token.locked_balance_of(account) <= token.balance_of(account)
            assert token.unlocked_balance_of(account) == (
                token.balance_of(account) - token.locked_balance_of(account)
            )


# ══════════════════════════════════════════════════════════════════════
#  TRANSFER AND LOCK
# ══════════════════════════════════════════════════════════════════════

class TestTransferAndLock:

    def test_transfer_and_lock(self):
        token = make_token()
        ev = token.transfer_and_lock(ALICE, BOB, 250)
        assert ev.account == BOB
        assert token.balance_of(BOB) == 250
        assert token.locked_balance_of(BOB) == 250
        assert token.locked_balance_of(ALICE) == 0
        assert token.locked_supply == 250

    def test_notifications_in_order(self):
        token = make_token()
        token.transfer_and_lock(ALICE, BOB, 10)
        transfer, locked = token.events[-2:]
        assert isinstance(transfer, Transfer)
        assert isinstance(locked, Locked)
        assert transfer.recipient == locked.account == BOB

    def test_insufficient_unlocked_balance(self):
        token = make_token()
        token.lock(ALICE, 800)
        n_events = len(token.events)
        with pytest.raises(InsufficientUnlockedBalance):
            token.transfer_and_lock(ALICE, BOB, 201)
        assert token.balance_of(BOB) == 0
        assert token.locked_supply == 800
        assert len(token.events) == n_events

    def test_zero_recipient_rejected(self):
        token = make_token()
        with pytest.raises(InvalidRecipientError):
            token.transfer_and_lock(ALICE, ZERO_ADDRESS, 1)
        assert token.locked_supply == 0

    def test_lock_to_self(self):
        token = make_token()
        token.transfer_and_lock(ALICE, ALICE, 400)
        assert token.balance_of(ALICE) == 1000
        assert token.locked_balance_of(ALICE) == 400

    def test_recipient_existing_lock(self):
        token = make_token()
        token.transfer(ALICE, BOB, 100)
        token.lock(BOB, 100)
        token.transfer_and_lock(ALICE, BOB, 100)
        assert token.locked_balance_of(BOB) == 200
        assert token.unlocked_balance_of(BOB) == 0
